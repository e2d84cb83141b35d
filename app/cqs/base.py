"""CQS 메시지 베이스 클래스 및 실행 컨텍스트.

Base classes for command/query messages and the execution context that
travels with every message through the mediator.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Generic, TypeVar
from uuid import UUID

from pydantic import BaseModel

from app.utils.timezone import utc_now

if TYPE_CHECKING:
    from app.models.user import User

TResult = TypeVar("TResult")


class Command(BaseModel):
    """상태를 변경하는 메시지의 베이스 클래스 (Base class for state-changing messages)."""


class Query(BaseModel, Generic[TResult]):
    """데이터를 조회하는 메시지의 베이스 클래스.

    Base class for read-only messages. The type parameter documents the
    result type the handler returns.
    """


@dataclass
class ExecutionContext:
    """핸들러 실행 컨텍스트.

    Who is executing a message and when.

    Attributes:
        user_id: 호출 사용자 ID (None이면 익명, None for anonymous callers)
        role_id: 호출 사용자 역할 ID (Caller's role)
        user_area_code: 호출 사용자 영역 (Caller's user area)
        ip_address: 요청 IP (Client IP address, used for attempt throttling)
        is_elevated: 권한 검사 생략 여부 (Skip permission checks for system tasks)
        execution_date: 실행 기준 일시 UTC (Reference "now" for the whole operation)
    """

    user_id: UUID | None = None
    role_id: UUID | None = None
    user_area_code: str | None = None
    ip_address: str | None = None
    is_elevated: bool = False
    execution_date: datetime = field(default_factory=utc_now)

    @property
    def is_anonymous(self) -> bool:
        return self.user_id is None

    @classmethod
    def anonymous(cls, ip_address: str | None = None) -> "ExecutionContext":
        return cls(ip_address=ip_address)

    @classmethod
    def elevated(cls) -> "ExecutionContext":
        """권한 검사를 생략하는 시스템 컨텍스트 (System context that bypasses permission checks)."""
        return cls(is_elevated=True)

    @classmethod
    def for_user(cls, user: "User", ip_address: str | None = None) -> "ExecutionContext":
        return cls(
            user_id=user.id,
            role_id=user.role_id,
            user_area_code=user.user_area_code,
            ip_address=ip_address,
        )
