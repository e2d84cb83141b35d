"""CQS mediator — 메시지 타입별 핸들러 등록 및 실행.

The mediator maps each command/query type to exactly one handler and an
optional permission code. Executing a message checks the permission
against the caller's role (unless the context is elevated or the handler
opts out) and awaits the handler.

Handler signature:
    async def handler(db: AsyncSession, message: M, context: ExecutionContext) -> R
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from sqlalchemy.ext.asyncio import AsyncSession

from app.cqs.base import ExecutionContext
from app.repositories.permission_repository import permission_repository
from app.utils.exceptions import ForbiddenError, UnauthorizedError

logger = logging.getLogger(__name__)

Handler = Callable[[AsyncSession, Any, ExecutionContext], Awaitable[Any]]


@dataclass(frozen=True)
class HandlerRegistration:
    """등록된 핸들러 정보 (Registered handler and its permission requirement)."""

    handler: Handler
    permission: str | None = None


class Mediator:
    """커맨드/쿼리를 핸들러로 전달하는 mediator."""

    def __init__(self) -> None:
        self._registrations: dict[type, HandlerRegistration] = {}

    def register(
        self,
        message_type: type,
        handler: Handler,
        permission: str | None = None,
    ) -> None:
        """메시지 타입에 핸들러를 등록합니다.

        Register the handler for a message type. A message type can only
        have one handler; registering it twice is a programming error.

        Args:
            message_type: 커맨드 또는 쿼리 클래스 (Command or query class)
            handler: 비동기 핸들러 (Async handler callable)
            permission: 필요한 권한 코드, None이면 검사 생략
                        (Required permission code; None means no check)

        Raises:
            ValueError: 이미 등록된 메시지 타입 (Message type already registered)
        """
        if message_type in self._registrations:
            raise ValueError(f"A handler for {message_type.__name__} is already registered")
        self._registrations[message_type] = HandlerRegistration(handler=handler, permission=permission)

    def is_registered(self, message_type: type) -> bool:
        return message_type in self._registrations

    def get_permission(self, message_type: type) -> str | None:
        registration: HandlerRegistration | None = self._registrations.get(message_type)
        return registration.permission if registration else None

    async def execute(
        self,
        db: AsyncSession,
        message: Any,
        context: ExecutionContext,
    ) -> Any:
        """메시지를 등록된 핸들러로 실행합니다.

        Execute a command or query with its registered handler.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            message: 커맨드 또는 쿼리 인스턴스 (Command or query instance)
            context: 실행 컨텍스트 (Execution context)

        Returns:
            Any: 핸들러 결과 (Handler result; commands usually return None or an id)

        Raises:
            LookupError: 핸들러가 등록되지 않음 (No handler registered)
            UnauthorizedError: 익명 호출자가 권한이 필요한 핸들러 호출
                               (Anonymous caller on a permission-restricted handler)
            ForbiddenError: 역할에 권한 없음 (Role lacks the required permission)
        """
        registration: HandlerRegistration | None = self._registrations.get(type(message))
        if registration is None:
            raise LookupError(f"No handler registered for {type(message).__name__}")

        if registration.permission is not None and not context.is_elevated:
            await self.check_permission(db, registration.permission, context)

        return await registration.handler(db, message, context)

    async def check_permission(
        self,
        db: AsyncSession,
        permission: str,
        context: ExecutionContext,
    ) -> None:
        """호출자 역할에 권한이 있는지 확인합니다.

        Raises:
            UnauthorizedError: 익명 호출자 (Anonymous caller)
            ForbiddenError: 역할에 권한 없음 (Role lacks the permission)
        """
        if context.is_elevated:
            return
        if context.is_anonymous or context.role_id is None:
            raise UnauthorizedError()

        granted: set[str] = await permission_repository.get_permissions_by_role_id(db, context.role_id)
        if permission not in granted:
            logger.info("Permission %s denied for user %s", permission, context.user_id)
            raise ForbiddenError(f"Permission '{permission}' is required")


# 싱글턴 인스턴스 — Singleton instance
mediator: Mediator = Mediator()
