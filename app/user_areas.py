"""사용자 영역 정의 모듈.

User area definitions. A user area is a separate population of users
with its own sign-in rules: the CMS admin area and the site members
area. Areas are defined in code; their options come from settings.

Usage:
    from app.user_areas import user_area_repository
    options = user_area_repository.get_options_by_code("MBR")
"""

from dataclasses import dataclass, field
from typing import Callable

from app.config import settings
from app.utils.exceptions import NotFoundError

# 사용자 영역 코드 — User area codes
CMS_USER_AREA_CODE: str = "CMS"
MEMBER_USER_AREA_CODE: str = "MBR"


@dataclass(frozen=True)
class AccountVerificationOptions:
    """계정 인증 옵션 (Account verification options)."""

    require_verification: bool = False


@dataclass(frozen=True)
class AuthenticationOptions:
    """인증 시도 제한 옵션 (Authentication attempt throttling options)."""

    ip_max_attempts: int = 50
    username_max_attempts: int = 20
    window_minutes: int = 40


@dataclass(frozen=True)
class UserAreaOptions:
    """사용자 영역 옵션 묶음 (Options bundle for a user area)."""

    account_verification: AccountVerificationOptions = field(default_factory=AccountVerificationOptions)
    authentication: AuthenticationOptions = field(default_factory=AuthenticationOptions)


@dataclass(frozen=True)
class UserAreaDefinition:
    """사용자 영역 정의.

    Attributes:
        code: 3자리 영역 코드 (Three character area code)
        name: 영역 표시 이름 (Display name)
        options: 영역 옵션 (Sign-in options)
    """

    code: str
    name: str
    options: UserAreaOptions


class UserAreaDefinitionRepository:
    """코드로 등록된 사용자 영역을 조회하는 레포지토리.

    Definitions are rebuilt from settings on each lookup so that option
    changes (e.g. in tests or after a settings reload) take effect.
    """

    def __init__(self, build_definitions: Callable[[], list[UserAreaDefinition]]) -> None:
        self._build_definitions = build_definitions

    def _definitions(self) -> dict[str, UserAreaDefinition]:
        return {d.code: d for d in self._build_definitions()}

    def exists(self, code: str) -> bool:
        return code in self._definitions()

    def get_all(self) -> list[UserAreaDefinition]:
        return list(self._definitions().values())

    def get_by_code(self, code: str) -> UserAreaDefinition:
        """영역 정의를 반환합니다. 없으면 NotFoundError.

        Return the definition for a code, raising NotFoundError when the
        code is not registered.
        """
        definition: UserAreaDefinition | None = self._definitions().get(code)
        if definition is None:
            raise NotFoundError(f"User area '{code}' is not defined")
        return definition

    def get_options_by_code(self, code: str) -> UserAreaOptions:
        return self.get_by_code(code).options


def _build_definitions() -> list[UserAreaDefinition]:
    authentication = AuthenticationOptions(
        ip_max_attempts=settings.AUTH_IP_MAX_ATTEMPTS,
        username_max_attempts=settings.AUTH_USERNAME_MAX_ATTEMPTS,
        window_minutes=settings.AUTH_ATTEMPT_WINDOW_MINUTES,
    )
    return [
        UserAreaDefinition(
            code=CMS_USER_AREA_CODE,
            name="CMS",
            options=UserAreaOptions(authentication=authentication),
        ),
        UserAreaDefinition(
            code=MEMBER_USER_AREA_CODE,
            name="Members",
            options=UserAreaOptions(
                account_verification=AccountVerificationOptions(
                    require_verification=settings.MEMBER_AREA_REQUIRE_VERIFICATION,
                ),
                authentication=authentication,
            ),
        ),
    ]


# 싱글턴 인스턴스 — Singleton instance
user_area_repository: UserAreaDefinitionRepository = UserAreaDefinitionRepository(_build_definitions)
