"""인증 관련 Pydantic 요청/응답 스키마 및 CQS 메시지 정의.

Authentication-related request/response schemas and the commands and
queries of the sign-in, credential, account recovery and account
verification flows.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from app.cqs.base import Command, Query
from app.schemas.common import ValidationResult


# === 요청/응답 (Requests / responses) ===

class SignInRequest(BaseModel):
    """로그인 요청 스키마.

    Sign-in request schema shared by the admin (CMS) and site (MBR) areas.

    Attributes:
        username: 사용자 로그인 아이디 (User login identifier)
        password: 비밀번호 (Plain text password, verified against bcrypt hash)
        remember_user: 로그인 유지 여부 (Issue a persisted refresh token)
    """

    username: str  # 사용자 로그인 아이디 (User login identifier)
    password: str  # 비밀번호 — 평문, 서버에서 bcrypt 해시와 비교 (Plain text, compared to bcrypt hash)
    remember_user: bool = False  # True이면 리프레시 토큰 발급 (Refresh token only when remembered)


class TokenResponse(BaseModel):
    """JWT 토큰 발급 응답 스키마.

    JWT token issuance response schema.
    Returned after successful sign-in or token refresh.

    Attributes:
        access_token: JWT 액세스 토큰 (Short-lived access token)
        refresh_token: JWT 리프레시 토큰 (Long-lived refresh token, None when not remembered)
        token_type: 토큰 유형 (Always "bearer" for Authorization header)
    """

    access_token: str  # JWT 액세스 토큰 — 만료: 30분 기본 (Access token, default TTL: 30min)
    refresh_token: str | None = None  # JWT 리프레시 토큰 — 만료: 7일 기본 (Refresh token, default TTL: 7 days)
    token_type: str = "bearer"  # 토큰 유형 — 항상 "bearer" (Token type for Authorization header)


class RefreshRequest(BaseModel):
    """토큰 갱신/로그아웃 요청 스키마.

    Attributes:
        refresh_token: 기존 리프레시 토큰 (Existing refresh token)
    """

    refresh_token: str  # 기존 리프레시 토큰 (Current refresh token)


class UserMeResponse(BaseModel):
    """현재 사용자 정보 응답 스키마 (GET /me).

    Attributes:
        id: 사용자 UUID (User identifier)
        user_area_code: 사용자 영역 (User area code)
        username: 로그인 아이디 (Login identifier)
        email: 이메일 (Email, nullable)
        display_name: 표시 이름 (Display name, nullable)
        role_id: 역할 UUID (Role identifier)
        role_title: 역할 이름 (Role title)
        is_account_verified: 계정 인증 여부 (Verified flag)
        permissions: 권한 코드 목록 (Granted permission codes, sorted)
    """

    id: str
    user_area_code: str
    username: str
    email: str | None = None
    display_name: str | None = None
    role_id: str
    role_title: str
    is_account_verified: bool
    permissions: list[str] = []


class PasswordChangeRequest(BaseModel):
    """자격 증명 기반 비밀번호 변경 요청 (Password change using current credentials)."""

    username: str
    old_password: str
    new_password: str


class AccountRecoveryRequest(BaseModel):
    """계정 복구 시작 요청 (Start account recovery for a username)."""

    username: str


class AccountRecoveryCompleteRequest(BaseModel):
    """계정 복구 완료 요청 (Complete account recovery with the emailed token)."""

    token: str
    new_password: str


class AuthorizedTaskTokenRequest(BaseModel):
    """토큰만 전달하는 요청 (Request carrying only an authorized task token)."""

    token: str


# === 로그인 / 세션 (Sign-in / session) ===

class HasExceededMaxAuthenticationAttemptsQuery(Query[bool]):
    """인증 시도 한도 초과 여부 조회.

    True when the failed attempts inside the configured window reach the
    IP limit or the username limit of the user area.
    """

    user_area_code: str
    username: str
    ip_address: str | None = None


class ValidatedUserSummary(BaseModel):
    """자격 증명 검증에 성공한 사용자 요약.

    Attributes:
        user_id: 사용자 UUID
        user_area_code: 사용자 영역
        role_id: 역할 UUID
        require_password_change: 비밀번호 변경 필요 여부
        is_account_verified: 계정 인증 여부
        password_rehash_needed: 저장된 해시가 현재 비용 계수보다 약함
    """

    user_id: UUID
    user_area_code: str
    role_id: UUID
    require_password_change: bool
    is_account_verified: bool
    password_rehash_needed: bool


class UserCredentialsValidationResult(ValidationResult):
    """자격 증명 검증 결과 (Credential validation outcome)."""

    user: ValidatedUserSummary | None = None


class ValidateUserCredentialsQuery(Query[UserCredentialsValidationResult]):
    """사용자 자격 증명 검증 쿼리.

    Validates a username/password pair. A failed check is recorded as a
    failed authentication attempt even though the query reports failure.

    Attributes:
        user_area_code: 사용자 영역
        username: 사용자명
        password: 평문 비밀번호
        property_to_validate: 오류에 표시할 속성명 (Property named in errors)
    """

    user_area_code: str
    username: str
    password: str
    property_to_validate: str = "password"


class SignInUserWithCredentialsCommand(Command):
    """자격 증명으로 로그인하는 커맨드 (Sign a user in with username and password)."""

    user_area_code: str
    username: str
    password: str
    remember_user: bool = False


class RefreshTokensCommand(Command):
    refresh_token: str


class SignOutCommand(Command):
    """리프레시 토큰을 폐기합니다 (Revoke a refresh token)."""

    refresh_token: str


class GetCurrentUserQuery(Query[UserMeResponse | None]):
    """실행 컨텍스트의 사용자 조회 (The caller, or None when anonymous)."""


class UpdateUserPasswordByCredentialsCommand(Command):
    """현재 자격 증명으로 비밀번호를 변경하는 커맨드.

    Used by users whose sign-in is blocked by require_password_change.
    """

    user_area_code: str
    username: str
    old_password: str
    new_password: str


# === 인가 작업 (Authorized tasks) ===

class InvalidateAuthorizedTaskBatchCommand(Command):
    """사용자의 열린 작업을 유형별로 무효화합니다."""

    user_id: UUID
    task_type: str


class AuthorizedTaskTokenValidationResult(ValidationResult):
    """인가 작업 토큰 검증 결과.

    Attributes:
        user_id: 토큰 대상 사용자 (Target user when valid)
        expires_at: 만료 일시 (Expiry when valid)
    """

    user_id: UUID | None = None
    expires_at: datetime | None = None


class ValidateAuthorizedTaskTokenQuery(Query[AuthorizedTaskTokenValidationResult]):
    token: str
    task_type: str


class InitiateUserAccountRecoveryViaEmailCommand(Command):
    """계정 복구 이메일 발송 커맨드.

    Unknown usernames and users without an email address are ignored so
    the endpoint does not reveal which accounts exist.
    """

    user_area_code: str
    username: str


class CompleteUserAccountRecoveryCommand(Command):
    token: str
    new_password: str


class InitiateUserAccountVerificationViaEmailCommand(Command):
    user_id: UUID


class CompleteUserAccountVerificationCommand(Command):
    token: str
