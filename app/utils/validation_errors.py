"""검증 오류 코드 카탈로그.

Catalogue of validation error codes raised as ValidationError.
Each entry is a (code, message) pair; ``build`` turns it into an
exception, optionally naming the offending property.

Usage:
    from app.utils import validation_errors
    raise validation_errors.build(validation_errors.PASSWORD_CHANGE_REQUIRED, "password")
"""

from app.utils.exceptions import ValidationError

ErrorDefinition = tuple[str, str]

# 인증 — Authentication
INVALID_CREDENTIALS: ErrorDefinition = (
    "users-authentication-invalid-credentials",
    "Invalid username or password.",
)
TOO_MANY_FAILED_ATTEMPTS: ErrorDefinition = (
    "users-authentication-too-many-failed-attempts",
    "There have been too many failed authentication attempts, please try again later.",
)
PASSWORD_CHANGE_REQUIRED: ErrorDefinition = (
    "users-authentication-password-change-required",
    "Password change required.",
)
ACCOUNT_NOT_VERIFIED: ErrorDefinition = (
    "users-authentication-account-not-verified",
    "Account not verified.",
)

# 비밀번호 — Passwords
PASSWORD_NOT_CHANGED: ErrorDefinition = (
    "users-passwords-not-changed",
    "The new password must be different from the old password.",
)

# 인가 작업 토큰 — Authorized task tokens
TOKEN_INVALID: ErrorDefinition = (
    "authorized-tasks-token-invalid",
    "The request is invalid or has already been used.",
)
TOKEN_EXPIRED: ErrorDefinition = (
    "authorized-tasks-token-expired",
    "The request has expired.",
)
ACCOUNT_EMAIL_MISSING: ErrorDefinition = (
    "users-account-email-missing",
    "The account has no email address to send the request to.",
)

# 페이지 — Pages
PAGE_URL_PATH_IN_USE: ErrorDefinition = (
    "pages-url-path-in-use",
    "A page already exists at this path in the selected directory.",
)
PAGE_DRAFT_EXISTS: ErrorDefinition = (
    "pages-draft-already-exists",
    "A draft cannot be created because this page already has one.",
)
PAGE_TEMPLATE_ARCHIVED: ErrorDefinition = (
    "pages-template-archived",
    "The selected page template is archived and cannot be used.",
)

# 디렉터리 접근 규칙 — Directory access rules
ACCESS_RULE_DUPLICATE: ErrorDefinition = (
    "page-directories-access-rules-duplicate",
    "Access rules must not repeat the same user area and role.",
)
ACCESS_RULE_USER_AREA_INVALID: ErrorDefinition = (
    "page-directories-access-rules-user-area-invalid",
    "The user area of the access rule is not defined.",
)
ACCESS_RULE_ROLE_AREA_MISMATCH: ErrorDefinition = (
    "page-directories-access-rules-role-area-mismatch",
    "The role does not belong to the user area of the access rule.",
)
ACCESS_RULE_REDIRECT_AREA_INVALID: ErrorDefinition = (
    "page-directories-access-rules-redirect-area-invalid",
    "The login redirect user area must be one of the access rule user areas.",
)


def build(error: ErrorDefinition, property: str | None = None) -> ValidationError:
    """오류 정의로부터 ValidationError를 생성합니다.

    Build a ValidationError from a catalogue entry.
    """
    code, message = error
    return ValidationError(code, message, property)
