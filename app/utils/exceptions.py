"""커스텀 예외 클래스 모듈.

Custom exception classes module.
Provides pre-configured HTTPException subclasses for common error patterns,
a typed validation exception for business rule failures, and the
invariant violation error raised when stored data cannot be interpreted.

Usage:
    from app.utils.exceptions import NotFoundError, ValidationError
    raise NotFoundError("Page not found")
    raise ValidationError("pages-url-path-in-use", "The url path is already in use", "url_path")
"""

from fastapi import HTTPException, status


class NotFoundError(HTTPException):
    """404 Not Found 예외 — 요청한 리소스를 찾을 수 없을 때 사용.

    404 Not Found exception.
    Raised by commands when the entity they act on (page, directory,
    template, user, etc.) does not exist. Queries return None instead.

    Args:
        detail: 오류 메시지 (Error message, default: "Resource not found")
    """

    def __init__(self, detail: str = "Resource not found") -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class DuplicateError(HTTPException):
    """409 Conflict 예외 — 중복 리소스 생성 시도 시 사용.

    409 Conflict exception.
    Raised when attempting to create a resource that violates a uniqueness constraint
    (e.g. duplicate username within a user area, duplicate template name).

    Args:
        detail: 오류 메시지 (Error message, default: "Resource already exists")
    """

    def __init__(self, detail: str = "Resource already exists") -> None:
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class ForbiddenError(HTTPException):
    """403 Forbidden 예외 — 권한 부족 시 사용.

    403 Forbidden exception.
    Raised when the caller's role lacks the permission a handler requires,
    or when a directory access rule is violated with the "error" action.

    Args:
        detail: 오류 메시지 (Error message, default: "Insufficient permissions")
    """

    def __init__(self, detail: str = "Insufficient permissions") -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class UnauthorizedError(HTTPException):
    """401 Unauthorized 예외 — 인증 실패 시 사용.

    401 Unauthorized exception.
    Raised when authentication is missing, invalid, or expired
    (e.g. missing JWT token, expired token, anonymous caller on a
    permission-restricted handler).

    Args:
        detail: 오류 메시지 (Error message, default: "Authentication required")
    """

    def __init__(self, detail: str = "Authentication required") -> None:
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


class BadRequestError(HTTPException):
    """400 Bad Request 예외 — 잘못된 요청 데이터 시 사용.

    400 Bad Request exception.
    Raised when the request data is invalid beyond what Pydantic validation catches
    (e.g. invalid state transitions such as unpublishing an unpublished page).

    Args:
        detail: 오류 메시지 (Error message, default: "Bad request")
    """

    def __init__(self, detail: str | dict = "Bad request") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class ValidationError(BadRequestError):
    """비즈니스 규칙 검증 실패 예외 — 오류 코드와 속성명을 포함.

    Typed validation exception for business rule failures.
    The web layer receives a structured detail body so clients can react
    to specific codes (e.g. redirect to the password change form when
    the code is "users-authentication-password-change-required").

    Args:
        code: 오류 코드 (Machine readable error code)
        message: 오류 메시지 (Human readable message)
        property: 관련 속성명 (Name of the offending input property, optional)
    """

    def __init__(self, code: str, message: str, property: str | None = None) -> None:
        self.code: str = code
        self.message: str = message
        self.property: str | None = property
        super().__init__(detail={"code": code, "message": message, "property": property})


class InvariantViolationError(Exception):
    """저장된 데이터가 도메인 불변식을 위반할 때 발생하는 예외.

    Raised when persisted data cannot be interpreted by the domain,
    e.g. an access rule violation action id that maps to no known value.
    This is a programming/data error, not a client error, and is left
    to surface as a 500 response.
    """
