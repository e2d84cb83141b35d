"""공통 Pydantic 요청/응답 스키마 정의.

Common Pydantic request/response schema definitions shared by several
API domains: generic id and message responses and the structured
validation error body used by validation results.
"""

from pydantic import BaseModel

from app.utils.exceptions import ValidationError


class IdResponse(BaseModel):
    """생성된 리소스 ID 응답 스키마.

    Response returned by create endpoints.

    Attributes:
        id: 생성된 리소스 UUID (Created resource identifier)
    """

    id: str  # 생성된 리소스 UUID 문자열 (Created resource UUID as string)


class MessageResponse(BaseModel):
    """단순 메시지 응답 스키마.

    Simple message response schema.
    Used for operations that don't return data (e.g. delete, status change).

    Attributes:
        message: 응답 메시지 (Response message text)
    """

    message: str  # 응답 메시지 (Human-readable confirmation message)


class ValidationErrorDetail(BaseModel):
    """검증 오류 상세 (Structured validation error).

    Attributes:
        code: 오류 코드 (Machine readable code)
        message: 오류 메시지 (Human readable message)
        property: 관련 속성명 (Offending property, optional)
    """

    code: str
    message: str
    property: str | None = None

    @classmethod
    def from_exception(cls, error: ValidationError) -> "ValidationErrorDetail":
        return cls(code=error.code, message=error.message, property=error.property)

    def to_exception(self) -> ValidationError:
        return ValidationError(self.code, self.message, self.property)


class ValidationResult(BaseModel):
    """성공/실패 검증 결과 베이스.

    Base for query results that report a validation outcome instead of
    raising, so callers can decide whether to throw.

    Attributes:
        is_success: 성공 여부 (Whether validation passed)
        error: 실패 시 오류 상세 (Error detail when validation failed)
    """

    is_success: bool
    error: ValidationErrorDetail | None = None

    def throw_if_not_success(self) -> None:
        """실패 결과이면 ValidationError를 발생시킵니다.

        Raises:
            ValidationError: 검증 실패 (Validation failed)
        """
        if not self.is_success:
            if self.error is None:
                raise ValueError("A failed validation result must carry an error")
            raise self.error.to_exception()
