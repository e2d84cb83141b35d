"""JWT 토큰 생성 및 검증 유틸리티 모듈.

JWT helpers for CMS and member sessions. Access and refresh tokens carry
the same claims and differ only in lifetime and ``type``:

    {
        "sub": "user_uuid",         # 사용자 ID (User id)
        "area": "CMS",              # 사용자 영역 코드 (User area code)
        "role": "role_uuid",        # 역할 ID (Role id)
        "exp": 1234567890,          # 만료 시각 (Expiry)
        "jti": "random",            # 토큰마다 다른 값 (Makes every token string unique)
        "type": "access"|"refresh"  # 토큰 유형 (Token type discriminator)
    }
"""

import secrets
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import UUID

import jwt

from app.config import settings

ACCESS_TOKEN_TYPE: str = "access"
REFRESH_TOKEN_TYPE: str = "refresh"


def build_claims(user_id: UUID, user_area_code: str, role_id: UUID) -> dict[str, str]:
    """사용자 식별 클레임을 만듭니다 (Identity claims shared by both token types)."""
    return {"sub": str(user_id), "area": user_area_code, "role": str(role_id)}


def _encode(claims: dict[str, Any], token_type: str, lifetime: timedelta) -> str:
    payload: dict[str, Any] = {
        **claims,
        "exp": datetime.now(timezone.utc) + lifetime,
        "type": token_type,
        "jti": secrets.token_hex(8),
    }
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def create_access_token(claims: dict[str, Any]) -> str:
    """액세스 토큰을 생성합니다 (JWT_ACCESS_TOKEN_EXPIRE_MINUTES 동안 유효).

    Args:
        claims: build_claims()가 만든 클레임 (Claims from build_claims)

    Returns:
        str: 인코딩된 JWT (Encoded token)
    """
    return _encode(claims, ACCESS_TOKEN_TYPE, timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES))


def create_refresh_token(claims: dict[str, Any]) -> str:
    """리프레시 토큰을 생성합니다 (JWT_REFRESH_TOKEN_EXPIRE_DAYS 동안 유효, DB에도 저장됨)."""
    return _encode(claims, REFRESH_TOKEN_TYPE, timedelta(days=settings.JWT_REFRESH_TOKEN_EXPIRE_DAYS))


def decode_token(token: str) -> dict[str, Any]:
    """JWT를 디코딩하고 서명과 만료를 검증합니다.

    Raises:
        jwt.ExpiredSignatureError: 만료된 토큰 (Expired token)
        jwt.InvalidTokenError: 그 밖의 잘못된 토큰 (Any other invalid token)
    """
    return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
