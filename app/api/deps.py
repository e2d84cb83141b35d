"""FastAPI 의존성 주입 모듈 — 인증 및 실행 컨텍스트.

FastAPI dependency injection module — Authentication and the execution
context handed to the mediator.

Authentication Flow:
    1. 클라이언트가 Authorization: Bearer <token> 헤더를 전송
       (Client sends Authorization: Bearer <token> header)
    2. HTTPBearer가 토큰을 추출 (HTTPBearer extracts the token)
    3. decode_token()이 JWT를 검증하고 페이로드를 반환
       (decode_token verifies JWT and returns payload)
    4. 페이로드의 "sub" 필드로 DB에서 사용자를 조회
       (User is fetched from DB using payload "sub" field)
    5. 사용자 활성 상태를 확인 (User active status is verified)

Authorization:
    권한 검사는 mediator가 핸들러별 권한 코드로 수행합니다.
    (Permission checks happen in the mediator, per handler permission code.)
    라우터는 get_execution_context로 호출자를 전달만 합니다.
    (Routers only pass the caller along through get_execution_context.)
"""

from typing import Annotated
from uuid import UUID

import jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.cqs.base import ExecutionContext
from app.database import get_db
from app.models.user import User
from app.repositories.user_repository import user_repository
from app.utils.jwt import ACCESS_TOKEN_TYPE, decode_token

# HTTP Bearer 토큰 추출기 — 헤더가 없으면 None (익명 호출 허용)
# (Extracts the Bearer token; None when the header is absent so anonymous calls pass)
security: HTTPBearer = HTTPBearer(auto_error=False)


async def get_optional_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User | None:
    """JWT 토큰이 있으면 사용자를 반환하고, 없으면 None을 반환합니다.

    Return the authenticated user, or None when no token was sent. A
    token that is present but invalid is still rejected.

    Args:
        credentials: HTTP Bearer 토큰 자격 증명 (Bearer token credentials, optional)
        db: 비동기 DB 세션 (Async database session)

    Returns:
        User | None: 인증된 사용자 또는 None (Authenticated user or None)

    Raises:
        HTTPException(401): 토큰이 유효하지 않거나 만료됨 (Invalid or expired token)
        HTTPException(401): 사용자를 찾을 수 없거나 비활성 (User not found or inactive)
    """
    if credentials is None:
        return None

    try:
        payload: dict = decode_token(credentials.credentials)
        # 토큰 타입 검증 — Reject refresh tokens used as access tokens
        if payload.get("type") != ACCESS_TOKEN_TYPE:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token type")
        user_id: str | None = payload.get("sub")
        if user_id is None:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
        parsed_id: UUID = UUID(user_id)
    except HTTPException:
        raise
    except (jwt.InvalidTokenError, KeyError, ValueError):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token")

    user: User | None = await user_repository.get_detail(db, parsed_id)
    if user is None or not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found or inactive")

    return user


async def get_current_user(
    user: Annotated[User | None, Depends(get_optional_user)],
) -> User:
    """인증된 사용자를 요구합니다 (401 when anonymous)."""
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")
    return user


def get_client_ip(request: Request) -> str | None:
    """요청 클라이언트 IP (Client IP; None when the transport does not expose one)."""
    return request.client.host if request.client else None


async def get_execution_context(
    request: Request,
    user: Annotated[User | None, Depends(get_optional_user)],
) -> ExecutionContext:
    """요청 호출자로 실행 컨텍스트를 만듭니다.

    Build the execution context for the caller of this request:
    anonymous when no token was sent, otherwise the signed-in user.
    """
    ip_address: str | None = get_client_ip(request)
    if user is None:
        return ExecutionContext.anonymous(ip_address)
    return ExecutionContext.for_user(user, ip_address)
