"""사이트 API 라우터 패키지 — 공개 사이트 엔드포인트 통합.

Site API Router package — Aggregates the public site endpoints into a
single router for inclusion in the FastAPI application.

Included routers:
    - auth: 회원 인증 (Member sign-in, password, recovery, verification)
    - pages: 페이지 렌더 요약 (Page render summaries by id and path)
"""

from fastapi import APIRouter

from app.api.app.auth import router as auth_router
from app.api.app.pages import router as pages_router

app_router: APIRouter = APIRouter()

app_router.include_router(auth_router, prefix="/auth", tags=["Member Auth"])
app_router.include_router(pages_router, prefix="/pages", tags=["Site Pages"])
