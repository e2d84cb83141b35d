"""FastAPI 애플리케이션 엔트리포인트 — 미들웨어, 핸들러 및 라우터 등록.

FastAPI application entry point — Middleware, mediator handler and router
registration. Configures CORS, logging, the health check, and includes
the admin, site and shared auth routers.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import app.cqs.registry  # noqa: F401  핸들러 등록 — Registers every handler with the mediator
from app.config import settings
from app.middleware.axiom_logging import AxiomLoggingMiddleware
from app.utils.exceptions import InvariantViolationError

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app: FastAPI = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# Axiom API 로깅 미들웨어 — Axiom API request/response logging
# CORS보다 먼저 등록하여 모든 요청을 캡처 (Registered before CORS to capture all requests)
app.add_middleware(AxiomLoggingMiddleware)

# CORS 미들웨어 — Cross-Origin Resource Sharing middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(InvariantViolationError)
async def invariant_violation_handler(request: Request, exc: InvariantViolationError) -> JSONResponse:
    """저장된 데이터를 해석할 수 없을 때 500으로 응답합니다."""
    logger.error("Invariant violation on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.get("/health")
async def health_check() -> dict[str, str]:
    """서버 상태 확인 엔드포인트.

    Health check endpoint for load balancers and monitoring.
    """
    return {"status": "ok"}


# ---------------------------------------------------------------------------
# 라우터 등록 — Router registration
# ---------------------------------------------------------------------------
# admin_router: CMS 관리 (users, templates, directories, pages, rewrite rules)
# app_router: 공개 사이트 (member auth, page rendering)
from app.api.admin import admin_router  # noqa: E402
from app.api.admin.setup import router as setup_page_router  # noqa: E402
from app.api.app import app_router  # noqa: E402
from app.api.auth import router as auth_router  # noqa: E402

app.include_router(admin_router, prefix="/api/v1/admin")
app.include_router(app_router, prefix="/api/v1/app")
app.include_router(auth_router, prefix="/api/v1/auth", tags=["Auth"])
app.include_router(setup_page_router, tags=["Setup Page"])
