"""Axiom API 로깅 미들웨어.

Axiom API logging middleware.
Captures request/response data and sends structured logs to Axiom.
Logs: API surface (admin/site/auth), endpoint, method, client IP, masked
data (body/params), status code, and the error code/reason of failures.
Sensitive fields (password, token, secret) are automatically masked.
"""

import json
import logging
import re
import time
from typing import Any

from axiom_py import Client as AxiomClient
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app.config import settings

logger = logging.getLogger(__name__)

# 마스킹 대상 필드 패턴 — Fields to mask in request/response bodies
_SENSITIVE_KEYS = re.compile(
    r"(password|passwd|secret|token|authorization|api_key|apikey|credential)",
    re.IGNORECASE,
)

# 로깅 제외 경로 — Paths excluded from logging
_SKIP_PATHS = {"/health", "/docs", "/redoc", "/openapi.json", "/setup"}

# 경로 접두사별 API 영역 — API surface by path prefix
_SURFACES: tuple[tuple[str, str], ...] = (
    ("/api/v1/admin", "admin"),
    ("/api/v1/app", "site"),
    ("/api/v1/auth", "auth"),
)


def _mask_dict(data: Any, depth: int = 0) -> Any:
    """민감 필드 자동 마스킹 — Recursively mask sensitive fields in dicts/lists."""
    if depth > 5:
        return "..."
    if isinstance(data, dict):
        return {
            k: "***" if _SENSITIVE_KEYS.search(k) else _mask_dict(v, depth + 1)
            for k, v in data.items()
        }
    if isinstance(data, list):
        return [_mask_dict(item, depth + 1) for item in data[:20]]
    return data


def _truncate(value: Any, max_len: int = 2000) -> Any:
    """로그 크기 제한 — Truncate large values to prevent oversized logs."""
    if isinstance(value, str) and len(value) > max_len:
        return value[:max_len] + "...(truncated)"
    return value


def _surface_of(path: str) -> str:
    for prefix, surface in _SURFACES:
        if path.startswith(prefix):
            return surface
    return "other"


def _parse_error(body: bytes) -> tuple[str | None, str]:
    """오류 응답 본문에서 (코드, 사유)를 추출합니다.

    Validation errors carry {"detail": {"code", "message", "property"}};
    other errors carry a plain string detail.
    """
    try:
        data = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None, body.decode("utf-8", errors="replace")[:500]

    detail = data.get("detail", data) if isinstance(data, dict) else data
    if isinstance(detail, dict) and "code" in detail:
        return str(detail["code"]), str(detail.get("message", ""))[:500]
    reason: str = detail if isinstance(detail, str) else json.dumps(detail)[:500]
    return None, reason[:500]


class AxiomLoggingMiddleware(BaseHTTPMiddleware):
    """모든 API 요청/응답을 Axiom에 로깅하는 미들웨어.

    Middleware that logs all API requests and responses to Axiom.
    Passes requests straight through when Axiom is not configured.
    """

    def __init__(self, app: Any) -> None:
        super().__init__(app)
        self._client: AxiomClient | None = None
        self._dataset: str = settings.AXIOM_DATASET

        if settings.AXIOM_API_TOKEN and settings.AXIOM_DATASET:
            self._client = AxiomClient(token=settings.AXIOM_API_TOKEN)

    async def _read_body(self, request: Request) -> Any:
        if request.method not in ("POST", "PUT", "PATCH"):
            return None
        body_bytes = await request.body()
        if not body_bytes:
            return None
        try:
            return _truncate(_mask_dict(json.loads(body_bytes)))
        except (json.JSONDecodeError, UnicodeDecodeError):
            return "(non-json body)"

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        # 제외 경로 스킵 / Axiom 미설정시 패스스루 — Skip excluded paths or unconfigured Axiom
        if request.url.path in _SKIP_PATHS or not self._client:
            return await call_next(request)

        start_time = time.time()
        log_event: dict[str, Any] = {
            "surface": _surface_of(request.url.path),
            "method": request.method,
            "path": request.url.path,
            "client_ip": request.client.host if request.client else None,
            "status_code": 500,
        }
        if request.query_params:
            log_event["query_params"] = _mask_dict(dict(request.query_params))
        request_body: Any = await self._read_body(request)
        if request_body is not None:
            log_event["request_body"] = request_body

        try:
            response = await call_next(request)
            log_event["status_code"] = response.status_code

            # 에러 응답시 body에서 코드/사유 추출 — Extract error code and reason
            if response.status_code >= 400:
                resp_body = b""
                async for chunk in response.body_iterator:
                    resp_body += chunk if isinstance(chunk, bytes) else chunk.encode("utf-8")

                error_code, reason = _parse_error(resp_body)
                if error_code:
                    log_event["error_code"] = error_code
                log_event["error"] = reason

                # 소비한 body를 다시 응답으로 반환 — Re-wrap consumed body
                response = Response(
                    content=resp_body,
                    status_code=response.status_code,
                    headers=dict(response.headers),
                    media_type=response.media_type,
                )
        except Exception as exc:
            log_event["error"] = f"{type(exc).__name__}: {str(exc)[:300]}"
            raise
        finally:
            log_event["duration_ms"] = round((time.time() - start_time) * 1000, 2)
            # Axiom 전송 실패는 요청 처리에 영향주지 않음 — Ingest failures never break the request
            try:
                self._client.ingest_events(self._dataset, [log_event])
            except Exception:
                logger.warning("Axiom ingest failed for %s %s", log_event["method"], log_event["path"], exc_info=True)

        return response
