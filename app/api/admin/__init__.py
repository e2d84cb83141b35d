"""관리자 API 라우터 패키지 — 모든 관리자 엔드포인트 통합.

Admin API Router package — Aggregates all admin-facing (CMS) endpoints
into a single router for inclusion in the FastAPI application.

Included routers:
    - auth: 관리자 인증 및 초기 설정 (CMS sign-in, password change, setup)
    - users: 사용자 관리 (User management)
    - roles: 역할 및 권한 (Roles and permission codes)
    - page_templates: 페이지 템플릿 관리 (Page template management)
    - page_directories: 디렉터리 및 접근 규칙 (Directories and access rules)
    - pages: 페이지 및 게시 워크플로 (Pages and the publish workflow)
    - rewrite_rules: 리라이트 규칙 (Redirects for missing paths)
"""

from fastapi import APIRouter

from app.api.admin.auth import router as auth_router
from app.api.admin.page_directories import router as page_directories_router
from app.api.admin.page_templates import router as page_templates_router
from app.api.admin.pages import router as pages_router
from app.api.admin.rewrite_rules import router as rewrite_rules_router
from app.api.admin.roles import router as roles_router
from app.api.admin.users import router as users_router

admin_router: APIRouter = APIRouter()

# ---------------------------------------------------------------------------
# 사용자 및 인증 — Users and authentication
# ---------------------------------------------------------------------------
admin_router.include_router(auth_router, prefix="/auth", tags=["Admin Auth"])
admin_router.include_router(users_router, prefix="/users", tags=["Users"])
# 역할/권한: /roles, /permissions (Roles and permissions)
admin_router.include_router(roles_router, tags=["Roles"])

# ---------------------------------------------------------------------------
# 콘텐츠 — Content
# ---------------------------------------------------------------------------
admin_router.include_router(page_templates_router, prefix="/page-templates", tags=["Page Templates"])
admin_router.include_router(page_directories_router, prefix="/page-directories", tags=["Page Directories"])
admin_router.include_router(pages_router, prefix="/pages", tags=["Pages"])
admin_router.include_router(rewrite_rules_router, prefix="/rewrite-rules", tags=["Rewrite Rules"])
