"""테스트 인프라 — 인메모리 SQLite DB, 세션, httpx 클라이언트 픽스처.

Test infrastructure — In-memory SQLite DB, session, and httpx client fixtures.
A fresh schema is created for every test on a single shared connection
(StaticPool), and the app shares the test's session through a get_db
override so fixtures and requests see the same data.
"""

import os

# 앱 임포트 전에 설정 — Settings must be in place before the app is imported
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["PASSWORD_HASH_ROUNDS"] = "5"
os.environ["DEBUG"] = "false"
os.environ["SMTP_FROM_EMAIL"] = ""
os.environ["AXIOM_API_TOKEN"] = ""

from collections.abc import AsyncGenerator  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.database import Base, get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.models import *  # noqa: F401,F403,E402 — register all models with metadata
from app.models.page_directory import PageDirectory  # noqa: E402
from app.models.page_template import PageTemplate  # noqa: E402
from app.models.permission import Permission  # noqa: E402
from app.models.user import Role, User  # noqa: E402
from app.repositories.page_directory_repository import page_directory_repository  # noqa: E402
from app.repositories.permission_repository import permission_repository  # noqa: E402
from app.user_areas import CMS_USER_AREA_CODE, MEMBER_USER_AREA_CODE  # noqa: E402
from app.utils.jwt import build_claims, create_access_token  # noqa: E402
from app.utils.password import hash_password  # noqa: E402

ADMIN_PASSWORD = "admin123!"
EDITOR_PASSWORD = "editor123!"
MEMBER_PASSWORD = "member123!"


# ---------------------------------------------------------------------------
# Function-scoped: 엔진, 세션, 클라이언트
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """테스트용 async 엔진. 테스트마다 빈 스키마를 생성합니다."""
    eng = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def db(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """각 테스트에 격리된 DB 세션을 제공합니다."""
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(db: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """FastAPI 테스트 클라이언트 — DB 세션을 오버라이드합니다."""
    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db

    app.dependency_overrides[get_db] = _override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# 헬퍼 픽스처: 테스트용 데이터 생성
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def permissions(db: AsyncSession) -> list[Permission]:
    """정의된 모든 권한을 생성합니다."""
    return await permission_repository.ensure_defined_permissions(db)


async def _add_role(db: AsyncSession, user_area_code: str, title: str, permissions: list[Permission]) -> Role:
    role = Role(user_area_code=user_area_code, title=title)
    db.add(role)
    await db.flush()
    await permission_repository.set_role_permissions(db, role.id, [p.id for p in permissions])
    await db.refresh(role)
    return role


async def _add_user(
    db: AsyncSession,
    role: Role,
    username: str,
    password: str,
    email: str | None = None,
    is_account_verified: bool = True,
) -> User:
    user = User(
        user_area_code=role.user_area_code,
        role_id=role.id,
        username=username,
        display_name=username.title(),
        email=email,
        password_hash=hash_password(password),
        is_account_verified=is_account_verified,
    )
    db.add(user)
    await db.flush()
    await db.refresh(user)
    return user


@pytest_asyncio.fixture
async def admin_role(db: AsyncSession, permissions) -> Role:
    """모든 권한을 가진 CMS 관리자 역할."""
    return await _add_role(db, CMS_USER_AREA_CODE, "Administrator", permissions)


@pytest_asyncio.fixture
async def editor_role(db: AsyncSession, permissions) -> Role:
    """권한이 없는 CMS 역할."""
    return await _add_role(db, CMS_USER_AREA_CODE, "Editor", [])


@pytest_asyncio.fixture
async def member_role(db: AsyncSession, permissions) -> Role:
    """회원 영역 기본 역할."""
    return await _add_role(db, MEMBER_USER_AREA_CODE, "Member", [])


@pytest_asyncio.fixture
async def admin_user(db: AsyncSession, admin_role) -> User:
    """관리자 사용자를 생성합니다."""
    return await _add_user(db, admin_role, "admin", ADMIN_PASSWORD, email="admin@test.com")


@pytest_asyncio.fixture
async def editor_user(db: AsyncSession, editor_role) -> User:
    """권한 없는 CMS 사용자를 생성합니다."""
    return await _add_user(db, editor_role, "editor", EDITOR_PASSWORD)


@pytest_asyncio.fixture
async def member_user(db: AsyncSession, member_role) -> User:
    """인증된 회원을 생성합니다."""
    return await _add_user(db, member_role, "member", MEMBER_PASSWORD, email="member@test.com")


@pytest_asyncio.fixture
async def root_directory(db: AsyncSession) -> PageDirectory:
    """루트 디렉터리를 생성합니다."""
    return await page_directory_repository.get_or_create_root(db)


@pytest_asyncio.fixture
async def template(db: AsyncSession) -> PageTemplate:
    """기본 페이지 템플릿을 생성합니다."""
    t = PageTemplate(name="Standard", file_path="templates/standard.html")
    db.add(t)
    await db.flush()
    await db.refresh(t)
    return t


def make_token(user: User) -> str:
    """테스트용 JWT 액세스 토큰을 생성합니다."""
    return create_access_token(build_claims(user.id, user.user_area_code, user.role_id))


@pytest.fixture
def admin_token(admin_user) -> str:
    return make_token(admin_user)


@pytest.fixture
def editor_token(editor_user) -> str:
    return make_token(editor_user)


@pytest.fixture
def member_token(member_user) -> str:
    return make_token(member_user)


def auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


async def add_page(
    client: AsyncClient,
    token: str,
    page_directory_id,
    page_template_id,
    url_path: str = "",
    title: str = "Page",
    publish: bool = False,
    **extra,
) -> str:
    """관리자 API로 페이지를 추가하고 ID를 반환합니다."""
    res = await client.post(
        "/api/v1/admin/pages",
        headers=auth_header(token),
        json={
            "page_directory_id": str(page_directory_id),
            "page_template_id": str(page_template_id),
            "url_path": url_path,
            "title": title,
            "publish": publish,
            **extra,
        },
    )
    assert res.status_code == 201, res.text
    return res.json()["id"]
