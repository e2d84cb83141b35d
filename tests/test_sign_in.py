"""인증 API 테스트 — 로그인, 시도 제한, 비밀번호 변경, 토큰 갱신, /me.

Auth API tests — sign-in for both user areas, attempt throttling,
password change requirements, token refresh, sign-out and /me.
"""

from datetime import timedelta

import bcrypt
from httpx import AsyncClient
from sqlalchemy import func, select

from app.config import settings
from app.models.authentication import ACCOUNT_RECOVERY_TASK_TYPE, AuthorizedTask, FailedAuthenticationAttempt
from app.utils.password import get_hash_rounds
from app.utils.timezone import utc_now
from tests.conftest import ADMIN_PASSWORD, MEMBER_PASSWORD, auth_header

ADMIN_AUTH = "/api/v1/admin/auth"
APP_AUTH = "/api/v1/app/auth"
AUTH = "/api/v1/auth"


def _error_code(res) -> str:
    return res.json()["detail"]["code"]


# ===== Admin Sign-in =====

class TestAdminSignIn:
    """관리자 로그인 테스트."""

    async def test_sign_in_success(self, client: AsyncClient, admin_user):
        """관리자 로그인 성공, 로그인 유지 없으면 리프레시 토큰 없음."""
        res = await client.post(f"{ADMIN_AUTH}/sign-in", json={
            "username": "admin",
            "password": ADMIN_PASSWORD,
        })
        assert res.status_code == 200
        data = res.json()
        assert data["access_token"]
        assert data["refresh_token"] is None
        assert data["token_type"] == "bearer"

    async def test_sign_in_sets_last_sign_in(self, client: AsyncClient, db, admin_user):
        """로그인 시 마지막 로그인 일시 기록."""
        res = await client.post(f"{ADMIN_AUTH}/sign-in", json={
            "username": "ADMIN",
            "password": ADMIN_PASSWORD,
        })
        assert res.status_code == 200
        await db.refresh(admin_user)
        assert admin_user.last_sign_in_at is not None

    async def test_wrong_password(self, client: AsyncClient, db, admin_user):
        """잘못된 비밀번호 — 실패 기록 후 invalid-credentials."""
        res = await client.post(f"{ADMIN_AUTH}/sign-in", json={
            "username": "admin",
            "password": "wrong",
        })
        assert res.status_code == 400
        assert _error_code(res) == "users-authentication-invalid-credentials"
        assert res.json()["detail"]["property"] == "password"

        count = (await db.execute(select(func.count()).select_from(FailedAuthenticationAttempt))).scalar()
        assert count == 1

    async def test_unknown_user(self, client: AsyncClient, admin_user):
        """존재하지 않는 사용자."""
        res = await client.post(f"{ADMIN_AUTH}/sign-in", json={
            "username": "nobody",
            "password": "whatever",
        })
        assert res.status_code == 400
        assert _error_code(res) == "users-authentication-invalid-credentials"

    async def test_member_cannot_sign_in_to_cms(self, client: AsyncClient, member_user):
        """회원 계정은 CMS 영역에서 찾을 수 없음."""
        res = await client.post(f"{ADMIN_AUTH}/sign-in", json={
            "username": "member",
            "password": MEMBER_PASSWORD,
        })
        assert res.status_code == 400
        assert _error_code(res) == "users-authentication-invalid-credentials"

    async def test_inactive_user(self, client: AsyncClient, db, admin_user):
        """비활성 계정 로그인 실패."""
        admin_user.is_active = False
        await db.flush()

        res = await client.post(f"{ADMIN_AUTH}/sign-in", json={
            "username": "admin",
            "password": ADMIN_PASSWORD,
        })
        assert res.status_code == 400

    async def test_throttled_after_max_attempts(self, client: AsyncClient, admin_user, monkeypatch):
        """사용자명 시도 한도 초과 시 올바른 비밀번호도 거부."""
        monkeypatch.setattr(settings, "AUTH_USERNAME_MAX_ATTEMPTS", 2)
        for _ in range(2):
            res = await client.post(f"{ADMIN_AUTH}/sign-in", json={"username": "admin", "password": "bad"})
            assert _error_code(res) == "users-authentication-invalid-credentials"

        res = await client.post(f"{ADMIN_AUTH}/sign-in", json={
            "username": "admin",
            "password": ADMIN_PASSWORD,
        })
        assert res.status_code == 400
        assert _error_code(res) == "users-authentication-too-many-failed-attempts"

    async def test_throttled_by_ip(self, client: AsyncClient, admin_user, editor_user, monkeypatch):
        """같은 IP의 실패가 다른 사용자명에도 적용."""
        monkeypatch.setattr(settings, "AUTH_IP_MAX_ATTEMPTS", 2)
        await client.post(f"{ADMIN_AUTH}/sign-in", json={"username": "admin", "password": "bad"})
        await client.post(f"{ADMIN_AUTH}/sign-in", json={"username": "someone", "password": "bad"})

        res = await client.post(f"{ADMIN_AUTH}/sign-in", json={"username": "editor", "password": "bad"})
        assert _error_code(res) == "users-authentication-too-many-failed-attempts"

    async def test_weak_hash_upgraded_on_sign_in(self, client: AsyncClient, db, admin_user):
        """약한 해시는 로그인 성공 시 재해싱."""
        admin_user.password_hash = bcrypt.hashpw(ADMIN_PASSWORD.encode(), bcrypt.gensalt(rounds=4)).decode()
        await db.flush()

        res = await client.post(f"{ADMIN_AUTH}/sign-in", json={"username": "admin", "password": ADMIN_PASSWORD})
        assert res.status_code == 200
        await db.refresh(admin_user)
        assert get_hash_rounds(admin_user.password_hash) == settings.PASSWORD_HASH_ROUNDS


# ===== Password change =====

class TestPasswordChange:
    """비밀번호 변경 필요 및 자격 증명 기반 변경."""

    async def test_password_change_required_blocks_and_rehashes(self, client: AsyncClient, db, admin_user):
        """변경 필요 계정은 차단되지만 약한 해시는 갱신."""
        admin_user.require_password_change = True
        admin_user.password_hash = bcrypt.hashpw(ADMIN_PASSWORD.encode(), bcrypt.gensalt(rounds=4)).decode()
        await db.flush()

        res = await client.post(f"{ADMIN_AUTH}/sign-in", json={"username": "admin", "password": ADMIN_PASSWORD})
        assert res.status_code == 400
        assert _error_code(res) == "users-authentication-password-change-required"

        await db.refresh(admin_user)
        assert get_hash_rounds(admin_user.password_hash) == settings.PASSWORD_HASH_ROUNDS
        assert admin_user.last_sign_in_at is None

    async def test_change_password_then_sign_in(self, client: AsyncClient, db, admin_user):
        """비밀번호 변경 후 새 비밀번호로 로그인."""
        admin_user.require_password_change = True
        await db.flush()

        res = await client.put(f"{ADMIN_AUTH}/password", json={
            "username": "admin",
            "old_password": ADMIN_PASSWORD,
            "new_password": "brand-new-1",
        })
        assert res.status_code == 204
        await db.refresh(admin_user)
        assert admin_user.require_password_change is False
        assert admin_user.last_password_change_at is not None

        res = await client.post(f"{ADMIN_AUTH}/sign-in", json={"username": "admin", "password": "brand-new-1"})
        assert res.status_code == 200

    async def test_change_password_same_password(self, client: AsyncClient, admin_user):
        """동일한 비밀번호로 변경 불가."""
        res = await client.put(f"{ADMIN_AUTH}/password", json={
            "username": "admin",
            "old_password": ADMIN_PASSWORD,
            "new_password": ADMIN_PASSWORD,
        })
        assert res.status_code == 400
        assert _error_code(res) == "users-passwords-not-changed"

    async def test_change_password_wrong_old_password(self, client: AsyncClient, admin_user):
        """현재 비밀번호 불일치 시 old_password 속성으로 실패."""
        res = await client.put(f"{ADMIN_AUTH}/password", json={
            "username": "admin",
            "old_password": "nope",
            "new_password": "another-1",
        })
        assert res.status_code == 400
        assert res.json()["detail"]["property"] == "old_password"


# ===== Member Sign-in =====

class TestMemberSignIn:
    """회원 로그인 테스트."""

    async def test_member_sign_in(self, client: AsyncClient, member_user):
        """인증된 회원 로그인 성공."""
        res = await client.post(f"{APP_AUTH}/sign-in", json={
            "username": "member",
            "password": MEMBER_PASSWORD,
        })
        assert res.status_code == 200

    async def test_unverified_member_blocked(self, client: AsyncClient, db, member_user):
        """인증되지 않은 회원은 로그인 불가."""
        member_user.is_account_verified = False
        await db.flush()

        res = await client.post(f"{APP_AUTH}/sign-in", json={
            "username": "member",
            "password": MEMBER_PASSWORD,
        })
        assert res.status_code == 400
        assert _error_code(res) == "users-authentication-account-not-verified"

    async def test_unverified_member_allowed_when_not_required(self, client: AsyncClient, db, member_user, monkeypatch):
        """영역이 인증을 요구하지 않으면 로그인 허용."""
        monkeypatch.setattr(settings, "MEMBER_AREA_REQUIRE_VERIFICATION", False)
        member_user.is_account_verified = False
        await db.flush()

        res = await client.post(f"{APP_AUTH}/sign-in", json={
            "username": "member",
            "password": MEMBER_PASSWORD,
        })
        assert res.status_code == 200

    async def test_sign_in_invalidates_recovery_tasks(self, client: AsyncClient, db, member_user):
        """로그인 시 열린 계정 복구 작업 무효화."""
        task = AuthorizedTask(
            user_id=member_user.id,
            task_type=ACCOUNT_RECOVERY_TASK_TYPE,
            token="recovery-token",
            expires_at=utc_now() + timedelta(hours=1),
        )
        db.add(task)
        await db.flush()

        res = await client.post(f"{APP_AUTH}/sign-in", json={
            "username": "member",
            "password": MEMBER_PASSWORD,
        })
        assert res.status_code == 200
        await db.refresh(task)
        assert task.invalidated_at is not None


# ===== Session =====

class TestSession:
    """토큰 갱신, 로그아웃, /me."""

    async def _remembered_sign_in(self, client: AsyncClient) -> dict:
        res = await client.post(f"{ADMIN_AUTH}/sign-in", json={
            "username": "admin",
            "password": ADMIN_PASSWORD,
            "remember_user": True,
        })
        assert res.status_code == 200
        return res.json()

    async def test_refresh_rotates_token(self, client: AsyncClient, admin_user):
        """리프레시 토큰 갱신 후 기존 토큰 재사용 불가."""
        tokens = await self._remembered_sign_in(client)
        assert tokens["refresh_token"]

        res = await client.post(f"{AUTH}/refresh", json={"refresh_token": tokens["refresh_token"]})
        assert res.status_code == 200
        assert res.json()["refresh_token"] != tokens["refresh_token"]

        res = await client.post(f"{AUTH}/refresh", json={"refresh_token": tokens["refresh_token"]})
        assert res.status_code == 401

    async def test_access_token_rejected_as_refresh(self, client: AsyncClient, admin_user):
        """액세스 토큰으로 갱신 불가."""
        tokens = await self._remembered_sign_in(client)
        res = await client.post(f"{AUTH}/refresh", json={"refresh_token": tokens["access_token"]})
        assert res.status_code == 401

    async def test_logout_revokes_refresh_token(self, client: AsyncClient, admin_user):
        """로그아웃 후 리프레시 불가."""
        tokens = await self._remembered_sign_in(client)
        res = await client.post(f"{AUTH}/logout", json={"refresh_token": tokens["refresh_token"]})
        assert res.status_code == 204

        res = await client.post(f"{AUTH}/refresh", json={"refresh_token": tokens["refresh_token"]})
        assert res.status_code == 401

    async def test_me(self, client: AsyncClient, admin_user, admin_token):
        """/me — 현재 사용자와 권한 코드."""
        res = await client.get(f"{AUTH}/me", headers=auth_header(admin_token))
        assert res.status_code == 200
        data = res.json()
        assert data["username"] == "admin"
        assert data["user_area_code"] == "CMS"
        assert data["role_title"] == "Administrator"
        assert "pages:publish" in data["permissions"]
        assert data["permissions"] == sorted(data["permissions"])

    async def test_me_anonymous(self, client: AsyncClient):
        """토큰 없이 /me 호출 시 401."""
        res = await client.get(f"{AUTH}/me")
        assert res.status_code == 401

    async def test_me_invalid_token(self, client: AsyncClient):
        """잘못된 토큰은 401."""
        res = await client.get(f"{AUTH}/me", headers=auth_header("not-a-jwt"))
        assert res.status_code == 401
