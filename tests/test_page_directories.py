"""페이지 디렉터리 및 접근 규칙 테스트."""

from uuid import uuid4

import pytest
from httpx import AsyncClient
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.page_directory import PageDirectory
from app.repositories.page_directory_repository import page_directory_repository
from tests.conftest import add_page, auth_header

DIRECTORIES = "/api/v1/admin/page-directories"
SITE_PAGES = "/api/v1/app/pages"


async def _add_directory(client: AsyncClient, token: str, url_path: str, parent_id=None) -> str:
    body = {"name": url_path.title(), "url_path": url_path}
    if parent_id is not None:
        body["parent_page_directory_id"] = str(parent_id)
    res = await client.post(DIRECTORIES, headers=auth_header(token), json=body)
    assert res.status_code == 201, res.text
    return res.json()["id"]


async def _set_rules(client: AsyncClient, token: str, directory_id, **body):
    return await client.put(
        f"{DIRECTORIES}/{directory_id}/access-rules", headers=auth_header(token), json=body
    )


class TestPageDirectories:
    """디렉터리 트리 테스트."""

    async def test_add_creates_root_on_demand(self, client: AsyncClient, admin_token):
        """루트가 없으면 생성 후 그 아래에 추가."""
        blog_id = await _add_directory(client, admin_token, "Blog")
        await _add_directory(client, admin_token, "news", parent_id=blog_id)

        res = await client.get(DIRECTORIES, headers=auth_header(admin_token))
        assert res.status_code == 200
        assert [d["full_path"] for d in res.json()] == ["/", "/blog", "/blog/news"]

    async def test_get_by_id(self, client: AsyncClient, admin_token, root_directory):
        """단건 조회 — 전체 경로와 기본 위반 동작."""
        blog_id = await _add_directory(client, admin_token, "blog")

        res = await client.get(f"{DIRECTORIES}/{blog_id}", headers=auth_header(admin_token))
        assert res.status_code == 200
        data = res.json()
        assert data["full_path"] == "/blog"
        assert data["parent_page_directory_id"] == str(root_directory.id)
        assert data["access_rule_violation_action"] == 0
        assert data["access_rules"] == []

        res = await client.get(f"{DIRECTORIES}/{uuid4()}", headers=auth_header(admin_token))
        assert res.status_code == 404

    async def test_duplicate_sibling_path(self, client: AsyncClient, admin_token, root_directory):
        """형제 디렉터리 경로 중복은 409, 다른 부모 아래는 허용."""
        blog_id = await _add_directory(client, admin_token, "blog")
        res = await client.post(DIRECTORIES, headers=auth_header(admin_token), json={
            "name": "Blog again", "url_path": "/BLOG/",
        })
        assert res.status_code == 409

        await _add_directory(client, admin_token, "blog", parent_id=blog_id)

    async def test_invalid_segment(self, client: AsyncClient, admin_token):
        """여러 세그먼트 경로는 422."""
        res = await client.post(DIRECTORIES, headers=auth_header(admin_token), json={
            "name": "Nested", "url_path": "a/b",
        })
        assert res.status_code == 422

    async def test_unknown_parent(self, client: AsyncClient, admin_token):
        res = await client.post(DIRECTORIES, headers=auth_header(admin_token), json={
            "name": "Orphan", "url_path": "orphan", "parent_page_directory_id": str(uuid4()),
        })
        assert res.status_code == 404

    async def test_delete(self, client: AsyncClient, admin_token, root_directory, template):
        """루트, 하위 디렉터리 보유, 페이지 보유 디렉터리는 삭제 불가."""
        res = await client.delete(f"{DIRECTORIES}/{root_directory.id}", headers=auth_header(admin_token))
        assert res.status_code == 400

        parent_id = await _add_directory(client, admin_token, "parent")
        child_id = await _add_directory(client, admin_token, "child", parent_id=parent_id)
        res = await client.delete(f"{DIRECTORIES}/{parent_id}", headers=auth_header(admin_token))
        assert res.status_code == 400

        await add_page(client, admin_token, child_id, template.id, url_path="page")
        res = await client.delete(f"{DIRECTORIES}/{child_id}", headers=auth_header(admin_token))
        assert res.status_code == 400

        empty_id = await _add_directory(client, admin_token, "empty")
        res = await client.delete(f"{DIRECTORIES}/{empty_id}", headers=auth_header(admin_token))
        assert res.status_code == 204
        res = await client.get(f"{DIRECTORIES}/{empty_id}", headers=auth_header(admin_token))
        assert res.status_code == 404

    async def test_requires_permission(self, client: AsyncClient, editor_token):
        """page_directories 권한 없으면 403."""
        res = await client.get(DIRECTORIES, headers=auth_header(editor_token))
        assert res.status_code == 403
        res = await client.post(DIRECTORIES, headers=auth_header(editor_token), json={
            "name": "X", "url_path": "x",
        })
        assert res.status_code == 403


class TestRootDirectory:
    """루트 디렉터리는 하나뿐."""

    async def test_get_or_create_root_is_idempotent(self, db: AsyncSession):
        first = await page_directory_repository.get_or_create_root(db)
        second = await page_directory_repository.get_or_create_root(db)
        assert first.id == second.id
        assert first.url_path == ""

    async def test_second_root_rejected(self, db: AsyncSession, root_directory):
        """부모 없는 두 번째 디렉터리는 유니크 인덱스로 거부."""
        with pytest.raises(IntegrityError):
            async with db.begin_nested():
                db.add(PageDirectory(name="Other root", url_path="", parent_page_directory_id=None))

        root = await page_directory_repository.get_root(db)
        assert root.id == root_directory.id


class TestAccessRuleSet:
    """접근 규칙 집합 갱신 테스트."""

    async def test_update_and_read_back(self, client: AsyncClient, admin_token, member_role):
        """규칙 추가 후 수정용 커맨드로 조회."""
        directory_id = await _add_directory(client, admin_token, "members")
        res = await _set_rules(
            client, admin_token, directory_id,
            violation_action=1,
            user_area_code_for_login_redirect="MBR",
            access_rules=[{"user_area_code": "MBR", "role_id": str(member_role.id)}],
        )
        assert res.status_code == 204

        res = await client.get(f"{DIRECTORIES}/{directory_id}/access-rules", headers=auth_header(admin_token))
        assert res.status_code == 200
        data = res.json()
        assert data["page_directory_id"] == directory_id
        assert data["violation_action"] == 1
        assert data["user_area_code_for_login_redirect"] == "MBR"
        assert len(data["access_rules"]) == 1
        assert data["access_rules"][0]["role_id"] == str(member_role.id)
        assert data["access_rules"][0]["page_directory_access_rule_id"] is not None

    async def test_update_keeps_listed_and_removes_missing(self, client: AsyncClient, admin_token, member_role):
        """ID가 있는 규칙은 수정, 목록에 없는 규칙은 삭제."""
        directory_id = await _add_directory(client, admin_token, "members")
        await _set_rules(
            client, admin_token, directory_id,
            access_rules=[
                {"user_area_code": "MBR", "role_id": str(member_role.id)},
                {"user_area_code": "CMS"},
            ],
        )
        res = await client.get(f"{DIRECTORIES}/{directory_id}/access-rules", headers=auth_header(admin_token))
        member_rule = next(r for r in res.json()["access_rules"] if r["user_area_code"] == "MBR")

        res = await _set_rules(
            client, admin_token, directory_id,
            access_rules=[{
                "page_directory_access_rule_id": member_rule["page_directory_access_rule_id"],
                "user_area_code": "MBR",
                "role_id": None,
            }],
        )
        assert res.status_code == 204

        res = await client.get(f"{DIRECTORIES}/{directory_id}", headers=auth_header(admin_token))
        rules = res.json()["access_rules"]
        assert len(rules) == 1
        assert rules[0]["id"] == member_rule["page_directory_access_rule_id"]
        assert rules[0]["role_id"] is None

    async def test_unknown_user_area(self, client: AsyncClient, admin_token, root_directory):
        res = await _set_rules(client, admin_token, root_directory.id, access_rules=[{"user_area_code": "XYZ"}])
        assert res.status_code == 400
        assert res.json()["detail"]["code"] == "page-directories-access-rules-user-area-invalid"

    async def test_role_from_other_area(self, client: AsyncClient, admin_token, root_directory, member_role):
        """규칙 영역과 다른 영역의 역할은 거부."""
        res = await _set_rules(
            client, admin_token, root_directory.id,
            access_rules=[{"user_area_code": "CMS", "role_id": str(member_role.id)}],
        )
        assert res.status_code == 400
        assert res.json()["detail"]["code"] == "page-directories-access-rules-role-area-mismatch"

    async def test_duplicate_rule(self, client: AsyncClient, admin_token, root_directory):
        res = await _set_rules(
            client, admin_token, root_directory.id,
            access_rules=[{"user_area_code": "MBR"}, {"user_area_code": "MBR"}],
        )
        assert res.status_code == 400
        assert res.json()["detail"]["code"] == "page-directories-access-rules-duplicate"

    async def test_redirect_area_must_have_rule(self, client: AsyncClient, admin_token, root_directory):
        """로그인 리디렉션 영역은 규칙 중 하나의 영역이어야 함."""
        res = await _set_rules(
            client, admin_token, root_directory.id,
            user_area_code_for_login_redirect="MBR",
            access_rules=[{"user_area_code": "CMS"}],
        )
        assert res.status_code == 400
        assert res.json()["detail"]["code"] == "page-directories-access-rules-redirect-area-invalid"

    async def test_unknown_role(self, client: AsyncClient, admin_token, root_directory):
        res = await _set_rules(
            client, admin_token, root_directory.id,
            access_rules=[{"user_area_code": "MBR", "role_id": str(uuid4())}],
        )
        assert res.status_code == 404

    async def test_unknown_directory(self, client: AsyncClient, admin_token):
        res = await _set_rules(client, admin_token, uuid4(), access_rules=[])
        assert res.status_code == 404
        res = await client.get(f"{DIRECTORIES}/{uuid4()}/access-rules", headers=auth_header(admin_token))
        assert res.status_code == 404

    async def test_unrecognised_stored_action(self, client: AsyncClient, db, admin_token, root_directory):
        """저장된 위반 동작을 해석할 수 없으면 500."""
        root_directory.access_rule_violation_action_id = 99
        await db.flush()

        res = await client.get(f"{DIRECTORIES}/{root_directory.id}/access-rules", headers=auth_header(admin_token))
        assert res.status_code == 500

    async def test_requires_permission(self, client: AsyncClient, editor_token, root_directory):
        res = await _set_rules(client, editor_token, root_directory.id, access_rules=[])
        assert res.status_code == 403


class TestAccessRuleEnforcement:
    """사이트 페이지 조회 시 접근 규칙 적용 테스트."""

    async def _members_page(self, client: AsyncClient, admin_token, template) -> tuple[str, str]:
        directory_id = await _add_directory(client, admin_token, "members")
        page_id = await add_page(
            client, admin_token, directory_id, template.id, url_path="welcome", title="Welcome", publish=True
        )
        return directory_id, page_id

    async def test_no_rules_is_public(self, client: AsyncClient, admin_token, template):
        """규칙이 없으면 익명 조회 가능."""
        _, page_id = await self._members_page(client, admin_token, template)
        res = await client.get(f"{SITE_PAGES}/{page_id}")
        assert res.status_code == 200
        assert res.json()["page_route"]["full_path"] == "/members/welcome"

    async def test_anonymous_with_login_redirect(self, client: AsyncClient, admin_token, template, member_role):
        """익명 + 로그인 리디렉션 영역 설정 시 401."""
        directory_id, page_id = await self._members_page(client, admin_token, template)
        await _set_rules(
            client, admin_token, directory_id,
            violation_action=1,
            user_area_code_for_login_redirect="MBR",
            access_rules=[{"user_area_code": "MBR"}],
        )

        res = await client.get(f"{SITE_PAGES}/{page_id}")
        assert res.status_code == 401
        res = await client.get(f"{SITE_PAGES}/by-path", params={"path": "/members/welcome"})
        assert res.status_code == 401

    async def test_error_action(self, client: AsyncClient, admin_token, editor_token, template):
        """ERROR 동작은 403."""
        directory_id, page_id = await self._members_page(client, admin_token, template)
        await _set_rules(client, admin_token, directory_id, violation_action=0, access_rules=[{"user_area_code": "MBR"}])

        res = await client.get(f"{SITE_PAGES}/{page_id}")
        assert res.status_code == 403
        res = await client.get(f"{SITE_PAGES}/{page_id}", headers=auth_header(editor_token))
        assert res.status_code == 403

    async def test_not_found_action(self, client: AsyncClient, admin_token, editor_token, template):
        """NOT_FOUND 동작은 404로 페이지 존재를 숨김."""
        directory_id, page_id = await self._members_page(client, admin_token, template)
        await _set_rules(client, admin_token, directory_id, violation_action=1, access_rules=[{"user_area_code": "MBR"}])

        res = await client.get(f"{SITE_PAGES}/{page_id}", headers=auth_header(editor_token))
        assert res.status_code == 404

    async def test_matching_member_allowed(
        self, client: AsyncClient, admin_token, member_token, member_role, template
    ):
        """영역과 역할이 맞는 회원은 조회 가능."""
        directory_id, page_id = await self._members_page(client, admin_token, template)
        await _set_rules(
            client, admin_token, directory_id,
            access_rules=[{"user_area_code": "MBR", "role_id": str(member_role.id)}],
        )

        res = await client.get(f"{SITE_PAGES}/{page_id}", headers=auth_header(member_token))
        assert res.status_code == 200
        assert res.json()["title"] == "Welcome"

    async def test_role_specific_rule(
        self, client: AsyncClient, admin_token, editor_token, admin_role, template
    ):
        """역할 지정 규칙 — 같은 영역이라도 다른 역할은 거부."""
        directory_id, page_id = await self._members_page(client, admin_token, template)
        await _set_rules(
            client, admin_token, directory_id,
            access_rules=[{"user_area_code": "CMS", "role_id": str(admin_role.id)}],
        )

        res = await client.get(f"{SITE_PAGES}/{page_id}", headers=auth_header(editor_token))
        assert res.status_code == 403
        res = await client.get(f"{SITE_PAGES}/{page_id}", headers=auth_header(admin_token))
        assert res.status_code == 200

    async def test_ancestor_rules_apply(
        self, client: AsyncClient, admin_token, member_token, editor_token, template
    ):
        """상위 디렉터리의 규칙도 하위 페이지에 적용."""
        members_id = await _add_directory(client, admin_token, "members")
        vip_id = await _add_directory(client, admin_token, "vip", parent_id=members_id)
        page_id = await add_page(client, admin_token, vip_id, template.id, url_path="lounge", publish=True)
        await _set_rules(client, admin_token, members_id, access_rules=[{"user_area_code": "MBR"}])

        res = await client.get(f"{SITE_PAGES}/by-path", params={"path": "/members/vip/lounge"},
                               headers=auth_header(editor_token))
        assert res.status_code == 403
        res = await client.get(f"{SITE_PAGES}/by-path", params={"path": "/members/vip/lounge"},
                               headers=auth_header(member_token))
        assert res.status_code == 200
        assert res.json()["page_id"] == page_id
