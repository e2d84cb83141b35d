"""리라이트 규칙 API 테스트."""

from uuid import uuid4

from httpx import AsyncClient

from tests.conftest import add_page, auth_header

RULES = "/api/v1/admin/rewrite-rules"
SITE_PAGES = "/api/v1/app/pages"


class TestRewriteRules:

    async def test_add_and_list(self, client: AsyncClient, admin_token):
        """원본 경로는 "/a/b" 형태로 정규화."""
        res = await client.post(RULES, headers=auth_header(admin_token), json={
            "write_from": "Old-Blog/Post/",
            "write_to": " /blog/post ",
        })
        assert res.status_code == 201

        res = await client.get(RULES, headers=auth_header(admin_token))
        assert res.status_code == 200
        assert [(r["write_from"], r["write_to"]) for r in res.json()] == [("/old-blog/post", "/blog/post")]

    async def test_duplicate_source(self, client: AsyncClient, admin_token):
        """같은 원본 경로는 409."""
        await client.post(RULES, headers=auth_header(admin_token), json={"write_from": "/old", "write_to": "/new"})
        res = await client.post(RULES, headers=auth_header(admin_token), json={"write_from": "/OLD/", "write_to": "/x"})
        assert res.status_code == 409

    async def test_delete(self, client: AsyncClient, admin_token):
        res = await client.post(RULES, headers=auth_header(admin_token), json={"write_from": "/old", "write_to": "/new"})
        rule_id = res.json()["id"]

        res = await client.delete(f"{RULES}/{rule_id}", headers=auth_header(admin_token))
        assert res.status_code == 204
        res = await client.get(RULES, headers=auth_header(admin_token))
        assert res.json() == []

        res = await client.delete(f"{RULES}/{uuid4()}", headers=auth_header(admin_token))
        assert res.status_code == 404

    async def test_redirect_for_missing_page(self, client: AsyncClient, admin_token, root_directory):
        """페이지가 없는 경로는 규칙에 따라 301."""
        await client.post(RULES, headers=auth_header(admin_token), json={
            "write_from": "/old-about",
            "write_to": "/about",
        })

        res = await client.get(f"{SITE_PAGES}/by-path", params={"path": "/Old-About/"})
        assert res.status_code == 301
        assert res.headers["location"] == "/about"

        res = await client.get(f"{SITE_PAGES}/by-path", params={"path": "/other"})
        assert res.status_code == 404

    async def test_page_takes_precedence(self, client: AsyncClient, admin_token, root_directory, template):
        """경로에 페이지가 있으면 규칙보다 우선."""
        page_id = await add_page(client, admin_token, root_directory.id, template.id, url_path="about", publish=True)
        await client.post(RULES, headers=auth_header(admin_token), json={"write_from": "/about", "write_to": "/elsewhere"})

        res = await client.get(f"{SITE_PAGES}/by-path", params={"path": "/about"})
        assert res.status_code == 200
        assert res.json()["page_id"] == page_id

    async def test_requires_sign_in(self, client: AsyncClient):
        res = await client.get(RULES)
        assert res.status_code == 401

    async def test_requires_permission(self, client: AsyncClient, editor_token):
        res = await client.post(RULES, headers=auth_header(editor_token), json={"write_from": "/a", "write_to": "/b"})
        assert res.status_code == 403
