"""페이지 워크플로 API 테스트 — 추가, 초안, 게시, 삭제, 검색."""

from uuid import uuid4

from httpx import AsyncClient

from tests.conftest import add_page, auth_header

PAGES = "/api/v1/admin/pages"
SITE_PAGES = "/api/v1/app/pages"


async def _versions(client: AsyncClient, token: str, page_id: str) -> list[dict]:
    res = await client.get(f"{PAGES}/{page_id}/versions", headers=auth_header(token))
    assert res.status_code == 200
    return res.json()


class TestAddPage:
    """페이지 추가 테스트."""

    async def test_add_draft_page(self, client: AsyncClient, admin_token, root_directory, template):
        """초안으로 추가 — 사이트에는 보이지 않음."""
        page_id = await add_page(client, admin_token, root_directory.id, template.id, url_path="/About/", title="About")

        versions = await _versions(client, admin_token, page_id)
        assert [(v["version_number"], v["work_flow_status"]) for v in versions] == [(1, "draft")]

        res = await client.get(f"{PAGES}/{page_id}", headers=auth_header(admin_token))
        assert res.status_code == 200
        data = res.json()
        assert data["title"] == "About"
        assert data["publish_status"] == "unpublished"
        assert data["page_route"]["url_path"] == "about"
        assert data["page_route"]["full_path"] == "/about"

        res = await client.get(f"{SITE_PAGES}/{page_id}")
        assert res.status_code == 404

    async def test_add_published_page(self, client: AsyncClient, admin_token, root_directory, template):
        """즉시 게시 — 첫 버전이 게시 상태."""
        page_id = await add_page(
            client, admin_token, root_directory.id, template.id,
            url_path="contact", title="Contact", publish=True,
            meta_description="Get in touch", open_graph_title="Contact us",
        )

        res = await client.get(f"{SITE_PAGES}/{page_id}")
        assert res.status_code == 200
        data = res.json()
        assert data["work_flow_status"] == "published"
        assert data["publish_status"] == "published"
        assert data["publish_date"] is not None
        assert data["meta_description"] == "Get in touch"
        assert data["open_graph"]["title"] == "Contact us"
        assert data["template_file_path"] == "templates/standard.html"

    async def test_url_path_in_use(self, client: AsyncClient, admin_token, root_directory, template):
        """같은 디렉터리의 같은 경로는 거부."""
        await add_page(client, admin_token, root_directory.id, template.id, url_path="about")
        res = await client.post(PAGES, headers=auth_header(admin_token), json={
            "page_directory_id": str(root_directory.id),
            "page_template_id": str(template.id),
            "url_path": "ABOUT",
            "title": "About again",
        })
        assert res.status_code == 400
        assert res.json()["detail"] == {
            "code": "pages-url-path-in-use",
            "message": "A page already exists at this path in the selected directory.",
            "property": "url_path",
        }

    async def test_url_path_must_be_single_segment(self, client: AsyncClient, admin_token, root_directory, template):
        """경로에 '/'가 포함된 페이지는 거부 (경로로 찾을 수 없게 됨)."""
        res = await client.post(PAGES, headers=auth_header(admin_token), json={
            "page_directory_id": str(root_directory.id),
            "page_template_id": str(template.id),
            "url_path": "news/today",
            "title": "Today",
            "publish": True,
        })
        assert res.status_code == 422

        res = await client.get(PAGES, headers=auth_header(admin_token))
        assert res.json()["total"] == 0

    async def test_surrounding_slashes_are_trimmed(self, client: AsyncClient, admin_token, root_directory, template):
        page_id = await add_page(client, admin_token, root_directory.id, template.id, url_path="/Today/", publish=True)

        res = await client.get(f"{SITE_PAGES}/by-path", params={"path": "/today"})
        assert res.status_code == 200
        assert res.json()["page_id"] == page_id

    async def test_archived_template(self, client: AsyncClient, db, admin_token, root_directory, template):
        """보관된 템플릿으로는 추가 불가."""
        template.is_archived = True
        await db.flush()

        res = await client.post(PAGES, headers=auth_header(admin_token), json={
            "page_directory_id": str(root_directory.id),
            "page_template_id": str(template.id),
            "title": "Home",
        })
        assert res.status_code == 400
        assert res.json()["detail"]["code"] == "pages-template-archived"

    async def test_unknown_directory_or_template(self, client: AsyncClient, admin_token, root_directory, template):
        res = await client.post(PAGES, headers=auth_header(admin_token), json={
            "page_directory_id": str(uuid4()),
            "page_template_id": str(template.id),
            "title": "Lost",
        })
        assert res.status_code == 404

        res = await client.post(PAGES, headers=auth_header(admin_token), json={
            "page_directory_id": str(root_directory.id),
            "page_template_id": str(uuid4()),
            "title": "Lost",
        })
        assert res.status_code == 404

    async def test_requires_permission(self, client: AsyncClient, editor_token, root_directory, template):
        """pages:create 권한 없으면 403, 익명은 401."""
        body = {
            "page_directory_id": str(root_directory.id),
            "page_template_id": str(template.id),
            "title": "Nope",
        }
        res = await client.post(PAGES, headers=auth_header(editor_token), json=body)
        assert res.status_code == 403
        res = await client.post(PAGES, json=body)
        assert res.status_code == 401


class TestDrafts:
    """초안 버전 테스트."""

    async def test_draft_then_publish(self, client: AsyncClient, admin_token, root_directory, template):
        """초안 수정은 게시본에 영향 없고, 게시하면 교체."""
        page_id = await add_page(client, admin_token, root_directory.id, template.id, url_path="news", title="v1", publish=True)

        res = await client.post(f"{PAGES}/{page_id}/draft", headers=auth_header(admin_token), json={})
        assert res.status_code == 201

        res = await client.put(f"{PAGES}/{page_id}/draft", headers=auth_header(admin_token), json={
            "page_template_id": str(template.id),
            "title": "v2",
        })
        assert res.status_code == 204

        res = await client.get(f"{SITE_PAGES}/{page_id}")
        assert res.json()["title"] == "v1"
        res = await client.get(f"{PAGES}/{page_id}", headers=auth_header(admin_token))
        assert res.json()["title"] == "v2"
        assert res.json()["work_flow_status"] == "draft"

        versions = await _versions(client, admin_token, page_id)
        assert [(v["version_number"], v["work_flow_status"]) for v in versions] == [(2, "draft"), (1, "published")]

        res = await client.post(f"{PAGES}/{page_id}/publish", headers=auth_header(admin_token), json={})
        assert res.status_code == 204

        res = await client.get(f"{SITE_PAGES}/{page_id}")
        assert res.json()["title"] == "v2"
        assert res.json()["version_number"] == 2
        versions = await _versions(client, admin_token, page_id)
        assert [v["work_flow_status"] for v in versions] == ["published", "published"]

    async def test_only_one_draft(self, client: AsyncClient, admin_token, root_directory, template):
        """초안이 있으면 새 초안 생성 불가."""
        page_id = await add_page(client, admin_token, root_directory.id, template.id, publish=True)
        await client.post(f"{PAGES}/{page_id}/draft", headers=auth_header(admin_token), json={})

        res = await client.post(f"{PAGES}/{page_id}/draft", headers=auth_header(admin_token), json={})
        assert res.status_code == 400
        assert res.json()["detail"]["code"] == "pages-draft-already-exists"

    async def test_update_draft_creates_one(self, client: AsyncClient, admin_token, root_directory, template):
        """초안이 없으면 수정 시 최신 버전에서 생성."""
        page_id = await add_page(client, admin_token, root_directory.id, template.id, title="Original", publish=True)

        res = await client.put(f"{PAGES}/{page_id}/draft", headers=auth_header(admin_token), json={
            "page_template_id": str(template.id),
            "title": "Edited",
            "show_in_site_map": True,
        })
        assert res.status_code == 204

        versions = await _versions(client, admin_token, page_id)
        assert len(versions) == 2
        assert versions[0]["title"] == "Edited"
        assert versions[0]["work_flow_status"] == "draft"

    async def test_copy_from_specific_version(self, client: AsyncClient, admin_token, root_directory, template):
        """지정한 버전의 내용을 복사해 초안 생성."""
        page_id = await add_page(client, admin_token, root_directory.id, template.id, title="First", publish=True)
        await client.put(f"{PAGES}/{page_id}/draft", headers=auth_header(admin_token), json={
            "page_template_id": str(template.id),
            "title": "Second",
        })
        await client.post(f"{PAGES}/{page_id}/publish", headers=auth_header(admin_token), json={})
        first = next(v for v in await _versions(client, admin_token, page_id) if v["version_number"] == 1)

        res = await client.post(f"{PAGES}/{page_id}/draft", headers=auth_header(admin_token), json={
            "copy_from_page_version_id": first["id"],
        })
        assert res.status_code == 201

        versions = await _versions(client, admin_token, page_id)
        assert versions[0]["version_number"] == 3
        assert versions[0]["title"] == "First"

    async def test_copy_from_unknown_version(self, client: AsyncClient, admin_token, root_directory, template):
        page_id = await add_page(client, admin_token, root_directory.id, template.id, publish=True)
        res = await client.post(f"{PAGES}/{page_id}/draft", headers=auth_header(admin_token), json={
            "copy_from_page_version_id": str(uuid4()),
        })
        assert res.status_code == 404

    async def test_delete_draft(self, client: AsyncClient, admin_token, root_directory, template):
        """초안 삭제 후 게시본만 남음, 다시 삭제하면 404."""
        page_id = await add_page(client, admin_token, root_directory.id, template.id, publish=True)
        await client.post(f"{PAGES}/{page_id}/draft", headers=auth_header(admin_token), json={})

        res = await client.delete(f"{PAGES}/{page_id}/draft", headers=auth_header(admin_token))
        assert res.status_code == 204
        versions = await _versions(client, admin_token, page_id)
        assert [v["work_flow_status"] for v in versions] == ["published"]

        res = await client.delete(f"{PAGES}/{page_id}/draft", headers=auth_header(admin_token))
        assert res.status_code == 404

    async def test_cannot_delete_only_version(self, client: AsyncClient, admin_token, root_directory, template):
        """유일한 버전인 초안은 삭제 불가."""
        page_id = await add_page(client, admin_token, root_directory.id, template.id)
        res = await client.delete(f"{PAGES}/{page_id}/draft", headers=auth_header(admin_token))
        assert res.status_code == 400

    async def test_draft_with_archived_template(self, client: AsyncClient, db, admin_token, root_directory, template):
        """보관된 템플릿으로 초안 수정 불가."""
        page_id = await add_page(client, admin_token, root_directory.id, template.id, publish=True)
        template.is_archived = True
        await db.flush()

        res = await client.put(f"{PAGES}/{page_id}/draft", headers=auth_header(admin_token), json={
            "page_template_id": str(template.id),
            "title": "Edited",
        })
        assert res.status_code == 400
        assert res.json()["detail"]["code"] == "pages-template-archived"


class TestPublishing:
    """게시 및 게시 취소 테스트."""

    async def test_publish_without_draft(self, client: AsyncClient, admin_token, root_directory, template):
        """이미 게시되었고 초안이 없으면 400."""
        page_id = await add_page(client, admin_token, root_directory.id, template.id, publish=True)
        res = await client.post(f"{PAGES}/{page_id}/publish", headers=auth_header(admin_token), json={})
        assert res.status_code == 400

    async def test_unpublish_and_republish(self, client: AsyncClient, admin_token, root_directory, template):
        """게시 취소 후 사이트에서 사라지고, 재게시하면 다시 보임."""
        page_id = await add_page(client, admin_token, root_directory.id, template.id, title="Live", publish=True)

        res = await client.post(f"{PAGES}/{page_id}/unpublish", headers=auth_header(admin_token))
        assert res.status_code == 204
        res = await client.get(f"{SITE_PAGES}/{page_id}")
        assert res.status_code == 404

        res = await client.post(f"{PAGES}/{page_id}/unpublish", headers=auth_header(admin_token))
        assert res.status_code == 400

        res = await client.post(f"{PAGES}/{page_id}/publish", headers=auth_header(admin_token), json={})
        assert res.status_code == 204
        res = await client.get(f"{SITE_PAGES}/{page_id}")
        assert res.status_code == 200
        assert res.json()["title"] == "Live"

    async def test_publish_draft_page(self, client: AsyncClient, admin_token, root_directory, template):
        """초안 페이지 게시 — 게시일과 마지막 게시일 기록."""
        page_id = await add_page(client, admin_token, root_directory.id, template.id)

        res = await client.post(f"{PAGES}/{page_id}/publish", headers=auth_header(admin_token), json={})
        assert res.status_code == 204

        res = await client.get(f"{SITE_PAGES}/{page_id}")
        assert res.status_code == 200
        assert res.json()["publish_date"] is not None
        assert res.json()["last_publish_date"] is not None

    async def test_publish_requires_permission(self, client: AsyncClient, admin_token, editor_token, root_directory, template):
        page_id = await add_page(client, admin_token, root_directory.id, template.id)
        res = await client.post(f"{PAGES}/{page_id}/publish", headers=auth_header(editor_token), json={})
        assert res.status_code == 403


class TestPageManagement:
    """페이지 수정, 삭제, 검색 테스트."""

    async def test_update_tags_and_search(self, client: AsyncClient, admin_token, root_directory, template):
        """태그는 소문자로 정규화되고 태그로 검색 가능."""
        page_id = await add_page(client, admin_token, root_directory.id, template.id, url_path="a")
        await add_page(client, admin_token, root_directory.id, template.id, url_path="b")

        res = await client.put(f"{PAGES}/{page_id}", headers=auth_header(admin_token), json={
            "tags": ["News", " news ", "Featured"],
        })
        assert res.status_code == 204

        res = await client.get(PAGES, headers=auth_header(admin_token), params={"tag": "NEWS"})
        assert res.status_code == 200
        data = res.json()
        assert data["total"] == 1
        assert data["items"][0]["id"] == page_id
        assert data["items"][0]["tags"] == ["featured", "news"]

    async def test_search_by_directory(self, client: AsyncClient, admin_token, root_directory, template):
        """디렉터리 필터와 요약 정보."""
        res = await client.post("/api/v1/admin/page-directories", headers=auth_header(admin_token), json={
            "name": "Blog", "url_path": "blog",
        })
        blog_id = res.json()["id"]
        await add_page(client, admin_token, root_directory.id, template.id, url_path="home")
        blog_page_id = await add_page(client, admin_token, blog_id, template.id, url_path="post", title="Post", publish=True)
        await client.post(f"{PAGES}/{blog_page_id}/draft", headers=auth_header(admin_token), json={})

        res = await client.get(PAGES, headers=auth_header(admin_token), params={"page_directory_id": blog_id})
        data = res.json()
        assert data["total"] == 1
        item = data["items"][0]
        assert item["full_path"] == "/blog/post"
        assert item["title"] == "Post"
        assert item["has_draft"] is True
        assert item["publish_status"] == "published"

        res = await client.get(PAGES, headers=auth_header(admin_token))
        assert res.json()["total"] == 2

    async def test_delete_page_frees_path(self, client: AsyncClient, admin_token, root_directory, template):
        """삭제된 페이지는 조회되지 않고 경로를 재사용할 수 있음."""
        page_id = await add_page(client, admin_token, root_directory.id, template.id, url_path="old", publish=True)

        res = await client.delete(f"{PAGES}/{page_id}", headers=auth_header(admin_token))
        assert res.status_code == 204

        res = await client.get(f"{SITE_PAGES}/{page_id}")
        assert res.status_code == 404
        res = await client.get(f"{PAGES}/{page_id}", headers=auth_header(admin_token))
        assert res.status_code == 404
        res = await client.get(f"{PAGES}/{page_id}/versions", headers=auth_header(admin_token))
        assert res.status_code == 404
        res = await client.get(PAGES, headers=auth_header(admin_token))
        assert res.json()["total"] == 0

        await add_page(client, admin_token, root_directory.id, template.id, url_path="old")

        res = await client.delete(f"{PAGES}/{page_id}", headers=auth_header(admin_token))
        assert res.status_code == 404

    async def test_list_requires_permission(self, client: AsyncClient, editor_token):
        res = await client.get(PAGES, headers=auth_header(editor_token))
        assert res.status_code == 403
