"""페이지 렌더 요약 테스트 — 게시 상태 필터, 미리보기 권한, 경로 조회."""

from datetime import timedelta
from uuid import UUID, uuid4

import pytest
from httpx import AsyncClient

from app.cqs.base import ExecutionContext
from app.cqs.mediator import mediator
from app.schemas.page import GetPageRenderSummariesByIdRangeQuery, PublishStatusQuery
from app.utils.exceptions import UnauthorizedError
from app.utils.timezone import utc_now
from tests.conftest import add_page, auth_header

PAGES = "/api/v1/admin/pages"
SITE_PAGES = "/api/v1/app/pages"


async def _page_with_draft(client: AsyncClient, token: str, directory_id, template_id) -> tuple[str, dict[int, str]]:
    """게시된 v1과 초안 v2를 가진 페이지를 만듭니다."""
    page_id = await add_page(client, token, directory_id, template_id, url_path="doc", title="v1", publish=True)
    await client.put(f"{PAGES}/{page_id}/draft", headers=auth_header(token), json={
        "page_template_id": str(template_id),
        "title": "v2",
    })
    res = await client.get(f"{PAGES}/{page_id}/versions", headers=auth_header(token))
    return page_id, {v["version_number"]: v["id"] for v in res.json()}


async def _render(client: AsyncClient, token: str | None, page_id: str, **params):
    headers = auth_header(token) if token else {}
    return await client.get(f"{SITE_PAGES}/{page_id}", headers=headers, params=params)


class TestPublishStatusFilter:
    """게시 상태 필터별 버전 해석."""

    @pytest.mark.parametrize(
        ("publish_status", "expected_title"),
        [
            ("published", "v1"),
            ("draft", "v2"),
            ("latest", "v2"),
            ("prefer_published", "v1"),
        ],
    )
    async def test_page_with_published_and_draft(
        self, client: AsyncClient, admin_token, root_directory, template, publish_status, expected_title
    ):
        page_id, _ = await _page_with_draft(client, admin_token, root_directory.id, template.id)

        res = await _render(client, admin_token, page_id, publish_status=publish_status)
        assert res.status_code == 200
        assert res.json()["title"] == expected_title

    @pytest.mark.parametrize(
        ("publish_status", "expected_status"),
        [
            ("published", 404),
            ("draft", 200),
            ("latest", 200),
            ("prefer_published", 200),
        ],
    )
    async def test_unpublished_page(
        self, client: AsyncClient, admin_token, root_directory, template, publish_status, expected_status
    ):
        """게시되지 않은 페이지 — 게시본 우선은 최신으로 대체."""
        page_id = await add_page(client, admin_token, root_directory.id, template.id, title="Draft only")

        res = await _render(client, admin_token, page_id, publish_status=publish_status)
        assert res.status_code == expected_status

    async def test_specific_version(self, client: AsyncClient, admin_token, root_directory, template):
        """버전 ID를 주면 필터와 무관하게 해당 버전."""
        page_id, versions = await _page_with_draft(client, admin_token, root_directory.id, template.id)

        res = await _render(client, admin_token, page_id, publish_status="specific_version", version_id=versions[2])
        assert res.json()["title"] == "v2"
        res = await _render(client, admin_token, page_id, publish_status="latest", version_id=versions[1])
        assert res.json()["title"] == "v1"
        assert res.json()["version_number"] == 1

        res = await _render(client, admin_token, page_id, publish_status="specific_version", version_id=str(uuid4()))
        assert res.status_code == 404

    async def test_no_draft(self, client: AsyncClient, admin_token, root_directory, template):
        """초안이 없으면 DRAFT 필터는 해석되지 않음."""
        page_id = await add_page(client, admin_token, root_directory.id, template.id, publish=True)
        res = await _render(client, admin_token, page_id, publish_status="draft")
        assert res.status_code == 404

    async def test_future_publish_date(self, client: AsyncClient, admin_token, root_directory, template):
        """게시일 전에는 공개되지 않음."""
        publish_date = (utc_now() + timedelta(days=1)).isoformat()
        page_id = await add_page(
            client, admin_token, root_directory.id, template.id, title="Soon", publish=True, publish_date=publish_date
        )

        res = await _render(client, None, page_id)
        assert res.status_code == 404
        res = await _render(client, admin_token, page_id, publish_status="prefer_published")
        assert res.status_code == 200
        assert res.json()["title"] == "Soon"

    async def test_past_publish_date(self, client: AsyncClient, admin_token, root_directory, template):
        publish_date = (utc_now() - timedelta(days=1)).isoformat()
        page_id = await add_page(
            client, admin_token, root_directory.id, template.id, publish=True, publish_date=publish_date
        )
        res = await _render(client, None, page_id)
        assert res.status_code == 200

    @pytest.mark.parametrize("publish_status", ["draft", "latest", "prefer_published", "published", None])
    async def test_archived_template_hides_page(
        self, client: AsyncClient, admin_token, root_directory, template, publish_status
    ):
        """보관된 템플릿을 쓰는 버전은 어떤 필터로도 해석되지 않음 (None은 버전 ID 지정)."""
        page_id, versions = await _page_with_draft(client, admin_token, root_directory.id, template.id)
        res = await client.post(f"/api/v1/admin/page-templates/{template.id}/archive", headers=auth_header(admin_token))
        assert res.status_code == 204

        params = {"publish_status": publish_status} if publish_status else {"version_id": versions[1]}
        res = await _render(client, admin_token, page_id, **params)
        assert res.status_code == 404

    @pytest.mark.parametrize("publish_status", ["draft", "latest", "prefer_published", "published", None])
    async def test_deleted_page_hidden(
        self, client: AsyncClient, admin_token, root_directory, template, publish_status
    ):
        """삭제된 페이지는 어떤 필터로도 해석되지 않음 (None은 버전 ID 지정)."""
        page_id, versions = await _page_with_draft(client, admin_token, root_directory.id, template.id)
        res = await client.delete(f"{PAGES}/{page_id}", headers=auth_header(admin_token))
        assert res.status_code == 204

        params = {"publish_status": publish_status} if publish_status else {"version_id": versions[1]}
        res = await _render(client, admin_token, page_id, **params)
        assert res.status_code == 404

    async def test_unknown_page(self, client: AsyncClient):
        res = await _render(client, None, str(uuid4()))
        assert res.status_code == 404


class TestPreviewPermission:
    """게시본 외 조회는 pages:read 권한 필요."""

    async def test_anonymous_preview(self, client: AsyncClient, admin_token, root_directory, template):
        page_id, versions = await _page_with_draft(client, admin_token, root_directory.id, template.id)

        res = await _render(client, None, page_id, publish_status="draft")
        assert res.status_code == 401
        res = await _render(client, None, page_id, version_id=versions[1])
        assert res.status_code == 401

    async def test_editor_preview(self, client: AsyncClient, admin_token, editor_token, root_directory, template):
        """권한 없는 CMS 사용자는 403, 게시본은 조회 가능."""
        page_id, _ = await _page_with_draft(client, admin_token, root_directory.id, template.id)

        res = await _render(client, editor_token, page_id, publish_status="latest")
        assert res.status_code == 403
        res = await _render(client, editor_token, page_id)
        assert res.status_code == 200

    async def test_member_preview(self, client: AsyncClient, admin_token, member_token, root_directory, template):
        page_id, _ = await _page_with_draft(client, admin_token, root_directory.id, template.id)
        res = await _render(client, member_token, page_id, publish_status="prefer_published")
        assert res.status_code == 403


class TestByPath:
    """전체 경로로 조회."""

    async def _blog(self, client: AsyncClient, token: str) -> str:
        res = await client.post("/api/v1/admin/page-directories", headers=auth_header(token), json={
            "name": "Blog", "url_path": "blog",
        })
        return res.json()["id"]

    async def test_page_in_directory(self, client: AsyncClient, admin_token, root_directory, template):
        blog_id = await self._blog(client, admin_token)
        page_id = await add_page(client, admin_token, blog_id, template.id, url_path="hello", title="Hello", publish=True)

        for path in ("/blog/hello", "blog/hello", "/Blog/Hello/"):
            res = await client.get(f"{SITE_PAGES}/by-path", params={"path": path})
            assert res.status_code == 200, path
            assert res.json()["page_id"] == page_id
            assert res.json()["page_route"]["full_path"] == "/blog/hello"

    async def test_directory_index_page(self, client: AsyncClient, admin_token, root_directory, template):
        """디렉터리 경로는 인덱스 페이지("" 경로)로 해석."""
        blog_id = await self._blog(client, admin_token)
        index_id = await add_page(client, admin_token, blog_id, template.id, url_path="", title="Blog", publish=True)
        home_id = await add_page(client, admin_token, root_directory.id, template.id, url_path="", title="Home", publish=True)

        res = await client.get(f"{SITE_PAGES}/by-path", params={"path": "/blog"})
        assert res.json()["page_id"] == index_id
        assert res.json()["page_route"]["full_path"] == "/blog"

        res = await client.get(f"{SITE_PAGES}/by-path", params={"path": "/"})
        assert res.json()["page_id"] == home_id
        assert res.json()["page_route"]["full_path"] == "/"

    async def test_page_preferred_over_directory_index(self, client: AsyncClient, admin_token, root_directory, template):
        """같은 경로면 페이지가 디렉터리 인덱스보다 우선."""
        blog_id = await self._blog(client, admin_token)
        await add_page(client, admin_token, blog_id, template.id, url_path="", title="Blog index", publish=True)
        page_id = await add_page(client, admin_token, root_directory.id, template.id, url_path="blog", title="Blog page", publish=True)

        res = await client.get(f"{SITE_PAGES}/by-path", params={"path": "/blog"})
        assert res.json()["page_id"] == page_id

    async def test_missing_path(self, client: AsyncClient, admin_token, root_directory, template):
        await self._blog(client, admin_token)
        for path in ("/blog/missing", "/nowhere/at/all", "/blog"):
            res = await client.get(f"{SITE_PAGES}/by-path", params={"path": path})
            assert res.status_code == 404, path

    async def test_draft_by_path(self, client: AsyncClient, admin_token, root_directory, template):
        """경로 조회도 미리보기 필터 지원."""
        await _page_with_draft(client, admin_token, root_directory.id, template.id)

        res = await client.get(f"{SITE_PAGES}/by-path", params={"path": "/doc", "publish_status": "draft"},
                               headers=auth_header(admin_token))
        assert res.json()["title"] == "v2"
        res = await client.get(f"{SITE_PAGES}/by-path", params={"path": "/doc", "publish_status": "draft"})
        assert res.status_code == 401


class TestIdRange:
    """여러 페이지 렌더 요약."""

    async def test_unresolved_pages_left_out(self, client: AsyncClient, db, admin_token, root_directory, template):
        published_id = await add_page(client, admin_token, root_directory.id, template.id, url_path="a", publish=True)
        draft_id = await add_page(client, admin_token, root_directory.id, template.id, url_path="b")

        result = await mediator.execute(
            db,
            GetPageRenderSummariesByIdRangeQuery(page_ids=[UUID(published_id), UUID(draft_id), uuid4()]),
            ExecutionContext.anonymous(),
        )
        assert set(result) == {UUID(published_id)}
        assert result[UUID(published_id)].page_route.full_path == "/a"

    async def test_preview_requires_sign_in(self, db, root_directory):
        with pytest.raises(UnauthorizedError):
            await mediator.execute(
                db,
                GetPageRenderSummariesByIdRangeQuery(page_ids=[uuid4()], publish_status=PublishStatusQuery.LATEST),
                ExecutionContext.anonymous(),
            )
