"""Mediator 테스트 — 핸들러 등록, 권한 검사, 실행 컨텍스트.

Mediator tests — handler registration, permission checks and the
elevated execution context.
"""

import pytest

from app.cqs.base import Command, ExecutionContext, Query
from app.cqs.mediator import Mediator, mediator
from app.schemas.page import AddPageCommand, GetPageRenderSummaryByIdQuery
from app.schemas.user import SetupCmsCommand
from app.utils.exceptions import ForbiddenError, UnauthorizedError


class PingQuery(Query[str]):
    value: str = "ping"


class GuardedCommand(Command):
    pass


async def _echo(db, message, context):
    return message.value


async def _guarded(db, message, context):
    return "done"


def _mediator() -> Mediator:
    m = Mediator()
    m.register(PingQuery, _echo)
    m.register(GuardedCommand, _guarded, permission="pages:create")
    return m


class TestRegistration:

    def test_duplicate_registration_rejected(self):
        """같은 메시지 타입을 두 번 등록하면 ValueError."""
        m = _mediator()
        with pytest.raises(ValueError):
            m.register(PingQuery, _echo)

    async def test_unregistered_message(self, db):
        """등록되지 않은 메시지는 LookupError."""
        with pytest.raises(LookupError):
            await Mediator().execute(db, PingQuery(), ExecutionContext.anonymous())

    def test_application_handlers_registered(self):
        """애플리케이션 메시지가 기대한 권한으로 등록됨."""
        assert mediator.get_permission(AddPageCommand) == "pages:create"
        assert mediator.is_registered(GetPageRenderSummaryByIdQuery)
        assert mediator.get_permission(GetPageRenderSummaryByIdQuery) is None
        assert mediator.get_permission(SetupCmsCommand) is None


class TestPermissions:

    async def test_open_handler_allows_anonymous(self, db):
        """권한이 없는 핸들러는 익명 호출 허용."""
        result = await _mediator().execute(db, PingQuery(value="hello"), ExecutionContext.anonymous())
        assert result == "hello"

    async def test_anonymous_caller_unauthorized(self, db):
        """익명 호출자가 권한 필요 핸들러 호출 시 401."""
        with pytest.raises(UnauthorizedError):
            await _mediator().execute(db, GuardedCommand(), ExecutionContext.anonymous())

    async def test_role_without_permission_forbidden(self, db, editor_user):
        """권한 없는 역할은 403."""
        with pytest.raises(ForbiddenError):
            await _mediator().execute(db, GuardedCommand(), ExecutionContext.for_user(editor_user))

    async def test_role_with_permission_allowed(self, db, admin_user):
        """권한 있는 역할은 실행됨."""
        result = await _mediator().execute(db, GuardedCommand(), ExecutionContext.for_user(admin_user))
        assert result == "done"

    async def test_elevated_context_skips_check(self, db):
        """elevated 컨텍스트는 권한 검사 생략."""
        result = await _mediator().execute(db, GuardedCommand(), ExecutionContext.elevated())
        assert result == "done"

    async def test_check_permission_directly(self, db, admin_user, editor_user):
        """check_permission 단독 호출."""
        m = _mediator()
        await m.check_permission(db, "pages:read", ExecutionContext.for_user(admin_user))
        with pytest.raises(ForbiddenError):
            await m.check_permission(db, "pages:read", ExecutionContext.for_user(editor_user))
