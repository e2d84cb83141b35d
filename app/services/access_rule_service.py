"""디렉터리 접근 규칙 서비스 — 규칙 집합 조회/갱신 및 적용.

Access Rule Service — reading and updating a directory's access rule set
and enforcing the rules of a directory chain for a caller.

Enforcement walks from the page's directory up to the root. Every
directory that has rules requires the caller to match at least one of
them: same user area, and the same role when the rule names one.
"""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.cqs.base import ExecutionContext
from app.models.page_directory import (
    AccessRuleViolationAction,
    PageDirectory,
    PageDirectoryAccessRule,
)
from app.models.user import Role
from app.repositories.page_directory_repository import page_directory_repository
from app.repositories.role_repository import role_repository
from app.schemas.page_directory import (
    EnforcePageDirectoryAccessRulesQuery,
    GetUpdatePageDirectoryAccessRuleSetCommandByIdQuery,
    UpdateAccessRuleItem,
    UpdatePageDirectoryAccessRuleSetCommand,
)
from app.user_areas import user_area_repository
from app.utils import validation_errors
from app.utils.exceptions import (
    ForbiddenError,
    InvariantViolationError,
    NotFoundError,
    UnauthorizedError,
)

logger = logging.getLogger(__name__)


def parse_violation_action(value: int, page_directory_id: UUID) -> AccessRuleViolationAction:
    """저장된 위반 동작 id를 열거형으로 변환합니다.

    Raises:
        InvariantViolationError: 알 수 없는 값 (Value maps to no known action)
    """
    try:
        return AccessRuleViolationAction(value)
    except ValueError:
        raise InvariantViolationError(
            f"AccessRuleViolationAction {value!r} not recognised on page directory {page_directory_id}"
        )


def rule_matches(rule: PageDirectoryAccessRule, context: ExecutionContext) -> bool:
    """호출자가 규칙을 만족하는지 확인합니다."""
    if context.user_area_code is None or rule.user_area_code != context.user_area_code:
        return False
    return rule.role_id is None or rule.role_id == context.role_id


def find_violated_directory(
    chain: list[PageDirectory],
    context: ExecutionContext,
) -> PageDirectory | None:
    """규칙을 위반한 첫 디렉터리를 반환합니다 (가장 가까운 디렉터리부터).

    Return the first directory, nearest first, whose rules the caller
    does not satisfy, or None when access is allowed.
    """
    if context.is_elevated:
        return None
    for directory in chain:
        rules: list[PageDirectoryAccessRule] = list(directory.access_rules)
        if rules and not any(rule_matches(rule, context) for rule in rules):
            return directory
    return None


class AccessRuleService:
    """디렉터리 접근 규칙 서비스."""

    async def enforce(
        self,
        db: AsyncSession,
        query: EnforcePageDirectoryAccessRulesQuery,
        context: ExecutionContext,
    ) -> None:
        """디렉터리 체인의 접근 규칙을 적용합니다.

        Enforce the access rules of the directory and its ancestors.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            query: 페이지의 디렉터리 ID를 담은 쿼리 (Directory of the requested page)
            context: 실행 컨텍스트 (Caller)

        Raises:
            UnauthorizedError: 익명 호출자 + 로그인 리디렉션 영역 설정
                               (Anonymous caller and a login redirect area is set)
            NotFoundError: 위반 동작이 NOT_FOUND (Violation action NOT_FOUND)
            ForbiddenError: 위반 동작이 ERROR (Violation action ERROR)
            InvariantViolationError: 저장된 위반 동작을 해석할 수 없음 (Unparseable action)
        """
        chain: list[PageDirectory] = await page_directory_repository.get_chain(db, query.page_directory_id)
        violated: PageDirectory | None = find_violated_directory(chain, context)
        if violated is None:
            return

        action: AccessRuleViolationAction = parse_violation_action(
            violated.access_rule_violation_action_id, violated.id
        )
        logger.debug("Access rules of directory %s denied user %s", violated.id, context.user_id)

        if context.is_anonymous and violated.user_area_code_for_login_redirect:
            raise UnauthorizedError(f"Sign in to {violated.user_area_code_for_login_redirect} to view this page")
        if action == AccessRuleViolationAction.NOT_FOUND:
            raise NotFoundError("Page not found")
        raise ForbiddenError("You do not have permission to view this page")

    async def get_update_command(
        self,
        db: AsyncSession,
        query: GetUpdatePageDirectoryAccessRuleSetCommandByIdQuery,
        context: ExecutionContext,
    ) -> UpdatePageDirectoryAccessRuleSetCommand | None:
        """저장된 규칙으로 채운 갱신 커맨드를 반환합니다.

        Build an UpdatePageDirectoryAccessRuleSetCommand pre-filled from
        storage, or None when the directory does not exist.

        Raises:
            InvariantViolationError: 저장된 위반 동작을 해석할 수 없음 (Unparseable action)
        """
        directory: PageDirectory | None = await page_directory_repository.get_by_id(db, query.page_directory_id)
        if directory is None:
            return None

        return UpdatePageDirectoryAccessRuleSetCommand(
            page_directory_id=directory.id,
            violation_action=parse_violation_action(directory.access_rule_violation_action_id, directory.id),
            user_area_code_for_login_redirect=directory.user_area_code_for_login_redirect,
            access_rules=[
                UpdateAccessRuleItem(
                    page_directory_access_rule_id=rule.id,
                    user_area_code=rule.user_area_code,
                    role_id=rule.role_id,
                )
                for rule in directory.access_rules
            ],
        )

    async def update_rule_set(
        self,
        db: AsyncSession,
        command: UpdatePageDirectoryAccessRuleSetCommand,
        context: ExecutionContext,
    ) -> None:
        """디렉터리 접근 규칙 집합을 갱신합니다.

        Rules with an id are updated, rules without an id are added and
        stored rules missing from the command are deleted.

        Raises:
            NotFoundError: 디렉터리 또는 규칙/역할 없음 (Unknown directory, rule or role)
            ValidationError: 정의되지 않은 영역, 영역 불일치 역할, 중복 규칙,
                             규칙에 없는 로그인 리디렉션 영역
                             (Unknown area, role from another area, duplicate rule,
                             redirect area not among the rules)
        """
        directory: PageDirectory | None = await page_directory_repository.get_by_id(db, command.page_directory_id)
        if directory is None:
            raise NotFoundError("Page directory not found")

        await self._validate(db, command)

        stored: dict[UUID, PageDirectoryAccessRule] = {r.id: r for r in directory.access_rules}
        kept_ids: set[UUID] = set()
        for item in command.access_rules:
            if item.page_directory_access_rule_id is None:
                directory.access_rules.append(
                    PageDirectoryAccessRule(user_area_code=item.user_area_code, role_id=item.role_id)
                )
                continue
            rule: PageDirectoryAccessRule | None = stored.get(item.page_directory_access_rule_id)
            if rule is None:
                raise NotFoundError(f"Access rule {item.page_directory_access_rule_id} not found on this directory")
            rule.user_area_code = item.user_area_code
            rule.role_id = item.role_id
            kept_ids.add(rule.id)

        for rule_id, rule in stored.items():
            if rule_id not in kept_ids:
                directory.access_rules.remove(rule)

        directory.access_rule_violation_action_id = int(command.violation_action)
        directory.user_area_code_for_login_redirect = command.user_area_code_for_login_redirect
        await db.flush()
        logger.info("Access rules updated for page directory %s", directory.id)

    async def _validate(self, db: AsyncSession, command: UpdatePageDirectoryAccessRuleSetCommand) -> None:
        roles: dict[UUID, Role] = await role_repository.get_by_ids(
            db, [r.role_id for r in command.access_rules if r.role_id is not None]
        )
        seen: set[tuple[str, UUID | None]] = set()
        for item in command.access_rules:
            if not user_area_repository.exists(item.user_area_code):
                raise validation_errors.build(validation_errors.ACCESS_RULE_USER_AREA_INVALID, "user_area_code")
            if item.role_id is not None:
                role: Role | None = roles.get(item.role_id)
                if role is None:
                    raise NotFoundError(f"Role {item.role_id} not found")
                if role.user_area_code != item.user_area_code:
                    raise validation_errors.build(validation_errors.ACCESS_RULE_ROLE_AREA_MISMATCH, "role_id")
            key: tuple[str, UUID | None] = (item.user_area_code, item.role_id)
            if key in seen:
                raise validation_errors.build(validation_errors.ACCESS_RULE_DUPLICATE, "access_rules")
            seen.add(key)

        redirect: str | None = command.user_area_code_for_login_redirect
        if redirect is not None and redirect not in {r.user_area_code for r in command.access_rules}:
            raise validation_errors.build(
                validation_errors.ACCESS_RULE_REDIRECT_AREA_INVALID, "user_area_code_for_login_redirect"
            )


# 싱글턴 인스턴스 — Singleton instance
access_rule_service: AccessRuleService = AccessRuleService()
