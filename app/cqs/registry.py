"""도메인 핸들러 등록.

Wires every command and query handler into a mediator together with the
permission code its callers need. Handlers registered without a
permission are reachable anonymously; they guard themselves where needed
(sign-in, account recovery, setup, page rendering).
"""

from app.cqs.mediator import Mediator, mediator
from app.schemas.auth import (
    CompleteUserAccountRecoveryCommand,
    CompleteUserAccountVerificationCommand,
    GetCurrentUserQuery,
    HasExceededMaxAuthenticationAttemptsQuery,
    InitiateUserAccountRecoveryViaEmailCommand,
    InitiateUserAccountVerificationViaEmailCommand,
    InvalidateAuthorizedTaskBatchCommand,
    RefreshTokensCommand,
    SignInUserWithCredentialsCommand,
    SignOutCommand,
    UpdateUserPasswordByCredentialsCommand,
    ValidateAuthorizedTaskTokenQuery,
    ValidateUserCredentialsQuery,
)
from app.schemas.page import (
    AddPageCommand,
    AddPageDraftVersionCommand,
    DeletePageCommand,
    DeletePageDraftVersionCommand,
    GetPageRenderSummariesByIdRangeQuery,
    GetPageRenderSummaryByIdQuery,
    GetPageRenderSummaryByPathQuery,
    GetPageVersionSummariesByPageIdQuery,
    PublishPageCommand,
    SearchPageSummariesQuery,
    UnpublishPageCommand,
    UpdatePageCommand,
    UpdatePageDraftVersionCommand,
)
from app.schemas.page_directory import (
    AddPageDirectoryCommand,
    DeletePageDirectoryCommand,
    EnforcePageDirectoryAccessRulesQuery,
    GetAllPageDirectoriesQuery,
    GetPageDirectoryByIdQuery,
    GetUpdatePageDirectoryAccessRuleSetCommandByIdQuery,
    UpdatePageDirectoryAccessRuleSetCommand,
)
from app.schemas.page_template import (
    AddPageTemplateCommand,
    ArchivePageTemplateCommand,
    GetAllPageTemplatesQuery,
    UnarchivePageTemplateCommand,
)
from app.schemas.rewrite_rule import (
    AddRewriteRuleCommand,
    DeleteRewriteRuleCommand,
    GetAllRewriteRulesQuery,
    GetRewriteRuleByPathQuery,
)
from app.schemas.user import (
    AddRoleCommand,
    AddUserCommand,
    GetAllPermissionsQuery,
    GetAllRolesQuery,
    GetUserByIdQuery,
    SearchUsersQuery,
    SetupCmsCommand,
)
from app.services.access_rule_service import access_rule_service
from app.services.auth_service import auth_service
from app.services.authentication_service import authentication_service
from app.services.authorized_task_service import authorized_task_service
from app.services.page_directory_service import page_directory_service
from app.services.page_render_service import page_render_service
from app.services.page_service import page_service
from app.services.page_template_service import page_template_service
from app.services.rewrite_rule_service import rewrite_rule_service
from app.services.role_service import role_service
from app.services.user_service import user_service


def register_handlers(target: Mediator) -> None:
    """모든 도메인 핸들러를 mediator에 등록합니다.

    Args:
        target: 등록 대상 mediator (Mediator to register into)
    """
    # 인증 — Authentication (anonymous or self-service)
    target.register(HasExceededMaxAuthenticationAttemptsQuery, authentication_service.has_exceeded_max_attempts)
    target.register(ValidateUserCredentialsQuery, authentication_service.validate_user_credentials)
    target.register(SignInUserWithCredentialsCommand, auth_service.sign_in_with_credentials)
    target.register(RefreshTokensCommand, auth_service.refresh_tokens)
    target.register(SignOutCommand, auth_service.sign_out)
    target.register(GetCurrentUserQuery, auth_service.get_current_user)
    target.register(UpdateUserPasswordByCredentialsCommand, auth_service.update_password_by_credentials)

    # 인가 작업 — Authorized tasks
    target.register(InvalidateAuthorizedTaskBatchCommand, authorized_task_service.invalidate_batch)
    target.register(ValidateAuthorizedTaskTokenQuery, authorized_task_service.validate_token)
    target.register(InitiateUserAccountRecoveryViaEmailCommand, authorized_task_service.initiate_account_recovery)
    target.register(CompleteUserAccountRecoveryCommand, authorized_task_service.complete_account_recovery)
    target.register(
        InitiateUserAccountVerificationViaEmailCommand,
        authorized_task_service.initiate_account_verification,
        permission="users:update",
    )
    target.register(CompleteUserAccountVerificationCommand, authorized_task_service.complete_account_verification)

    # 사용자 및 역할 — Users and roles
    target.register(SetupCmsCommand, user_service.setup_cms)
    target.register(AddUserCommand, user_service.add_user, permission="users:create")
    target.register(GetUserByIdQuery, user_service.get_user_by_id, permission="users:read")
    target.register(SearchUsersQuery, user_service.search_users, permission="users:read")
    target.register(AddRoleCommand, role_service.add_role, permission="roles:create")
    target.register(GetAllRolesQuery, role_service.get_all_roles, permission="roles:read")
    target.register(GetAllPermissionsQuery, role_service.get_all_permissions, permission="roles:read")

    # 페이지 템플릿 — Page templates
    target.register(AddPageTemplateCommand, page_template_service.add, permission="page_templates:create")
    target.register(GetAllPageTemplatesQuery, page_template_service.get_all, permission="page_templates:read")
    target.register(ArchivePageTemplateCommand, page_template_service.archive, permission="page_templates:update")
    target.register(UnarchivePageTemplateCommand, page_template_service.unarchive, permission="page_templates:update")

    # 페이지 디렉터리 — Page directories
    target.register(AddPageDirectoryCommand, page_directory_service.add, permission="page_directories:create")
    target.register(GetPageDirectoryByIdQuery, page_directory_service.get_by_id, permission="page_directories:read")
    target.register(GetAllPageDirectoriesQuery, page_directory_service.get_all, permission="page_directories:read")
    target.register(DeletePageDirectoryCommand, page_directory_service.delete, permission="page_directories:delete")
    target.register(
        GetUpdatePageDirectoryAccessRuleSetCommandByIdQuery,
        access_rule_service.get_update_command,
        permission="page_directories:read",
    )
    target.register(
        UpdatePageDirectoryAccessRuleSetCommand,
        access_rule_service.update_rule_set,
        permission="page_directories:update",
    )
    target.register(EnforcePageDirectoryAccessRulesQuery, access_rule_service.enforce)

    # 페이지 — Pages
    target.register(AddPageCommand, page_service.add_page, permission="pages:create")
    target.register(AddPageDraftVersionCommand, page_service.add_draft_version, permission="pages:update")
    target.register(UpdatePageDraftVersionCommand, page_service.update_draft_version, permission="pages:update")
    target.register(DeletePageDraftVersionCommand, page_service.delete_draft_version, permission="pages:update")
    target.register(PublishPageCommand, page_service.publish, permission="pages:publish")
    target.register(UnpublishPageCommand, page_service.unpublish, permission="pages:publish")
    target.register(UpdatePageCommand, page_service.update_page, permission="pages:update")
    target.register(DeletePageCommand, page_service.delete_page, permission="pages:delete")
    target.register(SearchPageSummariesQuery, page_service.search, permission="pages:read")
    target.register(
        GetPageVersionSummariesByPageIdQuery, page_service.get_version_summaries, permission="pages:read"
    )

    # 페이지 렌더 — Page rendering (previews check "pages:read" themselves)
    target.register(GetPageRenderSummaryByIdQuery, page_render_service.get_by_id)
    target.register(GetPageRenderSummariesByIdRangeQuery, page_render_service.get_by_id_range)
    target.register(GetPageRenderSummaryByPathQuery, page_render_service.get_by_path)

    # 리라이트 규칙 — Rewrite rules
    target.register(AddRewriteRuleCommand, rewrite_rule_service.add, permission="rewrite_rules:create")
    target.register(DeleteRewriteRuleCommand, rewrite_rule_service.delete, permission="rewrite_rules:delete")
    target.register(GetAllRewriteRulesQuery, rewrite_rule_service.get_all, permission="rewrite_rules:read")
    target.register(GetRewriteRuleByPathQuery, rewrite_rule_service.get_by_path)


# 애플리케이션 mediator 등록 — Register into the application mediator once on import
register_handlers(mediator)
