"""관리자 인증 라우터 — CMS 로그인, 비밀번호 변경, 초기 설정.

Admin Auth Router — Sign-in to the CMS user area, password change for
accounts that must change their password, and the initial setup form.
Common endpoints (refresh, logout, me) are in app.api.auth.
"""

import html
from typing import Annotated

from fastapi import APIRouter, Depends, Form
from fastapi.responses import HTMLResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.admin.setup import render_setup_page
from app.api.deps import get_execution_context
from app.cqs.base import ExecutionContext
from app.cqs.mediator import mediator
from app.database import get_db
from app.schemas.auth import (
    PasswordChangeRequest,
    SignInRequest,
    SignInUserWithCredentialsCommand,
    TokenResponse,
    UpdateUserPasswordByCredentialsCommand,
)
from app.schemas.user import SetupCmsCommand
from app.user_areas import CMS_USER_AREA_CODE
from app.utils.exceptions import ForbiddenError

router: APIRouter = APIRouter()


@router.post("/sign-in", response_model=TokenResponse)
async def admin_sign_in(
    data: SignInRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    context: Annotated[ExecutionContext, Depends(get_execution_context)],
) -> TokenResponse:
    """관리자 로그인 — CMS 사용자 영역 전용.

    Admin sign-in endpoint. Only accounts in the CMS user area can sign in here.
    """
    result: TokenResponse = await mediator.execute(
        db,
        SignInUserWithCredentialsCommand(
            user_area_code=CMS_USER_AREA_CODE,
            username=data.username,
            password=data.password,
            remember_user=data.remember_user,
        ),
        context,
    )
    await db.commit()
    return result


@router.put("/password", status_code=204)
async def admin_change_password(
    data: PasswordChangeRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    context: Annotated[ExecutionContext, Depends(get_execution_context)],
) -> None:
    """현재 비밀번호로 비밀번호를 변경합니다 (Change the password using the current one)."""
    await mediator.execute(
        db,
        UpdateUserPasswordByCredentialsCommand(
            user_area_code=CMS_USER_AREA_CODE,
            username=data.username,
            old_password=data.old_password,
            new_password=data.new_password,
        ),
        context,
    )
    await db.commit()


@router.post("/setup", response_class=HTMLResponse)
async def admin_setup(
    username: Annotated[str, Form()],
    password: Annotated[str, Form()],
    db: Annotated[AsyncSession, Depends(get_db)],
    email: Annotated[str | None, Form()] = None,
) -> HTMLResponse:
    """최초 관리자 계정을 생성합니다.

    Create the administrator role, the member role, the root page
    directory and the first CMS user. Only works while no CMS user exists.
    """
    try:
        await mediator.execute(
            db,
            SetupCmsCommand(username=username, password=password, email=email or None),
            ExecutionContext.elevated(),
        )
    except ForbiddenError:
        return render_setup_page('<div class="msg err">Setup already completed.</div>')
    await db.commit()

    return render_setup_page(
        f'<div class="msg ok">Done! Administrator "{html.escape(username)}" created.</div>'
    )
