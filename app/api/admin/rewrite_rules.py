"""관리자 리라이트 규칙 라우터.

Admin Rewrite Rule Router — list, add and delete redirects for paths that
no longer resolve to a page.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_execution_context
from app.cqs.base import ExecutionContext
from app.cqs.mediator import mediator
from app.database import get_db
from app.schemas.common import IdResponse
from app.schemas.rewrite_rule import (
    AddRewriteRuleCommand,
    DeleteRewriteRuleCommand,
    GetAllRewriteRulesQuery,
    RewriteRuleResponse,
)

router: APIRouter = APIRouter()


@router.get("", response_model=list[RewriteRuleResponse])
async def list_rewrite_rules(
    db: Annotated[AsyncSession, Depends(get_db)],
    context: Annotated[ExecutionContext, Depends(get_execution_context)],
) -> list[RewriteRuleResponse]:
    return await mediator.execute(db, GetAllRewriteRulesQuery(), context)


@router.post("", response_model=IdResponse, status_code=201)
async def add_rewrite_rule(
    data: AddRewriteRuleCommand,
    db: Annotated[AsyncSession, Depends(get_db)],
    context: Annotated[ExecutionContext, Depends(get_execution_context)],
) -> IdResponse:
    """리라이트 규칙을 추가합니다 (Add a redirect from write_from to write_to)."""
    rule_id: UUID = await mediator.execute(db, data, context)
    await db.commit()
    return IdResponse(id=str(rule_id))


@router.delete("/{rewrite_rule_id}", status_code=204)
async def delete_rewrite_rule(
    rewrite_rule_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    context: Annotated[ExecutionContext, Depends(get_execution_context)],
) -> None:
    await mediator.execute(db, DeleteRewriteRuleCommand(rewrite_rule_id=rewrite_rule_id), context)
    await db.commit()
