"""
Plans router - CRUD for emergency response plans

A plan may be scoped to an incident type, an administrative boundary and an
owning party. Missing scope means the plan applies everywhere.
"""

from typing import Optional

from fastapi import Depends, Query
from sqlalchemy.orm import Session

from .. import config
from ..actions import build_router, get_or_404, list_documents
from ..database import get_db
from ..models import ACTIVITY_SPEC, PLAN_SPEC, Activity, Plan
from ..references import ReferenceResolver, get_resolver
from ..schemas_plans import PlanCreate, PlanUpdate

router = build_router(PLAN_SPEC, Plan, PlanCreate, PlanUpdate)


@router.get("/{id}/activities")
async def list_plan_activities(
    id: str,
    q: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(config.DEFAULT_PAGE_LIMIT, ge=1, le=config.MAX_PAGE_LIMIT),
    db: Session = Depends(get_db),
    resolver: ReferenceResolver = Depends(get_resolver),
):
    """Activities of a plan, in plan order"""
    plan = get_or_404(db, PLAN_SPEC, Plan, id)
    return await list_documents(
        db, resolver, ACTIVITY_SPEC, Activity,
        filters={"plan": plan.id}, q=q, page=page, limit=limit,
        sort="number,createdAt",
    )
