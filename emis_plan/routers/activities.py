"""
Activities router - CRUD for plan activities
"""

from typing import Optional

from fastapi import Depends, Query
from sqlalchemy.orm import Session

from .. import config
from ..actions import build_router, get_or_404, list_documents
from ..database import get_db
from ..models import ACTIVITY_SPEC, PROCEDURE_SPEC, Activity, Procedure
from ..references import ReferenceResolver, get_resolver
from ..schemas_plans import ActivityCreate, ActivityUpdate

router = build_router(ACTIVITY_SPEC, Activity, ActivityCreate, ActivityUpdate)


@router.get("/{id}/procedures")
async def list_activity_procedures(
    id: str,
    q: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(config.DEFAULT_PAGE_LIMIT, ge=1, le=config.MAX_PAGE_LIMIT),
    db: Session = Depends(get_db),
    resolver: ReferenceResolver = Depends(get_resolver),
):
    """Procedures of an activity, in activity order"""
    activity = get_or_404(db, ACTIVITY_SPEC, Activity, id)
    return await list_documents(
        db, resolver, PROCEDURE_SPEC, Procedure,
        filters={"activity": activity.id}, q=q, page=page, limit=limit,
        sort="number,createdAt",
    )
