"""
Generic REST actions

build_router() turns an EntitySpec + SQLAlchemy model + payload models into
the conventional endpoint set:

    GET    /<collection>          list (search, filters, sort, pagination)
    GET    /<collection>/schema   JSON schema
    GET    /<collection>/{id}     single document, references populated
    POST   /<collection>          create
    PUT    /<collection>/{id}     partial update (PATCH is the same)
    DELETE /<collection>/{id}     soft delete

Writes run: pre_validate hook -> field validation -> reference existence ->
tags -> commit. Nothing is persisted if any step fails.
"""

import logging
import math
from datetime import datetime, timezone
from typing import Dict, Optional, Type

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import or_
from sqlalchemy.orm import Session

from . import config
from .database import get_db
from .errors import PlanError, ValidationError
from .references import ReferenceResolver, get_resolver
from .schema_spec import (
    DATETIME, INTEGER, EntitySpec, json_schema, serialize, to_camel, validate_fields,
)

logger = logging.getLogger(__name__)

# Query parameters handled by list_documents itself, never treated as filters
RESERVED_PARAMS = {"q", "page", "limit", "sort", "include_deleted", "includeDeleted"}

_datetime = TypeAdapter(datetime)


def _utcnow():
    return datetime.now(timezone.utc)


# =============================================================================
# READS
# =============================================================================

def _filters_from_params(spec: EntitySpec, params) -> Dict[str, object]:
    """Equality filters on indexed fields, by wire or attribute name."""
    filters = {}
    errors = {}
    for key, value in params.items():
        if key in RESERVED_PARAMS:
            continue
        field = spec.get(key)
        if field is None or not field.index:
            continue
        if field.type == INTEGER:
            try:
                value = int(value)
            except ValueError:
                errors[field.key] = f"`{value}` is not a valid integer"
                continue
        elif field.type == DATETIME:
            try:
                value = _datetime.validate_python(value)
            except PydanticValidationError:
                errors[field.key] = f"`{value}` is not a valid date"
                continue
        filters[field.name] = value
    if errors:
        raise ValidationError(errors)
    return filters


def _order_by(model, spec: EntitySpec, sort: Optional[str]):
    sortable = {f.key: f.name for f in spec.fields}
    sortable.update({"createdAt": "created_at", "updatedAt": "updated_at"})

    clauses = []
    for token in (sort or "-updatedAt").split(","):
        token = token.strip()
        if not token:
            continue
        descending = token.startswith("-")
        key = token.lstrip("-+")
        name = sortable.get(key) or sortable.get(to_camel(key))
        if name is None:
            raise ValidationError({"sort": f"Cannot sort by `{key}`"})
        column = getattr(model, name)
        clauses.append(column.desc() if descending else column.asc())
    clauses.append(model.id.asc())
    return clauses


async def render(db: Session, resolver: ReferenceResolver, spec: EntitySpec, instances) -> list:
    """Serialize instances and populate their references."""
    documents = [serialize(i, spec) for i in instances]
    await resolver.populate(db, spec, documents)
    return documents


async def list_documents(
    db: Session,
    resolver: ReferenceResolver,
    spec: EntitySpec,
    model,
    filters: Optional[Dict[str, object]] = None,
    q: Optional[str] = None,
    page: int = 1,
    limit: int = config.DEFAULT_PAGE_LIMIT,
    sort: Optional[str] = None,
    include_deleted: bool = False,
) -> dict:
    query = db.query(model)

    if not include_deleted:
        query = query.filter(model.deleted_at.is_(None))

    for name, value in (filters or {}).items():
        query = query.filter(getattr(model, name) == value)

    if q and spec.searchable:
        pattern = f"%{q.strip()}%"
        query = query.filter(or_(*[getattr(model, f.name).ilike(pattern) for f in spec.searchable]))

    total = query.count()
    skip = (page - 1) * limit
    instances = query.order_by(*_order_by(model, spec, sort)).offset(skip).limit(limit).all()

    data = await render(db, resolver, spec, instances)
    return {
        "data": data,
        "total": total,
        "size": len(data),
        "limit": limit,
        "skip": skip,
        "page": page,
        "pages": math.ceil(total / limit) if total else 0,
    }


def get_or_404(db: Session, spec: EntitySpec, model, id: str):
    instance = (
        db.query(model)
        .filter(model.id == id, model.deleted_at.is_(None))
        .first()
    )
    if instance is None:
        raise HTTPException(status_code=404, detail=f"{spec.model_name} not found")
    return instance


# =============================================================================
# WRITES
# =============================================================================

async def build_tags(db: Session, resolver: ReferenceResolver, spec: EntitySpec, instance) -> list:
    tags = await resolver.lookup_names(db, spec, instance)
    for f in spec.taggable:
        if f.is_reference:
            continue
        value = getattr(instance, f.name, None)
        if value is not None:
            tags.append(str(value))
    return list(dict.fromkeys(tags))


async def save(db: Session, resolver: ReferenceResolver, spec: EntitySpec, instance):
    """
    Validate then persist. Any failure rolls the session back so a rejected
    update leaves the stored row untouched.
    """
    try:
        instance.pre_validate(db)
        validate_fields(instance, spec)
        await resolver.check_exists(db, spec, instance)
        instance.tags = await build_tags(db, resolver, spec, instance)
    except PlanError:
        db.rollback()
        raise

    instance.updated_at = _utcnow()
    db.add(instance)
    db.commit()
    db.refresh(instance)
    return instance


# =============================================================================
# ROUTER FACTORY
# =============================================================================

def build_router(
    spec: EntitySpec,
    model,
    create_model: Type[BaseModel],
    update_model: Type[BaseModel],
) -> APIRouter:
    router = APIRouter(prefix=f"/{spec.collection_name}", tags=[spec.model_name])

    @router.get("")
    async def list_entities(
        request: Request,
        q: Optional[str] = None,
        page: int = Query(1, ge=1),
        limit: int = Query(config.DEFAULT_PAGE_LIMIT, ge=1, le=config.MAX_PAGE_LIMIT),
        sort: Optional[str] = None,
        include_deleted: bool = False,
        db: Session = Depends(get_db),
        resolver: ReferenceResolver = Depends(get_resolver),
    ):
        """List documents. Indexed fields filter by equality: ?owner=<id>"""
        filters = _filters_from_params(spec, request.query_params)
        return await list_documents(
            db, resolver, spec, model,
            filters=filters, q=q, page=page, limit=limit,
            sort=sort, include_deleted=include_deleted,
        )

    @router.get("/schema")
    async def get_schema():
        """JSON schema of the entity"""
        return json_schema(spec, create_model)

    @router.get("/{id}")
    async def get_entity(
        id: str,
        db: Session = Depends(get_db),
        resolver: ReferenceResolver = Depends(get_resolver),
    ):
        instance = get_or_404(db, spec, model, id)
        return (await render(db, resolver, spec, [instance]))[0]

    @router.post("", status_code=201)
    async def create_entity(
        data: create_model,
        db: Session = Depends(get_db),
        resolver: ReferenceResolver = Depends(get_resolver),
    ):
        instance = model(**data.model_dump(exclude_unset=True))
        await save(db, resolver, spec, instance)
        logger.info(f"{spec.model_name} {instance.id} created")
        return (await render(db, resolver, spec, [instance]))[0]

    @router.put("/{id}")
    @router.patch("/{id}")
    async def update_entity(
        id: str,
        data: update_model,
        db: Session = Depends(get_db),
        resolver: ReferenceResolver = Depends(get_resolver),
    ):
        instance = get_or_404(db, spec, model, id)

        update_data = data.model_dump(exclude_unset=True)
        for field, value in update_data.items():
            setattr(instance, field, value)

        await save(db, resolver, spec, instance)
        logger.info(f"{spec.model_name} {id} updated: {', '.join(sorted(update_data)) or 'no fields'}")
        return (await render(db, resolver, spec, [instance]))[0]

    @router.delete("/{id}")
    async def delete_entity(
        id: str,
        db: Session = Depends(get_db),
        resolver: ReferenceResolver = Depends(get_resolver),
    ):
        """Soft delete: the row stays, flagged with deleted_at"""
        instance = get_or_404(db, spec, model, id)
        instance.deleted_at = _utcnow()
        db.commit()
        db.refresh(instance)
        logger.info(f"{spec.model_name} {id} deleted")
        return (await render(db, resolver, spec, [instance]))[0]

    return router
