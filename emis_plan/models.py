"""
SQLAlchemy models for emis-plan

A plan is a written set of activities and procedures that outlines what
stakeholders should do in an emergency (or disaster) event.

    Plan 1 -> N Activity 1 -> N Procedure

Each model is paired with an EntitySpec (PLAN_SPEC, ...) declaring field
validation, indexing, search, tagging and reference population. The generic
REST actions (actions.py) are driven by those specs.
"""

from sqlalchemy import Column, Integer, String, Text, JSON, DateTime
from sqlalchemy.orm import Session
from sqlalchemy.sql import func

from . import config
from .collaborators import FEATURE_SELECT, INCIDENT_TYPE_SELECT, PARTY_SELECT
from .database import Base, new_id
from .schema_spec import (
    DATETIME, INTEGER, EntitySpec, FieldSpec, ReferenceSpec,
)

# Emergency management phases an activity belongs to
PHASES = ("Mitigation", "Preparedness", "Response", "Recovery")
DEFAULT_PHASE = "Response"


# =============================================================================
# PLAN
# =============================================================================

class Plan(Base):
    """Emergency response plan"""
    __tablename__ = config.PLAN_COLLECTION_NAME

    MODEL_NAME = config.PLAN_MODEL_NAME
    COLLECTION_NAME = config.PLAN_COLLECTION_NAME

    id = Column(String(32), primary_key=True, default=new_id)

    # Applicable incident type. None = applies to all incident types
    incident_type = Column(String(32), index=True)
    # Applicable administrative boundary. None = applies to all boundaries
    boundary = Column(String(32), index=True)
    # Party (agency, organization, ...) which owns or maintains the plan
    owner = Column(String(32), index=True)

    description = Column(Text, index=True)
    # Date the plan was made effective. None = draft
    published_at = Column(DateTime(timezone=True), index=True)

    tags = Column(JSON, default=list)
    created_at = Column(DateTime(timezone=True), default=func.current_timestamp())
    updated_at = Column(DateTime(timezone=True), default=func.current_timestamp())
    deleted_at = Column(DateTime(timezone=True), index=True)

    def pre_validate(self, db: Session):
        """Runs before field validation. Raise ValidationError to reject."""
        return None


PLAN_SPEC = EntitySpec(
    model_name=config.PLAN_MODEL_NAME,
    collection_name=config.PLAN_COLLECTION_NAME,
    fields=[
        FieldSpec(
            "incident_type", index=True, taggable=True,
            reference=ReferenceSpec(config.INCIDENT_TYPE_MODEL_NAME, select=INCIDENT_TYPE_SELECT),
        ),
        FieldSpec(
            "boundary", index=True, taggable=True,
            reference=ReferenceSpec(config.FEATURE_MODEL_NAME, select=FEATURE_SELECT),
        ),
        FieldSpec(
            "owner", index=True, taggable=True,
            reference=ReferenceSpec(config.PARTY_MODEL_NAME, select=PARTY_SELECT),
        ),
        FieldSpec(
            "description", trim=True, index=True, searchable=True,
            fake={"generator": "lorem", "type": "sentence"},
        ),
        FieldSpec(
            "published_at", type=DATETIME, index=True,
            fake={"generator": "date", "type": "recent"},
        ),
    ],
)


# =============================================================================
# ACTIVITY
# =============================================================================

class Activity(Base):
    """
    Ordered step of a plan, e.g. "Disseminate early warning".

    Inherits the plan's incident type when none is given.
    """
    __tablename__ = config.ACTIVITY_COLLECTION_NAME

    MODEL_NAME = config.ACTIVITY_MODEL_NAME
    COLLECTION_NAME = config.ACTIVITY_COLLECTION_NAME

    id = Column(String(32), primary_key=True, default=new_id)
    plan = Column(String(32), index=True)
    incident_type = Column(String(32), index=True)
    phase = Column(String(20), index=True)
    number = Column(Integer, index=True)     # Position within the plan
    name = Column(String(200), index=True)
    description = Column(Text)

    tags = Column(JSON, default=list)
    created_at = Column(DateTime(timezone=True), default=func.current_timestamp())
    updated_at = Column(DateTime(timezone=True), default=func.current_timestamp())
    deleted_at = Column(DateTime(timezone=True), index=True)

    def pre_validate(self, db: Session):
        if self.plan and not self.incident_type:
            plan = _live(db, Plan, self.plan)
            if plan is not None:
                self.incident_type = plan.incident_type


ACTIVITY_SPEC = EntitySpec(
    model_name=config.ACTIVITY_MODEL_NAME,
    collection_name=config.ACTIVITY_COLLECTION_NAME,
    fields=[
        FieldSpec(
            "plan", required=True, index=True,
            reference=ReferenceSpec(config.PLAN_MODEL_NAME),
        ),
        FieldSpec(
            "incident_type", index=True, taggable=True,
            reference=ReferenceSpec(config.INCIDENT_TYPE_MODEL_NAME, select=INCIDENT_TYPE_SELECT),
        ),
        FieldSpec(
            "phase", trim=True, choices=PHASES, default=DEFAULT_PHASE,
            index=True, taggable=True,
            fake={"generator": "choice"},
        ),
        FieldSpec(
            "number", type=INTEGER, index=True,
            fake={"generator": "random", "type": "number"},
        ),
        FieldSpec(
            "name", required=True, trim=True, index=True, searchable=True, taggable=True,
            fake={"generator": "lorem", "type": "words"},
        ),
        FieldSpec(
            "description", trim=True, searchable=True,
            fake={"generator": "lorem", "type": "sentence"},
        ),
    ],
)


# =============================================================================
# PROCEDURE
# =============================================================================

class Procedure(Base):
    """
    Refinement of an activity into a concrete standard operating step.

    Inherits plan, incident type and phase from its activity when not given.
    """
    __tablename__ = config.PROCEDURE_COLLECTION_NAME

    MODEL_NAME = config.PROCEDURE_MODEL_NAME
    COLLECTION_NAME = config.PROCEDURE_COLLECTION_NAME

    id = Column(String(32), primary_key=True, default=new_id)
    plan = Column(String(32), index=True)
    activity = Column(String(32), index=True)
    incident_type = Column(String(32), index=True)
    phase = Column(String(20), index=True)
    number = Column(Integer, index=True)     # Position within the activity
    name = Column(String(200), index=True)
    description = Column(Text)

    tags = Column(JSON, default=list)
    created_at = Column(DateTime(timezone=True), default=func.current_timestamp())
    updated_at = Column(DateTime(timezone=True), default=func.current_timestamp())
    deleted_at = Column(DateTime(timezone=True), index=True)

    def pre_validate(self, db: Session):
        if not self.activity:
            return
        activity = _live(db, Activity, self.activity)
        if activity is None:
            return
        if not self.plan:
            self.plan = activity.plan
        if not self.incident_type:
            self.incident_type = activity.incident_type
        if not (self.phase or "").strip():
            self.phase = activity.phase


PROCEDURE_SPEC = EntitySpec(
    model_name=config.PROCEDURE_MODEL_NAME,
    collection_name=config.PROCEDURE_COLLECTION_NAME,
    fields=[
        FieldSpec(
            "plan", index=True,
            reference=ReferenceSpec(config.PLAN_MODEL_NAME),
        ),
        FieldSpec(
            "activity", required=True, index=True,
            reference=ReferenceSpec(config.ACTIVITY_MODEL_NAME),
        ),
        FieldSpec(
            "incident_type", index=True, taggable=True,
            reference=ReferenceSpec(config.INCIDENT_TYPE_MODEL_NAME, select=INCIDENT_TYPE_SELECT),
        ),
        FieldSpec(
            "phase", trim=True, choices=PHASES, default=DEFAULT_PHASE,
            index=True, taggable=True,
            fake={"generator": "choice"},
        ),
        FieldSpec(
            "number", type=INTEGER, index=True,
            fake={"generator": "random", "type": "number"},
        ),
        FieldSpec(
            "name", required=True, trim=True, index=True, searchable=True, taggable=True,
            fake={"generator": "lorem", "type": "words"},
        ),
        FieldSpec(
            "description", trim=True, searchable=True,
            fake={"generator": "lorem", "type": "sentence"},
        ),
    ],
)


def _live(db: Session, model, id: str):
    """Fetch a non-deleted row by id, or None."""
    return (
        db.query(model)
        .filter(model.id == id, model.deleted_at.is_(None))
        .first()
    )
