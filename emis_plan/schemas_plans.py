"""
Pydantic payloads for plans, activities and procedures.

Wire names are camelCase (incidentType, publishedAt); attributes stay
snake_case so model_dump() maps straight onto the SQLAlchemy columns.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from .schema_spec import to_camel


class Payload(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# PLANS
# =============================================================================

class PlanCreate(Payload):
    incident_type: Optional[str] = None
    boundary: Optional[str] = None
    owner: Optional[str] = None
    description: Optional[str] = None
    published_at: Optional[datetime] = None


class PlanUpdate(PlanCreate):
    pass


# =============================================================================
# ACTIVITIES
# =============================================================================

class ActivityCreate(Payload):
    plan: Optional[str] = None              # Required, checked by ACTIVITY_SPEC
    incident_type: Optional[str] = None     # Defaults to the plan's incident type
    phase: Optional[str] = None
    number: Optional[int] = None
    name: Optional[str] = None
    description: Optional[str] = None


class ActivityUpdate(ActivityCreate):
    pass


# =============================================================================
# PROCEDURES
# =============================================================================

class ProcedureCreate(Payload):
    plan: Optional[str] = None              # Defaults to the activity's plan
    activity: Optional[str] = None          # Required, checked by PROCEDURE_SPEC
    incident_type: Optional[str] = None
    phase: Optional[str] = None
    number: Optional[int] = None
    name: Optional[str] = None
    description: Optional[str] = None


class ProcedureUpdate(ProcedureCreate):
    pass
