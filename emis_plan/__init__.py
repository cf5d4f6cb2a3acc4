"""
emis-plan

A representation of written set of activities and procedures that outlines
(or guides) what stakeholders and others should do in an emergency (or
disaster) event.

    from emis_plan import initialize
    app = initialize()
"""

from .info import info
from .models import Activity, Plan, Procedure
from .routers import activity_router, plan_router, procedure_router
from .app import initialize, mount

__all__ = [
    "info",
    "Plan",
    "Activity",
    "Procedure",
    "plan_router",
    "activity_router",
    "procedure_router",
    "initialize",
    "mount",
]
