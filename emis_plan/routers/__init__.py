"""
Routers Package

One router per entity, each mounted under /<API_VERSION>:
- plans:      /plans, /plans/{id}/activities
- activities: /activities, /activities/{id}/procedures
- procedures: /procedures
"""

from .plans import router as plan_router
from .activities import router as activity_router
from .procedures import router as procedure_router

ROUTERS = (plan_router, activity_router, procedure_router)
