"""
Procedures router - CRUD for activity procedures
"""

from ..actions import build_router
from ..models import PROCEDURE_SPEC, Procedure
from ..schemas_plans import ProcedureCreate, ProcedureUpdate

router = build_router(PROCEDURE_SPEC, Procedure, ProcedureCreate, ProcedureUpdate)
