"""
Error kinds for emis-plan and their HTTP mapping.

- ValidationError: bad shape (field constraints, lifecycle hooks) -> 400
- ReferenceNotFoundError: dangling reference -> 422
- CollaboratorUnavailableError: store unreachable -> 503
"""

import logging
from typing import Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class PlanError(Exception):
    """Base class of every error raised by emis-plan."""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {
            "status": self.status_code,
            "error": type(self).__name__,
            "message": self.message,
        }


class ValidationError(PlanError):
    """One or more fields failed their constraints."""
    status_code = 400

    def __init__(self, errors: Dict[str, str], message: Optional[str] = None):
        self.errors = dict(errors)
        super().__init__(message or "Validation failed: " + ", ".join(sorted(self.errors)))

    def to_dict(self) -> dict:
        body = super().to_dict()
        body["errors"] = self.errors
        return body


class ReferenceNotFoundError(PlanError):
    """A reference field points to an id its target store does not know."""
    status_code = 422

    def __init__(self, errors: Dict[str, dict]):
        # errors: {wire field: {"target": model name, "id": value}}
        self.errors = dict(errors)
        details = ", ".join(
            f"{field} ({err['target']} {err['id']})" for field, err in sorted(self.errors.items())
        )
        super().__init__(f"Referenced documents not found: {details}")

    def to_dict(self) -> dict:
        body = super().to_dict()
        body["errors"] = self.errors
        return body


class CollaboratorUnavailableError(PlanError):
    """A collaborator store could not be reached."""
    status_code = 503

    def __init__(self, target: str, reason: str = ""):
        self.target = target
        message = f"{target} store is unavailable"
        if reason:
            message += f": {reason}"
        super().__init__(message)

    def to_dict(self) -> dict:
        body = super().to_dict()
        body["target"] = self.target
        return body


def _loc_to_field(loc) -> str:
    # ("body", "publishedAt") -> "publishedAt"
    parts = [str(p) for p in loc if p not in ("body", "query", "path")]
    return ".".join(parts) or "body"


async def plan_error_handler(request: Request, exc: PlanError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.warning(f"{request.method} {request.url.path} rejected: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = {}
    for err in exc.errors():
        errors.setdefault(_loc_to_field(err.get("loc", ())), err.get("msg", "Invalid value"))
    return await plan_error_handler(request, ValidationError(errors))


def register_exception_handlers(app: FastAPI):
    app.add_exception_handler(PlanError, plan_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
