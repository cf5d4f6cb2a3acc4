"""
Configuration for emis-plan

Everything is read from the environment at import time.
Model/collection names drive table names and resource paths.
"""

import os


def _get_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _get_list(name: str, default: str) -> list:
    value = os.getenv(name, default)
    return [v.strip() for v in value.split(",") if v.strip()]


# Database
DATABASE_URL = os.getenv("DATABASE_URL", "postgresql+psycopg:///emis_plan_db")
AUTO_CREATE_TABLES = _get_bool("AUTO_CREATE_TABLES", False)

# HTTP surface
API_VERSION = os.getenv("API_VERSION", "v1")
DEFAULT_PAGE_LIMIT = int(os.getenv("DEFAULT_PAGE_LIMIT", "10"))
MAX_PAGE_LIMIT = int(os.getenv("MAX_PAGE_LIMIT", "500"))

# Entities
PLAN_MODEL_NAME = os.getenv("PLAN_MODEL_NAME", "Plan")
PLAN_COLLECTION_NAME = os.getenv("PLAN_COLLECTION_NAME", "plans")
ACTIVITY_MODEL_NAME = os.getenv("ACTIVITY_MODEL_NAME", "Activity")
ACTIVITY_COLLECTION_NAME = os.getenv("ACTIVITY_COLLECTION_NAME", "activities")
PROCEDURE_MODEL_NAME = os.getenv("PROCEDURE_MODEL_NAME", "Procedure")
PROCEDURE_COLLECTION_NAME = os.getenv("PROCEDURE_COLLECTION_NAME", "procedures")

# Collaborators (incident types, boundaries, parties)
INCIDENT_TYPE_MODEL_NAME = os.getenv("INCIDENT_TYPE_MODEL_NAME", "IncidentType")
FEATURE_MODEL_NAME = os.getenv("FEATURE_MODEL_NAME", "Feature")
PARTY_MODEL_NAME = os.getenv("PARTY_MODEL_NAME", "Party")
FEATURE_ADMIN_LEVEL_NAMES = _get_list(
    "FEATURE_ADMIN_LEVEL_NAMES", "country,region,district,ward"
)

# Remote collaborator directories. Unset = use the local table.
INCIDENT_TYPE_SERVICE_URL = os.getenv("INCIDENT_TYPE_SERVICE_URL")
FEATURE_SERVICE_URL = os.getenv("FEATURE_SERVICE_URL")
PARTY_SERVICE_URL = os.getenv("PARTY_SERVICE_URL")
COLLABORATOR_TIMEOUT = float(os.getenv("COLLABORATOR_TIMEOUT", "10"))

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
