"""
SQLAlchemy models for collaborator stores

Incident types, administrative boundaries (features) and parties are owned
by other services. These tables are the local mirrors plans reference when
no remote directory is configured (see references.build_resolver).

Tables:
    - IncidentType: catalog of incident types (Flood, Cholera, ...)
    - Feature:      administrative/geographic boundaries
    - Party:        agencies, organizations and people
"""

from sqlalchemy import Column, String, Text, JSON, DateTime
from sqlalchemy.sql import func

from . import config
from .database import Base, new_id


# Fields embedded when a reference is populated
INCIDENT_TYPE_SELECT = ("nature", "family", "code", "name", "color")
FEATURE_SELECT = ("category", "type", "level", "name") + tuple(config.FEATURE_ADMIN_LEVEL_NAMES)
PARTY_SELECT = ("type", "name", "title", "email", "mobile")


class IncidentType(Base):
    """Incident type catalog entry"""
    __tablename__ = "incident_types"

    id = Column(String(32), primary_key=True, default=new_id)
    nature = Column(String(50))              # Natural, Technological
    family = Column(String(50))              # Hydrological, Biological, ...
    code = Column(String(20), index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text)
    color = Column(String(20))
    created_at = Column(DateTime(timezone=True), default=func.current_timestamp())
    updated_at = Column(DateTime(timezone=True), default=func.current_timestamp())
    deleted_at = Column(DateTime(timezone=True))


class Feature(Base):
    """
    Administrative or geographic boundary.

    Administrative level names (country, region, ...) vary per deployment so
    they live in admin_levels rather than as columns:
        {"country": "Tanzania", "region": "Dar es Salaam"}
    """
    __tablename__ = "features"

    id = Column(String(32), primary_key=True, default=new_id)
    category = Column(String(50))            # Boundaries, Facilities, ...
    type = Column(String(50))                # Region, District, Ward
    level = Column(String(20))
    name = Column(String(100), nullable=False)
    admin_levels = Column(JSON, default=dict)
    created_at = Column(DateTime(timezone=True), default=func.current_timestamp())
    updated_at = Column(DateTime(timezone=True), default=func.current_timestamp())
    deleted_at = Column(DateTime(timezone=True))

    def to_document(self) -> dict:
        doc = {
            "id": self.id,
            "category": self.category,
            "type": self.type,
            "level": self.level,
            "name": self.name,
        }
        levels = self.admin_levels or {}
        for level_name in config.FEATURE_ADMIN_LEVEL_NAMES:
            doc[level_name] = levels.get(level_name)
        return doc


class Party(Base):
    """Agency, organization, institution or person"""
    __tablename__ = "parties"

    id = Column(String(32), primary_key=True, default=new_id)
    type = Column(String(30))                # Focal Person, Agency
    name = Column(String(100), nullable=False)
    title = Column(String(100))
    abbreviation = Column(String(20))
    email = Column(String(255))
    mobile = Column(String(30))
    landline = Column(String(30))
    physical_address = Column(Text)
    party = Column(String(32), index=True)   # Parent organization (raw id, never populated)
    created_at = Column(DateTime(timezone=True), default=func.current_timestamp())
    updated_at = Column(DateTime(timezone=True), default=func.current_timestamp())
    deleted_at = Column(DateTime(timezone=True))
