"""Shared fixtures: in-memory SQLite, a fresh app per test, collaborator rows."""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from emis_plan.app import create_app
from emis_plan.collaborators import Feature, IncidentType, Party
from emis_plan.database import Base, get_db
from emis_plan.references import build_resolver, get_resolver


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def resolver():
    return build_resolver()


@pytest.fixture
def app(session_factory, resolver):
    app = create_app()

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_resolver] = lambda: resolver
    return app


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def incident_type(db):
    row = IncidentType(nature="Natural", family="Hydrological", code="FL", name="Flood", color="#0000FF")
    db.add(row)
    db.commit()
    return row.id


@pytest.fixture
def boundary(db):
    row = Feature(
        category="Boundaries", type="Region", level="1", name="Dar es Salaam",
        admin_levels={"country": "Tanzania", "region": "Dar es Salaam", "ward": "Kariakoo"},
    )
    db.add(row)
    db.commit()
    return row.id


@pytest.fixture
def parent_party(db):
    row = Party(type="Agency", name="Prime Minister's Office", email="pmo@example.com")
    db.add(row)
    db.commit()
    return row.id


@pytest.fixture
def owner(db, parent_party):
    row = Party(
        type="Agency", name="Disaster Management Department", title="Director",
        abbreviation="DMD", email="dmd@example.com", mobile="+255700000000",
        landline="+255220000000", party=parent_party,
    )
    db.add(row)
    db.commit()
    return row.id


@pytest.fixture
def plan(client, incident_type, owner):
    response = client.post("/v1/plans", json={
        "incidentType": incident_type,
        "owner": owner,
        "description": "Flood response",
    })
    assert response.status_code == 201
    return response.json()
