#!/usr/bin/env python3
"""
Demo data seeder

Creates a local incident type, boundary and owner, then fake plans with
activities and procedures. Writes go through the same validation pipeline as
the API (hooks, existence checks, tags).

Run manually:
    python -m emis_plan.seed --plans 5
"""

import argparse
import asyncio
import logging
from typing import Optional

from sqlalchemy.orm import Session

from .actions import save
from .collaborators import Feature, IncidentType, Party
from .database import Base, SessionLocal, engine
from .fakes import fake
from .models import (
    ACTIVITY_SPEC, PLAN_SPEC, PROCEDURE_SPEC, Activity, Plan, Procedure,
)
from .references import ReferenceResolver, build_resolver
from .schemas_plans import ActivityCreate, PlanCreate, ProcedureCreate

log = logging.getLogger("emis_plan.seed")


def seed_collaborators(db: Session):
    incident_type = IncidentType(
        nature="Natural", family="Hydrological", code="FL", name="Flood", color="#0000FF",
    )
    boundary = Feature(
        category="Boundaries", type="Region", level="1", name="Dar es Salaam",
        admin_levels={"country": "Tanzania", "region": "Dar es Salaam"},
    )
    owner = Party(
        type="Agency", name="Disaster Management Department", title="Director",
        email="dmd@example.com", mobile="+255700000000",
    )
    db.add_all([incident_type, boundary, owner])
    db.commit()
    return incident_type, boundary, owner


async def seed(
    db: Session,
    resolver: ReferenceResolver,
    plans: int = 3,
    activities_per_plan: int = 2,
    procedures_per_activity: int = 2,
    random_seed: Optional[int] = None,
) -> dict:
    incident_type, boundary, owner = seed_collaborators(db)
    counts = {"plans": 0, "activities": 0, "procedures": 0}
    seq = random_seed or 0

    for _ in range(plans):
        seq += 1
        payload = PlanCreate(**fake(PLAN_SPEC, {
            "incidentType": incident_type.id, "boundary": boundary.id, "owner": owner.id,
        }, seed=seq))
        plan = await save(db, resolver, PLAN_SPEC, Plan(**payload.model_dump(exclude_unset=True)))
        counts["plans"] += 1

        for a in range(1, activities_per_plan + 1):
            seq += 1
            payload = ActivityCreate(**fake(ACTIVITY_SPEC, {"plan": plan.id, "number": a}, seed=seq))
            activity = await save(
                db, resolver, ACTIVITY_SPEC, Activity(**payload.model_dump(exclude_unset=True))
            )
            counts["activities"] += 1

            for p in range(1, procedures_per_activity + 1):
                seq += 1
                payload = ProcedureCreate(**fake(
                    PROCEDURE_SPEC, {"activity": activity.id, "number": p}, seed=seq
                ))
                await save(
                    db, resolver, PROCEDURE_SPEC, Procedure(**payload.model_dump(exclude_unset=True))
                )
                counts["procedures"] += 1

    log.info(
        f"Seeded {counts['plans']} plans, {counts['activities']} activities, "
        f"{counts['procedures']} procedures"
    )
    return counts


def main():
    parser = argparse.ArgumentParser(description="Seed demo plans")
    parser.add_argument("--plans", type=int, default=3)
    parser.add_argument("--activities", type=int, default=2, help="Activities per plan")
    parser.add_argument("--procedures", type=int, default=2, help="Procedures per activity")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        asyncio.run(seed(db, build_resolver(), args.plans, args.activities, args.procedures))
    finally:
        db.close()


if __name__ == "__main__":
    main()
