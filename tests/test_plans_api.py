"""Plans HTTP surface: validation, existence checks, population, soft delete."""
import pytest

from emis_plan.errors import ValidationError
from emis_plan.models import Plan

MISSING_ID = "0" * 32


class TestCreatePlan:

    def test_flood_response_end_to_end(self, client, owner):
        response = client.post("/v1/plans", json={"description": "Flood response", "owner": owner})
        assert response.status_code == 201
        created = response.json()
        assert created["publishedAt"] is None
        assert created["description"] == "Flood response"

        fetched = client.get(f"/v1/plans/{created['id']}").json()
        assert fetched["owner"]["id"] == owner
        assert fetched["owner"]["name"] == "Disaster Management Department"
        assert fetched["publishedAt"] is None

    def test_no_references_applies_universally(self, client, db):
        response = client.post("/v1/plans", json={"description": "All hazards plan"})
        assert response.status_code == 201
        body = response.json()
        assert body["incidentType"] is None
        assert body["boundary"] is None
        assert body["owner"] is None
        assert db.query(Plan).count() == 1

    def test_empty_payload_is_valid(self, client):
        response = client.post("/v1/plans", json={})
        assert response.status_code == 201

    @pytest.mark.parametrize("field,target", [
        ("incidentType", "IncidentType"),
        ("boundary", "Feature"),
        ("owner", "Party"),
    ])
    def test_dangling_reference_rejected(self, client, db, field, target):
        response = client.post("/v1/plans", json={"description": "x", field: MISSING_ID})
        assert response.status_code == 422
        body = response.json()
        assert body["error"] == "ReferenceNotFoundError"
        assert body["errors"][field] == {"target": target, "id": MISSING_ID}
        assert db.query(Plan).count() == 0

    def test_every_dangling_reference_reported(self, client):
        response = client.post("/v1/plans", json={"owner": MISSING_ID, "boundary": MISSING_ID})
        assert response.status_code == 422
        assert set(response.json()["errors"]) == {"owner", "boundary"}

    def test_malformed_date_is_validation_error(self, client, db):
        response = client.post("/v1/plans", json={"publishedAt": "not a date"})
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "ValidationError"
        assert "publishedAt" in body["errors"]
        assert db.query(Plan).count() == 0

    def test_description_is_trimmed(self, client):
        response = client.post("/v1/plans", json={"description": "  Cholera plan  "})
        assert response.json()["description"] == "Cholera plan"

    def test_tags_from_referenced_names(self, client, incident_type, owner, boundary):
        response = client.post("/v1/plans", json={
            "incidentType": incident_type, "owner": owner, "boundary": boundary,
        })
        assert response.json()["tags"] == ["Flood", "Dar es Salaam", "Disaster Management Department"]


class TestLifecycleHook:

    def test_default_hook_never_blocks(self, client, db):
        for i in range(3):
            assert client.post("/v1/plans", json={"description": f"Plan {i}"}).status_code == 201
        assert db.query(Plan).count() == 3

    def test_overridden_hook_blocks_write(self, client, db, monkeypatch):
        def reject_unpublished(self, session):
            if self.published_at is None:
                raise ValidationError({"publishedAt": "Path `publishedAt` is required."})

        monkeypatch.setattr(Plan, "pre_validate", reject_unpublished)

        response = client.post("/v1/plans", json={"description": "Draft"})
        assert response.status_code == 400
        assert response.json()["errors"] == {"publishedAt": "Path `publishedAt` is required."}
        assert db.query(Plan).count() == 0

        response = client.post("/v1/plans", json={
            "description": "Published", "publishedAt": "2018-10-19T07:53:32.831Z",
        })
        assert response.status_code == 201


class TestReadPlan:

    def test_owner_projection_depth_one(self, client, plan, parent_party):
        body = client.get(f"/v1/plans/{plan['id']}").json()
        assert set(body["owner"]) == {"id", "type", "name", "title", "email", "mobile"}
        assert body["owner"]["mobile"] == "+255700000000"
        # the owner's own parent party is neither embedded nor expanded
        assert parent_party not in str(body["owner"])

    def test_boundary_projection_includes_admin_levels(self, client, boundary):
        created = client.post("/v1/plans", json={"boundary": boundary}).json()
        body = client.get(f"/v1/plans/{created['id']}").json()
        assert body["boundary"] == {
            "id": boundary,
            "category": "Boundaries",
            "type": "Region",
            "level": "1",
            "name": "Dar es Salaam",
            "country": "Tanzania",
            "region": "Dar es Salaam",
            "district": None,
            "ward": "Kariakoo",
        }

    def test_incident_type_projection(self, client, plan, incident_type):
        body = client.get(f"/v1/plans/{plan['id']}").json()
        assert body["incidentType"] == {
            "id": incident_type,
            "nature": "Natural",
            "family": "Hydrological",
            "code": "FL",
            "name": "Flood",
            "color": "#0000FF",
        }

    def test_fetch_is_idempotent(self, client, plan):
        first = client.get(f"/v1/plans/{plan['id']}").json()
        second = client.get(f"/v1/plans/{plan['id']}").json()
        assert first == second

    def test_unknown_plan_404(self, client):
        assert client.get(f"/v1/plans/{MISSING_ID}").status_code == 404


class TestUpdateDeletePlan:

    def test_patch_updates_only_given_fields(self, client, plan):
        response = client.patch(f"/v1/plans/{plan['id']}", json={"publishedAt": "2018-10-19T07:53:32Z"})
        assert response.status_code == 200
        body = response.json()
        assert body["publishedAt"].startswith("2018-10-19T07:53:32")
        assert body["description"] == "Flood response"
        assert body["owner"]["name"] == "Disaster Management Department"

    def test_put_clears_reference(self, client, plan):
        body = client.put(f"/v1/plans/{plan['id']}", json={"owner": None}).json()
        assert body["owner"] is None

    def test_update_with_dangling_reference_keeps_stored(self, client, plan, owner):
        response = client.put(f"/v1/plans/{plan['id']}", json={"owner": MISSING_ID})
        assert response.status_code == 422
        body = client.get(f"/v1/plans/{plan['id']}").json()
        assert body["owner"]["id"] == owner

    def test_soft_delete(self, client, db, plan):
        response = client.delete(f"/v1/plans/{plan['id']}")
        assert response.status_code == 200
        assert response.json()["deletedAt"] is not None

        assert client.get(f"/v1/plans/{plan['id']}").status_code == 404
        assert client.get("/v1/plans").json()["total"] == 0
        assert client.get("/v1/plans", params={"include_deleted": True}).json()["total"] == 1
        # row is kept for the audit trail
        assert db.query(Plan).count() == 1

    def test_delete_twice_404(self, client, plan):
        client.delete(f"/v1/plans/{plan['id']}")
        assert client.delete(f"/v1/plans/{plan['id']}").status_code == 404


class TestListPlans:

    def test_pagination(self, client):
        for i in range(5):
            client.post("/v1/plans", json={"description": f"Plan {i}"})
        body = client.get("/v1/plans", params={"limit": 2, "page": 3}).json()
        assert body["total"] == 5
        assert body["size"] == 1
        assert body["pages"] == 3
        assert body["skip"] == 4

    def test_filter_by_reference(self, client, plan, owner):
        client.post("/v1/plans", json={"description": "Ownerless"})
        body = client.get("/v1/plans", params={"owner": owner}).json()
        assert body["total"] == 1
        assert body["data"][0]["id"] == plan["id"]
        assert body["data"][0]["owner"]["id"] == owner

    def test_search_description(self, client, plan):
        client.post("/v1/plans", json={"description": "Earthquake contingency"})
        body = client.get("/v1/plans", params={"q": "earthquake"}).json()
        assert [d["description"] for d in body["data"]] == ["Earthquake contingency"]

    def test_sort_by_description(self, client):
        for text in ("b plan", "a plan", "c plan"):
            client.post("/v1/plans", json={"description": text})
        body = client.get("/v1/plans", params={"sort": "description"}).json()
        assert [d["description"] for d in body["data"]] == ["a plan", "b plan", "c plan"]

    def test_unknown_sort_rejected(self, client):
        response = client.get("/v1/plans", params={"sort": "secret"})
        assert response.status_code == 400
        assert response.json()["errors"] == {"sort": "Cannot sort by `secret`"}

    def test_filter_by_published_at(self, client):
        published = client.post("/v1/plans", json={
            "description": "Published", "publishedAt": "2018-10-19T07:53:32Z",
        }).json()
        client.post("/v1/plans", json={"description": "Draft"})

        body = client.get("/v1/plans", params={"publishedAt": published["publishedAt"]}).json()
        assert body["total"] == 1
        assert body["data"][0]["id"] == published["id"]

        body = client.get("/v1/plans", params={"publishedAt": "2018-10-20T07:53:32Z"}).json()
        assert body["total"] == 0

    def test_malformed_date_filter_rejected(self, client):
        response = client.get("/v1/plans", params={"publishedAt": "not-a-date"})
        assert response.status_code == 400
        assert response.json()["error"] == "ValidationError"
        assert "publishedAt" in response.json()["errors"]

    def test_limit_bounds(self, client):
        assert client.get("/v1/plans", params={"limit": 0}).status_code == 400

    def test_schema(self, client):
        body = client.get("/v1/plans/schema").json()
        assert body["title"] == "Plan"
        owner = body["properties"]["owner"]
        assert owner["x-ref"] == "Party"
        assert owner["x-exists"] is True
        assert owner["x-autopopulate"]["maxDepth"] == 1
        assert body["properties"]["description"]["x-searchable"] is True
