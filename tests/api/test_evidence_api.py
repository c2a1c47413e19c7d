"""Tests for the evidence CRUD API."""
import types
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient
from pymongo.errors import DuplicateKeyError

from app.db.mongo import ensure_indexes, set_database

EVIDENCE = {"type": "firearm", "description": "9mm handgun", "location": "Locker B"}


@pytest.fixture
def client(connected_app):
    return TestClient(connected_app)


class TestCreateEvidence:
    def test_create_returns_201_with_defaults(self, client):
        response = client.post("/api/evidence", json={**EVIDENCE, "caseNumber": "C-77"})

        assert response.status_code == 201
        data = response.json()
        assert data["success"] is True
        assert data["message"] == "Evidence created successfully"
        evidence = data["evidence"]
        assert evidence["evidenceNumber"] == "EV-000001"
        assert evidence["collectedBy"] == "Unknown Officer"
        assert evidence["caseNumber"] == "C-77"
        assert evidence["id"] == evidence["_id"]
        assert "createdAt" in evidence and "updatedAt" in evidence

    def test_explicit_evidence_number_is_kept(self, client):
        response = client.post("/api/evidence", json={**EVIDENCE, "evidenceNumber": "EV-CUSTOM"})

        assert response.json()["evidence"]["evidenceNumber"] == "EV-CUSTOM"

    @pytest.mark.parametrize("field", ["type", "description", "location"])
    def test_missing_required_field_is_400(self, client, field):
        body = {k: v for k, v in EVIDENCE.items() if k != field}
        response = client.post("/api/evidence", json=body)

        assert response.status_code == 400
        assert response.json() == {"error": "Missing required fields: type, description, location"}

    def test_duplicate_key_is_409(self, client):
        with patch(
            "app.repositories.evidence.EvidenceRepository.create",
            new=AsyncMock(side_effect=DuplicateKeyError("E11000 duplicate key")),
        ):
            response = client.post("/api/evidence", json=EVIDENCE)

        assert response.status_code == 409
        assert response.json() == {"error": "Evidence number already exists"}

    def test_unexpected_error_is_generic_500(self, client):
        with patch(
            "app.repositories.evidence.EvidenceRepository.create",
            new=AsyncMock(side_effect=RuntimeError("driver exploded")),
        ):
            response = client.post("/api/evidence", json=EVIDENCE)

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to create evidence"}


class TestReadUpdateDelete:
    def test_list_and_get(self, client):
        created = client.post("/api/evidence", json=EVIDENCE).json()["evidence"]

        listing = client.get("/api/evidence").json()["evidence"]
        assert [item["id"] for item in listing] == [created["id"]]

        fetched = client.get(f"/api/evidence/{created['id']}")
        assert fetched.status_code == 200
        assert fetched.json()["evidence"]["description"] == "9mm handgun"

    def test_update(self, client):
        created = client.post("/api/evidence", json=EVIDENCE).json()["evidence"]

        response = client.put(f"/api/evidence/{created['id']}", json={"location": "Lab 3", "status": "analyzed"})

        assert response.status_code == 200
        evidence = response.json()["evidence"]
        assert evidence["location"] == "Lab 3"
        assert evidence["status"] == "analyzed"
        assert evidence["evidenceNumber"] == created["evidenceNumber"]

    def test_update_missing_is_404(self, client):
        response = client.put("/api/evidence/64b7f0c2a1b2c3d4e5f60718", json={"location": "x"})

        assert response.status_code == 404
        assert response.json() == {"error": "Evidence not found"}

    def test_delete(self, client):
        created = client.post("/api/evidence", json=EVIDENCE).json()["evidence"]

        response = client.delete(f"/api/evidence/{created['id']}")
        assert response.json() == {"success": True, "message": "Evidence deleted successfully"}
        assert client.get(f"/api/evidence/{created['id']}").status_code == 404
        assert client.delete(f"/api/evidence/{created['id']}").status_code == 404

    def test_malformed_id_is_404(self, client):
        assert client.get("/api/evidence/not-an-object-id").status_code == 404
        assert client.delete("/api/evidence/not-an-object-id").status_code == 404


class TestNumberingWithUniqueIndex:
    @pytest.fixture
    def client(self, build_app, mongo_db):
        async def connect_to_mongodb():
            await ensure_indexes(mongo_db)
            set_database(mongo_db)

        _, app = build_app(overrides={"app.db.mongo": types.SimpleNamespace(connect_to_mongodb=connect_to_mongodb)})
        return TestClient(app)

    def test_create_after_delete_still_succeeds(self, client):
        first = client.post("/api/evidence", json=EVIDENCE).json()["evidence"]
        client.post("/api/evidence", json=EVIDENCE)
        assert client.delete(f"/api/evidence/{first['id']}").status_code == 200

        responses = [client.post("/api/evidence", json=EVIDENCE) for _ in range(3)]

        assert [r.status_code for r in responses] == [201, 201, 201]
        numbers = [r.json()["evidence"]["evidenceNumber"] for r in responses]
        assert numbers == ["EV-000003", "EV-000004", "EV-000005"]

    def test_client_supplied_duplicate_is_409(self, client):
        client.post("/api/evidence", json={**EVIDENCE, "evidenceNumber": "EV-CUSTOM"})

        response = client.post("/api/evidence", json={**EVIDENCE, "evidenceNumber": "EV-CUSTOM"})

        assert response.status_code == 409
        assert response.json() == {"error": "Evidence number already exists"}
