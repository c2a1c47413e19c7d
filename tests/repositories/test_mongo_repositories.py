from datetime import datetime

import mongomock
import pytest
from bson import ObjectId

from app.core.exceptions import DatabaseUnavailableError
from app.db.mongo import ensure_indexes, set_database
from app.repositories import (
    CustodialRecordRepository,
    EvidenceRepository,
    GeofileRepository,
    UserRepository,
)
from app.repositories.base import (
    format_record_number,
    parse_object_id,
    serialize_document,
    strip_identifiers,
)
from app.repositories.users import public_user


class TestHelpers:
    def test_format_record_number(self):
        assert format_record_number("EV", 1) == "EV-000001"
        assert format_record_number("CR", 1234567) == "CR-1234567"

    def test_parse_object_id(self):
        oid = ObjectId()
        assert parse_object_id(str(oid)) == oid
        assert parse_object_id("nope") is None
        assert parse_object_id(None) is None

    def test_strip_identifiers(self):
        assert strip_identifiers({"_id": 1, "id": "x", "name": "a"}) == {"name": "a"}

    def test_serialize_document(self):
        oid = ObjectId()
        data = serialize_document({"_id": oid, "createdAt": datetime(2024, 1, 2, 3, 4, 5), "n": 1})

        assert data["id"] == str(oid)
        assert data["_id"] == str(oid)
        assert data["createdAt"] == "2024-01-02T03:04:05"
        assert data["n"] == 1


@pytest.mark.asyncio
async def test_evidence_numbers_are_sequential(mongo_db):
    repo = EvidenceRepository(mongo_db)

    first = await repo.create({"type": "a", "description": "b", "location": "c"})
    second = await repo.create({"type": "a", "description": "b", "location": "c", "id": "client-id"})

    assert first["evidenceNumber"] == "EV-000001"
    assert second["evidenceNumber"] == "EV-000002"
    assert isinstance(second["_id"], ObjectId)
    assert "id" not in second
    assert first["createdAt"] == first["updatedAt"]


@pytest.mark.asyncio
async def test_custodial_numbers_use_their_own_prefix(mongo_db):
    record = await CustodialRecordRepository(mongo_db).create({"fullName": "A", "offense": "B"})

    assert record["recordNumber"] == "CR-000001"


@pytest.mark.asyncio
async def test_unique_index_rejects_duplicate_numbers(mongo_db):
    await ensure_indexes(mongo_db)
    repo = EvidenceRepository(mongo_db)
    await repo.create({"evidenceNumber": "EV-000001"})

    with pytest.raises(mongomock.DuplicateKeyError):
        await repo.create({"evidenceNumber": "EV-000001"})


@pytest.mark.asyncio
async def test_update_and_delete(mongo_db):
    repo = EvidenceRepository(mongo_db)
    created = await repo.create({"type": "a"})
    record_id = str(created["_id"])

    assert await repo.update(record_id, {"type": "b", "_id": "ignored"})
    updated = await repo.get_by_id(record_id)
    assert updated["type"] == "b"
    assert updated["_id"] == created["_id"]

    assert await repo.delete(record_id)
    assert await repo.get_by_id(record_id) is None
    assert not await repo.delete(record_id)
    assert not await repo.update(record_id, {"type": "c"})


@pytest.mark.asyncio
async def test_update_with_unchanged_values_still_matches(mongo_db):
    repo = CustodialRecordRepository(mongo_db)
    created = await repo.create({"fullName": "A", "offense": "B"})

    assert await repo.update(str(created["_id"]), {"fullName": "A"})


@pytest.mark.asyncio
async def test_invalid_ids_are_misses(mongo_db):
    repo = GeofileRepository(mongo_db)

    assert await repo.get_by_id("not-an-id") is None
    assert not await repo.update("not-an-id", {"name": "x"})
    assert not await repo.delete("not-an-id")


@pytest.mark.asyncio
async def test_geofiles_list_by_type(mongo_db):
    repo = GeofileRepository(mongo_db)
    await repo.create({"name": "a", "fileType": "kml"})
    await repo.create({"name": "b", "fileType": "csv"})

    assert [g["name"] for g in await repo.list_by_type(".KML")] == ["a"]
    assert len(await repo.list_by_type()) == 2
    assert await repo.count({"fileType": "csv"}) == 1


@pytest.mark.asyncio
async def test_users_lookup_and_public_view(mongo_db):
    repo = UserRepository(mongo_db)
    await repo.create({"username": "admin", "passwordHash": "x", "role": "admin", "fullName": "Admin"})

    user = await repo.find_by_username("admin")
    assert public_user(user) == {"id": str(user["_id"]), "username": "admin", "fullName": "Admin", "role": "admin"}
    assert await repo.find_by_username("ghost") is None


@pytest.mark.asyncio
async def test_default_database_comes_from_connection(mongo_db):
    repo = EvidenceRepository()

    with pytest.raises(DatabaseUnavailableError):
        await repo.count()

    set_database(mongo_db)
    assert await repo.count() == 0


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "repo_class, field, prefix",
    [(EvidenceRepository, "evidenceNumber", "EV"), (CustodialRecordRepository, "recordNumber", "CR")],
)
async def test_numbering_skips_past_taken_numbers_after_delete(mongo_db, repo_class, field, prefix):
    await ensure_indexes(mongo_db)
    repo = repo_class(mongo_db)
    first = await repo.create({"fullName": "A", "offense": "B"})
    await repo.create({"fullName": "A", "offense": "B"})
    await repo.delete(str(first["_id"]))

    created = [await repo.create({"fullName": "A", "offense": "B"}) for _ in range(3)]

    assert [doc[field] for doc in created] == [f"{prefix}-000003", f"{prefix}-000004", f"{prefix}-000005"]


@pytest.mark.asyncio
async def test_highest_number_ignores_foreign_formats(mongo_db):
    repo = EvidenceRepository(mongo_db)
    await repo.create({"evidenceNumber": "EV-000007"})
    await repo.create({"evidenceNumber": "LAB-2024-99"})

    assert await repo.highest_number() == 7
