from __future__ import annotations

import asyncio
import json

from persistence.disk_store import DurableStore
from persistence.repositories import CollectionAccessor, create_model, get_default_store, matches_query


def test_collection_accessor_lifecycle(store):
    async def _run():
        users = CollectionAccessor(store, "users")

        alice = await users.create({"username": "alice"})
        assert alice["_id"]
        assert alice["createdAt"] == alice["updatedAt"]
        assert alice["username"] == "alice"

        updated = await users.find_by_id_and_update(alice["_id"], {"username": "alice2"})
        assert updated is not None
        assert updated["_id"] == alice["_id"]
        assert updated["createdAt"] == alice["createdAt"]
        assert updated["updatedAt"] >= alice["updatedAt"]
        assert updated["username"] == "alice2"

        assert await users.find_by_id_and_delete(alice["_id"]) == {"_id": alice["_id"]}
        assert await users.find_by_id(alice["_id"]) is None

        assert await users.find_by_id_and_update(alice["_id"], {"username": "ghost"}) is None
        assert await users.find_by_id_and_delete(alice["_id"]) is None

    asyncio.run(_run())


def test_find_is_exact_conjunction(store):
    async def _run():
        users = create_model("users", store)
        await users.create({"_id": "1", "role": "admin", "active": True})
        await users.create({"_id": "2", "role": "admin", "active": False})
        await users.create({"_id": "3", "role": "player", "active": True})

        found = await users.find({"role": "admin", "active": True})
        assert [u["_id"] for u in found] == ["1"]

        assert [u["_id"] for u in await users.find({"role": "admin"})] == ["1", "2"]
        assert [u["_id"] for u in await users.find()] == ["1", "2", "3"]
        assert [u["_id"] for u in await users.find({})] == ["1", "2", "3"]
        assert await users.find({"role": "gm"}) == []

        first = await users.find_one({"active": True})
        assert first is not None and first["_id"] == "1"
        assert await users.find_one({"role": "nobody"}) is None

        assert await users.count_documents() == 3
        assert await users.count_documents({"active": True}) == 2

    asyncio.run(_run())


def test_matches_query_uses_strict_equality():
    record = {"active": True, "seats": 1, "price": 10.0, "gm": "u1"}

    assert matches_query(record, {"seats": 1})
    assert matches_query(record, {"price": 10})
    assert not matches_query(record, {"active": 1})
    assert not matches_query(record, {"seats": True})
    assert not matches_query(record, {"seats": "1"})
    # a missing field never matches, not even None
    assert not matches_query(record, {"bio": None})


def test_default_store_lives_under_working_directory(sandbox_cwd):
    async def _run():
        games = create_model("games")
        created = await games.create({"title": "Call of Cthulhu one-shot", "system": "call_of_cthulhu"})
        return created

    created = asyncio.run(_run())

    path = sandbox_cwd / "data" / "db.json"
    assert get_default_store().path == path
    on_disk = json.loads(path.read_text(encoding="utf-8"))
    assert [g["_id"] for g in on_disk["games"]] == [created["_id"]]


def test_default_store_honors_env_path(sandbox_cwd, monkeypatch):
    monkeypatch.setenv("KAZRPG_DB_PATH", "custom/store.json")

    store = get_default_store()

    assert store.path == sandbox_cwd / "custom" / "store.json"
    assert store.path.exists()
    assert get_default_store() is store


def test_accessors_share_one_store(db_path):
    async def _run():
        store = DurableStore(db_path)
        writer = create_model("reviews", store)
        reader = create_model("reviews", store)

        review = await writer.create({"rating": 5, "comment": "Great GM"})
        assert (await reader.find_by_id(review["_id"]))["comment"] == "Great GM"

        # concurrent writes through worker threads are serialized by the store lock
        await asyncio.gather(*(writer.create({"rating": 4}) for _ in range(25)))
        assert await reader.count_documents() == 26

    asyncio.run(_run())
    assert len(json.loads(db_path.read_text(encoding="utf-8"))["reviews"]) == 26


def test_matches_query_is_strict_inside_nested_values():
    record = {"flags": {"x": 1, "y": [True, 2.0]}, "tags": [1, "a"]}

    assert matches_query(record, {"flags": {"x": 1, "y": [True, 2]}})
    assert not matches_query(record, {"flags": {"x": True, "y": [True, 2]}})
    assert not matches_query(record, {"flags": {"x": 1, "y": [1, 2]}})
    assert not matches_query(record, {"flags": {"x": 1}})
    assert not matches_query(record, {"tags": [True, "a"]})
    assert matches_query(record, {"tags": [1.0, "a"]})
