"""
Unit tests for the in-memory document store.
"""

import pytest
from market_auth.adapters.memory_document_store import MemoryDocumentStore, matches


def test_matches_equality_and_membership():
    """Equality on a list field means membership."""
    doc = {"status": "shipped", "seller_ids": ["s1", "s2"]}

    assert matches(doc, {"status": "shipped"})
    assert matches(doc, {"seller_ids": "s2"})
    assert not matches(doc, {"seller_ids": "s3"})


def test_matches_operators():
    """Regex, ranges, $in, $ne and $or."""
    doc = {"name": "Blue Mug", "price": 12.5, "category": "kitchen"}

    assert matches(doc, {"name": {"$regex": "mug", "$options": "i"}})
    assert not matches(doc, {"name": {"$regex": "mug"}})
    assert matches(doc, {"price": {"$gte": 10, "$lte": 12.5}})
    assert not matches(doc, {"price": {"$gt": 12.5}})
    assert matches(doc, {"category": {"$in": ["garden", "kitchen"]}})
    assert matches(doc, {"category": {"$ne": "garden"}})
    assert matches(doc, {"$or": [{"name": "Red Mug"}, {"category": "kitchen"}]})
    assert not matches(doc, {"$and": [{"name": "Blue Mug"}, {"category": "garden"}]})


def test_matches_missing_field_never_in_range():
    """Range operators fail on missing fields."""
    assert not matches({}, {"price": {"$gte": 0}})


def test_unknown_operator_raises():
    """Unsupported operators are programming errors."""
    with pytest.raises(ValueError):
        matches({"a": 1}, {"a": {"$where": "1"}})


@pytest.mark.asyncio
async def test_insert_assigns_id_and_created_at():
    """Inserted documents get an id and created_at."""
    store = MemoryDocumentStore()

    doc = await store.insert("products", {"name": "Mug"})

    assert len(doc["id"]) == 24
    assert doc["created_at"] is not None
    assert await store.get("products", doc["id"]) == doc


@pytest.mark.asyncio
async def test_reads_are_copies():
    """Mutating a returned document does not change the store."""
    store = MemoryDocumentStore()
    doc = await store.insert("products", {"name": "Mug", "tags": ["a"]})

    fetched = await store.get("products", doc["id"])
    fetched["tags"].append("b")

    assert (await store.get("products", doc["id"]))["tags"] == ["a"]


@pytest.mark.asyncio
async def test_find_sort_skip_limit():
    """find sorts, skips and limits; missing sort values go last."""
    store = MemoryDocumentStore()
    for price in (5, 1, 3, None, 4):
        await store.insert("products", {"price": price})

    docs = await store.find("products", {}, sort={"price": 1}, skip=1, limit=3)
    assert [d["price"] for d in docs] == [3, 4, 5]

    docs = await store.find("products", {}, sort={"price": -1})
    assert [d["price"] for d in docs] == [5, 4, 3, 1, None]

    assert await store.count("products", {"price": {"$gte": 3}}) == 3


@pytest.mark.asyncio
async def test_update_and_delete():
    """update merges changes and keeps the id; delete reports success."""
    store = MemoryDocumentStore()
    doc = await store.insert("orders", {"status": "pending"})

    updated = await store.update("orders", doc["id"], {"status": "paid", "id": "hijack"})
    assert updated["status"] == "paid"
    assert updated["id"] == doc["id"]

    assert await store.update("orders", "missing", {"status": "x"}) is None
    assert await store.delete("orders", doc["id"]) is True
    assert await store.delete("orders", doc["id"]) is False
