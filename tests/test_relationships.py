"""Tests for batched relationship writes."""

import pytest

from nutrient_normalizer.domain.nutrients import RawRelationship
from nutrient_normalizer.services.relationships import RelationshipBatcher
from nutrient_normalizer.services.store import BulkInsertError, StoreUnavailableError
from tests.conftest import InMemoryDocumentStore


def _raw(count: int, identity: int = 1003) -> list[RawRelationship]:
    return [
        RawRelationship(food_id=f"food-{index}", identity=identity, amount=float(index))
        for index in range(count)
    ]


def test_writes_in_fixed_size_batches(store: InMemoryDocumentStore) -> None:
    batcher = RelationshipBatcher(store=store, collection="foodnutrients")

    report = batcher.write(_raw(2500), {1003: "nutrient-1"})

    assert store.insert_calls == [
        ("foodnutrients", 1000),
        ("foodnutrients", 1000),
        ("foodnutrients", 500),
    ]
    assert report.created == 2500
    assert report.batches == 3
    assert report.errors == []
    assert len(store.collections["foodnutrients"]) == 2500


def test_exact_multiple_has_no_trailing_batch(store: InMemoryDocumentStore) -> None:
    batcher = RelationshipBatcher(store=store, collection="fn", batch_size=2)

    report = batcher.write(_raw(4), {1003: "n"})

    assert [size for _, size in store.insert_calls] == [2, 2]
    assert report.created == 4


def test_unknown_identities_are_skipped(store: InMemoryDocumentStore) -> None:
    batcher = RelationshipBatcher(store=store, collection="fn")
    relationships = _raw(2) + _raw(3, identity=9999)

    report = batcher.write(relationships, {1003: "n"})

    assert report.created == 2
    assert report.skipped == 3
    assert report.errors == []


def test_no_insert_for_empty_input(store: InMemoryDocumentStore) -> None:
    report = RelationshipBatcher(store=store, collection="fn").write([], {})

    assert store.insert_calls == []
    assert report.created == 0


def test_failed_batch_is_recorded_and_processing_continues(
    store: InMemoryDocumentStore,
) -> None:
    store.fail_next_insert("fn", RuntimeError("disk full"))
    batcher = RelationshipBatcher(store=store, collection="fn", batch_size=10)

    report = batcher.write(_raw(25), {1003: "n"})

    assert report.batches == 3
    assert report.failed_batches == 1
    assert report.created == 15
    assert report.errors == ["Relationship batch 1 failed: disk full"]


def test_partial_batch_counts_inserted_documents(
    store: InMemoryDocumentStore,
) -> None:
    store.fail_next_insert("fn", BulkInsertError(7, "3 duplicate key errors"))
    batcher = RelationshipBatcher(store=store, collection="fn", batch_size=10)

    report = batcher.write(_raw(10), {1003: "n"})

    assert report.created == 7
    assert report.failed_batches == 1
    assert "7/10 inserted" in report.errors[0]


def test_unavailable_store_is_flagged(store: InMemoryDocumentStore) -> None:
    store.fail_next_insert("fn", StoreUnavailableError("timeout"))

    report = RelationshipBatcher(store=store, collection="fn").write(
        _raw(1), {1003: "n"}
    )

    assert report.unavailable is True
    assert report.created == 0


def test_writing_stops_once_store_is_unreachable(
    store: InMemoryDocumentStore,
) -> None:
    store.unavailable = True
    batcher = RelationshipBatcher(store=store, collection="foodnutrients")

    report = batcher.write(_raw(2500), {1003: "n"})

    assert store.insert_calls == []
    assert report.batches == 1
    assert report.failed_batches == 1
    assert report.unavailable is True
    assert report.errors == ["Relationship batch 1 failed: connection refused"]


def test_batches_before_the_outage_are_kept(store: InMemoryDocumentStore) -> None:
    store.fail_next_insert("fn", None)
    store.fail_next_insert("fn", StoreUnavailableError("timeout"))
    batcher = RelationshipBatcher(store=store, collection="fn", batch_size=10)

    report = batcher.write(_raw(35), {1003: "n"})

    assert [size for _, size in store.insert_calls] == [10, 10]
    assert report.created == 10
    assert report.batches == 2
    assert report.unavailable is True


def test_relationship_documents_carry_optional_fields(
    store: InMemoryDocumentStore,
) -> None:
    raw = [
        RawRelationship(
            food_id="food-a",
            identity=1003,
            amount=9.1,
            derivation="Analytical",
            data_points=3,
        )
    ]

    RelationshipBatcher(store=store, collection="fn").write(raw, {1003: "n-1"})

    stored = store.collections["fn"][0]
    assert stored["foodId"] == "food-a"
    assert stored["nutrientId"] == "n-1"
    assert stored["amount"] == 9.1
    assert stored["derivationDescription"] == "Analytical"
    assert stored["dataPoints"] == 3
    assert "min" not in stored


def test_batch_size_must_be_positive(store: InMemoryDocumentStore) -> None:
    with pytest.raises(ValueError):
        RelationshipBatcher(store=store, collection="fn", batch_size=0)
