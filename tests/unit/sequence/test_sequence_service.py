"""Tests for the atomic sequence store."""

import asyncio

import pytest
from pymongo.errors import DuplicateKeyError, ExecutionTimeout, OperationFailure, ServerSelectionTimeoutError

from edumanager.core.modules.sequence.allocator import IdAllocator
from edumanager.errors import StoreUnavailableError


@pytest.mark.asyncio
class TestSequenceService:
    async def test_ensure_initialized_creates_baseline(self, sequence_service, database):
        await sequence_service.ensure_initialized("studentId")

        assert database.get_collection("counters").docs == [{"_id": "studentId", "value": 0}]

    async def test_ensure_initialized_is_idempotent(self, sequence_service, database):
        await sequence_service.increment_and_get("studentId")
        await sequence_service.increment_and_get("studentId")

        await asyncio.gather(*(sequence_service.ensure_initialized("studentId") for _ in range(5)))

        assert len(database.get_collection("counters").docs) == 1
        assert await sequence_service.get_value("studentId") == 2

    async def test_concurrent_initialization_race_is_tolerated(self, sequence_service, database, monkeypatch):
        counters = database.get_collection("counters")
        calls = []

        async def lose_upsert_race(*args, **kwargs):
            calls.append(args)
            raise DuplicateKeyError(
                "E11000 duplicate key error collection: db.counters index: _id_ dup key", 11000, {"keyPattern": {"_id": 1}}
            )

        monkeypatch.setattr(counters, "update_one", lose_upsert_race)

        await sequence_service.ensure_initialized("studentId")

        assert len(calls) == 1
        assert await IdAllocator(sequence_service).next_id("studentId") == 1

    async def test_increment_unknown_name_auto_initializes(self, sequence_service):
        assert await sequence_service.increment_and_get("fresh") == 1

    async def test_concurrent_increments_are_distinct_and_gapless(self, sequence_service):
        values = await asyncio.gather(*(sequence_service.increment_and_get("studentId") for _ in range(50)))

        assert sorted(values) == list(range(1, 51))

    async def test_sequences_are_independent(self, sequence_service):
        await sequence_service.increment_and_get("a")
        await sequence_service.increment_and_get("a")

        assert await sequence_service.increment_and_get("b") == 1
        assert await sequence_service.get_value("a") == 2

    async def test_reset_sets_value(self, sequence_service):
        for _ in range(3):
            await sequence_service.increment_and_get("studentId")

        await sequence_service.reset("studentId", 0)

        assert await sequence_service.get_value("studentId") == 0
        assert await sequence_service.increment_and_get("studentId") == 1

    async def test_get_value_of_missing_sequence_is_baseline(self, sequence_service):
        assert await sequence_service.get_value("missing") == 0

    @pytest.mark.parametrize(
        "error",
        [
            ServerSelectionTimeoutError("no servers available"),
            ExecutionTimeout("operation exceeded time limit", code=50),
        ],
    )
    async def test_store_failures_raise_store_unavailable(self, sequence_service, database, monkeypatch, error):
        async def fail(*args, **kwargs):
            raise error

        monkeypatch.setattr(database.get_collection("counters"), "find_one_and_update", fail)

        with pytest.raises(StoreUnavailableError):
            await sequence_service.increment_and_get("studentId")

    async def test_other_driver_errors_propagate_unchanged(self, sequence_service, database, monkeypatch):
        error = OperationFailure("not authorized", code=13)

        async def fail(*args, **kwargs):
            raise error

        monkeypatch.setattr(database.get_collection("counters"), "update_one", fail)

        with pytest.raises(OperationFailure) as exc_info:
            await sequence_service.reset("studentId")
        assert exc_info.value is error
