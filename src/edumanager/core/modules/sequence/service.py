from typing import Any

import structlog
from pymongo import ReturnDocument
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import DuplicateKeyError

from edumanager.core.core import Service
from edumanager.core.db import store_errors
from edumanager.core.modules.sequence.models import BASELINE, Sequence

logger = structlog.get_logger(__name__)


class SequenceService(Service):
    """Durable atomic counters, one document per sequence name."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("counters")

    async def ensure_initialized(self, name: str) -> None:
        """Create the sequence at the baseline if it does not exist yet. Idempotent."""
        try:
            with store_errors():
                await self._collection.update_one({"_id": name}, {"$setOnInsert": {"value": BASELINE}}, upsert=True)
        except DuplicateKeyError:
            # A concurrent upsert inserted the same _id first
            logger.debug("sequence_init_race", name=name)

    async def increment_and_get(self, name: str) -> int:
        """Atomically increment the sequence and return the new value.

        Unknown names are created on the fly, so the first call returns BASELINE + 1.
        """
        with store_errors():
            result = await self._collection.find_one_and_update(
                {"_id": name},
                {"$inc": {"value": 1}},
                upsert=True,
                return_document=ReturnDocument.AFTER,
            )
        return Sequence.model_validate(result).value

    async def reset(self, name: str, baseline: int = BASELINE) -> None:
        """Unconditionally set the sequence value. Races with concurrent increments."""
        with store_errors():
            await self._collection.update_one({"_id": name}, {"$set": {"value": baseline}}, upsert=True)
        logger.info("sequence_reset", name=name, baseline=baseline)

    async def get_value(self, name: str) -> int:
        """Get the current value without incrementing."""
        with store_errors():
            doc = await self._collection.find_one({"_id": name})
        if doc is None:
            return BASELINE
        return Sequence.model_validate(doc).value
