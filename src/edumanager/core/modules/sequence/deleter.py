from typing import Any
from uuid import UUID

import structlog
from pymongo.asynchronous.collection import AsyncCollection

from edumanager.core.db import store_errors
from edumanager.core.modules.sequence.models import BASELINE
from edumanager.core.modules.sequence.service import SequenceService
from edumanager.errors import NotFoundError

logger = structlog.get_logger(__name__)


class RecordDeleter:
    """Deletes records and resets their sequence once the collection is empty.

    The emptiness check and the reset are not atomic with the delete or with
    concurrent creates: a record inserted between the count and the reset keeps
    its id while the counter goes back to the baseline.
    """

    def __init__(
        self,
        store: SequenceService,
        collection: AsyncCollection[dict[str, Any]],
        sequence_name: str,
        baseline: int = BASELINE,
        reclaim: bool = True,
    ) -> None:
        self._store = store
        self._collection = collection
        self._sequence_name = sequence_name
        self._baseline = baseline
        self._reclaim = reclaim

    async def delete_and_maybe_reclaim(self, record_id: UUID) -> dict[str, Any]:
        """Delete a record by storage key and return the deleted document."""
        with store_errors():
            doc = await self._collection.find_one_and_delete({"_id": record_id})
        if doc is None:
            raise NotFoundError(f"Record not found: {record_id}")

        if self._reclaim:
            with store_errors():
                remaining = await self._collection.count_documents({})
            if remaining == 0:
                await self._store.reset(self._sequence_name, self._baseline)
                logger.info("sequence_reclaimed", sequence=self._sequence_name, collection=self._collection.name)
        return doc
