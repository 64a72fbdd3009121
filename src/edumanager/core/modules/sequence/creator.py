from collections.abc import Callable
from typing import Any

import structlog
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.errors import DuplicateKeyError

from edumanager.core.db import IdField, MongoModel, OtherField, conflict_field, store_errors
from edumanager.core.modules.sequence.allocator import IdAllocator
from edumanager.errors import AllocationExhaustedError, DuplicateFieldError

logger = structlog.get_logger(__name__)

DEFAULT_MAX_RETRIES = 5


class RecordCreator[M: MongoModel]:
    """Inserts records tagged with a freshly allocated sequence id.

    A unique-index collision on the id field allocates a new id and tries
    again, up to max_retries attempts. Ids consumed by failed attempts are
    not given back, so the sequence may have gaps.
    """

    def __init__(
        self,
        allocator: IdAllocator,
        collection: AsyncCollection[dict[str, Any]],
        sequence_name: str,
        id_field: str,
        max_retries: int = DEFAULT_MAX_RETRIES,
    ) -> None:
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        self._allocator = allocator
        self._collection = collection
        self._sequence_name = sequence_name
        self._id_field = id_field
        self._max_retries = max_retries

    async def create(self, build: Callable[[int], M]) -> M:
        """Allocate an id, build the record with it and insert it.

        Raises:
            DuplicateFieldError: a unique index on another field rejected the record.
            AllocationExhaustedError: every attempt collided on the id field.
            StoreUnavailableError: MongoDB is unreachable or timed out.
        """
        for attempt in range(1, self._max_retries + 1):
            sequence_id = await self._allocator.next_id(self._sequence_name)
            record = build(sequence_id)
            try:
                with store_errors():
                    await self._collection.insert_one(record.to_mongo())
            except DuplicateKeyError as e:
                match conflict_field(e, self._id_field):
                    case IdField():
                        logger.warning(
                            "sequence_id_collision",
                            sequence=self._sequence_name,
                            sequence_id=sequence_id,
                            attempt=attempt,
                            max_retries=self._max_retries,
                        )
                        continue
                    case OtherField(name=name):
                        raise DuplicateFieldError(name) from e
            return record

        raise AllocationExhaustedError(self._sequence_name, self._max_retries)
