import re
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Self
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field
from pymongo.asynchronous.cursor import AsyncCursor
from pymongo.errors import ConnectionFailure, DuplicateKeyError, PyMongoError

from edumanager.errors import StoreUnavailableError

DUPLICATE_INDEX_RE = re.compile(r"index: (\S+) dup key")


class MongoModel(BaseModel):
    id: UUID = Field(alias="_id", serialization_alias="id", default_factory=uuid4)

    model_config = ConfigDict(
        populate_by_name=True,
        arbitrary_types_allowed=True,
        json_schema_serialization_defaults_required=True,
    )

    def to_mongo(self) -> dict[str, Any]:
        """Convert the model to a dictionary for MongoDB storage with _id field."""
        data = self.model_dump()
        if "id" in data:
            data["_id"] = data.pop("id")  # Rename id → _id for MongoDB
        return data

    @classmethod
    async def list_cursor(cls, cursor: AsyncCursor[dict[str, Any]]) -> list[Self]:
        """Iterate over an AsyncCursor and return a list of model instances."""
        return [cls.model_validate(item) async for item in cursor]


@contextmanager
def store_errors() -> Iterator[None]:
    """Translate transport failures and driver timeouts into StoreUnavailableError.

    Every other driver error (duplicate keys included) is re-raised unchanged.
    """
    try:
        yield
    except PyMongoError as e:
        if isinstance(e, ConnectionFailure) or e.timeout:
            raise StoreUnavailableError(f"Database unavailable: {e}") from e
        raise


@dataclass(frozen=True)
class IdField:
    """The conflict is on the field holding an allocated sequence id."""

    name: str


@dataclass(frozen=True)
class OtherField:
    """The conflict is on any other unique field or index."""

    name: str


type ConflictField = IdField | OtherField


def conflict_field(error: DuplicateKeyError, id_field: str) -> ConflictField:
    """Classify a duplicate key error by the field it was raised for.

    Uses the server's keyPattern details, falling back to the index name
    quoted in the error message for servers that omit them.
    """
    details = error.details or {}
    key_pattern: dict[str, Any] = details.get("keyPattern") or {}
    if key_pattern:
        if id_field in key_pattern:
            return IdField(id_field)
        return OtherField(next(iter(key_pattern)))

    match = DUPLICATE_INDEX_RE.search(str(details.get("errmsg") or error))
    # Single-field index names look like "<field>_1"
    field = match.group(1).rsplit("_", 1)[0] if match else "unknown"
    if field == id_field:
        return IdField(id_field)
    return OtherField(field)
