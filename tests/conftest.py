"""Shared pytest fixtures.

The services are exercised against an in-memory stand-in for the parts of
pymongo's async collection API they use. It raises the real pymongo
exceptions (DuplicateKeyError with keyPattern details, OperationFailure
codes) so error handling is tested the way the server would trigger it.
"""

import asyncio
import copy
import re
from typing import Any
from uuid import uuid4

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError, OperationFailure
from pymongo.results import DeleteResult, InsertOneResult, UpdateResult

from edumanager.app import App
from edumanager.config import Config
from edumanager.core.core import Core
from edumanager.core.modules.sequence.service import SequenceService
from edumanager.web.server import create_fastapi_app

INDEX_NOT_FOUND = 27


def _matches(doc: dict[str, Any], query: dict[str, Any]) -> bool:
    for key, condition in query.items():
        if key == "$or":
            if not any(_matches(doc, sub) for sub in condition):
                return False
            continue
        value = doc.get(key)
        if isinstance(condition, dict) and "$regex" in condition:
            flags = re.IGNORECASE if "i" in condition.get("$options", "") else 0
            if not isinstance(value, str) or not re.search(condition["$regex"], value, flags):
                return False
        elif value != condition:
            return False
    return True


def _apply_update(doc: dict[str, Any], update: dict[str, Any], inserting: bool) -> None:
    for operator, fields in update.items():
        if operator == "$set":
            doc.update(copy.deepcopy(fields))
        elif operator == "$setOnInsert":
            if inserting:
                doc.update(copy.deepcopy(fields))
        elif operator == "$inc":
            for key, amount in fields.items():
                doc[key] = doc.get(key, 0) + amount
        else:
            raise NotImplementedError(operator)


class FakeCursor:
    def __init__(self, docs: list[dict[str, Any]]) -> None:
        self._docs = docs

    def __aiter__(self) -> "FakeCursor":
        self._iter = iter(self._docs)
        return self

    async def __anext__(self) -> dict[str, Any]:
        try:
            return next(self._iter)
        except StopIteration:
            raise StopAsyncIteration from None

    async def to_list(self, length: int | None = None) -> list[dict[str, Any]]:
        return self._docs if length is None else self._docs[:length]


class FakeCollection:
    def __init__(self, name: str) -> None:
        self.name = name
        self.docs: list[dict[str, Any]] = []
        self.indexes: dict[str, tuple[list[str], bool]] = {}

    async def create_index(self, keys: list[tuple[str, int]], unique: bool = False, name: str | None = None) -> str:
        index_name = name or "_".join(f"{field}_{direction}" for field, direction in keys)
        self.indexes[index_name] = ([field for field, _ in keys], unique)
        return index_name

    async def drop_index(self, name: str) -> None:
        if name not in self.indexes:
            raise OperationFailure(f"index not found with name [{name}]", code=INDEX_NOT_FOUND)
        del self.indexes[name]

    def _check_unique(self, doc: dict[str, Any], ignore: dict[str, Any] | None = None) -> None:
        unique_indexes = [("_id_", ["_id"]), *[(n, f) for n, (f, unique) in self.indexes.items() if unique]]
        for index_name, fields in unique_indexes:
            key = tuple(doc.get(field) for field in fields)
            for other in self.docs:
                if other is not ignore and tuple(other.get(field) for field in fields) == key:
                    message = f"E11000 duplicate key error collection: test.{self.name} index: {index_name} dup key"
                    raise DuplicateKeyError(
                        message,
                        11000,
                        {
                            "errmsg": message,
                            "keyPattern": dict.fromkeys(fields, 1),
                            "keyValue": dict(zip(fields, key, strict=True)),
                        },
                    )

    def _find(self, query: dict[str, Any]) -> list[dict[str, Any]]:
        return [doc for doc in self.docs if _matches(doc, query)]

    async def insert_one(self, document: dict[str, Any]) -> InsertOneResult:
        await asyncio.sleep(0)
        doc = copy.deepcopy(document)
        doc.setdefault("_id", uuid4())
        self._check_unique(doc)
        self.docs.append(doc)
        return InsertOneResult(doc["_id"], True)

    async def find_one(self, query: dict[str, Any]) -> dict[str, Any] | None:
        await asyncio.sleep(0)
        found = self._find(query)
        return copy.deepcopy(found[0]) if found else None

    def find(
        self, query: dict[str, Any] | None = None, sort: list[tuple[str, int]] | None = None, skip: int = 0, limit: int = 0
    ) -> FakeCursor:
        docs = self._find(query or {})
        for field, direction in reversed(sort or []):
            docs.sort(key=lambda doc, field=field: doc[field], reverse=direction < 0)
        docs = docs[skip:]
        if limit:
            docs = docs[:limit]
        return FakeCursor(copy.deepcopy(docs))

    async def count_documents(self, query: dict[str, Any]) -> int:
        await asyncio.sleep(0)
        return len(self._find(query))

    def _upsert(self, query: dict[str, Any], update: dict[str, Any]) -> dict[str, Any]:
        doc = {key: copy.deepcopy(value) for key, value in query.items() if not key.startswith("$")}
        _apply_update(doc, update, inserting=True)
        doc.setdefault("_id", uuid4())
        self._check_unique(doc)
        self.docs.append(doc)
        return doc

    async def update_one(self, query: dict[str, Any], update: dict[str, Any], upsert: bool = False) -> UpdateResult:
        await asyncio.sleep(0)
        found = self._find(query)
        if found:
            _apply_update(found[0], update, inserting=False)
            return UpdateResult({"n": 1, "nModified": 1}, True)
        if upsert:
            doc = self._upsert(query, update)
            return UpdateResult({"n": 1, "nModified": 0, "upserted": doc["_id"]}, True)
        return UpdateResult({"n": 0, "nModified": 0}, True)

    async def find_one_and_update(
        self,
        query: dict[str, Any],
        update: dict[str, Any],
        upsert: bool = False,
        return_document: bool = ReturnDocument.BEFORE,
    ) -> dict[str, Any] | None:
        await asyncio.sleep(0)
        found = self._find(query)
        if found:
            before = copy.deepcopy(found[0])
            _apply_update(found[0], update, inserting=False)
            return copy.deepcopy(found[0]) if return_document == ReturnDocument.AFTER else before
        if upsert:
            doc = self._upsert(query, update)
            return copy.deepcopy(doc) if return_document == ReturnDocument.AFTER else None
        return None

    async def find_one_and_delete(self, query: dict[str, Any]) -> dict[str, Any] | None:
        await asyncio.sleep(0)
        found = self._find(query)
        if not found:
            return None
        self.docs.remove(found[0])
        return found[0]

    async def delete_one(self, query: dict[str, Any]) -> DeleteResult:
        await asyncio.sleep(0)
        found = self._find(query)
        if not found:
            return DeleteResult({"n": 0}, True)
        self.docs.remove(found[0])
        return DeleteResult({"n": 1}, True)


class FakeDatabase:
    def __init__(self) -> None:
        self._collections: dict[str, FakeCollection] = {}

    def get_collection(self, name: str) -> FakeCollection:
        if name not in self._collections:
            self._collections[name] = FakeCollection(name)
        return self._collections[name]


class FakeMongoClient:
    def __init__(self) -> None:
        self.database = FakeDatabase()
        self.closed = False

    def get_database(self, name: str) -> FakeDatabase:
        return self.database

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def database():
    return FakeDatabase()


@pytest.fixture
def sequence_service(database):
    return SequenceService(database)


@pytest.fixture
def config():
    return Config(database_url="mongodb://localhost:27017/edumanager_test", debug=True)


@pytest.fixture
def mongo_client():
    return FakeMongoClient()


@pytest_asyncio.fixture
async def core(config, mongo_client):
    """Started Core over an in-memory database."""
    core = Core(config, mongo_client)
    async with core.lifespan():
        yield core


@pytest.fixture
def client(config, mongo_client):
    """HTTP client for the FastAPI app over an in-memory database."""
    app = App(config, mongo_client)
    with TestClient(create_fastapi_app(app, config)) as test_client:
        yield test_client
