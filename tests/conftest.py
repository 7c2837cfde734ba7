"""Shared test fixtures and in-memory stand-ins for the motor API."""

from pathlib import Path
from types import SimpleNamespace
from typing import Any

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient
from pymongo.errors import CollectionInvalid

from mongo_connection import Settings
from server import create_app
from todo_store import TodoStore


class _FakeCursor:
    def __init__(self, docs: list[dict[str, Any]]):
        self._docs = docs

    async def to_list(self, length=None) -> list[dict[str, Any]]:
        docs = [dict(doc) for doc in self._docs]
        return docs if length is None else docs[:length]


class FakeCollection:
    """Just enough of AsyncIOMotorCollection for TodoStore."""

    def __init__(self):
        self.docs: dict[ObjectId, dict[str, Any]] = {}
        self.fail_with: Exception | None = None

    def _check(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with

    def find(self, query: dict[str, Any]) -> _FakeCursor:
        self._check()
        return _FakeCursor(list(self.docs.values()))

    async def find_one(self, query: dict[str, Any]):
        self._check()
        doc = self.docs.get(query["_id"])
        return dict(doc) if doc is not None else None

    async def insert_one(self, doc: dict[str, Any]):
        self._check()
        oid = ObjectId()
        self.docs[oid] = {"_id": oid, **doc}
        return SimpleNamespace(inserted_id=oid)

    async def replace_one(self, query: dict[str, Any], doc: dict[str, Any]):
        self._check()
        oid = query["_id"]
        if oid not in self.docs:
            return SimpleNamespace(matched_count=0, modified_count=0)
        new_doc = {"_id": oid, **doc}
        modified = int(self.docs[oid] != new_doc)
        self.docs[oid] = new_doc
        return SimpleNamespace(matched_count=1, modified_count=modified)

    async def delete_one(self, query: dict[str, Any]):
        self._check()
        removed = self.docs.pop(query["_id"], None)
        return SimpleNamespace(deleted_count=0 if removed is None else 1)


class FakeDatabase:
    """Just enough of AsyncIOMotorDatabase for TodoStore."""

    def __init__(self, name: str = "todoapp"):
        self.name = name
        self.collections: dict[str, FakeCollection] = {}
        self.create_calls = 0
        self.create_error: Exception | None = None

    def __getitem__(self, name: str) -> FakeCollection:
        return self.collections.setdefault(name, FakeCollection())

    async def create_collection(self, name: str) -> FakeCollection:
        self.create_calls += 1
        if self.create_error is not None:
            raise self.create_error
        if name in self.collections:
            raise CollectionInvalid(f"collection {name} already exists")
        return self[name]


@pytest.fixture
def fake_db() -> FakeDatabase:
    return FakeDatabase()


@pytest.fixture
def store(fake_db: FakeDatabase) -> TodoStore:
    return TodoStore(fake_db, "todos")


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    static_dir = tmp_path / "static"
    static_dir.mkdir()
    (static_dir / "app.js").write_text("console.log('todos');")
    templates = tmp_path / "templates"
    templates.mkdir()
    (templates / "index.html").write_text("<h1>todos</h1>")
    return Settings(
        static_dir=str(static_dir),
        index_file=str(templates / "index.html"),
    )


@pytest.fixture
def client(settings: Settings, store: TodoStore):
    app = create_app(settings, store=store)
    with TestClient(app) as test_client:
        yield test_client
