import logging
from typing import List

from pydantic import ValidationError
from pymongo.errors import CollectionInvalid, PyMongoError

from helper import serialize_todo, to_object_id
from models import Todo, TodoItem, WriteAck

logger = logging.getLogger(__name__)


class TodoNotFound(LookupError):
    def __init__(self, todo_id: str):
        super().__init__(f"Todo {todo_id} not found")
        self.todo_id = todo_id


class TodoStore:
    """Typed operations over the todos collection of one MongoDB database."""

    def __init__(self, database, collection_name: str = "todos"):
        self._db = database
        self._collection_name = collection_name

    @property
    def collection(self):
        return self._db[self._collection_name]

    async def ensure_schema(self) -> None:
        """Create the collection (and with it the database) if it is missing.

        An existing collection counts as success. Other failures are logged and
        left for the first request to surface.
        """
        try:
            await self._db.create_collection(self._collection_name)
            logger.info("Created collection %s.%s", self._db.name, self._collection_name)
        except CollectionInvalid:
            logger.debug("Collection %s.%s already exists", self._db.name, self._collection_name)
        except PyMongoError as e:
            logger.error("Unable to set up database: %s", e)

    async def list_all(self) -> List[Todo]:
        docs = await self.collection.find({}).to_list(length=None)
        todos = []
        for doc in docs:
            try:
                todos.append(Todo(**serialize_todo(doc)))
            except ValidationError as e:
                # documents written outside this API may not fit the Todo shape
                logger.warning("Skipping malformed todo %s: %s", doc.get("_id"), e)
        return todos

    async def get_by_id(self, todo_id: str) -> Todo:
        oid = to_object_id(todo_id)
        if oid is None:
            raise TodoNotFound(todo_id)

        doc = await self.collection.find_one({"_id": oid})
        if doc is None:
            raise TodoNotFound(todo_id)
        return Todo(**serialize_todo(doc))

    async def insert(self, item: TodoItem) -> WriteAck:
        result = await self.collection.insert_one(item.model_dump())
        return WriteAck(inserted=1, generated_keys=[str(result.inserted_id)])

    async def replace(self, todo_id: str, item: TodoItem) -> WriteAck:
        oid = to_object_id(todo_id)
        if oid is None:
            raise TodoNotFound(todo_id)

        result = await self.collection.replace_one({"_id": oid}, item.model_dump())
        if result.matched_count == 0:
            raise TodoNotFound(todo_id)
        return WriteAck(
            replaced=result.modified_count,
            unchanged=result.matched_count - result.modified_count,
        )

    async def delete_by_id(self, todo_id: str) -> WriteAck:
        oid = to_object_id(todo_id)
        if oid is None:
            raise TodoNotFound(todo_id)

        result = await self.collection.delete_one({"_id": oid})
        return WriteAck(deleted=result.deleted_count)
