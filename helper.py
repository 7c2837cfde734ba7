import logging
import sys
from typing import Optional
from bson import ObjectId
from bson.errors import InvalidId
from datetime import datetime

# Helper function to serialize MongoDB documents
def serialize_todo(todo):
    """Convert MongoDB document to JSON-serializable dict with ``id`` in place of ``_id``"""
    if todo is None:
        return None

    serialized = {}
    for key, value in todo.items():
        if key == "_id":
            key = "id"
        if isinstance(value, ObjectId):
            serialized[key] = str(value)
        elif isinstance(value, datetime):
            serialized[key] = value.isoformat()
        else:
            serialized[key] = value
    return serialized


def to_object_id(value: str) -> Optional[ObjectId]:
    if not isinstance(value, str):
        return None
    try:
        return ObjectId(value)
    except InvalidId:
        return None


def configure_logging(level: str = "INFO") -> None:
    """Send log records to stdout; keep the driver's own chatter at WARNING."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stdout,
        force=True,
    )
    logging.getLogger("pymongo").setLevel(logging.WARNING)
