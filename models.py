from typing import List, Optional

from pydantic import BaseModel


# Todo item schema
class TodoItem(BaseModel):
    title: str = ""
    order: int = 0
    done: bool = False


class Todo(TodoItem):
    id: Optional[str] = None


class CreatedTodo(BaseModel):
    id: str


class WriteAck(BaseModel):
    """What a single storage write changed."""

    inserted: int = 0
    replaced: int = 0
    unchanged: int = 0
    deleted: int = 0
    errors: int = 0
    generated_keys: List[str] = []
