# server.py
import logging
import os
from contextlib import asynccontextmanager
from typing import List, Optional

import uvicorn
from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles
from pydantic import ValidationError
from pymongo.errors import PyMongoError

from helper import configure_logging
from models import CreatedTodo, Todo, TodoItem, WriteAck
from mongo_connection import Settings, load_settings, open_client
from todo_store import TodoNotFound, TodoStore

logger = logging.getLogger(__name__)

router = APIRouter()

# Driver failures, plus stored documents that no longer fit the Todo shape
STORAGE_ERRORS = (PyMongoError, ValidationError)


def get_store(request: Request) -> TodoStore:
    return request.app.state.store


def _not_found(e: TodoNotFound) -> HTTPException:
    return HTTPException(status_code=404, detail=str(e))


def _storage_error(action: str, e: Exception) -> HTTPException:
    logger.exception("Error %s", action)
    return HTTPException(status_code=500, detail=f"Error {action}: {str(e)}")


# API Routes
@router.get("/todos", response_model=List[Todo], response_model_exclude_none=True)
async def list_todos(store: TodoStore = Depends(get_store)):
    try:
        return await store.list_all()
    except STORAGE_ERRORS as e:
        raise _storage_error("fetching todos", e)


@router.post("/todos", response_model=CreatedTodo)
async def create_todo(todo: TodoItem, store: TodoStore = Depends(get_store)):
    try:
        ack = await store.insert(todo)
    except STORAGE_ERRORS as e:
        raise _storage_error("inserting todo", e)
    return CreatedTodo(id=ack.generated_keys[0])


@router.get("/todos/{todo_id}", response_model=Todo, response_model_exclude_none=True)
async def get_todo(todo_id: str, store: TodoStore = Depends(get_store)):
    try:
        return await store.get_by_id(todo_id)
    except TodoNotFound as e:
        raise _not_found(e)
    except STORAGE_ERRORS as e:
        raise _storage_error(f"fetching todo {todo_id}", e)


@router.put("/todos/{todo_id}", response_model=WriteAck)
async def replace_todo(todo_id: str, todo: TodoItem, store: TodoStore = Depends(get_store)):
    try:
        return await store.replace(todo_id, todo)
    except TodoNotFound as e:
        raise _not_found(e)
    except STORAGE_ERRORS as e:
        raise _storage_error(f"replacing todo {todo_id}", e)


@router.delete("/todos/{todo_id}", response_model=WriteAck)
async def delete_todo(todo_id: str, store: TodoStore = Depends(get_store)):
    try:
        await store.get_by_id(todo_id)
        return await store.delete_by_id(todo_id)
    except TodoNotFound as e:
        raise _not_found(e)
    except STORAGE_ERRORS as e:
        raise _storage_error(f"deleting todo {todo_id}", e)


def create_app(settings: Optional[Settings] = None, store: Optional[TodoStore] = None) -> FastAPI:
    """Build the FastAPI app.

    Without ``store`` the lifespan connects to MongoDB from ``settings`` and
    fails startup when the server can't be reached.
    """
    settings = settings or load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        client = None
        todo_store = store
        if todo_store is None:
            client = await open_client(settings)
            todo_store = TodoStore(client[settings.database], settings.collection)

        await todo_store.ensure_schema()
        app.state.store = todo_store
        try:
            yield
        finally:
            if client is not None:
                client.close()

    app = FastAPI(title="Todo API", lifespan=lifespan)
    app.include_router(router)

    @app.exception_handler(RequestValidationError)
    async def log_bad_request(request: Request, exc: RequestValidationError):
        logger.warning("Rejected %s %s: %s", request.method, request.url.path, exc.errors())
        return await request_validation_exception_handler(request, exc)

    # Front-end
    app.mount("/static", StaticFiles(directory=settings.static_dir, check_dir=False), name="static")

    @app.get("/", include_in_schema=False)
    async def index():
        if not os.path.isfile(settings.index_file):
            logger.error("Index file %s not found", settings.index_file)
            raise HTTPException(status_code=404, detail="Index page not found")
        return FileResponse(settings.index_file, media_type="text/html")

    return app


def main() -> None:
    settings = load_settings()
    configure_logging(settings.log_level)
    logger.info("🚀 Starting todo server on %s:%s", settings.bind_host, settings.bind_port)
    uvicorn.run(
        create_app(settings),
        host=settings.bind_host,
        port=settings.bind_port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
