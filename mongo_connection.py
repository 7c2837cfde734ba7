# mongo_connection.py
import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

# MongoDB & Environment
from dotenv import load_dotenv
from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.errors import PyMongoError

load_dotenv()

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    mongo_host: str = "localhost"
    mongo_port: int = 27017
    mongo_uri: Optional[str] = None
    database: str = "todoapp"
    collection: str = "todos"
    bind_host: str = "0.0.0.0"
    bind_port: int = 8000
    static_dir: str = "static"
    index_file: str = "templates/index.html"
    log_level: str = "INFO"

    @property
    def connection_string(self) -> str:
        if self.mongo_uri:
            return self.mongo_uri
        return f"mongodb://{self.mongo_host}:{self.mongo_port}"


def _get(env: Mapping[str, str], key: str, default: str) -> str:
    # blank values in .env count as unset
    return env.get(key) or default


def _get_port(env: Mapping[str, str], key: str, default: int) -> int:
    value = env.get(key)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        raise RuntimeError(f"{key} must be a port number, got {value!r}") from None


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build Settings from the environment (``.env`` already loaded)."""
    env = os.environ if environ is None else environ
    defaults = Settings()
    return Settings(
        mongo_host=_get(env, "TODO_DB_HOST", defaults.mongo_host),
        mongo_port=_get_port(env, "TODO_DB_PORT", defaults.mongo_port),
        mongo_uri=env.get("MONGO_URI") or None,
        database=_get(env, "TODO_DB", defaults.database),
        collection=_get(env, "TODO_TABLE", defaults.collection),
        bind_host=_get(env, "TODO_BIND_HOST", defaults.bind_host),
        bind_port=_get_port(env, "TODO_BIND_PORT", defaults.bind_port),
        static_dir=_get(env, "TODO_STATIC_DIR", defaults.static_dir),
        index_file=_get(env, "TODO_INDEX_FILE", defaults.index_file),
        log_level=_get(env, "TODO_LOG_LEVEL", defaults.log_level).upper(),
    )


async def open_client(settings: Settings) -> AsyncIOMotorClient:
    """Connect to MongoDB and make sure the server answers before returning."""
    client = AsyncIOMotorClient(settings.connection_string)
    try:
        await client.admin.command("ping")
    except PyMongoError as e:
        logger.error("Error connecting to %s: %s", settings.connection_string, e)
        client.close()
        raise
    logger.info("Connected to MongoDB at %s", settings.connection_string)
    return client
