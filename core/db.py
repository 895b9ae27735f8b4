import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from core.environment import get_environment

logger = logging.getLogger(__name__)


class MongoManager:
    """Conexão única do processo com o MongoDB (feedback, optin e users)."""

    def __init__(self, uri: str, db_name: str, server_timeout_ms: int = 5_000):
        self._uri = uri
        self._db_name = db_name
        self._server_timeout_ms = server_timeout_ms
        self._client: Optional[AsyncIOMotorClient] = None

    async def connect(self) -> None:
        if self._client:
            return
        self._client = AsyncIOMotorClient(self._uri, serverSelectionTimeoutMS=self._server_timeout_ms)
        await self._client.admin.command("ping")
        logger.info("MongoDB connected (%s).", self._db_name)

    async def disconnect(self) -> None:
        if self._client:
            self._client.close()
            self._client = None
            logger.info("MongoDB disconnected.")

    def get_db(self, db_name: str = None) -> AsyncIOMotorDatabase:
        if not self._client:
            raise RuntimeError("MongoDB client not initialized. Call connect() first.")
        return self._client[db_name or self._db_name]


_env = get_environment()
mongo_manager = MongoManager(_env.DATABASE_URI, _env.DATABASE_NAME)
