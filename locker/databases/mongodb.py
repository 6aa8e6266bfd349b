from typing import List, Optional

from beanie import Document, init_beanie
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import PyMongoError, ServerSelectionTimeoutError

from locker.configs.settings import settings
from locker.utils.logging import get_logger

logger = get_logger(__name__)

CLIENT_OPTIONS = {
    "serverSelectionTimeoutMS": 8000,
    "connectTimeoutMS": 8000,
    "socketTimeoutMS": 10000,
    "maxPoolSize": 50,
    "minPoolSize": 0,
    # Expiry and purge thresholds compare aware datetimes
    "tz_aware": True,
}


class MongoDB:
    """Metadata store: deletion markers, share links, smart folders and assignments"""

    def __init__(self):
        self.client: Optional[AsyncIOMotorClient] = None
        self.database: Optional[AsyncIOMotorDatabase] = None

    async def connect(self, document_models: Optional[List[type[Document]]] = None) -> AsyncIOMotorDatabase:
        host = f"{settings.MONGO_HOST or 'localhost'}:{settings.MONGO_PORT}"
        self.client = AsyncIOMotorClient(settings.MONGO_URL, **CLIENT_OPTIONS)
        try:
            await self.client.admin.command("ping")
        except ServerSelectionTimeoutError as e:
            logger.error(f"MongoDB at {host} did not answer in time: {e}")
            await self.disconnect()
            raise ConnectionError(f"Cannot connect to MongoDB at {host}")

        self.database = self.client[settings.MONGO_DB]
        if document_models:
            # Builds the unique (user, path) and token indexes the services rely on
            await init_beanie(database=self.database, document_models=document_models)
            logger.info(f"Beanie initialized on '{settings.MONGO_DB}' with {len(document_models)} collections")
        return self.database

    async def ping(self) -> bool:
        if self.client is None:
            return False
        try:
            await self.client.admin.command("ping")
            return True
        except PyMongoError as e:
            logger.warning(f"MongoDB ping failed: {e}")
            return False

    async def disconnect(self) -> None:
        if self.client is not None:
            self.client.close()
            logger.info("Disconnected from MongoDB")
        self.client = None
        self.database = None


mongodb = MongoDB()
