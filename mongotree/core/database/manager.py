from typing import Optional

from gridfs import AsyncGridFSBucket
from loguru import logger
from pymongo import AsyncMongoClient
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.asynchronous.database import AsyncDatabase

from mongotree.core.config import MongoSettings


class MongoManager:
    def __init__(self, settings: Optional[MongoSettings] = None):
        self.settings = settings or MongoSettings()
        self.client: AsyncMongoClient = None
        self.db: AsyncDatabase = None

    def init(self):
        if self.client is not None:
            return
        connection_url = self.settings.connection_url
        self.client = AsyncMongoClient(connection_url)
        self.db = self.client[self.settings.database_name]
        logger.info(f"Connected to MongoDB (Async): {connection_url}/{self.settings.database_name}")

    def get_collection(self, collection_name: str) -> AsyncCollection:
        if self.db is None:
            raise RuntimeError("Database not initialized. Call init() first.")
        return self.db[collection_name]

    def get_bucket(self, bucket_name: str, chunk_size_bytes: Optional[int] = None) -> AsyncGridFSBucket:
        if self.db is None:
            raise RuntimeError("Database not initialized. Call init() first.")
        kwargs = {"bucket_name": bucket_name}
        if chunk_size_bytes:
            kwargs["chunk_size_bytes"] = chunk_size_bytes
        return AsyncGridFSBucket(self.db, **kwargs)

    async def close(self):
        if self.client is not None:
            await self.client.close()
            logger.info("MongoDB connection closed")
        self.client = None
        self.db = None
