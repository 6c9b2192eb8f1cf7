"""Game repository for MongoDB persistence."""

import logging
from typing import Any

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import DuplicateKeyError, PyMongoError

from bearos.config import settings
from bearos.models.game import GameState
from bearos.services.game_serializer import deserialize_game, serialize_game

logger = logging.getLogger(__name__)


class VersionConflictError(Exception):
    """A table was saved by another instance since it was loaded."""

    def __init__(self, table_id: str, version: int) -> None:
        super().__init__(f"Table {table_id} is not at version {version - 1}")
        self.table_id = table_id
        self.version = version


class GameRepository:
    """Repository for table persistence using MongoDB.

    Handles table CRUD operations with the async Motor driver.
    Stores the full game state so tables survive restarts.
    """

    def __init__(self) -> None:
        """Initialize repository."""
        self.client: AsyncIOMotorClient[dict[str, Any]] | None = None
        self.db: AsyncIOMotorDatabase[dict[str, Any]] | None = None

    async def connect(self) -> None:
        """Connect to MongoDB and create indexes."""
        try:
            self.client = AsyncIOMotorClient(
                settings.mongodb_uri,
                serverSelectionTimeoutMS=2000,  # 2 second timeout
            )
            self.db = self.client[settings.mongodb_database]

            # Verify connection
            await self.client.admin.command("ping")
            logger.info("Connected to MongoDB: %s", settings.mongodb_database)

            await self._create_indexes()

        except PyMongoError:
            logger.warning("MongoDB not available")
            raise

    async def _create_indexes(self) -> None:
        """Create indexes for efficient queries."""
        if self.db is None:
            return

        try:
            await self.db.tables.create_index("game_over")
            await self.db.tables.create_index([("game_over", ASCENDING), ("updated_at", DESCENDING)])
            logger.info("MongoDB indexes created successfully")
        except PyMongoError:
            logger.exception("Error creating indexes")

    async def disconnect(self) -> None:
        """Disconnect from MongoDB."""
        if self.client:
            self.client.close()
            logger.info("Disconnected from MongoDB")

    async def save(self, state: GameState) -> bool:
        """Save a table, refusing to overwrite a version it did not start from.

        A new table (version 0) is upserted by id. Any later version replaces
        only the document holding the previous version; if the table has
        moved on elsewhere the upsert collides on ``_id``.

        Args:
            state: GameState to save

        Returns:
            True if successful

        Raises:
            VersionConflictError: If the stored table is not at ``state.version - 1``
        """
        if self.db is None:
            return False

        query: dict[str, Any] = {"_id": state.table_id}
        if state.version > 0:
            query["version"] = state.version - 1

        try:
            result = await self.db.tables.replace_one(query, serialize_game(state), upsert=True)
            success = result.acknowledged
        except DuplicateKeyError as e:
            logger.warning("Table %s changed elsewhere, version %d rejected", state.table_id, state.version)
            raise VersionConflictError(state.table_id, state.version) from e
        except PyMongoError:
            logger.exception("Error saving table %s", state.table_id)
            return False
        else:
            if success:
                logger.debug("Table %s saved (version %d)", state.table_id, state.version)
            return success

    async def find_by_id(self, table_id: str) -> GameState | None:
        """Find and restore a table by ID.

        Args:
            table_id: Table identifier

        Returns:
            Restored GameState or None
        """
        if self.db is None:
            return None

        try:
            result = await self.db.tables.find_one({"_id": table_id})
        except PyMongoError:
            logger.exception("Error finding table %s", table_id)
            return None
        else:
            if result:
                return deserialize_game(result)
            return None

    async def find_active(self, limit: int = 100) -> list[GameState]:
        """Find tables whose game is not over.

        Args:
            limit: Maximum number of tables to return

        Returns:
            List of active GameState instances
        """
        if self.db is None:
            return []

        try:
            cursor = self.db.tables.find({"game_over": False}).sort("updated_at", DESCENDING).limit(limit)

            states = []
            async for doc in cursor:
                try:
                    states.append(deserialize_game(doc))
                except (KeyError, ValueError) as e:
                    logger.warning("Error deserializing table %s: %s", doc.get("_id"), e)

        except PyMongoError:
            logger.exception("Error finding active tables")
            return []
        else:
            logger.info("Found %d active tables in database", len(states))
            return states
