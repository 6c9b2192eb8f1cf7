"""Table service: owns live tables and serializes actions per table.

Every action on a table runs under that table's ``asyncio.Lock``, so two
requests for the same table are applied one after the other and never
against the same stale state. Accepted states are persisted, announced on
Redis, and pushed to the registered listeners (the WebSocket manager).

Across instances the MongoDB write is conditional on the previous version.
An action computed from a table another instance has already advanced is
rejected with ``error.staleState`` and the cached copy is dropped.
"""

import asyncio
import contextlib
import logging
import random
import uuid
from collections.abc import Callable, Coroutine
from typing import Any

from bearos.config import settings
from bearos.engine import ClearTrick, ErrorCode, InvalidAction, NotFound, Rejection, apply, new_table
from bearos.engine.state_machine import Action
from bearos.models.enums import GameLength, GamePhase
from bearos.models.game import GameState
from bearos.repositories.game_repository import GameRepository, VersionConflictError
from bearos.services.publisher_service import PublisherService

logger = logging.getLogger(__name__)

StateListener = Callable[[GameState], Coroutine[Any, Any, None]]


class TableService:
    """In-memory registry of tables with optional MongoDB and Redis backing."""

    def __init__(
        self,
        auto_clear: bool | None = None,
        clear_delay: float | None = None,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            auto_clear: Clear completed tricks after ``clear_delay``
                (defaults to ``settings.auto_clear_tricks``)
            clear_delay: Seconds a completed trick stays on the table
            rng: Random generator used for every shuffle

        """
        self.tables: dict[str, GameState] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self._clear_tasks: dict[str, asyncio.Task[None]] = {}
        self._listeners: list[StateListener] = []
        self._repository: GameRepository | None = None
        self._publisher: PublisherService | None = None
        self.auto_clear = settings.auto_clear_tricks if auto_clear is None else auto_clear
        self.clear_delay = settings.trick_clear_delay_seconds if clear_delay is None else clear_delay
        self.rng = rng

    def set_services(
        self,
        repository: GameRepository | None,
        publisher: PublisherService | None,
    ) -> None:
        """Set external services for persistence and pub/sub."""
        self._repository = repository
        self._publisher = publisher

    def add_listener(self, listener: StateListener) -> None:
        """Register a coroutine called with every new table state."""
        if listener not in self._listeners:
            self._listeners.append(listener)

    def lock(self, table_id: str) -> asyncio.Lock:
        """Get the lock guarding a table."""
        if table_id not in self._locks:
            self._locks[table_id] = asyncio.Lock()
        return self._locks[table_id]

    async def create_table(self, owner_name: str, table_id: str | None = None) -> GameState:
        """Create a table with its owner seated.

        Raises:
            InvalidAction: If the owner name is empty

        """
        table_id = table_id or uuid.uuid4().hex[:8]
        state = new_table(table_id, owner_name)
        state.game_length = GameLength(settings.default_game_length)
        async with self.lock(table_id):
            self.tables[table_id] = state
            await self._commit(state, "TableCreated")
        logger.info("Table %s created by %s", table_id, state.players[0].name)
        return state

    async def get(self, table_id: str) -> GameState:
        """Get a table, restoring it from MongoDB if it is not in memory.

        Raises:
            NotFound: If the table does not exist

        """
        state = self.tables.get(table_id)
        if state is not None:
            return state

        if self._repository is not None:
            state = await self._repository.find_by_id(table_id)
            if state is not None:
                self.tables[table_id] = state
                logger.info("Restored table %s from MongoDB", table_id)
                return state

        raise NotFound(ErrorCode.TABLE_NOT_FOUND, f"Table {table_id!r} not found", table_id=table_id)

    async def act(self, table_id: str, action: Action) -> GameState:
        """Apply an action to a table.

        Returns:
            The new table state

        Raises:
            Rejection: If the table is unknown or the action is rejected

        """
        async with self.lock(table_id):
            return await self._apply(table_id, action)

    async def _apply(self, table_id: str, action: Action) -> GameState:
        state = await self.get(table_id)
        result = apply(state, action, self.rng)
        if result.rejection is not None:
            raise result.rejection

        self.tables[table_id] = result.state
        try:
            await self._commit(result.state, type(action).__name__)
        except VersionConflictError:
            # Drop the stale copy so the next access reloads it
            self.tables.pop(table_id, None)
            raise InvalidAction(
                ErrorCode.STALE_STATE,
                "The table changed in the meantime, please retry",
                table_id=table_id,
                version=state.version,
            ) from None

        if self.auto_clear and result.state.phase == GamePhase.TRICK_COMPLETE:
            self._schedule_clear(table_id, result.state.version)
        return result.state

    async def _commit(self, state: GameState, event_type: str) -> None:
        if self._repository is not None:
            await self._repository.save(state)
        if self._publisher is not None:
            await self._publisher.publish_table_event(
                event_type, state.table_id, {"version": state.version, "phase": state.phase.value}
            )
        for listener in self._listeners:
            await listener(state)

    def _schedule_clear(self, table_id: str, version: int) -> None:
        task = asyncio.create_task(self._auto_clear(table_id, version))
        self._clear_tasks[table_id] = task
        task.add_done_callback(lambda done: self._forget_clear(table_id, done))

    def _forget_clear(self, table_id: str, task: asyncio.Task[None]) -> None:
        if self._clear_tasks.get(table_id) is task:
            del self._clear_tasks[table_id]

    async def _auto_clear(self, table_id: str, version: int) -> None:
        await asyncio.sleep(self.clear_delay)
        async with self.lock(table_id):
            state = self.tables.get(table_id)
            # Someone already cleared the trick or the table moved on
            if state is None or state.version != version:
                return
            try:
                await self._apply(table_id, ClearTrick())
            except Rejection as rejection:
                logger.warning("Table %s: auto clear rejected: %s", table_id, rejection.message)

    async def handle_remote_event(self, event_type: str, table_id: str, data: dict[str, Any]) -> None:
        """Drop a cached table changed by another instance.

        The next access reloads the table from MongoDB.
        """
        async with self.lock(table_id):
            cached = self.tables.get(table_id)
            if cached is not None and cached.version < data.get("version", 0):
                del self.tables[table_id]
                logger.info(
                    "Table %s invalidated by remote %s (version %s)",
                    table_id,
                    event_type,
                    data.get("version"),
                )

    async def restore_active(self) -> int:
        """Load every unfinished table from MongoDB.

        Returns:
            Number of tables restored
        """
        if self._repository is None:
            return 0
        states = await self._repository.find_active()
        for state in states:
            self.tables.setdefault(state.table_id, state)
        return len(states)

    async def shutdown(self) -> None:
        """Cancel pending trick clears."""
        tasks = list(self._clear_tasks.values())
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._clear_tasks.clear()


# Global table service instance
table_service = TableService()
