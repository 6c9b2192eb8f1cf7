"""WebSocket connection manager."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from fastapi import WebSocket, WebSocketDisconnect

from bearos.api.responses import ServerMessage
from bearos.models.enums import Command
from bearos.services.game_serializer import public_view

if TYPE_CHECKING:
    from bearos.models.game import GameState
    from bearos.services.table_service import TableService

logger = logging.getLogger(__name__)

_SEND_ERRORS = (WebSocketDisconnect, RuntimeError, ConnectionError, OSError)


class ConnectionManager:
    """Keeps one WebSocket per seated player and pushes table states to them.

    Every player gets their own GAME_STATE message, built from the public
    view of the table plus their own hand.
    """

    def __init__(self) -> None:
        """Initialize the connection manager."""
        # table_id -> player_name -> WebSocket
        self.active_connections: dict[str, dict[str, WebSocket]] = {}

    async def connect(self, websocket: WebSocket, state: GameState, player_name: str) -> None:
        """Accept a player's connection and send them the current state."""
        await websocket.accept()
        self.active_connections.setdefault(state.table_id, {})[player_name] = websocket
        logger.info("Player %s connected to table %s", player_name, state.table_id)

        await self.send_state(state, player_name, Command.INIT)

    def disconnect(self, table_id: str, player_name: str) -> None:
        """Remove a player's connection."""
        connections = self.active_connections.get(table_id)
        if connections and player_name in connections:
            del connections[player_name]
            logger.info("Player %s disconnected from table %s", player_name, table_id)
            if not connections:
                del self.active_connections[table_id]

    async def send_message(self, message: ServerMessage, player_name: str) -> None:
        """Send a message to one player, dropping the connection if it is gone."""
        websocket = self.active_connections.get(message.table_id, {}).get(player_name)
        if websocket is None:
            return
        try:
            await websocket.send_json(message.to_dict())
        except _SEND_ERRORS:
            logger.warning("Connection lost to %s", player_name)
            self.disconnect(message.table_id, player_name)

    async def send_state(
        self, state: GameState, player_name: str, command: Command = Command.GAME_STATE
    ) -> None:
        """Send a player their view of the table."""
        message = ServerMessage(
            command=command,
            table_id=state.table_id,
            content=public_view(state, player_name),
        )
        await self.send_message(message, player_name)

    async def broadcast_state(self, state: GameState) -> None:
        """Push the new state to everyone connected to the table."""
        for player_name in list(self.active_connections.get(state.table_id, {})):
            await self.send_state(state, player_name)

    async def handle_client_messages(
        self,
        websocket: WebSocket,
        table_service: TableService,
        table_id: str,
        player_name: str,
    ) -> None:
        """Serve a player's connection until it closes.

        Clients may send PING (answered with PONG) or SYNC_STATE (answered
        with a fresh GAME_STATE). Game actions go through the HTTP routes.
        """
        try:
            while True:
                data = await websocket.receive_text()
                message = json.loads(data)
                command = message.get("command", "")
                logger.debug("Received %s from %s at table %s", command, player_name, table_id)

                if command == Command.PING:
                    await websocket.send_json({"command": Command.PONG.value})
                elif command == Command.SYNC_STATE:
                    await self.send_state(await table_service.get(table_id), player_name)
                else:
                    error = ServerMessage(
                        command=Command.REPORT_ERROR,
                        table_id=table_id,
                        content={"error": "error.unknownCommand", "detail": f"Unknown command {command!r}"},
                    )
                    await self.send_message(error, player_name)

        except WebSocketDisconnect:
            self.disconnect(table_id, player_name)

        except (RuntimeError, ConnectionError, OSError, json.JSONDecodeError) as e:
            logger.warning("Error handling message from %s: %s", player_name, e)
            self.disconnect(table_id, player_name)


# Global WebSocket manager instance
websocket_manager = ConnectionManager()
