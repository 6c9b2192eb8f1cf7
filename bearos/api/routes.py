"""API routes."""

from typing import Annotated, Any

from fastapi import APIRouter, Query, Request, WebSocket
from fastapi.responses import JSONResponse

from bearos.api.responses import (
    BetRequest,
    CardListResponse,
    CardModel,
    ConfigureRequest,
    CreateTableRequest,
    ErrorResponse,
    JoinRequest,
    LegalMovesResponse,
    PlayRequest,
    StartRequest,
    TableCreatedResponse,
)
from bearos.api.websocket import websocket_manager
from bearos.engine import (
    ClearTrick,
    ConfigureGame,
    JoinTable,
    NotFound,
    PlaceBet,
    PlayCard,
    Rejection,
    StartGame,
    legal_moves,
)
from bearos.models import deck
from bearos.services.game_serializer import public_view, serialize_card
from bearos.services.table_service import table_service

router = APIRouter()

PlayerName = Annotated[str | None, Query(description="Viewer; only their own hand is shown")]


async def rejection_handler(_request: Request, exc: Rejection) -> JSONResponse:
    """Turn an engine rejection into a JSON error response.

    Unknown tables and players map to 404, every other rejection to 400.
    """
    status_code = 404 if isinstance(exc, NotFound) else 400
    body = ErrorResponse(error=exc.code.value, detail=exc.message, context=exc.context)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


@router.post("/tables")
async def create_table(request: CreateTableRequest) -> TableCreatedResponse:
    """Open a new table with the caller as owner in seat 1."""
    state = await table_service.create_table(request.player_name)
    return TableCreatedResponse(table_id=state.table_id, owner=state.players[0].name)


@router.get("/tables/{table_id}")
async def get_table(table_id: str, player_name: PlayerName = None) -> dict[str, Any]:
    """Get the table as seen by ``player_name``."""
    state = await table_service.get(table_id)
    return public_view(state, player_name)


@router.post("/tables/{table_id}/join")
async def join_table(table_id: str, request: JoinRequest) -> dict[str, Any]:
    """Take the next free seat."""
    state = await table_service.act(table_id, JoinTable(player_name=request.player_name))
    return public_view(state, request.player_name.strip())


@router.post("/tables/{table_id}/configure")
async def configure_table(table_id: str, request: ConfigureRequest) -> dict[str, Any]:
    """Choose the game length and whether a golden round is played."""
    action = ConfigureGame(game_length=request.game_length, has_golden_round=request.has_golden_round)
    state = await table_service.act(table_id, action)
    return public_view(state)


@router.post("/tables/{table_id}/start")
async def start_game(table_id: str, request: StartRequest | None = None) -> dict[str, Any]:
    """Deal the first round."""
    game_length = request.game_length if request else None
    state = await table_service.act(table_id, StartGame(game_length=game_length))
    return public_view(state)


@router.post("/tables/{table_id}/bets")
async def place_bet(table_id: str, request: BetRequest) -> dict[str, Any]:
    """Place the caller's bet for the current round."""
    state = await table_service.act(table_id, PlaceBet(player_name=request.player_name, bet=request.bet))
    return public_view(state, request.player_name)


@router.post("/tables/{table_id}/plays")
async def play_card(table_id: str, request: PlayRequest) -> dict[str, Any]:
    """Play a card; the 7 of spades needs a ``play_mode``."""
    action = PlayCard(
        player_name=request.player_name,
        card=request.card.to_card(),
        play_mode=request.play_mode,
    )
    state = await table_service.act(table_id, action)
    return public_view(state, request.player_name)


@router.post("/tables/{table_id}/clear-trick")
async def clear_trick(table_id: str, player_name: PlayerName = None) -> dict[str, Any]:
    """Take the completed trick off the table and move on."""
    state = await table_service.act(table_id, ClearTrick())
    return public_view(state, player_name)


@router.get("/tables/{table_id}/legal-moves")
async def get_legal_moves(table_id: str, player_name: Annotated[str, Query()]) -> LegalMovesResponse:
    """List the bets or cards the player may choose right now."""
    state = await table_service.get(table_id)
    moves = legal_moves(state, player_name)
    return LegalMovesResponse(
        phase=moves["phase"],
        your_turn=moves["your_turn"],
        cards=[CardModel.from_card(card) for card in moves["cards"]],
        play_modes=moves["play_modes"],
        bets=moves["bets"],
    )


@router.get("/cards")
async def get_cards() -> CardListResponse:
    """Get all 36 cards of the deck."""
    return CardListResponse(cards=[serialize_card(card) for card in deck.build()])


@router.websocket("/tables/{table_id}/ws")
async def table_socket(
    websocket: WebSocket,
    table_id: str,
    player_name: str = Query(..., description="Seated player name"),
) -> None:
    """WebSocket pushing GAME_STATE to a seated player after every change."""
    try:
        state = await table_service.get(table_id)
    except NotFound:
        # Must accept before closing to avoid HTTP 403
        await websocket.accept()
        await websocket.close(code=4004, reason="Table not found")
        return

    if state.get_player(player_name) is None:
        await websocket.accept()
        await websocket.close(code=4003, reason="Player not at this table")
        return

    await websocket_manager.connect(websocket, state, player_name)
    await websocket_manager.handle_client_messages(websocket, table_service, table_id, player_name)
