"""Game state serialization.

Handles conversion between GameState objects and plain documents, used both
for MongoDB persistence and for the JSON views pushed to clients.
"""

from datetime import UTC, datetime
from typing import Any

from bearos.constants import BLIND_ROUND
from bearos.models.card import Card, TableCard
from bearos.models.enums import GameLength, GamePhase, PlayMode, Suit
from bearos.models.game import GameState, PlayerScore, ScoreTableRow
from bearos.models.player import Player


def serialize_card(card: Card) -> dict[str, Any]:
    """Serialize a Card to a dictionary."""
    data: dict[str, Any] = {"suit": card.suit.value, "rank": card.rank}
    if card.play_mode:
        data["play_mode"] = card.play_mode.value
    return data


def deserialize_card(data: dict[str, Any]) -> Card:
    """Deserialize a Card from a dictionary."""
    play_mode = PlayMode(data["play_mode"]) if data.get("play_mode") else None
    return Card(suit=Suit(data["suit"]), rank=int(data["rank"]), play_mode=play_mode)


def serialize_table_card(played: TableCard) -> dict[str, Any]:
    """Serialize a TableCard to a dictionary."""
    return {**serialize_card(played.card), "player_name": played.player_name}


def deserialize_table_card(data: dict[str, Any]) -> TableCard:
    """Deserialize a TableCard from a dictionary."""
    return TableCard(card=deserialize_card(data), player_name=data["player_name"])


def serialize_player(player: Player, include_hand: bool = True) -> dict[str, Any]:
    """Serialize a Player to a dictionary.

    Args:
        player: Player to serialize
        include_hand: If False, only the number of cards is exposed

    """
    data: dict[str, Any] = {
        "name": player.name,
        "seat_number": player.seat_number,
        "is_owner": player.is_owner,
        "score": player.score,
        "tricks_won": player.tricks_won,
        "bet": player.bet,
        "hand_size": len(player.hand),
    }
    if include_hand:
        data["hand"] = [serialize_card(card) for card in player.hand]
    return data


def deserialize_player(data: dict[str, Any]) -> Player:
    """Deserialize a Player from a dictionary."""
    return Player(
        name=data["name"],
        seat_number=data["seat_number"],
        is_owner=data.get("is_owner", False),
        hand=[deserialize_card(card) for card in data.get("hand", [])],
        score=data.get("score", 0),
        tricks_won=data.get("tricks_won", 0),
        bet=data.get("bet"),
    )


def serialize_score_row(row: ScoreTableRow) -> dict[str, Any]:
    """Serialize a ScoreTableRow to a dictionary."""
    return {
        "round_id": row.round_id,
        "round_name": row.round_name,
        "scored": row.scored,
        "scores": {
            name: {
                "cumulative_points": score.cumulative_points,
                "round_points": score.round_points,
                "bet": score.bet,
            }
            for name, score in row.scores.items()
        },
    }


def deserialize_score_row(data: dict[str, Any]) -> ScoreTableRow:
    """Deserialize a ScoreTableRow from a dictionary."""
    return ScoreTableRow(
        round_id=data["round_id"],
        round_name=data["round_name"],
        scored=data.get("scored", False),
        scores={
            name: PlayerScore(
                cumulative_points=score.get("cumulative_points", 0),
                round_points=score.get("round_points", 0),
                bet=score.get("bet"),
            )
            for name, score in data.get("scores", {}).items()
        },
    )


def serialize_game(state: GameState) -> dict[str, Any]:
    """Serialize a complete GameState to a MongoDB document.

    Args:
        state: GameState to serialize

    Returns:
        Dictionary suitable for MongoDB storage

    """
    return {
        "_id": state.table_id,
        "table_id": state.table_id,
        "phase": state.phase.value,
        "players": [serialize_player(p) for p in state.players],
        "deck": [serialize_card(card) for card in state.deck],
        "cards_on_table": [serialize_table_card(tc) for tc in state.cards_on_table],
        "current_round": state.current_round,
        "current_play": state.current_play,
        "current_turn": state.current_turn,
        "round_start_player_index": state.round_start_player_index,
        "betting_turn": state.betting_turn,
        "all_bets_placed": state.all_bets_placed,
        "game_started": state.game_started,
        "game_over": state.game_over,
        "game_length": state.game_length.value,
        "has_golden_round": state.has_golden_round,
        "highest_card_on_table": (
            serialize_card(state.highest_card_on_table) if state.highest_card_on_table else None
        ),
        "trick_winner": state.trick_winner,
        "score_table": [serialize_score_row(row) for row in state.score_table],
        "version": state.version,
        "updated_at": datetime.now(UTC).isoformat(),
    }


def deserialize_game(data: dict[str, Any]) -> GameState:
    """Deserialize a GameState from a MongoDB document.

    Args:
        data: MongoDB document

    Returns:
        Restored GameState instance

    """
    highest = data.get("highest_card_on_table")
    return GameState(
        table_id=data.get("table_id") or data["_id"],
        players=[deserialize_player(p) for p in data.get("players", [])],
        deck=[deserialize_card(card) for card in data.get("deck", [])],
        cards_on_table=[deserialize_table_card(tc) for tc in data.get("cards_on_table", [])],
        current_round=data.get("current_round", 0),
        current_play=data.get("current_play", 0),
        current_turn=data.get("current_turn", -1),
        round_start_player_index=data.get("round_start_player_index", 0),
        betting_turn=data.get("betting_turn", -1),
        all_bets_placed=data.get("all_bets_placed", False),
        game_started=data.get("game_started", False),
        game_over=data.get("game_over", False),
        game_length=GameLength(data.get("game_length", GameLength.SHORT.value)),
        has_golden_round=data.get("has_golden_round", False),
        highest_card_on_table=deserialize_card(highest) if highest else None,
        trick_winner=data.get("trick_winner"),
        score_table=[deserialize_score_row(row) for row in data.get("score_table", [])],
        version=data.get("version", 0),
    )


def public_view(state: GameState, viewer_name: str | None = None) -> dict[str, Any]:
    """Build the state a client may see.

    Includes all public information plus the viewer's own hand. Other hands
    are reduced to their size and the deck is never exposed. Bets in a blind
    round are placed unseen, so there even the viewer only gets a hand size
    until betting closes.
    """
    blind_betting = state.phase == GamePhase.BETTING and state.round_name() == BLIND_ROUND
    data = serialize_game(state)
    del data["_id"]
    del data["deck"]
    data["deck_size"] = len(state.deck)
    data["players"] = [
        serialize_player(p, include_hand=p.name == viewer_name and not blind_betting) for p in state.players
    ]
    data["total_rounds"] = state.total_rounds() if state.game_started else None
    data["round_name"] = state.round_name() if state.game_started else None
    data["leaderboard"] = state.get_leaderboard() if state.game_over else None
    return data
