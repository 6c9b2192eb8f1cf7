"""Bearos Poker rules engine."""

from bearos.engine.errors import (
    ErrorCode,
    IllegalBet,
    IllegalPlay,
    InvalidAction,
    NotFound,
    Rejection,
)
from bearos.engine.state_machine import (
    Action,
    ActionResult,
    ClearTrick,
    ConfigureGame,
    JoinTable,
    PlaceBet,
    PlayCard,
    StartGame,
    apply,
    legal_moves,
    new_table,
)

__all__ = [
    "Action",
    "ActionResult",
    "ClearTrick",
    "ConfigureGame",
    "ErrorCode",
    "IllegalBet",
    "IllegalPlay",
    "InvalidAction",
    "JoinTable",
    "NotFound",
    "PlaceBet",
    "PlayCard",
    "Rejection",
    "StartGame",
    "apply",
    "legal_moves",
    "new_table",
]
