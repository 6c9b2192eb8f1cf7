"""Game domain models."""

from bearos.models.card import WILD_CARD, Card, TableCard
from bearos.models.enums import GameLength, GamePhase, PlayMode, Suit
from bearos.models.game import GameState, PlayerScore, ScoreTableRow
from bearos.models.player import Player

__all__ = [
    "WILD_CARD",
    "Card",
    "GameLength",
    "GamePhase",
    "GameState",
    "PlayMode",
    "Player",
    "PlayerScore",
    "ScoreTableRow",
    "Suit",
    "TableCard",
]
