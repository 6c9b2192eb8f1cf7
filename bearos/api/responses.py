"""Request and response models."""

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, Field

from bearos.models.card import Card
from bearos.models.enums import Command, GameLength, PlayMode, Suit

__all__ = [
    "BetRequest",
    "CardListResponse",
    "CardModel",
    "Command",
    "ConfigureRequest",
    "CreateTableRequest",
    "ErrorResponse",
    "JoinRequest",
    "LegalMovesResponse",
    "PlayRequest",
    "ServerMessage",
    "StartRequest",
    "TableCreatedResponse",
]


class CardModel(BaseModel):
    """A card as sent by clients."""

    suit: Suit
    rank: int = Field(ge=6, le=14)

    def to_card(self) -> Card:
        """Convert to the engine card type."""
        return Card(suit=self.suit, rank=self.rank)

    @classmethod
    def from_card(cls, card: Card) -> "CardModel":
        """Build from an engine card, dropping any play mode."""
        return cls(suit=card.suit, rank=card.rank)


class CreateTableRequest(BaseModel):
    """Request to open a new table."""

    player_name: str


class TableCreatedResponse(BaseModel):
    """Response for table creation."""

    table_id: str
    owner: str
    message: str = "Table created successfully"


class JoinRequest(BaseModel):
    """Request to take a seat at a table."""

    player_name: str


class ConfigureRequest(BaseModel):
    """Request to choose the game length."""

    game_length: GameLength
    has_golden_round: bool = False


class StartRequest(BaseModel):
    """Request to start the game, optionally overriding the game length."""

    game_length: GameLength | None = None


class BetRequest(BaseModel):
    """Request to place a bet."""

    player_name: str
    bet: int


class PlayRequest(BaseModel):
    """Request to play a card."""

    player_name: str
    card: CardModel
    play_mode: PlayMode | None = None


class LegalMovesResponse(BaseModel):
    """What a player may do right now."""

    phase: str
    your_turn: bool
    cards: list[CardModel]
    play_modes: list[PlayMode]
    bets: list[int]


class CardListResponse(BaseModel):
    """Response for card list endpoint."""

    cards: list[dict[str, Any]]


class ErrorResponse(BaseModel):
    """Error response."""

    error: str
    detail: str | None = None
    context: dict[str, Any] = Field(default_factory=dict)


@dataclass
class ServerMessage:
    """Message sent from server to clients via WebSocket.

    Attributes:
        command: Command type
        table_id: Table identifier
        content: Message payload (varies by command)

    """

    command: Command
    table_id: str
    content: Any

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "command": self.command.value,
            "table_id": self.table_id,
            "content": self.content,
        }
