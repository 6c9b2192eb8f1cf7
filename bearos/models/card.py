"""Card model."""

from dataclasses import dataclass

from bearos.constants import MAX_RANK, MIN_RANK, WILD_CARD_RANK
from bearos.models.enums import TRUMP_SUIT, PlayMode, Suit

RANK_NAMES = {11: "J", 12: "Q", 13: "K", 14: "A"}


@dataclass(frozen=True)
class Card:
    """Represents a card in Bearos Poker.

    Attributes:
        suit: Card suit
        rank: Card rank, 6-14 (11=J, 12=Q, 13=K, 14=A)
        play_mode: Set only on the 7 of spades once it has been played

    """

    suit: Suit
    rank: int
    play_mode: PlayMode | None = None

    def __post_init__(self) -> None:
        """Validate rank and play mode."""
        if not MIN_RANK <= self.rank <= MAX_RANK:
            raise ValueError(f"Rank must be between {MIN_RANK} and {MAX_RANK}, got {self.rank}")
        if self.play_mode is not None and not self.is_wild():
            raise ValueError("Only the 7 of spades can carry a play mode")

    def is_wild(self) -> bool:
        """Check if card is the 7 of spades."""
        return self.suit == Suit.SPADES and self.rank == WILD_CARD_RANK

    def is_trump(self) -> bool:
        """Check if card is a diamond."""
        return self.suit == TRUMP_SUIT

    def played_as(self, mode: PlayMode) -> bool:
        """Check if this is the 7 of spades played with the given mode."""
        return self.is_wild() and self.play_mode == mode

    def same_card(self, other: "Card") -> bool:
        """Compare suit and rank, ignoring the play mode."""
        return self.suit == other.suit and self.rank == other.rank

    def with_mode(self, mode: PlayMode | None) -> "Card":
        """Return a copy carrying the given play mode."""
        return Card(self.suit, self.rank, mode)

    def bare(self) -> "Card":
        """Return a copy without play mode."""
        return Card(self.suit, self.rank)

    def __str__(self) -> str:
        """Return string representation of card."""
        name = f"{RANK_NAMES.get(self.rank, self.rank)} of {self.suit.value}"
        if self.play_mode:
            return f"{name} ({self.play_mode.value})"
        return name


WILD_CARD = Card(Suit.SPADES, WILD_CARD_RANK)


@dataclass(frozen=True)
class TableCard:
    """A card lying on the table together with the player who played it."""

    card: Card
    player_name: str
