"""Player model."""

from dataclasses import dataclass, field

from bearos.models.card import Card


@dataclass
class Player:
    """Represents a player seated at a table.

    Attributes:
        name: Display name, unique within a table
        seat_number: 1-based seat, fixed at join time
        is_owner: Whether this player created the table
        hand: Current cards in hand
        score: Current total score
        tricks_won: Number of tricks won this round
        bet: Current round bet (None if not yet placed)

    """

    name: str
    seat_number: int
    is_owner: bool = False
    hand: list[Card] = field(default_factory=list)
    score: int = 0
    tricks_won: int = 0
    bet: int | None = None

    def reset_round(self) -> None:
        """Reset player state for a new round."""
        self.tricks_won = 0
        self.bet = None

    def has_card(self, card: Card) -> bool:
        """Check if player has a card in their hand (play mode ignored)."""
        return any(held.same_card(card) for held in self.hand)

    def remove_card(self, card: Card) -> None:
        """Remove a card from player's hand."""
        for i, held in enumerate(self.hand):
            if held.same_card(card):
                del self.hand[i]
                return

    def made_bet(self) -> bool:
        """Check if player has placed their bet."""
        return self.bet is not None

    def __str__(self) -> str:
        """Return string representation."""
        owner_str = " (owner)" if self.is_owner else ""
        return f"{self.name}{owner_str} - Score: {self.score}"
