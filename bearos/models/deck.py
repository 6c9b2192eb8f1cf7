"""Deck building, shuffling and dealing."""

import logging
import random

from bearos.constants import MAX_RANK, MIN_RANK
from bearos.models.card import Card
from bearos.models.enums import Suit

logger = logging.getLogger(__name__)


def build() -> list[Card]:
    """Build all 36 cards, suit by suit, ranks 6 to 14."""
    return [Card(suit, rank) for suit in Suit for rank in range(MIN_RANK, MAX_RANK + 1)]


def shuffle(deck: list[Card], rng: random.Random | None = None) -> list[Card]:
    """Return a shuffled copy of the deck.

    Args:
        deck: Cards to shuffle
        rng: Optional random generator (seed it for reproducible deals)

    Returns:
        New list with the same cards in random order

    """
    shuffled = list(deck)
    (rng or random).shuffle(shuffled)
    return shuffled


def deal(
    deck: list[Card],
    num_players: int,
    cards_per_player: int,
    rng: random.Random | None = None,
) -> tuple[list[list[Card]], list[Card]]:
    """Deal cards to players from the front of the deck.

    When the deck cannot cover the deal, a fresh shuffled deck replaces it.

    Args:
        deck: Deck to deal from (not modified)
        num_players: Number of players to deal to, in seat order
        cards_per_player: Number of cards per player
        rng: Optional random generator used if the deck must be rebuilt

    Returns:
        Tuple of (hands, remaining deck)

    """
    needed = num_players * cards_per_player
    if len(deck) < needed:
        logger.warning("Deck has %d cards, %d needed: rebuilding", len(deck), needed)
        deck = shuffle(build(), rng)

    hands: list[list[Card]] = []
    index = 0

    for _ in range(num_players):
        hands.append(deck[index : index + cards_per_player])
        index += cards_per_player

    return hands, deck[index:]
