"""Trick winner resolution."""

from collections.abc import Sequence

from bearos.models.card import TableCard
from bearos.models.enums import PlayMode


def resolve_winner(trick: Sequence[TableCard]) -> TableCard:
    """Determine the winner of a trick.

    Args:
        trick: Cards played in order

    Returns:
        The winning table card (card and the player who played it)

    Raises:
        ValueError: If the trick is empty

    Rules:
        1. The 7 of spades played as Trumps wins
        2. The 7 of spades played as Poker wins
        3. Otherwise the highest diamond wins
        4. Otherwise the highest card of the leading suit wins

    """
    if not trick:
        raise ValueError("Cannot resolve an empty trick")

    for mode in (PlayMode.TRUMPS, PlayMode.POKER):
        for played in trick:
            if played.card.played_as(mode):
                return played

    diamonds = [played for played in trick if played.card.is_trump()]
    if diamonds:
        return max(diamonds, key=lambda played: played.card.rank)

    lead_suit = trick[0].card.suit
    following = [played for played in trick if played.card.suit == lead_suit]
    return max(following, key=lambda played: played.card.rank)
