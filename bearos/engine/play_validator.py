"""Play legality rules.

Rules, in priority order:

1. A player holding a single card may play it whatever the trick.
2. The opening lead is free.
3. If the trick was opened by the 7 of spades as Trumps, followers must play
   their highest diamond, or lacking diamonds, a card of their highest rank.
4. If the trick was opened by the 7 of spades as Poker, anything goes.
5. Otherwise the 7 of spades may be played at any time.
6. Otherwise follow the lead suit if possible (the 7 of spades does not count
   as a spade here), else play a diamond if possible, else anything.

The 7 of spades may only be declared as Trumps when it opens the trick.
"""

from collections.abc import Sequence

from bearos.engine.errors import ErrorCode, IllegalPlay
from bearos.models.card import Card, TableCard
from bearos.models.enums import PlayMode

ALL_MODES = [PlayMode.TRUMPS, PlayMode.POKER, PlayMode.SIMPLE]
FOLLOW_MODES = [PlayMode.POKER, PlayMode.SIMPLE]


def _opening_card(trick: Sequence[TableCard]) -> Card | None:
    return trick[0].card if trick else None


def _highest_rank_cards(hand: Sequence[Card]) -> list[Card]:
    """Highest diamonds if any are held, else every card of the top rank."""
    diamonds = [c for c in hand if c.is_trump()]
    candidates = diamonds or list(hand)
    top = max(c.rank for c in candidates)
    return [c for c in candidates if c.rank == top]


def _follows_suit_rules(card: Card, hand: Sequence[Card], opening: Card) -> bool:
    lead_suit = opening.suit
    if any(c.suit == lead_suit and not c.is_wild() for c in hand):
        return card.suit == lead_suit
    if any(c.is_trump() for c in hand):
        return card.is_trump()
    return True


def is_legal_play(card: Card, hand: Sequence[Card], trick: Sequence[TableCard]) -> bool:
    """Check whether a card from the hand may be played on the trick.

    Args:
        card: Candidate card (must be one of ``hand``)
        hand: The player's cards before playing
        trick: Cards already on the table, in play order

    Returns:
        True if the play respects the suit, trump and wild-card rules

    """
    if len(hand) == 1:
        return True

    opening = _opening_card(trick)
    if opening is None:
        return True

    if opening.played_as(PlayMode.TRUMPS):
        return any(card.same_card(c) for c in _highest_rank_cards(hand))

    if opening.played_as(PlayMode.POKER):
        return True

    if card.is_wild():
        return True

    return _follows_suit_rules(card, hand, opening)


def legal_cards(hand: Sequence[Card], trick: Sequence[TableCard]) -> list[Card]:
    """Get the cards of the hand that may be played on the trick."""
    return [card for card in hand if is_legal_play(card, hand, trick)]


def allowed_play_modes(trick: Sequence[TableCard]) -> list[PlayMode]:
    """Modes the 7 of spades may be declared with on this trick."""
    return list(ALL_MODES) if not trick else list(FOLLOW_MODES)


def _rejection_code(hand: Sequence[Card], opening: Card) -> ErrorCode:
    if opening.played_as(PlayMode.TRUMPS):
        return ErrorCode.MUST_PLAY_HIGHEST
    if any(c.suit == opening.suit and not c.is_wild() for c in hand):
        return ErrorCode.MUST_FOLLOW_SUIT
    return ErrorCode.MUST_PLAY_TRUMP


def validate_play(
    card: Card,
    play_mode: PlayMode | None,
    hand: Sequence[Card],
    trick: Sequence[TableCard],
) -> Card:
    """Validate a play completely, without touching any state.

    Args:
        card: Card the player wants to play
        play_mode: Declared mode, required for the 7 of spades only
        hand: The player's cards
        trick: Cards already on the table

    Returns:
        The card as it goes on the table (carrying its play mode)

    Raises:
        IllegalPlay: If the card is not held, the mode is missing or not
            allowed, or the card breaks the play rules

    """
    held = next((c for c in hand if c.same_card(card)), None)
    if held is None:
        raise IllegalPlay(ErrorCode.CARD_NOT_IN_HAND, f"{card} is not in your hand", card=str(card))

    if held.is_wild():
        modes = allowed_play_modes(trick)
        if play_mode is None:
            raise IllegalPlay(
                ErrorCode.PLAY_MODE_REQUIRED,
                "The 7 of spades requires a play mode",
                allowed_modes=[m.value for m in modes],
            )
        if play_mode not in modes:
            raise IllegalPlay(
                ErrorCode.PLAY_MODE_NOT_ALLOWED,
                f"{play_mode.value} can only be declared on the opening card",
                allowed_modes=[m.value for m in modes],
            )
    elif play_mode is not None:
        raise IllegalPlay(
            ErrorCode.PLAY_MODE_NOT_ALLOWED,
            "Only the 7 of spades can be played with a mode",
            allowed_modes=[],
        )

    if not is_legal_play(held, hand, trick):
        opening = trick[0].card
        raise IllegalPlay(
            _rejection_code(hand, opening),
            f"{held} cannot be played on a trick led by {opening}",
            legal_cards=[str(c) for c in legal_cards(hand, trick)],
        )

    return held.with_mode(play_mode)
