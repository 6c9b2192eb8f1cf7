"""Round plans: which rounds a game consists of and how each is dealt and scored."""

from bearos.constants import (
    BLIND_MULTIPLIER,
    BLIND_ROUND,
    BLIND_ROUND_CARDS,
    GOLDEN_ROUND,
    GOLDEN_ROUND_CARDS,
)
from bearos.models.enums import GameLength

_ASCENDING = ["1", "2", "3", "4", "5", "6"]
_BLIND = [BLIND_ROUND] * 6
_DESCENDING = ["6", "5", "4", "3", "2", "1"]

# Label sequences per game length. Extra "6" rounds pad both sides of the blind phase.
ROUND_PLANS: dict[GameLength, tuple[str, ...]] = {
    GameLength.SHORT: tuple(_ASCENDING + _BLIND + _DESCENDING),
    GameLength.BASIC: tuple(_ASCENDING + ["6"] * 2 + _BLIND + ["6"] * 2 + _DESCENDING),
    GameLength.LONG: tuple(_ASCENDING + ["6"] * 5 + _BLIND + ["6"] * 5 + _DESCENDING),
}


def round_names(game_length: GameLength, has_golden_round: bool = False) -> list[str]:
    """Get the ordered round labels for a game."""
    names = list(ROUND_PLANS[game_length])
    if has_golden_round:
        names.append(GOLDEN_ROUND)
    return names


def total_rounds(game_length: GameLength, has_golden_round: bool = False) -> int:
    """Number of rounds in a game of the given length."""
    return len(round_names(game_length, has_golden_round))


def round_name(game_length: GameLength, round_number: int, has_golden_round: bool = False) -> str:
    """Label of a 1-based round number.

    Raises:
        IndexError: If the round is outside the plan

    """
    names = round_names(game_length, has_golden_round)
    if not 1 <= round_number <= len(names):
        raise IndexError(f"Round {round_number} is outside a {len(names)}-round plan")
    return names[round_number - 1]


def tricks_for_label(label: str) -> int:
    """Cards dealt (and tricks played) in a round with this label."""
    if label == BLIND_ROUND:
        return BLIND_ROUND_CARDS
    if label == GOLDEN_ROUND:
        return GOLDEN_ROUND_CARDS
    return int(label)


def tricks_in_round(game_length: GameLength, round_number: int, has_golden_round: bool = False) -> int:
    """Cards dealt to each player in a 1-based round."""
    return tricks_for_label(round_name(game_length, round_number, has_golden_round))


def multiplier_for_label(label: str) -> int:
    """Scoring multiplier: blind rounds count double."""
    return BLIND_MULTIPLIER if label == BLIND_ROUND else 1
