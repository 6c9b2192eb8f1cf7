"""Bet validation."""

from collections.abc import Sequence

from bearos.engine.errors import ErrorCode, IllegalBet
from bearos.models.player import Player


def is_last_bettor(players: Sequence[Player]) -> bool:
    """Check whether exactly one player still has to bet."""
    return sum(1 for p in players if p.made_bet()) == len(players) - 1


def forbidden_bet(players: Sequence[Player], tricks_this_round: int) -> int | None:
    """The bet the last bettor may not place, if any.

    The bets of a round must never add up to the number of tricks, so the
    last player cannot bet the difference.
    """
    if not is_last_bettor(players):
        return None
    remaining = tricks_this_round - sum(p.bet for p in players if p.bet is not None)
    if 0 <= remaining <= tricks_this_round:
        return remaining
    return None


def allowed_bets(players: Sequence[Player], tricks_this_round: int) -> list[int]:
    """Get every bet the next bettor may place."""
    excluded = forbidden_bet(players, tricks_this_round)
    return [bet for bet in range(tricks_this_round + 1) if bet != excluded]


def validate_bet(
    bet: int,
    betting_turn_index: int,
    players: Sequence[Player],
    tricks_this_round: int,
) -> None:
    """Validate a bet.

    Args:
        bet: Number of tricks the player bets on winning
        betting_turn_index: Index of the bettor
        players: All players of the table
        tricks_this_round: Tricks played in the round

    Raises:
        IllegalBet: If the bet is out of range or completes a sum equal to
            the trick count

    """
    if isinstance(bet, bool) or not isinstance(bet, int) or not 0 <= bet <= tricks_this_round:
        raise IllegalBet(
            ErrorCode.BET_OUT_OF_RANGE,
            f"Bet must be between 0 and {tricks_this_round}",
            min_bet=0,
            max_bet=tricks_this_round,
            bettor_index=betting_turn_index,
        )

    excluded = forbidden_bet(players, tricks_this_round)
    if bet == excluded:
        raise IllegalBet(
            ErrorCode.BET_SUM_EQUALS_TRICKS,
            f"Your bet cannot be {bet} as it would make the total bets equal to "
            f"the number of cards ({tricks_this_round})",
            min_bet=0,
            max_bet=tricks_this_round,
            forbidden_bet=excluded,
            bettor_index=betting_turn_index,
        )
