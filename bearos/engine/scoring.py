"""Round scoring."""

import logging

from bearos.constants import (
    EXACT_BET_MULTIPLIER,
    OVER_BET_MULTIPLIER,
    UNDER_BET_PENALTY,
    ZERO_BET_POINTS,
)
from bearos.engine.errors import ErrorCode, InvalidAction
from bearos.models.game import GameState, PlayerScore, ScoreTableRow
from bearos.models.round_plan import multiplier_for_label

logger = logging.getLogger(__name__)


def round_points(won: int, bet: int, multiplier: int = 1) -> int:
    """Calculate a player's points for one round.

    Scoring rules:
    - Bet 0 and won 0: 5 points
    - Won exactly the bet: 10 points per trick
    - Won more than the bet: 1 point per trick won
    - Won fewer than the bet: -10 points per missing trick

    All points are multiplied by the round multiplier (2 in blind rounds).
    """
    if won == 0 and bet == 0:
        return ZERO_BET_POINTS * multiplier
    if won == bet:
        return won * EXACT_BET_MULTIPLIER * multiplier
    if won > bet:
        return won * OVER_BET_MULTIPLIER * multiplier
    return (won - bet) * UNDER_BET_PENALTY * multiplier


def score_round(state: GameState) -> ScoreTableRow:
    """Score the current round in place and write its score table row.

    Updates each player's total, records ``{cumulative_points, round_points,
    bet}`` in the row and resets tricks won and bets for the next round.

    Raises:
        InvalidAction: If the round has already been scored

    """
    row = state.current_score_row()
    if row is None:
        raise InvalidAction(
            ErrorCode.GAME_NOT_STARTED,
            f"Round {state.current_round} has no score table row",
            round=state.current_round,
        )
    if row.scored:
        raise InvalidAction(
            ErrorCode.ROUND_ALREADY_SCORED,
            f"Round {row.round_id} has already been scored",
            round=row.round_id,
        )

    multiplier = multiplier_for_label(row.round_name)

    for player in state.players:
        bet = player.bet if player.bet is not None else 0
        points = round_points(player.tricks_won, bet, multiplier)
        player.score += points
        row.scores[player.name] = PlayerScore(
            cumulative_points=player.score,
            round_points=points,
            bet=player.bet,
        )
        logger.info(
            "Round %d (%s): %s bet %d, won %d, scored %d (total %d)",
            row.round_id,
            row.round_name,
            player.name,
            bet,
            player.tricks_won,
            points,
            player.score,
        )
        player.reset_round()

    row.scored = True
    return row
