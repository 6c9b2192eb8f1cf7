"""Round and game progression.

These functions mutate the state they are given. The state machine only
hands them a fresh clone, after every check has passed.
"""

import logging
import random

from bearos.constants import NO_TURN
from bearos.engine.scoring import score_round
from bearos.engine.trick_resolver import resolve_winner
from bearos.models import deck as deck_ops
from bearos.models.card import TableCard
from bearos.models.game import GameState, PlayerScore, ScoreTableRow
from bearos.models.round_plan import round_names

logger = logging.getLogger(__name__)


def build_score_table(state: GameState) -> list[ScoreTableRow]:
    """Create one empty row per planned round."""
    return [
        ScoreTableRow(
            round_id=index + 1,
            round_name=name,
            scores={p.name: PlayerScore() for p in state.players},
        )
        for index, name in enumerate(round_names(state.game_length, state.has_golden_round))
    ]


def starting_player_index(state: GameState, round_number: int) -> int:
    """Get the index of the player who bets and leads first in a round.

    Round 1 starts with the owner. Later rounds start with the seat numbered
    ``((round - 1) % players) + 1``, falling back to index 0.
    """
    if round_number == 1:
        return state.owner_index()

    seat = ((round_number - 1) % len(state.players)) + 1
    for i, player in enumerate(state.players):
        if player.seat_number == seat:
            return i
    return 0


def deal_round(state: GameState, rng: random.Random | None = None) -> None:
    """Shuffle every card that is not in a hand and deal the current round."""
    cards_per_player = state.tricks_this_round()
    shuffled = deck_ops.shuffle(state.deck, rng)
    hands, state.deck = deck_ops.deal(shuffled, len(state.players), cards_per_player, rng)

    for player, hand in zip(state.players, hands, strict=True):
        player.hand = hand
        player.reset_round()

    start = starting_player_index(state, state.current_round)
    state.round_start_player_index = start
    state.betting_turn = start
    state.current_turn = NO_TURN
    state.current_play = 1
    state.all_bets_placed = False
    state.cards_on_table = []
    state.highest_card_on_table = None
    state.trick_winner = None

    logger.info(
        "Table %s: round %d (%s) dealt, %d cards each, %s starts",
        state.table_id,
        state.current_round,
        state.round_name(),
        cards_per_player,
        state.players[start].name,
    )


def start_game(state: GameState, rng: random.Random | None = None) -> None:
    """Leave the lobby: build the score table and deal round 1."""
    state.game_started = True
    state.game_over = False
    state.current_round = 1
    state.deck = deck_ops.build()
    for player in state.players:
        player.hand = []
        player.score = 0
    state.score_table = build_score_table(state)
    deal_round(state, rng)


def complete_trick(state: GameState) -> TableCard:
    """Resolve a full trick and credit its winner.

    The cards stay on the table until ``clear_trick`` is called.
    """
    winning = resolve_winner(state.cards_on_table)
    winner = state.get_player(winning.player_name)
    if winner is not None:
        winner.tricks_won += 1

    state.highest_card_on_table = winning.card
    state.trick_winner = winning.player_name
    state.current_turn = NO_TURN

    logger.info(
        "Table %s: round %d trick %d won by %s with %s",
        state.table_id,
        state.current_round,
        state.current_play,
        winning.player_name,
        winning.card,
    )
    return winning


def clear_trick(state: GameState, rng: random.Random | None = None) -> None:
    """Clear a completed trick and move on to the next trick, round or game over."""
    winner_name = state.trick_winner
    state.deck.extend(played.card.bare() for played in state.cards_on_table)
    state.cards_on_table = []
    state.trick_winner = None

    if state.current_play < state.tricks_this_round():
        state.current_play += 1
        state.current_turn = state.player_index(winner_name) if winner_name else 0
        return

    complete_round(state, rng)


def complete_round(state: GameState, rng: random.Random | None = None) -> None:
    """Score the round, then deal the next one or end the game."""
    score_round(state)

    if state.current_round < state.total_rounds():
        state.current_round += 1
        deal_round(state, rng)
        return

    end_game(state)


def end_game(state: GameState) -> None:
    """Mark the game as over."""
    state.game_over = True
    state.current_turn = NO_TURN
    state.betting_turn = NO_TURN
    state.all_bets_placed = False
    state.cards_on_table = []
    state.trick_winner = None

    leaderboard = state.get_leaderboard()
    logger.info(
        "Table %s: game over. Winner: %s",
        state.table_id,
        leaderboard[0]["name"] if leaderboard else None,
    )
