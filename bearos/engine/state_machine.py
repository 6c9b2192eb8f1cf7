"""Game state machine: the single entry point of the rules engine.

``apply(state, action)`` validates the action against the current state and
either returns a brand-new state or a rejection. Validation always finishes
before the state is cloned and mutated, so a rejected action has no effect.
"""

import logging
import random
from dataclasses import dataclass
from typing import Any, Union

from bearos.constants import MAX_PLAYERS, MIN_PLAYERS, NO_TURN
from bearos.engine import progression
from bearos.engine.betting import allowed_bets, validate_bet
from bearos.engine.errors import ErrorCode, InvalidAction, NotFound, Rejection
from bearos.engine.play_validator import allowed_play_modes, legal_cards, validate_play
from bearos.models.card import Card, TableCard
from bearos.models.enums import GameLength, GamePhase, PlayMode
from bearos.models.game import GameState
from bearos.models.player import Player

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class JoinTable:
    """A new player takes the next free seat."""

    player_name: str


@dataclass(frozen=True)
class ConfigureGame:
    """The table chooses the game length before starting."""

    game_length: GameLength
    has_golden_round: bool = False


@dataclass(frozen=True)
class StartGame:
    """Leave the lobby and deal the first round."""

    game_length: GameLength | None = None


@dataclass(frozen=True)
class PlaceBet:
    """A player bets how many tricks they will win this round."""

    player_name: str
    bet: int


@dataclass(frozen=True)
class PlayCard:
    """A player plays a card; ``play_mode`` is required for the 7 of spades."""

    player_name: str
    card: Card
    play_mode: PlayMode | None = None


@dataclass(frozen=True)
class ClearTrick:
    """Take a completed trick off the table (second phase of trick completion)."""


Action = Union[JoinTable, ConfigureGame, StartGame, PlaceBet, PlayCard, ClearTrick]


@dataclass(frozen=True)
class ActionResult:
    """Outcome of ``apply``.

    Attributes:
        state: The new state if accepted, the untouched input otherwise
        rejection: Why the action was rejected, None if accepted

    """

    state: GameState
    rejection: Rejection | None = None

    @property
    def accepted(self) -> bool:
        """Whether the action was applied."""
        return self.rejection is None


def new_table(table_id: str, owner_name: str) -> GameState:
    """Create an empty table with its owner in seat 1."""
    name = owner_name.strip()
    if not name:
        raise InvalidAction(ErrorCode.INVALID_NAME, "Player name is required")
    return GameState(table_id=table_id, players=[Player(name=name, seat_number=1, is_owner=True)])


def _require_lobby(state: GameState) -> None:
    if state.game_started:
        raise InvalidAction(ErrorCode.GAME_ALREADY_STARTED, "Game already started")


def _require_running(state: GameState) -> None:
    if state.game_over:
        raise InvalidAction(ErrorCode.GAME_OVER, "Game is over")
    if not state.game_started:
        raise InvalidAction(ErrorCode.GAME_NOT_STARTED, "Game has not started")


def _game_length(value: GameLength | str) -> GameLength:
    try:
        return GameLength(value)
    except ValueError:
        raise InvalidAction(
            ErrorCode.INVALID_GAME_LENGTH,
            f"Unknown game length {value!r}",
            allowed=[length.value for length in GameLength],
        ) from None


def _require_player(state: GameState, name: str) -> int:
    index = state.player_index(name)
    if index == -1:
        raise NotFound(ErrorCode.PLAYER_NOT_FOUND, f"Player {name!r} not found", player_name=name)
    return index


def _join(state: GameState, action: JoinTable, _rng: random.Random | None) -> GameState:
    _require_lobby(state)
    name = action.player_name.strip()
    if not name:
        raise InvalidAction(ErrorCode.INVALID_NAME, "Player name is required")
    if state.get_player(name):
        raise InvalidAction(
            ErrorCode.NAME_TAKEN, "Player with this name already exists in the game", player_name=name
        )
    if len(state.players) >= MAX_PLAYERS:
        raise InvalidAction(ErrorCode.GAME_IS_FULL, "Game is full", max_players=MAX_PLAYERS)

    new_state = state.clone()
    new_state.players.append(Player(name=name, seat_number=len(state.players) + 1))
    logger.info("Table %s: %s joined in seat %d", state.table_id, name, len(new_state.players))
    return new_state


def _configure(state: GameState, action: ConfigureGame, _rng: random.Random | None) -> GameState:
    _require_lobby(state)
    game_length = _game_length(action.game_length)
    new_state = state.clone()
    new_state.game_length = game_length
    new_state.has_golden_round = action.has_golden_round
    logger.info(
        "Table %s: configured %s game, golden round: %s",
        state.table_id,
        new_state.game_length.value,
        new_state.has_golden_round,
    )
    return new_state


def _start(state: GameState, action: StartGame, rng: random.Random | None) -> GameState:
    _require_lobby(state)
    if len(state.players) < MIN_PLAYERS:
        raise InvalidAction(
            ErrorCode.NOT_ENOUGH_PLAYERS,
            f"At least {MIN_PLAYERS} players are required to start the game",
            min_players=MIN_PLAYERS,
            player_count=len(state.players),
        )

    game_length = state.game_length
    if action.game_length is not None:
        game_length = _game_length(action.game_length)

    new_state = state.clone()
    new_state.game_length = game_length
    progression.start_game(new_state, rng)
    logger.info(
        "Table %s: %s game started with %d players",
        state.table_id,
        new_state.game_length.value,
        len(new_state.players),
    )
    return new_state


def _place_bet(state: GameState, action: PlaceBet, _rng: random.Random | None) -> GameState:
    _require_running(state)
    index = _require_player(state, action.player_name)
    if state.phase != GamePhase.BETTING:
        raise InvalidAction(ErrorCode.NOT_IN_BETTING_PHASE, "Not in betting phase")
    if state.players[index].made_bet():
        raise InvalidAction(ErrorCode.ALREADY_PLACED_BET, "Already placed bet")
    if index != state.betting_turn:
        expected = state.get_player_by_index(state.betting_turn)
        raise InvalidAction(
            ErrorCode.NOT_YOUR_TURN,
            "It's not your turn to place a bet",
            expected_turn=state.betting_turn,
            expected_player=expected.name if expected else None,
        )

    validate_bet(action.bet, index, state.players, state.tricks_this_round())

    new_state = state.clone()
    player = new_state.players[index]
    player.bet = action.bet
    row = new_state.current_score_row()
    if row is not None and player.name in row.scores:
        row.scores[player.name].bet = action.bet

    logger.info(
        "Table %s: %s bet %d in round %d",
        state.table_id,
        player.name,
        action.bet,
        state.current_round,
    )

    if all(p.made_bet() for p in new_state.players):
        new_state.all_bets_placed = True
        new_state.betting_turn = NO_TURN
        new_state.current_turn = new_state.round_start_player_index
        logger.info("Table %s: all bets placed for round %d", state.table_id, state.current_round)
    else:
        new_state.betting_turn = (index + 1) % len(new_state.players)
    return new_state


def _play_card(state: GameState, action: PlayCard, _rng: random.Random | None) -> GameState:
    _require_running(state)
    index = _require_player(state, action.player_name)
    if state.phase == GamePhase.TRICK_COMPLETE:
        raise InvalidAction(
            ErrorCode.NOT_IN_PLAYING_PHASE, "The completed trick must be cleared first"
        )
    if state.phase != GamePhase.PLAYING:
        raise InvalidAction(ErrorCode.NOT_IN_PLAYING_PHASE, "Not in playing phase")
    if index != state.current_turn:
        expected = state.get_player_by_index(state.current_turn)
        raise InvalidAction(
            ErrorCode.NOT_YOUR_TURN,
            "It's not your turn",
            expected_turn=state.current_turn,
            expected_player=expected.name if expected else None,
        )

    played = validate_play(
        action.card, action.play_mode, state.players[index].hand, state.cards_on_table
    )

    new_state = state.clone()
    player = new_state.players[index]
    player.remove_card(played)
    new_state.cards_on_table.append(TableCard(card=played, player_name=player.name))
    logger.info("Table %s: %s played %s", state.table_id, player.name, played)

    if len(new_state.cards_on_table) == len(new_state.players):
        progression.complete_trick(new_state)
    else:
        new_state.current_turn = (index + 1) % len(new_state.players)
    return new_state


def _clear_trick(state: GameState, _action: ClearTrick, rng: random.Random | None) -> GameState:
    _require_running(state)
    if state.phase != GamePhase.TRICK_COMPLETE:
        raise InvalidAction(ErrorCode.NO_TRICK_TO_CLEAR, "There is no completed trick to clear")

    new_state = state.clone()
    progression.clear_trick(new_state, rng)
    return new_state


_HANDLERS: dict[type, Any] = {
    JoinTable: _join,
    ConfigureGame: _configure,
    StartGame: _start,
    PlaceBet: _place_bet,
    PlayCard: _play_card,
    ClearTrick: _clear_trick,
}


def apply(state: GameState, action: Action, rng: random.Random | None = None) -> ActionResult:
    """Apply an action to a game state.

    Args:
        state: Current state (never modified)
        action: Action to apply
        rng: Optional random generator for shuffling, for reproducible games

    Returns:
        ActionResult with the new state, or the original state and a rejection

    """
    handler = _HANDLERS.get(type(action))
    if handler is None:
        raise TypeError(f"Unknown action: {action!r}")

    try:
        new_state = handler(state, action, rng)
    except Rejection as rejection:
        logger.info(
            "Table %s: %s rejected (%s): %s",
            state.table_id,
            type(action).__name__,
            rejection.code.value,
            rejection.message,
        )
        return ActionResult(state=state, rejection=rejection)

    new_state.version = state.version + 1
    return ActionResult(state=new_state)


def legal_moves(state: GameState, player_name: str) -> dict[str, Any]:
    """Describe what a player may do right now.

    Raises:
        NotFound: If the player is not at the table

    """
    index = _require_player(state, player_name)
    player = state.players[index]
    moves: dict[str, Any] = {
        "phase": state.phase.value,
        "your_turn": False,
        "cards": [],
        "play_modes": [],
        "bets": [],
    }

    if state.phase == GamePhase.BETTING and index == state.betting_turn:
        moves["your_turn"] = True
        moves["bets"] = allowed_bets(state.players, state.tricks_this_round())
    elif state.phase == GamePhase.PLAYING and index == state.current_turn:
        moves["your_turn"] = True
        moves["cards"] = legal_cards(player.hand, state.cards_on_table)
        if any(c.is_wild() for c in moves["cards"]):
            moves["play_modes"] = allowed_play_modes(state.cards_on_table)
    return moves
