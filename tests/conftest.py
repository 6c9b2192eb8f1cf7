"""Shared fixtures: table builders and a random auto-player."""

import random
from collections.abc import Callable

import pytest

from bearos.engine import (
    ClearTrick,
    ConfigureGame,
    JoinTable,
    PlaceBet,
    PlayCard,
    StartGame,
    apply,
    legal_moves,
    new_table,
)
from bearos.engine.state_machine import Action
from bearos.models.card import Card
from bearos.models.enums import GameLength, GamePhase
from bearos.models.game import GameState

PLAYER_NAMES = ["alice", "bob", "carol", "dave", "erin", "frank"]


@pytest.fixture
def anyio_backend():
    """Configure anyio to use asyncio backend."""
    return "asyncio"


def _lobby(num_players: int, game_length: GameLength = GameLength.SHORT, golden: bool = False) -> GameState:
    state = new_table("table-1", PLAYER_NAMES[0])
    for name in PLAYER_NAMES[1:num_players]:
        state = apply(state, JoinTable(name)).state
    if game_length != GameLength.SHORT or golden:
        state = apply(state, ConfigureGame(game_length, has_golden_round=golden)).state
    return state


def _started(
    num_players: int,
    game_length: GameLength = GameLength.SHORT,
    golden: bool = False,
    seed: int = 0,
) -> GameState:
    result = apply(_lobby(num_players, game_length, golden), StartGame(), random.Random(seed))
    assert result.accepted, result.rejection
    return result.state


def _rig_hands(state: GameState, hands: list[list[Card]]) -> GameState:
    """Give players fixed hands, moving every other card into the deck."""
    rigged = state.clone()
    wanted = [card for hand in hands for card in hand]
    pool = [card for player in rigged.players for card in player.hand] + rigged.deck
    rigged.deck = [card for card in pool if not any(card.same_card(w) for w in wanted)]
    for player, hand in zip(rigged.players, hands, strict=True):
        player.hand = list(hand)
    return rigged


def _next_action(state: GameState, rng: random.Random) -> Action:
    """Pick a random legal action for whoever has to act."""
    if state.phase == GamePhase.TRICK_COMPLETE:
        return ClearTrick()

    if state.phase == GamePhase.BETTING:
        player = state.players[state.betting_turn]
        moves = legal_moves(state, player.name)
        return PlaceBet(player.name, rng.choice(moves["bets"]))

    player = state.players[state.current_turn]
    moves = legal_moves(state, player.name)
    card = rng.choice(moves["cards"])
    mode = rng.choice(moves["play_modes"]) if card.is_wild() else None
    return PlayCard(player.name, card, mode)


@pytest.fixture
def lobby() -> Callable[..., GameState]:
    """Factory for a lobby with N seated players."""
    return _lobby


@pytest.fixture
def started() -> Callable[..., GameState]:
    """Factory for a game that has just dealt round 1."""
    return _started


@pytest.fixture
def rig_hands() -> Callable[[GameState, list[list[Card]]], GameState]:
    """Replace the dealt hands with chosen cards."""
    return _rig_hands


@pytest.fixture
def next_action() -> Callable[[GameState, random.Random], Action]:
    """Random legal action chooser."""
    return _next_action
