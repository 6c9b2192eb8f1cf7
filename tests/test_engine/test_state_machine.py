"""Tests for the game state machine.

Drives tables through lobby, betting, playing, trick clearing, round
progression and game over using ``apply`` only.
"""

import random

import pytest

from bearos.constants import DECK_SIZE, NO_TURN
from bearos.engine import (
    ClearTrick,
    ConfigureGame,
    ErrorCode,
    IllegalBet,
    IllegalPlay,
    InvalidAction,
    JoinTable,
    NotFound,
    PlaceBet,
    PlayCard,
    StartGame,
    apply,
    legal_moves,
    new_table,
)
from bearos.engine.progression import starting_player_index
from bearos.models.card import WILD_CARD, Card
from bearos.models.enums import GameLength, GamePhase, PlayMode, Suit


def accept(state, action, rng=None):
    result = apply(state, action, rng)
    assert result.accepted, result.rejection
    return result.state


def reject(state, action):
    snapshot = state.clone()
    result = apply(state, action)
    assert not result.accepted
    assert result.state is state
    assert state == snapshot
    return result.rejection


class TestLobby:
    """Creating, joining and configuring a table."""

    def test_new_table_seats_owner(self):
        state = new_table("t1", "  alice ")
        assert state.phase == GamePhase.LOBBY
        assert state.players[0].name == "alice"
        assert state.players[0].is_owner
        assert state.players[0].seat_number == 1
        assert state.game_length == GameLength.SHORT

    def test_new_table_requires_name(self):
        with pytest.raises(InvalidAction):
            new_table("t1", "   ")

    def test_join_takes_next_seat(self, lobby):
        state = lobby(3)
        assert [p.seat_number for p in state.players] == [1, 2, 3]
        assert not any(p.is_owner for p in state.players[1:])

    def test_join_rejects_duplicate_name(self, lobby):
        rejection = reject(lobby(2), JoinTable("bob"))
        assert rejection.code == ErrorCode.NAME_TAKEN

    def test_join_rejects_empty_name(self, lobby):
        assert reject(lobby(2), JoinTable("")).code == ErrorCode.INVALID_NAME

    def test_table_is_full_at_six(self, lobby):
        rejection = reject(lobby(6), JoinTable("grace"))
        assert rejection.code == ErrorCode.GAME_IS_FULL

    def test_configure(self, lobby):
        state = accept(lobby(2), ConfigureGame(GameLength.LONG, has_golden_round=True))
        assert state.game_length == GameLength.LONG
        assert state.has_golden_round
        assert state.total_rounds() == 29

    def test_configure_rejects_unknown_length(self, lobby):
        rejection = reject(lobby(2), ConfigureGame("medium"))
        assert rejection.code == ErrorCode.INVALID_GAME_LENGTH

    def test_lobby_closes_after_start(self, started):
        state = started(2)
        assert reject(state, JoinTable("carol")).code == ErrorCode.GAME_ALREADY_STARTED
        assert reject(state, ConfigureGame(GameLength.LONG)).code == ErrorCode.GAME_ALREADY_STARTED
        assert reject(state, StartGame()).code == ErrorCode.GAME_ALREADY_STARTED


class TestStartGame:
    """Leaving the lobby."""

    def test_needs_two_players(self, lobby):
        rejection = reject(lobby(1), StartGame())
        assert rejection.code == ErrorCode.NOT_ENOUGH_PLAYERS

    def test_deals_round_one(self, lobby):
        state = accept(lobby(3), StartGame(), random.Random(5))
        assert state.phase == GamePhase.BETTING
        assert state.current_round == 1
        assert state.current_play == 1
        assert all(len(p.hand) == 1 for p in state.players)
        assert len(state.deck) == DECK_SIZE - 3
        assert state.cards_conserved()

    def test_owner_starts_round_one(self, started):
        state = started(4)
        assert state.round_start_player_index == 0
        assert state.betting_turn == 0
        assert state.current_turn == NO_TURN

    def test_builds_score_table(self, lobby):
        state = accept(lobby(2), StartGame(GameLength.BASIC))
        assert state.game_length == GameLength.BASIC
        assert [row.round_name for row in state.score_table][:8] == ["1", "2", "3", "4", "5", "6", "6", "6"]
        assert len(state.score_table) == 22
        assert set(state.score_table[0].scores) == {"alice", "bob"}

    def test_version_bumps_only_on_accept(self, lobby):
        state = lobby(2)
        before = state.version
        assert accept(state, StartGame()).version == before + 1
        assert apply(state, JoinTable("alice")).state.version == before


class TestBetting:
    """Bets go round the table from the round's first player."""

    def test_wrong_turn(self, started):
        rejection = reject(started(3), PlaceBet("bob", 0))
        assert rejection.code == ErrorCode.NOT_YOUR_TURN
        assert rejection.context["expected_player"] == "alice"

    def test_unknown_player(self, started):
        rejection = reject(started(2), PlaceBet("zoe", 0))
        assert isinstance(rejection, NotFound)
        assert rejection.code == ErrorCode.PLAYER_NOT_FOUND

    def test_not_started(self, lobby):
        assert reject(lobby(2), PlaceBet("alice", 0)).code == ErrorCode.GAME_NOT_STARTED

    def test_bet_advances_turn_and_fills_row(self, started):
        state = accept(started(3), PlaceBet("alice", 1))
        assert state.betting_turn == 1
        assert state.players[0].bet == 1
        assert state.score_table[0].scores["alice"].bet == 1

    def test_last_bettor_cannot_match_tricks(self, started):
        state = accept(started(2), PlaceBet("alice", 0))
        rejection = reject(state, PlaceBet("bob", 1))
        assert isinstance(rejection, IllegalBet)
        assert rejection.code == ErrorCode.BET_SUM_EQUALS_TRICKS

    def test_out_of_range(self, started):
        rejection = reject(started(2), PlaceBet("alice", 2))
        assert rejection.code == ErrorCode.BET_OUT_OF_RANGE

    def test_all_bets_open_play(self, started):
        state = accept(started(2), PlaceBet("alice", 1))
        state = accept(state, PlaceBet("bob", 1))
        assert state.all_bets_placed
        assert state.phase == GamePhase.PLAYING
        assert state.betting_turn == NO_TURN
        assert state.current_turn == state.round_start_player_index

    def test_cannot_play_while_betting(self, started):
        state = started(2)
        card = state.players[0].hand[0]
        rejection = reject(state, PlayCard("alice", card, PlayMode.POKER if card.is_wild() else None))
        assert rejection.code == ErrorCode.NOT_IN_PLAYING_PHASE


S, H, D = Suit.SPADES, Suit.HEARTS, Suit.DIAMONDS


class TestPlayingRoundOne:
    """Round 1 with three players and fixed hands."""

    @pytest.fixture
    def playing(self, started, rig_hands):
        state = rig_hands(started(3), [[Card(S, 6)], [Card(H, 9)], [Card(S, 13)]])
        for name in ("alice", "bob", "carol"):
            state = accept(state, PlaceBet(name, 0))
        return state

    def test_turns_go_round(self, playing):
        state = accept(playing, PlayCard("alice", Card(S, 6)))
        assert state.current_turn == 1
        state = accept(state, PlayCard("bob", Card(H, 9)))
        assert state.current_turn == 2

    def test_trick_completes_in_two_phases(self, playing):
        state = accept(playing, PlayCard("alice", Card(S, 6)))
        state = accept(state, PlayCard("bob", Card(H, 9)))
        state = accept(state, PlayCard("carol", Card(S, 13)))

        assert state.phase == GamePhase.TRICK_COMPLETE
        assert state.trick_winner == "carol"
        assert state.highest_card_on_table == Card(S, 13)
        assert state.current_turn == NO_TURN
        assert len(state.cards_on_table) == 3
        assert state.players[2].tricks_won == 1
        assert state.cards_conserved()

        assert reject(state, PlayCard("alice", Card(S, 6))).code == ErrorCode.NOT_IN_PLAYING_PHASE

    def test_clear_scores_and_deals_round_two(self, playing):
        state = playing
        for name, card in (("alice", Card(S, 6)), ("bob", Card(H, 9)), ("carol", Card(S, 13))):
            state = accept(state, PlayCard(name, card))
        state = accept(state, ClearTrick(), random.Random(2))

        assert [p.score for p in state.players] == [5, 5, 1]
        row = state.score_table[0]
        assert row.scored
        assert row.scores["carol"].round_points == 1
        assert row.scores["alice"].cumulative_points == 5

        assert state.current_round == 2
        assert state.phase == GamePhase.BETTING
        assert state.round_start_player_index == 1
        assert state.betting_turn == 1
        assert all(len(p.hand) == 2 for p in state.players)
        assert all(p.bet is None and p.tricks_won == 0 for p in state.players)
        assert state.cards_conserved()

    def test_wrong_turn_to_play(self, playing):
        rejection = reject(playing, PlayCard("bob", Card(H, 9)))
        assert rejection.code == ErrorCode.NOT_YOUR_TURN
        assert rejection.context["expected_turn"] == 0

    def test_nothing_to_clear(self, playing):
        assert reject(playing, ClearTrick()).code == ErrorCode.NO_TRICK_TO_CLEAR


class TestWildCardPlay:
    """The 7 of spades through apply."""

    @pytest.fixture
    def playing(self, started, rig_hands):
        state = rig_hands(started(2), [[WILD_CARD], [Card(D, 8)]])
        state = accept(state, PlaceBet("alice", 1))
        return accept(state, PlaceBet("bob", 1))

    def test_mode_required(self, playing):
        rejection = reject(playing, PlayCard("alice", WILD_CARD))
        assert isinstance(rejection, IllegalPlay)
        assert rejection.code == ErrorCode.PLAY_MODE_REQUIRED

    def test_trumps_lead_wins(self, playing):
        state = accept(playing, PlayCard("alice", WILD_CARD, PlayMode.TRUMPS))
        assert state.cards_on_table[0].card.play_mode == PlayMode.TRUMPS
        state = accept(state, PlayCard("bob", Card(D, 8)))
        assert state.trick_winner == "alice"

    def test_mode_dropped_when_cleared(self, playing):
        state = accept(playing, PlayCard("alice", WILD_CARD, PlayMode.SIMPLE))
        state = accept(state, PlayCard("bob", Card(D, 8)))
        state = accept(state, ClearTrick())
        in_play = state.deck + [c for p in state.players for c in p.hand]
        assert all(card.play_mode is None for card in in_play)

    def test_legal_moves_offer_modes(self, playing):
        moves = legal_moves(playing, "alice")
        assert moves["your_turn"]
        assert moves["cards"] == [WILD_CARD]
        assert moves["play_modes"] == [PlayMode.TRUMPS, PlayMode.POKER, PlayMode.SIMPLE]
        assert not legal_moves(playing, "bob")["your_turn"]


class TestRoundStart:
    """Who starts each round."""

    @pytest.mark.parametrize(("round_number", "expected"), [(1, 0), (2, 1), (3, 2), (4, 0), (5, 1)])
    def test_rotation(self, started, round_number, expected):
        assert starting_player_index(started(3), round_number) == expected


class TestFullGame:
    """Complete games with random legal play."""

    def _play_to_end(self, state, next_action, seed):
        rng = random.Random(seed)
        for _ in range(10_000):
            if state.game_over:
                return state
            state = accept(state, next_action(state, rng), rng)
            assert state.card_count() == DECK_SIZE
        pytest.fail("game did not finish")

    def test_basic_game_ends_after_22_rounds(self, started, next_action):
        state = self._play_to_end(started(2, GameLength.BASIC), next_action, seed=11)

        assert state.phase == GamePhase.GAME_OVER
        assert state.current_round == 22
        assert state.current_turn == NO_TURN
        assert state.betting_turn == NO_TURN
        assert state.cards_on_table == []
        assert not state.all_bets_placed
        assert all(p.bet is None for p in state.players)
        assert all(row.scored for row in state.score_table)
        assert state.players[0].score == state.score_table[-1].scores["alice"].cumulative_points

    def test_game_over_is_terminal(self, started, next_action):
        state = self._play_to_end(started(2), next_action, seed=3)
        assert reject(state, ClearTrick()).code == ErrorCode.GAME_OVER
        assert reject(state, PlaceBet("alice", 0)).code == ErrorCode.GAME_OVER

    def test_golden_round_is_last(self, started, next_action):
        state = self._play_to_end(started(6, golden=True), next_action, seed=8)
        assert state.current_round == 19
        assert state.score_table[-1].round_name == "G"
        assert state.score_table[-1].scored

    def test_leaderboard_sorted(self, started, next_action):
        state = self._play_to_end(started(4), next_action, seed=21)
        scores = [entry["score"] for entry in state.get_leaderboard()]
        assert scores == sorted(scores, reverse=True)
