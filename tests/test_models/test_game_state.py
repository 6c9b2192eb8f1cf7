"""Tests for the GameState aggregate and Player model."""

from bearos.constants import NO_TURN
from bearos.models.card import Card
from bearos.models.enums import GamePhase, Suit
from bearos.models.game import GameState
from bearos.models.player import Player


class TestPhase:
    """Phase is derived from the state flags."""

    def test_lobby(self):
        assert GameState(table_id="t").phase == GamePhase.LOBBY

    def test_betting_then_playing(self):
        state = GameState(table_id="t", game_started=True)
        assert state.phase == GamePhase.BETTING
        state.all_bets_placed = True
        assert state.phase == GamePhase.PLAYING

    def test_trick_complete(self):
        state = GameState(table_id="t", game_started=True, all_bets_placed=True, trick_winner="bob")
        assert state.phase == GamePhase.TRICK_COMPLETE

    def test_game_over_wins(self):
        state = GameState(table_id="t", game_started=True, game_over=True, trick_winner="bob")
        assert state.phase == GamePhase.GAME_OVER


class TestGameState:
    def test_clone_is_deep(self):
        state = GameState(table_id="t", players=[Player("alice", 1, hand=[Card(Suit.HEARTS, 6)])])
        copy = state.clone()
        copy.players[0].hand.clear()
        assert len(state.players[0].hand) == 1

    def test_player_lookup(self):
        state = GameState(table_id="t", players=[Player("alice", 1), Player("bob", 2)])
        assert state.player_index("bob") == 1
        assert state.player_index("zoe") == -1
        assert state.get_player_by_index(NO_TURN) is None
        assert state.get_player("alice").seat_number == 1

    def test_owner_index_falls_back_to_first(self):
        state = GameState(table_id="t", players=[Player("alice", 1), Player("bob", 2, is_owner=True)])
        assert state.owner_index() == 1
        state.players[1].is_owner = False
        assert state.owner_index() == 0

    def test_leaderboard(self):
        state = GameState(
            table_id="t",
            players=[Player("alice", 1, score=5), Player("bob", 2, score=40), Player("carol", 3, score=-10)],
        )
        assert [entry["name"] for entry in state.get_leaderboard()] == ["bob", "alice", "carol"]

    def test_conservation_only_checked_once_started(self):
        assert GameState(table_id="t").cards_conserved()
        assert not GameState(table_id="t", game_started=True).cards_conserved()


class TestPlayer:
    def test_remove_card_ignores_mode(self):
        player = Player("alice", 1, hand=[Card(Suit.SPADES, 7), Card(Suit.HEARTS, 9)])
        player.remove_card(Card(Suit.SPADES, 7))
        assert player.hand == [Card(Suit.HEARTS, 9)]

    def test_reset_round(self):
        player = Player("alice", 1, tricks_won=3, bet=2, score=20)
        player.reset_round()
        assert (player.tricks_won, player.bet, player.score) == (0, None, 20)
