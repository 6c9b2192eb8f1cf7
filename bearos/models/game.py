"""Game state model: the aggregate root for one table."""

import copy
from dataclasses import dataclass, field
from typing import Any

from bearos.constants import DECK_SIZE, NO_TURN
from bearos.models.card import Card, TableCard
from bearos.models.enums import GameLength, GamePhase
from bearos.models.player import Player
from bearos.models.round_plan import round_name, total_rounds, tricks_in_round


@dataclass
class PlayerScore:
    """One player's entry in a score table row."""

    cumulative_points: int = 0
    round_points: int = 0
    bet: int | None = None


@dataclass
class ScoreTableRow:
    """Score history for one round.

    Attributes:
        round_id: 1-based round number
        round_name: Round label ("1".."6", "B" or "G")
        scores: Entry per player name
        scored: True once the round's points have been written

    """

    round_id: int
    round_name: str
    scores: dict[str, PlayerScore] = field(default_factory=dict)
    scored: bool = False


@dataclass
class GameState:
    """Complete state of one Bearos Poker table.

    The engine never mutates a state it was given; every accepted action
    produces a new one (see ``clone``).

    Attributes:
        table_id: Table identifier
        players: Players in seat order
        deck: Undealt cards; cleared tricks go back to the bottom
        cards_on_table: Cards of the current trick, in play order
        current_round: 1-based round number (0 in the lobby)
        current_play: 1-based trick number within the round
        current_turn: Index of the player who must play, NO_TURN if nobody
        round_start_player_index: Index of the player who bets and leads first
        betting_turn: Index of the player who must bet, NO_TURN if betting is closed
        all_bets_placed: Whether every player has bet this round
        game_started: Whether the game has left the lobby
        game_over: Whether the final round has been scored
        game_length: Selected length of the game
        has_golden_round: Whether a final golden round is played
        highest_card_on_table: Winning card of the last completed trick
        trick_winner: Winner of a completed trick waiting to be cleared
        score_table: One row per planned round
        version: Bumped on every accepted action

    """

    table_id: str
    players: list[Player] = field(default_factory=list)
    deck: list[Card] = field(default_factory=list)
    cards_on_table: list[TableCard] = field(default_factory=list)
    current_round: int = 0
    current_play: int = 0
    current_turn: int = NO_TURN
    round_start_player_index: int = 0
    betting_turn: int = NO_TURN
    all_bets_placed: bool = False
    game_started: bool = False
    game_over: bool = False
    game_length: GameLength = GameLength.SHORT
    has_golden_round: bool = False
    highest_card_on_table: Card | None = None
    trick_winner: str | None = None
    score_table: list[ScoreTableRow] = field(default_factory=list)
    version: int = 0

    @property
    def phase(self) -> GamePhase:
        """Current lifecycle phase."""
        if self.game_over:
            return GamePhase.GAME_OVER
        if not self.game_started:
            return GamePhase.LOBBY
        if self.trick_winner is not None:
            return GamePhase.TRICK_COMPLETE
        if not self.all_bets_placed:
            return GamePhase.BETTING
        return GamePhase.PLAYING

    def clone(self) -> "GameState":
        """Deep copy, so a transition never leaks into the caller's state."""
        return copy.deepcopy(self)

    def get_player(self, name: str) -> Player | None:
        """Get a player by name."""
        for player in self.players:
            if player.name == name:
                return player
        return None

    def player_index(self, name: str) -> int:
        """Get a player's seat-order index, -1 if absent."""
        for i, player in enumerate(self.players):
            if player.name == name:
                return i
        return -1

    def get_player_by_index(self, index: int) -> Player | None:
        """Get a player by their turn index."""
        if 0 <= index < len(self.players):
            return self.players[index]
        return None

    def owner_index(self) -> int:
        """Index of the table owner (0 if the owner left)."""
        for i, player in enumerate(self.players):
            if player.is_owner:
                return i
        return 0

    def total_rounds(self) -> int:
        """Number of rounds in this game."""
        return total_rounds(self.game_length, self.has_golden_round)

    def round_name(self) -> str:
        """Label of the current round."""
        return round_name(self.game_length, self.current_round, self.has_golden_round)

    def tricks_this_round(self) -> int:
        """Cards dealt to each player (and tricks played) this round."""
        return tricks_in_round(self.game_length, self.current_round, self.has_golden_round)

    def current_score_row(self) -> ScoreTableRow | None:
        """Score table row of the current round."""
        if 1 <= self.current_round <= len(self.score_table):
            return self.score_table[self.current_round - 1]
        return None

    def card_count(self) -> int:
        """Cards held in hands, deck and on the table."""
        in_hands = sum(len(p.hand) for p in self.players)
        return in_hands + len(self.deck) + len(self.cards_on_table)

    def cards_conserved(self) -> bool:
        """Check that no card was lost or duplicated while a game is running."""
        if not self.game_started:
            return True
        return self.card_count() == DECK_SIZE

    def get_leaderboard(self) -> list[dict[str, Any]]:
        """Get players sorted by score, best first."""
        sorted_players = sorted(self.players, key=lambda p: p.score, reverse=True)
        return [
            {"name": p.name, "seat_number": p.seat_number, "score": p.score}
            for p in sorted_players
        ]

    def __str__(self) -> str:
        """Return string representation."""
        return (
            f"Table {self.table_id}: {len(self.players)} players, "
            f"Round {self.current_round}, Phase: {self.phase.value}"
        )
