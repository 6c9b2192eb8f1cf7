"""Rejections raised by the rules engine.

Every rejection is recoverable by the caller: it carries a machine-readable
code for i18n on the frontend, a human-readable message, and the context
needed to render a precise error (expected turn, allowed bets, legal cards).
"""

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    """Error codes for i18n translation on the frontend."""

    # Game state errors
    GAME_NOT_STARTED = "error.gameNotStarted"
    GAME_ALREADY_STARTED = "error.gameAlreadyStarted"
    GAME_OVER = "error.gameOver"
    NOT_ENOUGH_PLAYERS = "error.notEnoughPlayers"
    INVALID_GAME_LENGTH = "error.invalidGameLength"
    NOT_IN_BETTING_PHASE = "error.notInBettingPhase"
    NOT_IN_PLAYING_PHASE = "error.notInPlayingPhase"
    NO_TRICK_TO_CLEAR = "error.noTrickToClear"
    ROUND_ALREADY_SCORED = "error.roundAlreadyScored"
    STALE_STATE = "error.staleState"

    # Lobby errors
    GAME_IS_FULL = "error.gameIsFull"
    NAME_TAKEN = "error.nameTaken"
    INVALID_NAME = "error.invalidName"

    # Player errors
    PLAYER_NOT_FOUND = "error.playerNotFound"
    TABLE_NOT_FOUND = "error.tableNotFound"
    NOT_YOUR_TURN = "error.notYourTurn"
    ALREADY_PLACED_BET = "error.alreadyPlacedBet"

    # Bet errors
    BET_OUT_OF_RANGE = "error.betOutOfRange"
    BET_SUM_EQUALS_TRICKS = "error.betSumEqualsTricks"

    # Card errors
    CARD_NOT_IN_HAND = "error.cardNotInHand"
    PLAY_MODE_REQUIRED = "error.playModeRequired"
    PLAY_MODE_NOT_ALLOWED = "error.playModeNotAllowed"
    MUST_FOLLOW_SUIT = "error.mustFollowSuit"
    MUST_PLAY_TRUMP = "error.mustPlayTrump"
    MUST_PLAY_HIGHEST = "error.mustPlayHighest"


class Rejection(Exception):  # noqa: N818
    """Base class for every rejected action."""

    def __init__(self, code: ErrorCode, message: str, **context: Any) -> None:
        """Initialize rejection.

        Args:
            code: Error code
            message: Human-readable explanation
            **context: Extra details for the caller

        """
        super().__init__(message)
        self.code = code
        self.message = message
        self.context = context

    def __repr__(self) -> str:
        """Return debug representation."""
        return f"{type(self).__name__}({self.code.value!r}, {self.message!r})"


class InvalidAction(Rejection):
    """Wrong turn, wrong phase, or game not started / already over."""


class IllegalPlay(Rejection):
    """The card (or its play mode) breaks the play rules."""


class IllegalBet(Rejection):
    """The bet is out of range or would make the bets sum to the trick count."""


class NotFound(Rejection):
    """Unknown player or table."""
