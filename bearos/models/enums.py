"""Enums for the game."""

from enum import Enum


class Suit(str, Enum):
    """The four suits of the 36-card deck."""

    SPADES = "spades"
    HEARTS = "hearts"
    DIAMONDS = "diamonds"
    CLUBS = "clubs"


# Diamonds are always trumps
TRUMP_SUIT = Suit.DIAMONDS


class PlayMode(str, Enum):
    """How the 7 of spades is played."""

    TRUMPS = "Trumps"
    POKER = "Poker"
    SIMPLE = "Simple"


class GameLength(str, Enum):
    """Selectable game lengths."""

    SHORT = "short"
    BASIC = "basic"
    LONG = "long"


class GamePhase(str, Enum):
    """Phases of a table's lifecycle, derived from the game state."""

    LOBBY = "LOBBY"
    BETTING = "BETTING"
    PLAYING = "PLAYING"
    TRICK_COMPLETE = "TRICK_COMPLETE"
    GAME_OVER = "GAME_OVER"


class Command(str, Enum):
    """WebSocket commands."""

    # Commands sent to clients
    INIT = "INIT"
    GAME_STATE = "GAME_STATE"
    REPORT_ERROR = "REPORT_ERROR"
    PONG = "PONG"

    # Commands from client
    SYNC_STATE = "SYNC_STATE"
    PING = "PING"
