"""Bearos Poker: a trick-taking, bet-based card game server."""

__version__ = "1.0.0"
