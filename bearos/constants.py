"""Game constants for Bearos Poker."""

# Game limits
MAX_PLAYERS = 6
MIN_PLAYERS = 2

# Deck
MIN_RANK = 6
MAX_RANK = 14  # 11=J, 12=Q, 13=K, 14=A
DECK_SIZE = 36

# The wild card: 7 of spades
WILD_CARD_RANK = 7

# Round labels
BLIND_ROUND = "B"
GOLDEN_ROUND = "G"
BLIND_ROUND_CARDS = 6
GOLDEN_ROUND_CARDS = 6

# Scoring (actual logic in engine/scoring.py)
BLIND_MULTIPLIER = 2
ZERO_BET_POINTS = 5
EXACT_BET_MULTIPLIER = 10
OVER_BET_MULTIPLIER = 1
UNDER_BET_PENALTY = 10

# Sentinel for "nobody may act"
NO_TURN = -1
