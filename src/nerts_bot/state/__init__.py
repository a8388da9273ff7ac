"""
State layer: per-tick board reconstruction.

This module provides:
- Card model and legal-play rule (card.py)
- Table and held stacks (stack.py)
- Fixed board geometry (layout.py)
- Player model and anchors (player.py)
- Loose card classification (classifier.py)
- The shared GameState aggregate (game_state.py)
"""

from .card import Suit, Rank, CardFlags, CardFace, Card
from .stack import PlayedStack
from .player import Player
from .classifier import CenterSlot, classify_card, classify_cards
from .game_state import GameState, validate_board
from .layout import ORIGIN_Y, ORIGIN_Y_FLIPPED

__all__ = [
    'Suit', 'Rank', 'CardFlags', 'CardFace', 'Card',
    'PlayedStack',
    'Player',
    'CenterSlot', 'classify_card', 'classify_cards',
    'GameState', 'validate_board',
    'ORIGIN_Y', 'ORIGIN_Y_FLIPPED',
]
