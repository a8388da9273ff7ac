"""
Nerts Bot: autoplay client for the multiplayer card game Nerts.

The bot decodes the server's compressed snapshot stream, rebuilds the board
as named piles for every seat, and plays legal moves greedily.

Submodules:
    wire   - Frame codec, record parsers and builders
    state  - Card, pile and player models, geometry classifier, GameState
    bot    - Transport, threaded runtime and decision engine
    config - BotConfig and NERTS_* environment overrides
    errors - Exception hierarchy
    cli    - Command-line entry point

Usage:
    from nerts_bot.bot import Bot, DecisionEngine, UdpTransport
    from nerts_bot.wire import FrameDecoder, parse_server_message
"""

from .errors import (
    NertsBotError,
    TransportError,
    DesyncError,
    FormatError,
    ClassificationError,
    InvariantError,
)
from .types import Position, GamePhase
from .config import BotConfig

__version__ = "0.1.0"

__all__ = [
    'NertsBotError', 'TransportError', 'DesyncError', 'FormatError',
    'ClassificationError', 'InvariantError',
    'Position', 'GamePhase',
    'BotConfig',
]
