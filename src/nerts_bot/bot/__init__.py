"""
Bot layer: runtime, transport and autoplay.

This module provides:
- Transport contract and UDP adapter (transport.py)
- Shared aggregate with receive/send activities (runtime.py)
- Priority-ordered decision engine (decision.py)
"""

from .transport import Transport, UdpTransport
from .runtime import Bot, StatePredicate
from .decision import (
    ActionKind,
    Action,
    choose_action,
    find_center_target,
    DecisionEngine,
)

__all__ = [
    'Transport', 'UdpTransport',
    'Bot', 'StatePredicate',
    'ActionKind', 'Action', 'choose_action', 'find_center_target', 'DecisionEngine',
]
