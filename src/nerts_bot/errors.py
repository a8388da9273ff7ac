"""
Exception hierarchy for the nerts bot.

Errors fall into two groups:

    Recoverable:
        DesyncError         - delta frame without a matching previous frame;
                              the tick is dropped and a keyframe requested.

    Fatal (terminate the affected activity and the bot):
        TransportError      - the transport refused to send a message
        FormatError         - snapshot bytes do not match the wire layout
        ClassificationError - a loose card matched no pile, or two cards
                              claimed the same slot
        InvariantError      - reconstructed state broke a board invariant
"""

from typing import Any, Dict, Optional


class NertsBotError(Exception):
    """Base class for all bot errors."""


class TransportError(NertsBotError):
    """The transport collaborator failed to deliver a message."""


class DesyncError(NertsBotError):
    """A delta frame could not be applied to the retained frame."""


class FormatError(NertsBotError):
    """Snapshot bytes violate the positional wire format."""


class ClassificationError(NertsBotError):
    """A loose card could not be assigned to exactly one pile.

    Attributes:
        card: The offending card (its raw fields are in the message).
        context: Extra diagnostic data such as the expected anchor positions.
    """

    def __init__(self, message: str, card: Any = None,
                 context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.card = card
        self.context = context or {}

    def __str__(self) -> str:
        text = super().__str__()
        if self.card is not None:
            text += f" | card={self.card!r}"
        for key, value in self.context.items():
            text += f" | {key}={value!r}"
        return text


class InvariantError(NertsBotError):
    """Reconstructed game state broke a board layout invariant."""


__all__ = [
    'NertsBotError',
    'TransportError',
    'DesyncError',
    'FormatError',
    'ClassificationError',
    'InvariantError',
]
