"""
Shared type definitions.

Kept separate so that the wire, state and bot packages can all use them
without circular imports.

Types:
    Position: Board coordinate in game units
    GamePhase: Phase of a round as sent by the server
"""

from dataclasses import dataclass
from enum import IntEnum

from .errors import FormatError


@dataclass(frozen=True)
class Position:
    """A point on the game board.

    The server sends coordinates as signed 16-bit integers; the board is
    roughly 4000 x 2400 units.
    """
    x: int
    y: int

    @classmethod
    def zero(cls) -> "Position":
        return cls(0, 0)

    def __add__(self, other: "Position") -> "Position":
        return Position(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Position") -> "Position":
        return Position(self.x - other.x, self.y - other.y)

    def within_box(self, box_origin: "Position", box_size: "Position") -> bool:
        """Check if this position lies in the half-open box [origin, origin + size)."""
        return (
            box_origin.x <= self.x < box_origin.x + box_size.x
            and box_origin.y <= self.y < box_origin.y + box_size.y
        )


class GamePhase(IntEnum):
    """Round phase, encoded as a single byte on the wire."""
    LOBBY = 0
    INTRO = 1
    PLAY = 2
    NERTS = 3

    @classmethod
    def from_code(cls, code: int) -> "GamePhase":
        """Convert a wire tag to a phase.

        Raises:
            FormatError: If the tag is not a known phase.
        """
        try:
            return cls(code)
        except ValueError:
            raise FormatError(f"Unknown game phase tag: {code}") from None


__all__ = ['Position', 'GamePhase']
