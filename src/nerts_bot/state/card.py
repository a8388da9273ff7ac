"""
Card model.

Cards have no identity across ticks: each snapshot produces fresh Card
objects from its loose card records, and a card is known only by where it
is and what pile it was classified into this tick.
"""

from dataclasses import dataclass
from enum import Enum, IntEnum, IntFlag
from typing import Optional

from ..types import Position
from ..wire.records import CardMessage, NO_HOLDER


class Suit(Enum):
    CLUBS = "C"
    DIAMONDS = "D"
    HEARTS = "H"
    SPADES = "S"


class Rank(IntEnum):
    """Card rank, Ace low. The value is the wire code modulo 13."""
    ACE = 0
    TWO = 1
    THREE = 2
    FOUR = 3
    FIVE = 4
    SIX = 5
    SEVEN = 6
    EIGHT = 7
    NINE = 8
    TEN = 9
    JACK = 10
    QUEEN = 11
    KING = 12

    @property
    def short_name(self) -> str:
        return _RANK_NAMES[self]


_RANK_NAMES = {
    Rank.ACE: "A", Rank.TWO: "2", Rank.THREE: "3", Rank.FOUR: "4",
    Rank.FIVE: "5", Rank.SIX: "6", Rank.SEVEN: "7", Rank.EIGHT: "8",
    Rank.NINE: "9", Rank.TEN: "10", Rank.JACK: "J", Rank.QUEEN: "Q",
    Rank.KING: "K",
}


class CardFlags(IntFlag):
    """Bit field carried in CardMessage.flags."""
    FACE_UP = 0x01
    FLIPPED = 0x02
    IN_NERTS_PILE = 0x04
    DISABLE_FOUNDATION = 0x08
    DISABLE_PERSONAL = 0x10


@dataclass(frozen=True)
class CardFace:
    """Suit and rank of a known card."""
    suit: Suit
    rank: Rank

    @classmethod
    def from_code(cls, code: int) -> Optional["CardFace"]:
        """Decode a wire card code.

        Code 0 means the face is not known. Otherwise the suit is picked by
        range (<13 clubs, <26 diamonds, <39 hearts, else spades) and the
        rank is ``code % 13``.
        """
        if code == 0:
            return None
        if code < 13:
            suit = Suit.CLUBS
        elif code < 26:
            suit = Suit.DIAMONDS
        elif code < 39:
            suit = Suit.HEARTS
        else:
            suit = Suit.SPADES
        return cls(suit=suit, rank=Rank(code % 13))

    @property
    def short_name(self) -> str:
        return f"{self.rank.short_name}{self.suit.value}"


@dataclass
class Card:
    """
    A loose card as seen this tick.

    Attributes:
        face: Suit and rank, or None when unknown.
        position: Board position.
        face_up: True if the face is showing.
        height: Stack height reported by the server.
        holder_index: Active seat holding the card, or None.
        flags: Raw flag bits.
    """
    face: Optional[CardFace]
    position: Position
    face_up: bool
    height: int = 0
    holder_index: Optional[int] = None
    flags: CardFlags = CardFlags(0)

    @classmethod
    def from_message(cls, message: CardMessage) -> "Card":
        flags = CardFlags(message.flags & 0x1F)
        return cls(
            face=CardFace.from_code(message.data),
            position=Position(message.x, message.y),
            face_up=bool(flags & CardFlags.FACE_UP),
            height=message.height,
            holder_index=None if message.holder == NO_HOLDER else message.holder,
            flags=flags,
        )

    @property
    def in_nerts_pile(self) -> bool:
        return bool(self.flags & CardFlags.IN_NERTS_PILE)

    def can_play_on(self, other: "Card") -> bool:
        """Return True if this card can be placed on ``other``.

        Both cards must be face up with known faces and the same suit, and
        this card must be exactly one rank above the other (Ace low, no
        wraparound).
        """
        if self.face is None or other.face is None:
            return False
        if not self.face_up or not other.face_up:
            return False
        return self.face.suit == other.face.suit and self.face.rank == other.face.rank + 1

    def can_start_pile(self) -> bool:
        """Only an Ace may go on an empty center slot."""
        return self.face is not None and self.face.rank == Rank.ACE

    def can_play_on_slot(self, top: Optional["Card"]) -> bool:
        """Legal-play check against a center slot that may be empty."""
        if top is None:
            return self.can_start_pile()
        return self.can_play_on(top)

    @property
    def short_name(self) -> str:
        return self.face.short_name if self.face is not None else "?"


__all__ = ['Suit', 'Rank', 'CardFlags', 'CardFace', 'Card']
