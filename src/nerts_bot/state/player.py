"""Per-tick player model and its anchor positions."""

from dataclasses import dataclass, field
from typing import List, Optional

from ..types import Position
from ..wire.records import PlayerMessage
from . import layout
from .card import Card
from .stack import PlayedStack


@dataclass
class Player:
    """
    One seat at the table, rebuilt from scratch every Play tick.

    Attributes:
        player_id: Peer identity (steam id) of the player.
        cursor: Current cursor position.
        playing: True if the player is in the current round.
        ready: True if the player pressed ready.
        origin: Fixed board origin of the player's area.
        flipped: True for players on the bottom half (mirrored layout).
        nerts_cards: Nerts pile, top card first after sorting.
        draw_pile_down: Face-down draw pile card, if any.
        draw_pile_up: Face-up draw pile card, if any.
        table: Table piles, left to right.
        held_cards: Cards under the player's cursor.
        can_call_nerts: True if the nerts pile is empty and nerts can be called.
        called_nerts: True if the player called nerts this round.
        card_color: Cosmetic card color index.
        total_score: Score across rounds.
        nerts_remaining: Nerts pile size as counted by the server.
    """
    player_id: int
    cursor: Position
    playing: bool
    ready: bool
    origin: Position
    flipped: bool
    table: List[PlayedStack]
    nerts_cards: List[Card] = field(default_factory=list)
    draw_pile_down: Optional[Card] = None
    draw_pile_up: Optional[Card] = None
    held_cards: PlayedStack = field(default_factory=PlayedStack)
    can_call_nerts: bool = False
    called_nerts: bool = False
    card_color: int = 0
    total_score: int = 0
    nerts_remaining: int = 0

    @classmethod
    def from_message(cls, message: PlayerMessage) -> "Player":
        """Create an empty-handed Player from its wire record."""
        return cls(
            player_id=message.player_id,
            cursor=Position(message.cursor_x, message.cursor_y),
            playing=message.is_playing,
            ready=message.is_ready,
            origin=Position(message.origin_x, message.origin_y),
            flipped=message.flipped,
            table=[PlayedStack() for _ in range(message.tableau_count)],
            can_call_nerts=message.can_call_nerts,
            called_nerts=message.called_nerts,
            card_color=message.card_color,
            total_score=message.total_score,
            nerts_remaining=message.nerts_cards,
        )

    # -------------------------------------------------------------------------
    # Anchors
    # -------------------------------------------------------------------------

    def draw_pile_down_pos(self) -> Position:
        return layout.draw_pile_down_pos(self.origin, self.flipped, len(self.table))

    def draw_pile_up_pos(self) -> Position:
        return layout.draw_pile_up_pos(self.origin, self.flipped, len(self.table))

    def nerts_last_card_pos(self) -> Position:
        return layout.nerts_last_card_pos(self.origin, self.flipped, len(self.table))

    def table_base_positions(self) -> List[Position]:
        return layout.table_base_positions(self.origin, self.flipped, len(self.table))

    def owns_position(self, position: Position) -> bool:
        """Check if a position lies on this player's part of the board."""
        return layout.in_ownership_box(position, self.origin, len(self.table))

    def anchors(self) -> dict:
        """All anchor positions, for diagnostics."""
        return {
            "draw_pile_down": self.draw_pile_down_pos(),
            "draw_pile_up": self.draw_pile_up_pos(),
            "nerts_last_card": self.nerts_last_card_pos(),
            "table": self.table_base_positions(),
        }

    # -------------------------------------------------------------------------
    # Piles
    # -------------------------------------------------------------------------

    @property
    def nerts_top(self) -> Optional[Card]:
        return self.nerts_cards[0] if self.nerts_cards else None

    def empty_table_index(self) -> Optional[int]:
        """Index of the leftmost empty table pile, if any."""
        for i, stack in enumerate(self.table):
            if stack.is_empty():
                return i
        return None

    def sort_piles(self) -> None:
        """Put the top card of every pile at index 0."""
        self.nerts_cards.sort(key=lambda c: c.position.x, reverse=not self.flipped)
        self.held_cards.sort(self.flipped)
        for stack in self.table:
            stack.sort(self.flipped)

    def describe(self) -> str:
        """One-line summary for debug logs."""
        nerts = self.nerts_top.short_name if self.nerts_top else "__"
        table = " ".join(s.top.short_name if s.top else "__" for s in self.table)
        return f"{self.player_id:<17} N:{len(self.nerts_cards):2} {nerts:>3}  T: {table}"


__all__ = ['Player']
