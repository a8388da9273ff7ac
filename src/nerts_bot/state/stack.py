"""Ordered piles of cards (table stacks and the held stack)."""

from dataclasses import dataclass, field
from typing import List, Optional

from .card import Card


@dataclass
class PlayedStack:
    """A vertical run of cards. After ``sort`` the top card is ``cards[0]``."""
    cards: List[Card] = field(default_factory=list)

    def add_card(self, card: Card) -> None:
        self.cards.append(card)

    def sort(self, flipped: bool) -> None:
        """Order cards so the topmost one comes first.

        Non-flipped players stack toward larger y, flipped players toward
        smaller y.
        """
        self.cards.sort(key=lambda c: c.position.y, reverse=not flipped)

    @property
    def top(self) -> Optional[Card]:
        return self.cards[0] if self.cards else None

    def is_empty(self) -> bool:
        return not self.cards

    def __len__(self) -> int:
        return len(self.cards)


__all__ = ['PlayedStack']
