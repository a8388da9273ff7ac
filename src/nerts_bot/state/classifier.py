"""
Geometry classifier.

Assigns every loose card of a snapshot to exactly one pile. Rules are tried
in order and the first match wins:

    1. held      - the card names an active seat as its holder
    2. center    - the card sits exactly on a center outline
    3. personal  - draw pile (down / up) anchors or the nerts pile band of
                   any active player
    4. table     - the tall box of a table pile of an active player whose
                   board contains the card
    5. otherwise - ClassificationError

Positions are deterministic for the fixed board layout, so a card that
matches nothing, or a slot claimed twice, means the layout assumptions no
longer hold. Both are fatal and carry the card plus the anchors that were
tried.
"""

import logging
from typing import Iterable, List, Optional, Tuple

from ..errors import ClassificationError
from ..types import Position
from . import layout
from .card import Card
from .player import Player

logger = logging.getLogger(__name__)

CenterSlot = Tuple[Position, Optional[Card]]


def _claim_center(card: Card, center_cards: List[CenterSlot]) -> bool:
    for i, (slot_pos, occupant) in enumerate(center_cards):
        if slot_pos != card.position:
            continue
        if occupant is not None:
            raise ClassificationError(
                f"Center slot at {slot_pos} claimed twice",
                card=card,
                context={"occupant": occupant},
            )
        center_cards[i] = (slot_pos, card)
        return True
    return False


def _claim_personal(card: Card, player: Player) -> bool:
    if card.position == player.draw_pile_down_pos():
        if player.draw_pile_down is not None:
            raise ClassificationError(
                f"Face-down draw pile of {player.player_id} claimed twice",
                card=card,
                context={"occupant": player.draw_pile_down},
            )
        player.draw_pile_down = card
        return True

    if card.position == player.draw_pile_up_pos():
        if player.draw_pile_up is not None:
            raise ClassificationError(
                f"Face-up draw pile of {player.player_id} claimed twice",
                card=card,
                context={"occupant": player.draw_pile_up},
            )
        player.draw_pile_up = card
        return True

    if layout.in_nerts_band(card.position, player.nerts_last_card_pos(), player.flipped):
        player.nerts_cards.append(card)
        return True

    return False


def _claim_table(card: Card, player: Player) -> bool:
    if not player.owns_position(card.position):
        return False
    for i, base in enumerate(player.table_base_positions()):
        if layout.in_table_box(card.position, base, player.flipped):
            player.table[i].add_card(card)
            return True
    return False


def classify_card(card: Card, active: List[Player], center_cards: List[CenterSlot]) -> str:
    """Place one card into its pile.

    Args:
        card: The card to place.
        active: Active players in seat order (holder indices refer to this list).
        center_cards: Center slots, updated in place.

    Returns:
        The kind of pile the card went to ("held", "center", "personal", "table").

    Raises:
        ClassificationError: If the card matches no pile or its slot is taken.
    """
    if card.holder_index is not None:
        if card.holder_index >= len(active):
            raise ClassificationError(
                f"Card held by unknown seat {card.holder_index} "
                f"({len(active)} active players)",
                card=card,
            )
        active[card.holder_index].held_cards.add_card(card)
        return "held"

    if _claim_center(card, center_cards):
        return "center"

    for player in active:
        if _claim_personal(card, player):
            return "personal"

    for player in active:
        if _claim_table(card, player):
            return "table"

    raise ClassificationError(
        "Card matches no pile",
        card=card,
        context={
            "anchors": {p.player_id: p.anchors() for p in active},
            "origins": {p.player_id: p.origin for p in active},
        },
    )


def classify_cards(cards: Iterable[Card], players: List[Player],
                   center_cards: List[CenterSlot]) -> None:
    """Classify all loose cards of a tick and sort every pile.

    Players and center slots are updated in place; callers pass fresh
    per-tick objects so a failure never touches committed state.
    """
    active = [p for p in players if p.playing]
    counts = {}
    for card in cards:
        kind = classify_card(card, active, center_cards)
        counts[kind] = counts.get(kind, 0) + 1

    for player in players:
        player.sort_piles()

    logger.debug(f"Classified cards: {counts}")


__all__ = ['CenterSlot', 'classify_card', 'classify_cards']
