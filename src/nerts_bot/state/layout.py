"""
Fixed board geometry.

The server never says which pile a loose card belongs to; it only sends
positions. Piles sit at fixed offsets from each player's board origin, so a
card is classified by matching its position against these anchors.

All values were measured from the live game. Flipped players (odd seats)
sit on the bottom half of the board with mirrored geometry, and their
anchors shift right by the extra width that 5- and 6-pile tables take up.
"""

from typing import List

from ..types import Position

# =============================================================================
# ORIGINS
# =============================================================================

ORIGIN_Y = 238
ORIGIN_Y_FLIPPED = 1382

# =============================================================================
# SPACING
# =============================================================================

TABLE_SPACING = 160
NERTS_BAND_WIDTH = 170

# Ownership box, measured with the cursor at the board corners
OWNERSHIP_WIDTH = 1040
OWNERSHIP_HEIGHT = 700

# Tall box below (non-flipped) or above (flipped) each table base
TABLE_BOX_ABOVE = 600
TABLE_BOX_ABOVE_FLIPPED = 10
TABLE_BOX_HEIGHT = 700

# =============================================================================
# ANCHOR OFFSETS (relative to the player origin)
# =============================================================================

DRAW_PILE_DOWN_OFFSET = Position(82, 140)
DRAW_PILE_DOWN_OFFSET_FLIPPED = Position(940, 446)

DRAW_PILE_UP_OFFSET = Position(248, 140)
DRAW_PILE_UP_OFFSET_FLIPPED = Position(774, 446)

NERTS_LAST_CARD_OFFSET = Position(84, 404)
NERTS_LAST_CARD_OFFSET_FLIPPED = Position(938, 182)

TABLE_FIRST_OFFSET = Position(460, 404)
TABLE_FIRST_OFFSET_FLIPPED = Position(564, 182)


def extra_width(table_count: int) -> int:
    """Extra board width taken up by 5- and 6-pile tables."""
    if table_count == 6:
        return 320
    if table_count == 5:
        return 160
    return 0


def expected_table_count(active_players: int) -> int:
    """Minimum table piles each active player should have."""
    if active_players <= 2:
        return 6
    if active_players == 3:
        return 5
    return 4


def _anchor(origin: Position, flipped: bool, table_count: int,
            offset: Position, offset_flipped: Position) -> Position:
    if not flipped:
        return origin + offset
    return origin + offset_flipped + Position(extra_width(table_count), 0)


def draw_pile_down_pos(origin: Position, flipped: bool, table_count: int) -> Position:
    return _anchor(origin, flipped, table_count, DRAW_PILE_DOWN_OFFSET, DRAW_PILE_DOWN_OFFSET_FLIPPED)


def draw_pile_up_pos(origin: Position, flipped: bool, table_count: int) -> Position:
    return _anchor(origin, flipped, table_count, DRAW_PILE_UP_OFFSET, DRAW_PILE_UP_OFFSET_FLIPPED)


def nerts_last_card_pos(origin: Position, flipped: bool, table_count: int) -> Position:
    return _anchor(origin, flipped, table_count, NERTS_LAST_CARD_OFFSET, NERTS_LAST_CARD_OFFSET_FLIPPED)


def in_nerts_band(position: Position, last_card: Position, flipped: bool) -> bool:
    """Check if a position lies on the nerts pile fan.

    The fan is a horizontal band NERTS_BAND_WIDTH wide starting at the last
    card, extending right for non-flipped players and left for flipped ones.
    """
    if position.y != last_card.y:
        return False
    if flipped:
        return last_card.x - NERTS_BAND_WIDTH <= position.x <= last_card.x
    return last_card.x <= position.x <= last_card.x + NERTS_BAND_WIDTH


def table_base_positions(origin: Position, flipped: bool, table_count: int) -> List[Position]:
    """Base position of each table pile, left to right from the player's view."""
    first = _anchor(origin, flipped, table_count, TABLE_FIRST_OFFSET, TABLE_FIRST_OFFSET_FLIPPED)
    step = -TABLE_SPACING if flipped else TABLE_SPACING
    return [first + Position(step * i, 0) for i in range(table_count)]


def in_table_box(position: Position, base: Position, flipped: bool) -> bool:
    """Check if a position lies in the tall box of a table pile."""
    above = TABLE_BOX_ABOVE_FLIPPED if flipped else TABLE_BOX_ABOVE
    return position.within_box(base - Position(0, above), Position(1, TABLE_BOX_HEIGHT))


def in_ownership_box(position: Position, origin: Position, table_count: int) -> bool:
    """Check if a position lies on a player's part of the board."""
    size = Position(OWNERSHIP_WIDTH + extra_width(table_count), OWNERSHIP_HEIGHT)
    return position.within_box(origin, size)
