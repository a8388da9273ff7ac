"""
Game state model.

GameState is the single aggregate the bot shares between its activities.
It holds the reconstructed board (rebuilt from scratch every Play tick)
and the outgoing intent scratch fields the decision engine writes and the
send activity drains.

Invariants checked after every Play update:
    - active players alternate flipped by seat order, with the matching
      origin y
    - each active player has at least the expected number of table piles
    - there are at least four center slots per active player
"""

import logging
from typing import List, Optional

from ..errors import InvariantError
from ..types import GamePhase, Position
from ..wire.records import NotificationMessage, ServerMessage
from . import layout
from .card import Card
from .classifier import CenterSlot, classify_cards
from .player import Player

logger = logging.getLogger(__name__)


def validate_board(players: List[Player], center_cards: List[CenterSlot]) -> None:
    """Check the board layout invariants.

    Raises:
        InvariantError: On the first violated invariant.
    """
    active = [p for p in players if p.playing]

    for i, player in enumerate(active):
        expected_flipped = i % 2 == 1
        if player.flipped != expected_flipped:
            raise InvariantError(
                f"Active seat {i} ({player.player_id}) has flipped={player.flipped}, "
                f"expected {expected_flipped}"
            )
        expected_y = layout.ORIGIN_Y_FLIPPED if player.flipped else layout.ORIGIN_Y
        if player.origin.y != expected_y:
            raise InvariantError(
                f"Active seat {i} ({player.player_id}) has origin y {player.origin.y}, "
                f"expected {expected_y}"
            )

    # Counts may be higher than expected when players leave mid-game
    expected_tables = layout.expected_table_count(len(active))
    for player in active:
        if len(player.table) < expected_tables:
            raise InvariantError(
                f"Player {player.player_id} has {len(player.table)} table piles, "
                f"expected at least {expected_tables}"
            )

    expected_center = 4 * len(active)
    if len(center_cards) < expected_center:
        raise InvariantError(
            f"{len(center_cards)} center slots for {len(active)} active players, "
            f"expected at least {expected_center}"
        )


class GameState:
    """
    Reconstructed game state plus the bot's outgoing intent.

    Attributes:
        initialized: Set once the first snapshot has been applied.
        game_phase: Current phase.
        players: Players from the last Play tick.
        center_cards: Center slots sorted by x, each with its top card.
        notification: Last notification received.
        emergency_shuffle_countdown: Countdown before a forced reshuffle.
        shuffle_count: Number of reshuffles this round.
        target_cursor_pos: Where the bot wants its cursor.
        send_left_click / send_right_click / send_make_ready / send_draw /
        send_key_frame: One-shot flags cleared after each send.
        target_card_back / target_card_color: Cosmetic choices.
    """

    def __init__(self, local_id: int):
        self.initialized = False
        self.game_phase = GamePhase.LOBBY
        self.players: List[Player] = []
        self.center_cards: List[CenterSlot] = []
        self.notification: Optional[NotificationMessage] = None
        self.emergency_shuffle_countdown: Optional[int] = None
        self.shuffle_count = 0

        self.local_id = local_id
        self.bot_player_index = 0

        self.target_cursor_pos = Position.zero()
        self.send_left_click = False
        self.send_right_click = False
        self.send_make_ready = False
        self.send_draw = False
        self.target_card_back = 0
        self.target_card_color = 0
        self.send_key_frame = False

    # -------------------------------------------------------------------------
    # Updating
    # -------------------------------------------------------------------------

    def update(self, message: ServerMessage) -> None:
        """Apply one decoded snapshot.

        The board is rebuilt into fresh objects and only committed once
        classification and validation pass; on any error the previous state
        is left untouched.

        Raises:
            ClassificationError: If a card cannot be placed.
            InvariantError: If the local player is missing or the layout is off.
        """
        if message.phase != GamePhase.PLAY:
            self._commit_meta(message)
            return

        center_cards: List[CenterSlot] = [
            (Position(o.x, o.y), None) for o in message.card_outlines
        ]
        center_cards.sort(key=lambda slot: slot[0].x)

        players = [Player.from_message(m) for m in message.players]
        bot_index = next(
            (i for i, p in enumerate(players) if p.player_id == self.local_id), None
        )
        if bot_index is None:
            raise InvariantError(f"Local player {self.local_id} is not in the snapshot")

        if any(p.playing for p in players):
            cards = [Card.from_message(m) for m in message.cards]
            classify_cards(cards, players, center_cards)
            validate_board(players, center_cards)

        self.players = players
        self.center_cards = center_cards
        self.bot_player_index = bot_index
        self._commit_meta(message)

    def _commit_meta(self, message: ServerMessage) -> None:
        if self.game_phase != message.phase:
            logger.info(f"Game phase {self.game_phase.name} -> {message.phase.name}")
        self.game_phase = message.phase
        self.notification = message.notification
        self.emergency_shuffle_countdown = message.emergency_shuffle_countdown
        self.shuffle_count = message.shuffle_count
        self.initialized = True

    def validate(self) -> None:
        """Re-check the invariants on the committed board."""
        validate_board(self.players, self.center_cards)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def bot_player(self) -> Player:
        return self.players[self.bot_player_index]

    def active_players(self) -> List[Player]:
        return [p for p in self.players if p.playing]

    def number_playing(self) -> int:
        return len(self.active_players())

    def center_occupancy(self) -> int:
        return sum(1 for _, card in self.center_cards if card is not None)

    def describe(self) -> str:
        """Multi-line summary of the board for debug logs."""
        center = " ".join(c.short_name if c else "__" for _, c in self.center_cards)
        lines = [f"Center: {center}"]
        lines.extend(p.describe() for p in self.active_players())
        return "\n".join(lines)


__all__ = ['GameState', 'validate_board']
