"""
Autoplay decision engine.

Each iteration waits for a fresh tick (or the idle timeout), picks at most
one action from the current state and performs it: write the intent
scratch fields, wake the send activity, then wait for the action's visible
effect. Every wait is bounded by the safety timeout; a timeout just sends
the engine back to the top to decide again from whatever the state is now.

Priority order (first match wins):
    1. nobody seated yet                   -> wait for players
    2. outside the Play phase              -> press ready, wait for Play
    3. nerts pile empty and callable       -> call nerts
    4. holding cards                       -> play the card or drop the stack
    5. a visible card has a center target  -> pick it up
    6. nerts card and an empty table pile  -> move nerts top to the table
    7. otherwise                           -> draw
"""

import logging
import random
import time
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from ..config import BotConfig
from ..state.card import Card
from ..state.classifier import CenterSlot
from ..state.game_state import GameState
from ..types import GamePhase, Position
from .runtime import Bot, StatePredicate

logger = logging.getLogger(__name__)

BOARD_LOG_INTERVAL = 1.0


class ActionKind(Enum):
    WAIT_FOR_PLAYERS = "wait_for_players"
    READY = "ready"
    WAIT_FOR_PLAY = "wait_for_play"
    CALL_NERTS = "call_nerts"
    PLACE_HELD = "place_held"
    DROP_HELD = "drop_held"
    PICK_UP = "pick_up"
    NERTS_TO_TABLE = "nerts_to_table"
    DRAW = "draw"


@dataclass(frozen=True)
class Action:
    """
    One decision of the engine.

    Attributes:
        kind: What to do.
        target: Anchor to click (before jitter), if the action clicks.
        second_target: Second anchor for two-step moves (nerts to table).
        card: The card being moved, if any.
        onto: The card it is played onto; None for an empty slot.
    """
    kind: ActionKind
    target: Optional[Position] = None
    second_target: Optional[Position] = None
    card: Optional[Card] = None
    onto: Optional[Card] = None

    def describe(self) -> str:
        if self.card is None:
            return self.kind.value
        onto = self.onto.short_name if self.onto is not None else "empty"
        if self.kind == ActionKind.NERTS_TO_TABLE:
            onto = f"table at {self.second_target}"
        return f"{self.kind.value} {self.card.short_name} -> {onto}"


def find_center_target(card: Card, center_cards: List[CenterSlot]) -> Optional[CenterSlot]:
    """First center slot (left to right) where ``card`` may legally go."""
    for slot in center_cards:
        if card.can_play_on_slot(slot[1]):
            return slot
    return None


def _playable_cards(state: GameState) -> List[Card]:
    player = state.bot_player()
    candidates = []
    if player.nerts_top is not None:
        candidates.append(player.nerts_top)
    candidates.extend(stack.top for stack in player.table if stack.top is not None)
    if player.draw_pile_up is not None:
        candidates.append(player.draw_pile_up)
    return [c for c in candidates if c.face_up and c.face is not None]


def choose_action(state: GameState) -> Action:
    """Pick the next action for the current state.

    Pure and deterministic: the same state always gives the same action.
    Randomness (jitter, draw cursor, cosmetics) is applied when performing.
    """
    if not state.players:
        return Action(ActionKind.WAIT_FOR_PLAYERS)

    player = state.bot_player()

    if state.game_phase != GamePhase.PLAY:
        if not player.ready:
            return Action(ActionKind.READY)
        return Action(ActionKind.WAIT_FOR_PLAY)

    if player.can_call_nerts:
        return Action(ActionKind.CALL_NERTS)

    held = player.held_cards
    if not held.is_empty():
        if len(held) == 1:
            slot = find_center_target(held.top, state.center_cards)
            if slot is not None:
                return Action(ActionKind.PLACE_HELD, target=slot[0], card=held.top, onto=slot[1])
        return Action(ActionKind.DROP_HELD, card=held.top)

    for card in _playable_cards(state):
        slot = find_center_target(card, state.center_cards)
        if slot is not None:
            return Action(ActionKind.PICK_UP, target=card.position, card=card, onto=slot[1])

    empty_index = player.empty_table_index()
    if player.nerts_top is not None and empty_index is not None:
        return Action(
            ActionKind.NERTS_TO_TABLE,
            target=player.nerts_top.position,
            second_target=player.table_base_positions()[empty_index],
            card=player.nerts_top,
        )

    return Action(ActionKind.DRAW)


# =============================================================================
# Performing actions
# =============================================================================

def _cursor_at(position: Position) -> StatePredicate:
    return lambda s: s.bot_player().cursor == position


class DecisionEngine:
    """
    Drives a Bot by repeatedly choosing and performing actions.

    Args:
        bot: Running bot whose state is read and whose intents are written.
        rng: Random source for jitter, draw cursor and cosmetics.
    """

    def __init__(self, bot: Bot, rng: Optional[random.Random] = None):
        self.bot = bot
        self.config: BotConfig = bot.config
        self.rng = rng or random.Random()
        self._last_board_log = 0.0

    def run(self) -> None:
        """Play until the bot shuts down.

        Raises:
            The bot's fatal error, if an activity died.
        """
        with self.bot.locked() as state:
            state.send_make_ready = True
        self.bot.request_send()

        logger.info("Waiting for the first snapshot")
        while self.bot.is_running() and not self.bot.wait_until(lambda s: s.initialized):
            logger.debug("Still waiting for the first snapshot")

        while self.bot.is_running():
            self.step()

        if self.bot.fatal_error is not None:
            raise self.bot.fatal_error
        logger.info("Decision engine stopped")

    def step(self) -> Action:
        """Run one iteration: wait for a tick, decide, act, wait for the effect."""
        self.bot.wait_for_update(self.config.idle_timeout)

        with self.bot.locked() as state:
            action = choose_action(state)
            self._log_board(state)
            if action.kind not in (ActionKind.WAIT_FOR_PLAYERS, ActionKind.WAIT_FOR_PLAY):
                logger.info(action.describe())
            wait_for = self.perform(action, state)

        self.bot.request_send()
        self.bot.wait_until(wait_for, self.config.wait_timeout)

        if action.kind == ActionKind.NERTS_TO_TABLE and self.bot.is_running():
            with self.bot.locked() as state:
                wait_for = self.click(state, action.second_target)
            self.bot.request_send()
            self.bot.wait_until(wait_for, self.config.wait_timeout)

        return action

    def perform(self, action: Action, state: GameState) -> StatePredicate:
        """Write the intent for ``action`` and return its post-condition.

        Must be called with the bot locked. Only the first half of a
        NERTS_TO_TABLE move is written here.
        """
        kind = action.kind
        if kind == ActionKind.WAIT_FOR_PLAYERS:
            return lambda s: bool(s.players)
        if kind in (ActionKind.READY, ActionKind.WAIT_FOR_PLAY):
            if kind == ActionKind.READY:
                state.send_make_ready = True
            return lambda s: s.game_phase == GamePhase.PLAY
        if kind == ActionKind.CALL_NERTS:
            # Calling nerts reuses the ready flag
            state.send_make_ready = True
            return lambda s: not s.bot_player().can_call_nerts
        if kind == ActionKind.DROP_HELD:
            state.send_right_click = True
            return lambda s: s.bot_player().held_cards.is_empty()
        if kind == ActionKind.DRAW:
            return self.draw(state)
        return self.click(state, action.target)

    def jitter(self, anchor: Position, current: Position) -> Position:
        """Random click point near ``anchor`` that differs from ``current``."""
        while True:
            target = anchor + Position(
                self.rng.randrange(*self.config.jitter_x),
                self.rng.randrange(*self.config.jitter_y),
            )
            if target != current:
                return target

    def click(self, state: GameState, anchor: Position) -> StatePredicate:
        target = self.jitter(anchor, state.target_cursor_pos)
        state.target_cursor_pos = target
        state.send_left_click = True
        return _cursor_at(target)

    def draw(self, state: GameState) -> StatePredicate:
        target = Position(
            self.rng.randrange(*self.config.draw_area_x),
            self.rng.randrange(*self.config.draw_area_y),
        )
        state.target_cursor_pos = target
        state.send_draw = True
        state.target_card_back = self.rng.randrange(self.config.cosmetic_choices)
        state.target_card_color = self.rng.randrange(self.config.cosmetic_choices)
        return lambda s: s.bot_player().cursor == target or s.bot_player().can_call_nerts

    def _log_board(self, state: GameState) -> None:
        if not logger.isEnabledFor(logging.DEBUG) or not state.players:
            return
        now = time.monotonic()
        if now - self._last_board_log >= BOARD_LOG_INTERVAL:
            self._last_board_log = now
            logger.debug(f"Board:\n{state.describe()}")


__all__ = ['ActionKind', 'Action', 'choose_action', 'find_center_target', 'DecisionEngine']
