"""
Single action button: what it does, what it says, and whether it is enabled
for a given snapshot.
"""
from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from .schemas import GameSnapshot, Phase

if TYPE_CHECKING:
    from .match_engine import MatchEngine


class Action(str, Enum):
    START_MATCH = "start_match"
    START_ROUND = "start_round"
    THROW = "throw"


_LABELS = {
    Action.START_MATCH: "Start New Match",
    Action.START_ROUND: "Start New Round",
    Action.THROW: "Throw Slammer!",
}


def next_action(snapshot: GameSnapshot) -> Action:
    if snapshot.phase == Phase.AWAITING_ROUND_START:
        return Action.START_ROUND
    if snapshot.phase == Phase.ROUND_IN_PROGRESS:
        return Action.THROW
    return Action.START_MATCH


def action_label(action: Action) -> str:
    return _LABELS[action]


def action_enabled(snapshot: GameSnapshot) -> bool:
    """Disabled only while the AI is due to throw."""
    return not snapshot.awaiting_ai


def press_action(engine: MatchEngine) -> GameSnapshot:
    """Dispatch a button press to the matching engine command."""
    snapshot = engine.current_snapshot()
    if not action_enabled(snapshot):
        return snapshot
    action = next_action(snapshot)
    if action == Action.START_MATCH:
        return engine.start_match()
    if action == Action.START_ROUND:
        return engine.start_round()
    return engine.player_throw()
