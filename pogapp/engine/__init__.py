"""
Pog Match Engine: turn-based pog flipping between a player and an AI,
with injectable randomness for reproducible matches.
"""
from .schemas import (
    ConfigError,
    GameSnapshot,
    MatchConfig,
    MatchState,
    Party,
    Phase,
    Token,
    snapshot_from_state,
)
from .rng import RandomSource, SeededRNG, ScriptedRNG, ScriptExhaustedError
from .pool import (
    ThrowOutcome,
    build_pool,
    clamp_probability,
    resolve_throw,
    round_stake,
    scatter_count,
    shuffle_pool,
)
from .match_engine import AITurn, MatchEngine, ScheduleAITurn
from .controls import Action, action_enabled, action_label, next_action, press_action

__all__ = [
    "ConfigError",
    "GameSnapshot",
    "MatchConfig",
    "MatchState",
    "Party",
    "Phase",
    "Token",
    "snapshot_from_state",
    "RandomSource",
    "SeededRNG",
    "ScriptedRNG",
    "ScriptExhaustedError",
    "ThrowOutcome",
    "build_pool",
    "clamp_probability",
    "resolve_throw",
    "round_stake",
    "scatter_count",
    "shuffle_pool",
    "AITurn",
    "MatchEngine",
    "ScheduleAITurn",
    "Action",
    "action_enabled",
    "action_label",
    "next_action",
    "press_action",
]
