"""
Environment overrides for match rules and host pacing.
"""
from __future__ import annotations

import os
from typing import Callable, Mapping, TypeVar

from pogapp.engine.schemas import ConfigError, MatchConfig

T = TypeVar("T")

DEFAULT_AI_DELAY_SECONDS = 1.5  # AI "thinking" pause before its throw

# env var -> MatchConfig field
_MATCH_ENV = {
    "POGS_INITIAL_TOKENS": ("initial_tokens_per_player", int),
    "POGS_STAKE": ("tokens_per_round_stake", int),
    "POGS_ROUNDS_TO_WIN": ("rounds_to_win_match", int),
    "POGS_PLAYER_FLIP_PROBABILITY": ("player_flip_probability", float),
    "POGS_AI_FLIP_PROBABILITY": ("ai_flip_probability", float),
}


def _parse(env: Mapping[str, str], name: str, cast: Callable[[str], T]) -> T | None:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return None
    try:
        return cast(raw.strip())
    except ValueError:
        raise ConfigError(f"{name} is not a valid {cast.__name__}: {raw!r}") from None


def load_match_config(env: Mapping[str, str] | None = None, **overrides) -> MatchConfig:
    """MatchConfig from POGS_* env vars; explicit keyword overrides win."""
    env = os.environ if env is None else env
    values = {}
    for name, (field_name, cast) in _MATCH_ENV.items():
        value = _parse(env, name, cast)
        if value is not None:
            values[field_name] = value
    values.update({k: v for k, v in overrides.items() if v is not None})
    return MatchConfig(**values)


def ai_delay_seconds(env: Mapping[str, str] | None = None) -> float:
    env = os.environ if env is None else env
    value = _parse(env, "POGS_AI_DELAY_SECONDS", float)
    if value is None:
        return DEFAULT_AI_DELAY_SECONDS
    if value < 0:
        raise ConfigError(f"POGS_AI_DELAY_SECONDS must be >= 0: {value}")
    return value
