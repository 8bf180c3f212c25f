"""
State and snapshot types for the pog match engine.
MatchState is owned and mutated by MatchEngine; GameSnapshot is the frozen
projection handed to hosts after every command.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ConfigError(ValueError):
    """Invalid match configuration (counts, stake or probabilities out of range)."""


class Party(str, Enum):
    """Which side contributed a token or holds the turn."""
    PLAYER = "player"
    AI = "ai"


class Phase(str, Enum):
    """Match lifecycle."""
    AWAITING_MATCH_START = "awaiting_match_start"
    AWAITING_ROUND_START = "awaiting_round_start"
    ROUND_IN_PROGRESS = "round_in_progress"
    MATCH_OVER = "match_over"


@dataclass
class Token:
    """One wagered pog. owner is who put it in the pool, not who holds it."""
    id: int
    owner: Party
    face_up: bool = False


@dataclass(frozen=True)
class MatchConfig:
    """Rule constants for a match. Never mutated after construction."""
    initial_tokens_per_player: int = 20
    tokens_per_round_stake: int = 5
    rounds_to_win_match: int = 3  # best of (2 * rounds_to_win_match - 1)
    player_flip_probability: float = 0.50
    ai_flip_probability: float = 0.45  # AI is slightly less effective

    def __post_init__(self) -> None:
        if self.initial_tokens_per_player < 0:
            raise ConfigError(f"initial_tokens_per_player must be >= 0: {self.initial_tokens_per_player}")
        if self.tokens_per_round_stake < 1:
            raise ConfigError(f"tokens_per_round_stake must be >= 1: {self.tokens_per_round_stake}")
        if self.rounds_to_win_match < 1:
            raise ConfigError(f"rounds_to_win_match must be >= 1: {self.rounds_to_win_match}")
        for name in ("player_flip_probability", "ai_flip_probability"):
            p = getattr(self, name)
            if not 0.0 <= p <= 1.0:
                raise ConfigError(f"{name} must be within [0, 1]: {p}")

    def flip_probability(self, party: Party) -> float:
        if party == Party.PLAYER:
            return self.player_flip_probability
        return self.ai_flip_probability

    def to_dict(self) -> dict[str, Any]:
        return {
            "initial_tokens_per_player": self.initial_tokens_per_player,
            "tokens_per_round_stake": self.tokens_per_round_stake,
            "rounds_to_win_match": self.rounds_to_win_match,
            "player_flip_probability": self.player_flip_probability,
            "ai_flip_probability": self.ai_flip_probability,
        }


@dataclass
class MatchState:
    """Mutable match state. Only MatchEngine commands change it."""
    player_match_score: int = 0
    ai_match_score: int = 0
    player_total_tokens: int = 0
    ai_total_tokens: int = 0
    pool: list[Token] = field(default_factory=list)
    is_player_turn: bool = True
    phase: Phase = Phase.AWAITING_MATCH_START
    message: str = ""
    round_number: int = 0
    stake: int = 0
    last_flipped: int = 0
    winner: Party | None = None
    # Bumped on every turn hand-off; stale AI callbacks carry an older value
    turn_serial: int = 0

    @property
    def acting_party(self) -> Party:
        return Party.PLAYER if self.is_player_turn else Party.AI

    def tokens_in_play(self) -> int:
        """Totals plus pool; constant across a round."""
        return self.player_total_tokens + self.ai_total_tokens + len(self.pool)


@dataclass(frozen=True)
class GameSnapshot:
    """
    Externally visible projection of MatchState.
    Enough for a host to render without touching token identities.
    """
    player_match_score: int
    ai_match_score: int
    player_total_tokens: int
    ai_total_tokens: int
    pool_size: int
    is_player_turn: bool
    phase: Phase
    message: str
    round_number: int = 0
    stake: int = 0
    last_flipped: int = 0
    winner: Party | None = None

    @property
    def awaiting_ai(self) -> bool:
        """True when the AI is due to throw."""
        return self.phase == Phase.ROUND_IN_PROGRESS and not self.is_player_turn and self.pool_size > 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "player_match_score": self.player_match_score,
            "ai_match_score": self.ai_match_score,
            "player_total_tokens": self.player_total_tokens,
            "ai_total_tokens": self.ai_total_tokens,
            "pool_size": self.pool_size,
            "is_player_turn": self.is_player_turn,
            "phase": self.phase.value,
            "message": self.message,
            "round_number": self.round_number,
            "stake": self.stake,
            "last_flipped": self.last_flipped,
            "winner": self.winner.value if self.winner else None,
            "awaiting_ai": self.awaiting_ai,
        }


def snapshot_from_state(state: MatchState) -> GameSnapshot:
    return GameSnapshot(
        player_match_score=state.player_match_score,
        ai_match_score=state.ai_match_score,
        player_total_tokens=state.player_total_tokens,
        ai_total_tokens=state.ai_total_tokens,
        pool_size=len(state.pool),
        is_player_turn=state.is_player_turn,
        phase=state.phase,
        message=state.message,
        round_number=state.round_number,
        stake=state.stake,
        last_flipped=state.last_flipped,
        winner=state.winner,
    )
