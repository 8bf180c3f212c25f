"""
Pool construction and throw resolution: pure functions over a RandomSource.
"""
from __future__ import annotations

import math
from dataclasses import dataclass

from .rng import RandomSource
from .schemas import Party, Token


def round_stake(stake_per_round: int, player_total: int, ai_total: int) -> int:
    """Tokens each side puts in; 0 when either side is out."""
    return max(0, min(stake_per_round, player_total, ai_total))


def build_pool(stake: int) -> list[Token]:
    """stake player tokens (ids 0..stake-1) then stake AI tokens (ids stake..2*stake-1), all face-down."""
    pool = [Token(id=i, owner=Party.PLAYER) for i in range(stake)]
    pool.extend(Token(id=stake + i, owner=Party.AI) for i in range(stake))
    return pool


def shuffle_pool(pool: list[Token], rng: RandomSource) -> None:
    """In-place Fisher-Yates."""
    for i in range(len(pool) - 1, 0, -1):
        j = rng.randint(0, i)
        pool[i], pool[j] = pool[j], pool[i]


def clamp_probability(p: float) -> float:
    if math.isnan(p):
        return 0.0
    return min(1.0, max(0.0, p))


@dataclass(frozen=True)
class ThrowOutcome:
    """Result of one slammer throw."""
    scattered: int  # k: tokens the throw could disturb
    flipped: list[Token]
    remaining: list[Token]

    @property
    def flipped_count(self) -> int:
        return len(self.flipped)


def scatter_count(pool_size: int, rng: RandomSource) -> int:
    """
    How many tokens from the top of the pool the slammer reaches.
    Drawn from 1..n+1 and capped at n, so a full scatter is twice as likely as any other count.
    """
    return min(pool_size, rng.randint(1, pool_size + 1))


def resolve_throw(pool: list[Token], flip_probability: float, rng: RandomSource) -> ThrowOutcome:
    """
    Two layers of randomness: scatter count k, then one uniform draw per
    scattered token. Remaining tokens keep their order.
    """
    k = scatter_count(len(pool), rng)
    flipped: list[Token] = []
    remaining: list[Token] = []
    for i, token in enumerate(pool):
        if i < k and rng.random() < flip_probability:
            token.face_up = True
            flipped.append(token)
        else:
            token.face_up = False
            remaining.append(token)
    return ThrowOutcome(scattered=k, flipped=flipped, remaining=remaining)
