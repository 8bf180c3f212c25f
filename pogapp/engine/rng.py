"""
Random sources for the match engine.
SeededRNG for reproducible play, ScriptedRNG for replaying fixed draws in tests.
"""
from __future__ import annotations

import random
from collections import deque
from typing import Iterable, Protocol, Union


class RandomSource(Protocol):
    """The three draws the engine makes: coin, uniform [0, 1), bounded int."""

    def coin(self) -> bool: ...

    def random(self) -> float: ...

    def randint(self, a: int, b: int) -> int: ...


class SeededRNG:
    """Wrapper around random.Random for reproducible matches."""

    def __init__(self, seed: int | None = None) -> None:
        self._rng = random.Random(seed)
        self._seed = seed

    @property
    def seed(self) -> int | None:
        return self._seed

    def coin(self) -> bool:
        return self._rng.random() < 0.5

    def random(self) -> float:
        return self._rng.random()

    def randint(self, a: int, b: int) -> int:
        """Inclusive on both ends, like random.randint."""
        return self._rng.randint(a, b)

    def getstate(self):
        return self._rng.getstate()

    def setstate(self, state) -> None:
        self._rng.setstate(state)


class ScriptExhaustedError(RuntimeError):
    """ScriptedRNG was asked for more draws than it was given."""


Draw = Union[bool, float, int]


class ScriptedRNG:
    """
    Replays a fixed sequence of draws in order.
    Each call pops the next value and checks it fits the draw kind:
    coin() takes a bool, random() a float in [0, 1), randint(a, b) an int in [a, b].
    """

    def __init__(self, draws: Iterable[Draw] = ()) -> None:
        self._draws: deque[Draw] = deque(draws)
        self.calls = 0

    def extend(self, draws: Iterable[Draw]) -> None:
        self._draws.extend(draws)

    @property
    def remaining(self) -> int:
        return len(self._draws)

    def _next(self, kind: str) -> Draw:
        if not self._draws:
            raise ScriptExhaustedError(f"no scripted value left for {kind}() after {self.calls} draws")
        self.calls += 1
        return self._draws.popleft()

    def coin(self) -> bool:
        value = self._next("coin")
        if not isinstance(value, bool):
            raise TypeError(f"coin() expected a bool in the script, got {value!r}")
        return value

    def random(self) -> float:
        value = self._next("random")
        if isinstance(value, bool) or not 0.0 <= value < 1.0:
            raise TypeError(f"random() expected a float in [0, 1) in the script, got {value!r}")
        return float(value)

    def randint(self, a: int, b: int) -> int:
        value = self._next("randint")
        if isinstance(value, bool) or not isinstance(value, int) or not a <= value <= b:
            raise TypeError(f"randint({a}, {b}) expected an int in range in the script, got {value!r}")
        return value
