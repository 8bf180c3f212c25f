"""
Match Engine: match/round lifecycle, staking, throw resolution, turn switching,
round and match results. Every command runs to completion and emits one
GameSnapshot. The AI's throw is handed to the host as a callable so the host
owns the "thinking" delay.
"""
from __future__ import annotations

import copy
import functools
import logging
from typing import Callable, Optional

from . import messages
from .pool import build_pool, clamp_probability, resolve_throw, round_stake, shuffle_pool
from .rng import RandomSource, SeededRNG
from .schemas import GameSnapshot, MatchConfig, MatchState, Party, Phase, snapshot_from_state

AITurn = Callable[[], GameSnapshot]
ScheduleAITurn = Callable[[AITurn], None]


class MatchEngine:
    """
    Owns one MatchState. Hosts drive it with start_match / start_round /
    throw_slammer and render the snapshot each command returns.

    If schedule_ai_turn is given, the engine calls it with a zero-argument
    callable whenever the turn passes to the AI. The callable re-checks that the
    same AI turn is still pending before throwing, so it is safe to run late,
    twice, or after a new match has started.
    """

    def __init__(
        self,
        config: MatchConfig | None = None,
        rng: RandomSource | None = None,
        on_snapshot: Callable[[GameSnapshot], None] | None = None,
        schedule_ai_turn: ScheduleAITurn | None = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.config = config or MatchConfig()
        self.rng = rng if rng is not None else SeededRNG()
        self.on_snapshot = on_snapshot
        self.schedule_ai_turn = schedule_ai_turn
        self.logger = logger or logging.getLogger(__name__)
        self._state = MatchState(
            player_total_tokens=self.config.initial_tokens_per_player,
            ai_total_tokens=self.config.initial_tokens_per_player,
        )

    @classmethod
    def from_state(
        cls,
        state: MatchState,
        config: MatchConfig | None = None,
        rng: RandomSource | None = None,
        **kwargs,
    ) -> MatchEngine:
        """Engine resuming from a copy of an existing state."""
        engine = cls(config, rng, **kwargs)
        engine._state = copy.deepcopy(state)
        return engine

    @property
    def state(self) -> MatchState:
        """Deep copy; mutating it does not affect the engine."""
        return copy.deepcopy(self._state)

    def current_snapshot(self) -> GameSnapshot:
        return snapshot_from_state(self._state)

    # ---------- Commands ----------

    def start_match(self) -> GameSnapshot:
        """Fresh match from any phase. Scores 0-0, totals reset, first thrower drawn at random."""
        init = self.config.initial_tokens_per_player
        self._state = MatchState(
            player_total_tokens=init,
            ai_total_tokens=init,
            is_player_turn=self.rng.coin(),
            phase=Phase.AWAITING_ROUND_START,
            message=messages.NEW_MATCH,
            turn_serial=self._state.turn_serial + 1,
        )
        self.logger.info("Match started: %d pogs each, first to %d rounds", init, self.config.rounds_to_win_match)
        return self._emit()

    def start_round(self) -> GameSnapshot:
        """Stake both sides into a shuffled pool, or end the match if either side is out of pogs."""
        s = self._state
        if s.phase != Phase.AWAITING_ROUND_START:
            self.logger.debug("start_round ignored in phase %s", s.phase.value)
            return self.current_snapshot()
        stake = round_stake(self.config.tokens_per_round_stake, s.player_total_tokens, s.ai_total_tokens)
        if stake == 0:
            return self._end_due_to_no_pogs()

        pool = build_pool(stake)
        shuffle_pool(pool, self.rng)
        s.pool = pool
        s.player_total_tokens -= stake
        s.ai_total_tokens -= stake
        s.stake = stake
        s.round_number += 1
        s.last_flipped = 0
        s.is_player_turn = self.rng.coin()
        s.turn_serial += 1
        s.phase = Phase.ROUND_IN_PROGRESS
        s.message = messages.turn_message(s.acting_party)
        self.logger.info(
            "Round %d started: stake %d each, %s throws first",
            s.round_number, stake, s.acting_party.value,
        )
        snapshot = self._emit()
        if not s.is_player_turn:
            self._request_ai_turn()
        return snapshot

    def throw_slammer(self, flip_probability: float) -> GameSnapshot:
        """
        Resolve one throw for whoever holds the turn. No-op outside a round or
        on an empty pool. flip_probability is clamped to [0, 1].
        """
        s = self._state
        if s.phase != Phase.ROUND_IN_PROGRESS or not s.pool:
            self.logger.debug("throw_slammer ignored in phase %s (pool %d)", s.phase.value, len(s.pool))
            return self.current_snapshot()
        p = clamp_probability(flip_probability)
        if p != flip_probability:
            self.logger.warning("flip probability %r clamped to %r", flip_probability, p)

        party = s.acting_party
        outcome = resolve_throw(s.pool, p, self.rng)
        s.pool = outcome.remaining
        if party == Party.PLAYER:
            s.player_total_tokens += outcome.flipped_count
        else:
            s.ai_total_tokens += outcome.flipped_count
        s.last_flipped = outcome.flipped_count
        s.message = messages.flipped_message(party, outcome.flipped_count)
        self.logger.debug(
            "%s threw: scattered %d, flipped %d, %d left",
            party.value, outcome.scattered, outcome.flipped_count, len(s.pool),
        )

        if not s.pool:
            return self._end_round()

        s.is_player_turn = not s.is_player_turn
        s.turn_serial += 1
        s.message += "\n" + messages.turn_message(s.acting_party)
        snapshot = self._emit()
        if not s.is_player_turn:
            self._request_ai_turn()
        return snapshot

    def player_throw(self) -> GameSnapshot:
        """Throw with the player's flip probability; no-op unless it is the player's turn."""
        s = self._state
        if s.phase != Phase.ROUND_IN_PROGRESS or not s.is_player_turn:
            self.logger.debug("player_throw ignored: not the player's turn")
            return self.current_snapshot()
        return self.throw_slammer(self.config.player_flip_probability)

    def ai_throw(self, turn_serial: int | None = None) -> GameSnapshot:
        """
        Throw with the AI's flip probability. Re-validates first: still a round,
        still the AI's turn, pool not empty, and (if given) the same turn serial.
        """
        s = self._state
        if s.phase != Phase.ROUND_IN_PROGRESS or s.is_player_turn or not s.pool:
            self.logger.debug("ai_throw ignored: AI turn no longer pending")
            return self.current_snapshot()
        if turn_serial is not None and turn_serial != s.turn_serial:
            self.logger.debug("ai_throw ignored: stale turn %d (current %d)", turn_serial, s.turn_serial)
            return self.current_snapshot()
        return self.throw_slammer(self.config.ai_flip_probability)

    # ---------- Round / match end ----------

    def _end_round(self) -> GameSnapshot:
        # Round point goes to whoever emptied the pool, not whoever collected more this round
        s = self._state
        party = s.acting_party
        if party == Party.PLAYER:
            s.player_match_score += 1
            score = s.player_match_score
        else:
            s.ai_match_score += 1
            score = s.ai_match_score
        s.message = messages.round_won_message(party)
        self.logger.info(
            "Round %d won by %s (rounds %d-%d)",
            s.round_number, party.value, s.player_match_score, s.ai_match_score,
        )
        if score >= self.config.rounds_to_win_match:
            s.phase = Phase.MATCH_OVER
            s.winner = party
            s.message += "\n" + messages.match_won_message(party)
            self.logger.info("Match won by %s", party.value)
        else:
            s.phase = Phase.AWAITING_ROUND_START
        return self._emit()

    def _end_due_to_no_pogs(self) -> GameSnapshot:
        s = self._state
        player, ai = s.player_total_tokens, s.ai_total_tokens
        s.message = messages.no_pogs_message(player, ai)
        if player > ai:
            s.winner = Party.PLAYER
        elif ai > player:
            s.winner = Party.AI
        else:
            s.winner = None
        # Pog totals break a tied match score
        if s.player_match_score == s.ai_match_score and s.winner is not None:
            if s.winner == Party.PLAYER:
                s.player_match_score += 1
            else:
                s.ai_match_score += 1
        s.pool = []
        s.stake = 0
        s.turn_serial += 1
        s.phase = Phase.MATCH_OVER
        self.logger.info(
            "Match ended for lack of pogs (%d-%d), winner: %s",
            player, ai, s.winner.value if s.winner else "draw",
        )
        return self._emit()

    # ---------- Emission ----------

    def _emit(self) -> GameSnapshot:
        snapshot = snapshot_from_state(self._state)
        if self.on_snapshot:
            self.on_snapshot(snapshot)
        return snapshot

    def _request_ai_turn(self) -> None:
        if self.schedule_ai_turn is None:
            return
        self.schedule_ai_turn(functools.partial(self.ai_throw, turn_serial=self._state.turn_serial))
