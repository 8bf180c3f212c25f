"""
Play a pog match against the AI in the terminal.
One action button: press Enter to start a match, start a round, or throw.
The AI's throws are deferred by a short "thinking" pause.
"""
from __future__ import annotations

import argparse
import logging
import random

from pogapp.ai_turns import DeferredAITurns
from pogapp.config import ai_delay_seconds, load_match_config
from pogapp.engine import (
    GameSnapshot,
    MatchEngine,
    Phase,
    SeededRNG,
    action_label,
    next_action,
    press_action,
)


def _print_snapshot(snapshot: GameSnapshot) -> None:
    """Render the board after each command."""
    print()
    for line in snapshot.message.splitlines():
        print(f"  {line}")
    print(
        f"  Rounds  Player {snapshot.player_match_score} - {snapshot.ai_match_score} AI"
        f"   Pogs  Player {snapshot.player_total_tokens} | AI {snapshot.ai_total_tokens}"
        f"   In stack: {snapshot.pool_size}"
    )


def _print_final(snapshot: GameSnapshot) -> None:
    print()
    print("=" * 60)
    if snapshot.winner is None:
        print("  MATCH RESULT: draw")
    else:
        print(f"  MATCH RESULT: {snapshot.winner.value.upper()} wins")
    print(f"  Rounds {snapshot.player_match_score}-{snapshot.ai_match_score}   "
          f"Pogs {snapshot.player_total_tokens}-{snapshot.ai_total_tokens}")
    print("=" * 60)
    print()


def run(seed: int | None = None, fast: bool = False, auto: bool = False) -> GameSnapshot:
    """Play one match to the end. auto presses the button for the player."""
    if seed is None:
        seed = random.randint(1, 2**31 - 1)
    config = load_match_config()
    turns = DeferredAITurns(delay_seconds=0.0 if fast else ai_delay_seconds())
    engine = MatchEngine(config, SeededRNG(seed), on_snapshot=_print_snapshot, schedule_ai_turn=turns.schedule)

    print(f"\n  Pogs: first to {config.rounds_to_win_match} rounds, "
          f"{config.initial_tokens_per_player} pogs each  [seed={seed}]")
    print("  " + "-" * 56)
    snapshot = engine.start_match()
    while snapshot.phase != Phase.MATCH_OVER:
        if not auto:
            input(f"\n  [{action_label(next_action(snapshot))}] press Enter ")
        press_action(engine)
        turns.run_pending()
        snapshot = engine.current_snapshot()
    _print_final(snapshot)
    return snapshot


def main():
    parser = argparse.ArgumentParser(description="Play a pog flipping match against the AI.")
    parser.add_argument("--seed", type=int, default=None, help="RNG seed for reproducibility")
    parser.add_argument("--fast", action="store_true", help="No AI thinking pause")
    parser.add_argument("--auto", action="store_true", help="Press the action button automatically")
    parser.add_argument("--verbose", action="store_true", help="Log engine events")
    args = parser.parse_args()
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    run(seed=args.seed, fast=args.fast, auto=args.auto)


if __name__ == "__main__":
    main()
