"""
Tests for environment-driven configuration.
"""
from __future__ import annotations

from pathlib import Path

import pytest

import sys
sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

from pogapp.config import DEFAULT_AI_DELAY_SECONDS, ai_delay_seconds, load_match_config
from pogapp.engine.schemas import ConfigError, MatchConfig


class TestLoadMatchConfig:
    def test_defaults_with_empty_env(self):
        assert load_match_config(env={}) == MatchConfig()

    def test_env_overrides(self):
        cfg = load_match_config(env={
            "POGS_INITIAL_TOKENS": "30",
            "POGS_STAKE": "4",
            "POGS_ROUNDS_TO_WIN": "2",
            "POGS_PLAYER_FLIP_PROBABILITY": "0.6",
            "POGS_AI_FLIP_PROBABILITY": " 0.4 ",
        })
        assert cfg.initial_tokens_per_player == 30
        assert cfg.tokens_per_round_stake == 4
        assert cfg.rounds_to_win_match == 2
        assert cfg.player_flip_probability == 0.6
        assert cfg.ai_flip_probability == 0.4

    def test_blank_values_ignored(self):
        assert load_match_config(env={"POGS_STAKE": "  "}).tokens_per_round_stake == 5

    def test_keyword_overrides_win(self):
        cfg = load_match_config(env={"POGS_STAKE": "4"}, tokens_per_round_stake=2, rounds_to_win_match=None)
        assert cfg.tokens_per_round_stake == 2
        assert cfg.rounds_to_win_match == 3

    def test_malformed_value(self):
        with pytest.raises(ConfigError, match="POGS_STAKE"):
            load_match_config(env={"POGS_STAKE": "five"})

    def test_out_of_range_value(self):
        with pytest.raises(ConfigError):
            load_match_config(env={"POGS_AI_FLIP_PROBABILITY": "1.5"})

    def test_reads_process_env(self, monkeypatch):
        monkeypatch.setenv("POGS_INITIAL_TOKENS", "8")
        assert load_match_config().initial_tokens_per_player == 8


class TestAIDelay:
    def test_default(self):
        assert ai_delay_seconds(env={}) == DEFAULT_AI_DELAY_SECONDS

    def test_override(self):
        assert ai_delay_seconds(env={"POGS_AI_DELAY_SECONDS": "0.25"}) == 0.25

    def test_negative_rejected(self):
        with pytest.raises(ConfigError):
            ai_delay_seconds(env={"POGS_AI_DELAY_SECONDS": "-1"})
