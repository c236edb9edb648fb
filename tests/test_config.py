#!/usr/bin/env python3
"""
Configuration tests: defaults, validation and environment overlay.
"""

import dataclasses

import pytest

from settleguard import SettleGuardConfig
from settleguard.config import DEFAULT_TIMEOUT_S

ENV_VARS = (
    "SETTLEGUARD_TIMEOUT_S",
    "SETTLEGUARD_CAPTURE_STACKS",
    "SETTLEGUARD_STACK_DEPTH",
    "SETTLEGUARD_REPORT_LIMIT",
    "SETTLEGUARD_DEBUG",
    "SETTLEGUARD_STRICT",
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestDefaults:

    def test_safety_defaults(self):
        config = SettleGuardConfig()
        assert config.timeout_s == DEFAULT_TIMEOUT_S
        assert config.capture_stacks is True
        assert config.strict_registration is True
        assert config.debug_mode is False
        assert "settleguard" in config.excluded_paths

    def test_frozen(self):
        config = SettleGuardConfig()
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.timeout_s = 10

    def test_validation_clamps_values(self):
        config = SettleGuardConfig(timeout_s=0, stack_depth=0, report_limit=-3)
        assert config.timeout_s == pytest.approx(0.001)
        assert config.stack_depth == 1
        assert config.report_limit == 1

    def test_excluded_paths_deduplicated(self):
        config = SettleGuardConfig(excluded_paths=("a", "b", "a"))
        assert config.excluded_paths == ("a", "b")

    def test_merge_returns_copy(self):
        base = SettleGuardConfig()
        merged = base.merge(timeout_s=0.5, capture_stacks=False)
        assert merged.timeout_s == 0.5 and merged.capture_stacks is False
        assert base.timeout_s == DEFAULT_TIMEOUT_S, "merge must not modify the original"

    def test_repr_lists_fields(self):
        text = repr(SettleGuardConfig(timeout_s=2.5))
        assert "timeout_s=2.5" in text
        assert "strict_registration=True" in text


class TestEnvironment:

    def test_env_overlay(self, clean_env):
        clean_env.setenv("SETTLEGUARD_TIMEOUT_S", "0.25")
        clean_env.setenv("SETTLEGUARD_CAPTURE_STACKS", "0")
        clean_env.setenv("SETTLEGUARD_STACK_DEPTH", "7")
        clean_env.setenv("SETTLEGUARD_DEBUG", "yes")
        clean_env.setenv("SETTLEGUARD_STRICT", "off")

        config = SettleGuardConfig.from_env()
        assert config.timeout_s == 0.25
        assert config.capture_stacks is False
        assert config.stack_depth == 7
        assert config.debug_mode is True
        assert config.strict_registration is False

    def test_invalid_values_fall_back(self, clean_env):
        clean_env.setenv("SETTLEGUARD_TIMEOUT_S", "soon")
        clean_env.setenv("SETTLEGUARD_REPORT_LIMIT", "many")
        config = SettleGuardConfig.from_env()
        assert config.timeout_s == DEFAULT_TIMEOUT_S
        assert config.report_limit == 20

    def test_env_overlays_base(self, clean_env):
        base = SettleGuardConfig(timeout_s=9.0, report_limit=3)
        clean_env.setenv("SETTLEGUARD_REPORT_LIMIT", "5")
        config = SettleGuardConfig.from_env(base)
        assert config.timeout_s == 9.0, "Unset variables keep the base value"
        assert config.report_limit == 5

    def test_env_values_validated(self, clean_env):
        clean_env.setenv("SETTLEGUARD_STACK_DEPTH", "-2")
        assert SettleGuardConfig.from_env().stack_depth == 1

    def test_session_reads_env_timeout(self, clean_env, settle_session):
        clean_env.setenv("SETTLEGUARD_TIMEOUT_S", "0.75")
        session = settle_session(object())
        assert session.ledger.timeout_s == 0.75
        assert session.config.timeout_s == 0.75
