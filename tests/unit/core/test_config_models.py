"""Tests for WaitConfig, PollingConfig, RaceConfig, LoggingConfig Pydantic models."""

import pytest
from pydantic import ValidationError

from waitfor.core.models.config import LoggingConfig, PollingConfig, RaceConfig, WaitConfig


class TestPollingConfig:
    def test_defaults(self):
        assert PollingConfig().interval == pytest.approx(1.0)

    def test_custom_interval(self):
        assert PollingConfig(interval=0.05).interval == pytest.approx(0.05)

    @pytest.mark.parametrize("interval", [0, -1.0])
    def test_non_positive_interval_rejected(self, interval):
        with pytest.raises(ValidationError):
            PollingConfig(interval=interval)

    def test_extra_field_rejected(self):
        with pytest.raises(ValidationError, match="extra_field"):
            PollingConfig(extra_field="boom")


class TestRaceConfig:
    def test_defaults(self):
        assert RaceConfig().join_timeout == pytest.approx(5.0)

    def test_zero_join_timeout_rejected(self):
        with pytest.raises(ValidationError):
            RaceConfig(join_timeout=0)


class TestLoggingConfig:
    def test_defaults(self):
        cfg = LoggingConfig()
        assert cfg.log_level == "WARNING"
        assert cfg.log_dir is None


class TestWaitConfig:
    def test_defaults(self):
        cfg = WaitConfig()
        assert isinstance(cfg.polling, PollingConfig)
        assert isinstance(cfg.race, RaceConfig)
        assert isinstance(cfg.logging, LoggingConfig)

    def test_round_trip_json(self):
        cfg = WaitConfig(polling=PollingConfig(interval=0.1))
        raw = cfg.model_dump()
        cfg2 = WaitConfig(**raw)
        assert cfg == cfg2

    def test_extra_top_level_rejected(self):
        with pytest.raises(ValidationError):
            WaitConfig(unknown_section={})
