# [TESTER] v1

from __future__ import annotations

from types import SimpleNamespace

import pytest

from src.core import clock as clock_module
from src.core.clock import ManualClock, SystemClock
from src.core.config import PoolConfig


def test_default_config() -> None:
    cfg = PoolConfig()
    assert cfg.conversion_fee_ppm == 0
    assert cfg.max_conversion_fee_ppm == 1_000_000
    assert cfg.average_rate_period == 600
    assert cfg.rate_factor_lower_bound == 10**30


def test_fee_above_maximum_is_rejected() -> None:
    with pytest.raises(ValueError, match="conversion_fee_ppm"):
        PoolConfig(conversion_fee_ppm=3001, max_conversion_fee_ppm=3000)
    with pytest.raises(ValueError, match="max_conversion_fee_ppm"):
        PoolConfig(max_conversion_fee_ppm=1_000_001)
    with pytest.raises(ValueError, match="average_rate_period"):
        PoolConfig(average_rate_period=0)
    with pytest.raises(TypeError):
        PoolConfig(conversion_fee_ppm="3000")  # type: ignore[arg-type]


def test_from_env_reads_and_clamps(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("AMM_CONVERSION_FEE_PPM", "3000")
    monkeypatch.setenv("AMM_AVERAGE_RATE_PERIOD", "0")
    cfg = PoolConfig.from_env()
    assert cfg.conversion_fee_ppm == 3000
    assert cfg.average_rate_period == 1

    monkeypatch.setenv("AMM_MAX_CONVERSION_FEE_PPM", "2000")
    assert PoolConfig.from_env().conversion_fee_ppm == 2000


def test_from_env_ignores_garbage(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("AMM_CONVERSION_FEE_PPM", "lots")
    monkeypatch.delenv("AMM_AVERAGE_RATE_PERIOD", raising=False)
    cfg = PoolConfig.from_env()
    assert cfg.conversion_fee_ppm == 0
    assert cfg.average_rate_period == 600


def test_manual_clock_is_monotonic() -> None:
    clock = ManualClock(100)
    assert clock.advance(5) == 105
    clock.set_time(105)
    with pytest.raises(ValueError, match="monotonic"):
        clock.set_time(104)
    with pytest.raises(ValueError):
        clock.advance(-1)
    assert clock.now() == 105


def test_system_clock_returns_whole_seconds() -> None:
    now = SystemClock().now()
    assert isinstance(now, int)
    assert now > 1_600_000_000


def test_system_clock_never_moves_backwards(monkeypatch: pytest.MonkeyPatch) -> None:
    readings = iter([1_700_000_100.5, 1_700_000_050.0, 1_700_000_200.0])
    monkeypatch.setattr(clock_module, "time", SimpleNamespace(time=lambda: next(readings)))

    clock = SystemClock()
    assert clock.now() == 1_700_000_100
    assert clock.now() == 1_700_000_100
    assert clock.now() == 1_700_000_200
