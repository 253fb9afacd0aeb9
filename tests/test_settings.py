# tests/test_settings.py

"""
AnalyzerSettings 로딩 / 검증 테스트.
"""

import pytest

from analyzer.config.settings import (
    AnalyzerSettings,
    PoolSettings,
    ScalingSettings,
    SizingSettings,
    ThresholdSettings,
)
from analyzer.core.errors import ConfigurationError


def test_defaults():
    """기본값."""
    settings = AnalyzerSettings()
    assert settings.enabled is True
    assert settings.threshold.medium == 2.0
    assert settings.ema.alpha == 0.2
    assert settings.sizing.safety_margin == 0.20
    assert settings.scaling.min_history == 100


def test_env_override(monkeypatch):
    """ANALYZER_ 접두사 + '__' 중첩 구분자."""
    monkeypatch.setenv("ANALYZER_THRESHOLD__HIGH", "2.7")
    monkeypatch.setenv("ANALYZER_ENABLED", "false")
    settings = AnalyzerSettings()
    assert settings.threshold.high == 2.7
    assert settings.enabled is False


def test_thresholds_must_be_ascending():
    """임계값 순서가 어긋나면 ConfigurationError."""
    with pytest.raises(ConfigurationError):
        AnalyzerSettings(threshold=ThresholdSettings(low=1.5, medium=3.0, high=2.5, critical=3.5))


def test_negative_threshold_rejected():
    """음수 임계값 거부."""
    with pytest.raises(ConfigurationError):
        AnalyzerSettings(threshold=ThresholdSettings(low=-1.0, medium=2.0, high=2.5, critical=3.0))


def test_safety_margin_range():
    """마진은 [0, 1)."""
    with pytest.raises(ConfigurationError):
        AnalyzerSettings(sizing=SizingSettings(safety_margin=1.0))


def test_replica_bounds():
    """min_replicas <= max_replicas."""
    with pytest.raises(ConfigurationError):
        AnalyzerSettings(scaling=ScalingSettings(min_replicas=5, max_replicas=3))


def test_settings_are_frozen():
    """로딩 이후 읽기 전용."""
    settings = AnalyzerSettings()
    with pytest.raises(Exception):
        settings.enabled = False


def test_invalid_env_value_raises_configuration_error(monkeypatch):
    """환경변수로 들어온 값도 같은 검증을 거친다."""
    monkeypatch.setenv("ANALYZER_EMA__ALPHA", "1.5")
    with pytest.raises(ConfigurationError, match="ema.alpha"):
        AnalyzerSettings()


def test_pool_exhaustion_ratio_range():
    """고갈 비율은 (0, 1]."""
    with pytest.raises(ConfigurationError):
        AnalyzerSettings(pool=PoolSettings(exhaustion_ratio=1.5))
