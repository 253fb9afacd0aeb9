# analyzer/config/settings.py

"""
Analyzer settings.

역할:
- 임계값 / 마진 / 최소값 / 단가 등 분석 엔진의 모든 설정을 한 곳에서 관리한다.
- 기본값 → .env → ANALYZER_* 환경변수 순으로 덮어쓴다.
  (중첩 섹션은 '__' 로 구분: ANALYZER_THRESHOLD__HIGH=2.7)
- 생성 시점에 한 번 검증하고, 이후에는 읽기 전용(frozen)으로만 사용한다.

엔진 컴포넌트는 전역 singleton 을 읽지 않고 생성자 인자로 settings 를 받는다.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from analyzer.core.errors import ConfigurationError


class _Section(BaseModel):
    model_config = ConfigDict(frozen=True)


class EmaSettings(_Section):
    alpha: float = 0.2


class ThresholdSettings(_Section):
    """|z| 에 대한 4단계 심각도 임계값 (low < medium < high < critical)."""

    low: float = 1.5
    medium: float = 2.0
    high: float = 2.5
    critical: float = 3.0


class SustainedSettings(_Section):
    threshold: float = 80.0
    count: int = 6


class CpuSettings(_Section):
    sustained: SustainedSettings = SustainedSettings()
    throttle_max: float = 90.0  # 최대값이 이 값을 넘으면 throttling 으로 본다


class LeakSettings(_Section):
    slope_threshold: float = 0.05  # %/sample
    min_samples: int = 20


class MemorySettings(_Section):
    leak: LeakSettings = LeakSettings()


class PoolSettings(_Section):
    exhaustion_ratio: float = 0.9
    exhaustion_sample_fraction: float = 0.10


class ResponseTimeSettings(_Section):
    spike_threshold: float = 1000.0  # ms


class DetectionSettings(_Section):
    min_samples: int = 10


class SizingSettings(_Section):
    safety_margin: float = 0.20
    min_cpu_millicores: int = 100
    min_memory_mi: int = 256
    min_pool_size: int = 10
    min_idle: int = 5
    idle_divisor: int = 5
    cpu_limit_multiplier: float = 2.0
    memory_limit_multiplier: float = 1.5
    heap_min_fraction: float = 0.75
    heap_max_fraction: float = 0.85
    min_max_threads: int = 50
    default_max_threads: int = 200
    default_min_spare_threads: int = 25


class CostSettings(_Section):
    cpu_core_month: float = 30.0
    memory_gb_month: float = 5.0
    cpu_core_hour: float = 0.042
    memory_gb_hour: float = 0.0052
    hours_per_month: int = 730


class ScalingSettings(_Section):
    min_history: int = 100
    horizon_hours: int = 24
    target_utilization: float = 70.0
    min_replicas: int = 2
    max_replicas: int = 10
    default_replicas: int = 3
    daily_variance_threshold: float = 100.0
    weekly_variance_threshold: float = 50.0


class AnalyzerSettings(BaseSettings):
    # 일반
    enabled: bool = True

    # 이상 탐지
    ema: EmaSettings = EmaSettings()
    threshold: ThresholdSettings = ThresholdSettings()
    cpu: CpuSettings = CpuSettings()
    memory: MemorySettings = MemorySettings()
    pool: PoolSettings = PoolSettings()
    response_time: ResponseTimeSettings = ResponseTimeSettings()
    detection: DetectionSettings = DetectionSettings()

    # 사이징 / 비용 / 스케일링
    sizing: SizingSettings = SizingSettings()
    cost: CostSettings = CostSettings()
    scaling: ScalingSettings = ScalingSettings()

    model_config = SettingsConfigDict(
        env_prefix="ANALYZER_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    @model_validator(mode="after")
    def check_consistency(self) -> "AnalyzerSettings":
        """
        생성 시점 설정 검증.

        Raises
        ------
        ConfigurationError
            음수 임계값, 순서가 어긋난 임계값, 범위를 벗어난 비율/마진 등.
        """
        t = self.threshold
        if min(t.low, t.medium, t.high, t.critical) < 0:
            raise ConfigurationError("Severity thresholds must be non-negative.")
        if not (t.low < t.medium < t.high < t.critical):
            raise ConfigurationError(
                f"Severity thresholds must be ascending: low={t.low}, medium={t.medium}, "
                f"high={t.high}, critical={t.critical}"
            )

        if not (0.0 < self.ema.alpha <= 1.0):
            raise ConfigurationError(f"ema.alpha must be in (0, 1], got {self.ema.alpha}")

        sizing = self.sizing
        if not (0.0 <= sizing.safety_margin < 1.0):
            raise ConfigurationError(f"safety_margin must be in [0, 1), got {sizing.safety_margin}")
        if not (0.0 < sizing.heap_min_fraction <= sizing.heap_max_fraction <= 1.0):
            raise ConfigurationError("Heap fractions must satisfy 0 < min <= max <= 1.")

        positive = {
            "cpu.sustained.count": self.cpu.sustained.count,
            "memory.leak.min_samples": self.memory.leak.min_samples,
            "detection.min_samples": self.detection.min_samples,
            "sizing.min_cpu_millicores": sizing.min_cpu_millicores,
            "sizing.min_memory_mi": sizing.min_memory_mi,
            "sizing.min_pool_size": sizing.min_pool_size,
            "sizing.idle_divisor": sizing.idle_divisor,
            "scaling.min_history": self.scaling.min_history,
            "scaling.horizon_hours": self.scaling.horizon_hours,
            "scaling.target_utilization": self.scaling.target_utilization,
            "scaling.min_replicas": self.scaling.min_replicas,
            "cost.hours_per_month": self.cost.hours_per_month,
        }
        for name, value in positive.items():
            if value <= 0:
                raise ConfigurationError(f"{name} must be positive, got {value}")

        if sizing.min_idle < 0:
            raise ConfigurationError(f"sizing.min_idle must be non-negative, got {sizing.min_idle}")
        if self.scaling.min_replicas > self.scaling.max_replicas:
            raise ConfigurationError("scaling.min_replicas must not exceed scaling.max_replicas.")
        if not (0.0 < self.pool.exhaustion_ratio <= 1.0):
            raise ConfigurationError(
                f"pool.exhaustion_ratio must be in (0, 1], got {self.pool.exhaustion_ratio}"
            )
        if self.memory.leak.slope_threshold < 0 or self.response_time.spike_threshold < 0:
            raise ConfigurationError("Leak slope / response time thresholds must be non-negative.")
        return self
