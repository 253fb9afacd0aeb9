"""
Workload pattern classifier.

역할:
- 다일(기본 7일) 윈도우에서 17개 특성 벡터를 추출한다.
- 고정 우선순위 결정 트리로 지배적인 패턴을 하나 고르고
  패턴마다 정확히 하나의 기본 최적화 전략을 매핑한다.

주기성 점수(periodicity score)는 시간대(hour-of-day) 평균이 설명하는
CPU 분산 비율(between-hour variance / total variance, 0~1)로 정의한다.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from analyzer.config.settings import AnalyzerSettings
from analyzer.core import frames, metrics, stats
from analyzer.models.snapshot import Snapshot, chronological
from analyzer.models.workload import (
    OptimizationStrategy,
    WorkloadFeatures,
    WorkloadPattern,
    WorkloadProfile,
)

logger = logging.getLogger(__name__)

# 주기성 점수를 계산하기 위한 최소 샘플 수 (하루치 시간대)
MIN_PERIODICITY_SAMPLES = 24

# 패턴별 월 절감 추정 ($1000/month 기준)
BASELINE_MONTHLY_COST = 1000.0
SAVINGS_RATE: dict[WorkloadPattern, float] = {
    WorkloadPattern.STEADY_STATE: 0.30,
    WorkloadPattern.BURSTY: 0.25,
    WorkloadPattern.PERIODIC: 0.35,
    WorkloadPattern.GROWING: 0.15,
    WorkloadPattern.SEASONAL: 0.20,
    WorkloadPattern.DECLINING: 0.50,
    WorkloadPattern.CHAOTIC: 0.05,
}

# 패턴별 기본 전략 (BURSTY 는 burstiness 가 크면 AGGRESSIVE_AUTOSCALING)
PATTERN_STRATEGY: dict[WorkloadPattern, OptimizationStrategy] = {
    WorkloadPattern.STEADY_STATE: OptimizationStrategy.RESERVED_CAPACITY,
    WorkloadPattern.BURSTY: OptimizationStrategy.SPOT_INSTANCES,
    WorkloadPattern.PERIODIC: OptimizationStrategy.SCHEDULED_SCALING,
    WorkloadPattern.GROWING: OptimizationStrategy.PREDICTIVE_SCALING,
    WorkloadPattern.SEASONAL: OptimizationStrategy.PREDICTIVE_SCALING,
    WorkloadPattern.DECLINING: OptimizationStrategy.SERVICE_CONSOLIDATION,
    WorkloadPattern.CHAOTIC: OptimizationStrategy.CONSERVATIVE_BUFFER,
}

# 데이터가 없을 때의 기본 특성
DEFAULT_FEATURES = WorkloadFeatures(
    cpu_mean=50.0,
    cpu_std=10.0,
    cpu_variance=100.0,
    cpu_min=40.0,
    cpu_max=60.0,
    memory_mean=50.0,
    memory_std=5.0,
    memory_variance=25.0,
    memory_min=45.0,
    memory_max=55.0,
    periodicity_score=0.5,
    burstiness_score=0.05,
    stability_score=0.8,
    weekday_weekend_ratio=1.0,
    peak_utilization=60.0,
    off_peak_utilization=40.0,
    autocorrelation_24h=0.5,
    autocorrelation_7d=0.4,
)


def periodicity_score(snapshots: Sequence[Snapshot]) -> float:
    """
    시간대 평균이 설명하는 CPU 분산 비율.

    Returns
    -------
    float
        0~1. 샘플이 24개 미만이거나, 관측 시간대가 2개 미만이거나,
        분산이 0 이면 0.0.
    """
    frame = frames.metric_frame(snapshots, metrics.CPU)
    if len(frame) < MIN_PERIODICITY_SAMPLES:
        return 0.0
    return frames.explained_variance(frame, "hour")


def burstiness_score(values: Sequence[float], window_mean: float, window_std: float) -> float:
    """mean + 2σ 를 넘는 샘플 비율. mean 이 0 이하이면 0."""
    if window_mean <= 0 or not values:
        return 0.0
    threshold = window_mean + 2 * window_std
    return sum(1 for v in values if v > threshold) / len(values)


def weekday_weekend_ratio(snapshots: Sequence[Snapshot]) -> float:
    """평일 평균 CPU / 주말 평균 CPU. 한쪽이 없거나 주말 평균이 0 이면 1.0."""
    frame = frames.metric_frame(snapshots, metrics.CPU)
    if frame.empty:
        return 1.0
    weekend_mask = frame["weekday"] >= 5
    weekday_values = frame.loc[~weekend_mask, "value"]
    weekend_values = frame.loc[weekend_mask, "value"]
    if weekday_values.empty or weekend_values.empty:
        return 1.0
    weekend_mean = stats.mean(weekend_values.tolist())
    if weekend_mean <= 0:
        return 1.0
    return stats.mean(weekday_values.tolist()) / weekend_mean


class WorkloadClassifier:
    def __init__(self, settings: Optional[AnalyzerSettings] = None, analysis_window_days: int = 7):
        self.settings = settings or AnalyzerSettings()
        self.analysis_window_days = analysis_window_days

    def classify(self, service_name: str, snapshots: Sequence[Snapshot]) -> WorkloadProfile:
        """
        특성 추출 → 패턴 분류 → 전략 결정 → 프로필.

        빈 입력이면 기본 프로필(STEADY_STATE / RIGHT_SIZING, 신뢰도 50).
        """
        if not snapshots:
            logger.warning("No metrics found for service %s, using default classification", service_name)
            return self.default_profile(service_name)

        features = self.extract_features(snapshots)
        pattern = self.classify_pattern(features)
        strategy = self.determine_strategy(pattern, features)
        confidence = self.confidence_score(len(snapshots), features)

        logger.info(
            "Classified %s as %s (strategy=%s, confidence=%.1f)",
            service_name, pattern.value, strategy.value, confidence,
        )
        return WorkloadProfile(
            service_name=service_name,
            pattern=pattern,
            features=features,
            recommended_strategy=strategy,
            confidence_score=confidence,
            description=pattern.description,
            resource_recommendation=strategy.description,
            estimated_savings=self.estimated_savings(pattern),
            analysis_window_days=self.analysis_window_days,
            sample_count=len(snapshots),
        )

    def extract_features(self, snapshots: Sequence[Snapshot]) -> WorkloadFeatures:
        window = chronological(snapshots)
        cpu = metrics.CPU.values(window)
        memory = metrics.HEAP_PERCENT.values(window)

        cpu_mean = stats.mean(cpu)
        cpu_std = stats.std(cpu)
        cpu_slope = stats.trend_slope(cpu)
        periodicity = periodicity_score(window)

        cpu_frame = frames.metric_frame(window, metrics.CPU)
        weekly = frames.explained_variance(cpu_frame, "weekday")

        return WorkloadFeatures(
            cpu_mean=cpu_mean,
            cpu_std=cpu_std,
            cpu_variance=stats.variance(cpu),
            cpu_min=stats.minimum(cpu),
            cpu_max=stats.maximum(cpu),
            memory_mean=stats.mean(memory),
            memory_std=stats.std(memory),
            memory_variance=stats.variance(memory),
            memory_min=stats.minimum(memory),
            memory_max=stats.maximum(memory),
            cpu_trend_slope=cpu_slope,
            memory_trend_slope=stats.trend_slope(memory),
            growth_rate=cpu_slope / 100.0,
            periodicity_score=periodicity,
            burstiness_score=burstiness_score(cpu, cpu_mean, cpu_std),
            stability_score=1.0 / (1.0 + cpu_std),
            weekday_weekend_ratio=weekday_weekend_ratio(window),
            peak_utilization=stats.maximum(cpu),
            off_peak_utilization=stats.minimum(cpu),
            autocorrelation_24h=periodicity,
            autocorrelation_7d=weekly,
        )

    def classify_pattern(self, features: WorkloadFeatures) -> WorkloadPattern:
        """고정 우선순위 결정 트리 (첫 번째로 만족하는 규칙이 이긴다)."""
        cov = features.coefficient_of_variation
        periodicity = features.periodicity_score

        if features.cpu_trend_slope < -0.5:
            return WorkloadPattern.DECLINING
        if features.cpu_trend_slope > 0.5:
            return WorkloadPattern.GROWING
        if cov > 0.5 and periodicity < 0.2:
            return WorkloadPattern.CHAOTIC
        if features.burstiness_score > 0.1 or features.peak_to_mean_ratio > 2.0:
            return WorkloadPattern.BURSTY
        if periodicity > 0.5:
            return WorkloadPattern.PERIODIC
        if periodicity > 0.3 and cov > 0.3:
            return WorkloadPattern.SEASONAL
        return WorkloadPattern.STEADY_STATE

    def determine_strategy(self, pattern: WorkloadPattern, features: WorkloadFeatures) -> OptimizationStrategy:
        """
        패턴 → 기본 전략. BURSTY 만 burstiness 크기에 따라 둘 중 하나를 고른다.

        Raises
        ------
        KeyError
            매핑되지 않은 패턴 (새 패턴을 추가하면 PATTERN_STRATEGY 도 갱신해야 한다).
        """
        if pattern == WorkloadPattern.BURSTY and features.burstiness_score > 0.2:
            return OptimizationStrategy.AGGRESSIVE_AUTOSCALING
        return PATTERN_STRATEGY[pattern]

    def confidence_score(self, sample_count: int, features: WorkloadFeatures) -> float:
        """
        표본 크기 항(최대 70) + 특성 명확도 항(CoV 가 아주 낮거나 높으면 30, 중간이면 20).
        """
        data_confidence = min(70.0, 30.0 + sample_count * 0.5)
        cov = features.coefficient_of_variation
        clarity = 30.0 if (cov < 0.2 or cov > 0.8) else 20.0
        return min(100.0, max(0.0, data_confidence + clarity))

    def estimated_savings(self, pattern: WorkloadPattern) -> float:
        return BASELINE_MONTHLY_COST * SAVINGS_RATE[pattern]

    def default_profile(self, service_name: str) -> WorkloadProfile:
        return WorkloadProfile(
            service_name=service_name,
            pattern=WorkloadPattern.STEADY_STATE,
            features=DEFAULT_FEATURES,
            recommended_strategy=OptimizationStrategy.RIGHT_SIZING,
            confidence_score=50.0,
            description=WorkloadPattern.STEADY_STATE.description,
            resource_recommendation=OptimizationStrategy.RIGHT_SIZING.description,
            estimated_savings=100.0,
            analysis_window_days=self.analysis_window_days,
            sample_count=0,
        )
