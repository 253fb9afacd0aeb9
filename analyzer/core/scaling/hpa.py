"""
HPA (Horizontal Pod Autoscaler) advisor.

CPU 평균 / P95 / 최대값으로 부하 유형을 분류하고, 유형별로
min/max replica, 목표 사용률, scale-up/down 정책을 정한다.
"""

from __future__ import annotations

import logging
import math
from typing import Optional, Sequence

from analyzer.config.settings import AnalyzerSettings
from analyzer.core import metrics, stats
from analyzer.models.scaling import CustomMetricTarget, HPARecommendation, LoadClass, ScalingPolicy
from analyzer.models.snapshot import Snapshot

logger = logging.getLogger(__name__)

# 유형별 최소 replica
MIN_REPLICAS: dict[LoadClass, int] = {
    LoadClass.HIGH_STEADY: 3,
    LoadClass.HIGHLY_VARIABLE: 2,
    LoadClass.LOW_STEADY: 1,
    LoadClass.MODERATE_VARIABLE: 2,
    LoadClass.STABLE: 2,
}

# 유형별 목표 CPU 사용률 (%)
TARGET_CPU: dict[LoadClass, int] = {
    LoadClass.HIGHLY_VARIABLE: 60,
    LoadClass.HIGH_STEADY: 75,
    LoadClass.LOW_STEADY: 80,
    LoadClass.MODERATE_VARIABLE: 70,
    LoadClass.STABLE: 70,
}

AGGRESSIVE_SCALE_UP = ScalingPolicy(
    stabilization_window_seconds=0,
    period_seconds=15,
    percentage_per_scale=100,
    behavior="Aggressive",
    description="Fast scale-up for handling traffic spikes",
)
STEADY_SCALE_UP = ScalingPolicy(
    stabilization_window_seconds=30,
    period_seconds=30,
    percentage_per_scale=50,
    pods_per_scale=2,
    behavior="Moderate",
    description="Steady scale-up for sustained load",
)
BALANCED_SCALE_UP = ScalingPolicy(
    stabilization_window_seconds=30,
    period_seconds=30,
    percentage_per_scale=50,
    pods_per_scale=1,
    behavior="Moderate",
    description="Balanced scale-up policy",
)
CONSERVATIVE_SCALE_DOWN = ScalingPolicy(
    stabilization_window_seconds=300,
    period_seconds=60,
    percentage_per_scale=25,
    pods_per_scale=1,
    behavior="Conservative",
    description="Conservative scale-down to prevent thrashing",
)

# 커스텀 메트릭 목표값 (pod 당)
HTTP_RPS_TARGET = 1000.0
POOL_CONNECTIONS_TARGET = 15.0


def classify_load(avg_cpu: float, max_cpu: float) -> LoadClass:
    volatility = max_cpu - avg_cpu
    if volatility > 50:
        return LoadClass.HIGHLY_VARIABLE
    if volatility > 30:
        return LoadClass.MODERATE_VARIABLE
    if avg_cpu > 70:
        return LoadClass.HIGH_STEADY
    if avg_cpu < 30:
        return LoadClass.LOW_STEADY
    return LoadClass.STABLE


class HPAAdvisor:
    def __init__(self, settings: Optional[AnalyzerSettings] = None):
        self.settings = settings or AnalyzerSettings()

    def recommend(
        self,
        service_name: str,
        snapshots: Sequence[Snapshot],
        current_replicas: Optional[int] = None,
    ) -> HPARecommendation:
        current = current_replicas if current_replicas is not None else self.settings.scaling.default_replicas
        cpu = metrics.CPU.values(snapshots)
        if not cpu:
            logger.warning("No CPU metrics for %s, using default HPA configuration", service_name)
            return self.default(service_name, current)

        avg_cpu = stats.mean(cpu)
        p95_cpu = stats.percentile(cpu, 95)
        max_cpu = stats.maximum(cpu)
        load = classify_load(avg_cpu, max_cpu)

        min_replicas = MIN_REPLICAS[load]
        max_replicas = self.max_replicas(load, max_cpu, current)
        target = self.settings.scaling.target_utilization
        recommended = max(self.settings.scaling.min_replicas, math.ceil(p95_cpu / target * current))
        target_cpu = TARGET_CPU[load]

        rationale = (
            "Workload pattern: %s. Average CPU: %.1f%%, P95 CPU: %.1f%%. "
            "Recommended HPA: min=%d, max=%d, target=%d%%. "
            "This configuration provides optimal scaling for your workload pattern."
            % (load.value, avg_cpu, p95_cpu, min_replicas, max_replicas, target_cpu)
        )

        return HPARecommendation(
            service_name=service_name,
            load_class=load,
            min_replicas=min_replicas,
            max_replicas=max_replicas,
            current_replicas=current,
            recommended_replicas=recommended,
            target_cpu_utilization=target_cpu,
            target_memory_utilization=self.target_memory(metrics.HEAP_PERCENT.values(snapshots)),
            scale_up_policy=self.scale_up_policy(load),
            scale_down_policy=CONSERVATIVE_SCALE_DOWN,
            custom_metrics=self.custom_metrics(snapshots),
            rationale=rationale,
            confidence=self.confidence(len(cpu), avg_cpu, p95_cpu),
            estimated_cost_impact=(recommended - current) * self.settings.cost.cpu_core_month,
        )

    def max_replicas(self, load: LoadClass, max_cpu: float, current_replicas: int) -> int:
        """최대 CPU 기준 필요 replica 에 유형별 여유분을 더한다 (min 이상 보장)."""
        base = math.ceil(max_cpu / self.settings.scaling.target_utilization * current_replicas)
        if load == LoadClass.HIGHLY_VARIABLE:
            upper = min(15, base + 5)
        elif load == LoadClass.HIGH_STEADY:
            upper = min(10, base + 2)
        elif load == LoadClass.LOW_STEADY:
            upper = min(5, base)
        else:
            upper = min(10, base + 3)
        return max(upper, MIN_REPLICAS[load])

    @staticmethod
    def target_memory(heap_percent: Sequence[float]) -> int:
        p95 = stats.percentile(heap_percent, 95)
        if p95 > 80:
            return 70
        if p95 > 60:
            return 75
        return 80

    @staticmethod
    def scale_up_policy(load: LoadClass) -> ScalingPolicy:
        if load == LoadClass.HIGHLY_VARIABLE:
            return AGGRESSIVE_SCALE_UP
        if load == LoadClass.HIGH_STEADY:
            return STEADY_SCALE_UP
        return BALANCED_SCALE_UP

    @staticmethod
    def custom_metrics(snapshots: Sequence[Snapshot]) -> list[CustomMetricTarget]:
        targets = []
        if metrics.HTTP_REQUESTS.values(snapshots):
            targets.append(CustomMetricTarget(
                metric_name="http_requests_per_second",
                target_value=HTTP_RPS_TARGET,
                description="Scale based on HTTP request rate per pod",
            ))
        if metrics.pool_samples(snapshots):
            targets.append(CustomMetricTarget(
                metric_name="hikari_active_connections",
                target_value=POOL_CONNECTIONS_TARGET,
                description="Scale based on active database connections per pod",
            ))
        return targets

    @staticmethod
    def confidence(sample_count: int, avg_cpu: float, p95_cpu: float) -> float:
        confidence = 0.5
        if sample_count > 100:
            confidence += 0.2
        elif sample_count > 50:
            confidence += 0.1
        spread = p95_cpu - avg_cpu
        if spread < 20:
            confidence += 0.2
        elif spread > 40:
            confidence -= 0.1
        return min(0.95, max(0.3, confidence))

    def default(self, service_name: str, current_replicas: int) -> HPARecommendation:
        scaling = self.settings.scaling
        return HPARecommendation(
            service_name=service_name,
            min_replicas=scaling.min_replicas,
            max_replicas=scaling.max_replicas,
            current_replicas=current_replicas,
            recommended_replicas=current_replicas,
            target_cpu_utilization=int(scaling.target_utilization),
            target_memory_utilization=75,
            scale_up_policy=BALANCED_SCALE_UP,
            scale_down_policy=CONSERVATIVE_SCALE_DOWN,
            rationale="Default HPA configuration - insufficient metrics for detailed analysis",
            confidence=0.3,
        )
