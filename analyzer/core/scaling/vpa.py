"""
VPA (Vertical Pod Autoscaler) advisor.

- CPU request: P95 CPU % 를 millicore 로 환산하고 15% 여유를 더한다 (최소 100m).
- Memory request: 최대 heap 사용량에 15% 여유와 non-heap 오버헤드 30% 를 더한다 (최소 256Mi).
- limit 은 request 의 1.5 배.
- update mode 는 CPU 분산이 클수록 자동화 수준을 높인다.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from analyzer.config.settings import AnalyzerSettings
from analyzer.core import metrics, stats
from analyzer.core.cost import CostCalculator, round2
from analyzer.core.quantities import BYTES_PER_MI
from analyzer.models.analysis import CurrentResources, mebibytes, millicores
from analyzer.models.scaling import (
    ResourcePolicy,
    ResourceRange,
    ResourceRequests,
    VPARecommendation,
)
from analyzer.models.snapshot import Snapshot

logger = logging.getLogger(__name__)

VPA_MARGIN = 1.15
NON_HEAP_OVERHEAD = 1.3
LIMIT_MULTIPLIER = 1.5

# CPU 분산 기준 (update mode / HPA 권고)
AUTO_MODE_VARIANCE = 500.0
RECREATE_MODE_VARIANCE = 200.0
HPA_VARIANCE = 300.0
# VPA 를 권할 만한 월 절감액 ($)
VPA_SAVINGS_THRESHOLD = 10.0


def update_mode(cpu_variance: float) -> str:
    if cpu_variance > AUTO_MODE_VARIANCE:
        return "Auto"
    if cpu_variance > RECREATE_MODE_VARIANCE:
        return "Recreate"
    return "Initial"


def recommendation_label(cpu_variance: float, savings: float) -> str:
    high_variance = cpu_variance > HPA_VARIANCE
    worth_resizing = abs(savings) > VPA_SAVINGS_THRESHOLD
    if high_variance and worth_resizing:
        return "Use both HPA and VPA"
    if high_variance:
        return "Use HPA"
    if worth_resizing:
        return "Use VPA"
    return "Manual tuning"


class VPAAdvisor:
    def __init__(self, settings: Optional[AnalyzerSettings] = None):
        self.settings = settings or AnalyzerSettings()
        self.cost = CostCalculator(self.settings)

    def recommend(
        self,
        service_name: str,
        snapshots: Sequence[Snapshot],
        current: Optional[CurrentResources] = None,
    ) -> VPARecommendation:
        current = current or CurrentResources()
        cpu = metrics.CPU.values(snapshots)
        if not cpu:
            logger.warning("No CPU metrics for %s, using default VPA configuration", service_name)
            return self.default(service_name, current)

        cpu_request = max(
            self.settings.sizing.min_cpu_millicores,
            stats.ceil_clean(stats.percentile(cpu, 95) * 10 * VPA_MARGIN),
        )
        heap_used = stats.maximum(metrics.HEAP_USED.values(snapshots))
        memory_request = max(
            self.settings.sizing.min_memory_mi,
            stats.ceil_clean(heap_used * VPA_MARGIN * NON_HEAP_OVERHEAD / BYTES_PER_MI),
        )
        cpu_limit = int(cpu_request * LIMIT_MULTIPLIER)
        memory_limit = int(memory_request * LIMIT_MULTIPLIER)

        recommended = ResourceRequests(cpu=str(millicores(cpu_request)), memory=str(mebibytes(memory_request)))
        current_requests = ResourceRequests(cpu=str(current.cpu_request), memory=str(current.memory_request))

        variance = stats.variance(cpu)
        mode = update_mode(variance)
        savings = round2(
            self.cost.monthly_cost(current.cpu_request, current.memory_request)
            - self.cost.monthly_cost(recommended.cpu, recommended.memory)
        )

        return VPARecommendation(
            service_name=service_name,
            current_requests=current_requests,
            current_limits=ResourceRequests(cpu=str(current.cpu_limit), memory=str(current.memory_limit)),
            recommended_requests=recommended,
            recommended_limits=ResourceRequests(cpu=f"{cpu_limit}m", memory=f"{memory_limit}Mi"),
            update_mode=mode,
            resource_policy=ResourcePolicy(
                cpu_range=ResourceRange(min=f"{cpu_request // 2}m", max=f"{cpu_request * 2}m"),
                memory_range=ResourceRange(min=f"{memory_request // 2}Mi", max=f"{memory_request * 2}Mi"),
            ),
            rationale=self.rationale(mode, current_requests, recommended, savings),
            confidence=self.confidence(len(cpu), variance),
            estimated_monthly_savings=savings,
            recommendation=recommendation_label(variance, savings),
        )

    @staticmethod
    def rationale(
        mode: str,
        current: ResourceRequests,
        recommended: ResourceRequests,
        savings: float,
    ) -> str:
        text = "VPA mode: %s. Current: CPU=%s, Memory=%s. Recommended: CPU=%s, Memory=%s. " % (
            mode, current.cpu, current.memory, recommended.cpu, recommended.memory,
        )
        if savings > 0:
            text += "Estimated monthly savings: $%.2f. " % savings
        elif savings < 0:
            text += "Additional monthly cost: $%.2f for adequate resources. " % -savings
        return text + "VPA will automatically right-size pods based on actual usage."

    @staticmethod
    def confidence(sample_count: int, cpu_variance: float) -> float:
        confidence = 0.5
        if sample_count > 1000:
            confidence += 0.3
        elif sample_count > 500:
            confidence += 0.2
        elif sample_count > 100:
            confidence += 0.1
        if cpu_variance < 100:
            confidence += 0.15
        elif cpu_variance > 500:
            confidence -= 0.1
        return min(0.95, max(0.3, confidence))

    @staticmethod
    def default(service_name: str, current: CurrentResources) -> VPARecommendation:
        return VPARecommendation(
            service_name=service_name,
            current_requests=ResourceRequests(cpu=str(current.cpu_request), memory=str(current.memory_request)),
            recommended_requests=ResourceRequests(cpu="200m", memory="512Mi"),
            update_mode="Initial",
            rationale="Default VPA configuration",
            confidence=0.3,
            recommendation="Insufficient data for VPA recommendation",
        )
