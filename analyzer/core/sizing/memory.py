from __future__ import annotations

import logging
import math
from typing import Sequence

from analyzer.core import metrics
from analyzer.core.sizing.base import Draft, ResourceAnalysisStrategy
from analyzer.core.quantities import BYTES_PER_MI
from analyzer.core.stats import WindowStats, ceil_clean, maximum, trend_slope
from analyzer.models.analysis import ResourceQuantity, mebibytes
from analyzer.models.snapshot import Snapshot

logger = logging.getLogger(__name__)


class MemoryAnalysisStrategy(ResourceAnalysisStrategy):
    """
    메모리 request/limit, 런타임 힙(min/max) 사이징과 누수 판정.

    퍼센트(P95 heap%)만 쓰면 작은 힙에서 반올림 오차가 커지므로
    관측된 최대 사용 바이트도 함께 고려한다.
    """

    metric_type = "MEMORY"

    def window(self, snapshots: Sequence[Snapshot]) -> list[float]:
        return metrics.HEAP_PERCENT.values(snapshots)

    def request_for(self, p95_percent: float, heap_max_bytes: float, max_used_bytes: float) -> ResourceQuantity:
        sizing = self.settings.sizing
        from_percent = p95_percent / 100.0 * heap_max_bytes
        peak_bytes = max(from_percent, max_used_bytes)
        raw_mi = ceil_clean(peak_bytes * (1.0 + self.margin) / BYTES_PER_MI)
        return mebibytes(max(sizing.min_memory_mi, raw_mi))

    def limit_for(self, request: ResourceQuantity) -> ResourceQuantity:
        return mebibytes(math.floor(request.value * self.settings.sizing.memory_limit_multiplier))

    def heap_bounds(self, request: ResourceQuantity) -> tuple[ResourceQuantity, ResourceQuantity]:
        """request 의 고정 비율 (기본 0.75 / 0.85)."""
        sizing = self.settings.sizing
        return (
            mebibytes(math.floor(request.value * sizing.heap_min_fraction)),
            mebibytes(math.floor(request.value * sizing.heap_max_fraction)),
        )

    def is_leaking(self, heap_percent: Sequence[float]) -> bool:
        """이상 탐지기의 누수 규칙과 동일: 충분한 샘플 + OLS 기울기 > 임계값."""
        leak = self.settings.memory.leak
        if len(heap_percent) < leak.min_samples:
            return False
        return trend_slope(heap_percent) > leak.slope_threshold

    def detect_issues(self, snapshots: Sequence[Snapshot]) -> dict[str, str]:
        values = self.window(snapshots)
        issues: dict[str, str] = {}
        if self.is_leaking(values):
            issues["Memory Leak"] = (
                f"Heap usage shows continuous growth pattern, slope {trend_slope(values):.4f}%/sample"
            )
            logger.warning("Memory leak detected in %d snapshots", len(values))
        return issues

    def apply(self, draft: Draft, snapshots: Sequence[Snapshot], stats: WindowStats) -> None:
        heap_max = maximum(metrics.HEAP_MAX.values(snapshots))
        used_max = maximum(metrics.HEAP_USED.values(snapshots))
        request = self.request_for(stats.p95, heap_max, used_max)
        heap_min, heap_max_q = self.heap_bounds(request)
        draft.update(
            recommended_memory_request=request,
            recommended_memory_limit=self.limit_for(request),
            recommended_heap_min=heap_min,
            recommended_heap_max=heap_max_q,
            p95_memory=stats.p95,
            p99_memory=stats.p99,
            max_memory=stats.max,
            memory_leak_detected=self.is_leaking(self.window(snapshots)),
        )
