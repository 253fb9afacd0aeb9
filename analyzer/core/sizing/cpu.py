from __future__ import annotations

import logging
from typing import Sequence

from analyzer.core import metrics
from analyzer.core.sizing.base import Draft, ResourceAnalysisStrategy
from analyzer.core.stats import WindowStats, ceil_clean, summarize
from analyzer.models.analysis import ResourceQuantity, millicores
from analyzer.models.snapshot import Snapshot

logger = logging.getLogger(__name__)


class CpuAnalysisStrategy(ResourceAnalysisStrategy):
    """CPU request/limit 사이징과 throttling 판정."""

    metric_type = "CPU"

    def window(self, snapshots: Sequence[Snapshot]) -> list[float]:
        return metrics.CPU.values(snapshots)

    def request_for(self, p95_percent: float) -> ResourceQuantity:
        """
        P95(%) → millicore request.

        ceil(P95/100 * (1+margin) * 1000), 최소값 아래로 내려가지 않는다.
        P95 에 대해 단조 증가한다.
        """
        sizing = self.settings.sizing
        raw = ceil_clean(p95_percent / 100.0 * (1.0 + self.margin) * 1000.0)
        return millicores(max(sizing.min_cpu_millicores, raw))

    def limit_for(self, request: ResourceQuantity) -> ResourceQuantity:
        return millicores(ceil_clean(request.value * self.settings.sizing.cpu_limit_multiplier))

    def is_throttling(self, stats: WindowStats) -> bool:
        if stats.n == 0:
            return False
        return (
            stats.p95 > self.settings.cpu.sustained.threshold
            or stats.max > self.settings.cpu.throttle_max
        )

    def detect_issues(self, snapshots: Sequence[Snapshot]) -> dict[str, str]:
        stats = summarize(self.window(snapshots))
        issues: dict[str, str] = {}
        if self.is_throttling(stats):
            issues["CPU Throttling"] = (
                f"CPU P95={stats.p95:.1f}% exceeds {self.settings.cpu.sustained.threshold:.0f}% "
                f"threshold, performance degradation likely"
            )
            logger.warning("CPU throttling detected: P95=%.1f%%, max=%.1f%%", stats.p95, stats.max)
        return issues

    def apply(self, draft: Draft, snapshots: Sequence[Snapshot], stats: WindowStats) -> None:
        request = self.request_for(stats.p95)
        draft.update(
            recommended_cpu_request=request,
            recommended_cpu_limit=self.limit_for(request),
            p95_cpu=stats.p95,
            p99_cpu=stats.p99,
            max_cpu=stats.max,
            cpu_throttling_detected=self.is_throttling(stats),
        )
