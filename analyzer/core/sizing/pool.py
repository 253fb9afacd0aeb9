from __future__ import annotations

import logging
from typing import Optional, Sequence

from analyzer.core import metrics
from analyzer.core.sizing.base import Draft, ResourceAnalysisStrategy
from analyzer.core.stats import WindowStats, ceil_clean, maximum
from analyzer.models.snapshot import Snapshot

logger = logging.getLogger(__name__)


class ConnectionPoolAnalysisStrategy(ResourceAnalysisStrategy):
    """커넥션 풀 최대 크기 / 최소 idle 사이징과 고갈 판정."""

    metric_type = "CONNECTION_POOL"

    def window(self, snapshots: Sequence[Snapshot]) -> list[float]:
        return [active for active, _ in metrics.pool_samples(snapshots)]

    def max_pool_size(self, stats: WindowStats, snapshots: Sequence[Snapshot]) -> Optional[int]:
        """
        max(최소 풀 크기, ceil(P95(active)*(1+margin)), ceil((max active + max pending)*(1+margin))).

        풀 데이터가 없으면 None.
        """
        if stats.n == 0:
            return None
        from_p95 = ceil_clean(stats.p95 * (1.0 + self.margin))
        max_pending = maximum(metrics.POOL_PENDING.values(snapshots))
        from_demand = ceil_clean((stats.max + max_pending) * (1.0 + self.margin))
        return max(self.settings.sizing.min_pool_size, from_p95, from_demand)

    def min_idle(self, max_pool: Optional[int]) -> Optional[int]:
        if max_pool is None:
            return None
        sizing = self.settings.sizing
        return max(sizing.min_idle, max_pool // sizing.idle_divisor)

    def is_exhausted(self, snapshots: Sequence[Snapshot]) -> bool:
        """
        고갈 판정: 사용률 >= exhaustion_ratio 인 샘플 비중이 임계 비율을 넘거나,
        대기(pending) 커넥션이 한 번이라도 있었는지.
        """
        ratios = metrics.pool_ratios(snapshots)
        pool = self.settings.pool
        saturated = sum(1 for r in ratios if r >= pool.exhaustion_ratio)
        at_capacity = bool(ratios) and saturated > len(ratios) * pool.exhaustion_sample_fraction
        has_pending = bool(metrics.POOL_PENDING.values(snapshots))

        if at_capacity:
            logger.info("Pool exhaustion: %d/%d samples at capacity", saturated, len(ratios))
        if has_pending:
            logger.info("Pool pressure: pending connections detected in snapshots")
        return at_capacity or has_pending

    def detect_issues(self, snapshots: Sequence[Snapshot]) -> dict[str, str]:
        issues: dict[str, str] = {}
        if self.is_exhausted(snapshots):
            issues["Connection Pool Exhaustion"] = (
                "Connection pool frequently at maximum capacity or pending requests detected"
            )
            logger.warning("Connection pool exhaustion detected")
        return issues

    def apply(self, draft: Draft, snapshots: Sequence[Snapshot], stats: WindowStats) -> None:
        max_pool = self.max_pool_size(stats, snapshots)
        draft.update(
            recommended_max_pool_size=max_pool,
            recommended_min_idle=self.min_idle(max_pool),
            p95_pool_active=stats.p95,
            pool_exhaustion_detected=self.is_exhausted(snapshots),
        )
