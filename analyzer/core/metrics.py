"""
Metric metadata helpers.

스냅샷의 각 수치 필드를 메트릭 이름(외부 대시보드/알림에서 쓰는 이름)과
단위로 묶어 한 곳에서 관리한다.
None 이거나 0 이하인 값은 "측정되지 않음"으로 보고 시계열에서 제외한다.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Literal, Optional, Sequence

from analyzer.models.snapshot import Snapshot


MetricUnit = Literal["percent", "bytes", "count", "ms", "ratio"]


@dataclass(frozen=True)
class MetricMeta:
    name: str
    field: str
    unit: MetricUnit = "count"

    def read(self, snapshot: Snapshot) -> Optional[float]:
        value = getattr(snapshot, self.field)
        if value is None or value != value:  # NaN
            return None
        if value <= 0:
            return None
        return float(value)

    def values(self, snapshots: Sequence[Snapshot]) -> list[float]:
        """측정된 값만 순서대로 꺼낸다."""
        out: list[float] = []
        for snapshot in snapshots:
            value = self.read(snapshot)
            if value is not None:
                out.append(value)
        return out


_METRICS: Dict[str, MetricMeta] = {
    "cpu_usage_percent":          MetricMeta(name="cpu_usage_percent", field="cpu_percent", unit="percent"),
    "heap_usage_percent":         MetricMeta(name="heap_usage_percent", field="heap_percent", unit="percent"),
    "heap_used_bytes":            MetricMeta(name="heap_used_bytes", field="heap_used_bytes", unit="bytes"),
    "heap_max_bytes":             MetricMeta(name="heap_max_bytes", field="heap_max_bytes", unit="bytes"),
    "thread_count":               MetricMeta(name="thread_count", field="thread_count", unit="count"),
    "http_requests":              MetricMeta(name="http_requests", field="http_count", unit="count"),
    "http_request_duration_p95":  MetricMeta(name="http_request_duration_p95", field="http_duration_p95", unit="ms"),
    "hikari_active_connections":  MetricMeta(name="hikari_active_connections", field="pool_active", unit="count"),
    "hikari_max_connections":     MetricMeta(name="hikari_max_connections", field="pool_max", unit="count"),
    "hikari_pending_connections": MetricMeta(name="hikari_pending_connections", field="pool_pending", unit="count"),
}

CPU = _METRICS["cpu_usage_percent"]
HEAP_PERCENT = _METRICS["heap_usage_percent"]
HEAP_USED = _METRICS["heap_used_bytes"]
HEAP_MAX = _METRICS["heap_max_bytes"]
THREADS = _METRICS["thread_count"]
HTTP_REQUESTS = _METRICS["http_requests"]
LATENCY_P95 = _METRICS["http_request_duration_p95"]
POOL_ACTIVE = _METRICS["hikari_active_connections"]
POOL_MAX = _METRICS["hikari_max_connections"]
POOL_PENDING = _METRICS["hikari_pending_connections"]

# 커넥션 풀 사용률 (active / max) 의 메트릭 이름
POOL_USAGE_METRIC = "hikari_pool_usage"


def pool_samples(snapshots: Sequence[Snapshot]) -> list[tuple[float, float]]:
    """
    active / max 가 모두 측정된 스냅샷의 (active, max) 쌍.

    active 가 0 인 유휴 구간도 풀 데이터로 인정한다 (max 만 양수면 된다).
    """
    out: list[tuple[float, float]] = []
    for snapshot in snapshots:
        active = snapshot.pool_active
        pool_max = POOL_MAX.read(snapshot)
        if active is None or active < 0 or pool_max is None:
            continue
        out.append((float(active), pool_max))
    return out


def pool_ratios(snapshots: Sequence[Snapshot]) -> list[float]:
    return [active / pool_max for active, pool_max in pool_samples(snapshots)]
