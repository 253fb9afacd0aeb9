"""
Custom metric scaling advisor.

CPU 외의 신호(HTTP 요청률, 커넥션 풀 사용량, 응답 시간 P95)로 replica 수를 권고한다.
스냅샷 수집 주기는 10초(분당 6개)로 가정한다.
"""

from __future__ import annotations

import logging
import math
from typing import Optional, Sequence

from analyzer.config.settings import AnalyzerSettings
from analyzer.core import metrics, stats
from analyzer.models.scaling import CustomMetricKind, CustomMetricScaling, CustomMetricsAnalysis
from analyzer.models.snapshot import Snapshot

logger = logging.getLogger(__name__)

SAMPLES_PER_MINUTE = 6.0

TARGET_RPS_PER_POD = 1000.0
TARGET_CONNECTIONS_PER_POD = 15.0
TARGET_P95_MS = 200.0


class CustomMetricsAdvisor:
    def __init__(self, settings: Optional[AnalyzerSettings] = None):
        self.settings = settings or AnalyzerSettings()

    def analyze(
        self,
        service_name: str,
        snapshots: Sequence[Snapshot],
        current_replicas: Optional[int] = None,
    ) -> CustomMetricsAnalysis:
        """빈 입력이면 권고 없음."""
        current = current_replicas if current_replicas is not None else self.settings.scaling.default_replicas
        recommendations = []
        if snapshots:
            recommendations = [
                self.request_rate(snapshots, current),
                self.connection_pool(snapshots, current),
                self.response_time(snapshots, current),
            ]
        return CustomMetricsAnalysis(service_name=service_name, recommendations=recommendations)

    def _clamp(self, replicas: int) -> int:
        scaling = self.settings.scaling
        return max(scaling.min_replicas, min(scaling.max_replicas, replicas))

    def request_rate(self, snapshots: Sequence[Snapshot], current_replicas: int) -> CustomMetricScaling:
        total = sum(metrics.HTTP_REQUESTS.values(snapshots))
        duration_seconds = len(snapshots) / SAMPLES_PER_MINUTE * 60
        rps = total / duration_seconds if duration_seconds > 0 else 0.0
        per_pod = rps / current_replicas if current_replicas > 0 else 0.0

        up, down = TARGET_RPS_PER_POD * 1.2, TARGET_RPS_PER_POD * 0.5
        if per_pod > up:
            recommendation = "Scale up - request rate exceeds target"
        elif per_pod < down:
            recommendation = "Scale down - request rate well below target"
        else:
            recommendation = "Current scaling is appropriate"

        return CustomMetricScaling(
            metric_name="http_requests_per_second",
            kind=CustomMetricKind.REQUESTS_PER_SECOND,
            current_value=rps,
            current_per_pod_value=per_pod,
            target_value=rps,
            target_per_pod_value=TARGET_RPS_PER_POD,
            current_replicas=current_replicas,
            recommended_replicas=self._clamp(math.ceil(rps / TARGET_RPS_PER_POD)),
            scale_up_threshold=up,
            scale_down_threshold=down,
            rationale="Current: %.1f RPS total, %.1f RPS per pod. Target: %.1f RPS per pod."
            % (rps, per_pod, TARGET_RPS_PER_POD),
            recommendation=recommendation,
        )

    def connection_pool(self, snapshots: Sequence[Snapshot], current_replicas: int) -> CustomMetricScaling:
        active = [s.pool_active for s in snapshots if s.pool_active is not None and s.pool_active >= 0]
        avg_active = stats.mean(active)
        max_active = stats.maximum(active)
        per_pod = avg_active / current_replicas if current_replicas > 0 else 0.0

        up, down = TARGET_CONNECTIONS_PER_POD * 1.3, TARGET_CONNECTIONS_PER_POD * 0.4
        if per_pod > up:
            recommendation = "Scale up - connection pool usage high"
        elif per_pod < down:
            recommendation = "Scale down - connection pool underutilized"
        else:
            recommendation = "Connection pool usage is healthy"

        return CustomMetricScaling(
            metric_name=metrics.POOL_ACTIVE.name,
            kind=CustomMetricKind.CONNECTION_POOL_USAGE,
            current_value=avg_active,
            current_per_pod_value=per_pod,
            target_value=avg_active,
            target_per_pod_value=TARGET_CONNECTIONS_PER_POD,
            current_replicas=current_replicas,
            recommended_replicas=self._clamp(math.ceil(max_active / TARGET_CONNECTIONS_PER_POD)),
            scale_up_threshold=up,
            scale_down_threshold=down,
            rationale="Avg connections: %.1f, Max: %.1f. Current per pod: %.1f. Target: %.1f per pod."
            % (avg_active, max_active, per_pod, TARGET_CONNECTIONS_PER_POD),
            recommendation=recommendation,
        )

    def response_time(self, snapshots: Sequence[Snapshot], current_replicas: int) -> CustomMetricScaling:
        # http_duration_p95 는 이미 ms 단위
        p95 = stats.maximum(metrics.LATENCY_P95.values(snapshots))
        up, down = TARGET_P95_MS * 1.5, TARGET_P95_MS * 0.5
        scaling = self.settings.scaling

        if p95 > up:
            recommended = min(scaling.max_replicas, current_replicas + 2)
            recommendation = "Scale up - response time degraded"
        elif p95 < down:
            recommended = max(scaling.min_replicas, current_replicas - 1)
            recommendation = "Consider scaling down - excellent performance"
        else:
            recommended = current_replicas
            recommendation = "Response time within acceptable range"

        verdict = "Performance degradation detected" if p95 > TARGET_P95_MS else "Performance is good"
        return CustomMetricScaling(
            metric_name=metrics.LATENCY_P95.name,
            kind=CustomMetricKind.RESPONSE_TIME_P95,
            current_value=p95,
            current_per_pod_value=p95,
            target_value=TARGET_P95_MS,
            target_per_pod_value=TARGET_P95_MS,
            current_replicas=current_replicas,
            recommended_replicas=recommended,
            scale_up_threshold=up,
            scale_down_threshold=down,
            rationale="P95 response time: %.1fms. Target: %.1fms. %s" % (p95, TARGET_P95_MS, verdict),
            recommendation=recommendation,
        )
