"""
통계 기반 이상 탐지.

역할:
- CPU / 메모리 / 커넥션 풀 / 응답시간 4개 차원을 서로 독립적으로 평가한다.
- 각 차원은 최신 값의 z-score(윈도우 평균/모집단 표준편차 기준)와
  차원별 규칙(지속 고부하, 누수 추세, 풀 고갈, 절대 지연 임계값)으로 판정한다.
- 호출 간 상태가 없다. 같은 입력이면 항상 같은 결과를 돌려준다.
  (저장/중복 제거는 외부 persistence 레이어의 책임)
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from analyzer.config.settings import AnalyzerSettings
from analyzer.core import metrics, stats
from analyzer.models.anomaly import Anomaly, AnomalyType, MetricType, Severity
from analyzer.models.snapshot import Snapshot, chronological

logger = logging.getLogger(__name__)


class AnomalyDetector:
    """
    스냅샷 윈도우에서 이상을 찾는다.

    Parameters
    ----------
    settings : AnalyzerSettings, optional
        임계값 설정. 주지 않으면 기본값으로 새로 만든다.
    """

    def __init__(self, settings: Optional[AnalyzerSettings] = None):
        self.settings = settings or AnalyzerSettings()

    # ------------------------------------------------------------------ #
    # public API
    # ------------------------------------------------------------------ #
    def analyze_all(self, service_name: str, snapshots: Sequence[Snapshot]) -> list[Anomaly]:
        """
        4개 차원 분석 결과를 CPU, 메모리, 풀, 응답시간 순으로 이어 붙여 반환한다.

        비활성화 상태이거나 스냅샷이 없으면 빈 리스트.
        """
        if not self.settings.enabled:
            logger.debug("Anomaly detection disabled, skipping %s", service_name)
            return []
        if not snapshots:
            logger.warning("No snapshots for service %s", service_name)
            return []

        window = chronological(snapshots)
        anomalies: list[Anomaly] = []
        anomalies.extend(self.analyze_cpu(service_name, window))
        anomalies.extend(self.analyze_memory(service_name, window))
        anomalies.extend(self.analyze_pool(service_name, window))
        anomalies.extend(self.analyze_latency(service_name, window))

        logger.info("Detected %d anomalies for service %s", len(anomalies), service_name)
        return anomalies

    def severity_for(self, abs_z: float) -> Severity:
        """|z| 에 대한 단조 증가 계단 함수."""
        t = self.settings.threshold
        if abs_z >= t.critical:
            return Severity.CRITICAL
        if abs_z >= t.high:
            return Severity.HIGH
        if abs_z >= t.medium:
            return Severity.MEDIUM
        return Severity.LOW

    def analyze_cpu(self, service_name: str, snapshots: Sequence[Snapshot]) -> list[Anomaly]:
        values = metrics.CPU.values(snapshots)
        if len(values) < self.settings.detection.min_samples:
            return []

        detected_at = _latest_timestamp(snapshots)
        medium = self.settings.threshold.medium
        current = values[-1]
        expected = stats.ema(values, self.settings.ema.alpha)
        z = stats.z_score(current, stats.mean(values), stats.std(values))

        anomalies: list[Anomaly] = []
        if abs(z) > medium:
            direction = "spike" if z > 0 else "drop"
            anomalies.append(
                Anomaly(
                    service_name=service_name,
                    metric_type=MetricType.CPU,
                    metric_name=metrics.CPU.name,
                    anomaly_type=AnomalyType.SPIKE if z > 0 else AnomalyType.DROP,
                    severity=self.severity_for(abs(z)),
                    actual_value=current,
                    expected_value=expected,
                    z_score=z,
                    threshold=medium,
                    detected_at=detected_at,
                    description=(
                        f"CPU usage {direction} detected: {current:.2f}% "
                        f"(expected: {expected:.2f}%, z-score: {z:.2f})"
                    ),
                )
            )

        sustained = self.settings.cpu.sustained
        recent = values[-sustained.count:]
        if len(recent) == sustained.count and all(v > sustained.threshold for v in recent):
            anomalies.append(
                Anomaly(
                    service_name=service_name,
                    metric_type=MetricType.CPU,
                    metric_name=metrics.CPU.name,
                    anomaly_type=AnomalyType.SUSTAINED_HIGH,
                    severity=Severity.HIGH,
                    actual_value=current,
                    expected_value=sustained.threshold,
                    z_score=0.0,
                    threshold=sustained.threshold,
                    detected_at=detected_at,
                    description=(
                        f"Sustained high CPU detected: {current:.2f}% for {sustained.count} "
                        f"consecutive samples (threshold: {sustained.threshold:.2f}%)"
                    ),
                )
            )
        return anomalies

    def analyze_memory(self, service_name: str, snapshots: Sequence[Snapshot]) -> list[Anomaly]:
        values = metrics.HEAP_PERCENT.values(snapshots)
        if len(values) < self.settings.detection.min_samples:
            return []

        detected_at = _latest_timestamp(snapshots)
        medium = self.settings.threshold.medium
        current = values[-1]
        expected = stats.ema(values, self.settings.ema.alpha)
        z = stats.z_score(current, stats.mean(values), stats.std(values))

        anomalies: list[Anomaly] = []
        if abs(z) > medium:
            direction = "spike" if z > 0 else "drop"
            anomalies.append(
                Anomaly(
                    service_name=service_name,
                    metric_type=MetricType.MEMORY,
                    metric_name=metrics.HEAP_PERCENT.name,
                    anomaly_type=AnomalyType.SPIKE if z > 0 else AnomalyType.DROP,
                    severity=self.severity_for(abs(z)),
                    actual_value=current,
                    expected_value=expected,
                    z_score=z,
                    threshold=medium,
                    detected_at=detected_at,
                    description=(
                        f"Memory usage {direction} detected: {current:.2f}% "
                        f"(expected: {expected:.2f}%, z-score: {z:.2f})"
                    ),
                )
            )

        leak = self.settings.memory.leak
        if len(values) >= leak.min_samples:
            slope = stats.trend_slope(values)
            if slope > leak.slope_threshold:
                anomalies.append(
                    Anomaly(
                        service_name=service_name,
                        metric_type=MetricType.MEMORY,
                        metric_name=metrics.HEAP_PERCENT.name,
                        anomaly_type=AnomalyType.PATTERN_BREAK,
                        severity=Severity.HIGH,
                        actual_value=current,
                        expected_value=values[0],
                        z_score=0.0,
                        threshold=leak.slope_threshold,
                        detected_at=detected_at,
                        description=(
                            f"Potential memory leak detected: increasing trend with slope "
                            f"{slope:.4f} (threshold: {leak.slope_threshold:.4f})"
                        ),
                    )
                )
        return anomalies

    def analyze_pool(self, service_name: str, snapshots: Sequence[Snapshot]) -> list[Anomaly]:
        samples = metrics.pool_samples(snapshots)
        if len(samples) < self.settings.detection.min_samples:
            return []

        ratios = [active / pool_max for active, pool_max in samples]
        detected_at = _latest_timestamp(snapshots)
        current = ratios[-1]
        current_active, current_max = samples[-1]
        exhaustion = self.settings.pool.exhaustion_ratio

        anomalies: list[Anomaly] = []
        if current >= exhaustion:
            anomalies.append(
                Anomaly(
                    service_name=service_name,
                    metric_type=MetricType.POOL,
                    metric_name=metrics.POOL_USAGE_METRIC,
                    anomaly_type=AnomalyType.SPIKE,
                    severity=Severity.CRITICAL,
                    actual_value=current * 100,
                    expected_value=exhaustion * 100,
                    z_score=0.0,
                    threshold=exhaustion,
                    detected_at=detected_at,
                    description=(
                        f"Connection pool exhaustion: {int(current_active)}/{int(current_max)} "
                        f"connections in use ({current * 100:.1f}%)"
                    ),
                )
            )

        high = self.settings.threshold.high
        window_mean = stats.mean(ratios)
        z = stats.z_score(current, window_mean, stats.std(ratios))
        # 사용률이 낮은 구간의 노이즈는 무시
        if abs(z) > high and current > 0.5:
            anomalies.append(
                Anomaly(
                    service_name=service_name,
                    metric_type=MetricType.POOL,
                    metric_name=metrics.POOL_USAGE_METRIC,
                    anomaly_type=AnomalyType.SPIKE,
                    severity=self.severity_for(abs(z)),
                    actual_value=current * 100,
                    expected_value=window_mean * 100,
                    z_score=z,
                    threshold=high,
                    detected_at=detected_at,
                    description=(
                        f"Connection pool usage spike: {current * 100:.1f}% "
                        f"(expected: {window_mean * 100:.1f}%, z-score: {z:.2f})"
                    ),
                )
            )
        return anomalies

    def analyze_latency(self, service_name: str, snapshots: Sequence[Snapshot]) -> list[Anomaly]:
        values = metrics.LATENCY_P95.values(snapshots)
        if len(values) < self.settings.detection.min_samples:
            return []

        detected_at = _latest_timestamp(snapshots)
        medium = self.settings.threshold.medium
        current = values[-1]
        expected = stats.ema(values, self.settings.ema.alpha)
        z = stats.z_score(current, stats.mean(values), stats.std(values))

        anomalies: list[Anomaly] = []
        # 지연 감소는 이상이 아니다 (단방향)
        if z > medium:
            anomalies.append(
                Anomaly(
                    service_name=service_name,
                    metric_type=MetricType.LATENCY,
                    metric_name=metrics.LATENCY_P95.name,
                    anomaly_type=AnomalyType.SPIKE,
                    severity=self.severity_for(z),
                    actual_value=current,
                    expected_value=expected,
                    z_score=z,
                    threshold=medium,
                    detected_at=detected_at,
                    description=(
                        f"Response time spike detected: {current:.2f}ms "
                        f"(expected: {expected:.2f}ms, z-score: {z:.2f})"
                    ),
                )
            )

        spike_threshold = self.settings.response_time.spike_threshold
        if current > spike_threshold:
            anomalies.append(
                Anomaly(
                    service_name=service_name,
                    metric_type=MetricType.LATENCY,
                    metric_name=metrics.LATENCY_P95.name,
                    anomaly_type=AnomalyType.SUSTAINED_HIGH,
                    severity=Severity.HIGH,
                    actual_value=current,
                    expected_value=spike_threshold,
                    z_score=0.0,
                    threshold=spike_threshold,
                    detected_at=detected_at,
                    description=(
                        f"High latency detected: {current:.2f}ms exceeds threshold of "
                        f"{spike_threshold:.2f}ms"
                    ),
                )
            )
        return anomalies


def _latest_timestamp(snapshots: Sequence[Snapshot]) -> datetime:
    return max(s.timestamp for s in snapshots)
