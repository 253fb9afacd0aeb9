"""
Predictive scaling forecaster.

과거 스냅샷에서 "같은 시간대 + 같은 요일" 샘플을 모아 평균을 내고,
감지된 추세 배수를 곱해 앞으로 horizon 시간 동안의 시간별 replica 수를 예측한다.

- 히스토리가 scaling.min_history 미만이면 호출 전체가 빈 리스트를 돌려준다.
- 현재 시각(now)은 지정하지 않으면 가장 최근 스냅샷 timestamp 를 쓴다.
  (벽시계를 읽지 않으므로 같은 입력이면 항상 같은 결과)
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, timedelta
from typing import Optional, Sequence

from analyzer.config.settings import AnalyzerSettings
from analyzer.core import metrics
from analyzer.core.scaling.patterns import TimeSeriesPatternDetector
from analyzer.models.scaling import (
    ScalingEvent,
    ScalingEventType,
    ScalingPrediction,
    TimeSeriesPattern,
    TrendLabel,
)
from analyzer.models.snapshot import Snapshot, chronological

logger = logging.getLogger(__name__)

TREND_MULTIPLIER: dict[TrendLabel, float] = {
    TrendLabel.RAPIDLY_INCREASING: 1.15,
    TrendLabel.INCREASING: 1.05,
    TrendLabel.STABLE: 1.0,
    TrendLabel.DECREASING: 0.95,
    TrendLabel.RAPIDLY_DECREASING: 0.85,
}

# 이벤트 판정 임계값 (CPU %)
PEAK_LOAD_CPU = 80.0
LOW_ACTIVITY_CPU = 30.0

# 슬롯 데이터가 없을 때의 기본값
DEFAULT_USAGE = 50.0
DEFAULT_CONFIDENCE = 0.3


def trend_multiplier(trend: TrendLabel) -> float:
    """
    Raises
    ------
    KeyError
        매핑되지 않은 추세 라벨.
    """
    return TREND_MULTIPLIER[trend]


class PredictiveScalingForecaster:
    def __init__(
        self,
        settings: Optional[AnalyzerSettings] = None,
        detector: Optional[TimeSeriesPatternDetector] = None,
    ):
        self.settings = settings or AnalyzerSettings()
        self.detector = detector or TimeSeriesPatternDetector(self.settings)

    def predict(
        self,
        service_name: str,
        snapshots: Sequence[Snapshot],
        now: Optional[datetime] = None,
        horizon_hours: Optional[int] = None,
        current_replicas: Optional[int] = None,
    ) -> list[ScalingPrediction]:
        """
        향후 horizon_hours 시간의 시간별 스케일링 예측.

        Parameters
        ----------
        service_name : str
            대상 서비스.
        snapshots : Sequence[Snapshot]
            과거 스냅샷 (순서 무관).
        now : datetime, optional
            예측 기준 시각. 기본값은 가장 최근 스냅샷 timestamp.
        horizon_hours : int, optional
            예측 슬롯 수. 기본값은 scaling.horizon_hours.
        current_replicas : int, optional
            현재 replica 수. 기본값은 scaling.default_replicas.

        Returns
        -------
        list[ScalingPrediction]
            슬롯 k (1..horizon) 마다 하나. 히스토리가 부족하면 빈 리스트.
        """
        scaling = self.settings.scaling
        if len(snapshots) < scaling.min_history:
            logger.info(
                "Insufficient history for %s: %d samples (need %d)",
                service_name, len(snapshots), scaling.min_history,
            )
            return []

        window = chronological(snapshots)
        pattern = self.detector.detect(window)
        now = now or window[-1].timestamp
        horizon = horizon_hours if horizon_hours is not None else scaling.horizon_hours
        replicas = current_replicas if current_replicas is not None else scaling.default_replicas

        predictions = []
        for k in range(1, horizon + 1):
            target = now + timedelta(hours=k)
            slot = [
                s for s in window
                if s.timestamp.hour == target.hour and s.timestamp.weekday() == target.weekday()
            ]
            cpu_values = metrics.CPU.values(slot)
            if not cpu_values:
                predictions.append(self._default_prediction(service_name, now, target, replicas, pattern))
                continue
            memory_values = metrics.HEAP_PERCENT.values(slot)
            predictions.append(
                self._slot_prediction(
                    service_name, now, target, replicas, pattern, cpu_values, memory_values,
                )
            )

        logger.info("Generated %d scaling predictions for %s", len(predictions), service_name)
        return predictions

    def _slot_prediction(
        self,
        service_name: str,
        now: datetime,
        target: datetime,
        current_replicas: int,
        pattern: TimeSeriesPattern,
        cpu_values: list[float],
        memory_values: list[float],
    ) -> ScalingPrediction:
        multiplier = trend_multiplier(pattern.trend)
        cpu = sum(cpu_values) / len(cpu_values) * multiplier
        memory = (sum(memory_values) / len(memory_values) if memory_values else DEFAULT_USAGE) * multiplier

        recommended = self.recommended_replicas(cpu, memory, current_replicas)
        confidence = self.confidence(len(cpu_values), pattern)

        events = []
        if cpu > PEAK_LOAD_CPU:
            events.append(ScalingEvent(
                event_time=target,
                event_type=ScalingEventType.PEAK_LOAD,
                recommended_replicas=recommended,
                reason="High CPU usage predicted",
                confidence=0.8,
            ))
        elif cpu < LOW_ACTIVITY_CPU:
            events.append(ScalingEvent(
                event_time=target,
                event_type=ScalingEventType.LOW_ACTIVITY,
                recommended_replicas=recommended,
                reason="Low CPU usage predicted - cost optimization opportunity",
                confidence=0.7,
            ))

        return ScalingPrediction(
            service_name=service_name,
            prediction_time=now,
            forecast_for=target,
            predicted_cpu=round(cpu, 2),
            predicted_memory=round(memory, 2),
            predicted_request_rate=cpu * 10,
            current_replicas=current_replicas,
            recommended_replicas=recommended,
            confidence=confidence,
            reason=self.reason(target, cpu, pattern),
            detected_pattern=pattern,
            upcoming_events=events,
        )

    def recommended_replicas(self, cpu: float, memory: float, current_replicas: int) -> int:
        """CPU / 메모리 중 더 많은 replica 를 요구하는 쪽을 따르고 [min, max] 로 자른다."""
        scaling = self.settings.scaling
        target = scaling.target_utilization
        by_cpu = math.ceil(cpu / target * current_replicas)
        by_memory = math.ceil(memory / target * current_replicas)
        return min(scaling.max_replicas, max(scaling.min_replicas, max(by_cpu, by_memory)))

    @staticmethod
    def confidence(slot_samples: int, pattern: TimeSeriesPattern) -> float:
        confidence = 0.5
        if slot_samples > 50:
            confidence += 0.2
        elif slot_samples > 20:
            confidence += 0.1
        if pattern.has_daily_pattern:
            confidence += 0.15
        if pattern.has_weekly_pattern:
            confidence += 0.10
        if pattern.volatility < 10:
            confidence += 0.15
        elif pattern.volatility > 20:
            confidence -= 0.1
        return min(0.95, max(0.3, confidence))

    @staticmethod
    def reason(target: datetime, cpu: float, pattern: TimeSeriesPattern) -> str:
        parts = []
        if target.hour in pattern.peak_hours:
            parts.append("Peak hour detected. ")
        elif target.hour in pattern.low_activity_hours:
            parts.append("Low activity period. ")
        if target.weekday() >= 5:
            parts.append("Weekend - typically lower load. ")
        if cpu > PEAK_LOAD_CPU:
            parts.append("High CPU usage expected - scale up recommended.")
        elif cpu < LOW_ACTIVITY_CPU:
            parts.append("Low CPU usage expected - scale down opportunity.")
        else:
            parts.append("Normal load expected.")
        return "".join(parts)

    @staticmethod
    def _default_prediction(
        service_name: str,
        now: datetime,
        target: datetime,
        current_replicas: int,
        pattern: TimeSeriesPattern,
    ) -> ScalingPrediction:
        return ScalingPrediction(
            service_name=service_name,
            prediction_time=now,
            forecast_for=target,
            predicted_cpu=DEFAULT_USAGE,
            predicted_memory=DEFAULT_USAGE,
            current_replicas=current_replicas,
            recommended_replicas=current_replicas,
            confidence=DEFAULT_CONFIDENCE,
            reason="Insufficient historical data for accurate prediction",
            detected_pattern=pattern,
        )
