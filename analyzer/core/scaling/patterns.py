"""
Time-series pattern detector.

스냅샷 timestamp 의 시간대(hour) / 요일(weekday) 로 CPU 를 묶어
일간·주간 주기성, 피크/저부하 시간대, 추세, 변동성을 찾는다.
그룹 집계는 pandas(frames 모듈)로 처리한다.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from analyzer.config.settings import AnalyzerSettings
from analyzer.core import frames, metrics, stats
from analyzer.models.scaling import LoadLevel, TimeSeriesPattern, TrendLabel
from analyzer.models.snapshot import Snapshot, chronological

logger = logging.getLogger(__name__)

# 추세 판정에 필요한 최소 샘플 수
MIN_TREND_SAMPLES = 10

# 피크 / 저부하 시간대 판정 배수 (시간대 평균들의 평균 대비)
PEAK_HOUR_FACTOR = 1.2
LOW_HOUR_FACTOR = 0.8

# 주간 패턴 판정에 필요한 최소 요일 수
MIN_WEEKDAYS = 5

TREND_STRENGTH: dict[TrendLabel, float] = {
    TrendLabel.RAPIDLY_INCREASING: 0.9,
    TrendLabel.RAPIDLY_DECREASING: 0.9,
    TrendLabel.INCREASING: 0.6,
    TrendLabel.DECREASING: 0.6,
    TrendLabel.STABLE: 0.3,
}


def classify_trend(change_percent: float) -> TrendLabel:
    """첫 1/4 대비 마지막 1/4 평균 변화율(%) → 추세 라벨."""
    if abs(change_percent) < 10:
        return TrendLabel.STABLE
    if change_percent >= 30:
        return TrendLabel.RAPIDLY_INCREASING
    if change_percent > 0:
        return TrendLabel.INCREASING
    if change_percent <= -30:
        return TrendLabel.RAPIDLY_DECREASING
    return TrendLabel.DECREASING


def load_level(ratio: float) -> LoadLevel:
    if ratio < 0.5:
        return LoadLevel.VERY_LOW
    if ratio < 0.8:
        return LoadLevel.LOW
    if ratio < 1.2:
        return LoadLevel.MEDIUM
    if ratio < 1.5:
        return LoadLevel.HIGH
    return LoadLevel.VERY_HIGH


def volatility_sentence(volatility: float) -> str:
    if volatility > 20:
        return "High volatility detected - expect significant fluctuations."
    if volatility > 10:
        return "Moderate volatility - some fluctuations expected."
    return "Low volatility - stable usage pattern."


class TimeSeriesPatternDetector:
    def __init__(self, settings: Optional[AnalyzerSettings] = None):
        self.settings = settings or AnalyzerSettings()

    def detect(self, snapshots: Sequence[Snapshot]) -> TimeSeriesPattern:
        """
        CPU 시계열의 주기성 / 추세 / 변동성 요약.

        빈 입력(또는 CPU 측정값 없음)이면 패턴 없음, STABLE 추세.
        """
        window = chronological(snapshots)
        frame = frames.metric_frame(window, metrics.CPU)
        if frame.empty:
            return TimeSeriesPattern(
                trend=TrendLabel.STABLE,
                trend_strength=TREND_STRENGTH[TrendLabel.STABLE],
                description=volatility_sentence(0.0),
            )

        scaling = self.settings.scaling
        hourly = frames.group_means(frame, "hour")
        daily = stats.variance(hourly.tolist()) > scaling.daily_variance_threshold

        weekly_means = frames.group_means(frame, "weekday")
        weekly = (
            len(weekly_means) >= MIN_WEEKDAYS
            and stats.variance(weekly_means.tolist()) > scaling.weekly_variance_threshold
        )

        hourly_mean = stats.mean(hourly.tolist())
        peak_hours = sorted(int(h) for h, v in hourly.items() if v > hourly_mean * PEAK_HOUR_FACTOR)
        low_hours = sorted(int(h) for h, v in hourly.items() if v < hourly_mean * LOW_HOUR_FACTOR)

        cpu = frame["value"].tolist()
        overall_mean = stats.mean(cpu)
        weekday_levels = {}
        if overall_mean > 0:
            weekday_levels = {int(day): load_level(v / overall_mean) for day, v in weekly_means.items()}

        trend = self.trend(cpu)
        volatility = stats.std(cpu)
        period = 24 if daily else (168 if weekly else 0)

        pattern = TimeSeriesPattern(
            has_daily_pattern=daily,
            has_weekly_pattern=weekly,
            peak_hours=peak_hours,
            low_activity_hours=low_hours,
            weekday_load_levels=weekday_levels,
            trend=trend,
            trend_strength=TREND_STRENGTH[trend],
            volatility=volatility,
            has_seasonality=daily or weekly,
            seasonality_period_hours=period,
            description=self.describe(daily, weekly, peak_hours, trend, volatility),
        )
        logger.debug(
            "Detected pattern daily=%s weekly=%s trend=%s volatility=%.2f",
            daily, weekly, trend.value, volatility,
        )
        return pattern

    def trend(self, values: Sequence[float]) -> TrendLabel:
        """시간순 값의 첫 1/4 평균 대비 마지막 1/4 평균 변화율로 추세를 판정한다."""
        if len(values) < MIN_TREND_SAMPLES:
            return TrendLabel.STABLE
        n = len(values)
        first = stats.mean(values[: n // 4])
        last = stats.mean(values[n * 3 // 4 :])
        if first == 0:
            return TrendLabel.STABLE
        return classify_trend((last - first) / first * 100.0)

    @staticmethod
    def describe(
        daily: bool,
        weekly: bool,
        peak_hours: list[int],
        trend: TrendLabel,
        volatility: float,
    ) -> str:
        parts = []
        if daily:
            parts.append("Daily pattern detected. ")
            if peak_hours:
                parts.append(f"Peak hours: {peak_hours}. ")
        if weekly:
            parts.append("Weekly pattern detected. ")
        if trend != TrendLabel.STABLE:
            parts.append(f"Trend: {trend.value}. ")
        parts.append(volatility_sentence(volatility))
        return "".join(parts)
