"""
Cost forecast.

스냅샷 사용량으로 현재 일 비용을 추정하고, CPU 추세(OLS 기울기)를 반영한
선형 외삽으로 days_ahead 일의 일별 비용과 95% 신뢰 구간을 만든다.

일 비용 모델: CPU % × $0.05 + heap 사용량 GB × $0.02
"""

from __future__ import annotations

import logging
import math
from typing import Optional, Sequence

from analyzer.config.settings import AnalyzerSettings
from analyzer.core import metrics, stats
from analyzer.core.quantities import BYTES_PER_GI
from analyzer.models.cost import CostForecast
from analyzer.models.snapshot import Snapshot, chronological

logger = logging.getLogger(__name__)

CPU_PERCENT_DAILY_COST = 0.05
MEMORY_GB_DAILY_COST = 0.02

MAX_DAYS_AHEAD = 90
Z_95 = 1.96
TREND_THRESHOLD_PERCENT = 5.0
WARNING_THRESHOLD_PERCENT = 20.0

BASELINE_DAILY_COST = 10.0
MODEL_TYPE = "Trend-adjusted linear projection"


def daily_cost(snapshot: Snapshot) -> float:
    cpu = snapshot.cpu_percent or 0.0
    heap_gb = (snapshot.heap_used_bytes or 0.0) / BYTES_PER_GI
    return cpu * CPU_PERCENT_DAILY_COST + heap_gb * MEMORY_GB_DAILY_COST


def accuracy_score(sample_count: int) -> float:
    """샘플이 많을수록 높아지며 최대 95."""
    return 70.0 + min(25.0, sample_count * 0.5)


class CostForecaster:
    def __init__(self, settings: Optional[AnalyzerSettings] = None):
        self.settings = settings or AnalyzerSettings()

    def forecast(self, service_name: str, snapshots: Sequence[Snapshot], days_ahead: int = 30) -> CostForecast:
        """
        days_ahead 일 동안의 일별 비용 예측.

        Parameters
        ----------
        service_name : str
            대상 서비스.
        snapshots : Sequence[Snapshot]
            과거 스냅샷.
        days_ahead : int
            예측 일수 (1~90).

        Raises
        ------
        ValueError
            days_ahead 가 1~90 범위를 벗어난 경우.
        """
        if not 1 <= days_ahead <= MAX_DAYS_AHEAD:
            raise ValueError(f"days_ahead must be between 1 and {MAX_DAYS_AHEAD}, got {days_ahead}")

        if not snapshots:
            logger.warning("No historical metrics found for service %s", service_name)
            return self.default_forecast(service_name, days_ahead)

        window = chronological(snapshots)
        current_monthly = stats.mean([daily_cost(s) for s in window]) * 30.0
        cpu = metrics.CPU.values(window)
        trend = stats.trend_slope(cpu) / 100.0
        volatility = stats.std(cpu)
        daily_average = current_monthly / 30.0

        predictions, upper, lower = [], [], []
        for i in range(days_ahead):
            value = max(0.0, daily_average * (1 + trend * (i + 1) / 30.0))
            margin = Z_95 * volatility * math.sqrt(i + 1)
            predictions.append(value)
            upper.append(value + margin)
            lower.append(max(0.0, value - margin))

        # 예측 기간 길이와 무관하게 30일 기준으로 비교
        predicted_monthly = stats.mean(predictions) * 30.0
        change = (predicted_monthly - current_monthly) / current_monthly * 100 if current_monthly > 0 else 0.0
        if change > TREND_THRESHOLD_PERCENT:
            direction = "INCREASING"
        elif change < -TREND_THRESHOLD_PERCENT:
            direction = "DECREASING"
        else:
            direction = "STABLE"

        logger.info(
            "Cost forecast for %s: %.2f -> %.2f (%s, %d days)",
            service_name, current_monthly, predicted_monthly, direction, days_ahead,
        )
        return CostForecast(
            service_name=service_name,
            days_ahead=days_ahead,
            predictions=predictions,
            upper_bound=upper,
            lower_bound=lower,
            model_type=MODEL_TYPE,
            current_monthly_cost=current_monthly,
            predicted_monthly_cost=predicted_monthly,
            trend=direction,
            percentage_change=change,
            accuracy_score=accuracy_score(len(window)),
            warning="Cost increase exceeds 20% threshold" if change > WARNING_THRESHOLD_PERCENT else None,
        )

    @staticmethod
    def default_forecast(service_name: str, days_ahead: int) -> CostForecast:
        return CostForecast(
            service_name=service_name,
            days_ahead=days_ahead,
            predictions=[BASELINE_DAILY_COST] * days_ahead,
            upper_bound=[BASELINE_DAILY_COST * 1.2] * days_ahead,
            lower_bound=[BASELINE_DAILY_COST * 0.8] * days_ahead,
            model_type="Baseline Estimate (No Historical Data)",
            current_monthly_cost=BASELINE_DAILY_COST * 30,
            predicted_monthly_cost=BASELINE_DAILY_COST * 30,
            trend="STABLE",
            percentage_change=0.0,
            accuracy_score=50.0,
            warning="No historical data available - using baseline estimates",
        )
