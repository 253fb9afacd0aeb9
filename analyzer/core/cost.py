"""
Cost calculation.

리소스 단위(millicore, Mi)를 고정 단가로 월/연 비용으로 환산한다.
통계가 아닌 순수 계산이며, 모든 추천 결과가 최종적으로 이 모듈을 거친다.

기본 단가 (설정으로 변경 가능):
- CPU: $30 / core / month, $0.042 / core / hour
- Memory: $5 / GB / month, $0.0052 / GB / hour
"""

from __future__ import annotations

import math
from typing import Optional, Sequence

from analyzer.config.settings import AnalyzerSettings
from analyzer.core import stats
from analyzer.core.quantities import Quantity, parse_cpu_cores, parse_memory_gb
from analyzer.models.analysis import CostAnalysis, CurrentResources

# 빠른 추정(estimate_savings)에서 가정하는 현재 할당량
BASELINE_CPU_CORES = 1.0
BASELINE_MEMORY_GB = 2.0


def round2(value: float) -> float:
    """소수 둘째 자리 half-up 반올림."""
    return math.floor(value * 100.0 + 0.5) / 100.0


class CostCalculator:
    def __init__(self, settings: Optional[AnalyzerSettings] = None):
        self.settings = settings or AnalyzerSettings()

    def monthly_cost(self, cpu: Quantity, memory: Quantity) -> float:
        """request 기준 월 비용 (반올림 없음)."""
        cost = self.settings.cost
        return parse_cpu_cores(cpu) * cost.cpu_core_month + parse_memory_gb(memory) * cost.memory_gb_month

    def cost_analysis(
        self,
        current: CurrentResources,
        recommended_cpu: Quantity,
        recommended_memory: Quantity,
    ) -> CostAnalysis:
        """
        현재 할당 대비 추천 할당의 비용 비교.

        Raises
        ------
        QuantityParseError
            수량 문자열 형식이 잘못된 경우.
        """
        current_cost = self.monthly_cost(current.cpu_request, current.memory_request)
        recommended_cost = self.monthly_cost(recommended_cpu, recommended_memory)
        savings = current_cost - recommended_cost
        percentage = int(savings / current_cost * 100) if current_cost > 0 else 0

        return CostAnalysis(
            current_monthly_cost=round2(current_cost),
            recommended_monthly_cost=round2(recommended_cost),
            monthly_savings=round2(savings),
            annual_savings=round2(savings * 12),
            savings_percentage=percentage,
        )

    def estimate_savings(self, cpu_percent: Sequence[float], heap_percent: Sequence[float]) -> float:
        """
        1 core / 2 GB 기준 할당 대비 P95 기반 빠른 절감액 추정 (0 이상).

        추천 할당은 0.1 단위로 올림한다.
        """
        cost = self.settings.cost
        margin = 1.0 + self.settings.sizing.safety_margin
        p95_cpu = stats.percentile(cpu_percent, 95)
        p95_memory = stats.percentile(heap_percent, 95)

        recommended_cores = stats.ceil_clean(p95_cpu / 100.0 * BASELINE_CPU_CORES * margin * 10) / 10.0
        recommended_gb = stats.ceil_clean(p95_memory / 100.0 * BASELINE_MEMORY_GB * margin * 10) / 10.0

        current_cost = BASELINE_CPU_CORES * cost.cpu_core_month + BASELINE_MEMORY_GB * cost.memory_gb_month
        recommended_cost = recommended_cores * cost.cpu_core_month + recommended_gb * cost.memory_gb_month
        return max(0.0, round2(current_cost - recommended_cost))

    def hourly_cost(self, cpu_cores: float, memory_gb: float) -> float:
        cost = self.settings.cost
        return cpu_cores * cost.cpu_core_hour + memory_gb * cost.memory_gb_hour

    def replica_monthly_cost(self, replicas: int, cpu_cores_per_pod: float, memory_gb_per_pod: float) -> float:
        """시간 단가 × 월 시간 수 기준 replica 전체 월 비용."""
        return replicas * self.hourly_cost(cpu_cores_per_pod, memory_gb_per_pod) * self.settings.cost.hours_per_month
