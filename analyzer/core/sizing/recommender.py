# analyzer/core/sizing/recommender.py

"""
Resource sizing recommender.

역할:
- 스냅샷 윈도우 → 차원별 통계 → 전략(CPU/메모리/풀)별 추천값 → AnalysisResult
- AnalysisResult + 비용 분석 + 이슈 목록 → ResourceRecommendation (외부 레이어용 최종 레코드)
- 빈 입력에도 예외 없이 문서화된 최소/기본값을 돌려준다.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from analyzer.config.settings import AnalyzerSettings
from analyzer.core import metrics
from analyzer.core.cost import CostCalculator
from analyzer.core.sizing.base import Draft, ResourceAnalysisStrategy
from analyzer.core.sizing.cpu import CpuAnalysisStrategy
from analyzer.core.sizing.memory import MemoryAnalysisStrategy
from analyzer.core.sizing.pool import ConnectionPoolAnalysisStrategy
from analyzer.core.stats import EMPTY_STATS, ceil_clean, percentile, std, summarize
from analyzer.models.analysis import (
    AnalysisResult,
    ConnectionPoolConfig,
    CurrentResources,
    KubernetesResources,
    ResourceRecommendation,
    RuntimeHeapConfig,
    ThreadPoolConfig,
)
from analyzer.models.snapshot import Snapshot, chronological

logger = logging.getLogger(__name__)

# 런타임 힙 추가 플래그 (G1GC 기준)
HEAP_FLAGS: dict[str, str] = {
    "XX:+UseG1GC": "",
    "XX:MaxGCPauseMillis": "200",
    "XX:+HeapDumpOnOutOfMemoryError": "",
}


class ResourceSizingRecommender:
    """
    Parameters
    ----------
    settings : AnalyzerSettings, optional
        마진 / 최소값 / 단가 설정.
    strategies : Sequence[ResourceAnalysisStrategy], optional
        차원별 전략. 기본은 CPU, 메모리, 커넥션 풀 순서.
    """

    def __init__(
        self,
        settings: Optional[AnalyzerSettings] = None,
        strategies: Optional[Sequence[ResourceAnalysisStrategy]] = None,
    ):
        self.settings = settings or AnalyzerSettings()
        self.strategies: list[ResourceAnalysisStrategy] = list(strategies) if strategies is not None else [
            CpuAnalysisStrategy(self.settings),
            MemoryAnalysisStrategy(self.settings),
            ConnectionPoolAnalysisStrategy(self.settings),
        ]
        self.cost = CostCalculator(self.settings)

    def analyze(
        self,
        service_name: str,
        snapshots: Sequence[Snapshot],
        current: Optional[CurrentResources] = None,
    ) -> AnalysisResult:
        """스냅샷 윈도우로부터 AnalysisResult 를 만든다."""
        current = current or CurrentResources()
        if not snapshots:
            logger.warning("No snapshots for service %s, returning minimum sizing", service_name)
            return self._default_result(service_name, current)

        window = chronological(snapshots)
        draft = self._base_draft(service_name, current)
        draft["analyzed_at"] = window[-1].timestamp
        draft["sample_count"] = len(window)

        for strategy in self.strategies:
            values = strategy.window(window)
            strategy.apply(draft, window, summarize(values))
            logger.debug("Applied %s strategy on %d samples", strategy.metric_type, len(values))

        cpu_values = metrics.CPU.values(window)
        heap_values = metrics.HEAP_PERCENT.values(window)
        max_threads, min_spare = self.thread_pool_targets(window)
        draft.update(
            recommended_max_threads=max_threads,
            recommended_min_spare_threads=min_spare,
            estimated_monthly_savings=self.cost.estimate_savings(cpu_values, heap_values),
            confidence=self.confidence(len(window), cpu_values, heap_values),
        )

        result = AnalysisResult(**draft)
        logger.info(
            "Analysis completed for %s: cpu=%s memory=%s confidence=%.2f",
            service_name,
            result.recommended_cpu_request,
            result.recommended_memory_request,
            result.confidence,
        )
        return result

    def detect_issues(self, snapshots: Sequence[Snapshot]) -> dict[str, str]:
        """모든 전략의 이슈를 합친다."""
        window = chronological(snapshots)
        issues: dict[str, str] = {}
        for strategy in self.strategies:
            issues.update(strategy.detect_issues(window))
        return issues

    def recommend(
        self,
        service_name: str,
        snapshots: Sequence[Snapshot],
        current: Optional[CurrentResources] = None,
    ) -> ResourceRecommendation:
        """AnalysisResult 를 외부 레이어용 최종 추천 레코드로 조립한다."""
        if not snapshots:
            return ResourceRecommendation(
                service_name=service_name,
                confidence=0.0,
                rationale="No metrics available for analysis",
                detected_issues={"No Data": "Service metrics not found"},
            )

        current = current or CurrentResources()
        analysis = self.analyze(service_name, snapshots, current)

        return ResourceRecommendation(
            service_name=service_name,
            kubernetes=KubernetesResources(
                cpu_request=str(analysis.recommended_cpu_request),
                cpu_limit=str(analysis.recommended_cpu_limit),
                memory_request=str(analysis.recommended_memory_request),
                memory_limit=str(analysis.recommended_memory_limit),
            ),
            runtime_heap=RuntimeHeapConfig(
                heap_min=f"{int(analysis.recommended_heap_min.value)}m",
                heap_max=f"{int(analysis.recommended_heap_max.value)}m",
                additional_flags=dict(HEAP_FLAGS),
            ),
            connection_pool=ConnectionPoolConfig(
                maximum_pool_size=analysis.recommended_max_pool_size,
                minimum_idle=analysis.recommended_min_idle,
            ),
            thread_pool=ThreadPoolConfig(
                max_threads=analysis.recommended_max_threads,
                min_spare_threads=analysis.recommended_min_spare_threads,
            ),
            cost_analysis=self.cost.cost_analysis(
                current, analysis.recommended_cpu_request, analysis.recommended_memory_request
            ),
            confidence=analysis.confidence,
            rationale=build_rationale(analysis),
            detected_issues=self.detect_issues(snapshots),
        )

    def thread_pool_targets(self, snapshots: Sequence[Snapshot]) -> tuple[int, int]:
        """
        (max threads, min spare threads).

        스레드 데이터가 없으면 기본값(200 / 25).
        """
        sizing = self.settings.sizing
        threads = metrics.THREADS.values(snapshots)
        if not threads:
            return sizing.default_max_threads, sizing.default_min_spare_threads
        max_threads = max(
            sizing.min_max_threads,
            ceil_clean(percentile(threads, 95) * (1.0 + sizing.safety_margin)),
        )
        return max_threads, max(1, max_threads // 8)

    def confidence(self, sample_count: int, cpu_values: Sequence[float], heap_values: Sequence[float]) -> float:
        """
        0.5 기본 + 표본 크기 가산 + 변동성이 낮을 때 가산, 최대 0.95.
        """
        score = 0.5
        if sample_count > 50:
            score += 0.2
        elif sample_count > 20:
            score += 0.1
        if std(cpu_values) < 10:
            score += 0.15
        if std(heap_values) < 10:
            score += 0.15
        return min(0.95, score)

    def _base_draft(self, service_name: str, current: CurrentResources) -> Draft:
        return {
            "service_name": service_name,
            "current_cpu_request": current.cpu_request,
            "current_cpu_limit": current.cpu_limit,
            "current_memory_request": current.memory_request,
            "current_memory_limit": current.memory_limit,
        }

    def _default_result(self, service_name: str, current: CurrentResources) -> AnalysisResult:
        draft = self._base_draft(service_name, current)
        # 빈 통계로 각 전략을 돌리면 최소값 기반 추천이 채워진다
        for strategy in self.strategies:
            strategy.apply(draft, [], EMPTY_STATS)
        sizing = self.settings.sizing
        draft.update(
            recommended_max_threads=sizing.default_max_threads,
            recommended_min_spare_threads=sizing.default_min_spare_threads,
            confidence=0.0,
        )
        return AnalysisResult(**draft)


def build_rationale(analysis: AnalysisResult) -> str:
    parts = [
        "Analysis based on recent metrics.",
        f"CPU P95: {analysis.p95_cpu:.1f}%, recommending {analysis.recommended_cpu_request} "
        f"(current: {analysis.current_cpu_request}).",
        f"Memory P95: {analysis.p95_memory:.1f}%, recommending {analysis.recommended_memory_request} "
        f"(current: {analysis.current_memory_request}).",
    ]
    if analysis.cpu_throttling_detected:
        parts.append("CPU throttling detected.")
    if analysis.memory_leak_detected:
        parts.append("Potential memory leak detected.")
    if analysis.pool_exhaustion_detected:
        parts.append("Connection pool exhaustion detected.")
    return " ".join(parts)
