"""
Scaling analysis service.

HPA / VPA / 비용 인지 / 커스텀 메트릭 권고와 시간별 예측을 한 번에 실행하고
우선 권고, 긴급도, 주요 발견, 조치 항목, 기대 절감액을 요약한다.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from analyzer.config.settings import AnalyzerSettings
from analyzer.core.cost import round2
from analyzer.core.scaling.cost_aware import CostAwareScalingAdvisor
from analyzer.core.scaling.custom_metrics import CustomMetricsAdvisor
from analyzer.core.scaling.forecaster import PredictiveScalingForecaster
from analyzer.core.scaling.hpa import HPAAdvisor
from analyzer.core.scaling.patterns import TimeSeriesPatternDetector
from analyzer.core.scaling.vpa import VPAAdvisor
from analyzer.models.analysis import CurrentResources
from analyzer.models.scaling import (
    CostAwareScaling,
    HPARecommendation,
    ScalingAnalysis,
    ScalingEventType,
    ScalingPrediction,
    ScalingSummary,
    TimeSeriesPattern,
    TrendLabel,
    VPARecommendation,
)
from analyzer.models.snapshot import Snapshot, chronological

logger = logging.getLogger(__name__)

INCREASING_TRENDS = (TrendLabel.INCREASING, TrendLabel.RAPIDLY_INCREASING)


PRIMARY_BY_VPA_LABEL: dict[str, str] = {
    "Use both HPA and VPA": "USE_BOTH",
    "Use HPA": "USE_HPA",
    "Use VPA": "USE_VPA",
    "Manual tuning": "MANUAL_SCALING",
}


def primary_recommendation(vpa: VPARecommendation) -> str:
    """VPA 권고 라벨 → 우선 권고. 데이터 부족 등 그 밖의 라벨은 HPA."""
    return PRIMARY_BY_VPA_LABEL.get(vpa.recommendation, "USE_HPA")


def urgency(hpa: HPARecommendation, predictions: Sequence[ScalingPrediction]) -> str:
    if hpa.current_replicas < hpa.min_replicas:
        return "CRITICAL"
    peak_events = sum(
        1
        for prediction in predictions
        for event in prediction.upcoming_events
        if event.event_type == ScalingEventType.PEAK_LOAD
    )
    if peak_events > 5:
        return "HIGH"
    if peak_events > 2:
        return "MEDIUM"
    if hpa.estimated_cost_impact < -50:
        return "MEDIUM"
    return "LOW"


def key_findings(
    hpa: HPARecommendation,
    vpa: VPARecommendation,
    cost: CostAwareScaling,
    pattern: Optional[TimeSeriesPattern],
) -> list[str]:
    findings = []
    if hpa.current_replicas != hpa.recommended_replicas:
        findings.append(
            "Current replica count (%d) differs from recommended (%d)"
            % (hpa.current_replicas, hpa.recommended_replicas)
        )
    if abs(vpa.estimated_monthly_savings) > 20:
        findings.append("Resource right-sizing can save $%.2f/month" % vpa.estimated_monthly_savings)
    if cost.cost_optimized is not None and cost.cost_optimized.savings_percentage > 30:
        findings.append(
            "Cost-optimized strategy can reduce costs by %.1f%%" % cost.cost_optimized.savings_percentage
        )
    if pattern is not None:
        if pattern.has_daily_pattern:
            findings.append("Daily usage pattern detected - consider scheduled scaling")
        if pattern.trend in INCREASING_TRENDS:
            findings.append("Increasing trend detected - proactive scaling recommended")
    return findings


def action_items(
    primary: str,
    hpa: HPARecommendation,
    vpa: VPARecommendation,
    cost: CostAwareScaling,
) -> list[str]:
    actions = []
    if primary == "USE_HPA":
        actions.append("Deploy HPA with recommended configuration")
        actions.append(
            "Set min replicas: %d, max replicas: %d, target CPU: %d%%"
            % (hpa.min_replicas, hpa.max_replicas, hpa.target_cpu_utilization)
        )
    elif primary == "USE_VPA":
        actions.append("Deploy VPA with recommended configuration")
        actions.append(
            "Set resources - CPU: %s, Memory: %s"
            % (vpa.recommended_requests.cpu, vpa.recommended_requests.memory)
        )
    elif primary == "USE_BOTH":
        actions.append("Deploy both HPA and VPA for optimal scaling")
        actions.append("HPA will handle horizontal scaling, VPA will right-size resources")
    elif primary == "MANUAL_SCALING":
        actions.append("Current configuration is optimal")
        actions.append("Monitor metrics and reassess periodically")
    actions.append("Consider %s scaling strategy for cost optimization" % cost.recommended_option.lower())
    return actions


def expected_savings(cost: CostAwareScaling, vpa: VPARecommendation) -> float:
    savings = 0.0
    if cost.balanced is not None:
        savings += cost.balanced.savings_amount
    if vpa.estimated_monthly_savings > 0:
        savings += vpa.estimated_monthly_savings
    return round2(savings)


class ScalingAnalysisService:
    def __init__(self, settings: Optional[AnalyzerSettings] = None):
        self.settings = settings or AnalyzerSettings()
        self.detector = TimeSeriesPatternDetector(self.settings)
        self.forecaster = PredictiveScalingForecaster(self.settings, self.detector)
        self.hpa = HPAAdvisor(self.settings)
        self.vpa = VPAAdvisor(self.settings)
        self.cost_aware = CostAwareScalingAdvisor(self.settings)
        self.custom_metrics = CustomMetricsAdvisor(self.settings)

    def analyze(
        self,
        service_name: str,
        snapshots: Sequence[Snapshot],
        now: Optional[datetime] = None,
        current_replicas: Optional[int] = None,
        current_resources: Optional[CurrentResources] = None,
    ) -> ScalingAnalysis:
        logger.info("Starting scaling analysis for %s (%d samples)", service_name, len(snapshots))
        window = chronological(snapshots)

        hpa = self.hpa.recommend(service_name, window, current_replicas)
        vpa = self.vpa.recommend(service_name, window, current_resources)
        cost = self.cost_aware.analyze(service_name, window, current_replicas)
        custom = self.custom_metrics.analyze(service_name, window, current_replicas)
        predictions = self.forecaster.predict(service_name, window, now=now, current_replicas=current_replicas)
        pattern = self.detector.detect(window) if window else None

        primary = primary_recommendation(vpa)
        summary = ScalingSummary(
            primary_recommendation=primary,
            urgency=urgency(hpa, predictions),
            key_findings=key_findings(hpa, vpa, cost, pattern),
            action_items=action_items(primary, hpa, vpa, cost),
            expected_monthly_savings=expected_savings(cost, vpa),
            confidence=(hpa.confidence + vpa.confidence) / 2.0,
        )

        return ScalingAnalysis(
            service_name=service_name,
            analyzed_at=window[-1].timestamp if window else None,
            hpa_recommendation=hpa,
            vpa_recommendation=vpa,
            cost_aware_scaling=cost,
            predictions=predictions,
            detected_pattern=pattern,
            custom_metrics_analysis=custom,
            summary=summary,
        )
