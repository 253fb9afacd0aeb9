from analyzer.core.scaling.analysis import ScalingAnalysisService
from analyzer.core.scaling.cost_aware import CostAwareScalingAdvisor
from analyzer.core.scaling.custom_metrics import CustomMetricsAdvisor
from analyzer.core.scaling.forecaster import PredictiveScalingForecaster
from analyzer.core.scaling.hpa import HPAAdvisor
from analyzer.core.scaling.patterns import TimeSeriesPatternDetector
from analyzer.core.scaling.vpa import VPAAdvisor

__all__ = [
    "CostAwareScalingAdvisor",
    "CustomMetricsAdvisor",
    "HPAAdvisor",
    "PredictiveScalingForecaster",
    "ScalingAnalysisService",
    "TimeSeriesPatternDetector",
    "VPAAdvisor",
]
