# 스케일링 예측 / HPA / VPA / 비용 인지 스케일링 스키마

from datetime import datetime
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class TrendLabel(str, Enum):
    STABLE = "STABLE"
    INCREASING = "INCREASING"
    RAPIDLY_INCREASING = "RAPIDLY_INCREASING"
    DECREASING = "DECREASING"
    RAPIDLY_DECREASING = "RAPIDLY_DECREASING"


class LoadLevel(str, Enum):
    VERY_LOW = "VERY_LOW"
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    VERY_HIGH = "VERY_HIGH"


class TimeSeriesPattern(_Frozen):
    """
    시간대/요일 주기성과 추세 요약.

    weekday_load_levels 의 key 는 요일 번호 (월요일=0 ... 일요일=6).
    """

    has_daily_pattern: bool = False
    has_weekly_pattern: bool = False
    peak_hours: list[int] = Field(default_factory=list)
    low_activity_hours: list[int] = Field(default_factory=list)
    weekday_load_levels: dict[int, LoadLevel] = Field(default_factory=dict)
    trend: TrendLabel = TrendLabel.STABLE
    trend_strength: float = 0.3
    volatility: float = 0.0
    has_seasonality: bool = False
    seasonality_period_hours: int = 0
    description: str = ""


class ScalingEventType(str, Enum):
    PEAK_LOAD = "PEAK_LOAD"
    LOW_ACTIVITY = "LOW_ACTIVITY"


class ScalingEvent(_Frozen):
    event_time: datetime
    event_type: ScalingEventType
    recommended_replicas: int
    reason: str
    confidence: float


class ScalingPrediction(_Frozen):
    service_name: str
    prediction_time: datetime
    forecast_for: datetime
    predicted_cpu: float
    predicted_memory: float
    predicted_request_rate: Optional[float] = None
    current_replicas: int
    recommended_replicas: int
    confidence: float = Field(ge=0.0, le=1.0)
    reason: str
    detected_pattern: Optional[TimeSeriesPattern] = None
    upcoming_events: list[ScalingEvent] = Field(default_factory=list)


# --------------------------------------------------------------------------- #
# HPA
# --------------------------------------------------------------------------- #
class LoadClass(str, Enum):
    HIGHLY_VARIABLE = "HIGHLY_VARIABLE"
    MODERATE_VARIABLE = "MODERATE_VARIABLE"
    HIGH_STEADY = "HIGH_STEADY"
    LOW_STEADY = "LOW_STEADY"
    STABLE = "STABLE"


class ScalingPolicy(_Frozen):
    stabilization_window_seconds: int
    period_seconds: int
    percentage_per_scale: int
    pods_per_scale: Optional[int] = None
    behavior: Literal["Conservative", "Moderate", "Aggressive"]
    description: str


class CustomMetricTarget(_Frozen):
    metric_name: str
    metric_type: Literal["Pods", "Object", "External"] = "Pods"
    target_value: float
    target_type: Literal["Value", "AverageValue"] = "AverageValue"
    description: str


class HPARecommendation(_Frozen):
    service_name: str
    load_class: Optional[LoadClass] = None
    min_replicas: int
    max_replicas: int
    current_replicas: int
    recommended_replicas: int
    target_cpu_utilization: int
    target_memory_utilization: int
    scale_up_policy: Optional[ScalingPolicy] = None
    scale_down_policy: Optional[ScalingPolicy] = None
    custom_metrics: list[CustomMetricTarget] = Field(default_factory=list)
    rationale: str
    confidence: float
    estimated_cost_impact: float = 0.0


# --------------------------------------------------------------------------- #
# VPA
# --------------------------------------------------------------------------- #
VPAUpdateMode = Literal["Off", "Initial", "Recreate", "Auto"]


class ResourceRequests(_Frozen):
    cpu: str
    memory: str


class ResourceRange(_Frozen):
    min: str
    max: str


class ResourcePolicy(_Frozen):
    cpu_range: ResourceRange
    memory_range: ResourceRange
    controlled_resources: Literal["RequestsAndLimits", "RequestsOnly"] = "RequestsAndLimits"


class VPARecommendation(_Frozen):
    service_name: str
    current_requests: ResourceRequests
    current_limits: Optional[ResourceRequests] = None
    recommended_requests: ResourceRequests
    recommended_limits: Optional[ResourceRequests] = None
    update_mode: VPAUpdateMode
    resource_policy: Optional[ResourcePolicy] = None
    rationale: str
    confidence: float
    estimated_monthly_savings: float = 0.0
    recommendation: str


# --------------------------------------------------------------------------- #
# Cost-aware scaling
# --------------------------------------------------------------------------- #
CostOptionName = Literal["PERFORMANCE", "COST", "BALANCED"]


class ScalingOption(_Frozen):
    strategy: str
    min_replicas: int
    max_replicas: int
    average_replicas: int
    cpu_request: str
    memory_request: str
    monthly_cost: float
    savings_percentage: float
    savings_amount: float
    expected_p95_response_time: float
    expected_p99_response_time: float
    performance_score: float
    pros: list[str] = Field(default_factory=list)
    cons: list[str] = Field(default_factory=list)
    description: str


class IdlePeriod(_Frozen):
    hour_of_day: int
    average_usage: float
    recommended_replicas: int = 1


class IdleTimeAnalysis(_Frozen):
    idle_percentage: float
    idle_periods: list[IdlePeriod] = Field(default_factory=list)
    potential_savings: float
    recommendation: str


class CostAwareScaling(_Frozen):
    service_name: str
    current_replicas: int
    current_monthly_cost: float
    current_performance_score: Optional[float] = None
    performance_optimized: Optional[ScalingOption] = None
    cost_optimized: Optional[ScalingOption] = None
    balanced: Optional[ScalingOption] = None
    recommended_option: CostOptionName = "BALANCED"
    rationale: str
    idle_time_analysis: Optional[IdleTimeAnalysis] = None


# --------------------------------------------------------------------------- #
# Custom metrics
# --------------------------------------------------------------------------- #
class CustomMetricKind(str, Enum):
    REQUESTS_PER_SECOND = "REQUESTS_PER_SECOND"
    CONNECTION_POOL_USAGE = "CONNECTION_POOL_USAGE"
    RESPONSE_TIME_P95 = "RESPONSE_TIME_P95"


class CustomMetricScaling(_Frozen):
    metric_name: str
    kind: CustomMetricKind
    current_value: float
    current_per_pod_value: float
    target_value: float
    target_per_pod_value: float
    current_replicas: int
    recommended_replicas: int
    scale_up_threshold: float
    scale_down_threshold: float
    rationale: str
    recommendation: str


class CustomMetricsAnalysis(_Frozen):
    service_name: str
    recommendations: list[CustomMetricScaling] = Field(default_factory=list)


# --------------------------------------------------------------------------- #
# Summary
# --------------------------------------------------------------------------- #
PrimaryRecommendation = Literal["USE_HPA", "USE_VPA", "USE_BOTH", "MANUAL_SCALING"]
Urgency = Literal["LOW", "MEDIUM", "HIGH", "CRITICAL"]


class ScalingSummary(_Frozen):
    primary_recommendation: PrimaryRecommendation
    urgency: Urgency
    key_findings: list[str] = Field(default_factory=list)
    action_items: list[str] = Field(default_factory=list)
    expected_monthly_savings: float = 0.0
    confidence: float = 0.0


class ScalingAnalysis(_Frozen):
    service_name: str
    analyzed_at: Optional[datetime] = None
    hpa_recommendation: HPARecommendation
    vpa_recommendation: VPARecommendation
    cost_aware_scaling: CostAwareScaling
    predictions: list[ScalingPrediction] = Field(default_factory=list)
    detected_pattern: Optional[TimeSeriesPattern] = None
    custom_metrics_analysis: CustomMetricsAnalysis
    summary: ScalingSummary
