# 워크로드 패턴 분류 스키마

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class WorkloadPattern(str, Enum):
    STEADY_STATE = "STEADY_STATE"
    BURSTY = "BURSTY"
    PERIODIC = "PERIODIC"
    GROWING = "GROWING"
    SEASONAL = "SEASONAL"
    DECLINING = "DECLINING"
    CHAOTIC = "CHAOTIC"

    @property
    def display_name(self) -> str:
        return _PATTERN_INFO[self][0]

    @property
    def description(self) -> str:
        return _PATTERN_INFO[self][1]


_PATTERN_INFO: dict[WorkloadPattern, tuple[str, str]] = {
    WorkloadPattern.STEADY_STATE: ("Steady State", "Consistent load with minimal variation"),
    WorkloadPattern.BURSTY: ("Bursty", "Unpredictable spikes and valleys"),
    WorkloadPattern.PERIODIC: ("Periodic", "Predictable daily/weekly patterns"),
    WorkloadPattern.GROWING: ("Growing", "Continuous linear growth trend"),
    WorkloadPattern.SEASONAL: ("Seasonal", "Monthly or quarterly seasonal patterns"),
    WorkloadPattern.DECLINING: ("Declining", "Decreasing resource usage trend"),
    WorkloadPattern.CHAOTIC: ("Chaotic", "No clear pattern detected"),
}


class OptimizationStrategy(str, Enum):
    RESERVED_CAPACITY = "RESERVED_CAPACITY"
    AGGRESSIVE_AUTOSCALING = "AGGRESSIVE_AUTOSCALING"
    SCHEDULED_SCALING = "SCHEDULED_SCALING"
    PREDICTIVE_SCALING = "PREDICTIVE_SCALING"
    SPOT_INSTANCES = "SPOT_INSTANCES"
    RIGHT_SIZING = "RIGHT_SIZING"
    SERVICE_CONSOLIDATION = "SERVICE_CONSOLIDATION"
    CONSERVATIVE_BUFFER = "CONSERVATIVE_BUFFER"

    @property
    def display_name(self) -> str:
        return _STRATEGY_INFO[self][0]

    @property
    def description(self) -> str:
        return _STRATEGY_INFO[self][1]


_STRATEGY_INFO: dict[OptimizationStrategy, tuple[str, str]] = {
    OptimizationStrategy.RESERVED_CAPACITY: (
        "Reserved Capacity", "Use reserved instances for predictable steady load"),
    OptimizationStrategy.AGGRESSIVE_AUTOSCALING: (
        "Aggressive Auto-Scaling", "Fast scale-up/down for bursty workloads"),
    OptimizationStrategy.SCHEDULED_SCALING: (
        "Scheduled Scaling", "Pre-scheduled scaling based on time patterns"),
    OptimizationStrategy.PREDICTIVE_SCALING: (
        "Predictive Scaling", "Trend-based predictive auto-scaling"),
    OptimizationStrategy.SPOT_INSTANCES: (
        "Spot Instances", "Use spot/preemptible instances for cost savings"),
    OptimizationStrategy.RIGHT_SIZING: (
        "Right-Sizing", "Adjust baseline capacity to match average load"),
    OptimizationStrategy.SERVICE_CONSOLIDATION: (
        "Service Consolidation", "Consider consolidating with other services"),
    OptimizationStrategy.CONSERVATIVE_BUFFER: (
        "Conservative Buffer", "Maintain high buffer for unpredictable patterns"),
}


class WorkloadFeatures(BaseModel):
    """
    분류기 입력 특성 (17개 벡터 + 참고용 min/max).

    to_vector() 순서:
        cpu_mean, cpu_std, cpu_variance, memory_mean, memory_std, memory_variance,
        cpu_trend_slope, memory_trend_slope, growth_rate, periodicity_score,
        burstiness_score, stability_score, weekday_weekend_ratio,
        peak_utilization, off_peak_utilization, autocorrelation_24h, autocorrelation_7d
    """

    model_config = ConfigDict(frozen=True)

    cpu_mean: float = 0.0
    cpu_std: float = 0.0
    cpu_variance: float = 0.0
    cpu_min: float = 0.0
    cpu_max: float = 0.0
    memory_mean: float = 0.0
    memory_std: float = 0.0
    memory_variance: float = 0.0
    memory_min: float = 0.0
    memory_max: float = 0.0
    cpu_trend_slope: float = 0.0
    memory_trend_slope: float = 0.0
    growth_rate: float = 0.0
    periodicity_score: float = 0.0
    burstiness_score: float = 0.0
    stability_score: float = 1.0
    weekday_weekend_ratio: float = 1.0
    peak_utilization: float = 0.0
    off_peak_utilization: float = 0.0
    autocorrelation_24h: float = 0.0
    autocorrelation_7d: float = 0.0

    @property
    def coefficient_of_variation(self) -> float:
        """stddev / mean, mean 이 0 이하이면 0."""
        if self.cpu_mean <= 0:
            return 0.0
        return self.cpu_std / self.cpu_mean

    @property
    def peak_to_mean_ratio(self) -> float:
        if self.cpu_mean <= 0:
            return 0.0
        return self.peak_utilization / self.cpu_mean

    def to_vector(self) -> list[float]:
        return [
            self.cpu_mean,
            self.cpu_std,
            self.cpu_variance,
            self.memory_mean,
            self.memory_std,
            self.memory_variance,
            self.cpu_trend_slope,
            self.memory_trend_slope,
            self.growth_rate,
            self.periodicity_score,
            self.burstiness_score,
            self.stability_score,
            self.weekday_weekend_ratio,
            self.peak_utilization,
            self.off_peak_utilization,
            self.autocorrelation_24h,
            self.autocorrelation_7d,
        ]


class WorkloadProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    service_name: str
    pattern: WorkloadPattern
    features: WorkloadFeatures
    recommended_strategy: OptimizationStrategy
    confidence_score: float = Field(ge=0.0, le=100.0)
    description: str
    resource_recommendation: str
    estimated_savings: float = 0.0
    analysis_window_days: int = 7
    sample_count: int = 0
