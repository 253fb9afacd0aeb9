# 리소스 사이징 분석 결과 / 최종 추천 레코드 스키마

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

QuantityUnit = Literal["m", "Mi", "Gi", "cores"]


class ResourceQuantity(BaseModel):
    """
    Kubernetes 리소스 수량 (value + unit).

    str() 은 매니페스트에 그대로 쓰는 형태를 돌려준다: "350m", "384Mi", "2Gi", "1.5".
    """

    model_config = ConfigDict(frozen=True)

    value: float = Field(ge=0.0)
    unit: QuantityUnit

    def __str__(self) -> str:
        number = int(self.value) if float(self.value).is_integer() else self.value
        if self.unit == "cores":
            return f"{number}"
        return f"{number}{self.unit}"


def millicores(value: float) -> ResourceQuantity:
    return ResourceQuantity(value=value, unit="m")


def mebibytes(value: float) -> ResourceQuantity:
    return ResourceQuantity(value=value, unit="Mi")


class CurrentResources(BaseModel):
    """현재 배포된 request/limit. 모르면 기본값(100m/200m/256Mi/512Mi)."""

    model_config = ConfigDict(frozen=True)

    cpu_request: ResourceQuantity = millicores(100)
    cpu_limit: ResourceQuantity = millicores(200)
    memory_request: ResourceQuantity = mebibytes(256)
    memory_limit: ResourceQuantity = mebibytes(512)


class AnalysisResult(BaseModel):
    """분석 1회당 1건 생성되는 사이징 결과 (write-once)."""

    model_config = ConfigDict(frozen=True)

    service_name: str
    analyzed_at: Optional[datetime] = None  # 윈도우의 마지막 스냅샷 시각
    sample_count: int = 0

    current_cpu_request: ResourceQuantity
    current_cpu_limit: ResourceQuantity
    current_memory_request: ResourceQuantity
    current_memory_limit: ResourceQuantity

    recommended_cpu_request: ResourceQuantity
    recommended_cpu_limit: ResourceQuantity
    recommended_memory_request: ResourceQuantity
    recommended_memory_limit: ResourceQuantity
    recommended_heap_min: ResourceQuantity
    recommended_heap_max: ResourceQuantity

    recommended_max_pool_size: Optional[int] = None
    recommended_min_idle: Optional[int] = None
    recommended_max_threads: int
    recommended_min_spare_threads: int

    p95_cpu: float = 0.0
    p99_cpu: float = 0.0
    max_cpu: float = 0.0
    p95_memory: float = 0.0
    p99_memory: float = 0.0
    max_memory: float = 0.0
    p95_pool_active: float = 0.0

    cpu_throttling_detected: bool = False
    memory_leak_detected: bool = False
    pool_exhaustion_detected: bool = False

    estimated_monthly_savings: float = 0.0
    confidence: float = Field(0.0, ge=0.0, le=1.0)


class CostAnalysis(BaseModel):
    model_config = ConfigDict(frozen=True)

    current_monthly_cost: float
    recommended_monthly_cost: float
    monthly_savings: float
    annual_savings: float
    savings_percentage: int


class KubernetesResources(BaseModel):
    model_config = ConfigDict(frozen=True)

    cpu_request: str
    cpu_limit: str
    memory_request: str
    memory_limit: str


class RuntimeHeapConfig(BaseModel):
    """JVM -Xms/-Xmx 에 해당하는 런타임 힙 설정."""

    model_config = ConfigDict(frozen=True)

    heap_min: str
    heap_max: str
    gc_type: str = "G1GC"
    additional_flags: dict[str, str] = Field(default_factory=dict)


class ConnectionPoolConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    maximum_pool_size: Optional[int] = None
    minimum_idle: Optional[int] = None
    connection_timeout_ms: int = 30000
    idle_timeout_ms: int = 600000


class ThreadPoolConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    max_threads: int
    min_spare_threads: int


class ResourceRecommendation(BaseModel):
    """외부 레이어(API/코드 생성기)에 넘기는 최종 추천 레코드."""

    model_config = ConfigDict(frozen=True)

    service_name: str
    kubernetes: Optional[KubernetesResources] = None
    runtime_heap: Optional[RuntimeHeapConfig] = None
    connection_pool: Optional[ConnectionPoolConfig] = None
    thread_pool: Optional[ThreadPoolConfig] = None
    cost_analysis: Optional[CostAnalysis] = None
    confidence: float = Field(0.0, ge=0.0, le=1.0)
    rationale: str = ""
    detected_issues: dict[str, str] = Field(default_factory=dict)
