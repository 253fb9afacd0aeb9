from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict


class MetricType(str, Enum):
    CPU = "CPU"
    MEMORY = "MEMORY"
    POOL = "POOL"
    LATENCY = "LATENCY"


class AnomalyType(str, Enum):
    SPIKE = "SPIKE"
    DROP = "DROP"
    SUSTAINED_HIGH = "SUSTAINED_HIGH"
    PATTERN_BREAK = "PATTERN_BREAK"


class Severity(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    Severity.LOW: 0,
    Severity.MEDIUM: 1,
    Severity.HIGH: 2,
    Severity.CRITICAL: 3,
}


class Anomaly(BaseModel):
    """
    탐지된 이상 1건.

    생성 이후 변경되지 않는다. resolved 는 외부 워크플로우가
    model_copy(update=...) 로 새 레코드를 만들어 갱신한다.
    """

    model_config = ConfigDict(frozen=True)

    service_name: str
    metric_type: MetricType
    metric_name: str
    anomaly_type: AnomalyType
    severity: Severity
    actual_value: float
    expected_value: float
    z_score: float
    threshold: float
    detected_at: datetime
    description: str
    resolved: bool = False
