from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class CostForecast(BaseModel):
    """일 단위 비용 예측 (95% 신뢰 구간 포함)."""

    model_config = ConfigDict(frozen=True)

    service_name: str
    days_ahead: int = Field(ge=1, le=90)
    predictions: list[float]
    upper_bound: list[float]
    lower_bound: list[float]
    confidence_level: float = 95.0
    model_type: str
    current_monthly_cost: float
    predicted_monthly_cost: float
    trend: Literal["INCREASING", "DECREASING", "STABLE"]
    percentage_change: float
    accuracy_score: float
    warning: Optional[str] = None
