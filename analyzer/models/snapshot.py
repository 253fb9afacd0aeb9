# 리소스 사용량 스냅샷 스키마

from datetime import datetime
from typing import Optional, Sequence

from pydantic import BaseModel, ConfigDict


class Snapshot(BaseModel):
    """
    한 서비스의 특정 시점 리소스 사용량.

    모든 수치 필드는 선택값이다. None 또는 0 이하 값은
    "해당 차원 없음"으로 취급되며 0 이라는 관측값으로 쓰이지 않는다.
    """

    model_config = ConfigDict(frozen=True)

    service_name: str
    timestamp: datetime
    cpu_percent: Optional[float] = None
    heap_used_bytes: Optional[float] = None
    heap_max_bytes: Optional[float] = None
    heap_percent: Optional[float] = None
    thread_count: Optional[float] = None
    http_count: Optional[float] = None
    http_duration_p95: Optional[float] = None  # ms
    pool_active: Optional[float] = None
    pool_max: Optional[float] = None
    pool_pending: Optional[float] = None


def chronological(snapshots: Sequence[Snapshot]) -> list[Snapshot]:
    """timestamp 오름차순 정렬 (같은 시각은 입력 순서 유지)."""
    return sorted(snapshots, key=lambda s: s.timestamp)
