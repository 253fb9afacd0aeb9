from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from analyzer.models.snapshot import Snapshot


class SnapshotSource(ABC):
    """서비스별 스냅샷 조회 인터페이스"""

    @abstractmethod
    def fetch(self, service_name: str, since: Optional[datetime] = None) -> list[Snapshot]:
        """since 이후(포함) 스냅샷을 timestamp 오름차순으로 반환"""
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """사용 가능 여부"""
        pass
