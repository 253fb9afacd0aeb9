"""
Snapshot Sources Package
분석 엔진 밖에서 스냅샷을 읽어 오는 어댑터
"""

from .base import SnapshotSource
from .csv_source import CSVSnapshotSource

__all__ = [
    "SnapshotSource",
    "CSVSnapshotSource",
]
