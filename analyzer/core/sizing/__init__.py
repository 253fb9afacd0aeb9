"""
Resource sizing package
차원별(CPU/메모리/커넥션 풀) 사이징 전략과 이를 조합하는 추천기
"""

from .base import ResourceAnalysisStrategy
from .cpu import CpuAnalysisStrategy
from .memory import MemoryAnalysisStrategy
from .pool import ConnectionPoolAnalysisStrategy
from .recommender import ResourceSizingRecommender

__all__ = [
    "ResourceAnalysisStrategy",
    "CpuAnalysisStrategy",
    "MemoryAnalysisStrategy",
    "ConnectionPoolAnalysisStrategy",
    "ResourceSizingRecommender",
]
