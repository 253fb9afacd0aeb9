# analyzer/core/sizing/base.py

"""
Resource analysis strategy interface.

역할:
- CPU / 메모리 / 커넥션 풀 사이징 로직이 동일한 호출 방식을 갖도록 강제한다.
- ResourceSizingRecommender 는 어떤 전략이 오더라도
  detect_issues() → apply() 순서로 같은 방식으로 호출한다.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Sequence

from analyzer.config.settings import AnalyzerSettings
from analyzer.core.stats import WindowStats
from analyzer.models.snapshot import Snapshot

# AnalysisResult 로 검증되기 전의 가변 초안
Draft = dict[str, Any]


class ResourceAnalysisStrategy(ABC):
    """
    Base class for per-dimension sizing strategies.

    각 구현체는 자신이 담당하는 AnalysisResult 필드만 채운다.
    """

    metric_type: str = ""

    def __init__(self, settings: AnalyzerSettings):
        self.settings = settings

    @property
    def margin(self) -> float:
        return self.settings.sizing.safety_margin

    @abstractmethod
    def window(self, snapshots: Sequence[Snapshot]) -> list[float]:
        """이 차원의 통계 대상 시계열 (측정값만)."""
        ...

    @abstractmethod
    def detect_issues(self, snapshots: Sequence[Snapshot]) -> dict[str, str]:
        """
        이 차원의 문제를 찾는다.

        Returns
        -------
        dict[str, str]
            이슈 이름 → 설명. 문제가 없으면 빈 dict.
        """
        ...

    @abstractmethod
    def apply(self, draft: Draft, snapshots: Sequence[Snapshot], stats: WindowStats) -> None:
        """stats(=self.window() 요약)를 이용해 초안에 추천값을 채운다."""
        ...
