# tests/conftest.py

"""
pytest 설정 및 공통 fixture.
"""

import math
import sys
from datetime import datetime, timedelta
from pathlib import Path

import pytest

# 프로젝트 루트를 PYTHONPATH에 추가
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from analyzer.config.settings import AnalyzerSettings  # noqa: E402
from analyzer.models.snapshot import Snapshot  # noqa: E402

# 2024-01-01 은 월요일
BASE_TIME = datetime(2024, 1, 1, 0, 0)
MIB = 1024 * 1024


@pytest.fixture
def settings():
    """기본 설정."""
    return AnalyzerSettings()


@pytest.fixture
def make_snapshots():
    """
    스냅샷 시계열 생성기.

    필드 값은 리스트(인덱스별 값), 함수(i -> 값), 스칼라(모든 샘플 동일) 중 하나.
    """

    def _make(count, start=BASE_TIME, step=timedelta(minutes=10), service_name="order-service", **fields):
        snapshots = []
        for i in range(count):
            values = {}
            for name, value in fields.items():
                if isinstance(value, (list, tuple)):
                    values[name] = value[i]
                elif callable(value):
                    values[name] = value(i)
                else:
                    values[name] = value
            snapshots.append(Snapshot(service_name=service_name, timestamp=start + step * i, **values))
        return snapshots

    return _make


@pytest.fixture
def periodic_week(make_snapshots):
    """7일 × 24시간, 14시에 피크인 사인파 CPU (평균 50, 진폭 30)."""

    def cpu(i):
        hour = i % 24
        return 50 + 30 * math.sin(2 * math.pi * (hour - 8) / 24)

    return make_snapshots(168, step=timedelta(hours=1), cpu_percent=cpu, heap_percent=60.0)


@pytest.fixture
def steady_window(make_snapshots):
    """CPU 50%, heap 512Mi 로 고정된 200개 샘플."""
    return make_snapshots(
        200,
        cpu_percent=50.0,
        heap_percent=50.0,
        heap_used_bytes=512 * MIB,
        heap_max_bytes=1024 * MIB,
    )
