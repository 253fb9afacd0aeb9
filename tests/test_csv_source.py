# tests/test_csv_source.py

"""
CSVSnapshotSource 테스트.
"""

from datetime import datetime

import pytest

from analyzer.core.errors import DataNotFoundError, SnapshotSourceError
from analyzer.core.sources import CSVSnapshotSource

CSV_TEXT = """service_name,timestamp,cpu_percent,heap_percent
order-service,2024-01-01 00:20:00,30.5,40.0
order-service,2024-01-01 00:00:00,10.5,
payment-service,2024-01-01 00:00:00,70.0,80.0
order-service,2024-01-01 00:10:00,20.5,50.0
"""


@pytest.fixture
def source(tmp_path):
    path = tmp_path / "snapshots.csv"
    path.write_text(CSV_TEXT)
    return CSVSnapshotSource(str(path))


def test_fetch_sorted_by_timestamp(source):
    """서비스 행만 timestamp 오름차순으로 반환."""
    snapshots = source.fetch("order-service")
    assert [s.cpu_percent for s in snapshots] == [10.5, 20.5, 30.5]
    assert all(s.service_name == "order-service" for s in snapshots)
    assert snapshots[0].timestamp == datetime(2024, 1, 1, 0, 0)


def test_empty_cell_becomes_none(source):
    """빈 셀은 측정 안 됨(None)."""
    first = source.fetch("order-service")[0]
    assert first.heap_percent is None
    assert first.thread_count is None


def test_since_filter(source):
    """since 이후(포함) 행만."""
    snapshots = source.fetch("order-service", since=datetime(2024, 1, 1, 0, 10))
    assert [s.cpu_percent for s in snapshots] == [20.5, 30.5]


def test_unknown_service(source):
    """없는 서비스는 DataNotFoundError."""
    with pytest.raises(DataNotFoundError):
        source.fetch("inventory-service")


def test_missing_file(tmp_path):
    """파일이 없으면 SnapshotSourceError, is_available 은 False."""
    missing = CSVSnapshotSource(str(tmp_path / "nope.csv"))
    assert missing.is_available() is False
    with pytest.raises(SnapshotSourceError):
        missing.fetch("order-service")


def test_missing_required_columns(tmp_path):
    """service_name / timestamp 컬럼이 없으면 DataNotFoundError."""
    path = tmp_path / "bad.csv"
    path.write_text("cpu_percent\n10.0\n")
    with pytest.raises(DataNotFoundError):
        CSVSnapshotSource(str(path)).fetch("order-service")
