import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

import pandas as pd

from .base import SnapshotSource
from analyzer.core.errors import DataNotFoundError, SnapshotSourceError
from analyzer.core.frames import frame_to_snapshots
from analyzer.models.snapshot import Snapshot

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("service_name", "timestamp")


class CSVSnapshotSource(SnapshotSource):
    """CSV 파일(컬럼명 = Snapshot 필드명)에서 스냅샷을 읽어오는 소스."""

    def __init__(self, csv_path: str = "data/snapshots.csv"):
        self.csv_path = Path(csv_path)
        self._df: Optional[pd.DataFrame] = None

    def _load(self) -> pd.DataFrame:
        if self._df is not None:
            return self._df
        if not self.csv_path.exists():
            raise SnapshotSourceError(f"CSV file not found: {self.csv_path}")

        try:
            df = pd.read_csv(self.csv_path)
        except (OSError, ValueError) as exc:
            raise SnapshotSourceError(f"failed to read CSV {self.csv_path}: {exc}") from exc

        missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
        if missing:
            raise DataNotFoundError(f"CSV is missing required columns: {missing}")

        df["timestamp"] = pd.to_datetime(df["timestamp"])
        logger.info("Loaded %d rows from %s", len(df), self.csv_path)
        self._df = df
        return df

    def fetch(self, service_name: str, since: Optional[datetime] = None) -> list[Snapshot]:
        """
        Raises
        ------
        SnapshotSourceError
            파일이 없거나 읽을 수 없는 경우.
        DataNotFoundError
            서비스 행이 하나도 없는 경우.
        """
        df = self._load()
        rows = df[df["service_name"] == service_name]
        if rows.empty:
            raise DataNotFoundError(f"service {service_name} not found in {self.csv_path}")

        if since is not None:
            rows = rows[rows["timestamp"] >= pd.Timestamp(since)]

        rows = rows.sort_values("timestamp", kind="stable")
        snapshots = frame_to_snapshots(rows)
        logger.debug("Fetched %d snapshots for %s", len(snapshots), service_name)
        return snapshots

    def is_available(self) -> bool:
        return self.csv_path.exists()
