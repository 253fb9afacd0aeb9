"""
Snapshot ↔ pandas DataFrame 변환.

시간대(hour-of-day) / 요일(weekday) 그룹 집계는 pandas 로 처리한다.
hour / weekday 는 스냅샷 timestamp 를 주어진 그대로(시간대 변환 없이) 사용한다.
weekday: 월요일=0 ... 일요일=6
"""

from __future__ import annotations

from typing import Sequence

import pandas as pd

from analyzer.core import stats
from analyzer.core.metrics import MetricMeta
from analyzer.models.snapshot import Snapshot

SNAPSHOT_COLUMNS = list(Snapshot.model_fields.keys())
NUMERIC_COLUMNS = [c for c in SNAPSHOT_COLUMNS if c not in ("service_name", "timestamp")]


def snapshots_to_frame(snapshots: Sequence[Snapshot]) -> pd.DataFrame:
    """timestamp 오름차순 DataFrame (hour / weekday 컬럼 포함)."""
    if not snapshots:
        return pd.DataFrame(columns=SNAPSHOT_COLUMNS + ["hour", "weekday"])
    df = pd.DataFrame([s.model_dump() for s in snapshots], columns=SNAPSHOT_COLUMNS)
    df = df.sort_values("timestamp", kind="stable").reset_index(drop=True)
    df["hour"] = [ts.hour for ts in df["timestamp"]]
    df["weekday"] = [ts.weekday() for ts in df["timestamp"]]
    return df


def frame_to_snapshots(df: pd.DataFrame) -> list[Snapshot]:
    """NaN 은 None(측정 안 됨)으로 바꿔 Snapshot 으로 되돌린다."""
    snapshots: list[Snapshot] = []
    present = [c for c in SNAPSHOT_COLUMNS if c in df.columns]
    for row in df[present].to_dict(orient="records"):
        values = {}
        for key, value in row.items():
            if key in NUMERIC_COLUMNS and value is not None and pd.isna(value):
                value = None
            values[key] = value
        values["timestamp"] = pd.Timestamp(values["timestamp"]).to_pydatetime()
        snapshots.append(Snapshot(**values))
    return snapshots


def metric_frame(snapshots: Sequence[Snapshot], meta: MetricMeta) -> pd.DataFrame:
    """
    해당 메트릭이 측정된 행만 남긴 (timestamp, hour, weekday, value) 프레임.
    """
    df = snapshots_to_frame(snapshots)
    if df.empty:
        return pd.DataFrame(columns=["timestamp", "hour", "weekday", "value"])
    values = pd.to_numeric(df[meta.field], errors="coerce")
    mask = values.notna() & (values > 0)
    out = df.loc[mask, ["timestamp", "hour", "weekday"]].copy()
    out["value"] = values[mask].astype(float)
    return out.reset_index(drop=True)


def group_means(frame: pd.DataFrame, key: str) -> pd.Series:
    """key(hour 또는 weekday) 별 평균, key 오름차순."""
    if frame.empty:
        return pd.Series(dtype=float)
    return frame.groupby(key)["value"].mean().sort_index()


def explained_variance(frame: pd.DataFrame, key: str) -> float:
    """
    key 그룹 평균이 설명하는 분산 비율 (between-group / total, 0~1).

    그룹이 2개 미만이거나 전체 분산이 0 이면 0.0.
    """
    if frame.empty or frame[key].nunique() < 2:
        return 0.0
    values = frame["value"].tolist()
    total = stats.variance(values)
    if total <= 0:
        return 0.0
    overall = stats.mean(values)
    group_mean = frame.groupby(key)["value"].transform("mean").tolist()
    between = stats.mean([(m - overall) ** 2 for m in group_mean])
    return min(1.0, max(0.0, between / total))
