"""
Rolling window statistics.

모든 탐지기 / 사이징 / 분류기가 공유하는 수치 함수 모음.
입력은 호출자가 이미 잘라 둔 고정 크기 윈도우(float 시퀀스)이며,
모든 함수는 순수 함수이고 빈 입력에도 예외 대신 문서화된 기본값(0.0)을 돌려준다.

- 표준편차/분산: 모집단(population, ddof=0)
- 퍼센타일: nearest-rank (index = ceil(N*p/100) - 1, [0, N-1] 로 clamp)
- 추세: OLS 기울기 (x = 0..N-1), 분모가 epsilon 미만이면 0
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np

# OLS 분모가 이 값보다 작으면 기울기를 0 으로 본다
SLOPE_EPSILON = 1e-3


def _as_array(values: Sequence[float]) -> np.ndarray:
    return np.asarray(values, dtype=float)


def mean(values: Sequence[float]) -> float:
    arr = _as_array(values)
    if arr.size == 0:
        return 0.0
    return float(np.mean(arr))


def variance(values: Sequence[float]) -> float:
    """모집단 분산. 빈 입력이면 0.0."""
    arr = _as_array(values)
    if arr.size == 0:
        return 0.0
    return float(np.var(arr))


def std(values: Sequence[float]) -> float:
    """모집단 표준편차. 빈 입력이면 0.0."""
    arr = _as_array(values)
    if arr.size == 0:
        return 0.0
    return float(np.std(arr))


def percentile(values: Sequence[float], pct: float) -> float:
    """
    Nearest-rank 퍼센타일 (선형 보간 없음).

    Parameters
    ----------
    values : Sequence[float]
        관측값.
    pct : float
        0~100 사이 퍼센타일.

    Returns
    -------
    float
        정렬된 값의 ``ceil(N*pct/100) - 1`` 번째 원소. 빈 입력이면 0.0.

    Examples
    --------
    >>> percentile([1, 2, 3, 4], 50)
    2.0
    >>> percentile([1, 2, 3, 4], 100)
    4.0
    """
    arr = _as_array(values)
    n = arr.size
    if n == 0:
        return 0.0
    ordered = np.sort(arr)
    index = math.ceil(n * pct / 100.0) - 1
    index = min(max(index, 0), n - 1)
    return float(ordered[index])


def minimum(values: Sequence[float]) -> float:
    arr = _as_array(values)
    if arr.size == 0:
        return 0.0
    return float(np.min(arr))


def maximum(values: Sequence[float]) -> float:
    arr = _as_array(values)
    if arr.size == 0:
        return 0.0
    return float(np.max(arr))


def ema(values: Sequence[float], alpha: float) -> float:
    """
    지수이동평균. 첫 원소로 시작해 alpha*x + (1-alpha)*prev 를 누적한다.

    prev + alpha*(x - prev) 형태로 갱신해 상수 시계열은 정확히 그 값을 유지한다.
    """
    if len(values) == 0:
        return 0.0
    current = float(values[0])
    for value in values[1:]:
        current += alpha * (float(value) - current)
    return current


def trend_slope(values: Sequence[float]) -> float:
    """
    x = 0..N-1 에 대한 OLS 기울기.

    slope = (N*ΣXY - ΣX*ΣY) / (N*ΣX² - (ΣX)²)
    N < 2 이거나 분모 절댓값이 SLOPE_EPSILON 미만이면 0.0.
    """
    y = _as_array(values)
    n = y.size
    if n < 2:
        return 0.0
    x = np.arange(n, dtype=float)
    sum_x = float(np.sum(x))
    sum_y = float(np.sum(y))
    sum_xy = float(np.sum(x * y))
    sum_x2 = float(np.sum(x * x))
    denominator = n * sum_x2 - sum_x * sum_x
    if abs(denominator) < SLOPE_EPSILON:
        return 0.0
    return (n * sum_xy - sum_x * sum_y) / denominator


def z_score(value: float, window_mean: float, window_std: float) -> float:
    """표준편차가 0 이면 항상 0.0."""
    if window_std == 0:
        return 0.0
    return (value - window_mean) / window_std


def ceil_clean(value: float) -> int:
    """부동소수 오차(예: 420.00000000000006)를 걷어낸 뒤 올림."""
    return math.ceil(round(value, 9))


@dataclass(frozen=True)
class WindowStats:
    n: int
    mean: float
    std: float
    variance: float
    min: float
    max: float
    p95: float
    p99: float


EMPTY_STATS = WindowStats(n=0, mean=0.0, std=0.0, variance=0.0, min=0.0, max=0.0, p95=0.0, p99=0.0)


def summarize(values: Sequence[float]) -> WindowStats:
    """사이징 전략이 쓰는 윈도우 요약 통계."""
    if len(values) == 0:
        return EMPTY_STATS
    return WindowStats(
        n=len(values),
        mean=mean(values),
        std=std(values),
        variance=variance(values),
        min=minimum(values),
        max=maximum(values),
        p95=percentile(values, 95),
        p99=percentile(values, 99),
    )
