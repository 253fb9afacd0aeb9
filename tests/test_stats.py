# tests/test_stats.py

"""
stats 모듈 단위 테스트.
"""

import pytest

from analyzer.core import stats


def test_empty_inputs_return_zero():
    """빈 입력은 예외 없이 0.0."""
    assert stats.mean([]) == 0.0
    assert stats.std([]) == 0.0
    assert stats.variance([]) == 0.0
    assert stats.percentile([], 95) == 0.0
    assert stats.ema([], 0.2) == 0.0
    assert stats.trend_slope([]) == 0.0


def test_population_std():
    """표준편차는 모집단 기준."""
    assert stats.std([2, 4, 4, 4, 5, 5, 7, 9]) == pytest.approx(2.0)
    assert stats.variance([2, 4, 4, 4, 5, 5, 7, 9]) == pytest.approx(4.0)


def test_percentile_nearest_rank():
    """nearest-rank, 보간 없음."""
    values = [1, 2, 3, 4]
    assert stats.percentile(values, 50) == 2.0
    assert stats.percentile(values, 100) == 4.0
    assert stats.percentile(values, 0) == 1.0
    assert stats.percentile(list(range(1, 101)), 95) == 95.0


def test_percentile_ignores_input_order():
    """정렬 후 선택."""
    assert stats.percentile([9, 1, 5, 3], 50) == 3.0


def test_ema_starts_from_first_value():
    """첫 원소로 시작해 누적."""
    assert stats.ema([10.0], 0.5) == 10.0
    assert stats.ema([10.0, 20.0], 0.5) == pytest.approx(15.0)


@pytest.mark.parametrize("alpha", [0.05, 0.2, 0.3, 0.5, 0.9, 1.0])
@pytest.mark.parametrize("value", [0.1, 0.3, 42.7, 1e-9])
def test_ema_constant_sequence_is_exact(alpha, value):
    """상수 시계열의 EMA 는 오차 없이 그 상수."""
    assert stats.ema([value] * 100, alpha) == value


def test_trend_slope_linear():
    """선형 증가 시계열의 기울기."""
    assert stats.trend_slope([0, 2, 4, 6, 8]) == pytest.approx(2.0)
    assert stats.trend_slope([5, 5, 5]) == pytest.approx(0.0)
    assert stats.trend_slope([1.0]) == 0.0


def test_z_score_zero_std():
    """표준편차가 0 이면 z-score 도 0."""
    assert stats.z_score(10.0, 5.0, 0.0) == 0.0
    assert stats.z_score(9.0, 5.0, 2.0) == pytest.approx(2.0)


def test_ceil_clean_removes_float_noise():
    """부동소수 오차 때문에 1 이 더 올라가지 않는다."""
    assert stats.ceil_clean(420.00000000000006) == 420
    assert stats.ceil_clean(420.1) == 421


def test_summarize():
    """요약 통계."""
    summary = stats.summarize([10.0, 20.0, 30.0, 40.0])
    assert summary.n == 4
    assert summary.mean == pytest.approx(25.0)
    assert summary.min == 10.0
    assert summary.max == 40.0
    assert summary.p95 == 40.0
    assert stats.summarize([]) is stats.EMPTY_STATS
