# tests/test_cost_forecast.py

"""
CostForecaster 테스트.
"""

import pytest

from analyzer.core.cost_forecast import CostForecaster, accuracy_score, daily_cost

GIB = 1024 ** 3


@pytest.fixture
def forecaster():
    return CostForecaster()


def test_constant_usage_is_stable(make_snapshots, forecaster):
    """CPU 50% / heap 1GiB 고정: 일 2.52, 월 75.6, STABLE."""
    snapshots = make_snapshots(40, cpu_percent=50.0, heap_used_bytes=float(GIB))
    result = forecaster.forecast("order-service", snapshots, days_ahead=7)

    assert daily_cost(snapshots[0]) == pytest.approx(2.52)
    assert len(result.predictions) == len(result.upper_bound) == len(result.lower_bound) == 7
    assert result.predictions == pytest.approx([2.52] * 7)
    # 변동성이 0 이면 신뢰 구간 폭도 0
    assert result.upper_bound == pytest.approx(result.predictions)
    assert result.current_monthly_cost == pytest.approx(75.6)
    assert result.predicted_monthly_cost == pytest.approx(75.6)
    assert result.trend == "STABLE"
    assert result.percentage_change == pytest.approx(0.0)
    assert result.accuracy_score == pytest.approx(90.0)
    assert result.confidence_level == 95.0
    assert result.warning is None


def test_rising_cpu_is_increasing(make_snapshots, forecaster):
    """CPU 가 샘플마다 5%p 증가하면 90일 예측은 INCREASING."""
    snapshots = make_snapshots(19, cpu_percent=lambda i: 5.0 * (i + 1))
    result = forecaster.forecast("svc", snapshots, days_ahead=90)

    assert result.trend == "INCREASING"
    assert result.percentage_change == pytest.approx(7.58, abs=0.01)
    assert result.predictions[-1] > result.predictions[0]
    assert all(lo <= p <= hi for lo, p, hi in zip(result.lower_bound, result.predictions, result.upper_bound))
    assert all(lo >= 0 for lo in result.lower_bound)
    assert result.warning is None


@pytest.mark.parametrize("days", [0, 91])
def test_days_ahead_out_of_range(make_snapshots, forecaster, days):
    """예측 일수는 1~90."""
    with pytest.raises(ValueError):
        forecaster.forecast("svc", make_snapshots(5, cpu_percent=50.0), days_ahead=days)


def test_default_without_history(forecaster):
    """히스토리가 없으면 기준 추정치."""
    result = forecaster.forecast("svc", [], days_ahead=10)
    assert result.predictions == [10.0] * 10
    assert result.upper_bound == pytest.approx([12.0] * 10)
    assert result.lower_bound == pytest.approx([8.0] * 10)
    assert result.predicted_monthly_cost == 300.0
    assert result.accuracy_score == 50.0
    assert result.warning == "No historical data available - using baseline estimates"


def test_accuracy_score_capped():
    """정확도 점수는 95 에서 멈춘다."""
    assert accuracy_score(0) == 70.0
    assert accuracy_score(1000) == 95.0
