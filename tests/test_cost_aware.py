# tests/test_cost_aware.py

"""
CostAwareScalingAdvisor 테스트.
"""

from datetime import timedelta

import pytest

from analyzer.core.scaling.cost_aware import CostAwareScalingAdvisor, performance_score


@pytest.fixture
def advisor():
    return CostAwareScalingAdvisor()


def test_three_options(steady_window, advisor):
    """CPU 50% 고정: 옵션별 replica / 비용."""
    result = advisor.analyze("order-service", steady_window)

    assert result.current_replicas == 3
    assert result.current_monthly_cost == pytest.approx(114.76)

    perf = result.performance_optimized
    assert perf.average_replicas == 3
    assert perf.cpu_request == "1200m"
    assert perf.memory_request == "2458Mi"
    assert perf.monthly_cost == pytest.approx(137.71)
    assert perf.savings_amount == 0.0

    cost = result.cost_optimized
    assert cost.average_replicas == 2
    assert cost.cpu_request == "800m"
    assert cost.monthly_cost == pytest.approx(61.2)
    assert cost.savings_percentage == pytest.approx(46.67)

    balanced = result.balanced
    assert balanced.average_replicas == 3
    assert balanced.savings_amount == pytest.approx(0.0)

    assert result.recommended_option == "PERFORMANCE"
    assert result.rationale.startswith("Performance-optimized approach recommended.")
    assert result.current_performance_score == pytest.approx(60.0)


def test_idle_time_analysis(make_snapshots, advisor):
    """하루 종일 CPU 10% 면 모든 시간대가 유휴."""
    snapshots = make_snapshots(24, step=timedelta(hours=1), cpu_percent=10.0)
    idle = advisor.analyze("svc", snapshots).idle_time_analysis

    assert idle.idle_percentage == pytest.approx(100.0)
    assert len(idle.idle_periods) == 24
    assert idle.idle_periods[0].recommended_replicas == 1
    assert idle.potential_savings == pytest.approx(76.5)
    assert idle.recommendation.startswith("High idle time detected.")


def test_no_idle_time(steady_window, advisor):
    """유휴 시간대가 없으면 현재 방식 유지."""
    idle = advisor.analyze("svc", steady_window).idle_time_analysis
    assert idle.idle_percentage == 0.0
    assert idle.idle_periods == []
    assert idle.recommendation == "Low idle time. Current scaling approach is appropriate."


def test_low_usage_prefers_balanced(make_snapshots, advisor):
    """사용률이 낮으면 균형 옵션이 충분히 절감한다."""
    result = advisor.analyze("svc", make_snapshots(50, cpu_percent=20.0))
    assert result.balanced.average_replicas == 2
    assert result.balanced.savings_percentage == pytest.approx(33.33)
    assert result.recommended_option == "BALANCED"


def test_default_without_data(advisor):
    """데이터가 없으면 기본 분석."""
    result = advisor.analyze("svc", [])
    assert result.current_monthly_cost == 300.0
    assert result.recommended_option == "BALANCED"
    assert result.rationale == "Insufficient data for detailed analysis"
    assert result.balanced is None


def test_performance_score_bounds():
    """점수는 0~100."""
    assert performance_score(0.0, 0.0) == 100.0
    assert performance_score(100.0, 200.0) == 0.0
