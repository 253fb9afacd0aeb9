# tests/test_workload.py

"""
WorkloadClassifier 테스트.
"""

import pytest

from analyzer.core.workload import (
    PATTERN_STRATEGY,
    SAVINGS_RATE,
    WorkloadClassifier,
    periodicity_score,
)
from analyzer.models.workload import OptimizationStrategy, WorkloadFeatures, WorkloadPattern


@pytest.fixture
def classifier():
    return WorkloadClassifier()


def test_periodic_week(periodic_week, classifier):
    """하루 주기 사인파는 PERIODIC / SCHEDULED_SCALING."""
    profile = classifier.classify("order-service", periodic_week)

    assert profile.pattern == WorkloadPattern.PERIODIC
    assert profile.recommended_strategy == OptimizationStrategy.SCHEDULED_SCALING
    assert profile.features.periodicity_score > 0.9
    assert profile.features.coefficient_of_variation == pytest.approx(0.42, abs=0.01)
    assert profile.sample_count == 168
    assert profile.estimated_savings == pytest.approx(350.0)


def test_bursty_spikes(make_snapshots, classifier):
    """드문 스파이크는 BURSTY / SPOT_INSTANCES."""
    cpu = [40.0] * 200
    cpu[50] = 95.0
    cpu[150] = 95.0
    profile = classifier.classify("svc", make_snapshots(200, cpu_percent=cpu, heap_percent=50.0))

    assert profile.pattern == WorkloadPattern.BURSTY
    assert profile.recommended_strategy == OptimizationStrategy.SPOT_INSTANCES


def test_steady_state(steady_window, classifier):
    """변동 없는 부하는 STEADY_STATE / RESERVED_CAPACITY."""
    profile = classifier.classify("svc", steady_window)
    assert profile.pattern == WorkloadPattern.STEADY_STATE
    assert profile.recommended_strategy == OptimizationStrategy.RESERVED_CAPACITY
    assert profile.features.stability_score == pytest.approx(1.0)


def test_growing_and_declining(make_snapshots, classifier):
    """기울기 ±0.5 초과는 추세 패턴이 먼저 이긴다."""
    growing = make_snapshots(60, cpu_percent=[10.0 + i for i in range(60)])
    declining = make_snapshots(60, cpu_percent=[80.0 - i for i in range(60)])
    assert classifier.classify("svc", growing).pattern == WorkloadPattern.GROWING
    assert classifier.classify("svc", declining).pattern == WorkloadPattern.DECLINING


def test_decision_tree_priority(classifier):
    """결정 트리 규칙 우선순위."""
    chaotic = WorkloadFeatures(cpu_mean=40.0, cpu_std=30.0, periodicity_score=0.1)
    seasonal = WorkloadFeatures(cpu_mean=40.0, cpu_std=14.0, periodicity_score=0.4, peak_utilization=60.0)
    assert classifier.classify_pattern(chaotic) == WorkloadPattern.CHAOTIC
    assert classifier.classify_pattern(seasonal) == WorkloadPattern.SEASONAL


def test_bursty_aggressive_autoscaling(classifier):
    """burstiness > 0.2 인 BURSTY 는 AGGRESSIVE_AUTOSCALING."""
    features = WorkloadFeatures(burstiness_score=0.25)
    assert classifier.determine_strategy(WorkloadPattern.BURSTY, features) == \
        OptimizationStrategy.AGGRESSIVE_AUTOSCALING


def test_every_pattern_has_strategy_and_savings(classifier):
    """모든 패턴에 전략과 절감률이 매핑되어 있다."""
    features = WorkloadFeatures()
    for pattern in WorkloadPattern:
        assert pattern in PATTERN_STRATEGY
        assert pattern in SAVINGS_RATE
        assert isinstance(classifier.determine_strategy(pattern, features), OptimizationStrategy)
        assert pattern.display_name
        assert pattern.description
    for strategy in OptimizationStrategy:
        assert strategy.display_name
        assert strategy.description


def test_empty_input_default_profile(classifier):
    """빈 입력은 기본 프로필."""
    profile = classifier.classify("svc", [])
    assert profile.pattern == WorkloadPattern.STEADY_STATE
    assert profile.recommended_strategy == OptimizationStrategy.RIGHT_SIZING
    assert profile.confidence_score == 50.0
    assert profile.sample_count == 0


def test_periodicity_requires_a_day_of_samples(make_snapshots):
    """24개 미만이면 주기성 0."""
    assert periodicity_score(make_snapshots(23, cpu_percent=[float(i + 1) for i in range(23)])) == 0.0


def test_feature_vector_length(periodic_week, classifier):
    """특성 벡터는 17개."""
    assert len(classifier.extract_features(periodic_week).to_vector()) == 17


def test_confidence_score_bounds(classifier):
    """신뢰도는 0~100."""
    assert classifier.confidence_score(1000, WorkloadFeatures(cpu_mean=50.0, cpu_std=1.0)) == 100.0
    assert classifier.confidence_score(0, WorkloadFeatures(cpu_mean=50.0, cpu_std=20.0)) == 50.0


def test_repeated_classification_is_identical(periodic_week, classifier):
    """같은 입력으로 두 번 분류해도 직렬화 결과가 같다."""
    first = classifier.classify("order-service", periodic_week)
    second = classifier.classify("order-service", periodic_week)
    assert first.model_dump_json() == second.model_dump_json()
