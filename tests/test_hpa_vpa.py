# tests/test_hpa_vpa.py

"""
HPAAdvisor / VPAAdvisor 테스트.
"""

import pytest

from analyzer.core.scaling.hpa import HPAAdvisor, classify_load
from analyzer.core.scaling.vpa import VPAAdvisor, recommendation_label, update_mode
from analyzer.models.scaling import LoadClass


def test_hpa_steady_load(steady_window):
    """CPU 50% 고정: STABLE, min 2 / max 6 / 권장 3."""
    hpa = HPAAdvisor().recommend("order-service", steady_window)

    assert hpa.load_class == LoadClass.STABLE
    assert hpa.min_replicas == 2
    assert hpa.max_replicas == 6
    assert hpa.recommended_replicas == 3
    assert hpa.target_cpu_utilization == 70
    assert hpa.target_memory_utilization == 80
    assert hpa.scale_up_policy.description == "Balanced scale-up policy"
    assert hpa.scale_down_policy.stabilization_window_seconds == 300
    assert hpa.custom_metrics == []
    assert hpa.confidence == pytest.approx(0.9)
    assert hpa.estimated_cost_impact == 0.0
    assert "Workload pattern: STABLE." in hpa.rationale


def test_hpa_highly_variable(make_snapshots):
    """드문 95% 스파이크: HIGHLY_VARIABLE, 공격적 scale-up."""
    cpu = [20.0] * 199 + [95.0]
    hpa = HPAAdvisor().recommend("svc", make_snapshots(200, cpu_percent=cpu))

    assert hpa.load_class == LoadClass.HIGHLY_VARIABLE
    assert hpa.min_replicas == 2
    assert hpa.max_replicas == 10
    assert hpa.target_cpu_utilization == 60
    assert hpa.scale_up_policy.behavior == "Aggressive"
    assert hpa.scale_up_policy.percentage_per_scale == 100


def test_hpa_custom_metrics(make_snapshots):
    """HTTP / 커넥션 풀 데이터가 있으면 커스텀 메트릭 목표 추가."""
    snapshots = make_snapshots(20, cpu_percent=50.0, http_count=100.0, pool_active=5.0, pool_max=10.0)
    names = [m.metric_name for m in HPAAdvisor().recommend("svc", snapshots).custom_metrics]
    assert names == ["http_requests_per_second", "hikari_active_connections"]


def test_hpa_default():
    """데이터가 없으면 기본 HPA."""
    hpa = HPAAdvisor().recommend("svc", [])
    assert (hpa.min_replicas, hpa.max_replicas, hpa.recommended_replicas) == (2, 10, 3)
    assert hpa.target_cpu_utilization == 70
    assert hpa.target_memory_utilization == 75
    assert hpa.confidence == 0.3


@pytest.mark.parametrize(
    "avg, peak, expected",
    [
        (20.0, 80.0, LoadClass.HIGHLY_VARIABLE),
        (40.0, 75.0, LoadClass.MODERATE_VARIABLE),
        (75.0, 80.0, LoadClass.HIGH_STEADY),
        (20.0, 25.0, LoadClass.LOW_STEADY),
        (50.0, 55.0, LoadClass.STABLE),
    ],
)
def test_classify_load(avg, peak, expected):
    """평균 / 최대 CPU → 부하 유형."""
    assert classify_load(avg, peak) == expected


def test_hpa_max_replicas_never_below_min():
    """LOW_STEADY 의 최대 replica 도 최소값 이상."""
    assert HPAAdvisor().max_replicas(LoadClass.LOW_STEADY, 1.0, 3) >= 1
    assert HPAAdvisor().max_replicas(LoadClass.HIGH_STEADY, 1.0, 3) >= 3


def test_vpa_steady(steady_window):
    """CPU 50% / heap 512Mi: 575m / 766Mi, Initial 모드."""
    vpa = VPAAdvisor().recommend("order-service", steady_window)

    assert vpa.recommended_requests.cpu == "575m"
    assert vpa.recommended_requests.memory == "766Mi"
    assert vpa.recommended_limits.cpu == "862m"
    assert vpa.recommended_limits.memory == "1149Mi"
    assert vpa.current_requests.cpu == "100m"
    assert vpa.update_mode == "Initial"
    assert vpa.resource_policy.cpu_range.min == "287m"
    assert vpa.resource_policy.cpu_range.max == "1150m"
    assert vpa.estimated_monthly_savings < 0
    assert vpa.recommendation == "Use VPA"
    assert vpa.confidence == pytest.approx(0.75)
    assert vpa.rationale.startswith("VPA mode: Initial.")


def test_vpa_minimums(make_snapshots):
    """낮은 사용량도 100m / 256Mi 아래로 내려가지 않는다."""
    vpa = VPAAdvisor().recommend("svc", make_snapshots(20, cpu_percent=2.0, heap_used_bytes=1024.0))
    assert vpa.recommended_requests.cpu == "100m"
    assert vpa.recommended_requests.memory == "256Mi"


def test_vpa_default():
    """데이터가 없으면 기본 VPA."""
    vpa = VPAAdvisor().recommend("svc", [])
    assert vpa.recommended_requests.cpu == "200m"
    assert vpa.recommended_requests.memory == "512Mi"
    assert vpa.update_mode == "Initial"
    assert vpa.confidence == 0.3


def test_update_mode_and_label():
    """CPU 분산 기준 모드 / 권고 라벨."""
    assert update_mode(600.0) == "Auto"
    assert update_mode(300.0) == "Recreate"
    assert update_mode(50.0) == "Initial"
    assert recommendation_label(400.0, 20.0) == "Use both HPA and VPA"
    assert recommendation_label(400.0, 5.0) == "Use HPA"
    assert recommendation_label(50.0, -15.0) == "Use VPA"
    assert recommendation_label(50.0, 5.0) == "Manual tuning"
