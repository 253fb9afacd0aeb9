# tests/test_anomaly.py

"""
AnomalyDetector 단위 테스트.
"""

import pytest

from analyzer.config.settings import AnalyzerSettings
from analyzer.core.anomaly import AnomalyDetector
from analyzer.models.anomaly import AnomalyType, MetricType, Severity


@pytest.fixture
def detector():
    return AnomalyDetector()


def test_cpu_spike(make_snapshots, detector):
    """평소 30% 부근에서 마지막 샘플이 95% 로 튀면 SPIKE (MEDIUM 이상)."""
    cpu = [29.0 if i % 2 else 31.0 for i in range(50)] + [95.0]
    snapshots = make_snapshots(51, cpu_percent=cpu)

    anomalies = detector.analyze_all("order-service", snapshots)

    spikes = [a for a in anomalies if a.metric_type == MetricType.CPU and a.anomaly_type == AnomalyType.SPIKE]
    assert len(spikes) == 1
    assert spikes[0].severity.rank >= Severity.MEDIUM.rank
    assert spikes[0].actual_value == 95.0
    assert spikes[0].z_score > 2.0
    assert spikes[0].detected_at == snapshots[-1].timestamp
    assert "CPU usage spike detected" in spikes[0].description


def test_cpu_drop(make_snapshots, detector):
    """급락은 DROP."""
    cpu = [60.0] * 30 + [5.0]
    anomalies = detector.analyze_cpu("svc", make_snapshots(31, cpu_percent=cpu))
    assert [a.anomaly_type for a in anomalies] == [AnomalyType.DROP]


def test_sustained_high_cpu(make_snapshots, detector):
    """마지막 6개 샘플이 모두 80% 초과면 SUSTAINED_HIGH (HIGH)."""
    cpu = [85.0] * 20
    anomalies = detector.analyze_cpu("svc", make_snapshots(20, cpu_percent=cpu))
    assert len(anomalies) == 1
    assert anomalies[0].anomaly_type == AnomalyType.SUSTAINED_HIGH
    assert anomalies[0].severity == Severity.HIGH


def test_spike_and_sustained_can_both_fire(make_snapshots, detector):
    """z-score 스파이크와 지속 고부하는 동시에 보고될 수 있다."""
    cpu = [50.0] * 40 + [85.0] * 5 + [99.0]
    anomalies = detector.analyze_cpu("svc", make_snapshots(46, cpu_percent=cpu))
    kinds = {a.anomaly_type for a in anomalies}
    assert kinds == {AnomalyType.SPIKE, AnomalyType.SUSTAINED_HIGH}


def test_memory_leak_trend(make_snapshots, detector):
    """heap 이 30% → 90% 로 선형 증가하면 PATTERN_BREAK (HIGH)."""
    heap = [30.0 + i for i in range(61)]
    anomalies = detector.analyze_all("svc", make_snapshots(61, heap_percent=heap))

    assert len(anomalies) == 1
    leak = anomalies[0]
    assert leak.metric_type == MetricType.MEMORY
    assert leak.anomaly_type == AnomalyType.PATTERN_BREAK
    assert leak.severity == Severity.HIGH
    assert leak.expected_value == 30.0
    assert "Potential memory leak" in leak.description


def test_pool_exhaustion(make_snapshots, detector):
    """active == max 이면 CRITICAL 풀 고갈."""
    snapshots = make_snapshots(20, pool_active=20.0, pool_max=20.0)
    anomalies = detector.analyze_pool("svc", snapshots)

    assert len(anomalies) == 1
    assert anomalies[0].severity == Severity.CRITICAL
    assert anomalies[0].actual_value == pytest.approx(100.0)
    assert "20/20" in anomalies[0].description


def test_pool_exhaustion_in_ten_sample_window(make_snapshots, detector):
    """10개 중 6개가 20/20 이면 CRITICAL 풀 고갈 하나만 보고."""
    active = [10.0] * 4 + [20.0] * 6
    anomalies = detector.analyze_pool("svc", make_snapshots(10, pool_active=active, pool_max=20.0))

    assert len(anomalies) == 1
    assert anomalies[0].metric_type == MetricType.POOL
    assert anomalies[0].anomaly_type == AnomalyType.SPIKE
    assert anomalies[0].severity == Severity.CRITICAL
    assert anomalies[0].actual_value == pytest.approx(100.0)


def test_pool_usage_spike_by_z_score(make_snapshots, detector):
    """낮은 사용률(10%) 뒤 70% 로 오르면 z-score 기반 SPIKE (고갈 아님)."""
    # 15개 중 2개가 0.7 → 마지막 값의 z = sqrt(6.5) ≈ 2.55 → HIGH
    active = [2.0] * 13 + [14.0] * 2
    anomalies = detector.analyze_pool("svc", make_snapshots(15, pool_active=active, pool_max=20.0))

    assert len(anomalies) == 1
    spike = anomalies[0]
    assert spike.anomaly_type == AnomalyType.SPIKE
    assert spike.severity == Severity.HIGH
    assert spike.z_score == pytest.approx(6.5 ** 0.5)
    assert spike.actual_value == pytest.approx(70.0)
    assert spike.expected_value == pytest.approx(18.0)
    assert "Connection pool usage spike" in spike.description


def test_pool_outlier_at_half_usage_is_ignored(make_snapshots, detector):
    """z-score 가 커도 사용률이 50% 이하면 보고하지 않는다."""
    active = [2.0] * 13 + [10.0] * 2
    assert detector.analyze_pool("svc", make_snapshots(15, pool_active=active, pool_max=20.0)) == []


def test_latency_drop_is_not_anomaly(make_snapshots, detector):
    """응답시간 감소는 보고하지 않는다."""
    latency = [200.0] * 30 + [10.0]
    assert detector.analyze_latency("svc", make_snapshots(31, http_duration_p95=latency)) == []


def test_latency_absolute_threshold(make_snapshots, detector):
    """1000ms 초과 지연은 z-score 와 무관하게 보고."""
    anomalies = detector.analyze_latency("svc", make_snapshots(15, http_duration_p95=1500.0))
    assert [a.anomaly_type for a in anomalies] == [AnomalyType.SUSTAINED_HIGH]


def test_too_few_samples(make_snapshots, detector):
    """차원별 최소 샘플 수 미만이면 평가하지 않는다."""
    assert detector.analyze_all("svc", make_snapshots(9, cpu_percent=[10.0] * 8 + [99.0])) == []


def test_empty_and_disabled(make_snapshots):
    """빈 입력 / 비활성화는 빈 리스트."""
    assert AnomalyDetector().analyze_all("svc", []) == []
    disabled = AnomalyDetector(AnalyzerSettings(enabled=False))
    assert disabled.analyze_all("svc", make_snapshots(20, cpu_percent=[85.0] * 20)) == []


def test_severity_monotonic(detector):
    """|z| 가 커질수록 심각도는 내려가지 않는다."""
    ranks = [detector.severity_for(z / 10).rank for z in range(0, 50)]
    assert ranks == sorted(ranks)
    assert detector.severity_for(3.0) == Severity.CRITICAL
    assert detector.severity_for(2.5) == Severity.HIGH
    assert detector.severity_for(2.0) == Severity.MEDIUM
    assert detector.severity_for(1.0) == Severity.LOW


def test_deterministic(make_snapshots, detector):
    """같은 입력이면 같은 결과."""
    cpu = [30.0] * 40 + [95.0]
    snapshots = make_snapshots(41, cpu_percent=cpu)
    assert detector.analyze_all("svc", snapshots) == detector.analyze_all("svc", list(reversed(snapshots)))
