# tests/test_cost.py

"""
CostCalculator 및 수량 파싱 테스트.
"""

import pytest

from analyzer.core.cost import CostCalculator, round2
from analyzer.core.errors import QuantityParseError
from analyzer.core.quantities import parse_cpu_cores, parse_memory_gb
from analyzer.models.analysis import CurrentResources, mebibytes, millicores


def test_parse_cpu_cores():
    """millicore / core 파싱."""
    assert parse_cpu_cores("350m") == pytest.approx(0.35)
    assert parse_cpu_cores("2") == pytest.approx(2.0)
    assert parse_cpu_cores(millicores(500)) == pytest.approx(0.5)


def test_parse_memory_gb():
    """Mi / Gi / bytes 파싱."""
    assert parse_memory_gb("512Mi") == pytest.approx(0.5)
    assert parse_memory_gb("2Gi") == pytest.approx(2.0)
    assert parse_memory_gb("1073741824") == pytest.approx(1.0)
    assert parse_memory_gb(mebibytes(1024)) == pytest.approx(1.0)


@pytest.mark.parametrize("text", ["", "abc", "12x", "Mi", "-5m"])
def test_malformed_quantity(text):
    """형식이 잘못된 수량은 QuantityParseError."""
    with pytest.raises(QuantityParseError):
        parse_cpu_cores(text)


def test_cost_analysis(settings):
    """1 core / 2Gi → 500m / 1Gi 비교."""
    calc = CostCalculator(settings)
    current = CurrentResources(
        cpu_request=millicores(1000),
        cpu_limit=millicores(2000),
        memory_request=mebibytes(2048),
        memory_limit=mebibytes(3072),
    )
    analysis = calc.cost_analysis(current, "500m", "1Gi")

    assert analysis.current_monthly_cost == pytest.approx(40.0)
    assert analysis.recommended_monthly_cost == pytest.approx(20.0)
    assert analysis.monthly_savings == pytest.approx(20.0)
    assert analysis.annual_savings == pytest.approx(240.0)
    assert analysis.savings_percentage == 50


def test_savings_percentage_truncates(settings):
    """퍼센트는 0 방향으로 버림."""
    calc = CostCalculator(settings)
    current = CurrentResources(cpu_request=millicores(300), memory_request=mebibytes(1024))
    analysis = calc.cost_analysis(current, "200m", "1Gi")
    # 14.0 → 11.0, 21.43%
    assert analysis.savings_percentage == 21


def test_estimate_savings_floored_at_zero(settings):
    """P95 가 높아 추천이 기준보다 비싸면 0."""
    calc = CostCalculator(settings)
    assert calc.estimate_savings([100.0] * 10, [100.0] * 10) == 0.0
    assert calc.estimate_savings([50.0] * 10, [50.0] * 10) == pytest.approx(16.0)


def test_replica_monthly_cost(settings):
    """시간 단가 × 730시간."""
    calc = CostCalculator(settings)
    assert calc.replica_monthly_cost(3, 1.0, 2.0) == pytest.approx(3 * (0.042 + 2 * 0.0052) * 730)


def test_round2_half_up():
    """소수 둘째 자리 반올림."""
    assert round2(1.005 + 1e-9) == 1.01
    assert round2(2.344) == 2.34
