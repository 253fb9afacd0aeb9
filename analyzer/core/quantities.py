"""
Kubernetes 리소스 수량 문자열 파싱.

- CPU: "350m" → 0.35 core, "2" → 2.0 core
- Memory: "512Mi" → 0.5 GB, "2Gi" → 2.0 GB, "1073741824" (bytes) → 1.0 GB
"""

from __future__ import annotations

import re
from typing import Union

from analyzer.core.errors import QuantityParseError
from analyzer.models.analysis import ResourceQuantity

_QUANTITY_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(m|Mi|Gi)?\s*$")

BYTES_PER_MI = 1024 * 1024
BYTES_PER_GI = 1024 * 1024 * 1024

Quantity = Union[str, ResourceQuantity]


def parse_quantity(text: str) -> tuple[float, str]:
    """
    "350m" → (350.0, "m"), "2" → (2.0, "").

    Raises
    ------
    QuantityParseError
        숫자/단위 형식이 아닌 경우.
    """
    match = _QUANTITY_RE.match(text or "")
    if not match:
        raise QuantityParseError(f"Malformed resource quantity: {text!r}")
    return float(match.group(1)), match.group(2) or ""


def parse_cpu_cores(quantity: Quantity) -> float:
    """CPU 수량을 core 단위로."""
    value, unit = parse_quantity(str(quantity))
    if unit == "m":
        return value / 1000.0
    if unit == "":
        return value
    raise QuantityParseError(f"Not a CPU quantity: {quantity!s}")


def parse_memory_gb(quantity: Quantity) -> float:
    """메모리 수량을 GiB 단위로. 단위가 없으면 bytes 로 본다."""
    value, unit = parse_quantity(str(quantity))
    if unit == "Mi":
        return value / 1024.0
    if unit == "Gi":
        return value
    if unit == "":
        return value / BYTES_PER_GI
    raise QuantityParseError(f"Not a memory quantity: {quantity!s}")
