"""
Dr.Leak — Групування кандидатів за рівнем впевненості

Відсортований (спадно) список ймовірностей ділиться на групи
HIGH / MEDIUM / LOW за двома найбільшими "ліктями" — відносними
падіннями d_i = (v_i - v_{i+1}) / max(v_i, eps).

- Немає ліктя >= 0.2 → все LOW
- Один слабкий лікоть → верх MEDIUM, решта LOW
- Один сильний лікоть (>= 0.3) → верх HIGH, решта LOW
- Два лікті → верх HIGH (якщо перший сильний, інакше MEDIUM),
  середина MEDIUM, низ LOW

Менше 3 кандидатів — групування за відношенням p / max_p.
"""

from enum import Enum
from typing import List, Sequence


FIRST_ELBOW_STRONG = 0.3
SECOND_ELBOW_MIN = 0.2

_EPS = 1e-9


class ConfidenceBand(str, Enum):
    """Рівень впевненості кандидата"""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


def ratio_band(p: float, max_p: float) -> ConfidenceBand:
    """Рівень за відношенням до найбільшої ймовірності"""
    if max_p <= 0:
        return ConfidenceBand.LOW
    ratio = p / max_p
    if ratio >= 0.7:
        return ConfidenceBand.HIGH
    if ratio >= 0.3:
        return ConfidenceBand.MEDIUM
    return ConfidenceBand.LOW


def compute_elbow_bands(sorted_probs: Sequence[float]) -> List[ConfidenceBand]:
    """
    Групи для списку ймовірностей, відсортованого спадно.

    Args:
        sorted_probs: [p_1 >= p_2 >= ...]

    Returns:
        Список ConfidenceBand тієї ж довжини
    """
    n = len(sorted_probs)
    bands = [ConfidenceBand.LOW] * n
    if n <= 1:
        return bands

    drops = []
    for i in range(n - 1):
        vi = sorted_probs[i]
        d = max(0.0, (vi - sorted_probs[i + 1]) / max(vi, _EPS))
        drops.append((d, i))

    # Два найбільші падіння; при рівності раніший індекс
    drops.sort(key=lambda x: (-x[0], x[1]))
    top_two = sorted(drops[:2], key=lambda x: x[1])

    d1, i1 = top_two[0]
    d2, i2 = top_two[1] if len(top_two) > 1 else (0.0, None)

    has_first = d1 >= SECOND_ELBOW_MIN
    has_second = i2 is not None and d2 >= SECOND_ELBOW_MIN
    first_strong = d1 >= FIRST_ELBOW_STRONG

    if not has_first:
        return bands

    if not has_second:
        top = ConfidenceBand.HIGH if first_strong else ConfidenceBand.MEDIUM
        for j in range(i1 + 1):
            bands[j] = top
        return bands

    for j in range(i1 + 1):
        bands[j] = ConfidenceBand.HIGH if first_strong else ConfidenceBand.MEDIUM
    for j in range(i1 + 1, min(i2 + 1, n)):
        bands[j] = ConfidenceBand.MEDIUM
    return bands


def assign_bands(sorted_probs: Sequence[float]) -> List[ConfidenceBand]:
    """Групи для відображення: лікті для >= 3 кандидатів, інакше відношення"""
    if len(sorted_probs) >= 3:
        return compute_elbow_bands(sorted_probs)
    max_p = max(sorted_probs) if sorted_probs else 0.0
    return [ratio_band(p, max_p) for p in sorted_probs]
