"""
Dr.Leak — Ентропія для вибору питань

Для кожного факту рахуємо розподіл ймовірностей над його значеннями:

    P(value) ∝ Σ P(cluster)  для кандидатів, у яких indicates[fact] містить value

і ентропію Шеннона цього розподілу (в бітах). Питання з найбільшою
ентропією — те, відповідь на яке найменш передбачувана, тобто
найбільш інформативна при поточних переконаннях.
"""

import numpy as np
from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence

from dr_leak.knowledge_base.base import KnowledgeBase
from dr_leak.knowledge_base.facts import FactValue, value_in


@dataclass
class EntropyResult:
    """Результат оцінки факту"""
    fact_id: str
    entropy: float
    options: List[FactValue]
    option_probs: List[float]

    def __repr__(self) -> str:
        return (
            f"EntropyResult(fact_id='{self.fact_id}', entropy={self.entropy:.4f}, "
            f"options={len(self.options)})"
        )


def entropy(probs: Sequence[float]) -> float:
    """
    Ентропія Шеннона в бітах.

    H = -Σ p_i * log2(p_i), доданки з p_i = 0 пропускаються.
    """
    probs = np.asarray(probs, dtype=np.float64)
    probs = probs[probs > 0]
    if probs.size == 0:
        return 0.0
    return float(-np.sum(probs * np.log2(probs)))


def normalize_probs(probs: Sequence[float]) -> np.ndarray:
    """Нормалізувати ймовірності щоб сума = 1 (рівномірний якщо сума = 0)"""
    probs = np.asarray(probs, dtype=np.float64)
    if probs.size == 0:
        return probs
    total = float(np.sum(probs))
    if total <= 0:
        return np.full(probs.shape, 1.0 / probs.size)
    return probs / total


def option_distribution(
    kb: KnowledgeBase,
    fact_id: str,
    options: Sequence[FactValue],
    candidate_ids: Iterable[str],
    candidate_probs: Dict[str, float],
) -> np.ndarray:
    """
    Розподіл ймовірностей над значеннями факту.

    Args:
        kb: База знань
        fact_id: Факт
        options: Можливі значення
        candidate_ids: Кандидати, що залишились
        candidate_probs: Ренормалізований posterior над кандидатами

    Returns:
        Нормалізований масив (рівномірний якщо жоден кандидат
        не згадує факт в indicates)
    """
    candidate_ids = list(candidate_ids)
    masses = np.zeros(len(options), dtype=np.float64)

    for i, option in enumerate(options):
        for cid in candidate_ids:
            rule = kb.get_rule(cid)
            if rule is None:
                continue
            allowed = rule.indicates.get(fact_id)
            if allowed and value_in(option, allowed):
                masses[i] += candidate_probs.get(cid, 0.0)

    return normalize_probs(masses)


def fact_entropy(
    kb: KnowledgeBase,
    fact_id: str,
    options: Sequence[FactValue],
    candidate_ids: Iterable[str],
    candidate_probs: Dict[str, float],
) -> EntropyResult:
    """Ентропія відповіді на питання про факт"""
    probs = option_distribution(kb, fact_id, options, candidate_ids, candidate_probs)
    return EntropyResult(
        fact_id=fact_id,
        entropy=entropy(probs),
        options=list(options),
        option_probs=[float(p) for p in probs],
    )
