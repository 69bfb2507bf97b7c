"""
Dr.Leak — Оновлення posterior

Байєсівське оновлення з фіксованими likelihood ratios:

    LR = lr_pos      якщо відповідь збігається з indicates[fact]
    LR = lr_neg      якщо факт є в indicates, але відповідь інша
    LR = lr_unknown  якщо відповідь UNKNOWN
    LR = 1.0         якщо факт не згадується в indicates кластера

Після нормалізації — відсікання кандидатів з малою ймовірністю
(абсолютний та відносний пороги).
"""

from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from dr_leak.config.settings import LikelihoodConfig, PruningConfig
from dr_leak.knowledge_base.base import KnowledgeBase
from dr_leak.knowledge_base.facts import FactValue, is_unknown, value_in
from dr_leak.schemas.knowledge import ClusterRule


def likelihood_ratio(
    rule: ClusterRule,
    fact_id: str,
    value: FactValue,
    likelihood: Optional[LikelihoodConfig] = None,
) -> float:
    """LR відповіді для одного кластера"""
    likelihood = likelihood or LikelihoodConfig()

    if is_unknown(value):
        return likelihood.lr_unknown

    allowed = rule.indicates.get(fact_id)
    if allowed is None:
        return 1.0

    return likelihood.lr_pos if value_in(value, allowed) else likelihood.lr_neg


def prune_candidates(
    posterior: Mapping[str, float],
    candidate_ids: Sequence[str],
    pruning: Optional[PruningConfig] = None,
) -> List[str]:
    """
    Відсікти кандидатів з малою ймовірністю.

    Кандидат лишається якщо p >= abs_threshold AND
    (max_p <= 0 OR p / max_p >= rel_threshold).

    Список замінюється лише якщо результат непорожній і строго менший.
    """
    pruning = pruning or PruningConfig()
    candidate_ids = list(candidate_ids)
    if not candidate_ids:
        return candidate_ids

    max_p = max(posterior.get(cid, 0.0) for cid in candidate_ids)

    keep = []
    for cid in candidate_ids:
        p = posterior.get(cid, 0.0)
        if p >= pruning.abs_threshold and (max_p <= 0 or p / max_p >= pruning.rel_threshold):
            keep.append(cid)

    if keep and len(keep) < len(candidate_ids):
        return keep
    return candidate_ids


def apply_bayes_update(
    kb: KnowledgeBase,
    posterior: Mapping[str, float],
    candidate_ids: Sequence[str],
    fact_id: str,
    value: FactValue,
    likelihood: Optional[LikelihoodConfig] = None,
    pruning: Optional[PruningConfig] = None,
) -> Tuple[Dict[str, float], List[str]]:
    """
    Оновити posterior після відповіді та відсікти кандидатів.

    1. Множимо posterior кожного кластера (весь всесвіт, не лише кандидатів) на LR
    2. Якщо сума <= 0 — повертаємо початковий prior без відсікання
    3. Нормалізуємо
    4. Відсікаємо кандидатів з малою ймовірністю

    Returns:
        (новий posterior, нові кандидати)
    """
    if not posterior:
        posterior = kb.initial_prior()

    updated = dict(posterior)
    for rule in kb.rules:
        cid = rule.cluster_id
        lr = likelihood_ratio(rule, fact_id, value, likelihood)
        updated[cid] = updated.get(cid, 0.0) * lr

    total = sum(updated.values())
    if total <= 0.0:
        return kb.initial_prior(), list(candidate_ids)

    updated = {cid: p / total for cid, p in updated.items()}

    return updated, prune_candidates(updated, candidate_ids, pruning)


def posterior_over_candidates(
    posterior: Mapping[str, float],
    candidate_ids: Sequence[str],
) -> Dict[str, float]:
    """
    Posterior, обмежений кандидатами та ренормалізований.

    Рівномірний розподіл якщо маса кандидатів = 0.
    """
    filtered = {cid: posterior.get(cid, 0.0) for cid in candidate_ids}
    total = sum(filtered.values())

    if total <= 0.0:
        n = max(1, len(candidate_ids))
        return {cid: 1.0 / n for cid in candidate_ids}

    return {cid: p / total for cid, p in filtered.items()}
