"""
Dr.Leak — Фільтр кандидатів

Чиста функція: множина логічно можливих кластерів залежить лише від
повного словника відомих фактів, а не від порядку відповідей.
Перераховується з нуля після кожної відповіді.
"""

from typing import List, Mapping

from dr_leak.knowledge_base.base import KnowledgeBase
from dr_leak.knowledge_base.facts import FactValue, is_unknown, value_in
from dr_leak.schemas.knowledge import ClusterRule


def is_compatible(rule: ClusterRule, facts_known: Mapping[str, FactValue]) -> bool:
    """
    Чи сумісний кластер з відомими фактами.

    - requires: відоме значення (не UNKNOWN) має бути в списку дозволених
    - excludes: відоме значення (не UNKNOWN) не повинно бути в списку заборонених
    """
    for fact_id, allowed in rule.requires.items():
        if fact_id not in facts_known:
            continue
        value = facts_known[fact_id]
        if is_unknown(value):
            continue
        if not value_in(value, allowed):
            return False

    for fact_id, banned in rule.excludes.items():
        if fact_id not in facts_known:
            continue
        value = facts_known[fact_id]
        if is_unknown(value):
            continue
        if value_in(value, banned):
            return False

    return True


def recompute_candidates(
    kb: KnowledgeBase,
    facts_known: Mapping[str, FactValue],
) -> List[str]:
    """
    Кандидати, що залишились (у порядку бази знань).

    O(clusters × facts_known).
    """
    return [
        rule.cluster_id
        for rule in kb.rules
        if is_compatible(rule, facts_known)
    ]
