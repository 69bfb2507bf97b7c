"""
Dr.Leak — Зворотний індекс фактів

Для кожного факту — три множини кластерів, що згадують його
у requires / excludes / indicates. Будується один раз при ініціалізації.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set

from dr_leak.schemas.knowledge import ClusterRule


BUCKETS = ("requires", "excludes", "indicates")


@dataclass
class FactBuckets:
    """Кластери, що посилаються на факт"""
    requires: Set[str] = field(default_factory=set)
    excludes: Set[str] = field(default_factory=set)
    indicates: Set[str] = field(default_factory=set)

    @property
    def all_clusters(self) -> Set[str]:
        return self.requires | self.excludes | self.indicates


class FactIndex:
    """
    Зворотний індекс fact_id → {requires, excludes, indicates}.

    Приклад:
        index = FactIndex(rules)
        index.clusters_for("leak_under_sink").indicates
        index.fact_phase("water_source_known")  # "A"
    """

    def __init__(self, rules: Iterable[ClusterRule]):
        self._index: Dict[str, FactBuckets] = {}

        for rule in rules:
            for bucket in BUCKETS:
                for fact_id in getattr(rule, bucket):
                    buckets = self._index.setdefault(fact_id, FactBuckets())
                    getattr(buckets, bucket).add(rule.cluster_id)

    def clusters_for(self, fact_id: str) -> Optional[FactBuckets]:
        return self._index.get(fact_id)

    def facts_for_candidates(self, candidate_ids: Iterable[str]) -> Set[str]:
        """Факти, які згадує хоча б один з кандидатів"""
        remaining = set(candidate_ids)
        return {
            fact_id for fact_id, buckets in self._index.items()
            if buckets.all_clusters & remaining
        }

    def fact_phase(self, fact_id: str) -> Optional[str]:
        """
        Фаза факту:
        - "A": факт фільтрує кластери (є в requires/excludes)
        - "B": факт лише розрізняє кластери (тільки indicates)
        - None: факт невідомий
        """
        buckets = self._index.get(fact_id)
        if buckets is None:
            return None
        if buckets.requires or buckets.excludes:
            return "A"
        if buckets.indicates:
            return "B"
        return None

    @property
    def fact_ids(self) -> List[str]:
        return list(self._index.keys())

    def __contains__(self, fact_id: str) -> bool:
        return fact_id in self._index

    def __len__(self) -> int:
        return len(self._index)

    def __repr__(self) -> str:
        return f"FactIndex(facts={len(self._index)})"
