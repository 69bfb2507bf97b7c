"""
Dr.Leak — База знань сесії

KnowledgeBase — незмінне в межах сесії представлення правил кластерів
і банку питань для конкретного приміщення:
- фільтр за room_type (без урахування регістру)
- відкидання правил без indicates
- зворотний індекс фактів
- початковий prior (room priors або рівномірний)
"""

from typing import Any, Dict, List, Mapping, Optional

from dr_leak.schemas.knowledge import (
    ClusterRule,
    QuestionBank,
    QuestionSpec,
    parse_cluster_rules,
    parse_question_bank,
)
from .fact_index import FactIndex


class KnowledgeBase:
    """
    Правила, питання та індекс для однієї сесії.

    Приклад:
        kb = KnowledgeBase.build(raw_rules, raw_bank, room="BATHROOM")
        print(kb.cluster_ids)
        print(kb.initial_prior())
    """

    def __init__(
        self,
        rules: List[ClusterRule],
        question_bank: QuestionBank,
        room: str = "",
        policy_shims: Optional[Mapping[str, Any]] = None,
        room_priors: Optional[Mapping[str, float]] = None,
    ):
        self.room = room or ""
        self.question_bank = question_bank
        self.policy_shims = policy_shims or None
        self.room_priors = room_priors or None

        # Дублікати cluster_id: лишається перше правило
        self._by_id: Dict[str, ClusterRule] = {}
        for rule in rules:
            self._by_id.setdefault(rule.cluster_id, rule)
        self.rules = list(self._by_id.values())
        self.fact_index = FactIndex(self.rules)

    @classmethod
    def build(
        cls,
        clusters: Any,
        question_bank: Any,
        room: str = "",
        policy_shims: Optional[Mapping[str, Any]] = None,
        room_priors: Optional[Mapping[str, Mapping[str, float]]] = None,
    ) -> "KnowledgeBase":
        """
        Побудувати базу знань з сирих даних завантажувача.

        Args:
            clusters: Список правил (dict або ClusterRule)
            question_bank: Банк питань (dict або QuestionBank)
            room: Тип приміщення сесії
            policy_shims: {"carrier:<id>": {ROOM: {must_asks: [...]}}}
            room_priors: {ROOM: {cluster_id: weight}}

        Returns:
            KnowledgeBase
        """
        rules = parse_cluster_rules(clusters)

        room_norm = (room or "").strip().lower()
        if room_norm:
            rules = [
                r for r in rules
                if not r.room_type or r.room_type.strip().lower() == room_norm
            ]

        # Правила без indicates неможливо розрізнити питаннями
        rules = [r for r in rules if r.is_discriminating]

        return cls(
            rules=rules,
            question_bank=parse_question_bank(question_bank),
            room=room,
            policy_shims=policy_shims,
            room_priors=select_room_priors(room_priors, room),
        )

    @property
    def cluster_ids(self) -> List[str]:
        """Всі кластери сесії (порядок бази знань)"""
        return list(self._by_id.keys())

    def get_rule(self, cluster_id: str) -> Optional[ClusterRule]:
        return self._by_id.get(cluster_id)

    def get_question(self, fact_id: str) -> Optional[QuestionSpec]:
        return self.question_bank.get(fact_id)

    def initial_prior(self) -> Dict[str, float]:
        """
        Початковий розподіл над усіма кластерами.

        Room priors (обмежені кластерами сесії, від'ємні → 0) якщо їх
        сума > 0, інакше рівномірний.
        """
        ids = self.cluster_ids

        if self.room_priors:
            weights = {}
            for cid in ids:
                w = self.room_priors.get(cid, 0.0)
                try:
                    w = float(w)
                except (TypeError, ValueError):
                    w = 0.0
                weights[cid] = w if w > 0 else 0.0
            total = sum(weights.values())
            if total > 0:
                return {cid: w / total for cid, w in weights.items()}

        n = max(1, len(ids))
        return {cid: 1.0 / n for cid in ids}

    def __len__(self) -> int:
        return len(self._by_id)

    def __repr__(self) -> str:
        return (
            f"KnowledgeBase(room='{self.room}', "
            f"clusters={len(self._by_id)}, "
            f"facts={len(self.fact_index)}, "
            f"questions={len(self.question_bank)})"
        )


def select_room_priors(
    room_priors: Optional[Mapping[str, Any]],
    room: str,
) -> Optional[Dict[str, float]]:
    """Вибрати priors для приміщення (ключ без урахування регістру)"""
    if not room_priors or not isinstance(room_priors, Mapping):
        return None

    room_norm = (room or "").strip().lower()
    for key, priors in room_priors.items():
        if str(key).strip().lower() == room_norm and isinstance(priors, Mapping):
            return dict(priors)
    return None
