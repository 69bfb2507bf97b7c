"""
Dr.Leak — Question Selector

Вибір наступного питання:

1. Frontier — факти, які згадує хоча б один кандидат, мінус відомі/запитані
2. Phase A (carrier) — якщо задано carrier_group і є policy shims,
   перше must-ask питання з frontier
3. Загальний вибір — факт з максимальною ентропією розподілу відповідей

Tie-break: ентропія (округлена до 12 знаків) спадно, потім fact_id лексично.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Set

from dr_leak.config.settings import EngineConfig
from dr_leak.knowledge_base.base import KnowledgeBase
from dr_leak.knowledge_base.facts import FactValue, format_value, unique_values
from .answer_processor import SessionState
from .information_gain import EntropyResult, fact_entropy
from .posterior import posterior_over_candidates


ORIGIN_CARRIER = "carrier"
ORIGIN_NORMAL = "normal"

ENTROPY_DECIMALS = 12


@dataclass(frozen=True)
class QuestionOption:
    """Варіант відповіді"""
    label: str
    value: FactValue

    def to_dict(self) -> dict:
        return {"label": self.label, "value": self.value}


@dataclass(frozen=True)
class NextQuestion:
    """Наступне питання для користувача"""
    fact_id: str
    prompt: str
    options: List[QuestionOption] = field(default_factory=list)
    origin: str = ORIGIN_NORMAL
    phase: Optional[str] = None
    entropy: Optional[float] = None

    def to_dict(self) -> dict:
        return {
            "fact_id": self.fact_id,
            "prompt": self.prompt,
            "options": [o.to_dict() for o in self.options],
            "origin": self.origin,
            "phase": self.phase,
            "entropy": self.entropy,
        }


def frontier(kb: KnowledgeBase, state: SessionState) -> Set[str]:
    """Факти, що ще можуть розрізнити кандидатів"""
    facts = kb.fact_index.facts_for_candidates(state.candidate_ids)
    facts -= set(state.facts_known)
    facts -= set(state.questions_asked)
    return facts


def infer_options(
    kb: KnowledgeBase,
    fact_id: str,
    candidate_ids: Sequence[str],
) -> List[FactValue]:
    """Значення факту з indicates кандидатів (порядок першої появи)"""
    values = []
    for cid in candidate_ids:
        rule = kb.get_rule(cid)
        if rule is None:
            continue
        values.extend(rule.indicates.get(fact_id, []))
    return unique_values(values)


def resolve_options(
    kb: KnowledgeBase,
    fact_id: str,
    candidate_ids: Sequence[str],
) -> List[QuestionOption]:
    """
    Варіанти відповіді для факту.

    Спочатку схема з банку питань; якщо options порожній —
    значення виводяться з indicates кандидатів, що залишились.
    """
    spec = kb.get_question(fact_id)

    if spec is not None and spec.options:
        labels = spec.option_labels
        return [
            QuestionOption(
                label=labels[i] if i < len(labels) and labels[i] else format_value(value),
                value=value,
            )
            for i, value in enumerate(spec.options)
        ]

    return [
        QuestionOption(label=format_value(value), value=value)
        for value in infer_options(kb, fact_id, candidate_ids)
    ]


def build_question(
    kb: KnowledgeBase,
    fact_id: str,
    candidate_ids: Sequence[str],
    origin: str = ORIGIN_NORMAL,
    entropy: Optional[float] = None,
) -> Optional[NextQuestion]:
    """Зібрати питання для факту (None якщо немає варіантів відповіді)"""
    options = resolve_options(kb, fact_id, candidate_ids)
    if not options:
        return None

    spec = kb.get_question(fact_id)
    prompt = spec.prompt if spec is not None and spec.prompt else fact_id

    return NextQuestion(
        fact_id=fact_id,
        prompt=prompt,
        options=options,
        origin=origin,
        phase=kb.fact_index.fact_phase(fact_id),
        entropy=entropy,
    )


def must_ask_list(
    policy_shims: Optional[Mapping[str, Any]],
    carrier_group: Any,
    room: str,
) -> List[str]:
    """
    Must-ask список для перевізника та приміщення.

    Формат: {"carrier:<id>": {ROOM: {"must_asks": [...]}}} або
    {"carrier:<id>": {ROOM: [...]}}. Невалідні записи ігноруються.
    """
    if not policy_shims or carrier_group is None:
        return []

    try:
        carrier_key = f"carrier:{int(carrier_group)}"
    except (TypeError, ValueError):
        return []

    per_room = policy_shims.get(carrier_key)
    if not isinstance(per_room, Mapping):
        return []

    entry = per_room.get((room or "").strip().upper())
    if isinstance(entry, Mapping):
        entry = entry.get("must_asks")
    if not isinstance(entry, list):
        return []

    return [str(f) for f in entry if isinstance(f, (str, int))]


class QuestionSelector:
    """
    Вибір найкращого питання.

    Приклад:
        selector = QuestionSelector(kb, EngineConfig(room="BATHROOM"))
        question = selector.select(state)

        if question:
            print(f"Питання: {question.prompt}")
            print(f"Ентропія: {question.entropy:.4f}")
    """

    def __init__(self, kb: KnowledgeBase, config: EngineConfig):
        self.kb = kb
        self.config = config

    def frontier(self, state: SessionState) -> Set[str]:
        return frontier(self.kb, state)

    def select_carrier_question(
        self,
        state: SessionState,
        facts: Optional[Set[str]] = None,
    ) -> Optional[NextQuestion]:
        """Phase A: перше must-ask питання перевізника з frontier"""
        if self.config.carrier_group is None or not self.kb.policy_shims:
            return None

        if facts is None:
            facts = self.frontier(state)

        for fact_id in must_ask_list(self.kb.policy_shims, self.config.carrier_group, self.kb.room):
            if fact_id in state.facts_known or fact_id in state.questions_asked:
                continue
            if fact_id not in facts:
                continue
            question = build_question(self.kb, fact_id, state.candidate_ids, origin=ORIGIN_CARRIER)
            if question is not None:
                return question

        return None

    def rank(
        self,
        state: SessionState,
        facts: Optional[Set[str]] = None,
    ) -> List[EntropyResult]:
        """
        Оцінити всі факти frontier за ентропією.

        Returns:
            Список EntropyResult, відсортований за ентропією (спадно),
            при рівності — за fact_id
        """
        if facts is None:
            facts = self.frontier(state)

        candidate_probs = posterior_over_candidates(state.posterior, state.candidate_ids)

        results = []
        for fact_id in sorted(facts):
            options = [o.value for o in resolve_options(self.kb, fact_id, state.candidate_ids)]
            if not options:
                continue
            results.append(fact_entropy(
                self.kb, fact_id, options, state.candidate_ids, candidate_probs
            ))

        results.sort(key=lambda r: (-round(r.entropy, ENTROPY_DECIMALS), r.fact_id))
        return results

    def select(self, state: SessionState) -> Optional[NextQuestion]:
        """
        Вибрати наступне питання.

        Returns:
            NextQuestion або None якщо frontier вичерпано
        """
        facts = self.frontier(state)

        carrier_question = self.select_carrier_question(state, facts)
        if carrier_question is not None:
            return carrier_question

        if not facts:
            return None

        ranked = self.rank(state, facts)
        if not ranked:
            return None

        best = ranked[0]
        return build_question(
            self.kb,
            best.fact_id,
            state.candidate_ids,
            origin=ORIGIN_NORMAL,
            entropy=best.entropy,
        )

    def __repr__(self) -> str:
        return (
            f"QuestionSelector(room='{self.kb.room}', "
            f"carrier={self.config.carrier_group})"
        )
