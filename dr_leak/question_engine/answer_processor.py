"""
Dr.Leak — Answer Processor

Обробка відповідей та оновлення стану сесії.

SessionState — явне серіалізоване значення (факти, історія, кандидати,
posterior). process_answer — чиста функція: новий стан залежить
тільки від попереднього стану та відповіді.

Скасування однієї відповіді не підтримується: "undo" = reset +
повторне застосування решти відповідей (replay_answers).
"""

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from dr_leak.config.settings import LikelihoodConfig, PruningConfig
from dr_leak.knowledge_base.base import KnowledgeBase
from dr_leak.knowledge_base.facts import FactValue, normalize_value
from .candidate_filter import recompute_candidates
from .posterior import apply_bayes_update


@dataclass(frozen=True)
class AnswerRecord:
    """Одна відповідь: fact_id → нормалізоване значення"""
    fact_id: str
    value: FactValue

    def to_dict(self) -> dict:
        return {"fact_id": self.fact_id, "value": self.value}

    @classmethod
    def from_dict(cls, data: dict) -> "AnswerRecord":
        return cls(fact_id=str(data["fact_id"]), value=normalize_value(data.get("value")))


@dataclass
class SessionState:
    """
    Повний стан сесії діалогу.

    Зберігає:
    - Відомі факти (лише додаються в межах діалогу)
    - Історію питань (без повторів)
    - Поточних кандидатів
    - Posterior над усіма кластерами бази знань
    - Журнал відповідей для replay
    """
    facts_known: Dict[str, FactValue] = field(default_factory=dict)
    questions_asked: List[str] = field(default_factory=list)
    candidate_ids: List[str] = field(default_factory=list)
    posterior: Dict[str, float] = field(default_factory=dict)
    answers: List[AnswerRecord] = field(default_factory=list)

    @classmethod
    def initial(cls, kb: KnowledgeBase) -> "SessionState":
        """Початковий стан: всі кластери, початковий prior, без фактів"""
        return cls(
            candidate_ids=kb.cluster_ids,
            posterior=kb.initial_prior(),
        )

    @property
    def n_answers(self) -> int:
        return len(self.answers)

    @property
    def last_answer(self) -> Optional[AnswerRecord]:
        return self.answers[-1] if self.answers else None

    def copy(self) -> "SessionState":
        return copy.deepcopy(self)

    def to_dict(self) -> dict:
        """Серіалізація стану"""
        return {
            "facts_known": dict(self.facts_known),
            "questions_asked": list(self.questions_asked),
            "candidate_ids": list(self.candidate_ids),
            "posterior": dict(self.posterior),
            "answers": [a.to_dict() for a in self.answers],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SessionState":
        """Десеріалізація стану"""
        return cls(
            facts_known={str(k): normalize_value(v) for k, v in data.get("facts_known", {}).items()},
            questions_asked=[str(f) for f in data.get("questions_asked", [])],
            candidate_ids=[str(c) for c in data.get("candidate_ids", [])],
            posterior={str(k): float(v) for k, v in data.get("posterior", {}).items()},
            answers=[AnswerRecord.from_dict(a) for a in data.get("answers", [])],
        )


def process_answer(
    kb: KnowledgeBase,
    state: SessionState,
    fact_id: str,
    value: Any,
    likelihood: Optional[LikelihoodConfig] = None,
    pruning: Optional[PruningConfig] = None,
) -> SessionState:
    """
    Застосувати відповідь до стану.

    1. Нормалізуємо значення, записуємо факт та питання
    2. Перераховуємо кандидатів з усіх відомих фактів
    3. Байєсівське оновлення + відсікання

    Returns:
        Новий SessionState (вхідний не змінюється)
    """
    value = normalize_value(value)

    facts_known = dict(state.facts_known)
    facts_known[fact_id] = value

    questions_asked = list(state.questions_asked)
    if fact_id not in questions_asked:
        questions_asked.append(fact_id)

    candidate_ids = recompute_candidates(kb, facts_known)
    posterior, candidate_ids = apply_bayes_update(
        kb,
        state.posterior,
        candidate_ids,
        fact_id,
        value,
        likelihood=likelihood,
        pruning=pruning,
    )

    return SessionState(
        facts_known=facts_known,
        questions_asked=questions_asked,
        candidate_ids=candidate_ids,
        posterior=posterior,
        answers=list(state.answers) + [AnswerRecord(fact_id, value)],
    )


def replay_answers(
    kb: KnowledgeBase,
    answers: Iterable[Tuple[str, Any]],
    likelihood: Optional[LikelihoodConfig] = None,
    pruning: Optional[PruningConfig] = None,
) -> SessionState:
    """
    Відтворити стан з нуля за послідовністю відповідей (у початковому порядку).

    O(довжина історії).
    """
    state = SessionState.initial(kb)
    for answer in answers:
        if isinstance(answer, AnswerRecord):
            fact_id, value = answer.fact_id, answer.value
        else:
            fact_id, value = answer
        state = process_answer(kb, state, fact_id, value, likelihood, pruning)
    return state
