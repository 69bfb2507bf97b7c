"""
Dr.Leak — Головний движок питань

TriageEngine володіє станом однієї сесії та об'єднує компоненти:
1. KnowledgeBase — правила кластерів, банк питань, індекс фактів
2. Фільтр кандидатів + Байєсівське оновлення (process_answer)
3. QuestionSelector — наступне питання
4. StoppingCriteria — рішення про зупинку

Алгоритм діалогу:
1. initialize → початковий prior над кластерами приміщення
2. Питання → відповідь → update_with_answer
3. Repeat until get_state().stop.should_stop

Рушій однопотоковий і синхронний, крім initialize. Один екземпляр —
одна сесія; паралельний доступ до одного екземпляра не підтримується.
"""

import inspect
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from dr_leak.config.settings import EngineConfig, LikelihoodConfig, PruningConfig
from dr_leak.diagnosis_cycle import StopDecision, StoppingCriteria, top_k_mass
from dr_leak.knowledge_base.base import KnowledgeBase
from dr_leak.knowledge_base.facts import FactValue, evidence_symbol, normalize_value
from dr_leak.question_engine import (
    AnswerRecord,
    NextQuestion,
    QuestionSelector,
    SessionState,
    posterior_over_candidates,
    process_answer,
    replay_answers,
)


class EngineNotInitializedError(RuntimeError):
    """Движок використано до завершення initialize()"""


@dataclass(frozen=True)
class Candidate:
    """Кандидат зі своєю ймовірністю та символом доказовості"""
    cluster_id: str
    probability: float
    evidence: Optional[str] = None  # "+", "-", "?", "·"

    def to_dict(self) -> dict:
        return {
            "cluster_id": self.cluster_id,
            "probability": self.probability,
            "evidence": self.evidence,
        }


@dataclass(frozen=True)
class EngineMetrics:
    """Метрики стану"""
    candidates_count: int
    top_k_mass: Optional[float] = None

    def to_dict(self) -> dict:
        return {
            "candidates_count": self.candidates_count,
            "top_k_mass": self.top_k_mass,
        }


@dataclass(frozen=True)
class EngineState:
    """Незмінний знімок стану движка"""
    candidates: Tuple[Candidate, ...]
    next_question: Optional[NextQuestion]
    stop: StopDecision
    metrics: EngineMetrics

    @property
    def top_candidate(self) -> Optional[Candidate]:
        return self.candidates[0] if self.candidates else None

    def to_dict(self) -> dict:
        return {
            "candidates": [c.to_dict() for c in self.candidates],
            "next_question": self.next_question.to_dict() if self.next_question else None,
            "stop": self.stop.to_dict(),
            "metrics": self.metrics.to_dict(),
        }


class TriageEngine:
    """
    Движок питань для однієї сесії.

    Приклад використання:
        engine = TriageEngine(EngineConfig(room="BATHROOM", stop_at=1, top_k=1, tau=0.85))
        await engine.initialize(clusters, question_bank)

        state = engine.get_state()
        while not state.stop.should_stop and state.next_question:
            question = state.next_question
            answer = ask_user(question)

            engine.update_with_answer(question.fact_id, answer)
            state = engine.get_state(last_answer=(question.fact_id, answer))

        print(f"Top: {state.top_candidate.cluster_id}")
    """

    def __init__(
        self,
        config: EngineConfig,
        likelihood: Optional[LikelihoodConfig] = None,
        pruning: Optional[PruningConfig] = None,
    ):
        """
        Args:
            config: Параметри сесії (приміщення, критерії зупинки, перевізник)
            likelihood: Likelihood ratios
            pruning: Пороги відсікання кандидатів
        """
        self.config = config
        self.likelihood = likelihood or LikelihoodConfig()
        self.pruning = pruning or PruningConfig()

        self.kb: Optional[KnowledgeBase] = None
        self.session: Optional[SessionState] = None
        self._selector: Optional[QuestionSelector] = None
        self._criteria = StoppingCriteria(config)

    @classmethod
    async def from_loader(
        cls,
        loader,
        config: EngineConfig,
        likelihood: Optional[LikelihoodConfig] = None,
        pruning: Optional[PruningConfig] = None,
    ) -> "TriageEngine":
        """
        Створити движок та завантажити базу знань через завантажувач.

        Args:
            loader: KnowledgeBaseLoader
            config: Параметри сесії

        Returns:
            Ініціалізований TriageEngine
        """
        assets = await loader.load_all()
        engine = cls(config, likelihood=likelihood, pruning=pruning)
        await engine.initialize(
            assets.clusters,
            assets.question_bank,
            policy_shims=assets.policy_shims,
            room_priors=assets.room_priors,
        )
        return engine

    async def initialize(
        self,
        clusters: Any,
        question_bank: Any,
        policy_shims: Any = None,
        room_priors: Any = None,
    ) -> None:
        """
        Ініціалізувати движок.

        Кожен аргумент може бути готовим значенням або awaitable
        (корутиною завантажувача). Помилки завантаження прокидаються
        викликачу без повторних спроб.

        Args:
            clusters: Список правил кластерів
            question_bank: Банк питань
            policy_shims: {"carrier:<id>": {ROOM: {must_asks: [...]}}}
            room_priors: {ROOM: {cluster_id: weight}}
        """
        clusters = await _resolve(clusters)
        question_bank = await _resolve(question_bank)
        policy_shims = await _resolve(policy_shims)
        room_priors = await _resolve(room_priors)

        self.kb = KnowledgeBase.build(
            clusters,
            question_bank,
            room=self.config.room,
            policy_shims=policy_shims,
            room_priors=room_priors,
        )
        self._selector = QuestionSelector(self.kb, self.config)
        self.session = SessionState.initial(self.kb)

    @property
    def is_initialized(self) -> bool:
        return self.kb is not None and self.session is not None

    def _require_initialized(self) -> None:
        if not self.is_initialized:
            raise EngineNotInitializedError(
                "TriageEngine не ініціалізовано: викличте initialize()"
            )

    # =========================================================================
    # Оновлення
    # =========================================================================

    def update_with_answer(self, fact_id: str, value: Any) -> None:
        """
        Записати відповідь та оновити кандидатів і posterior.

        Args:
            fact_id: Факт, про який питали
            value: Відповідь (нормалізується; "unknown"/"?" → UNKNOWN)
        """
        self._require_initialized()
        self.session = process_answer(
            self.kb,
            self.session,
            fact_id,
            value,
            likelihood=self.likelihood,
            pruning=self.pruning,
        )

    def reset(self) -> None:
        """Початковий prior, без фактів та історії"""
        self._require_initialized()
        self.session = SessionState.initial(self.kb)

    def replay(self, answers: Iterable[Any]) -> None:
        """
        Reset + повторне застосування відповідей у початковому порядку.

        Args:
            answers: AnswerRecord або пари (fact_id, value)
        """
        self._require_initialized()
        self.session = replay_answers(
            self.kb,
            answers,
            likelihood=self.likelihood,
            pruning=self.pruning,
        )

    def undo_last(self) -> Optional[AnswerRecord]:
        """
        Скасувати останню відповідь через replay решти історії.

        Returns:
            Скасована відповідь або None якщо історія порожня
        """
        self._require_initialized()
        if not self.session.answers:
            return None
        removed = self.session.answers[-1]
        self.replay(self.session.answers[:-1])
        return removed

    # =========================================================================
    # Запити
    # =========================================================================

    def frontier(self) -> set:
        self._require_initialized()
        return self._selector.frontier(self.session)

    def posterior_over_candidates(self) -> Dict[str, float]:
        """Ренормалізований posterior над кандидатами"""
        self._require_initialized()
        return posterior_over_candidates(self.session.posterior, self.session.candidate_ids)

    def select_next_question(self) -> Optional[NextQuestion]:
        self._require_initialized()
        return self._selector.select(self.session)

    def check_stop(self) -> StopDecision:
        self._require_initialized()
        return self._criteria.check(
            self.posterior_over_candidates(),
            frontier_size=len(self.frontier()),
        )

    def get_state(self, last_answer: Any = None) -> EngineState:
        """
        Знімок стану.

        Args:
            last_answer: Остання відповідь (AnswerRecord або (fact_id, value))
                для символів доказовості кандидатів

        Returns:
            EngineState з кандидатами (спадно за ймовірністю),
            наступним питанням, рішенням про зупинку та метриками
        """
        self._require_initialized()

        answer = _as_answer(last_answer)
        probs = self.posterior_over_candidates()

        candidates = []
        for cid in self.session.candidate_ids:
            evidence = None
            if answer is not None:
                rule = self.kb.get_rule(cid)
                if rule is not None:
                    evidence = evidence_symbol(rule.indicates, answer.fact_id, answer.value)
            candidates.append(Candidate(
                cluster_id=cid,
                probability=probs.get(cid, 0.0),
                evidence=evidence,
            ))

        candidates.sort(key=lambda c: (-c.probability, c.cluster_id))

        metrics = EngineMetrics(
            candidates_count=len(self.session.candidate_ids),
            top_k_mass=top_k_mass(probs, self.config.top_k) if self.config.top_k > 0 else None,
        )

        return EngineState(
            candidates=tuple(candidates),
            next_question=self.select_next_question(),
            stop=self.check_stop(),
            metrics=metrics,
        )

    # =========================================================================
    # Знімки
    # =========================================================================

    def export_state(self) -> dict:
        """Серіалізований стан сесії"""
        self._require_initialized()
        return self.session.to_dict()

    def restore_state(self, data: dict) -> None:
        """Відновити стан сесії зі знімка export_state()"""
        self._require_initialized()
        self.session = SessionState.from_dict(data)

    @property
    def facts_known(self) -> Dict[str, FactValue]:
        self._require_initialized()
        return dict(self.session.facts_known)

    @property
    def answers(self) -> List[AnswerRecord]:
        self._require_initialized()
        return list(self.session.answers)

    def __repr__(self) -> str:
        if not self.is_initialized:
            return f"TriageEngine(room='{self.config.room}', initialized=False)"
        return (
            f"TriageEngine("
            f"room='{self.config.room}', "
            f"clusters={len(self.kb)}, "
            f"candidates={len(self.session.candidate_ids)}, "
            f"answers={len(self.session.answers)}"
            f")"
        )


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


def _as_answer(answer: Any) -> Optional[AnswerRecord]:
    if answer is None:
        return None
    if isinstance(answer, AnswerRecord):
        return answer
    if isinstance(answer, dict):
        return AnswerRecord(str(answer["fact_id"]), normalize_value(answer.get("value")))
    fact_id, value = answer
    return AnswerRecord(str(fact_id), normalize_value(value))
