"""
Dr.Leak — Сесія діалогу

DialogueSession зберігає стан одного діалогу поверх TriageEngine:
- Протокол питань та відповідей (transcript)
- Статус сесії
- Скасування останньої відповіді (reset + replay решти протоколу)
"""

from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
import uuid

from dr_leak.knowledge_base.facts import FactValue, format_value, normalize_value, values_equal
from dr_leak.question_engine import AnswerRecord, NextQuestion

from .engine import EngineState, TriageEngine


class SessionStatus(Enum):
    """Статус сесії"""
    ACTIVE = "active"
    COMPLETED = "completed"


@dataclass(frozen=True)
class TranscriptEntry:
    """Запис питання-відповідь"""
    fact_id: str
    value: FactValue
    prompt: str = ""
    label: str = ""
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def answer(self) -> AnswerRecord:
        return AnswerRecord(self.fact_id, self.value)

    def to_dict(self) -> dict:
        return {
            "fact_id": self.fact_id,
            "value": self.value,
            "prompt": self.prompt,
            "label": self.label,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class DialogueSession:
    """
    Сесія діалогу.

    Приклад:
        session = DialogueSession(engine=engine)

        state = session.current_state()
        question = state.next_question

        state = session.answer(question.fact_id, "yes")
        state = session.undo()
    """

    engine: TriageEngine

    # Ідентифікатор
    session_id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])

    # Протокол
    transcript: List[TranscriptEntry] = field(default_factory=list)

    # Питання, показане користувачу останнім
    current_question: Optional[NextQuestion] = None

    # Статус
    status: SessionStatus = SessionStatus.ACTIVE

    # Timestamps
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    def current_state(self) -> EngineState:
        """Поточний знімок (символи доказовості — відносно останньої відповіді)"""
        last = self.transcript[-1].answer if self.transcript else None
        return self._refresh(self.engine.get_state(last_answer=last))

    def answer(self, fact_id: str, value: Any) -> EngineState:
        """
        Записати відповідь.

        Args:
            fact_id: Факт
            value: Відповідь

        Returns:
            Новий знімок стану
        """
        value = normalize_value(value)
        prompt, label = self._describe(fact_id, value)

        self.engine.update_with_answer(fact_id, value)
        self.transcript.append(TranscriptEntry(
            fact_id=fact_id,
            value=value,
            prompt=prompt,
            label=label,
        ))

        return self._refresh(self.engine.get_state(last_answer=(fact_id, value)))

    def undo(self) -> EngineState:
        """Скасувати останню відповідь (reset + replay решти протоколу)"""
        if self.transcript:
            self.transcript.pop()
            self.engine.replay(entry.answer for entry in self.transcript)
        return self.current_state()

    def reset(self) -> EngineState:
        """Почати діалог спочатку"""
        self.transcript.clear()
        self.engine.reset()
        return self.current_state()

    def _describe(self, fact_id: str, value: FactValue) -> tuple:
        """Текст питання та підпис відповіді для протоколу"""
        question = self.current_question
        if question is None or question.fact_id != fact_id:
            return fact_id, format_value(value)

        label = format_value(value)
        for option in question.options:
            if values_equal(option.value, value):
                label = option.label
                break
        return question.prompt, label

    def _refresh(self, state: EngineState) -> EngineState:
        self.current_question = state.next_question
        self.status = SessionStatus.COMPLETED if state.stop.should_stop else SessionStatus.ACTIVE
        self.updated_at = datetime.now()
        return state

    @property
    def n_answers(self) -> int:
        return len(self.transcript)

    @property
    def is_active(self) -> bool:
        return self.status == SessionStatus.ACTIVE

    def get_summary(self) -> Dict[str, Any]:
        """Підсумок сесії"""
        return {
            "session_id": self.session_id,
            "room": self.engine.config.room,
            "status": self.status.value,
            "answers": self.n_answers,
            "duration_seconds": (self.updated_at - self.created_at).total_seconds(),
        }

    def __repr__(self) -> str:
        return (
            f"DialogueSession("
            f"id={self.session_id}, "
            f"room={self.engine.config.room}, "
            f"answers={self.n_answers}, "
            f"status={self.status.value}"
            f")"
        )
