"""
Dr.Leak — Головний движок питань (Triage Engine)

Об'єднує всі компоненти системи:
- KnowledgeBase — правила кластерів приміщення
- Фільтр кандидатів + Байєсівське оновлення
- QuestionSelector — найінформативніше наступне питання
- StoppingCriteria — коли зупинитись

Компоненти:
- TriageEngine: Фасад движка для однієї сесії
- DialogueSession: Сесія діалогу з протоколом та undo
- EngineState: Незмінний знімок стану
- bands: Групування кандидатів за впевненістю

Приклад використання:
    from dr_leak.config import EngineConfig
    from dr_leak.diagnosis_engine import TriageEngine, DialogueSession
    from dr_leak.knowledge_base import KnowledgeBaseLoader

    engine = await TriageEngine.from_loader(
        KnowledgeBaseLoader("engine_assets"),
        EngineConfig(room="BATHROOM", stop_at=1, top_k=1, tau=0.85),
    )
    session = DialogueSession(engine=engine)

    state = session.current_state()
    while not state.stop.should_stop and state.next_question:
        question = state.next_question
        print(f"Q: {question.prompt}")

        answer = input("Answer: ")
        state = session.answer(question.fact_id, answer)

        print(f"Top: {state.top_candidate.cluster_id} ({state.top_candidate.probability:.1%})")

    print(f"Зупинка: {state.stop.reason.value}")
"""

from .engine import (
    TriageEngine,
    EngineState,
    EngineMetrics,
    Candidate,
    EngineNotInitializedError,
)
from .session import (
    DialogueSession,
    SessionStatus,
    TranscriptEntry,
)
from .bands import (
    ConfidenceBand,
    assign_bands,
    compute_elbow_bands,
    ratio_band,
)


__all__ = [
    # Engine
    "TriageEngine",
    "EngineState",
    "EngineMetrics",
    "Candidate",
    "EngineNotInitializedError",

    # Session
    "DialogueSession",
    "SessionStatus",
    "TranscriptEntry",

    # Bands
    "ConfidenceBand",
    "assign_bands",
    "compute_elbow_bands",
    "ratio_band",
]
