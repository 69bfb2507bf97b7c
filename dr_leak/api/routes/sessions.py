"""
Dr.Leak — Sessions Routes

Endpoints для інтерактивних сесій:
- Створення сесії
- Отримання стану
- Відповідь на питання
- Скасування останньої відповіді / повний reset
- Закриття сесії
"""

from fastapi import APIRouter, Depends, HTTPException

from dr_leak.config import EngineConfig
from dr_leak.diagnosis_engine import DialogueSession, EngineState, assign_bands

from ..dependencies import (
    get_sessions, require_knowledge,
    KnowledgeManager, SessionEntry, SessionManager,
)
from ..models import (
    CreateSessionRequest,
    AnswerRequest,
    SessionStateResponse,
    DeleteSessionResponse,
    CandidateOut,
    QuestionOut,
    OptionOut,
    StopOut,
    MetricsOut,
    TranscriptItem,
)

router = APIRouter(prefix="/sessions", tags=["Sessions"])


def session_to_response(
    session: DialogueSession,
    state: EngineState,
    knowledge: KnowledgeManager,
) -> SessionStateResponse:
    """Конвертувати сесію та знімок стану в Pydantic модель"""
    bands = assign_bands([c.probability for c in state.candidates])

    candidates = [
        CandidateOut(
            cluster_id=c.cluster_id,
            name=knowledge.cluster_name(c.cluster_id),
            probability=min(1.0, max(0.0, c.probability)),
            evidence=c.evidence,
            band=band.value,
        )
        for c, band in zip(state.candidates, bands)
    ]

    question = None
    if state.next_question is not None:
        q = state.next_question
        question = QuestionOut(
            fact_id=q.fact_id,
            prompt=q.prompt,
            options=[OptionOut(label=o.label, value=o.value) for o in q.options],
            origin=q.origin,
            phase=q.phase,
            entropy=q.entropy,
        )

    stop = state.stop.to_dict()

    return SessionStateResponse(
        session_id=session.session_id,
        room=session.engine.config.room,
        status=session.status.value,
        candidates=candidates,
        next_question=question,
        stop=StopOut(**stop),
        metrics=MetricsOut(**state.metrics.to_dict()),
        transcript=[TranscriptItem(**entry.to_dict()) for entry in session.transcript],
        created_at=session.created_at.isoformat(),
        updated_at=session.updated_at.isoformat(),
    )


def _get_entry(sessions: SessionManager, session_id: str) -> SessionEntry:
    entry = sessions.get_session(session_id)

    if entry is None:
        raise HTTPException(
            status_code=404,
            detail=f"Session {session_id} not found"
        )

    return entry


@router.post("", response_model=SessionStateResponse)
async def create_session(
    request: CreateSessionRequest,
    knowledge: KnowledgeManager = Depends(require_knowledge),
    sessions: SessionManager = Depends(get_sessions)
) -> SessionStateResponse:
    """
    Створити нову сесію.

    Не задані параметри (stop_at, top_k, tau, carrier_group, province)
    беруться з секції engine файлу ENGINE_CONFIG.

    Приклад:
    ```json
    {
        "room": "BATHROOM",
        "stop_at": 1,
        "top_k": 1,
        "tau": 0.85,
        "carrier_group": 2
    }
    ```
    """
    defaults = knowledge.settings.engine
    engine_config = EngineConfig(
        room=request.room.strip().upper(),
        stop_at=defaults.stop_at if request.stop_at is None else request.stop_at,
        top_k=defaults.top_k if request.top_k is None else request.top_k,
        tau=defaults.tau if request.tau is None else request.tau,
        carrier_group=defaults.carrier_group if request.carrier_group is None else request.carrier_group,
        province=defaults.province if request.province is None else request.province,
    )

    engine = await knowledge.create_engine(engine_config)

    if not engine.kb.cluster_ids:
        raise HTTPException(
            status_code=400,
            detail=f"No clusters for room {engine_config.room}"
        )

    session = DialogueSession(engine=engine)
    entry = sessions.add_session(session)

    with entry.lock:
        state = session.current_state()
        return session_to_response(session, state, knowledge)


@router.get("/{session_id}", response_model=SessionStateResponse)
async def get_session(
    session_id: str,
    knowledge: KnowledgeManager = Depends(require_knowledge),
    sessions: SessionManager = Depends(get_sessions)
) -> SessionStateResponse:
    """
    Отримати поточний стан сесії.

    Символи доказовості кандидатів — відносно останньої відповіді.
    """
    entry = _get_entry(sessions, session_id)

    with entry.lock:
        state = entry.session.current_state()
        return session_to_response(entry.session, state, knowledge)


@router.post("/{session_id}/answer", response_model=SessionStateResponse)
async def answer_question(
    session_id: str,
    request: AnswerRequest,
    knowledge: KnowledgeManager = Depends(require_knowledge),
    sessions: SessionManager = Depends(get_sessions)
) -> SessionStateResponse:
    """
    Відповісти на питання.

    - **fact_id**: факт, про який питали
    - **value**: значення з options питання; null або "unknown" = не знаю

    Приклад:
    ```json
    {
        "fact_id": "tub_overflowed",
        "value": "yes"
    }
    ```

    Відповіді після рішення про зупинку теж приймаються.
    """
    fact_id = (request.fact_id or "").strip()
    if not fact_id:
        raise HTTPException(
            status_code=400,
            detail="fact_id must not be empty"
        )

    entry = _get_entry(sessions, session_id)

    with entry.lock:
        state = entry.session.answer(fact_id, request.value)
        return session_to_response(entry.session, state, knowledge)


@router.post("/{session_id}/undo", response_model=SessionStateResponse)
async def undo_answer(
    session_id: str,
    knowledge: KnowledgeManager = Depends(require_knowledge),
    sessions: SessionManager = Depends(get_sessions)
) -> SessionStateResponse:
    """
    Скасувати останню відповідь.

    Стан відновлюється з нуля повторним застосуванням решти протоколу.
    """
    entry = _get_entry(sessions, session_id)

    with entry.lock:
        state = entry.session.undo()
        return session_to_response(entry.session, state, knowledge)


@router.post("/{session_id}/reset", response_model=SessionStateResponse)
async def reset_session(
    session_id: str,
    knowledge: KnowledgeManager = Depends(require_knowledge),
    sessions: SessionManager = Depends(get_sessions)
) -> SessionStateResponse:
    """Почати діалог спочатку"""
    entry = _get_entry(sessions, session_id)

    with entry.lock:
        state = entry.session.reset()
        return session_to_response(entry.session, state, knowledge)


@router.delete("/{session_id}", response_model=DeleteSessionResponse)
async def delete_session(
    session_id: str,
    sessions: SessionManager = Depends(get_sessions)
) -> DeleteSessionResponse:
    """
    Закрити та видалити сесію.
    """
    success = sessions.delete_session(session_id)

    if not success:
        raise HTTPException(
            status_code=404,
            detail=f"Session {session_id} not found"
        )

    return DeleteSessionResponse(deleted=True, session_id=session_id)


@router.get("")
async def list_sessions(
    sessions: SessionManager = Depends(get_sessions)
) -> dict:
    """
    Отримати список активних сесій (для адміністрування).
    """
    return {
        "active_sessions": sessions.get_active_count(),
        "session_ids": sessions.session_ids()
    }
