"""
Dr.Leak — Health Routes

Health check та інформація про систему.
"""

from fastapi import APIRouter, Depends

from ..config import config
from ..dependencies import get_knowledge, get_sessions, KnowledgeManager, SessionManager
from ..models import HealthResponse

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(
    knowledge: KnowledgeManager = Depends(get_knowledge),
    sessions: SessionManager = Depends(get_sessions)
) -> HealthResponse:
    """
    Перевірка стану сервера.

    Повертає:
    - Статус сервера
    - Чи завантажена база знань
    - Кількість правил та питань, відомі приміщення
    - Кількість активних сесій
    """
    assets = knowledge.assets

    return HealthResponse(
        status="ok" if knowledge.is_loaded else "degraded",
        version=config.version,
        knowledge_loaded=knowledge.is_loaded,
        clusters=len(assets.clusters) if assets else 0,
        questions=knowledge.n_questions,
        rooms=assets.room_types if assets else [],
        active_sessions=sessions.get_active_count(),
        error=knowledge.error,
    )


@router.get("/")
async def root():
    """Головна сторінка API"""
    return {
        "name": config.api_title,
        "version": config.version,
        "description": config.api_description,
        "docs": "/docs",
        "health": "/health",
    }
