"""
Dr.Leak — REST API модуль

FastAPI REST API для движка питань.

Компоненти:
- app.py: FastAPI application
- routes/: API endpoints
- models.py: Pydantic models
- dependencies.py: База знань та сесії

Запуск:
    uvicorn dr_leak.api.app:app --reload --port 8000

Або:
    python scripts/run_api.py

Документація:
    http://localhost:8000/docs (Swagger UI)
    http://localhost:8000/redoc (ReDoc)

Endpoints:
    GET    /                              - Root info
    GET    /health                        - Health check

    GET    /api/clusters?room=            - Кластери приміщення

    POST   /api/sessions                  - Почати сесію
    GET    /api/sessions                  - Активні сесії
    GET    /api/sessions/{id}             - Стан сесії
    POST   /api/sessions/{id}/answer      - Відповісти на питання
    POST   /api/sessions/{id}/undo        - Скасувати останню відповідь
    POST   /api/sessions/{id}/reset       - Почати спочатку
    DELETE /api/sessions/{id}             - Видалити сесію
"""

from .app import app
from .dependencies import (
    knowledge_manager,
    session_manager,
    get_knowledge,
    require_knowledge,
    get_sessions,
)


__all__ = [
    "app",
    "knowledge_manager",
    "session_manager",
    "get_knowledge",
    "require_knowledge",
    "get_sessions",
]
