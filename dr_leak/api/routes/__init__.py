"""
Dr.Leak — API Routes

Експорт всіх роутерів.
"""

from .health import router as health_router
from .clusters import router as clusters_router
from .sessions import router as sessions_router

__all__ = [
    'health_router',
    'clusters_router',
    'sessions_router',
]
