"""
Dr.Leak — API Models

Pydantic моделі для запитів та відповідей API.
"""

from pydantic import BaseModel, Field
from typing import Any, List, Optional
from enum import Enum


# ============================================================
# Enums
# ============================================================

class SessionStatus(str, Enum):
    """Статус сесії"""
    ACTIVE = "active"
    COMPLETED = "completed"


class StopReason(str, Enum):
    """Причина зупинки діалогу"""
    COUNT = "count"
    MASS = "mass"
    EXHAUSTED = "exhausted"


class ConfidenceBand(str, Enum):
    """Рівень впевненості кандидата"""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


# ============================================================
# Health
# ============================================================

class HealthResponse(BaseModel):
    """Стан сервера"""
    status: str
    version: str
    knowledge_loaded: bool
    clusters: int = 0
    questions: int = 0
    rooms: List[str] = []
    active_sessions: int = 0
    error: Optional[str] = None


# ============================================================
# Clusters
# ============================================================

class ClusterInfo(BaseModel):
    """Кластер пошкоджень"""
    cluster_id: str
    name: str
    summary: Optional[str] = None
    room_type: Optional[str] = None

    # З каталогу авто-кластерів (config/clusters.yaml)
    description: Optional[str] = None
    core_item_codes: List[str] = []


class ClusterListResponse(BaseModel):
    """Список кластерів приміщення"""
    room: Optional[str] = None
    clusters: List[ClusterInfo]
    total: int


# ============================================================
# Session Models
# ============================================================

class CreateSessionRequest(BaseModel):
    """Запит на створення сесії"""
    room: str = Field(..., min_length=1, description="Тип приміщення, напр. BATHROOM")

    # Критерії зупинки (None → значення сервера)
    stop_at: Optional[int] = Field(default=None, ge=0)
    top_k: Optional[int] = Field(default=None, ge=0)
    tau: Optional[float] = Field(default=None, ge=0, le=1)

    # Дискримінатори політики
    carrier_group: Optional[int] = None
    province: Optional[int] = None


class AnswerRequest(BaseModel):
    """Відповідь на питання"""
    fact_id: str
    value: Any = None  # None → "не знаю"


class OptionOut(BaseModel):
    """Варіант відповіді"""
    label: str
    value: Any


class QuestionOut(BaseModel):
    """Наступне питання"""
    fact_id: str
    prompt: str
    options: List[OptionOut] = []
    origin: str
    phase: Optional[str] = None
    entropy: Optional[float] = None


class CandidateOut(BaseModel):
    """Кандидат-кластер"""
    cluster_id: str
    name: str
    probability: float = Field(..., ge=0, le=1)
    evidence: Optional[str] = None  # "+", "-", "?", "·"
    band: ConfidenceBand


class StopOut(BaseModel):
    """Рішення про зупинку"""
    should_stop: bool
    reason: Optional[StopReason] = None
    message: str = ""


class MetricsOut(BaseModel):
    """Метрики стану"""
    candidates_count: int
    top_k_mass: Optional[float] = None


class TranscriptItem(BaseModel):
    """Запис протоколу"""
    fact_id: str
    value: Any
    prompt: str
    label: str
    timestamp: str


class SessionStateResponse(BaseModel):
    """Повний стан сесії"""
    session_id: str
    room: str
    status: SessionStatus

    candidates: List[CandidateOut]
    next_question: Optional[QuestionOut] = None
    stop: StopOut
    metrics: MetricsOut

    transcript: List[TranscriptItem] = []

    created_at: str
    updated_at: str


class DeleteSessionResponse(BaseModel):
    """Результат видалення сесії"""
    deleted: bool
    session_id: str
