"""
Dr.Leak — API Dependencies

Dependency Injection для FastAPI.
Завантаження бази знань, створення та зберігання сесій.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path
from typing import Dict, List, Optional
import threading

from fastapi import Depends, HTTPException
import yaml

from dr_leak.config import DrLeakConfig, EngineConfig, get_default_config, load_config
from dr_leak.diagnosis_engine import DialogueSession, TriageEngine
from dr_leak.knowledge_base import KnowledgeAssets, KnowledgeBaseLoader

from .config import config


class KnowledgeManager:
    """
    Менеджер бази знань — завантажує файли один раз.
    Singleton pattern.
    """

    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self._initialized = True
        self.clear()

    def clear(self) -> None:
        """Забути завантажені дані"""
        self.is_loaded = False
        self.assets: Optional[KnowledgeAssets] = None
        self.settings: DrLeakConfig = get_default_config()
        self.error: Optional[str] = None

    def set_assets(
        self,
        assets: KnowledgeAssets,
        settings: Optional[DrLeakConfig] = None,
    ) -> None:
        """Встановити вже завантажені дані"""
        self.assets = assets
        self.settings = settings or get_default_config()
        self.is_loaded = True
        self.error = None

    async def load(self, assets_dir: Optional[str] = None) -> bool:
        """
        Завантажити базу знань.

        Директорія бази знань: аргумент, інакше assets_dir з ENGINE_CONFIG
        (відносно файлу конфігурації), інакше APIConfig.assets_dir.
        """
        if self.is_loaded:
            return True

        try:
            settings = get_default_config()
            config_path = config.engine_config_path
            if config_path and Path(config_path).exists():
                settings = load_config(config_path)
                print(f"   ✅ Engine config: {config_path}")

            if assets_dir is None and settings.assets_dir:
                assets_dir = str(Path(config_path).parent / settings.assets_dir)
            assets_dir = assets_dir or config.assets_dir

            loader = KnowledgeBaseLoader(assets_dir, verbose=True)
            assets = await loader.load_all()

            self.set_assets(assets, settings)
            print(f"📦 База знань завантажена: {len(assets.clusters)} правил, "
                  f"кімнати {', '.join(assets.room_types) or '—'}")
            return True

        except (OSError, ValueError, yaml.YAMLError) as e:
            self.error = str(e)
            print(f"❌ Помилка завантаження: {e}")
            return False

    @property
    def n_questions(self) -> int:
        if not self.assets:
            return 0
        bank = self.assets.question_bank
        questions = bank.get("questions", bank) if isinstance(bank, dict) else {}
        return len(questions) if isinstance(questions, dict) else 0

    def cluster_name(self, cluster_id: str) -> str:
        """Назва кластера для UI (або сам ID)"""
        if self.assets:
            info = self.assets.cluster_names.get(cluster_id)
            if info is not None:
                return info.name
        return cluster_id

    async def create_engine(self, engine_config: EngineConfig) -> TriageEngine:
        """Новий движок для однієї сесії"""
        if not self.is_loaded:
            raise RuntimeError(self.error or "Knowledge base not loaded")

        engine = TriageEngine(
            engine_config,
            likelihood=self.settings.likelihood,
            pruning=self.settings.pruning,
        )
        await engine.initialize(
            self.assets.clusters,
            self.assets.question_bank,
            policy_shims=self.assets.policy_shims,
            room_priors=self.assets.room_priors,
        )
        return engine


@dataclass
class SessionEntry:
    """Сесія та її власний lock"""
    session: DialogueSession
    lock: threading.Lock = field(default_factory=threading.Lock)

    @property
    def updated_at(self) -> datetime:
        return self.session.updated_at


class SessionManager:
    """
    Менеджер сесій.
    Зберігає активні сесії в пам'яті; кожна сесія має свій lock,
    тож відповіді однієї сесії обробляються в порядку надходження.
    """

    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self._initialized = True
        self.sessions: Dict[str, SessionEntry] = {}
        self.lock = threading.Lock()

    def add_session(self, session: DialogueSession) -> SessionEntry:
        """Зареєструвати нову сесію"""
        entry = SessionEntry(session=session)

        with self.lock:
            # Очистка старих сесій
            self._cleanup_old_sessions()

            while len(self.sessions) >= config.max_sessions:
                oldest = min(self.sessions, key=lambda sid: self.sessions[sid].updated_at)
                del self.sessions[oldest]

            self.sessions[session.session_id] = entry

        return entry

    def get_session(self, session_id: str) -> Optional[SessionEntry]:
        """Отримати сесію"""
        with self.lock:
            return self.sessions.get(session_id)

    def delete_session(self, session_id: str) -> bool:
        """Видалити сесію"""
        with self.lock:
            if session_id in self.sessions:
                del self.sessions[session_id]
                return True
        return False

    def clear(self) -> None:
        with self.lock:
            self.sessions.clear()

    def get_active_count(self) -> int:
        """Кількість сесій в пам'яті"""
        return len(self.sessions)

    def session_ids(self) -> List[str]:
        with self.lock:
            return list(self.sessions.keys())

    def _cleanup_old_sessions(self):
        """Видалити застарілі сесії"""
        timeout = timedelta(minutes=config.session_timeout_minutes)
        now = datetime.now()

        expired = [
            sid for sid, entry in self.sessions.items()
            if now - entry.updated_at > timeout
        ]

        for sid in expired:
            del self.sessions[sid]


# Глобальні менеджери
knowledge_manager = KnowledgeManager()
session_manager = SessionManager()


# Dependency functions для FastAPI
async def get_knowledge() -> KnowledgeManager:
    """Dependency: отримати менеджер бази знань"""
    if not knowledge_manager.is_loaded and knowledge_manager.error is None:
        await knowledge_manager.load()
    return knowledge_manager


async def require_knowledge(
    knowledge: KnowledgeManager = Depends(get_knowledge),
) -> KnowledgeManager:
    """Dependency: менеджер бази знань, 503 якщо не завантажена"""
    if not knowledge.is_loaded:
        raise HTTPException(
            status_code=503,
            detail=f"Knowledge base not loaded: {knowledge.error}",
        )
    return knowledge


def get_sessions() -> SessionManager:
    """Dependency: отримати менеджер сесій"""
    return session_manager
