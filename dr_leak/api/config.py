"""
Dr.Leak — API Configuration

Налаштування FastAPI сервера та шлях до бази знань.
"""

from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional
import os


@dataclass
class APIConfig:
    """Конфігурація API сервера"""

    # Сервер
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = True
    reload: bool = False

    # CORS
    cors_origins: list = field(default_factory=lambda: ["*"])
    cors_allow_credentials: bool = True
    cors_allow_methods: list = field(default_factory=lambda: ["*"])
    cors_allow_headers: list = field(default_factory=lambda: ["*"])

    # База знань
    assets_dir: Optional[str] = None
    engine_config_path: Optional[str] = None  # YAML з DrLeakConfig (engine, likelihood, pruning)

    # Сесії
    max_sessions: int = 1000
    session_timeout_minutes: int = 60

    # API
    api_prefix: str = "/api"
    api_title: str = "Dr.Leak API"
    api_description: str = "Інтерактивний опитувальник для визначення причини протікання"
    version: str = "0.1.0"

    def __post_init__(self):
        """Автоматичне визначення директорії бази знань"""
        if self.assets_dir is None:
            current = Path(__file__).parent.parent.parent

            possible_roots = [
                current,
                Path.cwd(),
            ]

            for root in possible_roots:
                candidate = root / "engine_assets"
                if candidate.exists():
                    self.assets_dir = str(candidate)
                    break
            else:
                self.assets_dir = str(current / "engine_assets")

    @classmethod
    def from_env(cls) -> 'APIConfig':
        """Створити конфігурацію з environment variables"""
        return cls(
            host=os.getenv("API_HOST", "0.0.0.0"),
            port=int(os.getenv("API_PORT", "8000")),
            debug=os.getenv("API_DEBUG", "true").lower() == "true",
            assets_dir=os.getenv("ASSETS_DIR"),
            engine_config_path=os.getenv("ENGINE_CONFIG"),
        )


# Глобальна конфігурація
config = APIConfig.from_env()
