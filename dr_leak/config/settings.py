"""
Dr.Leak — Налаштування системи

Всі параметри движка зібрані в dataclass-и для:
- Типізації та валідації
- Легкого доступу через config.engine.stop_at
- Серіалізації в YAML/JSON
"""

from dataclasses import dataclass, field
from typing import Optional


# =============================================================================
# ENGINE CONFIGURATION
# =============================================================================

@dataclass
class EngineConfig:
    """Параметри сесії движка питань"""

    # Приміщення (BATHROOM, KITCHEN, ...)
    room: str = ""

    # Критерії зупинки
    stop_at: int = 1          # зупинка якщо кандидатів <= stop_at
    top_k: int = 1            # скільки топ кандидатів рахувати в масі
    tau: float = 0.85         # поріг маси топ-k

    # Дискримінатори політики (Phase A)
    carrier_group: Optional[int] = None
    province: Optional[int] = None

    def __post_init__(self):
        if self.stop_at < 0:
            raise ValueError(f"stop_at має бути >= 0, отримано {self.stop_at}")
        if self.top_k < 0:
            raise ValueError(f"top_k має бути >= 0, отримано {self.top_k}")
        if not 0.0 <= self.tau <= 1.0:
            raise ValueError(f"tau має бути в [0, 1], отримано {self.tau}")

    @property
    def room_key(self) -> str:
        """Нормалізована назва приміщення для порівнянь"""
        return (self.room or "").strip().lower()


# =============================================================================
# LIKELIHOOD CONFIGURATION
# =============================================================================

@dataclass
class LikelihoodConfig:
    """Фіксовані likelihood ratios (не навчаються)"""
    lr_pos: float = 3.0       # відповідь збігається з indicates
    lr_neg: float = 0.6       # факт є в indicates, але відповідь інша
    lr_unknown: float = 1.0   # "не знаю", без інформації


# =============================================================================
# PRUNING CONFIGURATION
# =============================================================================

@dataclass
class PruningConfig:
    """Відсікання кандидатів з малою ймовірністю"""
    rel_threshold: float = 0.05   # p / max_p >= rel_threshold
    abs_threshold: float = 1e-4   # p >= abs_threshold


# =============================================================================
# MAIN CONFIGURATION
# =============================================================================

@dataclass
class DrLeakConfig:
    """
    Головна конфігурація Dr.Leak

    Об'єднує всі параметри системи в одному місці.

    Приклад використання:
        config = DrLeakConfig()
        print(config.engine.tau)  # 0.85
        print(config.likelihood.lr_pos)  # 3.0
    """

    # Метадані
    version: str = "1.0.0"
    project_name: str = "Dr.Leak"

    # Компоненти
    engine: EngineConfig = field(default_factory=EngineConfig)
    likelihood: LikelihoodConfig = field(default_factory=LikelihoodConfig)
    pruning: PruningConfig = field(default_factory=PruningConfig)

    # Директорія бази знань (відносно файлу конфігурації); None = з APIConfig
    assets_dir: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "DrLeakConfig":
        """Створити конфігурацію зі словника (наприклад, з YAML)"""
        data = dict(data or {})
        return cls(
            version=str(data.get("version", "1.0.0")),
            project_name=str(data.get("project_name", "Dr.Leak")),
            engine=EngineConfig(**(data.get("engine") or {})),
            likelihood=LikelihoodConfig(**(data.get("likelihood") or {})),
            pruning=PruningConfig(**(data.get("pruning") or {})),
            assets_dir=str(data["assets_dir"]) if data.get("assets_dir") else None,
        )


# =============================================================================
# DEFAULT CONFIG INSTANCE
# =============================================================================

def get_default_config() -> DrLeakConfig:
    """Отримати конфігурацію за замовчуванням"""
    return DrLeakConfig()
