"""
Dr.Leak — Інтерактивний асистент діагностики пошкоджень водою

Архітектура: правила кластерів + Байєсівське оновлення + вибір питань за ентропією

Модулі:
- config: Конфігурація системи
- schemas: Pydantic схеми бази знань
- knowledge_base: Значення фактів, індекс фактів, завантаження бази знань
- question_engine: Фільтр кандидатів, posterior, вибір питань
- diagnosis_cycle: Критерії зупинки
- diagnosis_engine: Сесія та фасад движка
- api: Backend API
"""

__version__ = "0.1.0"
__author__ = "Oleksii Bychkov"

from .config import DrLeakConfig, EngineConfig, get_default_config
