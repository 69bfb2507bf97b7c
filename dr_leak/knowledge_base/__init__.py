"""
Dr.Leak — Модуль бази знань

Компоненти:
- facts: FactValue, UNKNOWN, нормалізація та порівняння значень
- fact_index: Зворотний індекс fact_id → кластери
- base: KnowledgeBase — правила та питання однієї сесії
- loader: Асинхронне завантаження файлів бази знань

Приклад використання:
    from dr_leak.knowledge_base import KnowledgeBaseLoader, KnowledgeBase

    assets = await KnowledgeBaseLoader("engine_assets").load_all()
    kb = KnowledgeBase.build(assets.clusters, assets.question_bank, room="KITCHEN")
"""

from .facts import (
    FactValue,
    UNKNOWN,
    UNKNOWN_LABEL,
    normalize_value,
    is_unknown,
    value_key,
    values_equal,
    value_in,
    unique_values,
    format_value,
    evidence_symbol,
)
from .fact_index import FactIndex, FactBuckets
from .base import KnowledgeBase, select_room_priors
from .loader import KnowledgeBaseLoader, KnowledgeAssets


__all__ = [
    # Facts
    "FactValue",
    "UNKNOWN",
    "UNKNOWN_LABEL",
    "normalize_value",
    "is_unknown",
    "value_key",
    "values_equal",
    "value_in",
    "unique_values",
    "format_value",
    "evidence_symbol",

    # Index
    "FactIndex",
    "FactBuckets",

    # Knowledge Base
    "KnowledgeBase",
    "select_room_priors",

    # Loader
    "KnowledgeBaseLoader",
    "KnowledgeAssets",
]
