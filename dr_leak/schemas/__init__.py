"""
Dr.Leak — Модуль схем даних (schemas)

Pydantic моделі для валідації даних бази знань.

Компоненти:
- knowledge.py: ClusterRule, QuestionSpec, QuestionBank, ClusterName, AutoCluster

Приклад використання:
    from dr_leak.schemas import ClusterRule, parse_cluster_rules

    rules = parse_cluster_rules([
        {"cluster_id": "SINK_LEAK", "indicates": {"leak_under_sink": ["yes"]}},
        {"room_type": "KITCHEN"},  # без cluster_id відкидається
    ])
"""

from .knowledge import (
    ClusterRule,
    QuestionSpec,
    QuestionBank,
    ClusterName,
    AutoCluster,
    parse_cluster_rules,
    parse_question_bank,
)


__all__ = [
    "ClusterRule",
    "QuestionSpec",
    "QuestionBank",
    "ClusterName",
    "AutoCluster",
    "parse_cluster_rules",
    "parse_question_bank",
]
