"""
Dr.Leak — Критерії завершення діалогу

Модулі:
- stopping_criteria: Критерії зупинки (COUNT, MASS, EXHAUSTED)

Приклад використання:
    from dr_leak.diagnosis_cycle import StoppingCriteria, StopReason

    criteria = StoppingCriteria(config)
    decision = criteria.check(candidate_probs, frontier_size=len(facts))

    if decision.should_stop:
        print(f"Зупинка: {decision.reason.value}")
"""

from .stopping_criteria import (
    StopReason,
    StopDecision,
    StoppingCriteria,
    top_k_mass,
)


__all__ = [
    'StopReason',
    'StopDecision',
    'StoppingCriteria',
    'top_k_mass',
]
