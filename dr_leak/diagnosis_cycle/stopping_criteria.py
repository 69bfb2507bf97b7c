"""
Dr.Leak — Критерії зупинки діалогу

Критерії (строгий пріоритет, перший збіг перемагає):
- COUNT: кандидатів <= stop_at
- MASS: сума топ-k ренормалізованих ймовірностей >= tau
- EXHAUSTED: frontier порожній — більше немає розрізняючих питань
- CONTINUE: продовжуємо
"""

from typing import Dict, Optional
from dataclasses import dataclass
from enum import Enum

from dr_leak.config.settings import EngineConfig


class StopReason(Enum):
    """Причина зупинки діалогу"""
    CONTINUE = "continue"       # Продовжуємо
    COUNT = "count"             # Залишилось достатньо мало кандидатів
    MASS = "mass"               # Топ-k кандидатів мають достатню масу
    EXHAUSTED = "exhausted"     # Немає більше питань


@dataclass(frozen=True)
class StopDecision:
    """Результат перевірки критеріїв зупинки"""
    reason: StopReason
    should_stop: bool
    message: str = ""

    # Деталі
    candidates_count: int = 0
    top_k_mass: float = 0.0

    @property
    def should_continue(self) -> bool:
        return not self.should_stop

    def to_dict(self) -> dict:
        return {
            "should_stop": self.should_stop,
            "reason": self.reason.value if self.should_stop else None,
            "message": self.message,
        }


def top_k_mass(candidate_probs: Dict[str, float], k: int) -> float:
    """Сума k найбільших ймовірностей"""
    if k <= 0:
        return 0.0
    probs = sorted(candidate_probs.values(), reverse=True)
    return float(sum(probs[:k]))


class StoppingCriteria:
    """
    Перевірка критеріїв зупинки.

    Приклад:
        criteria = StoppingCriteria(EngineConfig(room="BATHROOM", stop_at=1, top_k=1, tau=0.85))

        decision = criteria.check(
            candidate_probs={'TUB_OVERFLOW': 0.9, 'TOILET_SUPPLY': 0.1},
            frontier_size=3,
        )

        if decision.should_stop:
            print(f"Зупинка: {decision.reason.value}")
            print(f"Повідомлення: {decision.message}")
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()

    def check(
        self,
        candidate_probs: Dict[str, float],
        frontier_size: int,
    ) -> StopDecision:
        """
        Перевірити всі критерії зупинки.

        Args:
            candidate_probs: Ренормалізовані ймовірності кандидатів {cluster: p}
            frontier_size: Кількість фактів, про які ще можна спитати

        Returns:
            StopDecision
        """
        n = len(candidate_probs)
        mass = top_k_mass(candidate_probs, self.config.top_k)

        # 1. COUNT
        if n <= self.config.stop_at:
            return StopDecision(
                reason=StopReason.COUNT,
                should_stop=True,
                message=f"Залишилось кандидатів: {n} (поріг {self.config.stop_at})",
                candidates_count=n,
                top_k_mass=mass,
            )

        # 2. MASS
        if self.config.top_k > 0 and self.config.tau > 0 and mass >= self.config.tau:
            return StopDecision(
                reason=StopReason.MASS,
                should_stop=True,
                message=f"Топ-{self.config.top_k} кандидатів мають {mass:.1%} "
                        f"ймовірності (поріг {self.config.tau:.0%})",
                candidates_count=n,
                top_k_mass=mass,
            )

        # 3. EXHAUSTED
        if frontier_size <= 0:
            return StopDecision(
                reason=StopReason.EXHAUSTED,
                should_stop=True,
                message="Немає більше розрізняючих питань",
                candidates_count=n,
                top_k_mass=mass,
            )

        return StopDecision(
            reason=StopReason.CONTINUE,
            should_stop=False,
            message="Продовжуємо діалог",
            candidates_count=n,
            top_k_mass=mass,
        )

    def __repr__(self) -> str:
        return (
            f"StoppingCriteria("
            f"stop_at={self.config.stop_at}, "
            f"top_k={self.config.top_k}, "
            f"tau={self.config.tau:.0%})"
        )
