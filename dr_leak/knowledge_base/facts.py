"""
Dr.Leak — Значення фактів

FactValue — закрите об'єднання {str, int, float, bool} + UNKNOWN.

UNKNOWN ("не знаю") ніколи не вважається ні збігом, ні суперечністю
з правилами кластерів.

Порівняння значень враховує тип: True != 1 (на відміну від
стандартного == у Python), але 1 == 1.0.
"""

from typing import Any, Iterable, List, Tuple, Union


FactValue = Union[str, int, float, bool]

# Спеціальне значення "користувач відмовився відповідати"
UNKNOWN = "__UNKNOWN__"

# Підпис UNKNOWN у протоколі та UI
UNKNOWN_LABEL = "не знаю"

_UNKNOWN_ALIASES = {"__unknown__", "unknown", "?", "n/a", "na"}


def normalize_value(value: Any) -> FactValue:
    """
    Нормалізувати сире значення відповіді.

    - "true"/"false" (будь-який регістр) → bool
    - "unknown", "?", "n/a", "na", "__UNKNOWN__" → UNKNOWN
    - інші рядки повертаються без змін
    - числа та bool повертаються без змін
    - все інше (None, списки, ...) → UNKNOWN
    """
    if isinstance(value, str):
        s = value.strip().lower()
        if s == "true":
            return True
        if s == "false":
            return False
        if s in _UNKNOWN_ALIASES:
            return UNKNOWN
        return value
    if isinstance(value, (bool, int, float)):
        return value
    return UNKNOWN


def is_unknown(value: Any) -> bool:
    """Чи є значення UNKNOWN після нормалізації"""
    return normalize_value(value) == UNKNOWN


def value_key(value: Any) -> Tuple[str, Any]:
    """Ключ для порівняння та дедуплікації значень з урахуванням типу"""
    v = normalize_value(value)
    if isinstance(v, bool):
        return ("bool", v)
    if isinstance(v, (int, float)):
        return ("num", float(v))
    return ("str", v)


def values_equal(a: Any, b: Any) -> bool:
    return value_key(a) == value_key(b)


def value_in(value: Any, values: Iterable[Any]) -> bool:
    """Чи входить значення у список (обидві сторони нормалізуються)"""
    key = value_key(value)
    return any(value_key(v) == key for v in values)


def unique_values(values: Iterable[Any]) -> List[FactValue]:
    """Унікальні значення в порядку першої появи"""
    seen = set()
    result = []
    for v in values:
        key = value_key(v)
        if key not in seen:
            seen.add(key)
            result.append(v)
    return result


def format_value(value: Any) -> str:
    """Текстове представлення значення для підпису опції"""
    if is_unknown(value):
        return UNKNOWN_LABEL
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def evidence_symbol(indicates: dict, fact_id: str, answer: Any) -> str:
    """
    Символ доказовості відповіді для кластера.

    Returns:
        "?" — відповідь UNKNOWN
        "·" — факт не згадується в indicates кластера
        "+" — відповідь збігається з indicates
        "-" — факт є в indicates, але відповідь інша
    """
    if is_unknown(answer):
        return "?"
    allowed = indicates.get(fact_id)
    if allowed is None:
        return "·"
    return "+" if value_in(answer, allowed) else "-"
