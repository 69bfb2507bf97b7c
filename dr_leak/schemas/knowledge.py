"""
Dr.Leak — Схеми бази знань

Pydantic моделі для:
- ClusterRule: правило одного кластера пошкоджень (гіпотези)
- QuestionSpec: опис питання про факт
- QuestionBank: банк питань
- ClusterName / AutoCluster: довідкові дані для відображення
"""

from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, Field, field_validator, model_validator


FactValueField = Union[bool, int, float, str]


def _as_value_lists(mapping: Any) -> Dict[str, List[Any]]:
    """{fact: value | [values]} → {fact: [values]}"""
    if mapping is None:
        return {}
    if not isinstance(mapping, dict):
        raise ValueError("очікується mapping fact_id → список значень")
    result = {}
    for fact_id, values in mapping.items():
        if values is None:
            values = []
        elif not isinstance(values, (list, tuple)):
            values = [values]
        result[str(fact_id)] = list(values)
    return result


class ClusterRule(BaseModel):
    """
    Правило кластера пошкоджень.

    - requires: жорстка умова — відповідь поза списком виключає кластер
    - excludes: жорстка умова — відповідь зі списку виключає кластер
    - indicates: м'які докази на користь кластера

    Приклад:
        rule = ClusterRule(
            cluster_id="BATH_TUB_OVERFLOW",
            room_type="BATHROOM",
            requires={"water_source_known": [True]},
            indicates={"tub_overflowed": ["yes"]},
        )
    """
    cluster_id: str = Field(..., min_length=1, description="Унікальний ID кластера")
    room_type: Optional[str] = Field(default=None, description="Фільтр приміщення")

    requires: Dict[str, List[FactValueField]] = Field(default_factory=dict)
    excludes: Dict[str, List[FactValueField]] = Field(default_factory=dict)
    indicates: Dict[str, List[FactValueField]] = Field(default_factory=dict)

    @field_validator("cluster_id", mode="before")
    @classmethod
    def _strip_id(cls, v):
        if v is None:
            return v
        return str(v).strip()

    @field_validator("room_type", mode="before")
    @classmethod
    def _room_type(cls, v):
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    @field_validator("requires", "excludes", "indicates", mode="before")
    @classmethod
    def _coerce_lists(cls, v):
        return _as_value_lists(v)

    @property
    def is_discriminating(self) -> bool:
        """Чи має правило хоча б один факт у indicates"""
        return len(self.indicates) > 0

    def mentioned_facts(self) -> List[str]:
        """Всі факти, які згадує правило"""
        facts = []
        for mapping in (self.requires, self.excludes, self.indicates):
            for fact_id in mapping:
                if fact_id not in facts:
                    facts.append(fact_id)
        return facts


class QuestionSpec(BaseModel):
    """
    Опис питання про факт.

    Якщо options порожній, движок виводить значення з indicates
    кластерів, що залишились.
    """
    fact_id: str = ""
    prompt: Optional[str] = None
    options: List[FactValueField] = Field(default_factory=list)
    option_labels: List[str] = Field(default_factory=list)
    type: Optional[str] = None

    @field_validator("options", "option_labels", mode="before")
    @classmethod
    def _none_to_list(cls, v):
        return [] if v is None else v

    @field_validator("option_labels", mode="before")
    @classmethod
    def _labels_to_str(cls, v):
        return ["" if label is None else str(label) for label in (v or [])]


class QuestionBank(BaseModel):
    """Банк питань {fact_id: QuestionSpec}"""
    version: Optional[str] = None
    taxonomy: Optional[str] = None
    questions: Dict[str, QuestionSpec] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _accept_bare_mapping(cls, data):
        # Допускаємо "голий" mapping {fact_id: spec} без обгортки
        if isinstance(data, dict) and "questions" not in data:
            meta = {k: data[k] for k in ("version", "taxonomy") if k in data}
            rest = {k: v for k, v in data.items() if k not in ("version", "taxonomy")}
            return {**meta, "questions": rest}
        return data

    @model_validator(mode="after")
    def _fill_fact_ids(self):
        for fact_id, spec in self.questions.items():
            if not spec.fact_id:
                spec.fact_id = fact_id
        return self

    def get(self, fact_id: str) -> Optional[QuestionSpec]:
        return self.questions.get(fact_id)

    def __len__(self) -> int:
        return len(self.questions)


class ClusterName(BaseModel):
    """Назва кластера для відображення"""
    name: str
    summary: Optional[str] = None


class AutoCluster(BaseModel):
    """Запис автоматично згенерованого каталогу кластерів"""
    cluster_id: str
    description: Optional[str] = None
    core_item_codes: List[str] = Field(default_factory=list)
    room_type: Optional[str] = None

    @field_validator("cluster_id", mode="before")
    @classmethod
    def _id_to_str(cls, v):
        return str(v)

    @field_validator("core_item_codes", mode="before")
    @classmethod
    def _codes_to_str(cls, v):
        if not isinstance(v, list):
            return []
        return [str(code) for code in v]


def parse_cluster_rules(raw: Any) -> List[ClusterRule]:
    """
    Розібрати сирий список правил.

    Записи без cluster_id або з невалідною структурою мовчки
    відкидаються (політика якості даних, не помилка движка).
    """
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ValueError("cluster rules must be a list")

    rules = []
    for entry in raw:
        if isinstance(entry, ClusterRule):
            rules.append(entry)
            continue
        if not isinstance(entry, dict) or not entry.get("cluster_id"):
            continue
        try:
            rules.append(ClusterRule.model_validate(entry))
        except ValueError:
            continue
    return rules


def parse_question_bank(raw: Any) -> QuestionBank:
    """Розібрати сирий банк питань"""
    if isinstance(raw, QuestionBank):
        return raw
    if raw is None:
        return QuestionBank()
    if not isinstance(raw, dict):
        raise ValueError("question bank must be a mapping")
    return QuestionBank.model_validate(raw)
