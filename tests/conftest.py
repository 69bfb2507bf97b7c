"""
Спільні фікстури тестів Dr.Leak

Невеликі бази знань у пам'яті — тести не залежать від engine_assets.
"""

import asyncio
import json

import pytest
import yaml


# Два кластери, що розрізняються фактами f1 та f2
TWO_CLUSTERS = [
    {
        "cluster_id": "A",
        "room_type": "BATHROOM",
        "indicates": {"f1": ["yes"], "f2": ["yes"]},
    },
    {
        "cluster_id": "B",
        "room_type": "BATHROOM",
        "indicates": {"f1": ["no"], "f2": ["no"]},
    },
]

# Кластер C з жорсткою умовою requires
FILTER_CLUSTERS = TWO_CLUSTERS + [
    {
        "cluster_id": "C",
        "room_type": "BATHROOM",
        "requires": {"f2": ["x"]},
        "indicates": {"f1": ["yes"], "f3": [True]},
    },
]

# Ширша база знань: кілька приміщень, excludes, факти без схеми питання
BATHROOM_CLUSTERS = [
    {
        "cluster_id": "TUB_OVERFLOW",
        "room_type": "BATHROOM",
        "excludes": {"leak_location": ["ceiling"]},
        "indicates": {"tub_overflowed": ["yes"], "fixture": ["tub"], "timing": ["sudden"]},
    },
    {
        "cluster_id": "TOILET_SUPPLY",
        "room_type": "BATHROOM",
        "indicates": {"fixture": ["toilet"], "timing": ["continuous"]},
    },
    {
        "cluster_id": "SHOWER_PAN",
        "room_type": "bathroom",
        "requires": {"has_shower": [True]},
        "indicates": {"fixture": ["shower"], "timing": ["during_use"], "grout_cracked": [True]},
    },
    {
        "cluster_id": "FROM_ABOVE",
        "room_type": "BATHROOM",
        "indicates": {"leak_location": ["ceiling"], "unit_above": [True]},
    },
    {
        "cluster_id": "SINK_DRAIN",
        "room_type": "KITCHEN",
        "indicates": {"fixture": ["sink"]},
    },
    {
        # Без indicates: не розрізняється питаннями
        "cluster_id": "SILENT",
        "room_type": "BATHROOM",
        "requires": {"has_shower": [False]},
    },
    {
        # Без cluster_id: відкидається
        "room_type": "BATHROOM",
        "indicates": {"fixture": ["tub"]},
    },
]

QUESTION_BANK = {
    "version": "1",
    "taxonomy": "test",
    "questions": {
        "f1": {
            "prompt": "Питання f1?",
            "options": ["yes", "no"],
            "option_labels": ["Так", "Ні"],
            "type": "boolean",
        },
        "f2": {
            "prompt": "Питання f2?",
            "options": ["yes", "no"],
            "option_labels": ["Так", "Ні"],
            "type": "boolean",
        },
        "leak_location": {
            "prompt": "Де видно воду?",
            "options": ["floor", "ceiling"],
            "option_labels": ["На підлозі", "На стелі"],
        },
        "has_shower": {
            "prompt": "Чи є душ?",
            "options": [True, False],
            "option_labels": ["Так", "Ні"],
        },
        # fixture, timing, tub_overflowed: варіанти з indicates
        "fixture": {"prompt": "Біля якого приладу вода?"},
    },
}

POLICY_SHIMS = {
    "carrier:7": {
        "BATHROOM": {"must_asks": ["has_shower", "leak_location"]},
    },
}

ROOM_PRIORS = {
    "bathroom": {"TUB_OVERFLOW": 1, "TOILET_SUPPLY": 3, "SHOWER_PAN": 0, "FROM_ABOVE": -2},
}


@pytest.fixture
def two_clusters():
    return [dict(c) for c in TWO_CLUSTERS]


@pytest.fixture
def filter_clusters():
    return [dict(c) for c in FILTER_CLUSTERS]


@pytest.fixture
def bathroom_clusters():
    return [dict(c) for c in BATHROOM_CLUSTERS]


@pytest.fixture
def question_bank():
    return json.loads(json.dumps(QUESTION_BANK))


@pytest.fixture
def policy_shims():
    return dict(POLICY_SHIMS)


@pytest.fixture
def room_priors():
    return dict(ROOM_PRIORS)


@pytest.fixture
def make_engine(question_bank):
    """Фабрика ініціалізованих TriageEngine"""
    from dr_leak.config import EngineConfig
    from dr_leak.diagnosis_engine import TriageEngine

    def _make(clusters, room="BATHROOM", policy_shims=None, room_priors=None, **kwargs):
        engine = TriageEngine(EngineConfig(room=room, **kwargs))
        asyncio.run(engine.initialize(
            clusters,
            question_bank,
            policy_shims=policy_shims,
            room_priors=room_priors,
        ))
        return engine

    return _make


@pytest.fixture
def assets_dir(tmp_path):
    """Директорія бази знань на диску"""
    (tmp_path / "config").mkdir()
    (tmp_path / "ontology").mkdir()

    with open(tmp_path / "config" / "cluster_rules.yaml", "w", encoding="utf-8") as f:
        yaml.safe_dump(BATHROOM_CLUSTERS, f, allow_unicode=True)

    with open(tmp_path / "ontology" / "fact_questions.json", "w", encoding="utf-8") as f:
        json.dump(QUESTION_BANK, f, ensure_ascii=False)

    with open(tmp_path / "config" / "policy_shims.yaml", "w", encoding="utf-8") as f:
        yaml.safe_dump(POLICY_SHIMS, f)

    with open(tmp_path / "config" / "room_priors.yaml", "w", encoding="utf-8") as f:
        yaml.safe_dump(ROOM_PRIORS, f)

    with open(tmp_path / "config" / "cluster_names.yaml", "w", encoding="utf-8") as f:
        yaml.safe_dump({
            "TUB_OVERFLOW": {"name": "Переповнення ванни", "summary": "Вода через край"},
            "TOILET_SUPPLY": {"name": "Лінія подачі унітазу"},
            "BROKEN": "not a mapping",
        }, f, allow_unicode=True)

    return tmp_path
