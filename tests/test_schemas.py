"""
Тести для модуля schemas

Запуск: pytest tests/test_schemas.py -v
"""

import pytest


def test_cluster_rule_coercion():
    """Скаляри в mapping-ах стають списками"""
    from dr_leak.schemas import ClusterRule

    rule = ClusterRule.model_validate({
        "cluster_id": "  TUB_OVERFLOW ",
        "room_type": "BATHROOM",
        "requires": {"has_tub": True},
        "indicates": {"tub_overflowed": "yes", "timing": ["sudden", "during_use"]},
    })

    assert rule.cluster_id == "TUB_OVERFLOW"
    assert rule.requires == {"has_tub": [True]}
    assert rule.indicates["tub_overflowed"] == ["yes"]
    assert rule.excludes == {}
    assert rule.is_discriminating
    assert rule.mentioned_facts() == ["has_tub", "tub_overflowed", "timing"]

    print(f"✓ ClusterRule: {rule.cluster_id}")


def test_cluster_rule_room_type():
    """Порожній room_type = правило для всіх приміщень"""
    from dr_leak.schemas import ClusterRule

    assert ClusterRule(cluster_id="X", room_type="  ").room_type is None
    assert ClusterRule(cluster_id="X").room_type is None
    assert not ClusterRule(cluster_id="X").is_discriminating


def test_parse_cluster_rules_drops_malformed(bathroom_clusters):
    """Записи без cluster_id або невалідні мовчки відкидаються"""
    from dr_leak.schemas import parse_cluster_rules

    raw = bathroom_clusters + [
        "not a dict",
        {"cluster_id": ""},
        {"cluster_id": "BAD", "indicates": "not a mapping"},
    ]

    rules = parse_cluster_rules(raw)
    ids = [r.cluster_id for r in rules]

    assert ids == ["TUB_OVERFLOW", "TOILET_SUPPLY", "SHOWER_PAN", "FROM_ABOVE", "SINK_DRAIN", "SILENT"]
    assert parse_cluster_rules(None) == []

    with pytest.raises(ValueError):
        parse_cluster_rules({"cluster_id": "A"})

    print(f"✓ Parsed {len(rules)} of {len(raw)} rules")


def test_question_bank(question_bank):
    """Банк питань та заповнення fact_id"""
    from dr_leak.schemas import parse_question_bank

    bank = parse_question_bank(question_bank)

    assert bank.version == "1"
    assert len(bank) == 5
    assert bank.get("f1").fact_id == "f1"
    assert bank.get("f1").options == ["yes", "no"]
    assert bank.get("has_shower").options == [True, False]
    assert bank.get("fixture").options == []
    assert bank.get("missing") is None

    print(f"✓ QuestionBank: {len(bank)} questions")


def test_question_bank_bare_mapping():
    """Банк питань без обгортки questions"""
    from dr_leak.schemas import QuestionBank

    bank = QuestionBank.model_validate({
        "version": "2",
        "leak_location": {"prompt": "Де вода?", "options": ["floor"], "option_labels": None},
    })

    assert bank.version == "2"
    assert bank.get("leak_location").prompt == "Де вода?"
    assert bank.get("leak_location").option_labels == []
