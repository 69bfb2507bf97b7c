"""
Тести для модуля diagnosis_engine

Запуск: pytest tests/test_diagnosis_engine.py -v
Або демо: python tests/test_diagnosis_engine.py
"""

import asyncio

import pytest


def test_engine_not_initialized():
    """Використання до initialize() → EngineNotInitializedError"""
    from dr_leak.config import EngineConfig
    from dr_leak.diagnosis_engine import TriageEngine, EngineNotInitializedError

    engine = TriageEngine(EngineConfig(room="BATHROOM"))

    assert not engine.is_initialized
    with pytest.raises(EngineNotInitializedError):
        engine.get_state()
    with pytest.raises(RuntimeError):
        engine.update_with_answer("f1", "yes")

    print(f"✓ {engine}")


def test_initialize_accepts_awaitables(two_clusters, question_bank):
    """initialize приймає корутини завантажувача"""
    from dr_leak.config import EngineConfig
    from dr_leak.diagnosis_engine import TriageEngine

    async def load_clusters():
        return two_clusters

    async def load_bank():
        return question_bank

    engine = TriageEngine(EngineConfig(room="BATHROOM"))
    asyncio.run(engine.initialize(load_clusters(), load_bank()))

    assert engine.kb.cluster_ids == ["A", "B"]


def test_initialize_propagates_errors(question_bank):
    """Помилка завантаження прокидається викликачу"""
    from dr_leak.config import EngineConfig
    from dr_leak.diagnosis_engine import TriageEngine

    async def broken():
        raise FileNotFoundError("cluster_rules.yaml")

    engine = TriageEngine(EngineConfig(room="BATHROOM"))

    with pytest.raises(FileNotFoundError):
        asyncio.run(engine.initialize(broken(), question_bank))

    assert not engine.is_initialized


def test_initial_state(make_engine, two_clusters):
    """Початковий стан"""
    engine = make_engine(two_clusters)
    state = engine.get_state()

    assert [c.cluster_id for c in state.candidates] == ["A", "B"]
    assert all(c.evidence is None for c in state.candidates)
    assert state.candidates[0].probability == pytest.approx(0.5)
    assert state.next_question.fact_id == "f1"
    assert [o.label for o in state.next_question.options] == ["Так", "Ні"]
    assert not state.stop.should_stop
    assert state.metrics.candidates_count == 2
    assert state.metrics.top_k_mass == pytest.approx(0.5)


def test_worked_example_with_evidence(make_engine, filter_clusters):
    """f1 = yes: A ≈ 0.8333; символи доказовості відносно відповіді"""
    engine = make_engine(filter_clusters)

    engine.update_with_answer("f2", "y")
    assert [c.cluster_id for c in engine.get_state().candidates] == ["A", "B"]

    engine.reset()
    engine.update_with_answer("f1", "yes")
    state = engine.get_state(last_answer=("f1", "yes"))

    by_id = {c.cluster_id: c for c in state.candidates}
    assert by_id["A"].evidence == "+"
    assert by_id["B"].evidence == "-"
    assert by_id["C"].evidence == "+"

    state = engine.get_state(last_answer={"fact_id": "f3", "value": "?"})
    assert {c.evidence for c in state.candidates} == {"?"}

    state = engine.get_state(last_answer=("f3", True))
    by_id = {c.cluster_id: c for c in state.candidates}
    assert by_id["A"].evidence == "·"
    assert by_id["C"].evidence == "+"


def test_two_cluster_posteriors(make_engine, two_clusters):
    """Приклад: A ≈ 0.8333, B ≈ 0.1667"""
    engine = make_engine(two_clusters)
    engine.update_with_answer("f1", "yes")

    probs = engine.posterior_over_candidates()

    assert probs["A"] == pytest.approx(0.8333, abs=1e-4)
    assert probs["B"] == pytest.approx(0.1667, abs=1e-4)

    state = engine.get_state()
    assert [c.cluster_id for c in state.candidates] == ["A", "B"]


def test_stop_on_count_after_pruning(make_engine, two_clusters):
    """stop_at = 1: після відсікання B залишається один кандидат → count"""
    engine = make_engine(two_clusters, stop_at=1, top_k=1, tau=0.99)

    engine.update_with_answer("f1", "yes")
    assert not engine.check_stop().should_stop

    engine.update_with_answer("f2", "yes")
    decision = engine.check_stop()

    assert decision.should_stop
    assert decision.to_dict()["reason"] == "count"
    assert len(engine.get_state().candidates) == 1

    # Відповіді після зупинки теж приймаються
    engine.update_with_answer("f9", "whatever")
    assert engine.answers[-1].fact_id == "f9"


def test_single_answer_prunes_to_count_over_mass(make_engine, two_clusters):
    """Одна відповідь відсікає B за відносним порогом; count переважає mass"""
    priors = {"bathroom": {"A": 10, "B": 1}}
    engine = make_engine(two_clusters, room_priors=priors, stop_at=1, top_k=1, tau=0.85)

    # Prior A = 10/11 вже дає масу, але кандидатів двоє
    state = engine.get_state()
    assert len(state.candidates) == 2
    assert state.stop.to_dict()["reason"] == "mass"

    # A: 10 * 3.0 = 30, B: 1 * 0.6 = 0.6 → p_B / p_A = 0.02 < 0.05
    engine.update_with_answer("f1", "yes")
    state = engine.get_state()

    assert [c.cluster_id for c in state.candidates] == ["A"]
    assert state.candidates[0].probability == pytest.approx(1.0)
    assert state.metrics.top_k_mass >= 0.85
    assert state.stop.should_stop
    assert state.stop.to_dict()["reason"] == "count"


def test_exhausted(make_engine, question_bank):
    """Немає розрізняючих питань → exhausted"""
    clusters = [
        {"cluster_id": "A", "indicates": {"f1": ["yes"]}},
        {"cluster_id": "B", "indicates": {"f1": ["yes"]}},
    ]
    engine = make_engine(clusters, stop_at=0, top_k=1, tau=0.9)

    engine.update_with_answer("f1", "yes")
    state = engine.get_state()

    assert state.next_question is None
    assert state.stop.to_dict()["reason"] == "exhausted"


def test_get_state_idempotent(make_engine, bathroom_clusters, policy_shims):
    """get_state двічі без відповіді → той самий знімок"""
    engine = make_engine(bathroom_clusters, policy_shims=policy_shims, carrier_group=7)
    engine.update_with_answer("fixture", "toilet")

    first = engine.get_state(last_answer=("fixture", "toilet"))
    second = engine.get_state(last_answer=("fixture", "toilet"))

    assert first == second
    assert first.to_dict() == second.to_dict()


def test_undo_by_replay_is_identical(make_engine, bathroom_clusters, room_priors):
    """Undo = reset + replay; стан ідентичний збереженому"""
    engine = make_engine(bathroom_clusters, room_priors=room_priors, stop_at=0, tau=1.0)

    engine.update_with_answer("fixture", "tub")
    engine.update_with_answer("timing", "unknown")
    snapshot = engine.export_state()
    state_before = engine.get_state()

    engine.update_with_answer("tub_overflowed", "no")
    removed = engine.undo_last()

    assert removed.fact_id == "tub_overflowed"
    assert engine.export_state() == snapshot
    assert engine.get_state() == state_before


def test_undo_empty_history(make_engine, two_clusters):
    """Undo без відповідей — нічого не робить"""
    engine = make_engine(two_clusters)

    assert engine.undo_last() is None
    assert engine.answers == []


def test_reset_and_restore(make_engine, two_clusters):
    """reset та restore_state"""
    engine = make_engine(two_clusters)
    engine.update_with_answer("f1", "no")
    snapshot = engine.export_state()

    engine.reset()
    assert engine.facts_known == {}
    assert engine.posterior_over_candidates() == {"A": 0.5, "B": 0.5}

    engine.restore_state(snapshot)
    assert engine.facts_known == {"f1": "no"}
    assert engine.posterior_over_candidates()["B"] == pytest.approx(0.8333, abs=1e-4)


def test_candidates_sorted_with_ties(make_engine):
    """Кандидати спадно за ймовірністю, при рівності — за ID"""
    clusters = [
        {"cluster_id": "Z", "indicates": {"f1": ["yes"]}},
        {"cluster_id": "M", "indicates": {"f1": ["no"]}},
        {"cluster_id": "A", "indicates": {"f1": ["no"]}},
    ]
    engine = make_engine(clusters, room="ATTIC")

    assert [c.cluster_id for c in engine.get_state().candidates] == ["A", "M", "Z"]

    engine.update_with_answer("f1", "yes")
    assert [c.cluster_id for c in engine.get_state().candidates] == ["Z", "A", "M"]


def test_top_k_zero_metrics(make_engine, two_clusters):
    """top_k = 0 → маса не рахується"""
    engine = make_engine(two_clusters, top_k=0)

    assert engine.get_state().metrics.top_k_mass is None


# =============================================================================
# DialogueSession
# =============================================================================

def test_session_transcript(make_engine, two_clusters):
    """Протокол зберігає текст питання та підпис відповіді"""
    from dr_leak.diagnosis_engine import DialogueSession, SessionStatus

    session = DialogueSession(engine=make_engine(two_clusters, stop_at=1, tau=0.99))

    state = session.current_state()
    assert state.next_question.fact_id == "f1"
    assert session.status == SessionStatus.ACTIVE

    state = session.answer("f1", "yes")
    entry = session.transcript[-1]
    assert entry.prompt == "Питання f1?"
    assert entry.label == "Так"
    assert {c.cluster_id: c.evidence for c in state.candidates} == {"A": "+", "B": "-"}

    assert session.current_question.fact_id == "f2"
    state = session.answer("f2", "yes")
    assert session.transcript[-1].prompt == "Питання f2?"
    assert state.stop.should_stop
    assert state.next_question is None
    assert session.status == SessionStatus.COMPLETED
    assert not session.is_active

    # Відповідь не на поточне питання
    session.answer("f7", True)
    assert session.transcript[-1].prompt == "f7"
    assert session.transcript[-1].label == "true"
    assert session.n_answers == 3

    # "не знаю" у протоколі
    session.answer("f8", "?")
    assert session.transcript[-1].value == "__UNKNOWN__"
    assert session.transcript[-1].label == "не знаю"

    print(f"✓ {session}")


def test_session_undo_and_reset(make_engine, two_clusters):
    """Undo повертає стан та статус"""
    from dr_leak.diagnosis_engine import DialogueSession, SessionStatus

    session = DialogueSession(engine=make_engine(two_clusters, stop_at=1, tau=0.99))

    session.answer("f1", "yes")
    after_first = session.current_state()
    session.answer("f2", "yes")
    assert session.status == SessionStatus.COMPLETED

    state = session.undo()
    assert state == after_first
    assert session.n_answers == 1
    assert session.status == SessionStatus.ACTIVE

    state = session.reset()
    assert session.n_answers == 0
    assert all(c.evidence is None for c in state.candidates)

    summary = session.get_summary()
    assert summary["room"] == "BATHROOM"
    assert summary["answers"] == 0


# =============================================================================
# Bands
# =============================================================================

def test_ratio_bands():
    """Менше 3 кандидатів — відношення до максимуму"""
    from dr_leak.diagnosis_engine import assign_bands, ConfidenceBand

    assert assign_bands([0.8, 0.2]) == [ConfidenceBand.HIGH, ConfidenceBand.LOW]
    assert assign_bands([0.6, 0.4]) == [ConfidenceBand.HIGH, ConfidenceBand.MEDIUM]
    assert assign_bands([]) == []


def test_elbow_bands():
    """Лікті розподілу"""
    from dr_leak.diagnosis_engine import compute_elbow_bands, ConfidenceBand

    H, M, L = ConfidenceBand.HIGH, ConfidenceBand.MEDIUM, ConfidenceBand.LOW

    # Рівні ймовірності: ліктів немає
    assert compute_elbow_bands([0.25, 0.25, 0.25, 0.25]) == [L, L, L, L]

    # Один сильний лікоть
    assert compute_elbow_bands([0.45, 0.44, 0.06, 0.05]) == [H, H, L, L]

    # Два лікті
    assert compute_elbow_bands([0.7, 0.2, 0.06, 0.04]) == [H, M, L, L]

    print("✓ Elbow bands")


def demo():
    """Демонстрація діалогу на engine_assets"""
    from pathlib import Path

    from dr_leak.config import EngineConfig
    from dr_leak.diagnosis_engine import DialogueSession, TriageEngine
    from dr_leak.knowledge_base import KnowledgeBaseLoader

    assets = Path(__file__).parent.parent / "engine_assets"

    print("=" * 60)
    print("Dr.Leak — Демонстрація движка")
    print("=" * 60)

    engine = asyncio.run(TriageEngine.from_loader(
        KnowledgeBaseLoader(assets, verbose=True),
        EngineConfig(room="BATHROOM", carrier_group=1),
    ))
    session = DialogueSession(engine=engine)

    state = session.current_state()
    while not state.stop.should_stop and state.next_question:
        question = state.next_question
        answer = question.options[0].value
        print(f"\n❓ {question.prompt} → {question.options[0].label}")

        state = session.answer(question.fact_id, answer)
        for c in state.candidates:
            print(f"   {c.evidence} {c.cluster_id}: {c.probability:.1%}")

    print(f"\n🛑 {state.stop.message}")


if __name__ == "__main__":
    demo()
