"""
Тести для Байєсівського оновлення

Запуск: pytest tests/test_posterior.py -v
"""

import pytest


def _kb(clusters, question_bank, **kwargs):
    from dr_leak.knowledge_base import KnowledgeBase
    return KnowledgeBase.build(clusters, question_bank, room="BATHROOM", **kwargs)


def test_likelihood_ratio(two_clusters, question_bank):
    """LR: збіг, незбіг, UNKNOWN, факт не згадується"""
    from dr_leak.knowledge_base import UNKNOWN
    from dr_leak.question_engine import likelihood_ratio
    from dr_leak.schemas import ClusterRule

    kb = _kb(two_clusters, question_bank)
    rule_a = kb.get_rule("A")

    assert likelihood_ratio(rule_a, "f1", "yes") == 3.0
    assert likelihood_ratio(rule_a, "f1", "no") == 0.6
    assert likelihood_ratio(rule_a, "f1", UNKNOWN) == 1.0
    assert likelihood_ratio(rule_a, "f9", "yes") == 1.0

    # Факт з порожнім списком значень завжди дає незбіг
    empty = ClusterRule(cluster_id="E", indicates={"f1": []})
    assert likelihood_ratio(empty, "f1", "yes") == 0.6


def test_worked_example(two_clusters, question_bank):
    """A, B рівномірно; f1 = yes → A ≈ 0.8333, B ≈ 0.1667"""
    from dr_leak.question_engine import SessionState, process_answer

    kb = _kb(two_clusters, question_bank)
    state = process_answer(kb, SessionState.initial(kb), "f1", "yes")

    assert state.posterior["A"] == pytest.approx(1.5 / 1.8)
    assert state.posterior["B"] == pytest.approx(0.3 / 1.8)
    assert state.candidate_ids == ["A", "B"]
    assert state.facts_known == {"f1": "yes"}
    assert state.questions_asked == ["f1"]

    print(f"✓ Posterior: A={state.posterior['A']:.4f}, B={state.posterior['B']:.4f}")


def test_process_answer_is_pure(two_clusters, question_bank):
    """Вхідний стан не змінюється"""
    from dr_leak.question_engine import SessionState, process_answer

    kb = _kb(two_clusters, question_bank)
    initial = SessionState.initial(kb)
    snapshot = initial.to_dict()

    process_answer(kb, initial, "f1", "yes")

    assert initial.to_dict() == snapshot


def test_relative_pruning(two_clusters, question_bank):
    """Відношення 0.04 < 0.05 → B відсікається"""
    from dr_leak.question_engine import replay_answers

    kb = _kb(two_clusters, question_bank)
    state = replay_answers(kb, [("f1", "yes"), ("f2", "yes")])

    # A: 2.5, B: 0.1 → B / A = 0.04
    assert state.candidate_ids == ["A"]
    assert state.posterior["B"] / state.posterior["A"] == pytest.approx(0.04)


def test_prune_keeps_list_if_all_would_go():
    """Відсікання не залишає порожній список"""
    from dr_leak.config import PruningConfig
    from dr_leak.question_engine import prune_candidates

    posterior = {"A": 0.00001, "B": 0.00002}
    assert prune_candidates(posterior, ["A", "B"], PruningConfig()) == ["A", "B"]

    posterior = {"A": 0.9, "B": 0.00005, "C": 0.09995}
    assert prune_candidates(posterior, ["A", "B", "C"]) == ["A", "C"]

    assert prune_candidates({}, []) == []


def test_unknown_preserves_ratios(bathroom_clusters, question_bank):
    """UNKNOWN не змінює відношень posterior кандидатів"""
    from dr_leak.knowledge_base import UNKNOWN
    from dr_leak.question_engine import SessionState, process_answer, replay_answers

    kb = _kb(bathroom_clusters, question_bank)
    before = replay_answers(kb, [("fixture", "toilet")])
    after = process_answer(kb, before, "timing", UNKNOWN)

    assert after.candidate_ids == before.candidate_ids

    ids = before.candidate_ids
    for a in ids:
        for b in ids:
            if before.posterior[b] > 0:
                assert after.posterior[a] / after.posterior[b] == pytest.approx(
                    before.posterior[a] / before.posterior[b]
                )

    print(f"✓ Ratios preserved for {len(ids)} candidates")


def test_normalization(bathroom_clusters, question_bank, room_priors):
    """Після будь-якої послідовності відповідей сума = 1"""
    from dr_leak.question_engine import SessionState, posterior_over_candidates, process_answer

    kb = _kb(bathroom_clusters, question_bank, room_priors=room_priors)
    state = SessionState.initial(kb)

    answers = [("fixture", "tub"), ("timing", "?"), ("tub_overflowed", "no"),
               ("unit_above", True), ("leak_location", "floor")]

    for fact_id, value in answers:
        state = process_answer(kb, state, fact_id, value)
        assert sum(state.posterior.values()) == pytest.approx(1.0, abs=1e-6)
        probs = posterior_over_candidates(state.posterior, state.candidate_ids)
        assert sum(probs.values()) == pytest.approx(1.0, abs=1e-6)


def test_degenerate_posterior_resets_to_prior(two_clusters, question_bank):
    """Сума <= 0 → початковий prior"""
    from dr_leak.config import LikelihoodConfig
    from dr_leak.question_engine import apply_bayes_update

    kb = _kb(two_clusters, question_bank)
    posterior, candidates = apply_bayes_update(
        kb, {"A": 0.5, "B": 0.5}, ["A", "B"], "f1", "yes",
        likelihood=LikelihoodConfig(lr_pos=0.0, lr_neg=0.0),
    )

    assert posterior == kb.initial_prior()
    assert candidates == ["A", "B"]


def test_posterior_over_candidates_zero_mass():
    """Нульова маса кандидатів → рівномірний"""
    from dr_leak.question_engine import posterior_over_candidates

    probs = posterior_over_candidates({"A": 0.0, "B": 0.0, "C": 1.0}, ["A", "B"])

    assert probs == {"A": 0.5, "B": 0.5}
