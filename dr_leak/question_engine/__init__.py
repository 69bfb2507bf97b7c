"""
Dr.Leak — Модуль Question Engine

Звужує множину кластерів пошкоджень і вибирає найінформативніше
наступне питання.

Компоненти:
- candidate_filter: Жорсткий фільтр кандидатів (requires / excludes)
- posterior: Байєсівське оновлення та відсікання кандидатів
- information_gain: Ентропія розподілу відповідей
- question_selector: Frontier, must-ask перевізника, вибір за ентропією
- answer_processor: SessionState та чиста обробка відповідей

Приклад використання:
    from dr_leak.question_engine import SessionState, QuestionSelector, process_answer

    state = SessionState.initial(kb)
    selector = QuestionSelector(kb, EngineConfig(room="BATHROOM"))

    question = selector.select(state)
    if question:
        print(f"Питання: {question.prompt}")
        state = process_answer(kb, state, question.fact_id, "yes")
"""

from .information_gain import (
    EntropyResult,
    entropy,
    normalize_probs,
    option_distribution,
    fact_entropy,
)

from .candidate_filter import (
    is_compatible,
    recompute_candidates,
)

from .posterior import (
    likelihood_ratio,
    prune_candidates,
    apply_bayes_update,
    posterior_over_candidates,
)

from .answer_processor import (
    AnswerRecord,
    SessionState,
    process_answer,
    replay_answers,
)

from .question_selector import (
    QuestionSelector,
    QuestionOption,
    NextQuestion,
    ORIGIN_CARRIER,
    ORIGIN_NORMAL,
    frontier,
    infer_options,
    resolve_options,
    build_question,
    must_ask_list,
)


__all__ = [
    # Information Gain
    "EntropyResult",
    "entropy",
    "normalize_probs",
    "option_distribution",
    "fact_entropy",

    # Candidate Filter
    "is_compatible",
    "recompute_candidates",

    # Posterior
    "likelihood_ratio",
    "prune_candidates",
    "apply_bayes_update",
    "posterior_over_candidates",

    # Answer Processor
    "AnswerRecord",
    "SessionState",
    "process_answer",
    "replay_answers",

    # Question Selector
    "QuestionSelector",
    "QuestionOption",
    "NextQuestion",
    "ORIGIN_CARRIER",
    "ORIGIN_NORMAL",
    "frontier",
    "infer_options",
    "resolve_options",
    "build_question",
    "must_ask_list",
]
