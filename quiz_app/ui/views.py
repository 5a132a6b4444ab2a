# ui/views.py
"""
Pure description of what each screen shows. Built from the app state and
read-only data; screens.py turns it into Streamlit widgets.
"""

import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import pandas as pd

from quiz_app.config import QuizConfig
from quiz_app.core.data_access import UserDataStore
from quiz_app.core.question_repository import QuestionRepository
from quiz_app.core.quiz_flow import AppState, Screen
from quiz_app.core.scoring import (
    module_progress, overall_progress, badge_tier, score_percentage,
    analysis_message, score_color, format_time, module_progress_table,
)

# markdown punctuation, `$` (math) and `:` (emoji shortcodes) included
_MARKDOWN_SPECIALS = re.compile(r"([\\`*_{}\[\]()#+\-.!|<>~$:])")


def escape_markdown(text: str) -> str:
    """Backslash-escape ``text`` so Streamlit shows it literally."""
    return _MARKDOWN_SPECIALS.sub(r"\\\1", text)


@dataclass(frozen=True)
class LoginView:
    title: str
    username: str


@dataclass(frozen=True)
class ModuleItem:
    module_id: str
    name: str
    progress: int
    tier: str


@dataclass(frozen=True)
class ModuleListView:
    title: str
    username: str
    modules: Tuple[ModuleItem, ...]
    overall: int
    overall_tier: str
    table: pd.DataFrame = field(compare=False, repr=False, default=None)
    confirm_logout: bool = False


@dataclass(frozen=True)
class OptionView:
    index: int
    text: str
    status: str   # "neutral", "correct" or "incorrect"
    disabled: bool


@dataclass(frozen=True)
class QuizView:
    title: str
    number_label: str
    type_label: str
    question: str
    options: Tuple[OptionView, ...]
    explanation: Optional[str]
    correct: int
    incorrect: int
    progress: float
    confirm_abandon: bool = False


@dataclass(frozen=True)
class ResultsView:
    title: str
    score: int
    correct: int
    incorrect: int
    time: str
    analysis: str
    color: str


# ------------------------------
# BUILDERS
# ------------------------------

def build_module_list(state: AppState, config: QuizConfig, repository: QuestionRepository,
                      store: UserDataStore) -> ModuleListView:
    items: List[ModuleItem] = []
    for m in config.modules:
        progress = module_progress(m.id, repository.question_count(m.id), store.get_module_progress(m.id))
        items.append(ModuleItem(m.id, m.name, progress, badge_tier(progress)))

    overall = overall_progress([i.progress for i in items])
    table = module_progress_table(
        config.modules,
        {m.id: repository.question_count(m.id) for m in config.modules},
        {m.id: store.get_module_progress(m.id) for m in config.modules},
    )
    return ModuleListView(
        title=config.title,
        username=state.username,
        modules=tuple(items),
        overall=overall,
        overall_tier=badge_tier(overall),
        table=table,
        confirm_logout=state.pending_confirm is not None,
    )


def build_quiz(state: AppState, config: QuizConfig) -> QuizView:
    session = state.session
    question = session.current_question
    confirming = state.pending_confirm is not None

    options = []
    for i, text in enumerate(question.options):
        status = "neutral"
        if session.answered:
            if i == question.correct_index:
                status = "correct"
            elif i == session.selected:
                status = "incorrect"
        options.append(OptionView(i, text, status, disabled=session.answered or confirming))

    return QuizView(
        title=config.module_name(session.module_id),
        number_label=f"Questão {session.index + 1}/{session.total}",
        type_label=question.type_label,
        question=question.question,
        options=tuple(options),
        explanation=question.explanation if session.answered else None,
        correct=session.correct,
        incorrect=session.incorrect,
        progress=(session.index + 1) / session.total * 100,
        confirm_abandon=confirming,
    )


def build_results(state: AppState, config: QuizConfig) -> ResultsView:
    session = state.session
    score = score_percentage(session.correct, session.incorrect)
    return ResultsView(
        title=config.module_name(session.module_id),
        score=score,
        correct=session.correct,
        incorrect=session.incorrect,
        time=format_time(session.elapsed_seconds),
        analysis=analysis_message(score),
        color=score_color(score),
    )


def build_view(state: AppState, config: QuizConfig, repository: QuestionRepository, store: UserDataStore):
    if state.screen == Screen.LOGGED_OUT:
        return LoginView(title=config.title, username=state.username)
    if state.screen == Screen.MODULE_SELECT:
        return build_module_list(state, config, repository, store)
    if state.screen == Screen.IN_QUIZ:
        return build_quiz(state, config)
    return build_results(state, config)
