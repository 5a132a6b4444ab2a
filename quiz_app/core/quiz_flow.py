# core/quiz_flow.py
"""
Screen state machine of the quiz.

``transition(state, event)`` is pure: it returns the next AppState and the
list of effects the controller has to carry out (persisting, timers).
Events that do not apply to the current screen leave the state unchanged,
and so does everything but Confirm/Cancel while a confirmation is open.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from quiz_app.core.models import Question, QuizSession


class Screen(str, Enum):
    LOGGED_OUT = "login"
    MODULE_SELECT = "module_selection"
    IN_QUIZ = "quiz"
    RESULTS = "results"


CONFIRM_ABANDON = "abandon"
CONFIRM_LOGOUT = "logout"


@dataclass(frozen=True)
class AppState:
    screen: Screen = Screen.LOGGED_OUT
    username: str = ""
    session: Optional[QuizSession] = None
    pending_confirm: Optional[str] = None


# ============================================================
# EVENTS
# ============================================================

@dataclass(frozen=True)
class Restore:
    username: str


@dataclass(frozen=True)
class Login:
    username: str


@dataclass(frozen=True)
class SelectModule:
    module_id: str
    questions: Tuple[Question, ...] = ()


@dataclass(frozen=True)
class Answer:
    option_index: int


@dataclass(frozen=True)
class NextQuestion:
    pass


@dataclass(frozen=True)
class RequestAbandon:
    pass


@dataclass(frozen=True)
class RequestLogout:
    pass


@dataclass(frozen=True)
class Confirm:
    pass


@dataclass(frozen=True)
class Cancel:
    pass


@dataclass(frozen=True)
class Retry:
    questions: Tuple[Question, ...] = ()


@dataclass(frozen=True)
class ReturnToModules:
    pass


@dataclass(frozen=True)
class Tick:
    pass


# ============================================================
# EFFECTS
# ============================================================

@dataclass(frozen=True)
class PersistUsername:
    username: str


@dataclass(frozen=True)
class RecordOutcome:
    module_id: str
    question_index: int
    is_correct: bool


@dataclass(frozen=True)
class StartElapsedTimer:
    pass


@dataclass(frozen=True)
class StopElapsedTimer:
    pass


Result = Tuple[AppState, List[object]]


# ============================================================
# TRANSITIONS
# ============================================================

def _start_quiz(state: AppState, module_id: str, questions: Sequence[Question]) -> Result:
    # questions stay in file order, no shuffling
    session = QuizSession(module_id=module_id, questions=tuple(questions))
    if session.total == 0:
        return replace(state, screen=Screen.RESULTS, session=session, pending_confirm=None), [StopElapsedTimer()]
    return replace(state, screen=Screen.IN_QUIZ, session=session, pending_confirm=None), [StartElapsedTimer()]


def _answer(state: AppState, option_index: int) -> Result:
    session = state.session
    question = session.current_question
    if question is None or session.answered:
        return state, []
    if not 0 <= option_index < len(question.options):
        return state, []

    is_correct = option_index == question.correct_index
    session = replace(
        session,
        selected=option_index,
        correct=session.correct + (1 if is_correct else 0),
        incorrect=session.incorrect + (0 if is_correct else 1),
    )
    effect = RecordOutcome(session.module_id, session.index, is_correct)
    return replace(state, session=session), [effect]


def _next_question(state: AppState) -> Result:
    session = state.session
    if not session.answered:
        return state, []

    session = replace(session, index=session.index + 1, selected=None)
    if session.index >= session.total:
        return replace(state, screen=Screen.RESULTS, session=session, pending_confirm=None), [StopElapsedTimer()]
    return replace(state, session=session), []


def _confirm(state: AppState) -> Result:
    if state.pending_confirm == CONFIRM_ABANDON and state.screen == Screen.IN_QUIZ:
        return replace(state, screen=Screen.MODULE_SELECT, session=None, pending_confirm=None), [StopElapsedTimer()]
    if state.pending_confirm == CONFIRM_LOGOUT and state.screen == Screen.MODULE_SELECT:
        return replace(state, screen=Screen.LOGGED_OUT, username="", session=None, pending_confirm=None), []
    return replace(state, pending_confirm=None), []


def transition(state: AppState, event) -> Result:
    screen = state.screen

    if screen == Screen.LOGGED_OUT:
        if isinstance(event, (Login, Restore)):
            username = event.username.strip()
            if not username:
                return state, []
            effects = [PersistUsername(username)] if isinstance(event, Login) else []
            return replace(state, screen=Screen.MODULE_SELECT, username=username), effects
        return state, []

    if isinstance(event, Cancel):
        return replace(state, pending_confirm=None), []
    if isinstance(event, Confirm):
        return _confirm(state)
    # an open confirmation blocks the screen, clock included
    if state.pending_confirm is not None:
        return state, []

    if screen == Screen.MODULE_SELECT:
        if isinstance(event, SelectModule):
            return _start_quiz(state, event.module_id, event.questions)
        if isinstance(event, RequestLogout):
            return replace(state, pending_confirm=CONFIRM_LOGOUT), []
        return state, []

    if screen == Screen.IN_QUIZ:
        if isinstance(event, Answer):
            return _answer(state, event.option_index)
        if isinstance(event, NextQuestion):
            return _next_question(state)
        if isinstance(event, RequestAbandon):
            return replace(state, pending_confirm=CONFIRM_ABANDON), []
        if isinstance(event, Tick):
            session = replace(state.session, elapsed_seconds=state.session.elapsed_seconds + 1)
            return replace(state, session=session), []
        return state, []

    if screen == Screen.RESULTS:
        if isinstance(event, Retry):
            return _start_quiz(state, state.session.module_id, event.questions)
        if isinstance(event, ReturnToModules):
            return replace(state, screen=Screen.MODULE_SELECT, session=None), []
        return state, []

    return state, []
