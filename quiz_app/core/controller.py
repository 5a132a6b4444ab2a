# core/controller.py

import logging
import time
from typing import Callable, List, Optional

from quiz_app.config import QuizConfig
from quiz_app.core.data_access import UserDataStore
from quiz_app.core.question_repository import QuestionRepository
from quiz_app.core.quiz_flow import (
    AppState, Screen, transition,
    Restore, Login, SelectModule, Answer, NextQuestion, RequestAbandon, RequestLogout,
    Confirm, Cancel, Retry, ReturnToModules, Tick,
    PersistUsername, RecordOutcome, StartElapsedTimer, StopElapsedTimer,
)
from quiz_app.core.timers import TaskScheduler

logger = logging.getLogger(__name__)

ELAPSED_TASK = "elapsed"
AUTOSAVE_TASK = "autosave"


class QuizController:
    """
    Glue between the pure state machine and the stateful parts: the user
    data store, the question repository and the scheduled tasks.
    One controller per app session.
    """

    def __init__(self, config: QuizConfig, store: UserDataStore, repository: QuestionRepository,
                 clock: Callable[[], float] = time.monotonic):
        self.config = config
        self.store = store
        self.repository = repository
        self.scheduler = TaskScheduler(clock)
        self.state = AppState()
        self.notices: List[str] = []

        if repository.on_loaded is None:
            repository.on_loaded = store.ensure_question_progress

    # ------------------------------
    # STARTUP
    # ------------------------------

    def start(self) -> AppState:
        """Restore the saved user, load every module and start autosaving."""
        has_user = self.store.load()
        self.notices.extend(self.repository.load_all())

        if has_user:
            self.dispatch(Restore(self.store.get_username()))

        self.scheduler.schedule(AUTOSAVE_TASK, self.config.autosave_interval, self.store.autosave)
        logger.info("Quiz started on screen %s", self.state.screen.value)
        return self.state

    def run_pending(self, now: Optional[float] = None) -> int:
        return self.scheduler.run_pending(now)

    def pop_notices(self) -> List[str]:
        notices, self.notices = self.notices, []
        return notices

    # ------------------------------
    # DISPATCH
    # ------------------------------

    def dispatch(self, event) -> AppState:
        new_state, effects = transition(self.state, event)
        if new_state.screen != self.state.screen:
            logger.debug("%s -> %s on %s", self.state.screen.value, new_state.screen.value,
                         type(event).__name__)
        self.state = new_state
        for effect in effects:
            self._apply(effect)
        return self.state

    def _apply(self, effect):
        if isinstance(effect, PersistUsername):
            self.store.set_username(effect.username)
        elif isinstance(effect, RecordOutcome):
            self.store.update_question_progress(effect.module_id, effect.question_index, effect.is_correct)
        elif isinstance(effect, StartElapsedTimer):
            self.scheduler.schedule(ELAPSED_TASK, self.config.tick_interval,
                                    lambda: self.dispatch(Tick()), catch_up=True)
        elif isinstance(effect, StopElapsedTimer):
            self.scheduler.cancel(ELAPSED_TASK)
        else:
            raise ValueError(f"Unknown effect: {effect!r}")

    # ------------------------------
    # USER ACTIONS
    # ------------------------------

    def login(self, username: str) -> AppState:
        return self.dispatch(Login(username))

    def select_module(self, module_id: str) -> AppState:
        return self.dispatch(SelectModule(module_id, tuple(self.repository.get(module_id))))

    def answer(self, option_index: int) -> AppState:
        return self.dispatch(Answer(option_index))

    def next_question(self) -> AppState:
        return self.dispatch(NextQuestion())

    def request_abandon(self) -> AppState:
        return self.dispatch(RequestAbandon())

    def request_logout(self) -> AppState:
        return self.dispatch(RequestLogout())

    def confirm(self) -> AppState:
        return self.dispatch(Confirm())

    def cancel(self) -> AppState:
        return self.dispatch(Cancel())

    def retry(self) -> AppState:
        session = self.state.session
        if self.state.screen != Screen.RESULTS or session is None:
            return self.state
        return self.dispatch(Retry(tuple(self.repository.get(session.module_id))))

    def return_to_modules(self) -> AppState:
        return self.dispatch(ReturnToModules())
