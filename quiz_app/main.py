# main.py

import logging

import streamlit as st

from quiz_app.config import LOGS_DIR, LOG_FILENAME, LOG_LEVEL, QuizConfig, default_quiz_config
from quiz_app.core.controller import QuizController
from quiz_app.core.data_access import JsonFileStore, UserDataStore, client_id_from, client_storage_key
from quiz_app.core.question_repository import QuestionRepository
from quiz_app.ui.screens import render
from quiz_app.ui.views import build_view
from quiz_app.utils.logging import setup_logging

logger = logging.getLogger(__name__)

RELOAD_MESSAGE = "Ocorreu um erro ao carregar o aplicativo. Por favor, recarregue a página."


def create_controller(config: QuizConfig, client_id: str) -> QuizController:
    """
    Build and start the controller for one browser. Progress is written on
    every change and by the autosave task, so nothing is left for exit time.
    """
    store = UserDataStore(
        JsonFileStore(config.storage_dir),
        client_storage_key(config.storage_key, client_id),
        config.module_ids,
    )
    repository = QuestionRepository(
        config.modules,
        config.questions_source,
        on_loaded=store.ensure_question_progress,
        timeout=config.fetch_timeout,
    )
    controller = QuizController(config, store, repository)
    controller.start()
    return controller


def get_controller(config: QuizConfig) -> QuizController:
    if "controller" not in st.session_state:
        # the client id rides in the URL so a reload finds the same record
        client_id = client_id_from(st.query_params)
        st.session_state.controller = create_controller(config, client_id)
    return st.session_state.controller


def main():
    setup_logging(LOGS_DIR, LOG_FILENAME, LOG_LEVEL)

    try:
        config = default_quiz_config()
        st.set_page_config(page_title=config.title, page_icon="📝", layout="centered")
        controller = get_controller(config)
    except Exception:
        logger.exception("Failed to initialise the quiz")
        st.error(RELOAD_MESSAGE)
        st.stop()

    for notice in controller.pop_notices():
        st.error(notice)

    controller.run_pending()

    view = build_view(controller.state, controller.config, controller.repository, controller.store)
    render(view, controller)


if __name__ == "__main__":
    main()
