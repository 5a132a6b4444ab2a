import json

from quiz_app.core.controller import QuizController, ELAPSED_TASK, AUTOSAVE_TASK
from quiz_app.core.data_access import MemoryStore, UserDataStore
from quiz_app.core.question_repository import QuestionRepository
from quiz_app.core.quiz_flow import Screen
from quiz_app.core.scoring import score_percentage, module_progress


def progress_of(controller, module_id):
    return module_progress(
        module_id,
        controller.repository.question_count(module_id),
        controller.store.get_module_progress(module_id),
    )


def test_start_without_saved_user_shows_login(controller):
    assert controller.state.screen == Screen.LOGGED_OUT
    assert controller.pop_notices() == []
    assert controller.scheduler.is_scheduled(AUTOSAVE_TASK)


def test_start_creates_placeholders_for_loaded_questions(controller):
    entries = controller.store.get_module_progress("modulo1")
    assert set(entries) == {"modulo1_0", "modulo1_1", "modulo1_2"}
    assert all(p.seen == 0 for p in entries.values())


def test_start_restores_saved_user(config, kv, clock):
    kv.set_item(config.storage_key, json.dumps({"username": "Ana", "progress": {}, "lastSession": None}))
    store = UserDataStore(kv, config.storage_key, config.module_ids)
    c = QuizController(config, store, QuestionRepository(config.modules, config.questions_source), clock=clock)

    c.start()

    assert c.state.screen == Screen.MODULE_SELECT
    assert c.state.username == "Ana"


def test_login_persists_username(controller, kv, config):
    controller.login("Ana")
    assert controller.state.screen == Screen.MODULE_SELECT
    assert json.loads(kv.get_item(config.storage_key))["username"] == "Ana"


def test_three_question_scenario(controller):
    controller.login("Ana")
    controller.select_module("modulo1")

    # Q1 correct, Q2 incorrect, Q3 correct
    for choice in (0, 0, 2):
        controller.answer(choice)
        controller.next_question()

    session = controller.state.session
    assert controller.state.screen == Screen.RESULTS
    assert (session.correct, session.incorrect) == (2, 1)
    assert score_percentage(session.correct, session.incorrect) == 67
    assert progress_of(controller, "modulo1") == 67

    p = controller.store.get_module_progress("modulo1")["modulo1_1"]
    assert (p.seen, p.correct, p.incorrect) == (1, 0, 1)
    assert p.last_seen is not None


def test_abandon_keeps_answers_already_recorded(controller):
    controller.login("Ana")
    controller.select_module("modulo2")
    controller.answer(3)
    controller.next_question()

    controller.request_abandon()
    assert controller.state.screen == Screen.IN_QUIZ
    controller.confirm()

    assert controller.state.screen == Screen.MODULE_SELECT
    assert not controller.scheduler.is_scheduled(ELAPSED_TASK)
    assert progress_of(controller, "modulo2") == 20


def test_missing_module_file_gives_empty_results(config, modules, tmp_path, clock):
    (tmp_path / "q").mkdir()
    (tmp_path / "q" / "questoes_modulo1.json").write_text("[]", encoding="utf-8")
    store = UserDataStore(MemoryStore(), config.storage_key, config.module_ids)
    repo = QuestionRepository(modules, str(tmp_path / "q"))
    c = QuizController(config, store, repo, clock=clock)
    c.start()

    notices = c.pop_notices()
    assert len(notices) == 1 and "Módulo 2" in notices[0]
    assert c.pop_notices() == []

    c.login("Ana")
    c.select_module("modulo2")
    session = c.state.session
    assert c.state.screen == Screen.RESULTS
    assert (session.correct, session.incorrect) == (0, 0)
    assert score_percentage(session.correct, session.incorrect) == 0


def test_elapsed_timer_ticks_while_in_quiz(controller, clock):
    controller.login("Ana")
    controller.select_module("modulo1")
    assert controller.scheduler.is_scheduled(ELAPSED_TASK)

    clock.advance(3.5)
    controller.run_pending()
    assert controller.state.session.elapsed_seconds == 3

    for choice in (0, 1, 2):
        controller.answer(choice)
        controller.next_question()

    assert controller.state.screen == Screen.RESULTS
    assert not controller.scheduler.is_scheduled(ELAPSED_TASK)

    clock.advance(10)
    controller.run_pending()
    assert controller.state.session.elapsed_seconds == 3


def test_retry_restarts_timer(controller, clock):
    controller.login("Ana")
    controller.select_module("modulo1")
    clock.advance(2)
    controller.run_pending()
    for choice in (0, 1, 2):
        controller.answer(choice)
        controller.next_question()

    controller.retry()

    assert controller.state.screen == Screen.IN_QUIZ
    assert controller.state.session.elapsed_seconds == 0
    assert controller.scheduler.is_scheduled(ELAPSED_TASK)


def test_retry_outside_results_is_ignored(controller):
    controller.login("Ana")
    state = controller.retry()
    assert state.screen == Screen.MODULE_SELECT


def test_autosave_runs_every_interval(controller, kv, config, clock):
    kv.remove_item(config.storage_key)
    clock.advance(config.autosave_interval - 1)
    controller.run_pending()
    assert kv.get_item(config.storage_key) is None

    clock.advance(1)
    controller.run_pending()
    assert kv.get_item(config.storage_key) is not None


def test_autosave_skips_when_nothing_changed(controller, kv, config, clock):
    controller.login("Ana")
    saved = kv.get_item(config.storage_key)
    kv.set_item(config.storage_key, "written elsewhere")

    clock.advance(config.autosave_interval)
    controller.run_pending()

    assert kv.get_item(config.storage_key) == "written elsewhere"
    assert json.loads(saved)["username"] == "Ana"


def test_logout_keeps_stored_record(controller, kv, config):
    controller.login("Ana")
    controller.request_logout()
    controller.confirm()

    assert controller.state.screen == Screen.LOGGED_OUT
    assert json.loads(kv.get_item(config.storage_key))["username"] == "Ana"
