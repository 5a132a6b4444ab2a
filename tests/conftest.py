from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from quiz_app.config import QuizConfig  # noqa: E402
from quiz_app.core.controller import QuizController  # noqa: E402
from quiz_app.core.data_access import MemoryStore, UserDataStore  # noqa: E402
from quiz_app.core.models import Module  # noqa: E402
from quiz_app.core.question_repository import QuestionRepository  # noqa: E402


class FakeClock:
    """Monotonic clock the tests move by hand."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FakeTimestamps:
    def __init__(self):
        self.count = 0

    def __call__(self) -> str:
        self.count += 1
        return f"2026-01-01T00:00:{self.count:02d}+00:00"


# ====================
# Question Fixtures
# ====================

def make_question(text: str, correct_index: int = 0, qtype: str = "conteudista") -> dict:
    return {
        "question": text,
        "options": ["A", "B", "C", "D"],
        "correctIndex": correct_index,
        "explanation": f"Explicação de {text}",
        "type": qtype,
    }


@pytest.fixture
def modules():
    return (
        Module(id="modulo1", name="Módulo 1", file="questoes_modulo1"),
        Module(id="modulo2", name="Módulo 2", file="questoes_modulo2"),
    )


@pytest.fixture
def question_dir(tmp_path):
    """Module 1 has three questions, module 2 has five."""
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    (data_dir / "questoes_modulo1.json").write_text(json.dumps([
        make_question("Q1", 0),
        make_question("Q2", 1, "raciocinio"),
        make_question("Q3", 2),
    ]), encoding="utf-8")
    (data_dir / "questoes_modulo2.json").write_text(json.dumps([
        make_question(f"M2-Q{i}", 3) for i in range(1, 6)
    ]), encoding="utf-8")
    return data_dir


@pytest.fixture
def config(modules, question_dir, tmp_path):
    return QuizConfig(
        title="Quiz de Teste",
        storage_key="quizTestData",
        modules=modules,
        questions_source=str(question_dir),
        storage_dir=str(tmp_path / "storage"),
    )


# ====================
# Store / Controller Fixtures
# ====================

@pytest.fixture
def kv():
    return MemoryStore()


@pytest.fixture
def store(kv, config):
    return UserDataStore(kv, config.storage_key, config.module_ids, now=FakeTimestamps())


@pytest.fixture
def repository(config):
    return QuestionRepository(config.modules, config.questions_source)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def controller(config, store, repository, clock):
    c = QuizController(config, store, repository, clock=clock)
    c.start()
    return c
