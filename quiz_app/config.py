# config.py
import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple, List

from quiz_app.core.models import Module

# -----------------------------
# Base Paths
# -----------------------------
BASE_DIR = os.path.dirname(os.path.abspath(__file__))
DATA_DIR = os.path.join(BASE_DIR, "data")
STORAGE_DIR = os.path.join(BASE_DIR, "storage")
LOGS_DIR = os.path.join(BASE_DIR, "logs")

# Optional override of everything below, same keys as QuizConfig.to_json()
QUIZ_CONFIG_JSON = os.path.join(DATA_DIR, "quiz_config.json")

# -----------------------------
# Quiz
# -----------------------------
QUIZ_TITLE = "Quiz Template"
STORAGE_KEY = "quizTemplateData"

# 'file' is the question file name without the .json extension
MODULES = [
    Module(id="modulo1", name="Módulo 1", file="questoes_modulo1"),
    Module(id="modulo2", name="Módulo 2", file="questoes_modulo2"),
]

# Local directory or http(s) base URL holding the <file>.json question files
QUESTIONS_SOURCE = DATA_DIR
FETCH_TIMEOUT_SEC = 10

# -----------------------------
# Timers
# -----------------------------
AUTOSAVE_INTERVAL_SEC = 10
TICK_INTERVAL_SEC = 1

# -----------------------------
# Logging
# -----------------------------
LOG_LEVEL = "INFO"
LOG_FILENAME = "quiz_app.log"


@dataclass(frozen=True)
class QuizConfig:
    title: str = QUIZ_TITLE
    storage_key: str = STORAGE_KEY
    modules: Tuple[Module, ...] = field(default_factory=lambda: tuple(MODULES))
    questions_source: str = QUESTIONS_SOURCE
    storage_dir: str = STORAGE_DIR
    fetch_timeout: float = FETCH_TIMEOUT_SEC
    autosave_interval: float = AUTOSAVE_INTERVAL_SEC
    tick_interval: float = TICK_INTERVAL_SEC

    @property
    def module_ids(self) -> List[str]:
        return [m.id for m in self.modules]

    def module(self, module_id: str) -> Optional[Module]:
        for m in self.modules:
            if m.id == module_id:
                return m
        return None

    def module_name(self, module_id: str) -> str:
        m = self.module(module_id)
        return m.name if m else module_id

    @staticmethod
    def from_json(path) -> "QuizConfig":
        with open(path, "r", encoding="utf-8") as f:
            payload = json.load(f)

        if "modules" in payload:
            payload["modules"] = tuple(Module.from_dict(m) for m in payload["modules"])
        return QuizConfig(**payload)

    def to_json(self, path) -> None:
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "title": self.title,
            "storage_key": self.storage_key,
            "modules": [m.to_dict() for m in self.modules],
            "questions_source": self.questions_source,
            "storage_dir": self.storage_dir,
            "fetch_timeout": self.fetch_timeout,
            "autosave_interval": self.autosave_interval,
            "tick_interval": self.tick_interval,
        }
        with open(p, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)


def default_quiz_config() -> QuizConfig:
    """Defaults above, or the JSON override when one is shipped next to the data."""
    if os.path.exists(QUIZ_CONFIG_JSON):
        return QuizConfig.from_json(QUIZ_CONFIG_JSON)
    return QuizConfig()
