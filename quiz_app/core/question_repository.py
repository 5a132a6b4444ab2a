# core/question_repository.py

import json
import logging
import os
from typing import Callable, Dict, Iterable, List, Optional

import requests

from quiz_app.core.models import Module, Question, as_questions

logger = logging.getLogger(__name__)


class QuestionLoadError(Exception):
    """A module's question file could not be fetched or read."""

    def __init__(self, module: Module, reason: str):
        super().__init__(f"{module.id}: {reason}")
        self.module = module
        self.reason = reason

    @property
    def user_message(self) -> str:
        return (
            f"Erro ao carregar o módulo {self.module.name}. "
            f"Verifique se o arquivo {self.module.file}.json existe."
        )


def is_url(source: str) -> bool:
    return source.startswith("http://") or source.startswith("https://")


class QuestionRepository:
    """
    In-memory question bank, one list per module, in file order.

    ``source`` is either a directory or an http(s) base URL; each module is
    read from ``<source>/<file>.json``.
    """

    def __init__(self, modules: Iterable[Module], source: str,
                 on_loaded: Optional[Callable[[str, int], None]] = None,
                 timeout: float = 10, http: Optional[requests.Session] = None):
        self.modules = list(modules)
        self.source = source
        self.on_loaded = on_loaded
        self.timeout = timeout
        self.http = http or requests.Session()
        self._questions: Dict[str, List[Question]] = {}
        self._loaded = set()

    # ------------------------------
    # LOADING
    # ------------------------------

    def location_for(self, module: Module) -> str:
        name = f"{module.file}.json"
        if is_url(self.source):
            return f"{self.source.rstrip('/')}/{name}"
        return os.path.join(self.source, name)

    def _fetch(self, module: Module):
        location = self.location_for(module)

        if is_url(self.source):
            try:
                response = self.http.get(location, timeout=self.timeout)
            except requests.RequestException as e:
                raise QuestionLoadError(module, f"request failed: {e}") from e
            if not response.ok:
                raise QuestionLoadError(module, f"HTTP error! status: {response.status_code}")
            try:
                return response.json()
            except ValueError as e:
                raise QuestionLoadError(module, f"invalid JSON: {e}") from e

        try:
            with open(location, "r", encoding="utf-8") as f:
                return json.load(f)
        except OSError as e:
            raise QuestionLoadError(module, f"cannot read {location}: {e}") from e
        except ValueError as e:
            raise QuestionLoadError(module, f"invalid JSON: {e}") from e

    def load_module(self, module: Module) -> List[Question]:
        data = self._fetch(module)
        if not isinstance(data, list):
            raise QuestionLoadError(module, "file does not hold a JSON array")
        try:
            questions = as_questions(data)
        except (KeyError, TypeError) as e:
            raise QuestionLoadError(module, f"bad question record: {e}") from e

        self._questions[module.id] = questions
        self._loaded.add(module.id)
        if self.on_loaded:
            self.on_loaded(module.id, len(questions))
        return questions

    def load_all(self) -> List[str]:
        """
        Load every configured module. A failing module is logged and reported
        back as a user-facing message; the others still load.
        """
        for module in self.modules:
            self._questions.setdefault(module.id, [])

        failures = []
        for module in self.modules:
            try:
                questions = self.load_module(module)
            except QuestionLoadError as e:
                logger.error("Could not load module %s: %s", module.id, e.reason)
                failures.append(e.user_message)
                continue
            logger.info("Module %s loaded (%d questions)", module.id, len(questions))
        return failures

    # ------------------------------
    # ACCESSORS
    # ------------------------------

    def get(self, module_id: str) -> List[Question]:
        return list(self._questions.get(module_id, []))

    def question_count(self, module_id: str) -> int:
        return len(self._questions.get(module_id, []))

    def is_loaded(self, module_id: str) -> bool:
        return module_id in self._loaded
