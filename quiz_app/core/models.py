# core/models.py

from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List, Iterable, Tuple


TYPE_LABELS = {
    "conteudista": "Conteudista",
    "raciocinio": "Raciocínio",
}


def question_id(module_id: str, index: int) -> str:
    """Synthetic progress key for a question inside a module."""
    return f"{module_id}_{index}"


# ============================================================
# MODULE OBJECT
# ============================================================

@dataclass(frozen=True)
class Module:
    id: str
    name: str
    file: str

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Module":
        return cls(id=str(raw["id"]), name=str(raw["name"]), file=str(raw["file"]))

    def to_dict(self) -> Dict[str, str]:
        return {"id": self.id, "name": self.name, "file": self.file}


# ============================================================
# QUESTION OBJECT
# ============================================================

@dataclass(frozen=True)
class Question:
    question: str
    options: Tuple[str, ...]
    correct_index: int
    explanation: str = ""
    type: str = "conteudista"

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Question":
        """
        Build a question from one record of a module file.
        Only checks that the required keys are there.
        """
        missing = [k for k in ("question", "options", "correctIndex") if k not in raw]
        if missing:
            raise KeyError(f"question record is missing {missing}")

        return cls(
            question=raw["question"],
            options=tuple(raw["options"]),
            correct_index=raw["correctIndex"],
            explanation=raw.get("explanation", ""),
            type=raw.get("type", "conteudista"),
        )

    @property
    def type_label(self) -> str:
        return TYPE_LABELS.get(self.type, TYPE_LABELS["raciocinio"])


# ============================================================
# PROGRESS OBJECTS
# ============================================================

@dataclass
class QuestionProgress:
    seen: int = 0
    correct: int = 0
    incorrect: int = 0
    last_seen: Optional[str] = None

    def record(self, is_correct: bool, when: str):
        self.seen += 1
        if is_correct:
            self.correct += 1
        else:
            self.incorrect += 1
        self.last_seen = when

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "QuestionProgress":
        return cls(
            seen=int(raw.get("seen", 0)),
            correct=int(raw.get("correct", 0)),
            incorrect=int(raw.get("incorrect", 0)),
            last_seen=raw.get("lastSeen"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "seen": self.seen,
            "correct": self.correct,
            "incorrect": self.incorrect,
            "lastSeen": self.last_seen,
        }


ModuleProgress = Dict[str, QuestionProgress]


@dataclass
class UserRecord:
    username: str = ""
    progress: Dict[str, ModuleProgress] = field(default_factory=dict)
    last_session: Optional[str] = None

    @classmethod
    def fresh(cls, module_ids: Iterable[str]) -> "UserRecord":
        record = cls()
        record.ensure_modules(module_ids)
        return record

    def ensure_modules(self, module_ids: Iterable[str]):
        """Every configured module gets a (possibly empty) progress map."""
        for module_id in module_ids:
            self.progress.setdefault(module_id, {})

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "UserRecord":
        progress = {}
        for module_id, entries in (raw.get("progress") or {}).items():
            progress[module_id] = {
                qid: QuestionProgress.from_dict(p or {}) for qid, p in (entries or {}).items()
            }
        return cls(
            username=raw.get("username", ""),
            progress=progress,
            last_session=raw.get("lastSession"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "username": self.username,
            "progress": {
                module_id: {qid: p.to_dict() for qid, p in entries.items()}
                for module_id, entries in self.progress.items()
            },
            "lastSession": self.last_session,
        }


# ============================================================
# QUIZ SESSION (ephemeral, never persisted)
# ============================================================

@dataclass(frozen=True)
class QuizSession:
    module_id: str
    questions: Tuple[Question, ...] = ()
    index: int = 0
    selected: Optional[int] = None
    correct: int = 0
    incorrect: int = 0
    elapsed_seconds: int = 0

    @property
    def current_question(self) -> Optional[Question]:
        if self.index < len(self.questions):
            return self.questions[self.index]
        return None

    @property
    def answered(self) -> bool:
        return self.selected is not None

    @property
    def total(self) -> int:
        return len(self.questions)


def as_questions(records: List[Dict[str, Any]]) -> List[Question]:
    return [Question.from_dict(r) for r in records]
