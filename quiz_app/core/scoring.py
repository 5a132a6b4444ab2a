# core/scoring.py

import math
from typing import Iterable, List, Sequence

import pandas as pd

from quiz_app.core.models import Module, ModuleProgress, question_id


def round_half_up(value: float) -> int:
    """Percentages round .5 up (62.5 -> 63), not to the even neighbour."""
    return int(math.floor(value + 0.5))


# ------------------------------
# SESSION SCORE
# ------------------------------

def score_percentage(correct: int, incorrect: int) -> int:
    total = correct + incorrect
    if total == 0:
        return 0
    return round_half_up(correct / total * 100)


# ------------------------------
# PROGRESS
# ------------------------------

def mastered_count(module_id: str, question_count: int, progress: ModuleProgress) -> int:
    """Distinct questions answered correctly at least once."""
    count = 0
    for index in range(question_count):
        p = progress.get(question_id(module_id, index))
        if p is not None and p.correct > 0:
            count += 1
    return count


def module_progress(module_id: str, question_count: int, progress: ModuleProgress) -> int:
    if question_count == 0:
        return 0
    return round_half_up(mastered_count(module_id, question_count, progress) / question_count * 100)


def overall_progress(module_percentages: Sequence[int]) -> int:
    """Plain mean over modules, regardless of how many questions each has."""
    if not module_percentages:
        return 0
    return round_half_up(sum(module_percentages) / len(module_percentages))


# ------------------------------
# FEEDBACK TIERS
# ------------------------------

# (threshold, message) for the end-of-quiz analysis, highest first
ANALYSIS_TIERS = [
    (90, "Excelente! Você domina este conteúdo."),
    (80, "Muito bom! Você tem um bom conhecimento deste conteúdo."),
    (70, "Bom! Você está no caminho certo, mas ainda pode melhorar."),
    (60, "Regular. Recomendamos revisar este conteúdo novamente."),
    (40, "Atenção! Você precisa estudar mais este conteúdo."),
]
ANALYSIS_FALLBACK = "Você precisa dedicar mais tempo ao estudo deste conteúdo."

# Module badges and the overall bar use their own, coarser tiers
BADGE_TIERS = [(80, "success"), (40, "warning")]
BADGE_FALLBACK = "primary"

SCORE_COLORS = [(80, "#198754"), (60, "#ffc107"), (40, "#fd7e14")]
SCORE_COLOR_FALLBACK = "#dc3545"


def _tier(value: int, tiers, fallback):
    for threshold, result in tiers:
        if value >= threshold:
            return result
    return fallback


def analysis_message(score: int) -> str:
    return _tier(score, ANALYSIS_TIERS, ANALYSIS_FALLBACK)


def badge_tier(progress: int) -> str:
    return _tier(progress, BADGE_TIERS, BADGE_FALLBACK)


def score_color(score: int) -> str:
    return _tier(score, SCORE_COLORS, SCORE_COLOR_FALLBACK)


# ------------------------------
# TIME
# ------------------------------

def format_time(seconds: int) -> str:
    """MM:SS, minutes keep growing past 59 (75:03)."""
    minutes, rest = divmod(int(seconds), 60)
    return f"{minutes:02d}:{rest:02d}"


# ------------------------------
# PROGRESS TABLE
# ------------------------------

def module_progress_table(modules: Iterable[Module], counts: dict, progress_by_module: dict) -> pd.DataFrame:
    """
    One row per module: question count, questions answered at least once,
    questions mastered and the progress percentage.
    """
    rows: List[dict] = []
    for m in modules:
        total = counts.get(m.id, 0)
        progress = progress_by_module.get(m.id, {})
        answered = sum(
            1 for i in range(total)
            if progress.get(question_id(m.id, i)) is not None and progress[question_id(m.id, i)].seen > 0
        )
        rows.append({
            "Módulo": m.name,
            "Questões": total,
            "Respondidas": answered,
            "Acertadas": mastered_count(m.id, total, progress),
            "Progresso (%)": module_progress(m.id, total, progress),
        })

    return pd.DataFrame(rows, columns=["Módulo", "Questões", "Respondidas", "Acertadas", "Progresso (%)"])
