"""
Règles de planification des cours d'une classe (aucun accès BDD).

- Génération hebdomadaire : D, D+7, D+14, ... numérotés 1..N
- Co-enseignants affectés uniquement aux cours dont la date correspond exactement
- Réduction du nombre de cours refusée si un cours effectué dépasse le nouveau total
- Transitions de statut : scheduled → completed | cancelled | rescheduled
"""

import uuid
from datetime import date, timedelta
from typing import List, NamedTuple, Optional, Sequence, Tuple

from schedulesync.schemas.school_class import ClassProgress, CoTeacherAssignment

LESSON_INTERVAL_DAYS = 7

LESSON_TRANSITIONS = {
    "scheduled": {"completed", "cancelled", "rescheduled"},
}


class LessonCountPlan(NamedTuple):
    """Résultat du contrôle de total_lessons lors d'une modification de classe."""
    total_lessons: Optional[int]
    delete_after: Optional[int]  # supprimer les cours non effectués au-delà de ce numéro


def generate_lesson_dates(start_date: date, count: int) -> List[date]:
    """Retourne `count` dates espacées de 7 jours à partir de `start_date` (incluse)."""
    if count < 0:
        raise ValueError("Le nombre de cours ne peut pas être négatif.")
    return [start_date + timedelta(days=LESSON_INTERVAL_DAYS * i) for i in range(count)]


def build_lesson_rows(
    class_id: Optional[uuid.UUID],
    lesson_dates: Sequence[date],
    first_number: int,
    co_teachers: Sequence[CoTeacherAssignment] = (),
) -> Tuple[List[dict], List[date]]:
    """
    Construit les lignes lesson_statuses à insérer (statut scheduled, numéros consécutifs).

    Retourne (lignes, dates ignorées) : une affectation de co-enseignant dont la date
    ne correspond à aucun des cours générés est ignorée et renvoyée à l'appelant.
    """
    co_teacher_by_date = {a.date: a.teacher_id for a in co_teachers}

    rows = [
        {
            "class_id": class_id,
            "lesson_number": first_number + index,
            "scheduled_date": lesson_date,
            "status": "scheduled",
            "notes": None,
            "co_teacher_id": co_teacher_by_date.get(lesson_date),
        }
        for index, lesson_date in enumerate(lesson_dates)
    ]

    generated = set(lesson_dates)
    skipped = sorted({a.date for a in co_teachers if a.date not in generated})
    return rows, skipped


def plan_total_lessons(
    lessons: Sequence,
    current_total: Optional[int],
    desired_total: Optional[int],
    new_dates_count: int,
) -> LessonCountPlan:
    """
    Calcule le total_lessons à enregistrer et les cours à supprimer.

    Réduction (total demandé inférieur au nombre de cours existants, sans nouvelles dates) :
    refusée si un cours effectué porte un numéro supérieur au nouveau total, sinon les cours
    non effectués au-delà sont supprimés. Avec de nouvelles dates, le total ne descend jamais
    sous existants + nouveaux.
    """
    existing_count = len(lessons)
    min_total = existing_count + new_dates_count

    is_reducing = desired_total is not None and new_dates_count == 0 and desired_total < existing_count
    if is_reducing:
        over_limit = [
            lesson for lesson in lessons
            if lesson.status == "completed" and lesson.lesson_number > desired_total
        ]
        if over_limit:
            raise ValueError("Le nombre total de cours ne peut pas être inférieur aux cours déjà effectués.")
        return LessonCountPlan(total_lessons=desired_total, delete_after=desired_total)

    if desired_total is not None:
        total = max(desired_total, min_total) if new_dates_count else desired_total
    else:
        total = min_total if new_dates_count else current_total
    return LessonCountPlan(total_lessons=total, delete_after=None)


def next_lesson_number(lessons: Sequence) -> int:
    return max((lesson.lesson_number for lesson in lessons), default=0) + 1


def check_lesson_transition(current: Optional[str], target: str) -> None:
    """Lève ValueError si la transition n'est pas permise par le cycle de vie."""
    current = current or "scheduled"
    if target not in LESSON_TRANSITIONS.get(current, set()):
        raise ValueError(f"Transition de statut impossible : {current} → {target}.")


def compute_progress(lessons: Sequence, total_lessons: Optional[int]) -> ClassProgress:
    """
    Progression d'une classe. Les cours reportés ne comptent pas dans le total effectif.
    Sans total_lessons, le total est le nombre de cours planifiés.
    """
    completed = sum(1 for lesson in lessons if lesson.status == "completed")
    rescheduled = sum(1 for lesson in lessons if lesson.status == "rescheduled")
    total = total_lessons or len(lessons)
    effective_total = max(total - rescheduled, 0)
    remaining = max(effective_total - completed, 0)
    percent = (completed / effective_total) * 100 if effective_total > 0 else 0.0

    return ClassProgress(
        completed=completed,
        rescheduled=rescheduled,
        total=total,
        effective_total=effective_total,
        remaining=remaining,
        percent=round(percent, 1),
    )
