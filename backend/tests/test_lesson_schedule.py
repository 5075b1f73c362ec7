"""
Tests unitaires des règles de planification des cours (sans BDD).
Couverture : génération hebdomadaire, co-enseignants, réduction du total,
transitions de statut, progression.
"""

import uuid
from datetime import date
from types import SimpleNamespace

import pytest

from schedulesync.schemas.school_class import CoTeacherAssignment
from schedulesync.services.lesson_schedule import (
    build_lesson_rows,
    check_lesson_transition,
    compute_progress,
    generate_lesson_dates,
    next_lesson_number,
    plan_total_lessons,
)


def lesson(number, status="scheduled"):
    return SimpleNamespace(lesson_number=number, status=status)


# ============================================================
# generate_lesson_dates
# ============================================================

def test_generation_hebdomadaire():
    dates = generate_lesson_dates(date(2025, 1, 5), 3)
    assert dates == [date(2025, 1, 5), date(2025, 1, 12), date(2025, 1, 19)]


def test_generation_traverse_fin_de_mois():
    dates = generate_lesson_dates(date(2025, 1, 26), 2)
    assert dates == [date(2025, 1, 26), date(2025, 2, 2)]


def test_generation_zero_cours():
    assert generate_lesson_dates(date(2025, 1, 5), 0) == []


def test_generation_nombre_negatif_rejete():
    with pytest.raises(ValueError):
        generate_lesson_dates(date(2025, 1, 5), -1)


# ============================================================
# build_lesson_rows
# ============================================================

def test_lignes_numerotees_a_partir_de_1():
    class_id = uuid.uuid4()
    rows, skipped = build_lesson_rows(class_id, generate_lesson_dates(date(2025, 1, 5), 3), 1)

    assert [r["lesson_number"] for r in rows] == [1, 2, 3]
    assert all(r["status"] == "scheduled" for r in rows)
    assert all(r["class_id"] == class_id for r in rows)
    assert all(r["co_teacher_id"] is None for r in rows)
    assert skipped == []


def test_co_enseignant_sur_date_exacte():
    teacher_id = uuid.uuid4()
    dates = generate_lesson_dates(date(2025, 1, 5), 3)
    rows, skipped = build_lesson_rows(
        uuid.uuid4(), dates, 1,
        [CoTeacherAssignment(date=date(2025, 1, 12), teacher_id=teacher_id)],
    )

    assert rows[0]["co_teacher_id"] is None
    assert rows[1]["co_teacher_id"] == teacher_id
    assert rows[2]["co_teacher_id"] is None
    assert skipped == []


def test_co_enseignant_date_sans_cours_ignoree():
    """Une date qui ne correspond à aucun cours généré n'est pas appliquée."""
    dates = generate_lesson_dates(date(2025, 1, 5), 3)
    rows, skipped = build_lesson_rows(
        uuid.uuid4(), dates, 1,
        [CoTeacherAssignment(date=date(2025, 1, 13), teacher_id=uuid.uuid4())],
    )

    assert all(r["co_teacher_id"] is None for r in rows)
    assert skipped == [date(2025, 1, 13)]


def test_lignes_numerotees_a_la_suite():
    rows, _ = build_lesson_rows(uuid.uuid4(), [date(2025, 3, 1), date(2025, 3, 8)], 11)
    assert [r["lesson_number"] for r in rows] == [11, 12]


def test_numero_suivant():
    assert next_lesson_number([lesson(1), lesson(4), lesson(2)]) == 5
    assert next_lesson_number([]) == 1


# ============================================================
# plan_total_lessons
# ============================================================

def test_reduction_refusee_si_cours_effectue_au_dela():
    lessons = [lesson(n, "completed") for n in range(1, 9)] + [lesson(9), lesson(10)]
    with pytest.raises(ValueError, match="cours déjà effectués"):
        plan_total_lessons(lessons, 10, 6, 0)


def test_reduction_supprime_les_cours_non_effectues():
    lessons = [lesson(n, "completed") for n in range(1, 5)] + [lesson(n) for n in range(5, 11)]
    plan = plan_total_lessons(lessons, 10, 6, 0)
    assert plan.total_lessons == 6
    assert plan.delete_after == 6


def test_augmentation_sans_suppression():
    plan = plan_total_lessons([lesson(n) for n in range(1, 6)], 5, 8, 0)
    assert plan.total_lessons == 8
    assert plan.delete_after is None


def test_nouvelles_dates_total_minimum():
    """Avec de nouvelles dates, le total ne descend pas sous existants + nouveaux."""
    plan = plan_total_lessons([lesson(n) for n in range(1, 6)], 5, 4, 2)
    assert plan.total_lessons == 7
    assert plan.delete_after is None


def test_nouvelles_dates_total_demande_superieur():
    plan = plan_total_lessons([lesson(n) for n in range(1, 6)], 5, 12, 2)
    assert plan.total_lessons == 12


def test_total_absent_avec_nouvelles_dates():
    plan = plan_total_lessons([lesson(n) for n in range(1, 6)], 5, None, 3)
    assert plan.total_lessons == 8


def test_total_absent_sans_nouvelles_dates_inchange():
    plan = plan_total_lessons([lesson(n) for n in range(1, 6)], 5, None, 0)
    assert plan.total_lessons == 5
    assert plan.delete_after is None


# ============================================================
# check_lesson_transition
# ============================================================

@pytest.mark.parametrize("target", ["completed", "cancelled", "rescheduled"])
def test_transition_depuis_scheduled(target):
    check_lesson_transition("scheduled", target)


def test_transition_statut_absent_traite_comme_scheduled():
    check_lesson_transition(None, "completed")


@pytest.mark.parametrize("current,target", [
    ("completed", "scheduled"),
    ("cancelled", "completed"),
    ("rescheduled", "completed"),
    ("scheduled", "scheduled"),
])
def test_transition_refusee(current, target):
    with pytest.raises(ValueError, match="Transition"):
        check_lesson_transition(current, target)


# ============================================================
# compute_progress
# ============================================================

def test_progression_avec_reports():
    lessons = (
        [lesson(n, "completed") for n in range(1, 5)]
        + [lesson(5, "rescheduled"), lesson(6, "rescheduled")]
        + [lesson(n) for n in range(7, 11)]
    )
    progress = compute_progress(lessons, 10)

    assert progress.completed == 4
    assert progress.rescheduled == 2
    assert progress.effective_total == 8
    assert progress.remaining == 4
    assert progress.percent == 50.0


def test_progression_total_absent_utilise_nombre_de_cours():
    progress = compute_progress([lesson(1, "completed"), lesson(2)], None)
    assert progress.total == 2
    assert progress.percent == 50.0


def test_progression_sans_cours():
    progress = compute_progress([], None)
    assert progress.effective_total == 0
    assert progress.percent == 0.0
    assert progress.remaining == 0
