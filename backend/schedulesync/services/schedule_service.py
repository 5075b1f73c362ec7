"""
Service métier pour le calendrier mensuel et le planning du jour.

Vue « admin » : tous les cours de l'organisation.
Vue « teacher » : cours des classes dont l'appelant est titulaire ou dont il est
co-enseignant du cours, hors cours reportés.
"""

import calendar
import logging
from collections import Counter
from datetime import date, timedelta
from typing import List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.orm import Session

from schedulesync.models.lesson import LessonStatus
from schedulesync.models.school_class import SchoolClass
from schedulesync.schemas.schedule import (
    VIEW_MODES,
    CalendarDay,
    DaySchedule,
    MonthCalendar,
    ScheduledLesson,
)
from schedulesync.security import CurrentProfile
from schedulesync.services.class_service import centre_names, teacher_names

logger = logging.getLogger(__name__)


def to_sunday_weekday(day: date) -> int:
    """0 = dimanche ... 6 = samedi (convention de day_of_week)."""
    return (day.weekday() + 1) % 7


def build_month_grid(year: int, month: int) -> Tuple[int, List[date]]:
    """Retourne (cases vides avant le 1er, jours du mois) pour une semaine débutant le dimanche."""
    if not 1 <= month <= 12:
        raise ValueError("Le mois doit être compris entre 1 et 12.")
    first = date(year, month, 1)
    days_in_month = calendar.monthrange(year, month)[1]
    return to_sunday_weekday(first), [first + timedelta(days=i) for i in range(days_in_month)]


def resolve_view_mode(profile: CurrentProfile, requested: Optional[str]) -> str:
    """Un non-administrateur est toujours en vue enseignant."""
    if not profile.is_admin:
        return "teacher"
    view = requested or "admin"
    if view not in VIEW_MODES:
        raise ValueError(f"Vue invalide. Valeurs acceptées : {VIEW_MODES}")
    if view == "teacher" and profile.teacher_id is None:
        raise ValueError("Aucun profil enseignant n'est associé à ce compte.")
    return view


def is_lesson_visible(lesson: LessonStatus, school_class: SchoolClass, view: str, teacher_id) -> bool:
    if view == "admin":
        return True
    if lesson.status == "rescheduled" or teacher_id is None:
        return False
    return school_class.teacher_id == teacher_id or lesson.co_teacher_id == teacher_id


def _visible_lessons(
    db: Session, profile: CurrentProfile, start: date, end: date, view: str
) -> List[Tuple[LessonStatus, SchoolClass]]:
    rows = db.execute(
        select(LessonStatus, SchoolClass)
        .join(SchoolClass, SchoolClass.id == LessonStatus.class_id)
        .where(
            SchoolClass.organisation_id == profile.organisation_id,
            LessonStatus.scheduled_date >= start,
            LessonStatus.scheduled_date <= end,
        )
    ).all()
    return [
        (lesson, school_class)
        for lesson, school_class in rows
        if is_lesson_visible(lesson, school_class, view, profile.teacher_id)
    ]


def get_month_calendar(
    db: Session, profile: CurrentProfile, year: int, month: int, view: Optional[str] = None
) -> MonthCalendar:
    view = resolve_view_mode(profile, view)
    leading_blanks, days = build_month_grid(year, month)

    visible = _visible_lessons(db, profile, days[0], days[-1], view)
    counts = Counter(lesson.scheduled_date for lesson, _ in visible)

    return MonthCalendar(
        year=year,
        month=month,
        view=view,
        leading_blanks=leading_blanks,
        days=[
            CalendarDay(date=day, has_lessons=counts[day] > 0, lesson_count=counts[day])
            for day in days
        ],
    )


def get_day_schedule(
    db: Session, profile: CurrentProfile, day: date, view: Optional[str] = None
) -> DaySchedule:
    view = resolve_view_mode(profile, view)
    visible = _visible_lessons(db, profile, day, day, view)
    if not visible:
        return DaySchedule(date=day, view=view, lessons=[])

    teachers = teacher_names(db, profile.organisation_id)
    centres = centre_names(db, profile.organisation_id)

    lessons = [
        ScheduledLesson(
            lesson_id=lesson.id,
            class_id=school_class.id,
            class_name=school_class.name,
            subject=school_class.subject,
            start_time=school_class.start_time,
            end_time=school_class.end_time,
            room=school_class.room,
            centre_name=centres.get(school_class.centre_id),
            teacher_name=teachers.get(school_class.teacher_id),
            lesson_number=lesson.lesson_number,
            total_lessons=school_class.total_lessons,
            status=lesson.status or "scheduled",
            is_co_teaching=(
                profile.teacher_id is not None
                and lesson.co_teacher_id == profile.teacher_id
                and school_class.teacher_id != profile.teacher_id
            ),
        )
        for lesson, school_class in visible
    ]
    lessons.sort(key=lambda l: (l.start_time, l.class_name))
    return DaySchedule(date=day, view=view, lessons=lessons)
