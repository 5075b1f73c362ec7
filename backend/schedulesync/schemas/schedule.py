"""
Schémas Pydantic pour le calendrier mensuel et le planning du jour.
"""

import uuid
import datetime as dt
from typing import List, Optional

from pydantic import BaseModel

VIEW_MODES = {"admin", "teacher"}


class CalendarDay(BaseModel):
    date: dt.date
    has_lessons: bool
    lesson_count: int


class MonthCalendar(BaseModel):
    year: int
    month: int
    view: str
    leading_blanks: int          # cases vides avant le 1er (semaine commençant le dimanche)
    days: List[CalendarDay]


class ScheduledLesson(BaseModel):
    lesson_id: uuid.UUID
    class_id: uuid.UUID
    class_name: str
    subject: str
    start_time: dt.time
    end_time: dt.time
    room: Optional[str]
    centre_name: Optional[str]
    teacher_name: Optional[str]
    lesson_number: int
    total_lessons: Optional[int]
    status: str
    is_co_teaching: bool = False


class DaySchedule(BaseModel):
    date: dt.date
    view: str
    lessons: List[ScheduledLesson]
