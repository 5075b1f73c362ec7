"""
Schémas Pydantic pour le rapport de présences d'une classe.
"""

import uuid
import datetime as dt
from typing import Dict, List, Optional

from pydantic import BaseModel


class ReportStudentRow(BaseModel):
    student_id: uuid.UUID
    name: str
    attendance: Dict[dt.date, str]   # date du cours → statut
    total_present: int


class AttendanceReport(BaseModel):
    class_id: uuid.UUID
    class_name: str
    subject: str
    teacher_name: Optional[str]
    centre_name: Optional[str]
    student_count: int
    completed_lessons: int
    lesson_dates: List[dt.date]
    students: List[ReportStudentRow]
    total_present: int
    total_absent: int
    attendance_rate: float
