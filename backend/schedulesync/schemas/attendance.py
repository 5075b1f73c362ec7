"""
Schémas Pydantic pour la prise de présences (par cours ou par date).
"""

import uuid
import datetime as dt
from typing import List, Optional

from pydantic import BaseModel, field_validator

VALID_ATTENDANCE_STATUSES = {"present", "absent", "late", "excused", "prorated"}


class AttendanceEntry(BaseModel):
    """Statut saisi pour un élève."""
    student_id: uuid.UUID
    status: str
    notes: Optional[str] = None

    @field_validator("status")
    @classmethod
    def valid_status(cls, v: str) -> str:
        if v not in VALID_ATTENDANCE_STATUSES:
            raise ValueError(f"Statut de présence invalide. Valeurs acceptées : {VALID_ATTENDANCE_STATUSES}")
        return v


class AttendanceSave(BaseModel):
    """Corps de requête d'enregistrement des présences."""
    teacher_notes: Optional[str] = None
    entries: List[AttendanceEntry]

    @field_validator("entries")
    @classmethod
    def not_empty(cls, v: List[AttendanceEntry]) -> List[AttendanceEntry]:
        if not v:
            raise ValueError("La liste des présences ne peut pas être vide.")
        ids = [e.student_id for e in v]
        if len(ids) != len(set(ids)):
            raise ValueError("Un élève ne peut apparaître qu'une seule fois.")
        return v


class StudentAttendanceState(BaseModel):
    student_id: uuid.UUID
    name: str
    status: str
    notes: Optional[str] = None
    enrolled_at: Optional[dt.date] = None


class AttendanceSheet(BaseModel):
    """Feuille de présences : élèves inscrits avec statut enregistré ou par défaut."""
    class_id: uuid.UUID
    class_name: str
    date: dt.date
    lesson_id: Optional[uuid.UUID] = None
    lesson_number: Optional[int] = None
    attendance_record_id: Optional[uuid.UUID] = None
    teacher_notes: Optional[str] = None
    students: List[StudentAttendanceState]
    present_count: int
    absent_count: int
    prorated_count: int


class AttendanceSaveResult(BaseModel):
    attendance_record_id: uuid.UUID
    class_id: uuid.UUID
    date: dt.date
    created: bool                      # True si la fiche vient d'être créée
    lesson_id: Optional[uuid.UUID] = None
    lesson_status: Optional[str] = None
    saved_count: int
