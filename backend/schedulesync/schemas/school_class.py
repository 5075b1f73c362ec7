"""
Schémas Pydantic pour les classes, leurs cours et leurs inscriptions.

Note : on importe datetime en tant que module (dt) pour éviter le conflit de nommage
entre les champs `date` et le type `datetime.date` dans Pydantic v2.
"""

import uuid
import datetime as dt
from typing import List, Optional

from pydantic import BaseModel, field_validator, model_validator

VALID_LESSON_STATUSES = {"scheduled", "completed", "cancelled", "rescheduled"}


class CoTeacherAssignment(BaseModel):
    """Co-enseignant affecté au cours dont la date correspond exactement."""
    date: dt.date
    teacher_id: uuid.UUID


class ClassCreate(BaseModel):
    name: str
    subject: str
    teacher_id: uuid.UUID
    centre_id: uuid.UUID
    day_of_week: int              # 0 = dimanche ... 6 = samedi
    start_time: dt.time
    end_time: dt.time
    room: Optional[str] = None
    total_lessons: Optional[int] = None
    start_date: Optional[dt.date] = None  # date du 1er cours, puis tous les 7 jours
    co_teachers: List[CoTeacherAssignment] = []
    student_ids: List[uuid.UUID] = []

    @field_validator("name", "subject")
    @classmethod
    def not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le champ ne peut pas être vide.")
        return v.strip()

    @field_validator("day_of_week")
    @classmethod
    def valid_day(cls, v: int) -> int:
        if not 0 <= v <= 6:
            raise ValueError("Le jour doit être compris entre 0 (dimanche) et 6 (samedi).")
        return v

    @field_validator("total_lessons")
    @classmethod
    def positive_total(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 1:
            raise ValueError("Le nombre de cours doit être au moins 1.")
        return v

    @field_validator("room")
    @classmethod
    def blank_room_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None

    @model_validator(mode="after")
    def end_after_start(self) -> "ClassCreate":
        if self.end_time <= self.start_time:
            raise ValueError("L'heure de fin doit être postérieure à l'heure de début.")
        return self


class ClassUpdate(BaseModel):
    name: Optional[str] = None
    subject: Optional[str] = None
    teacher_id: Optional[uuid.UUID] = None
    centre_id: Optional[uuid.UUID] = None
    day_of_week: Optional[int] = None
    start_time: Optional[dt.time] = None
    end_time: Optional[dt.time] = None
    room: Optional[str] = None
    total_lessons: Optional[int] = None
    new_lesson_dates: List[dt.date] = []        # cours ajoutés à la suite des existants
    co_teachers: List[CoTeacherAssignment] = []

    @field_validator("name", "subject")
    @classmethod
    def not_empty(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("Le champ ne peut pas être vide.")
        return v.strip() if v else v

    @field_validator("day_of_week")
    @classmethod
    def valid_day(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and not 0 <= v <= 6:
            raise ValueError("Le jour doit être compris entre 0 (dimanche) et 6 (samedi).")
        return v

    @field_validator("total_lessons")
    @classmethod
    def positive_total(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 1:
            raise ValueError("Le nombre de cours doit être au moins 1.")
        return v


class ClassSummary(BaseModel):
    """Élément de la liste des classes."""
    id: uuid.UUID
    name: str
    subject: str
    day_of_week: int
    start_time: dt.time
    end_time: dt.time
    room: Optional[str]
    teacher_name: Optional[str]
    centre_name: Optional[str]
    student_count: int
    total_lessons: Optional[int]


class LessonResponse(BaseModel):
    id: uuid.UUID
    class_id: uuid.UUID
    lesson_number: int
    scheduled_date: dt.date
    status: str
    attendance_record_id: Optional[uuid.UUID] = None
    co_teacher_id: Optional[uuid.UUID] = None
    co_teacher_name: Optional[str] = None
    notes: Optional[str] = None

    model_config = {"from_attributes": True}


class ClassProgress(BaseModel):
    completed: int
    rescheduled: int
    total: int
    effective_total: int
    remaining: int
    percent: float


class EnrolledStudent(BaseModel):
    """Élève inscrit (id = identifiant de l'inscription class_students)."""
    id: uuid.UUID
    student_id: uuid.UUID
    name: str
    enrolled_at: Optional[dt.date] = None
    notes: Optional[str] = None


class ClassDetail(BaseModel):
    id: uuid.UUID
    name: str
    subject: str
    teacher_id: Optional[uuid.UUID]
    centre_id: Optional[uuid.UUID]
    organisation_id: uuid.UUID
    day_of_week: int
    start_time: dt.time
    end_time: dt.time
    room: Optional[str]
    total_lessons: Optional[int]
    teacher_name: Optional[str]
    centre_name: Optional[str]
    co_teacher_names: List[str] = []
    lessons: List[LessonResponse] = []
    students: List[EnrolledStudent] = []
    progress: ClassProgress
    skipped_co_teacher_dates: List[dt.date] = []  # dates sans cours correspondant


class LessonStatusUpdate(BaseModel):
    status: str

    @field_validator("status")
    @classmethod
    def valid_status(cls, v: str) -> str:
        if v not in VALID_LESSON_STATUSES:
            raise ValueError(f"Statut invalide. Valeurs acceptées : {VALID_LESSON_STATUSES}")
        return v


class EnrollmentCreate(BaseModel):
    student_id: uuid.UUID
    enrolled_at: Optional[dt.date] = None  # aujourd'hui si absent


class EnrollmentNotesUpdate(BaseModel):
    notes: Optional[str] = None
