"""
Service métier pour la prise de présences.

Deux points d'entrée, une seule règle d'enregistrement :
- par cours (lesson_id) : le cours est lié à la fiche et passe en « completed » ;
- par date : la fiche (classe, date) est utilisée, et le cours prévu ce jour-là est lié s'il existe.

Enregistrement : une fiche par (classe, date), créée au premier passage ; notes,
auteur et horodatage sont écrasés ; les lignes élèves sont supprimées puis réinsérées.
Le tout dans une seule transaction.
"""

import uuid
import logging
from datetime import date, datetime, timezone
from typing import Iterable, List, Optional, Sequence

from sqlalchemy import delete, or_, select
from sqlalchemy.orm import Session

from schedulesync.models.attendance import AttendanceRecord, StudentAttendance
from schedulesync.models.lesson import LessonStatus
from schedulesync.models.school_class import ClassStudent, SchoolClass
from schedulesync.models.student import Student
from schedulesync.schemas.attendance import (
    AttendanceEntry,
    AttendanceSave,
    AttendanceSaveResult,
    AttendanceSheet,
    StudentAttendanceState,
)
from schedulesync.security import CurrentProfile
from schedulesync.services.class_service import get_accessible_class

logger = logging.getLogger(__name__)

INACTIVE_LESSON_STATUSES = {"cancelled", "rescheduled"}


# ============================================================
# Règles de statut
# ============================================================

def default_attendance_status(lesson_date: Optional[date], enrolled_at: Optional[date]) -> str:
    """« prorated » pour un cours antérieur à l'inscription de l'élève, sinon « present »."""
    if lesson_date is not None and enrolled_at is not None and lesson_date < enrolled_at:
        return "prorated"
    return "present"


def toggle_attendance_status(status: str) -> str:
    return "absent" if status == "present" else "present"


def mark_all_present(states: Iterable[StudentAttendanceState]) -> List[StudentAttendanceState]:
    return [s.model_copy(update={"status": "present"}) for s in states]


def build_student_states(
    roster: Sequence, saved: Sequence[StudentAttendance], attendance_date: date
) -> List[StudentAttendanceState]:
    """
    roster : paires (ClassStudent, Student) ordonnées par nom.
    Statut enregistré s'il existe, sinon statut par défaut selon la date d'inscription.
    """
    saved_by_student = {row.student_id: row for row in saved}
    states = []
    for link, student in roster:
        row = saved_by_student.get(student.id)
        states.append(StudentAttendanceState(
            student_id=student.id,
            name=student.name,
            status=row.status if row is not None else default_attendance_status(attendance_date, link.enrolled_at),
            notes=row.notes if row is not None else None,
            enrolled_at=link.enrolled_at,
        ))
    return states


# ============================================================
# Lecture
# ============================================================

def get_lesson_attendance(
    db: Session, profile: CurrentProfile, class_id: uuid.UUID, lesson_id: uuid.UUID
) -> AttendanceSheet:
    school_class = get_accessible_class(db, profile, class_id)
    lesson = _get_lesson(db, class_id, lesson_id)
    record = _record_for_lesson(db, lesson)
    return _build_sheet(db, school_class, lesson.scheduled_date, record, lesson)


def get_date_attendance(
    db: Session, profile: CurrentProfile, class_id: uuid.UUID, attendance_date: date
) -> AttendanceSheet:
    school_class = get_accessible_class(db, profile, class_id)
    lesson = _find_lesson_on_date(db, class_id, attendance_date)
    record = _find_record(db, class_id, attendance_date)
    return _build_sheet(db, school_class, attendance_date, record, lesson)


# ============================================================
# Enregistrement
# ============================================================

def save_lesson_attendance(
    db: Session,
    profile: CurrentProfile,
    class_id: uuid.UUID,
    lesson_id: uuid.UUID,
    data: AttendanceSave,
) -> AttendanceSaveResult:
    """Lève ValueError pour un cours annulé ou reporté."""
    school_class = get_accessible_class(db, profile, class_id)
    lesson = _get_lesson(db, class_id, lesson_id)
    if lesson.status in INACTIVE_LESSON_STATUSES:
        raise ValueError(f"Impossible de saisir les présences d'un cours au statut {lesson.status}.")

    record = db.get(AttendanceRecord, lesson.attendance_record_id) if lesson.attendance_record_id else None
    return _save(db, profile, school_class, lesson.scheduled_date, data, record, lesson)


def save_date_attendance(
    db: Session,
    profile: CurrentProfile,
    class_id: uuid.UUID,
    attendance_date: date,
    data: AttendanceSave,
) -> AttendanceSaveResult:
    """Seul un cours actif ce jour-là est lié à la fiche (pas les cours annulés ou reportés)."""
    school_class = get_accessible_class(db, profile, class_id)
    lesson = _find_lesson_on_date(db, class_id, attendance_date)
    return _save(db, profile, school_class, attendance_date, data, None, lesson)


def toggle_student_attendance(
    db: Session,
    profile: CurrentProfile,
    class_id: uuid.UUID,
    lesson_id: uuid.UUID,
    student_id: uuid.UUID,
) -> AttendanceSaveResult:
    """Bascule un élève entre « present » et « absent », puis enregistre la feuille du cours."""
    sheet = get_lesson_attendance(db, profile, class_id, lesson_id)
    if not any(s.student_id == student_id for s in sheet.students):
        raise ValueError(f"Élève non inscrit dans cette classe : {student_id}")

    states = [
        s.model_copy(update={"status": toggle_attendance_status(s.status)}) if s.student_id == student_id else s
        for s in sheet.students
    ]
    return save_lesson_attendance(db, profile, class_id, lesson_id, _sheet_to_save(sheet, states))


def mark_lesson_all_present(
    db: Session, profile: CurrentProfile, class_id: uuid.UUID, lesson_id: uuid.UUID
) -> AttendanceSaveResult:
    sheet = get_lesson_attendance(db, profile, class_id, lesson_id)
    if not sheet.students:
        raise ValueError("Aucun élève inscrit dans cette classe.")
    return save_lesson_attendance(
        db, profile, class_id, lesson_id, _sheet_to_save(sheet, mark_all_present(sheet.students))
    )


def _sheet_to_save(sheet: AttendanceSheet, states: Sequence[StudentAttendanceState]) -> AttendanceSave:
    return AttendanceSave(
        teacher_notes=sheet.teacher_notes,
        entries=[AttendanceEntry(student_id=s.student_id, status=s.status, notes=s.notes) for s in states],
    )


def _save(
    db: Session,
    profile: CurrentProfile,
    school_class: SchoolClass,
    attendance_date: date,
    data: AttendanceSave,
    record: Optional[AttendanceRecord],
    lesson: Optional[LessonStatus],
) -> AttendanceSaveResult:
    enrolled = set(db.execute(
        select(ClassStudent.student_id).where(ClassStudent.class_id == school_class.id)
    ).scalars().all())
    not_enrolled = [str(e.student_id) for e in data.entries if e.student_id not in enrolled]
    if not_enrolled:
        raise ValueError(f"Élève non inscrit dans cette classe : {', '.join(not_enrolled)}")

    if record is None:
        record = _find_record(db, school_class.id, attendance_date)

    created = record is None
    if created:
        record = AttendanceRecord(id=uuid.uuid4(), class_id=school_class.id, date=attendance_date)
        db.add(record)
    else:
        db.execute(delete(StudentAttendance).where(StudentAttendance.attendance_record_id == record.id))

    record.teacher_notes = (data.teacher_notes or "").strip() or None
    record.marked_by = profile.email
    record.marked_at = datetime.now(timezone.utc)
    db.flush()  # la fiche doit exister avant l'insertion des lignes élèves

    db.bulk_insert_mappings(StudentAttendance, [
        {
            "attendance_record_id": record.id,
            "student_id": entry.student_id,
            "status": entry.status,
            "notes": (entry.notes or "").strip() or None,
        }
        for entry in data.entries
    ])

    if lesson is not None:
        lesson.attendance_record_id = record.id
        lesson.status = "completed"

    db.commit()
    logger.info(
        "Présences enregistrées : classe %s, %s, %d élèves (par %s)",
        school_class.id, attendance_date.isoformat(), len(data.entries), profile.email,
    )

    return AttendanceSaveResult(
        attendance_record_id=record.id,
        class_id=school_class.id,
        date=attendance_date,
        created=created,
        lesson_id=lesson.id if lesson is not None else None,
        lesson_status=lesson.status if lesson is not None else None,
        saved_count=len(data.entries),
    )


# ============================================================
# Helpers
# ============================================================

def _get_lesson(db: Session, class_id: uuid.UUID, lesson_id: uuid.UUID) -> LessonStatus:
    lesson = db.get(LessonStatus, lesson_id)
    if lesson is None or lesson.class_id != class_id:
        raise ValueError("Cours introuvable.")
    return lesson


def _find_lesson_on_date(db: Session, class_id: uuid.UUID, attendance_date: date) -> Optional[LessonStatus]:
    """Premier cours actif du jour ; un statut NULL compte comme « scheduled »."""
    return db.execute(
        select(LessonStatus)
        .where(
            LessonStatus.class_id == class_id,
            LessonStatus.scheduled_date == attendance_date,
            or_(
                LessonStatus.status.is_(None),
                LessonStatus.status.not_in(sorted(INACTIVE_LESSON_STATUSES)),
            ),
        )
        .order_by(LessonStatus.lesson_number)
        .limit(1)
    ).scalar()


def _find_record(db: Session, class_id: uuid.UUID, attendance_date: date) -> Optional[AttendanceRecord]:
    return db.execute(
        select(AttendanceRecord).where(
            AttendanceRecord.class_id == class_id,
            AttendanceRecord.date == attendance_date,
        )
    ).scalar()


def _record_for_lesson(db: Session, lesson: LessonStatus) -> Optional[AttendanceRecord]:
    if lesson.attendance_record_id:
        return db.get(AttendanceRecord, lesson.attendance_record_id)
    return _find_record(db, lesson.class_id, lesson.scheduled_date)


def _build_sheet(
    db: Session,
    school_class: SchoolClass,
    attendance_date: date,
    record: Optional[AttendanceRecord],
    lesson: Optional[LessonStatus],
) -> AttendanceSheet:
    roster = db.execute(
        select(ClassStudent, Student)
        .join(Student, Student.id == ClassStudent.student_id)
        .where(ClassStudent.class_id == school_class.id)
        .order_by(Student.name)
    ).all()

    saved = []
    if record is not None:
        saved = db.execute(
            select(StudentAttendance).where(StudentAttendance.attendance_record_id == record.id)
        ).scalars().all()

    states = build_student_states(roster, saved, attendance_date)

    return AttendanceSheet(
        class_id=school_class.id,
        class_name=school_class.name,
        date=attendance_date,
        lesson_id=lesson.id if lesson is not None else None,
        lesson_number=lesson.lesson_number if lesson is not None else None,
        attendance_record_id=record.id if record is not None else None,
        teacher_notes=record.teacher_notes if record is not None else None,
        students=states,
        present_count=sum(1 for s in states if s.status == "present"),
        absent_count=sum(1 for s in states if s.status == "absent"),
        prorated_count=sum(1 for s in states if s.status == "prorated"),
    )
