"""
Service métier pour le rapport de présences d'une classe et son export CSV.

Colonnes du rapport : les cours effectués portant une fiche de présences,
dans l'ordre des dates. Codes CSV : P (présent), A (absent), - (autre ou non saisi).
"""

import csv
import io
import uuid
import logging
from datetime import date
from typing import Dict, List, Sequence, Tuple

from sqlalchemy import select
from sqlalchemy.orm import Session

from schedulesync.models.attendance import StudentAttendance
from schedulesync.models.centre import Centre
from schedulesync.models.lesson import LessonStatus
from schedulesync.models.school_class import ClassStudent
from schedulesync.models.student import Student
from schedulesync.models.teacher import Teacher
from schedulesync.schemas.report import AttendanceReport, ReportStudentRow
from schedulesync.security import CurrentProfile
from schedulesync.services.class_service import get_accessible_class

logger = logging.getLogger(__name__)

STATUS_CODES = {"present": "P", "absent": "A"}


def aggregate_attendance(
    roster: Sequence[Tuple[uuid.UUID, str]],
    lessons: Sequence[LessonStatus],
    rows: Sequence[StudentAttendance],
) -> Tuple[List[date], List[ReportStudentRow]]:
    """
    Croise élèves, cours effectués et lignes de présence.
    Les lignes d'élèves désinscrits ou de fiches sans cours effectué sont ignorées.
    """
    record_dates: Dict[uuid.UUID, date] = {
        lesson.attendance_record_id: lesson.scheduled_date for lesson in lessons
    }
    lesson_dates = list(dict.fromkeys(lesson.scheduled_date for lesson in lessons))

    summaries = {
        student_id: ReportStudentRow(student_id=student_id, name=name, attendance={}, total_present=0)
        for student_id, name in roster
    }
    for row in rows:
        summary = summaries.get(row.student_id)
        lesson_date = record_dates.get(row.attendance_record_id)
        if summary is None or lesson_date is None:
            continue
        summary.attendance[lesson_date] = row.status
        if row.status == "present":
            summary.total_present += 1

    return lesson_dates, list(summaries.values())


def build_attendance_report(db: Session, profile: CurrentProfile, class_id: uuid.UUID) -> AttendanceReport:
    school_class = get_accessible_class(db, profile, class_id)

    roster = db.execute(
        select(Student.id, Student.name)
        .join(ClassStudent, ClassStudent.student_id == Student.id)
        .where(ClassStudent.class_id == class_id)
        .order_by(Student.name)
    ).all()

    lessons = db.execute(
        select(LessonStatus)
        .where(
            LessonStatus.class_id == class_id,
            LessonStatus.status == "completed",
            LessonStatus.attendance_record_id.is_not(None),
        )
        .order_by(LessonStatus.scheduled_date, LessonStatus.lesson_number)
    ).scalars().all()

    record_ids = [lesson.attendance_record_id for lesson in lessons]
    rows = []
    if record_ids:
        rows = db.execute(
            select(StudentAttendance).where(StudentAttendance.attendance_record_id.in_(record_ids))
        ).scalars().all()

    lesson_dates, students = aggregate_attendance(roster, lessons, rows)

    teacher = db.get(Teacher, school_class.teacher_id) if school_class.teacher_id else None
    centre = db.get(Centre, school_class.centre_id) if school_class.centre_id else None

    cells = len(students) * len(lesson_dates)
    total_present = sum(s.total_present for s in students)
    attendance_rate = round(total_present / cells * 100, 1) if cells else 0.0

    return AttendanceReport(
        class_id=school_class.id,
        class_name=school_class.name,
        subject=school_class.subject,
        teacher_name=teacher.display_name if teacher is not None else None,
        centre_name=centre.name if centre is not None else None,
        student_count=len(students),
        completed_lessons=len(lessons),
        lesson_dates=lesson_dates,
        students=students,
        total_present=total_present,
        total_absent=cells - total_present,
        attendance_rate=attendance_rate,
    )


def render_report_csv(report: AttendanceReport) -> str:
    """Student,<date ISO>...,Total puis une ligne par élève."""
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")

    writer.writerow(["Student", *[d.isoformat() for d in report.lesson_dates], "Total"])
    for student in report.students:
        codes = [STATUS_CODES.get(student.attendance.get(d), "-") for d in report.lesson_dates]
        writer.writerow([student.name, *codes, student.total_present])

    logger.info("Export CSV : classe %s, %d élèves", report.class_id, len(report.students))
    return output.getvalue()


def report_filename(report: AttendanceReport) -> str:
    return f"{report.class_name}_attendance_report.csv"
