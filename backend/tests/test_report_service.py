"""
Tests unitaires pour le rapport de présences et son export CSV.
"""

import uuid
from datetime import date, time
from unittest.mock import MagicMock

from schedulesync.models.attendance import StudentAttendance
from schedulesync.models.centre import Centre
from schedulesync.models.lesson import LessonStatus
from schedulesync.models.school_class import SchoolClass
from schedulesync.models.teacher import Teacher
from schedulesync.schemas.report import AttendanceReport, ReportStudentRow
from schedulesync.services.report_service import (
    aggregate_attendance,
    build_attendance_report,
    render_report_csv,
    report_filename,
)
from conftest import ORG_ID, make_profile


def completed_lesson(class_id, number, day):
    return LessonStatus(
        id=uuid.uuid4(), class_id=class_id, lesson_number=number, scheduled_date=day,
        status="completed", attendance_record_id=uuid.uuid4(),
    )


def make_report(students, lesson_dates):
    return AttendanceReport(
        class_id=uuid.uuid4(), class_name="Maths P5", subject="Mathématiques",
        teacher_name="Karim Haddad", centre_name="Centre Nord",
        student_count=len(students), completed_lessons=len(lesson_dates),
        lesson_dates=lesson_dates, students=students,
        total_present=0, total_absent=0, attendance_rate=0.0,
    )


# ============================================================
# aggregate_attendance
# ============================================================

def test_agregation_par_eleve_et_par_date():
    class_id = uuid.uuid4()
    l1 = completed_lesson(class_id, 1, date(2025, 1, 5))
    l2 = completed_lesson(class_id, 2, date(2025, 1, 12))
    alice, bob = uuid.uuid4(), uuid.uuid4()
    rows = [
        StudentAttendance(attendance_record_id=l1.attendance_record_id, student_id=alice, status="present"),
        StudentAttendance(attendance_record_id=l2.attendance_record_id, student_id=alice, status="present"),
        StudentAttendance(attendance_record_id=l1.attendance_record_id, student_id=bob, status="absent"),
        StudentAttendance(attendance_record_id=l2.attendance_record_id, student_id=bob, status="late"),
    ]

    dates, students = aggregate_attendance([(alice, "Alice"), (bob, "Bob")], [l1, l2], rows)

    assert dates == [date(2025, 1, 5), date(2025, 1, 12)]
    assert students[0].total_present == 2
    assert students[1].total_present == 0
    assert students[1].attendance == {date(2025, 1, 5): "absent", date(2025, 1, 12): "late"}


def test_agregation_ignore_eleves_desinscrits_et_fiches_inconnues():
    class_id = uuid.uuid4()
    l1 = completed_lesson(class_id, 1, date(2025, 1, 5))
    alice = uuid.uuid4()
    rows = [
        StudentAttendance(attendance_record_id=l1.attendance_record_id, student_id=uuid.uuid4(), status="present"),
        StudentAttendance(attendance_record_id=uuid.uuid4(), student_id=alice, status="present"),
    ]

    _, students = aggregate_attendance([(alice, "Alice")], [l1], rows)

    assert students[0].attendance == {}
    assert students[0].total_present == 0


# ============================================================
# render_report_csv
# ============================================================

def test_csv_format_exact():
    d1, d2 = date(2025, 1, 5), date(2025, 1, 12)
    report = make_report(
        [
            ReportStudentRow(student_id=uuid.uuid4(), name="Alice",
                             attendance={d1: "present", d2: "absent"}, total_present=1),
            ReportStudentRow(student_id=uuid.uuid4(), name="Bob",
                             attendance={d1: "late"}, total_present=0),
        ],
        [d1, d2],
    )

    assert render_report_csv(report) == (
        "Student,2025-01-05,2025-01-12,Total\n"
        "Alice,P,A,1\n"
        "Bob,-,-,0\n"
    )


def test_csv_sans_cours():
    report = make_report(
        [ReportStudentRow(student_id=uuid.uuid4(), name="Alice", attendance={}, total_present=0)], []
    )
    assert render_report_csv(report) == "Student,Total\nAlice,0\n"


def test_csv_nom_avec_virgule_entre_guillemets():
    report = make_report(
        [ReportStudentRow(student_id=uuid.uuid4(), name="Amrani, Lina", attendance={}, total_present=0)], []
    )
    assert render_report_csv(report).splitlines()[1] == '"Amrani, Lina",0'


def test_nom_de_fichier():
    assert report_filename(make_report([], [])) == "Maths P5_attendance_report.csv"


# ============================================================
# build_attendance_report
# ============================================================

def test_rapport_totaux_et_taux():
    teacher = Teacher(id=uuid.uuid4(), full_name="Karim Haddad", organisation_id=ORG_ID)
    centre = Centre(id=uuid.uuid4(), name="Centre Nord", organisation_id=ORG_ID)
    school_class = SchoolClass(
        id=uuid.uuid4(), name="Maths P5", subject="Mathématiques", teacher_id=teacher.id,
        centre_id=centre.id, day_of_week=0, start_time=time(9), end_time=time(10), organisation_id=ORG_ID,
    )
    l1 = completed_lesson(school_class.id, 1, date(2025, 1, 5))
    l2 = completed_lesson(school_class.id, 2, date(2025, 1, 12))
    alice, bob = uuid.uuid4(), uuid.uuid4()

    roster_result = MagicMock()
    roster_result.all.return_value = [(alice, "Alice"), (bob, "Bob")]
    lessons_result = MagicMock()
    lessons_result.scalars.return_value.all.return_value = [l1, l2]
    rows_result = MagicMock()
    rows_result.scalars.return_value.all.return_value = [
        StudentAttendance(attendance_record_id=l1.attendance_record_id, student_id=alice, status="present"),
        StudentAttendance(attendance_record_id=l2.attendance_record_id, student_id=alice, status="present"),
        StudentAttendance(attendance_record_id=l1.attendance_record_id, student_id=bob, status="present"),
    ]

    objects = {SchoolClass: school_class, Teacher: teacher, Centre: centre}
    db = MagicMock()
    db.get.side_effect = lambda model, key: objects.get(model)
    db.execute.side_effect = [roster_result, lessons_result, rows_result]

    report = build_attendance_report(db, make_profile(admin=True), school_class.id)

    assert report.teacher_name == "Karim Haddad"
    assert report.centre_name == "Centre Nord"
    assert report.student_count == 2
    assert report.completed_lessons == 2
    assert report.total_present == 3
    assert report.total_absent == 1
    assert report.attendance_rate == 75.0


def test_rapport_sans_cours_effectue():
    school_class = SchoolClass(
        id=uuid.uuid4(), name="Maths P5", subject="Mathématiques", teacher_id=None, centre_id=None,
        day_of_week=0, start_time=time(9), end_time=time(10), organisation_id=ORG_ID,
    )
    roster_result = MagicMock()
    roster_result.all.return_value = [(uuid.uuid4(), "Alice")]
    lessons_result = MagicMock()
    lessons_result.scalars.return_value.all.return_value = []

    db = MagicMock()
    db.get.return_value = school_class
    db.execute.side_effect = [roster_result, lessons_result]

    report = build_attendance_report(db, make_profile(admin=True), school_class.id)

    assert report.lesson_dates == []
    assert report.attendance_rate == 0.0
    assert report.total_absent == 0
    assert report.teacher_name is None
