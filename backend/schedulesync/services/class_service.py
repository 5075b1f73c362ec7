"""
Service métier pour la gestion des classes, de leurs cours et de leurs inscriptions.

Toutes les recherches sont limitées à l'organisation de l'appelant : une classe
d'une autre organisation est signalée comme introuvable.
"""

import uuid
import logging
from datetime import date
from typing import Dict, List, Optional, Sequence

from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session

from schedulesync.models.centre import Centre
from schedulesync.models.lesson import LessonStatus
from schedulesync.models.school_class import ClassStudent, SchoolClass
from schedulesync.models.student import Student
from schedulesync.models.teacher import Teacher
from schedulesync.schemas.school_class import (
    ClassCreate,
    ClassDetail,
    ClassSummary,
    ClassUpdate,
    EnrolledStudent,
    EnrollmentCreate,
    LessonResponse,
)
from schedulesync.security import CurrentProfile
from schedulesync.services.lesson_schedule import (
    build_lesson_rows,
    check_lesson_transition,
    compute_progress,
    generate_lesson_dates,
    next_lesson_number,
    plan_total_lessons,
)

logger = logging.getLogger(__name__)


# ============================================================
# Accès
# ============================================================

def get_class_for_org(db: Session, profile: CurrentProfile, class_id: uuid.UUID) -> SchoolClass:
    """Retourne la classe si elle appartient à l'organisation de l'appelant."""
    school_class = db.get(SchoolClass, class_id)
    if school_class is None or school_class.organisation_id != profile.organisation_id:
        raise ValueError("Classe introuvable.")
    return school_class


def ensure_class_access(db: Session, profile: CurrentProfile, school_class: SchoolClass) -> None:
    """
    Un administrateur accède à toutes les classes de son organisation.
    Un enseignant accède aux classes dont il est titulaire ou co-enseignant d'au moins un cours.
    """
    if profile.is_admin:
        return
    if profile.teacher_id is None:
        raise PermissionError("Accès réservé aux enseignants de cette classe.")
    if school_class.teacher_id == profile.teacher_id:
        return

    co_teaching = db.execute(
        select(LessonStatus.id)
        .where(
            LessonStatus.class_id == school_class.id,
            LessonStatus.co_teacher_id == profile.teacher_id,
        )
        .limit(1)
    ).scalar()
    if co_teaching is None:
        raise PermissionError("Accès réservé aux enseignants de cette classe.")


def get_accessible_class(db: Session, profile: CurrentProfile, class_id: uuid.UUID) -> SchoolClass:
    school_class = get_class_for_org(db, profile, class_id)
    ensure_class_access(db, profile, school_class)
    return school_class


def teacher_names(db: Session, organisation_id: uuid.UUID) -> Dict[uuid.UUID, str]:
    teachers = db.execute(
        select(Teacher).where(Teacher.organisation_id == organisation_id)
    ).scalars().all()
    return {t.id: t.display_name for t in teachers}


def centre_names(db: Session, organisation_id: uuid.UUID) -> Dict[uuid.UUID, str]:
    centres = db.execute(
        select(Centre).where(Centre.organisation_id == organisation_id)
    ).scalars().all()
    return {c.id: c.name for c in centres}


def _check_teacher(db: Session, organisation_id: uuid.UUID, teacher_id: uuid.UUID) -> None:
    teacher = db.get(Teacher, teacher_id)
    if teacher is None or teacher.organisation_id != organisation_id:
        raise ValueError("Enseignant introuvable.")


def _check_centre(db: Session, organisation_id: uuid.UUID, centre_id: uuid.UUID) -> None:
    centre = db.get(Centre, centre_id)
    if centre is None or centre.organisation_id != organisation_id:
        raise ValueError("Centre introuvable.")


# ============================================================
# Lecture
# ============================================================

def list_classes(db: Session, profile: CurrentProfile) -> List[ClassSummary]:
    """
    Classes de l'organisation, triées par jour puis heure de début.
    Un enseignant non administrateur ne voit que les classes dont il est titulaire.
    """
    query = select(SchoolClass).where(SchoolClass.organisation_id == profile.organisation_id)
    if not profile.is_admin:
        if profile.teacher_id is None:
            return []
        query = query.where(SchoolClass.teacher_id == profile.teacher_id)

    classes = db.execute(
        query.order_by(SchoolClass.day_of_week, SchoolClass.start_time)
    ).scalars().all()
    if not classes:
        return []

    counts = dict(db.execute(
        select(ClassStudent.class_id, func.count())
        .where(ClassStudent.class_id.in_([c.id for c in classes]))
        .group_by(ClassStudent.class_id)
    ).all())
    teachers = teacher_names(db, profile.organisation_id)
    centres = centre_names(db, profile.organisation_id)

    return [
        ClassSummary(
            id=c.id,
            name=c.name,
            subject=c.subject,
            day_of_week=c.day_of_week,
            start_time=c.start_time,
            end_time=c.end_time,
            room=c.room,
            teacher_name=teachers.get(c.teacher_id),
            centre_name=centres.get(c.centre_id),
            student_count=counts.get(c.id, 0),
            total_lessons=c.total_lessons,
        )
        for c in classes
    ]


def get_class_detail(db: Session, profile: CurrentProfile, class_id: uuid.UUID) -> ClassDetail:
    school_class = get_accessible_class(db, profile, class_id)
    return _to_detail(db, school_class)


# ============================================================
# Création / modification / suppression
# ============================================================

def create_class(db: Session, profile: CurrentProfile, data: ClassCreate) -> ClassDetail:
    """
    Crée une classe et, si total_lessons et start_date sont fournis, génère ses cours
    hebdomadaires. Les élèves fournis sont inscrits dans la même transaction.
    """
    org_id = profile.organisation_id
    _check_teacher(db, org_id, data.teacher_id)
    _check_centre(db, org_id, data.centre_id)
    for assignment in data.co_teachers:
        _check_teacher(db, org_id, assignment.teacher_id)

    student_ids = list(dict.fromkeys(data.student_ids))
    if student_ids:
        known = set(db.execute(
            select(Student.id).where(Student.id.in_(student_ids), Student.organisation_id == org_id)
        ).scalars().all())
        unknown = [str(sid) for sid in student_ids if sid not in known]
        if unknown:
            raise ValueError(f"Élève introuvable : {', '.join(unknown)}")

    school_class = SchoolClass(
        name=data.name,
        subject=data.subject,
        teacher_id=data.teacher_id,
        centre_id=data.centre_id,
        day_of_week=data.day_of_week,
        start_time=data.start_time,
        end_time=data.end_time,
        room=data.room,
        total_lessons=data.total_lessons,
        organisation_id=org_id,
    )
    db.add(school_class)
    db.flush()  # obtenir l'id avant d'insérer les cours

    generated = 0
    if data.total_lessons and data.start_date:
        lesson_dates = generate_lesson_dates(data.start_date, data.total_lessons)
        rows, skipped = build_lesson_rows(school_class.id, lesson_dates, 1, data.co_teachers)
        db.bulk_insert_mappings(LessonStatus, rows)
        generated = len(rows)
    else:
        skipped = sorted({a.date for a in data.co_teachers})

    if student_ids:
        db.bulk_insert_mappings(ClassStudent, [
            {"class_id": school_class.id, "student_id": sid, "enrolled_at": date.today()}
            for sid in student_ids
        ])

    db.commit()
    db.refresh(school_class)

    if skipped:
        logger.warning(
            "Classe %s : co-enseignants ignorés pour les dates sans cours %s",
            school_class.name, [d.isoformat() for d in skipped],
        )
    logger.info("Classe créée : %s (%d cours, %d élèves)", school_class.name, generated, len(student_ids))
    return _to_detail(db, school_class, skipped)


def update_class(
    db: Session, profile: CurrentProfile, class_id: uuid.UUID, data: ClassUpdate
) -> ClassDetail:
    """
    Met à jour les champs fournis, ajoute les nouvelles dates de cours et applique
    les affectations de co-enseignants aux cours de même date.
    Lève une ValueError si la réduction du total supprimerait un cours effectué.
    """
    school_class = get_class_for_org(db, profile, class_id)
    org_id = profile.organisation_id
    if data.teacher_id is not None:
        _check_teacher(db, org_id, data.teacher_id)
    if data.centre_id is not None:
        _check_centre(db, org_id, data.centre_id)
    for assignment in data.co_teachers:
        _check_teacher(db, org_id, assignment.teacher_id)

    start_time = data.start_time if data.start_time is not None else school_class.start_time
    end_time = data.end_time if data.end_time is not None else school_class.end_time
    if end_time <= start_time:
        raise ValueError("L'heure de fin doit être postérieure à l'heure de début.")

    lessons = db.execute(
        select(LessonStatus)
        .where(LessonStatus.class_id == class_id)
        .order_by(LessonStatus.lesson_number)
    ).scalars().all()

    new_dates = list(data.new_lesson_dates)
    try:
        plan = plan_total_lessons(lessons, school_class.total_lessons, data.total_lessons, len(new_dates))
    except ValueError:
        logger.warning("Réduction refusée pour la classe %s (total demandé : %s)", class_id, data.total_lessons)
        raise

    update_data = data.model_dump(
        exclude_unset=True,
        exclude_none=True,
        exclude={"room", "total_lessons", "new_lesson_dates", "co_teachers"},
    )
    for field, value in update_data.items():
        setattr(school_class, field, value)
    if "room" in data.model_fields_set:
        school_class.room = (data.room or "").strip() or None
    school_class.total_lessons = plan.total_lessons

    remaining = list(lessons)
    if plan.delete_after is not None:
        db.execute(
            delete(LessonStatus).where(
                LessonStatus.class_id == class_id,
                LessonStatus.lesson_number > plan.delete_after,
                LessonStatus.status.is_distinct_from("completed"),
            )
        )
        remaining = [l for l in lessons if l.lesson_number <= plan.delete_after or l.status == "completed"]
        logger.info(
            "Classe %s : %d cours supprimés au-delà du cours %d",
            class_id, len(lessons) - len(remaining), plan.delete_after,
        )

    if new_dates:
        rows, _ = build_lesson_rows(class_id, new_dates, next_lesson_number(lessons), data.co_teachers)
        db.bulk_insert_mappings(LessonStatus, rows)

    skipped = set()
    existing_dates = {l.scheduled_date for l in remaining}
    for assignment in data.co_teachers:
        if assignment.date in existing_dates:
            db.execute(
                update(LessonStatus)
                .where(LessonStatus.class_id == class_id, LessonStatus.scheduled_date == assignment.date)
                .values(co_teacher_id=assignment.teacher_id)
            )
        elif assignment.date not in new_dates:
            skipped.add(assignment.date)

    db.commit()
    db.refresh(school_class)

    if skipped:
        logger.warning(
            "Classe %s : co-enseignants ignorés pour les dates sans cours %s",
            school_class.name, sorted(d.isoformat() for d in skipped),
        )
    return _to_detail(db, school_class, sorted(skipped))


def delete_class(db: Session, profile: CurrentProfile, class_id: uuid.UUID) -> None:
    """Supprime une classe ; cours, inscriptions et présences suivent par cascade."""
    school_class = get_class_for_org(db, profile, class_id)
    db.delete(school_class)
    db.commit()
    logger.info("Classe supprimée : %s", class_id)


def set_lesson_status(
    db: Session, profile: CurrentProfile, class_id: uuid.UUID, lesson_id: uuid.UUID, status: str
) -> LessonResponse:
    get_class_for_org(db, profile, class_id)
    lesson = db.get(LessonStatus, lesson_id)
    if lesson is None or lesson.class_id != class_id:
        raise ValueError("Cours introuvable.")

    check_lesson_transition(lesson.status, status)
    lesson.status = status
    db.commit()
    db.refresh(lesson)
    logger.info("Cours %s de la classe %s : statut %s", lesson.lesson_number, class_id, status)
    return _lesson_response(lesson)


# ============================================================
# Inscriptions
# ============================================================

def enroll_student(
    db: Session, profile: CurrentProfile, class_id: uuid.UUID, data: EnrollmentCreate
) -> EnrolledStudent:
    get_class_for_org(db, profile, class_id)
    student = db.get(Student, data.student_id)
    if student is None or student.organisation_id != profile.organisation_id:
        raise ValueError("Élève introuvable.")

    existing = db.execute(
        select(ClassStudent.id).where(
            ClassStudent.class_id == class_id,
            ClassStudent.student_id == data.student_id,
        )
    ).scalar()
    if existing is not None:
        raise ValueError("Cet élève est déjà inscrit dans cette classe.")

    link = ClassStudent(
        id=uuid.uuid4(),
        class_id=class_id,
        student_id=student.id,
        enrolled_at=data.enrolled_at or date.today(),
    )
    db.add(link)
    db.commit()
    logger.info("Élève %s inscrit dans la classe %s", student.id, class_id)
    return _enrolled_student(link, student)


def remove_enrollment(
    db: Session, profile: CurrentProfile, class_id: uuid.UUID, enrollment_id: uuid.UUID
) -> None:
    get_class_for_org(db, profile, class_id)
    link = _get_enrollment(db, class_id, enrollment_id)
    db.delete(link)
    db.commit()


def update_enrollment_notes(
    db: Session,
    profile: CurrentProfile,
    class_id: uuid.UUID,
    enrollment_id: uuid.UUID,
    notes: Optional[str],
) -> EnrolledStudent:
    get_class_for_org(db, profile, class_id)
    link = _get_enrollment(db, class_id, enrollment_id)
    link.notes = (notes or "").strip() or None
    db.commit()
    student = db.get(Student, link.student_id)
    return _enrolled_student(link, student)


def _get_enrollment(db: Session, class_id: uuid.UUID, enrollment_id: uuid.UUID) -> ClassStudent:
    link = db.get(ClassStudent, enrollment_id)
    if link is None or link.class_id != class_id:
        raise ValueError("Inscription introuvable.")
    return link


# ============================================================
# Construction des réponses
# ============================================================

def _enrolled_student(link: ClassStudent, student: Student) -> EnrolledStudent:
    return EnrolledStudent(
        id=link.id,
        student_id=link.student_id,
        name=student.name if student is not None else "",
        enrolled_at=link.enrolled_at,
        notes=link.notes,
    )


def _lesson_response(lesson: LessonStatus, co_teacher_name: Optional[str] = None) -> LessonResponse:
    return LessonResponse(
        id=lesson.id,
        class_id=lesson.class_id,
        lesson_number=lesson.lesson_number,
        scheduled_date=lesson.scheduled_date,
        status=lesson.status or "scheduled",
        attendance_record_id=lesson.attendance_record_id,
        co_teacher_id=lesson.co_teacher_id,
        co_teacher_name=co_teacher_name,
        notes=lesson.notes,
    )


def _to_detail(
    db: Session, school_class: SchoolClass, skipped_dates: Sequence[date] = ()
) -> ClassDetail:
    """Construit le détail : cours ordonnés, élèves triés par nom, progression."""
    lessons = db.execute(
        select(LessonStatus)
        .where(LessonStatus.class_id == school_class.id)
        .order_by(LessonStatus.lesson_number)
    ).scalars().all()

    enrolments = db.execute(
        select(ClassStudent, Student)
        .join(Student, Student.id == ClassStudent.student_id)
        .where(ClassStudent.class_id == school_class.id)
        .order_by(Student.name)
    ).all()

    teachers = teacher_names(db, school_class.organisation_id)
    centre = db.get(Centre, school_class.centre_id) if school_class.centre_id else None
    primary_name = teachers.get(school_class.teacher_id)

    co_teacher_names = []
    for lesson in lessons:
        name = teachers.get(lesson.co_teacher_id)
        if name and name != primary_name and name not in co_teacher_names:
            co_teacher_names.append(name)

    return ClassDetail(
        id=school_class.id,
        name=school_class.name,
        subject=school_class.subject,
        teacher_id=school_class.teacher_id,
        centre_id=school_class.centre_id,
        organisation_id=school_class.organisation_id,
        day_of_week=school_class.day_of_week,
        start_time=school_class.start_time,
        end_time=school_class.end_time,
        room=school_class.room,
        total_lessons=school_class.total_lessons,
        teacher_name=primary_name,
        centre_name=centre.name if centre is not None else None,
        co_teacher_names=co_teacher_names,
        lessons=[_lesson_response(l, teachers.get(l.co_teacher_id)) for l in lessons],
        students=[_enrolled_student(link, student) for link, student in enrolments],
        progress=compute_progress(lessons, school_class.total_lessons),
        skipped_co_teacher_dates=list(skipped_dates),
    )
