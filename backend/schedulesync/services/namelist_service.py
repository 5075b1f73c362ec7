"""
Service métier pour la liste des élèves par centre et par classe.

L'ajout se fait par nom : un élève de l'organisation portant le même nom
(casse ignorée) est réutilisé, sinon il est créé.
"""

import uuid
import logging
from typing import Iterable, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from schedulesync.models.centre import Centre
from schedulesync.models.school_class import ClassStudent, SchoolClass
from schedulesync.models.student import Student
from schedulesync.schemas.namelist import (
    CentreClasses,
    ClassRef,
    NamelistAddResult,
    NamelistStudent,
    NamelistStudentAdd,
)
from schedulesync.security import CurrentProfile
from schedulesync.services.class_service import get_accessible_class, get_class_for_org

logger = logging.getLogger(__name__)


def group_classes_by_centre(rows: Iterable[Tuple[SchoolClass, Centre]]) -> List[CentreClasses]:
    """Centres triés par nom, chacun avec ses classes triées par nom."""
    groups = {}
    for school_class, centre in rows:
        group = groups.setdefault(centre.id, CentreClasses(id=centre.id, name=centre.name, classes=[]))
        group.classes.append(ClassRef(id=school_class.id, name=school_class.name))

    result = sorted(groups.values(), key=lambda g: g.name.lower())
    for group in result:
        group.classes.sort(key=lambda c: c.name.lower())
    return result


def list_centres_with_classes(db: Session, profile: CurrentProfile) -> List[CentreClasses]:
    rows = db.execute(
        select(SchoolClass, Centre)
        .join(Centre, Centre.id == SchoolClass.centre_id)
        .where(SchoolClass.organisation_id == profile.organisation_id)
    ).all()
    return group_classes_by_centre(rows)


def list_class_students(db: Session, profile: CurrentProfile, class_id: uuid.UUID) -> List[NamelistStudent]:
    get_accessible_class(db, profile, class_id)
    students = db.execute(
        select(Student)
        .join(ClassStudent, ClassStudent.student_id == Student.id)
        .where(ClassStudent.class_id == class_id)
        .order_by(Student.name)
    ).scalars().all()
    return [NamelistStudent.model_validate(s) for s in students]


def add_student_to_class(
    db: Session, profile: CurrentProfile, class_id: uuid.UUID, data: NamelistStudentAdd
) -> NamelistAddResult:
    get_class_for_org(db, profile, class_id)

    student = db.execute(
        select(Student)
        .where(
            Student.organisation_id == profile.organisation_id,
            func.lower(Student.name) == data.name.lower(),
        )
        .limit(1)
    ).scalar()

    student_created = student is None
    if student_created:
        student = Student(id=uuid.uuid4(), name=data.name, organisation_id=profile.organisation_id)
        db.add(student)
        already_enrolled = False
    else:
        already_enrolled = db.execute(
            select(ClassStudent.id).where(
                ClassStudent.class_id == class_id,
                ClassStudent.student_id == student.id,
            )
        ).scalar() is not None

    if not already_enrolled:
        db.flush()
        db.add(ClassStudent(class_id=class_id, student_id=student.id, enrolled_at=data.enrolled_at))

    db.commit()
    logger.info(
        "Élève « %s » ajouté à la classe %s (créé : %s, inscrit : %s)",
        student.name, class_id, student_created, not already_enrolled,
    )
    return NamelistAddResult(
        student_id=student.id,
        name=student.name,
        student_created=student_created,
        enrolled=not already_enrolled,
    )


def search_students(
    db: Session, profile: CurrentProfile, query: str, exclude_class_id: Optional[uuid.UUID] = None
) -> List[NamelistStudent]:
    """Élèves dont le nom contient `query` (casse ignorée), hors inscrits de exclude_class_id."""
    term = query.strip()
    if not term:
        return []

    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    statement = select(Student).where(
        Student.organisation_id == profile.organisation_id,
        Student.name.ilike(f"%{escaped}%", escape="\\"),
    )
    if exclude_class_id is not None:
        statement = statement.where(
            Student.id.not_in(
                select(ClassStudent.student_id).where(ClassStudent.class_id == exclude_class_id)
            )
        )

    students = db.execute(statement.order_by(Student.name).limit(50)).scalars().all()
    return [NamelistStudent.model_validate(s) for s in students]
