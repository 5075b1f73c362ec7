"""
Router pour la gestion des classes, de leurs cours et de leurs inscriptions.
Lecture : membres de l'organisation ayant accès à la classe. Écriture : administrateurs.
"""

import uuid
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from schedulesync.database import get_db
from schedulesync.routers.errors import to_http_exception
from schedulesync.schemas.school_class import (
    ClassCreate,
    ClassDetail,
    ClassSummary,
    ClassUpdate,
    EnrolledStudent,
    EnrollmentCreate,
    EnrollmentNotesUpdate,
    LessonResponse,
    LessonStatusUpdate,
)
from schedulesync.security import CurrentProfile, get_current_profile, require_admin
from schedulesync.services import class_service

router = APIRouter(prefix="/api/v1/classes", tags=["Classes"])


@router.get("", response_model=List[ClassSummary], summary="Lister les classes")
def list_classes(
    db: Session = Depends(get_db),
    profile: CurrentProfile = Depends(get_current_profile),
):
    """Classes triées par jour et heure, avec enseignant, centre et nombre d'élèves."""
    return class_service.list_classes(db, profile)


@router.post("", response_model=ClassDetail, status_code=201, summary="Créer une classe")
def create_class(
    data: ClassCreate,
    db: Session = Depends(get_db),
    profile: CurrentProfile = Depends(require_admin),
):
    """
    Crée une classe. Si total_lessons et start_date sont fournis, les cours sont
    générés chaque semaine à partir de start_date.
    """
    try:
        return class_service.create_class(db, profile, data)
    except (ValueError, PermissionError) as e:
        raise to_http_exception(e, 400)


@router.get("/{class_id}", response_model=ClassDetail, summary="Détail d'une classe")
def get_class(
    class_id: uuid.UUID,
    db: Session = Depends(get_db),
    profile: CurrentProfile = Depends(get_current_profile),
):
    try:
        return class_service.get_class_detail(db, profile, class_id)
    except (ValueError, PermissionError) as e:
        raise to_http_exception(e)


@router.put("/{class_id}", response_model=ClassDetail, summary="Modifier une classe")
def update_class(
    class_id: uuid.UUID,
    data: ClassUpdate,
    db: Session = Depends(get_db),
    profile: CurrentProfile = Depends(require_admin),
):
    """Retourne 409 si la réduction du nombre de cours supprimerait un cours effectué."""
    try:
        return class_service.update_class(db, profile, class_id, data)
    except (ValueError, PermissionError) as e:
        raise to_http_exception(e, 409)


@router.delete("/{class_id}", status_code=204, summary="Supprimer une classe")
def delete_class(
    class_id: uuid.UUID,
    db: Session = Depends(get_db),
    profile: CurrentProfile = Depends(require_admin),
):
    try:
        class_service.delete_class(db, profile, class_id)
    except (ValueError, PermissionError) as e:
        raise to_http_exception(e, 409)


# --- Cours ---

@router.post(
    "/{class_id}/lessons/{lesson_id}/status",
    response_model=LessonResponse,
    summary="Changer le statut d'un cours",
)
def set_lesson_status(
    class_id: uuid.UUID,
    lesson_id: uuid.UUID,
    data: LessonStatusUpdate,
    db: Session = Depends(get_db),
    profile: CurrentProfile = Depends(require_admin),
):
    """Transitions permises : scheduled → completed | cancelled | rescheduled (409 sinon)."""
    try:
        return class_service.set_lesson_status(db, profile, class_id, lesson_id, data.status)
    except (ValueError, PermissionError) as e:
        raise to_http_exception(e, 409)


# --- Inscriptions ---

@router.post(
    "/{class_id}/students",
    response_model=EnrolledStudent,
    status_code=201,
    summary="Inscrire un élève",
)
def enroll_student(
    class_id: uuid.UUID,
    data: EnrollmentCreate,
    db: Session = Depends(get_db),
    profile: CurrentProfile = Depends(require_admin),
):
    try:
        return class_service.enroll_student(db, profile, class_id, data)
    except (ValueError, PermissionError) as e:
        raise to_http_exception(e, 409)


@router.patch(
    "/{class_id}/students/{enrollment_id}",
    response_model=EnrolledStudent,
    summary="Modifier les notes d'une inscription",
)
def update_enrollment_notes(
    class_id: uuid.UUID,
    enrollment_id: uuid.UUID,
    data: EnrollmentNotesUpdate,
    db: Session = Depends(get_db),
    profile: CurrentProfile = Depends(require_admin),
):
    try:
        return class_service.update_enrollment_notes(db, profile, class_id, enrollment_id, data.notes)
    except (ValueError, PermissionError) as e:
        raise to_http_exception(e)


@router.delete("/{class_id}/students/{enrollment_id}", status_code=204, summary="Désinscrire un élève")
def remove_enrollment(
    class_id: uuid.UUID,
    enrollment_id: uuid.UUID,
    db: Session = Depends(get_db),
    profile: CurrentProfile = Depends(require_admin),
):
    try:
        class_service.remove_enrollment(db, profile, class_id, enrollment_id)
    except (ValueError, PermissionError) as e:
        raise to_http_exception(e)
