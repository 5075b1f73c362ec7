"""
Router pour la prise de présences, par cours ou par date.
"""

import uuid
from datetime import date

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from schedulesync.database import get_db
from schedulesync.routers.errors import to_http_exception
from schedulesync.schemas.attendance import AttendanceSave, AttendanceSaveResult, AttendanceSheet
from schedulesync.security import CurrentProfile, get_current_profile
from schedulesync.services import attendance_service

router = APIRouter(prefix="/api/v1/classes", tags=["Présences"])


def _lesson_save_error(e: Exception) -> HTTPException:
    # cours annulé ou reporté : conflit d'état
    if "statut" in str(e):
        return to_http_exception(e, 409)
    return to_http_exception(e, 400)


@router.get(
    "/{class_id}/lessons/{lesson_id}/attendance",
    response_model=AttendanceSheet,
    summary="Feuille de présences d'un cours",
)
def get_lesson_attendance(
    class_id: uuid.UUID,
    lesson_id: uuid.UUID,
    db: Session = Depends(get_db),
    profile: CurrentProfile = Depends(get_current_profile),
):
    """
    Élèves inscrits avec leur statut enregistré, ou par défaut :
    « prorated » si le cours précède l'inscription, « present » sinon.
    """
    try:
        return attendance_service.get_lesson_attendance(db, profile, class_id, lesson_id)
    except (ValueError, PermissionError) as e:
        raise to_http_exception(e)


@router.put(
    "/{class_id}/lessons/{lesson_id}/attendance",
    response_model=AttendanceSaveResult,
    summary="Enregistrer les présences d'un cours",
)
def save_lesson_attendance(
    class_id: uuid.UUID,
    lesson_id: uuid.UUID,
    data: AttendanceSave,
    db: Session = Depends(get_db),
    profile: CurrentProfile = Depends(get_current_profile),
):
    """
    Remplace les présences de la fiche et passe le cours en « completed ».
    Retourne 409 pour un cours annulé ou reporté, 400 pour un élève non inscrit.
    """
    try:
        return attendance_service.save_lesson_attendance(db, profile, class_id, lesson_id, data)
    except (ValueError, PermissionError) as e:
        raise _lesson_save_error(e)


@router.post(
    "/{class_id}/lessons/{lesson_id}/attendance/students/{student_id}/toggle",
    response_model=AttendanceSaveResult,
    summary="Basculer la présence d'un élève",
)
def toggle_student_attendance(
    class_id: uuid.UUID,
    lesson_id: uuid.UUID,
    student_id: uuid.UUID,
    db: Session = Depends(get_db),
    profile: CurrentProfile = Depends(get_current_profile),
):
    """Présent devient absent, tout autre statut devient présent ; la feuille entière est enregistrée."""
    try:
        return attendance_service.toggle_student_attendance(db, profile, class_id, lesson_id, student_id)
    except (ValueError, PermissionError) as e:
        raise _lesson_save_error(e)


@router.post(
    "/{class_id}/lessons/{lesson_id}/attendance/all-present",
    response_model=AttendanceSaveResult,
    summary="Marquer tous les élèves présents",
)
def mark_lesson_all_present(
    class_id: uuid.UUID,
    lesson_id: uuid.UUID,
    db: Session = Depends(get_db),
    profile: CurrentProfile = Depends(get_current_profile),
):
    try:
        return attendance_service.mark_lesson_all_present(db, profile, class_id, lesson_id)
    except (ValueError, PermissionError) as e:
        raise _lesson_save_error(e)


@router.get(
    "/{class_id}/attendance/{attendance_date}",
    response_model=AttendanceSheet,
    summary="Feuille de présences d'une date",
)
def get_date_attendance(
    class_id: uuid.UUID,
    attendance_date: date,
    db: Session = Depends(get_db),
    profile: CurrentProfile = Depends(get_current_profile),
):
    try:
        return attendance_service.get_date_attendance(db, profile, class_id, attendance_date)
    except (ValueError, PermissionError) as e:
        raise to_http_exception(e)


@router.put(
    "/{class_id}/attendance/{attendance_date}",
    response_model=AttendanceSaveResult,
    summary="Enregistrer les présences d'une date",
)
def save_date_attendance(
    class_id: uuid.UUID,
    attendance_date: date,
    data: AttendanceSave,
    db: Session = Depends(get_db),
    profile: CurrentProfile = Depends(get_current_profile),
):
    """Le cours prévu ce jour-là, s'il existe, est lié à la fiche et passe en « completed »."""
    try:
        return attendance_service.save_date_attendance(db, profile, class_id, attendance_date, data)
    except (ValueError, PermissionError) as e:
        raise to_http_exception(e, 400)
