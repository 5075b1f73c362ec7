"""
Router pour la liste des élèves : centres et classes, élèves d'une classe,
ajout par nom et recherche d'élèves.
"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from schedulesync.database import get_db
from schedulesync.routers.errors import to_http_exception
from schedulesync.schemas.namelist import (
    CentreClasses,
    NamelistAddResult,
    NamelistStudent,
    NamelistStudentAdd,
)
from schedulesync.security import CurrentProfile, get_current_profile, require_admin
from schedulesync.services import namelist_service

router = APIRouter(prefix="/api/v1/namelist", tags=["Liste des élèves"])

# GET /api/v1/students?q=...
students_router = APIRouter(prefix="/api/v1/students", tags=["Liste des élèves"])


@router.get("/centres", response_model=List[CentreClasses], summary="Centres et leurs classes")
def list_centres_with_classes(
    db: Session = Depends(get_db),
    profile: CurrentProfile = Depends(require_admin),
):
    return namelist_service.list_centres_with_classes(db, profile)


@router.get(
    "/classes/{class_id}/students",
    response_model=List[NamelistStudent],
    summary="Élèves d'une classe",
)
def list_class_students(
    class_id: uuid.UUID,
    db: Session = Depends(get_db),
    profile: CurrentProfile = Depends(get_current_profile),
):
    try:
        return namelist_service.list_class_students(db, profile, class_id)
    except (ValueError, PermissionError) as e:
        raise to_http_exception(e)


@router.post(
    "/classes/{class_id}/students",
    response_model=NamelistAddResult,
    status_code=201,
    summary="Ajouter un élève par son nom",
)
def add_student_to_class(
    class_id: uuid.UUID,
    data: NamelistStudentAdd,
    db: Session = Depends(get_db),
    profile: CurrentProfile = Depends(require_admin),
):
    """
    Réutilise l'élève de même nom (casse ignorée) ou le crée, puis l'inscrit
    s'il ne l'est pas déjà.
    """
    try:
        return namelist_service.add_student_to_class(db, profile, class_id, data)
    except (ValueError, PermissionError) as e:
        raise to_http_exception(e, 409)


@students_router.get("", response_model=List[NamelistStudent], summary="Rechercher des élèves")
def search_students(
    q: str = Query("", max_length=100),
    exclude_class_id: Optional[uuid.UUID] = None,
    db: Session = Depends(get_db),
    profile: CurrentProfile = Depends(require_admin),
):
    """Élèves de l'organisation dont le nom contient q, hors inscrits de exclude_class_id."""
    return namelist_service.search_students(db, profile, q, exclude_class_id)
