"""
Routers pour le profil de l'utilisateur connecté, l'administration de l'organisation
(enseignants, centres) et le tableau d'annonces.
"""

import uuid
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from schedulesync.database import get_db
from schedulesync.routers.errors import function_error_to_http, to_http_exception
from schedulesync.schemas.organisation import (
    AnnouncementCreate,
    AnnouncementResponse,
    CentreResponse,
    ProfileResponse,
    ProfileUpdate,
    TeacherResponse,
)
from schedulesync.schemas.provisioning import ProvisioningResult, TeacherCreate
from schedulesync.security import CurrentProfile, get_current_profile, require_admin
from schedulesync.services import organisation_service, provisioning_client

# GET/PUT /api/v1/me
profile_router = APIRouter(prefix="/api/v1/me", tags=["Profil"])

# /api/v1/organisation/teachers, /api/v1/organisation/centres
router = APIRouter(prefix="/api/v1/organisation", tags=["Organisation"])

# /api/v1/announcements
announcements_router = APIRouter(prefix="/api/v1/announcements", tags=["Annonces"])


# --- Profil ---

@profile_router.get("", response_model=ProfileResponse, summary="Mon profil")
def get_profile(
    db: Session = Depends(get_db),
    profile: CurrentProfile = Depends(get_current_profile),
):
    try:
        return organisation_service.get_profile(db, profile)
    except ValueError as e:
        raise to_http_exception(e)


@profile_router.put("", response_model=ProfileResponse, summary="Modifier mon profil")
def update_profile(
    data: ProfileUpdate,
    db: Session = Depends(get_db),
    profile: CurrentProfile = Depends(get_current_profile),
):
    """Le téléphone n'est accepté que pour un enseignant (400 sinon)."""
    try:
        return organisation_service.update_profile(db, profile, data)
    except ValueError as e:
        raise to_http_exception(e, 400)


# --- Organisation ---

@router.get("/teachers", response_model=List[TeacherResponse], summary="Enseignants de l'organisation")
def list_teachers(
    db: Session = Depends(get_db),
    profile: CurrentProfile = Depends(require_admin),
):
    return organisation_service.list_teachers(db, profile)


@router.post(
    "/teachers",
    response_model=ProvisioningResult,
    status_code=201,
    summary="Créer un compte enseignant",
)
def create_teacher(
    data: TeacherCreate,
    profile: CurrentProfile = Depends(require_admin),
):
    """
    Délègue à la fonction serverless create-teacher, dans l'organisation de l'appelant.
    Retourne 400 si la fonction refuse la demande, 502 si elle est injoignable.
    """
    try:
        return provisioning_client.create_teacher(profile, data)
    except provisioning_client.FunctionCallError as e:
        raise function_error_to_http(e)


@router.get("/centres", response_model=List[CentreResponse], summary="Centres de l'organisation")
def list_centres(
    db: Session = Depends(get_db),
    profile: CurrentProfile = Depends(require_admin),
):
    return organisation_service.list_centres(db, profile)


# --- Annonces ---

@announcements_router.get("", response_model=List[AnnouncementResponse], summary="Lister les annonces")
def list_announcements(
    db: Session = Depends(get_db),
    profile: CurrentProfile = Depends(get_current_profile),
):
    return organisation_service.list_announcements(db, profile)


@announcements_router.post(
    "",
    response_model=AnnouncementResponse,
    status_code=201,
    summary="Publier une annonce",
)
def create_announcement(
    data: AnnouncementCreate,
    db: Session = Depends(get_db),
    profile: CurrentProfile = Depends(require_admin),
):
    return organisation_service.create_announcement(db, profile, data)


@announcements_router.delete("/{announcement_id}", status_code=204, summary="Supprimer une annonce")
def delete_announcement(
    announcement_id: uuid.UUID,
    db: Session = Depends(get_db),
    profile: CurrentProfile = Depends(get_current_profile),
):
    """Réservé aux administrateurs et à l'auteur de l'annonce."""
    try:
        organisation_service.delete_announcement(db, profile, announcement_id)
    except (ValueError, PermissionError) as e:
        raise to_http_exception(e)
