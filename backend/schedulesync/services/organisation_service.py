"""
Service métier pour le profil de l'utilisateur connecté, les enseignants et centres
de son organisation, et le tableau d'annonces.
"""

import uuid
import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from schedulesync.models.announcement import Announcement
from schedulesync.models.centre import Centre
from schedulesync.models.organisation import Organisation
from schedulesync.models.teacher import Teacher
from schedulesync.models.user import User
from schedulesync.schemas.organisation import (
    AnnouncementCreate,
    AnnouncementResponse,
    CentreResponse,
    ProfileResponse,
    ProfileUpdate,
    TeacherResponse,
)
from schedulesync.security import CurrentProfile

logger = logging.getLogger(__name__)


def role_label(is_super_admin: bool, has_admin_access: bool, teacher_id: Optional[uuid.UUID]) -> str:
    if is_super_admin:
        return "SUPER_ADMIN"
    if has_admin_access:
        return "ADMIN"
    if teacher_id is not None:
        return "TEACHER"
    return "USER"


# ============================================================
# Profil
# ============================================================

def get_profile(db: Session, profile: CurrentProfile) -> ProfileResponse:
    user = db.get(User, profile.user_id)
    if user is None:
        raise ValueError("Profil utilisateur introuvable.")
    organisation = db.get(Organisation, profile.organisation_id)
    teacher = db.get(Teacher, profile.teacher_id) if profile.teacher_id else None

    return ProfileResponse(
        id=user.id,
        full_name=user.full_name,
        email=user.email,
        role=role_label(profile.is_super_admin, profile.has_admin_access, profile.teacher_id),
        organisation_id=profile.organisation_id,
        organisation_name=organisation.name if organisation is not None else None,
        has_admin_access=profile.has_admin_access,
        is_super_admin=profile.is_super_admin,
        teacher_id=profile.teacher_id,
        phone=teacher.phone if teacher is not None else None,
        address=teacher.address if teacher is not None else None,
    )


def update_profile(db: Session, profile: CurrentProfile, data: ProfileUpdate) -> ProfileResponse:
    """
    Met à jour nom, email et téléphone. Le téléphone est stocké sur la fiche enseignant :
    il est refusé pour un utilisateur qui n'est pas enseignant.
    """
    user = db.get(User, profile.user_id)
    if user is None:
        raise ValueError("Profil utilisateur introuvable.")
    teacher = db.get(Teacher, profile.teacher_id) if profile.teacher_id else None
    if data.phone is not None and teacher is None:
        raise ValueError("Seuls les enseignants peuvent renseigner un numéro de téléphone.")

    if data.full_name is not None:
        user.full_name = data.full_name
        if teacher is not None:
            teacher.full_name = data.full_name
    if data.email is not None:
        user.email = str(data.email)
        if teacher is not None:
            teacher.email = str(data.email)
    if data.phone is not None:
        teacher.phone = data.phone.strip() or None

    db.commit()
    logger.info("Profil mis à jour : %s", profile.user_id)
    return get_profile(db, profile)


# ============================================================
# Organisation
# ============================================================

def list_teachers(db: Session, profile: CurrentProfile) -> List[TeacherResponse]:
    teachers = db.execute(
        select(Teacher).where(Teacher.organisation_id == profile.organisation_id)
    ).scalars().all()
    result = [
        TeacherResponse(
            id=t.id,
            name=t.display_name,
            email=t.email,
            phone=t.phone,
            subjects=list(t.subjects or []),
        )
        for t in teachers
    ]
    return sorted(result, key=lambda t: t.name.lower())


def list_centres(db: Session, profile: CurrentProfile) -> List[CentreResponse]:
    centres = db.execute(
        select(Centre)
        .where(Centre.organisation_id == profile.organisation_id)
        .order_by(Centre.name)
    ).scalars().all()
    return [CentreResponse.model_validate(c) for c in centres]


# ============================================================
# Annonces
# ============================================================

def list_announcements(db: Session, profile: CurrentProfile) -> List[AnnouncementResponse]:
    """Annonces de l'organisation, les plus récentes d'abord."""
    rows = db.execute(
        select(Announcement, User.full_name)
        .outerjoin(User, User.id == Announcement.author_id)
        .where(Announcement.organisation_id == profile.organisation_id)
        .order_by(Announcement.created_at.desc())
    ).all()
    return [_announcement_response(a, author_name) for a, author_name in rows]


def create_announcement(
    db: Session, profile: CurrentProfile, data: AnnouncementCreate
) -> AnnouncementResponse:
    announcement = Announcement(
        id=uuid.uuid4(),
        organisation_id=profile.organisation_id,
        author_id=profile.user_id,
        title=data.title,
        content=data.content,
        created_at=datetime.now(timezone.utc),
    )
    db.add(announcement)
    db.commit()
    logger.info("Annonce publiée par %s : %s", profile.email, data.title)
    return _announcement_response(announcement, profile.full_name)


def delete_announcement(db: Session, profile: CurrentProfile, announcement_id: uuid.UUID) -> None:
    """Réservé aux administrateurs et à l'auteur de l'annonce."""
    announcement = db.get(Announcement, announcement_id)
    if announcement is None or announcement.organisation_id != profile.organisation_id:
        raise ValueError("Annonce introuvable.")
    if not profile.is_admin and announcement.author_id != profile.user_id:
        raise PermissionError("Seul l'auteur ou un administrateur peut supprimer cette annonce.")

    db.delete(announcement)
    db.commit()


def _announcement_response(announcement: Announcement, author_name: Optional[str]) -> AnnouncementResponse:
    return AnnouncementResponse(
        id=announcement.id,
        title=announcement.title,
        content=announcement.content,
        author_id=announcement.author_id,
        author_name=author_name,
        created_at=announcement.created_at,
    )
