"""
Garde de session.

Vérifie le JWT émis par le fournisseur d'authentification du backend hébergé
(HS256, audience « authenticated », sub = auth_id) puis charge le profil de
l'appelant dans la table users. Le profil est passé explicitement aux services.
"""

import logging
import uuid
from typing import Any, Dict, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.orm import Session

from schedulesync.config import settings
from schedulesync.database import get_db
from schedulesync.models.user import User

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


class CurrentProfile(BaseModel):
    """Profil de l'utilisateur connecté, propre à la requête."""
    user_id: uuid.UUID
    auth_id: uuid.UUID
    email: str
    full_name: Optional[str] = None
    organisation_id: uuid.UUID
    teacher_id: Optional[uuid.UUID] = None
    has_admin_access: bool = False
    is_super_admin: bool = False

    @property
    def is_admin(self) -> bool:
        return self.has_admin_access or self.is_super_admin


def _unauthorized(detail: str) -> HTTPException:
    # Le dashboard redirige vers la page de connexion sur tout 401
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def decode_access_token(token: str) -> Dict[str, Any]:
    """Vérifie signature, expiration et audience. Lève une 401 en cas d'échec."""
    try:
        return jwt.decode(
            token,
            settings.SUPABASE_JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
        )
    except JWTError as e:
        logger.info("Jeton refusé : %s", e)
        raise _unauthorized("Session invalide ou expirée.")


def get_current_profile(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> CurrentProfile:
    """Dépendance FastAPI : session active + profil users de l'appelant."""
    if credentials is None:
        raise _unauthorized("Authentification requise.")

    claims = decode_access_token(credentials.credentials)
    try:
        auth_id = uuid.UUID(str(claims.get("sub")))
    except ValueError:
        raise _unauthorized("Session invalide ou expirée.")

    user = db.execute(select(User).where(User.auth_id == auth_id)).scalar()
    if user is None:
        raise _unauthorized("Profil utilisateur introuvable.")
    if user.organisation_id is None:
        raise _unauthorized("Aucune organisation associée à ce compte.")

    return CurrentProfile(
        user_id=user.id,
        auth_id=user.auth_id,
        email=user.email,
        full_name=user.full_name,
        organisation_id=user.organisation_id,
        teacher_id=user.teacher_id,
        has_admin_access=bool(user.has_admin_access),
        is_super_admin=bool(user.is_super_admin),
    )


def require_admin(profile: CurrentProfile = Depends(get_current_profile)) -> CurrentProfile:
    """Dépendance FastAPI : réservée aux administrateurs de l'organisation."""
    if not profile.is_admin:
        raise HTTPException(status_code=403, detail="Accès réservé aux administrateurs.")
    return profile
