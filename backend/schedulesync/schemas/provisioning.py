"""
Schémas Pydantic pour les fonctions serverless de création de comptes
(create-teacher, register-org).
"""

import uuid
from typing import List, Optional

from pydantic import BaseModel, EmailStr, field_validator

MIN_PASSWORD_LENGTH = 8


def _check_password(v: str) -> str:
    if len(v) < MIN_PASSWORD_LENGTH:
        raise ValueError(f"Le mot de passe doit contenir au moins {MIN_PASSWORD_LENGTH} caractères.")
    return v


class TeacherCreate(BaseModel):
    """Création d'un compte enseignant ; l'organisation est celle de l'appelant."""
    full_name: str
    email: EmailStr
    phone: Optional[str] = None
    subjects: List[str] = []
    password: str
    has_admin_access: bool = False
    centre_ids: List[uuid.UUID] = []

    @field_validator("full_name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le nom ne peut pas être vide.")
        return v.strip()

    @field_validator("password")
    @classmethod
    def password_length(cls, v: str) -> str:
        return _check_password(v)


class OrganisationRegister(BaseModel):
    organisation_name: str
    country: str
    estimated_users: int
    full_name: str
    email: EmailStr
    password: str

    @field_validator("organisation_name", "country", "full_name")
    @classmethod
    def not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le champ ne peut pas être vide.")
        return v.strip()

    @field_validator("estimated_users")
    @classmethod
    def positive_users(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Le nombre d'utilisateurs estimé doit être positif.")
        return v

    @field_validator("password")
    @classmethod
    def password_length(cls, v: str) -> str:
        return _check_password(v)


class ProvisioningResult(BaseModel):
    """Réponse des fonctions serverless (champs optionnels selon la fonction)."""
    success: bool = True
    message: Optional[str] = None
    user_id: Optional[str] = None
    organisation_id: Optional[str] = None
    teacher: Optional[dict] = None
