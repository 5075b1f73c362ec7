"""
Schémas Pydantic pour le profil, l'organisation (enseignants, centres) et les annonces.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, field_validator


class ProfileResponse(BaseModel):
    id: uuid.UUID
    full_name: Optional[str]
    email: str
    role: str                         # SUPER_ADMIN, ADMIN, TEACHER, USER
    organisation_id: uuid.UUID
    organisation_name: Optional[str]
    has_admin_access: bool
    is_super_admin: bool
    teacher_id: Optional[uuid.UUID]
    phone: Optional[str] = None
    address: Optional[str] = None


class ProfileUpdate(BaseModel):
    full_name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None       # enseignants uniquement

    @field_validator("full_name")
    @classmethod
    def not_empty(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("Le nom ne peut pas être vide.")
        return v.strip() if v else v


class TeacherResponse(BaseModel):
    id: uuid.UUID
    name: str
    email: Optional[str]
    phone: Optional[str]
    subjects: List[str] = []


class CentreResponse(BaseModel):
    id: uuid.UUID
    name: str
    address: Optional[str]
    phone: Optional[str]
    email: Optional[str]

    model_config = {"from_attributes": True}


class AnnouncementCreate(BaseModel):
    title: str
    content: str

    @field_validator("title", "content")
    @classmethod
    def not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le champ ne peut pas être vide.")
        return v.strip()


class AnnouncementResponse(BaseModel):
    id: uuid.UUID
    title: str
    content: str
    author_id: Optional[uuid.UUID]
    author_name: Optional[str]
    created_at: datetime
