"""
Schémas Pydantic pour la liste des élèves par centre et par classe.
"""

import uuid
import datetime as dt
from typing import List

from pydantic import BaseModel, Field, field_validator


class ClassRef(BaseModel):
    id: uuid.UUID
    name: str


class CentreClasses(BaseModel):
    id: uuid.UUID
    name: str
    classes: List[ClassRef]


class NamelistStudent(BaseModel):
    id: uuid.UUID
    name: str

    model_config = {"from_attributes": True}


class NamelistStudentAdd(BaseModel):
    """Ajout d'un élève par son nom (créé s'il n'existe pas dans l'organisation)."""
    name: str
    enrolled_at: dt.date = Field(default_factory=dt.date.today)

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le nom de l'élève ne peut pas être vide.")
        return v.strip()


class NamelistAddResult(BaseModel):
    student_id: uuid.UUID
    name: str
    student_created: bool
    enrolled: bool  # False si l'élève était déjà inscrit
