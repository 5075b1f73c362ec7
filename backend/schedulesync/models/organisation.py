"""
Modèle SQLAlchemy pour les organisations (tenant : centres, enseignants, élèves, classes).
"""

import uuid
from sqlalchemy import Column, DateTime, Integer, String, func
from sqlalchemy.dialects.postgresql import UUID

from schedulesync.database import Base


class Organisation(Base):
    __tablename__ = "organisations"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    country = Column(String(100), nullable=True)
    estimated_users = Column(Integer, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
