"""
Modèle SQLAlchemy pour les cours planifiés d'une classe (une ligne par séance).

Cycle de vie : scheduled → completed | cancelled | rescheduled.
"""

import uuid
from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import UUID

from schedulesync.database import Base


class LessonStatus(Base):
    __tablename__ = "lesson_statuses"
    __table_args__ = (UniqueConstraint("class_id", "lesson_number", name="uq_lesson_statuses_class_number"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    class_id = Column(UUID(as_uuid=True), ForeignKey("classes.id", ondelete="CASCADE"), nullable=False)
    lesson_number = Column(Integer, nullable=False)   # séquentiel par classe, à partir de 1
    scheduled_date = Column(Date, nullable=False)
    status = Column(String(20), default="scheduled")  # scheduled, completed, cancelled, rescheduled
    attendance_record_id = Column(
        UUID(as_uuid=True), ForeignKey("attendance_records.id", ondelete="SET NULL"), nullable=True
    )
    co_teacher_id = Column(UUID(as_uuid=True), ForeignKey("teachers.id", ondelete="SET NULL"), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
