"""
Modèles SQLAlchemy pour les présences.

- attendance_records : une fiche par (classe, date), créée au premier enregistrement
- student_attendance : une ligne par élève et par fiche
"""

import uuid
from sqlalchemy import Column, Date, DateTime, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID

from schedulesync.database import Base


class AttendanceRecord(Base):
    __tablename__ = "attendance_records"
    __table_args__ = (UniqueConstraint("class_id", "date", name="uq_attendance_records_class_date"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    class_id = Column(UUID(as_uuid=True), ForeignKey("classes.id", ondelete="CASCADE"), nullable=False)
    date = Column(Date, nullable=False)
    teacher_notes = Column(Text, nullable=True)
    marked_by = Column(String(255), nullable=True)  # email de l'utilisateur
    marked_at = Column(DateTime(timezone=True), nullable=True)


class StudentAttendance(Base):
    """Statut d'un élève pour une fiche : present, absent, late, excused, prorated."""
    __tablename__ = "student_attendance"
    __table_args__ = (
        UniqueConstraint("attendance_record_id", "student_id", name="uq_student_attendance_record_student"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    attendance_record_id = Column(
        UUID(as_uuid=True), ForeignKey("attendance_records.id", ondelete="CASCADE"), nullable=False
    )
    student_id = Column(UUID(as_uuid=True), ForeignKey("students.id", ondelete="CASCADE"), nullable=False)
    status = Column(String(20), nullable=False)
    notes = Column(Text, nullable=True)
