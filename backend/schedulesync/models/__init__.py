# Importe tous les modèles pour enregistrer leurs tables dans Base.metadata
# avant que SQLAlchemy tente de résoudre les clés étrangères inter-modèles.
# Sans cet import, les FK comme lesson_statuses.attendance_record_id → attendance_records.id
# échouent avec NoReferencedTableError si attendance.py n'est pas chargé.

from schedulesync.models.organisation import Organisation  # noqa: F401
from schedulesync.models.teacher import Teacher  # noqa: F401
from schedulesync.models.centre import Centre  # noqa: F401
from schedulesync.models.user import User  # noqa: F401
from schedulesync.models.student import Student  # noqa: F401
from schedulesync.models.school_class import SchoolClass, ClassStudent  # noqa: F401
from schedulesync.models.attendance import AttendanceRecord, StudentAttendance  # noqa: F401
from schedulesync.models.lesson import LessonStatus  # noqa: F401
from schedulesync.models.announcement import Announcement  # noqa: F401
