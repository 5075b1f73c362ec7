"""
Router pour le rapport de présences d'une classe et son export CSV.
"""

import uuid
from urllib.parse import quote

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from schedulesync.database import get_db
from schedulesync.routers.errors import to_http_exception
from schedulesync.schemas.report import AttendanceReport
from schedulesync.security import CurrentProfile, get_current_profile
from schedulesync.services import report_service

router = APIRouter(prefix="/api/v1/classes", tags=["Rapports"])


def _content_disposition(filename: str) -> str:
    # Les en-têtes HTTP sont en latin-1 : nom ASCII de repli + nom UTF-8 encodé
    fallback = filename.encode("ascii", "replace").decode("ascii").replace("?", "_").replace('"', "_")
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"


@router.get("/{class_id}/report", response_model=AttendanceReport, summary="Rapport de présences")
def get_report(
    class_id: uuid.UUID,
    db: Session = Depends(get_db),
    profile: CurrentProfile = Depends(get_current_profile),
):
    """Présences par élève et par cours effectué, avec totaux et taux de présence."""
    try:
        return report_service.build_attendance_report(db, profile, class_id)
    except (ValueError, PermissionError) as e:
        raise to_http_exception(e)


@router.get("/{class_id}/report/export", summary="Exporter le rapport en CSV")
def export_report(
    class_id: uuid.UUID,
    db: Session = Depends(get_db),
    profile: CurrentProfile = Depends(get_current_profile),
):
    """
    En-tête Student,<dates ISO>...,Total puis une ligne par élève
    (P = présent, A = absent, - = autre ou non saisi).
    """
    try:
        report = report_service.build_attendance_report(db, profile, class_id)
    except (ValueError, PermissionError) as e:
        raise to_http_exception(e)

    csv_content = report_service.render_report_csv(report)
    return StreamingResponse(
        iter([csv_content]),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": _content_disposition(report_service.report_filename(report))},
    )
