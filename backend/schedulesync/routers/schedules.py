"""
Router pour le calendrier mensuel et le planning du jour.
"""

from datetime import date
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from schedulesync.database import get_db
from schedulesync.routers.errors import to_http_exception
from schedulesync.schemas.schedule import DaySchedule, MonthCalendar
from schedulesync.security import CurrentProfile, get_current_profile
from schedulesync.services import schedule_service

router = APIRouter(prefix="/api/v1/schedules", tags=["Planning"])


@router.get("/month", response_model=MonthCalendar, summary="Calendrier du mois")
def get_month(
    year: int = Query(..., ge=1900, le=9999),
    month: int = Query(..., ge=1, le=12),
    view: Optional[Literal["admin", "teacher"]] = None,
    db: Session = Depends(get_db),
    profile: CurrentProfile = Depends(get_current_profile),
):
    """
    Jours du mois (semaine débutant le dimanche) avec le nombre de cours visibles.
    Un non-administrateur est toujours en vue enseignant.
    """
    try:
        return schedule_service.get_month_calendar(db, profile, year, month, view)
    except ValueError as e:
        raise to_http_exception(e, 400)


@router.get("/day", response_model=DaySchedule, summary="Planning du jour")
def get_day(
    day: date,
    view: Optional[Literal["admin", "teacher"]] = None,
    db: Session = Depends(get_db),
    profile: CurrentProfile = Depends(get_current_profile),
):
    """Cours visibles du jour, triés par heure de début."""
    try:
        return schedule_service.get_day_schedule(db, profile, day, view)
    except ValueError as e:
        raise to_http_exception(e, 400)
