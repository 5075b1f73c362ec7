"""
Tests d'intégration API pour le calendrier mensuel et le planning du jour.
"""

import uuid
from datetime import date, time
from unittest.mock import patch

from schedulesync.schemas.schedule import CalendarDay, DaySchedule, MonthCalendar, ScheduledLesson


def test_calendrier_mois(client):
    with patch("schedulesync.routers.schedules.schedule_service.get_month_calendar") as mock:
        mock.return_value = MonthCalendar(
            year=2025, month=1, view="admin", leading_blanks=3,
            days=[CalendarDay(date=date(2025, 1, 1), has_lessons=False, lesson_count=0)],
        )
        response = client.get("/api/v1/schedules/month?year=2025&month=1")

    assert response.status_code == 200
    assert response.json()["leading_blanks"] == 3
    assert mock.call_args[0][2:] == (2025, 1, None)


def test_calendrier_mois_invalide(client):
    response = client.get("/api/v1/schedules/month?year=2025&month=13")
    assert response.status_code == 422


def test_calendrier_vue_invalide(client):
    response = client.get("/api/v1/schedules/month?year=2025&month=1&view=parent")
    assert response.status_code == 422


def test_calendrier_vue_enseignant_sans_profil(client):
    with patch("schedulesync.routers.schedules.schedule_service.get_month_calendar") as mock:
        mock.side_effect = ValueError("Aucun profil enseignant n'est associé à ce compte.")
        response = client.get("/api/v1/schedules/month?year=2025&month=1&view=teacher")

    assert response.status_code == 400


def test_planning_du_jour(teacher_client):
    with patch("schedulesync.routers.schedules.schedule_service.get_day_schedule") as mock:
        mock.return_value = DaySchedule(
            date=date(2025, 1, 5), view="teacher",
            lessons=[ScheduledLesson(
                lesson_id=uuid.uuid4(), class_id=uuid.uuid4(), class_name="Maths P5",
                subject="Mathématiques", start_time=time(9), end_time=time(10), room=None,
                centre_name="Centre Nord", teacher_name="Karim Haddad", lesson_number=1,
                total_lessons=10, status="scheduled", is_co_teaching=True,
            )],
        )
        response = teacher_client.get("/api/v1/schedules/day?day=2025-01-05")

    assert response.status_code == 200
    assert response.json()["lessons"][0]["is_co_teaching"] is True
    assert mock.call_args[0][2] == date(2025, 1, 5)


def test_planning_du_jour_date_manquante(client):
    response = client.get("/api/v1/schedules/day")
    assert response.status_code == 422
