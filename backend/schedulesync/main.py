"""
Point d'entrée principal de l'API ScheduleSync.
Démarrage : uvicorn schedulesync.main:app --reload
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import schedulesync.models  # noqa: F401 (enregistre tous les modèles dans Base.metadata avant les routers)
from schedulesync.routers import (
    attendance,
    classes,
    namelist,
    organisation,
    registration,
    reports,
    schedules,
)

logger = logging.getLogger(__name__)


app = FastAPI(
    title="ScheduleSync API",
    description="API de gestion des classes, plannings et présences d'un centre de formation",
    version="0.1.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
)

# CORS : autorise tous les ports localhost en développement (à restreindre en production).
app.add_middleware(
    CORSMiddleware,
    allow_origins=[],
    allow_origin_regex=r"https?://(localhost|127\.0\.0\.1)(:\d+)?",
    allow_credentials=False,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["Content-Type", "Authorization", "Accept"],
    expose_headers=["Content-Disposition"],
)


app.include_router(organisation.profile_router)
app.include_router(organisation.router)
app.include_router(organisation.announcements_router)
app.include_router(registration.router)
app.include_router(classes.router)
app.include_router(attendance.router)
app.include_router(reports.router)
app.include_router(schedules.router)
app.include_router(namelist.router)
app.include_router(namelist.students_router)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Intercepte toutes les exceptions non gérées pour que la réponse 500
    passe par CORSMiddleware (qui injecte les headers CORS).
    """
    logger.error("Exception non gérée : %s", exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Une erreur interne est survenue."},
    )


@app.get("/api/health", tags=["Santé"])
def health_check():
    """Vérifie que l'API est opérationnelle."""
    return {"status": "ok", "service": "ScheduleSync API", "version": "0.1.0"}
