"""
Conversion des erreurs métier des services en réponses HTTP.

- PermissionError → 403
- ValueError dont le message contient « introuvable » → 404
- autre ValueError → code fourni par l'endpoint (409 conflit, 400 requête invalide)
- échec d'une fonction serverless : refus (4xx) → 400, erreur serveur ou réseau → 502
"""

from fastapi import HTTPException

from schedulesync.services.provisioning_client import FunctionCallError


def to_http_exception(exc: Exception, default_status: int = 400) -> HTTPException:
    msg = str(exc)
    if isinstance(exc, PermissionError):
        return HTTPException(status_code=403, detail=msg)
    if "introuvable" in msg:
        return HTTPException(status_code=404, detail=msg)
    return HTTPException(status_code=default_status, detail=msg)


def function_error_to_http(exc: FunctionCallError) -> HTTPException:
    return HTTPException(status_code=400 if exc.status_code < 500 else 502, detail=str(exc))
