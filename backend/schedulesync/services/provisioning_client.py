"""
Client HTTP des fonctions serverless de création de comptes du backend hébergé.

- create-teacher : compte enseignant dans l'organisation de l'appelant
- register-org   : nouvelle organisation et son premier administrateur

Ces fonctions créent l'identité d'authentification : elles ne sont pas réimplémentées ici.
"""

import logging
from typing import Any, Dict

import httpx

from schedulesync.config import settings
from schedulesync.schemas.provisioning import OrganisationRegister, ProvisioningResult, TeacherCreate
from schedulesync.security import CurrentProfile

logger = logging.getLogger(__name__)


class FunctionCallError(Exception):
    """Échec d'appel d'une fonction serverless (status_code = code HTTP reçu, 502 si injoignable)."""

    def __init__(self, message: str, status_code: int = 502):
        super().__init__(message)
        self.status_code = status_code


def _function_url(name: str) -> str:
    return f"{settings.SUPABASE_URL.rstrip('/')}/functions/v1/{name}"


def invoke_function(name: str, payload: Dict[str, Any]) -> ProvisioningResult:
    """Appelle la fonction `name` avec la clé de service. Lève FunctionCallError en cas d'échec."""
    headers = {
        "Authorization": f"Bearer {settings.SUPABASE_SERVICE_ROLE_KEY}",
        "apikey": settings.SUPABASE_SERVICE_ROLE_KEY,
    }
    try:
        response = httpx.post(
            _function_url(name),
            json=payload,
            headers=headers,
            timeout=settings.FUNCTIONS_TIMEOUT_SECONDS,
        )
    except httpx.HTTPError as e:
        logger.error("Fonction %s injoignable : %s", name, e)
        raise FunctionCallError(f"Service de comptes indisponible ({name}).")

    try:
        body = response.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}

    if response.is_error:
        message = body.get("error") or f"Échec de la fonction {name} (HTTP {response.status_code})."
        logger.warning("Fonction %s : HTTP %s, %s", name, response.status_code, message)
        raise FunctionCallError(message, response.status_code)

    return ProvisioningResult.model_validate(body)


def create_teacher(profile: CurrentProfile, data: TeacherCreate) -> ProvisioningResult:
    """L'organisation est toujours celle de l'administrateur appelant."""
    payload = data.model_dump(mode="json")
    payload["organisation_id"] = str(profile.organisation_id)
    result = invoke_function("create-teacher", payload)
    logger.info("Compte enseignant créé par %s : %s", profile.email, data.email)
    return result


def register_organisation(data: OrganisationRegister) -> ProvisioningResult:
    result = invoke_function("register-org", data.model_dump(mode="json"))
    logger.info("Organisation enregistrée : %s", data.organisation_name)
    return result
