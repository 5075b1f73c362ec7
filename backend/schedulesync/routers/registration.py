"""
Router public d'inscription d'une nouvelle organisation (fonction serverless register-org).
"""

from fastapi import APIRouter

from schedulesync.routers.errors import function_error_to_http
from schedulesync.schemas.provisioning import OrganisationRegister, ProvisioningResult
from schedulesync.services import provisioning_client

router = APIRouter(prefix="/api/v1/register", tags=["Inscription"])


@router.post("", response_model=ProvisioningResult, status_code=201, summary="Inscrire une organisation")
def register_organisation(data: OrganisationRegister):
    """
    Crée l'organisation et son premier administrateur.
    Retourne 400 si la fonction refuse la demande, 502 si elle est injoignable.
    """
    try:
        return provisioning_client.register_organisation(data)
    except provisioning_client.FunctionCallError as e:
        raise function_error_to_http(e)
