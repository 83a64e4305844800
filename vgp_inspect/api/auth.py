"""
Routes d'authentification / Authentication routes.
Profil de la session courante.
"""

from fastapi import APIRouter, Depends

from vgp_inspect.api.deps import Owner, get_current_owner
from vgp_inspect.schemas.auth import MeResponse

router = APIRouter()


@router.get("/me", response_model=MeResponse)
async def get_me(owner: Owner = Depends(get_current_owner)):
    """Profil de l'utilisateur connecte / Current user profile."""
    return MeResponse(email=owner.email, namespace=owner.namespace)
