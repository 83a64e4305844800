"""
Dépendances d'authentification / Authentication dependencies.
Injectées dans les routes via Depends().
"""

from dataclasses import dataclass

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from vgp_inspect.utils.auth import decode_token, owner_namespace

security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Owner:
    """Utilisateur de la session et son espace de noms / Session user and namespace."""
    email: str
    namespace: str


async def get_current_owner(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> Owner:
    """Valider le jeton de session porteur / Validate the bearer session token."""
    if credentials is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Non authentifié")

    payload = decode_token(credentials.credentials)
    if payload is None or payload.get("type") != "session" or not payload.get("sub"):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Session expirée")

    email = payload["sub"]
    return Owner(email=email, namespace=owner_namespace(email))
