"""
Schémas d'authentification / Authentication schemas.
Profil de session.
"""

from pydantic import BaseModel


class MeResponse(BaseModel):
    """Utilisateur de la session / Session user."""
    email: str
    namespace: str
