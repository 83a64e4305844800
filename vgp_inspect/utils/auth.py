"""
Utilitaires d'authentification / Authentication utilities.
Jetons de session JWT et espace de noms par utilisateur.
JWT session tokens and per-user namespace.

L'emission du lien magique (email) est hors perimetre : seul le jeton de
session final est produit et verifie ici.
"""

import hashlib
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from vgp_inspect.config import settings


def normalize_email(email: str) -> str:
    return email.strip().lower()


def owner_namespace(email: str) -> str:
    """Espace de noms = 12 premiers octets du SHA-256 de l'email / First 12 bytes of SHA-256."""
    digest = hashlib.sha256(normalize_email(email).encode("utf-8")).digest()
    return digest[:12].hex()


def create_session_token(email: str) -> str:
    """Créer un jeton de session JWT / Create a JWT session token."""
    expire = datetime.now(timezone.utc) + timedelta(days=settings.SESSION_EXPIRE_DAYS)
    payload = {"sub": normalize_email(email), "type": "session", "exp": expire}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> dict | None:
    """Décoder un token JWT / Decode a JWT token. Returns None if invalid."""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None
