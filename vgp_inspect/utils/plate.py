"""Format d'immatriculation SIV / French plate format (AB-123-CD)."""

import re

_NON_ALNUM = re.compile(r"[^A-Z0-9]")


def format_plate(raw: str | None) -> str:
    """Normaliser en AA-123-BB, tronque a 9 caracteres / Normalize to AA-123-BB."""
    value = _NON_ALNUM.sub("", (raw or "").upper())
    if len(value) > 2:
        value = value[:2] + "-" + value[2:]
    if len(value) > 6:
        value = value[:6] + "-" + value[6:]
    return value[:9]
