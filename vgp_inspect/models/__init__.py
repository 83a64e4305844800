"""
Modèles SQLAlchemy / SQLAlchemy models.
Importer tous les modèles ici pour que create_all les détecte.
Import all models here so create_all can detect them.
"""

from vgp_inspect.models.audit import AuditLog
from vgp_inspect.models.stored_inspection import StoredInspection

__all__ = [
    "AuditLog",
    "StoredInspection",
]
