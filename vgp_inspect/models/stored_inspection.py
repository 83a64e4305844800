"""Modele dossier stocke / Stored inspection record (per-owner keyed store).

Le contenu complet est conserve en JSON ; les colonnes de resume servent a
la liste et a la synchronisation.
The full content is kept as JSON; summary columns serve listing and sync.
"""

from sqlalchemy import Boolean, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from vgp_inspect.database import Base


class StoredInspection(Base):
    __tablename__ = "stored_inspections"
    __table_args__ = (Index("ix_stored_inspections_owner_updated", "owner", "updated_at"),)

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    # Espace de noms = hash de l'email / Namespace = email hash
    owner: Mapped[str] = mapped_column(String(24), primary_key=True)
    client: Mapped[str | None] = mapped_column(String(200))
    vehicle_plate: Mapped[str | None] = mapped_column(String(20))
    inspection_date: Mapped[str | None] = mapped_column(String(10))  # ISO 8601
    verdict: Mapped[str | None] = mapped_column(String(40))
    is_complete: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[str] = mapped_column(String(32), nullable=False)  # ISO 8601
    updated_at: Mapped[str] = mapped_column(String(32), nullable=False)  # ISO 8601
    payload: Mapped[str] = mapped_column(Text, nullable=False)  # JSON

    def __repr__(self) -> str:
        return f"<StoredInspection {self.id} - {self.client}>"
