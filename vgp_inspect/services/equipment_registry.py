"""
Registre des profils d'equipement / Equipment profile registry.
Donnees statiques : sections applicables et periodicite VGP par type.
Static data: applicable sections and VGP interval per equipment type.
"""

import calendar
import enum
from dataclasses import dataclass
from datetime import date

DEFAULT_VGP_INTERVAL_MONTHS = 12


class EquipmentFamily(str, enum.Enum):
    """Famille d'equipement / Equipment family."""
    HAYON = "hayon"
    TABLE = "table"


class EquipmentType(str, enum.Enum):
    """Type d'equipement de levage / Lifting equipment type."""
    HAYON_RABATTABLE = "hayon-rabattable"
    HAYON_REPLIABLE = "hayon-repliable"
    HAYON_GERBEUR = "hayon-gerbeur"
    HAYON_POTENCE = "hayon-potence"
    HAYON_LATERAL = "hayon-lateral"
    TABLE_FIXE = "table-fixe"
    TABLE_MOBILE = "table-mobile"

    @property
    def family(self) -> EquipmentFamily:
        return EquipmentFamily(self.value.split("-", 1)[0])

    @classmethod
    def parse(cls, value: "EquipmentType | str | None") -> "EquipmentType | None":
        """Convertir une valeur brute / Convert a raw value. Unknown or empty -> None."""
        if isinstance(value, cls):
            return value
        if not value:
            return None
        try:
            return cls(value)
        except ValueError:
            return None


class SectionId(str, enum.Enum):
    """Section de la checklist / Checklist section."""
    DOCS = "docs"
    VISUEL = "visuel"
    SECURITE = "securite"
    ESSAIS = "essais"
    CHASSIS = "chassis"
    STABILISATEURS = "stabilisateurs"
    ENERGIE = "energie"
    POSTE = "poste"
    GARDE_CORPS = "garde-corps"


# Sections toujours visibles / Always visible sections
BASE_SECTIONS: tuple[SectionId, ...] = (
    SectionId.DOCS,
    SectionId.VISUEL,
    SectionId.SECURITE,
    SectionId.ESSAIS,
)


@dataclass(frozen=True)
class EquipmentProfile:
    """Profil d'un type d'equipement / Equipment type profile."""
    type: EquipmentType
    label: str
    applies_sections: frozenset[SectionId]
    vgp_interval_months: int
    has_vehicle_plate: bool = True


_PROFILES: dict[EquipmentType, EquipmentProfile] = {
    p.type: p
    for p in (
        EquipmentProfile(EquipmentType.HAYON_RABATTABLE, "Hayon Rabattable", frozenset(), 12),
        EquipmentProfile(EquipmentType.HAYON_REPLIABLE, "Hayon Repliable", frozenset(), 12),
        # Usage intensif, gerbage / Intensive use, stacking
        EquipmentProfile(
            EquipmentType.HAYON_GERBEUR, "Hayon Gerbeur",
            frozenset({SectionId.ENERGIE, SectionId.POSTE}), 6,
        ),
        EquipmentProfile(EquipmentType.HAYON_POTENCE, "Hayon Potence", frozenset(), 12),
        EquipmentProfile(EquipmentType.HAYON_LATERAL, "Hayon Latéral", frozenset(), 12),
        EquipmentProfile(
            EquipmentType.TABLE_FIXE, "Table Élévatrice Fixe",
            frozenset({SectionId.STABILISATEURS, SectionId.ENERGIE}), 12,
            has_vehicle_plate=False,
        ),
        EquipmentProfile(
            EquipmentType.TABLE_MOBILE, "Table Élévatrice Mobile",
            frozenset({SectionId.CHASSIS, SectionId.STABILISATEURS, SectionId.ENERGIE, SectionId.POSTE}), 6,
            has_vehicle_plate=False,
        ),
    )
}


def profile_for(equipment_type: EquipmentType | str | None) -> EquipmentProfile | None:
    """Profil d'un type, None si inconnu / Profile for a type, None when unknown."""
    parsed = EquipmentType.parse(equipment_type)
    if parsed is None:
        return None
    return _PROFILES.get(parsed)


def all_profiles() -> list[EquipmentProfile]:
    return list(_PROFILES.values())


def equipment_type_label(equipment_type: EquipmentType | str | None) -> str:
    profile = profile_for(equipment_type)
    if profile:
        return profile.label
    return str(equipment_type) if equipment_type else "-"


def add_months(start: date, months: int) -> date:
    """Ajouter des mois, jour borne a la fin du mois / Add months, day clamped to month end."""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def next_vgp_date(equipment_type: EquipmentType | str | None, inspection_date: date) -> date:
    """Date de la prochaine VGP / Next VGP due date.

    Periodicite selon l'arrete du 1er mars 2004 et l'intensite d'usage.
    """
    profile = profile_for(equipment_type)
    interval = profile.vgp_interval_months if profile else DEFAULT_VGP_INTERVAL_MONTHS
    return add_months(inspection_date, interval)
