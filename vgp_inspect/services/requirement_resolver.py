"""
Resolution des questions obligatoires / Mandatory question resolution.

Une regle par point de controle : toujours, pour certains types, ou au-dela
d'une hauteur de levee. Evaluee a la demande, jamais stockee.
One rule per check item: always, for some types, or above a lift height.
Evaluated on demand, never stored.
"""

from dataclasses import dataclass

from vgp_inspect.services.checklist import catalog_item_ids
from vgp_inspect.services.equipment_registry import EquipmentType

# Garde-corps obligatoires au-dela de 1,6 m (strict) / Guard rails above 1.6 m (strict)
GUARD_RAIL_HEIGHT_THRESHOLD = 1.6


@dataclass(frozen=True)
class Always:
    pass


@dataclass(frozen=True)
class ForTypes:
    types: frozenset[EquipmentType]


@dataclass(frozen=True)
class WhenHeightExceeds:
    threshold: float


RequirementRule = Always | ForTypes | WhenHeightExceeds

_ALWAYS = Always()
_HAYONS = ForTypes(frozenset({
    EquipmentType.HAYON_RABATTABLE,
    EquipmentType.HAYON_REPLIABLE,
    EquipmentType.HAYON_GERBEUR,
    EquipmentType.HAYON_POTENCE,
    EquipmentType.HAYON_LATERAL,
}))
_TABLE_MOBILE = ForTypes(frozenset({EquipmentType.TABLE_MOBILE}))
_TABLES = ForTypes(frozenset({EquipmentType.TABLE_FIXE, EquipmentType.TABLE_MOBILE}))
_ENERGIE = ForTypes(frozenset({EquipmentType.TABLE_FIXE, EquipmentType.TABLE_MOBILE, EquipmentType.HAYON_GERBEUR}))
_POSTE = ForTypes(frozenset({EquipmentType.HAYON_GERBEUR, EquipmentType.TABLE_MOBILE}))
_GUARD_RAIL = WhenHeightExceeds(GUARD_RAIL_HEIGHT_THRESHOLD)

REQUIREMENT_RULES: dict[str, RequirementRule] = {
    # Documents
    "docs-0": _ALWAYS,  # Plaque signaletique
    "docs-1": _ALWAYS,  # CMU / Abaque
    "docs-3": _ALWAYS,  # Certificat CE
    # Controle visuel - structure et hydraulique
    "visuel-0": _ALWAYS,
    "visuel-2": _ALWAYS,
    "visuel-5": _ALWAYS,
    "visuel-6": _ALWAYS,
    # Verrouillage position route (hayons)
    "visuel-7": _HAYONS,
    # Securite
    "securite-0": _ALWAYS,
    "securite-1": _ALWAYS,
    "securite-2": _ALWAYS,
    "securite-3": _HAYONS,  # Stop palette
    "securite-4": _HAYONS,  # Drapeaux
    # Essais
    "essais-0": _ALWAYS,
    "essais-1": _ALWAYS,
    "essais-2": _ALWAYS,
    "essais-3": _ALWAYS,
    # Sections conditionnelles / Conditional sections
    "chassis-0": _TABLE_MOBILE,
    "chassis-1": _TABLE_MOBILE,
    "chassis-2": _TABLE_MOBILE,
    "stab-0": _TABLES,
    "stab-1": _TABLES,
    "stab-2": _TABLES,
    "energie-0": _ENERGIE,
    "energie-1": _ENERGIE,
    "energie-2": _ENERGIE,
    "poste-0": _POSTE,
    "poste-1": _POSTE,
    "gc-0": _GUARD_RAIL,
    "gc-1": _GUARD_RAIL,
    "gc-2": _GUARD_RAIL,
}


def _type_key(equipment_type: EquipmentType | str) -> str:
    return equipment_type.value if isinstance(equipment_type, EquipmentType) else str(equipment_type)


def _family(type_key: str) -> str:
    return type_key.split("-", 1)[0]


def is_required(
    item_id: str,
    equipment_type: EquipmentType | str | None,
    height: float | None,
) -> bool:
    """Le point est-il obligatoire ? / Is the check item mandatory?

    Un identifiant sans regle n'est jamais obligatoire (pas d'exception).
    An id without a rule is never mandatory (no exception raised).
    """
    if not equipment_type:
        return False

    rule = REQUIREMENT_RULES.get(item_id)
    if rule is None:
        return False

    if isinstance(rule, WhenHeightExceeds):
        return (height or 0.0) > rule.threshold

    if isinstance(rule, Always):
        return True

    if isinstance(rule, ForTypes):
        current = _type_key(equipment_type)
        members = {t.value for t in rule.types}
        if current in members:
            return True
        # Meme famille (hayon-*, table-*) : l'appartenance exacte reste decisive
        family = _family(current)
        if all(_family(m) == family for m in members):
            return current in members
        return False

    raise TypeError(f"Unsupported requirement rule: {rule!r}")


def required_item_ids(
    equipment_type: EquipmentType | str | None,
    height: float | None,
) -> list[str]:
    """Identifiants obligatoires, ordre du catalogue / Mandatory ids, catalogue order."""
    return [i for i in catalog_item_ids() if is_required(i, equipment_type, height)]
