"""
Validation des questions obligatoires / Mandatory question validation.

Pure et sans effet de bord : appelee a chaque modification pour les badges
"obligatoire", puis une derniere fois avant la generation du rapport.
Pure and side-effect free: called after every change for live badges, then
once more before report generation.
"""

from dataclasses import dataclass, field

from vgp_inspect.services.checklist import ItemStatus
from vgp_inspect.services.equipment_registry import BASE_SECTIONS, SectionId, profile_for
from vgp_inspect.services.record import InspectionRecord
from vgp_inspect.services.requirement_resolver import GUARD_RAIL_HEIGHT_THRESHOLD, is_required

REASON_EQUIPMENT_TYPE_MISSING = "EQUIPMENT_TYPE_MISSING"
REASON_INCOMPLETE = "INCOMPLETE"

MSG_EQUIPMENT_TYPE_MISSING = "Veuillez sélectionner un type d'équipement"


@dataclass(frozen=True)
class MissingItem:
    id: str
    label: str
    section: SectionId


@dataclass(frozen=True)
class ObservationWarning:
    """NC sans observation (non bloquant) / Non-conformity without note (non-blocking)."""
    id: str
    label: str
    section: SectionId
    status: ItemStatus


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    missing: list[MissingItem] = field(default_factory=list)
    message: str = ""
    reason: str | None = None
    warnings: list[ObservationWarning] = field(default_factory=list)

    @property
    def equipment_type_missing(self) -> bool:
        return self.reason == REASON_EQUIPMENT_TYPE_MISSING


def visible_sections(record: InspectionRecord) -> list[SectionId]:
    """Sections affichees pour le type et la hauteur / Sections shown for type and height."""
    visible = set(BASE_SECTIONS)
    profile = profile_for(record.equipment_type)
    if profile:
        visible |= profile.applies_sections
    if (record.lift_height or 0.0) > GUARD_RAIL_HEIGHT_THRESHOLD:
        visible.add(SectionId.GARDE_CORPS)
    # Ordre d'affichage / Display order
    return [s for s in SectionId if s in visible]


def observation_warnings(record: InspectionRecord) -> list[ObservationWarning]:
    warnings = []
    for section in visible_sections(record):
        for item in record.checklist.all_in_section(section):
            if item.needs_observation:
                warnings.append(ObservationWarning(item.id, item.label, section, item.status))
    return warnings


def validate(record: InspectionRecord) -> ValidationResult:
    """Verifier que toutes les questions obligatoires visibles ont une reponse /
    Check every visible mandatory question is answered.

    N/A ou tout statut de conformite compte comme reponse ; une NC sans
    observation n'est qu'un avertissement.
    """
    if record.equipment_type is None:
        return ValidationResult(
            valid=False,
            missing=[],
            message=MSG_EQUIPMENT_TYPE_MISSING,
            reason=REASON_EQUIPMENT_TYPE_MISSING,
        )

    missing: list[MissingItem] = []
    for section in visible_sections(record):
        for item in record.checklist.all_in_section(section):
            if not is_required(item.id, record.equipment_type, record.lift_height):
                continue
            if item.status is ItemStatus.UNSET:
                missing.append(MissingItem(item.id, item.label, section))

    warnings = observation_warnings(record)
    if missing:
        return ValidationResult(
            valid=False,
            missing=missing,
            message=f"{len(missing)} question(s) obligatoire(s) non renseignée(s)",
            reason=REASON_INCOMPLETE,
            warnings=warnings,
        )
    return ValidationResult(valid=True, warnings=warnings)
