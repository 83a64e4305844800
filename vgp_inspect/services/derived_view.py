"""
Vue derivee d'une inspection / Derived view of an inspection.
Recalculee entierement apres chaque modification par l'hote (UI ou API).
Fully recomputed by the host (UI or API) after every mutation.
"""

from dataclasses import dataclass
from datetime import date

from vgp_inspect.services.charge_calculator import TestLoads
from vgp_inspect.services.checklist import SectionProgress
from vgp_inspect.services.equipment_registry import SectionId, next_vgp_date, profile_for
from vgp_inspect.services.record import InspectionRecord, Verdict
from vgp_inspect.services.requirement_resolver import is_required
from vgp_inspect.services.validation import ValidationResult, validate, visible_sections
from vgp_inspect.services.verdict import AUTO_VERDICT_NOTICES, derive_verdict


@dataclass(frozen=True)
class DerivedView:
    visible_sections: list[SectionId]
    required_item_ids: list[str]
    section_progress: list[SectionProgress]
    test_loads: TestLoads
    validation: ValidationResult
    suggested_verdict: Verdict
    verdict_notice: str | None
    next_vgp_date: date | None
    show_vehicle_plate: bool


def recompute_derived(record: InspectionRecord) -> DerivedView:
    """Tout ce que l'ecran affiche, sans modifier le dossier / Everything the
    screen shows, without mutating the record."""
    sections = visible_sections(record)
    required = [
        it.id
        for section in sections
        for it in record.checklist.all_in_section(section)
        if is_required(it.id, record.equipment_type, record.lift_height)
    ]

    suggested = derive_verdict(record.checklist.items(), record.verdict)
    notice = AUTO_VERDICT_NOTICES.get(suggested) if suggested is not record.verdict else None

    profile = profile_for(record.equipment_type)
    next_date = None
    if record.inspection_date:
        next_date = next_vgp_date(record.equipment_type, record.inspection_date)

    return DerivedView(
        visible_sections=sections,
        required_item_ids=required,
        section_progress=[record.checklist.section_progress(s) for s in sections],
        test_loads=record.test_loads,
        validation=validate(record),
        suggested_verdict=suggested,
        verdict_notice=notice,
        next_vgp_date=next_date,
        show_vehicle_plate=profile.has_vehicle_plate if profile else True,
    )
