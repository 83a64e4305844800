"""
Compilation du rapport VGP / VGP report compilation.

Assemble un instantane valide en document structure (format VGP, arrete du
1er mars 2004). Le rendu (XLSX, impression) est fait par un collaborateur.
Assembles a validated snapshot into a structured document. Rendering (XLSX,
print) is left to a collaborator.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

from vgp_inspect.services.charge_calculator import TestLoads
from vgp_inspect.services.checklist import ItemStatus
from vgp_inspect.services.equipment_registry import SectionId, equipment_type_label
from vgp_inspect.services.record import InspectionRecord, Verdict
from vgp_inspect.services.requirement_resolver import is_required
from vgp_inspect.services.validation import ValidationResult, validate, visible_sections

log = logging.getLogger(__name__)

ERROR_INVALID = "Impossible de générer le rapport : toutes les questions obligatoires doivent être renseignées."
ERROR_NO_VERDICT = "Veuillez renseigner l'avis de l'inspecteur avant de générer le rapport."

SECTION_TITLES = {
    SectionId.DOCS: "Documentation",
    SectionId.VISUEL: "État de conservation",
    SectionId.SECURITE: "Sécurité",
    SectionId.ESSAIS: "Essais",
    SectionId.CHASSIS: "Châssis",
    SectionId.STABILISATEURS: "Stabilisateurs",
    SectionId.ENERGIE: "Énergie",
    SectionId.POSTE: "Poste de conduite",
    SectionId.GARDE_CORPS: "Garde-corps",
}

STATUS_SYMBOLS = {
    ItemStatus.COMPLIANT: "✔",
    ItemStatus.NON_CONFORMING_RESERVATION: "⚠",
    ItemStatus.NON_CONFORMING_BLOCKING: "✘",
    ItemStatus.NOT_APPLICABLE: "—",
    ItemStatus.UNSET: "—",
}

VERDICT_TEXTS = {
    Verdict.COMPLIANT: "APPAREIL CONFORME - Maintien en service autorisé",
    Verdict.COMPLIANT_WITH_RESERVATIONS: "CONFORME SOUS RÉSERVES - Levée des réserves obligatoire",
    Verdict.NON_COMPLIANT: "APPAREIL NON CONFORME - Mise hors service immédiate",
}

CORRECTIVE_ACTIONS = {
    Verdict.NON_COMPLIANT: (
        "MISE HORS SERVICE IMMÉDIATE obligatoire. Réparation requise avant toute remise "
        "en service. Nouvelle VGP à effectuer après travaux."
    ),
    Verdict.COMPLIANT_WITH_RESERVATIONS: (
        "Levée des réserves obligatoire dans un délai raisonnable. Tenir le registre de sécurité à jour."
    ),
    Verdict.COMPLIANT: "Aucune action corrective requise. Maintien en service autorisé.",
}


@dataclass(frozen=True)
class ReportLine:
    item_id: str
    label: str
    required: bool
    status: ItemStatus
    symbol: str
    note: str


@dataclass(frozen=True)
class ReportSection:
    section: SectionId
    title: str
    lines: list[ReportLine]


@dataclass(frozen=True)
class PhotoAnnexEntry:
    caption: str
    data: str


@dataclass(frozen=True)
class ReportDocument:
    report_number: str
    generated_at: str
    inspection_id: str | None
    equipment_label: str
    header: dict[str, str]
    test_loads: TestLoads
    sections: list[ReportSection]
    reservation_count: int
    blocking_count: int
    reservation_notes: list[str]
    verdict: Verdict
    verdict_text: str
    corrective_actions: str
    observations: str
    photos: list[PhotoAnnexEntry]
    signature: str | None
    is_draft: bool = False
    warnings: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ReportCompilation:
    document: ReportDocument | None
    validation: ValidationResult
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.document is not None


def report_number(record: InspectionRecord) -> str:
    """Numero VGP-AAAA-NNNN / Report number VGP-YYYY-NNNN."""
    year = record.inspection_date.year if record.inspection_date else datetime.now(timezone.utc).year
    suffix = (record.id or "")[-4:].rjust(4, "0")
    return f"VGP-{year}-{suffix}"


def _photo_annex(record: InspectionRecord) -> list[PhotoAnnexEntry]:
    entries = [
        PhotoAnnexEntry(caption=f"Vue générale {i}", data=p.data)
        for i, p in enumerate(record.general_photos, 1)
    ]
    for item in record.checklist.items():
        entries.extend(
            PhotoAnnexEntry(caption=f"{item.id} - Photo {i}", data=p.data)
            for i, p in enumerate(item.attachments, 1)
        )
    return entries


def _format_date(value) -> str:
    return value.strftime("%d/%m/%Y") if value else "−"


def compile_report(record: InspectionRecord, allow_draft: bool = False) -> ReportCompilation:
    """Compiler le rapport ; refuse un instantane invalide sauf brouillon explicite /
    Compile the report; refuses an invalid snapshot unless a draft is requested.
    """
    validation = validate(record)
    if not validation.valid and not allow_draft:
        return ReportCompilation(document=None, validation=validation, error=ERROR_INVALID)
    if record.verdict is Verdict.UNSET and not allow_draft:
        return ReportCompilation(document=None, validation=validation, error=ERROR_NO_VERDICT)

    loads = record.test_loads
    sections = []
    for section in visible_sections(record):
        lines = [
            ReportLine(
                item_id=it.id,
                label=it.label,
                required=is_required(it.id, record.equipment_type, record.lift_height),
                status=it.status,
                symbol=STATUS_SYMBOLS[it.status],
                note=it.note,
            )
            for it in record.checklist.all_in_section(section)
        ]
        sections.append(ReportSection(section=section, title=SECTION_TITLES[section], lines=lines))

    all_lines = [line for s in sections for line in s.lines]
    reservation_notes = [
        f"{SECTION_TITLES[s.section]} : {line.note}"
        for s in sections for line in s.lines
        if line.status is ItemStatus.NON_CONFORMING_RESERVATION and line.note
    ]

    header = {
        "Type d'équipement": equipment_type_label(record.equipment_type),
        "Marque / Modèle": (record.brand or "−").upper(),
        "N° de série": record.serial_number or "−",
        "Immatriculation": record.vehicle_plate or "N/A",
        "Marquage CE": "OUI" if record.ce_marking else "NON",
        "CMU": f"{record.nominal_capacity:g} kg" if record.nominal_capacity else "−",
        "Hauteur levage": f"{record.lift_height:g} m" if record.lift_height else "−",
        "Client / Propriétaire": record.client or "−",
        "Date d'inspection": _format_date(record.inspection_date),
        "Inspecteur": record.inspector or "−",
        "Charge d'essai": f"{record.test_load} kg" if record.test_load else "−",
        "Prochaine VGP": _format_date(record.next_vgp_date),
    }

    document = ReportDocument(
        report_number=report_number(record),
        generated_at=datetime.now(timezone.utc).isoformat(timespec="seconds"),
        inspection_id=record.id,
        equipment_label=equipment_type_label(record.equipment_type),
        header=header,
        test_loads=loads,
        sections=sections,
        reservation_count=sum(1 for ln in all_lines if ln.status is ItemStatus.NON_CONFORMING_RESERVATION),
        blocking_count=sum(1 for ln in all_lines if ln.status is ItemStatus.NON_CONFORMING_BLOCKING),
        reservation_notes=reservation_notes,
        verdict=record.verdict,
        verdict_text=VERDICT_TEXTS.get(record.verdict, "RÉSULTAT NON DÉFINI"),
        corrective_actions=CORRECTIVE_ACTIONS.get(record.verdict, "−"),
        observations=record.observations,
        photos=_photo_annex(record),
        signature=record.signature,
        is_draft=not validation.valid or record.verdict is Verdict.UNSET,
        warnings=[f"Observation manquante : {w.label}" for w in validation.warnings],
    )
    log.info("Report %s compiled (draft=%s)", document.report_number, document.is_draft)
    return ReportCompilation(document=document, validation=validation)
