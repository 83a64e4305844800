"""
Dossier d'inspection / Inspection record (aggregate root).

Champs d'en-tete, checklist, photos et signature. Les charges d'essai sont
calculees a partir de la CMU, jamais saisies.
Header fields, checklist, photos and signature. Test loads are computed
from the nominal capacity, never entered.
"""

import enum
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from vgp_inspect.services.charge_calculator import TestLoads, compute_loads
from vgp_inspect.services.checklist import ChecklistStore, ItemStatus, PhotoRef, UnknownChecklistItem
from vgp_inspect.services.equipment_registry import EquipmentType, SectionId


class Verdict(str, enum.Enum):
    """Avis de l'inspecteur / Inspector verdict."""
    UNSET = "UNSET"
    COMPLIANT = "COMPLIANT"
    COMPLIANT_WITH_RESERVATIONS = "COMPLIANT_WITH_RESERVATIONS"
    NON_COMPLIANT = "NON_COMPLIANT"

    @classmethod
    def parse(cls, value: "Verdict | str | None") -> "Verdict":
        if isinstance(value, cls):
            return value
        if not value:
            return cls.UNSET
        legacy = LEGACY_VERDICTS.get(value)
        if legacy is not None:
            return legacy
        return cls(value)


LEGACY_VERDICTS: dict[str, Verdict] = {
    "conforme": Verdict.COMPLIANT,
    "reserve": Verdict.COMPLIANT_WITH_RESERVATIONS,
    "non-conforme": Verdict.NON_COMPLIANT,
}


@dataclass
class InspectionRecord:
    """Une inspection VGP complete / A complete VGP inspection."""
    id: str | None = None
    equipment_type: EquipmentType | None = None
    ce_marking: bool = True
    nominal_capacity: float | None = None  # CMU (kg)
    lift_height: float | None = None  # m
    client: str = ""
    vehicle_plate: str = ""
    brand: str = ""
    serial_number: str = ""
    inspector: str = ""
    inspection_date: date | None = None
    next_vgp_date: date | None = None
    test_load: str = ""
    verdict: Verdict = Verdict.UNSET
    observations: str = ""
    checklist: ChecklistStore = field(default_factory=ChecklistStore.new)
    general_photos: list[PhotoRef] = field(default_factory=list)
    signature: str | None = None
    updated_at: str | None = None

    @property
    def test_loads(self) -> TestLoads:
        return compute_loads(self.nominal_capacity, self.ce_marking)

    def photo_count(self) -> int:
        return len(self.general_photos) + sum(len(it.attachments) for it in self.checklist.items())


def _parse_date(value: Any) -> date | None:
    if isinstance(value, date):
        return value
    if not value:
        return None
    return date.fromisoformat(str(value)[:10])


def _parse_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _photo_from_dict(data: dict) -> PhotoRef:
    return PhotoRef(id=str(data["id"]), data=data["data"], timestamp=data.get("timestamp", ""))


def _photo_to_dict(photo: PhotoRef) -> dict:
    return {"id": photo.id, "data": photo.data, "timestamp": photo.timestamp}


def record_to_payload(record: InspectionRecord) -> dict:
    """Instantane serialisable, photos et signature incluses / Serializable snapshot."""
    sections: dict[str, list[dict]] = {}
    for section in SectionId:
        sections[section.value] = [
            {
                "id": it.id,
                "status": it.status.value,
                "note": it.note,
                "photos": [_photo_to_dict(p) for p in it.attachments],
            }
            for it in record.checklist.all_in_section(section)
        ]

    return {
        "id": record.id,
        "equipment_type": record.equipment_type.value if record.equipment_type else None,
        "ce_marking": record.ce_marking,
        "nominal_capacity": record.nominal_capacity,
        "lift_height": record.lift_height,
        "client": record.client,
        "vehicle_plate": record.vehicle_plate,
        "brand": record.brand,
        "serial_number": record.serial_number,
        "inspector": record.inspector,
        "inspection_date": record.inspection_date.isoformat() if record.inspection_date else None,
        "next_vgp_date": record.next_vgp_date.isoformat() if record.next_vgp_date else None,
        "test_load": record.test_load,
        "verdict": record.verdict.value,
        "observations": record.observations,
        "sections": sections,
        "general_photos": [_photo_to_dict(p) for p in record.general_photos],
        "signature": record.signature,
        "updated_at": record.updated_at,
    }


def record_from_payload(data: dict) -> InspectionRecord:
    """Reconstruire un dossier / Rebuild a record.

    Les items sont rattaches par id, ou par position dans la section pour
    l'ancien format ; l'ancien champ booleen 'checked' devient Conforme.
    Items are matched by id, or by position for the legacy format; the
    legacy boolean 'checked' becomes Compliant.
    """
    record = InspectionRecord(
        id=data.get("id") or None,
        equipment_type=EquipmentType.parse(data.get("equipment_type")),
        ce_marking=data.get("ce_marking", True) not in (False, "non-ce"),
        nominal_capacity=_parse_float(data.get("nominal_capacity")),
        lift_height=_parse_float(data.get("lift_height")),
        client=data.get("client") or "",
        vehicle_plate=data.get("vehicle_plate") or "",
        brand=data.get("brand") or "",
        serial_number=data.get("serial_number") or "",
        inspector=data.get("inspector") or "",
        inspection_date=_parse_date(data.get("inspection_date")),
        next_vgp_date=_parse_date(data.get("next_vgp_date")),
        test_load=str(data.get("test_load") or ""),
        verdict=Verdict.parse(data.get("verdict")),
        observations=data.get("observations") or "",
        general_photos=[_photo_from_dict(p) for p in data.get("general_photos") or []],
        signature=data.get("signature") or None,
        updated_at=data.get("updated_at"),
    )

    for section_key, items in (data.get("sections") or {}).items():
        try:
            section_items = record.checklist.all_in_section(section_key)
        except ValueError:
            continue
        for index, item_data in enumerate(items or []):
            target_id = item_data.get("id")
            if not target_id:
                if index >= len(section_items):
                    continue
                target_id = section_items[index].id
            if target_id not in record.checklist:
                continue

            status = ItemStatus.parse(item_data.get("status"))
            if status is ItemStatus.UNSET and item_data.get("checked") is not None:
                status = ItemStatus.COMPLIANT if item_data["checked"] else ItemStatus.UNSET
            record.checklist.set_status(target_id, status)
            record.checklist.set_note(target_id, item_data.get("note"))
            for photo in item_data.get("photos") or []:
                record.checklist.add_attachment(target_id, _photo_from_dict(photo))

    return record


def attach_photo(record: InspectionRecord, photo: PhotoRef, item_id: str | None = None) -> None:
    """Ajouter une photo generale ou a un item / Append a general or item photo."""
    if item_id is None:
        record.general_photos.append(photo)
        return
    if item_id not in record.checklist:
        raise UnknownChecklistItem(item_id)
    record.checklist.add_attachment(item_id, photo)


def remove_photo(record: InspectionRecord, photo_id: str) -> bool:
    """Retirer une photo generale ou d'item / Remove a general or item photo."""
    for photo in record.general_photos:
        if photo.id == photo_id:
            record.general_photos.remove(photo)
            return True
    return record.checklist.remove_attachment(photo_id)
