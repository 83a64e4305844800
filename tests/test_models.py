"""Tests des modèles / Model tests."""

from datetime import date

import pytest

from vgp_inspect.models.audit import AuditLog
from vgp_inspect.models.stored_inspection import StoredInspection
from vgp_inspect.services.checklist import ItemStatus, PhotoRef, UnknownChecklistItem
from vgp_inspect.services.equipment_registry import EquipmentFamily, EquipmentType
from vgp_inspect.services.record import (
    InspectionRecord,
    Verdict,
    attach_photo,
    record_from_payload,
    record_to_payload,
    remove_photo,
)


def test_stored_inspection_repr():
    s = StoredInspection(id="abc123", owner="00ff", client="Transports Martin")
    assert "Transports Martin" in repr(s)


def test_audit_repr():
    log = AuditLog(entity_type="inspection", entity_id="abc123", action="SAVE")
    assert "SAVE" in repr(log)


def test_enums():
    assert ItemStatus.NON_CONFORMING_BLOCKING.value == "NON_CONFORMING_BLOCKING"
    assert Verdict.COMPLIANT_WITH_RESERVATIONS.value == "COMPLIANT_WITH_RESERVATIONS"
    assert EquipmentType.TABLE_MOBILE.family is EquipmentFamily.TABLE
    assert EquipmentType.HAYON_LATERAL.family is EquipmentFamily.HAYON
    assert EquipmentType.parse("grue") is None


def test_legacy_codes():
    assert ItemStatus.parse("c") is ItemStatus.COMPLIANT
    assert ItemStatus.parse("nc") is ItemStatus.NON_CONFORMING_RESERVATION
    assert ItemStatus.parse("na") is ItemStatus.NOT_APPLICABLE
    assert ItemStatus.parse("") is ItemStatus.UNSET
    assert Verdict.parse("non-conforme") is Verdict.NON_COMPLIANT
    with pytest.raises(ValueError):
        ItemStatus.parse("peut-etre")


def test_payload_keeps_checklist_and_photos(record):
    record.id = "rec-1"
    record.inspection_date = date(2024, 4, 2)
    record.checklist.set_status("visuel-2", ItemStatus.NON_CONFORMING_RESERVATION)
    record.checklist.set_note("visuel-2", "Corrosion légère")
    attach_photo(record, PhotoRef("p1", "data:image/jpeg;base64,AAAA", "2024-04-02T08:00:00+00:00"), "visuel-2")

    rebuilt = record_from_payload(record_to_payload(record))
    item = rebuilt.checklist.get("visuel-2")
    assert item.status is ItemStatus.NON_CONFORMING_RESERVATION
    assert item.note == "Corrosion légère"
    assert [p.id for p in item.attachments] == ["p1"]
    assert rebuilt.inspection_date == date(2024, 4, 2)
    assert rebuilt.equipment_type is EquipmentType.HAYON_RABATTABLE


def test_legacy_payload_import():
    payload = {
        "equipment_type": "table-fixe",
        "ce_marking": "non-ce",
        "nominal_capacity": "500",
        "verdict": "reserve",
        "sections": {
            "docs": [{"checked": True}, {"status": "nca", "note": "Notice absente"}, {"checked": False}],
            "stabilisateurs": [{"status": "c"}],
            "inconnue": [{"status": "c"}],
        },
    }
    record = record_from_payload(payload)
    assert record.ce_marking is False
    assert record.nominal_capacity == 500.0
    assert record.test_loads.dynamic == 600
    assert record.verdict is Verdict.COMPLIANT_WITH_RESERVATIONS
    assert record.checklist.get("docs-0").status is ItemStatus.COMPLIANT
    assert record.checklist.get("docs-1").status is ItemStatus.NON_CONFORMING_BLOCKING
    assert record.checklist.get("docs-2").status is ItemStatus.UNSET
    assert record.checklist.get("stab-0").status is ItemStatus.COMPLIANT


def test_attach_photo_to_unknown_item():
    record = InspectionRecord()
    with pytest.raises(UnknownChecklistItem):
        attach_photo(record, PhotoRef("p1", "data:,", ""), "visuel-99")
    attach_photo(record, PhotoRef("p2", "data:,", ""))
    assert record.photo_count() == 1


def test_remove_photo():
    record = InspectionRecord()
    attach_photo(record, PhotoRef("g1", "data:,", ""))
    attach_photo(record, PhotoRef("i1", "data:,", ""), "visuel-3")
    assert remove_photo(record, "g1")
    assert remove_photo(record, "i1")
    assert not remove_photo(record, "i1")
    assert record.photo_count() == 0
