"""Tests de persistance / Persistence tests."""

import json

import httpx
import pytest

from vgp_inspect.services.checklist import ItemStatus
from vgp_inspect.services.persistence import (
    LocalInspectionStore,
    PersistenceError,
    RemoteInspectionStore,
    save_record,
)
from vgp_inspect.services.record import InspectionRecord


class _FailingStore:
    def save(self, record):
        raise PersistenceError("Remote store unreachable: timeout")

    def load(self, id):
        return None

    def list(self):
        return []


def test_local_store_roundtrip(tmp_path, record):
    store = LocalInspectionStore(tmp_path / "inspections.json")
    record.client = "Transports Martin"
    record.checklist.set_status("docs-0", ItemStatus.COMPLIANT)

    outcome = save_record(record, store)
    assert outcome.ok
    assert record.id == outcome.ack.id
    assert record.updated_at == outcome.ack.updated_at

    loaded = store.load(record.id)
    assert loaded.client == "Transports Martin"
    assert loaded.checklist.get("docs-0").status is ItemStatus.COMPLIANT
    assert store.load("inconnu") is None


def test_local_store_upsert_and_order(tmp_path):
    store = LocalInspectionStore(tmp_path / "inspections.json")
    first = InspectionRecord(client="A")
    second = InspectionRecord(client="B")
    save_record(first, store)
    save_record(second, store)
    assert [s.client for s in store.list()] == ["B", "A"]

    first.client = "A bis"
    save_record(first, store)
    summaries = store.list()
    assert len(summaries) == 2
    assert {s.client for s in summaries} == {"A bis", "B"}

    assert store.delete(second.id)
    assert not store.delete(second.id)
    assert [s.id for s in store.list()] == [first.id]


def test_local_store_unreadable(tmp_path):
    path = tmp_path / "inspections.json"
    path.write_text("{pas du json", encoding="utf-8")
    with pytest.raises(PersistenceError):
        LocalInspectionStore(path).list()


def test_save_failure_keeps_record(record):
    record.checklist.set_status("visuel-0", ItemStatus.NON_CONFORMING_BLOCKING)
    outcome = save_record(record, _FailingStore())
    assert not outcome.ok
    assert "timeout" in outcome.error
    assert record.id is None
    assert record.checklist.get("visuel-0").status is ItemStatus.NON_CONFORMING_BLOCKING


def test_remote_store_save_and_list(record):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers["Authorization"]
        if request.method == "POST":
            body = json.loads(request.content)
            seen["equipment_type"] = body["equipment_type"]
            return httpx.Response(200, json={"success": True, "id": "srv-1", "updated_at": "2024-05-01T10:00:00+00:00"})
        return httpx.Response(200, json={"inspections": [
            {"id": "srv-1", "client": None, "vehicle_plate": "AB-123-CD", "inspection_date": None,
             "verdict": "UNSET", "is_complete": False, "updated_at": "2024-05-01T10:00:00+00:00"},
        ]})

    store = RemoteInspectionStore("jeton", base_url="http://vgp.test", transport=httpx.MockTransport(handler))
    outcome = save_record(record, store)
    assert outcome.ok
    assert record.id == "srv-1"
    assert seen["auth"] == "Bearer jeton"
    assert seen["equipment_type"] == "hayon-rabattable"
    assert [s.vehicle_plate for s in store.list()] == ["AB-123-CD"]
    store.close()


def test_remote_store_errors(record):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/missing"):
            return httpx.Response(404, json={"detail": "Inspection not found"})
        return httpx.Response(500, text="boom")

    store = RemoteInspectionStore("jeton", base_url="http://vgp.test", transport=httpx.MockTransport(handler))
    assert store.load("missing") is None
    outcome = save_record(record, store)
    assert not outcome.ok
    assert "500" in outcome.error
    assert record.id is None


def test_remote_store_unreachable(record):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    store = RemoteInspectionStore("jeton", base_url="http://vgp.test", transport=httpx.MockTransport(handler))
    outcome = save_record(record, store)
    assert not outcome.ok
    assert record.id is None
