"""Tests API / API tests."""

import io

from openpyxl import load_workbook
from PIL import Image

from vgp_inspect.services.checklist import ItemStatus
from vgp_inspect.services.equipment_registry import EquipmentType
from vgp_inspect.services.record import InspectionRecord, Verdict, record_to_payload
from vgp_inspect.services.requirement_resolver import required_item_ids
from vgp_inspect.utils.auth import create_session_token


def _complete_payload(record: InspectionRecord) -> dict:
    for item_id in required_item_ids(record.equipment_type, record.lift_height):
        record.checklist.set_status(item_id, ItemStatus.COMPLIANT)
    record.verdict = Verdict.COMPLIANT
    return record_to_payload(record)


def _png() -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (64, 48), (10, 120, 200)).save(buf, format="PNG")
    return buf.getvalue()


async def _save(client, headers, payload) -> dict:
    resp = await client.post("/api/inspections/", json=payload, headers=headers)
    assert resp.status_code == 200, resp.text
    return resp.json()


async def test_root(client):
    resp = await client.get("/")
    assert resp.status_code == 200
    assert resp.json()["status"] == "running"
    assert resp.headers["X-Content-Type-Options"] == "nosniff"
    assert "X-Request-ID" in resp.headers


async def test_ping(client):
    resp = await client.get("/api/ping")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


async def test_session_required(client):
    resp = await client.get("/api/inspections/")
    assert resp.status_code == 401
    resp = await client.get("/api/inspections/", headers={"Authorization": "Bearer pas-un-jeton"})
    assert resp.status_code == 401


async def test_me(client, auth_headers, inspector_email):
    resp = await client.get("/api/me", headers=auth_headers)
    assert resp.status_code == 200
    data = resp.json()
    assert data["email"] == inspector_email
    assert len(data["namespace"]) == 24


async def test_equipment_types(client, auth_headers):
    resp = await client.get("/api/equipment-types/", headers=auth_headers)
    assert resp.status_code == 200
    profiles = {p["type"]: p for p in resp.json()}
    assert len(profiles) == 7
    assert profiles["table-mobile"]["applies_sections"] == ["chassis", "stabilisateurs", "energie", "poste"]
    assert profiles["table-mobile"]["has_vehicle_plate"] is False
    assert profiles["hayon-gerbeur"]["vgp_interval_months"] == 6


async def test_save_list_get_delete(client, auth_headers, record):
    record.client = "Transports Martin"
    record.vehicle_plate = "ab 123 cd"
    saved = await _save(client, auth_headers, record_to_payload(record))
    assert saved["success"] is True
    assert saved["verdict_notice"] is None

    resp = await client.get("/api/inspections/", headers=auth_headers)
    inspections = resp.json()["inspections"]
    assert [i["id"] for i in inspections] == [saved["id"]]
    assert inspections[0]["client"] == "Transports Martin"
    assert inspections[0]["vehicle_plate"] == "AB-123-CD"
    assert inspections[0]["is_complete"] is False

    resp = await client.get(f"/api/inspections/{saved['id']}", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["id"] == saved["id"]
    assert resp.json()["updated_at"] == saved["updated_at"]

    resp = await client.delete(f"/api/inspections/{saved['id']}", headers=auth_headers)
    assert resp.status_code == 204
    resp = await client.get(f"/api/inspections/{saved['id']}", headers=auth_headers)
    assert resp.status_code == 404


async def test_save_updates_existing_record(client, auth_headers, record):
    saved = await _save(client, auth_headers, record_to_payload(record))
    payload = _complete_payload(record)
    payload["id"] = saved["id"]
    again = await _save(client, auth_headers, payload)
    assert again["id"] == saved["id"]

    resp = await client.get("/api/inspections/", headers=auth_headers)
    inspections = resp.json()["inspections"]
    assert len(inspections) == 1
    assert inspections[0]["is_complete"] is True


async def test_save_applies_auto_verdict(client, auth_headers):
    payload = record_to_payload(InspectionRecord(equipment_type=EquipmentType.HAYON_GERBEUR))
    payload["inspection_date"] = "2024-08-31"
    payload["sections"]["visuel"][0]["status"] = "nca"
    saved = await _save(client, auth_headers, payload)
    assert saved["verdict_notice"] == "Verdict auto: NON CONFORME (mise à l'arrêt)"

    stored = (await client.get(f"/api/inspections/{saved['id']}", headers=auth_headers)).json()
    assert stored["verdict"] == "NON_COMPLIANT"
    assert stored["sections"]["visuel"][0]["status"] == "NON_CONFORMING_BLOCKING"
    assert stored["next_vgp_date"] == "2025-02-28"


async def test_records_are_isolated_per_owner(client, auth_headers, record):
    saved = await _save(client, auth_headers, record_to_payload(record))
    other = {"Authorization": f"Bearer {create_session_token('autre@example.com')}"}
    resp = await client.get(f"/api/inspections/{saved['id']}", headers=other)
    assert resp.status_code == 404


async def test_evaluate(client, auth_headers):
    record = InspectionRecord(equipment_type=EquipmentType.TABLE_MOBILE, lift_height=1.8, nominal_capacity=1500)
    resp = await client.post("/api/inspections/evaluate", json=record_to_payload(record), headers=auth_headers)
    assert resp.status_code == 200
    view = resp.json()
    assert "garde-corps" in view["visible_sections"]
    assert "chassis" in view["visible_sections"]
    assert len(view["required_item_ids"]) == 28
    assert view["validation"]["valid"] is False
    assert view["validation"]["reason"] == "INCOMPLETE"
    assert len(view["validation"]["missing"]) == 28
    assert view["test_loads"]["dynamic"] == 1650
    assert view["test_loads"]["static"] == 1875
    assert view["show_vehicle_plate"] is False


async def test_evaluate_without_equipment_type(client, auth_headers):
    resp = await client.post("/api/inspections/evaluate", json={}, headers=auth_headers)
    assert resp.status_code == 200
    validation = resp.json()["validation"]
    assert validation["reason"] == "EQUIPMENT_TYPE_MISSING"
    assert validation["missing"] == []


async def test_unknown_status_rejected(client, auth_headers, record):
    payload = record_to_payload(record)
    payload["sections"]["docs"][0]["status"] = "peut-etre"
    resp = await client.post("/api/inspections/evaluate", json=payload, headers=auth_headers)
    assert resp.status_code == 422


async def test_report_refused_when_incomplete(client, auth_headers, record):
    saved = await _save(client, auth_headers, record_to_payload(record))
    resp = await client.get(f"/api/inspections/{saved['id']}/report", headers=auth_headers)
    assert resp.status_code == 422
    detail = resp.json()["detail"]
    assert "obligatoires" in detail["message"]
    assert len(detail["validation"]["missing"]) == 17

    resp = await client.get(f"/api/inspections/{saved['id']}/report?draft=true", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["is_draft"] is True


async def test_report_and_xlsx(client, auth_headers, record):
    saved = await _save(client, auth_headers, _complete_payload(record))

    resp = await client.get(f"/api/inspections/{saved['id']}/report", headers=auth_headers)
    assert resp.status_code == 200
    report = resp.json()
    assert report["report_number"].startswith("VGP-")
    assert report["verdict"] == "COMPLIANT"
    assert report["is_draft"] is False
    assert report["blocking_count"] == 0

    resp = await client.get(f"/api/inspections/{saved['id']}/report.xlsx", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith(
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )
    wb = load_workbook(io.BytesIO(resp.content))
    assert wb.active["A1"].value == f"Rapport VGP {report['report_number']}"


async def test_photo_upload(client, auth_headers, record):
    saved = await _save(client, auth_headers, record_to_payload(record))
    url = f"/api/inspections/{saved['id']}/photos"

    resp = await client.post(
        url, params={"item_id": "visuel-5"}, files={"file": ("fuite.png", _png(), "image/png")}, headers=auth_headers,
    )
    assert resp.status_code == 201
    photo = resp.json()
    assert photo["data"].startswith("data:image/jpeg;base64,")

    stored = (await client.get(f"/api/inspections/{saved['id']}", headers=auth_headers)).json()
    assert [p["id"] for p in stored["sections"]["visuel"][5]["photos"]] == [photo["id"]]

    resp = await client.post(
        url, params={"item_id": "visuel-99"}, files={"file": ("x.png", _png(), "image/png")}, headers=auth_headers,
    )
    assert resp.status_code == 404

    resp = await client.post(url, files={"file": ("notes.txt", b"texte", "text/plain")}, headers=auth_headers)
    assert resp.status_code == 400

    resp = await client.post(url, files={"file": ("faux.jpg", b"pas une image", "image/jpeg")}, headers=auth_headers)
    assert resp.status_code == 400


async def test_sync(client, auth_headers, record):
    saved = await _save(client, auth_headers, record_to_payload(record))
    resp = await client.post(
        "/api/sync",
        json={
            "last_sync": None,
            "local_data": [
                {"id": saved["id"], "updated_at": "2000-01-01T00:00:00Z"},
                {"id": "local-only", "updated_at": "2024-05-01T10:00:00Z"},
            ],
        },
        headers=auth_headers,
    )
    assert resp.status_code == 200
    assert resp.json() == {"to_upload": ["local-only"], "to_download": [saved["id"]]}


async def test_lowered_verdict_is_kept_until_statuses_worsen(client, auth_headers, record):
    payload = record_to_payload(record)
    payload["sections"]["docs"][2]["status"] = "NON_CONFORMING_RESERVATION"
    saved = await _save(client, auth_headers, payload)
    assert saved["verdict_notice"] == "Verdict auto: Conforme sous réserve"

    # L'inspecteur abaisse l'avis / The inspector lowers the verdict
    payload["id"] = saved["id"]
    payload["verdict"] = "COMPLIANT"
    again = await _save(client, auth_headers, payload)
    assert again["verdict_notice"] is None
    stored = (await client.get(f"/api/inspections/{saved['id']}", headers=auth_headers)).json()
    assert stored["verdict"] == "COMPLIANT"

    # Nouvelle NC bloquante : escalade / New blocking NC: escalation
    payload["sections"]["docs"][3]["status"] = "NON_CONFORMING_BLOCKING"
    worse = await _save(client, auth_headers, payload)
    assert worse["verdict_notice"] == "Verdict auto: NON CONFORME (mise à l'arrêt)"
    stored = (await client.get(f"/api/inspections/{saved['id']}", headers=auth_headers)).json()
    assert stored["verdict"] == "NON_COMPLIANT"


async def test_malformed_dates_rejected(client, auth_headers, record):
    payload = record_to_payload(record)
    payload["inspection_date"] = "2024-13-45"
    resp = await client.post("/api/inspections/evaluate", json=payload, headers=auth_headers)
    assert resp.status_code == 422
    resp = await client.post("/api/inspections/", json=payload, headers=auth_headers)
    assert resp.status_code == 422

    payload["inspection_date"] = ""
    payload["next_vgp_date"] = ""
    resp = await client.post("/api/inspections/evaluate", json=payload, headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["next_vgp_date"] is None


async def test_sync_rejects_malformed_timestamps(client, auth_headers):
    resp = await client.post("/api/sync", json={"last_sync": "yesterday", "local_data": []}, headers=auth_headers)
    assert resp.status_code == 422
    resp = await client.post(
        "/api/sync", json={"local_data": [{"id": "a", "updated_at": "pas une date"}]}, headers=auth_headers,
    )
    assert resp.status_code == 422


async def test_photo_delete(client, auth_headers, record):
    saved = await _save(client, auth_headers, record_to_payload(record))
    url = f"/api/inspections/{saved['id']}/photos"
    general = (await client.post(url, files={"file": ("vue.png", _png(), "image/png")}, headers=auth_headers)).json()
    item = (await client.post(
        url, params={"item_id": "essais-0"}, files={"file": ("essai.png", _png(), "image/png")}, headers=auth_headers,
    )).json()

    resp = await client.delete(f"{url}/{general['id']}", headers=auth_headers)
    assert resp.status_code == 204
    resp = await client.delete(f"{url}/{item['id']}", headers=auth_headers)
    assert resp.status_code == 204

    stored = (await client.get(f"/api/inspections/{saved['id']}", headers=auth_headers)).json()
    assert stored["general_photos"] == []
    assert stored["sections"]["essais"][0]["photos"] == []

    resp = await client.delete(f"{url}/{item['id']}", headers=auth_headers)
    assert resp.status_code == 404


async def test_xlsx_refused_with_validation_detail(client, auth_headers, record):
    saved = await _save(client, auth_headers, record_to_payload(record))
    resp = await client.get(f"/api/inspections/{saved['id']}/report.xlsx", headers=auth_headers)
    assert resp.status_code == 422
    detail = resp.json()["detail"]
    assert "obligatoires" in detail["message"]
    assert len(detail["validation"]["missing"]) == 17
