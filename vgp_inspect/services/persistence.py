"""
Collaborateurs de persistance / Persistence collaborators.

Le coeur n'exige que save / load / list. Stockage local (fichier JSON) ou
distant (API authentifiee par jeton porteur).
The core only needs save / load / list. Local (JSON file) or remote
(bearer-token authenticated API) storage.
"""

import json
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol

import httpx

from vgp_inspect.config import settings
from vgp_inspect.services.record import InspectionRecord, record_from_payload, record_to_payload

log = logging.getLogger(__name__)


class PersistenceError(Exception):
    """Stockage injoignable ou en erreur / Storage unreachable or failing."""


@dataclass(frozen=True)
class SaveAck:
    id: str
    updated_at: str


@dataclass(frozen=True)
class InspectionSummary:
    id: str
    client: str | None
    vehicle_plate: str | None
    inspection_date: str | None
    verdict: str | None
    updated_at: str | None


@dataclass(frozen=True)
class SaveOutcome:
    ok: bool
    ack: SaveAck | None = None
    error: str | None = None


class InspectionStore(Protocol):
    def save(self, record: InspectionRecord) -> SaveAck: ...

    def load(self, id: str) -> InspectionRecord | None: ...

    def list(self) -> list[InspectionSummary]: ...


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def _summary(data: dict) -> InspectionSummary:
    return InspectionSummary(
        id=data["id"],
        client=data.get("client"),
        vehicle_plate=data.get("vehicle_plate"),
        inspection_date=data.get("inspection_date"),
        verdict=data.get("verdict"),
        updated_at=data.get("updated_at"),
    )


class LocalInspectionStore:
    """Fichier JSON, plus recent en tete / JSON file, newest first."""

    def __init__(self, path: str | Path | None = None):
        self.path = Path(path or settings.LOCAL_STORE_PATH)

    def _read(self) -> list[dict]:
        if not self.path.exists():
            return []
        try:
            return json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise PersistenceError(f"Local store unreadable: {exc}") from exc

    def _write(self, payloads: list[dict]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self.path.with_suffix(".tmp")
            tmp.write_text(json.dumps(payloads, ensure_ascii=False), encoding="utf-8")
            tmp.replace(self.path)
        except OSError as exc:
            raise PersistenceError(f"Local store not writable: {exc}") from exc

    def save(self, record: InspectionRecord) -> SaveAck:
        payloads = self._read()
        payload = record_to_payload(record)
        payload["id"] = record.id or uuid.uuid4().hex
        payload["updated_at"] = _now()

        for i, existing in enumerate(payloads):
            if existing.get("id") == payload["id"]:
                payloads[i] = payload
                break
        else:
            payloads.insert(0, payload)

        self._write(payloads)
        return SaveAck(id=payload["id"], updated_at=payload["updated_at"])

    def load(self, id: str) -> InspectionRecord | None:
        for payload in self._read():
            if payload.get("id") == id:
                return record_from_payload(payload)
        return None

    def list(self) -> list[InspectionSummary]:
        return [_summary(p) for p in self._read() if p.get("id")]

    def delete(self, id: str) -> bool:
        payloads = self._read()
        kept = [p for p in payloads if p.get("id") != id]
        if len(kept) == len(payloads):
            return False
        self._write(kept)
        return True


class RemoteInspectionStore:
    """Client de l'API VGP / VGP API client."""

    def __init__(
        self,
        token: str,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        self._client = httpx.Client(
            base_url=base_url or settings.REMOTE_API_URL,
            headers={"Authorization": f"Bearer {token}"},
            timeout=timeout or settings.REMOTE_TIMEOUT_SECONDS,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            response = self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            raise PersistenceError(f"Remote store unreachable: {exc}") from exc
        if response.status_code == 404:
            return response
        if response.is_error:
            raise PersistenceError(f"Remote store error {response.status_code}: {response.text}")
        return response

    def save(self, record: InspectionRecord) -> SaveAck:
        response = self._request("POST", "/api/inspections/", json=record_to_payload(record))
        data = response.json()
        return SaveAck(id=data["id"], updated_at=data["updated_at"])

    def load(self, id: str) -> InspectionRecord | None:
        response = self._request("GET", f"/api/inspections/{id}")
        if response.status_code == 404:
            return None
        return record_from_payload(response.json())

    def list(self) -> list[InspectionSummary]:
        response = self._request("GET", "/api/inspections/")
        return [_summary(item) for item in response.json()["inspections"]]


def save_record(record: InspectionRecord, store: InspectionStore) -> SaveOutcome:
    """Sauvegarder sans perte : en cas d'echec le dossier reste intact et la
    sauvegarde peut etre relancee / Save without data loss: on failure the
    record is left untouched and the save can be retried.
    """
    try:
        ack = store.save(record)
    except PersistenceError as exc:
        log.warning("Save failed for inspection %s: %s", record.id, exc)
        return SaveOutcome(ok=False, error=str(exc))
    record.id = ack.id
    record.updated_at = ack.updated_at
    log.info("Inspection %s saved", ack.id)
    return SaveOutcome(ok=True, ack=ack)
