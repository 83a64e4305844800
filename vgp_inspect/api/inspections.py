"""Routes inspections VGP / VGP inspection routes."""

import asyncio
import dataclasses
import io
import json
import logging
import uuid
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, File, HTTPException, Query, Request, UploadFile
from fastapi.responses import StreamingResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from vgp_inspect.api.deps import Owner, get_current_owner
from vgp_inspect.config import settings
from vgp_inspect.database import get_db
from vgp_inspect.models.audit import AuditLog
from vgp_inspect.models.stored_inspection import StoredInspection
from vgp_inspect.rate_limit import limiter
from vgp_inspect.schemas.inspection import (
    ChargesRead,
    DerivedViewRead,
    InspectionListResponse,
    InspectionPayload,
    InspectionSummaryRead,
    MissingItemRead,
    ObservationWarningRead,
    PhotoPayload,
    ReportRead,
    SaveResponse,
    SectionProgressRead,
    ValidationRead,
)
from vgp_inspect.services.checklist import UnknownChecklistItem
from vgp_inspect.services.derived_view import recompute_derived
from vgp_inspect.services.equipment_registry import next_vgp_date
from vgp_inspect.services.export_service import ExportService
from vgp_inspect.services.photo_service import InvalidPhoto, make_photo_ref
from vgp_inspect.services.record import (
    InspectionRecord,
    attach_photo,
    record_from_payload,
    record_to_payload,
    remove_photo,
)
from vgp_inspect.services.report_builder import ReportCompilation, compile_report
from vgp_inspect.services.validation import ValidationResult, validate
from vgp_inspect.services.verdict import apply_new_escalation
from vgp_inspect.utils.plate import format_plate

logger = logging.getLogger(__name__)

router = APIRouter()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def _validation_to_read(result: ValidationResult) -> ValidationRead:
    return ValidationRead(
        valid=result.valid,
        missing=[MissingItemRead(id=m.id, label=m.label, section=m.section) for m in result.missing],
        message=result.message,
        reason=result.reason,
        warnings=[
            ObservationWarningRead(id=w.id, label=w.label, section=w.section, status=w.status)
            for w in result.warnings
        ],
    )


def _report_refused(compilation: ReportCompilation) -> HTTPException:
    """422 avec le detail de validation / 422 carrying the validation detail."""
    return HTTPException(
        status_code=422,
        detail={
            "message": compilation.error,
            "validation": _validation_to_read(compilation.validation).model_dump(mode="json"),
        },
    )


def _record_from_body(data: InspectionPayload) -> InspectionRecord:
    return record_from_payload(data.model_dump())


async def _get_stored(db: AsyncSession, owner: Owner, inspection_id: str) -> StoredInspection:
    stored = await db.get(StoredInspection, {"id": inspection_id, "owner": owner.namespace})
    if not stored:
        raise HTTPException(status_code=404, detail="Inspection not found")
    return stored


def _load_record(stored: StoredInspection) -> InspectionRecord:
    return record_from_payload(json.loads(stored.payload))


def _write_stored(stored: StoredInspection, record: InspectionRecord) -> None:
    """Copier le dossier dans la ligne stockee / Copy the record into the stored row."""
    stored.client = record.client or None
    stored.vehicle_plate = record.vehicle_plate or None
    stored.inspection_date = record.inspection_date.isoformat() if record.inspection_date else None
    stored.verdict = record.verdict.value
    stored.is_complete = validate(record).valid
    stored.updated_at = record.updated_at
    stored.payload = json.dumps(record_to_payload(record), ensure_ascii=False)


async def _log_audit(
    db: AsyncSession,
    entity_id: str,
    action: str,
    owner: Owner,
    changes: dict | None = None,
) -> None:
    """Enregistrer une action dans l'historique / Log an action to audit_logs."""
    db.add(AuditLog(
        entity_type="inspection",
        entity_id=entity_id,
        action=action,
        changes=json.dumps(changes, ensure_ascii=False) if changes else None,
        user=owner.email,
        timestamp=_now(),
    ))


@router.get("/", response_model=InspectionListResponse)
async def list_inspections(
    db: AsyncSession = Depends(get_db),
    owner: Owner = Depends(get_current_owner),
):
    """Lister les dossiers, plus recent en tete / List records, newest first."""
    result = await db.execute(
        select(StoredInspection)
        .where(StoredInspection.owner == owner.namespace)
        .order_by(StoredInspection.updated_at.desc())
    )
    return InspectionListResponse(
        inspections=[InspectionSummaryRead.model_validate(s) for s in result.scalars().all()]
    )


@router.post("/", response_model=SaveResponse)
@limiter.limit(settings.RATE_LIMIT_SAVE)
async def save_inspection(
    request: Request,
    data: InspectionPayload,
    db: AsyncSession = Depends(get_db),
    owner: Owner = Depends(get_current_owner),
):
    """Creer ou remplacer un dossier / Create or replace a record.

    Un dossier incomplet reste enregistrable (brouillon).
    An incomplete record can still be saved (draft).
    """
    record = _record_from_body(data)
    record.vehicle_plate = format_plate(record.vehicle_plate)
    if record.inspection_date and record.next_vgp_date is None:
        record.next_vgp_date = next_vgp_date(record.equipment_type, record.inspection_date)

    stored = None
    if record.id:
        stored = await db.get(StoredInspection, {"id": record.id, "owner": owner.namespace})
    else:
        record.id = uuid.uuid4().hex

    # Escalade uniquement sur nouveaux statuts / Escalate only on new statuses
    previous_items = _load_record(stored).checklist.items() if stored is not None else ()
    notice = apply_new_escalation(record, previous_items)

    now = _now()
    record.updated_at = now
    if stored is None:
        stored = StoredInspection(id=record.id, owner=owner.namespace, created_at=now)
        db.add(stored)
    _write_stored(stored, record)

    await _log_audit(db, record.id, "SAVE", owner, {"verdict": record.verdict.value, "complete": stored.is_complete})
    await db.flush()
    logger.info("Inspection %s saved (complete=%s)", record.id, stored.is_complete)
    return SaveResponse(id=record.id, updated_at=now, verdict_notice=notice)


@router.post("/evaluate", response_model=DerivedViewRead)
async def evaluate_inspection(
    data: InspectionPayload,
    owner: Owner = Depends(get_current_owner),
):
    """Vue derivee sans enregistrement / Derived view without saving."""
    view = recompute_derived(_record_from_body(data))
    return DerivedViewRead(
        visible_sections=view.visible_sections,
        required_item_ids=view.required_item_ids,
        section_progress=[
            SectionProgressRead(section=p.section, completed=p.completed, total=p.total, complete=p.complete)
            for p in view.section_progress
        ],
        test_loads=ChargesRead(**dataclasses.asdict(view.test_loads)),
        validation=_validation_to_read(view.validation),
        suggested_verdict=view.suggested_verdict,
        verdict_notice=view.verdict_notice,
        next_vgp_date=view.next_vgp_date.isoformat() if view.next_vgp_date else None,
        show_vehicle_plate=view.show_vehicle_plate,
    )


@router.get("/{inspection_id}")
async def get_inspection(
    inspection_id: str,
    db: AsyncSession = Depends(get_db),
    owner: Owner = Depends(get_current_owner),
):
    """Dossier complet / Full record."""
    stored = await _get_stored(db, owner, inspection_id)
    return json.loads(stored.payload)


@router.delete("/{inspection_id}", status_code=204)
async def delete_inspection(
    inspection_id: str,
    db: AsyncSession = Depends(get_db),
    owner: Owner = Depends(get_current_owner),
):
    stored = await _get_stored(db, owner, inspection_id)
    await db.delete(stored)
    await _log_audit(db, inspection_id, "DELETE", owner)
    logger.info("Inspection %s deleted", inspection_id)


@router.get("/{inspection_id}/report", response_model=ReportRead)
async def get_report(
    inspection_id: str,
    draft: bool = Query(default=False),
    db: AsyncSession = Depends(get_db),
    owner: Owner = Depends(get_current_owner),
):
    """Rapport structure ; refuse si incomplet sauf brouillon / Structured report;
    refused when incomplete unless a draft is requested."""
    stored = await _get_stored(db, owner, inspection_id)
    compilation = compile_report(_load_record(stored), allow_draft=draft)
    if not compilation.ok:
        raise _report_refused(compilation)
    return ReportRead.model_validate(dataclasses.asdict(compilation.document))


@router.get("/{inspection_id}/report.xlsx")
async def export_report_xlsx(
    inspection_id: str,
    draft: bool = Query(default=False),
    db: AsyncSession = Depends(get_db),
    owner: Owner = Depends(get_current_owner),
):
    """Export Excel du rapport / Report Excel export."""
    stored = await _get_stored(db, owner, inspection_id)
    compilation = compile_report(_load_record(stored), allow_draft=draft)
    if not compilation.ok:
        raise _report_refused(compilation)

    document = compilation.document
    content = ExportService.report_to_xlsx(document)
    return StreamingResponse(
        io.BytesIO(content),
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f'attachment; filename="{document.report_number}.xlsx"'},
    )


@router.post("/{inspection_id}/photos", response_model=PhotoPayload, status_code=201)
async def upload_photo(
    inspection_id: str,
    file: UploadFile = File(...),
    item_id: str | None = None,
    db: AsyncSession = Depends(get_db),
    owner: Owner = Depends(get_current_owner),
):
    """Upload photo, compressee avant stockage / Upload photo, compressed before storage."""
    stored = await _get_stored(db, owner, inspection_id)
    record = _load_record(stored)

    # Verifier nombre de photos / Check photo count
    if record.photo_count() >= settings.MAX_PHOTOS_PER_INSPECTION:
        raise HTTPException(
            status_code=400, detail=f"Max {settings.MAX_PHOTOS_PER_INSPECTION} photos par inspection"
        )
    if item_id is not None and item_id not in record.checklist:
        raise HTTPException(status_code=404, detail="Checklist item not found")

    content = await file.read()
    if len(content) > settings.MAX_PHOTO_SIZE:
        raise HTTPException(status_code=400, detail="Photo trop volumineuse")

    mime = file.content_type or "image/jpeg"
    if not mime.startswith("image/"):
        raise HTTPException(status_code=400, detail="Seules les images sont acceptees")

    try:
        photo = await asyncio.to_thread(make_photo_ref, content)
        attach_photo(record, photo, item_id)
    except InvalidPhoto:
        raise HTTPException(status_code=400, detail="Image illisible")
    except UnknownChecklistItem:
        raise HTTPException(status_code=404, detail="Checklist item not found")

    record.updated_at = _now()
    _write_stored(stored, record)
    await _log_audit(db, inspection_id, "PHOTO", owner, {"item_id": item_id, "photo_id": photo.id})
    await db.flush()
    return PhotoPayload(id=photo.id, data=photo.data, timestamp=photo.timestamp)


@router.delete("/{inspection_id}/photos/{photo_id}", status_code=204)
async def delete_photo(
    inspection_id: str,
    photo_id: str,
    db: AsyncSession = Depends(get_db),
    owner: Owner = Depends(get_current_owner),
):
    """Supprimer une photo generale ou d'item / Delete a general or item photo."""
    stored = await _get_stored(db, owner, inspection_id)
    record = _load_record(stored)
    if not remove_photo(record, photo_id):
        raise HTTPException(status_code=404, detail="Photo not found")

    record.updated_at = _now()
    _write_stored(stored, record)
    await _log_audit(db, inspection_id, "PHOTO_DELETE", owner, {"photo_id": photo_id})
    logger.info("Photo %s removed from inspection %s", photo_id, inspection_id)
