"""Schemas inspection VGP / VGP inspection schemas."""

from datetime import date, datetime

from pydantic import BaseModel, Field, field_validator

from vgp_inspect.services.checklist import ItemStatus
from vgp_inspect.services.equipment_registry import EquipmentType, SectionId
from vgp_inspect.services.record import Verdict


# --- Photos ---

class PhotoPayload(BaseModel):
    id: str
    data: str  # data URL
    timestamp: str = ""


# --- Dossier (format d'echange) / Record (wire format) ---

class ChecklistItemPayload(BaseModel):
    """Resultat d'un item / Item result. `checked` = ancien format / legacy format."""
    id: str | None = None
    status: str = ItemStatus.UNSET.value
    note: str = ""
    photos: list[PhotoPayload] = []
    checked: bool | None = None

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, value):
        return ItemStatus.parse(value).value


class InspectionPayload(BaseModel):
    """Dossier complet / Full record."""
    id: str | None = Field(default=None, max_length=64)
    equipment_type: str | None = None
    ce_marking: bool = True
    nominal_capacity: float | None = Field(default=None, ge=0)
    lift_height: float | None = Field(default=None, ge=0)
    client: str = Field(default="", max_length=200)
    vehicle_plate: str = Field(default="", max_length=20)
    brand: str = ""
    serial_number: str = ""
    inspector: str = ""
    inspection_date: date | None = None
    next_vgp_date: date | None = None
    test_load: str = ""
    verdict: str = Verdict.UNSET.value
    observations: str = ""
    sections: dict[str, list[ChecklistItemPayload]] = {}
    general_photos: list[PhotoPayload] = []
    signature: str | None = None
    updated_at: str | None = None

    @field_validator("inspection_date", "next_vgp_date", mode="before")
    @classmethod
    def _blank_date(cls, value):
        return value or None

    @field_validator("verdict", mode="before")
    @classmethod
    def _normalize_verdict(cls, value):
        return Verdict.parse(value).value


class InspectionSummaryRead(BaseModel):
    id: str
    client: str | None = None
    vehicle_plate: str | None = None
    inspection_date: str | None = None
    verdict: str | None = None
    is_complete: bool = False
    updated_at: str

    model_config = {"from_attributes": True}


class InspectionListResponse(BaseModel):
    inspections: list[InspectionSummaryRead]


class SaveResponse(BaseModel):
    success: bool = True
    id: str
    updated_at: str
    verdict_notice: str | None = None


# --- Synchronisation / Sync ---

class SyncStamp(BaseModel):
    id: str
    updated_at: datetime | None = None


class SyncRequest(BaseModel):
    last_sync: datetime | None = None
    local_data: list[SyncStamp] = []


class SyncResponse(BaseModel):
    to_upload: list[str]
    to_download: list[str]


# --- Profils / Profiles ---

class EquipmentProfileRead(BaseModel):
    type: EquipmentType
    label: str
    applies_sections: list[SectionId]
    vgp_interval_months: int
    has_vehicle_plate: bool


# --- Vue derivee / Derived view ---

class MissingItemRead(BaseModel):
    id: str
    label: str
    section: SectionId


class ObservationWarningRead(BaseModel):
    id: str
    label: str
    section: SectionId
    status: ItemStatus


class ValidationRead(BaseModel):
    valid: bool
    missing: list[MissingItemRead] = []
    message: str = ""
    reason: str | None = None
    warnings: list[ObservationWarningRead] = []


class SectionProgressRead(BaseModel):
    section: SectionId
    completed: int
    total: int
    complete: bool


class ChargesRead(BaseModel):
    dynamic: int
    static: int
    dynamic_coefficient: float
    static_coefficient: float


class DerivedViewRead(BaseModel):
    visible_sections: list[SectionId]
    required_item_ids: list[str]
    section_progress: list[SectionProgressRead]
    test_loads: ChargesRead
    validation: ValidationRead
    suggested_verdict: Verdict
    verdict_notice: str | None = None
    next_vgp_date: str | None = None
    show_vehicle_plate: bool


# --- Rapport / Report ---

class ReportLineRead(BaseModel):
    item_id: str
    label: str
    required: bool
    status: ItemStatus
    symbol: str
    note: str


class ReportSectionRead(BaseModel):
    section: SectionId
    title: str
    lines: list[ReportLineRead]


class PhotoAnnexRead(BaseModel):
    caption: str


class ReportRead(BaseModel):
    report_number: str
    generated_at: str
    inspection_id: str | None = None
    equipment_label: str
    header: dict[str, str]
    test_loads: ChargesRead
    sections: list[ReportSectionRead]
    reservation_count: int
    blocking_count: int
    reservation_notes: list[str]
    verdict: Verdict
    verdict_text: str
    corrective_actions: str
    observations: str
    photos: list[PhotoAnnexRead]
    is_draft: bool
    warnings: list[str] = []

