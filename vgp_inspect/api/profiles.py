"""Routes profils d'equipement / Equipment profile routes."""

from fastapi import APIRouter

from vgp_inspect.schemas.inspection import EquipmentProfileRead
from vgp_inspect.services.equipment_registry import SectionId, all_profiles

router = APIRouter()


@router.get("/", response_model=list[EquipmentProfileRead])
async def list_equipment_types():
    """Types d'equipement et sections conditionnelles / Equipment types and conditional sections."""
    return [
        EquipmentProfileRead(
            type=p.type,
            label=p.label,
            applies_sections=[s for s in SectionId if s in p.applies_sections],
            vgp_interval_months=p.vgp_interval_months,
            has_vehicle_plate=p.has_vehicle_plate,
        )
        for p in all_profiles()
    ]
