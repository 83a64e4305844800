"""
Routes de synchronisation / Sync routes.
Le client envoie ses horodatages, le serveur repond quoi envoyer et quoi recuperer.
The client sends its timestamps; the server answers what to push and what to pull.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from vgp_inspect.api.deps import Owner, get_current_owner
from vgp_inspect.database import get_db
from vgp_inspect.models.stored_inspection import StoredInspection
from vgp_inspect.schemas.inspection import SyncRequest, SyncResponse
from vgp_inspect.services.sync_service import RecordStamp, plan_sync

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=SyncResponse)
async def sync_inspections(
    data: SyncRequest,
    db: AsyncSession = Depends(get_db),
    owner: Owner = Depends(get_current_owner),
):
    """Plan de synchronisation, le plus recent gagne / Sync plan, last write wins."""
    result = await db.execute(
        select(StoredInspection.id, StoredInspection.updated_at)
        .where(StoredInspection.owner == owner.namespace)
    )
    remote = [RecordStamp(id=row.id, updated_at=row.updated_at) for row in result.all()]
    local = [RecordStamp(id=s.id, updated_at=s.updated_at) for s in data.local_data]

    plan = plan_sync(local, remote, data.last_sync)
    logger.info(
        "Sync for %s: %d to upload, %d to download",
        owner.namespace, len(plan.to_upload), len(plan.to_download),
    )
    return SyncResponse(to_upload=plan.to_upload, to_download=plan.to_download)
