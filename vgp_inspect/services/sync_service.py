"""
Planification de la synchronisation / Sync planning.
Le plus recent gagne, par dossier / Last write wins, per record.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class RecordStamp:
    id: str
    updated_at: str | datetime | None = None


@dataclass
class SyncPlan:
    to_upload: list[str] = field(default_factory=list)
    to_download: list[str] = field(default_factory=list)


def _parse(value: str | datetime | None) -> datetime:
    """Horodatage absent ou illisible = epoque / Missing or unreadable stamp = epoch."""
    if not value:
        return _EPOCH
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return _EPOCH
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def plan_sync(
    local: list[RecordStamp],
    remote: list[RecordStamp],
    last_sync: str | datetime | None = None,
) -> SyncPlan:
    """Comparer les horodatages local / distant / Compare local and remote timestamps.

    Un dossier distant absent en local n'est telecharge que s'il a change
    depuis la derniere synchronisation.
    """
    plan = SyncPlan()
    remote_by_id = {r.id: r for r in remote}
    local_ids = {r.id for r in local}
    since = _parse(last_sync)

    for rec in local:
        server = remote_by_id.get(rec.id)
        if server is None:
            plan.to_upload.append(rec.id)
            continue
        local_date = _parse(rec.updated_at)
        server_date = _parse(server.updated_at)
        if local_date > server_date:
            plan.to_upload.append(rec.id)
        elif server_date > local_date:
            plan.to_download.append(server.id)

    for server in remote:
        if server.id not in local_ids and _parse(server.updated_at) > since:
            plan.to_download.append(server.id)

    return plan
