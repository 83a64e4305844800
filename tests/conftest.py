"""Configuration des tests / Test configuration."""

import os
import tempfile
import uuid

# Base de test isolee, avant tout import de l'application / Isolated test DB, before importing the app
_TMP_DIR = tempfile.mkdtemp(prefix="vgp_inspect_tests_")
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{_TMP_DIR}/test.db")
os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("RATE_LIMIT_SAVE", "1000/minute")
os.environ.setdefault("LOCAL_STORE_PATH", f"{_TMP_DIR}/inspections.json")

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from vgp_inspect.database import engine, init_db  # noqa: E402
from vgp_inspect.main import app  # noqa: E402
from vgp_inspect.services.equipment_registry import EquipmentType  # noqa: E402
from vgp_inspect.services.record import InspectionRecord  # noqa: E402
from vgp_inspect.utils.auth import create_session_token  # noqa: E402


@pytest.fixture
async def client():
    await init_db()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    await engine.dispose()


@pytest.fixture
def inspector_email():
    return f"inspecteur-{uuid.uuid4().hex[:8]}@example.com"


@pytest.fixture
def auth_headers(inspector_email):
    return {"Authorization": f"Bearer {create_session_token(inspector_email)}"}


@pytest.fixture
def record():
    """Dossier vierge d'un hayon rabattable / Blank tailgate record."""
    return InspectionRecord(equipment_type=EquipmentType.HAYON_RABATTABLE)
