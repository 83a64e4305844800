"""
Compression des photos d'inspection / Inspection photo compression.

Decodage, redimensionnement (1200 px max) et re-encodage JPEG, hors de la
boucle d'evenements. Chaque capture produit une seule PhotoRef.
Decode, downscale and re-encode off the event loop. Each capture yields
exactly one PhotoRef.
"""

import asyncio
import base64
import io
import logging
import uuid
from datetime import datetime, timezone

from PIL import Image, UnidentifiedImageError

from vgp_inspect.config import settings
from vgp_inspect.services.checklist import PhotoRef
from vgp_inspect.services.record import InspectionRecord, attach_photo

log = logging.getLogger(__name__)


class InvalidPhoto(ValueError):
    """Fichier illisible comme image / File cannot be read as an image."""


def compress_image(
    image_bytes: bytes,
    max_dimension: int | None = None,
    quality: int | None = None,
) -> bytes:
    """Redimensionner et re-encoder en JPEG / Downscale and re-encode as JPEG."""
    max_dimension = max_dimension or settings.PHOTO_MAX_DIMENSION
    quality = quality or settings.PHOTO_JPEG_QUALITY
    try:
        img = Image.open(io.BytesIO(image_bytes))
        img.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as exc:
        raise InvalidPhoto(str(exc)) from exc

    # JPEG sans alpha : fond blanc / JPEG has no alpha: white background
    if img.mode in ("RGBA", "LA", "P"):
        if img.mode == "P":
            img = img.convert("RGBA")
        background = Image.new("RGB", img.size, (255, 255, 255))
        background.paste(img, mask=img.split()[-1])
        img = background
    elif img.mode != "RGB":
        img = img.convert("RGB")

    width, height = img.size
    if max(width, height) > max_dimension:
        ratio = max_dimension / max(width, height)
        img = img.resize((round(width * ratio), round(height * ratio)), Image.LANCZOS)

    out = io.BytesIO()
    img.save(out, format="JPEG", quality=quality, optimize=True)
    compressed = out.getvalue()
    log.debug("Photo compressed %d -> %d bytes (%dx%d)", len(image_bytes), len(compressed), *img.size)
    return compressed


def make_photo_ref(image_bytes: bytes) -> PhotoRef:
    jpeg = compress_image(image_bytes)
    return PhotoRef(
        id=uuid.uuid4().hex[:12],
        data="data:image/jpeg;base64," + base64.b64encode(jpeg).decode("ascii"),
        timestamp=datetime.now(timezone.utc).isoformat(timespec="seconds"),
    )


async def capture_photo(record: InspectionRecord, image_bytes: bytes, item_id: str | None = None) -> PhotoRef:
    """Compresser dans un thread puis ajouter au dossier / Compress in a thread, then append."""
    photo = await asyncio.to_thread(make_photo_ref, image_bytes)
    attach_photo(record, photo, item_id)
    return photo
