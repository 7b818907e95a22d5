"""Validation and storage of uploaded files.

Everything lands in Django's default storage under ``uploads/<kind>/`` with a
random name; the original filename is only echoed back to the client.
"""

from __future__ import annotations

import io
import logging
import posixpath
import uuid
from contextlib import suppress
from dataclasses import asdict
from dataclasses import dataclass
from pathlib import Path

from django.core.files.base import ContentFile
from django.core.files.storage import default_storage
from PIL import Image
from PIL import ImageOps
from PIL import UnidentifiedImageError
from rest_framework import serializers

logger = logging.getLogger(__name__)

UPLOAD_ROOT = "uploads"

ALLOWED_IMAGE_EXTS = {".jpg", ".jpeg", ".png", ".gif", ".webp"}
ALLOWED_VIDEO_EXTS = {".mp4", ".webm", ".ogg", ".ogv", ".mov"}
ALLOWED_DOC_EXTS = {".pdf", ".doc", ".docx", ".txt"}

DEFAULT_IMAGE_WIDTH = 800
DEFAULT_IMAGE_HEIGHT = 600
DEFAULT_IMAGE_QUALITY = 80


class UnsafePathError(ValueError):
    pass


@dataclass(frozen=True)
class StoredFile:
    name: str
    url: str
    size: int
    original_name: str
    content_type: str = ""
    width: int | None = None
    height: int | None = None

    def as_dict(self) -> dict:
        return {k: v for k, v in asdict(self).items() if v is not None}


def validate_upload(f, *, allowed_exts: set[str], max_mb: int):
    size_mb = (getattr(f, "size", 0) or 0) / (1024 * 1024)
    if size_mb > max_mb:
        msg = f"File too large: {size_mb:.1f} MB > {max_mb} MB"
        raise serializers.ValidationError(msg)
    ext = Path(getattr(f, "name", "")).suffix
    if ext.lower() not in allowed_exts:
        allowed = ", ".join(sorted(allowed_exts))
        msg = f"Unsupported file type '{ext}'. Allowed: {allowed}"
        raise serializers.ValidationError(msg)
    return f


def validate_image(f, *, max_mb: int):
    validate_upload(f, allowed_exts=ALLOWED_IMAGE_EXTS, max_mb=max_mb)
    try:
        # Pillow validation to ensure file is a real image
        Image.open(f).verify()
    except (UnidentifiedImageError, OSError) as exc:
        msg = "Invalid image file"
        raise serializers.ValidationError(msg) from exc
    finally:
        with suppress(Exception):
            f.seek(0)
    return f


def _new_name(kind: str, ext: str) -> str:
    return f"{UPLOAD_ROOT}/{kind}/{uuid.uuid4().hex}{ext.lower()}"


def store_file(f, kind: str) -> StoredFile:
    """Save ``f`` as-is under ``uploads/<kind>/``."""
    original = getattr(f, "name", "") or "file"
    name = default_storage.save(_new_name(kind, Path(original).suffix), f)
    logger.info("Stored upload %s (%s bytes)", name, f.size)
    return StoredFile(
        name=name,
        url=default_storage.url(name),
        size=f.size,
        original_name=Path(original).name,
        content_type=getattr(f, "content_type", "") or "",
    )


def store_image_as_webp(
    f,
    *,
    width: int = DEFAULT_IMAGE_WIDTH,
    height: int = DEFAULT_IMAGE_HEIGHT,
    quality: int = DEFAULT_IMAGE_QUALITY,
    kind: str = "images",
) -> StoredFile:
    """Shrink the image to fit ``width`` x ``height`` and store it as WebP."""
    with Image.open(f) as source:
        image = ImageOps.exif_transpose(source)
        if image.mode not in {"RGB", "RGBA"}:
            image = image.convert("RGBA" if "transparency" in image.info else "RGB")
        image.thumbnail((width, height), Image.Resampling.LANCZOS)
        buffer = io.BytesIO()
        image.save(buffer, format="WEBP", quality=quality)
        final_width, final_height = image.size

    content = ContentFile(buffer.getvalue())
    name = default_storage.save(_new_name(kind, ".webp"), content)
    logger.info("Stored image %s (%sx%s)", name, final_width, final_height)
    return StoredFile(
        name=name,
        url=default_storage.url(name),
        size=content.size,
        original_name=Path(getattr(f, "name", "") or "image").name,
        content_type="image/webp",
        width=final_width,
        height=final_height,
    )


def resolve_upload_name(filename: str) -> str:
    """Map a client supplied name to a storage name inside ``uploads/``."""
    filename = (filename or "").strip().replace("\\", "/")
    if not filename or filename.startswith("/"):
        raise UnsafePathError(filename)
    if ".." in filename.split("/"):
        raise UnsafePathError(filename)
    if filename.startswith(f"{UPLOAD_ROOT}/"):
        filename = filename[len(UPLOAD_ROOT) + 1 :]
    name = posixpath.normpath(f"{UPLOAD_ROOT}/{filename}")
    if not name.startswith(f"{UPLOAD_ROOT}/"):
        raise UnsafePathError(filename)
    return name


def delete_upload(filename: str) -> bool:
    """Delete a stored upload; False when it does not exist."""
    name = resolve_upload_name(filename)
    if not default_storage.exists(name):
        return False
    default_storage.delete(name)
    logger.info("Deleted upload %s", name)
    return True
