"""
Uploaded image storage.

Files are written under `UPLOADS_DIR` and referenced from rows by their public
URL (`/uploads/<name>`). The directory is served statically by `main.py`.
"""

from __future__ import annotations

import base64
import binascii
import logging
import re
import time
from pathlib import Path

from fastapi import UploadFile

from core import settings
from core.errors import ValidationError

UPLOADS_URL_PREFIX = "/uploads"
AVATAR_SUBDIR = "avatars/profilepics"

_DATA_URI_RE = re.compile(r"^data:(image/([A-Za-z0-9.+-]+));base64,(.*)$", re.DOTALL)

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


def public_url(relative_path: str) -> str:
    return f"{UPLOADS_URL_PREFIX}/{relative_path.lstrip('/')}"


def path_for_url(url: str) -> Path | None:
    """
    Map a `/uploads/...` URL back to a file path inside the uploads dir.
    Returns None for foreign URLs or paths escaping the directory.
    """
    prefix = UPLOADS_URL_PREFIX + "/"
    if not url or not url.startswith(prefix):
        return None
    root = settings.uploads_dir().resolve()
    candidate = (root / url[len(prefix):]).resolve()
    if root != candidate and root not in candidate.parents:
        return None
    return candidate


async def read_upload_bytes(file: UploadFile, max_bytes: int) -> bytes:
    """
    Read the upload into memory, enforcing a maximum size.
    """
    chunk_size = 1024 * 1024  # 1 MiB
    buf = bytearray()

    while True:
        chunk = await file.read(chunk_size)
        if not chunk:
            break
        buf.extend(chunk)
        if len(buf) > max_bytes:
            raise ValidationError(f"File too large. Max is {max_bytes} bytes.")

    return bytes(buf)


async def save_upload(file: UploadFile, *, field_name: str) -> str:
    """
    Store one multipart file as `<ms>-<field><ext>` and return its public URL.
    """
    data = await read_upload_bytes(file, max_bytes=settings.max_upload_bytes())
    ext = Path(file.filename or "").suffix.lower()

    root = settings.uploads_dir()
    root.mkdir(parents=True, exist_ok=True)

    name = f"{_now_ms()}-{field_name}{ext}"
    target = root / name
    suffix = 1
    while target.exists():
        name = f"{_now_ms()}-{suffix}-{field_name}{ext}"
        target = root / name
        suffix += 1

    target.write_bytes(data)
    return public_url(name)


async def save_uploads(files: list[UploadFile] | None, *, field_name: str) -> list[str]:
    """
    Store files in transmission order; the returned URLs keep that order.
    """
    urls: list[str] = []
    for file in files or []:
        urls.append(await save_upload(file, field_name=field_name))
    return urls


def is_data_uri(value: str | None) -> bool:
    return bool(value) and value.startswith("data:image")


def save_avatar_data_uri(data_uri: str, *, user_id: int) -> str | None:
    """
    Decode a `data:image/<ext>;base64,...` avatar and store it.

    Returns the public URL, or None when the data URI is malformed.
    """
    match = _DATA_URI_RE.match(data_uri or "")
    if match is None:
        logger.warning("avatar_data_uri_invalid user_id=%s", user_id)
        return None

    extension = match.group(2).lower()
    try:
        data = base64.b64decode(match.group(3), validate=False)
    except (binascii.Error, ValueError):
        logger.warning("avatar_base64_invalid user_id=%s", user_id)
        return None

    if len(data) > settings.max_upload_bytes():
        raise ValidationError(f"Avatar too large. Max is {settings.max_upload_bytes()} bytes.")

    avatar_dir = settings.uploads_dir() / AVATAR_SUBDIR
    avatar_dir.mkdir(parents=True, exist_ok=True)

    filename = f"avatar-{user_id}-{_now_ms()}.{extension}"
    (avatar_dir / filename).write_bytes(data)
    return public_url(f"{AVATAR_SUBDIR}/{filename}")


def remove_avatar(url: str | None) -> bool:
    """
    Delete a stored avatar file. Only files under the avatar folder are touched.
    """
    if not url or not url.startswith(public_url(AVATAR_SUBDIR) + "/"):
        return False
    path = path_for_url(url)
    if path is None:
        return False
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    except OSError as exc:
        logger.warning("avatar_remove_failed path=%s error=%s", path, exc)
        return False
    logger.info("avatar_removed path=%s", path)
    return True


def discard(urls: list[str]) -> None:
    """
    Remove files saved for a write that did not commit.
    """
    for url in urls:
        path = path_for_url(url)
        if path is None:
            continue
        try:
            path.unlink()
        except FileNotFoundError:
            continue
        except OSError as exc:
            logger.warning("upload_discard_failed path=%s error=%s", path, exc)
