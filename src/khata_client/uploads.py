from __future__ import annotations

from pathlib import Path
from urllib.parse import urlparse
from urllib.request import url2pathname

from .validation import ClientValidationError, ValidationIssue

RECEIPT_FIELD = "receipt"
PRODUCT_IMAGE_FIELD = "product_image"
PROFILE_FILE_FIELD = "file"

_LOCAL_SCHEMES = {"file"}
_REMOTE_SCHEMES = {"http", "https"}
DEFAULT_IMAGE_MIME = "image/jpeg"


def is_remote_url(value: str | None) -> bool:
    if not value:
        return False
    parsed = urlparse(value)
    return parsed.scheme in _REMOTE_SCHEMES and bool(parsed.netloc)


def is_local_file_ref(value: str | None) -> bool:
    """True for ``file://`` URIs and plain filesystem paths."""
    if not value:
        return False
    parsed = urlparse(value)
    return parsed.scheme in _LOCAL_SCHEMES or parsed.scheme == ""


def local_path(ref: str) -> Path:
    parsed = urlparse(ref)
    if parsed.scheme in _LOCAL_SCHEMES:
        return Path(url2pathname(parsed.path))
    return Path(ref)


def guess_image_mime(filename: str) -> str:
    _, _, ext = filename.rpartition(".")
    if not ext or ext == filename:
        return DEFAULT_IMAGE_MIME
    ext = ext.lower()
    if ext == "jpg":
        return DEFAULT_IMAGE_MIME
    return f"image/{ext}"


def open_upload(ref: str) -> tuple[str, bytes, str]:
    """Read a local file reference into a ``(filename, content, mime)`` triple."""
    path = local_path(ref)
    filename = path.name or "image.jpg"
    try:
        content = path.read_bytes()
    except OSError as exc:
        raise ClientValidationError([ValidationIssue(field="file", reason=f"Cannot read {path.name}: {exc.strerror}")]) from exc
    return filename, content, guess_image_mime(filename)
