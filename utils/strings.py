# utils/strings.py
from __future__ import annotations
import mimetypes
import re
import unicodedata
from typing import Optional
from urllib.parse import urlparse

_unsafe_filename_re = re.compile(r"[\x00-\x1f/\\:*?\"<>|]+")
_ext_re = re.compile(r"^\.[A-Za-z0-9]{1,8}$")

MAX_FILENAME = 120
MAX_NAME_BYTES = 255  # per path component on common filesystems


def _split_ext(name: str) -> tuple[str, str]:
    dot = name.rfind(".")
    if dot > 0 and _ext_re.match(name[dot:]):
        return name[:dot], name[dot:]
    return name, ""


def safe_filename(name: str, fallback: str = "file", prefix: str = "") -> str:
    """
    Keep an attachment's own name on disk, minus anything that could escape the
    export dir or upset common filesystems. Extension is preserved when truncating.

    The result is `prefix` + the cleaned name, cut so the whole component stays
    within MAX_NAME_BYTES of UTF-8.

    >>> safe_filename("../notes/week 1.pdf")
    'notes_week 1.pdf'
    """
    cleaned = unicodedata.normalize("NFC", name or "")
    cleaned = _unsafe_filename_re.sub("_", cleaned).strip(" ._")
    if not cleaned:
        cleaned = fallback
    stem, ext = _split_ext(cleaned)
    if len(cleaned) > MAX_FILENAME:
        stem = stem[: MAX_FILENAME - len(ext)]

    budget = MAX_NAME_BYTES - len((prefix + ext).encode("utf-8"))
    encoded = stem.encode("utf-8")
    if len(encoded) > budget:
        # cut on a character boundary
        stem = encoded[: max(budget, 0)].decode("utf-8", "ignore").rstrip(" .")
    return f"{prefix}{stem}{ext}"


def guess_extension(content_type: Optional[str], url: Optional[str] = None, default: str = ".bin") -> str:
    """
    Pick a file extension for a picture/banner download:
    the URL's own extension first, then the Content-Type, then `default`.
    """
    if url:
        path = urlparse(url).path
        dot = path.rfind(".")
        if dot > path.rfind("/"):
            ext = path[dot:].lower()
            if _ext_re.match(ext):
                return ext
    if content_type:
        mime = content_type.split(";")[0].strip().lower()
        ext = mimetypes.guess_extension(mime)
        if ext:
            return ".jpg" if ext == ".jpe" else ext
    return default
