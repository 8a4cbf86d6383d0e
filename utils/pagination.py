# utils/pagination.py
from __future__ import annotations
from typing import Any, Dict, Iterator, List, Optional

from utils.api import SchoologyAPI
from utils.errors import PayloadError

DEFAULT_LIMIT = 50


def next_link(page: Dict[str, Any]) -> Optional[str]:
    """Schoology listings carry the next page as links.next (absent on the last page)."""
    links = page.get("links")
    if isinstance(links, dict):
        nxt = links.get("next")
        if isinstance(nxt, str) and nxt:
            return nxt
    return None


def iter_pages(
    api: SchoologyAPI,
    endpoint: str,
    params: Optional[Dict[str, Any]] = None,
    *,
    max_pages: int = 10_000,
) -> Iterator[Dict[str, Any]]:
    """
    Yield each page of a listing, following links.next.
    Only the first request sends `params`; follow-ups use the absolute next URL.
    """
    url: Optional[str] = endpoint
    first = True
    seen = set()
    while url:
        if url in seen or len(seen) >= max_pages:
            raise PayloadError("pagination does not terminate", url=url)
        seen.add(url)
        page = api.get_json(url, params=params if first else None)
        if not isinstance(page, dict):
            raise PayloadError("expected a JSON object page", url=url)
        first = False
        yield page
        url = next_link(page)


def get_items(page: Dict[str, Any], field: str) -> List[Dict[str, Any]]:
    """
    Return the listing array of a page (e.g. "section", "update", "document").
    A missing field is an empty listing; a non-list value is a malformed page.
    """
    items = page.get(field)
    if items is None:
        return []
    if not isinstance(items, list):
        raise PayloadError(f"listing field {field!r} is not an array")
    return [it for it in items if isinstance(it, dict)]


def get_int(obj: Dict[str, Any], key: str, what: str) -> int:
    """Schoology returns ids as numbers or numeric strings; normalize to int."""
    value = obj.get(key)
    if isinstance(value, bool):
        value = None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isascii() and value.strip().isdigit():
        return int(value.strip())
    raise PayloadError(f"failed to get {what}: {key!r}={value!r}")


def get_optional_int(obj: Dict[str, Any], key: str) -> Optional[int]:
    try:
        return get_int(obj, key, key)
    except PayloadError:
        return None
