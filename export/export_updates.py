# export/export_updates.py
from __future__ import annotations

from typing import Any, Dict, List

from logging_setup import get_logger
from utils.pagination import DEFAULT_LIMIT, get_int, get_items, get_optional_int, iter_pages
from export.context import ExportContext
from export.export_files import export_attachments
from export.export_user import export_referenced_user

UPDATES_DIR = "updates"
FEED_QUERY = {
    "start": 0,
    "limit": DEFAULT_LIMIT,
    "created_offset": 0,
    "with_attachments": "TRUE",
    "richtext": 1,
}
# valueless flags the feed expects in the query string
FEED_ENDPOINT = "recent?extended&options"


def comment_list(update: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Comments arrive either as a bare array or wrapped as {"comment": [...]}."""
    comments = update.get("comments")
    if isinstance(comments, list):
        return [c for c in comments if isinstance(c, dict)]
    if isinstance(comments, dict):
        return get_items(comments, "comment")
    return []


def export_update_children(ctx: ExportContext, subdir: str, prefix: str, update: Dict[str, Any]) -> None:
    """Author, commenters and file attachments of one update."""
    export_referenced_user(ctx, get_optional_int(update, "uid"))
    for comment in comment_list(update):
        export_referenced_user(ctx, get_optional_int(comment, "uid"))
    export_attachments(ctx, subdir, prefix, update)


def export_update_pages(
    ctx: ExportContext,
    endpoint: str,
    subdir: str,
    page_prefix: str,
    item_prefix: str,
    params: Dict[str, Any] | None = None,
) -> int:
    """
    Save each page of an update listing as <subdir>/<page_prefix>_<n>.json,
    then export the children of every update on it. Returns the update count.
    """
    log = get_logger(artifact="updates", resource=page_prefix)
    total = 0
    for n, page in enumerate(iter_pages(ctx.api, endpoint, params)):
        log.info("exporting updates (%s)", n)
        ctx.writer.write_json(subdir, f"{page_prefix}_{n}.json", payload=page)
        for update in get_items(page, "update"):
            update_id = get_int(update, "id", "update id")
            ctx.attempt(
                f"{item_prefix}_{update_id}",
                export_update_children, ctx, subdir, f"{item_prefix}_{update_id}", update,
            )
            total += 1
    ctx.count("update", total)
    return total


def export_recent_updates(ctx: ExportContext) -> int:
    """The authenticated user's recent-activity feed."""
    return export_update_pages(ctx, FEED_ENDPOINT, UPDATES_DIR, "updates", "update", FEED_QUERY)
