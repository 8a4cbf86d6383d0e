# export/export_groups.py
from __future__ import annotations

from typing import List

from logging_setup import get_logger
from models import ResourceRef
from utils.errors import PayloadError
from utils.pagination import DEFAULT_LIMIT, get_int, get_items, iter_pages
from export.context import ExportContext
from export.export_files import export_picture
from export.export_realm import export_realm

GROUPS_DIR = "groups"


def export_group(ctx: ExportContext, group_id: int) -> None:
    prefix = ResourceRef("group", group_id).slug
    log = get_logger(artifact="group", resource=prefix)
    log.info("exporting group %s", group_id)

    info = ctx.api.get_json(f"groups/{group_id}")
    if not isinstance(info, dict):
        raise PayloadError(f"group {group_id} is not an object")
    ctx.writer.write_json(GROUPS_DIR, f"{prefix}.json", payload=info)
    ctx.count("group")

    export_picture(ctx, GROUPS_DIR, f"{prefix}_picture", info.get("picture_url"))
    export_realm(ctx, GROUPS_DIR, prefix, f"groups/{group_id}")


def export_groups(ctx: ExportContext) -> List[int]:
    """groups/groups_<n>.json listing pages, then each group ascending by id."""
    ids: List[int] = []
    for n, page in enumerate(iter_pages(ctx.api, f"users/{ctx.uid}/groups", {"start": 0, "limit": DEFAULT_LIMIT})):
        ctx.writer.write_json(GROUPS_DIR, f"groups_{n}.json", payload=page)
        for group in get_items(page, "group"):
            gid = get_int(group, "id", "group id")
            if gid not in ids:
                ids.append(gid)

    for gid in sorted(ids):
        ctx.attempt(f"group_{gid}", export_group, ctx, gid)
    return sorted(ids)
