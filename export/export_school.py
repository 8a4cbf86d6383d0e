# export/export_school.py
from __future__ import annotations

from typing import Any, Dict, Literal

from logging_setup import get_logger
from utils.errors import PayloadError
from utils.pagination import get_optional_int
from export.context import ExportContext
from export.export_files import export_picture

SchoolKind = Literal["school", "building"]


def export_school(ctx: ExportContext, kind: SchoolKind, school_id: int) -> Dict[str, Any]:
    """
    Export schools/<id> as <kind>/<kind>_<id>.json plus its picture.
    Buildings are schools in the Schoology API; `kind` only picks the folder.
    """
    log = get_logger(artifact=kind, resource=f"{kind}_{school_id}")
    info = ctx.api.get_json(f"schools/{school_id}")
    if not isinstance(info, dict):
        raise PayloadError(f"{kind} {school_id} is not an object")
    ctx.writer.write_json(kind, f"{kind}_{school_id}.json", payload=info)
    ctx.count(kind)
    export_picture(ctx, kind, f"{kind}_{school_id}_picture", info.get("picture_url"))
    log.info("exported %s", kind)
    return info


def export_schools_of(ctx: ExportContext, profile: Dict[str, Any]) -> None:
    """School then building of the authenticated user, when the profile names them."""
    for kind, key in (("school", "school_id"), ("building", "building_id")):
        sid = get_optional_int(profile, key)
        if not sid:
            get_logger(artifact=kind).info("profile has no %s", key)
            continue
        ctx.attempt(f"{kind}_{sid}", export_school, ctx, kind, sid)
