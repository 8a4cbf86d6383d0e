# export/export_user.py
from __future__ import annotations

from typing import Any, Dict, Optional

from logging_setup import get_logger
from models import ResourceRef
from utils.errors import PayloadError
from utils.pagination import get_int
from export.context import ExportContext
from export.export_files import export_picture

USERS_DIR = "users"


def export_self(ctx: ExportContext) -> Dict[str, Any]:
    """
    Resolve the authenticated user (app-user-info -> api_uid), record it in
    users/self and export their profile. Sets ctx.uid.
    """
    log = get_logger(artifact="user", resource="self")
    info = ctx.api.get_json("app-user-info")
    if not isinstance(info, dict):
        raise PayloadError("failed to get uid: app-user-info is not an object")
    uid = get_int(info, "api_uid", "uid")
    ctx.uid = uid
    log.info("logged in as user %s", uid)

    ctx.writer.write_text(USERS_DIR, "self", text=str(uid))
    profile = export_user(ctx, uid)
    return profile or {}


def export_user(ctx: ExportContext, user_id: int) -> Optional[Dict[str, Any]]:
    """
    Export users/<id> once per run:
      users/user_<id>.json
      users/user_<id>_picture<ext>
    Returns the profile, or None when the user was already exported.
    """
    if user_id in ctx.exported_users:
        return None
    # marked before fetching so a failing user is not retried for every reference
    ctx.exported_users.add(user_id)

    slug = ResourceRef("user", user_id).slug
    log = get_logger(artifact="user", resource=slug)
    profile = ctx.api.get_json(f"users/{user_id}")
    if not isinstance(profile, dict):
        raise PayloadError(f"user {user_id} is not an object")
    ctx.writer.write_json(USERS_DIR, f"{slug}.json", payload=profile)
    ctx.count("user")

    export_picture(ctx, USERS_DIR, f"{slug}_picture", profile.get("picture_url"))
    log.debug("exported user")
    return profile


def export_referenced_user(ctx: ExportContext, user_id: Optional[int]) -> None:
    """Export a user referenced by an update, comment, message or enrollment."""
    if user_id is None or user_id in ctx.exported_users:
        return
    ctx.attempt(f"user_{user_id}", export_user, ctx, user_id)
