# export/export_files.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

from logging_setup import get_logger
from utils.pagination import get_int, get_items, get_optional_int
from utils.strings import guess_extension, safe_filename
from export.context import ExportContext


def attachment_list(info: Dict[str, Any]) -> List[Dict[str, Any]]:
    """
    Schoology nests file attachments as
      {"attachments": {"files": {"file": [ {...}, ... ]}}}
    Links/videos/embeds carry no downloadable body and are left in the JSON.
    """
    attachments = info.get("attachments")
    if not isinstance(attachments, dict):
        return []
    files = attachments.get("files")
    if not isinstance(files, dict):
        return []
    return get_items(files, "file")


def export_attachments(ctx: ExportContext, subdir: str, prefix: str, info: Dict[str, Any]) -> int:
    """
    Download every file attachment of `info` to
      <subdir>/<prefix>_file_<file id>_<filename>
    Returns the number of files written.
    """
    log = get_logger(artifact="attachments", resource=prefix)
    written = 0
    for n, attachment in enumerate(attachment_list(info)):
        download_url = attachment.get("download_path")
        if not isinstance(download_url, str) or not download_url:
            log.warning("attachment without download_path", extra={"attachment": attachment.get("id")})
            continue
        fid = get_optional_int(attachment, "id")
        tag = f"file_{fid}" if fid is not None else f"attachment_{n}"
        raw_name = attachment.get("filename") or attachment.get("title") or ""
        name = safe_filename(raw_name, fallback="file", prefix=f"{prefix}_{tag}_")
        if ctx.writer.has(subdir, name):
            log.debug("attachment already exported", extra={"path": name})
            continue

        resp = ctx.api.get_bytes(download_url)
        ctx.writer.write_bytes(subdir, name, data=resp.body)
        ctx.count("attachment")
        written += 1
        log.debug("exported attachment", extra={"path": name, "size": len(resp.body)})
    return written


def export_picture(
    ctx: ExportContext,
    subdir: str,
    stem: str,
    url: Optional[str],
    *,
    signed: bool = False,
) -> bool:
    """Save a profile picture / banner as <subdir>/<stem><ext>; no-op without a URL."""
    if not isinstance(url, str) or not url:
        return False
    resp = ctx.api.get_bytes(url, signed=signed)
    ext = guess_extension(resp.content_type, url, default=".png")
    ctx.writer.write_bytes(subdir, f"{stem}{ext}", data=resp.body)
    ctx.count("picture")
    return True


def export_folder_tree(ctx: ExportContext, subdir: str, prefix: str, section_id: int) -> int:
    """
    Walk a course's folder tree depth-first from the root folder (id 0):
      courses/<section>/folder/<folder id>  ->  <subdir>/<prefix>_folder_<folder id>.json
    Documents inside folders are exported with the course documents.
    """
    log = get_logger(artifact="folders", resource=prefix)
    visited: set[int] = set()
    stack = [0]
    while stack:
        folder_id = stack.pop()
        if folder_id in visited:
            continue
        visited.add(folder_id)

        listing = ctx.api.get_json(f"courses/{section_id}/folder/{folder_id}")
        ctx.writer.write_json(subdir, f"{prefix}_folder_{folder_id}.json", payload=listing)
        ctx.count("folder")

        children = [
            get_int(item, "id", "folder id")
            for item in get_items(listing if isinstance(listing, dict) else {}, "folder-item")
            if item.get("type") == "folder"
        ]
        # reversed so the lowest id is visited first
        stack.extend(sorted(set(children) - visited, reverse=True))
        log.debug("exported folder", extra={"folder_id": folder_id, "subfolders": len(children)})
    return len(visited)
