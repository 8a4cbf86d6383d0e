# export/export_messages.py
from __future__ import annotations

from typing import Any, Dict, Set

from logging_setup import get_logger
from utils.errors import PayloadError
from utils.pagination import DEFAULT_LIMIT, get_int, get_items, get_optional_int, iter_pages
from export.context import ExportContext
from export.export_files import export_attachments
from export.export_user import export_referenced_user

MESSAGES_DIR = "messages"
MAILBOXES = ("inbox", "sent")
MESSAGE_QUERY = {
    "start": 0,
    "limit": DEFAULT_LIMIT,
    "created_offset": 0,
    "with_attachments": "TRUE",
    "richtext": 1,
}


def export_message(ctx: ExportContext, message: Dict[str, Any], message_id: int) -> None:
    """
    One message thread:
      messages/message_<id>.json                     (detail from links.self)
      messages/message_<id>_file_<fid>_<filename>    (attachments)
    """
    links = message.get("links")
    url = links.get("self") if isinstance(links, dict) else None
    if not isinstance(url, str) or not url:
        raise PayloadError(f"failed to get message url for message {message_id}")

    detail = ctx.api.get_json(url)
    ctx.writer.write_json(MESSAGES_DIR, f"message_{message_id}.json", payload=detail)
    export_attachments(ctx, MESSAGES_DIR, f"message_{message_id}", message)
    export_referenced_user(ctx, get_optional_int(message, "author_id"))
    ctx.count("message")


def export_messages(ctx: ExportContext) -> int:
    """
    Inbox pages then sent pages. A thread listed in both mailboxes is exported
    once; both listing pages are kept.
    """
    exported: Set[int] = set()
    for mailbox in MAILBOXES:
        log = get_logger(artifact="messages", resource=mailbox)
        endpoint = f"messages/{mailbox}?extended&options"
        for n, page in enumerate(iter_pages(ctx.api, endpoint, MESSAGE_QUERY)):
            log.info("exporting messages (%s)", n)
            ctx.writer.write_json(MESSAGES_DIR, f"messages_{mailbox}_{n}.json", payload=page)
            for message in get_items(page, "message"):
                message_id = get_int(message, "id", "message id")
                if message_id in exported:
                    continue
                exported.add(message_id)
                ctx.attempt(f"message_{message_id}", export_message, ctx, message, message_id)
    return len(exported)
