# export/export_realm.py
from __future__ import annotations

from logging_setup import get_logger
from utils.pagination import DEFAULT_LIMIT, get_int, get_items, get_optional_int, iter_pages
from export.context import ExportContext
from export.export_files import export_attachments
from export.export_updates import export_update_pages
from export.export_user import export_referenced_user

PAGE_QUERY = {"start": 0, "limit": DEFAULT_LIMIT}

# Sections and groups share the same child collections:
#   <realm>/<id>/documents, <realm>/<id>/updates, <realm>/<id>/enrollments


def export_document(ctx: ExportContext, subdir: str, prefix: str, realm_path: str, document_id: int) -> None:
    name = f"{prefix}_document_{document_id}"
    detail = ctx.api.get_json(f"{realm_path}/documents/{document_id}", params={"with_attachments": "TRUE"})
    ctx.writer.write_json(subdir, f"{name}.json", payload=detail)
    if isinstance(detail, dict):
        export_attachments(ctx, subdir, name, detail)
    ctx.count("document")


def export_documents(ctx: ExportContext, subdir: str, prefix: str, realm_path: str) -> int:
    """
    <subdir>/<prefix>_documents_<n>.json              listing pages
    <subdir>/<prefix>_document_<id>.json              one per document
    <subdir>/<prefix>_document_<id>_file_<fid>_<name> attachments
    """
    log = get_logger(artifact="documents", resource=prefix)
    ids: list[int] = []
    for n, page in enumerate(iter_pages(ctx.api, f"{realm_path}/documents", PAGE_QUERY)):
        ctx.writer.write_json(subdir, f"{prefix}_documents_{n}.json", payload=page)
        for doc in get_items(page, "document"):
            doc_id = get_int(doc, "id", "document id")
            if doc_id not in ids:
                ids.append(doc_id)

    for doc_id in ids:
        ctx.attempt(f"{prefix}_document_{doc_id}", export_document, ctx, subdir, prefix, realm_path, doc_id)
    log.info("exported documents", extra={"count": len(ids)})
    return len(ids)


def export_realm_updates(ctx: ExportContext, subdir: str, prefix: str, realm_path: str) -> int:
    return export_update_pages(
        ctx,
        f"{realm_path}/updates",
        subdir,
        f"{prefix}_updates",
        f"{prefix}_update",
        {**PAGE_QUERY, "with_attachments": "TRUE"},
    )


def export_enrollments(ctx: ExportContext, subdir: str, prefix: str, realm_path: str) -> int:
    """Enrollment listing pages, plus every enrolled user."""
    log = get_logger(artifact="enrollments", resource=prefix)
    uids: list[int] = []
    for n, page in enumerate(iter_pages(ctx.api, f"{realm_path}/enrollments", PAGE_QUERY)):
        ctx.writer.write_json(subdir, f"{prefix}_enrollments_{n}.json", payload=page)
        for enrollment in get_items(page, "enrollment"):
            uid = get_optional_int(enrollment, "uid")
            if uid is not None:
                uids.append(uid)

    for uid in uids:
        export_referenced_user(ctx, uid)
    log.info("exported enrollments", extra={"count": len(uids)})
    return len(uids)


def export_realm(ctx: ExportContext, subdir: str, prefix: str, realm_path: str) -> None:
    """Documents, updates and enrollments of one section or group, in that order."""
    export_documents(ctx, subdir, prefix, realm_path)
    export_realm_updates(ctx, subdir, prefix, realm_path)
    export_enrollments(ctx, subdir, prefix, realm_path)
