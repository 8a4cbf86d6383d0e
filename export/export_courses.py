# export/export_courses.py
from __future__ import annotations

from typing import Iterable, List

from logging_setup import get_logger
from models import ResourceRef
from utils.errors import PayloadError
from utils.pagination import get_int, get_items, iter_pages
from export.context import ExportContext
from export.export_files import export_folder_tree, export_picture
from export.export_realm import export_realm

COURSES_DIR = "courses"


def list_course_ids(ctx: ExportContext) -> List[int]:
    """
    Save the user's section listing (past terms included) as
    courses/courses_<n>.json and return the section ids in listing order.
    """
    ids: List[int] = []
    endpoint = f"users/{ctx.uid}/sections"
    for n, page in enumerate(iter_pages(ctx.api, endpoint, {"include_past": 1})):
        ctx.writer.write_json(COURSES_DIR, f"courses_{n}.json", payload=page)
        for section in get_items(page, "section"):
            sid = get_int(section, "id", "course id")
            if sid not in ids:
                ids.append(sid)
    return ids


def export_course(ctx: ExportContext, section_id: int) -> None:
    """
    courses/course_<id>.json           section info
    courses/course_<id>_banner<ext>    profile picture
    courses/course_<id>_grades.json    the user's grades in the section
    + documents, updates, enrollments, folder tree
    """
    prefix = ResourceRef("course", section_id).slug
    log = get_logger(artifact="course", resource=prefix)
    log.info("exporting course %s", section_id)

    info = ctx.api.get_json(f"sections/{section_id}")
    if not isinstance(info, dict):
        raise PayloadError(f"course {section_id} is not an object")
    ctx.writer.write_json(COURSES_DIR, f"{prefix}.json", payload=info)
    ctx.count("course")

    export_picture(ctx, COURSES_DIR, f"{prefix}_banner", info.get("profile_url"), signed=True)

    grades = ctx.api.get_json(f"users/{ctx.uid}/grades", params={"section_id": section_id})
    ctx.writer.write_json(COURSES_DIR, f"{prefix}_grades.json", payload=grades)

    export_realm(ctx, COURSES_DIR, prefix, f"sections/{section_id}")
    export_folder_tree(ctx, COURSES_DIR, prefix, section_id)


def export_courses(ctx: ExportContext, extra_course_ids: Iterable[int] = ()) -> List[int]:
    """
    Every listed section plus the configured extra ids, ascending and
    de-duplicated. Returns the ids that were walked.
    """
    log = get_logger(artifact="courses")
    listed = list_course_ids(ctx)
    extra = sorted(set(extra_course_ids) - set(listed))
    if extra:
        log.info("adding course ids from credentials", extra={"course_ids": extra})
    course_ids = sorted(set(listed) | set(extra))
    log.debug("courses to export: %s", course_ids)

    for sid in course_ids:
        ctx.attempt(f"course_{sid}", export_course, ctx, sid)
    return course_ids
