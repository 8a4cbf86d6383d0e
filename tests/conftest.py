# tests/conftest.py
from __future__ import annotations

import re
import sys
from pathlib import Path
from typing import Dict, Iterable, List, Optional
from urllib.parse import unquote

import pytest

# ---------- import helpers ----------
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from models import Credentials, OAuthToken  # noqa: E402
from utils.api import SchoologyAPI  # noqa: E402
from export.context import ExportContext  # noqa: E402
from export.writer import ExportWriter  # noqa: E402

API_BASE = "https://api.test/v1"
CDN = "https://cdn.test"
PNG = b"\x89PNG\r\n\x1a\nfake"


def api_url(path: str) -> str:
    return f"{API_BASE}/{path.lstrip('/')}"


def auth_header(request) -> str:
    value = request.headers.get("Authorization", "")
    return value.decode("utf-8") if isinstance(value, bytes) else value


def oauth_params(request) -> Dict[str, str]:
    """Parse 'OAuth k="v",...' into an unquoted dict."""
    return {k: unquote(v) for k, v in re.findall(r'(\w+)="([^"]*)"', auth_header(request))}


# ---------- a small Schoology tenant ----------
class FakeTenant:
    """
    Registers a consistent Schoology tenant on requests_mock.

    uid 7 belongs to school 100 / building 200, is enrolled in `sections`,
    belongs to `groups`, sees one feed update by user 8 (commented by 9) with
    one attachment, and one message thread (from 8) listed in inbox and sent.
    Every section has two documents, an enrolled 8, and a folder tree 0 -> 5.
    """

    def __init__(
        self,
        requests_mock,
        *,
        sections: Iterable[int] = (11, 12),
        extra_sections: Iterable[int] = (),
        groups: Iterable[int] = (40,),
        uid: int = 7,
    ) -> None:
        self.m = requests_mock
        self.uid = uid
        self.sections = list(sections)
        self.extra_sections = list(extra_sections)
        self.groups = list(groups)

    def documents_of(self, sid: int) -> List[int]:
        return [sid * 10 + 1, sid * 10 + 2]

    def install(self) -> "FakeTenant":
        m, uid = self.m, self.uid
        m.get(api_url("app-user-info"), json={"api_uid": uid, "web_session_timestamp": "1"})

        for user_id in (uid, 8, 9):
            m.get(api_url(f"users/{user_id}"), json={
                "id": user_id,
                "name_display": f"User {user_id}",
                "school_id": 100,
                "building_id": 200,
                "picture_url": f"{CDN}/pictures/u{user_id}.png",
            })
            m.get(f"{CDN}/pictures/u{user_id}.png", content=PNG, headers={"Content-Type": "image/png"})

        for school_id in (100, 200):
            m.get(api_url(f"schools/{school_id}"), json={
                "id": school_id, "title": f"School {school_id}",
                "picture_url": f"{CDN}/pictures/s{school_id}.png",
            })
            m.get(f"{CDN}/pictures/s{school_id}.png", content=PNG, headers={"Content-Type": "image/png"})

        # recent feed
        m.get(api_url("recent"), json={
            "update": [{
                "id": 900, "uid": 8, "body": "hello",
                "comments": [{"id": 1, "uid": 9, "comment": "hi"}],
                "attachments": {"files": {"file": [{
                    "id": 55, "filename": "notes.pdf",
                    "download_path": api_url("attachment/55/source"),
                }]}},
            }],
            "links": {"self": api_url("recent")},
        })
        m.get(api_url("attachment/55/source"), content=b"%PDF-1.4 notes")

        # messages (same thread in both mailboxes)
        thread = {"id": 300, "author_id": 8, "subject": "hi", "links": {"self": api_url("messages/inbox/300")}}
        m.get(api_url("messages/inbox"), json={"message": [thread], "links": {}})
        m.get(api_url("messages/sent"), json={"message": [thread], "links": {}})
        m.get(api_url("messages/inbox/300"), json={"message": [{"id": 300, "message": "body"}]})

        # courses
        m.get(api_url(f"users/{uid}/sections"), json={
            "section": [{"id": str(sid), "links": {"self": api_url(f"sections/{sid}")}} for sid in self.sections],
            "links": {},
        })
        m.get(api_url(f"users/{uid}/grades"), json={"section": []})
        for sid in self.sections + self.extra_sections:
            self._install_realm(f"sections/{sid}", sid)
            m.get(api_url(f"sections/{sid}"), json={
                "id": str(sid), "course_title": f"Course {sid}",
                "profile_url": f"{CDN}/banners/{sid}.jpg",
            })
            m.get(f"{CDN}/banners/{sid}.jpg", content=b"JFIF", headers={"Content-Type": "image/jpeg"})
            m.get(api_url(f"courses/{sid}/folder/0"), json={
                "id": 0,
                "folder-item": [{"id": "5", "type": "folder"}, {"id": sid * 10 + 1, "type": "document"}],
            })
            m.get(api_url(f"courses/{sid}/folder/5"), json={"id": 5, "folder-item": []})

        # groups
        m.get(api_url(f"users/{uid}/groups"), json={"group": [{"id": gid} for gid in self.groups]})
        for gid in self.groups:
            m.get(api_url(f"groups/{gid}"), json={"id": gid, "title": f"Group {gid}"})
            self._install_realm(f"groups/{gid}", gid)
        return self

    def _install_realm(self, realm: str, rid: int) -> None:
        m = self.m
        docs = self.documents_of(rid)
        m.get(api_url(f"{realm}/documents"), json={"document": [{"id": d} for d in docs], "links": {}})
        for d in docs:
            m.get(api_url(f"{realm}/documents/{d}"), json={"id": d, "title": f"Doc {d}"})
        m.get(api_url(f"{realm}/updates"), json={"update": [], "links": {}})
        m.get(api_url(f"{realm}/enrollments"), json={"enrollment": [{"uid": self.uid}, {"uid": "8"}]})


# ---------- common fixtures ----------
@pytest.fixture
def token():
    return OAuthToken("user-key", "user-secret")


@pytest.fixture
def api(token):
    return SchoologyAPI("client-key", "client-secret", token, api_base=API_BASE)


@pytest.fixture
def export_root(tmp_path: Path) -> Path:
    root = tmp_path / "export_1"
    root.mkdir()
    return root


@pytest.fixture
def writer(export_root: Path) -> ExportWriter:
    return ExportWriter(export_root)


@pytest.fixture
def ctx(api, writer) -> ExportContext:
    return ExportContext(api=api, writer=writer, uid=7)


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(
        domain="school.schoology.com",
        client_key="client-key",
        client_secret="client-secret",
        user_key="user-key",
        user_secret="user-secret",
        extra_course_ids=frozenset({13}),
    )


@pytest.fixture
def tenant(requests_mock) -> FakeTenant:
    return FakeTenant(requests_mock, extra_sections=(13,)).install()


def relative_files(root: Path, exclude: Optional[Iterable[str]] = ("manifest.json",)) -> List[str]:
    skip = set(exclude or ())
    return sorted(
        p.relative_to(root).as_posix()
        for p in root.rglob("*")
        if p.is_file() and p.relative_to(root).as_posix() not in skip
    )
