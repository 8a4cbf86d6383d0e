# export/writer.py
from __future__ import annotations

import time
from pathlib import Path
from typing import Any, Dict, List, Optional

from models import ExportArtifact
from utils.errors import ArtifactExistsError
from utils.fs import atomic_write, ensure_dir, json_dumps_pretty, json_dumps_stable, safe_relpath, sha256_bytes

MANIFEST_NAME = "manifest.json"


def export_dir_name(now_ms: Optional[int] = None) -> str:
    """export_<unix millis>, e.g. export_1718000000000"""
    if now_ms is None:
        now_ms = time.time_ns() // 1_000_000
    return f"export_{now_ms}"


def create_export_dir(parent: Path, now_ms: Optional[int] = None) -> Path:
    """
    Create a fresh export_<millis> directory under `parent`.
    Never reuses an existing directory, so runs cannot overwrite each other.
    """
    ensure_dir(parent)
    path = parent / export_dir_name(now_ms)
    path.mkdir()  # FileExistsError if two runs share a millisecond
    return path


class ExportWriter:
    """
    Single writer for one export directory.

    Each relative path may be written once per run; a second write raises
    ArtifactExistsError. Every write is recorded for the manifest.
    """

    def __init__(self, root: Path) -> None:
        self.root = root
        self.artifacts: List[ExportArtifact] = []
        self._written: set[str] = set()

    def path_for(self, *parts: str) -> Path:
        return self.root.joinpath(*parts)

    def has(self, *parts: str) -> bool:
        return safe_relpath(self.path_for(*parts), self.root) in self._written

    def write_bytes(self, *parts: str, data: bytes) -> Path:
        path = self.path_for(*parts)
        rel = safe_relpath(path, self.root)
        if rel.startswith("../") or rel == "..":
            raise ValueError(f"artifact path escapes export dir: {rel}")
        if rel in self._written or path.exists():
            raise ArtifactExistsError(f"artifact already written: {rel}")
        atomic_write(path, data)
        self._written.add(rel)
        self.artifacts.append(ExportArtifact(path=rel, size=len(data), sha256=sha256_bytes(data)))
        return path

    def write_text(self, *parts: str, text: str) -> Path:
        return self.write_bytes(*parts, data=text.encode("utf-8"))

    def write_json(self, *parts: str, payload: Any) -> Path:
        return self.write_text(*parts, text=json_dumps_pretty(payload))

    def write_manifest(self, summary: Dict[str, Any]) -> Path:
        """Written last, listing every artifact of the run in write order."""
        manifest = {
            "summary": summary,
            "artifacts": [
                {"path": a.path, "size": a.size, "sha256": a.sha256} for a in self.artifacts
            ],
        }
        path = self.path_for(MANIFEST_NAME)
        atomic_write(path, json_dumps_stable(manifest))
        return path
