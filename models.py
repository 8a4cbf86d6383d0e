#models.py
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Literal, Optional

ResourceKind = Literal[
    "user",
    "school",
    "building",
    "update",
    "message",
    "course",
    "document",
    "group",
    "folder",
    "file",
]


@dataclass(frozen=True, slots=True)
class OAuthToken:
    key: str
    secret: str

    def __repr__(self) -> str:
        # keep secrets out of debug logs
        return f"OAuthToken(key={self.key!r}, secret='***')"


@dataclass(frozen=True, slots=True)
class Credentials:
    domain: str
    client_key: str
    client_secret: str = field(repr=False)
    user_key: Optional[str] = None
    user_secret: Optional[str] = field(default=None, repr=False)
    extra_course_ids: FrozenSet[int] = field(default_factory=frozenset)

    @property
    def user_token(self) -> Optional[OAuthToken]:
        """The pre-supplied access token, or None when the handshake must run."""
        if self.user_key and self.user_secret:
            return OAuthToken(self.user_key, self.user_secret)
        return None


@dataclass(frozen=True, slots=True)
class ResourceRef:
    kind: ResourceKind
    id: int

    @property
    def slug(self) -> str:
        return f"{self.kind}_{self.id}"


@dataclass(frozen=True, slots=True)
class ExportArtifact:
    path: str      # POSIX path relative to the export dir
    size: int
    sha256: str


class ExportState(str, Enum):
    IDLE = "idle"
    AUTHENTICATING = "authenticating"
    WALKING = "walking"
    DONE = "done"
    FAILED = "failed"
