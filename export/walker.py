# export/walker.py
from __future__ import annotations

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from logging_setup import get_logger
from models import Credentials, ExportState
from utils.api import SchoologyAPI
from utils.config import Settings
from utils.oauth import Prompt, authorize
from export.context import ExportContext
from export.export_courses import export_courses
from export.export_groups import export_groups
from export.export_messages import export_messages
from export.export_school import export_schools_of
from export.export_updates import export_recent_updates
from export.export_user import export_self
from export.writer import ExportWriter, create_export_dir


@dataclass
class ExportResult:
    export_dir: Optional[Path]
    state: ExportState
    counts: Dict[str, int] = field(default_factory=dict)
    failures: List[Tuple[str, str]] = field(default_factory=list)
    duration_s: float = 0.0


class ExportWalker:
    """
    Walks the fixed resource hierarchy depth-first, one request at a time:

      self user -> school/building -> recent updates -> messages
      -> courses (listed + extra ids) -> groups

    Fail-fast unless continue_on_error is set, in which case failures of
    individual resources (and of whole steps after the self user) are logged
    and counted.
    """

    def __init__(
        self,
        api: SchoologyAPI,
        writer: ExportWriter,
        credentials: Credentials,
        *,
        continue_on_error: bool = False,
    ) -> None:
        self.ctx = ExportContext(api=api, writer=writer, continue_on_error=continue_on_error)
        self.credentials = credentials
        self.state = ExportState.IDLE
        self.log = get_logger(artifact="walker")

    def _steps(self) -> List[Tuple[str, Callable[[], object]]]:
        ctx = self.ctx
        return [
            ("updates", lambda: export_recent_updates(ctx)),
            ("messages", lambda: export_messages(ctx)),
            ("courses", lambda: export_courses(ctx, self.credentials.extra_course_ids)),
            ("groups", lambda: export_groups(ctx)),
        ]

    def run(self) -> ExportResult:
        start = time.monotonic()
        self.state = ExportState.WALKING
        try:
            profile = export_self(self.ctx)
            export_schools_of(self.ctx, profile)
            for name, step in self._steps():
                self.log.info("starting step %s", name)
                self.ctx.attempt(name, step)
        except Exception:
            self.state = ExportState.FAILED
            raise

        self.state = ExportState.DONE
        duration = time.monotonic() - start
        result = ExportResult(
            export_dir=self.ctx.writer.root,
            state=self.state,
            counts=dict(self.ctx.counts),
            failures=list(self.ctx.failures),
            duration_s=duration,
        )
        self.ctx.writer.write_manifest({
            "uid": self.ctx.uid,
            "counts": dict(sorted(result.counts.items())),
            "failures": [{"resource": label, "error": err} for label, err in result.failures],
        })
        self.log.info(
            "exported in %.1fs", duration,
            extra={"counts": result.counts, "failures": len(result.failures)},
        )
        return result


def run_export(
    credentials: Credentials,
    settings: Settings,
    *,
    prompt: Prompt = input,
    now_ms: Optional[int] = None,
) -> ExportResult:
    """
    Idle -> Authenticating -> Walking -> Done | Failed.

    Uses the pre-supplied user token when the credentials carry one, otherwise
    runs the interactive OAuth handshake. The export directory is created only
    once a token is in hand.
    """
    log = get_logger(artifact="runner")
    api = SchoologyAPI(
        credentials.client_key,
        credentials.client_secret,
        api_base=settings.api_base,
        timeout=settings.timeout,
        retries=settings.retries,
    )

    log.debug("state -> %s", ExportState.AUTHENTICATING.value)
    token = credentials.user_token
    if token is None:
        log.info("no user token supplied; starting OAuth handshake")
        token = authorize(api, credentials, prompt=prompt, callback=settings.oauth_callback)
    api = api.with_token(token)

    export_dir = create_export_dir(settings.export_root, now_ms)
    log.info("exporting to %s", export_dir)
    walker = ExportWalker(
        api, ExportWriter(export_dir), credentials, continue_on_error=settings.continue_on_error
    )
    return walker.run()
