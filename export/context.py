# export/context.py
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Set, Tuple, TypeVar

from logging_setup import get_logger
from utils.api import SchoologyAPI
from utils.errors import ExportError
from export.writer import ExportWriter

T = TypeVar("T")


@dataclass
class ExportContext:
    """
    Shared state of one export run: the signed client, the single writer,
    the authenticated uid and the per-run bookkeeping.
    """
    api: SchoologyAPI
    writer: ExportWriter
    uid: int = 0
    continue_on_error: bool = False
    exported_users: Set[int] = field(default_factory=set)
    counts: Counter = field(default_factory=Counter)
    failures: List[Tuple[str, str]] = field(default_factory=list)

    def count(self, kind: str, n: int = 1) -> None:
        self.counts[kind] += n

    def attempt(self, label: str, fn: Callable[..., T], *args: Any, **kwargs: Any) -> Optional[T]:
        """
        Run one per-resource export. Fail-fast by default; in continue-on-error
        mode an ExportError is logged, recorded and swallowed.
        """
        try:
            return fn(*args, **kwargs)
        except ExportError as e:
            if not self.continue_on_error:
                raise
            get_logger(artifact="walker", resource=label).error(
                "skipping resource after error: %s", e, extra={"error_type": type(e).__name__}
            )
            self.failures.append((label, str(e)))
            return None
