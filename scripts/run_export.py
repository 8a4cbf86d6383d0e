#!/usr/bin/env python3
"""
Schoology personal data export.

Usage:
  python scripts/run_export.py creds.txt

Runtime tunables come from SCHOOLOGY_* environment variables (see utils/config.py).
"""

from __future__ import annotations
import argparse
import sys
from pathlib import Path
from typing import Callable, List, Optional

# --- ensure repo root on sys.path ---
THIS_FILE = Path(__file__).resolve()
REPO_ROOT = THIS_FILE.parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from logging_setup import setup_logging, get_logger
from utils.config import Settings, load_env_if_opted_in
from utils.credentials import load_credentials
from utils.errors import ExportError
from export.walker import run_export

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_PARTIAL = 3  # argparse exits 2 on usage errors


def main(argv: Optional[List[str]] = None, *, prompt: Callable[[str], str] = input) -> int:
    p = argparse.ArgumentParser(description="Export your Schoology data to export_<timestamp>/")
    p.add_argument("credentials", type=Path, help="credentials file (domain, key, secret, course ids[, user key, user secret])")
    args = p.parse_args(argv)

    load_env_if_opted_in()
    try:
        settings = Settings.from_env()
    except ValueError as e:
        setup_logging(verbosity=1)
        get_logger(artifact="runner").error("invalid configuration: %s", e)
        return EXIT_FAILED

    setup_logging(verbosity=settings.verbosity)
    log = get_logger(artifact="runner")

    try:
        credentials = load_credentials(args.credentials)
        result = run_export(credentials, settings, prompt=prompt)
    except ExportError as e:
        log.error("export failed: %s", e, extra={"error_type": type(e).__name__})
        return EXIT_FAILED
    except OSError as e:
        log.error("cannot write export: %s", e)
        return EXIT_FAILED

    if result.failures:
        log.warning(
            "export finished with %s skipped resource(s) in %s",
            len(result.failures), result.export_dir,
        )
        return EXIT_PARTIAL
    log.info("export complete: %s", result.export_dir, extra={"counts": result.counts})
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
