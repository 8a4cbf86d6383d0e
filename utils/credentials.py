# utils/credentials.py
from __future__ import annotations

from pathlib import Path
from typing import FrozenSet, List, Optional, Union

from models import Credentials
from utils.errors import ParseError

_MANDATORY = ("domain", "client key", "client secret")


def parse_course_ids(line: str) -> FrozenSet[int]:
    """
    Parse the comma-separated extra course (section) id list.

    >>> sorted(parse_course_ids(" 12, 7,,12 "))
    [7, 12]
    """
    ids = set()
    for raw in line.split(","):
        item = raw.strip()
        if not item:
            continue
        if not (item.isascii() and item.isdigit()):
            raise ParseError(f"course id {item!r} is not numeric")
        ids.add(int(item))
    return frozenset(ids)


def parse_credentials(text: str) -> Credentials:
    """
    Parse the newline-delimited credentials format:

      1 domain              (mandatory)
      2 client key          (mandatory)
      3 client secret       (mandatory)
      4 extra course ids    (comma separated, may be empty or absent)
      5 user key            (optional)
      6 user secret         (optional, required when 5 is present)
    """
    lines: List[str] = [ln.strip() for ln in text.splitlines()]

    def line(i: int) -> Optional[str]:
        if i < len(lines) and lines[i]:
            return lines[i]
        return None

    for i, name in enumerate(_MANDATORY):
        if line(i) is None:
            raise ParseError(f"line {i + 1}: missing {name}")

    domain = lines[0]
    if any(c.isspace() for c in domain):
        raise ParseError(f"line 1: domain {domain!r} contains whitespace")

    try:
        extra_ids = parse_course_ids(line(3) or "")
    except ParseError as e:
        raise ParseError(f"line 4: {e}") from None

    user_key, user_secret = line(4), line(5)
    if (user_key is None) != (user_secret is None):
        raise ParseError("lines 5-6: user key and user secret must be supplied together")

    extra = [i + 1 for i in range(6, len(lines)) if lines[i]]
    if extra:
        raise ParseError(f"unexpected content on line {extra[0]}")

    return Credentials(
        domain=domain,
        client_key=lines[1],
        client_secret=lines[2],
        user_key=user_key,
        user_secret=user_secret,
        extra_course_ids=extra_ids,
    )


def load_credentials(path: Union[str, Path]) -> Credentials:
    """Read and parse a credentials file; any failure surfaces as ParseError."""
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ParseError(f"cannot read credentials file {p}: {e}") from e
    return parse_credentials(text)
