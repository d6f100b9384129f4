"""Parsing of ``git blame --porcelain`` output for a single line."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

_COMMIT_RE = re.compile(r"^[0-9a-fA-F]{4,64}$")


@dataclass(frozen=True, slots=True)
class AttributionRecord:
    """Provenance of one line: the commit that last touched it."""

    commit_id: str
    author: Optional[str] = None
    authored_at: Optional[int] = None
    summary: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.commit_id:
            raise ValueError("commit_id must not be empty")


def parse_porcelain(output: str) -> Optional[AttributionRecord]:
    """Parse the porcelain blame of a single line.

    The first line starts with the commit id followed by line numbers. Header
    lines that follow are ``key value`` pairs in any order; only ``author``,
    ``author-time`` and ``summary`` are kept, the last occurrence winning.

    Parameters
    ----------
    output:
        Raw stdout of ``git blame --porcelain -L n,n``.

    Returns
    -------
    AttributionRecord, or None when the output is empty or malformed.
    """
    lines = output.splitlines()
    if not lines or not lines[0].strip():
        return None

    commit_id = lines[0].strip().split(" ", 1)[0]
    if not _COMMIT_RE.match(commit_id):
        return None

    author: Optional[str] = None
    authored_at: Optional[int] = None
    summary: Optional[str] = None

    for line in lines[1:]:
        # content line
        if line.startswith("\t"):
            continue
        key, _, value = line.partition(" ")
        value = value.strip()
        if key == "author":
            author = value or None
        elif key == "author-time":
            try:
                authored_at = int(value)
            except ValueError:
                continue
        elif key == "summary":
            summary = value

    return AttributionRecord(
        commit_id=commit_id,
        author=author,
        authored_at=authored_at,
        summary=summary,
    )
