"""Repository identity and cache keys for a file on disk."""

from __future__ import annotations

import asyncio
import json
import logging
import os
from dataclasses import dataclass
from typing import Optional

from .invoker import GitInvoker, RevisionQuery, RootQuery

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RepoIdentity:
    """Work tree root plus the file's path relative to it."""

    root: str
    relative_path: str


@dataclass(frozen=True, slots=True)
class CacheKey:
    """Slot of the attribution cache: one line of one file in one state."""

    path: str
    line: int
    token: str


@dataclass(frozen=True, slots=True)
class RepoState:
    """Result of inspecting a file: where it lives and how volatile it is."""

    identity: RepoIdentity
    token: str

    def cache_key(self, path: str, line: int) -> CacheKey:
        return CacheKey(path=path, line=line, token=self.token)


def volatility_token(
    revision: Optional[str], mtime_ns: Optional[int], size: Optional[int]
) -> str:
    """Encode the observable state of a file.

    Unknown pieces are kept as ``null`` so that two different unknown states
    still produce different tokens.
    """

    return json.dumps({"head": revision, "mtime_ns": mtime_ns, "size": size})


def _stat(path: str) -> Optional[os.stat_result]:
    try:
        return os.stat(path)
    except (OSError, ValueError):
        return None


async def derive_repo_state(invoker: GitInvoker, path: str) -> Optional[RepoState]:
    """Inspect ``path`` and build the state used for cache keys.

    Parameters
    ----------
    invoker:
        Runs the git queries.
    path:
        Absolute path of the file.

    Returns
    -------
    RepoState, or None when the file is not inside a git work tree.
    """
    root = await invoker.query(RootQuery(os.path.dirname(path)))
    if root is None:
        logger.debug("No repository found for %s", path)
        return None

    revision, stat = await asyncio.gather(
        invoker.query(RevisionQuery(root)),
        asyncio.to_thread(_stat, path),
    )
    token = volatility_token(
        revision,
        stat.st_mtime_ns if stat is not None else None,
        stat.st_size if stat is not None else None,
    )
    identity = RepoIdentity(root=root, relative_path=os.path.relpath(path, root))
    return RepoState(identity=identity, token=token)
