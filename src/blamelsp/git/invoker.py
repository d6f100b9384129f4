"""Read-only git queries executed as child processes.

Every query the server needs is one of a closed set of variants. Each variant
knows its own command line and how to turn stdout into its result type, so a
caller asking for a revision can never receive a blame record by accident.
Failures of any kind (missing executable, non-zero exit, oversized output)
collapse to ``None`` at :meth:`GitInvoker.query`.
"""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass
from typing import Generic, List, Optional, TypeVar

from git import Git
from git.exc import CommandError, GitCommandError, GitCommandNotFound

from ..config import DEFAULT_MAX_OUTPUT_BYTES
from .blame import AttributionRecord, parse_porcelain

logger = logging.getLogger(__name__)

T = TypeVar("T")

_READ_CHUNK_SIZE = 64 * 1024
_STDERR_LIMIT = 64 * 1024

# Keep git from taking optional locks or prompting for credentials.
_GIT_ENV = {
    "GIT_OPTIONAL_LOCKS": "0",
    "GIT_TERMINAL_PROMPT": "0",
}


class OutputLimitExceeded(CommandError):
    """Raised when a git query writes more than the allowed bytes to stdout."""

    _msg = "Cmd('%s') exceeded the output limit%s"


class GitQuery(Generic[T]):
    """Base of the query variants understood by :class:`GitInvoker`."""

    __slots__ = ()

    def argv(self) -> List[str]:
        raise NotImplementedError

    def parse(self, stdout: str) -> Optional[T]:
        raise NotImplementedError


def _first_line(stdout: str) -> Optional[str]:
    value = stdout.strip()
    return value.splitlines()[0] if value else None


@dataclass(frozen=True, slots=True)
class RootQuery(GitQuery[str]):
    """Find the top-level directory of the work tree containing ``directory``."""

    directory: str

    def argv(self) -> List[str]:
        return ["-C", self.directory, "rev-parse", "--show-toplevel"]

    def parse(self, stdout: str) -> Optional[str]:
        return _first_line(stdout)


@dataclass(frozen=True, slots=True)
class RevisionQuery(GitQuery[str]):
    """Resolve the commit currently checked out at ``root``."""

    root: str

    def argv(self) -> List[str]:
        return ["-C", self.root, "rev-parse", "HEAD"]

    def parse(self, stdout: str) -> Optional[str]:
        return _first_line(stdout)


@dataclass(frozen=True, slots=True)
class BlameQuery(GitQuery[AttributionRecord]):
    """Blame exactly one (one-based) line of ``relative_path``."""

    root: str
    relative_path: str
    line: int

    def argv(self) -> List[str]:
        span = f"{self.line},{self.line}"
        return ["-C", self.root, "blame", "--porcelain", "-L", span, "--", self.relative_path]

    def parse(self, stdout: str) -> Optional[AttributionRecord]:
        return parse_porcelain(stdout)


@dataclass(frozen=True, slots=True)
class RemoteUrlQuery(GitQuery[str]):
    """Read the configured URL of a named remote."""

    root: str
    remote: str = "origin"

    def argv(self) -> List[str]:
        return ["-C", self.root, "remote", "get-url", self.remote]

    def parse(self, stdout: str) -> Optional[str]:
        return _first_line(stdout)


class GitInvoker:
    """Run :class:`GitQuery` variants without blocking the event loop.

    Parameters
    ----------
    executable:
        Path to ``git``. Defaults to the executable GitPython resolved.
    max_output_bytes:
        Bound on stdout per query; larger output kills the process.
    """

    def __init__(
        self,
        executable: str | None = None,
        max_output_bytes: int = DEFAULT_MAX_OUTPUT_BYTES,
    ):
        self.executable = executable or Git.GIT_PYTHON_GIT_EXECUTABLE or "git"
        self.max_output_bytes = max_output_bytes
        self._env = {**os.environ, **_GIT_ENV}

    async def query(self, query: GitQuery[T]) -> Optional[T]:
        """Execute ``query`` and return its parsed result, or None on failure."""
        try:
            stdout = await self._execute(query.argv())
        except CommandError as e:
            logger.debug("git query %r failed: %s", query, e)
            return None
        return query.parse(stdout)

    async def _execute(self, argv: List[str]) -> str:
        command = [self.executable, *argv]
        try:
            proc = await asyncio.create_subprocess_exec(
                *command,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=self._env,
            )
        except (OSError, ValueError) as e:
            raise GitCommandNotFound(command, e) from e

        try:
            stdout, stderr = await asyncio.gather(
                self._read_bounded(proc.stdout, command),
                _read_truncated(proc.stderr, _STDERR_LIMIT),
            )
        except OutputLimitExceeded:
            try:
                proc.kill()
            except ProcessLookupError:
                pass
            await proc.wait()
            raise

        status = await proc.wait()
        if status != 0:
            raise GitCommandError(command, status, stderr)
        return stdout.decode("utf-8", errors="replace")

    async def _read_bounded(self, stream: asyncio.StreamReader, command: List[str]) -> bytes:
        chunks: List[bytes] = []
        size = 0
        while True:
            chunk = await stream.read(_READ_CHUNK_SIZE)
            if not chunk:
                return b"".join(chunks)
            size += len(chunk)
            if size > self.max_output_bytes:
                raise OutputLimitExceeded(command, f"more than {self.max_output_bytes} bytes")
            chunks.append(chunk)


async def _read_truncated(stream: asyncio.StreamReader, limit: int) -> bytes:
    """Read ``stream`` to the end, keeping at most ``limit`` bytes."""
    kept = bytearray()
    while True:
        chunk = await stream.read(_READ_CHUNK_SIZE)
        if not chunk:
            return bytes(kept)
        if len(kept) < limit:
            kept.extend(chunk[: limit - len(kept)])
