"""Resolution of code actions and permalinks for a single line."""

from __future__ import annotations

import asyncio
import logging
from typing import Iterator, Optional

from ..cache import NO_RECORD, AttributionCache
from ..config import BlameConfig, DEFAULT_CONFIG
from ..format import format_label
from ..git import (
    AttributionRecord,
    BlameQuery,
    GitInvoker,
    RemoteUrlQuery,
    RepoState,
    derive_repo_state,
)
from ..remote import build_permalink, normalize_remote
from .contracts import ActionOffer, OpenUrl, PermalinkOutcome, ShowWarning, WarningReason

logger = logging.getLogger(__name__)


class BlameService:
    """Answer "who last changed this line" for the protocol layer.

    The service owns no global state: the invoker and the cache are handed in
    at construction so several independent instances can coexist.

    Parameters
    ----------
    invoker:
        Runs git queries.
    cache:
        Attribution cache shared by all requests of this service.
    remote_name:
        Remote used for permalinks.
    """

    def __init__(
        self,
        invoker: GitInvoker,
        cache: AttributionCache,
        remote_name: str = "origin",
    ):
        self.invoker = invoker
        self.cache = cache
        self.remote_name = remote_name

    @classmethod
    def from_config(cls, config: BlameConfig | None = None) -> "BlameService":
        active_config = config or DEFAULT_CONFIG
        return cls(
            GitInvoker(active_config.git_executable, active_config.max_output_bytes),
            AttributionCache(active_config.cache_capacity),
            remote_name=active_config.remote_name,
        )

    async def attribution(self, path: str, line: int) -> Optional[AttributionRecord]:
        """Return the attribution of one-based ``line`` of ``path``, if any."""
        if line < 1:
            return None
        state = await derive_repo_state(self.invoker, path)
        if state is None:
            return None
        return await self._cached_attribution(state, path, line)

    async def _cached_attribution(
        self, state: RepoState, path: str, line: int
    ) -> Optional[AttributionRecord]:
        key = state.cache_key(path, line)
        cached = self.cache.get(key)
        if cached is not None:
            return None if cached is NO_RECORD else cached

        identity = state.identity
        record = await self.invoker.query(
            BlameQuery(identity.root, identity.relative_path, line)
        )
        self.cache.set(key, NO_RECORD if record is None else record)
        return record

    async def offer_actions(
        self,
        path: str,
        zero_based_line: int,
        document: object | None = None,
        now: float | None = None,
    ) -> Iterator[ActionOffer]:
        """Build the code actions offered for a cursor position.

        Parameters
        ----------
        path:
            Absolute path of the file.
        zero_based_line:
            Line of the cursor as sent by the editor.
        document:
            Identifier echoed back in the action's arguments. Defaults to
            ``path``.
        now:
            Reference time for the relative date in the title.

        Returns
        -------
        Iterator over zero or one offers. Failures produce an empty iterator.
        """
        line = zero_based_line + 1
        record = await self.attribution(path, line)
        if record is None:
            return iter(())

        title = format_label(record, now=now)
        target = path if document is None else document
        return iter((ActionOffer(title=title, arguments=(target, line)),))

    async def resolve_permalink(self, path: str, line: int) -> PermalinkOutcome:
        """Work out where the "open on remote" action should lead.

        Unlike :meth:`offer_actions` every failure is reported, because the
        user explicitly asked for the link.
        """
        state = await derive_repo_state(self.invoker, path)
        if state is None:
            return self._warn(ShowWarning(WarningReason.NOT_IN_REPOSITORY))

        remote, record = await asyncio.gather(
            self.invoker.query(RemoteUrlQuery(state.identity.root, self.remote_name)),
            self._cached_attribution(state, path, line) if line >= 1 else _nothing(),
        )

        if remote is None:
            return self._warn(ShowWarning(WarningReason.NO_REMOTE, self.remote_name))
        if record is None:
            return self._warn(ShowWarning(WarningReason.NO_ATTRIBUTION))

        base_url = normalize_remote(remote)
        if base_url is None:
            return self._warn(ShowWarning(WarningReason.UNSUPPORTED_REMOTE, remote))

        url = build_permalink(base_url, state.identity.relative_path, record.commit_id, line)
        logger.debug("Permalink for %s:%d is %s", path, line, url)
        return OpenUrl(url)

    def invalidate(self) -> None:
        """Forget every cached attribution; called whenever a file is saved."""
        logger.debug("Clearing %d cached attributions", len(self.cache))
        self.cache.clear()

    @staticmethod
    def _warn(warning: ShowWarning) -> ShowWarning:
        logger.info("%s", warning.message)
        return warning


async def _nothing() -> None:
    return None
