"""Language server exposing line blame as a code action."""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Sequence
from urllib.parse import urlparse

from lsprotocol import types
from pygls.lsp.server import LanguageServer
from pygls.uris import to_fs_path

from .. import __version__
from ..config import BlameConfig, DEFAULT_CONFIG
from .contracts import OPEN_REMOTE_COMMAND, OpenUrl, PermalinkOutcome
from .service import BlameService

logger = logging.getLogger(__name__)

SERVER_NAME = "blame-lsp"


def uri_to_path(uri: str) -> Optional[str]:
    """Return the local path of a ``file:`` URI, or None for other schemes."""
    try:
        scheme = urlparse(uri).scheme
    except ValueError:
        return None
    if scheme != "file":
        return None
    path = to_fs_path(uri)
    if path is None or "\x00" in path:
        return None
    return path


def _command_arguments(args: Sequence[Any]) -> List[Any]:
    # Older clients and pygls releases pass the argument list as one value.
    if len(args) == 1 and isinstance(args[0], list):
        return list(args[0])
    return list(args)


class BlameLanguageServer:
    """pygls server delegating every request to a :class:`BlameService`."""

    def __init__(
        self,
        config: BlameConfig | None = None,
        service: BlameService | None = None,
    ):
        self.config = config or DEFAULT_CONFIG
        self.service = service or BlameService.from_config(self.config)
        self.server = LanguageServer(
            SERVER_NAME,
            __version__,
            text_document_sync_kind=types.TextDocumentSyncKind.Incremental,
        )

        # Register handlers once at initialization
        self._setup_handlers()

    def _setup_handlers(self) -> None:
        """Set up protocol handlers."""

        @self.server.feature(
            types.TEXT_DOCUMENT_CODE_ACTION,
            types.CodeActionOptions(code_action_kinds=[types.CodeActionKind.QuickFix]),
        )
        async def code_action(ls: LanguageServer, params: types.CodeActionParams):
            return await self.code_actions(ls, params)

        @self.server.command(OPEN_REMOTE_COMMAND)
        async def open_remote(ls: LanguageServer, *args: Any) -> None:
            await self.open_remote(ls, _command_arguments(args))

        @self.server.feature(types.TEXT_DOCUMENT_DID_SAVE)
        def did_save(ls: LanguageServer, params: types.DidSaveTextDocumentParams) -> None:
            self.service.invalidate()

    async def code_actions(
        self, ls: LanguageServer, params: types.CodeActionParams
    ) -> List[types.CodeAction]:
        uri = params.text_document.uri
        if uri not in ls.workspace.text_documents:
            return []
        path = uri_to_path(uri)
        if path is None:
            return []

        offers = await self.service.offer_actions(path, params.range.start.line, document=uri)
        return [
            types.CodeAction(
                title=offer.title,
                kind=types.CodeActionKind.QuickFix,
                command=types.Command(
                    title=offer.title,
                    command=offer.command,
                    arguments=list(offer.arguments),
                ),
            )
            for offer in offers
        ]

    async def open_remote(self, ls: LanguageServer, arguments: List[Any]) -> None:
        if len(arguments) < 2:
            logger.warning("Ignoring %s without arguments", OPEN_REMOTE_COMMAND)
            return
        uri, line = arguments[0], arguments[1]
        if not isinstance(uri, str) or not isinstance(line, int) or line < 1:
            logger.warning("Ignoring %s with arguments %r", OPEN_REMOTE_COMMAND, arguments)
            return
        path = uri_to_path(uri)
        if path is None:
            return

        outcome = await self.service.resolve_permalink(path, line)
        await self._deliver(ls, outcome)

    async def _deliver(self, ls: LanguageServer, outcome: PermalinkOutcome) -> None:
        if isinstance(outcome, OpenUrl):
            await self._open_url(ls, outcome)
        else:
            ls.window_show_message(
                types.ShowMessageParams(type=types.MessageType.Warning, message=outcome.message)
            )

    async def _open_url(self, ls: LanguageServer, outcome: OpenUrl) -> None:
        try:
            result = await ls.window_show_document_async(
                types.ShowDocumentParams(uri=outcome.url, external=True, take_focus=True)
            )
        except Exception as e:
            logger.warning("Client could not open %s: %s", outcome.url, e)
            result = None

        if result is None or not result.success:
            ls.window_show_message(
                types.ShowMessageParams(type=types.MessageType.Info, message=f"Open: {outcome.url}")
            )

    def run(self) -> None:
        """Serve requests over stdin/stdout until the client exits."""
        logger.info("Starting %s %s on stdio", SERVER_NAME, __version__)
        self.server.start_io()


def create_server(config: BlameConfig | None = None) -> BlameLanguageServer:
    """Create a server with a fresh cache sized from ``config``."""
    return BlameLanguageServer(config)
