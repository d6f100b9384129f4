"""Protocol adapter tests using a stand-in for the pygls server object."""

from __future__ import annotations

import asyncio
import os
from pathlib import Path
from types import SimpleNamespace
from typing import Any, List

from lsprotocol import types
from pygls.protocol.language_server import _prepare_command_arguments

from blamelsp.cache import AttributionCache
from blamelsp.config import BlameConfig
from blamelsp.git import BlameQuery
from blamelsp.lsp import OPEN_REMOTE_COMMAND
from blamelsp.lsp.server import BlameLanguageServer, _command_arguments, uri_to_path
from blamelsp.lsp.service import BlameService

from test_service import COMMIT, NOW, FakeInvoker

ROOT = Path(os.sep, "work", "repo")
PATH = ROOT / "src" / "app.ts"
URI = PATH.as_uri()


class FakeClient:
    """Records what the server asks the editor to do."""

    def __init__(self, open_uris: List[str], show_document: Any = True):
        self.workspace = SimpleNamespace(text_documents={uri: object() for uri in open_uris})
        self.messages: List[types.ShowMessageParams] = []
        self.documents: List[types.ShowDocumentParams] = []
        self._show_document = show_document

    def window_show_message(self, params: types.ShowMessageParams) -> None:
        self.messages.append(params)

    async def window_show_document_async(self, params: types.ShowDocumentParams):
        self.documents.append(params)
        if isinstance(self._show_document, Exception):
            raise self._show_document
        return types.ShowDocumentResult(success=self._show_document)


def _server(invoker: FakeInvoker) -> BlameLanguageServer:
    service = BlameService(invoker, AttributionCache(8))  # type: ignore[arg-type]
    return BlameLanguageServer(BlameConfig(), service=service)


def _code_action_params(uri: str, line: int) -> types.CodeActionParams:
    position = types.Position(line=line, character=0)
    return types.CodeActionParams(
        text_document=types.TextDocumentIdentifier(uri=uri),
        range=types.Range(start=position, end=position),
        context=types.CodeActionContext(diagnostics=[]),
    )


def test_uri_to_path_accepts_only_file_uris() -> None:
    assert uri_to_path(URI) == str(PATH)
    assert uri_to_path("untitled:Untitled-1") is None
    assert uri_to_path("https://example.com/a.ts") is None


def test_uri_with_encoded_nul_byte_is_not_a_path() -> None:
    assert uri_to_path(URI.replace("app.ts", "a%00b.ts")) is None


def test_code_action_for_open_document() -> None:
    invoker = FakeInvoker(root=str(ROOT))
    server = _server(invoker)
    client = FakeClient([URI])

    actions = asyncio.run(server.code_actions(client, _code_action_params(URI, 9)))

    assert len(actions) == 1
    action = actions[0]
    assert action.kind == types.CodeActionKind.QuickFix
    assert action.title.startswith("⎇ Ada Lovelace, ")
    assert action.command is not None
    assert action.command.command == "blame-lsp.openRemoteForLine"
    assert action.command.arguments == [URI, 10]


def test_code_action_ignores_unopened_document() -> None:
    invoker = FakeInvoker(root=str(ROOT))
    actions = asyncio.run(_server(invoker).code_actions(FakeClient([]), _code_action_params(URI, 0)))

    assert actions == []
    assert invoker.calls == []


def test_code_action_empty_without_attribution() -> None:
    invoker = FakeInvoker(root=str(ROOT), record=None)
    actions = asyncio.run(_server(invoker).code_actions(FakeClient([URI]), _code_action_params(URI, 0)))
    assert actions == []


def test_open_remote_shows_document() -> None:
    client = FakeClient([URI])

    asyncio.run(_server(FakeInvoker(root=str(ROOT))).open_remote(client, [URI, 10]))

    assert [params.uri for params in client.documents] == [
        f"https://github.com/org/repo/blob/{COMMIT}/src/app.ts#L10"
    ]
    assert client.documents[0].external is True
    assert client.messages == []


def test_open_remote_falls_back_to_message() -> None:
    for outcome in (False, RuntimeError("unsupported request")):
        client = FakeClient([URI], show_document=outcome)

        asyncio.run(_server(FakeInvoker(root=str(ROOT))).open_remote(client, [URI, 10]))

        assert len(client.messages) == 1
        assert client.messages[0].type == types.MessageType.Info
        assert client.messages[0].message.startswith("Open: https://github.com/org/repo/blob/")


def test_open_remote_warns_on_unsupported_remote() -> None:
    client = FakeClient([URI])
    invoker = FakeInvoker(root=str(ROOT), remote="ftp://example.com/x")

    asyncio.run(_server(invoker).open_remote(client, [URI, 1]))

    assert client.documents == []
    assert [(m.type, m.message) for m in client.messages] == [
        (types.MessageType.Warning, "Unsupported remote URL: ftp://example.com/x")
    ]


def test_open_remote_ignores_malformed_arguments() -> None:
    invoker = FakeInvoker(root=str(ROOT))
    client = FakeClient([URI])
    server = _server(invoker)

    for arguments in ([], [URI], [URI, "ten"], [URI, 0], [42, 1]):
        asyncio.run(server.open_remote(client, arguments))

    assert invoker.calls == []
    assert client.messages == []


def test_relative_time_in_title_uses_attribution() -> None:
    invoker = FakeInvoker(root=str(ROOT))
    offers = asyncio.run(_server(invoker).service.offer_actions(str(PATH), 0, now=NOW))
    assert next(offers).title == "⎇ Ada Lovelace, 1 hour ago · Teach the engine to loop ↗"


def test_registered_save_handler_clears_cache() -> None:
    invoker = FakeInvoker(root=str(ROOT))
    server = _server(invoker)
    asyncio.run(server.service.attribution(str(PATH), 1))
    assert len(server.service.cache) == 1

    did_save = server.server.protocol.fm.features[types.TEXT_DOCUMENT_DID_SAVE]
    did_save(types.DidSaveTextDocumentParams(text_document=types.TextDocumentIdentifier(uri=URI)))

    assert len(server.service.cache) == 0
    asyncio.run(server.service.attribution(str(PATH), 1))
    assert invoker.count(BlameQuery) == 2


def test_registered_command_receives_arguments(monkeypatch) -> None:
    server = _server(FakeInvoker(root=str(ROOT)))
    received: List[List[Any]] = []

    async def record(ls: Any, arguments: List[Any]) -> None:
        received.append(arguments)

    monkeypatch.setattr(server, "open_remote", record)
    handler = server.server.protocol.fm.commands[OPEN_REMOTE_COMMAND]
    params = types.ExecuteCommandParams(command=OPEN_REMOTE_COMMAND, arguments=[URI, 3])
    args, kwargs = _prepare_command_arguments(handler, params, server.server.protocol._converter)

    asyncio.run(handler(*args, **kwargs))

    assert received == [[URI, 3]]


def test_command_arguments_unwraps_single_list() -> None:
    assert _command_arguments(([URI, 3],)) == [URI, 3]
    assert _command_arguments((URI, 3)) == [URI, 3]
    assert _command_arguments(()) == []
