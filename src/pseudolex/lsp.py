"""Minimal LSP server for pseudocode, diagnostics only."""

from __future__ import annotations

from lsprotocol.types import (
    TEXT_DOCUMENT_DID_CHANGE,
    TEXT_DOCUMENT_DID_OPEN,
    Diagnostic,
    DiagnosticSeverity,
    DidChangeTextDocumentParams,
    DidOpenTextDocumentParams,
    Position,
    PublishDiagnosticsParams,
    Range,
    TextDocumentSyncKind,
)
from pygls.lsp.server import LanguageServer

from pseudolex import __version__
from pseudolex.errors import LexError
from pseudolex.lexer import LexerOptions, tokenize
from pseudolex.tokens import Loc

server = LanguageServer(
    "pseudolex-lsp", __version__, text_document_sync_kind=TextDocumentSyncKind.Full
)

# Editors see the whole language surface
_OPTIONS = LexerOptions(do_until=True, argument_modifiers=True)


def _to_position(source: str, loc: Loc) -> Position:
    """Convert a Loc to an LSP position.

    Loc columns count a tab as four cells; LSP characters count it as one, so
    the character is recomputed from the offset.
    """
    line_start = source.rfind("\n", 0, loc.offset) + 1
    return Position(line=loc.line, character=loc.offset - line_start)


def _validate(ls: LanguageServer, uri: str) -> None:
    """Lex the document and publish diagnostics."""
    doc = ls.workspace.get_text_document(uri)
    source = doc.source
    diagnostics: list[Diagnostic] = []

    try:
        tokenize(source, _OPTIONS)
    except LexError as exc:
        start = _to_position(source, exc.span.start)
        end = _to_position(source, exc.span.stop)
        if end == start:
            end = Position(line=start.line, character=start.character + 1)
        diagnostics.append(
            Diagnostic(
                range=Range(start=start, end=end),
                message=exc.message,
                severity=DiagnosticSeverity.Error,
                source="pseudolex",
            )
        )

    ls.text_document_publish_diagnostics(
        PublishDiagnosticsParams(uri=uri, diagnostics=diagnostics)
    )


@server.feature(TEXT_DOCUMENT_DID_OPEN)
def did_open(ls: LanguageServer, params: DidOpenTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


@server.feature(TEXT_DOCUMENT_DID_CHANGE)
def did_change(ls: LanguageServer, params: DidChangeTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


def main() -> None:
    server.start_io()
