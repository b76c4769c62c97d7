"""File-level entry point for the ``statement_parser`` package.

Combines the text source and the parsing engine: give it a statement file
and get a :class:`~statement_parser.models.ParsingResult` back. PDF files go
through :func:`~statement_parser.text_source.extract_pdf_text`; any other
file is read as already-extracted UTF-8 text.
"""

from __future__ import annotations

import threading
from pathlib import Path

from .engine import parse_transactions
from .keywords import SignKeywords
from .logging_setup import get_logger
from .models import ParsingOptions, ParsingResult
from .text_source import ProgressCallback, extract_pdf_text, read_text_file

logger = get_logger("statement_parser.api")


def load_statement_text(
    path: str | Path,
    *,
    on_progress: ProgressCallback | None = None,
    cancel_event: threading.Event | None = None,
) -> str:
    p = Path(path)
    if p.suffix.lower() == ".pdf":
        return extract_pdf_text(p, on_progress=on_progress, cancel_event=cancel_event).text
    logger.debug("reading %s as plain text", p)
    return read_text_file(p)


def parse_statement_file(
    path: str | Path,
    options: ParsingOptions | None = None,
    *,
    keywords: SignKeywords | None = None,
    on_progress: ProgressCallback | None = None,
    cancel_event: threading.Event | None = None,
) -> ParsingResult:
    """Parse the statement at ``path``.

    Raises
    ------
    TextExtractionError
        When a PDF cannot be read (see ``ExtractionErrorCode``).
    OSError
        When the file cannot be opened.
    """

    text = load_statement_text(path, on_progress=on_progress, cancel_event=cancel_event)
    return parse_transactions(text, options, keywords=keywords)


__all__ = ["load_statement_text", "parse_statement_file"]
