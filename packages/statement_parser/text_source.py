"""Document text source.

Turns a digital statement PDF into the page-concatenated text the parsing
engine consumes. Text is read page by page with ``pdfplumber``; progress is
reported through an optional callback and the run can be cancelled between
pages with a ``threading.Event``.

Failures are raised as :class:`TextExtractionError` whose ``code`` tells the
caller what went wrong (password protection, not a PDF, no text layer, ...).
Scanned documents are reported as ``NO_TEXT``; there is no OCR fallback.
"""

from __future__ import annotations

import re
import threading
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum
from pathlib import Path
from typing import Any, TypeAlias

import pdfplumber
from pdfminer.pdfdocument import PDFEncryptionError, PDFPasswordIncorrect
from pdfminer.pdfparser import PDFSyntaxError

from .logging_setup import get_logger

logger = get_logger("statement_parser.text_source")


class ExtractionErrorCode(StrEnum):
    PASSWORD_PROTECTED = "PASSWORD_PROTECTED"
    INVALID_DOCUMENT = "INVALID_DOCUMENT"
    NO_TEXT = "NO_TEXT"
    CANCELLED = "CANCELLED"
    LOAD_FAILED = "LOAD_FAILED"
    EXTRACTION_FAILED = "EXTRACTION_FAILED"


class TextExtractionError(Exception):
    """Raised when text cannot be obtained from a document."""

    def __init__(self, code: ExtractionErrorCode, message: str, details: str | None = None):
        super().__init__(message)
        self.code = code
        self.details = details

    def __str__(self) -> str:
        base = super().__str__()
        return f"{base}: {self.details}" if self.details else base


@dataclass(frozen=True, slots=True)
class DocumentMetadata:
    file_name: str
    file_size: int
    page_count: int
    extraction_date: str
    title: str | None = None
    author: str | None = None
    subject: str | None = None
    creator: str | None = None
    producer: str | None = None


@dataclass(frozen=True, slots=True)
class ExtractionProgress:
    current_page: int
    total_pages: int
    percentage: int
    message: str


@dataclass(frozen=True, slots=True)
class ExtractionResult:
    text: str
    page_count: int
    metadata: DocumentMetadata


ProgressCallback: TypeAlias = Callable[[ExtractionProgress], None]


# ---------------------------------------------------------------------------
# Extracted-text normalization
# ---------------------------------------------------------------------------

_CONTROL_RX = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_INLINE_SPACE_RX = re.compile(r"[ \t]+")


def normalize_extracted_text(text: str) -> str:
    """Normalize raw extracted text.

    CRLF and lone CR become LF, control characters other than newline and tab
    are removed, runs of spaces/tabs collapse to one space, every line is
    trimmed and empty lines are dropped.
    """

    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = _CONTROL_RX.sub("", text)
    lines = (_INLINE_SPACE_RX.sub(" ", ln).strip() for ln in text.split("\n"))
    return "\n".join(ln for ln in lines if ln)


def read_text_file(path: str | Path) -> str:
    """Load already-extracted statement text (UTF-8)."""

    return Path(path).read_text(encoding="utf-8")


# ---------------------------------------------------------------------------
# PDF extraction
# ---------------------------------------------------------------------------


def _exception_chain(exc: BaseException) -> Iterator[BaseException]:
    # pdfplumber wraps pdfminer errors; the original may sit in args or the
    # cause/context chain.
    seen: set[int] = set()
    stack: list[BaseException] = [exc]
    while stack:
        current = stack.pop()
        if id(current) in seen:
            continue
        seen.add(id(current))
        yield current
        stack.extend(a for a in current.args if isinstance(a, BaseException))
        for linked in (current.__cause__, current.__context__):
            if linked is not None:
                stack.append(linked)


def _classify_load_error(exc: Exception) -> TextExtractionError:
    chain = list(_exception_chain(exc))
    if any(isinstance(e, PDFPasswordIncorrect | PDFEncryptionError) for e in chain):
        return TextExtractionError(
            ExtractionErrorCode.PASSWORD_PROTECTED,
            "PDF is password protected",
            "Encrypted or password-protected PDFs are not supported; "
            "remove the password and try again.",
        )
    if any(isinstance(e, PDFSyntaxError) for e in chain):
        return TextExtractionError(
            ExtractionErrorCode.INVALID_DOCUMENT,
            "Invalid PDF file",
            "The file does not appear to be a valid PDF document.",
        )
    return TextExtractionError(ExtractionErrorCode.LOAD_FAILED, "Failed to load PDF", str(exc))


def _info_str(info: dict[str, Any], key: str) -> str | None:
    value = info.get(key)
    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="replace")
    return value if isinstance(value, str) and value else None


def _check_cancelled(cancel_event: threading.Event | None) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise TextExtractionError(ExtractionErrorCode.CANCELLED, "Extraction cancelled")


def extract_pdf_text(
    path: str | Path,
    *,
    on_progress: ProgressCallback | None = None,
    cancel_event: threading.Event | None = None,
) -> ExtractionResult:
    """Extract and normalize the text of every page of the PDF at ``path``.

    ``on_progress`` receives one report after the document loads (page 0)
    and one after each page. Pages are joined with a blank line before
    normalization.

    Raises
    ------
    TextExtractionError
        With ``code`` set to the failure kind.
    """

    p = Path(path)
    _check_cancelled(cancel_event)

    try:
        pdf = pdfplumber.open(p)
    except FileNotFoundError:
        raise
    except Exception as e:
        raise _classify_load_error(e) from e

    try:
        with pdf:
            total = len(pdf.pages)
            info = pdf.metadata or {}
            metadata = DocumentMetadata(
                file_name=p.name,
                file_size=p.stat().st_size,
                page_count=total,
                extraction_date=datetime.now(UTC).isoformat(),
                title=_info_str(info, "Title"),
                author=_info_str(info, "Author"),
                subject=_info_str(info, "Subject"),
                creator=_info_str(info, "Creator"),
                producer=_info_str(info, "Producer"),
            )

            if on_progress is not None:
                plural = "" if total == 1 else "s"
                on_progress(ExtractionProgress(0, total, 0, f"Loaded PDF with {total} page{plural}"))

            page_texts: list[str] = []
            for number, page in enumerate(pdf.pages, 1):
                _check_cancelled(cancel_event)
                page_texts.append(normalize_extracted_text(page.extract_text() or ""))
                logger.debug("extracted page %d/%d", number, total)
                if on_progress is not None:
                    on_progress(
                        ExtractionProgress(
                            current_page=number,
                            total_pages=total,
                            percentage=round(number / total * 100),
                            message=f"Extracting page {number} of {total}...",
                        )
                    )
    except TextExtractionError:
        raise
    except Exception as e:
        raise TextExtractionError(
            ExtractionErrorCode.EXTRACTION_FAILED, "Failed to extract text from PDF", str(e)
        ) from e

    text = normalize_extracted_text("\n\n".join(page_texts))
    if not text:
        raise TextExtractionError(
            ExtractionErrorCode.NO_TEXT,
            "No text found in PDF",
            "The document appears to contain only images or scanned content.",
        )

    logger.info("extracted %d character(s) from %d page(s) of %s", len(text), total, p.name)
    return ExtractionResult(text=text, page_count=total, metadata=metadata)


__all__ = [
    "DocumentMetadata",
    "ExtractionErrorCode",
    "ExtractionProgress",
    "ExtractionResult",
    "ProgressCallback",
    "TextExtractionError",
    "extract_pdf_text",
    "normalize_extracted_text",
    "read_text_file",
]
