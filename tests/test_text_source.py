import threading
from pathlib import Path

import pytest
from pdfminer.pdfdocument import PDFPasswordIncorrect
from pdfminer.pdfparser import PDFSyntaxError

from statement_parser import text_source
from statement_parser.text_source import (
    ExtractionErrorCode,
    TextExtractionError,
    extract_pdf_text,
    normalize_extracted_text,
    read_text_file,
)


class _FakePage:
    def __init__(self, text: str | None = None, error: Exception | None = None):
        self._text = text
        self._error = error

    def extract_text(self):
        if self._error is not None:
            raise self._error
        return self._text


class _FakePdf:
    def __init__(self, pages, metadata=None):
        self.pages = pages
        self.metadata = metadata or {}

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


def _fake_open(monkeypatch: pytest.MonkeyPatch, result) -> list:
    calls: list = []

    def _open(path, *args, **kwargs):
        calls.append(path)
        if isinstance(result, BaseException):
            raise result
        return result

    monkeypatch.setattr(text_source.pdfplumber, "open", _open)
    return calls


@pytest.fixture()
def pdf_path(tmp_path: Path) -> Path:
    path = tmp_path / "statement.pdf"
    path.write_bytes(b"%PDF-1.4 fake")
    return path


def test_normalize_extracted_text():
    raw = "  15/01/2024   Coffee\t\t4.50 \r\n\r\n\x00Page 1\x07\rlast  line  "
    assert normalize_extracted_text(raw) == "15/01/2024 Coffee 4.50\nPage 1\nlast line"


def test_read_text_file(tmp_path: Path):
    path = tmp_path / "statement.txt"
    path.write_text("15/01/2024 Café -4.50\n", encoding="utf-8")
    assert read_text_file(path) == "15/01/2024 Café -4.50\n"


def test_extracts_pages_with_progress(monkeypatch: pytest.MonkeyPatch, pdf_path: Path):
    pdf = _FakePdf(
        [_FakePage("Page 1\n15/01/2024  Coffee  4.50"), _FakePage(None)],
        metadata={"Title": "November statement", "Author": b"Bank"},
    )
    _fake_open(monkeypatch, pdf)
    seen = []

    result = extract_pdf_text(pdf_path, on_progress=seen.append)

    assert result.text == "Page 1\n15/01/2024 Coffee 4.50"
    assert result.page_count == 2
    assert result.metadata.file_name == "statement.pdf"
    assert result.metadata.file_size == len(b"%PDF-1.4 fake")
    assert result.metadata.title == "November statement"
    assert result.metadata.author == "Bank"
    assert result.metadata.subject is None
    assert [(p.current_page, p.percentage) for p in seen] == [(0, 0), (1, 50), (2, 100)]
    assert seen[0].message == "Loaded PDF with 2 pages"


def test_cancelled_before_start(monkeypatch: pytest.MonkeyPatch, pdf_path: Path):
    calls = _fake_open(monkeypatch, _FakePdf([_FakePage("x")]))
    event = threading.Event()
    event.set()

    with pytest.raises(TextExtractionError) as excinfo:
        extract_pdf_text(pdf_path, cancel_event=event)

    assert excinfo.value.code is ExtractionErrorCode.CANCELLED
    assert calls == []


def test_cancelled_between_pages(monkeypatch: pytest.MonkeyPatch, pdf_path: Path):
    event = threading.Event()
    _fake_open(monkeypatch, _FakePdf([_FakePage("first page text"), _FakePage("second")]))

    def _progress(p):
        if p.current_page == 1:
            event.set()

    with pytest.raises(TextExtractionError) as excinfo:
        extract_pdf_text(pdf_path, on_progress=_progress, cancel_event=event)
    assert excinfo.value.code is ExtractionErrorCode.CANCELLED


def test_password_protected(monkeypatch: pytest.MonkeyPatch, pdf_path: Path):
    _fake_open(monkeypatch, PDFPasswordIncorrect())
    with pytest.raises(TextExtractionError) as excinfo:
        extract_pdf_text(pdf_path)
    assert excinfo.value.code is ExtractionErrorCode.PASSWORD_PROTECTED


def test_wrapped_pdfminer_errors_are_classified(monkeypatch: pytest.MonkeyPatch, pdf_path: Path):
    _fake_open(monkeypatch, Exception(PDFSyntaxError("No /Root object!")))
    with pytest.raises(TextExtractionError) as excinfo:
        extract_pdf_text(pdf_path)
    assert excinfo.value.code is ExtractionErrorCode.INVALID_DOCUMENT


def test_other_load_failures(monkeypatch: pytest.MonkeyPatch, pdf_path: Path):
    _fake_open(monkeypatch, RuntimeError("boom"))
    with pytest.raises(TextExtractionError) as excinfo:
        extract_pdf_text(pdf_path)
    assert excinfo.value.code is ExtractionErrorCode.LOAD_FAILED
    assert "boom" in str(excinfo.value)


def test_scanned_document_has_no_text(monkeypatch: pytest.MonkeyPatch, pdf_path: Path):
    _fake_open(monkeypatch, _FakePdf([_FakePage(None), _FakePage("   ")]))
    with pytest.raises(TextExtractionError) as excinfo:
        extract_pdf_text(pdf_path)
    assert excinfo.value.code is ExtractionErrorCode.NO_TEXT


def test_page_failure(monkeypatch: pytest.MonkeyPatch, pdf_path: Path):
    _fake_open(monkeypatch, _FakePdf([_FakePage(error=ValueError("bad content stream"))]))
    with pytest.raises(TextExtractionError) as excinfo:
        extract_pdf_text(pdf_path)
    assert excinfo.value.code is ExtractionErrorCode.EXTRACTION_FAILED
    assert isinstance(excinfo.value.__cause__, ValueError)
