"""Public interface for the ``statement_parser`` package.

Re-exports the parsing entry points and the public models. There is no
runtime logic here, only symbol re-exports.
"""

from .api import parse_statement_file
from .engine import parse_line, parse_transactions
from .export import CsvExport, export_csv, transactions_to_csv
from .keywords import DEFAULT_SIGN_KEYWORDS, SignKeywords
from .models import (
    ConfidenceFactors,
    ParsedTransaction,
    ParsingMetadata,
    ParsingOptions,
    ParsingResult,
    SkippedLine,
    Transaction,
)
from .text_source import (
    ExtractionErrorCode,
    ExtractionResult,
    TextExtractionError,
    extract_pdf_text,
)

__all__ = [
    # API
    "parse_transactions",
    "parse_line",
    "parse_statement_file",
    "extract_pdf_text",
    "transactions_to_csv",
    "export_csv",
    # Models / types
    "Transaction",
    "ParsedTransaction",
    "ConfidenceFactors",
    "SkippedLine",
    "ParsingMetadata",
    "ParsingResult",
    "ParsingOptions",
    "SignKeywords",
    "DEFAULT_SIGN_KEYWORDS",
    "CsvExport",
    "ExtractionResult",
    "ExtractionErrorCode",
    "TextExtractionError",
]
