"""Field extractors: date, amount, description and balance.

Each extractor works on a single line and returns the value it found plus
the matched text, so later layers can remove or cross-reference it.
"""

from .amounts import classify_amounts, extract_amounts, resolve_direction
from .balance import extract_balance
from .dates import extract_date
from .description import extract_description, title_case_description

__all__ = [
    "classify_amounts",
    "extract_amounts",
    "extract_balance",
    "extract_date",
    "extract_description",
    "resolve_direction",
    "title_case_description",
]
