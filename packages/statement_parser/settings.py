"""Environment-driven configuration.

Recognized variables (all optional):

- ``STATEMENT_PARSER_MIN_CONFIDENCE``: integer threshold in ``[0, 100]``.
- ``STATEMENT_PARSER_DATE_FORMAT``: ``DD/MM/YYYY``, ``MM/DD/YYYY`` or ``auto``.
- ``STATEMENT_PARSER_STRICT``: boolean (``1/0``, ``true/false``, ``yes/no``, ``on/off``).
- ``STATEMENT_PARSER_KEYWORDS_FILE``: path to a JSON sign keyword table.

Entrypoints load ``.env`` first (see ``cli``); these helpers only read
``os.environ``.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from .keywords import DEFAULT_SIGN_KEYWORDS, SignKeywords
from .models import ParsingOptions

ENV_MIN_CONFIDENCE = "STATEMENT_PARSER_MIN_CONFIDENCE"
ENV_DATE_FORMAT = "STATEMENT_PARSER_DATE_FORMAT"
ENV_STRICT = "STATEMENT_PARSER_STRICT"
ENV_KEYWORDS_FILE = "STATEMENT_PARSER_KEYWORDS_FILE"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _env(name: str) -> str | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def _env_int(name: str) -> int | None:
    raw = _env(name)
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from e


def _env_bool(name: str) -> bool | None:
    raw = _env(name)
    if raw is None:
        return None
    lowered = raw.lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")


def options_from_env(**overrides: Any) -> ParsingOptions:
    """Build :class:`ParsingOptions` from the environment.

    Keyword ``overrides`` that are not ``None`` take precedence over the
    environment; anything unset falls back to the model defaults.
    """

    values: dict[str, Any] = {
        "min_confidence": _env_int(ENV_MIN_CONFIDENCE),
        "date_format": _env(ENV_DATE_FORMAT),
        "strict": _env_bool(ENV_STRICT),
    }
    values.update({k: v for k, v in overrides.items() if v is not None})
    return ParsingOptions(**{k: v for k, v in values.items() if v is not None})


def load_sign_keywords(path: str | Path | None = None) -> SignKeywords:
    """Load a keyword table from ``path`` or ``STATEMENT_PARSER_KEYWORDS_FILE``.

    Returns the built-in defaults when neither is given.
    """

    source = path or _env(ENV_KEYWORDS_FILE)
    if source is None:
        return DEFAULT_SIGN_KEYWORDS
    return SignKeywords.from_json_file(source)


__all__ = [
    "ENV_DATE_FORMAT",
    "ENV_KEYWORDS_FILE",
    "ENV_MIN_CONFIDENCE",
    "ENV_STRICT",
    "load_sign_keywords",
    "options_from_env",
]
