"""Pytest configuration for test isolation.

Parsing options and the keyword table can be driven by ``STATEMENT_PARSER_*``
environment variables (and a local ``.env`` loaded by the CLI). A developer's
shell may have some of them set, which would silently change thresholds or
date order under the tests. An autouse fixture removes them for every test.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

_ROOT = Path(__file__).resolve().parents[1]
_PKG_DIR = _ROOT / "packages"
# Make sure the workspace `packages/` dir is on sys.path so `statement_parser` is importable
if str(_PKG_DIR) not in sys.path:
    sys.path.insert(0, str(_PKG_DIR))


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop any ``STATEMENT_PARSER_*`` variables inherited from the shell."""

    for name in list(os.environ):
        if name.startswith("STATEMENT_PARSER_"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _reset_logging(monkeypatch: pytest.MonkeyPatch):
    """Let every test configure package logging afresh.

    CLI tests run the root callback, which attaches a handler bound to the
    runner's temporary stderr; it must not outlive the test.
    """

    import logging

    from statement_parser import logging_setup

    monkeypatch.setattr(logging_setup, "_CONFIGURED", False)
    pkg_logger = logging.getLogger("statement_parser")
    saved = (list(pkg_logger.handlers), pkg_logger.level, pkg_logger.propagate)
    yield
    pkg_logger.handlers[:] = saved[0]
    pkg_logger.setLevel(saved[1])
    pkg_logger.propagate = saved[2]
