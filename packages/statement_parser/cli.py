"""CLI for the ``statement_parser`` package.

``statement-parser parse --input statement.pdf`` extracts the statement text,
runs the parsing engine and writes CSV (or JSON with ``--json``) to stdout or
to ``--output``. A short summary goes to stderr so stdout stays machine
readable.

Settings not given on the command line come from ``STATEMENT_PARSER_*``
environment variables, which may be provided by a local ``.env`` loaded with
``python-dotenv`` before any command runs.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .logging_setup import configure_logging
from .models import ParsingResult

console = Console(stderr=True)


def _error_message(e: Exception) -> str:
    if isinstance(e, ValidationError):
        first = e.errors()[0]
        loc = ".".join(str(part) for part in first.get("loc", ())) or "value"
        return f"invalid {loc}: {first.get('msg', e)}"
    return str(e)


def _print_summary(result: ParsingResult, *, show_skipped: bool) -> None:
    meta = result.metadata
    table = Table(show_header=False, box=None)
    table.add_row("Lines", str(meta.total_lines))
    table.add_row("Candidates", str(meta.candidate_lines))
    table.add_row("Parsed", f"[green]{meta.parsed_transactions}[/green]")
    table.add_row("Skipped", f"[yellow]{meta.skipped_lines}[/yellow]")
    table.add_row("Avg confidence", f"{meta.avg_confidence}%")
    console.print(Panel(table, title="Parsing Summary", border_style="green"))

    if show_skipped and result.skipped:
        skipped = Table(title="Skipped lines")
        skipped.add_column("#", justify="right")
        skipped.add_column("Line", overflow="fold")
        skipped.add_column("Reason", overflow="fold")
        for s in result.skipped:
            skipped.add_row(str(s.line_number), s.line, s.reason)
        console.print(skipped)


def cmd_parse(
    input_path: str | Path,
    *,
    output: str | Path | None = None,
    min_confidence: int | None = None,
    date_format: str | None = None,
    strict: bool | None = None,
    keywords_file: str | Path | None = None,
    columns: str = "debit_credit",
    as_json: bool = False,
    show_skipped: bool = False,
    title_case: bool = False,
) -> int:
    """Parse a statement file and write the transactions.

    Behavior
    --------
    - ``.pdf`` inputs go through the PDF text source; other files are read as
      UTF-8 text that was extracted already.
    - Without ``--json`` the accepted transactions are written as CSV in the
      chosen column style; with it, the full result (transactions, skipped
      lines, metadata) is written as JSON.
    - Output goes to ``output`` when given, otherwise to stdout.

    Errors are written to stderr and the function returns a non-zero exit
    status. On success, returns ``0``.
    """

    import json

    # Local imports keep CLI startup fast
    from .api import parse_statement_file
    from .export import export_csv
    from .extractors import title_case_description
    from .settings import load_sign_keywords, options_from_env
    from .text_source import TextExtractionError

    try:
        options = options_from_env(
            min_confidence=min_confidence, date_format=date_format, strict=strict
        )
        keywords = load_sign_keywords(keywords_file)
    except (ValueError, OSError) as e:
        print(f"Error: {_error_message(e)}", file=sys.stderr)
        return 1

    try:
        result = parse_statement_file(input_path, options, keywords=keywords)
    except FileNotFoundError:
        print(f"Error: File not found: {input_path}", file=sys.stderr)
        return 1
    except PermissionError:
        print(f"Error: Permission denied: {input_path}", file=sys.stderr)
        return 1
    except UnicodeDecodeError:
        print(f"Error: {input_path} is not UTF-8 text or a PDF", file=sys.stderr)
        return 1
    except TextExtractionError as e:
        print(f"Error: [{e.code}] {e}", file=sys.stderr)
        return 1

    if as_json:
        rendered = json.dumps(result.to_dict(), indent=2) + "\n"
    else:
        try:
            export = export_csv(
                result.transactions,
                Path(input_path).name,
                column_style=columns,  # type: ignore[arg-type]
                describe=title_case_description if title_case else None,
            )
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        rendered = export.csv

    if output is not None:
        try:
            Path(output).write_text(rendered, encoding="utf-8")
        except OSError as e:
            print(f"Error: failed to write {output}: {e}", file=sys.stderr)
            return 1
    else:
        sys.stdout.write(rendered)

    if not as_json or show_skipped:
        _print_summary(result, show_skipped=show_skipped)
    if output is not None:
        console.print(f"[cyan]Wrote[/cyan] {output}")
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Convert bank statement PDFs (or extracted text) into CSV transactions. "
        "Loads STATEMENT_PARSER_* settings from a local .env before running."
    ),
)


@app.command("parse")
def parse_cmd(
    input_path: Annotated[
        Path,
        typer.Option(
            "--input",
            "-i",
            help="Statement PDF, or a text file with already-extracted text.",
            dir_okay=False,
        ),
    ],
    output: Annotated[
        Path | None, typer.Option("--output", "-o", help="Write here instead of stdout.")
    ] = None,
    min_confidence: Annotated[
        int | None, typer.Option(help="Minimum confidence (0-100) to accept a transaction.")
    ] = None,
    date_format: Annotated[
        str | None, typer.Option(help="DD/MM/YYYY, MM/DD/YYYY or auto (day-first).")
    ] = None,
    strict: Annotated[
        bool | None,
        typer.Option("--strict/--no-strict", help="Reject any transaction with issues."),
    ] = None,
    keywords_file: Annotated[
        Path | None, typer.Option(help="JSON table of debit/credit sign keywords.")
    ] = None,
    columns: Annotated[
        str, typer.Option(help="CSV column style: debit_credit or payment_receipt.")
    ] = "debit_credit",
    as_json: Annotated[
        bool, typer.Option("--json", help="Write the full result as JSON.")
    ] = False,
    show_skipped: Annotated[
        bool, typer.Option(help="List skipped lines with their reasons on stderr.")
    ] = False,
    title_case: Annotated[
        bool, typer.Option(help="Title-case descriptions in the CSV.")
    ] = False,
) -> None:
    """Parse a statement and write its transactions."""

    code = cmd_parse(
        input_path,
        output=output,
        min_confidence=min_confidence,
        date_format=date_format,
        strict=strict,
        keywords_file=keywords_file,
        columns=columns,
        as_json=as_json,
        show_skipped=show_skipped,
        title_case=title_case,
    )
    if code:
        raise typer.Exit(code)


@app.callback(invoke_without_command=True)
def _root(
    ctx: typer.Context,
    log_level: Annotated[
        str | None,
        typer.Option(
            "--log-level",
            help="Log level name (default: STATEMENT_PARSER_LOG_LEVEL, else WARNING)",
        ),
    ] = None,
) -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures logging.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging(log_level)

    if ctx.invoked_subcommand is None:
        typer.echo("No subcommand provided. Use --help to see available commands.")
        raise typer.Exit(1)


if __name__ == "__main__":  # pragma: no cover
    app()
