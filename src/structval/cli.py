"""CLI interface for structval using Typer framework."""

import json as jsonlib
import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from structval import __description__, __version__
from structval.config import LogLevel, load_options, load_record, load_schema
from structval.engine import ValidationEngine, ValidationResult
from structval.exceptions import StructvalError
from structval.fields import schema_fields
from structval.parser import RuleParser
from structval.rule import FailureCode, FieldValue
from structval.validator import validate_record

app = typer.Typer(
    name="structval",
    help=__description__,
    add_completion=False,
    rich_markup_mode="rich"
)

console = Console()

USAGE_EXIT_CODE = 2

_LOG_LEVELS = {
    LogLevel.ERROR.value: logging.ERROR,
    LogLevel.WARN.value: logging.WARNING,
    LogLevel.INFO.value: logging.INFO,
    LogLevel.DEBUG.value: logging.DEBUG,
}


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=_LOG_LEVELS.get(level, logging.WARNING),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def version_callback(value: bool) -> None:
    """Show version information and exit."""
    if value:
        console.print(f"structval version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option("--version", "-v", callback=version_callback, help="Show version and exit")
    ] = False,
) -> None:
    """structval - Validate record fields against compact rule text."""


def _print_result(result: ValidationResult, format: str) -> None:
    if format == "json":
        console.print(jsonlib.dumps(result.to_dict(), indent=2))
        return

    status_color = "green" if result.valid else "red"
    console.print(f"[{status_color}]Validation Status: {'VALID' if result.valid else 'INVALID'}[/{status_color}]")

    if not result.failures:
        console.print("\n[green]No failures found![/green]")
        return

    table = Table()
    table.add_column("Field", style="cyan")
    table.add_column("Code", style="white", justify="right")
    table.add_column("Reasons", style="red")

    for name, codes in result.failures.items():
        table.add_row(name, str(int(codes)), ", ".join(codes.names()))

    console.print(table)


@app.command()
def validate(
    record: Annotated[
        Path,
        typer.Argument(help="JSON file holding the record's field values")
    ],
    schema: Annotated[
        Path,
        typer.Option("--schema", "-s", help="JSON record schema declaring fields and their rule tags")
    ],
    options: Annotated[
        Optional[Path],
        typer.Option("--options", "-o", help="JSON validation options file (default: empty options)")
    ] = None,
    format: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format: table, json (default: table)")
    ] = "table",
    log_level: Annotated[
        str,
        typer.Option("--log-level", "-l", help="Log level: error, warn, info, debug (default: warn)")
    ] = LogLevel.WARN.value,
) -> None:
    """Validate a JSON record against a record schema."""
    valid_formats = ["table", "json"]

    if format not in valid_formats:
        console.print(f"[red]Error:[/red] Invalid format '{format}'. Must be one of: {', '.join(valid_formats)}")
        raise typer.Exit(USAGE_EXIT_CODE)

    if log_level not in _LOG_LEVELS:
        console.print(f"[red]Error:[/red] Invalid log level '{log_level}'. Must be one of: {', '.join(_LOG_LEVELS)}")
        raise typer.Exit(USAGE_EXIT_CODE)

    try:
        _setup_logging(log_level)
        validation_options = load_options(options)

        record_schema = load_schema(schema)
        values = load_record(record)
        result = validate_record(values, schema_fields(record_schema), validation_options)
    except (StructvalError, ValueError, FileNotFoundError) as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(USAGE_EXIT_CODE)

    _print_result(result, format)
    raise typer.Exit(result.exit_code)


@app.command()
def check(
    value: Annotated[
        str,
        typer.Argument(help="Value to check")
    ],
    rule: Annotated[
        str,
        typer.Option("--rule", "-r", help="Rule text, e.g. 'req lenmin:5 lenmax:25'")
    ] = "",
    pattern: Annotated[
        str,
        typer.Option("--pattern", "-p", help="Pattern overriding any regexp: token")
    ] = "",
    integer: Annotated[
        bool,
        typer.Option("--integer", "-i", help="Treat the value as an integer")
    ] = False,
    name: Annotated[
        Optional[str],
        typer.Option("--name", "-n", help="Field name used for suffix inference (e.g. ContactEmail)")
    ] = None,
) -> None:
    """Check a single value against rule text."""
    try:
        if integer:
            try:
                field_value = FieldValue.integer(int(value))
            except ValueError:
                raise ValueError(f"Not an integer: {value}") from None
        else:
            field_value = FieldValue.text(value)
        parsed = RuleParser().parse(rule, pattern, name)
    except (StructvalError, ValueError) as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(USAGE_EXIT_CODE)

    ok, codes = ValidationEngine().evaluate(field_value, parsed)

    console.print(f"Rule: [cyan]{escape(parsed.describe() or '(none)')}[/cyan]")
    if ok:
        console.print("[green]OK[/green]")
        raise typer.Exit(0)

    console.print(f"[red]FAIL[/red] {int(codes)}: {', '.join(codes.names())}")
    raise typer.Exit(1)


@app.command()
def codes() -> None:
    """List failure codes and their bit values."""
    table = Table()
    table.add_column("Code", style="cyan")
    table.add_column("Value", style="white", justify="right")

    for code in FailureCode:
        if code:
            table.add_row(code.name, str(int(code)))

    console.print(table)
