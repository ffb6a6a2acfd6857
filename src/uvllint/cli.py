from __future__ import annotations

import json
import logging
from dataclasses import asdict, is_dataclass
from enum import Enum
from importlib.metadata import version
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.tree import Tree

from uvllint.config import LintConfig, discover_config_path, load_config
from uvllint.diag.cli_diagnostics import config_load_error, file_read_error
from uvllint.diag.diagnostic import Diagnostic
from uvllint.diag.reporter import DiagnosticReporter
from uvllint.diag.source import SourceText
from uvllint.linter.options import LintOptions
from uvllint.linter.pipeline import LintUnit, lint_source
from uvllint.parse.syntax import SyntaxNode

app = typer.Typer(
    help="UVL feature model linter",
    no_args_is_help=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)
inspect_app = typer.Typer(help="Inspect the syntax tree and declarations of a model")

app.add_typer(inspect_app, name="inspect")
app.add_typer(inspect_app, name="ins")

LOGGER = logging.getLogger(__name__)


class LogLevel(str, Enum):
    debug = "debug"
    info = "info"
    warning = "warning"
    error = "error"


@app.callback(invoke_without_command=True)
def root_callback(ctx: typer.Context) -> None:
    if ctx.invoked_subcommand is not None:
        return

    console = Console()
    try:
        uvllint_version = version("uvllint")
    except Exception:
        uvllint_version = "unknown"

    console.print(
        Panel(
            (
                f"[bold cyan]uvllint v{uvllint_version}[/bold cyan]\n\n"
                "[white]Semantic checks for UVL feature models: duplicate declarations, "
                "cardinalities, attribute values, and constraint references.[/white]"
            ),
            title="[bold green]uvllint[/bold green]",
            border_style="bright_blue",
            expand=False,
        )
    )

    quickstart = Table(
        title="Quick Start", show_header=True, header_style="bold magenta", expand=True
    )
    quickstart.add_column("Workflow", style="bold yellow", ratio=1)
    quickstart.add_column("Command", style="green", ratio=2)
    quickstart.add_row("Check a model", "uvllint check model.uvl")
    quickstart.add_row("Machine-readable diagnostics", "uvllint check model.uvl --json")
    quickstart.add_row("Show the syntax tree", "uvllint inspect tree model.uvl")
    quickstart.add_row("Show declared features", "uvllint inspect declarations model.uvl")
    console.print(quickstart)
    console.print("[dim]Use `uvllint --help` for full command documentation.[/dim]")


def _configure_logging(level: LogLevel) -> None:
    resolved_level = getattr(logging, level.value.upper())

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    root.setLevel(resolved_level)
    formatter = logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(resolved_level)
    stream_handler.setFormatter(formatter)
    root.addHandler(stream_handler)


def _read_file(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def _to_jsonable(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return {k: _to_jsonable(v) for k, v in asdict(value).items()}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, tuple):
        return [_to_jsonable(v) for v in value]
    if isinstance(value, list):
        return [_to_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {str(k): _to_jsonable(v) for k, v in value.items()}
    return value


def _print_diags(
    console: Console,
    source: SourceText | None,
    diagnostics: list[Diagnostic],
    *,
    show_fixes: bool = True,
) -> bool:
    reporter = DiagnosticReporter(console=console, show_fixes=show_fixes)
    if diagnostics:
        reporter.print(source, diagnostics)
    return any(d.is_error for d in diagnostics)


def _load_lint_config(
    console: Console, file: Path, config: Path | None
) -> LintConfig | None:
    config_path = discover_config_path(model_path=file, explicit_config=config)
    if config_path is None:
        return LintConfig()
    LOGGER.info("Using config file: %s", config_path)
    try:
        return load_config(config_path)
    except (OSError, ValueError) as exc:
        _print_diags(console, None, [config_load_error(config_path, exc)])
        return None


def _lint_file(console: Console, file: Path, config: LintConfig) -> tuple[str, LintUnit]:
    try:
        text = _read_file(file)
    except OSError as exc:
        _print_diags(console, None, [file_read_error(file, exc)])
        raise typer.Exit(code=1) from None
    options = LintOptions(filename=str(file), disabled_codes=config.rules.disable)
    return text, lint_source(text, options=options)


def _syntax_tree(node: SyntaxNode, source: SourceText, branch: Tree | None = None) -> Tree:
    snippet = source.slice(node.start, node.end).strip().splitlines()
    preview = snippet[0] if snippet else ""
    if len(preview) > 40:
        preview = preview[:37] + "..."
    label = f"[bold]{node.name}[/bold] [dim]{node.start}..{node.end}[/dim] {escape(preview)}"
    current = Tree(label) if branch is None else branch.add(label)
    for child in node.children:
        _syntax_tree(child, source, current)
    return current


@app.command("check", help="Validate a UVL model and report diagnostics.")
def check(
    file: Path = typer.Argument(..., help="Path to the UVL model file."),
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to a uvllint TOML config (defaults to uvllint.toml next to the model).",
    ),
    json_out: bool = typer.Option(False, "--json", "-j", help="Print diagnostics as JSON."),
    no_color: bool = typer.Option(False, "--no-color", "-n", help="Disable ANSI color output."),
    log_level: LogLevel = typer.Option(
        LogLevel.warning,
        "--log-level",
        "-l",
        help="Set CLI log verbosity.",
    ),
) -> None:
    console = Console(no_color=no_color)
    _configure_logging(log_level)

    lint_config = _load_lint_config(console, file, config)
    if lint_config is None:
        raise typer.Exit(code=1)

    text, unit = _lint_file(console, file, lint_config)
    has_errors = any(d.is_error for d in unit.diagnostics)

    if json_out:
        typer.echo(json.dumps(_to_jsonable(unit.diagnostics), indent=2, sort_keys=True))
    else:
        _print_diags(
            console,
            SourceText(text, str(file)),
            unit.diagnostics,
            show_fixes=lint_config.report.show_fixes,
        )
        if not unit.diagnostics:
            console.print("No diagnostics.")
    if has_errors:
        raise typer.Exit(code=1)


@inspect_app.command("tree", help="Parse a UVL model and print its syntax tree.")
def inspect_tree(
    file: Path = typer.Argument(..., help="Path to the UVL model file."),
    json_out: bool = typer.Option(False, "--json", "-j", help="Print the tree as JSON."),
    no_color: bool = typer.Option(False, "--no-color", "-n", help="Disable ANSI color output."),
    log_level: LogLevel = typer.Option(
        LogLevel.warning,
        "--log-level",
        "-l",
        help="Set CLI log verbosity.",
    ),
) -> None:
    console = Console(no_color=no_color)
    _configure_logging(log_level)

    text, unit = _lint_file(console, file, LintConfig())
    source = SourceText(text, str(file))
    if unit.tree is None:
        _print_diags(console, source, unit.diagnostics)
        raise typer.Exit(code=1)

    if json_out:
        typer.echo(json.dumps(_to_jsonable(unit.tree), indent=2))
    else:
        console.print(_syntax_tree(unit.tree, source))


@inspect_app.command("declarations", help="Print declared features and inferred key types.")
def inspect_declarations(
    file: Path = typer.Argument(..., help="Path to the UVL model file."),
    json_out: bool = typer.Option(False, "--json", "-j", help="Print declarations as JSON."),
    no_color: bool = typer.Option(False, "--no-color", "-n", help="Disable ANSI color output."),
    log_level: LogLevel = typer.Option(
        LogLevel.warning,
        "--log-level",
        "-l",
        help="Set CLI log verbosity.",
    ),
) -> None:
    console = Console(no_color=no_color)
    _configure_logging(log_level)

    text, unit = _lint_file(console, file, LintConfig())
    if unit.table is None:
        _print_diags(console, SourceText(text, str(file)), unit.diagnostics)
        raise typer.Exit(code=1)

    if json_out:
        payload = {
            entry.name: [
                {"key": attribute.key, "type": attribute.value_type.value}
                for attribute in entry.keys
            ]
            for entry in unit.table
        }
        typer.echo(json.dumps(payload, indent=2))
        return

    table = Table(title="Declared features", show_header=True, header_style="bold magenta")
    table.add_column("Feature", style="bold yellow")
    table.add_column("Attributes", style="green")
    for entry in unit.table:
        attributes = ", ".join(
            f"{attribute.key}: {attribute.value_type.value}" for attribute in entry.keys
        )
        table.add_row(escape(entry.name), escape(attributes) or "[dim]none[/dim]")
    console.print(table)


def main() -> None:
    app()
