"""
shouldkit CLI - Preview and run declarative test macros.

Shows the probes a constraint generates, the message tables declarations
expect, and the test cases a YAML declaration file expands into.
"""

from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.tree import Tree

from shouldkit.core.declarations import DeclarationFile
from shouldkit.core.errors import ConfigurationError, TargetResolutionError
from shouldkit.core.expander import Expander
from shouldkit.core.messages import ErrorMessages
from shouldkit.core.models import run_cases
from shouldkit.core.probes import (
    ProbeSet,
    generate_exact_length_probes,
    generate_length_range_probes,
    generate_minimum_length_probes,
    generate_value_range_probes,
    numeric_only_probe,
)

if TYPE_CHECKING:
    from shouldkit.core.models import CaseResult, TestCase

app = typer.Typer(
    name="shouldkit",
    help="Declarative test-generation macros for pytest",
    add_completion=False,
)

console = Console()

PROBE_KINDS = ("length_range", "length_minimum", "length_exact", "value_range", "numeric_only")


def version_callback(value: bool) -> None:
    """Display version information."""
    if value:
        from shouldkit import __version__

        console.print(f"[bold blue]shouldkit[/bold blue] v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Log expansion details"),
) -> None:
    """shouldkit - Declarative test-generation macros."""
    if verbose:
        _configure_logging()


def _configure_logging() -> None:
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


@app.command()
def probes(
    kind: str = typer.Argument(..., help=f"Constraint kind: {', '.join(PROBE_KINDS)}"),
    minimum: float = typer.Option(None, "--min", help="Lower bound"),
    maximum: float = typer.Option(None, "--max", help="Upper bound"),
    length: int = typer.Option(None, "--length", "-l", help="Exact length"),
    step: float = typer.Option(None, "--step", help="Step for fractional value ranges"),
) -> None:
    """
    Show the boundary probes a constraint generates.

    Each probe is tagged with whether the constraint should accept it.
    """
    try:
        probe_set = _generate(kind, minimum, maximum, length, step)
    except ConfigurationError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e

    table = Table(title=f"Probes for {kind}")
    table.add_column("Kind", style="cyan")
    table.add_column("Value")
    table.add_column("Length", justify="right")
    table.add_column("Expected")

    for probe in probe_set.probes:
        value = probe.value
        table.add_row(
            probe.kind.value,
            repr(value) if not isinstance(value, str) or len(value) <= 40 else f"{value[:37]!r}...",
            str(len(value)) if isinstance(value, str) else "",
            "[green]valid[/green]" if probe.valid else "[red]invalid[/red]",
        )
    console.print(table)


def _as_number(value: float | None) -> Any:
    if value is not None and float(value).is_integer():
        return int(value)
    return value


def _generate(
    kind: str,
    minimum: float | None,
    maximum: float | None,
    length: int | None,
    step: float | None,
) -> ProbeSet:
    lo, hi = _as_number(minimum), _as_number(maximum)
    if kind == "length_range":
        _require(kind, min=lo, max=hi)
        return generate_length_range_probes(lo, hi)
    if kind == "length_minimum":
        _require(kind, min=lo)
        return generate_minimum_length_probes(lo)
    if kind == "length_exact":
        _require(kind, length=length)
        return generate_exact_length_probes(length)  # type: ignore[arg-type]
    if kind == "value_range":
        _require(kind, min=minimum, max=maximum)
        if step is None:
            return generate_value_range_probes(lo, hi)
        return generate_value_range_probes(minimum, maximum, step)
    if kind == "numeric_only":
        return ProbeSet(probes=[numeric_only_probe()])
    raise ConfigurationError(f"Unknown probe kind: {kind}. Available: {', '.join(PROBE_KINDS)}")


def _require(kind: str, **options: Any) -> None:
    missing = [f"--{name}" for name, value in options.items() if value is None]
    if missing:
        raise ConfigurationError(f"{kind} needs {', '.join(missing)}")


@app.command()
def messages(
    preset: str = typer.Option("rails", "--preset", "-p", help="Preset table: rails, pydantic"),
    file: str = typer.Option(None, "--file", "-f", help="YAML message table to load instead"),
    format_: str = typer.Option("console", "--format", help="Output format: console, yaml"),
) -> None:
    """Show a default error-message table."""
    try:
        table_data = ErrorMessages.from_yaml(file) if file else ErrorMessages.preset(preset)
    except (ValueError, FileNotFoundError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e

    if format_ == "yaml":
        console.print(table_data.to_yaml())
        return

    table = Table(title=f"Error messages ({file or preset})")
    table.add_column("Key", style="cyan")
    table.add_column("Template")
    table.add_column("Kind")
    for key, template in table_data.model_dump().items():
        is_pattern = len(template) > 1 and template.startswith("/") and template.endswith("/")
        table.add_row(key, template, "pattern" if is_pattern else "literal")
    console.print(table)


@app.command()
def expand(
    path: str = typer.Argument(..., help="Path to a YAML declaration file"),
    run: bool = typer.Option(False, "--run", "-r", help="Run the generated cases"),
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Log expansion details"),
) -> None:
    """
    Expand a declaration file into test cases.

    With --run the cases are executed and any failure exits with status 1.
    """
    if verbose:
        _configure_logging()

    target_path = Path(path)
    if not target_path.exists():
        console.print(f"[red]Error:[/red] Path not found: {path}")
        raise typer.Exit(1)

    try:
        declaration_file = DeclarationFile.from_yaml(target_path)
        target = resolve_target(declaration_file.target)
        expander = Expander(ErrorMessages.from_dict(declaration_file.messages))
        cases = expander.expand_all(declaration_file.parsed(), target)
    except ConfigurationError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e

    title = declaration_file.description or declaration_file.target
    console.print(
        Panel(
            f"[bold]Expanding:[/bold] {path}\n[dim]{len(cases)} cases against {declaration_file.target}[/dim]",
            title="shouldkit",
            border_style="blue",
        )
    )

    if not run:
        console.print(_case_tree(title, cases))
        return

    results = run_cases(cases)
    _display_results(title, results)
    failed = sum(1 for r in results if not r.passed)
    if failed:
        console.print(f"\n[red]{failed} of {len(results)} case(s) failed[/red]")
        raise typer.Exit(1)
    console.print(f"\n[green]✓ All {len(results)} case(s) passed[/green]")


def resolve_target(path: str) -> Any:
    """
    Import ``package.module:Attribute``.

    Raises:
        TargetResolutionError: If the module or attribute cannot be found.
    """
    module_name, _, attr = path.partition(":")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise TargetResolutionError(path, str(e)) from e
    obj: Any = module
    for part in attr.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as e:
            raise TargetResolutionError(path, f"no attribute {part!r}") from e
    return obj


def _case_tree(title: str, cases: list[TestCase]) -> Tree:
    tree = Tree(f"[bold]{title}[/bold]")
    branches: dict[tuple[str, ...], Tree] = {(): tree}
    for case in cases:
        path: tuple[str, ...] = ()
        for group in case.group:
            parent = branches[path]
            path = (*path, group)
            if path not in branches:
                branches[path] = parent.add(f"[cyan]{escape(group)}[/cyan]")
        marker = {"accepted": "[green]+[/green]", "rejected": "[red]-[/red]"}.get(case.expected.value, "[dim]*[/dim]")
        branches[path].add(f"{marker} {escape(case.description)}")
    return tree


def _display_results(title: str, results: list[CaseResult]) -> None:
    table = Table(title=title)
    table.add_column("Case")
    table.add_column("Result", justify="center")
    table.add_column("Message", style="dim")
    for result in results:
        status = "[green]✓[/green]" if result.passed else "[red]✗[/red]"
        table.add_row(escape(result.description), status, escape(result.message))
    console.print(table)


if __name__ == "__main__":
    app()
