"""CLI commands for schemalens."""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Callable
from functools import wraps
from typing import Any, TypeVar

import click
from rich.console import Console
from rich.table import Table

from schemalens.config import EngineSettings, load_settings
from schemalens.document import SpecDocument, load_document
from schemalens.errors import SchemaLensError
from schemalens.forms import (
    body_content_type,
    detect_body_type,
    example_body,
    extract_form_fields,
    project,
)
from schemalens.forms.models import FormField
from schemalens.rendering import build_view, render_tree
from schemalens.resolution import pointer_name, resolve
from schemalens.synthesis import build_validator, synthesize_json

console = Console()

EXIT_ERROR = 1
EXIT_INVALID = 2

F = TypeVar("F", bound=Callable[..., Any])


def setup_logging(verbose: bool, level: str = "INFO") -> None:
    """Configure logging based on verbosity level."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else getattr(logging, level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def handle_errors(func: F) -> F:
    """Report SchemaLensError with its code and exit with status 1."""

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except SchemaLensError as e:
            ctx = click.get_current_context()
            verbose = bool(ctx.obj and ctx.obj.get("verbose"))
            click.echo(e.format_verbose() if verbose else f"Error: {e}", err=True)
            sys.exit(EXIT_ERROR)

    return wrapper  # type: ignore[return-value]


def _settings(ctx: click.Context) -> EngineSettings:
    return ctx.obj["settings"]


def _echo_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2, ensure_ascii=False, default=str))


def _fields_table(fields: list[FormField], title: str) -> Table:
    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("Field", style="cyan")
    table.add_column("Input")
    table.add_column("Required")
    table.add_column("Value")
    table.add_column("Description", style="dim")
    for f in fields:
        table.add_row(
            f.key,
            f.category.value,
            "[red]yes[/red]" if f.required else "",
            f.value,
            f.description or "",
        )
    return table


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--config", "-c", type=click.Path(), help="Path to config file")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config: str | None) -> None:
    """schemalens - resolve, render and synthesize OpenAPI schemas."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose

    try:
        settings = load_settings(config)
    except SchemaLensError as e:
        click.echo(e.format_verbose() if verbose else f"Error: {e}", err=True)
        sys.exit(EXIT_ERROR)

    ctx.obj["settings"] = settings
    setup_logging(verbose, settings.log_level)


@cli.command("resolve")
@click.argument("spec", type=click.Path())
@click.argument("ref")
@click.pass_context
@handle_errors
def resolve_command(ctx: click.Context, spec: str, ref: str) -> None:
    """Print the resolved shape of a schema.

    REF is a pointer such as '#/components/schemas/Pet' or a bare schema
    name such as 'Pet'.
    """
    doc = load_document(spec)
    resolved = resolve(doc.schema_node(ref), doc.raw, settings=_settings(ctx))
    _echo_json(resolved.to_dict())


@cli.command()
@click.argument("spec", type=click.Path())
@click.argument("ref")
@click.pass_context
@handle_errors
def example(ctx: click.Context, spec: str, ref: str) -> None:
    """Print a synthesized example value for a schema."""
    doc = load_document(spec)
    click.echo(synthesize_json(doc.schema_node(ref), doc.raw, settings=_settings(ctx)))


@cli.command()
@click.argument("spec", type=click.Path())
@click.argument("ref")
@click.option("--required", "-r", "required", multiple=True, help="Extra required field name (repeatable)")
@click.option("--json", "as_json", is_flag=True, help="Output JSON instead of a table")
@click.pass_context
@handle_errors
def fields(ctx: click.Context, spec: str, ref: str, required: tuple[str, ...], as_json: bool) -> None:
    """Project a schema into form fields."""
    doc = load_document(spec)
    result = project(doc.schema_node(ref), required, dictionary=doc.raw, settings=_settings(ctx))

    if as_json:
        _echo_json([f.to_dict() for f in result])
        return
    if not result:
        console.print("[yellow]No fields[/yellow]")
        return
    console.print(_fields_table(result, pointer_name(doc.schema_pointer(ref))))


@cli.command()
@click.argument("spec", type=click.Path())
@click.argument("ref")
@click.pass_context
@handle_errors
def tree(ctx: click.Context, spec: str, ref: str) -> None:
    """Render a schema as a property tree."""
    doc = load_document(spec)
    view = build_view(doc.schema_node(ref), doc.raw, settings=_settings(ctx))
    console.print(render_tree(view, pointer_name(doc.schema_pointer(ref))))


@cli.command()
@click.argument("spec", type=click.Path())
@click.argument("ref")
@click.argument("data", type=click.File("r"))
@click.pass_context
@handle_errors
def validate(ctx: click.Context, spec: str, ref: str, data: Any) -> None:
    """Validate a JSON document against a schema.

    DATA is a JSON file, or '-' to read from stdin. Exits with status 2
    when the value does not match.
    """
    doc = load_document(spec)
    name = pointer_name(doc.schema_pointer(ref))
    validator = build_validator(doc.schema_node(ref), doc.raw, settings=_settings(ctx), name=name)
    report = validator.validate_json(data.read())

    if report.valid:
        console.print(f"[green]✓[/green] Valid {name}")
        return

    console.print(f"[red]✗[/red] Invalid {name}")
    for hint in report.hints:
        console.print(f"  - {hint}", markup=False, highlight=False)
    sys.exit(EXIT_INVALID)


@cli.command()
@click.argument("spec", type=click.Path())
@click.pass_context
@handle_errors
def endpoints(ctx: click.Context, spec: str) -> None:
    """List endpoints grouped by tag."""
    doc = load_document(spec)
    _print_document_summary(doc)

    for group in doc.groups:
        table = Table(title=f"{group.tag} ({group.count})", show_header=True, header_style="bold")
        table.add_column("Method", style="cyan")
        table.add_column("Path")
        table.add_column("Summary", style="dim")
        for ep in group.endpoints:
            table.add_row(ep.method, ep.path, ep.summary or "")
        console.print(table)

    if doc.schemas:
        console.print(f"\n[bold]Schemas:[/bold] {', '.join(sorted(doc.schemas))}")


def _print_document_summary(doc: SpecDocument) -> None:
    console.print(f"[bold cyan]{doc.title}[/bold cyan] [dim]{doc.version}[/dim]")
    for url in doc.servers:
        console.print(f"  [dim]server:[/dim] {url}")


@cli.command()
@click.argument("spec", type=click.Path())
@click.argument("method")
@click.argument("path")
@click.pass_context
@handle_errors
def body(ctx: click.Context, spec: str, method: str, path: str) -> None:
    """Show the request body prefill for an operation."""
    doc = load_document(spec)
    endpoint = doc.find_endpoint(method, path)
    if endpoint is None:
        click.echo(f"Endpoint not found: {method.upper()} {path}", err=True)
        sys.exit(EXIT_ERROR)

    settings = _settings(ctx)
    body_type = detect_body_type(endpoint.operation, doc.raw, settings=settings)
    content_type = body_content_type(body_type)
    console.print(f"[bold]Body:[/bold] {body_type.value}" + (f" [dim]({content_type})[/dim]" if content_type else ""))

    if body_type.is_form:
        console.print(_fields_table(extract_form_fields(endpoint.operation, doc.raw, settings=settings), str(endpoint)))
    else:
        text = example_body(endpoint.operation, doc.raw, settings=settings)
        if text:
            click.echo(text)


__all__ = ["cli", "setup_logging", "handle_errors"]
