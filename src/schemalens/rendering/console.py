"""Rich terminal rendering of schema views."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.tree import Tree

from schemalens.rendering.tree import PropertyView, SchemaView


def _badges(constraints: tuple[str, ...]) -> str:
    if not constraints:
        return ""
    return " " + " ".join(f"[magenta]{escape(c)}[/magenta]" for c in constraints)


def _property_label(prop: PropertyView) -> str:
    label = f"[bold]{escape(prop.name)}[/bold] [blue]{escape(prop.type_label)}[/blue]"
    if prop.required:
        label += " [red]required[/red]"
    if prop.nullable:
        label += " [dim]nullable[/dim]"
    if prop.unresolved_ref:
        label += f" [yellow]$ref unresolved: {escape(prop.unresolved_ref)}[/yellow]"
    return label + _badges(prop.constraints)


def _add_view(node: Tree, view: SchemaView) -> None:
    if view.max_depth_reached:
        node.add("[dim italic]Max depth reached[/dim italic]")
        return
    if view.unresolved_ref:
        node.add(f"[yellow]$ref unresolved: {escape(view.unresolved_ref)}[/yellow]")
        return
    if view.description:
        node.add(f"[dim]{escape(view.description)}[/dim]")

    if view.items is not None:
        label = f"[blue]{escape(view.type_label)}[/blue]"
        if view.nullable:
            label += " [dim]nullable[/dim]"
        _add_view(node.add(label), view.items)
        return

    if view.properties:
        for prop in view.properties:
            branch = node.add(_property_label(prop))
            if prop.description:
                branch.add(f"[dim]{escape(prop.description)}[/dim]")
            if prop.children is not None:
                _add_view(branch, prop.children)
        return

    label = f"[blue]{escape(view.type_label)}[/blue]"
    if view.nullable:
        label += " [dim]nullable[/dim]"
    node.add(label + _badges(view.constraints))


def render_tree(view: SchemaView, title: str = "schema") -> Tree:
    """Render a schema view as a rich Tree."""
    tree = Tree(f"[bold cyan]{escape(title)}[/bold cyan]", guide_style="dim")
    _add_view(tree, view)
    return tree


def print_schema(view: SchemaView, console: Console | None = None, *, title: str = "schema") -> None:
    """Print a schema view to the terminal."""
    console = console or Console()
    console.print(render_tree(view, title))


__all__ = ["print_schema", "render_tree"]
