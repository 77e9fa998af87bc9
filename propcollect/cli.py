"""CLI entry point for propcollect."""

import json
import logging
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.tree import Tree

from propcollect.core.assembly import PropertyBranch, assemble_trees
from propcollect.core.exceptions import PropCollectError
from propcollect.core.models import ManagedObjectRef
from propcollect.core.properties import PropertyTable

app = typer.Typer(
    name="propcollect",
    help="Collect nested vSphere object properties with one recursive query.",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)

_MAX_VALUE_DISPLAY = 60

PropertiesOption = Annotated[
    Path | None,
    typer.Option("--properties", "-p", help="JSON or TOML property table (type -> paths)"),
]
JsonOption = Annotated[bool, typer.Option("--json", "-j", help="Output as JSON")]
FlatOption = Annotated[bool, typer.Option("--flat", help="Output dotted paths instead of trees")]


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
) -> None:
    """Configure logging for every command."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(name)s - %(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def load_table(path: Path | None) -> PropertyTable:
    """Load the property table from a file, or the built-in default."""
    return PropertyTable.from_file(path) if path else PropertyTable.default()


def format_value(value: Any) -> str:
    """Shorten a leaf value for tree display."""
    text = json.dumps(value, default=str) if not isinstance(value, str) else value
    if len(text) > _MAX_VALUE_DISPLAY:
        text = text[: _MAX_VALUE_DISPLAY - 3] + "..."
    return text


def build_tree(label: str, properties: PropertyBranch) -> Tree:
    """Render one object's nested properties as a rich Tree."""
    tree = Tree(f"[bold cyan]{label}[/]")

    def add(node: Tree, branch: PropertyBranch) -> None:
        for key, child in branch.children.items():
            if isinstance(child, PropertyBranch):
                add(node.add(f"[blue]{key}[/]"), child)
            else:
                node.add(f"{key}: [green]{format_value(child.value)}[/]")

    add(tree, properties)
    return tree


def print_mapping(trees: dict[str, PropertyBranch], output_json: bool, flat: bool) -> None:
    """Print assembled property trees in the requested format."""
    if output_json:
        if flat:
            data: Any = {key: dict(tree.flatten()) for key, tree in trees.items()}
        else:
            data = {key: tree.to_python() for key, tree in trees.items()}
        print(json.dumps(data, indent=2, default=str))
        return

    if not trees:
        console.print("[dim]No objects found[/]")
        return

    for identity, tree in trees.items():
        if flat:
            console.print(f"[bold cyan]{identity}[/]")
            for path, value in tree.flatten():
                console.print(f"  {path} = [green]{format_value(value)}[/]")
        else:
            console.print(build_tree(identity, tree))

    console.print(f"\n[dim]Objects: {len(trees)}[/]")


def fail(error: Exception) -> typer.Exit:
    err_console.print(f"[red]Error:[/red] {error}")
    return typer.Exit(code=1)


@app.command()
def collect(
    host: Annotated[str | None, typer.Option("--host", "-H", help="vCenter or ESXi host")] = None,
    user: Annotated[str | None, typer.Option("--user", "-u", help="User name")] = None,
    port: Annotated[int | None, typer.Option("--port", help="HTTPS port")] = None,
    insecure: Annotated[
        bool, typer.Option("--insecure", "-k", help="Skip SSL certificate verification")
    ] = False,
    env_file: Annotated[Path | None, typer.Option("--env-file", help="Path to .env file")] = None,
    root: Annotated[
        str | None,
        typer.Option("--root", "-r", help="Root object as TYPE:VALUE (default: root folder)"),
    ] = None,
    properties: PropertiesOption = None,
    output_json: JsonOption = False,
    flat: FlatOption = False,
) -> None:
    """Collect properties of every leaf object under a root."""
    from propcollect.config import load_settings
    from propcollect.core.collector import InventoryCollector
    from propcollect.transport import VSphereRetriever

    try:
        root_ref = ManagedObjectRef.parse(root) if root else None
    except ValueError as e:
        raise fail(e) from e

    try:
        table = load_table(properties)
        settings = load_settings(env_file, host=host, user=user)
        settings = settings.with_overrides(port=port, verify_ssl=False if insecure else None)
        if not settings.password:
            settings = settings.with_overrides(
                password=typer.prompt(f"Password for {settings.user}", hide_input=True)
            )

        with VSphereRetriever(settings) as retriever:
            trees = InventoryCollector(retriever, table).collect_trees(root_ref)
    except PropCollectError as e:
        raise fail(e) from e

    print_mapping(trees, output_json, flat)


@app.command()
def assemble(
    response: Annotated[Path, typer.Argument(help="Saved property collector response (JSON)")],
    output_json: JsonOption = False,
    flat: FlatOption = False,
) -> None:
    """Assemble a saved response into nested per-object trees."""
    from propcollect.transport import ReplayRetriever

    try:
        result = ReplayRetriever(response).load()
        trees = assemble_trees(result)
    except PropCollectError as e:
        raise fail(e) from e

    print_mapping(trees, output_json, flat)


@app.command()
def graph(
    output_json: JsonOption = False,
) -> None:
    """Show the traversal rules used to walk the inventory."""
    from propcollect.core.graph import ROOT_RULE, build_traversal_graph
    from propcollect.core.graph.analysis import find_cycles, unreachable_rules

    try:
        traversal = build_traversal_graph()
    except PropCollectError as e:
        raise fail(e) from e

    cycles = find_cycles(traversal)
    unreachable = unreachable_rules(traversal, ROOT_RULE)

    if output_json:
        result = {
            "root": ROOT_RULE,
            "specs": [
                {
                    "name": spec.name,
                    "type": spec.type,
                    "path": spec.path,
                    "skip": spec.skip,
                    "selectSet": list(spec.selected_names),
                }
                for spec in traversal
            ],
            "cycles": cycles,
            "unreachable": unreachable,
        }
        print(json.dumps(result, indent=2))
        return

    table = Table(title=f"Traversal rules (entry: {ROOT_RULE})")
    table.add_column("Name", style="cyan")
    table.add_column("Type")
    table.add_column("Path")
    table.add_column("Selects", style="dim")
    for spec in traversal:
        table.add_row(spec.name, spec.type, spec.path, ", ".join(spec.selected_names))
    console.print(table)

    console.print(f"[dim]Specs: {len(traversal)} | Selections: {traversal.num_edges}[/]")
    for cycle in cycles:
        console.print(f"  [yellow]cycle[/] {' -> '.join(cycle + cycle[:1])}")
    if unreachable:
        console.print(f"  [red]Unreachable from {ROOT_RULE}:[/] {', '.join(unreachable)}")


@app.command(name="properties")
def show_properties(
    properties: PropertiesOption = None,
    output_json: JsonOption = False,
) -> None:
    """Show the property paths requested for each leaf type."""
    try:
        table = load_table(properties)
    except PropCollectError as e:
        raise fail(e) from e

    if output_json:
        print(json.dumps(table.to_dict(), indent=2))
        return

    for type_name in table:
        paths = table.paths(type_name)
        console.print(f"[bold cyan]{type_name}[/] ({len(paths)} paths)")
        for path in paths:
            console.print(f"  {path}")


if __name__ == "__main__":
    app()
