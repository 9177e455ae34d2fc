"""CLI for Construct Tree."""

import json
import logging
import sys
from pathlib import Path
from typing import NoReturn

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from . import TREE_FILE, __version__
from .assembly import load_assembly
from .config import load_config
from .errors import AssemblyError, ConfigError, TreeDocumentError, UnknownPathError
from .manifest import read_tree
from .merkle import TreeNode, build_path_lookup, diff_trees, extract_branch

console = Console()
error_console = Console(stderr=True)


def configure_logging(level: str) -> None:
    """Route library logs through rich on stderr."""
    handler = RichHandler(console=error_console, show_path=False)
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[handler],
        force=True,
    )


def fail(message: str) -> NoReturn:
    """Print an error and exit with status 1."""
    error_console.print(f"[red]Error:[/red] {escape(message)}")
    sys.exit(1)


def resolve_tree_file(path: Path) -> Path:
    """Accept either a tree.json file or a cloud assembly directory."""
    if not path.is_dir():
        return path
    try:
        tree_file = load_assembly(path).tree_file
    except AssemblyError:
        tree_file = None
    return tree_file or path / TREE_FILE


def load_tree_or_exit(path: Path) -> TreeNode:
    """Read a tree, exiting with an error if it is missing or invalid."""
    tree_file = resolve_tree_file(path)
    try:
        root = read_tree(tree_file)
    except TreeDocumentError as e:
        fail(str(e))
    if root is None:
        fail(f"Tree file not found: {tree_file}")
    return root


def render_tree(node: TreeNode, attributes: bool = False, label: Tree | None = None) -> Tree:
    """Build a rich Tree mirroring the node hierarchy."""
    text = f"[bold]{escape(node.id)}[/bold] [dim]{escape(node.hash[:12])}[/dim]"
    branch = Tree(text) if label is None else label.add(text)
    if attributes and node.attributes:
        for key, value in node.attributes.items():
            branch.add(f"[cyan]{escape(key)}[/cyan] = {escape(json.dumps(value, default=str))}")
    for child in (node.children or {}).values():
        render_tree(child, attributes=attributes, label=branch)
    return branch


@click.group()
@click.version_option(version=__version__, prog_name="ctree")
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"]),
    default=None,
    help="Log level (defaults to the configured level)",
)
def main(log_level: str | None) -> None:
    """Construct Tree - inspect and diff construct tree snapshots."""
    try:
        config = load_config(Path.cwd())
    except ConfigError as e:
        fail(str(e))
    configure_logging(log_level or config.log_level)


@main.command()
@click.argument("old", type=click.Path(path_type=Path))
@click.argument("new", type=click.Path(path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Print the diff as JSON")
def diff(old: Path, new: Path, as_json: bool) -> None:
    """Compare two tree snapshots (OLD and NEW)."""
    result = diff_trees(load_tree_or_exit(old), load_tree_or_exit(new))
    if as_json:
        click.echo(json.dumps({"removed": result.removed, "added": result.added}, indent=2))
        return

    if not result.has_changes:
        console.print("[green]No leaves added or removed.[/green]")
        return

    table = Table(title="Tree Diff")
    table.add_column("Change", style="cyan")
    table.add_column("Path")
    table.add_column("Hash", style="dim")

    for h, path in sorted(result.removed.items(), key=lambda item: item[1]):
        table.add_row("[red]removed[/red]", path, h)
    for h, path in sorted(result.added.items(), key=lambda item: item[1]):
        table.add_row("[green]added[/green]", path, h)

    console.print(table)


@main.command()
@click.argument("tree_file", type=click.Path(path_type=Path))
@click.option("--attributes", "-a", is_flag=True, help="Show node attributes")
def show(tree_file: Path, attributes: bool) -> None:
    """Render a tree snapshot."""
    root = load_tree_or_exit(tree_file)
    console.print(render_tree(root, attributes=attributes))


@main.command()
@click.argument("tree_file", type=click.Path(path_type=Path))
@click.argument("path")
@click.option("--attributes", "-a", is_flag=True, help="Show node attributes")
def branch(tree_file: Path, path: str, attributes: bool) -> None:
    """Render only the branch leading to PATH."""
    root = load_tree_or_exit(tree_file)
    try:
        node = extract_branch(build_path_lookup(root), path)
    except UnknownPathError as e:
        fail(str(e))
    console.print(render_tree(node, attributes=attributes))


@main.command(name="hash")
@click.argument("tree_file", type=click.Path(path_type=Path))
def hash_(tree_file: Path) -> None:
    """Show the root hash and node counts of a snapshot."""
    root = load_tree_or_exit(tree_file)

    table = Table(title="Tree Hash")
    table.add_column("Property", style="cyan")
    table.add_column("Value")

    nodes = build_path_lookup(root)
    table.add_row("Root hash", root.hash)
    table.add_row("Nodes", str(len(nodes)))
    table.add_row("Leaves", str(sum(1 for node in nodes.values() if node.is_leaf)))

    console.print(table)


if __name__ == "__main__":
    main()
