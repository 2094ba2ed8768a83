"""Workflow Builder CLI - interactive editing and script replay."""

import typer
from typing import Optional
from pathlib import Path
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table
from rich.tree import Tree

from .config import settings
from .errors import CommandSyntaxError, InvalidDocumentError
from .export import dump_document, load_document
from .logging_config import setup_logging
from .models import NodeType, WorkflowDocument, WorkflowNode
from .editor import WorkflowEngine, parse_command, sequential_ids, valid_child_types
from .editor.commands import USAGE
from .editor.reducer import CommandResult


app = typer.Typer(
    name="workflow-builder",
    help="Build workflow trees of start/action/branch/end nodes with undo/redo",
    add_completion=False,
)
console = Console()

_NODE_STYLES = {
    NodeType.START: "bold green",
    NodeType.ACTION: "cyan",
    NodeType.BRANCH: "magenta",
    NodeType.END: "bold red",
}

SHELL_HELP = {
    **USAGE,
    "show": "show",
    "types": "types <node-id>",
    "save": "save",
    "help": "help",
    "quit": "quit",
}


@app.callback()
def configure(
    log_level: Optional[str] = typer.Option(
        None, "--log-level",
        help="Logging level (default: WORKFLOW_LOG_LEVEL or INFO)"
    ),
):
    """Set up logging before any command runs."""
    if log_level:
        settings.log_level = log_level
    setup_logging(settings.log_dir, level=settings.get_log_level())


def _node_text(node: WorkflowNode) -> str:
    style = _NODE_STYLES.get(node.type, "")
    text = f"[{style}]{escape(node.label)}[/{style}] [dim]({node.type.value}, {escape(node.id)})[/dim]"
    if node.branch_label is not None:
        text = f"[yellow]{escape(node.branch_label)}:[/yellow] " + text
    return text


def build_tree(document: WorkflowDocument) -> Tree:
    """Render a document as a rich Tree."""
    tree = Tree(_node_text(document.root))

    def attach(branch: Tree, node_id: str):
        for child in document.get_children(node_id):
            attach(branch.add(_node_text(child)), child.id)

    attach(tree, document.root_id)
    return tree


def _print_result(result: CommandResult):
    if result.error is not None:
        console.print(f"[red]✗ {escape(result.message)}[/red]")
    elif not result.applied:
        console.print(f"[yellow]{escape(result.message)}[/yellow]")
    else:
        console.print(f"[green]✓ {escape(result.message)}[/green]")


def _print_types(engine: WorkflowEngine, node_id: str):
    node = engine.get_state().get_node(node_id)
    if node is None:
        console.print(f"[red]Error: node '{escape(node_id)}' not found[/red]")
        return
    types = sorted(t.value for t in valid_child_types(node.type))
    if types:
        console.print(f"{escape(node.label)} ({node.type.value}) can take: {', '.join(types)}")
    else:
        console.print(f"[yellow]{escape(node.label)} ({node.type.value}) cannot have children[/yellow]")


def _print_help():
    table = Table(title="Commands")
    table.add_column("Command", style="cyan")
    table.add_column("Usage")
    for verb, usage in SHELL_HELP.items():
        table.add_row(verb, escape(usage))
    console.print(table)


@app.command()
def shell():
    """
    Edit a workflow interactively.

    Usage:
        workflow-builder shell
        workflow> add start action
        workflow> label node_1 "Send email"
        workflow> undo
    """
    engine = WorkflowEngine(id_factory=sequential_ids())

    console.print(Panel(
        "[bold]Workflow Builder[/bold]\n\n"
        "Type [cyan]help[/cyan] for commands, [cyan]quit[/cyan] to exit",
        title="✨ Workflow shell"
    ))
    console.print(build_tree(engine.get_state()))

    while True:
        try:
            line = console.input("[bold cyan]workflow>[/bold cyan] ").strip()
        except EOFError:
            break

        if not line or line.startswith("#"):
            continue

        verb, _, rest = line.partition(" ")
        verb = verb.lower()
        if verb in ("quit", "exit"):
            break
        if verb == "help":
            _print_help()
            continue
        if verb == "show":
            console.print(build_tree(engine.get_state()))
            continue
        if verb == "save":
            console.print(Syntax(dump_document(engine.get_state()), "json"))
            continue
        if verb == "types":
            if not rest.strip():
                console.print(f"[red]Usage: {escape(SHELL_HELP['types'])}[/red]")
            else:
                _print_types(engine, rest.strip())
            continue

        try:
            command = parse_command(line)
        except CommandSyntaxError as e:
            console.print(f"[red]{escape(str(e))}[/red]")
            continue

        result = engine.dispatch(command)
        _print_result(result)
        if result.applied:
            console.print(build_tree(engine.get_state()))

    console.print("[dim]Bye[/dim]")


@app.command()
def replay(
    script: Path = typer.Argument(..., help="Command script, one command per line"),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o",
        help="Write the JSON export here instead of the terminal"
    ),
    strict: bool = typer.Option(
        False, "--strict",
        help="Exit non-zero if any command is rejected"
    ),
):
    """
    Run a command script against a fresh document and export the result.

    Usage:
        workflow-builder replay build.txt
        workflow-builder replay build.txt -o workflow.json
    """
    if not script.exists():
        console.print(f"[red]Error: script not found: {script}[/red]")
        raise typer.Exit(1)

    engine = WorkflowEngine(id_factory=sequential_ids())
    applied = 0
    rejected = 0

    for lineno, raw in enumerate(script.read_text(encoding="utf-8").splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue

        try:
            command = parse_command(line)
        except CommandSyntaxError as e:
            console.print(f"[red]Line {lineno}: {escape(str(e))}[/red]")
            rejected += 1
            continue

        result = engine.dispatch(command)
        if result.error is not None:
            console.print(f"[red]Line {lineno} rejected ({result.error.value}): {escape(result.message)}[/red]")
            rejected += 1
        elif result.applied:
            applied += 1

    dump = dump_document(engine.get_state())
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(dump, encoding="utf-8")
        console.print(f"[dim]Exported to: {output}[/dim]")
    else:
        console.print(Syntax(dump, "json"))

    console.print(Panel(
        f"Applied: [green]{applied}[/green]\n"
        f"Rejected: [red]{rejected}[/red]\n"
        f"Nodes: {len(engine.get_state().nodes)}",
        title="📊 Replay"
    ))

    if strict and rejected:
        raise typer.Exit(1)


@app.command()
def check(
    path: Path = typer.Argument(..., help="Exported JSON document"),
):
    """
    Check that an exported document satisfies the workflow tree invariants.
    """
    if not path.exists():
        console.print(f"[red]Error: file not found: {path}[/red]")
        raise typer.Exit(1)

    try:
        document = load_document(path.read_text(encoding="utf-8"))
    except InvalidDocumentError as e:
        console.print(f"[red]✗ {escape(str(e))}[/red]")
        raise typer.Exit(1)

    console.print(build_tree(document))
    console.print(f"[green]✓ Document is valid ({len(document.nodes)} nodes)[/green]")


def main():
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
