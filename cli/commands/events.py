"""
Event commands: translate, page
"""

import json
import sys
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from collector.sources import StaticLogSource
from collector.watcher import IndexAllocator, LogWatcher
from deploy_events.core.errors import InvalidRangeError, MalformedLogLineError
from deploy_events.core.events import DeploymentEvent
from deploy_events.log.store import EventSequenceStore
from deploy_events.poll import Complete, RangePoller
from deploy_events.topology.base import Worker
from deploy_events.translate import is_event_line, translate

app = typer.Typer()
console = Console()

# Exit code when the requested window still has gaps
EXIT_INCOMPLETE = 3


def print_events(events: List[DeploymentEvent], title: str) -> None:
    table = Table(title=title)
    table.add_column("Index", style="cyan")
    table.add_column("Description", style="green")
    for ev in events:
        table.add_row(str(ev.index), escape(ev.description))
    console.print(table)


@app.command("translate")
def translate_command(
    host: str = typer.Option(..., "--host", help="Worker host name"),
    address: str = typer.Option(..., "--address", help="Worker host address"),
    line: Optional[str] = typer.Option(None, "--line", help="Log line (default: read stdin)"),
    all_lines: bool = typer.Option(False, "--all", help="Translate lines from any logger"),
):
    """
    Translate worker log lines into event descriptions.

    Examples:
        deploy-events events translate --host h1 --address 10.0.0.1 --line "..."
        kubectl logs pod-0 | deploy-events events translate --host pod-0 --address 10.0.0.1
    """
    lines = [line] if line is not None else [l.rstrip("\n") for l in sys.stdin]
    failed = 0
    for raw in lines:
        if not raw.strip():
            continue
        if not all_lines and not is_event_line(raw):
            continue
        try:
            typer.echo(translate(raw, host, address))
        except MalformedLogLineError as e:
            failed += 1
            console.print(f"[red]Error:[/red] {escape(str(e))}", highlight=False)

    if failed:
        raise typer.Exit(2)


@app.command()
def page(
    log_path: str = typer.Argument(..., help="Worker log file"),
    from_index: int = typer.Option(0, "--from", help="First index (inclusive)"),
    to_index: int = typer.Option(..., "--to", help="Last index (inclusive)"),
    host: str = typer.Option("localhost", "--host", help="Worker host name"),
    address: str = typer.Option("127.0.0.1", "--address", help="Worker host address"),
    deployment_id: str = typer.Option("local", "--deployment", "-d", help="Deployment id"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Load a worker log into an event sequence and read one page of it.

    Exits 0 with the page when the window is complete, 3 when it is not.

    Examples:
        deploy-events events page worker.log --to 9
        deploy-events events page worker.log --from 10 --to 19 --json
    """
    try:
        with open(log_path, "r") as f:
            lines = [l.rstrip("\n") for l in f]
    except FileNotFoundError:
        if json_output:
            print(json.dumps({"error": "Log file not found", "path": log_path}))
        else:
            console.print(f"[red]Error: Log file not found:[/red] {log_path}")
        raise typer.Exit(2)

    worker = Worker(name=host, host_name=host, host_address=address)
    store = EventSequenceStore()
    watcher = LogWatcher(
        deployment_id=deployment_id,
        worker=worker,
        source=StaticLogSource({worker.name: lines}),
        store=store,
        allocator=IndexAllocator(),
    )
    watcher.poll_once()

    try:
        result = RangePoller(store).poll(deployment_id, from_index, to_index)
    except InvalidRangeError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(2)

    if isinstance(result, Complete):
        if json_output:
            events = [ev.to_dict() for ev in result.events]
            print(json.dumps({"complete": True, "events": events, "count": len(events)}, indent=2))
        else:
            print_events(list(result.events), f"Events {from_index}..{to_index}: {deployment_id}")
        return

    if json_output:
        print(json.dumps({"complete": False, "present": result.present, "missing": result.missing}))
    else:
        console.print(
            f"[yellow]Range {from_index}..{to_index} incomplete:[/yellow] "
            f"{result.present} present, {result.missing} missing"
        )
    raise typer.Exit(EXIT_INCOMPLETE)
