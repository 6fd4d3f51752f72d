"""
Collect command: watch an operation's workers until a page is complete.
"""

import json
import sys
import time

import typer
from rich.console import Console

from collector.main import build_collector
from deploy_events.poll import Complete

from .events import EXIT_INCOMPLETE, print_events

console = Console()


def collect_command(
    operation_id: str = typer.Argument(..., help="Deployment or undeployment id"),
    from_index: int = typer.Option(0, "--from", help="First index (inclusive)"),
    to_index: int = typer.Option(..., "--to", help="Last index (inclusive)"),
    timeout: float = typer.Option(60.0, "--timeout", "-t", help="Seconds to wait for the page"),
    interval: float = typer.Option(1.0, "--interval", help="Seconds between polls"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Collect events from a live operation and print one complete page.

    Examples:
        deploy-events collect op-42 --to 9
        deploy-events collect op-42 --from 10 --to 19 --timeout 120
    """
    # stdout carries the result; keep log records off it
    collector = build_collector(
        log_level="WARNING" if json_output else None,
        log_stream=sys.stderr,
    )
    kind = collector.track(operation_id)
    if not json_output:
        console.print(f"Collecting [bold]{kind.value}[/bold] events for {operation_id}")

    deadline = time.monotonic() + timeout
    try:
        while True:
            remaining = deadline - time.monotonic()
            result = collector.poll(
                operation_id, from_index, to_index, max_wait=max(remaining, 0.0),
                correlation_id=operation_id,
            )
            if isinstance(result, Complete) or remaining <= 0:
                break
            time.sleep(min(interval, remaining))
            collector.refresh(operation_id)
    finally:
        collector.stop()

    if isinstance(result, Complete):
        if json_output:
            events = [ev.to_dict() for ev in result.events]
            print(json.dumps({"complete": True, "events": events, "count": len(events)}, indent=2))
        else:
            print_events(list(result.events), f"Events {from_index}..{to_index}: {operation_id}")
        return

    if json_output:
        print(json.dumps({"complete": False, "present": result.present, "missing": result.missing}))
    else:
        console.print(
            f"[yellow]Timed out:[/yellow] {result.present} of {result.query.size} events present"
        )
    raise typer.Exit(EXIT_INCOMPLETE)
