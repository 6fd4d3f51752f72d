#!/usr/bin/env python3
"""
deploy-events CLI

Main entrypoint for the deploy-events command-line tool.
"""

import typer
from rich.console import Console
from rich.table import Table

from cli.commands import collect, events, topology

app = typer.Typer(
    name="deploy-events",
    help="Deployment lifecycle event aggregation CLI",
    add_completion=False,
)

console = Console()

app.add_typer(events.app, name="events", help="Translate and page worker logs")
app.add_typer(topology.app, name="topology", help="Operation lookup against a cluster")

app.command("collect")(collect.collect_command)


@app.command()
def version():
    """Show version information."""
    from cli import __version__
    from deploy_events import __version__ as core_version

    table = Table(show_header=False, box=None)
    table.add_row("[bold]deploy-events CLI[/bold]", f"v{__version__}")
    table.add_row("Core", f"v{core_version}")

    console.print(table)


def main():
    """Main entrypoint."""
    app()


if __name__ == "__main__":
    main()
