"""
Topology commands: classify, units
"""

import json

import typer
from rich.console import Console
from rich.table import Table

from collector.config import CollectorConfig
from collector.main import load_kube_config
from deploy_events.classify import DeploymentClassifier
from deploy_events.topology.k8s import KubernetesTopology

app = typer.Typer()
console = Console()


def _classifier(namespace: str) -> DeploymentClassifier:
    config = CollectorConfig.from_env()
    load_kube_config()
    return DeploymentClassifier(
        KubernetesTopology(namespace or config.namespace),
        management_application_name=config.management_application_name,
    )


@app.command()
def classify(
    operation_id: str = typer.Argument(..., help="Operation id"),
    namespace: str = typer.Option("", "--namespace", "-n", help="Namespace (default: from env)"),
):
    """
    Classify an operation as deployment or undeployment.

    Ids unknown to the cluster classify as undeployment.
    """
    kind = _classifier(namespace).classify(operation_id)
    typer.echo(kind.value)


@app.command()
def units(
    operation_id: str = typer.Argument(..., help="Operation id"),
    namespace: str = typer.Option("", "--namespace", "-n", help="Namespace (default: from env)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """List the workers taking part in an operation."""
    workers = sorted(_classifier(namespace).units_for(operation_id), key=lambda w: w.name)

    if json_output:
        print(json.dumps({
            "operation_id": operation_id,
            "workers": [
                {"name": w.name, "host_name": w.host_name, "host_address": w.host_address}
                for w in workers
            ],
        }, indent=2))
        return

    if not workers:
        console.print(f"[yellow]No workers discoverable yet for[/yellow] {operation_id}")
        return

    table = Table(title=f"Workers: {operation_id}")
    table.add_column("Name", style="cyan")
    table.add_column("Host", style="green")
    table.add_column("Address", style="yellow")
    for w in workers:
        table.add_row(w.name, w.host_name, w.host_address)
    console.print(table)
