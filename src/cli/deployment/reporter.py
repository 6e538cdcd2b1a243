"""Human-readable progress and failure reporting for stack deployments."""

from __future__ import annotations

from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from src.cli.shared.console import CLIConsole
from src.infra.cloudformation import (
    DeployFailed,
    DeploySucceeded,
    ResourceSummary,
)

from .models import TemplateReference


class DeploymentReporter:
    """Renders each pipeline stage to the console.

    All backend-provided text is escaped before printing so rich markup in
    error messages or resource names is shown literally.
    """

    def __init__(self, console: CLIConsole) -> None:
        self.console = console

    def start(self, reference: TemplateReference) -> None:
        self.console.print_header(f"Deploying stack {escape(reference.stack_name)}")
        self.console.print(
            f"[dim]Template:[/dim]   {escape(str(reference.template_path))}",
            soft_wrap=True,
        )
        if reference.parameters_path:
            self.console.print(
                f"[dim]Parameters:[/dim] {escape(str(reference.parameters_path))}",
                soft_wrap=True,
            )

    def step(self, message: str) -> None:
        self.console.info(message)

    def passed(self, message: str) -> None:
        self.console.ok(message)

    def resources(self, summary: ResourceSummary) -> None:
        """Show the resources prepared for deployment."""
        self.console.print_subheader(
            "The following resources are prepared for deployment"
        )
        if not summary:
            self.console.print("[dim]No resources reported by the template summary.[/dim]")
            return

        table = Table(show_header=True, header_style="bold")
        table.add_column("Logical ID")
        table.add_column("Type")
        table.add_column("Identifiers", style="dim")
        for resource in summary:
            table.add_row(
                escape(resource.logical_id),
                escape(resource.resource_type),
                escape(resource.physical_hint),
            )
        self.console.print(table)

    def aborted(self) -> None:
        self.console.print("[dim]Deployment aborted.[/dim]")

    def dry_run(self, reference: TemplateReference, command: str) -> None:
        """Show what the deploy would have done."""
        self.console.warn("Dry run mode enabled. Skipping deployment.")
        self.console.print(
            f"  Stack name: {escape(reference.stack_name)}", soft_wrap=True
        )
        self.console.print(
            f"  Template:   {escape(str(reference.template_path))}", soft_wrap=True
        )
        parameters = (
            str(reference.parameters_path)
            if reference.parameters_path
            else "(none, template defaults apply)"
        )
        self.console.print(f"  Parameters: {escape(parameters)}", soft_wrap=True)
        self.console.print("Would have run:")
        self.console.print(f"[cyan]{escape(command)}[/cyan]", soft_wrap=True)

    def succeeded(self, outcome: DeploySucceeded) -> None:
        if outcome.message:
            self.console.print(f"[dim]{escape(outcome.message)}[/dim]", soft_wrap=True)
        self.console.ok(f"Deployment of stack {escape(outcome.stack_name)} successful.")

    def failed(self, outcome: DeployFailed) -> None:
        """Show the failure reason followed by any collected stack events."""
        self.console.error(f"Deployment of stack {escape(outcome.stack_name)} failed.")
        self.console.print(
            Panel(escape(outcome.reason), title="Backend output", border_style="red")
        )

        if not outcome.events:
            self.console.warn("No failure events were collected for this stack.")
            return

        table = Table(
            title="Stack failure events", show_header=True, header_style="bold red"
        )
        table.add_column("Timestamp", no_wrap=True)
        table.add_column("Logical resource", no_wrap=True)
        table.add_column("Reason")
        for event in outcome.events:
            table.add_row(
                escape(event.timestamp),
                escape(event.logical_id),
                escape(event.reason),
            )
        self.console.print(table)
