"""CLI context and dependency container."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from src.cli.shared.console import CLIConsole, console
from src.infra.cloudformation import AwsContext, ProviderGateway, get_provider_gateway
from src.runtime.config import ConfigData, resolve_config


@dataclass(frozen=True)
class CLIContext:
    """Runtime dependencies for CLI commands."""

    console: CLIConsole
    project_root: Path
    config: ConfigData

    def build_gateway(self, aws_context: AwsContext) -> ProviderGateway:
        """Create the configured provider gateway for one request."""
        return get_provider_gateway(
            self.config.backend,
            aws_context,
            failure_statuses=self.config.failure_statuses,
            aws_executable=self.config.aws_executable,
        )


def build_cli_context(
    config_path: Path | None = None, project_root: Path | None = None
) -> CLIContext:
    """Build a fresh CLIContext.

    Templates are resolved relative to the current working directory unless
    another project root is given.
    """
    root = project_root or Path.cwd()
    return CLIContext(
        console=console,
        project_root=root,
        config=resolve_config(root, config_path),
    )
