"""CloudFormation infrastructure abstraction layer.

This module provides a clean abstraction over CloudFormation operations,
supporting multiple backends (aws CLI subprocess, boto3 SDK).

Example:
    from src.infra.cloudformation import AwsContext, get_provider_gateway

    gateway = get_provider_gateway("cli", AwsContext(region="eu-west-1"))
    gateway.validate_template(Path("cfn/templates/state.yml"))
"""

from typing import Literal

from .aws_cli_gateway import AwsCliGateway
from .boto3_gateway import Boto3Gateway
from .gateway import (
    DEFAULT_FAILURE_STATUSES,
    AwsContext,
    DeployFailed,
    DeploymentOutcome,
    DeploySucceeded,
    FailureEvent,
    ProviderGateway,
    ResourceIdentifier,
    ResourceSummary,
)
from .runner import CommandResult, CommandRunner

Backend = Literal["cli", "boto3"]


def get_provider_gateway(
    backend: Backend,
    context: AwsContext,
    *,
    failure_statuses: tuple[str, ...] = DEFAULT_FAILURE_STATUSES,
    aws_executable: str = "aws",
) -> ProviderGateway:
    """Create the gateway for the configured backend.

    Args:
        backend: "cli" for the aws CLI, "boto3" for the SDK
        context: Profile/region forwarded to every call
        failure_statuses: Stack event statuses reported after a failed deploy
        aws_executable: Name or path of the aws CLI (cli backend only)

    Returns:
        A ProviderGateway implementation
    """
    if backend == "boto3":
        return Boto3Gateway(context, failure_statuses)
    if backend == "cli":
        return AwsCliGateway(
            context, failure_statuses, executable=aws_executable
        )
    raise ValueError(f"Unknown provider backend: {backend}")


__all__ = [
    # Gateway classes
    "ProviderGateway",
    "AwsCliGateway",
    "Boto3Gateway",
    "get_provider_gateway",
    "Backend",
    # Data classes
    "AwsContext",
    "ResourceIdentifier",
    "ResourceSummary",
    "FailureEvent",
    "DeploySucceeded",
    "DeployFailed",
    "DeploymentOutcome",
    "DEFAULT_FAILURE_STATUSES",
    # Utilities
    "CommandResult",
    "CommandRunner",
]
