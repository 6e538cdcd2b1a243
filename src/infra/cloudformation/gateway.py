"""Abstract provider gateway interface.

Defines the contract for CloudFormation operations that can be implemented
by different backends (aws CLI subprocess, boto3 SDK, etc.). The deployment
pipeline only ever talks to this interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from src.infra.errors import AuthenticationError

# =============================================================================
# Data Types
# =============================================================================

# Stack event statuses that indicate why a deployment failed
DEFAULT_FAILURE_STATUSES: tuple[str, ...] = (
    "CREATE_FAILED",
    "UPDATE_FAILED",
    "ROLLBACK_IN_PROGRESS",
)


@dataclass(frozen=True)
class AwsContext:
    """Credential and region context forwarded to every backend call.

    Attributes:
        profile: Named credential profile, or None for the backend default
        region: Target region, or None for the backend default
    """

    profile: str | None = None
    region: str | None = None


@dataclass(frozen=True)
class ResourceIdentifier:
    """One resource declared by a template."""

    logical_id: str
    resource_type: str
    physical_hint: str = ""


# Ordered, read-only; used for display only
ResourceSummary = tuple[ResourceIdentifier, ...]


@dataclass(frozen=True)
class FailureEvent:
    """A stack event explaining a failed resource operation."""

    timestamp: str
    logical_id: str
    reason: str


@dataclass(frozen=True)
class DeploySucceeded:
    """Terminal outcome of a successful deploy."""

    stack_name: str
    message: str = ""


@dataclass(frozen=True)
class DeployFailed:
    """Terminal outcome of a failed deploy.

    Attributes:
        stack_name: Stack the deploy targeted
        reason: Failure message reported by the backend
        events: Diagnostic stack events collected after the failure
    """

    stack_name: str
    reason: str
    events: tuple[FailureEvent, ...] = field(default_factory=tuple)


DeploymentOutcome = DeploySucceeded | DeployFailed


def summary_from_response(response: dict[str, Any]) -> ResourceSummary:
    """Build a ResourceSummary from a GetTemplateSummary response.

    Each ResourceIdentifierSummaries entry groups the logical ids of one
    resource type; entries are flattened in response order.
    """
    resources: list[ResourceIdentifier] = []
    for entry in response.get("ResourceIdentifierSummaries", []):
        resource_type = entry.get("ResourceType", "")
        hint = ", ".join(entry.get("ResourceIdentifiers", []))
        for logical_id in entry.get("LogicalResourceIds", []):
            resources.append(ResourceIdentifier(logical_id, resource_type, hint))
    return tuple(resources)


def events_from_response(
    stack_events: list[dict[str, Any]], statuses: tuple[str, ...]
) -> list[FailureEvent]:
    """Select failure events from a DescribeStackEvents listing.

    Events keep backend order (newest first). Timestamps are rendered as
    ISO-8601 strings whether the backend returned text or datetimes.
    """
    events: list[FailureEvent] = []
    for event in stack_events:
        if event.get("ResourceStatus") not in statuses:
            continue
        timestamp = event.get("Timestamp", "")
        if isinstance(timestamp, datetime):
            timestamp = timestamp.isoformat()
        events.append(
            FailureEvent(
                timestamp=str(timestamp),
                logical_id=str(event.get("LogicalResourceId", "")),
                reason=str(event.get("ResourceStatusReason") or ""),
            )
        )
    return events


# =============================================================================
# Abstract Gateway
# =============================================================================


class ProviderGateway(ABC):
    """Abstract base class for CloudFormation backend operations.

    Implementations receive the credential context explicitly and must not
    read profile or region from the ambient environment.

    Example:
        from src.infra.cloudformation import AwsContext, get_provider_gateway

        gateway = get_provider_gateway("cli", AwsContext(profile="dev"))
        gateway.check_authentication()
    """

    def __init__(
        self,
        context: AwsContext,
        failure_statuses: tuple[str, ...] = DEFAULT_FAILURE_STATUSES,
    ) -> None:
        self.context = context
        self.failure_statuses = failure_statuses

    def check_prerequisites(self) -> None:
        """Verify local tooling needed by the backend is available.

        Raises:
            ConfigurationError: If a required tool is missing
        """

    @abstractmethod
    def check_authentication(self) -> str:
        """Confirm the backend accepts the caller's identity.

        Returns:
            The caller identity (ARN) reported by the backend

        Raises:
            AuthenticationError: If the identity is rejected
        """
        ...

    @abstractmethod
    def validate_template(self, template_path: Path) -> None:
        """Ask the backend to validate a template.

        Raises:
            TemplateValidationError: If the backend rejects the template
        """
        ...

    @abstractmethod
    def summarize_resources(self, template_path: Path) -> ResourceSummary:
        """List the resources a template declares.

        Raises:
            ProviderCommunicationError: If the summary cannot be fetched
        """
        ...

    @abstractmethod
    def deploy(
        self,
        template_path: Path,
        stack_name: str,
        parameters_path: Path | None = None,
    ) -> DeploymentOutcome:
        """Create or update a stack from a template.

        A failed deploy is returned as DeployFailed, never raised. A deploy
        with no changes to apply succeeds.

        Raises:
            ConfigurationError: If a backend that reads the parameter file
                finds it malformed. Callers that resolved the file through
                TemplateReference have already parsed it.
        """
        ...

    @abstractmethod
    def list_failure_events(self, stack_name: str) -> list[FailureEvent]:
        """List stack events whose status is one of failure_statuses.

        Raises:
            ProviderCommunicationError: If the events cannot be fetched
        """
        ...

    @abstractmethod
    def describe_deploy(
        self,
        template_path: Path,
        stack_name: str,
        parameters_path: Path | None = None,
    ) -> str:
        """Describe the deploy call that would be made, without making it."""
        ...

    def describe_identity(self) -> str:
        """Human-readable name of the credential source."""
        if self.context.profile:
            return f"AWS profile '{self.context.profile}'"
        return "default AWS credentials"

    def authentication_error(self, details: str | None = None) -> AuthenticationError:
        """Build an actionable AuthenticationError for the current context."""
        if self.context.profile:
            message = (
                f"AWS profile '{self.context.profile}' failed, "
                "check profile credentials."
            )
        else:
            message = (
                "Failed to authenticate to AWS. Check your default AWS "
                "credentials, or use the --profile flag to specify a profile."
            )
        return AuthenticationError(message, details)
