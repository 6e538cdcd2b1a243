"""Stack deployment pipeline.

Runs one template through a fixed sequence of stages, stopping at the first
failure:

1. Resolve the template and parameter files
2. Check backend prerequisites
3. Check authentication
4. Validate the template
5. Summarize the template's resources
6. Ask for approval
7. Stop here on a dry run
8. Deploy, and on failure collect stack failure events

Rollback of a failed deploy is left to the backend.
"""

from __future__ import annotations

from dataclasses import replace
from enum import Enum
from pathlib import Path
from typing import NoReturn

from loguru import logger

from src.infra.cloudformation import (
    DeployFailed,
    FailureEvent,
    ProviderGateway,
)
from src.infra.errors import DeploymentFailedError
from src.runtime.config import ConfigData

from .approval import ApprovalDecision, ApprovalGate
from .models import DeploymentRequest, TemplateReference
from .reporter import DeploymentReporter


class PipelineResult(Enum):
    """How a pipeline run ended without error."""

    DEPLOYED = "deployed"
    DRY_RUN = "dry_run"
    ABORTED = "aborted"


class StackDeployer:
    """Orchestrates validation, approval and deployment of one stack.

    Every stage either completes or raises a DeploymentError; nothing is
    retried. The only failure that is swallowed is the diagnostic event
    lookup after a failed deploy.

    Attributes:
        request: Immutable options for this run
        gateway: Backend used for all remote calls
        reporter: Console reporter
        approval: Gate consulted before the deploy call
    """

    def __init__(
        self,
        request: DeploymentRequest,
        gateway: ProviderGateway,
        reporter: DeploymentReporter,
        approval: ApprovalGate,
        *,
        project_root: Path,
        config: ConfigData,
    ) -> None:
        self.request = request
        self.gateway = gateway
        self.reporter = reporter
        self.approval = approval
        self.project_root = project_root
        self.config = config

    def run(self) -> PipelineResult:
        """Run every stage in order.

        Returns:
            DEPLOYED, DRY_RUN or ABORTED

        Raises:
            ConfigurationError: Template missing or local tooling absent
            AuthenticationError: Backend rejected the identity
            TemplateValidationError: Backend rejected the template
            ProviderCommunicationError: Template summary could not be fetched
            DeploymentFailedError: The deploy itself failed
        """
        reference = TemplateReference.resolve(
            self.request.template, self.project_root, self.config
        )
        logger.debug(
            f"Resolved template {reference.template_path} "
            f"(parameters: {reference.parameters_path})"
        )
        self.reporter.start(reference)

        self.gateway.check_prerequisites()

        self.reporter.step(f"Checking {self.gateway.describe_identity()}...")
        self.gateway.check_authentication()
        self.reporter.passed("AWS credentials are valid.")

        self.reporter.step("Validating CloudFormation template...")
        self.gateway.validate_template(reference.template_path)
        self.reporter.passed("Template is valid.")

        summary = self.gateway.summarize_resources(reference.template_path)
        self.reporter.resources(summary)

        if self.approval.resolve() is ApprovalDecision.ABORT:
            self.reporter.aborted()
            return PipelineResult.ABORTED

        if self.request.dry_run:
            command = self.gateway.describe_deploy(
                reference.template_path,
                reference.stack_name,
                reference.parameters_path,
            )
            self.reporter.dry_run(reference, command)
            return PipelineResult.DRY_RUN

        self.reporter.step("Deploying CloudFormation template...")
        with self.reporter.console.status(
            f"Waiting for stack {reference.stack_name}..."
        ):
            outcome = self.gateway.deploy(
                reference.template_path,
                reference.stack_name,
                reference.parameters_path,
            )

        if isinstance(outcome, DeployFailed):
            self._report_failure(outcome)

        self.reporter.succeeded(outcome)
        return PipelineResult.DEPLOYED

    def _report_failure(self, outcome: DeployFailed) -> NoReturn:
        self.reporter.step("Deployment failed. Fetching stack events...")
        events = self._collect_failure_events(outcome.stack_name)
        self.reporter.failed(replace(outcome, events=(*outcome.events, *events)))
        raise DeploymentFailedError(
            f"Deployment of stack '{outcome.stack_name}' failed."
        )

    def _collect_failure_events(self, stack_name: str) -> list[FailureEvent]:
        """Fetch failure events, never letting a lookup error escape."""
        try:
            return self.gateway.list_failure_events(stack_name)
        except Exception as e:
            logger.warning(f"Could not fetch stack events for {stack_name}: {e}")
            return []
