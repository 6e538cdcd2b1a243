"""aws CLI-based implementation of ProviderGateway.

Uses subprocess calls to the ``aws`` command-line client for all operations.
"""

from __future__ import annotations

import json
import shlex
import shutil
from pathlib import Path
from typing import Any

from loguru import logger

from src.infra.errors import (
    ConfigurationError,
    ProviderCommunicationError,
    TemplateValidationError,
)

from .gateway import (
    DEFAULT_FAILURE_STATUSES,
    AwsContext,
    DeployFailed,
    DeploymentOutcome,
    DeploySucceeded,
    FailureEvent,
    ProviderGateway,
    ResourceSummary,
    events_from_response,
    summary_from_response,
)
from .runner import CommandResult, CommandRunner

AWS_CLI_INSTALL_URL = "https://aws.amazon.com/cli/"


class AwsCliGateway(ProviderGateway):
    """CloudFormation gateway using aws CLI subprocess calls.

    Profile and region are appended to every command as ``--profile`` and
    ``--region`` when set; otherwise the CLI's own defaults apply.
    """

    def __init__(
        self,
        context: AwsContext,
        failure_statuses: tuple[str, ...] = DEFAULT_FAILURE_STATUSES,
        *,
        executable: str = "aws",
        runner: CommandRunner | None = None,
    ) -> None:
        super().__init__(context, failure_statuses)
        self.executable = executable
        self._runner = runner or CommandRunner()

    # =========================================================================
    # Command Construction
    # =========================================================================

    def _context_args(self) -> list[str]:
        args: list[str] = []
        if self.context.profile:
            args.extend(["--profile", self.context.profile])
        if self.context.region:
            args.extend(["--region", self.context.region])
        return args

    def _command(self, *args: str) -> list[str]:
        return [self.executable, *args, *self._context_args()]

    def _deploy_command(
        self,
        template_path: Path,
        stack_name: str,
        parameters_path: Path | None,
    ) -> list[str]:
        cmd = self._command(
            "cloudformation",
            "deploy",
            "--template-file",
            str(template_path),
            "--stack-name",
            stack_name,
            "--no-fail-on-empty-changeset",
        )
        if parameters_path is not None:
            cmd.extend(["--parameter-overrides", f"file://{parameters_path}"])
        return cmd

    def _run_json(self, cmd: list[str], action: str) -> Any:
        result = self._runner.run(cmd)
        if not result.success:
            raise ProviderCommunicationError(
                f"Failed to {action}.", _failure_details(result)
            )
        try:
            return json.loads(result.stdout or "null")
        except json.JSONDecodeError as e:
            raise ProviderCommunicationError(
                f"Unexpected output while trying to {action}.", result.stdout
            ) from e

    # =========================================================================
    # Gateway Operations
    # =========================================================================

    def check_prerequisites(self) -> None:
        """Ensure the aws executable is on PATH."""
        if shutil.which(self.executable) is None:
            raise ConfigurationError(
                f"Current environment missing '{self.executable}'",
                f"Install from: {AWS_CLI_INSTALL_URL}",
            )

    def check_authentication(self) -> str:
        cmd = self._command("sts", "get-caller-identity", "--output", "json")
        result = self._runner.run(cmd)
        if not result.success:
            raise self.authentication_error(
                f"CMD: {shlex.join(cmd)}\n{_failure_details(result)}"
            )
        try:
            identity = json.loads(result.stdout or "{}")
        except json.JSONDecodeError:
            identity = {}
        arn = str(identity.get("Arn", ""))
        logger.debug(f"Authenticated as {arn or 'unknown identity'}")
        return arn

    def validate_template(self, template_path: Path) -> None:
        cmd = self._command(
            "cloudformation",
            "validate-template",
            "--template-body",
            f"file://{template_path}",
        )
        result = self._runner.run(cmd)
        if not result.success:
            raise TemplateValidationError(
                "Template validation failed.", _failure_details(result)
            )

    def summarize_resources(self, template_path: Path) -> ResourceSummary:
        cmd = self._command(
            "cloudformation",
            "get-template-summary",
            "--template-body",
            f"file://{template_path}",
            "--output",
            "json",
        )
        response = self._run_json(cmd, "summarize template resources")
        if not isinstance(response, dict):
            raise ProviderCommunicationError(
                "Unexpected template summary response.", str(response)
            )
        return summary_from_response(response)

    def deploy(
        self,
        template_path: Path,
        stack_name: str,
        parameters_path: Path | None = None,
    ) -> DeploymentOutcome:
        cmd = self._deploy_command(template_path, stack_name, parameters_path)
        result = self._runner.run(cmd)
        if result.success:
            return DeploySucceeded(stack_name, result.stdout.strip())
        return DeployFailed(stack_name, _failure_details(result))

    def list_failure_events(self, stack_name: str) -> list[FailureEvent]:
        cmd = self._command(
            "cloudformation",
            "describe-stack-events",
            "--stack-name",
            stack_name,
            "--output",
            "json",
        )
        response = self._run_json(cmd, "fetch stack events")
        if not isinstance(response, dict):
            raise ProviderCommunicationError(
                "Unexpected stack events response.", str(response)
            )
        return events_from_response(
            response.get("StackEvents", []), self.failure_statuses
        )

    def describe_deploy(
        self,
        template_path: Path,
        stack_name: str,
        parameters_path: Path | None = None,
    ) -> str:
        return shlex.join(
            self._deploy_command(template_path, stack_name, parameters_path)
        )


def _failure_details(result: CommandResult) -> str:
    output = result.stderr.strip() or result.stdout.strip()
    return output or f"command exited with code {result.returncode}"
