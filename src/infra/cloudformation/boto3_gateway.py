"""boto3-based implementation of ProviderGateway.

Uses native SDK calls instead of the aws CLI. Deploys follow the same
change set flow the CLI's ``cloudformation deploy`` command uses: create a
change set, wait for it, execute it, then wait for the stack to settle.
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError, WaiterError
from loguru import logger

from src.infra.errors import ProviderCommunicationError, TemplateValidationError

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
from .parameters import load_parameter_overrides

CHANGE_SET_PREFIX = "cfn-deploy-"

# StatusReason fragments CloudFormation uses for change sets without changes
_NO_CHANGES_MARKERS = (
    "didn't contain changes",
    "No updates are to be performed",
)


def _client_error_message(exc: ClientError) -> str:
    return str(exc.response.get("Error", {}).get("Message") or exc)


class Boto3Gateway(ProviderGateway):
    """CloudFormation gateway using boto3 clients.

    The session is built from the explicit context, so the profile and region
    passed on the command line are the only ones used.
    """

    def __init__(
        self,
        context: AwsContext,
        failure_statuses: tuple[str, ...] = DEFAULT_FAILURE_STATUSES,
        *,
        session: Any | None = None,
        waiter_delay: int = 5,
    ) -> None:
        super().__init__(context, failure_statuses)
        self._session = session
        self._clients: dict[str, Any] = {}
        self.waiter_delay = waiter_delay

    def _get_session(self) -> Any:
        if self._session is None:
            self._session = boto3.Session(
                profile_name=self.context.profile,
                region_name=self.context.region,
            )
        return self._session

    def _client(self, service_name: str) -> Any:
        if service_name not in self._clients:
            logger.debug(f"Creating boto3 {service_name} client")
            self._clients[service_name] = self._get_session().client(service_name)
        return self._clients[service_name]

    # =========================================================================
    # Gateway Operations
    # =========================================================================

    def check_authentication(self) -> str:
        try:
            identity = self._client("sts").get_caller_identity()
        except (BotoCoreError, ClientError) as e:
            raise self.authentication_error(str(e)) from e
        arn = str(identity.get("Arn", ""))
        logger.debug(f"Authenticated as {arn or 'unknown identity'}")
        return arn

    def validate_template(self, template_path: Path) -> None:
        body = template_path.read_text(encoding="utf-8")
        try:
            self._client("cloudformation").validate_template(TemplateBody=body)
        except ClientError as e:
            raise TemplateValidationError(
                "Template validation failed.", _client_error_message(e)
            ) from e
        except BotoCoreError as e:
            raise ProviderCommunicationError(
                "Failed to reach CloudFormation while validating template.", str(e)
            ) from e

    def summarize_resources(self, template_path: Path) -> ResourceSummary:
        body = template_path.read_text(encoding="utf-8")
        try:
            response = self._client("cloudformation").get_template_summary(
                TemplateBody=body
            )
        except (BotoCoreError, ClientError) as e:
            raise ProviderCommunicationError(
                "Failed to summarize template resources.", str(e)
            ) from e
        return summary_from_response(response)

    def deploy(
        self,
        template_path: Path,
        stack_name: str,
        parameters_path: Path | None = None,
    ) -> DeploymentOutcome:
        cfn = self._client("cloudformation")
        body = template_path.read_text(encoding="utf-8")
        overrides = (
            load_parameter_overrides(parameters_path) if parameters_path else {}
        )
        change_set_name = f"{CHANGE_SET_PREFIX}{int(time.time())}"
        waiter_config = {"Delay": self.waiter_delay}

        try:
            exists = self._stack_exists(stack_name)
            change_set_type = "UPDATE" if exists else "CREATE"
            logger.debug(
                f"Creating {change_set_type} change set {change_set_name} "
                f"for {stack_name}"
            )
            cfn.create_change_set(
                StackName=stack_name,
                ChangeSetName=change_set_name,
                ChangeSetType=change_set_type,
                TemplateBody=body,
                Parameters=[
                    {"ParameterKey": key, "ParameterValue": value}
                    for key, value in overrides.items()
                ],
            )
        except (BotoCoreError, ClientError) as e:
            return DeployFailed(stack_name, str(e))

        try:
            cfn.get_waiter("change_set_create_complete").wait(
                StackName=stack_name,
                ChangeSetName=change_set_name,
                WaiterConfig=waiter_config,
            )
        except WaiterError as e:
            reason = self._change_set_reason(stack_name, change_set_name, e)
            if any(marker in reason for marker in _NO_CHANGES_MARKERS):
                self._discard_change_set(stack_name, change_set_name)
                return DeploySucceeded(
                    stack_name, f"No changes to deploy. Stack {stack_name} is up to date"
                )
            return DeployFailed(stack_name, reason)
        except (BotoCoreError, ClientError) as e:
            return DeployFailed(stack_name, str(e))

        stack_waiter = (
            "stack_update_complete" if exists else "stack_create_complete"
        )
        try:
            cfn.execute_change_set(StackName=stack_name, ChangeSetName=change_set_name)
            cfn.get_waiter(stack_waiter).wait(
                StackName=stack_name, WaiterConfig=waiter_config
            )
        except WaiterError as e:
            return DeployFailed(
                stack_name, f"Stack {stack_name} did not reach a complete state: {e}"
            )
        except (BotoCoreError, ClientError) as e:
            return DeployFailed(stack_name, str(e))

        verb = "updated" if exists else "created"
        return DeploySucceeded(stack_name, f"Successfully {verb} stack - {stack_name}")

    def list_failure_events(self, stack_name: str) -> list[FailureEvent]:
        paginator = self._client("cloudformation").get_paginator(
            "describe_stack_events"
        )
        stack_events: list[dict[str, Any]] = []
        try:
            for page in paginator.paginate(StackName=stack_name):
                stack_events.extend(page.get("StackEvents", []))
        except (BotoCoreError, ClientError) as e:
            raise ProviderCommunicationError(
                "Failed to fetch stack events.", str(e)
            ) from e
        return events_from_response(stack_events, self.failure_statuses)

    def describe_deploy(
        self,
        template_path: Path,
        stack_name: str,
        parameters_path: Path | None = None,
    ) -> str:
        lines = [
            f"CreateChangeSet + ExecuteChangeSet on stack '{stack_name}'",
            f"  template:   {template_path}",
            f"  parameters: {parameters_path or '(template defaults)'}",
            f"  profile:    {self.context.profile or '(default)'}",
            f"  region:     {self.context.region or '(default)'}",
        ]
        return "\n".join(lines)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _stack_exists(self, stack_name: str) -> bool:
        """Check whether a stack exists and can take an UPDATE change set.

        A stack left in REVIEW_IN_PROGRESS by an earlier CREATE change set
        has no resources yet, so it still gets a CREATE change set.
        """
        try:
            response = self._client("cloudformation").describe_stacks(
                StackName=stack_name
            )
        except ClientError as e:
            if "does not exist" in _client_error_message(e):
                return False
            raise
        stacks = response.get("Stacks", [])
        if not stacks:
            return False
        return stacks[0].get("StackStatus") != "REVIEW_IN_PROGRESS"

    def _change_set_reason(
        self, stack_name: str, change_set_name: str, error: WaiterError
    ) -> str:
        last = getattr(error, "last_response", None) or {}
        reason = last.get("StatusReason")
        if reason:
            return str(reason)
        try:
            described = self._client("cloudformation").describe_change_set(
                StackName=stack_name, ChangeSetName=change_set_name
            )
        except (BotoCoreError, ClientError):
            return str(error)
        return str(described.get("StatusReason") or error)

    def _discard_change_set(self, stack_name: str, change_set_name: str) -> None:
        try:
            self._client("cloudformation").delete_change_set(
                StackName=stack_name, ChangeSetName=change_set_name
            )
        except (BotoCoreError, ClientError) as e:
            logger.warning(f"Could not delete empty change set {change_set_name}: {e}")
