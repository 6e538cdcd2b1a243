"""Tests for the aws CLI provider gateway."""

from __future__ import annotations

import json
import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from src.infra.cloudformation import (
    AwsCliGateway,
    AwsContext,
    DeployFailed,
    DeploySucceeded,
    FailureEvent,
    ResourceIdentifier,
)
from src.infra.errors import (
    AuthenticationError,
    ConfigurationError,
    ProviderCommunicationError,
    TemplateValidationError,
)

TEMPLATE = Path("/work/cfn/templates/foo.yml")
PARAMS = Path("/work/cfn/parameters/foo.json")


def completed(returncode: int = 0, stdout: str = "", stderr: str = ""):
    return subprocess.CompletedProcess(
        args=[], returncode=returncode, stdout=stdout, stderr=stderr
    )


@pytest.fixture
def gateway() -> AwsCliGateway:
    return AwsCliGateway(AwsContext(profile="ops", region="eu-west-1"))


@pytest.fixture
def default_gateway() -> AwsCliGateway:
    return AwsCliGateway(AwsContext())


class TestCommandConstruction:
    """Profile and region are forwarded exactly when set."""

    @patch("subprocess.run")
    def test_context_flags_forwarded(self, mock_run, gateway) -> None:
        mock_run.return_value = completed()

        gateway.validate_template(TEMPLATE)

        assert mock_run.call_args.args[0] == [
            "aws",
            "cloudformation",
            "validate-template",
            "--template-body",
            "file:///work/cfn/templates/foo.yml",
            "--profile",
            "ops",
            "--region",
            "eu-west-1",
        ]
        assert mock_run.call_args.kwargs["text"] is True
        assert mock_run.call_args.kwargs["capture_output"] is True

    @patch("subprocess.run")
    def test_no_context_flags_by_default(self, mock_run, default_gateway) -> None:
        mock_run.return_value = completed()

        default_gateway.validate_template(TEMPLATE)

        cmd = mock_run.call_args.args[0]
        assert "--profile" not in cmd
        assert "--region" not in cmd

    def test_describe_deploy_without_parameters(self, default_gateway) -> None:
        assert default_gateway.describe_deploy(TEMPLATE, "foo") == (
            "aws cloudformation deploy --template-file /work/cfn/templates/foo.yml "
            "--stack-name foo --no-fail-on-empty-changeset"
        )

    def test_describe_deploy_with_parameters(self, gateway) -> None:
        described = gateway.describe_deploy(TEMPLATE, "foo", PARAMS)

        assert described.endswith(
            "--parameter-overrides file:///work/cfn/parameters/foo.json"
        )
        assert "--profile ops --region eu-west-1" in described

    def test_custom_executable(self) -> None:
        gw = AwsCliGateway(AwsContext(), executable="/opt/aws/bin/aws")

        assert gw.describe_deploy(TEMPLATE, "foo").startswith("/opt/aws/bin/aws ")


class TestPrerequisites:
    @patch("shutil.which", return_value=None)
    def test_missing_executable(self, _which, gateway) -> None:
        with pytest.raises(ConfigurationError) as excinfo:
            gateway.check_prerequisites()
        assert "missing 'aws'" in excinfo.value.message

    @patch("shutil.which", return_value="/usr/bin/aws")
    def test_executable_present(self, _which, gateway) -> None:
        gateway.check_prerequisites()


class TestAuthentication:
    @patch("subprocess.run")
    def test_returns_caller_arn(self, mock_run, gateway) -> None:
        mock_run.return_value = completed(
            stdout=json.dumps({"Arn": "arn:aws:iam::123456789012:user/ops"})
        )

        assert gateway.check_authentication() == "arn:aws:iam::123456789012:user/ops"
        assert mock_run.call_args.args[0][:3] == ["aws", "sts", "get-caller-identity"]

    @patch("subprocess.run")
    def test_failure_names_profile(self, mock_run, gateway) -> None:
        mock_run.return_value = completed(
            returncode=255, stderr="The config profile (ops) could not be found"
        )

        with pytest.raises(AuthenticationError) as excinfo:
            gateway.check_authentication()

        assert "'ops'" in excinfo.value.message
        assert "could not be found" in (excinfo.value.details or "")

    @patch("subprocess.run")
    def test_failure_without_profile_suggests_flag(
        self, mock_run, default_gateway
    ) -> None:
        mock_run.return_value = completed(returncode=255, stderr="Unable to locate credentials")

        with pytest.raises(AuthenticationError) as excinfo:
            default_gateway.check_authentication()

        assert "--profile" in excinfo.value.message


class TestValidation:
    @patch("subprocess.run")
    def test_backend_message_passed_verbatim(self, mock_run, gateway) -> None:
        message = (
            "An error occurred (ValidationError) when calling the ValidateTemplate "
            "operation: Template format error: Unresolved resource dependencies"
        )
        mock_run.return_value = completed(returncode=254, stderr=message + "\n")

        with pytest.raises(TemplateValidationError) as excinfo:
            gateway.validate_template(TEMPLATE)

        assert excinfo.value.details == message


class TestSummary:
    @patch("subprocess.run")
    def test_parses_identifier_summaries(self, mock_run, gateway) -> None:
        mock_run.return_value = completed(
            stdout=json.dumps(
                {
                    "ResourceTypes": ["AWS::S3::Bucket", "AWS::DynamoDB::Table"],
                    "ResourceIdentifierSummaries": [
                        {
                            "ResourceType": "AWS::S3::Bucket",
                            "LogicalResourceIds": ["TerraformStateBucket"],
                            "ResourceIdentifiers": ["BucketName"],
                        },
                        {
                            "ResourceType": "AWS::DynamoDB::Table",
                            "LogicalResourceIds": ["TerraformLockTable"],
                            "ResourceIdentifiers": ["TableName"],
                        },
                    ],
                }
            )
        )

        summary = gateway.summarize_resources(TEMPLATE)

        assert summary == (
            ResourceIdentifier("TerraformStateBucket", "AWS::S3::Bucket", "BucketName"),
            ResourceIdentifier("TerraformLockTable", "AWS::DynamoDB::Table", "TableName"),
        )

    @patch("subprocess.run")
    def test_command_failure(self, mock_run, gateway) -> None:
        mock_run.return_value = completed(returncode=255, stderr="Could not connect")

        with pytest.raises(ProviderCommunicationError) as excinfo:
            gateway.summarize_resources(TEMPLATE)

        assert excinfo.value.details == "Could not connect"

    @patch("subprocess.run")
    def test_garbled_output(self, mock_run, gateway) -> None:
        mock_run.return_value = completed(stdout="not json")

        with pytest.raises(ProviderCommunicationError):
            gateway.summarize_resources(TEMPLATE)


class TestDeploy:
    @patch("subprocess.run")
    def test_success(self, mock_run, gateway) -> None:
        mock_run.return_value = completed(
            stdout="\nWaiting for changeset to be created..\nSuccessfully created/updated stack - foo\n"
        )

        outcome = gateway.deploy(TEMPLATE, "foo", PARAMS)

        assert isinstance(outcome, DeploySucceeded)
        assert outcome.message.endswith("Successfully created/updated stack - foo")
        cmd = mock_run.call_args.args[0]
        assert cmd[:3] == ["aws", "cloudformation", "deploy"]
        assert "file:///work/cfn/parameters/foo.json" in cmd

    @patch("subprocess.run")
    def test_failure_is_returned_not_raised(self, mock_run, gateway) -> None:
        mock_run.return_value = completed(
            returncode=255,
            stderr="Failed to create/update the stack. Run the following command",
        )

        outcome = gateway.deploy(TEMPLATE, "foo")

        assert outcome == DeployFailed(
            "foo", "Failed to create/update the stack. Run the following command"
        )

    @patch("subprocess.run")
    def test_failure_without_output(self, mock_run, gateway) -> None:
        mock_run.return_value = completed(returncode=255)

        outcome = gateway.deploy(TEMPLATE, "foo")

        assert isinstance(outcome, DeployFailed)
        assert "255" in outcome.reason


class TestFailureEvents:
    @patch("subprocess.run")
    def test_filters_failure_statuses(self, mock_run, gateway) -> None:
        mock_run.return_value = completed(
            stdout=json.dumps(
                {
                    "StackEvents": [
                        {
                            "Timestamp": "2024-05-01T10:00:03Z",
                            "LogicalResourceId": "foo",
                            "ResourceStatus": "ROLLBACK_IN_PROGRESS",
                            "ResourceStatusReason": "The following resource(s) failed to create: [BucketX].",
                        },
                        {
                            "Timestamp": "2024-05-01T10:00:02Z",
                            "LogicalResourceId": "BucketX",
                            "ResourceStatus": "CREATE_FAILED",
                            "ResourceStatusReason": "AccessDenied",
                        },
                        {
                            "Timestamp": "2024-05-01T10:00:01Z",
                            "LogicalResourceId": "BucketX",
                            "ResourceStatus": "CREATE_IN_PROGRESS",
                        },
                    ]
                }
            )
        )

        events = gateway.list_failure_events("foo")

        assert events == [
            FailureEvent(
                "2024-05-01T10:00:03Z",
                "foo",
                "The following resource(s) failed to create: [BucketX].",
            ),
            FailureEvent("2024-05-01T10:00:02Z", "BucketX", "AccessDenied"),
        ]
        cmd = mock_run.call_args.args[0]
        assert cmd[:5] == [
            "aws",
            "cloudformation",
            "describe-stack-events",
            "--stack-name",
            "foo",
        ]

    @patch("subprocess.run")
    def test_lookup_failure_raises(self, mock_run, gateway) -> None:
        mock_run.return_value = completed(returncode=255, stderr="Stack foo does not exist")

        with pytest.raises(ProviderCommunicationError):
            gateway.list_failure_events("foo")
