import os

# Keep rich output free of ANSI codes so assertions can match plain text.
# This must happen BEFORE importing anything that creates a Console.
os.environ.pop("FORCE_COLOR", None)
os.environ.pop("TTY_COMPATIBLE", None)

import io
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from rich.console import Console

from src.cli.shared.console import CLIConsole
from src.infra.cloudformation import (
    DeploySucceeded,
    ProviderGateway,
    ResourceIdentifier,
)

MINIMAL_TEMPLATE = """\
AWSTemplateFormatVersion: "2010-09-09"
Resources:
  BucketX:
    Type: AWS::S3::Bucket
"""


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """A project tree with cfn/templates/foo.yml and no parameter file."""
    templates = tmp_path / "cfn" / "templates"
    templates.mkdir(parents=True)
    (templates / "foo.yml").write_text(MINIMAL_TEMPLATE)
    (tmp_path / "cfn" / "parameters").mkdir()
    return tmp_path


@pytest.fixture
def gateway() -> MagicMock:
    """A provider gateway double whose calls all succeed."""
    gw = MagicMock(spec=ProviderGateway)
    gw.describe_identity.return_value = "default AWS credentials"
    gw.check_authentication.return_value = "arn:aws:iam::123456789012:user/test"
    gw.summarize_resources.return_value = (
        ResourceIdentifier("BucketX", "AWS::S3::Bucket", "BucketName"),
    )
    gw.deploy.return_value = DeploySucceeded("foo", "Successfully created/updated stack - foo")
    gw.list_failure_events.return_value = []
    gw.describe_deploy.return_value = (
        "aws cloudformation deploy --template-file foo.yml --stack-name foo"
    )
    return gw


@pytest.fixture
def cli_console() -> CLIConsole:
    """A CLIConsole writing to an in-memory buffer."""
    return CLIConsole(
        Console(file=io.StringIO(), width=200, color_system=None, force_terminal=False)
    )
