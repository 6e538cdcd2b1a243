"""Deploy command: validate, preview and apply a CloudFormation template."""

from pathlib import Path
from typing import Any

import click
import typer
from loguru import logger
from typer.core import TyperCommand

from src.runtime.log import configure_logging

from .context import build_cli_context
from .deployment import (
    ApprovalGate,
    DeploymentReporter,
    StackDeployer,
    build_request,
)
from .shared.console import with_error_handling


class DeployCommand(TyperCommand):
    """Typer command that exits with code 1 on usage errors.

    Click reports unknown options and missing option values with exit code 2;
    this tool reports every invalid invocation with exit code 1.
    """

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        try:
            return super().parse_args(ctx, args)
        except click.UsageError as e:
            e.exit_code = 1
            raise


@with_error_handling
def deploy(
    template: str = typer.Option(
        None,
        "--template",
        "-t",
        metavar="TEMPLATE",
        help="Name of the CloudFormation template (without extension) in ./cfn/templates/",
        show_default=False,
    ),
    profile: str = typer.Option(
        None, "--profile", "-p", metavar="AWS_PROFILE", help="AWS profile to use"
    ),
    region: str = typer.Option(
        None, "--region", "-r", metavar="REGION", help="AWS region to deploy the stack in"
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", "-d", help="Run all checks but skip the deployment"
    ),
    assume_yes: bool = typer.Option(
        False,
        "--assume-yes",
        "-y",
        help="Proceed without prompting for approval",
    ),
    config_path: Path = typer.Option(
        None,
        "--config",
        "-c",
        metavar="PATH",
        help="Configuration file (default: ./cfn-deploy.yaml if present)",
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug logging"
    ),
) -> None:
    """
    🚀 Validate, preview and deploy a CloudFormation template.

    Steps:
    1. Validate the CloudFormation template
    2. Show the resources the template will deploy
    3. Gain approval from the user to proceed
    4. Deploy the CloudFormation template

    A parameter override file at ./cfn/parameters/TEMPLATE.json is passed
    along when it exists. The stack is named after the template.
    """
    request = build_request(
        template,
        profile=profile,
        region=region,
        dry_run=dry_run,
        assume_yes=assume_yes,
    )
    configure_logging("DEBUG" if verbose else "INFO")
    ctx = build_cli_context(config_path)
    if not verbose:
        configure_logging(ctx.config.log_level)
    logger.debug(f"Request: {request}")

    deployer = StackDeployer(
        request,
        ctx.build_gateway(request.aws_context),
        DeploymentReporter(ctx.console),
        ApprovalGate(ctx.console.input, assume_yes=request.assume_yes),
        project_root=ctx.project_root,
        config=ctx.config,
    )
    result = deployer.run()
    logger.debug(f"Pipeline finished: {result.value}")


COMMAND_SETTINGS: dict[str, Any] = {"help_option_names": ["-h", "--help"]}
