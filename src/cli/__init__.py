"""Main CLI application module.

This module provides the main entry point for the cfn-deploy CLI, a
single command that validates, previews and deploys a CloudFormation
template from ./cfn/templates.

Exit codes:
- 0: deployed, dry run finished, or cancelled at the approval prompt
- 1: configuration, authentication, validation, backend or deploy failure
- 130: interrupted
"""

import typer

from .deploy_commands import COMMAND_SETTINGS, DeployCommand, deploy

# Create the main CLI application
app = typer.Typer(
    help="☁️  cfn-deploy - CloudFormation template deployment tool",
    rich_markup_mode="rich",
    add_completion=False,
)

app.command(cls=DeployCommand, context_settings=COMMAND_SETTINGS)(deploy)


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
