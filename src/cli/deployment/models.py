"""Deployment request and template resolution.

A DeploymentRequest is built once from the command-line flags and never
mutated. Resolving it against the project layout yields a TemplateReference,
the only place file paths are derived.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from src.infra.cloudformation import AwsContext
from src.infra.cloudformation.parameters import load_parameter_overrides
from src.infra.errors import ConfigurationError
from src.runtime.config import ConfigData

# Template names double as stack names
_TEMPLATE_NAME = re.compile(r"[A-Za-z][-A-Za-z0-9]{0,127}")


@dataclass(frozen=True)
class DeploymentRequest:
    """Validated options for one invocation.

    Attributes:
        template: Template identifier (file stem, also the stack name)
        profile: Credential profile, or None for the backend default
        region: Target region, or None for the backend default
        dry_run: Stop before the mutating deploy call
        assume_yes: Skip the approval prompt
    """

    template: str
    profile: str | None = None
    region: str | None = None
    dry_run: bool = False
    assume_yes: bool = False

    @property
    def aws_context(self) -> AwsContext:
        return AwsContext(profile=self.profile, region=self.region)


def build_request(
    template: str | None,
    *,
    profile: str | None = None,
    region: str | None = None,
    dry_run: bool = False,
    assume_yes: bool = False,
) -> DeploymentRequest:
    """Validate raw option values into a DeploymentRequest.

    Blank profile or region values count as unset.

    Raises:
        ConfigurationError: If the template identifier is missing or is not
            a plain name
    """
    name = (template or "").strip()
    if not name:
        raise ConfigurationError(
            "Missing CloudFormation template!",
            "Pass the template name with -t/--template. "
            "Try '--help' for more information.",
        )
    if not _TEMPLATE_NAME.fullmatch(name):
        raise ConfigurationError(
            f"Invalid template name: {name}",
            "Use the template file name without directory or extension. "
            "Names start with a letter and contain only letters, digits "
            "and hyphens.",
        )

    return DeploymentRequest(
        template=name,
        profile=(profile or "").strip() or None,
        region=(region or "").strip() or None,
        dry_run=dry_run,
        assume_yes=assume_yes,
    )


@dataclass(frozen=True)
class TemplateReference:
    """Template file and optional parameter override file for one stack.

    Attributes:
        name: Template identifier
        template_path: Existing template file
        parameters_path: Existing parameter override file, or None when the
            template has no overrides
    """

    name: str
    template_path: Path
    parameters_path: Path | None = None

    @property
    def stack_name(self) -> str:
        return self.name

    @classmethod
    def resolve(
        cls, name: str, project_root: Path, config: ConfigData
    ) -> TemplateReference:
        """Locate the files for a template identifier.

        Args:
            name: Template identifier
            project_root: Directory the configured template dirs are relative to
            config: Layout settings (directories and suffixes)

        Raises:
            ConfigurationError: If the template file does not exist or the
                parameter file is malformed
        """
        template_path = (
            project_root / config.templates_dir / f"{name}{config.template_suffix}"
        )
        if not template_path.is_file():
            raise ConfigurationError(
                f"Template file does not exist: {template_path}"
            )

        parameters_path = (
            project_root / config.parameters_dir / f"{name}{config.parameters_suffix}"
        )
        if not parameters_path.is_file():
            return cls(name=name, template_path=template_path.resolve())

        # Malformed overrides fail here, before any backend call
        load_parameter_overrides(parameters_path)
        return cls(
            name=name,
            template_path=template_path.resolve(),
            parameters_path=parameters_path.resolve(),
        )
