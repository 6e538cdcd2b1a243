"""Validated configuration model for the deployment tool."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.infra.cloudformation.gateway import DEFAULT_FAILURE_STATUSES


class ConfigData(BaseModel):
    """Settings read from the ``config:`` section of cfn-deploy.yaml.

    Every field has a default, so an absent config file is equivalent to
    an empty ``config:`` section.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    backend: Literal["cli", "boto3"] = "cli"
    aws_executable: str = "aws"
    templates_dir: str = "cfn/templates"
    parameters_dir: str = "cfn/parameters"
    template_suffix: str = ".yml"
    parameters_suffix: str = ".json"
    failure_statuses: tuple[str, ...] = Field(
        default=DEFAULT_FAILURE_STATUSES, min_length=1
    )
    log_level: Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    @field_validator("template_suffix", "parameters_suffix")
    @classmethod
    def _suffix_has_dot(cls, value: str) -> str:
        if not value.startswith("."):
            raise ValueError("suffix must start with '.'")
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value
