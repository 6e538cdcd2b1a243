"""Unit tests for deployment request parsing and template resolution."""

from __future__ import annotations

from pathlib import Path

import pytest

from src.cli.deployment.models import (
    DeploymentRequest,
    TemplateReference,
    build_request,
)
from src.infra.cloudformation import AwsContext
from src.infra.errors import ConfigurationError
from src.runtime.config import ConfigData


class TestBuildRequest:
    """Tests for build_request."""

    @pytest.mark.parametrize("template", [None, "", "   "])
    def test_missing_template_raises_configuration_error(self, template) -> None:
        with pytest.raises(ConfigurationError) as excinfo:
            build_request(template)
        assert "Missing CloudFormation template" in excinfo.value.message

    @pytest.mark.parametrize(
        "template",
        ["../foo", "nested/foo", "a\\b", "..", "foo.bar", "foo_bar", "1foo", "a" * 129],
    )
    def test_template_with_invalid_name_rejected(self, template: str) -> None:
        with pytest.raises(ConfigurationError):
            build_request(template)

    @pytest.mark.parametrize(
        "template", ["simple-terraform-state-resource", "Foo2", "a" * 128]
    )
    def test_stack_compatible_names_accepted(self, template: str) -> None:
        assert build_request(template).template == template

    def test_defaults(self) -> None:
        request = build_request("foo")
        assert request == DeploymentRequest(template="foo")
        assert request.dry_run is False
        assert request.assume_yes is False
        assert request.profile is None
        assert request.region is None

    def test_blank_profile_and_region_are_unset(self) -> None:
        request = build_request("foo", profile=" ", region="")
        assert request.aws_context == AwsContext()

    def test_aws_context_carries_profile_and_region(self) -> None:
        request = build_request("foo", profile="ops", region="eu-west-1")
        assert request.aws_context == AwsContext(profile="ops", region="eu-west-1")

    def test_request_is_immutable(self) -> None:
        request = build_request("foo")
        with pytest.raises(AttributeError):
            request.dry_run = True  # type: ignore[misc]


class TestTemplateReference:
    """Tests for TemplateReference.resolve."""

    def test_resolves_template_without_parameters(self, project_root: Path) -> None:
        ref = TemplateReference.resolve("foo", project_root, ConfigData())

        assert ref.template_path == (project_root / "cfn/templates/foo.yml").resolve()
        assert ref.parameters_path is None
        assert ref.stack_name == "foo"

    def test_picks_up_sibling_parameter_file(self, project_root: Path) -> None:
        params = project_root / "cfn" / "parameters" / "foo.json"
        params.write_text("{}")

        ref = TemplateReference.resolve("foo", project_root, ConfigData())

        assert ref.parameters_path == params.resolve()

    def test_missing_template_raises(self, project_root: Path) -> None:
        with pytest.raises(ConfigurationError) as excinfo:
            TemplateReference.resolve("bar", project_root, ConfigData())
        assert "Template file does not exist" in excinfo.value.message
        assert "bar.yml" in excinfo.value.message

    def test_honours_configured_layout(self, tmp_path: Path) -> None:
        (tmp_path / "stacks").mkdir()
        (tmp_path / "stacks" / "foo.yaml").write_text("Resources: {}\n")
        (tmp_path / "overrides").mkdir()
        (tmp_path / "overrides" / "foo.params.json").write_text("[]")
        config = ConfigData(
            templates_dir="stacks",
            template_suffix=".yaml",
            parameters_dir="overrides",
            parameters_suffix=".params.json",
        )

        ref = TemplateReference.resolve("foo", tmp_path, config)

        assert ref.template_path.name == "foo.yaml"
        assert ref.parameters_path is not None
        assert ref.parameters_path.name == "foo.params.json"

    def test_malformed_parameter_file_raises(self, project_root: Path) -> None:
        (project_root / "cfn" / "parameters" / "foo.json").write_text('["NoEquals"]')

        with pytest.raises(ConfigurationError) as excinfo:
            TemplateReference.resolve("foo", project_root, ConfigData())
        assert "Unsupported parameter file format" in excinfo.value.message
