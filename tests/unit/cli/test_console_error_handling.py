import pytest
import typer

from src.cli.shared.console import with_error_handling
from src.infra.errors import (
    AuthenticationError,
    ConfigurationError,
    DeploymentError,
    DeploymentFailedError,
    ProviderCommunicationError,
    TemplateValidationError,
)


def test_with_error_handling_handles_deployment_error():
    @with_error_handling
    def _command() -> None:
        raise DeploymentError("Boom", details="extra")

    with pytest.raises(typer.Exit) as excinfo:
        _command()

    assert excinfo.value.exit_code == 1


@pytest.mark.parametrize(
    "error_cls",
    [
        ConfigurationError,
        AuthenticationError,
        TemplateValidationError,
        ProviderCommunicationError,
        DeploymentFailedError,
    ],
)
def test_every_error_kind_exits_with_one(error_cls):
    @with_error_handling
    def _command() -> None:
        raise error_cls("failed [with brackets]")

    with pytest.raises(typer.Exit) as excinfo:
        _command()

    assert excinfo.value.exit_code == 1


def test_with_error_handling_handles_keyboard_interrupt():
    @with_error_handling
    def _command() -> None:
        raise KeyboardInterrupt

    with pytest.raises(typer.Exit) as excinfo:
        _command()

    assert excinfo.value.exit_code == 130


def test_with_error_handling_lets_success_through():
    calls = []

    @with_error_handling
    def _command() -> None:
        calls.append(True)

    _command()

    assert calls == [True]
