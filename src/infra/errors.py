"""Error taxonomy for stack deployments.

Every error the deployment tool reports to the operator derives from
DeploymentError. Each subclass maps to one failure kind; all of them
terminate the run with exit code 1.
"""


class DeploymentError(Exception):
    """Raised when a deployment operation fails."""

    def __init__(self, message: str, details: str | None = None):
        self.message = message
        self.details = details
        super().__init__(message)


class ConfigurationError(DeploymentError):
    """Bad or missing local input (template, parameter file, flags, config)."""


class AuthenticationError(DeploymentError):
    """The backend rejected the caller's identity."""


class TemplateValidationError(DeploymentError):
    """The backend rejected the template content.

    The backend's message is passed through verbatim in ``details``.
    """


class ProviderCommunicationError(DeploymentError):
    """A read-only backend call failed (network, API, or malformed output)."""


class DeploymentFailedError(DeploymentError):
    """The backend deployment itself failed."""
