"""Exception hierarchy for deploy failures.

Precondition failures happen before anything on the remote host is touched
and never trigger cleanup. Deployment failures happen after the first remote
mutation and make the orchestrator restore a safe remote state first.
"""


class HostdockError(Exception):
    """Base exception for all hostdock errors."""

    def __init__(self, message: str, context: str | None = None):
        self.message = message
        self.context = context
        super().__init__(self.format_message())

    def format_message(self) -> str:
        if self.context:
            return f"{self.message}\nContext: {self.context}"
        return self.message


class PreconditionError(HostdockError):
    """Raised before any remote mutation; no cleanup needed."""


class ConfigError(PreconditionError):
    """Raised when deployment parameters are missing or invalid."""


class StagingError(PreconditionError):
    """Raised when the local working copy cannot be cloned, updated or used."""


class ConnectivityError(PreconditionError):
    """Raised when the SSH target does not answer."""


class DeploymentError(HostdockError):
    """Raised when a remote step fails mid-deployment."""


class BootstrapError(DeploymentError):
    """Raised when Docker, Compose or Nginx cannot be installed or enabled."""


class TransferError(DeploymentError):
    """Raised when project files cannot be synced to the remote host."""


class ContainerError(DeploymentError):
    """Raised when the image build or container start fails."""


class ProxyError(DeploymentError):
    """Raised when the Nginx configuration is invalid or Nginx will not start."""


class ValidationError(DeploymentError):
    """Raised when the container runtime or proxy service is not active."""
