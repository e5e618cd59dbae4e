"""
Exception types raised by Elysia Lambda.
"""
from typing import List, Optional


class ElysiaLambdaError(Exception):
    """Base class for all errors raised by the deployer."""


class ConfigValidationError(ElysiaLambdaError):
    """One or more configuration problems, reported together."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("\n".join(f"- {e}" for e in self.errors))


class ConfigFileError(ElysiaLambdaError):
    """The config file could not be read or parsed."""


class ProvisionError(ElysiaLambdaError):
    """Publishing the runtime layer failed."""


class TransformError(ElysiaLambdaError):
    """The entry file could not be read or the mutated copy written."""


class InstanceNotFoundError(ElysiaLambdaError):
    """No service instance was wired to the injected wrapper."""


class BundleError(ElysiaLambdaError):
    """The bundler could not produce an artifact."""


class RemoteApiError(ElysiaLambdaError):
    """A Lambda API call failed."""


class CommandError(ElysiaLambdaError):
    """An external command exited unsuccessfully."""

    def __init__(self, cmd: List[str], returncode: Optional[int], output: str = "", reason: str = ""):
        self.cmd = list(cmd)
        self.returncode = returncode
        self.output = output
        message = reason or f"Command failed with exit code {returncode}: {' '.join(self.cmd)}"
        super().__init__(message)
