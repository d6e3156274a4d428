"""Error taxonomy for power-schedule.

Every component raises one of these. The orchestrator is the only place
that turns them into a terminal error line and an exit code.
"""

from typing import Optional, Sequence


class PowerScheduleError(Exception):
    """Base class for all power-schedule failures."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class InvalidInput(PowerScheduleError):
    """A user-supplied parameter is missing or malformed."""

    def __init__(self, field: str, message: Optional[str] = None):
        self.field = field
        super().__init__(message or f"Invalid value for '{field}'")


class UnsupportedPlatform(PowerScheduleError):
    def __init__(self, system: str):
        self.system = system
        super().__init__(f"Unsupported platform: {system or 'unknown'}")


class InvalidComponentName(PowerScheduleError):
    """The configured component name can't be used to derive identifiers."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(
            f"Invalid component name '{name}': must match ^[a-z0-9_-]+$"
        )


class ArtifactStructureError(PowerScheduleError):
    """A configuration artifact is missing an element or line we must edit."""

    def __init__(self, path, element: str, message: Optional[str] = None):
        self.path = path
        self.element = element
        super().__init__(
            message or f"'{element}' not found in configuration artifact {path}"
        )


class ArtifactIOError(PowerScheduleError):
    """A configuration artifact could not be read or written."""

    def __init__(self, path, message: Optional[str] = None):
        self.path = path
        super().__init__(message or f"Cannot access configuration artifact {path}")


class ProvisioningError(PowerScheduleError):
    def __init__(self, path, message: Optional[str] = None):
        self.path = path
        super().__init__(message or f"Failed to provision trigger script at {path}")


class RegistrationError(PowerScheduleError):
    """The native scheduler rejected a (un)registration command."""

    def __init__(
        self,
        message: str,
        command: Sequence[str] = (),
        returncode: Optional[int] = None,
        stderr: str = "",
    ):
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message)
