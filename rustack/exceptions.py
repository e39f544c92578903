"""Rustack exception classes."""

from collections.abc import Iterable
from pathlib import Path

__all__ = [
    "CargoExecutableNotFoundError",
    "CargoExecutionError",
    "InvalidOptionError",
    "ProjectExistsError",
    "RustackError",
    "TemplateWriteError",
]


class RustackError(Exception):
    """Base exception for rustack related errors."""


class InvalidOptionError(RustackError, ValueError):
    """Raised when a project option is not one of the supported values."""

    def __init__(self, field: str, value: object, choices: "Iterable[str] | None" = None) -> None:
        """Initialize the exception.

        Args:
            field: Name of the offending option (``server``, ``db``, ``orm``, ``name``...).
            value: The rejected value.
            choices: Supported values, when the option is enumerated.
        """
        self.field = field
        self.value = value
        self.choices = list(choices) if choices is not None else []
        message = f"Invalid value for {field!r}: {value!r}."
        if self.choices:
            message += f" Expected one of: {', '.join(self.choices)}"
        super().__init__(message)


class ProjectExistsError(RustackError, FileExistsError):
    """Raised when the target project directory already exists."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"Project directory {str(path)!r} already exists.")


class CargoExecutableNotFoundError(RustackError):
    """Raised when the package manager executable is not found."""

    def __init__(self, executable: str) -> None:
        super().__init__(f"Executable {executable!r} not found.")


class CargoExecutionError(RustackError):
    """Raised when a package manager invocation returns a non-zero exit code."""

    def __init__(self, command: list[str], return_code: int, stderr: str) -> None:
        self.command = command
        self.return_code = return_code
        self.stderr = stderr
        message = f"Command {command!r} failed with return code {return_code}."
        if stderr:
            message += f"\nStderr: {stderr}"
        super().__init__(message)


class TemplateWriteError(RustackError):
    """Raised when a generated file cannot be written."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        super().__init__(f"Could not write {str(path)!r}: {reason}")
