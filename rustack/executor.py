"""Package manager executors.

This module provides the boundary between the scaffolder and the external
package manager. The generator only talks to :class:`PackageExecutor`, so tests
can substitute an in-memory fake for :class:`CargoExecutor`.
"""

import logging
import platform
import shutil
import subprocess
from abc import ABC, abstractmethod
from collections.abc import Sequence
from pathlib import Path
from typing import Any, ClassVar

from rustack.exceptions import CargoExecutableNotFoundError, CargoExecutionError

__all__ = ("CargoExecutor", "PackageExecutor", "format_dependency_args")

logger = logging.getLogger("rustack")


def format_dependency_args(
    name: str, version: "str | None" = None, features: "Sequence[str] | None" = None
) -> list[str]:
    """Build the ``cargo add`` arguments for one dependency.

    Args:
        name: Crate name.
        version: Optional version requirement (``1.0``, ``0.7``...).
        features: Optional feature flags to enable.

    Returns:
        Argument list starting with ``add``.
    """
    args = ["add", f"{name}@{version}" if version else name]
    if features:
        args.extend(["--features", ",".join(features)])
    return args


class PackageExecutor(ABC):
    """Abstract base class for package manager executors."""

    bin_name: ClassVar[str]

    def __init__(self, executable_path: "Path | str | None" = None, *, quiet: bool = False) -> None:
        self.executable_path = executable_path
        self.quiet = quiet

    @abstractmethod
    def initialize(self, path: Path, *, edition: str = "2021") -> None:
        """Create a new binary project at ``path``."""

    @abstractmethod
    def add_dependency(
        self,
        path: Path,
        name: str,
        version: "str | None" = None,
        features: "Sequence[str] | None" = None,
    ) -> None:
        """Declare a dependency in the manifest of the project at ``path``."""

    @abstractmethod
    def has_nightly(self) -> bool:
        """Whether a nightly toolchain is available."""

    @abstractmethod
    def install_nightly(self) -> None:
        """Install the nightly toolchain."""

    def _resolve_executable(self) -> str:
        if self.executable_path:
            return str(self.executable_path)
        path = shutil.which(self.bin_name)
        if path is None:
            raise CargoExecutableNotFoundError(self.bin_name)
        return path


class CargoExecutor(PackageExecutor):
    """Cargo executor.

    Every invocation blocks until cargo exits. A non-zero exit code raises
    :class:`~rustack.exceptions.CargoExecutionError`, carrying cargo's stderr
    when the executor is quiet.
    """

    bin_name = "cargo"
    toolchain_bin_name = "rustup"

    def initialize(self, path: Path, *, edition: str = "2021") -> None:
        self.execute(["new", "--bin", "--edition", edition, path.name], cwd=path.parent)

    def add_dependency(
        self,
        path: Path,
        name: str,
        version: "str | None" = None,
        features: "Sequence[str] | None" = None,
    ) -> None:
        self.execute(format_dependency_args(name, version, features), cwd=path)

    def has_nightly(self) -> bool:
        rustup = shutil.which(self.toolchain_bin_name)
        if rustup is None:
            return False
        process = subprocess.run(
            [rustup, "toolchain", "list"],
            shell=platform.system() == "Windows",
            check=False,
            capture_output=True,
        )
        if process.returncode != 0:
            return False
        toolchains = process.stdout.decode(errors="replace").splitlines()
        return any(line.strip().startswith("nightly") for line in toolchains)

    def install_nightly(self) -> None:
        rustup = shutil.which(self.toolchain_bin_name)
        if rustup is None:
            raise CargoExecutableNotFoundError(self.toolchain_bin_name)
        self._run([rustup, "toolchain", "install", "nightly"], cwd=None)

    def execute(self, args: list[str], cwd: "Path | None") -> None:
        """Run a cargo subcommand and wait for it to finish."""
        self._run([self._resolve_executable(), *args], cwd=cwd)

    def _run(self, command: list[str], cwd: "Path | None") -> None:
        """Run ``command`` to completion.

        Cargo reports progress on stderr, so stderr reaches the terminal unless
        the executor is quiet. Quiet runs capture it for the error message.

        Raises:
            CargoExecutableNotFoundError: If the executable cannot be started.
            CargoExecutionError: If the working directory is missing or the command fails.
        """
        logger.debug("Running %s (cwd=%s)", " ".join(command), cwd)
        kwargs: dict[str, Any] = {
            "cwd": cwd,
            "shell": platform.system() == "Windows",
            "check": False,
            "stdout": subprocess.DEVNULL if self.quiet else None,
            "stderr": subprocess.PIPE if self.quiet else None,
        }
        try:
            process = subprocess.run(command, **kwargs)
        except FileNotFoundError as e:
            if cwd is not None and not cwd.is_dir():
                raise CargoExecutionError(command, -1, f"working directory {str(cwd)!r} does not exist") from e
            raise CargoExecutableNotFoundError(command[0]) from e
        except OSError as e:
            raise CargoExecutionError(command, -1, e.strerror or str(e)) from e
        if process.returncode != 0:
            stderr = process.stderr.decode(errors="replace") if process.stderr else ""
            raise CargoExecutionError(command, process.returncode, stderr)
