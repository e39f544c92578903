"""Rustack configuration.

This module provides the configuration dataclasses for a scaffolding run:

- ServerFramework / DatabaseKind / OrmKind: the closed option sets
- ProjectConfig: the resolved choices for one generated project
- RuntimeConfig: execution settings (cargo location, output verbosity)

Example usage::

    config = ProjectConfig(name="billing", server="actix-web", db="mysql")
    config.project_dir  # Path.cwd() / "billing"
"""

import logging
import os
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Any, Literal, TypeVar

from rustack.exceptions import InvalidOptionError

__all__ = (
    "DEFAULT_PROJECT_NAME",
    "TRUE_VALUES",
    "DatabaseKind",
    "OrmKind",
    "ProjectConfig",
    "RuntimeConfig",
    "ServerFramework",
    "get_default_log_level",
    "parse_option",
)

TRUE_VALUES = {"True", "true", "1", "yes", "Y", "T"}
DEFAULT_PROJECT_NAME = "my-rustack-app"

_E = TypeVar("_E", bound="Enum")


class ServerFramework(str, Enum):
    """Supported web server frameworks."""

    AXUM = "axum"
    ACTIX_WEB = "actix-web"


class DatabaseKind(str, Enum):
    """Supported databases."""

    POSTGRES = "postgres"
    MYSQL = "mysql"

    @property
    def default_port(self) -> int:
        """Port the database listens on out of the box."""
        return 3306 if self is DatabaseKind.MYSQL else 5432


class OrmKind(str, Enum):
    """Supported database access libraries."""

    SQLX = "sqlx"
    DIESEL = "diesel"


def parse_option(enum_type: "type[_E]", value: "Any", field_name: str) -> "_E":
    """Coerce a user supplied value into one of the members of ``enum_type``.

    Matching is case-insensitive and ignores surrounding whitespace.

    Args:
        enum_type: The option enum to parse into.
        value: A member of ``enum_type`` or its string value.
        field_name: Option name reported when the value is rejected.

    Raises:
        InvalidOptionError: If the value is not supported.

    Returns:
        The matching enum member.
    """
    if isinstance(value, enum_type):
        return value
    choices = [member.value for member in enum_type]
    if isinstance(value, str):
        normalized = value.strip().lower()
        for member in enum_type:
            if member.value == normalized:
                return member
    raise InvalidOptionError(field_name, value, choices)


def _env_option(enum_type: "type[_E]", env_var: str, default: "_E", field_name: str) -> "_E":
    env_value = os.getenv(env_var)
    if env_value is None or not env_value.strip():
        return default
    return parse_option(enum_type, env_value, field_name)


def default_server() -> ServerFramework:
    """Default server framework, overridable with ``RUSTACK_SERVER``."""
    return _env_option(ServerFramework, "RUSTACK_SERVER", ServerFramework.AXUM, "server")


def default_db() -> DatabaseKind:
    """Default database, overridable with ``RUSTACK_DB``."""
    return _env_option(DatabaseKind, "RUSTACK_DB", DatabaseKind.POSTGRES, "db")


def default_orm() -> OrmKind:
    """Default ORM, overridable with ``RUSTACK_ORM``."""
    return _env_option(OrmKind, "RUSTACK_ORM", OrmKind.SQLX, "orm")


def validate_project_name(name: "Any") -> str:
    """Validate a project name and return it stripped.

    The name becomes a directory and a crate name, so it may not be empty,
    contain a path separator or refer to the current/parent directory.

    Raises:
        InvalidOptionError: If the name cannot be used.

    Returns:
        The stripped project name.
    """
    if not isinstance(name, str):
        raise InvalidOptionError("name", name)
    stripped = name.strip()
    if not stripped or stripped in {".", ".."} or "/" in stripped or "\\" in stripped:
        raise InvalidOptionError("name", name)
    return stripped


@dataclass
class ProjectConfig:
    """Resolved choices for a single scaffolding run.

    Attributes:
        name: Project (and directory) name.
        server: Web server framework.
        db: Database the project connects to.
        orm: Database access library.
        directory: Parent directory the project is created in.
        nightly: Build against the nightly toolchain (edition 2024).
    """

    name: str
    server: "ServerFramework | str" = field(default_factory=default_server)
    db: "DatabaseKind | str" = field(default_factory=default_db)
    orm: "OrmKind | str" = field(default_factory=default_orm)
    directory: "Path | str" = field(default_factory=Path.cwd)
    nightly: bool = False

    def __post_init__(self) -> None:
        """Validate the name and coerce string options into their enums."""
        self.name = validate_project_name(self.name)
        self.server = parse_option(ServerFramework, self.server, "server")
        self.db = parse_option(DatabaseKind, self.db, "db")
        self.orm = parse_option(OrmKind, self.orm, "orm")
        if isinstance(self.directory, str):
            self.directory = Path(self.directory)

    @property
    def project_dir(self) -> Path:
        """Directory the project is generated into."""
        return Path(self.directory) / self.name

    @property
    def crate_name(self) -> str:
        """Rust identifier cargo derives from the package name."""
        return self.name.replace("-", "_")

    @property
    def edition(self) -> str:
        return "2024" if self.nightly else "2021"

    def replace(self, **changes: "Any") -> "ProjectConfig":
        """Return a validated copy with the given fields reassigned."""
        return replace(self, **changes)

    def to_context(self) -> dict[str, Any]:
        """Convert the configuration to a dictionary for Jinja2 rendering.

        Returns:
            Dictionary of template variables.
        """
        db = DatabaseKind(self.db)
        return {
            "name": self.name,
            "crate_name": self.crate_name,
            "server": ServerFramework(self.server).value,
            "db": db.value,
            "db_port": db.default_port,
            "orm": OrmKind(self.orm).value,
            "edition": self.edition,
            "nightly": self.nightly,
        }


def get_default_log_level() -> "Literal['quiet', 'normal', 'verbose']":
    """Get default log level from environment variable.

    Checks RUSTACK_LOG_LEVEL environment variable.
    Falls back to "normal" if not set or invalid.

    Returns:
        The log level from environment or "normal" default.
    """
    env_level = os.getenv("RUSTACK_LOG_LEVEL", "").lower()
    match env_level:
        case "quiet" | "normal" | "verbose":
            return env_level
        case _:
            return "normal"


@dataclass
class RuntimeConfig:
    """Execution settings.

    Attributes:
        cargo_path: Explicit cargo executable. Read from ``RUSTACK_CARGO``; when
            unset cargo is looked up on ``PATH``.
        quiet: Hide cargo's own output. Read from ``RUSTACK_QUIET``.
        log_level: Console verbosity. Read from ``RUSTACK_LOG_LEVEL``.
    """

    cargo_path: "str | None" = field(default_factory=lambda: os.getenv("RUSTACK_CARGO") or None)
    quiet: bool = field(default_factory=lambda: os.getenv("RUSTACK_QUIET", "False") in TRUE_VALUES)
    log_level: "Literal['quiet', 'normal', 'verbose']" = field(default_factory=get_default_log_level)

    @property
    def logging_level(self) -> int:
        """Standard library logging level matching ``log_level``."""
        match self.log_level:
            case "quiet":
                return logging.WARNING
            case "verbose":
                return logging.DEBUG
            case _:
                return logging.INFO
