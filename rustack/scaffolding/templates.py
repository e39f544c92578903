"""Server framework template definitions for scaffolding.

This module defines the available server templates, their crate versions and
the dependency list declared for a project.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from rustack.config import DatabaseKind, OrmKind, ServerFramework

if TYPE_CHECKING:
    from rustack.config import ProjectConfig


@dataclass(frozen=True)
class Dependency:
    """A crate declared in the generated manifest.

    Attributes:
        name: Crate name on crates.io
        version: Version requirement, or None for the latest release
        features: Cargo features to enable
    """

    name: str
    version: "str | None" = None
    features: tuple[str, ...] = ()


@dataclass
class ServerTemplate:
    """Configuration for a server framework template.

    Attributes:
        name: Display name for the template
        type: Server framework enum
        description: Brief description shown in selection UI
        crate: Crate declared for the framework
        version: Crate version on the stable toolchain
        nightly_version: Crate version when building on nightly (edition 2024)
    """

    name: str
    type: ServerFramework
    description: str
    crate: str
    version: "str | None" = None
    nightly_version: "str | None" = None

    def dependency(self, *, nightly: bool = False) -> Dependency:
        version = self.nightly_version if nightly and self.nightly_version else self.version
        return Dependency(self.crate, version)


SERVER_TEMPLATES: dict[ServerFramework, ServerTemplate] = {
    ServerFramework.AXUM: ServerTemplate(
        name="Axum",
        type=ServerFramework.AXUM,
        description="Axum on Tokio with a nested /api router",
        crate="axum",
        version="0.7",
        nightly_version="0.8",
    ),
    ServerFramework.ACTIX_WEB: ServerTemplate(
        name="Actix Web",
        type=ServerFramework.ACTIX_WEB,
        description="Actix Web with attribute routed handlers",
        crate="actix-web",
        version="4",
    ),
}

ORM_DEPENDENCIES: dict[OrmKind, Callable[[DatabaseKind], Dependency]] = {
    OrmKind.SQLX: lambda db: Dependency("sqlx", "0.7", ("runtime-tokio-rustls", db.value)),
    OrmKind.DIESEL: lambda db: Dependency("diesel", "2", (db.value,)),
}

COMMON_DEPENDENCIES: tuple[Dependency, ...] = (
    Dependency("jsonwebtoken", "8.3"),
    Dependency("serde", "1", ("derive",)),
    Dependency("figment", "0.10", ("env",)),
    Dependency("reqwest", "0.11", ("json",)),
    Dependency("dotenvy", "0.15"),
)


def get_available_templates() -> list[ServerTemplate]:
    """Get list of all available server templates.

    Returns:
        List of available server templates.
    """
    return list(SERVER_TEMPLATES.values())


def dependencies_for(config: "ProjectConfig") -> list[Dependency]:
    """Dependencies declared for a project, in declaration order.

    The server crate comes first, then the async runtime, the ORM (built for the
    chosen database) and the common crates every project gets.

    Args:
        config: The resolved project configuration.

    Returns:
        Ordered list of dependencies.
    """
    server = SERVER_TEMPLATES[ServerFramework(config.server)]
    return [
        server.dependency(nightly=config.nightly),
        Dependency("tokio", "1", ("full",)),
        ORM_DEPENDENCIES[OrmKind(config.orm)](DatabaseKind(config.db)),
        *COMMON_DEPENDENCIES,
    ]
