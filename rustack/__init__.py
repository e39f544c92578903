"""Rustack: scaffold Rust backend projects.

Basic usage::

    $ rustack new billing --server actix-web --db mysql --orm diesel
    $ rustack create

Programmatic usage::

    from rustack import CargoExecutor, ProjectConfig, generate_project

    generate_project(ProjectConfig(name="billing"), CargoExecutor())
"""

from rustack.config import DatabaseKind, OrmKind, ProjectConfig, RuntimeConfig, ServerFramework
from rustack.executor import CargoExecutor, PackageExecutor
from rustack.scaffolding import ScaffoldResult, generate_project

__all__ = (
    "CargoExecutor",
    "DatabaseKind",
    "OrmKind",
    "PackageExecutor",
    "ProjectConfig",
    "RuntimeConfig",
    "ScaffoldResult",
    "ServerFramework",
    "generate_project",
)
