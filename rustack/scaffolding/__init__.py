"""Project scaffolding module for rustack.

This module provides the project generation pipeline behind the ``create`` and
``new`` commands.

Supported server frameworks:
- Axum (stable, or 0.8 on the nightly toolchain)
- Actix Web
"""

from rustack.scaffolding.generator import ScaffoldResult, generate_project
from rustack.scaffolding.templates import Dependency, ServerTemplate, dependencies_for, get_available_templates

__all__ = [
    "Dependency",
    "ScaffoldResult",
    "ServerTemplate",
    "dependencies_for",
    "generate_project",
    "get_available_templates",
]
