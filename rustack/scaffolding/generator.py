"""Project scaffolding generator.

This module runs the scaffolding pipeline: it initializes the crate through the
package executor, declares dependencies and renders the project files from
templates.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from rustack._utils import console, fmt_path
from rustack.config import ServerFramework
from rustack.exceptions import InvalidOptionError, ProjectExistsError, TemplateWriteError
from rustack.scaffolding.templates import Dependency, dependencies_for

if TYPE_CHECKING:
    from rustack.config import ProjectConfig
    from rustack.executor import PackageExecutor

__all__ = (
    "PROJECT_LAYOUT",
    "ScaffoldResult",
    "generate_project",
    "get_template_dir",
    "render_template",
)

logger = logging.getLogger("rustack")

PROJECT_LAYOUT: tuple[str, ...] = ("src/routes", "src/models", "src/config")
"""Subdirectories created under every generated project."""

# Template files whose output name differs from the template name
_OUTPUT_NAMES = {"dotenv": ".env"}


def _path_list_factory() -> list[Path]:
    return []


def _dependency_list_factory() -> list[Dependency]:
    return []


@dataclass
class ScaffoldResult:
    """Outcome of a successful scaffolding run.

    Attributes:
        project_dir: Root of the generated project.
        files: Files written from templates, in write order.
        dependencies: Dependencies declared in the manifest, in declaration order.
    """

    project_dir: Path
    files: list[Path] = field(default_factory=_path_list_factory)
    dependencies: list[Dependency] = field(default_factory=_dependency_list_factory)


def get_template_dir() -> Path:
    """Get the directory containing project templates.

    Returns:
        Path to the templates directory.
    """
    return Path(__file__).parent.parent / "templates"


def render_template(template_path: Path, context: dict[str, Any]) -> str:
    """Render a Jinja2 template with the given context.

    Templates are rendered with autoescaping disabled because the output is
    source code and configuration files, not HTML.

    Args:
        template_path: Path to the template file.
        context: Dictionary of template variables.

    Returns:
        Rendered template content.
    """
    from jinja2 import Environment, FileSystemLoader, StrictUndefined

    env = Environment(
        loader=FileSystemLoader(str(template_path.parent)),
        keep_trailing_newline=True,
        autoescape=False,  # noqa: S701
        undefined=StrictUndefined,
    )
    template = env.get_template(template_path.name)
    return template.render(**context)


def _output_path(relative_path: Path) -> Path:
    name = relative_path.name.removesuffix(".j2")
    return relative_path.with_name(_OUTPUT_NAMES.get(name, name))


def _process_templates(
    template_dir: Path,
    output_dir: Path,
    context: dict[str, Any],
    *,
    skip_paths: "set[Path] | None" = None,
) -> list[Path]:
    """Render every ``.j2`` file under ``template_dir`` into ``output_dir``.

    Files are processed in sorted order so that output is deterministic.

    Args:
        template_dir: Directory containing template files.
        output_dir: Directory to write generated files.
        context: Template context dictionary.
        skip_paths: Set of relative template paths to skip.

    Returns:
        List of generated file paths.
    """
    generated_files: list[Path] = []
    skip_paths = skip_paths or set()

    for template_file in sorted(template_dir.glob("**/*.j2")):
        relative_path = template_file.relative_to(template_dir)
        if relative_path in skip_paths:
            continue
        output_path = output_dir / _output_path(relative_path)
        _render_and_write(template_file, output_path, context)
        generated_files.append(output_path)

    return generated_files


def _render_and_write(template_path: Path, output_path: Path, context: dict[str, Any]) -> None:
    """Render a template and write to output file.

    Raises:
        TemplateWriteError: If the file cannot be written.
    """
    content = render_template(template_path, context)
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise TemplateWriteError(output_path, e.strerror or str(e)) from e
    console.print(f"[green]Created {fmt_path(output_path)}[/]")


def _resolve_nightly(executor: "PackageExecutor") -> None:
    if executor.has_nightly():
        logger.debug("Nightly toolchain already installed")
        return
    console.print("[blue]Installing nightly toolchain...[/]")
    executor.install_nightly()


def generate_project(
    config: "ProjectConfig",
    executor: "PackageExecutor",
    *,
    template_dir: "Path | None" = None,
) -> ScaffoldResult:
    """Generate a new project.

    Steps run in a fixed order and the first failure propagates. Nothing that
    was already created is removed.

    Args:
        config: The resolved project configuration.
        executor: Package manager used to create the crate and declare dependencies.
        template_dir: Override for the template root, mainly for tests.

    Raises:
        InvalidOptionError: If the parent directory does not exist.
        ProjectExistsError: If the project directory already exists.

    Returns:
        The generated project directory, files and dependencies.
    """
    if not Path(config.directory).is_dir():
        raise InvalidOptionError("directory", str(config.directory))
    project_dir = config.project_dir
    if project_dir.exists():
        raise ProjectExistsError(project_dir)

    template_dir = template_dir or get_template_dir()
    result = ScaffoldResult(project_dir=project_dir)

    if config.nightly:
        _resolve_nightly(executor)

    logger.info("Initializing %s (edition %s)", config.name, config.edition)
    executor.initialize(project_dir, edition=config.edition)

    context = config.to_context()
    if config.nightly:
        result.files.extend(_process_templates(template_dir / "toolchain", project_dir, context))

    console.print("[green bold]Installing crates... (this may take a moment)[/]")
    for dependency in dependencies_for(config):
        logger.debug("Adding %s", dependency.name)
        executor.add_dependency(project_dir, dependency.name, dependency.version, list(dependency.features) or None)
        result.dependencies.append(dependency)

    for subdir in PROJECT_LAYOUT:
        try:
            (project_dir / subdir).mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise TemplateWriteError(project_dir / subdir, e.strerror or str(e)) from e

    server_dir = template_dir / ServerFramework(config.server).value
    server_files = {template_file.relative_to(server_dir) for template_file in server_dir.glob("**/*.j2")}
    result.files.extend(_process_templates(server_dir, project_dir, context))
    result.files.extend(_process_templates(template_dir / "base", project_dir, context, skip_paths=server_files))

    logger.info("Generated %d files in %s", len(result.files), fmt_path(project_dir))
    return result
