import sys
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, NoReturn, Optional, TypeVar

from click import Choice, argument, group, option, pass_context, pass_obj, version_option
from click import Path as ClickPath
from rich.markup import escape
from rich.prompt import Prompt
from rich.table import Table

from rustack.__metadata__ import __version__
from rustack._utils import TICK, configure_logging, console, fmt_path
from rustack.config import (
    DEFAULT_PROJECT_NAME,
    DatabaseKind,
    OrmKind,
    ProjectConfig,
    RuntimeConfig,
    ServerFramework,
    default_db,
    default_orm,
    default_server,
    parse_option,
    validate_project_name,
)
from rustack.exceptions import InvalidOptionError, RustackError
from rustack.executor import CargoExecutor, PackageExecutor
from rustack.scaffolding import generate_project, get_available_templates

if TYPE_CHECKING:
    from click import Context

_E = TypeVar("_E", bound=Enum)

REVIEW_ACTIONS: tuple[str, ...] = ("create", "name", "server", "db", "orm", "directory", "cancel")
"""Choices offered by the review menu of ``rustack create``."""

_OPTION_PROMPTS: dict[str, str] = {
    "server": "Choose a server framework",
    "db": "Choose a database",
    "orm": "Choose an ORM",
}


def _values(enum_type: "type[Enum]") -> list[str]:
    return [member.value for member in enum_type]


def _apply_cli_log_level(runtime: RuntimeConfig, *, verbose: bool = False, quiet: bool = False) -> None:
    if verbose:
        runtime.log_level = "verbose"
    elif quiet:
        runtime.log_level = "quiet"


def _build_executor(runtime: RuntimeConfig) -> PackageExecutor:
    return CargoExecutor(runtime.cargo_path, quiet=runtime.quiet)


def _fail(error: Exception) -> NoReturn:
    console.print(f"[bold red]{escape(str(error))}[/]")
    sys.exit(1)


def _prompt_for_name(default: str) -> str:
    """Ask for a project name until a usable one is given."""
    while True:
        value = Prompt.ask("Project name", default=default, console=console)
        try:
            return validate_project_name(value)
        except InvalidOptionError as e:
            console.print(f"[red]{escape(str(e))}[/]")


def _prompt_for_directory(default: Path) -> Path:
    while True:
        directory = Path(Prompt.ask("Target directory", default=str(default), console=console)).expanduser()
        if directory.is_dir():
            return directory
        console.print(f"[red]Directory '{escape(str(directory))}' does not exist.[/]")


def _prompt_for_option(enum_type: "type[_E]", field_name: str, default: "_E") -> "_E":
    value = Prompt.ask(
        _OPTION_PROMPTS[field_name],
        choices=_values(enum_type),
        default=default.value,
        console=console,
    )
    return parse_option(enum_type, value, field_name)


def _prompt_for_config(name: "Optional[str]", directory: Path) -> ProjectConfig:
    """Collect every option interactively, seeding the name when one was given."""
    project_name = _prompt_for_name(name or DEFAULT_PROJECT_NAME)
    server = _prompt_for_option(ServerFramework, "server", default_server())
    db = _prompt_for_option(DatabaseKind, "db", default_db())
    orm = _prompt_for_option(OrmKind, "orm", default_orm())
    return ProjectConfig(name=project_name, server=server, db=db, orm=orm, directory=directory)


def _print_config(config: ProjectConfig) -> None:
    table = Table(title="Project configuration", show_header=False, title_justify="left")
    table.add_column("Option", style="cyan")
    table.add_column("Value")
    table.add_row("name", config.name)
    table.add_row("server", ServerFramework(config.server).value)
    table.add_row("db", DatabaseKind(config.db).value)
    table.add_row("orm", OrmKind(config.orm).value)
    table.add_row("directory", str(config.directory))
    console.print(table)


def _review_config(config: ProjectConfig) -> "Optional[ProjectConfig]":
    """Show the current choices until the user creates the project or cancels.

    Returns:
        The final configuration, or None when the user cancelled.
    """
    while True:
        _print_config(config)
        action = Prompt.ask("What next?", choices=list(REVIEW_ACTIONS), default="create", console=console)
        match action:
            case "create":
                return config
            case "cancel":
                return None
            case "name":
                config = config.replace(name=_prompt_for_name(config.name))
            case "server":
                config = config.replace(server=_prompt_for_option(ServerFramework, "server", config.server))
            case "db":
                config = config.replace(db=_prompt_for_option(DatabaseKind, "db", config.db))
            case "orm":
                config = config.replace(orm=_prompt_for_option(OrmKind, "orm", config.orm))
            case "directory":
                config = config.replace(directory=_prompt_for_directory(config.directory))
            case _:  # pragma: no cover
                continue


def _scaffold(config: ProjectConfig, runtime: RuntimeConfig) -> None:
    console.rule(f"[yellow]Creating new project {escape(config.name)}[/]", align="left")
    try:
        result = generate_project(config, _build_executor(runtime))
    except RustackError as e:
        _fail(e)
    console.print(f"\n{TICK} [green bold]Created project:[/] {escape(config.name)}")
    console.print(f"[dim]  {len(result.dependencies)} crates added, {len(result.files)} files written[/]")
    console.print(f"[dim]  cd {escape(fmt_path(result.project_dir))} && cargo run[/]")


@group(name="rustack", context_settings={"help_option_names": ["-h", "--help"]})
@version_option(__version__, prog_name="rustack")
@option("--verbose", type=bool, help="Enable verbose output.", default=False, is_flag=True)
@option("--quiet", type=bool, help="Only report warnings and errors.", default=False, is_flag=True)
@pass_context
def rustack_group(ctx: "Context", verbose: bool, quiet: bool) -> None:
    """Scaffold Rust backend projects."""
    runtime = RuntimeConfig()
    _apply_cli_log_level(runtime, verbose=verbose, quiet=quiet)
    configure_logging(runtime.logging_level)
    ctx.obj = runtime


@rustack_group.command(
    name="create",
    help="Interactively configure and create a new project.",
)
@argument("name", required=False)
@option(
    "--dir",
    "directory",
    type=ClickPath(exists=True, dir_okay=True, file_okay=False, path_type=Path),
    help="Directory the project is created in.",
    default=Path("."),
    show_default=True,
)
@option(
    "--yes",
    "-y",
    help="Create the project as soon as all options are answered, without the review menu.",
    type=bool,
    default=False,
    is_flag=True,
)
@pass_obj
def create_command(runtime: RuntimeConfig, name: "Optional[str]", directory: Path, yes: bool) -> None:
    """Prompt for the project options, then create the project."""
    console.print("[bold green]Welcome to rustack![/]")
    console.print("[dim]Let's set up your Rust backend project.[/]\n")

    try:
        config = _prompt_for_config(name, directory)
    except RustackError as e:
        _fail(e)

    if not yes:
        reviewed = _review_config(config)
        if reviewed is None:
            console.print("[yellow]Project creation cancelled.[/]")
            sys.exit(2)
        config = reviewed

    _scaffold(config, runtime)


@rustack_group.command(
    name="new",
    help="Create a new project from command line options.",
)
@argument("name")
@option(
    "--db",
    type=Choice(_values(DatabaseKind), case_sensitive=False),
    help="Database the project connects to. [default: postgres]",
    default=None,
)
@option(
    "--orm",
    type=Choice(_values(OrmKind), case_sensitive=False),
    help="Database access library. [default: sqlx]",
    default=None,
)
@option(
    "--server",
    type=Choice(_values(ServerFramework), case_sensitive=False),
    help="Web server framework. [default: axum]",
    default=None,
)
@option(
    "--dir",
    "directory",
    type=ClickPath(exists=True, dir_okay=True, file_okay=False, path_type=Path),
    help="Directory the project is created in.",
    default=Path("."),
    show_default=True,
)
@option("--nightly", type=bool, help="Target the nightly toolchain (edition 2024).", default=False, is_flag=True)
@pass_obj
def new_command(
    runtime: RuntimeConfig,
    name: str,
    db: "Optional[str]",
    orm: "Optional[str]",
    server: "Optional[str]",
    directory: Path,
    nightly: bool,
) -> None:
    """Create a project without prompting; omitted options use their defaults."""
    try:
        config = ProjectConfig(
            name=name,
            server=server or default_server(),
            db=db or default_db(),
            orm=orm or default_orm(),
            directory=directory,
            nightly=nightly,
        )
    except RustackError as e:
        _fail(e)

    _scaffold(config, runtime)


@rustack_group.command(name="list", help="List the supported option values.")
def list_command() -> None:
    """Print every option with its supported values."""
    table = Table(title="Supported options", title_justify="left")
    table.add_column("Option", style="cyan")
    table.add_column("Values")
    table.add_column("Default", style="green")
    table.add_row("server", ", ".join(_values(ServerFramework)), default_server().value)
    table.add_row("db", ", ".join(_values(DatabaseKind)), default_db().value)
    table.add_row("orm", ", ".join(_values(OrmKind)), default_orm().value)
    console.print(table)
    for template in get_available_templates():
        console.print(f"[dim]  {template.type.value}: {escape(template.description)}[/]")


def main() -> None:
    """Console script entry point."""
    rustack_group()
