from __future__ import annotations

from collections.abc import Generator, Sequence
from pathlib import Path

import pytest

from rustack.exceptions import CargoExecutionError
from rustack.executor import PackageExecutor

here = Path(__file__).parent

# Environment variables that may affect test behavior - clear before each test
_RUSTACK_ENV_VARS = [
    "RUSTACK_CARGO",
    "RUSTACK_QUIET",
    "RUSTACK_LOG_LEVEL",
    "RUSTACK_SERVER",
    "RUSTACK_DB",
    "RUSTACK_ORM",
]


class FakeExecutor(PackageExecutor):
    """Records package manager calls and mimics ``cargo new`` on disk."""

    bin_name = "cargo"

    def __init__(
        self,
        *,
        fail_initialize: bool = False,
        fail_on: str | None = None,
        nightly_installed: bool = True,
    ) -> None:
        super().__init__()
        self.calls: list[tuple[str, ...]] = []
        self.dependencies: list[tuple[str, str | None, list[str] | None]] = []
        self.fail_initialize = fail_initialize
        self.fail_on = fail_on
        self.nightly_installed = nightly_installed

    def initialize(self, path: Path, *, edition: str = "2021") -> None:
        self.calls.append(("initialize", str(path), edition))
        if self.fail_initialize:
            raise CargoExecutionError(["cargo", "new", path.name], 101, "error: could not create project")
        (path / "src").mkdir(parents=True)
        (path / "Cargo.toml").write_text(f'[package]\nname = "{path.name}"\nedition = "{edition}"\n')
        (path / "src" / "main.rs").write_text('fn main() {\n    println!("Hello, world!");\n}\n')

    def add_dependency(
        self,
        path: Path,
        name: str,
        version: str | None = None,
        features: Sequence[str] | None = None,
    ) -> None:
        self.calls.append(("add", name))
        if name == self.fail_on:
            raise CargoExecutionError(["cargo", "add", name], 101, f"error: the crate `{name}` could not be found")
        self.dependencies.append((name, version, list(features) if features is not None else None))

    def has_nightly(self) -> bool:
        self.calls.append(("has_nightly",))
        return self.nightly_installed

    def install_nightly(self) -> None:
        self.calls.append(("install_nightly",))
        self.nightly_installed = True


@pytest.fixture(autouse=True)
def clean_rustack_env(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Clear rustack environment variables before each test for isolation."""
    for var in _RUSTACK_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    yield


@pytest.fixture
def fake_executor() -> FakeExecutor:
    return FakeExecutor()


@pytest.fixture
def workdir(tmp_path: Path) -> Path:
    """Empty directory projects are generated into."""
    directory = tmp_path / "workspace"
    directory.mkdir()
    return directory
