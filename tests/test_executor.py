"""Tests for rustack.executor module."""

import subprocess
from pathlib import Path
from unittest.mock import Mock, patch

import pytest
from pytest_mock import MockerFixture

from rustack.exceptions import CargoExecutableNotFoundError, CargoExecutionError
from rustack.executor import CargoExecutor, PackageExecutor, format_dependency_args


@patch("shutil.which")
def test_executor_resolve_executable_found(mock_which: Mock) -> None:
    mock_which.return_value = "/usr/bin/cargo"
    executor = CargoExecutor()
    assert executor._resolve_executable() == "/usr/bin/cargo"


@patch("shutil.which")
def test_executor_resolve_executable_not_found(mock_which: Mock) -> None:
    mock_which.return_value = None
    executor = CargoExecutor()
    with pytest.raises(CargoExecutableNotFoundError, match="'cargo' not found"):
        executor._resolve_executable()


def test_executor_resolve_executable_custom_path() -> None:
    executor = CargoExecutor(executable_path="/custom/cargo")
    assert executor._resolve_executable() == "/custom/cargo"


@pytest.mark.parametrize(
    ("name", "version", "features", "expected"),
    [
        ("serde", None, None, ["add", "serde"]),
        ("serde", "1", None, ["add", "serde@1"]),
        ("serde", "1", ["derive"], ["add", "serde@1", "--features", "derive"]),
        (
            "sqlx",
            "0.7",
            ["runtime-tokio-rustls", "postgres"],
            ["add", "sqlx@0.7", "--features", "runtime-tokio-rustls,postgres"],
        ),
        ("axum", None, [], ["add", "axum"]),
    ],
)
def test_format_dependency_args(name: str, version: "str | None", features: "list[str] | None", expected: list[str]) -> None:
    assert format_dependency_args(name, version, features) == expected


@patch("subprocess.run")
@patch("shutil.which")
def test_initialize_runs_cargo_new_in_parent(mock_which: Mock, mock_run: Mock, tmp_path: Path) -> None:
    mock_which.return_value = "/usr/bin/cargo"
    mock_run.return_value = Mock(returncode=0, stderr=b"")

    CargoExecutor().initialize(tmp_path / "billing", edition="2024")

    mock_run.assert_called_once()
    args, kwargs = mock_run.call_args
    assert args[0] == ["/usr/bin/cargo", "new", "--bin", "--edition", "2024", "billing"]
    assert kwargs["cwd"] == tmp_path
    assert kwargs["check"] is False


@patch("subprocess.run")
@patch("shutil.which")
def test_add_dependency_runs_in_project(mock_which: Mock, mock_run: Mock, tmp_path: Path) -> None:
    mock_which.return_value = "/usr/bin/cargo"
    mock_run.return_value = Mock(returncode=0, stderr=b"")

    CargoExecutor().add_dependency(tmp_path, "tokio", "1", ["full"])

    args, kwargs = mock_run.call_args
    assert args[0] == ["/usr/bin/cargo", "add", "tokio@1", "--features", "full"]
    assert kwargs["cwd"] == tmp_path


@patch("subprocess.run")
@patch("shutil.which")
def test_execute_failure_raises_with_stderr(mock_which: Mock, mock_run: Mock, tmp_path: Path) -> None:
    mock_which.return_value = "/usr/bin/cargo"
    mock_run.return_value = Mock(returncode=101, stderr=b"error: destination already exists")

    with pytest.raises(CargoExecutionError) as exc_info:
        CargoExecutor(quiet=True).initialize(tmp_path / "billing")

    assert exc_info.value.return_code == 101
    assert "destination already exists" in str(exc_info.value)


@patch("subprocess.run")
@patch("shutil.which")
def test_quiet_executor_discards_stdout(mock_which: Mock, mock_run: Mock, tmp_path: Path) -> None:
    mock_which.return_value = "/usr/bin/cargo"
    mock_run.return_value = Mock(returncode=0, stderr=b"")

    CargoExecutor(quiet=True).add_dependency(tmp_path, "serde")

    assert mock_run.call_args.kwargs["stdout"] == subprocess.DEVNULL
    assert mock_run.call_args.kwargs["stderr"] == subprocess.PIPE


@patch("subprocess.run")
@patch("shutil.which")
def test_executor_streams_cargo_output(mock_which: Mock, mock_run: Mock, tmp_path: Path) -> None:
    mock_which.return_value = "/usr/bin/cargo"
    mock_run.return_value = Mock(returncode=101, stderr=None)

    with pytest.raises(CargoExecutionError) as exc_info:
        CargoExecutor().add_dependency(tmp_path, "serde")

    assert mock_run.call_args.kwargs["stdout"] is None
    assert mock_run.call_args.kwargs["stderr"] is None
    assert "Stderr" not in str(exc_info.value)


def test_missing_executable_is_reported(tmp_path: Path) -> None:
    executor = CargoExecutor(executable_path=tmp_path / "missing-cargo")

    with pytest.raises(CargoExecutableNotFoundError, match="missing-cargo"):
        executor.add_dependency(tmp_path, "serde")


def test_missing_working_directory_is_reported(mocker: MockerFixture, tmp_path: Path) -> None:
    mocker.patch("subprocess.run", side_effect=FileNotFoundError(2, "No such file or directory"))
    executor = CargoExecutor(executable_path="/usr/bin/cargo")

    with pytest.raises(CargoExecutionError, match="does not exist"):
        executor.initialize(tmp_path / "nope" / "billing")


def test_os_error_is_wrapped(mocker: MockerFixture, tmp_path: Path) -> None:
    mocker.patch("subprocess.run", side_effect=PermissionError(13, "Permission denied"))
    executor = CargoExecutor(executable_path="/usr/bin/cargo")

    with pytest.raises(CargoExecutionError, match="Permission denied"):
        executor.add_dependency(tmp_path, "serde")


@patch("subprocess.run")
@patch("shutil.which")
def test_has_nightly(mock_which: Mock, mock_run: Mock) -> None:
    mock_which.return_value = "/usr/bin/rustup"
    mock_run.return_value = Mock(
        returncode=0, stdout=b"stable-x86_64-unknown-linux-gnu (default)\nnightly-x86_64-unknown-linux-gnu\n"
    )
    assert CargoExecutor().has_nightly() is True

    mock_run.return_value = Mock(returncode=0, stdout=b"stable-x86_64-unknown-linux-gnu (default)\n")
    assert CargoExecutor().has_nightly() is False


def test_has_nightly_without_rustup(mocker: MockerFixture) -> None:
    mocker.patch("shutil.which", return_value=None)
    mock_run = mocker.patch("subprocess.run")

    assert CargoExecutor().has_nightly() is False
    mock_run.assert_not_called()


@patch("shutil.which")
def test_install_nightly_requires_rustup(mock_which: Mock) -> None:
    mock_which.return_value = None
    with pytest.raises(CargoExecutableNotFoundError, match="rustup"):
        CargoExecutor().install_nightly()


@patch("subprocess.run")
@patch("shutil.which")
def test_install_nightly(mock_which: Mock, mock_run: Mock) -> None:
    mock_which.return_value = "/usr/bin/rustup"
    mock_run.return_value = Mock(returncode=0, stderr=b"")

    CargoExecutor().install_nightly()

    assert mock_run.call_args.args[0] == ["/usr/bin/rustup", "toolchain", "install", "nightly"]


def test_executor_must_implement_nightly_support() -> None:
    class _StableOnly(PackageExecutor):
        bin_name = "cargo"

        def initialize(self, path: Path, *, edition: str = "2021") -> None:
            pass

        def add_dependency(self, path: Path, name: str, version: "str | None" = None, features: object = None) -> None:
            pass

    with pytest.raises(TypeError, match="install_nightly"):
        _StableOnly()  # type: ignore[abstract]
