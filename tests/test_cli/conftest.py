from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest
from click.testing import CliRunner

from tests.conftest import FakeExecutor

PromptAnswers = Callable[..., list[str]]


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def cli_executor(monkeypatch: pytest.MonkeyPatch) -> FakeExecutor:
    """Route every CLI invocation to a recording executor instead of cargo."""
    executor = FakeExecutor()
    monkeypatch.setattr("rustack.cli._build_executor", lambda runtime: executor)
    return executor


@pytest.fixture
def prompt_answers(monkeypatch: pytest.MonkeyPatch) -> PromptAnswers:
    """Answer ``Prompt.ask`` calls in order and record the prompts that were shown."""

    def _install(*answers: str) -> list[str]:
        remaining = list(answers)
        asked: list[str] = []

        def _ask(prompt: str, *args: object, **kwargs: object) -> str:
            asked.append(prompt)
            return remaining.pop(0)

        monkeypatch.setattr("rustack.cli.Prompt.ask", _ask)
        return asked

    return _install


def flat(output: str) -> str:
    """Collapse console line wrapping so assertions do not depend on terminal width."""
    return " ".join(output.split())


def project_files(directory: Path) -> set[str]:
    return {path.relative_to(directory).as_posix() for path in directory.rglob("*") if path.is_file()}
