from __future__ import annotations

import sys
from io import StringIO
from pathlib import Path

import pytest
from rich.console import Console

from sharedkit.core.errors import RepositoryResolutionFailed
from sharedkit.io.adapters.console import ConsoleIO
from sharedkit.io.adapters.scripted import ScriptedIO, StaticRepositoryResolver
from sharedkit.io.adapters.shell import ShellCommandRunner
from sharedkit.reference import parse_reference


def test_scripted_io_accepts_indexes_and_labels():
    io = ScriptedIO(choices=[1, "b", "missing", None, 9])
    options = ["a", "b"]
    assert io.choose("pick", options) == 1
    assert io.choose("pick", options) == 1
    assert io.choose("pick", options) is None
    assert io.choose("pick", options) is None
    assert io.choose("pick", options) is None
    assert io.choose("pick", options) is None


def test_scripted_io_answers_run_dry():
    io = ScriptedIO(answers=["x"])
    assert io.prompt_string("first") == "x"
    assert io.prompt_string("second", default="d") is None
    assert io.messages == ["first", "second"]


def test_static_resolver(tmp_path: Path):
    resolver = StaticRepositoryResolver({"o/n": tmp_path})
    assert resolver.resolve(parse_reference("o/n#dev")) == tmp_path
    with pytest.raises(RepositoryResolutionFailed):
        resolver.resolve(parse_reference("o/other"))


@pytest.mark.skipif(sys.platform.startswith("win"), reason="POSIX shell")
def test_shell_runner_reports_exit_status_and_cwd(tmp_path: Path):
    runner = ShellCommandRunner()
    assert runner.run("pwd > where.txt", tmp_path) == 0
    assert (tmp_path / "where.txt").read_text().strip() == str(tmp_path.resolve())
    assert runner.run("exit 3", tmp_path) == 3


def test_shell_runner_missing_directory(tmp_path: Path):
    assert ShellCommandRunner().run("true", tmp_path / "absent") != 0


def _console_with_input(monkeypatch: pytest.MonkeyPatch, *answers: str) -> ConsoleIO:
    feed = iter(answers)
    console = Console(file=StringIO(), force_terminal=False)
    monkeypatch.setattr(console, "input", lambda *args, **kwargs: next(feed))
    return ConsoleIO(console)


def test_console_choose(monkeypatch: pytest.MonkeyPatch):
    io = _console_with_input(monkeypatch, "2")
    assert io.choose("Select", ["web", "cli"]) == 1


def test_console_choose_cancel(monkeypatch: pytest.MonkeyPatch):
    io = _console_with_input(monkeypatch, "q")
    assert io.choose("Select", ["web"]) is None


def test_console_prompt_uses_default_on_blank(monkeypatch: pytest.MonkeyPatch):
    io = _console_with_input(monkeypatch, "")
    assert io.prompt_string("Name", default="my-app") == "my-app"


def test_console_prompt_blank_without_default(monkeypatch: pytest.MonkeyPatch):
    io = _console_with_input(monkeypatch, "   ")
    assert io.prompt_string("Name") is None


def test_console_prompt_eof(monkeypatch: pytest.MonkeyPatch):
    io = ConsoleIO(Console(file=StringIO(), force_terminal=False))

    def raise_eof(*args, **kwargs):
        raise EOFError

    monkeypatch.setattr(io.console, "input", raise_eof)
    assert io.prompt_string("Name") is None
