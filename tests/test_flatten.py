from __future__ import annotations

import logging
import subprocess
from pathlib import Path

import pytest

from pdfsections import flatten
from pdfsections.errors import FlattenError
from pdfsections.flatten import GhostscriptFlattener, find_ghostscript, flatten_command


class FakeRun:
    """Stands in for subprocess.run and records the temp paths it saw."""

    def __init__(self, returncode=0, output=b"%PDF-flattened", stderr="", exc=None):
        self.returncode = returncode
        self.output = output
        self.stderr = stderr
        self.exc = exc
        self.commands = []

    def __call__(self, cmd, **kwargs):
        self.commands.append(cmd)
        if self.exc is not None:
            raise self.exc
        if self.returncode == 0:
            out = next(arg for arg in cmd if arg.startswith("-sOutputFile="))
            Path(out.split("=", 1)[1]).write_bytes(self.output)
        return subprocess.CompletedProcess(cmd, self.returncode, stdout="", stderr=self.stderr)

    @property
    def temp_dir(self) -> Path:
        return Path(self.commands[-1][-1]).parent


def test_flatten_returns_ghostscript_output_and_cleans_up(monkeypatch):
    fake = FakeRun()
    monkeypatch.setattr(flatten.subprocess, "run", fake)

    result = GhostscriptFlattener(executable="gs").flatten(b"%PDF-original")

    assert result == b"%PDF-flattened"
    cmd = fake.commands[0]
    assert cmd[0] == "gs"
    assert "-sDEVICE=pdfwrite" in cmd
    assert "-dPreserveAnnots=false" in cmd
    assert not fake.temp_dir.exists()


def test_input_is_written_for_ghostscript(monkeypatch):
    seen = {}

    def run(cmd, **kwargs):
        seen["input"] = Path(cmd[-1]).read_bytes()
        Path(cmd[-2].split("=", 1)[1]).write_bytes(b"out")
        return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")

    monkeypatch.setattr(flatten.subprocess, "run", run)
    GhostscriptFlattener(executable="gs").flatten(b"%PDF-source")
    assert seen["input"] == b"%PDF-source"


def test_nonzero_exit_raises_and_cleans_up(monkeypatch):
    fake = FakeRun(returncode=1, stderr="Error: /undefined in pdf")
    monkeypatch.setattr(flatten.subprocess, "run", fake)

    with pytest.raises(FlattenError, match="exit code 1"):
        GhostscriptFlattener(executable="gs").flatten(b"%PDF")
    assert not fake.temp_dir.exists()


@pytest.mark.parametrize(
    "exc",
    [
        subprocess.TimeoutExpired(cmd="gs", timeout=1),
        FileNotFoundError("gs"),
    ],
)
def test_process_errors_become_flatten_errors(monkeypatch, exc):
    fake = FakeRun(exc=exc)
    monkeypatch.setattr(flatten.subprocess, "run", fake)

    with pytest.raises(FlattenError):
        GhostscriptFlattener(executable="gs", timeout=1).flatten(b"%PDF")
    assert not fake.temp_dir.exists()


def test_missing_ghostscript(monkeypatch):
    monkeypatch.setattr(flatten, "find_ghostscript", lambda: None)
    flattener = GhostscriptFlattener()

    assert flattener.is_available() is False
    with pytest.raises(FlattenError, match="not found"):
        flattener.flatten(b"%PDF")


def test_discovery_is_cached(monkeypatch):
    calls = []

    def find():
        calls.append(1)
        return "/usr/bin/gs"

    monkeypatch.setattr(flatten, "find_ghostscript", find)
    flattener = GhostscriptFlattener()

    assert flattener.is_available()
    assert flattener.is_available()
    assert flattener.executable == "/usr/bin/gs"
    assert len(calls) == 1


def test_find_ghostscript_prefers_path(monkeypatch):
    monkeypatch.setattr(flatten.shutil, "which", lambda name: f"/opt/bin/{name}")
    monkeypatch.setattr(flatten, "_responds", lambda exe: True)
    assert find_ghostscript() == f"/opt/bin/{flatten.GS_COMMANDS[0]}"


def test_find_ghostscript_falls_back_to_known_locations(monkeypatch, tmp_path):
    gs = tmp_path / "gs"
    gs.write_text("")
    monkeypatch.setattr(flatten.shutil, "which", lambda name: None)
    monkeypatch.setattr(flatten, "GS_PATHS", [str(tmp_path / "missing"), str(gs)])
    assert find_ghostscript() == str(gs)


def test_find_ghostscript_none(monkeypatch):
    monkeypatch.setattr(flatten.shutil, "which", lambda name: None)
    monkeypatch.setattr(flatten, "GS_PATHS", [])
    assert find_ghostscript() is None


def test_flatten_command_shape():
    cmd = flatten_command("gs", Path("in.pdf"), Path("out.pdf"))
    assert cmd[0] == "gs"
    assert cmd[-1] == "in.pdf"
    assert "-sOutputFile=out.pdf" in cmd
    assert "-dSAFER" in cmd and "-dBATCH" in cmd and "-dNOPAUSE" in cmd


def test_cleanup_failure_is_logged_not_raised(tmp_path, caplog):
    busy = tmp_path / "busy"
    busy.mkdir()
    (busy / "leftover.pdf").write_bytes(b"x")

    with caplog.at_level(logging.WARNING, logger="pdfsections.flatten"):
        flatten._remove_quietly(busy)

    assert busy.exists()
    assert "Could not delete temporary file" in caplog.text
