"""Tests for the filesystem capability and console notifier."""

from __future__ import annotations

import subprocess
from pathlib import Path

import pytest
from blockmark import files as files_module
from blockmark.capabilities import FetchError, NotificationLevel
from blockmark.files import ClipboardError, LocalFiles
from blockmark.notify import ClickNotifier


def test_fetch_reads_bytes_and_maps_missing_to_404(tmp_path: Path) -> None:
    asset = tmp_path / "a.png"
    asset.write_bytes(b"data")
    local = LocalFiles(tmp_path / "out")

    assert local.fetch(str(asset)) == b"data"
    assert local.fetch(f"file://{asset}") == b"data"
    with pytest.raises(FetchError) as excinfo:
        local.fetch(str(tmp_path / "missing.png"))
    assert excinfo.value.status == 404


def test_save_creates_destination_and_leaves_no_partial(tmp_path: Path) -> None:
    destination = tmp_path / "out"
    local = LocalFiles(destination)

    local.save(b"zip", "Page.zip")
    local.save(b"zip2", "Page.zip")

    assert (destination / "Page.zip").read_bytes() == b"zip2"
    assert sorted(p.name for p in destination.iterdir()) == ["Page.zip"]


def test_clipboard_uses_first_available_tool(tmp_path: Path, monkeypatch) -> None:
    calls: list[tuple[list[str], str]] = []

    monkeypatch.setattr(
        files_module.shutil, "which", lambda name: "/usr/bin/xclip" if name == "xclip" else None
    )

    def fake_run(command, input, capture_output, text, check):
        calls.append((command, input))
        return subprocess.CompletedProcess(command, 0, stdout="", stderr="")

    monkeypatch.setattr(files_module.subprocess, "run", fake_run)

    LocalFiles(tmp_path).write_clipboard("hello")

    assert calls == [(["xclip", "-selection", "clipboard"], "hello")]


def test_clipboard_without_tools_raises(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setattr(files_module.shutil, "which", lambda name: None)

    with pytest.raises(ClipboardError):
        LocalFiles(tmp_path).write_clipboard("hello")


def test_clipboard_tool_failure_raises(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setattr(files_module.shutil, "which", lambda name: "/usr/bin/pbcopy")
    monkeypatch.setattr(
        files_module.subprocess,
        "run",
        lambda command, **_: subprocess.CompletedProcess(command, 1, stdout="", stderr="denied"),
    )

    with pytest.raises(ClipboardError, match="denied"):
        LocalFiles(tmp_path).write_clipboard("hello")


def test_click_notifier_routes_problems_to_stderr(capsys) -> None:
    notifier = ClickNotifier()

    notifier.notify("done", NotificationLevel.SUCCESS)
    notifier.notify("careful", NotificationLevel.WARNING)
    notifier.notify("broken", "error")

    captured = capsys.readouterr()
    assert captured.out == "done\n"
    assert captured.err == "careful\nbroken\n"
