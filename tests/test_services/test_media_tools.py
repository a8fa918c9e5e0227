# tests/test_services/test_media_tools.py
from __future__ import annotations

import asyncio
import os
import sys
from pathlib import Path

import pytest

from tubely.core.exceptions import ProcessingException
from tubely.services.media_tools import run_media_tool, scrub_diagnostic

@pytest.mark.anyio
async def test_captures_stdout_stderr_and_exit_code():
    result = await run_media_tool(
        [sys.executable, "-c", "import sys; print('out'); print('err', file=sys.stderr); sys.exit(3)"],
        timeout=30,
    )
    assert not result.ok
    assert result.returncode == 3
    assert result.stdout.strip() == b"out"
    assert result.stderr.strip() == "err"

SLEEPER = "import os, sys, time; open(sys.argv[1], 'w').write(str(os.getpid())); time.sleep(30)"

async def _wait_for_pid(pid_file: Path) -> int:
    for _ in range(200):
        if pid_file.exists() and pid_file.read_text():
            return int(pid_file.read_text())
        await asyncio.sleep(0.05)
    raise AssertionError("child never started")

def _assert_gone(pid: int) -> None:
    with pytest.raises(ProcessLookupError):
        os.kill(pid, 0)

@pytest.mark.anyio
async def test_timeout_kills_the_process(tmp_path: Path):
    pid_file = tmp_path / "child.pid"
    with pytest.raises(ProcessingException) as exc:
        await run_media_tool([sys.executable, "-c", SLEEPER, str(pid_file)], timeout=2)
    assert "timed out" in exc.value.detail
    assert exc.value.details == {"timeout_seconds": 2}
    _assert_gone(int(pid_file.read_text()))

@pytest.mark.anyio
async def test_cancellation_kills_the_process(tmp_path: Path):
    pid_file = tmp_path / "child.pid"
    task = asyncio.ensure_future(run_media_tool([sys.executable, "-c", SLEEPER, str(pid_file)], timeout=60))
    pid = await _wait_for_pid(pid_file)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    _assert_gone(pid)


@pytest.mark.anyio
async def test_missing_binary_is_processing_error(tmp_path: Path):
    with pytest.raises(ProcessingException) as exc:
        await run_media_tool([str(tmp_path / "no-such-ffprobe"), "-version"])
    assert exc.value.detail == "no-such-ffprobe is not available"


def test_scrub_replaces_staged_names_and_keeps_tail(tmp_path: Path):
    staged = tmp_path / "3f1c9e2a-7b4d-4e8f-9a0b-1c2d3e4f5a6b-0a1b2c3d.mp4"
    text = f"  {staged}: error one\n{staged}.processing: error two  "
    assert scrub_diagnostic(text, [staged]) == "input.mp4: error one\ninput.mp4.processing: error two"
    assert len(scrub_diagnostic("y" * 9000, [staged])) == 2000


def test_scrub_names_later_paths_as_output(tmp_path: Path):
    src, dst = tmp_path / "a1-token.mp4", tmp_path / "b2-token.mov"
    text = f"{dst.name}: could not write header for {src}"
    assert scrub_diagnostic(text, [src, dst]) == "output.mov: could not write header for input.mp4"
