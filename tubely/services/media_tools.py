# tubely/services/media_tools.py
from __future__ import annotations

"""
Tubely — External media tool runner
===================================

Runs `ffprobe` / `ffmpeg` as asyncio subprocesses.

- Bounded duration: the process is killed once `timeout` elapses and a
  `ProcessingException` is raised.
- Cancellation: if the awaiting task is cancelled the process is killed
  before the cancellation propagates, so no orphaned tool keeps running.
- Diagnostics: stderr is returned to callers, who surface it through
  `scrub_diagnostic` so staging paths and names never leak to clients.
"""

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Sequence
import logging

from tubely.core.config import settings
from tubely.core.exceptions import ProcessingException

logger = logging.getLogger(__name__)

MAX_DIAGNOSTIC_CHARS = 2000


@dataclass(frozen=True)
class MediaToolResult:
    returncode: int
    stdout: bytes
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


async def _terminate(process: asyncio.subprocess.Process) -> None:
    if process.returncode is None:
        process.kill()
        await process.wait()


async def run_media_tool(args: Sequence[str], *, timeout: Optional[float] = None) -> MediaToolResult:
    """Run a media tool to completion and capture its output.

    Raises
    ------
    ProcessingException
        If the binary cannot be started or the run exceeds `timeout`.
    """
    timeout = settings.MEDIA_TOOL_TIMEOUT_SECONDS if timeout is None else timeout
    tool = Path(args[0]).name
    logger.debug("Running %s", tool)

    try:
        process = await asyncio.create_subprocess_exec(
            *args,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError:
        logger.error("Media tool %s is not installed", tool)
        raise ProcessingException(f"{tool} is not available")

    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        await _terminate(process)
        logger.warning("%s timed out after %ss", tool, timeout)
        raise ProcessingException(f"{tool} timed out", details={"timeout_seconds": timeout})
    except asyncio.CancelledError:
        await _terminate(process)
        raise

    return MediaToolResult(
        returncode=process.returncode if process.returncode is not None else -1,
        stdout=stdout,
        stderr=stderr.decode("utf-8", errors="replace"),
    )


def scrub_diagnostic(text: str, paths: Iterable[Path]) -> str:
    """Replace staged file names with neutral ones, drop directories, keep the tail.

    The first path reads as `input<ext>` and any later one as `output<ext>`.
    """
    cleaned = text or ""
    for index, path in enumerate(paths):
        alias = ("input" if index == 0 else "output") + path.suffix
        for needle in (str(path.resolve()), str(path), path.name):
            cleaned = cleaned.replace(needle, alias)
        cleaned = cleaned.replace(str(path.parent) + "/", "")
        cleaned = cleaned.replace(str(path.parent.resolve()) + "/", "")
    cleaned = cleaned.strip()
    return cleaned[-MAX_DIAGNOSTIC_CHARS:]


__all__ = ["MediaToolResult", "run_media_tool", "scrub_diagnostic"]
