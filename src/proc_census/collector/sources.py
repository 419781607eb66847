"""Host data sources for the processes collector.

The collector never spawns processes or opens files itself; it receives
these callables (or test doubles with the same signatures) at construction.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import sys
from typing import Sequence

import psutil

from .errors import SourceUnavailableError

logger = logging.getLogger(__name__)

PS_ARGS: tuple[str, ...] = ("axo", "state")


def host_os() -> str:
    """Return the host OS name in the form the counter table uses."""
    if psutil.LINUX:
        return "linux"
    if psutil.MACOS:
        return "darwin"
    if psutil.FREEBSD:
        return "freebsd"
    if psutil.OPENBSD:
        return "openbsd"
    return sys.platform


def run_ps(args: Sequence[str] = PS_ARGS) -> bytes:
    """Run ``ps`` with *args* and return its raw stdout.

    Raises :class:`SourceUnavailableError` when ``ps`` is not on ``PATH``,
    cannot be started, or exits non-zero.
    """
    binary = shutil.which("ps")
    if binary is None:
        raise SourceUnavailableError("ps executable not found in PATH")

    cmd = [binary, *args]
    logger.debug("Running %s", " ".join(cmd))
    try:
        result = subprocess.run(cmd, capture_output=True, check=True)
    except (OSError, subprocess.CalledProcessError) as exc:
        raise SourceUnavailableError(f"Failed to run {' '.join(cmd)}: {exc}") from exc
    return result.stdout


def read_proc_file(path: str) -> bytes | None:
    """Read a per-process status file.

    Returns ``None`` when the file is gone, which happens whenever a process
    exits between the directory listing and the read.
    """
    try:
        with open(path, "rb") as fh:
            return fh.read()
    except (FileNotFoundError, ProcessLookupError):
        return None
    except OSError as exc:
        raise SourceUnavailableError(f"Failed to read {path}: {exc}") from exc
