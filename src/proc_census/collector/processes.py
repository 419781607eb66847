"""Process state collector – counts processes grouped by run state.

Two sources are supported.  On Linux the collector walks ``/proc/<pid>/stat``
files; everywhere else it runs ``ps axo state``.  Either can be forced through
:class:`~proc_census.config.ProcessesConfig`.
"""

from __future__ import annotations

import functools
import logging
import os
import time
from typing import Callable

from ..config import ProcessesConfig
from . import sources
from .base import BaseCollector, MetricSample
from .errors import MalformedRecordError, SourceUnavailableError

logger = logging.getLogger(__name__)

SOURCE_PS = "ps"
SOURCE_PROC = "proc"

BASE_FIELDS = ("blocked", "zombies", "stopped", "running", "sleeping", "total")

EXTRA_FIELDS: dict[str, tuple[str, ...]] = {
    "freebsd": ("idle", "wait"),
    "darwin": ("idle",),
    "openbsd": ("idle",),
    "linux": ("paging", "total_threads"),
}

PS_STATES = {
    "W": "wait",
    "U": "blocked",
    "D": "blocked",
    "L": "blocked",
    "Z": "zombies",
    "T": "stopped",
    "R": "running",
    "S": "sleeping",
    "I": "idle",
}

PROC_STATES = {
    "R": "running",
    "S": "sleeping",
    "D": "blocked",
    "Z": "zombies",
    "T": "stopped",
    "t": "stopped",
    "W": "paging",
}


def empty_fields(os_name: str) -> dict[str, int]:
    """Return a zeroed counter mapping with the keys reported on *os_name*."""
    keys = BASE_FIELDS + EXTRA_FIELDS.get(os_name, ())
    return dict.fromkeys(keys, 0)


def select_source(os_name: str, force_ps: bool = False, force_proc: bool = False) -> str:
    """Pick ``"ps"`` or ``"proc"`` for this host.

    ``force_ps`` is checked first, so it wins when both flags are set.
    """
    if force_ps:
        return SOURCE_PS
    if force_proc:
        return SOURCE_PROC
    return SOURCE_PROC if os_name == "linux" else SOURCE_PS


def _bump(fields: dict[str, int], key: str, code: str, origin: str) -> None:
    # freebsd is the only OS seeded with "wait" and linux has no "idle"
    if key not in fields:
        logger.warning(
            "processes: State [ %s ] (%s) is not reported on this OS, from %s", code, key, origin
        )
        return
    fields[key] += 1


class ProcessesCollector(BaseCollector):
    """Counts processes by state and emits them as one ``processes`` sample.

    *exec_ps* and *read_proc_file* default to the real host sources in
    :mod:`proc_census.collector.sources`; tests pass canned callables instead.
    """

    def __init__(
        self,
        config: ProcessesConfig | None = None,
        *,
        exec_ps: Callable[[], bytes] | None = None,
        read_proc_file: Callable[[str], bytes | None] | None = None,
        os_name: str | None = None,
    ) -> None:
        self._config = config or ProcessesConfig()
        self._exec_ps = exec_ps or functools.partial(sources.run_ps, self._config.ps_args)
        self._read_proc_file = read_proc_file or sources.read_proc_file
        self._os_name = os_name or sources.host_os()

    @property
    def name(self) -> str:
        return "processes"

    @property
    def source(self) -> str:
        return select_source(self._os_name, self._config.force_ps, self._config.force_proc)

    def gather(self) -> dict[str, int]:
        """Run one cycle and return the populated counter mapping.

        Any :class:`~proc_census.collector.errors.CollectionError` propagates
        and no partial result is returned.
        """
        fields = empty_fields(self._os_name)
        if self.source == SOURCE_PS:
            self._gather_from_ps(fields)
        else:
            self._gather_from_proc(fields)
        return fields

    def collect(self) -> list[MetricSample]:
        fields = self.gather()
        return [MetricSample(name=self.name, fields=fields, timestamp=time.time(), tags={})]

    def _gather_from_ps(self, fields: dict[str, int]) -> None:
        out = self._exec_ps()

        for i, status in enumerate(out.split()):
            if i == 0 and status == b"STAT":
                continue
            code = chr(status[0])
            key = PS_STATES.get(code)
            if key is None:
                logger.warning("processes: Unknown state [ %s ] from ps", code)
            else:
                _bump(fields, key, code, "ps")
            fields["total"] += 1

    def _gather_from_proc(self, fields: dict[str, int]) -> None:
        root = self._config.proc_root
        try:
            entries = list(os.scandir(root))
        except OSError as exc:
            raise SourceUnavailableError(f"Failed to list {root}: {exc}") from exc

        for entry in entries:
            if not entry.is_dir(follow_symlinks=False):
                continue

            stat_file = os.path.join(root, entry.name, "stat")
            data = self._read_proc_file(stat_file)
            if data is None:
                continue

            stats = data.split()
            if len(stats) < 3:
                raise MalformedRecordError(stat_file, len(stats))

            code = chr(stats[2][0])
            key = PROC_STATES.get(code)
            if key is None:
                logger.warning("processes: Unknown state [ %s ] in file %s", code, stat_file)
            else:
                _bump(fields, key, code, stat_file)
            fields["total"] += 1

            try:
                threads = int(stats[19])
            except (IndexError, ValueError) as exc:
                logger.warning("processes: Error parsing thread count in %s: %s", stat_file, exc)
                continue
            if "total_threads" in fields:
                fields["total_threads"] += threads
