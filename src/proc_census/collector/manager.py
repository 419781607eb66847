"""Collector manager that runs probes on an interval."""

from __future__ import annotations

import logging
import threading
from typing import Callable

from ..config import CollectorConfig, ProcessesConfig
from .base import BaseCollector, MetricSample
from .processes import ProcessesCollector

logger = logging.getLogger(__name__)


class CollectorManager:
    """Manages the enabled collectors and runs them on an interval.

    Instantiate it with a :class:`CollectorConfig`, register one or more
    sinks via :meth:`add_sink`, then call :meth:`start` / :meth:`stop`.
    A collector that raises during a cycle contributes no samples to it.
    """

    def __init__(
        self,
        config: CollectorConfig,
        processes_config: ProcessesConfig | None = None,
        collectors: list[BaseCollector] | None = None,
    ) -> None:
        self._config = config
        self._collectors: list[BaseCollector] = list(collectors or [])
        self._sinks: list[Callable[[list[MetricSample]], None]] = []
        self._thread: threading.Thread | None = None
        self._stop_event = threading.Event()

        if collectors is None and config.processes:
            self._collectors.append(ProcessesCollector(processes_config))

    @property
    def collectors(self) -> list[BaseCollector]:
        return list(self._collectors)

    def add_sink(self, sink: Callable[[list[MetricSample]], None]) -> None:
        """Register a callback to receive collected samples."""
        self._sinks.append(sink)

    def collect_once(self) -> list[MetricSample]:
        """Run all collectors once and return aggregated samples."""
        all_samples: list[MetricSample] = []
        for collector in self._collectors:
            try:
                all_samples.extend(collector.collect())
            except Exception:
                logger.exception("Collector %s failed", collector.name)
        return all_samples

    def run_cycle(self) -> list[MetricSample]:
        """Collect once and hand the samples to every sink."""
        samples = self.collect_once()
        if not samples:
            return samples
        for sink in self._sinks:
            try:
                sink(samples)
            except Exception:
                logger.exception("Sink failed")
        return samples

    def _run(self) -> None:
        """Background thread loop."""
        while not self._stop_event.is_set():
            self.run_cycle()
            self._stop_event.wait(self._config.interval_seconds)

    def start(self) -> None:
        """Start collecting in the background."""
        if not self._config.enabled:
            return
        if self._thread is not None:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()
        logger.info("CollectorManager started (interval=%.1fs)", self._config.interval_seconds)

    def stop(self) -> None:
        """Stop background collection."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=5)
            self._thread = None
        logger.info("CollectorManager stopped")
