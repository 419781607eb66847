"""Base interface for system probes."""

from __future__ import annotations

import abc
from dataclasses import dataclass, field
from typing import Any


@dataclass
class MetricSample:
    """A named group of integer fields captured at one instant."""

    name: str
    fields: dict[str, int]
    timestamp: float
    tags: dict[str, str] = field(default_factory=dict)


class BaseCollector(abc.ABC):
    """Abstract base class for system probes."""

    @property
    @abc.abstractmethod
    def name(self) -> str:
        """Collector name used in configuration and output."""

    @abc.abstractmethod
    def collect(self) -> list[MetricSample]:
        """Run one collection cycle. Returns a list of samples."""

    def to_dict(self, samples: list[MetricSample]) -> list[dict[str, Any]]:
        """Serialize samples to plain dictionaries."""
        return [
            {
                "name": s.name,
                "fields": dict(s.fields),
                "timestamp": s.timestamp,
                "tags": s.tags,
            }
            for s in samples
        ]
