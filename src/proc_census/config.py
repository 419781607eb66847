"""Configuration loading and validation for proc_census."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml


@dataclass
class OtelExporterConfig:
    """OpenTelemetry exporter settings."""

    endpoint: str = "http://localhost:4318"
    service_name: str = "proc-census"
    headers: dict[str, str] = field(default_factory=dict)
    export_interval_ms: int = 10000


@dataclass
class ProcessesConfig:
    """Process state collector settings.

    ``force_ps`` and ``force_proc`` override the per-OS source choice;
    ``force_ps`` wins when both are set.
    """

    force_ps: bool = False
    force_proc: bool = False
    proc_root: str = "/proc"
    ps_args: list[str] = field(default_factory=lambda: ["axo", "state"])


@dataclass
class CollectorConfig:
    """Collection loop settings."""

    enabled: bool = True
    interval_seconds: float = 10.0
    processes: bool = True


@dataclass
class LocalExporterConfig:
    """Local file exporter settings."""

    enabled: bool = True
    output_dir: str = "./census_data"
    format: str = "jsonl"


@dataclass
class ProcCensusConfig:
    """Top-level proc_census configuration."""

    mode: str = "local"
    otel: OtelExporterConfig = field(default_factory=OtelExporterConfig)
    collector: CollectorConfig = field(default_factory=CollectorConfig)
    processes: ProcessesConfig = field(default_factory=ProcessesConfig)
    local_exporter: LocalExporterConfig = field(default_factory=LocalExporterConfig)


_TRUTHY = {"1", "true", "yes", "on"}


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in _TRUTHY


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Apply environment variable overrides using PROC_CENSUS_ prefix."""
    env_map = {
        "PROC_CENSUS_MODE": ("mode",),
        "PROC_CENSUS_OTEL_ENDPOINT": ("otel", "endpoint"),
        "PROC_CENSUS_OTEL_SERVICE_NAME": ("otel", "service_name"),
        "PROC_CENSUS_COLLECTOR_INTERVAL": ("collector", "interval_seconds"),
        "PROC_CENSUS_LOCAL_OUTPUT_DIR": ("local_exporter", "output_dir"),
        "PROC_CENSUS_FORCE_PS": ("processes", "force_ps"),
        "PROC_CENSUS_FORCE_PROC": ("processes", "force_proc"),
        "PROC_CENSUS_PROC_ROOT": ("processes", "proc_root"),
    }
    for env_key, path in env_map.items():
        value = os.environ.get(env_key)
        if value is not None:
            obj = data
            for part in path[:-1]:
                obj = obj.setdefault(part, {})
            final_key = path[-1]
            # coerce non-string values
            if final_key == "interval_seconds":
                obj[final_key] = float(value)
            elif final_key in ("force_ps", "force_proc"):
                obj[final_key] = _parse_bool(value)
            else:
                obj[final_key] = value
    return data


def _section(cls: type, data: dict[str, Any]) -> Any:
    """Build dataclass *cls* from *data*, ignoring unknown keys."""
    return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})


def _dict_to_config(data: dict[str, Any]) -> ProcCensusConfig:
    """Convert a raw dictionary to a ProcCensusConfig dataclass."""
    return ProcCensusConfig(
        mode=data.get("mode", "local"),
        otel=_section(OtelExporterConfig, data.get("otel", {})),
        collector=_section(CollectorConfig, data.get("collector", {})),
        processes=_section(ProcessesConfig, data.get("processes", {})),
        local_exporter=_section(LocalExporterConfig, data.get("local_exporter", {})),
    )


def load_config(path: str | Path | None = None) -> ProcCensusConfig:
    """Load configuration from a YAML file with environment overrides.

    Looks for ``proc_census.yaml`` in the current directory if *path* is None.
    """
    data: dict[str, Any] = {}
    if path is None:
        path = Path("proc_census.yaml")
    else:
        path = Path(path)

    if path.exists():
        with open(path, encoding="utf-8") as fh:
            loaded = yaml.safe_load(fh)
            if isinstance(loaded, dict):
                data = loaded

    data = _apply_env_overrides(data)
    return _dict_to_config(data)
