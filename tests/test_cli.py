"""Tests for the proc-census command line."""

import json

import pytest

from proc_census import __version__
from proc_census.cli import main
from proc_census.collector import sources
from proc_census.collector.errors import SourceUnavailableError


@pytest.fixture
def darwin_host(monkeypatch):
    monkeypatch.setattr(sources, "host_os", lambda: "darwin")


def test_version(capsys):
    main(["version"])
    assert __version__ in capsys.readouterr().out


def test_no_command_prints_help():
    with pytest.raises(SystemExit) as excinfo:
        main([])
    assert excinfo.value.code == 1


def test_once_prints_json(monkeypatch, capsys, darwin_host):
    monkeypatch.setattr(sources, "run_ps", lambda args: b"STAT\nR\nS\nZ\n")
    main(["--config", "/tmp/nonexistent_proc_census.yaml", "once"])
    payload = json.loads(capsys.readouterr().out)
    assert payload["name"] == "processes"
    assert payload["source"] == "ps"
    assert payload["fields"]["running"] == 1
    assert payload["fields"]["zombies"] == 1
    assert payload["fields"]["total"] == 3


def test_once_table(monkeypatch, capsys, darwin_host):
    monkeypatch.setattr(sources, "run_ps", lambda args: b"STAT\nR\n")
    main(["--config", "/tmp/nonexistent_proc_census.yaml", "once", "--table"])
    out = capsys.readouterr().out
    assert "running" in out
    assert "total" in out


def test_once_failure_exits_nonzero(monkeypatch, capsys, darwin_host):
    def _missing(args):
        raise SourceUnavailableError("ps executable not found in PATH")

    monkeypatch.setattr(sources, "run_ps", _missing)
    with pytest.raises(SystemExit) as excinfo:
        main(["--config", "/tmp/nonexistent_proc_census.yaml", "once", "--force-ps"])
    assert excinfo.value.code == 1
    assert "ps executable not found" in capsys.readouterr().err
