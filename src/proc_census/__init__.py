"""proc_census – process state counters for a small telemetry agent."""

__version__ = "0.1.0"
