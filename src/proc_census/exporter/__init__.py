"""Sinks that receive collected metric samples."""
