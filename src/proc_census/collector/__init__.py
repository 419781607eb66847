"""System probes that produce metric samples."""
