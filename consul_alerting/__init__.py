"""Multi-channel notification dispatch for Consul health alerts."""

__version__ = "0.1.0"
