"""Utilities: logging setup and the lifecycle event log."""
