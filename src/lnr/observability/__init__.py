"""Logging and diagnostics."""
