"""Dependency wiring and response helpers for the API layer."""
