"""Shared helpers for environment access and logging."""
