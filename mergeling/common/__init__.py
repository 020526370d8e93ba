"""Shared helpers used across mergeling packages."""
