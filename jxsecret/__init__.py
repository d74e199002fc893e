"""Helpers for secret store backends, helm secret defaults, template lookups and ExternalSecret replication."""

__version__ = "0.1.0"
__all__ = ["backends", "helmsecrets", "templater", "replicate"]