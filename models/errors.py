"""Exceptions raised by the monitoring engine."""

from __future__ import annotations


class ConfigurationError(ValueError):
    """The threshold table or rule set is inconsistent; fatal at startup."""


class InvalidReadingError(ValueError):
    """A reading is missing a parameter or carries a non-finite value."""
