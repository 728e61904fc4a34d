"""Command line interface for the air-quality monitor."""
