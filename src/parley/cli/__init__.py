"""Command-line interface for parley."""
