"""Command-line interface for keyline."""
