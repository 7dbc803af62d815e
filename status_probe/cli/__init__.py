"""Command-line interface for status-probe."""
