"""Command-line interface for csvdesk."""
