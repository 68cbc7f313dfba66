"""Command handlers for pipeline CLIs."""
