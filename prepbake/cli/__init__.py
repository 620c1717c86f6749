"""Command-line interface for prepbake."""
