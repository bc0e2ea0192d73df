"""Command-line interface for changegen."""
