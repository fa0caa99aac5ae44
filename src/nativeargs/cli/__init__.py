"""Command-line interface for nativeargs."""
