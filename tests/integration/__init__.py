"""Integration tests that run the CLI in a subprocess."""
