"""Command line interface for Archai."""
