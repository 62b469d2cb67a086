"""Command line interface for kakeibo."""
