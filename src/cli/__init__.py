"""Command line interface for NeurOn."""
