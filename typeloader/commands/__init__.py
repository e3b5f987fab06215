"""CLI commands for typeloader."""
