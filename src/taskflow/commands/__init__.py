"""Command modules for the taskflow CLI."""
