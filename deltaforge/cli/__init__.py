"""deltaforge CLI — Typer-based command-line interface.

Provides the ``deltaforge`` command with subcommands for reporting changed
groups, running the incremental build step, persisting fingerprints, and
inspecting or resetting the fingerprint store.

All output uses Rich for formatted terminal display.
"""
