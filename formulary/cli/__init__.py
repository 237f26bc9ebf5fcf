"""Formulary CLI — Typer-based command-line interface.

Provides the ``formulary`` command with subcommands for installing,
inspecting, verifying and removing formulas.

All output uses Rich for formatted terminal display.
"""
