"""Subcommand modules for repopub.

Provides register_commands() which uses deferred imports to keep
``repopub --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all standalone commands on the root CLI group."""
    from repopub.commands.install import install
    from repopub.commands.layouts import layouts

    cli.add_command(install)
    cli.add_command(layouts)
