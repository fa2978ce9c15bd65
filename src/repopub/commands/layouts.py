"""Command: list registered repository layouts."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from repopub.commands._base import RepoCommand

if TYPE_CHECKING:
    from repopub.commands._context import AppContext


@click.command(
    cls=RepoCommand,
    examples="""\
  repopub layouts
  repopub --json layouts""",
)
@click.pass_obj
def layouts(app: AppContext) -> None:
    """List the repository layouts available for installs."""
    from repopub.services.install import InstallService

    # Loading plugins registers any layouts they contribute.
    svc = InstallService(app.settings, plugin_manager=app.plugins)
    app.emit(svc.list_layouts())
