"""Command: install a descriptor and its artifacts into a local repository."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from repopub.commands._base import RepoCommand
from repopub.domain.coordinates import AttachedArtifact

if TYPE_CHECKING:
    from repopub.commands._context import AppContext


def parse_attachment(value: str) -> AttachedArtifact:
    """Parse ``PATH`` or ``PATH:CLASSIFIER`` into an attached artifact."""
    path, sep, classifier = value.rpartition(":")
    if not sep or not path or "/" in classifier or "\\" in classifier:
        path, classifier = value, ""
    try:
        return AttachedArtifact.from_path(Path(path), classifier or None)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--attach") from exc


@click.command(
    cls=RepoCommand,
    examples="""\
  repopub install build/pom.xml --attach build/libs/lib-1.0.jar
  repopub install pom.xml --attach lib.jar --attach lib-sources.jar:sources
  repopub install pom.xml --repo /var/repo --layout legacy
  repopub --json install pom.xml --repo file:///home/me/.m2/repository""",
)
@click.argument("descriptor", type=click.Path(path_type=Path, dir_okay=False))
@click.option(
    "--repo",
    "location",
    default=None,
    help="Repository location (path or file: URI). Defaults to [repository] location.",
)
@click.option("--layout", default=None, help="Repository layout name (see `repopub layouts`).")
@click.option(
    "--attach",
    "attachments",
    multiple=True,
    metavar="PATH[:CLASSIFIER]",
    help="Binary artifact to install alongside the descriptor. Repeatable.",
)
@click.pass_obj
def install(
    app: AppContext,
    descriptor: Path,
    location: str | None,
    layout: str | None,
    attachments: tuple[str, ...],
) -> None:
    """Install DESCRIPTOR and attached artifacts into a local repository."""
    from repopub.services.install import InstallService

    artifacts = [parse_attachment(value) for value in attachments]
    svc = InstallService(app.settings, plugin_manager=app.plugins)
    app.emit(svc.install(descriptor, location=location, layout=layout, artifacts=artifacts))
