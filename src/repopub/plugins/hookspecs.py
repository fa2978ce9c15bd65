"""Pluggy hook specifications for repopub.

One setup-time hook lets plugins contribute repository layouts; one
lifecycle hook fires after every successful install.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from repopub.domain.layout import LayoutStrategy

hookspec = pluggy.HookspecMarker("repopub")
hookimpl = pluggy.HookimplMarker("repopub")


class RepopubHookSpec:
    """Hook specifications for the repopub plugin system."""

    @hookspec
    def register_layouts(self) -> dict[str, LayoutStrategy] | None:
        """Return layout name -> LayoutStrategy mappings to add to the registry."""

    @hookspec
    def post_install(
        self,
        location: str,
        layout: str,
        installed: list[str],
    ) -> None:
        """Called after artifacts were installed into a repository."""
