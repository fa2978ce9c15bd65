"""Operation-specific Rich renderers for ServiceResult.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from repopub.output.console import create_console, get_output

if TYPE_CHECKING:
    from rich.console import Console

    from repopub.services.result import ServiceResult


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich."""
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"
    return f"OK: {result.op}"


def _status_line(console: Console, result: ServiceResult) -> None:
    console.print(Text("OK", style="repopub.ok"), Text(f"  {result.op}", style="repopub.op"))


def _field(console: Console, key: str, value: Any, *, style: str = "") -> None:
    console.print(Text(f"  {key}: ", style="repopub.key"), Text(str(value), style=style), sep="")


def _render_meta(console: Console, result: ServiceResult) -> None:
    if result.meta:
        console.print(Text("  meta:", style="dim"))
        console.print(f"    {json.dumps(result.meta, separators=(',', ':'))}", markup=False)


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    console.print(
        Text("ERROR", style="repopub.error"),
        Text(f"  {result.op}", style="repopub.op"),
        Text(" — "),
        Text(msg),
    )
    if err is not None:
        _field(console, "code", err.code)
    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}", markup=False)


def _render_install(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    data = result.data
    _field(console, "repository", data.get("repository", ""))
    _field(console, "location", data.get("location", ""), style="repopub.path")
    _field(console, "layout", data.get("layout", ""), style="repopub.layout")
    installed = data.get("installed", [])
    _field(console, "installed", len(installed))
    for path in installed:
        console.print(Text(f"    {path}", style="repopub.path"))
    if verbose:
        diagnostics = data.get("diagnostics")
        if diagnostics:
            console.print(Text("  diagnostics:", style="dim"))
            for line in diagnostics.splitlines():
                console.print(f"    {line}", markup=False)
        _render_meta(console, result)


def _render_layouts(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    table = Table(title="Repository layouts", show_header=True, header_style="bold")
    table.add_column("Name", style="repopub.layout")
    table.add_column("Built-in")
    table.add_column("Class", style="dim")
    for item in result.data.get("items", []):
        table.add_row(item["name"], "yes" if item["builtin"] else "no", item["class"])
    console.print(table)


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, json.dumps(value, separators=(",", ":")))
        else:
            _field(console, key, value)
    if verbose:
        _render_meta(console, result)


_OP_RENDERERS: dict[str, Callable[..., None]] = {
    "install": _render_install,
    "layouts": _render_layouts,
}
