"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO).  The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json as _json
from typing import TYPE_CHECKING, Any

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from standctl.output.console import create_console, get_output, style_for_status

if TYPE_CHECKING:
    from rich.console import Console

    from standctl.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
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

    items = result.data.get("items") or result.data.get("links")
    if items and isinstance(items, list):
        return "\n".join(_extract_id(item) for item in items if _extract_id(item))

    if result.data.get("id"):
        return str(result.data["id"])
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _extract_id(item: Any) -> str:
    """Extract an ID from a dict item (stands, roster entries, links)."""
    if isinstance(item, dict):
        for key in ("id", "standNumber"):
            val = item.get(key)
            if val:
                return str(val)
    return ""


def _status_line(console: Console, result: ServiceResult) -> None:
    """Print the OK/ERROR status line."""
    label = Text("OK", style="stand.ok")
    op = Text(f"  {result.op}", style="stand.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="stand.key")
    if key == "id" or key.endswith("_id"):
        v = Text(str(value), style="stand.id")
    elif key == "name":
        v = Text(str(value), style="stand.name")
    elif key == "status":
        v = Text(str(value), style=style_for_status(str(value)))
    else:
        v = Text(str(value))
    console.print(k, v, end="")
    console.print()


def _money(value: Any) -> str:
    if isinstance(value, (int, float)):
        return f"{value:,.2f}"
    return "" if value is None else str(value)


def _size(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return "" if value is None else str(value)


def _full_name(item: dict[str, Any]) -> str:
    name = " ".join(p for p in (item.get("firstName"), item.get("lastName")) if p)
    return name or str(item.get("email") or item.get("id") or "Unknown buyer")


def _render_warnings(console: Console, result: ServiceResult) -> None:
    for warning in result.warnings:
        console.print(Text(f"  warning: {warning}", style="stand.warning"))


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print meta block including telemetry span tree (verbose only)."""
    if not result.meta:
        return

    console.print()
    console.print(Text("  meta:", style="dim"))

    for k, v in result.meta.items():
        if k == "telemetry":
            _render_telemetry_tree(console, v, indent=4)
        else:
            console.print(f"    {k}: {v}")


def _render_telemetry_tree(
    console: Console,
    span_data: dict[str, Any],
    indent: int = 4,
) -> None:
    """Render a hierarchical span tree with color-coded timing."""
    prefix = " " * indent
    name = span_data.get("name", "?")
    duration = span_data.get("duration_ms", 0.0)

    if duration > 1000:
        style = "bold red"
    elif duration > 100:
        style = "yellow"
    else:
        style = "dim"

    line = f"{prefix}[{style}]{duration:>8.2f}ms[/{style}]  {name}"
    annotations = span_data.get("annotations") or {}
    if annotations:
        line += f"  ({', '.join(f'{ak}={av}' for ak, av in annotations.items())})"

    console.print(line)

    for child in span_data.get("children", []):
        _render_telemetry_tree(console, child, indent=indent + 4)


def _stand_table(items: list[dict[str, Any]], *, verbose: bool = False) -> Table:
    """Build a Rich Table for a list of stands or stand records."""
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Number", style="stand.id", no_wrap=True)
    table.add_column("Name", style="stand.name")
    table.add_column("Type")
    table.add_column("Size", justify="right")
    table.add_column("Price", style="stand.money", justify="right")
    table.add_column("Location")
    table.add_column("Status")
    if verbose:
        table.add_column("ID", style="dim")

    for item in items:
        status = str(item.get("status") or "")
        row: list[str | Text] = [
            str(item.get("standNumber", "")),
            str(item.get("name", "")),
            str(item.get("type") or ""),
            _size(item.get("size")),
            _money(item.get("price")),
            str(item.get("location") or ""),
            Text(status, style=style_for_status(status)),
        ]
        if verbose:
            row.append(str(item.get("id", "")))
        table.add_row(*row)
    return table


def _link_table(links: list[dict[str, Any]]) -> Table:
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Link", style="stand.id", no_wrap=True)
    table.add_column("Buyer")
    table.add_column("Status")
    table.add_column("Released")
    for link in links:
        released = link.get("releasedAt") or ""
        style = "stand.released" if released else ""
        table.add_row(
            str(link.get("id", "")),
            Text(str(link.get("buyerName") or link.get("buyerUserId") or "?"), style=style),
            str(link.get("status") or ""),
            str(released),
        )
    return table


def _buyer_table(buyers: list[dict[str, Any]], *, with_stands: bool = False) -> Table:
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("ID", style="stand.id", no_wrap=True)
    table.add_column("Name", style="stand.name")
    table.add_column("Email")
    table.add_column("Phone")
    if with_stands:
        table.add_column("Stands", justify="right")
    for buyer in buyers:
        row = [
            str(buyer.get("id") or ""),
            _full_name(buyer),
            str(buyer.get("email") or ""),
            str(buyer.get("phoneNumber") or ""),
        ]
        if with_stands:
            row.append(str(buyer.get("standCount", len(buyer.get("standIds", [])))))
        table.add_row(*row)
    return table


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="stand.error")
    op = Text(f"  {result.op}", style="stand.op")
    sep = Text(" — ")
    console.print(label, op, sep, msg)

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")


# ── Stand renderers ───────────────────────────────────────────────────


def _render_mutation(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render create_stand/create_buyer results."""
    _status_line(console, result)
    for key in ("id", "name", "stand_number", "email", "status"):
        if result.data.get(key) is not None:
            _field(console, key, result.data[key])
    if result.data.get("message"):
        console.print(f"  {result.data['message']}")
    if verbose:
        _render_meta(console, result)


def _render_stand_table(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render list_stands results as a table."""
    items = result.data.get("items", [])
    console.print(_stand_table(items, verbose=verbose))
    count = result.data.get("count", len(items))
    console.print(f"\n{count} stands, {result.data.get('available', 0)} available")
    if verbose:
        _render_meta(console, result)


def _render_single_stand(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render get_stand as a panel."""
    d = result.data
    lines: list[str] = []
    for label, key in (
        ("type", "type"),
        ("size", "size"),
        ("price", "price"),
        ("location", "location"),
        ("status", "status"),
        ("created", "createdAt"),
        ("updated", "updatedAt"),
    ):
        val = d.get(key)
        if val is None:
            continue
        if key == "price":
            val = _money(val)
        elif key == "size":
            val = _size(val)
        lines.append(f"{label}: {val}")
    content = "\n".join(lines)
    if d.get("description"):
        content += f"\n\n{str(d['description']).strip()}"

    title = f"{d.get('standNumber', '?')} — {d.get('name') or 'Unnamed stand'}"
    style = style_for_status(d.get("status"))
    console.print(Panel(content, title=title, border_style=style or "dim", expand=False))


def _render_available(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    _field(console, "available", result.data.get("available", 0))
    _field(console, "total", result.data.get("total", 0))


def _render_stand_state(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render stand_state, sell_stand, release_link and link_buyer results."""
    d = result.data
    _status_line(console, result)
    _field(console, "stand_id", d.get("stand_id"))
    if d.get("status") is not None:
        _field(console, "status", d["status"])
    for key in ("buyer_user_id", "link_id", "reason", "links_source"):
        if d.get(key):
            _field(console, key, d[key])
    if result.op == "link_buyer" and d.get("id"):
        _field(console, "id", d["id"])

    buyers = d.get("buyers", [])
    links = d.get("links", [])
    console.print()
    console.print(Text(f"Buyers ({len(buyers)})", style="bold"))
    if buyers:
        console.print(_buyer_table(buyers))
    console.print(Text(f"Buyer links ({len(links)})", style="bold"))
    if links:
        console.print(_link_table(links))
    _render_warnings(console, result)
    if verbose:
        _render_meta(console, result)


def _render_add_buyer(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    _status_line(console, result)
    for key in ("id", "stand_id", "name"):
        if d.get(key):
            _field(console, key, d[key])
    buyers = d.get("buyers", [])
    if buyers:
        console.print()
        console.print(_buyer_table(buyers))


# ── Roster / import renderers ─────────────────────────────────────────


def _render_roster(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render the merged buyer roster."""
    items = result.data.get("items", [])
    if items:
        console.print(_buyer_table(items, with_stands=True))
    stand_count = result.data.get("stand_count", 0)
    console.print(f"\n{result.data.get('count', len(items))} buyers across {stand_count} stands")
    degraded = result.data.get("degraded", 0)
    if degraded:
        console.print(Text(f"  {degraded} source(s) could not be loaded", style="stand.warning"))
    if verbose:
        _render_warnings(console, result)
        _render_meta(console, result)


def _render_bulk_import(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render bulk_import preview or upload results."""
    d = result.data
    _status_line(console, result)
    items = d.get("items", [])
    if d.get("dry_run") or verbose:
        console.print(_stand_table(items))
    if d.get("message"):
        console.print(f"  {d['message']}")
    if verbose:
        _render_meta(console, result)


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, _json.dumps(value, separators=(",", ":")))
        else:
            _field(console, key, value)
    if verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    # Stands
    "list_stands": _render_stand_table,
    "get_stand": _render_single_stand,
    "available_count": _render_available,
    "create_stand": _render_mutation,
    # Allocation
    "stand_state": _render_stand_state,
    "sell_stand": _render_stand_state,
    "release_link": _render_stand_state,
    "link_buyer": _render_stand_state,
    "add_buyer": _render_add_buyer,
    # Buyers
    "roster": _render_roster,
    "create_buyer": _render_mutation,
    # Import
    "bulk_import": _render_bulk_import,
}
