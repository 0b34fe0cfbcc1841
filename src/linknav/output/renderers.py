"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO).  The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from linknav.output.console import create_console, get_output, style_for_kind

if TYPE_CHECKING:
    from rich.console import Console

    from linknav.services.result import ServiceResult


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
    """Render minimal output for ``--quiet`` mode.

    Hierarchies print one vault path per line, farthest inlink first,
    then the start document, then the outlink tree breadth-first.
    """
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"

    if result.op == "hierarchy":
        return "\n".join(_hierarchy_paths(result.data))

    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _hierarchy_paths(data: dict[str, Any]) -> list[str]:
    paths = [node["path"] for node in data.get("inlinks", [])]
    paths.append(data["root"]["path"])
    queue = deque(data.get("outlinks", []))
    while queue:
        node = queue.popleft()
        paths.append(node["path"])
        queue.extend(node.get("children", []))
    return paths


def _status_line(console: Console, result: ServiceResult) -> None:
    """Print the OK/ERROR status line."""
    label = Text("OK", style="nav.ok")
    op = Text(f"  {result.op}", style="nav.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any, style: str = "") -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="nav.key")
    if style:
        v = Text(str(value), style=style)
    elif key == "path":
        v = Text(str(value), style="nav.path")
    elif key == "name":
        v = Text(str(value), style="nav.current")
    else:
        v = Text(str(value))
    console.print(k, v, end="")
    console.print()


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Verbose-only trailer: meta values, with the span tree drawn as a tree."""
    if not result.meta:
        return
    console.print()
    console.print(Text("  meta:", style="dim"))
    for key, value in result.meta.items():
        if key == "telemetry":
            tree = Tree(_span_label(value), guide_style="dim")
            _add_spans(tree, value.get("children", []))
            console.print(tree)
        else:
            _field(console, key, value)


def _span_label(span: dict[str, Any]) -> Text:
    duration = span.get("duration_ms", 0.0)
    slow = "bold red" if duration > 1000 else "yellow" if duration > 100 else "dim"
    label = Text(f"{duration:.2f}ms ", style=slow)
    label.append(span.get("name", "?"))
    annotations = span.get("annotations") or {}
    if annotations:
        label.append("  " + " ".join(f"{k}={v}" for k, v in annotations.items()), style="nav.key")
    return label


def _add_spans(parent: Tree, spans: list[dict[str, Any]]) -> None:
    for span in spans:
        _add_spans(parent.add(_span_label(span)), span.get("children", []))


def _name_list(console: Console, label: str, names: list[str], style: str) -> None:
    if not names:
        return
    console.print(Text(f"  {label} ({len(names)})", style="nav.key"))
    for name in names:
        console.print(Text(f"    {name}", style=style))


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    line = Text("ERROR", style="nav.error")
    line.append(f"  {result.op}", style="nav.op")
    line.append(" — " + (err.message if err else "Unknown error"))
    console.print(line)
    if verbose and err is not None:
        for key, value in err.detail.items():
            _field(console, key, value)


# ── Link renderers ────────────────────────────────────────────────────


def _render_links(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render a single document's LinkSet with the ``←N  →M`` summary."""
    d = result.data
    counts = d.get("counts", {})
    header = Text()
    header.append(f"←{counts.get('inlinks', 0)}  ", style="nav.inlink")
    header.append(str(d.get("name", "?")), style="nav.current")
    header.append(f"  →{counts.get('outlinks', 0)}", style="nav.outlink")
    console.print(header)
    _field(console, "path", d.get("path", ""))
    kind = str(d.get("kind", ""))
    _field(console, "kind", kind, style_for_kind(kind))

    _name_list(console, "inlinks", d.get("inlinks", []), "nav.inlink")
    _name_list(console, "outlinks", d.get("outlinks", []), "nav.outlink")
    _name_list(console, "canvas links", d.get("canvas_links", []), "nav.canvas")
    _name_list(console, "attachments", d.get("attachments", []), "nav.attachment")
    tags = d.get("tags", [])
    if tags:
        _field(console, "tags", " ".join(f"#{t}" for t in tags), "nav.tag")
    if verbose:
        _render_meta(console, result)


def _add_outlink_children(tree: Tree, children: list[dict[str, Any]]) -> None:
    stack: list[tuple[Tree, dict[str, Any]]] = [(tree, child) for child in reversed(children)]
    while stack:
        parent, node = stack.pop()
        branch = parent.add(Text(f"→ {node['name']}", style="nav.outlink"))
        for attachment in node.get("attachments", []):
            branch.add(Text(attachment, style="nav.attachment"))
        stack.extend((branch, child) for child in reversed(node.get("children", [])))


def _render_hierarchy(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render inlinks farthest-first, the current note, its outlink tree and canvas links."""
    d = result.data
    display = d.get("display", {})
    inlink_depth = d.get("inlink_depth", 0)

    for node in d.get("inlinks", []):
        indent = "  " * (inlink_depth - node["depth"])
        console.print(Text(f"{indent}← {node['name']}", style="nav.inlink"))
        if display.get("inlink_outlinks"):
            for outlink in node.get("outlinks", []):
                console.print(Text(f"{indent}    → {outlink}", style="dim"))

    root = Tree(
        Text(f"{'  ' * inlink_depth}• {d['root']['name']}", style="nav.current"),
        guide_style="dim",
    )
    for attachment in d.get("attachments", []):
        root.add(Text(attachment, style="nav.attachment"))
    _add_outlink_children(root, d.get("outlinks", []))
    console.print(root)

    canvas_links = d.get("canvas_links", [])
    if display.get("canvas_links", True) and canvas_links:
        canvas = Tree(Text("Canvas Links", style="bold"))
        for name in canvas_links:
            canvas.add(Text(name, style="nav.canvas"))
        console.print(canvas)

    if verbose:
        _field(console, "max_depth", d.get("max_depth"))
        _field(console, "outlink_depth", d.get("outlink_depth"))
        _render_meta(console, result)


# ── Cache renderers ───────────────────────────────────────────────────


def _render_cache_status(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    _status_line(console, result)
    table = Table(show_header=False, pad_edge=False, expand=False, box=None)
    table.add_column("Key", style="nav.key")
    table.add_column("Value")
    table.add_row("Cache size", f"{d.get('size', 0)} / {d.get('max_size', 0)}")
    table.add_row("Cache timeout", f"{d.get('timeout_minutes', 0)} minutes")
    table.add_row("Oldest entry", str(d.get("oldest") or "N/A"))
    table.add_row("Newest entry", str(d.get("newest") or "N/A"))
    table.add_row("Dirty", str(d.get("dirty", 0)))
    table.add_row("In flight", str(d.get("in_flight", 0)))
    if verbose:
        for key in ("hits", "misses", "coalesced", "evictions"):
            table.add_row(key.title(), str(d.get(key, 0)))
    console.print(table)
    if verbose:
        _render_meta(console, result)


def _render_rebuild(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    d = result.data
    _field(console, "documents", d.get("total", 0))
    _field(console, "cached", d.get("cached", 0))
    if d.get("failed"):
        console.print(f"  [nav.error]failed[/nav.error]: {d['failed']}")
    if verbose:
        _render_meta(console, result)


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)
    if verbose:
        _render_meta(console, result)


_OP_RENDERERS: dict[str, Any] = {
    "links": _render_links,
    "hierarchy": _render_hierarchy,
    "cache_status": _render_cache_status,
    "rebuild_cache": _render_rebuild,
}
