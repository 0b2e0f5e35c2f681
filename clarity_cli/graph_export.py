"""Graph export helpers for JSON, DOT and simple standalone HTML outputs."""

from __future__ import annotations

import html
import json
from pathlib import Path
from typing import Any, Dict, Optional

from .calls_graph import HEAT_COLORS
from .models import Graph, GraphNode

FORMATS = ("json", "dot", "html")


def graph_to_json(graph: Graph, view: str = "") -> str:
    """React Flow compatible ``{"nodes": [...], "edges": [...]}`` document."""
    payload: Dict[str, Any] = graph.to_dict()
    if view:
        payload["view"] = view
    return json.dumps(payload, indent=2)


def _node_color(node: GraphNode) -> Optional[str]:
    if node.style and node.style.get("background"):
        return node.style["background"]
    heat = node.data.get("heat")
    if heat:
        return HEAT_COLORS[heat]
    return None


def graph_to_dot(graph: Graph, name: str = "Clarity") -> str:
    lines = [f"digraph {name} {{"]
    lines.append("  rankdir=TB;")
    lines.append("  node [shape=box, style=rounded];")

    for node in graph.nodes:
        attrs = [f'label="{_esc(str(node.data.get("label", node.node_id)))}"']
        # Graphviz y grows upwards
        attrs.append(f'pos="{node.position.x:.0f},{-node.position.y:.0f}!"')
        if node.data.get("isIsolated"):
            attrs.append("style=dashed")
        if node.data.get("isEntry"):
            attrs.append("penwidth=2")
        lines.append(f'  "{_esc(node.node_id)}" [{", ".join(attrs)}];')

    for edge in graph.edges:
        lines.append(f'  "{_esc(edge.source)}" -> "{_esc(edge.target)}";')

    lines.append("}")
    return "\n".join(lines)


def graph_to_html(graph: Graph, title: str = "Clarity") -> str:
    """Standalone vis.js page with the computed positions fixed in place."""
    payload = {
        "nodes": [
            {
                "id": node.node_id,
                "label": str(node.data.get("label", node.node_id)),
                "title": node.node_id,
                "x": node.position.x,
                "y": node.position.y,
                "color": _node_color(node),
                "shapeProperties": {"borderDashes": bool(node.data.get("isIsolated"))},
            }
            for node in graph.nodes
        ],
        "edges": [{"from": e.source, "to": e.target, "arrows": "to"} for e in graph.edges],
    }
    # Keep "</script>" in labels from closing the inline script
    data = json.dumps(payload).replace("</", "<\\/")
    return f"""<!doctype html>
<html>
<head>
  <meta charset="utf-8" />
  <title>{html.escape(title)}</title>
  <script src="https://unpkg.com/vis-network/standalone/umd/vis-network.min.js"></script>
  <style>
    body {{ font-family: ui-monospace, SFMono-Regular, Menlo, monospace; margin: 0; background: #0d1117; color: #c9d1d9; }}
    h1 {{ font-size: 16px; margin: 12px 20px; }}
    #graph {{ width: 100vw; height: calc(100vh - 48px); }}
  </style>
</head>
<body>
  <h1>{html.escape(title)} ({len(graph.nodes)} nodes, {len(graph.edges)} edges)</h1>
  <div id="graph"></div>
  <script>
    const graph = {data};
    const nodes = new vis.DataSet(graph.nodes.map(n => ({{...n, shape: "box", fixed: true, color: n.color || undefined}})));
    const edges = new vis.DataSet(graph.edges);
    new vis.Network(document.getElementById("graph"), {{nodes, edges}}, {{
      physics: false,
      edges: {{ smooth: {{ type: "cubicBezier" }} }},
      interaction: {{ hover: true, navigationButtons: true }},
    }});
  </script>
</body>
</html>
"""


def export_graph(graph: Graph, output_file: Path, fmt: str = "json", view: str = "") -> None:
    if fmt == "json":
        text = graph_to_json(graph, view)
    elif fmt == "dot":
        text = graph_to_dot(graph)
    elif fmt == "html":
        text = graph_to_html(graph, f"Clarity: {view}" if view else "Clarity")
    else:
        raise ValueError(f"Unsupported export format: {fmt}")
    output_file.parent.mkdir(parents=True, exist_ok=True)
    output_file.write_text(text, encoding="utf-8")


def _esc(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"')
