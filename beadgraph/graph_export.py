"""Graph export helpers for DOT and simple standalone HTML outputs."""

from __future__ import annotations

import html
import json
from pathlib import Path
from typing import Any, Dict

from . import config
from .models import GraphViewModel


def view_payload(view: GraphViewModel) -> Dict[str, Any]:
    return view.to_dict()


def render_dot(view: GraphViewModel) -> str:
    lines = ["digraph BeadGraph {"]
    lines.append("  rankdir=LR;")
    lines.append("  node [shape=box];")

    for item in view.nodes:
        label = f"{_esc(item.id)}\\n{_esc(item.node.title)}"
        style = ', style="dashed"' if item.status == "closed" else ""
        lines.append(f'  "{_esc(item.id)}" [label="{label}"{style}];')

    for edge in view.edges:
        style = ", style=bold" if edge.type == "blocks" else ""
        lines.append(f'  "{_esc(edge.source)}" -> "{_esc(edge.target)}" [label="{edge.type}"{style}];')

    lines.append("}")
    return "\n".join(lines) + "\n"


def export_dot(view: GraphViewModel, output_file: Path) -> None:
    output_file.write_text(render_dot(view), encoding="utf-8")


def render_html(view: GraphViewModel, title: str = "Dependency Graph") -> str:
    # keep "</script>" inside titles from closing the script block
    payload = json.dumps(view_payload(view)).replace("</", "<\\/")
    width = config.NODE_WIDTH
    height = config.NODE_HEIGHT
    return f"""<!doctype html>
<html>
<head>
  <meta charset="utf-8" />
  <title>{html.escape(title)}</title>
  <style>
    body {{ font-family: ui-monospace, SFMono-Regular, Menlo, monospace; margin: 20px; }}
    #canvas {{ position: relative; }}
    #edges {{ position: absolute; left: 0; top: 0; overflow: visible; }}
    .node {{ position: absolute; width: {width}px; height: {height}px; box-sizing: border-box;
             border: 1px solid #ccc; border-radius: 8px; padding: 10px; background: #fff; }}
    .node.closed {{ opacity: 0.5; }}
    .node .id {{ font-weight: bold; }}
    .node .meta {{ color: #666; font-size: 12px; margin-top: 6px; }}
  </style>
</head>
<body>
  <h1>{html.escape(title)}</h1>
  <div id="canvas"><svg id="edges"></svg></div>
  <script>
    const graph = {payload};
    const W = {width}, H = {height};
    const canvas = document.getElementById('canvas');
    const svg = document.getElementById('edges');
    const byId = {{}};
    let maxX = 0, maxY = 0;
    graph.nodes.forEach(n => {{
      byId[n.id] = n;
      maxX = Math.max(maxX, n.position.x + W);
      maxY = Math.max(maxY, n.position.y + H);
      const el = document.createElement('div');
      el.className = 'node ' + n.status;
      el.style.left = n.position.x + 'px';
      el.style.top = n.position.y + 'px';
      const id = document.createElement('div');
      id.className = 'id';
      id.textContent = n.id;
      const titleEl = document.createElement('div');
      titleEl.textContent = n.title;
      const meta = document.createElement('div');
      meta.className = 'meta';
      meta.textContent = `${{n.status}} · P${{n.priority}} · ${{n.issueType}}${{n.assignee ? ' · ' + n.assignee : ''}}`;
      el.append(id, titleEl, meta);
      canvas.appendChild(el);
    }});
    canvas.style.width = maxX + 'px';
    canvas.style.height = maxY + 'px';
    svg.setAttribute('width', maxX);
    svg.setAttribute('height', maxY);
    graph.edges.forEach(e => {{
      const s = byId[e.source], t = byId[e.target];
      const line = document.createElementNS('http://www.w3.org/2000/svg', 'line');
      line.setAttribute('x1', s.position.x + W);
      line.setAttribute('y1', s.position.y + H / 2);
      line.setAttribute('x2', t.position.x);
      line.setAttribute('y2', t.position.y + H / 2);
      line.setAttribute('stroke', e.type === 'blocks' ? '#d33' : '#999');
      line.setAttribute('stroke-width', e.type === 'blocks' ? 2 : 1);
      const tip = document.createElementNS('http://www.w3.org/2000/svg', 'title');
      tip.textContent = `${{e.source}} --${{e.type}}--> ${{e.target}}`;
      line.appendChild(tip);
      svg.appendChild(line);
    }});
  </script>
</body>
</html>
"""


def export_html(view: GraphViewModel, output_file: Path, title: str = "Dependency Graph") -> None:
    """Export a positioned view as a standalone HTML page."""
    output_file.write_text(render_html(view, title=title), encoding="utf-8")


def _esc(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"')
