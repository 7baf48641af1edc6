"""Build a Mermaid flowchart description from canonical infrastructure data.

The node/edge structure is assembled as a networkx DiGraph first and then
emitted as Mermaid directives. Rendering the directives is left to the
caller's Mermaid runtime.
"""
from __future__ import annotations

from typing import List, Optional

import networkx as nx

from infralyze.ir.raw_tree import RawTree, is_mapping, shape_name
from infralyze.models.infra import InfraData
from infralyze.utils.config import settings

ENV_NODE_ID = "env"
ENV_NODE_LABEL = "Environment Variables"
EMPTY_NODE_ID = "empty"
EMPTY_NODE_LABEL = "No infrastructure components recognized"
CANONICAL_KEYS = ("services", "databases", "environment")

_SHAPES = {
    "rect": '{id}["{label}"]',
    "cylinder": '{id}[("{label}")]',
    "parallelogram": '{id}[/"{label}"/]',
}


def _esc(text: str) -> str:
    # '#' starts a Mermaid entity code, so it is emitted as one
    return " ".join(str(text).replace("#", "#35;").replace('"', "'").split())


def _add_raw_fallback(g: nx.DiGraph, raw: RawTree) -> None:
    if not is_mapping(raw):
        return
    previous = None
    index = 0
    for key, value in raw.items():
        if key in CANONICAL_KEYS:
            continue
        node_id = f"raw{index}"
        g.add_node(node_id, label=f"{key}: {shape_name(value)}", shape="rect")
        if previous is not None:
            g.add_edge(previous, node_id)
        previous = node_id
        index += 1


def build_infra_graph(infra: InfraData, raw: RawTree = None) -> nx.DiGraph:
    """One node per service and database, edges fanned out from the first service."""
    g = nx.DiGraph()
    services = infra.services or []
    databases = infra.databases or []

    for i, svc in enumerate(services):
        g.add_node(f"svc{i}", label=f"{svc.name} ({svc.runtime or svc.type})", shape="rect")
    entry = "svc0" if services else None

    for j, db in enumerate(databases):
        node_id = f"db{j}"
        g.add_node(node_id, label=f"{db.type}: {db.name}", shape="cylinder")
        if entry:
            g.add_edge(entry, node_id)

    if infra.environment:
        g.add_node(ENV_NODE_ID, label=ENV_NODE_LABEL, shape="parallelogram")
        if entry:
            g.add_edge(entry, ENV_NODE_ID)

    if infra.is_empty():
        _add_raw_fallback(g, raw)

    if g.number_of_nodes() == 0:
        g.add_node(EMPTY_NODE_ID, label=EMPTY_NODE_LABEL, shape="rect")
    return g


def graph_to_mermaid(g: nx.DiGraph, direction: Optional[str] = None) -> List[str]:
    lines = [f"graph {direction or settings.diagram_direction}"]
    for node_id, attrs in g.nodes(data=True):
        template = _SHAPES.get(attrs.get("shape", "rect"), _SHAPES["rect"])
        lines.append("  " + template.format(id=node_id, label=_esc(attrs.get("label", node_id))))
    for src, dst in g.edges():
        lines.append(f"  {src} --> {dst}")
    return lines


def make_mermaid_diagram(infra: InfraData, raw: RawTree = None, direction: Optional[str] = None) -> List[str]:
    return graph_to_mermaid(build_infra_graph(infra, raw), direction)


def render_mermaid_text(lines: List[str]) -> str:
    return "\n".join(lines)
