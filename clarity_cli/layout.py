"""Layered (hierarchical) layout for node/edge sets using networkx.

Ranks come from the longest path over the condensation of the graph, so
cycles collapse into a single rank instead of breaking the ordering. Nodes
inside a rank are ordered by the barycenter of their predecessors, then by
input order, which keeps the result a pure function of the input.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import networkx as nx

from .models import GraphEdge, GraphNode

DIRECTIONS = ("TB", "BT", "LR", "RL")


@dataclass
class LayoutOptions:
    direction: str = "TB"
    node_width: float = 200
    node_height: float = 60
    rank_sep: float = 100
    node_sep: float = 50
    margin_x: float = 50
    margin_y: float = 50

    def __post_init__(self) -> None:
        if self.direction not in DIRECTIONS:
            raise ValueError(f"direction must be one of {DIRECTIONS}, got {self.direction!r}")


def build_digraph(node_ids: Sequence[str], edges: Sequence[GraphEdge]) -> nx.DiGraph:
    """Directed graph of the given nodes; edges with unknown endpoints are skipped."""
    graph = nx.DiGraph()
    graph.add_nodes_from(node_ids)
    known = set(node_ids)
    for edge in edges:
        if edge.source in known and edge.target in known and edge.source != edge.target:
            graph.add_edge(edge.source, edge.target)
    return graph


def compute_ranks(graph: nx.DiGraph) -> Dict[str, int]:
    """Longest-path rank of every node; members of a cycle share a rank."""
    dag = nx.condensation(graph)
    mapping = dag.graph["mapping"]
    component_rank: Dict[int, int] = {}
    for component in nx.topological_sort(dag):
        preds = list(dag.predecessors(component))
        component_rank[component] = max((component_rank[p] + 1 for p in preds), default=0)
    return {node: component_rank[mapping[node]] for node in graph.nodes}


def order_layers(graph: nx.DiGraph, ranks: Dict[str, int], order: Dict[str, int]) -> List[List[str]]:
    layer_count = max(ranks.values()) + 1 if ranks else 0
    layers: List[List[str]] = [[] for _ in range(layer_count)]
    for node in sorted(ranks, key=lambda n: order[n]):
        layers[ranks[node]].append(node)

    index: Dict[str, int] = {}
    for rank, layer in enumerate(layers):
        def sort_key(node: str) -> Tuple[float, int]:
            above = [index[p] for p in graph.predecessors(node) if p in index and ranks[p] < rank]
            barycenter = sum(above) / len(above) if above else math.inf
            return (barycenter, order[node])

        if rank > 0:
            layer.sort(key=sort_key)
        for i, node in enumerate(layer):
            index[node] = i
    return layers


def _centers(layers: List[List[str]], options: LayoutOptions) -> Dict[str, Tuple[float, float]]:
    horizontal = options.direction in ("LR", "RL")
    rank_extent = options.node_width if horizontal else options.node_height
    cross_extent = options.node_height if horizontal else options.node_width
    cross_pitch = cross_extent + options.node_sep
    rank_pitch = rank_extent + options.rank_sep

    widest = max(len(layer) for layer in layers)
    total_cross = widest * cross_extent + (widest - 1) * options.node_sep
    last_rank = len(layers) - 1

    rank_margin = options.margin_x if horizontal else options.margin_y
    cross_margin = options.margin_y if horizontal else options.margin_x

    centers: Dict[str, Tuple[float, float]] = {}
    for rank, layer in enumerate(layers):
        if options.direction in ("BT", "RL"):
            rank = last_rank - rank
        span = len(layer) * cross_extent + (len(layer) - 1) * options.node_sep
        offset = (total_cross - span) / 2
        rank_center = rank_margin + rank * rank_pitch + rank_extent / 2
        for i, node in enumerate(layer):
            cross_center = cross_margin + offset + i * cross_pitch + cross_extent / 2
            if horizontal:
                centers[node] = (rank_center, cross_center)
            else:
                centers[node] = (cross_center, rank_center)
    return centers


def apply_layout(
    nodes: Sequence[GraphNode],
    edges: Sequence[GraphEdge],
    options: Optional[LayoutOptions] = None,
) -> Tuple[List[GraphNode], List[GraphEdge]]:
    """Position every node and pass edges through unchanged.

    Stored positions are top-left corners; the layout works with centers.
    """
    options = options or LayoutOptions()
    if not nodes:
        return [], list(edges)

    order = {node.node_id: i for i, node in enumerate(nodes)}
    graph = build_digraph(list(order), edges)
    layers = order_layers(graph, compute_ranks(graph), order)
    centers = _centers(layers, options)

    half_w = options.node_width / 2
    half_h = options.node_height / 2
    placed = []
    for node in nodes:
        cx, cy = centers[node.node_id]
        placed.append(node.moved_to(cx - half_w, cy - half_h))
    return placed, list(edges)
