"""Function call graph for the ``calls`` view."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, replace
from typing import Dict, Iterable, List, Optional, Set

from .layout import LayoutOptions, apply_layout
from .models import FUNCTION, EdgeSet, Graph, GraphNode
from .resolver import is_test_file
from .schemas import ArchData, CallEdgeRecord, CallsData

logger = logging.getLogger(__name__)

CALLS_LAYOUT = LayoutOptions(direction="TB", node_width=200, node_height=60, rank_sep=80, node_sep=40)

HEAT_COLORS = {
    "low": "oklch(0.75 0.12 185)",
    "medium": "oklch(0.75 0.15 90)",
    "high": "oklch(0.65 0.20 30)",
}

MIN_UTILITY_THRESHOLD = 1
MAX_UTILITY_THRESHOLD = 20


@dataclass
class CallsTransformOptions:
    hide_tests: bool = False
    arch: Optional[ArchData] = None
    selected_entry_point: Optional[str] = None
    hide_utilities: bool = False
    utility_threshold: int = 5
    direction: str = "TB"


def function_id(file: str, function: str) -> str:
    return f"{file}::{function}"


def reachable_from(entry: str, edges: Iterable[CallEdgeRecord]) -> Set[str]:
    """Forward-reachable function ids from ``entry``, including itself."""
    adjacency: Dict[str, List[str]] = {}
    for edge in edges:
        adjacency.setdefault(edge.source_id, []).append(edge.target_id)

    reachable = {entry}
    queue = deque([entry])
    while queue:
        current = queue.popleft()
        for neighbor in adjacency.get(current, []):
            if neighbor not in reachable:
                reachable.add(neighbor)
                queue.append(neighbor)
    return reachable


def incoming_counts(edges: Iterable[CallEdgeRecord]) -> Dict[str, int]:
    """Incoming call records per target id; duplicate records all count."""
    counts: Dict[str, int] = {}
    for edge in edges:
        counts[edge.target_id] = counts.get(edge.target_id, 0) + 1
    return counts


def get_max_call_count(calls: CallsData) -> int:
    return max(incoming_counts(calls.edges).values(), default=0) or 1


def heat_band(count: int, max_count: int) -> str:
    intensity = count / max(max_count, 1)
    if intensity < 0.33:
        return "low"
    if intensity < 0.66:
        return "medium"
    return "high"


def get_heat_color(count: int, max_count: int) -> str:
    return HEAT_COLORS[heat_band(count, max_count)]


def filter_call_edges(calls: CallsData, options: CallsTransformOptions) -> List[CallEdgeRecord]:
    """Apply the test, entry-point and utility filters in that order."""
    edges = list(calls.edges)

    if options.hide_tests:
        edges = [e for e in edges if not is_test_file(e.from_file) and not is_test_file(e.to_file)]

    if options.selected_entry_point:
        reachable = reachable_from(options.selected_entry_point, edges)
        edges = [e for e in edges if e.source_id in reachable and e.target_id in reachable]
        logger.debug(
            "Entry point %s reaches %d functions over %d call records",
            options.selected_entry_point,
            len(reachable),
            len(edges),
        )

    if options.hide_utilities:
        threshold = min(max(options.utility_threshold, MIN_UTILITY_THRESHOLD), MAX_UTILITY_THRESHOLD)
        hidden = {
            node_id
            for node_id, count in incoming_counts(edges).items()
            if count >= threshold and node_id != options.selected_entry_point
        }
        edges = [e for e in edges if e.source_id not in hidden and e.target_id not in hidden]

    return edges


def transform_calls_to_graph(calls: CallsData, options: Optional[CallsTransformOptions] = None) -> Graph:
    options = options or CallsTransformOptions()

    entry_ids: Set[str] = set()
    leaf_ids: Set[str] = set()
    if options.arch is not None:
        entry_ids = {f.key for f in options.arch.entry_layer}
        leaf_ids = {f.key for f in options.arch.leaf_layer}

    edges = filter_call_edges(calls, options)
    if not edges:
        return Graph()

    # Functions grouped by file, both in first-seen order
    files: Dict[str, Dict[str, None]] = {}
    for edge in edges:
        files.setdefault(edge.from_file, {})[edge.from_func] = None
        files.setdefault(edge.to_file, {})[edge.to_func] = None

    counts = incoming_counts(edges)
    max_count = max(counts.values(), default=0) or 1

    nodes: List[GraphNode] = []
    for file, functions in files.items():
        for func in functions:
            node_id = function_id(file, func)
            call_count = counts.get(node_id, 0)
            nodes.append(
                GraphNode(
                    node_id=node_id,
                    kind=FUNCTION,
                    data={
                        "label": func,
                        "file": file,
                        "function": func,
                        "callCount": call_count,
                        "isEntry": node_id in entry_ids,
                        "isLeaf": node_id in leaf_ids,
                        "heat": heat_band(call_count, max_count),
                    },
                )
            )

    edge_set = EdgeSet()
    for edge in edges:
        edge_set.add(edge.source_id, edge.target_id)

    layout = replace(CALLS_LAYOUT, direction=options.direction)
    placed, graph_edges = apply_layout(nodes, edge_set.to_list(), layout)
    return Graph(nodes=placed, edges=graph_edges)
