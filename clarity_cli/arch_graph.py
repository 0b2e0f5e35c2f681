"""Directory layer summary for the ``arch`` view.

Directories are bucketed into three horizontal bands by the analyzer's
inferred layer. This view has no edges.
"""

from __future__ import annotations

from typing import Any, Dict, List

from .models import DIRECTORY, Graph, GraphNode
from .schemas import ArchData, DirectoryLayerRecord

LAYERS = ("HIGH", "MIDDLE", "LOW")

LAYER_Y = {
    "HIGH": 0,
    "MIDDLE": 200,
    "LOW": 400,
}

LAYER_COLORS = {
    "HIGH": "oklch(0.75 0.12 185)",
    "MIDDLE": "oklch(0.75 0.12 140)",
    "LOW": "oklch(0.75 0.10 280)",
}

NODE_PITCH = 280


def get_layer_type(inferred_layer: str) -> str:
    if "HIGH" in inferred_layer:
        return "HIGH"
    if "MIDDLE" in inferred_layer:
        return "MIDDLE"
    return "LOW"


def directory_label(directory: str) -> str:
    if directory == ".":
        return "root"
    return directory.split("/")[-1] or directory


def merge_directories(records: List[DirectoryLayerRecord]) -> List[DirectoryLayerRecord]:
    """Collapse repeated directories, summing their counters into the first record."""
    merged: Dict[str, DirectoryLayerRecord] = {}
    for record in records:
        first = merged.get(record.directory)
        if first is None:
            merged[record.directory] = record.model_copy()
            continue
        first.calls_out += record.calls_out
        first.calls_in += record.calls_in
        first.function_count += record.function_count
    return list(merged.values())


def transform_arch_to_graph(arch: ArchData) -> Graph:
    bands: Dict[str, List[DirectoryLayerRecord]] = {layer: [] for layer in LAYERS}
    for record in merge_directories(arch.directory_layers):
        bands[get_layer_type(record.inferred_layer)].append(record)

    nodes: List[GraphNode] = []
    for layer in LAYERS:
        records = bands[layer]
        start_x = -(len(records) * NODE_PITCH) / 2
        for i, record in enumerate(records):
            node = GraphNode(
                node_id=record.directory,
                kind=DIRECTORY,
                data={
                    "label": directory_label(record.directory),
                    "directory": record.directory,
                    "callsOut": record.calls_out,
                    "callsIn": record.calls_in,
                    "inferredLayer": record.inferred_layer,
                    "functionCount": record.function_count,
                    "layer": layer,
                },
                style={"background": LAYER_COLORS[layer]},
            )
            nodes.append(node.moved_to(start_x + i * NODE_PITCH, LAYER_Y[layer]))

    return Graph(nodes=nodes, edges=[])


def get_arch_stats(arch: ArchData) -> Dict[str, Any]:
    return {
        "entryFunctions": len(arch.entry_layer),
        "leafFunctions": len(arch.leaf_layer),
        "middleFunctions": arch.middle_layer_count,
        "totalDirectories": len(arch.directory_layers),
        "circularDeps": len(arch.circular_dependencies),
    }
