"""File import graph for the ``structure`` view."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional, Set

from .layout import LayoutOptions, apply_layout
from .models import FILE, EdgeSet, Graph, GraphNode
from .resolver import ModuleResolver, get_filename, get_parent_folder, is_barrel_file, is_test_file
from .schemas import FileRecord, StructureData

logger = logging.getLogger(__name__)

# Importers are ranked above the files they import
STRUCTURE_LAYOUT = LayoutOptions(direction="TB", node_width=180, node_height=50, rank_sep=80, node_sep=30)


@dataclass
class StructureTransformOptions:
    hide_tests: bool = False
    direction: str = "TB"


def is_empty_barrel(record: FileRecord) -> bool:
    """An ``index.<ext>`` file with no imports, functions or classes."""
    if not is_barrel_file(record.path):
        return False
    return not record.imports and not record.functions and not record.classes


def filter_files(structure: StructureData, hide_tests: bool = False) -> List[FileRecord]:
    kept = []
    for record in structure.files:
        if hide_tests and is_test_file(record.path):
            continue
        if is_empty_barrel(record):
            continue
        kept.append(record)
    return kept


def node_label(path: str, filename_counts: Counter) -> str:
    filename = get_filename(path)
    if filename_counts[filename] > 1:
        parent = get_parent_folder(path)
        if parent:
            return f"{parent}/{filename}"
    return filename


def transform_structure_to_graph(
    structure: StructureData,
    options: Optional[StructureTransformOptions] = None,
) -> Graph:
    options = options or StructureTransformOptions()
    files = filter_files(structure, options.hide_tests)

    filename_counts = Counter(get_filename(f.path) for f in files)
    resolver = ModuleResolver(f.path for f in files)

    edge_set = EdgeSet()
    connected: Set[str] = set()
    unresolved = 0
    for record in files:
        for statement in record.imports:
            target = resolver.resolve(statement.module, record.path)
            if target is None:
                unresolved += 1
                continue
            if edge_set.add(record.path, target):
                connected.add(record.path)
                connected.add(target)
    logger.debug("Resolved %d import edges, %d imports left unresolved", len(edge_set), unresolved)

    nodes: List[GraphNode] = []
    for record in files:
        data: Dict[str, Any] = {
            "label": node_label(record.path, filename_counts),
            "path": record.path,
            "functions": list(record.functions),
            "classes": list(record.classes),
            "imports": len(record.imports),
            "isIsolated": record.path not in connected,
        }
        nodes.append(GraphNode(node_id=record.path, kind=FILE, data=data))

    if not nodes:
        return Graph()

    layout = replace(STRUCTURE_LAYOUT, direction=options.direction)
    placed, edges = apply_layout(nodes, edge_set.to_list(), layout)
    return Graph(nodes=placed, edges=edges)


def get_structure_stats(structure: StructureData) -> Dict[str, Any]:
    return {
        "totalFiles": len(structure.files),
        "totalFunctions": sum(len(f.functions) for f in structure.files),
        "totalClasses": sum(len(f.classes) for f in structure.files),
        "totalImports": sum(len(f.imports) for f in structure.files),
        "languages": list(structure.languages),
    }
