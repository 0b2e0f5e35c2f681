"""Session state and view dispatch.

``AppState`` holds the loaded datasets, the active view, filters, the
selection and the in-flight analysis flag. It is changed only through its
setter methods; graphs are derived from it on demand and never cached.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from . import config
from .arch_graph import get_arch_stats, transform_arch_to_graph
from .calls_graph import CallsTransformOptions, transform_calls_to_graph
from .layout import DIRECTIONS
from .models import Graph
from .schemas import ArchData, CallsData, ClassificationsData, EntryPointClassification, StructureData
from .storage import DataStore
from .structure_graph import StructureTransformOptions, get_structure_stats, transform_structure_to_graph

logger = logging.getLogger(__name__)

VIEWS = ("calls", "structure", "arch")


@dataclass
class AppState:
    structure: Optional[StructureData] = None
    calls: Optional[CallsData] = None
    arch: Optional[ArchData] = None
    classifications: Optional[ClassificationsData] = None

    active_view: str = "calls"
    selected_node_id: Optional[str] = None
    hide_tests: bool = field(default_factory=lambda: config.HIDE_TESTS_DEFAULT)
    selected_entry_point: Optional[str] = None
    hide_utilities: bool = False
    utility_threshold: int = 5
    show_only_user_facing: bool = False
    direction: str = field(default_factory=lambda: config.LAYOUT_DIRECTION)

    is_analyzing: bool = False
    analysis_error: Optional[str] = None

    # -- datasets ---------------------------------------------------------

    def set_structure(self, data: StructureData) -> None:
        self.structure = data

    def set_calls(self, data: CallsData) -> None:
        self.calls = data

    def set_arch(self, data: ArchData) -> None:
        self.arch = data

    def set_classifications(self, data: ClassificationsData) -> None:
        self.classifications = data

    def set_dataset(self, slot: str, data: BaseModel) -> None:
        """Replace the dataset in ``slot`` wholesale."""
        setters = {
            "structure": self.set_structure,
            "calls": self.set_calls,
            "arch": self.set_arch,
            "classifications": self.set_classifications,
        }
        if slot not in setters:
            raise ValueError(f"Unknown dataset slot: {slot}")
        setters[slot](data)
        logger.debug("Loaded %s dataset", slot)

    def clear_data(self) -> None:
        self.structure = None
        self.calls = None
        self.arch = None
        self.selected_node_id = None
        self.selected_entry_point = None

    def has_data(self) -> bool:
        return any(d is not None for d in (self.structure, self.calls, self.arch))

    # -- view and filters -------------------------------------------------

    def set_active_view(self, view: str) -> None:
        if view not in VIEWS:
            raise ValueError(f"Unknown view '{view}', expected one of {', '.join(VIEWS)}")
        self.active_view = view
        self.selected_node_id = None

    def select_node(self, node_id: Optional[str]) -> None:
        self.selected_node_id = node_id

    def set_hide_tests(self, hide: bool) -> None:
        self.hide_tests = hide

    def set_selected_entry_point(self, entry_point: Optional[str]) -> None:
        self.selected_entry_point = entry_point

    def set_hide_utilities(self, hide: bool) -> None:
        self.hide_utilities = hide

    def set_utility_threshold(self, threshold: int) -> None:
        self.utility_threshold = threshold

    def set_direction(self, direction: str) -> None:
        if direction not in DIRECTIONS:
            raise ValueError(f"Unknown layout direction '{direction}', expected one of {', '.join(DIRECTIONS)}")
        self.direction = direction

    def set_show_only_user_facing(self, show: bool) -> None:
        self.show_only_user_facing = show

    def set_analyzing(self, analyzing: bool) -> None:
        self.is_analyzing = analyzing

    def set_analysis_error(self, error: Optional[str]) -> None:
        self.analysis_error = error

    # -- derived ----------------------------------------------------------

    def classification_for(self, key: str) -> Optional[EntryPointClassification]:
        if self.classifications is None:
            return None
        return self.classifications.get(key)

    def entry_points(self) -> List[EntryPointClassification]:
        if self.classifications is None:
            return []
        items = self.classifications.classifications
        if self.show_only_user_facing:
            items = [c for c in items if c.isUserFacing]
        return list(items)


def render_view(state: AppState) -> Graph:
    """Build the graph for the active view; an empty graph if its data is missing."""
    view = state.active_view
    if view == "calls" and state.calls is not None:
        return transform_calls_to_graph(
            state.calls,
            CallsTransformOptions(
                hide_tests=state.hide_tests,
                arch=state.arch,
                selected_entry_point=state.selected_entry_point,
                hide_utilities=state.hide_utilities,
                utility_threshold=state.utility_threshold,
                direction=state.direction,
            ),
        )
    if view == "structure" and state.structure is not None:
        return transform_structure_to_graph(
            state.structure,
            StructureTransformOptions(hide_tests=state.hide_tests, direction=state.direction),
        )
    if view == "arch" and state.arch is not None:
        return transform_arch_to_graph(state.arch)
    return Graph()


def session_stats(state: AppState) -> Dict[str, Any]:
    stats: Dict[str, Any] = {}
    if state.calls is not None:
        stats["calls"] = {
            "totalEdges": len(state.calls.edges),
            "uniqueFunctions": len(
                {e.source_id for e in state.calls.edges} | {e.target_id for e in state.calls.edges}
            ),
        }
    if state.structure is not None:
        stats["structure"] = get_structure_stats(state.structure)
    if state.arch is not None:
        stats["arch"] = get_arch_stats(state.arch)
        stats["arch"]["summary"] = state.arch.summary.model_dump()
    if state.classifications is not None:
        stats["classifications"] = {
            "total": len(state.classifications.classifications),
            "userFacing": sum(1 for c in state.classifications.classifications if c.isUserFacing),
            "analyzedAt": state.classifications.analyzedAt,
        }
    return stats


def load_session(data_dir: Optional[Path] = None) -> AppState:
    """Fresh state holding whatever datasets the data directory has.

    Each file is read on its own; a missing or invalid one is skipped.
    """
    state = AppState()
    for slot, dataset in DataStore(data_dir).load_all().items():
        state.set_dataset(slot, dataset)
    return state
