"""Pydantic schemas for analyzer datasets and entry-point classifications.

Every JSON document that crosses into Clarity (uploaded datasets, files read
at session start, LLM responses) is validated against one of these models
before the transformers see it.
"""

from __future__ import annotations

from typing import Any, List, Literal, Optional, get_args

from pydantic import BaseModel, Field


class ImportStatement(BaseModel):
    module: str
    names: List[str] = Field(default_factory=list)
    is_from: bool = False


class FileRecord(BaseModel):
    path: str
    functions: List[str] = Field(default_factory=list)
    classes: List[str] = Field(default_factory=list)
    methods: List[str] = Field(default_factory=list)
    imports: List[ImportStatement] = Field(default_factory=list)


class StructureData(BaseModel):
    root: str = ""
    languages: List[str] = Field(default_factory=list)
    files: List[FileRecord] = Field(default_factory=list)


class CallEdgeRecord(BaseModel):
    from_file: str
    from_func: str
    to_file: str
    to_func: str

    @property
    def source_id(self) -> str:
        return f"{self.from_file}::{self.from_func}"

    @property
    def target_id(self) -> str:
        return f"{self.to_file}::{self.to_func}"


class CallsData(BaseModel):
    edges: List[CallEdgeRecord] = Field(default_factory=list)


class LayerFunction(BaseModel):
    file: str
    function: str

    @property
    def key(self) -> str:
        return f"{self.file}::{self.function}"


class DirectoryLayerRecord(BaseModel):
    directory: str
    calls_out: int = 0
    calls_in: int = 0
    inferred_layer: str = ""
    function_count: int = 0


class ArchSummary(BaseModel):
    entry_count: int = 0
    leaf_count: int = 0
    middle_count: int = 0
    circular_count: int = 0


class ArchData(BaseModel):
    entry_layer: List[LayerFunction] = Field(default_factory=list)
    leaf_layer: List[LayerFunction] = Field(default_factory=list)
    middle_layer_count: int = 0
    directory_layers: List[DirectoryLayerRecord] = Field(default_factory=list)
    circular_dependencies: List[Any] = Field(default_factory=list)
    summary: ArchSummary = Field(default_factory=ArchSummary)


EntryPointType = Literal[
    "cli-command",
    "api-endpoint",
    "main",
    "event-handler",
    "export",
    "internal",
    "test",
]

ENTRY_POINT_TYPES: List[str] = list(get_args(EntryPointType))


class EntryPointClassification(BaseModel):
    file: str
    function: str
    isUserFacing: bool
    type: EntryPointType
    description: str
    userAction: Optional[str]
    confidence: float = Field(ge=0, le=1)

    @property
    def key(self) -> str:
        return f"{self.file}::{self.function}"


class ClassifyRequest(BaseModel):
    entries: List[LayerFunction]
    calls: List[CallEdgeRecord]


class ClassifyResponse(BaseModel):
    classifications: List[EntryPointClassification]


class ClassificationsData(BaseModel):
    classifications: List[EntryPointClassification] = Field(default_factory=list)
    analyzedAt: str = ""

    def get(self, key: str) -> Optional[EntryPointClassification]:
        """Look up a classification by its ``"<file>::<function>"`` key."""
        for item in self.classifications:
            if item.key == key:
                return item
        return None


DATASET_MODELS = {
    "structure": StructureData,
    "calls": CallsData,
    "arch": ArchData,
    "classifications": ClassificationsData,
}
