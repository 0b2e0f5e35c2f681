"""LLM classification of call-graph entry points.

Each entry point is sent with up to ten of its callees as context. The reply
must validate against :class:`~clarity_cli.schemas.ClassifyResponse`; any
failure leaves the previous classifications in place and is reported as a
single message.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence

from pydantic import ValidationError

from .errors import ClassificationError
from .llm import LocalLLM
from .schemas import (
    ENTRY_POINT_TYPES,
    CallEdgeRecord,
    ClassificationsData,
    ClassifyRequest,
    ClassifyResponse,
    EntryPointClassification,
    LayerFunction,
)
from .storage import DataStore, make_classifications

if TYPE_CHECKING:
    from .session import AppState

logger = logging.getLogger(__name__)

MAX_CALLEES = 10

_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)```")

RESPONSE_JSON_SCHEMA: Dict[str, Any] = {
    "name": "entry_point_classifications",
    "strict": True,
    "schema": {
        "type": "object",
        "properties": {
            "classifications": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "file": {"type": "string"},
                        "function": {"type": "string"},
                        "isUserFacing": {"type": "boolean"},
                        "type": {"type": "string", "enum": ENTRY_POINT_TYPES},
                        "description": {"type": "string"},
                        "userAction": {"type": ["string", "null"]},
                        "confidence": {"type": "number"},
                    },
                    "required": [
                        "file",
                        "function",
                        "isUserFacing",
                        "type",
                        "description",
                        "userAction",
                        "confidence",
                    ],
                    "additionalProperties": False,
                },
            },
        },
        "required": ["classifications"],
        "additionalProperties": False,
    },
}

PROMPT_HEADER = """You are analyzing a codebase to identify user-facing entry points.

For each function below, classify whether it's a user-facing entry point and what type.

Entry point types:
- cli-command: Handles a CLI command (main, run, execute patterns)
- api-endpoint: HTTP endpoint handler
- main: Application main entry point
- event-handler: Event/callback handler (onClick, onMessage, etc.)
- export: Just an exported function, not a true entry point
- internal: Internal helper that happens to have no callers
- test: Test function or test helper

For each entry, provide:
- isUserFacing: true if a real user would trigger this function
- type: one of the types above
- description: 1-sentence description of what this function does
- userAction: how a user triggers this (e.g., "runs 'clarity run'" or "calls POST /api/foo") or null if not user-facing
- confidence: 0-1 how confident you are

ENTRIES TO CLASSIFY:
"""

PROMPT_FOOTER = """
Respond with a JSON object of classifications in this exact format:
{
  "classifications": [
    {
      "file": "path/to/file.ts",
      "function": "functionName",
      "isUserFacing": true,
      "type": "cli-command",
      "description": "Runs the main pipeline...",
      "userAction": "runs 'clarity run'",
      "confidence": 0.9
    }
  ]
}

Only return the JSON, no other text."""


@dataclass
class EntryContext:
    file: str
    function: str
    callees: List[str] = field(default_factory=list)


@dataclass
class ClassificationResult:
    ok: bool
    data: Optional[ClassificationsData] = None
    error: str = ""


def build_entry_contexts(request: ClassifyRequest) -> List[EntryContext]:
    contexts = []
    for entry in request.entries:
        callees = [
            f"{c.to_func} ({c.to_file})"
            for c in request.calls
            if c.from_file == entry.file and c.from_func == entry.function
        ][:MAX_CALLEES]
        contexts.append(EntryContext(entry.file, entry.function, callees))
    return contexts


def build_prompt(contexts: Sequence[EntryContext]) -> str:
    blocks = []
    for i, ctx in enumerate(contexts, start=1):
        calls = ", ".join(ctx.callees) if ctx.callees else "(none)"
        blocks.append(f"\n{i}. Function: {ctx.function}\n   File: {ctx.file}\n   Calls: {calls}\n")
    return PROMPT_HEADER + "\n".join(blocks) + "\n" + PROMPT_FOOTER


def extract_json_text(content: str) -> str:
    """Strip a Markdown code fence if the model wrapped its JSON in one."""
    if "```" in content:
        match = _FENCE_RE.search(content)
        if match:
            return match.group(1).strip()
    return content.strip()


def parse_classifications(content: str) -> List[EntryPointClassification]:
    try:
        payload = json.loads(extract_json_text(content))
    except json.JSONDecodeError as exc:
        raise ClassificationError(f"LLM returned invalid JSON: {exc.msg}") from exc
    try:
        return ClassifyResponse.model_validate(payload).classifications
    except ValidationError as exc:
        logger.error("LLM response validation failed: %s", exc)
        raise ClassificationError(f"Invalid LLM response format: {exc.error_count()} validation error(s)") from exc


class EntryPointClassifier:
    """Ask the configured LLM to classify entry points."""

    def __init__(self, llm: Optional[LocalLLM] = None) -> None:
        self.llm = llm or LocalLLM()

    def classify(
        self,
        entries: Sequence[LayerFunction],
        calls: Sequence[CallEdgeRecord],
    ) -> List[EntryPointClassification]:
        """Raises ClassificationError on transport, format or schema failure."""
        request = ClassifyRequest(entries=list(entries), calls=list(calls))
        prompt = build_prompt(build_entry_contexts(request))
        logger.info("Classifying %d entry points with %s", len(request.entries), self.llm.provider_name)
        content = self.llm.complete(prompt, RESPONSE_JSON_SCHEMA)
        return parse_classifications(content)


def analyze_entry_points(
    state: "AppState",
    classifier: Optional[EntryPointClassifier] = None,
    store: Optional[DataStore] = None,
) -> ClassificationResult:
    """Classify the arch dataset's entry points and store the result in ``state``.

    Rejected while another analysis is in flight. The analyzing flag is
    always cleared afterwards. Saving to ``store`` is best effort.
    """
    if state.is_analyzing:
        return ClassificationResult(ok=False, error="Classification already in progress")
    if state.arch is None or state.calls is None:
        return ClassificationResult(ok=False, error="Load arch and calls data before analyzing entry points")

    state.set_analyzing(True)
    state.set_analysis_error(None)
    try:
        classifier = classifier or EntryPointClassifier()
        items = classifier.classify(state.arch.entry_layer, state.calls.edges)
    except ClassificationError as exc:
        state.set_analysis_error(str(exc))
        return ClassificationResult(ok=False, error=str(exc))
    finally:
        state.set_analyzing(False)

    data = make_classifications(items)
    state.set_classifications(data)

    if store is not None:
        try:
            path = store.save_classifications(data)
            logger.info("Saved %d classifications to %s", len(items), path)
        except Exception as exc:
            logger.warning("Failed to save classifications: %s", exc)

    return ClassificationResult(ok=True, data=data)
