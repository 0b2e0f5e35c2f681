"""Builders shared by the test modules."""

from typing import List

from clarity_cli.schemas import CallEdgeRecord, CallsData, FileRecord, ImportStatement, StructureData

SAMPLE_CLASSIFICATIONS = {
    "classifications": [
        {
            "file": "src/index.ts",
            "function": "main",
            "isUserFacing": True,
            "type": "cli-command",
            "description": "Parses arguments and runs the pipeline.",
            "userAction": "runs 'clarity run'",
            "confidence": 0.92,
        },
        {
            "file": "src/__tests__/run.test.ts",
            "function": "testRun",
            "isUserFacing": False,
            "type": "test",
            "description": "Exercises the run command.",
            "userAction": None,
            "confidence": 0.99,
        },
    ]
}


class FakeLLM:
    """Stand-in for LocalLLM that returns a canned reply and records prompts."""

    provider_name = "fake"

    def __init__(self, reply: str = "", error: Exception = None):
        self.reply = reply
        self.error = error
        self.prompts: List[str] = []

    def complete(self, prompt, json_schema=None):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.reply


def make_calls(*pairs) -> CallsData:
    """Build call data from ``("file::func", "file::func")`` pairs."""
    edges = []
    for source, target in pairs:
        from_file, from_func = source.split("::")
        to_file, to_func = target.split("::")
        edges.append(CallEdgeRecord(from_file=from_file, from_func=from_func, to_file=to_file, to_func=to_func))
    return CallsData(edges=edges)


def make_file(path: str, *modules: str, functions=(), classes=()) -> FileRecord:
    return FileRecord(
        path=path,
        functions=list(functions),
        classes=list(classes),
        imports=[ImportStatement(module=m) for m in modules],
    )


def make_structure(*files: FileRecord) -> StructureData:
    return StructureData(files=list(files))
