"""Textual import resolution against the set of known files.

The analyzer only reports raw import text (``{ foo } from "./bar"``), so
targets are found by string matching with a fixed precedence:

1. the normalized path, resolved relative to the importing file
2. the same path with ``/index`` appended (barrel directories)
3. the last path segment, matched against bare filenames
"""

from __future__ import annotations

import re
from typing import Dict, Iterable, List, Optional

_FROM_RE = re.compile(r"""from\s+["']([^"']+)["']""")
_BARE_RE = re.compile(r"""^["']([^"']+)["']$""")
_EXT_RE = re.compile(r"\.(ts|tsx|js|jsx)$")
_INDEX_RE = re.compile(r"^index\.(ts|tsx|js|jsx)$")


def get_filename(path: str) -> str:
    return path.split("/")[-1] or path


def get_parent_folder(path: str) -> str:
    parts = path.split("/")
    if len(parts) < 2:
        return ""
    return parts[-2]


def get_directory(path: str) -> str:
    if "/" not in path:
        return ""
    return "/".join(path.split("/")[:-1])


def is_test_file(path: str) -> bool:
    return ".test." in path or ".spec." in path or "__tests__" in path


def is_barrel_file(path: str) -> bool:
    return bool(_INDEX_RE.match(get_filename(path)))


def strip_extension(path: str) -> str:
    return _EXT_RE.sub("", path, count=1)


def extract_import_path(module_text: str) -> Optional[str]:
    """Pull the quoted path out of an import statement's module text.

    Accepts ``... from "<path>"`` anywhere in the text, or a string that is
    only a quoted path (side-effect import). Returns ``None`` otherwise.
    """
    match = _FROM_RE.search(module_text)
    if match:
        return match.group(1)
    match = _BARE_RE.match(module_text)
    if match:
        return match.group(1)
    return None


def normalize_path(path: str) -> str:
    if path.startswith("./"):
        path = path[2:]
    return strip_extension(path)


def join_relative(base_dir: str, import_path: str) -> str:
    """Apply ``./`` and ``../`` segments of ``import_path`` to ``base_dir``."""
    parts: List[str] = [p for p in base_dir.split("/") if p]
    for part in import_path.split("/"):
        if part == ".":
            continue
        if part == "..":
            # Popping past the root is tolerated.
            if parts:
                parts.pop()
        else:
            parts.append(part)
    return "/".join(parts)


class ModuleResolver:
    """Resolve import text to the ``path`` of a known file."""

    def __init__(self, paths: Iterable[str]):
        self.paths = list(paths)
        self._lookup: Dict[str, str] = {}
        for path in self.paths:
            self._lookup[normalize_path(path)] = path
            # Full paths win over bare filenames
            bare = strip_extension(get_filename(path))
            if bare not in self._lookup:
                self._lookup[bare] = path

    def resolve_path(self, import_path: str, importing_path: str) -> Optional[str]:
        if not import_path.startswith(".") and not import_path.startswith("/"):
            return None

        resolved = import_path
        if import_path.startswith("./") or import_path.startswith("../"):
            resolved = join_relative(get_directory(importing_path), import_path)
        elif import_path.startswith("/"):
            resolved = import_path[1:]

        normalized = normalize_path(resolved)
        target = self._lookup.get(normalized)
        if target is None:
            target = self._lookup.get(f"{normalized}/index")
        if target is None:
            target = self._lookup.get(normalized.split("/")[-1])

        if target is None or target == importing_path:
            return None
        return target

    def resolve(self, module_text: str, importing_path: str) -> Optional[str]:
        """Return the target file path for ``module_text``, or ``None``.

        ``None`` covers unparseable text, external packages, misses and
        self-imports alike; none of them is an error.
        """
        import_path = extract_import_path(module_text)
        if import_path is None:
            return None
        return self.resolve_path(import_path, importing_path)
