# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Reader for authored content documents.

Course files are YAML or JSON. Both go through yaml.safe_load, JSON being
a subset of YAML, so a single parser reports syntax errors with the same
line/column location for either format.

Example:
    >>> from pathlib import Path
    >>> from curriculum_sync.core.config.yaml_loader import load_document
    >>> data = load_document(Path("content/java_fundamentals.yaml"))
"""

from pathlib import Path
from typing import Any

import yaml

SUPPORTED_SUFFIXES: tuple[str, ...] = (".yaml", ".yml", ".json")


class YAMLLoadError(Exception):
    """Raised when a content document cannot be read or parsed.

    Attributes:
        path: Document that failed to load.
        reason: Description of the failure, without the path.
    """

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load '{path}': {reason}")


def _syntax_reason(error: yaml.YAMLError) -> str:
    mark = getattr(error, "problem_mark", None)
    problem = getattr(error, "problem", None) or str(error)
    if mark is None:
        return f"Invalid YAML syntax: {problem}"
    # Marks are zero-based
    return f"Invalid YAML syntax at line {mark.line + 1}, column {mark.column + 1}: {problem}"


def load_document(path: Path) -> dict[str, Any]:
    """Read a YAML or JSON document whose root is a mapping.

    Args:
        path: Document path. The suffix must be one of SUPPORTED_SUFFIXES.

    Returns:
        The parsed mapping, or an empty dict for an empty document.

    Raises:
        YAMLLoadError: If the file is missing, has an unsupported suffix,
            cannot be decoded, is syntactically invalid, or has a
            non-mapping root.
    """
    if not path.exists():
        raise YAMLLoadError(path, "File does not exist")
    if not path.is_file():
        raise YAMLLoadError(path, "Path is not a file")

    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise YAMLLoadError(
            path,
            f"Unsupported file type '{suffix or path.name}', "
            f"expected one of {', '.join(SUPPORTED_SUFFIXES)}",
        )

    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise YAMLLoadError(path, f"Cannot read file: {e}") from e

    try:
        parsed = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise YAMLLoadError(path, _syntax_reason(e)) from e

    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise YAMLLoadError(
            path, f"Document root must be a mapping, got {type(parsed).__name__}"
        )
    return parsed
