# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Load authored course content from YAML or JSON files."""

from pathlib import Path
from typing import Any

from pydantic import ValidationError

from curriculum_sync.core.config.yaml_loader import YAMLLoadError, load_document
from curriculum_sync.domains.curriculum.schemas import CourseSpec


class CurriculumLoadError(Exception):
    """Raised when authored content cannot be read or is structurally malformed.

    Attributes:
        path: File that failed to load, if any.
        reason: Description of the failure.
    """

    def __init__(self, path: Path | None, reason: str) -> None:
        self.path = path
        self.reason = reason
        where = f" '{path}'" if path is not None else ""
        super().__init__(f"Failed to load curriculum{where}: {reason}")


def parse_course(data: dict[str, Any], path: Path | None = None) -> CourseSpec:
    """Build a CourseSpec from already-parsed data.

    Raises:
        CurriculumLoadError: If the structure does not match CourseSpec.
    """
    try:
        return CourseSpec.model_validate(data)
    except ValidationError as e:
        raise CurriculumLoadError(path, str(e)) from e


def load_course_file(path: Path) -> CourseSpec:
    """Load an authored course from a file.

    The document root may be the course itself, or a mapping with a
    single "course" key wrapping it.

    Args:
        path: Path to a YAML or JSON file.

    Returns:
        The parsed CourseSpec.

    Raises:
        CurriculumLoadError: If the file is missing, unparsable or malformed.
    """
    try:
        data = load_document(path)
    except YAMLLoadError as e:
        raise CurriculumLoadError(path, e.reason) from e

    if not data:
        raise CurriculumLoadError(path, "File is empty")

    if set(data) == {"course"}:
        data = data["course"]

    return parse_course(data, path)
