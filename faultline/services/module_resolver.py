"""
Module Resolver
===============
Finds the project that owns a source file and reads its metadata.

Resolution walks up from the file's directory to the nearest pyproject.toml
and reads the [project] table, falling back to [tool.poetry]. The result
feeds the name / version / main / description / author report attributes.

Contract:
    - Never raises. Any failure returns (None, <last path examined>).
"""
import logging
import os
import tomllib
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from faultline.models.module_descriptor import ModuleDescriptor

logger = logging.getLogger(__name__)

_PROJECT_FILE = "pyproject.toml"


def find_project_file(path: str) -> Optional[str]:
    """Return the nearest pyproject.toml at or above path's directory."""
    current = os.path.abspath(path)
    if not os.path.isdir(current):
        current = os.path.dirname(current)
    while True:
        candidate = os.path.join(current, _PROJECT_FILE)
        if os.path.isfile(candidate):
            return candidate
        parent = os.path.dirname(current)
        if parent == current:
            return None
        current = parent


def _author_name(authors: Any) -> Optional[str]:
    """First author as a plain name; tables are reduced to their name (or email)."""
    if not authors:
        return None
    first = authors[0] if isinstance(authors, list) else authors
    if isinstance(first, dict):
        return first.get("name") or first.get("email")
    return str(first)


def _first_script(scripts: Any) -> Optional[str]:
    if isinstance(scripts, dict) and scripts:
        return str(next(iter(scripts.values())))
    return None


def parse_project_table(data: dict) -> Optional[ModuleDescriptor]:
    table = data.get("project")
    if not isinstance(table, dict):
        tool = data.get("tool")
        table = tool.get("poetry") if isinstance(tool, dict) else None
    if not isinstance(table, dict):
        return None
    return ModuleDescriptor(
        name=table.get("name"),
        version=table.get("version"),
        main=_first_script(table.get("scripts")),
        description=table.get("description"),
        author=_author_name(table.get("authors")),
    )


def read_module(path: Optional[str]) -> tuple[Optional[ModuleDescriptor], str]:
    """
    Resolve the project descriptor for a source file.

    Parameters
    ----------
    path : str | None
        Path of the calling module's source file.

    Returns
    -------
    tuple[ModuleDescriptor | None, str]
        The descriptor (None when unresolved) and the resolved pyproject.toml
        path, or the input path when no project file was found.
    """
    if not path:
        return None, ""

    project_file = find_project_file(path)
    if project_file is None:
        return None, path

    try:
        with open(project_file, "rb") as f:
            data = tomllib.load(f)
        return parse_project_table(data), project_file
    except (OSError, tomllib.TOMLDecodeError, PydanticValidationError) as e:
        logger.debug("Cannot read module metadata from %s: %s", project_file, e)
        return None, project_file
