"""
Paths — Rebasing of project-relative paths

Item paths in a project file are relative to that project's directory.
Once an item is moved into another project they must be rewritten as
absolute paths anchored at the directory of the project they came from.
"""

import os
import re
from typing import Optional

from .xmldoc import INCLUDE_ATTRIBUTE, get_include, namespace_of, qualify


# File stems (lowercased) of per-project assembly identity metadata
ASSEMBLY_INFO_STEM = "assemblyinfo"
IDENTITY_METADATA_SUFFIXES = (".assemblyinfo", ".assemblyattributes")

HINT_PATH = "HintPath"

_SEPARATORS = re.compile(r"[\\/]")


def to_native(path: str) -> str:
    """Convert MSBuild separators (either slash) to the host separator."""
    return _SEPARATORS.sub(lambda _: os.sep, path)


def rebase_path(path: str, origin_directory: str) -> str:
    """
    Absolute, normalized form of path as seen from origin_directory.

    Already absolute paths are only normalized.
    """
    if path is None:
        raise ValueError("path is required")
    return os.path.abspath(os.path.join(origin_directory, to_native(path)))


def rebase_include(element, origin_directory: str) -> Optional[str]:
    """Rewrite the element's Include as an absolute path. Returns the new value."""
    include = get_include(element)
    if include is None:
        return None
    rebased = rebase_path(include, origin_directory)
    element.set(INCLUDE_ATTRIBUTE, rebased)
    return rebased


def rebase_hint_path(element, origin_directory: str) -> Optional[str]:
    """Rewrite a reference's <HintPath> child as an absolute path, if present."""
    hint = element.find(qualify(HINT_PATH, namespace_of(element)))
    if hint is None or not (hint.text or "").strip():
        return None
    hint.text = rebase_path(hint.text.strip(), origin_directory)
    return hint.text


def file_stem(path: str) -> str:
    """File name without extension, accepting either slash as separator."""
    name = _SEPARATORS.split(path)[-1]
    return os.path.splitext(name)[0]


def is_identity_metadata(path: Optional[str]) -> bool:
    """
    True for generated assembly identity files.

    Matches AssemblyInfo.*, *.AssemblyInfo.* and *.AssemblyAttributes.*
    (case-insensitive). These describe a single assembly and must not be
    compiled twice into a merged project.
    """
    if not path:
        return False
    stem = file_stem(path).lower()
    if stem == ASSEMBLY_INFO_STEM:
        return True
    return stem.endswith(IDENTITY_METADATA_SUFFIXES)


def ensure_file_directory(file_path: str) -> bool:
    """
    Create the directory that will contain file_path.

    Returns:
        True if a directory was created, False if it already existed
    """
    if file_path is None:
        raise ValueError("file_path is required")

    directory = os.path.dirname(os.path.abspath(file_path))
    if not directory or os.path.isdir(directory):
        return False

    os.makedirs(directory, exist_ok=True)
    return True
