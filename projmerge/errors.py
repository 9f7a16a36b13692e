"""
Errors — Exception taxonomy for projmerge

Fatal conditions only. Missing project references, duplicate items,
assembly identity metadata and framework libraries are recoverable and
never raise; file system failures stay OSError.
"""

from typing import Optional


class ProjMergeError(Exception):
    """Base class for projmerge failures."""


class ProjectLoadError(ProjMergeError):
    """
    Raised when a file cannot be loaded as an MSBuild project.

    Covers malformed XML and well-formed documents whose root element
    is not <Project>.
    """

    def __init__(self, file_path: str, reason: str, cause: Optional[Exception] = None):
        self.file_path = file_path
        self.reason = reason
        self.cause = cause
        super().__init__(f"Cannot load project '{file_path}': {reason}")
