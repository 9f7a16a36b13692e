"""
Core — Project model and merge engine

- xmldoc: lxml document adapter (load, save, re-home)
- project: MSBuild project dialects
- closure: transitive ProjectReference walk
- paths: path rebasing
- merger: merge algorithm
"""

from .project import (
    MsBuildProject, ExplicitListProject, ImplicitEnumerationProject, Dialect,
    FILE_ITEM_KINDS, REFERENCE_KINDS, PROJECT_REFERENCE_KIND, FRAMEWORK_REFERENCES,
)
from .closure import collect_reference_closure
from .paths import rebase_path, rebase_include, is_identity_metadata, ensure_file_directory
from .merger import ProjectMerger, MergeResult, ItemStatus, merge_file

__all__ = [
    'MsBuildProject', 'ExplicitListProject', 'ImplicitEnumerationProject', 'Dialect',
    'FILE_ITEM_KINDS', 'REFERENCE_KINDS', 'PROJECT_REFERENCE_KIND', 'FRAMEWORK_REFERENCES',
    'collect_reference_closure',
    'rebase_path', 'rebase_include', 'is_identity_metadata', 'ensure_file_directory',
    'ProjectMerger', 'MergeResult', 'ItemStatus', 'merge_file',
]
