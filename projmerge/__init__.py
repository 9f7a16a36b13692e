"""
projmerge — Merge an MSBuild project and its referenced projects into one

Collapses a multi-project build graph into a single compilable project.
Legacy (explicit item list) and SDK-style (implicit file enumeration)
projects are both supported.

Usage:
    projmerge app/App.csproj out/App.Merged.csproj
    python -m projmerge app/App.csproj out/App.Merged.csproj
"""

__version__ = "0.1.0"

from .core.project import MsBuildProject, ExplicitListProject, ImplicitEnumerationProject, Dialect
from .core.merger import ProjectMerger, MergeResult, ItemStatus, merge_file
from .config import Config, ConfigManager, MergeConfig, DisplayConfig
from .errors import ProjMergeError, ProjectLoadError

__all__ = [
    # Core
    'MsBuildProject', 'ExplicitListProject', 'ImplicitEnumerationProject', 'Dialect',
    'ProjectMerger', 'MergeResult', 'ItemStatus', 'merge_file',
    # Config
    'Config', 'ConfigManager', 'MergeConfig', 'DisplayConfig',
    # Errors
    'ProjMergeError', 'ProjectLoadError',
]
