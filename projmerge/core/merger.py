"""
Merger — Collapse a project and everything it references into one project

Reads from referenced projects, writes only into the root project's tree:
1. Root items are rebased to absolute paths
2. References and items of every project in the reference closure are
   copied into the root (first occurrence wins)
3. Root ProjectReference items are dropped, their content is now inline
4. ApplicationIcon is rebased

Progress is reported through callbacks; the merger itself prints nothing.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional

from ..config import MergeConfig
from .paths import ensure_file_directory, is_identity_metadata, rebase_hint_path, rebase_include, rebase_path
from .project import MsBuildProject, PROJECT_REFERENCE_KIND, REFERENCE_KINDS
from .xmldoc import get_include, local_name


class ItemStatus(Enum):
    """What happened to one item during a merge."""
    REBASED = "rebased"                        # Root item, path made absolute
    ADDED = "added"                            # Copied into the root
    DUPLICATE = "duplicate"                    # Equivalent item already present
    IDENTITY_METADATA = "identity_metadata"    # AssemblyInfo and friends
    FRAMEWORK = "framework"                    # Framework library, not a package


ItemCallback = Callable[[object, MsBuildProject, ItemStatus], None]
ProjectCallback = Callable[[MsBuildProject], None]


@dataclass
class MergeResult:
    """Outcome of one merge run."""
    project: MsBuildProject
    merged_projects: List[MsBuildProject] = field(default_factory=list)
    rebased: int = 0
    references_added: int = 0
    includes_added: int = 0
    duplicates_skipped: int = 0
    identity_metadata_skipped: int = 0
    framework_references_skipped: int = 0
    project_references_removed: int = 0
    strong_name_removed: bool = False

    @property
    def summary(self) -> str:
        """Human-readable summary."""
        parts = [f"{len(self.merged_projects)} project(s) merged"]
        if self.includes_added:
            parts.append(f"+{self.includes_added} items")
        if self.references_added:
            parts.append(f"+{self.references_added} references")
        if self.duplicates_skipped:
            parts.append(f"{self.duplicates_skipped} duplicates")
        if self.identity_metadata_skipped:
            parts.append(f"{self.identity_metadata_skipped} assembly info skipped")
        if self.framework_references_skipped:
            parts.append(f"{self.framework_references_skipped} framework references skipped")
        if self.project_references_removed:
            parts.append(f"-{self.project_references_removed} project references")
        if self.strong_name_removed:
            parts.append("strong name removed")
        return ", ".join(parts)


class ProjectMerger:
    """
    Merges the reference closure of a root project into the root.

    Usage:
        merger = ProjectMerger(config, on_item=print_item)
        result = merger.merge(MsBuildProject.from_file_path("app.csproj"))
        result.project.save("merged/app.csproj")
    """

    def __init__(
        self,
        config: Optional[MergeConfig] = None,
        on_item: Optional[ItemCallback] = None,
        on_project: Optional[ProjectCallback] = None
    ):
        self.config = config or MergeConfig()
        self.on_item = on_item
        self.on_project = on_project

    def _report(self, element, origin: MsBuildProject, status: ItemStatus) -> None:
        if self.on_item:
            self.on_item(element, origin, status)

    def merge(self, root: MsBuildProject) -> MergeResult:
        """Merge every referenced project into root, in place."""
        result = MergeResult(project=root)

        # Before rebasing: the key file item is matched by its relative name
        if self.config.remove_strong_name:
            result.strong_name_removed = root.remove_strong_name()

        self._rebase_root(root, result)

        # One enumeration of the root per pass; merge_include keeps it current
        index = root.include_index()

        for referenced in root.all_referenced_projects():
            result.merged_projects.append(referenced)
            if self.on_project:
                self.on_project(referenced)

            for reference in list(referenced.references()):
                self._merge_reference(root, referenced, reference, result)

            for include in list(referenced.compiled_items()):
                self._merge_include(root, referenced, include, index, result)

        for project_reference in list(root.project_references()):
            include = get_include(project_reference)
            if include is None:
                removed = root.remove_item(project_reference)
            else:
                removed = root.remove_project_reference(include)
            if removed:
                result.project_references_removed += 1

        icon = root.application_icon
        if icon is not None and (icon.text or "").strip():
            icon.text = rebase_path(icon.text.strip(), root.directory_path)

        return result

    def _rebase_root(self, root: MsBuildProject, result: MergeResult) -> None:
        # Items written in the document; SDK-style walked files are already absolute
        for include in list(root.item_group_includes()):
            if local_name(include) in REFERENCE_KINDS:
                continue
            if rebase_include(include, root.directory_path) is not None:
                result.rebased += 1
                self._report(include, root, ItemStatus.REBASED)

        for reference in root.references():
            rebase_hint_path(reference, root.directory_path)

    def _merge_reference(self, root: MsBuildProject, referenced: MsBuildProject,
                         reference, result: MergeResult) -> None:
        element, created = root.merge_reference(reference)
        if element is None:
            result.framework_references_skipped += 1
            self._report(reference, referenced, ItemStatus.FRAMEWORK)
        elif created:
            rebase_hint_path(element, referenced.directory_path)
            result.references_added += 1
            self._report(element, referenced, ItemStatus.ADDED)
        else:
            result.duplicates_skipped += 1
            self._report(reference, referenced, ItemStatus.DUPLICATE)

    def _merge_include(self, root: MsBuildProject, referenced: MsBuildProject,
                       include, index: Dict[str, object], result: MergeResult) -> None:
        kind = local_name(include)
        if kind in REFERENCE_KINDS or kind == PROJECT_REFERENCE_KIND:
            return

        if is_identity_metadata(get_include(include)):
            result.identity_metadata_skipped += 1
            self._report(include, referenced, ItemStatus.IDENTITY_METADATA)
            return

        element, created = root.merge_include(include, referenced.directory_path, index)
        if created:
            # Relative to the project the item came from, not the root
            rebase_include(element, referenced.directory_path)
            result.includes_added += 1
            self._report(element, referenced, ItemStatus.ADDED)
        else:
            result.duplicates_skipped += 1
            self._report(include, referenced, ItemStatus.DUPLICATE)


def merge_file(
    input_path: str,
    output_path: str,
    config: Optional[MergeConfig] = None,
    on_item: Optional[ItemCallback] = None,
    on_project: Optional[ProjectCallback] = None
) -> MergeResult:
    """
    Load input_path, merge its references, and write the result to output_path.

    The output is written once, after the merge completed.

    Raises:
        OSError: a project cannot be read or the output cannot be written
        ProjectLoadError: a project file is malformed
    """
    root = MsBuildProject.from_file_path(input_path, config)
    merger = ProjectMerger(config, on_item=on_item, on_project=on_project)
    result = merger.merge(root)

    ensure_file_directory(output_path)
    root.save(output_path)
    return result
