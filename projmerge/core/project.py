"""
Project — MSBuild project files as editable models

Two dialects share one interface:
- ExplicitListProject: legacy projects where every compiled file is
  listed in an <ItemGroup> (usually in the MSBuild 2003 namespace)
- ImplicitEnumerationProject: SDK-style projects (<Project Sdk="Microsoft.NET.Sdk">)
  where every source file under the project directory is compiled

The dialect is picked once, by MsBuildProject.from_file_path().

Only the tree of the project being written to is ever mutated; items
from other projects are re-homed as copies.
"""

import os
from enum import Enum
from itertools import chain
from typing import Dict, Iterator, List, Optional, Tuple

from ..config import MergeConfig
from ..errors import ProjectLoadError
from .closure import collect_reference_closure
from .paths import is_identity_metadata, rebase_path
from .xmldoc import (
    append_child, create_element, detach, get_include, import_element, is_element,
    load_document, local_name, namespace_of, qualify, same_include, save_document,
)


# Item kinds
FILE_ITEM_KINDS = ("Compile", "EmbeddedResource", "Content", "Page", "None")
REFERENCE_KINDS = ("Reference", "PackageReference")
PROJECT_REFERENCE_KIND = "ProjectReference"

# Runtime libraries that ship with the framework; never turned into packages
FRAMEWORK_REFERENCES = frozenset({
    "System",
    "System.Core",
    "System.Drawing",
    "System.Windows.Forms",
    "Microsoft.CSharp",
})

PROJECT_FILE_EXTENSIONS = (".csproj", ".vbproj")
SDK_ATTRIBUTE = "Sdk"
SDK_PREFIX = "microsoft.net.sdk"


class Dialect(Enum):
    """How a project declares the files it compiles."""
    EXPLICIT_LIST = "explicit-list"
    IMPLICIT_ENUMERATION = "implicit-enumeration"


def assembly_simple_name(include: Optional[str]) -> Optional[str]:
    """'System.Core, Version=4.0.0.0' -> 'System.Core'."""
    if include is None:
        return None
    return include.split(",", 1)[0].strip()


def detect_dialect(file_path: str, root) -> Dialect:
    """SDK-style .csproj/.vbproj files enumerate implicitly; everything else is explicit."""
    ext = os.path.splitext(file_path)[1].lower()
    if ext in PROJECT_FILE_EXTENSIONS:
        sdk = (root.get(SDK_ATTRIBUTE) or "").strip().lower()
        if sdk.startswith(SDK_PREFIX):
            return Dialect.IMPLICIT_ENUMERATION
    return Dialect.EXPLICIT_LIST


class MsBuildProject:
    """
    A loaded MSBuild project file.

    Identity is the absolute file path compared case-insensitively, so
    projects reached through different relative references collapse to
    one instance in sets.

    Do not instantiate directly; use from_file_path() so the dialect is
    detected.
    """

    dialect: Dialect = Dialect.EXPLICIT_LIST

    def __init__(self, file_path: str, config: Optional[MergeConfig] = None, document=None):
        if not file_path:
            raise ValueError("file_path is required")

        self.file_path = os.path.abspath(os.fspath(file_path))
        self.directory_path = os.path.dirname(self.file_path)
        self.config = config or MergeConfig()
        self.document = document if document is not None else load_document(self.file_path)
        self.project = self.document.getroot()
        if local_name(self.project) != "Project":
            raise ProjectLoadError(self.file_path, f"root element is <{local_name(self.project)}>, expected <Project>")
        self.namespace_uri = namespace_of(self.project)

    @staticmethod
    def from_file_path(file_path: str, config: Optional[MergeConfig] = None) -> 'MsBuildProject':
        """
        Load a project, choosing the dialect from its root element.

        Raises:
            OSError: file cannot be read
            ProjectLoadError: not well-formed XML, or not a <Project> document
        """
        if not file_path:
            raise ValueError("file_path is required")

        path = os.path.abspath(os.fspath(file_path))
        document = load_document(path)
        if detect_dialect(path, document.getroot()) is Dialect.IMPLICIT_ENUMERATION:
            return ImplicitEnumerationProject(path, config, document)
        return ExplicitListProject(path, config, document)

    # =========================================================================
    # Identity
    # =========================================================================

    @property
    def identity(self) -> str:
        return self.file_path.casefold()

    def __eq__(self, other) -> bool:
        if not isinstance(other, MsBuildProject):
            return NotImplemented
        return self.identity == other.identity

    def __hash__(self) -> int:
        return hash(self.identity)

    def __str__(self) -> str:
        return self.file_path

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.file_path!r})"

    def _q(self, name: str) -> str:
        return qualify(name, self.namespace_uri)

    # =========================================================================
    # Enumeration
    # =========================================================================

    def item_groups(self) -> Iterator:
        yield from self.project.iterchildren(self._q("ItemGroup"))

    def item_group_includes(self) -> Iterator:
        """Every element with an Include attribute in the document's item groups."""
        for group in self.item_groups():
            for item in group:
                if is_element(item) and item.get("Include") is not None:
                    yield item

    def compiled_items(self) -> Iterator:
        """Items this project contributes to a build, recomputed on every call."""
        return self.item_group_includes()

    def _items_of_kind(self, kinds: Tuple[str, ...]) -> Iterator:
        tags = {self._q(kind) for kind in kinds}
        for group in self.item_groups():
            for item in group:
                if item.tag in tags:
                    yield item

    def references(self) -> Iterator:
        """Reference and PackageReference items."""
        return self._items_of_kind(REFERENCE_KINDS)

    def project_references(self) -> Iterator:
        return self._items_of_kind((PROJECT_REFERENCE_KIND,))

    def included_file_paths(self) -> Iterator[str]:
        """Include values of file-bearing items (Compile, Content, ...)."""
        for item in self.compiled_items():
            if local_name(item) in FILE_ITEM_KINDS:
                include = get_include(item)
                if include is not None:
                    yield include

    def referenced_projects(self) -> Iterator['MsBuildProject']:
        """
        Projects named by this project's ProjectReference items.

        References that do not point at an existing file are skipped.
        """
        for reference in list(self.project_references()):
            include = get_include(reference)
            if include is None:
                continue

            path = rebase_path(include, self.directory_path)
            if not os.path.isfile(path):
                continue
            yield MsBuildProject.from_file_path(path, self.config)

    def all_referenced_projects(self) -> List['MsBuildProject']:
        """Transitive closure of referenced_projects(), without this project."""
        return collect_reference_closure(self)

    @property
    def application_icon(self):
        """The <ApplicationIcon> property element, or None."""
        return self.project.find(f"{self._q('PropertyGroup')}/{self._q('ApplicationIcon')}")

    # =========================================================================
    # Classification
    # =========================================================================

    def is_reference_include(self, element) -> bool:
        if element is None:
            return False
        return local_name(element) in REFERENCE_KINDS

    def is_identity_metadata(self, element) -> bool:
        if element is None:
            return False
        return is_identity_metadata(get_include(element))

    # =========================================================================
    # Merge operations
    # =========================================================================

    def _target_group(self, kind: str):
        """First item group already holding items of kind, or a new one."""
        tag = self._q(kind)
        for group in self.item_groups():
            if group.find(tag) is not None:
                return group
        return append_child(self.project, "ItemGroup", self.namespace_uri)

    def _ensure_element(self, candidate, existing: Iterator, kind: str,
                        candidate_key: Optional[str], existing_directory: Optional[str] = None):
        for element in existing:
            key = get_include(element)
            if key is not None and existing_directory is not None:
                key = rebase_path(key, existing_directory)
            if same_include(key, candidate_key):
                return element, False

        group = self._target_group(kind)
        return import_element(candidate, group, self.namespace_uri, kind), True

    def merge_reference(self, reference):
        """
        Add a copy of reference unless one with the same Include exists.

        Returns:
            (element, created): the element now in this document (None if
            the reference is not wanted here) and whether it was added
        """
        if reference is None:
            raise ValueError("reference is required")
        return self._ensure_element(reference, self.references(), local_name(reference), get_include(reference))

    def ensure_reference(self, reference):
        """Reference element in this document equivalent to reference, or None."""
        return self.merge_reference(reference)[0]

    def _include_candidates(self) -> Iterator:
        return self.compiled_items()

    def include_index(self) -> Dict[str, object]:
        """
        Resolved path (case-folded) of every non-library item, mapped to its element.

        Enumerates once; pass the result to merge_include() for a whole
        merge pass and it is kept current as items are added.
        """
        index: Dict[str, object] = {}
        for item in self._include_candidates():
            if local_name(item) in REFERENCE_KINDS:
                continue
            include = get_include(item)
            if include is not None:
                index.setdefault(rebase_path(include, self.directory_path).casefold(), item)
        return index

    def merge_include(self, include, origin_directory: Optional[str] = None,
                      index: Optional[Dict[str, object]] = None):
        """
        Add a copy of include unless an equivalent item exists.

        Without origin_directory, Include values are compared as written.
        With it, the candidate is compared by the absolute path it resolves
        to from origin_directory and existing items by the path they resolve
        to from this project's directory. An index from include_index()
        replaces the scan of existing items in that case.

        Returns:
            (element, created)
        """
        if include is None:
            raise ValueError("include is required")

        kind = local_name(include)
        candidate_key = get_include(include)
        existing_directory = None
        if origin_directory is not None and candidate_key is not None:
            candidate_key = rebase_path(candidate_key, origin_directory)
            existing_directory = self.directory_path

            if index is not None:
                key = candidate_key.casefold()
                if key in index:
                    return index[key], False
                element = import_element(include, self._target_group(kind), self.namespace_uri, kind)
                index[key] = element
                return element, True

        existing = (item for item in self._include_candidates() if local_name(item) not in REFERENCE_KINDS)
        return self._ensure_element(include, existing, kind, candidate_key, existing_directory)

    def ensure_include(self, include, origin_directory: Optional[str] = None):
        """Item element in this document equivalent to include."""
        return self.merge_include(include, origin_directory)[0]

    def remove_item(self, element) -> bool:
        """Detach an item, and its ItemGroup once no element is left in it."""
        group = element.getparent()
        if not detach(element):
            return False
        if not any(is_element(child) for child in group):
            detach(group)
        return True

    def _remove_first(self, elements: Iterator, include: str) -> bool:
        if include is None:
            raise ValueError("include is required")
        for element in elements:
            if same_include(get_include(element), include):
                return self.remove_item(element)
        return False

    def remove_reference(self, include: str) -> bool:
        return self._remove_first(self.references(), include)

    def remove_project_reference(self, include: str) -> bool:
        return self._remove_first(self.project_references(), include)

    def remove_include(self, include: str) -> bool:
        return self._remove_first(self.item_group_includes(), include)

    def get_include_element(self, include: str):
        """Document item whose Include matches, or None."""
        if include is None:
            raise ValueError("include is required")
        for element in self.item_group_includes():
            if same_include(get_include(element), include):
                return element
        return None

    # =========================================================================
    # Properties
    # =========================================================================

    def get_property_group(self, condition: Optional[str] = None):
        """PropertyGroup with exactly this Condition (None: no Condition)."""
        for group in self.project.iterchildren(self._q("PropertyGroup")):
            if group.get("Condition") == condition:
                return group
        return None

    def get_property(self, name: str):
        """First <name> property element in any PropertyGroup, or None."""
        if not name:
            raise ValueError("name is required")
        return self.project.find(f"{self._q('PropertyGroup')}/{self._q(name)}")

    def set_property(self, name: str, text: str, condition: Optional[str] = None):
        """
        Set a property in the PropertyGroup matching condition.

        The group and the property are created when missing.
        """
        if not name:
            raise ValueError("name is required")

        group = self.get_property_group(condition)
        if group is None:
            group = append_child(self.project, "PropertyGroup", self.namespace_uri)
            if condition is not None:
                group.set("Condition", condition)

        prop = group.find(self._q(name))
        if prop is None:
            prop = append_child(group, name, self.namespace_uri)
        prop.text = text
        return prop

    def remove_strong_name(self) -> bool:
        """
        Drop assembly signing.

        Removes the PropertyGroup that enables SignAssembly and the item
        for the key file named by AssemblyOriginatorKeyFile.

        Returns:
            True if anything was removed
        """
        removed = False

        # Read before the group goes; both usually live in the same PropertyGroup
        key_file = self.get_property("AssemblyOriginatorKeyFile")
        key_name = (key_file.text or "").strip() if key_file is not None else ""

        sign = self.get_property("SignAssembly")
        if sign is not None and (sign.text or "").strip().lower() == "true":
            removed = detach(sign.getparent())

        if key_name:
            removed = self.remove_include(key_name) or removed

        return removed

    # =========================================================================
    # Persistence
    # =========================================================================

    def save(self, file_path: Optional[str] = None) -> None:
        save_document(self.document, file_path or self.file_path)


class ExplicitListProject(MsBuildProject):
    """Legacy project: compiled files are exactly the listed items."""

    dialect = Dialect.EXPLICIT_LIST


class ImplicitEnumerationProject(MsBuildProject):
    """
    SDK-style project: compiled files are found on disk.

    Library references merged into it become PackageReference items;
    framework libraries are dropped since the SDK supplies them.
    """

    dialect = Dialect.IMPLICIT_ENUMERATION

    @property
    def framework_references(self) -> frozenset:
        extra = {name.casefold() for name in self.config.framework_references}
        return frozenset({name.casefold() for name in FRAMEWORK_REFERENCES} | extra)

    def compiled_items(self) -> Iterator:
        """
        Walk the project directory (sorted) and synthesize detached items.

        Source extensions give Compile items, resource extensions give
        EmbeddedResource items; Include holds the absolute file path.
        """
        sources = {ext.lower() for ext in self.config.source_extensions}
        resources = {ext.lower() for ext in self.config.resource_extensions}

        for dirpath, dirnames, filenames in os.walk(self.directory_path):
            dirnames.sort()
            for name in sorted(filenames):
                ext = os.path.splitext(name)[1].lower()
                if ext in sources:
                    kind = "Compile"
                elif ext in resources:
                    kind = "EmbeddedResource"
                else:
                    continue
                yield create_element(kind, self.namespace_uri, {"Include": os.path.join(dirpath, name)})

    def _include_candidates(self) -> Iterator:
        # Items written into the document plus the files the SDK globs itself
        return chain(self.item_group_includes(), self.compiled_items())

    def is_framework_reference(self, reference) -> bool:
        if not self.is_reference_include(reference):
            return False
        name = assembly_simple_name(get_include(reference))
        return name is not None and name.casefold() in self.framework_references

    def merge_reference(self, reference):
        if reference is None:
            raise ValueError("reference is required")

        if self.is_framework_reference(reference):
            return None, False

        if local_name(reference) == "Reference":
            return self._ensure_element(reference, self.references(), "PackageReference", get_include(reference))
        return super().merge_reference(reference)
