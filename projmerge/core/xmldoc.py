"""
Document Tree — Thin adapter over lxml.etree for MSBuild project files

Loads a project file into an editable tree, writes it back, and provides
the few element helpers the project model needs:
- Namespace-qualified names (legacy projects live in the MSBuild namespace,
  SDK-style projects have none)
- Include attribute access with blank values treated as missing
- Cross-document re-homing of elements into another document's namespace
"""

import os
from typing import Dict, Optional

from lxml import etree

from ..errors import ProjectLoadError


MSBUILD_NAMESPACE = "http://schemas.microsoft.com/developer/msbuild/2003"
INCLUDE_ATTRIBUTE = "Include"
INDENT = "  "


# =============================================================================
# Load / Save
# =============================================================================

def load_document(file_path: str) -> etree._ElementTree:
    """
    Parse a project file into an lxml tree.

    Blank text is dropped at parse time so the tree can be re-indented
    uniformly on save.

    Raises:
        OSError: file cannot be read
        ProjectLoadError: file is not well-formed XML
    """
    parser = etree.XMLParser(remove_blank_text=True)
    with open(file_path, "rb") as f:
        try:
            return etree.parse(f, parser)
        except etree.XMLSyntaxError as e:
            raise ProjectLoadError(file_path, str(e), cause=e) from e


def save_document(document: etree._ElementTree, file_path: str) -> None:
    """Write a tree as indented UTF-8 with an XML declaration."""
    etree.indent(document.getroot(), space=INDENT)
    document.write(
        os.fspath(file_path),
        xml_declaration=True,
        encoding="utf-8",
        pretty_print=True,
    )


# =============================================================================
# Names
# =============================================================================

def qualify(name: str, namespace_uri: Optional[str]) -> str:
    """Clark-notation tag for name in namespace ('{ns}name' or bare name)."""
    if namespace_uri:
        return f"{{{namespace_uri}}}{name}"
    return name


def is_element(node) -> bool:
    """True for elements, False for comments and processing instructions."""
    return isinstance(node.tag, str)


def local_name(element) -> str:
    return etree.QName(element).localname


def namespace_of(element) -> str:
    return etree.QName(element).namespace or ""


# =============================================================================
# Include attribute
# =============================================================================

def get_include(element) -> Optional[str]:
    """Include attribute, stripped; None when missing or blank."""
    if element is None:
        return None
    value = element.get(INCLUDE_ATTRIBUTE)
    if value is None:
        return None
    value = value.strip()
    return value or None


def same_include(left: Optional[str], right: Optional[str]) -> bool:
    """Case-insensitive Include identity. Missing values never match."""
    if left is None or right is None:
        return False
    return left.casefold() == right.casefold()


# =============================================================================
# Element creation
# =============================================================================

def create_element(name: str, namespace_uri: Optional[str] = None,
                   attributes: Optional[Dict[str, str]] = None):
    """Create a detached element, declaring namespace_uri as default namespace."""
    nsmap = {None: namespace_uri} if namespace_uri else None
    element = etree.Element(qualify(name, namespace_uri), nsmap=nsmap)
    for key, value in (attributes or {}).items():
        element.set(key, value)
    return element


def append_child(parent, name: str, namespace_uri: Optional[str] = None):
    """Create an empty element as the last child of parent."""
    return etree.SubElement(parent, qualify(name, namespace_uri))


def import_element(source, parent, namespace_uri: Optional[str],
                   name: Optional[str] = None):
    """
    Re-home a copy of source as the last child of parent.

    Every copied element is created under namespace_uri regardless of
    the namespace it had in its own document. Attributes are copied by
    local name with their values untouched; text and tails are copied;
    comments and processing instructions are dropped. The copy shares
    no nodes with source.

    Args:
        source: Element to copy (any document)
        parent: Destination element
        namespace_uri: Destination namespace ('' for none)
        name: Local name override for the top-level copy

    Returns:
        The new element, attached to parent
    """
    clone = etree.SubElement(parent, qualify(name or local_name(source), namespace_uri))
    for key, value in source.attrib.items():
        clone.set(etree.QName(key).localname, value)
    clone.text = source.text

    for child in source:
        if not is_element(child):
            continue
        copy = import_element(child, clone, namespace_uri)
        copy.tail = child.tail
    return clone


def detach(element) -> bool:
    """Remove element from its parent. Returns False if it had none."""
    parent = element.getparent()
    if parent is None:
        return False
    parent.remove(element)
    return True
