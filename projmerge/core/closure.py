"""
Reference Closure — Transitive walk over ProjectReference edges

Depth-first, first discovery wins. Projects compare by identity
(absolute path, case-insensitive), so a project reached along several
paths is collected once. Cycles terminate: a project currently on the
walk's path is not entered again.
"""

from typing import TYPE_CHECKING, List, Set

if TYPE_CHECKING:
    from .project import MsBuildProject


def collect_reference_closure(root: 'MsBuildProject') -> List['MsBuildProject']:
    """
    All projects reachable from root, in discovery order, excluding root.

    Args:
        root: Project to start from

    Returns:
        Deduplicated list of referenced projects
    """
    collected: List['MsBuildProject'] = []
    seen: Set['MsBuildProject'] = set()
    active: Set['MsBuildProject'] = {root}

    def visit(project: 'MsBuildProject') -> None:
        for child in project.referenced_projects():
            if child in active or child in seen:
                continue

            seen.add(child)
            collected.append(child)

            active.add(child)
            visit(child)
            active.discard(child)

    visit(root)
    return collected
