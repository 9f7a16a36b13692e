"""
Tests for the reference closure walk

Covers chains, diamonds, cycles, self references and missing projects.
"""

import os

from projmerge.core.closure import collect_reference_closure


def names(projects):
    return [os.path.basename(p.file_path) for p in projects]


class TestClosure:
    """Transitive, deduplicated ProjectReference walk."""

    def test_no_references(self, project_factory):
        root = project_factory.load(project_factory.legacy("a/A.csproj"))
        assert collect_reference_closure(root) == []

    def test_chain(self, project_factory):
        project_factory.legacy("c/C.csproj")
        project_factory.legacy("b/B.csproj", project_references=["..\\c\\C.csproj"])
        root = project_factory.load(project_factory.legacy("a/A.csproj", project_references=["..\\b\\B.csproj"]))

        assert names(root.all_referenced_projects()) == ["B.csproj", "C.csproj"]

    def test_diamond_collected_once(self, project_factory):
        project_factory.legacy("d/D.csproj")
        project_factory.legacy("b/B.csproj", project_references=["../d/D.csproj"])
        project_factory.legacy("c/C.csproj", project_references=["..\\D\\..\\d\\D.csproj"])
        root = project_factory.load(project_factory.legacy(
            "a/A.csproj", project_references=["..\\b\\B.csproj", "..\\c\\C.csproj"]
        ))

        assert names(collect_reference_closure(root)) == ["B.csproj", "D.csproj", "C.csproj"]

    def test_cycle_terminates(self, project_factory):
        project_factory.legacy("b/B.csproj", project_references=["..\\a\\A.csproj"])
        root = project_factory.load(project_factory.legacy("a/A.csproj", project_references=["..\\b\\B.csproj"]))

        assert names(collect_reference_closure(root)) == ["B.csproj"]

    def test_longer_cycle(self, project_factory):
        project_factory.legacy("c/C.csproj", project_references=["..\\b\\B.csproj"])
        project_factory.legacy("b/B.csproj", project_references=["..\\c\\C.csproj"])
        root = project_factory.load(project_factory.legacy("a/A.csproj", project_references=["..\\b\\B.csproj"]))

        assert names(collect_reference_closure(root)) == ["B.csproj", "C.csproj"]

    def test_self_reference(self, project_factory):
        root = project_factory.load(project_factory.legacy("a/A.csproj", project_references=["A.csproj"]))
        assert collect_reference_closure(root) == []

    def test_root_never_included(self, project_factory):
        project_factory.legacy("b/B.csproj", project_references=["..\\a\\A.csproj"])
        root = project_factory.load(project_factory.legacy("a/A.csproj", project_references=["..\\b\\B.csproj"]))
        assert root not in collect_reference_closure(root)

    def test_missing_skipped(self, project_factory):
        project_factory.legacy("b/B.csproj", project_references=["..\\missing\\M.csproj"])
        root = project_factory.load(project_factory.legacy("a/A.csproj", project_references=["..\\b\\B.csproj"]))
        assert names(collect_reference_closure(root)) == ["B.csproj"]

    def test_mixed_dialects(self, project_factory):
        project_factory.sdk("core/Core.csproj")
        project_factory.legacy("b/B.csproj", project_references=["..\\core\\Core.csproj"])
        root = project_factory.load(project_factory.sdk("a/A.csproj", project_references=["..\\b\\B.csproj"]))

        closure = collect_reference_closure(root)
        assert names(closure) == ["B.csproj", "Core.csproj"]
        assert [p.dialect.value for p in closure] == ["explicit-list", "implicit-enumeration"]

    def test_recomputed_each_call(self, project_factory):
        root_path = project_factory.legacy("a/A.csproj", project_references=["..\\b\\B.csproj"])
        root = project_factory.load(root_path)
        assert collect_reference_closure(root) == []

        project_factory.legacy("b/B.csproj")
        assert names(collect_reference_closure(root)) == ["B.csproj"]
