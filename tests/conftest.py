"""
Shared pytest fixtures for the projmerge test suite.

Usage in tests:
    def test_something(project_factory):
        path = project_factory.legacy("app/A.csproj", compile=["a.cs"])
        project = project_factory.load(path)

    def test_with_graph(legacy_graph):
        # app/A.csproj -> lib/B.csproj, both legacy
        project = legacy_graph.load(legacy_graph.path("app/A.csproj"))
"""

import pytest

from tests.factories import ProjectFactory


@pytest.fixture
def project_factory(tmp_path):
    """Empty ProjectFactory rooted at tmp_path."""
    return ProjectFactory(tmp_path)


@pytest.fixture
def legacy_graph(project_factory):
    """
    Two legacy projects:

    - app/A.csproj: Compile a.cs, ProjectReference ..\\lib\\B.csproj
    - lib/B.csproj: Compile b.cs, Reference X
    """
    project_factory.legacy("lib/B.csproj", compile=["b.cs"], references=["X"])
    project_factory.legacy(
        "app/A.csproj",
        compile=["a.cs"],
        project_references=["..\\lib\\B.csproj"],
    )
    return project_factory


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep user config and PROJMERGE_* environment out of tests."""
    from projmerge.config import ConfigManager

    home = tmp_path / "_home"
    monkeypatch.setattr(ConfigManager, "USER_CONFIG_DIR", home / ".projmerge")
    monkeypatch.setattr(ConfigManager, "USER_CONFIG_FILE", home / ".projmerge" / "config.yaml")
    for name in ("PROJMERGE_SYMBOLS", "PROJMERGE_QUIET", "PROJMERGE_REMOVE_STRONG_NAME"):
        monkeypatch.delenv(name, raising=False)
