"""
Tests for the lxml document adapter

These tests validate:
- Load failures (malformed XML, unreadable file)
- Include attribute access
- Cross-document re-homing between namespaced and plain documents
- Save output re-parses without stray namespace prefixes
"""

import pytest
from lxml import etree

from projmerge.errors import ProjectLoadError
from projmerge.core.xmldoc import (
    MSBUILD_NAMESPACE, append_child, create_element, detach, get_include,
    import_element, load_document, local_name, namespace_of, qualify,
    same_include, save_document,
)


LEGACY = f"""<Project xmlns="{MSBUILD_NAMESPACE}">
  <ItemGroup>
    <Compile Include="Form1.cs">
      <SubType>Form</SubType>
      <!-- designer -->
      <DependentUpon>Form1.Designer.cs</DependentUpon>
    </Compile>
  </ItemGroup>
</Project>
"""

SDK = """<Project Sdk="Microsoft.NET.Sdk">
  <ItemGroup>
    <PackageReference Include="Serilog" Version="3.0.0" />
  </ItemGroup>
</Project>
"""


class TestLoad:
    """Loading project files."""

    def test_loads_well_formed(self, tmp_path):
        path = tmp_path / "a.csproj"
        path.write_text(SDK)
        tree = load_document(str(path))
        assert local_name(tree.getroot()) == "Project"

    def test_malformed_raises_load_error(self, tmp_path):
        path = tmp_path / "broken.csproj"
        path.write_text("<Project><ItemGroup></Project>")
        with pytest.raises(ProjectLoadError) as exc:
            load_document(str(path))
        assert exc.value.file_path == str(path)
        assert isinstance(exc.value.cause, etree.XMLSyntaxError)

    def test_missing_file_raises_os_error(self, tmp_path):
        with pytest.raises(OSError):
            load_document(str(tmp_path / "missing.csproj"))


class TestNames:
    """Qualified names and Include access."""

    def test_qualify_with_namespace(self):
        assert qualify("Compile", MSBUILD_NAMESPACE) == f"{{{MSBUILD_NAMESPACE}}}Compile"

    def test_qualify_without_namespace(self):
        assert qualify("Compile", "") == "Compile"
        assert qualify("Compile", None) == "Compile"

    def test_namespace_of(self):
        assert namespace_of(etree.fromstring(LEGACY)) == MSBUILD_NAMESPACE
        assert namespace_of(etree.fromstring(SDK)) == ""

    def test_get_include_strips(self):
        element = create_element("Compile", attributes={"Include": "  a.cs "})
        assert get_include(element) == "a.cs"

    def test_get_include_blank_is_none(self):
        assert get_include(create_element("Compile", attributes={"Include": "   "})) is None
        assert get_include(create_element("Compile")) is None
        assert get_include(None) is None

    def test_same_include_ignores_case(self):
        assert same_include("Lib\\A.cs", "lib\\a.CS")
        assert not same_include("a.cs", "b.cs")

    def test_same_include_missing_never_matches(self):
        assert not same_include(None, None)
        assert not same_include("a.cs", None)


class TestImportElement:
    """Re-homing elements between documents."""

    def test_namespaced_into_plain(self):
        source = etree.fromstring(LEGACY)[0][0]
        target = etree.fromstring(SDK)
        group = append_child(target, "ItemGroup")

        clone = import_element(source, group, "")

        assert clone.tag == "Compile"
        assert clone.get("Include") == "Form1.cs"
        assert [child.tag for child in clone] == ["SubType", "DependentUpon"]
        assert clone[0].text == "Form"

    def test_plain_into_namespaced(self):
        source = etree.fromstring(SDK)[0][0]
        target = etree.fromstring(LEGACY)

        clone = import_element(source, target[0], MSBUILD_NAMESPACE)

        assert clone.tag == qualify("PackageReference", MSBUILD_NAMESPACE)
        assert clone.get("Version") == "3.0.0"
        assert b"ns0" not in etree.tostring(target)

    def test_rename_top_level(self):
        source = etree.fromstring(LEGACY)[0][0]
        target = etree.fromstring(SDK)[0]
        clone = import_element(source, target, "", name="None")
        assert clone.tag == "None"
        assert clone[0].tag == "SubType"

    def test_comments_dropped(self):
        source = etree.fromstring(LEGACY)[0][0]
        clone = import_element(source, etree.fromstring(SDK)[0], "")
        assert all(isinstance(child.tag, str) for child in clone)

    def test_copy_shares_nothing(self):
        source = etree.fromstring(LEGACY)[0][0]
        clone = import_element(source, etree.fromstring(SDK)[0], "")

        clone.set("Include", "changed.cs")
        clone[0].text = "UserControl"

        assert source.get("Include") == "Form1.cs"
        assert source[0].text == "Form"

    def test_attribute_namespace_dropped(self):
        source = etree.fromstring(
            '<Compile xmlns:x="urn:x" Include="a.cs" x:Flag="1" />'
        )
        clone = import_element(source, etree.fromstring(SDK)[0], "")
        assert clone.get("Flag") == "1"


class TestSaveAndDetach:
    """Writing trees back to disk."""

    def test_save_round_trip(self, tmp_path):
        path = tmp_path / "a.csproj"
        path.write_text(LEGACY)
        tree = load_document(str(path))
        append_child(tree.getroot()[0], "Compile", MSBUILD_NAMESPACE).set("Include", "b.cs")

        out = tmp_path / "out.csproj"
        save_document(tree, str(out))

        text = out.read_text(encoding="utf-8")
        assert text.startswith("<?xml")
        assert "ns0" not in text
        assert '<Compile Include="b.cs"/>' in text
        reparsed = etree.parse(str(out)).getroot()
        assert namespace_of(reparsed) == MSBUILD_NAMESPACE

    def test_detach(self):
        root = etree.fromstring(SDK)
        reference = root[0][0]
        assert detach(reference) is True
        assert len(root[0]) == 0
        assert detach(reference) is False
