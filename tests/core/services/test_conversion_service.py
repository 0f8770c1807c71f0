import json

import pytest

from figmaqml_toolkit.core.exceptions import ConversionError, ErrorKind
from figmaqml_toolkit.core.models import Flags
from figmaqml_toolkit.core.services import ConversionService

from tests.nodes import boolean, component, document, frame, instance_of, page, rect


@pytest.fixture
def design():
    """Two pages: a screen using a button, and the component library."""
    icon = component("10:5", "Icon", [rect("10:6", "Glyph")])
    button = component("10:1", "Button", [rect("10:2", "Background"), instance_of(icon, "10:3")])
    screen = frame("1:1", "Home Screen", [instance_of(button, "20:1")])
    return document(
        [page([screen], "0:1", "Screens"), page([button, icon], "0:2", "Library")],
        {"10:1": {"name": "Button"}, "10:5": {"name": "Icon"}},
    )


@pytest.fixture
def service(images, fetcher, sink):
    return ConversionService(image_provider=images, node_fetcher=fetcher, error_sink=sink)


class TestConvert:
    def test_defaults_from_config(self, service):
        assert service.flags == Flags.BREAK_BOOLEANS
        assert service.placeholder == "placeholder"
        assert "componentId" in service.instance_ignored_keys

    def test_elements_and_component_closure(self, service, design):
        package = service.convert(design, ["Screens"])
        assert [e.name for e in package.elements] == ["Home_Screen_figma"]
        # the button pulls in the icon it uses
        assert [c.name for c in package.components] == ["Button_figma", "Icon_figma"]
        button = package.components[0]
        assert "Component.onCompleted: {" in button.text
        assert "Icon_figma {" in button.text

    def test_canvas_components_written_once(self, service, design):
        package = service.convert(design)
        names = [g.name for g in package.files()]
        assert names == ["Home_Screen_figma", "Button_figma", "Icon_figma"]

    def test_unlisted_canvas_component_generated(self, service):
        doc = document([page([component("10:1", "Badge", [rect("10:2")])])])
        package = service.convert(doc)
        assert package.elements == []
        assert [c.name for c in package.components] == ["Badge_figma"]

    def test_duplicate_element_names_numbered(self, service):
        doc = document([page([frame("1:1", "Card"), frame("1:2", "Card")])])
        package = service.convert(doc)
        assert [(e.id, e.name) for e in package.elements] == [("1:1", "Card_figma"), ("1:2", "Card_1_figma")]

    def test_element_never_takes_a_component_name(self, service, design):
        """A screen named like a component must not replace its definition file."""
        design["document"]["children"][0]["children"].append(frame("1:2", "Button"))
        package = service.convert(design)
        names = [g.name for g in package.files()]
        assert names == ["Home_Screen_figma", "Button_1_figma", "Button_figma", "Icon_figma"]
        assert len(set(names)) == len(names)

    def test_unknown_canvas(self, service, design):
        with pytest.raises(ValueError, match="Unknown canvas"):
            service.convert(design, ["Missing"])

    def test_failure_raises_after_reporting(self, service, sink):
        doc = document([page([frame("1:1", children=[boolean("UNION", [rect("3:1")])])])])
        with pytest.raises(ConversionError) as info:
            service.convert(doc)
        assert info.value.kind is ErrorKind.BOOLEAN_ARITY
        assert len(sink.errors) == 1 and sink.errors[0][1] is True

    def test_explicit_flags(self, images, fetcher, sink, design):
        service = ConversionService(flags=Flags.PRERENDER_INSTANCES, image_provider=images,
                                    node_fetcher=fetcher, error_sink=sink)
        package = service.convert(design, ["Screens"])
        assert package.components == []
        assert "Image {" in package.elements[0].text


class TestWritePackage:
    def test_one_file_per_element(self, service, design, tmp_path):
        written = service.write_package(service.convert(design), tmp_path / "out")
        assert sorted(p.name for p in written) == ["Button_figma.qml", "Home_Screen_figma.qml", "Icon_figma.qml"]
        content = (tmp_path / "out" / "Home_Screen_figma.qml").read_text(encoding="utf-8")
        header, rest = content.split("\n", 1)
        assert header.startswith("// Generated by figmaqml-toolkit ")
        assert '"Design"' in header
        assert rest.startswith("import QtQuick 2.15\nimport QtQuick.Shapes 1.15\nimport QtGraphicalEffects 1.15\n\n")
        assert rest.split("\n\n", 1)[1].startswith("Rectangle {\n    id: figma_1_1\n")

    def test_same_names_keep_separate_files(self, service, tmp_path):
        button = component("10:1", "Button", [rect("10:2")])
        doc = document(
            [page([frame("1:1", "Card"), frame("1:2", "Card"), frame("1:3", "Button", [instance_of(button, "20:1")])]),
             page([button], "0:2", "Library")],
            {"10:1": {"name": "Button"}},
        )
        written = service.write_package(service.convert(doc), tmp_path / "out")
        assert [p.name for p in written] == [
            "Card_figma.qml", "Card_1_figma.qml", "Button_1_figma.qml", "Button_figma.qml",
        ]
        assert sorted(p.name for p in (tmp_path / "out").iterdir()) == sorted(p.name for p in written)
        definition = (tmp_path / "out" / "Button_figma.qml").read_text(encoding="utf-8")
        assert "Component.onCompleted: {" in definition
        screen = (tmp_path / "out" / "Button_1_figma.qml").read_text(encoding="utf-8")
        assert "Button_figma {" in screen

    def test_convert_and_write(self, service, design, tmp_path):
        source = tmp_path / "design.json"
        source.write_text(json.dumps(design), encoding="utf-8")
        written = service.convert_and_write(source, tmp_path / "out", ["Screens"])
        assert len(written) == 3
        assert all(p.exists() for p in written)


class TestLoadDocument:
    def test_missing_file(self, service, tmp_path):
        with pytest.raises(FileNotFoundError):
            service.load_document(tmp_path / "nope.json")

    def test_invalid_json(self, service, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{", encoding="utf-8")
        with pytest.raises(ValueError, match="Invalid JSON document"):
            service.load_document(path)

    def test_not_an_object(self, service, tmp_path):
        path = tmp_path / "list.json"
        path.write_text("[]", encoding="utf-8")
        with pytest.raises(ValueError, match="not a JSON object"):
            service.load_document(path)

    def test_assets_dir_collaborators(self, tmp_path):
        (tmp_path / "components").mkdir()
        service = ConversionService(assets_dir=tmp_path)
        assert service.node_fetcher("1:1") == b""
        assert service.image_provider("ref", False) == b""
