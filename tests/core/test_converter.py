from figmaqml_toolkit.core.converter import build_components, canvases, component, element
from figmaqml_toolkit.core.converter.figma_to_qml import parse_node
from figmaqml_toolkit.core.exceptions import ErrorKind
from figmaqml_toolkit.core.models import ComponentRegistry, Flags

from tests.fakes import identity_font, registry_of
from tests.nodes import boolean, component as component_node, document, frame, instance_of, page, rect, text

GRADIENT = [{"type": "GRADIENT_LINEAR", "gradientHandlePositions": []}]


def _element(node, sink, images, flags=Flags.NONE, registry=None):
    return element(node, flags, sink, images, identity_font, registry or ComponentRegistry())


class TestElement:
    def test_frame_with_children(self, sink, images):
        node = frame("1:1", "Home Screen", [rect("1:2"), text("1:3")])
        result = _element(node, sink, images)
        assert result.success
        generated = result.value
        assert generated.name == "Home_Screen_figma"
        assert generated.id == "1:1"
        assert generated.type == "FRAME"
        assert generated.components == ()
        assert generated.text.startswith("Rectangle {\n    id: figma_1_1\n")
        assert "    Shape {\n        id: figma_1_2\n" in generated.text
        assert "    Text {\n        id: figma_1_3\n" in generated.text
        assert generated.text.endswith("}\n")
        assert sink.errors == []

    def test_unsupported_child_fails_without_output(self, sink, images):
        node = frame("1:1", children=[rect("1:2"), {"id": "9:9", "type": "STICKY", "name": "Note"}])
        result = _element(node, sink, images)
        assert not result.success
        assert result.value is None
        assert result.kind is ErrorKind.UNSUPPORTED_TYPE
        assert sink.errors == [('[Node: 9:9] Non supported object type:"STICKY"', True)]

    def test_boolean_arity_reported(self, sink, images):
        node = frame("1:1", children=[boolean("UNION", [rect("3:1")])])
        result = _element(node, sink, images, Flags.BREAK_BOOLEANS)
        assert result.kind is ErrorKind.BOOLEAN_ARITY
        assert len(sink.errors) == 1
        assert "Boolean needs at least two elements" in sink.errors[0][0]

    def test_instances_reported_as_components(self, sink, images):
        button = component_node("10:1", "Button")
        icon = component_node("10:5", "Icon")
        node = frame("1:1", children=[instance_of(icon, "20:2"), instance_of(button, "20:1")])
        result = _element(node, sink, images, registry=registry_of(button, icon))
        assert result.value.components == ("10:1", "10:5")
        assert "    Button_figma {\n" in result.value.text

    def test_missing_component_reported(self, sink, images):
        node = frame("1:1", children=[instance_of(component_node("10:1", "Button"), "20:1")])
        result = _element(node, sink, images)
        assert result.kind is ErrorKind.MISSING_COMPONENT

    def test_gradient_vector_is_prerendered(self, sink, images):
        node = frame("1:1", children=[rect("img-1", fills=GRADIENT)])
        text_out = _element(node, sink, images).value.text
        assert "Shape {" not in text_out
        assert "data:image/png;base64,AAAA" in text_out

    def test_slice_emits_nothing(self, sink, images):
        node = frame("1:1", children=[{"id": "1:9", "type": "SLICE", "name": "Export"}])
        generated = _element(node, sink, images).value
        assert "figma_1_9" not in generated.text

    def test_center_constraint_uses_direct_parent(self, sink, images):
        inner = frame("1:2", "Inner", [rect("1:3", x=45, constraints={"horizontal": "CENTER", "vertical": "TOP"})])
        node = frame("1:1", children=[inner])
        out = _element(node, sink, images).value.text
        assert "x: (figma_1_2.width - width) / 2\n" in out

    def test_component_forces_definition(self, sink, images):
        button = component_node("10:1", "Button", [rect("10:2")])
        result = component(button, Flags.NONE, sink, images, identity_font, registry_of(button))
        assert result.success
        assert "Component.onCompleted: {" in result.value.text
        assert result.value.name == "Button_figma"

    def test_nested_structure_balanced(self, make_ctx):
        button = component_node("10:1", "Button", [rect("10:2")])
        tree = frame("1:1", children=[
            rect("1:2", isMask=True),
            frame("1:3", children=[text("1:4"), boolean("SUBTRACT", [rect("3:1"), rect("3:2")])]),
            instance_of(button, "20:1", fills=[]),
        ])
        ctx = make_ctx(Flags.BREAK_BOOLEANS, registry=registry_of(button))
        out = parse_node(ctx, tree, 1, tree)
        assert out.count("{") == out.count("}")
        assert ctx.component_ids == {"10:1"}


class TestDocumentEntryPoints:
    def test_canvases(self, sink):
        doc = document([page([rect("1:2")], "0:1", "Home")])
        result = canvases(doc, sink)
        assert result.success
        assert [c.name for c in result.value] == ["Home"]

    def test_build_components(self, sink, fetcher):
        button = component_node("10:1", "Button")
        result = build_components(document([page([button])], {"10:1": {}}), sink, fetcher)
        assert result.success
        assert result.value["10:1"].name == "Button_figma"

    def test_build_components_failure_reported_once(self, sink, fetcher):
        remote = component_node("99:1", "Remote")
        doc = document([page([instance_of(remote, "20:1")])])
        result = build_components(doc, sink, fetcher)
        assert not result.success
        assert result.kind is ErrorKind.MISSING_COMPONENT
        assert sink.errors == [("Component not found 99:1", True)]
