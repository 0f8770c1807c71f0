import pytest

from figmaqml_toolkit.core.exceptions import ImageLoadError
from figmaqml_toolkit.core.generators.rendered import bounding_size, parse_rendered, should_prerender
from figmaqml_toolkit.core.models import Flags

from tests.fakes import FakeImages
from tests.nodes import component, frame, instance_of, rect, text

GRADIENT = [{"type": "GRADIENT_LINEAR", "gradientHandlePositions": [], "gradientStops": []}]


class TestShouldPrerender:
    def test_explicit_marker(self, make_ctx):
        assert should_prerender(make_ctx(), frame(isRendering=True))

    def test_plain_nodes_not_rendered(self, make_ctx):
        ctx = make_ctx()
        for node in (rect(), text(), frame(), frame(node_type="GROUP"), component()):
            assert not should_prerender(ctx, node)

    def test_gradients(self, make_ctx):
        assert should_prerender(make_ctx(), rect(fills=GRADIENT))
        assert should_prerender(make_ctx(), text(fills=GRADIENT))
        # frames draw gradients themselves only when asked to
        assert not should_prerender(make_ctx(), frame(fills=GRADIENT))

    @pytest.mark.parametrize(
        "flag, node",
        [
            (Flags.PRERENDER_SHAPES, rect()),
            (Flags.PRERENDER_FRAMES, frame()),
            (Flags.PRERENDER_GROUPS, frame(node_type="GROUP")),
            (Flags.PRERENDER_COMPONENTS, component()),
            (Flags.PRERENDER_INSTANCES, instance_of(component())),
        ],
    )
    def test_category_flags(self, make_ctx, flag, node):
        assert should_prerender(make_ctx(flag), node)
        assert not should_prerender(make_ctx(Flags.NONE), node)

    def test_frame_flag_skips_groups(self, make_ctx):
        assert not should_prerender(make_ctx(Flags.PRERENDER_FRAMES), frame(node_type="GROUP"))


class TestParseRendered:
    def test_bounding_size_covers_descendants(self):
        child = rect(x=90, y=90, w=20, h=30)
        child["absoluteBoundingBox"] = {"x": 90, "y": 90, "width": 20, "height": 30}
        assert bounding_size(frame(children=[child])) == (110.0, 120.0)

    def test_snapshot_relative_to_parent(self, make_ctx):
        images = FakeImages({"1:2": b"data:image/png;base64,SNAP"})
        parent = frame("1:1")
        parent["absoluteBoundingBox"] = {"x": 10, "y": 20, "width": 100, "height": 100}
        node = rect(children=[rect("1:5")])
        node["absoluteBoundingBox"] = {"x": 15, "y": 25, "width": 10, "height": 10}
        out = parse_rendered(make_ctx(image_provider=images), node, 1, parent)
        assert out.startswith("Item {\n    id: figma_1_2\n")
        assert "    x: 5\n    y: 5\n" in out
        assert "        id: i_figma_1_2\n" in out
        assert 'source: "data:image/png;base64,SNAP"' in out
        assert "figma_1_5" not in out
        assert images.calls == [("1:2", True)]

    def test_placeholder_fallback(self, make_ctx):
        images = FakeImages({"placeholder": b"data:image/png;base64,PPPP"})
        node = rect()
        out = parse_rendered(make_ctx(image_provider=images), node, 1, node)
        assert "//Image load failed, placeholder" in out
        assert "PPPP" in out
        assert images.calls == [("1:2", True), ("placeholder", True)]

    def test_missing_placeholder_fails(self, make_ctx):
        node = rect()
        with pytest.raises(ImageLoadError, match="Cannot load placeholder"):
            parse_rendered(make_ctx(image_provider=FakeImages()), node, 1, node)

    def test_invisible_node_has_no_image(self, make_ctx):
        images = FakeImages()
        node = rect(visible=False)
        out = parse_rendered(make_ctx(image_provider=images), node, 1, node)
        assert "Image {" not in out
        assert images.calls == []
