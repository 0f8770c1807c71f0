import pytest

from figmaqml_toolkit.core.exceptions import ErrorKind, UnsupportedNodeTypeError
from figmaqml_toolkit.core.parser.classifier import TYPE_TABLE, ItemType, classify, is_group


class TestClassify:
    @pytest.mark.parametrize(
        "tag, expected",
        [
            ("RECTANGLE", ItemType.VECTOR),
            ("ELLIPSE", ItemType.VECTOR),
            ("VECTOR", ItemType.VECTOR),
            ("LINE", ItemType.VECTOR),
            ("REGULAR_POLYGON", ItemType.VECTOR),
            ("STAR", ItemType.VECTOR),
            ("TEXT", ItemType.TEXT),
            ("FRAME", ItemType.FRAME),
            ("GROUP", ItemType.FRAME),
            ("COMPONENT", ItemType.COMPONENT),
            ("BOOLEAN_OPERATION", ItemType.BOOLEAN),
            ("INSTANCE", ItemType.INSTANCE),
            ("SLICE", ItemType.NONE),
            ("NONE", ItemType.NONE),
        ],
    )
    def test_supported_tags(self, tag, expected):
        assert classify({"type": tag, "id": "1:1"}) is expected

    def test_every_category_reachable(self):
        """Each category has at least one raw tag mapped to it."""
        assert set(TYPE_TABLE.values()) == set(ItemType)

    def test_unknown_tag_fails(self):
        with pytest.raises(UnsupportedNodeTypeError) as info:
            classify({"type": "STICKY", "id": "3:4"})
        assert info.value.kind is ErrorKind.UNSUPPORTED_TYPE
        assert str(info.value) == '[Node: 3:4] Non supported object type:"STICKY"'

    def test_missing_tag_fails(self):
        with pytest.raises(UnsupportedNodeTypeError):
            classify({"id": "3:4"})

    def test_is_group(self):
        assert is_group({"type": "GROUP"})
        assert not is_group({"type": "FRAME"})
