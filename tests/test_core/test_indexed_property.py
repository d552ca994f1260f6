import pytest

from dynadapter import IndexedProperty, indexer
from dynadapter.indexer import BoundIndexer, normalize_key, pack_key
from dynadapter.utils import EMPTY


class Name:
    def __init__(self, text: str):
        self.text = text

    @indexer
    def tail(self, index: int) -> str:
        """Characters from `index` on."""
        return self.text[index:]

    @indexer
    def window(self, start: int, length: int) -> str:
        return self.text[start : start + length]

    @window.setter
    def window(self, start: int, length: int, value: str) -> None:
        self.text = self.text[:start] + value + self.text[start + length :]


class TestIndexedProperty:
    def test_single_index(self):
        assert Name("Alice").tail[1] == "lice"

    def test_multiple_indices(self):
        assert Name("Alice").window[1, 2] == "li"

    def test_setter(self):
        name = Name("Alice")
        name.window[0, 1] = "M"
        assert name.text == "Mlice"

    def test_read_only(self):
        with pytest.raises(AttributeError, match="read-only"):
            Name("Alice").tail[0] = "x"

    def test_write_only(self):
        class Sink:
            def _put(self, index: int, value: str) -> None:
                pass

            slot = IndexedProperty(fset=_put, arity=1)

        with pytest.raises(AttributeError, match="not readable"):
            Sink().slot[0]
        Sink().slot[0] = "x"

    def test_cannot_be_rebound(self):
        with pytest.raises(AttributeError):
            Name("Alice").tail = "x"

    def test_wrong_index_count(self):
        with pytest.raises(TypeError, match="expected 2 indices"):
            Name("Alice").window[1]

    def test_class_access_returns_descriptor(self):
        descriptor = Name.window
        assert isinstance(descriptor, IndexedProperty)
        assert descriptor.name == "window"
        assert descriptor.index_types == (int, int)
        assert descriptor.value_type is str
        assert descriptor.arity == 2
        assert descriptor.readable and descriptor.writable

    def test_doc_is_taken_from_getter(self):
        assert Name.tail.__doc__ == "Characters from `index` on."

    def test_instance_access_is_bound(self):
        assert isinstance(Name("Alice").tail, BoundIndexer)
        assert "tail" in repr(Name.tail)

    def test_unannotated_getter(self):
        @indexer
        def loose(self, key):
            return key

        assert loose.index_types == (EMPTY,)
        assert loose.value_type is EMPTY


@pytest.mark.parametrize(
    "key, arity, expected",
    [
        (3, 1, (3,)),
        ((1, 2), 1, ((1, 2),)),
        ((1, 2), 2, (1, 2)),
        ("a", 1, ("a",)),
    ],
)
def test_normalize_key(key, arity, expected):
    assert normalize_key(key, arity) == expected
    assert pack_key(expected) == key
