import collections
import os
import sys
import unittest
import weakref
from dataclasses import dataclass, field
from types import MappingProxyType


ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SRC = os.path.join(ROOT, "src")
if SRC not in sys.path:
    sys.path.insert(0, SRC)

from jsptr import Destination, NotFound, OutOfBounds, TypeMismatch, assign, new
from jsptr.json_text import JSONTextSource
from jsptr.sources import (
    MapSource,
    RecordSource,
    ScalarSource,
    SequenceSource,
    resolve_source,
)


@dataclass
class Leaf:
    baz: str = field(default="", metadata={"json": "baz"})


class CustomSource:
    """Looks keys up with a ``custom_`` prefix."""

    def __init__(self, data: dict) -> None:
        self.data = data

    def resolve_json_pointer(self, dst: Destination, ptrspec: str) -> None:
        if ptrspec == "":
            assign(dst, self.data)
            return
        key = "custom_" + ptrspec[1:]
        if key not in self.data:
            raise NotFound("key not found", ptrspec)
        assign(dst, self.data[key])


class Opaque:
    pass


class TestResolveSource(unittest.TestCase):
    def test_custom_source_used_unchanged(self) -> None:
        custom = CustomSource({})
        self.assertIs(resolve_source(custom), custom)

    def test_source_class_is_not_custom(self) -> None:
        self.assertIsInstance(resolve_source(CustomSource), ScalarSource)

    def test_text_is_json(self) -> None:
        self.assertIsInstance(resolve_source("{}"), JSONTextSource)
        self.assertIsInstance(resolve_source(b"[]"), JSONTextSource)

    def test_string_keyed_mapping(self) -> None:
        self.assertIsInstance(resolve_source({"a": 1}), MapSource)
        self.assertIsInstance(resolve_source({}), MapSource)
        self.assertIsInstance(resolve_source(MappingProxyType({"a": 1})), MapSource)

    def test_non_string_keyed_mapping(self) -> None:
        with self.assertRaises(TypeMismatch):
            resolve_source({1: "one", 2: "two"})

    def test_sequences(self) -> None:
        for value in ([1], (1, 2), range(3), collections.deque([1])):
            with self.subTest(value=value):
                self.assertIsInstance(resolve_source(value), SequenceSource)

    def test_record(self) -> None:
        self.assertIsInstance(resolve_source(Leaf()), RecordSource)

    def test_scalars(self) -> None:
        for value in (42, 3.14, True, None, Opaque()):
            with self.subTest(value=value):
                self.assertIsInstance(resolve_source(value), ScalarSource)

    def test_dispatch_is_logged(self) -> None:
        cases = [
            ("{}", "kind=json_text"),
            ({"a": 1}, "kind=keyed"),
            ([1], "kind=indexed"),
            (Leaf(), "kind=record"),
            (42, "kind=scalar"),
            (CustomSource({}), "kind=custom"),
        ]
        for target, expected in cases:
            with self.subTest(expected=expected):
                with self.assertLogs("jsptr.sources", level="DEBUG") as logs:
                    resolve_source(target)
                self.assertTrue(any(expected in line for line in logs.output))

    def test_live_reference_is_followed(self) -> None:
        leaf = Leaf(baz="x")
        self.assertIsInstance(resolve_source(weakref.ref(leaf)), RecordSource)

    def test_dead_reference_is_scalar(self) -> None:
        leaf = Leaf()
        ref = weakref.ref(leaf)
        del leaf
        source = resolve_source(ref)
        self.assertIsInstance(source, ScalarSource)
        self.assertIs(new("").get(ref), ref)
        with self.assertRaises(TypeMismatch):
            new("/baz").get(ref)


class TestScalarSource(unittest.TestCase):
    def test_root(self) -> None:
        for value in (42, True, 3.14, None):
            with self.subTest(value=value):
                self.assertEqual(new("").get(value), value)

    def test_any_path_fails(self) -> None:
        for value, ptr in ((42, "/foo"), (True, "/0"), (None, "/foo"), (1.5, "/")):
            with self.subTest(value=value, ptr=ptr):
                with self.assertRaises(TypeMismatch):
                    new(ptr).get(value)


class TestMapSource(unittest.TestCase):
    DATA = {
        "foo": "bar",
        "array": [1, 2, 3],
        "nested": {"key": "value", "num": 42},
    }

    def test_root_is_same_map(self) -> None:
        self.assertIs(new("").get(self.DATA), self.DATA)

    def test_deep_path(self) -> None:
        data = {"foo": {"bar": {"baz": "hello world"}}}
        self.assertEqual(new("/foo/bar/baz").get(data, str), "hello world")

    def test_array_element_keeps_type(self) -> None:
        self.assertEqual(new("/array/1").get(self.DATA), 2)

    def test_nested_property(self) -> None:
        self.assertEqual(new("/nested/key").get(self.DATA), "value")

    def test_typed_value_maps(self) -> None:
        self.assertEqual(new("/foo").get({"foo": 42, "bar": 24}), 42)
        self.assertEqual(new("/key").get({"key": "value"}), "value")

    def test_missing_key(self) -> None:
        with self.assertRaises(NotFound):
            new("/missing").get(self.DATA)

    def test_bad_index(self) -> None:
        with self.assertRaises(TypeMismatch):
            new("/array/x").get(self.DATA)
        with self.assertRaises(OutOfBounds):
            new("/array/3").get(self.DATA)

    def test_cannot_index_into_leaf(self) -> None:
        with self.assertRaises(TypeMismatch):
            new("/foo/0").get(self.DATA)

    def test_escaped_keys(self) -> None:
        data = {"foo/bar": 1, "foo~bar": 2, "foo~1bar": 3}
        self.assertEqual(new("/foo~1bar").get(data), 1)
        self.assertEqual(new("/foo~0bar").get(data), 2)
        self.assertEqual(new("/foo~01bar").get(data), 3)
        with self.assertRaises(NotFound):
            new("/foo/bar").get(data)

    def test_nested_non_string_keyed_mapping(self) -> None:
        with self.assertRaises(TypeMismatch):
            new("/m/1").get({"m": {1: "one"}})
        with self.assertRaises(TypeMismatch):
            new("/a/0/1").get({"a": [{1: "one", "1": "str"}]})

    def test_nested_non_string_keyed_mapping_as_leaf(self) -> None:
        self.assertEqual(new("/m").get({"m": {1: "one"}}), {1: "one"})

    def test_source_is_not_mutated(self) -> None:
        data = {"a": [1, {"b": 2}]}
        new("/a/1/b").get(data)
        self.assertEqual(data, {"a": [1, {"b": 2}]})


class TestSequenceSource(unittest.TestCase):
    def test_example_slice(self) -> None:
        data = ["foo", "bar", "baz", "hello world"]
        self.assertEqual(new("/3").get(data, str), "hello world")

    def test_root_is_same_sequence(self) -> None:
        data = (10, 20, 30)
        self.assertIs(new("").get(data), data)

    def test_tuple_element(self) -> None:
        self.assertEqual(new("/2").get((10, 20, 30)), 30)

    def test_nested_lists(self) -> None:
        self.assertEqual(new("/0/1").get([[1, 2], [3, 4]]), 2)

    def test_heterogeneous_elements(self) -> None:
        data = [{"k": "v"}, Leaf(baz="leaf"), '{"j": [true]}']
        self.assertEqual(new("/0/k").get(data), "v")
        self.assertEqual(new("/1/baz").get(data), "leaf")
        self.assertIs(new("/2/j/0").get(data), True)

    def test_escapes_survive_redispatch(self) -> None:
        data = [{"a/b": 1, "c~1d": 2}]
        self.assertEqual(new("/0/a~1b").get(data), 1)
        self.assertEqual(new("/0/c~01d").get(data), 2)

    def test_bad_indices(self) -> None:
        with self.assertRaises(TypeMismatch):
            new("/first").get([1])
        with self.assertRaises(OutOfBounds):
            new("/1").get([1])
        with self.assertRaises(OutOfBounds):
            new("/0").get([])

    def test_indexing_past_scalar_element(self) -> None:
        with self.assertRaises(TypeMismatch):
            new("/0/x").get([1])


class TestCustomSource(unittest.TestCase):
    def test_custom_lookup(self) -> None:
        custom = CustomSource({"custom_foo": "custom value", "custom_bar": 42})
        self.assertEqual(new("/foo").get(custom, str), "custom value")

    def test_custom_errors_propagate(self) -> None:
        with self.assertRaises(NotFound):
            new("/nope").get(CustomSource({}))

    def test_custom_inside_sequence(self) -> None:
        data = [CustomSource({"custom_x": 1})]
        self.assertEqual(new("/0/x").get(data), 1)


if __name__ == "__main__":
    unittest.main()
