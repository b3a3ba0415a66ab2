from __future__ import annotations

import pytest

from idlforge.idl.nodes import DefinedRef, FixedArray, Primitive, VecType
from idlforge.resolution import (
    AliasMatcher,
    CallableMatcher,
    FixedArrayMatcher,
    MapMatcher,
    TypeResolver,
    as_matcher,
    get_matcher,
)


def _no_register(definition):
    raise AssertionError("unexpected registration")


class TestBuiltinMatchers:
    def test_map_matcher_ignores_non_maps(self):
        resolver = TypeResolver()
        assert MapMatcher().match("Vec<u8>", resolver.resolve, _no_register) is None

    def test_map_matcher_needs_two_parameters(self):
        resolver = TypeResolver()
        assert MapMatcher().match("HashMap<u8>", resolver.resolve, _no_register) is None

    def test_fixed_array_needs_length(self):
        resolver = TypeResolver()
        assert FixedArrayMatcher().match("[u8]", resolver.resolve, _no_register) is None
        assert FixedArrayMatcher().match("[u8; ]", resolver.resolve, _no_register) is None

    def test_alias_is_exact(self):
        matcher = AliasMatcher({"Hash": FixedArray(Primitive("u8"), 32)})
        assert matcher.match("Hash", str, _no_register) == FixedArray(Primitive("u8"), 32)
        assert matcher.match("hash", str, _no_register) is None


class TestRegistry:
    @pytest.mark.parametrize("kind", ["map", "vec", "tuple", "option", "array", "alias"])
    def test_builtin_kinds(self, kind):
        assert get_matcher(kind).kind == kind

    def test_unknown_kind_raises(self):
        with pytest.raises(KeyError, match="Unknown matcher kind"):
            get_matcher("nope")


class TestCallableMatcher:
    def test_plain_function_is_wrapped(self):
        matcher = as_matcher(lambda raw, resolve, register: None)
        assert isinstance(matcher, CallableMatcher)

    def test_matcher_instance_is_returned_as_is(self):
        matcher = MapMatcher()
        assert as_matcher(matcher) is matcher

    def test_json_result_is_decoded(self):
        matcher = as_matcher(lambda raw, resolve, register: {"vec": {"defined": "Item"}})
        assert matcher("Items", str, _no_register) == VecType(DefinedRef("Item"))

    def test_nested_resolution_goes_through_resolver(self):
        def unwrap(raw, resolve, register):
            if raw.startswith("Box<") and raw.endswith(">"):
                return resolve(raw[4:-1])
            return None

        resolver = TypeResolver(matchers=[unwrap])
        assert resolver.resolve("Box<Box<u32>>") == Primitive("u32")
