from __future__ import annotations

from idlforge.resolution.base import (
    CallableMatcher,
    ResolutionContext,
    TypeMatcher,
    as_matcher,
)
from idlforge.resolution.grammar import GenericType, parse_generic, split_top_level
from idlforge.resolution.matchers import (
    DEFAULT_MATCHERS,
    AliasMatcher,
    FixedArrayMatcher,
    MapEntryMatcher,
    MapMatcher,
    OptionMatcher,
    TupleMatcher,
    VecMatcher,
)
from idlforge.resolution.resolver import (
    FLOAT_AS_BYTES_PRIMITIVE_TYPES,
    PRIMITIVE_TYPES,
    TypeResolver,
    primitive_table,
)

_MATCHER_REGISTRY: dict[str, TypeMatcher] = {m.kind: m for m in DEFAULT_MATCHERS}


def get_matcher(kind: str) -> TypeMatcher:
    """Get a built-in matcher by kind ("map", "vec", "tuple", ...).

    Raises KeyError if there is no built-in matcher of that kind.
    """
    matcher = _MATCHER_REGISTRY.get(kind)
    if matcher is None:
        raise KeyError(f"Unknown matcher kind '{kind}'. Available: {list(_MATCHER_REGISTRY)}")
    return matcher


__all__ = [
    "DEFAULT_MATCHERS",
    "FLOAT_AS_BYTES_PRIMITIVE_TYPES",
    "PRIMITIVE_TYPES",
    "AliasMatcher",
    "CallableMatcher",
    "FixedArrayMatcher",
    "GenericType",
    "MapEntryMatcher",
    "MapMatcher",
    "OptionMatcher",
    "ResolutionContext",
    "TupleMatcher",
    "TypeMatcher",
    "TypeResolver",
    "VecMatcher",
    "as_matcher",
    "get_matcher",
    "parse_generic",
    "primitive_table",
    "split_top_level",
]
