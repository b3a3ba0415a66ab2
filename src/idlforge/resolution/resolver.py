from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Any

from idlforge.idl.nodes import ConstGeneric, DefinedRef, FixedArray, Primitive, TypeNode
from idlforge.resolution.base import (
    ResolutionContext,
    TypeMatcher,
    as_matcher,
    coerce_result,
)
from idlforge.resolution.grammar import parse_generic
from idlforge.resolution.matchers import DEFAULT_MATCHERS

logger = logging.getLogger(__name__)

# Keys are lowercase; lookups are case-insensitive.
PRIMITIVE_TYPES: dict[str, TypeNode] = {
    "bool": Primitive("bool"),
    "pubkey": Primitive("publicKey"),
    "publickey": Primitive("publicKey"),
    "string": Primitive("string"),
    "bytes": Primitive("bytes"),
    "u8": Primitive("u8"),
    "u16": Primitive("u16"),
    "u32": Primitive("u32"),
    "u64": Primitive("u64"),
    "u128": Primitive("u128"),
    "u256": Primitive("u256"),
    "i8": Primitive("i8"),
    "i16": Primitive("i16"),
    "i32": Primitive("i32"),
    "i64": Primitive("i64"),
    "i128": Primitive("i128"),
    "i256": Primitive("i256"),
    "f32": Primitive("f32"),
    "f64": Primitive("f64"),
}

# Variant table for programs that serialize f64 as its raw 8 bytes.
FLOAT_AS_BYTES_PRIMITIVE_TYPES: dict[str, TypeNode] = {
    **PRIMITIVE_TYPES,
    "f64": FixedArray(Primitive("u8"), 8),
}

Fallback = Callable[..., Any]


def primitive_table(float_as_bytes: bool = False) -> dict[str, TypeNode]:
    return FLOAT_AS_BYTES_PRIMITIVE_TYPES if float_as_bytes else PRIMITIVE_TYPES


class TypeResolver:
    """Maps raw type strings to TypeNodes. Total: never fails to produce a node.

    Stages, first hit wins:
      1. case-insensitive primitive table
      2. matchers, in order
      3. the caller's fallback `(raw, resolve) -> TypeNode | None`
      4. an opaque `DefinedRef`, with generic parameters resolved when present
    """

    def __init__(
        self,
        context: ResolutionContext | None = None,
        matchers: Iterable[TypeMatcher | Callable[..., Any]] = DEFAULT_MATCHERS,
        fallback: Fallback | None = None,
        float_as_bytes: bool = False,
    ) -> None:
        self.context = context if context is not None else ResolutionContext()
        self.matchers = [as_matcher(m) for m in matchers]
        self.fallback = fallback
        self.primitives = primitive_table(float_as_bytes)

    def __call__(self, raw: str) -> TypeNode:
        return self.resolve(raw)

    def resolve(self, raw: str) -> TypeNode:
        text = raw.strip()

        primitive = self.primitives.get(text.lower())
        if primitive is not None:
            return primitive

        for matcher in self.matchers:
            node = matcher(text, self.resolve, self.context.register_generated)
            if node is not None:
                return node

        if self.fallback is not None:
            node = coerce_result(self.fallback(text, self.resolve))
            if node is not None:
                return node

        return self._opaque(text)

    def canonical_primitive(self, node: Primitive) -> TypeNode:
        """Canonical spelling of a scalar, or the node itself if unknown."""
        return self.primitives.get(node.kind.lower(), node)

    def _opaque(self, text: str) -> DefinedRef:
        parsed = parse_generic(text)
        if parsed.type_name and parsed.parameters and all(parsed.parameters):
            generics = tuple(
                ConstGeneric(p) if p.isdecimal() else self.resolve(p)
                for p in parsed.parameters
            )
            return DefinedRef(parsed.type_name, generics)

        logger.debug("Type kept as named reference", extra={"type_name": text})
        return DefinedRef(text)
