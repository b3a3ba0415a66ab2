"""Built-in stages of the resolution chain.

Each matcher recognizes exactly one textual shape; precedence is decided by
the order of `DEFAULT_MATCHERS`, not inside the matchers.
"""
from __future__ import annotations

import re

from idlforge.casing import upper_first
from idlforge.idl.model import Field, StructBody, TypeDefinition
from idlforge.idl.nodes import (
    BTreeMapType,
    DefinedRef,
    FixedArray,
    HashMapType,
    OptionType,
    Primitive,
    TupleType,
    TypeNode,
    VecType,
    type_to_str,
)
from idlforge.resolution.base import RegisterType, Resolve, TypeMatcher
from idlforge.resolution.grammar import parse_generic, split_top_level

_NON_IDENT = re.compile(r"[^A-Za-z0-9]+")


class MapMatcher(TypeMatcher):
    """`HashMap<K, V>`, `BTreeMap<K, V>`, any other `*Map<K, V>` and `VecMap<K, V>`.

    `VecMap<K, V>` is sugar for `Vec<(K, V)>`; every map name other than
    `BTreeMap` and `VecMap` resolves to a hash map.
    """

    kind = "map"

    def match(self, raw: str, resolve: Resolve, register: RegisterType) -> TypeNode | None:
        parsed = parse_generic(raw)
        if not parsed.type_name.endswith("Map") or len(parsed.parameters) != 2:
            return None

        key_raw, value_raw = parsed.parameters
        if parsed.type_name == "VecMap":
            return VecType(resolve(f"({key_raw}, {value_raw})"))

        key, value = resolve(key_raw), resolve(value_raw)
        if parsed.type_name == "BTreeMap":
            return BTreeMapType(key, value)
        return HashMapType(key, value)


class VecMatcher(TypeMatcher):
    kind = "vec"

    def match(self, raw: str, resolve: Resolve, register: RegisterType) -> TypeNode | None:
        parsed = parse_generic(raw)
        if parsed.type_name != "Vec" or len(parsed.parameters) != 1:
            return None
        return VecType(resolve(parsed.parameters[0]))


class TupleMatcher(TypeMatcher):
    """`(A, B, ...)`; items are split at the top level only."""

    kind = "tuple"

    def match(self, raw: str, resolve: Resolve, register: RegisterType) -> TypeNode | None:
        if not (raw.startswith("(") and raw.endswith(")")):
            return None
        inner = raw[1:-1].strip()
        if not inner:
            return TupleType(())
        items = split_top_level(inner)
        # `(u8,)` style trailing comma
        if len(items) > 1 and items[-1] == "":
            items.pop()
        return TupleType(tuple(resolve(item) for item in items))


class OptionMatcher(TypeMatcher):
    kind = "option"

    def match(self, raw: str, resolve: Resolve, register: RegisterType) -> TypeNode | None:
        parsed = parse_generic(raw)
        if parsed.type_name != "Option" or len(parsed.parameters) != 1:
            return None
        return OptionType(resolve(parsed.parameters[0]))


class FixedArrayMatcher(TypeMatcher):
    """`[T; N]`, with N either a literal length or a const generic name."""

    kind = "array"

    def match(self, raw: str, resolve: Resolve, register: RegisterType) -> TypeNode | None:
        if not (raw.startswith("[") and raw.endswith("]")):
            return None
        parts = split_top_level(raw[1:-1], ";")
        if len(parts) != 2 or not parts[1]:
            return None
        elem, length = parts
        return FixedArray(resolve(elem), int(length) if length.isdecimal() else length)


class AliasMatcher(TypeMatcher):
    """Fixed names that stand for a concrete shape."""

    kind = "alias"

    def __init__(self, aliases: dict[str, TypeNode]) -> None:
        self.aliases = dict(aliases)

    def match(self, raw: str, resolve: Resolve, register: RegisterType) -> TypeNode | None:
        return self.aliases.get(raw)


# 32-byte merkle/tree node identifier
NODE_ALIASES: dict[str, TypeNode] = {"Node": FixedArray(Primitive("u8"), 32)}


class MapEntryMatcher(TypeMatcher):
    """Materializes `Entries<K, V>` as a `Vec` of a synthesized `{key, value}` struct.

    Not part of the default chain; add it through `custom_type_mappers`.
    Names ending in `Map` are claimed by MapMatcher first, so `type_names`
    must not end in `Map`.
    """

    kind = "map_entry"

    def __init__(self, type_names: tuple[str, ...] = ("Entries",)) -> None:
        self.type_names = type_names

    @staticmethod
    def entry_name(key: TypeNode, value: TypeNode) -> str:
        parts = [upper_first(_NON_IDENT.sub("", type_to_str(t))) for t in (key, value)]
        return "".join(parts) + "Entry"

    def match(self, raw: str, resolve: Resolve, register: RegisterType) -> TypeNode | None:
        parsed = parse_generic(raw)
        if parsed.type_name not in self.type_names or len(parsed.parameters) != 2:
            return None

        key, value = resolve(parsed.parameters[0]), resolve(parsed.parameters[1])
        name = self.entry_name(key, value)
        register(
            TypeDefinition(
                name=name,
                body=StructBody(fields=[Field("key", key), Field("value", value)]),
            )
        )
        return VecType(DefinedRef(name))


DEFAULT_MATCHERS: tuple[TypeMatcher, ...] = (
    MapMatcher(),
    VecMatcher(),
    TupleMatcher(),
    OptionMatcher(),
    FixedArrayMatcher(),
    AliasMatcher(NODE_ALIASES),
)
