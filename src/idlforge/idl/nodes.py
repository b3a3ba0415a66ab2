"""Structured type nodes of a normalized IDL.

A TypeNode is an immutable shape: the structured variants Anchor emits, the
set and fixed-size option containers Shank adds, opaque `DefinedRef`s and
`GenericParam`s standing for a type parameter of the enclosing definition.
Generic parameters are TypeNodes themselves so nesting is unbounded.
`decode_type`/`encode_type` translate between nodes and the JSON type
notation used in IDL files, and `type_to_str` renders the Rust-like
textual notation the resolver parses.
"""
from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from idlforge.errors import IdlFormatError

# Every scalar an IDL may spell out directly (compared lowercased).
PRIMITIVE_NAMES = frozenset(
    {
        "bool",
        "u8", "i8", "u16", "i16", "u32", "i32", "f32",
        "u64", "i64", "f64", "u128", "i128", "u256", "i256",
        "bytes", "string", "publickey", "pubkey",
    }
)


@dataclass(frozen=True)
class Primitive:
    kind: str


@dataclass(frozen=True)
class OptionType:
    inner: TypeNode


@dataclass(frozen=True)
class VecType:
    inner: TypeNode


@dataclass(frozen=True)
class FixedArray:
    elem: TypeNode
    length: int | str  # str when the length is a const generic parameter


@dataclass(frozen=True)
class COptionType:
    """Shank fixed-size option (4-byte tag, zeroed payload when absent)."""

    inner: TypeNode


@dataclass(frozen=True)
class HashSetType:
    inner: TypeNode


@dataclass(frozen=True)
class BTreeSetType:
    inner: TypeNode


@dataclass(frozen=True)
class TupleType:
    items: tuple[TypeNode, ...]


@dataclass(frozen=True)
class HashMapType:
    key: TypeNode
    value: TypeNode


@dataclass(frozen=True)
class BTreeMapType:
    key: TypeNode
    value: TypeNode


@dataclass(frozen=True)
class ConstGeneric:
    """A const generic argument, e.g. the `32` in `Buffer<32>`."""

    value: str


@dataclass(frozen=True)
class DefinedRef:
    """Reference to a type by name, possibly one defined outside this IDL."""

    name: str
    generics: tuple[TypeNode | ConstGeneric, ...] = ()
    # written back as `{"defined": {"name": ...}}` even without generics
    object_form: bool = field(default=False, compare=False)


@dataclass(frozen=True)
class GenericParam:
    """A type parameter of the enclosing definition, e.g. `{"generic": "T"}`."""

    name: str


TypeNode = (
    Primitive
    | OptionType
    | COptionType
    | VecType
    | FixedArray
    | TupleType
    | HashMapType
    | BTreeMapType
    | HashSetType
    | BTreeSetType
    | DefinedRef
    | GenericParam
)

TYPE_NODE_CLASSES = (
    Primitive,
    OptionType,
    COptionType,
    VecType,
    FixedArray,
    TupleType,
    HashMapType,
    BTreeMapType,
    HashSetType,
    BTreeSetType,
    DefinedRef,
    GenericParam,
)


def is_type_node(value: Any) -> bool:
    return isinstance(value, TYPE_NODE_CLASSES)


# ---------------------------------------------------------------------------
# JSON notation
# ---------------------------------------------------------------------------


def _pair(value: Any, key: str) -> tuple[Any, Any]:
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        raise IdlFormatError(f"'{key}' type needs exactly two entries, got {value!r}")
    return value[0], value[1]


def _decode_generic_arg(arg: Any) -> TypeNode | ConstGeneric:
    if isinstance(arg, dict) and arg.get("kind") == "const":
        return ConstGeneric(str(arg.get("value", "")))
    if isinstance(arg, dict) and arg.get("kind") == "type":
        return decode_type(arg.get("type"))
    return decode_type(arg)


def decode_type(value: Any) -> TypeNode:
    """Decode an IDL JSON type without resolving any names.

    Textual names that are not scalars become `DefinedRef`s carrying the text
    verbatim; the normalizer resolves those later.
    """
    if isinstance(value, str):
        if value.lower() in PRIMITIVE_NAMES:
            return Primitive(value)
        return DefinedRef(value)

    if not isinstance(value, dict) or len(value) != 1:
        raise IdlFormatError(f"Unsupported IDL type: {value!r}")

    ((key, inner),) = value.items()
    if key == "option":
        return OptionType(decode_type(inner))
    if key == "coption":
        return COptionType(decode_type(inner))
    if key == "vec":
        return VecType(decode_type(inner))
    if key == "hashSet":
        return HashSetType(decode_type(inner))
    if key == "bTreeSet":
        return BTreeSetType(decode_type(inner))
    if key == "array":
        elem, length = _pair(inner, key)
        if isinstance(length, dict):
            length = str(length.get("generic", ""))
        return FixedArray(decode_type(elem), length)
    if key == "tuple":
        return TupleType(tuple(decode_type(item) for item in inner))
    if key == "hashMap":
        k, v = _pair(inner, key)
        return HashMapType(decode_type(k), decode_type(v))
    if key == "bTreeMap":
        k, v = _pair(inner, key)
        return BTreeMapType(decode_type(k), decode_type(v))
    if key == "defined":
        if isinstance(inner, str):
            return DefinedRef(inner)
        if isinstance(inner, dict) and "name" in inner:
            generics = tuple(_decode_generic_arg(g) for g in inner.get("generics") or [])
            return DefinedRef(inner["name"], generics, object_form=True)
    if key == "generic" and isinstance(inner, str):
        return GenericParam(inner)

    raise IdlFormatError(f"Unsupported IDL type: {value!r}")


def _encode_generic_arg(arg: TypeNode | ConstGeneric) -> dict[str, Any]:
    if isinstance(arg, ConstGeneric):
        return {"kind": "const", "value": arg.value}
    return {"kind": "type", "type": encode_type(arg)}


def encode_type(node: TypeNode) -> Any:
    """Encode a node back into IDL JSON notation."""
    if isinstance(node, Primitive):
        return node.kind
    if isinstance(node, OptionType):
        return {"option": encode_type(node.inner)}
    if isinstance(node, COptionType):
        return {"coption": encode_type(node.inner)}
    if isinstance(node, VecType):
        return {"vec": encode_type(node.inner)}
    if isinstance(node, HashSetType):
        return {"hashSet": encode_type(node.inner)}
    if isinstance(node, BTreeSetType):
        return {"bTreeSet": encode_type(node.inner)}
    if isinstance(node, FixedArray):
        length = node.length if isinstance(node.length, int) else {"generic": node.length}
        return {"array": [encode_type(node.elem), length]}
    if isinstance(node, TupleType):
        return {"tuple": [encode_type(item) for item in node.items]}
    if isinstance(node, HashMapType):
        return {"hashMap": [encode_type(node.key), encode_type(node.value)]}
    if isinstance(node, BTreeMapType):
        return {"bTreeMap": [encode_type(node.key), encode_type(node.value)]}
    if isinstance(node, DefinedRef):
        if not node.generics and not node.object_form:
            return {"defined": node.name}
        defined: dict[str, Any] = {"name": node.name}
        if node.generics:
            defined["generics"] = [_encode_generic_arg(g) for g in node.generics]
        return {"defined": defined}
    if isinstance(node, GenericParam):
        return {"generic": node.name}
    raise TypeError(f"Not a type node: {node!r}")


# ---------------------------------------------------------------------------
# Textual notation
# ---------------------------------------------------------------------------


def type_to_str(node: TypeNode | ConstGeneric) -> str:
    """Render a node in the Rust-like notation accepted by the resolver."""
    if isinstance(node, Primitive):
        return node.kind
    if isinstance(node, ConstGeneric):
        return node.value
    if isinstance(node, OptionType):
        return f"Option<{type_to_str(node.inner)}>"
    if isinstance(node, COptionType):
        return f"COption<{type_to_str(node.inner)}>"
    if isinstance(node, VecType):
        return f"Vec<{type_to_str(node.inner)}>"
    if isinstance(node, HashSetType):
        return f"HashSet<{type_to_str(node.inner)}>"
    if isinstance(node, BTreeSetType):
        return f"BTreeSet<{type_to_str(node.inner)}>"
    if isinstance(node, FixedArray):
        return f"[{type_to_str(node.elem)}; {node.length}]"
    if isinstance(node, TupleType):
        return "(" + ", ".join(type_to_str(item) for item in node.items) + ")"
    if isinstance(node, HashMapType):
        return f"HashMap<{type_to_str(node.key)}, {type_to_str(node.value)}>"
    if isinstance(node, BTreeMapType):
        return f"BTreeMap<{type_to_str(node.key)}, {type_to_str(node.value)}>"
    if isinstance(node, DefinedRef):
        if not node.generics:
            return node.name
        return f"{node.name}<{', '.join(type_to_str(g) for g in node.generics)}>"
    if isinstance(node, GenericParam):
        return node.name
    raise TypeError(f"Not a type node: {node!r}")


def iter_nodes(node: TypeNode) -> Iterator[TypeNode]:
    """Depth-first walk over `node` and every node nested inside it."""
    yield node
    if isinstance(node, (OptionType, COptionType, VecType, HashSetType, BTreeSetType)):
        yield from iter_nodes(node.inner)
    elif isinstance(node, FixedArray):
        yield from iter_nodes(node.elem)
    elif isinstance(node, TupleType):
        for item in node.items:
            yield from iter_nodes(item)
    elif isinstance(node, (HashMapType, BTreeMapType)):
        yield from iter_nodes(node.key)
        yield from iter_nodes(node.value)
    elif isinstance(node, DefinedRef):
        for arg in node.generics:
            if not isinstance(arg, ConstGeneric):
                yield from iter_nodes(arg)
