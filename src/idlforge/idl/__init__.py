from __future__ import annotations

from idlforge.idl.model import (
    AccountCollection,
    AccountDescriptor,
    AccountReference,
    EnumBody,
    EnumVariant,
    Field,
    Idl,
    InstructionArg,
    InstructionDescriptor,
    StructBody,
    TypeDefinition,
)
from idlforge.idl.nodes import (
    BTreeMapType,
    BTreeSetType,
    COptionType,
    ConstGeneric,
    DefinedRef,
    FixedArray,
    GenericParam,
    HashMapType,
    HashSetType,
    OptionType,
    Primitive,
    TupleType,
    TypeNode,
    VecType,
    decode_type,
    encode_type,
    iter_nodes,
    type_to_str,
)

__all__ = [
    "AccountCollection",
    "AccountDescriptor",
    "AccountReference",
    "BTreeMapType",
    "BTreeSetType",
    "COptionType",
    "ConstGeneric",
    "DefinedRef",
    "EnumBody",
    "EnumVariant",
    "Field",
    "FixedArray",
    "GenericParam",
    "HashMapType",
    "HashSetType",
    "Idl",
    "InstructionArg",
    "InstructionDescriptor",
    "OptionType",
    "Primitive",
    "StructBody",
    "TupleType",
    "TypeDefinition",
    "TypeNode",
    "VecType",
    "decode_type",
    "encode_type",
    "iter_nodes",
    "type_to_str",
]
