"""Whole-IDL normalization.

Anchor does not check that the types it copies out of Rust source are
actually defined anywhere, so IDLs end up with field types such as
`{"defined": "HashMap<String,DataItem>"}`. The normalizer rewrites every type
occurrence through the resolution chain, renames identifiers to camelCase,
lifts account bodies out of the type list and appends any definitions the
matchers synthesized.

Shank IDLs are emitted with canonical types already and pass through as-is.
"""
from __future__ import annotations

import copy
import logging
from typing import Any

from idlforge.casing import snake_to_camel
from idlforge.config import (
    IDL_GENERATOR_ANCHOR,
    IDL_GENERATOR_SHANK,
    KNOWN_IDL_GENERATORS,
    CompilerConfig,
)
from idlforge.discriminator import account_discriminator, instruction_discriminator
from idlforge.errors import IdlFormatError, UnknownGeneratorError
from idlforge.idl.model import (
    AccountCollection,
    AccountReference,
    EnumBody,
    Field,
    Idl,
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
)
from idlforge.resolution.base import ResolutionContext
from idlforge.resolution.matchers import DEFAULT_MATCHERS
from idlforge.resolution.resolver import TypeResolver

logger = logging.getLogger(__name__)


def _origin(data: dict[str, Any]) -> str | None:
    metadata = data.get("metadata")
    return metadata.get("origin") if isinstance(metadata, dict) else None


class IdlNormalizer:
    """Normalizes IDLs under one compiler config.

    Every `normalize` call starts from an empty resolution context (type
    registry and generated types), so runs on the same instance never leak
    definitions into each other. Instances are not thread-safe.
    """

    def __init__(self, config: CompilerConfig | None = None) -> None:
        self.config = config if config is not None else CompilerConfig()
        self.context = ResolutionContext()
        # Caller matchers go last so built-ins take precedence.
        self.resolver = TypeResolver(
            context=self.context,
            matchers=[*DEFAULT_MATCHERS, *self.config.custom_type_mappers],
            fallback=self.config.idl_type_fallback,
            float_as_bytes=self.config.float_as_bytes,
        )

    def _prepare(self, idl: Idl | dict[str, Any]) -> dict[str, Any]:
        data = idl.to_dict() if isinstance(idl, Idl) else copy.deepcopy(idl)
        if self.config.idl_hook is not None:
            data = self.config.idl_hook(data)
        if not isinstance(data, dict):
            raise IdlFormatError(f"IDL must be a JSON object, got {type(data).__name__}")
        return data

    def normalize_document(self, idl: Idl | dict[str, Any]) -> dict[str, Any]:
        """Normalize `idl` and return it in IDL JSON form.

        Shank documents come back exactly as the hook left them, without a
        trip through the model.
        """
        data = self._prepare(idl)
        if _origin(data) == IDL_GENERATOR_SHANK:
            logger.info("Shank IDL left as generated", extra={"program": data.get("name")})
            return data
        return self._normalize(data).to_dict()

    def normalize(self, idl: Idl | dict[str, Any]) -> Idl:
        return self._normalize(self._prepare(idl))

    def _normalize(self, data: dict[str, Any]) -> Idl:
        self.context = ResolutionContext()
        self.resolver.context = self.context

        origin = _origin(data)
        if origin == IDL_GENERATOR_SHANK:
            model = Idl.from_dict(data)
            logger.info("Shank IDL left as generated", extra={"program": model.program_name})
            return model
        if origin not in (None, IDL_GENERATOR_ANCHOR):
            raise UnknownGeneratorError(origin, KNOWN_IDL_GENERATORS)

        model = Idl.from_dict(data)
        self._register_types(model)
        self._lift_accounts(model)
        model.types = list(self.context.types.values())

        for ix in model.instructions:
            self._transform_instruction(ix)

        self._append_generated(model)

        if self.config.idl_hook_post_adaption is not None:
            model = self.config.idl_hook_post_adaption(model)

        logger.info(
            "IDL normalized",
            extra={
                "program": model.program_name,
                "instructions": len(model.instructions),
                "accounts": len(model.accounts),
                "types": len(model.types),
                "generated_types": len(self.context.generated),
            },
        )
        return model

    # -----------------
    # Types
    # -----------------

    def _rename(self, name: str) -> str:
        return snake_to_camel(name) if self.config.rename_identifiers else name

    def transform_type(self, node: TypeNode) -> TypeNode:
        if isinstance(node, Primitive):
            return self.resolver.canonical_primitive(node)
        if isinstance(node, GenericParam):
            return node
        if isinstance(node, (OptionType, COptionType, VecType, HashSetType, BTreeSetType)):
            return type(node)(self.transform_type(node.inner))
        if isinstance(node, FixedArray):
            return FixedArray(self.transform_type(node.elem), node.length)
        if isinstance(node, TupleType):
            return TupleType(tuple(self.transform_type(t) for t in node.items))
        if isinstance(node, HashMapType):
            return HashMapType(self.transform_type(node.key), self.transform_type(node.value))
        if isinstance(node, BTreeMapType):
            return BTreeMapType(self.transform_type(node.key), self.transform_type(node.value))

        resolved = self.resolver.resolve(node.name)
        if isinstance(resolved, DefinedRef) and (node.generics or node.object_form):
            generics = tuple(
                g if isinstance(g, ConstGeneric) else self.transform_type(g)
                for g in node.generics
            )
            return DefinedRef(
                resolved.name,
                generics or resolved.generics,
                object_form=node.object_form,
            )
        return resolved

    def _transform_fields(self, fields: list[Field]) -> None:
        for f in fields:
            f.name = self._rename(f.name)
            f.type = self.transform_type(f.type)

    def _transform_definition(self, definition: TypeDefinition) -> TypeDefinition:
        body = definition.body
        if isinstance(body, StructBody):
            self._transform_fields(body.fields)
        elif isinstance(body, EnumBody):
            for variant in body.variants:
                if variant.fields is not None:
                    self._transform_fields(variant.fields)
                elif variant.tuple_fields is not None:
                    variant.tuple_fields = [self.transform_type(t) for t in variant.tuple_fields]
        return definition

    def _register_types(self, idl: Idl) -> None:
        for definition in idl.types:
            self.context.types[definition.name] = self._transform_definition(definition)

    def _append_generated(self, idl: Idl) -> None:
        declared = {t.name for t in idl.types}
        for name, definition in self.context.generated.items():
            if name in declared:
                logger.warning(
                    "Generated type collides with declared type, keeping declared",
                    extra={"type_name": name},
                )
                continue
            idl.types.append(definition)

    # -----------------
    # Accounts
    # -----------------

    def _lift_accounts(self, idl: Idl) -> None:
        for account in idl.accounts:
            declared = self.context.types.pop(account.name, None)

            if account.body is not None:
                # pre-0.30 IDLs declare the body inline
                self._transform_fields(account.body.fields)
            elif declared is not None:
                if not isinstance(declared.body, StructBody):
                    raise IdlFormatError(f"Account '{account.name}' must be a struct")
                account.body = declared.body
                account.extra = {**declared.extra, **account.extra}
            else:
                raise IdlFormatError(f"Account '{account.name}' has no type definition")

            if account.discriminator is None:
                account.discriminator = account_discriminator(account.name)

    # -----------------
    # Instructions
    # -----------------

    def _rename_accounts(self, items: list[AccountReference | AccountCollection]) -> None:
        for item in items:
            item.name = self._rename(item.name)
            if isinstance(item, AccountCollection):
                self._rename_accounts(item.accounts)

    def _transform_instruction(self, ix: InstructionDescriptor) -> None:
        # Derived from the source name: camelCasing is not reversible.
        if ix.discriminator is None:
            ix.discriminator = instruction_discriminator(ix.name)
        ix.name = self._rename(ix.name)
        self._rename_accounts(ix.accounts)
        for arg in ix.args:
            arg.name = self._rename(arg.name)
            arg.type = self.transform_type(arg.type)


def normalize_idl(idl: Idl | dict[str, Any], config: CompilerConfig | None = None) -> Idl:
    """Normalize `idl` in a fresh run (see IdlNormalizer)."""
    return IdlNormalizer(config).normalize(idl)
