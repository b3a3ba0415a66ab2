"""In-memory interface model of a program IDL.

Both the legacy Anchor layout (`isMut`/`isSigner`, inline account bodies)
and the 0.30 layout (`writable`/`signer`, account bodies in `types`) are
read, as are Shank IDLs.
Keys the model does not interpret are kept in `extra` and written back
unchanged by `to_dict`.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from idlforge.errors import IdlFormatError
from idlforge.idl.nodes import TypeNode, decode_type, encode_type


def _rest(data: dict[str, Any], *known: str) -> dict[str, Any]:
    return {k: v for k, v in data.items() if k not in known}


def _decode_discriminator(value: Any) -> bytes | None:
    if value is None:
        return None
    return bytes(value)


# ---------------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------------


@dataclass
class Field:
    name: str
    type: TypeNode
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Field:
        return cls(
            name=data["name"],
            type=decode_type(data["type"]),
            extra=_rest(data, "name", "type"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "type": encode_type(self.type), **self.extra}


@dataclass
class StructBody:
    fields: list[Field] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StructBody:
        fields = data.get("fields") or []
        if any(not _is_named_field(f) for f in fields):
            raise IdlFormatError("Tuple structs are not supported")
        return cls(fields=[Field.from_dict(f) for f in fields])

    def to_dict(self) -> dict[str, Any]:
        return {"kind": "struct", "fields": [f.to_dict() for f in self.fields]}


def _is_named_field(value: Any) -> bool:
    return isinstance(value, dict) and "name" in value and "type" in value


@dataclass
class EnumVariant:
    """An enum variant: scalar, with named fields, or with positional fields."""

    name: str
    fields: list[Field] | None = None
    tuple_fields: list[TypeNode] | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EnumVariant:
        raw_fields = data.get("fields") or []
        variant = cls(name=data["name"], extra=_rest(data, "name", "fields"))
        if raw_fields and all(_is_named_field(f) for f in raw_fields):
            variant.fields = [Field.from_dict(f) for f in raw_fields]
        elif raw_fields:
            variant.tuple_fields = [decode_type(f) for f in raw_fields]
        return variant

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"name": self.name}
        if self.fields is not None:
            out["fields"] = [f.to_dict() for f in self.fields]
        elif self.tuple_fields is not None:
            out["fields"] = [encode_type(t) for t in self.tuple_fields]
        out.update(self.extra)
        return out


@dataclass
class EnumBody:
    variants: list[EnumVariant] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EnumBody:
        return cls(variants=[EnumVariant.from_dict(v) for v in data.get("variants") or []])

    def to_dict(self) -> dict[str, Any]:
        return {"kind": "enum", "variants": [v.to_dict() for v in self.variants]}

    @property
    def is_scalar(self) -> bool:
        return all(v.fields is None and v.tuple_fields is None for v in self.variants)


def decode_body(data: Any, owner: str) -> StructBody | EnumBody:
    if not isinstance(data, dict):
        raise IdlFormatError(f"'{owner}' has no type body")
    kind = data.get("kind")
    if kind == "struct":
        return StructBody.from_dict(data)
    if kind == "enum":
        return EnumBody.from_dict(data)
    raise IdlFormatError(f"'{owner}' has unsupported type kind {kind!r}")


@dataclass
class TypeDefinition:
    name: str
    body: StructBody | EnumBody
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TypeDefinition:
        return cls(
            name=data["name"],
            body=decode_body(data.get("type"), data["name"]),
            extra=_rest(data, "name", "type"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "type": self.body.to_dict(), **self.extra}


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------


@dataclass
class AccountDescriptor:
    name: str
    discriminator: bytes | None = None
    # None until the body is lifted from the same-named type definition
    body: StructBody | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AccountDescriptor:
        body = None
        if "type" in data:
            decoded = decode_body(data["type"], data["name"])
            if not isinstance(decoded, StructBody):
                raise IdlFormatError(f"Account '{data['name']}' must be a struct")
            body = decoded
        return cls(
            name=data["name"],
            discriminator=_decode_discriminator(data.get("discriminator")),
            body=body,
            extra=_rest(data, "name", "type", "discriminator"),
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"name": self.name}
        if self.discriminator is not None:
            out["discriminator"] = list(self.discriminator)
        if self.body is not None:
            out["type"] = self.body.to_dict()
        out.update(self.extra)
        return out


# ---------------------------------------------------------------------------
# Instructions
# ---------------------------------------------------------------------------


@dataclass
class InstructionArg:
    name: str
    type: TypeNode
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> InstructionArg:
        return cls(
            name=data["name"],
            type=decode_type(data["type"]),
            extra=_rest(data, "name", "type"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "type": encode_type(self.type), **self.extra}


_ACCOUNT_REF_KEYS = (
    "name", "isMut", "isSigner", "writable", "signer",
    "optional", "isOptional", "address", "desc",
)


@dataclass
class AccountReference:
    name: str
    writable: bool = False
    signer: bool = False
    optional: bool = False
    # fixed address declared in the IDL, if any
    address: str | None = None
    desc: str | None = None
    # True when read from an IDL spelling flags as isMut/isSigner
    legacy_flags: bool = False
    # "optional" or "isOptional" when the IDL spelled the flag out
    optional_key: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AccountReference:
        legacy = "isMut" in data or "isSigner" in data
        return cls(
            name=data["name"],
            writable=bool(data.get("writable", data.get("isMut", False))),
            signer=bool(data.get("signer", data.get("isSigner", False))),
            optional=bool(data.get("optional", data.get("isOptional", False))),
            address=data.get("address"),
            desc=data.get("desc"),
            legacy_flags=legacy,
            optional_key=next((k for k in ("optional", "isOptional") if k in data), None),
            extra=_rest(data, *_ACCOUNT_REF_KEYS),
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"name": self.name}
        if self.legacy_flags:
            out["isMut"] = self.writable
            out["isSigner"] = self.signer
        else:
            if self.writable:
                out["writable"] = True
            if self.signer:
                out["signer"] = True
        if self.optional_key is not None:
            out[self.optional_key] = self.optional
        elif self.optional:
            out["optional"] = True
        if self.address is not None:
            out["address"] = self.address
        if self.desc is not None:
            out["desc"] = self.desc
        out.update(self.extra)
        return out


@dataclass
class AccountCollection:
    """A named group of account references declared once in the IDL."""

    name: str
    accounts: list[AccountReference | AccountCollection] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "accounts": [a.to_dict() for a in self.accounts],
            **self.extra,
        }


def decode_account_item(data: dict[str, Any]) -> AccountReference | AccountCollection:
    if isinstance(data.get("accounts"), list):
        return AccountCollection(
            name=data["name"],
            accounts=[decode_account_item(a) for a in data["accounts"]],
            extra=_rest(data, "name", "accounts"),
        )
    return AccountReference.from_dict(data)


@dataclass
class InstructionDescriptor:
    name: str
    args: list[InstructionArg] = field(default_factory=list)
    accounts: list[AccountReference | AccountCollection] = field(default_factory=list)
    discriminator: bytes | None = None
    legacy_optional_accounts_strategy: bool = False
    # None defers to the compiler config
    remaining_accounts: bool | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> InstructionDescriptor:
        return cls(
            name=data["name"],
            args=[InstructionArg.from_dict(a) for a in data.get("args") or []],
            accounts=[decode_account_item(a) for a in data.get("accounts") or []],
            discriminator=_decode_discriminator(data.get("discriminator")),
            legacy_optional_accounts_strategy=bool(
                data.get("legacyOptionalAccountsStrategy", False)
            ),
            remaining_accounts=data.get("remainingAccounts"),
            extra=_rest(
                data,
                "name", "args", "accounts", "discriminator",
                "legacyOptionalAccountsStrategy", "remainingAccounts",
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"name": self.name}
        if self.discriminator is not None:
            out["discriminator"] = list(self.discriminator)
        out["accounts"] = [a.to_dict() for a in self.accounts]
        out["args"] = [a.to_dict() for a in self.args]
        if self.legacy_optional_accounts_strategy:
            out["legacyOptionalAccountsStrategy"] = True
        if self.remaining_accounts is not None:
            out["remainingAccounts"] = self.remaining_accounts
        out.update(self.extra)
        return out


# ---------------------------------------------------------------------------
# IDL
# ---------------------------------------------------------------------------


@dataclass
class Idl:
    name: str | None = None
    version: str | None = None
    instructions: list[InstructionDescriptor] = field(default_factory=list)
    accounts: list[AccountDescriptor] = field(default_factory=list)
    types: list[TypeDefinition] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    # events, errors, constants, address, ... passed through untouched
    extra: dict[str, Any] = field(default_factory=dict)
    # "accounts"/"types" keys present in the source, written back even if empty
    declared_sections: frozenset[str] = field(default=frozenset(), compare=False, repr=False)

    @property
    def origin(self) -> str | None:
        return self.metadata.get("origin")

    @property
    def program_name(self) -> str | None:
        return self.name or self.metadata.get("name")

    @property
    def address(self) -> str | None:
        return self.metadata.get("address") or self.extra.get("address")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Idl:
        if not isinstance(data, dict):
            raise IdlFormatError(f"IDL must be a JSON object, got {type(data).__name__}")
        metadata = dict(data.get("metadata") or {})
        return cls(
            name=data.get("name"),
            version=data.get("version"),
            instructions=[InstructionDescriptor.from_dict(i) for i in data.get("instructions") or []],
            accounts=[AccountDescriptor.from_dict(a) for a in data.get("accounts") or []],
            types=[TypeDefinition.from_dict(t) for t in data.get("types") or []],
            metadata=metadata,
            extra=_rest(data, "name", "version", "instructions", "accounts", "types", "metadata"),
            declared_sections=frozenset(k for k in ("accounts", "types") if k in data),
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.version is not None:
            out["version"] = self.version
        if self.name is not None:
            out["name"] = self.name
        out["instructions"] = [i.to_dict() for i in self.instructions]
        if self.accounts or "accounts" in self.declared_sections:
            out["accounts"] = [a.to_dict() for a in self.accounts]
        if self.types or "types" in self.declared_sections:
            out["types"] = [t.to_dict() for t in self.types]
        out.update(self.extra)
        if self.metadata:
            out["metadata"] = dict(self.metadata)
        return out

    def find_type(self, name: str) -> TypeDefinition | None:
        return next((t for t in self.types if t.name == name), None)
