from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from idlforge.idl.model import TypeDefinition
from idlforge.idl.nodes import TypeNode, decode_type, is_type_node

logger = logging.getLogger(__name__)

Resolve = Callable[[str], TypeNode]
RegisterType = Callable[[TypeDefinition], None]


@dataclass
class ResolutionContext:
    """Type registry owned by exactly one compilation run.

    `types` holds the IDL's declared definitions by name; `generated` collects
    definitions synthesized while resolving (keyed by name, last write wins).
    """

    types: dict[str, TypeDefinition] = field(default_factory=dict)
    generated: dict[str, TypeDefinition] = field(default_factory=dict)

    def register_generated(self, definition: TypeDefinition) -> None:
        if definition.name in self.generated:
            logger.debug("Replacing generated type", extra={"type_name": definition.name})
        self.generated[definition.name] = definition


class TypeMatcher(ABC):
    """One stage of the resolution chain.

    A matcher receives the raw type string, the resolver itself for nested
    sub-expressions, and a callback to register synthesized definitions. It
    returns a TypeNode, or None when the string is not its shape.
    """

    kind: str

    @abstractmethod
    def match(self, raw: str, resolve: Resolve, register: RegisterType) -> TypeNode | None:
        ...

    def __call__(self, raw: str, resolve: Resolve, register: RegisterType) -> TypeNode | None:
        return self.match(raw, resolve, register)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} kind={self.kind!r}>"


def coerce_result(result: Any) -> TypeNode | None:
    """Accept a TypeNode or an IDL JSON type from caller-supplied code."""
    if result is None or is_type_node(result):
        return result
    return decode_type(result)


class CallableMatcher(TypeMatcher):
    """Adapts a caller-supplied `(raw, resolve, register)` function."""

    kind = "custom"

    def __init__(self, fn: Callable[..., Any]) -> None:
        self.fn = fn

    def match(self, raw: str, resolve: Resolve, register: RegisterType) -> TypeNode | None:
        return coerce_result(self.fn(raw, resolve, register))

    def __repr__(self) -> str:
        return f"<CallableMatcher {getattr(self.fn, '__name__', self.fn)!r}>"


def as_matcher(candidate: TypeMatcher | Callable[..., Any]) -> TypeMatcher:
    if isinstance(candidate, TypeMatcher):
        return candidate
    return CallableMatcher(candidate)
