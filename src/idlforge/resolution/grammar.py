"""Grammar for textual generic type expressions such as `Vec<Option<u8>>`.

Parsing never raises: type strings with unbalanced brackets yield fewer
parameters, and the resolver keeps them as opaque named references.
"""
from __future__ import annotations

from dataclasses import dataclass, field

_OPENERS = "<(["
_CLOSERS = ">)]"


@dataclass
class GenericType:
    type_name: str = ""
    parameters: list[str] = field(default_factory=list)


def parse_generic(text: str) -> GenericType:
    """Split `Name<A, B<C, D>>` into `Name` and its top-level parameters.

    A string without `<` yields the whole (trimmed) string as the type name
    and no parameters. Commas only split parameters at depth 1 and outside
    any tuple or array brackets. Text outside the brackets all belongs to
    the name, which is taken at the last top-level `<`: `A<B>C<D>` yields
    `AC` with parameters `B` and `D`.
    """
    result = GenericType()
    depth = 0
    param = ""
    type_name = ""
    opened = False
    # open tuple/array brackets inside the current parameter
    nested = 0

    for ch in text:
        if depth > 0 and ch in "([":
            nested += 1
        elif depth > 0 and ch in ")]":
            nested = max(nested - 1, 0)

        if ch == "<":
            if depth == 0:
                result.type_name = type_name.strip()
                opened = True
            elif depth > 0:
                param += ch
            depth += 1
        elif ch == ">":
            depth -= 1
            if depth == 0:
                result.parameters.append(param.strip())
                param = ""
            elif depth > 0:
                param += ch
        elif ch == "," and depth == 1 and nested == 0:
            result.parameters.append(param.strip())
            param = ""
        elif depth > 0:
            param += ch
        else:
            type_name += ch

    if not opened:
        result.type_name = type_name.strip()
    return result


def split_top_level(text: str, sep: str = ",") -> list[str]:
    """Split on `sep` where no `<>`, `()` or `[]` bracket is open."""
    parts: list[str] = []
    depth = 0
    current = ""
    for ch in text:
        if ch in _OPENERS:
            depth += 1
        elif ch in _CLOSERS:
            depth = max(depth - 1, 0)
        if ch == sep and depth == 0:
            parts.append(current.strip())
            current = ""
        else:
            current += ch
    parts.append(current.strip())
    return parts
