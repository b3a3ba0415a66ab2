"""Identifier case conversions.

`pascal_case` and `snake_case` reproduce the conversions Anchor clients use
when deriving discriminators, so their output feeds straight into the sighash
preimages and must not drift.
"""
from __future__ import annotations

import re

_CAMEL_SEGMENT = re.compile(r"[-_][a-z0-9]")
_LEADING_SEPARATORS = re.compile(r"^[_.\- ]+")
_SEPARATORS_AND_IDENTIFIER = re.compile(r"[_.\- ]+(\w|$)")
_NUMBERS_AND_IDENTIFIER = re.compile(r"\d+(\w|$)")

_SPLIT_LOWER_UPPER = re.compile(r"([a-z0-9])([A-Z])")
_SPLIT_UPPER_UPPER_LOWER = re.compile(r"([A-Z])([A-Z][a-z])")
_STRIP_NON_ALNUM = re.compile(r"[^A-Za-z0-9]+")


def snake_to_camel(name: str) -> str:
    """Lowercase `name`, then drop each `-`/`_` and capitalize what follows it.

    >>> snake_to_camel("platform_config")
    'platformConfig'
    """
    return _CAMEL_SEGMENT.sub(lambda m: m.group(0)[1].upper(), name.lower())


def upper_first(name: str) -> str:
    return name[:1].upper() + name[1:]


def _preserve_camel_case(value: str) -> str:
    # Marks word boundaries inside camelCase / XMLHttp style input with "-".
    is_last_lower = False
    is_last_upper = False
    is_last_last_upper = False

    i = 0
    while i < len(value):
        ch = value[i]
        if is_last_lower and ch.isupper():
            value = value[:i] + "-" + value[i:]
            is_last_lower = False
            is_last_last_upper = is_last_upper
            is_last_upper = True
            i += 1
        elif is_last_upper and is_last_last_upper and ch.islower():
            value = value[: i - 1] + "-" + value[i - 1 :]
            is_last_last_upper = is_last_upper
            is_last_upper = False
            is_last_lower = True
        else:
            is_last_lower = ch.lower() == ch and ch.upper() != ch
            is_last_last_upper = is_last_upper
            is_last_upper = ch.upper() == ch and ch.lower() != ch
        i += 1
    return value


def pascal_case(name: str) -> str:
    """Convert any casing convention to UpperCamelCase.

    >>> pascal_case("match_pool")
    'MatchPool'
    >>> pascal_case("matchPool")
    'MatchPool'
    """
    value = name.strip()
    if not value:
        return ""
    if len(value) == 1:
        return "" if value in "_.- " else value.upper()

    if value != value.lower():
        value = _preserve_camel_case(value)

    value = _LEADING_SEPARATORS.sub("", value).lower()
    value = upper_first(value)

    value = _SEPARATORS_AND_IDENTIFIER.sub(lambda m: m.group(1).upper(), value)
    return _NUMBERS_AND_IDENTIFIER.sub(lambda m: m.group(0).upper(), value)


def snake_case(name: str) -> str:
    """Convert any casing convention to lower_snake_case.

    >>> snake_case("createMatch")
    'create_match'
    """
    value = _SPLIT_LOWER_UPPER.sub("\\1\0\\2", name)
    value = _SPLIT_UPPER_UPPER_LOWER.sub("\\1\0\\2", value)
    value = _STRIP_NON_ALNUM.sub("\0", value).strip("\0")
    return "_".join(part.lower() for part in value.split("\0"))
