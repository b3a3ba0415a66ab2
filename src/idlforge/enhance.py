"""File layer: stamp metadata onto `<idl_dir>/<program_name>.json`, normalize
it and write the result back to the same path.

Shank IDLs are written back with only the metadata stamp added."""
from __future__ import annotations

import json
import logging
from typing import Any

from idlforge.config import KNOWN_IDL_GENERATORS, CompilerConfig, settings
from idlforge.errors import IdlFormatError, UnknownGeneratorError
from idlforge.normalize import IdlNormalizer

logger = logging.getLogger(__name__)


def enhance_idl(config: CompilerConfig, binary_version: str, lib_version: str) -> dict[str, Any]:
    idl_path = config.idl_path
    try:
        raw = json.loads(idl_path.read_text())
    except json.JSONDecodeError as e:
        raise IdlFormatError(f"IDL JSON parse error in {idl_path}: {e}") from e
    if not isinstance(raw, dict):
        raise IdlFormatError(f"IDL in {idl_path} must be a JSON object")

    metadata = dict(raw.get("metadata") or {})
    if config.is_anchor:
        metadata.update(
            address=config.program_id,
            origin=config.idl_generator,
            binaryVersion=binary_version,
            libVersion=lib_version,
        )
    elif config.is_shank:
        metadata.update(binaryVersion=binary_version, libVersion=lib_version)
    else:
        raise UnknownGeneratorError(config.idl_generator, KNOWN_IDL_GENERATORS)
    raw["metadata"] = metadata

    idl = IdlNormalizer(config).normalize_document(raw)

    idl_path.write_text(json.dumps(idl, indent=settings.idl_indent))
    logger.info(
        "IDL enhanced",
        extra={"path": str(idl_path), "generator": config.idl_generator},
    )
    return idl
