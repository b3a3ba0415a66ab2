from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from idlforge.config import KNOWN_IDL_GENERATORS, CompilerConfig
from idlforge.enhance import enhance_idl
from idlforge.errors import IdlForgeError
from idlforge.logging_config import setup_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="idlforge", description="Normalize program IDLs")
    sub = parser.add_subparsers(dest="command", required=True)

    enhance = sub.add_parser("enhance", help="Normalize <idl-dir>/<program>.json in place")
    enhance.add_argument("idl_dir", type=Path)
    enhance.add_argument("program_name")
    enhance.add_argument("--generator", default="anchor", choices=KNOWN_IDL_GENERATORS)
    enhance.add_argument("--program-id", default=None)
    enhance.add_argument("--binary-version", default="")
    enhance.add_argument("--lib-version", default="")
    enhance.add_argument("--no-rename", action="store_true", help="Keep identifier casing")
    enhance.add_argument("--float-as-bytes", action="store_true", help="Resolve f64 to [u8; 8]")
    enhance.add_argument("--log-level", default=None)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(level=args.log_level)

    try:
        config = CompilerConfig.create(
            program_name=args.program_name,
            idl_dir=args.idl_dir,
            idl_generator=args.generator,
            program_id=args.program_id,
            rename_identifiers=not args.no_rename,
            float_as_bytes=args.float_as_bytes,
        )
        enhance_idl(config, args.binary_version, args.lib_version)
    except (IdlForgeError, OSError) as e:
        logger.error("Enhance failed", extra={"error": str(e)})
        print(f"idlforge: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
