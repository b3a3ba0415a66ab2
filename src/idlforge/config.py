from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic_settings import BaseSettings

from idlforge.errors import ConfigShapeError

IDL_GENERATOR_ANCHOR = "anchor"
IDL_GENERATOR_SHANK = "shank"
KNOWN_IDL_GENERATORS = [IDL_GENERATOR_ANCHOR, IDL_GENERATOR_SHANK]


class Settings(BaseSettings):
    model_config = {"env_prefix": "IDLFORGE_", "env_file": ".env", "env_file_encoding": "utf-8"}

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    # Output
    idl_indent: int = 2

    # Compiler defaults
    anchor_remaining_accounts: bool = False
    float_as_bytes: bool = False


settings = Settings()


class CompilerConfig(BaseModel):
    """Caller configuration consumed by the normalizer and instruction compiler.

    Hooks, matchers and the fallback are validated for callability when the
    config is built, so a misconfigured run fails before any IDL is touched.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, extra="forbid")

    program_name: str = ""
    idl_dir: Path = Path(".")
    idl_generator: str = IDL_GENERATOR_ANCHOR
    program_id: str | None = None

    # (idl: dict) -> dict, applied before normalization
    idl_hook: Callable[..., Any] | None = None
    # (idl: Idl) -> Idl, applied after normalization
    idl_hook_post_adaption: Callable[..., Any] | None = None
    # (raw, resolve, register) -> TypeNode | None
    custom_type_mappers: list[Callable[..., Any]] = Field(default_factory=list)
    # (raw, resolve) -> TypeNode | None
    idl_type_fallback: Callable[..., Any] | None = None

    anchor_remaining_accounts: bool = Field(
        default_factory=lambda: settings.anchor_remaining_accounts
    )
    rename_identifiers: bool = True
    float_as_bytes: bool = Field(default_factory=lambda: settings.float_as_bytes)

    def __init__(self, **data: Any) -> None:
        try:
            super().__init__(**data)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                for err in e.errors()
            )
            raise ConfigShapeError(f"Invalid compiler config: {problems}") from e

    @classmethod
    def create(cls, **options: Any) -> CompilerConfig:
        return cls(**options)

    @property
    def idl_path(self) -> Path:
        return self.idl_dir / f"{self.program_name}.json"

    @property
    def is_anchor(self) -> bool:
        return self.idl_generator == IDL_GENERATOR_ANCHOR

    @property
    def is_shank(self) -> bool:
        return self.idl_generator == IDL_GENERATOR_SHANK
