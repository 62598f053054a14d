"""Configuration loading for bridged.

Reads an optional TOML config file from a project directory to control how
registries treat control calls that name undeclared operations.
"""
from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict

CONFIG_FILENAMES = ("bridged.toml",)
CONFIG_TABLE = "bridge"

UnknownOperationPolicy = Literal["raise", "ignore"]


class BridgeConfig(BaseModel):
    """Registry behaviour settings."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    # "raise": register/deregister on an undeclared name raise UnknownOperationError.
    # "ignore": they log a warning and do nothing.
    unknown_operation: UnknownOperationPolicy = "raise"

    @property
    def ignores_unknown(self) -> bool:
        return self.unknown_operation == "ignore"


DEFAULT_CONFIG = BridgeConfig()


def load_config(base_dir: str | Path) -> BridgeConfig:
    """Load config from the first matching file in ``base_dir``.

    Only the ``[bridge]`` table is read. Returns the defaults when no config
    file exists; invalid values raise ``pydantic.ValidationError``.
    """
    base = Path(base_dir)
    for filename in CONFIG_FILENAMES:
        candidate = base / filename
        if not candidate.exists():
            continue
        with candidate.open("rb") as f:
            data = tomllib.load(f)
        return BridgeConfig.model_validate(data.get(CONFIG_TABLE, {}))

    return BridgeConfig()
