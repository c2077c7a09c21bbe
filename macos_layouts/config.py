"""
Configuration for the layouts CLI.

Precedence (lowest to highest):
1. Built-in defaults (constants.ConfigPaths)
2. ~/.config/macos-layouts/config.json
3. Environment: MACOS_LAYOUTS_DIR, MACOS_LAYOUTS_HS_BINARY
4. CLI options (applied by the caller)
"""

import json
import logging
import os
from pathlib import Path
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .constants import (
    DOCK_SETTLE_DELAY_SECONDS,
    ENV_HS_BINARY,
    ENV_LAYOUTS_DIR,
    HS_BINARY,
    HS_TIMEOUT_SECONDS,
    ConfigPaths,
)
from .errors import ErrorCode, LayoutsError

logger = logging.getLogger(__name__)


class LayoutsConfig(BaseModel):
    """Resolved CLI configuration."""

    model_config = ConfigDict(populate_by_name=True)

    layouts_dir: Path = Field(default=ConfigPaths.LAYOUTS_DIR, alias="layoutsDir")
    compile_output_dir: Path = Field(default=ConfigPaths.COMPILE_OUTPUT_DIR, alias="compileOutputDir")
    init_lua_path: Path = Field(default=ConfigPaths.INIT_LUA, alias="initLuaPath")
    hs_binary: str = Field(default=HS_BINARY, alias="hsBinary", min_length=1)
    hs_timeout: float = Field(default=HS_TIMEOUT_SECONDS, alias="hsTimeout", gt=0)
    dock_settle_delay: float = Field(default=DOCK_SETTLE_DELAY_SECONDS, alias="dockSettleDelay", ge=0)

    @field_validator("layouts_dir", "compile_output_dir", "init_lua_path", mode="before")
    @classmethod
    def expand_home(cls, v):
        """Expand ``~`` in configured paths."""
        if isinstance(v, str):
            return Path(v).expanduser()
        if isinstance(v, Path):
            return v.expanduser()
        return v


def load_config(
    config_path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None
) -> LayoutsConfig:
    """
    Load configuration from file and environment.

    Args:
        config_path: Explicit config file; a missing explicit file is an error,
            a missing default file is not
        environ: Environment mapping (defaults to os.environ)

    Returns:
        LayoutsConfig

    Raises:
        LayoutsError: If the config file is unreadable or invalid
    """
    env = os.environ if environ is None else environ
    explicit = config_path is not None
    path = Path(config_path).expanduser() if explicit else ConfigPaths.CONFIG_FILE

    data: dict = {}
    if path.exists():
        try:
            with open(path, "r") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise LayoutsError(
                code=ErrorCode.CONFIG_INVALID,
                message=f"Cannot read config file {path}: {e}",
                context={"file_path": str(path)}
            ) from e
        if not isinstance(data, dict):
            raise LayoutsError(
                code=ErrorCode.CONFIG_INVALID,
                message=f"Config file {path} must contain a JSON object",
                context={"file_path": str(path)}
            )
        logger.debug(f"Loaded config file {path}")
    elif explicit:
        raise LayoutsError(
            code=ErrorCode.CONFIG_INVALID,
            message=f"Config file not found: {path}",
            context={"file_path": str(path)}
        )

    if env.get(ENV_LAYOUTS_DIR):
        data["layoutsDir"] = env[ENV_LAYOUTS_DIR]
    if env.get(ENV_HS_BINARY):
        data["hsBinary"] = env[ENV_HS_BINARY]

    try:
        return LayoutsConfig.model_validate(data)
    except ValidationError as e:
        raise LayoutsError(
            code=ErrorCode.CONFIG_INVALID,
            message=f"Invalid config: {e.error_count()} error(s) in {path}",
            suggestion=str(e),
            context={"file_path": str(path)}
        ) from e
