"""Layered TOML configuration files.

policychat reads at most two files from the config directory:
default.toml, then {POLICYCHAT_ENV}.toml on top of it. Either may be
absent; Settings fills anything missing from its field defaults.
"""

import os
import tomllib
from pathlib import Path
from typing import Any

CONFIG_DIR_VAR = "POLICYCHAT_CONFIG_DIR"
ENVIRONMENT_VAR = "POLICYCHAT_ENV"
DEFAULT_ENVIRONMENT = "development"
BASE_FILE = "default.toml"

# How many parent directories are searched for config/
SEARCH_DEPTH = 5


def get_config_dir(start: Path | None = None) -> Path:
    """Locate the config directory.

    POLICYCHAT_CONFIG_DIR wins when set and must exist. Otherwise the
    first config/ found walking up from start (the working directory by
    default) is used, falling back to a relative config/.
    """
    explicit = os.environ.get(CONFIG_DIR_VAR)
    if explicit:
        path = Path(explicit)
        if not path.is_dir():
            raise FileNotFoundError(f"{CONFIG_DIR_VAR} does not exist: {explicit}")
        return path

    here = (start or Path.cwd()).resolve()
    for candidate in [here, *here.parents][:SEARCH_DEPTH]:
        if (candidate / "config").is_dir():
            return candidate / "config"
    return Path("config")


def get_environment() -> str:
    """Name of the active environment overlay."""
    return os.environ.get(ENVIRONMENT_VAR) or DEFAULT_ENVIRONMENT


def load_toml(file_path: Path) -> dict[str, Any]:
    """Parse one TOML file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        tomllib.TOMLDecodeError: If the TOML syntax is invalid
    """
    if not file_path.is_file():
        raise FileNotFoundError(f"Configuration file not found: {file_path}")
    return tomllib.loads(file_path.read_text(encoding="utf-8"))


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge override into a copy of base.

    Tables present on both sides are merged key by key; anything else in
    override replaces the base value.
    """
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            value = deep_merge(current, value)
        merged[key] = value
    return merged


def config_files(config_dir: Path, env: str) -> list[Path]:
    """The layered files that exist, lowest precedence first."""
    names = [BASE_FILE]
    if f"{env}.toml" != BASE_FILE:
        names.append(f"{env}.toml")
    return [config_dir / name for name in names if (config_dir / name).is_file()]


def load_config(config_dir: Path | None = None, env: str | None = None) -> dict[str, Any]:
    """Read and merge the layered configuration files.

    Args:
        config_dir: Directory to read from; located with get_config_dir if omitted
        env: Environment overlay name; POLICYCHAT_ENV if omitted
    """
    config_dir = config_dir or get_config_dir()
    env = env or get_environment()

    config: dict[str, Any] = {}
    for path in config_files(config_dir, env):
        config = deep_merge(config, load_toml(path))
    return config
