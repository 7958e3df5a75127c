# clash_dash/config.py
# Description: Configuration management for the clash_dash application.
#
# Imports
import copy
import os
import sys
if sys.version_info < (3, 11):
    import tomli as tomllib
else:
    import tomllib
from pathlib import Path
from typing import Dict, Any, Optional
#
# Third-Party Imports
import toml
from loguru import logger
#
# Local Imports
from clash_dash.luci_api.schemas import ServerTarget
#
#######################################################################################################################
#
# Functions:

# --- Path to the configuration file ---
DEFAULT_CONFIG_PATH = Path.home() / ".config" / "clash_dash" / "config.toml"

BASE_DATA_DIR = Path.home() / ".local" / "share" / "clash_dash"

CONFIG_TOML_CONTENT = """
# Configuration for clash_dash
# Location: ~/.config/clash_dash/config.toml

[general]
log_level = "INFO"
# Empty means <data dir>/clash_dash.log
log_file = ""
log_console = true

[openwrt]
host = "192.168.1.1"
port = "80"
use_ssl = false
username = "root"
# The environment variable is checked before `password`
password_env_var = "CLASH_DASH_OPENWRT_PASSWORD"
password = ""
request_timeout = 30.0
uci_package = "openclash"

[subscriptions]
template_list_path = "/usr/share/openclash/res/sub_ini.list"
"""

try:
    DEFAULT_CONFIG_FROM_TOML: Dict[str, Any] = tomllib.loads(CONFIG_TOML_CONTENT)
except tomllib.TOMLDecodeError as e:
    logger.critical(f"FATAL: Could not parse internal CONFIG_TOML_CONTENT: {e}.")
    DEFAULT_CONFIG_FROM_TOML = {}


# --- Helper for deep merging dictionaries ---
def deep_merge_dicts(base: Dict, update: Dict) -> Dict:
    """Returns a copy of `base` with `update` merged in, recursing into nested tables."""
    merged = copy.deepcopy(base)
    for key, value in update.items():
        if isinstance(value, dict) and key in merged and isinstance(merged[key], dict):
            merged[key] = deep_merge_dicts(merged[key], value)
        else:
            merged[key] = value
    return merged


# --- Primary Configuration Loading Logic ---
_CONFIG_CACHE: Optional[Dict[str, Any]] = None


def _report_loaded_config(loaded_config: Dict[str, Any]) -> None:
    unknown = sorted(set(loaded_config) - set(DEFAULT_CONFIG_FROM_TOML))
    if unknown:
        logger.warning(f"Ignoring unknown config section(s): {', '.join(unknown)}")

    openwrt = loaded_config.get("openwrt", {})
    if not isinstance(openwrt, dict):
        logger.warning("[openwrt] is not a table; router settings fall back to defaults")
        return
    scheme = "https" if openwrt.get("use_ssl") else "http"
    logger.debug(
        f"Router target: {scheme}://{openwrt.get('host')}:{openwrt.get('port')} "
        f"(package: {openwrt.get('uci_package')}, timeout: {openwrt.get('request_timeout')}s)"
    )


def load_cli_config_and_ensure_existence(force_reload: bool = False) -> Dict[str, Any]:
    """
    Loads the router and logging settings from ~/.config/clash_dash/config.toml.

    A missing file is created from CONFIG_TOML_CONTENT. The user file is merged
    over the built-in defaults, so a partial [openwrt] table keeps the default
    port, timeout and UCI package. Unknown sections are reported and ignored.
    """
    global _CONFIG_CACHE
    if _CONFIG_CACHE is not None and not force_reload:
        return _CONFIG_CACHE

    loaded_config = copy.deepcopy(DEFAULT_CONFIG_FROM_TOML)

    if not DEFAULT_CONFIG_PATH.exists():
        logger.info(f"Config file not found at {DEFAULT_CONFIG_PATH}. Creating with default values.")
        try:
            DEFAULT_CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
            with open(DEFAULT_CONFIG_PATH, "w", encoding="utf-8") as f:
                f.write(CONFIG_TOML_CONTENT)
            logger.info(f"Created default config file at {DEFAULT_CONFIG_PATH}")
        except OSError as e:
            logger.error(f"Could not create default config file {DEFAULT_CONFIG_PATH}: {e}. Using internal defaults.")
    else:
        logger.info(f"Attempting to load config from: {DEFAULT_CONFIG_PATH}")
        try:
            with open(DEFAULT_CONFIG_PATH, "rb") as f:
                user_config_from_file = tomllib.load(f)
            loaded_config = deep_merge_dicts(loaded_config, user_config_from_file)
            logger.info(f"Successfully loaded and merged config from {DEFAULT_CONFIG_PATH}")
        except tomllib.TOMLDecodeError as e:
            logger.error(f"Error decoding TOML config file {DEFAULT_CONFIG_PATH}: {e}. Using internal defaults.")
        except OSError as e:
            logger.error(f"Could not read config {DEFAULT_CONFIG_PATH}: {e}. Using internal defaults.")

    _CONFIG_CACHE = loaded_config
    _report_loaded_config(loaded_config)
    return _CONFIG_CACHE


def save_setting_to_cli_config(section: str, key: str, value: Any) -> bool:
    """
    Saves a specific setting to the user's TOML configuration file.

    Reads the current file, updates `key` within `section` (nested sections
    such as "openwrt.extra" are split on dots), writes the file back and
    reloads the config cache.

    Returns:
        True if the setting was saved successfully, False otherwise.
    """
    global _CONFIG_CACHE
    logger.info(f"Attempting to save setting: [{section}].{key}")

    try:
        DEFAULT_CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error(f"Could not create config directory {DEFAULT_CONFIG_PATH.parent}: {e}")
        return False

    config_data: Dict[str, Any] = {}
    if DEFAULT_CONFIG_PATH.exists():
        try:
            with open(DEFAULT_CONFIG_PATH, "rb") as f:
                config_data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            logger.error(f"Corrupted config file at {DEFAULT_CONFIG_PATH}. Cannot save. Please fix or delete it. Error: {e}")
            return False

    current_level = config_data
    try:
        for part in section.split('.'):
            current_level = current_level.setdefault(part, {})
        current_level[key] = value
    except (TypeError, AttributeError):
        logger.error(
            f"Configuration structure conflict. Could not set '{key}' in section '{section}' "
            f"because a part of the path is not a table."
        )
        return False

    try:
        with open(DEFAULT_CONFIG_PATH, "w", encoding="utf-8") as f:
            toml.dump(config_data, f)
        logger.success(f"Successfully saved setting to {DEFAULT_CONFIG_PATH}")
        _CONFIG_CACHE = None
        load_cli_config_and_ensure_existence(force_reload=True)
        return True
    except OSError as e:
        logger.error(f"Failed to write updated config to {DEFAULT_CONFIG_PATH}: {e}")
        return False


# --- Setting Getter ---
def get_cli_setting(section: str, key: str, default: Any = None) -> Any:
    """Helper to get a specific setting from the loaded configuration."""
    config = load_cli_config_and_ensure_existence()
    section_data = config.get(section)
    if isinstance(section_data, dict):
        return section_data.get(key, default)
    return default


def get_cli_log_file_path() -> Path:
    configured = get_cli_setting("general", "log_file", "")
    if configured:
        return Path(configured).expanduser()
    return BASE_DATA_DIR / "clash_dash.log"


def load_server_target() -> ServerTarget:
    """Builds the router target from the [openwrt] section."""
    env_var = get_cli_setting("openwrt", "password_env_var", "CLASH_DASH_OPENWRT_PASSWORD")
    password = os.getenv(env_var) if env_var else None
    if not password:
        password = get_cli_setting("openwrt", "password", "") or None

    return ServerTarget(
        host=get_cli_setting("openwrt", "host", ""),
        port=str(get_cli_setting("openwrt", "port", "80")),
        use_ssl=bool(get_cli_setting("openwrt", "use_ssl", False)),
        username=get_cli_setting("openwrt", "username") or None,
        password=password,
    )

#
# End of config.py
#######################################################################################################################
