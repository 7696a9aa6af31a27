"""
This module contains the default configuration values and a function to return existing
config instances for a specified config_name.
"""

from __future__ import annotations

import threading

from packaging.version import Version

from .base import get_conf_path
from .user import UserConfig, _DefaultsType


CONFIG_DIR_NAME = "sqlstep"
DEFAULT_CONFIG_NAME = "sqlstep"


# =============================================================================
#  Defaults
# =============================================================================

DEFAULTS_CONFIG: _DefaultsType = {
    "engine": {
        "library": "",  # path to the SQLite shared library, empty: auto-detect
    },
    "app": {
        "log_level": 20,  # log level for the sqlstep loggers, default: INFO
    },
    "output": {
        "null_text": "NULL",  # how the CLI prints SQL NULL values
    },
}

KEY_SECTION_MAP = {"version": "main"}

for section_name, section_values in DEFAULTS_CONFIG.items():
    for key in section_values.keys():
        KEY_SECTION_MAP[key] = section_name

# Only bump the version when changing or removing options.
CONF_VERSION = Version("1.0")


_config_instances: dict[str, UserConfig] = {}
_config_lock = threading.Lock()


def SqlStepConfig(config_name: str = DEFAULT_CONFIG_NAME) -> UserConfig:
    """
    Returns an existing config instance or creates a new one.

    :param config_name: Name of the configuration. The config file does not need to
        exist, missing values fall back to the defaults.
    :return: Config instance which saves changes to the drive when requested.
    """
    with _config_lock:
        try:
            return _config_instances[config_name]
        except KeyError:
            config_path = get_conf_path(CONFIG_DIR_NAME, f"{config_name}.ini")
            conf = UserConfig(
                config_path, defaults=DEFAULTS_CONFIG, version=CONF_VERSION
            )
            _config_instances[config_name] = conf
            return conf
