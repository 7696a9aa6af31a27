# -*- coding: utf-8 -*-

from typing import TypeVar

from .main import DEFAULT_CONFIG_NAME, SqlStepConfig


__all__ = [
    "DEFAULT_CONFIG_NAME",
    "SqlStepConfig",
    "validate_config_name",
]


_C = TypeVar("_C", bound=str)


def validate_config_name(string: _C) -> _C:
    """
    Validates that the config name does not contain any whitespace.

    :param string: String to validate.
    :returns: The input value.
    :raises ValueError: if the config name contains whitespace.
    """
    if len(string.split()) > 1:
        raise ValueError("Config name may not contain any whitespace")

    return string
