# -*- coding: utf-8 -*-
"""
This module locates the folder which holds sqlstep's config files. It is kept free of
imports from the rest of the package.
"""

import os
import os.path as osp
import platform
from typing import Optional


def get_home_dir() -> str:
    """
    Returns the user's home directory: the expanded ``~`` if it exists, otherwise the
    first existing directory among $HOME, $USERPROFILE and $TMP.

    :raises RuntimeError: if none of them exists.
    """
    candidates = [osp.expanduser("~")]
    candidates += [os.environ.get(name, "") for name in ("HOME", "USERPROFILE", "TMP")]

    for path in candidates:
        if path and osp.isdir(path):
            return path

    raise RuntimeError("Cannot determine the home directory, please set $HOME.")


def get_config_root() -> str:
    """
    Returns the platform's folder for per-user configuration:

        - macOS: ``~/Library/Application Support``
        - Linux: ``$XDG_CONFIG_HOME``, falling back to ``~/.config``
        - other: ``~/.config``
    """
    system = platform.system()

    if system == "Darwin":
        return osp.join(get_home_dir(), "Library", "Application Support")

    default = osp.join(get_home_dir(), ".config")

    if system == "Linux":
        return os.environ.get("XDG_CONFIG_HOME") or default

    return default


def get_conf_path(
    subfolder: Optional[str] = None,
    filename: Optional[str] = None,
    create: bool = False,
) -> str:
    """
    Returns a path inside the per-user config folder.

    :param subfolder: Folder of the application.
    :param filename: File inside ``subfolder``.
    :param create: Whether to create ``subfolder`` if it does not exist.
    """
    folder = get_config_root()

    if subfolder:
        folder = osp.join(folder, subfolder)

    if create:
        os.makedirs(folder, exist_ok=True)

    return osp.join(folder, filename) if filename else folder
