"""
This module provides the ini-file backed settings store. Option values are kept as
Python literals so that integers and strings survive a round trip through the file
with their type intact. The type of every known option is fixed by its default.
"""

from __future__ import annotations

import ast
import configparser as cp
import copy
import logging
import os
from threading import RLock
from typing import Any, Dict

from packaging.version import Version


logger = logging.getLogger(__name__)

_DefaultsType = Dict[str, Dict[str, Any]]


class NoDefault:
    """Marker for options without a default value"""


def _type_mismatch(section: str, option: str, expected: Any, got: Any) -> str:
    return (
        f"Inconsistent type for config value [{section}][{option}]. "
        f"Expected {type(expected).__name__} but got {type(got).__name__}."
    )


class UserConfig(cp.ConfigParser):
    """
    Settings of one sqlstep configuration, stored as an ini file. Instances may be
    shared between threads but a file must not be written by several processes.

    Options which are missing from the file take their default values. Reading the
    file never writes to it, changes are written by :meth:`save` and by :meth:`set`
    unless ``save=False`` is given.

    :param path: Path of the ini file.
    :param defaults: Default values by section and option.
    :param load: Whether to read values from ``path`` if it exists.
    :param version: Version of the config layout, stored in the ``main`` section.
    """

    MAIN_SECTION = "main"

    def __init__(
        self,
        path: str,
        defaults: _DefaultsType | None = None,
        load: bool = True,
        version: Version = Version("0.0.0"),
    ) -> None:
        super().__init__(interpolation=None)

        self._path = path
        self._lock = RLock()

        self.default_config: _DefaultsType = copy.deepcopy(defaults or {})
        main_defaults = self.default_config.setdefault(self.MAIN_SECTION, {})
        main_defaults["version"] = str(version)

        self.reset_to_defaults(save=False)

        if load and os.path.exists(path):
            self._read_file(path)

    @property
    def config_path(self) -> str:
        """Path of the ini file."""
        return self._path

    def _read_file(self, path: str) -> None:
        with self._lock:
            try:
                self.read(path, encoding="utf-8")
            except cp.MissingSectionHeaderError:
                logger.error("Config file %s contains no section headers", path)

    def _store(self, section: str, option: str, value: Any) -> None:
        if not self.has_section(section):
            self.add_section(section)

        text = value if isinstance(value, str) else repr(value)
        super().set(section, option, text)

    def save(self) -> None:
        """Writes all options to the ini file, creating its folder if needed."""
        with self._lock:
            os.makedirs(os.path.dirname(self._path), exist_ok=True)

            with open(self._path, "w", encoding="utf-8") as f:
                self.write(f)

    def get_version(self) -> Version:
        """Returns the version of the config layout."""
        return Version(self.get(self.MAIN_SECTION, "version"))

    def reset_to_defaults(self, section: str | None = None, save: bool = True) -> None:
        """
        Restores default values.

        :param section: Only restore options of this section.
        :param save: Whether to write the result to the ini file.
        """
        with self._lock:
            for name, options in self.default_config.items():
                if section not in (None, name):
                    continue

                for option, value in options.items():
                    self._store(name, option, value)

            if save:
                self.save()

    def get_default(self, section: str, option: str) -> Any:
        """
        :returns: The default value of an option or :class:`NoDefault` if it has none.
        """
        return self.default_config.get(section, {}).get(option, NoDefault)

    def get(self, section: str, option: str, default: Any = NoDefault) -> Any:  # type: ignore
        """
        Returns the value of an option, converted to the type of its default.

        :param section: Section name.
        :param option: Option name.
        :param default: Value to return if the option is not set.
        :raises cp.NoSectionError: if the section does not exist and no default is
            given.
        :raises cp.NoOptionError: if the option does not exist and no default is given.
        """
        with self._lock:
            if not self.has_option(section, option):
                if default is not NoDefault:
                    return default
                elif self.has_section(section):
                    raise cp.NoOptionError(option, section)
                else:
                    raise cp.NoSectionError(section)

            text = super().get(section, option, raw=True)
            expected = self.get_default(section, option)

            if isinstance(expected, str):
                return text

            try:
                value = ast.literal_eval(text)
            except (SyntaxError, ValueError):
                value = text

            if expected is not NoDefault and type(value) is not type(expected):
                logger.error(_type_mismatch(section, option, expected, value))

            return value

    def set(self, section: str, option: str, value: Any, save: bool = True) -> None:  # type: ignore
        """
        Changes the value of an option. Options without a default take ``value`` as
        their default.

        :param section: Section name.
        :param option: Option name.
        :param value: New value. Integers are accepted for float options.
        :param save: Whether to write the result to the ini file.
        :raises ValueError: if ``value`` does not have the type of the default.
        """
        with self._lock:
            expected = self.get_default(section, option)

            if expected is NoDefault:
                self.default_config.setdefault(section, {})[option] = value
                expected = value
            elif isinstance(expected, float) and isinstance(value, int):
                value = float(value)

            if type(value) is not type(expected):
                raise ValueError(_type_mismatch(section, option, expected, value))

            self._store(section, option, value)

            if save:
                self.save()
