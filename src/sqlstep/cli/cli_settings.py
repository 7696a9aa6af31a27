from __future__ import annotations

import ast
import io

import click

from .common import config_option
from .core import CliException, ConfigKey
from .output import echo, ok


def _section_for_key(key: str) -> str:
    from ..config.main import KEY_SECTION_MAP

    # Check if the config key exists in any section.
    section = KEY_SECTION_MAP.get(key, "")

    if not section:
        raise CliException(f"'{key}' is not a valid configuration key.")

    return section


@click.group(help="View and change configuration values.")
def config() -> None:
    pass


@config.command(name="get", help="Print the value of a given configuration key.")
@click.argument("key", type=ConfigKey())
@config_option
def config_get(key: str, config_name: str) -> None:
    from ..config import SqlStepConfig

    section = _section_for_key(key)
    echo(str(SqlStepConfig(config_name).get(section, key)))


@config.command(
    name="set",
    help="""
Update configuration with a value for the given key.

Values will be cast to the type of the key's default, raising an error where this is not
possible.
""",
)
@click.argument("key", type=ConfigKey())
@click.argument("value")
@config_option
def config_set(key: str, value: str, config_name: str) -> None:
    from ..config import SqlStepConfig

    conf = SqlStepConfig(config_name)
    section = _section_for_key(key)
    default_value = conf.get_default(section, key)

    if isinstance(default_value, str):
        py_value = value
    else:
        try:
            py_value = ast.literal_eval(value)
        except (SyntaxError, ValueError):
            py_value = value

    try:
        conf.set(section, key, py_value)
    except ValueError as e:
        raise CliException(e.args[0])

    ok(f"Set {key} to {py_value!r}.")


@config.command(name="show", help="Show all config keys and values.")
@config_option
def config_show(config_name: str) -> None:
    from ..config import SqlStepConfig

    conf = SqlStepConfig(config_name)

    with io.StringIO() as fp:
        conf.write(fp)
        echo(fp.getvalue())
