from __future__ import annotations

import functools
import sys
from typing import Callable, TypeVar
from typing_extensions import ParamSpec

import click

from .core import ConfigName
from .output import warn
from ..config import DEFAULT_CONFIG_NAME


P = ParamSpec("P")
T = TypeVar("T")


def convert_database_errors(func: Callable[P, T]) -> Callable[P, T]:
    """
    Decorator that prints a SqlStepError, or an OverflowError from binding an integer
    out of range, as a warning line to stdout and exits with status 1.
    """

    from ..errors import SqlStepError

    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
        try:
            return func(*args, **kwargs)
        except (SqlStepError, OverflowError) as exc:
            warn(str(exc))
            sys.exit(1)

    return wrapper


config_option = click.option(
    "-c",
    "--config-name",
    default=DEFAULT_CONFIG_NAME,
    type=ConfigName(),
    is_eager=True,
    expose_value=True,
    help="Run command with the given configuration.",
)
