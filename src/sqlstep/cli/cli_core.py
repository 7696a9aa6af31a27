from __future__ import annotations

import logging
from typing import Any

import click
from rich.console import Console
from rich.text import Text

from .common import config_option, convert_database_errors
from .core import BindParameter, ParameterKey
from .output import format_value, info, ok, rich_table


@click.command(
    name="exec",
    help="""
Execute a single SQL statement and print all resulting rows.

The database file is created if it does not exist. Parameters are bound by one-based
index (-p 2=value) or by name including the prefix (-p :id=1). Values are bound as
integers or floats if they parse as such, "null" is bound as NULL and anything else as
text.
""",
)
@click.argument("database", type=click.Path(dir_okay=False))
@click.argument("sql")
@click.option(
    "--param",
    "-p",
    "params",
    type=BindParameter(),
    multiple=True,
    help="Parameter to bind, can be given multiple times.",
)
@click.option("--verbose", "-v", is_flag=True, help="Print debug logs to stderr.")
@config_option
@convert_database_errors
def exec_sql(
    database: str,
    sql: str,
    params: tuple[tuple[ParameterKey, Any], ...],
    verbose: bool,
    config_name: str,
) -> None:
    from ..config import SqlStepConfig
    from ..database import Database
    from ..engine import get_engine
    from ..logging import setup_logging

    if verbose:
        setup_logging(config_name, level=logging.DEBUG)

    null_text = SqlStepConfig(config_name).get("output", "null_text")
    engine = get_engine(config_name=config_name)

    with Database(database, engine=engine) as db:
        with db.prepare(sql) as statement:
            for key, value in params:
                statement.bind(key, value)

            result_set = statement.execute()

            if not result_set.can_read:
                ok("Statement executed.")
                row_id = db.last_insert_row_id()
                if row_id:
                    info(f"Last insert row id: {row_id}")
                return

            headers = [
                result_set.column_name(column) or str(column)
                for column in range(result_set.column_count())
            ]
            table = rich_table(*headers)

            for row in result_set:
                table.add_row(*(Text(format_value(value, null_text)) for value in row))

    console = Console()
    console.print(table, highlight=False)


@click.command(name="info", help="Show the SQLite library in use.")
@config_option
@convert_database_errors
def info_cmd(config_name: str) -> None:
    from .. import __version__
    from ..engine import get_engine

    engine = get_engine(config_name=config_name)

    table = rich_table()
    table.add_row("sqlstep", __version__)
    table.add_row("SQLite", engine.library_version())
    table.add_row("Library", str(engine.library))

    console = Console()
    console.print(table, highlight=False)
