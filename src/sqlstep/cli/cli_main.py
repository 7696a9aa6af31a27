# external imports
import click

# local imports
from .. import __version__
from .core import OrderedGroup
from .cli_core import exec_sql, info_cmd
from .cli_settings import config


@click.group(cls=OrderedGroup, help="Execute SQL on SQLite databases.")
@click.version_option(version=__version__, message="%(version)s")
def main() -> None:
    pass


main.add_command(exec_sql, section="Core Commands")
main.add_command(info_cmd, section="Information")
main.add_command(config, section="Settings")
