"""List the sixteen dyes with their measured colour, max channel and Lab value.

Example:
    jop-mixer dyes
    jop-mixer dyes --json
"""

from jop_mixer.core.dyes import DYES
from jop_mixer.core.report import format_dyes_json, format_dyes_text
from jop_mixer.core.types import Command

command = Command(name='dyes', help='List the dye table.')


@command.options
def options(parser) -> None:
    parser.add_argument('-j', '--json', action='store_true', help='Output JSON instead of text')


@command.run
def run(args) -> int:
    print(format_dyes_json(DYES) if args.json else format_dyes_text(DYES))
    return 0
