"""jop-mixer — find the dye mix closest to a target colour.

Usage: jop-mixer <command> [options]

Commands are auto-discovered from jop_mixer/commands/.
Each command module's docstring is its documentation.
Run `jop-mixer help <command>` for full module docs.

Environment variables / .env loading:
  OS environment variables are always used first.
  If a variable is not set, jop-mixer looks for a .env file starting from
  the current directory and walking up, stopping at the nearest .git boundary.
  Use --env-file to override the .env location explicitly.
  JOP_MIXER_* variables set search defaults (see jop_mixer.core.config).
"""

import argparse
import importlib
import logging
import sys

from jop_mixer import registry
from jop_mixer.core.config import load_env, params_from_env
from jop_mixer.core.errors import InvalidColourFormat


def _load_command_module(name: str) -> object:
    """Load the raw module for a command (for docstring access)."""
    return importlib.import_module(f'jop_mixer.commands.{name}')


def _short_help(name: str, fallback: str) -> str:
    doc = (_load_command_module(name).__doc__ or '').strip()
    return doc.splitlines()[0] if doc else fallback


def _build_parser() -> argparse.ArgumentParser:
    commands = registry.all_commands()

    epilog = (
        'Examples:\n'
        "  jop-mixer search '#7A4F9C' --depth 4\n"
        '  jop-mixer search 8731B6 --snap --json\n'
        "  jop-mixer search '#C0FFEE' --depth 8 --two-step --irl\n"
        '  jop-mixer mix red blue=2 white\n'
        '  jop-mixer dyes\n'
        '  jop-mixer panel --fail-on-delta 5\n'
        '  jop-mixer help search\n'
        '\n'
        'Search defaults (set in .env or environment):\n'
        '  JOP_MIXER_DEPTH, JOP_MIXER_BEAM_WIDTH, JOP_MIXER_EARLY_STOP,\n'
        '  JOP_MIXER_DELTA_E_CUTOFF, JOP_MIXER_TWO_STEP, JOP_MIXER_STEP_SPLIT,\n'
        '  JOP_MIXER_SNAP, JOP_MIXER_SNAP_THRESHOLD, JOP_MIXER_IRL, JOP_MIXER_COMPENSATION\n'
    )
    parser = argparse.ArgumentParser(
        prog='jop-mixer',
        description='Find the dye mix closest to a target colour.',
        epilog=epilog,
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument(
        '--env-file',
        metavar='PATH',
        default=None,
        help='Path to .env file (default: walk up from cwd to .git boundary)',
    )
    parser.add_argument('-v', '--verbose', action='store_true', help='Log search progress to stderr')
    sub = parser.add_subparsers(dest='command', help='Command to run')

    for name, cmd in sorted(commands.items()):
        p = sub.add_parser(name, help=_short_help(name, cmd.help))
        cmd.add_arguments(p)

    # `help` subcommand — prints full module docstring for a command
    help_parser = sub.add_parser('help', help='Print full docs for a command')
    help_parser.add_argument('topic', nargs='?', help='Command name')

    return parser


def _print_help(topic: str | None) -> int:
    """Print full module docstring for a command."""
    commands = registry.all_commands()

    if topic is None:
        print('Available commands:\n')
        for name, cmd in sorted(commands.items()):
            print(f'  {name:<10} {_short_help(name, cmd.help)}')
        print('\nRun: jop-mixer help <command> for full docs.')
        return 0

    if topic not in commands:
        print(f'Unknown command: {topic}', file=sys.stderr)
        print(f'Available: {", ".join(sorted(commands))}', file=sys.stderr)
        return 1

    doc = (_load_command_module(topic).__doc__ or '').strip()
    print(doc if doc else f'(No module docs for {topic!r})')
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
        stream=sys.stderr,
    )

    # Load .env before anything else — OS env vars always win
    env_path = load_env(env_file=args.env_file)
    if env_path:
        print(f'jop-mixer: loaded {env_path}', file=sys.stderr)

    if not args.command:
        parser.print_help()
        return 1

    if args.command == 'help':
        return _print_help(args.topic)

    args.env_params = params_from_env()
    try:
        return registry.get(args.command).execute(args)
    except InvalidColourFormat as e:
        print(f'jop-mixer: error: {e}', file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
