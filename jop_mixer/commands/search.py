"""Find the dye mix closest to a target colour.

Runs a beam search over multisets of the sixteen dyes. Each depth adds one
dye to every state on the beam, keeps the --beam-width closest mixes by
ΔE76 and discards anything above --cutoff. The best mix seen at any depth
wins, so a shallower mix can beat a deeper one.

--two-step splits the depth in two: a first beam to --split dyes (default
half the depth), then a fresh beam from every survivor. Cheaper on deep
searches, but it can miss mixes a single wide beam finds.

--snap returns a single dye, with no mixing, when one lies within
--snap-threshold ΔE of the target.

--irl adds a real-world preview: dyes averaged in linear light and
scaled by --compensation, ignoring the in-game brightness rule.

Defaults come from JOP_MIXER_* environment variables (see .env) and then
the built-in defaults (depth 1, beam width 50).

Example:
    jop-mixer search '#7A4F9C' --depth 4 --beam-width 80
    jop-mixer search 8731B6 --snap --json
    jop-mixer search '#C0FFEE' --depth 8 --two-step --irl --compensation 1.2
"""

from jop_mixer.core.report import format_result_json, format_result_text
from jop_mixer.core.search import SearchEngine
from jop_mixer.core.types import Command, SearchParams

command = Command(
    name='search',
    help='Search for the dye mix closest to a target hex colour.',
)


@command.options
def options(parser) -> None:
    parser.add_argument('target', help='Target colour: #RRGGBB, RRGGBB, #RGB or RGB')
    parser.add_argument('-d', '--depth', type=int, default=None, help='Maximum number of dyes to mix')
    parser.add_argument('-w', '--beam-width', type=int, default=None, help='States kept per depth')
    parser.add_argument('-e', '--early-stop', type=float, default=None, help='Stop once ΔE <= this value')
    parser.add_argument('-c', '--cutoff', type=float, default=None, help='Discard candidates with ΔE above this')
    parser.add_argument('-t', '--two-step', action='store_true', default=None, help='Use two-stage search')
    parser.add_argument('--split', type=int, default=None, help='First-stage depth for --two-step')
    parser.add_argument('-s', '--snap', action='store_true', default=None, help='Snap to a single close dye')
    parser.add_argument('--snap-threshold', type=float, default=None, help='ΔE threshold for --snap (default 2)')
    parser.add_argument('-i', '--irl', action='store_true', default=None, help='Add a linear-light preview')
    parser.add_argument('--compensation', type=float, default=None, help='Brightness factor for --irl')
    parser.add_argument('-j', '--json', action='store_true', help='Output JSON instead of text')


def params_from_args(args) -> SearchParams:
    """CLI flags layered over the environment defaults."""
    return SearchParams.from_mapping(
        {
            'depth': args.depth,
            'beam_width': args.beam_width,
            'early_stop': args.early_stop,
            'delta_e_cutoff': args.cutoff,
            'two_step': args.two_step,
            'step_split': args.split,
            'snap': args.snap,
            'snap_threshold': args.snap_threshold,
            'irl': args.irl,
            'compensation': args.compensation,
        },
        base=getattr(args, 'env_params', None),
    )


@command.run
def run(args) -> int:
    result = SearchEngine().search(args.target, params_from_args(args))
    if args.json:
        print(format_result_json(result))
    else:
        print(format_result_text(result))
    return 0
