"""Mix an explicit set of dyes and print the resulting colour.

Each argument is a dye name, optionally with a count: `red`, `blue=2`.
Repeating a name adds to its count. The mix uses the in-game rule:
channels and max channel summed, integer-averaged, then scaled by
floor(avg max / max of averages). No dyes gives the white canvas.

--irl also prints the linear-light preview scaled by --compensation.

Example:
    jop-mixer mix red blue white
    jop-mixer mix yellow=3 blue --irl --compensation 1.1
"""

import sys

from jop_mixer.core.cache import MixCache
from jop_mixer.core.colour import rgb_to_hex
from jop_mixer.core.dyes import DYES
from jop_mixer.core.mixing import mix_irl
from jop_mixer.core.projection import flatten_counts, step_swatches
from jop_mixer.core.report import format_result_json
from jop_mixer.core.types import Command, MixResult

command = Command(
    name='mix',
    help='Mix an explicit multiset of dyes (e.g. red blue=2) and print the colour.',
)


def parse_counts(specs: list[str]) -> dict[str, int]:
    """Parse ['red', 'blue=2'] into {'red': 1, 'blue': 2}. Raises KeyError/ValueError."""
    counts: dict[str, int] = {}
    for spec in specs:
        name, _, raw = spec.partition('=')
        name = name.strip()
        count = int(raw) if raw else 1
        if count < 0:
            raise ValueError(f'negative count for {name}: {count}')
        if name not in DYES:
            raise KeyError(f'Unknown dye: {name}. Available: {", ".join(DYES.names)}')
        counts[name] = counts.get(name, 0) + count
    return counts


@command.options
def options(parser) -> None:
    parser.add_argument('dyes', nargs='*', metavar='DYE[=COUNT]', help='Dyes to mix')
    parser.add_argument('-i', '--irl', action='store_true', help='Add a linear-light preview')
    parser.add_argument('--compensation', type=float, default=1.0, help='Brightness factor for --irl')
    parser.add_argument('-j', '--json', action='store_true', help='Output JSON instead of text')


@command.run
def run(args) -> int:
    try:
        counts = parse_counts(args.dyes)
    except (KeyError, ValueError) as e:
        message = e.args[0] if isinstance(e, KeyError) else str(e)
        print(f'jop-mixer: error: {message}', file=sys.stderr)
        return 1

    cache = MixCache()
    mixed = cache.get(counts)
    sequence = flatten_counts(counts)
    result = MixResult(
        target=mixed.rgb,
        rgb=mixed.rgb,
        delta_e=0.0,
        counts={k: v for k, v in counts.items() if v > 0},
        sequence=sequence,
        swatches=step_swatches(sequence, mixed.lab),
        irl=mix_irl(counts, args.compensation) if args.irl else None,
    )
    if args.json:
        print(format_result_json(result))
        return 0

    print(f'{cache.key(counts) or "(empty)"}  ->  {result.hex}  rgb{result.rgb}')
    for i, swatch in enumerate(result.swatches, start=1):
        print(f'  {i:>2}. +{swatch.name:<11} {swatch.hex}')
    if result.irl is not None:
        print(f'  irl preview: {rgb_to_hex(result.irl)}')
    return 0
