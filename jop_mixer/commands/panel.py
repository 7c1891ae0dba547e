"""Regression panel: snap exactness for every dye, then accuracy on reference targets.

Snap checks: searching each dye's own hex with --snap and a 0.1 threshold
must return that dye with zero mixing steps, ΔE ~ 0 and the same hex.

Accuracy checks: ten reference targets are searched without snapping
(default depth 3, beam width 50). Each must land within --fail-on-delta
ΔE (default 5).

Exits 1 if any check fails, so it can gate CI.

Example:
    jop-mixer panel
    jop-mixer panel --depth 4 --fail-on-delta 3 --json
"""

from jop_mixer.core.dyes import DYES
from jop_mixer.core.report import format_report_json, format_report_text
from jop_mixer.core.search import SearchEngine
from jop_mixer.core.types import Command, Report, SearchParams

command = Command(
    name='panel',
    help='Run the snap and accuracy regression panel. Exit 1 on failure.',
)

PANEL_TARGETS = [
    '#AE2D26',  # red
    '#FBD53C',  # yellow
    '#5D7B16',  # green
    '#3B43A8',  # blue
    '#8731B6',  # purple
    '#169A9A',  # cyan
    '#F67E1D',  # orange
    '#F089A8',  # pink
    '#39B1D7',  # light blue
    '#7EC51F',  # lime
]

SNAP_THRESHOLD = 0.1
SNAP_TOLERANCE = 1e-6


def run_panel(
    engine: SearchEngine,
    depth: int = 3,
    beam_width: int = 50,
    max_delta: float = 5.0,
    targets: list[str] | None = None,
) -> Report:
    report = Report(title=f'jop-mixer panel (depth {depth}, beam {beam_width}, ΔE ≤ {max_delta})')

    snap_params = SearchParams(depth=1, beam_width=10, delta_e_cutoff=10, snap=True, snap_threshold=SNAP_THRESHOLD)
    for dye in engine.dyes:
        result = engine.search(dye.hex, snap_params)
        passed = result.steps == 0 and result.hex == dye.hex and abs(result.delta_e) < SNAP_TOLERANCE
        report.add(
            f'snap:{dye.name}',
            {'got': result.hex, 'steps': result.steps, 'delta_e': round(result.delta_e, 6), 'pass': passed},
        )

    params = SearchParams(depth=depth, beam_width=beam_width)
    for target in targets if targets is not None else PANEL_TARGETS:
        result = engine.search(target, params)
        report.add(
            f'target:{target}',
            {'got': result.hex, 'delta_e': round(result.delta_e, 2), 'pass': result.delta_e <= max_delta},
        )
    return report


@command.options
def options(parser) -> None:
    parser.add_argument('-d', '--depth', type=int, default=3, help='Search depth (default 3)')
    parser.add_argument('-w', '--beam-width', type=int, default=50, help='Beam width (default 50)')
    parser.add_argument(
        '--fail-on-delta',
        type=float,
        default=5.0,
        metavar='N',
        help='Fail a target whose best ΔE exceeds N (default 5)',
    )
    parser.add_argument('-j', '--json', action='store_true', help='Output JSON instead of text')


@command.run
def run(args) -> int:
    report = run_panel(SearchEngine(DYES), args.depth, args.beam_width, args.fail_on_delta)
    print(format_report_json(report) if args.json else format_report_text(report))
    return 0 if report.ok else 1
