"""Turn a winning multiset into something to show: a dye order and per-step swatches.

Nothing here affects the optimisation. The swatch trace replays the mix one
dye at a time from the empty canvas and measures every intermediate colour
against the final target.
"""

from collections.abc import Mapping

from jop_mixer.core.colour import RGB, Lab, delta_e, rgb_to_lab
from jop_mixer.core.dyes import DYES, DyeTable
from jop_mixer.core.mixing import mix_irl, mix_totals
from jop_mixer.core.types import MixResult, Multiset, SearchParams, SearchState, Swatch


def flatten_counts(counts: Multiset | Mapping[str, int]) -> list[str]:
    """Dye names, most-used first, ties alphabetical; each repeated by its count."""
    items = counts.items() if isinstance(counts, Multiset) else ((k, v) for k, v in counts.items() if v and v > 0)
    ordered = sorted(items, key=lambda kv: (-kv[1], kv[0]))
    sequence: list[str] = []
    for name, count in ordered:
        sequence.extend([name] * count)
    return sequence


def step_swatches(sequence: list[str], target_lab: Lab, dyes: DyeTable = DYES) -> list[Swatch]:
    """Colour after each dye of `sequence` is added, with ΔE to the final target."""
    swatches = []
    total_r = total_g = total_b = total_max = 0
    for n, name in enumerate(sequence, start=1):
        dye = dyes[name]
        total_r += dye.rgb[0]
        total_g += dye.rgb[1]
        total_b += dye.rgb[2]
        total_max += dye.max
        rgb = mix_totals((total_r, total_g, total_b, total_max), n)
        swatches.append(Swatch(name=name, rgb=rgb, delta_e=delta_e(rgb_to_lab(rgb), target_lab)))
    return swatches


def project(
    state: SearchState,
    target: RGB,
    target_lab: Lab,
    params: SearchParams,
    dyes: DyeTable = DYES,
) -> MixResult:
    """Build the display result for the best search state."""
    ms = dyes.multiset(state.counts)
    sequence = flatten_counts(ms)
    return MixResult(
        target=target,
        rgb=state.rgb,
        delta_e=state.delta_e,
        counts=ms.to_dict(),
        sequence=sequence,
        swatches=step_swatches(sequence, target_lab, dyes),
        irl=mix_irl(ms, params.compensation, dyes) if params.irl else None,
    )
