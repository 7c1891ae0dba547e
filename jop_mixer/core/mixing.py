"""Dye mixing: the in-game integer averaging rule and the linear-light IRL preview.

The game sums each dye's R, G, B and max channel, divides by the dye count
with integer division, then scales the averages by
floor(avg_max / max(avg_r, avg_g, avg_b)). Every step floors. The base
canvas is not part of the average; it is only the answer for an empty mix.
"""

from collections.abc import Mapping

import numpy as np

from jop_mixer.core.colour import RGB, linear_to_srgb
from jop_mixer.core.dyes import BASE_RGB, DYES, DyeTable
from jop_mixer.core.types import Multiset, Totals

Counts = Multiset | Mapping[str, int]


def mix_totals(totals: Totals, n: int) -> RGB:
    """Apply the averaging + brightness normalisation to running totals of n dyes."""
    if n == 0:
        return BASE_RGB
    total_r, total_g, total_b, total_max = totals
    avg_r = total_r // n
    avg_g = total_g // n
    avg_b = total_b // n
    avg_max = total_max // n
    max_of_avg = max(avg_r, avg_g, avg_b)
    if max_of_avg == 0:
        return (0, 0, 0)
    gain = avg_max // max_of_avg
    return (avg_r * gain, avg_g * gain, avg_b * gain)


def totals_of(counts: Counts, dyes: DyeTable = DYES) -> tuple[Totals, int]:
    """Sum (R, G, B, Max) over a multiset. Returns (totals, dye count)."""
    ms = dyes.multiset(counts)
    total_r = total_g = total_b = total_max = n = 0
    for dye, count in zip(dyes, ms.counts):
        if count <= 0:
            continue
        total_r += dye.rgb[0] * count
        total_g += dye.rgb[1] * count
        total_b += dye.rgb[2] * count
        total_max += dye.max * count
        n += count
    return (total_r, total_g, total_b, total_max), n


def mix_counts(counts: Counts, dyes: DyeTable = DYES) -> RGB:
    """Mixed colour of a multiset under the game's rule. Empty -> white base."""
    totals, n = totals_of(counts, dyes)
    return mix_totals(totals, n)


def mix_irl(counts: Counts, compensation: float = 1.0, dyes: DyeTable = DYES) -> RGB:
    """Real-world preview: count-weighted mean in linear light, scaled by `compensation`.

    Ignores the game's brightness normalisation. Empty -> white base, untouched.
    """
    ms = dyes.multiset(counts)
    n = ms.total
    if n == 0:
        return BASE_RGB
    compensation = max(0.0, float(compensation))
    mean = np.asarray(ms.counts, dtype=np.float64) @ dyes.linear_array / n * compensation
    return (linear_to_srgb(float(mean[0])), linear_to_srgb(float(mean[1])), linear_to_srgb(float(mean[2])))
