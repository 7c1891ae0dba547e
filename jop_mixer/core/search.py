"""Beam search over dye multisets.

A state is a multiset of dyes plus its running (R, G, B, Max) totals. One
depth step adds one dye to every state on the beam, for every dye in the
table (repetition allowed), scores each child by ΔE76 to the target, drops
children above the cutoff and keeps the best `beam_width` by a stable sort.
The best state seen at any depth, the empty canvas included, wins.

Two-stage search runs the same procedure to a split depth, then restarts a
fresh beam from every surviving state for the remaining depth. It is
cheaper than one deep beam but may miss mixes a single wide beam would find.
"""

import logging
from collections.abc import Mapping
from typing import Any

import numpy as np

from jop_mixer.core.cache import MixCache
from jop_mixer.core.colour import Lab, delta_e, hex_to_rgb, rgb_to_lab
from jop_mixer.core.dyes import BASE_LAB, BASE_RGB, DYES, Dye, DyeTable
from jop_mixer.core.mixing import mix_irl
from jop_mixer.core.projection import project
from jop_mixer.core.types import MixResult, SearchParams, SearchState

logger = logging.getLogger(__name__)


class SearchEngine:
    """Owns a dye table and the mix cache shared by every search it runs."""

    def __init__(self, dyes: DyeTable = DYES, cache: MixCache | None = None):
        self.dyes = dyes
        self.cache = cache if cache is not None else MixCache(dyes)
        if self.cache.dyes is not dyes:
            raise ValueError('MixCache was built for a different dye table')

    # -- states ---------------------------------------------------------

    def root(self, target_lab: Lab) -> SearchState:
        """The empty canvas: no dyes, base colour."""
        return SearchState(
            counts=(0,) * len(self.dyes),
            n=0,
            totals=(0, 0, 0, 0),
            rgb=BASE_RGB,
            lab=BASE_LAB,
            delta_e=delta_e(BASE_LAB, target_lab),
        )

    def expand(self, state: SearchState, dye: Dye, target_lab: Lab) -> SearchState:
        """Child of `state` with one more `dye`; totals carry forward additively."""
        counts = list(state.counts)
        counts[dye.index] += 1
        counts_key = tuple(counts)
        r, g, b, m = state.totals
        totals = (r + dye.rgb[0], g + dye.rgb[1], b + dye.rgb[2], m + dye.max)
        n = state.n + 1
        mixed = self.cache.resolve(counts_key, totals, n)
        return SearchState(
            counts=counts_key,
            n=n,
            totals=totals,
            rgb=mixed.rgb,
            lab=mixed.lab,
            delta_e=delta_e(mixed.lab, target_lab),
        )

    # -- search ---------------------------------------------------------

    def _beam(
        self,
        start: SearchState,
        target_lab: Lab,
        depth: int,
        beam_width: int,
        early_stop: float,
        cutoff: float,
    ) -> tuple[SearchState, list[SearchState], bool]:
        """Run `depth` beam steps from `start`.

        Returns (best state seen, final beam, whether early stop fired).
        """
        beam = [start]
        best = start
        for d in range(1, depth + 1):
            children = []
            for state in beam:
                for dye in self.dyes:
                    child = self.expand(state, dye, target_lab)
                    if child.delta_e > cutoff:
                        continue
                    children.append(child)
                    if child.delta_e < best.delta_e:
                        best = child
            if not children:
                logger.debug('[Search] depth %d: no candidates within cutoff %.3f', d, cutoff)
                break
            children.sort(key=lambda s: s.delta_e)
            beam = children[:beam_width]
            logger.debug(
                '[Search] depth %d: %d candidates, beam %d, best ΔE %.4f', d, len(children), len(beam), best.delta_e
            )
            if best.delta_e <= early_stop:
                return best, beam, True
        return best, beam, False

    def beam_search(self, target_lab: Lab, params: SearchParams) -> SearchState:
        """Single-stage beam search to `params.depth` dyes."""
        best, _beam, _stopped = self._beam(
            self.root(target_lab),
            target_lab,
            params.depth,
            params.beam_width,
            params.early_stop,
            params.delta_e_cutoff,
        )
        return best

    def two_step_search(self, target_lab: Lab, params: SearchParams) -> SearchState:
        """Beam to the split depth, then a fresh beam from every surviving seed."""
        depth = params.depth
        depth1 = depth // 2 if params.step_split is None else min(max(params.step_split, 0), depth)
        depth2 = depth - depth1
        logger.debug('[Search] two-step split %d + %d', depth1, depth2)

        best, seeds, stopped = self._beam(
            self.root(target_lab),
            target_lab,
            depth1,
            params.beam_width,
            params.early_stop,
            params.delta_e_cutoff,
        )
        if stopped or depth2 <= 0 or not seeds:
            return best

        overall = best
        for i, seed in enumerate(seeds):
            seed_best, _beam, _stopped = self._beam(
                seed,
                target_lab,
                depth2,
                params.beam_width,
                params.early_stop,
                params.delta_e_cutoff,
            )
            if seed_best.delta_e < overall.delta_e:
                overall = seed_best
                if overall.delta_e <= params.early_stop:
                    logger.debug('[Search] early stop after seed %d/%d', i + 1, len(seeds))
                    break
        return overall

    def snap(self, target_lab: Lab, threshold: float) -> Dye | None:
        """The dye nearest the target if it lies within `threshold` ΔE, else None."""
        if not len(self.dyes):
            return None
        distances = np.linalg.norm(self.dyes.lab_array - np.asarray(target_lab), axis=1)
        i = int(np.argmin(distances))
        if distances[i] <= threshold:
            return self.dyes[i]
        return None

    def search(self, target_hex: str, params: SearchParams | Mapping[str, Any] | None = None) -> MixResult:
        """Find the dye mix closest to `target_hex`.

        Raises InvalidColourFormat before doing any work if the hex is malformed.
        """
        target = hex_to_rgb(target_hex)
        if not isinstance(params, SearchParams):
            params = SearchParams.from_mapping(params)
        target_lab = rgb_to_lab(target)

        if params.snap:
            dye = self.snap(target_lab, params.snap_threshold)
            if dye is not None:
                logger.debug('[Search] %s snapped to %s', target_hex, dye.name)
                counts = {dye.name: 1}
                # Zero mixing steps: the dye is used as-is
                return MixResult(
                    target=target,
                    rgb=dye.rgb,
                    delta_e=delta_e(dye.lab, target_lab),
                    counts=counts,
                    irl=mix_irl(counts, params.compensation, self.dyes) if params.irl else None,
                    snapped=True,
                )

        if params.two_step:
            best = self.two_step_search(target_lab, params)
        else:
            best = self.beam_search(target_lab, params)
        self.cache.log_stats()
        return project(best, target, target_lab, params, self.dyes)


def search(
    target_hex: str,
    params: SearchParams | Mapping[str, Any] | None = None,
    engine: SearchEngine | None = None,
) -> MixResult:
    """Convenience wrapper: search with `engine`, or with a fresh engine and cache."""
    if engine is None:
        engine = SearchEngine()
    return engine.search(target_hex, params)
