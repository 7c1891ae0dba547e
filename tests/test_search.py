"""Tests for jop_mixer.core.search — beam search, two-stage search and snapping."""

import math

import pytest
from jop_mixer import search
from jop_mixer.core.cache import MixCache
from jop_mixer.core.colour import hex_to_rgb, rgb_to_lab
from jop_mixer.core.dyes import DYE_HEX, DYES
from jop_mixer.core.errors import InvalidColourFormat
from jop_mixer.core.search import SearchEngine
from jop_mixer.core.types import SearchParams

PANEL = [
    '#AE2D26',
    '#FBD53C',
    '#5D7B16',
    '#3B43A8',
    '#8731B6',
    '#169A9A',
    '#F67E1D',
    '#F089A8',
    '#39B1D7',
    '#7EC51F',
]

# Exactly white + black under the mixing rule; the nearest single dye is light_gray
WHITE_BLACK = '#8E8E90'


@pytest.fixture(scope='module')
def engine() -> SearchEngine:
    return SearchEngine()


def _lab(hex_value: str):
    return rgb_to_lab(hex_to_rgb(hex_value))


class TestParams:
    def test_defaults(self):
        p = SearchParams()
        assert p.depth == 1
        assert p.beam_width == 50
        assert p.delta_e_cutoff == math.inf
        assert p.snap_threshold == 2.0
        assert p.compensation == 1.0

    def test_camel_case_mapping(self):
        p = SearchParams.from_mapping({'depth': 3, 'beamWidth': 7, 'twoStep': True, 'stepSplit': 2})
        assert (p.depth, p.beam_width, p.two_step, p.step_split) == (3, 7, True, 2)

    def test_missing_and_none_fall_back(self):
        p = SearchParams.from_mapping({'depth': None, 'unknown': 1})
        assert p == SearchParams()

    def test_out_of_range_normalised(self):
        p = SearchParams(depth=-2, beam_width=0, early_stop=-1, compensation=-5)
        assert (p.depth, p.beam_width, p.early_stop, p.compensation) == (0, 1, 0.0, 0.0)

    def test_base_layering(self):
        base = SearchParams(depth=6, irl=True)
        p = SearchParams.from_mapping({'beam_width': 9}, base=base)
        assert (p.depth, p.beam_width, p.irl) == (6, 9, True)

    def test_unparseable_values_fall_back(self):
        p = SearchParams.from_mapping({'depth': 'abc', 'beamWidth': [], 'earlyStop': 'x', 'stepSplit': 'nan'})
        assert p == SearchParams()

    def test_unparseable_value_keeps_base(self):
        base = SearchParams(depth=6)
        assert SearchParams.from_mapping({'depth': 'abc'}, base=base).depth == 6

    def test_numeric_strings_accepted(self):
        p = SearchParams.from_mapping({'depth': '3', 'beamWidth': '8.0', 'deltaECutoff': 'inf', 'compensation': '1.5'})
        assert (p.depth, p.beam_width, p.delta_e_cutoff, p.compensation) == (3, 8, math.inf, 1.5)


class TestSearchBasics:
    def test_invalid_hex_raises_before_work(self):
        engine = SearchEngine()
        with pytest.raises(InvalidColourFormat):
            engine.search('#12345', {'depth': 3})
        assert len(engine.cache) == 0

    def test_depth_zero_is_blank_canvas(self, engine):
        result = engine.search('#102030', {'depth': 0})
        assert result.rgb == (255, 255, 255)
        assert result.counts == {}
        assert result.sequence == []

    def test_white_target_needs_no_dye(self, engine):
        result = engine.search('#FFFFFF', {'depth': 3})
        assert result.delta_e == 0.0
        assert result.counts == {}

    def test_deterministic(self):
        params = {'depth': 3, 'beamWidth': 20}
        a = search('#7A4F9C', params)
        b = search('#7A4F9C', params)
        c = SearchEngine().search('#7A4F9C', params)
        assert a == b == c

    def test_shared_cache_does_not_change_results(self):
        shared = SearchEngine()
        shared.search('#00FF00', {'depth': 3})
        assert shared.search('#7A4F9C', {'depth': 3}) == SearchEngine().search('#7A4F9C', {'depth': 3})

    def test_result_consistency(self, engine):
        result = engine.search('#7A4F9C', {'depth': 3, 'irl': True})
        assert sum(result.counts.values()) == len(result.sequence) == len(result.swatches)
        assert result.swatches[-1].rgb == result.rgb
        assert result.swatches[-1].delta_e == result.delta_e
        assert result.irl is not None

    def test_irl_off_by_default(self, engine):
        assert engine.search('#7A4F9C', {'depth': 2}).irl is None

    def test_engine_rejects_foreign_cache(self):
        from jop_mixer.core.dyes import DyeTable

        with pytest.raises(ValueError):
            SearchEngine(DYES, MixCache(DyeTable({'red': 'FF0000'})))


class TestSnap:
    @pytest.mark.parametrize('name', list(DYE_HEX))
    def test_snap_exactness(self, engine, name):
        hex_value = '#' + DYE_HEX[name]
        result = engine.search(hex_value, {'snap': True, 'snapThreshold': 0.1, 'depth': 1})
        assert result.snapped
        assert result.steps == 0
        assert result.swatches == []
        assert abs(result.delta_e) < 1e-6
        assert result.hex == hex_value.upper()
        assert result.counts == {name: 1}

    def test_no_snap_when_far(self, engine):
        result = engine.search('#7A4F9C', {'snap': True, 'snapThreshold': 0.1, 'depth': 1})
        assert not result.snapped
        assert result.steps == 1

    def test_snap_picks_nearest(self, engine):
        # One step off red
        dye = engine.snap(_lab('#AF2D26'), 2.0)
        assert dye is not None and dye.name == 'red'

    def test_snap_with_irl(self, engine):
        result = engine.search('#AE2D26', {'snap': True, 'irl': True})
        assert result.irl == DYES['red'].rgb


class TestPanelAccuracy:
    @pytest.mark.parametrize('target', PANEL)
    def test_within_five(self, engine, target):
        result = engine.search(target, {'depth': 3, 'beamWidth': 50, 'snap': False, 'twoStep': False})
        assert result.delta_e <= 5, f'{target}: got {result.hex} ΔE={result.delta_e:.2f}'


class TestBeamSearch:
    def test_best_can_be_shallower(self, engine):
        # A dye's own colour is found at depth 1 and kept even when searching deeper
        result = engine.search('#169A9A', {'depth': 4, 'beamWidth': 10})
        assert result.delta_e == 0.0
        assert result.counts == {'cyan': 1}

    def test_early_stop(self, engine):
        result = engine.search('#AE2D26', {'depth': 6, 'earlyStop': 0.5})
        assert result.counts == {'red': 1}

    def test_finds_exact_two_dye_mix(self, engine):
        result = engine.search(WHITE_BLACK, {'depth': 2, 'beamWidth': 256})
        assert result.delta_e == 0.0
        assert result.counts == {'black': 1, 'white': 1}

    def test_cutoff_with_no_survivors_returns_best_so_far(self, engine):
        result = engine.search('#123456', {'depth': 3, 'deltaECutoff': 0.0})
        assert result.counts == {}
        assert result.rgb == (255, 255, 255)

    @pytest.mark.parametrize('target', ['#7A4F9C', '#C0FFEE', '#402010'])
    @pytest.mark.parametrize('cutoff', [2.0, 10.0, 25.0, 60.0])
    def test_monotonic_pruning(self, engine, target, cutoff):
        lab = _lab(target)
        pruned = engine.beam_search(lab, SearchParams(depth=3, beam_width=8, delta_e_cutoff=cutoff))
        unpruned = engine.beam_search(lab, SearchParams(depth=3, beam_width=8))
        assert unpruned.delta_e <= pruned.delta_e


class TestTwoStepSearch:
    def test_never_better_than_exhaustive(self, engine):
        for target in ['#7A4F9C', '#C0FFEE', WHITE_BLACK]:
            lab = _lab(target)
            exhaustive = engine.beam_search(lab, SearchParams(depth=3, beam_width=10**6))
            two = engine.two_step_search(lab, SearchParams(depth=3, beam_width=4, two_step=True))
            assert two.delta_e >= exhaustive.delta_e

    def test_disagrees_with_exhaustive(self, engine):
        lab = _lab(WHITE_BLACK)
        exhaustive = engine.beam_search(lab, SearchParams(depth=2, beam_width=10**6))
        two = engine.two_step_search(lab, SearchParams(depth=2, beam_width=1))
        assert exhaustive.delta_e == 0.0
        assert two.delta_e > exhaustive.delta_e

    def test_zero_first_stage_matches_beam(self, engine):
        # depth 1 splits into 0 + 1: a single second-stage beam from the empty canvas
        lab = _lab('#7A4F9C')
        params = SearchParams(depth=1, beam_width=5)
        assert engine.two_step_search(lab, params) == engine.beam_search(lab, params)

    def test_split_at_full_depth_matches_beam(self, engine):
        lab = _lab('#7A4F9C')
        params = SearchParams(depth=3, beam_width=5, step_split=3)
        assert engine.two_step_search(lab, params) == engine.beam_search(lab, params)

    def test_split_clamped(self, engine):
        lab = _lab('#7A4F9C')
        over = engine.two_step_search(lab, SearchParams(depth=2, beam_width=5, step_split=9))
        full = engine.two_step_search(lab, SearchParams(depth=2, beam_width=5, step_split=2))
        assert over == full

    def test_early_stop_across_seeds(self, engine, monkeypatch):
        runs = []
        beam = engine._beam

        def counting_beam(start, *args):
            runs.append(start)
            return beam(start, *args)

        monkeypatch.setattr(engine, '_beam', counting_beam)
        result = engine.search(WHITE_BLACK, {'depth': 2, 'beamWidth': 16, 'twoStep': True, 'earlyStop': 0.0})
        assert result.delta_e == 0.0
        assert result.counts == {'black': 1, 'white': 1}
        # Stage 1 leaves 16 seeds; the loop stops at the first seed that reaches the target
        seeds_run = len(runs) - 1
        assert 1 <= seeds_run < 16

    def test_via_search(self, engine):
        result = engine.search('#7A4F9C', {'depth': 4, 'beamWidth': 10, 'twoStep': True})
        assert len(result.sequence) <= 4
        assert result.delta_e < engine.search('#7A4F9C', {'depth': 0}).delta_e
