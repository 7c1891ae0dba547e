"""Tests for jop_mixer.core.mixing and the dye table."""

import pytest
from jop_mixer.core.dyes import BASE_RGB, DYE_HEX, DYES, DyeTable
from jop_mixer.core.errors import InvalidColourFormat
from jop_mixer.core.mixing import mix_counts, mix_irl, mix_totals, totals_of


class TestDyeTable:
    def test_sixteen_dyes_in_order(self):
        assert len(DYES) == 16
        assert DYES.names == tuple(DYE_HEX)

    def test_precomputed_fields(self):
        red = DYES['red']
        assert red.rgb == (174, 45, 38)
        assert red.max == 174
        assert red.hex == '#AE2D26'
        assert red.index == 1

    def test_lookup_by_index(self):
        assert DYES[0].name == 'black'

    def test_unknown_name(self):
        with pytest.raises(KeyError):
            DYES['chartreuse']

    def test_arrays_read_only(self):
        with pytest.raises(ValueError):
            DYES.lab_array[0, 0] = 1.0
        with pytest.raises(ValueError):
            DYES.linear_array[0, 0] = 1.0

    def test_linear_array_rows_match_dyes(self):
        assert DYES.linear_array.shape == (16, 3)
        assert tuple(DYES.linear_array[DYES['white'].index]) == (1.0, 1.0, 1.0)
        assert tuple(DYES.linear_array[DYES['red'].index]) == DYES['red'].linear

    def test_invalid_hex_in_table(self):
        with pytest.raises(InvalidColourFormat):
            DyeTable({'ok': 'FFFFFF', 'broken': 'GGGGGG'})

    def test_multiset_rejects_negative(self):
        with pytest.raises(ValueError):
            DYES.multiset({'red': -1})

    def test_multiset_drops_zero(self):
        assert DYES.multiset({'red': 0, 'blue': 1}).to_dict() == {'blue': 1}


class TestMixCounts:
    def test_empty_is_base(self):
        assert mix_counts({}) == (255, 255, 255)
        assert mix_counts(DYES.empty()) == BASE_RGB

    def test_zero_counts_are_empty(self):
        assert mix_counts({'red': 0, 'black': 0}) == (255, 255, 255)

    @pytest.mark.parametrize('name', list(DYE_HEX))
    def test_single_dye_is_itself(self, name):
        assert mix_counts({name: 1}) == DYES[name].rgb

    def test_repeated_dye_is_itself(self):
        assert mix_counts({'cyan': 7}) == DYES['cyan'].rgb

    def test_white_red_blue_golden(self):
        # totals (488, 367, 461, max 597) / 3 -> (162, 122, 153), avg max 199
        # gain = 199 // 162 = 1
        assert mix_counts({'white': 1, 'red': 1, 'blue': 1}) == (162, 122, 153)

    def test_white_black_golden(self):
        # (284, 284, 288, max 288) / 2 -> (142, 142, 144), gain 1
        assert mix_counts({'white': 1, 'black': 1}) == (142, 142, 144)

    def test_order_free(self):
        a = mix_counts({'red': 2, 'yellow': 1, 'blue': 3})
        b = mix_counts({'blue': 3, 'red': 2, 'yellow': 1})
        assert a == b

    def test_gain_above_one(self):
        table = DyeTable({'red': 'FF0000', 'green': '00FF00'})
        # avg (127, 127, 0), avg max 255 -> gain 2
        assert mix_counts({'red': 1, 'green': 1}, table) == (254, 254, 0)

    def test_all_black_average(self):
        table = DyeTable({'void': '000000'})
        assert mix_counts({'void': 3}, table) == (0, 0, 0)

    def test_totals_match_mix(self):
        counts = {'orange': 2, 'lime': 1}
        totals, n = totals_of(counts)
        assert n == 3
        assert mix_totals(totals, n) == mix_counts(counts)

    def test_deterministic(self):
        counts = {'purple': 2, 'light_blue': 1, 'gray': 1}
        assert mix_counts(counts) == mix_counts(counts)


class TestMixIrl:
    def test_empty_is_base(self):
        assert mix_irl({}, 0.0) == (255, 255, 255)

    def test_single_dye_round_trips(self):
        assert mix_irl({'magenta': 1}) == DYES['magenta'].rgb

    def test_zero_compensation_is_black(self):
        assert mix_irl({'white': 2}, 0.0) == (0, 0, 0)

    def test_negative_compensation_treated_as_zero(self):
        assert mix_irl({'white': 1}, -3.0) == (0, 0, 0)

    def test_clamped_above_white(self):
        assert mix_irl({'white': 1}, 4.0) == (255, 255, 255)

    def test_linear_average(self):
        # Black + white in linear light is brighter than the sRGB midpoint
        assert mix_irl({'white': 1, 'black': 1}) == (189, 189, 189)

    def test_fractional_compensation(self):
        assert mix_irl({'white': 1, 'black': 1}, 0.5) == (138, 138, 138)

    def test_compensation_clamps_mix(self):
        assert mix_irl({'white': 1, 'black': 1}, 2.0) == (255, 255, 255)

    def test_weighted_by_count(self):
        assert mix_irl({'white': 2, 'black': 2}) == mix_irl({'white': 1, 'black': 1})
        assert mix_irl({'white': 3, 'black': 1}) > mix_irl({'white': 1, 'black': 1})
