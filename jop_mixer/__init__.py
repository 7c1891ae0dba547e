"""jop-mixer — find the dye mix that best approximates a target colour.

Mixing follows the Joy of Painting canvas rule (integer averaging plus
brightness normalisation). The search is a pruned beam search over dye
multisets, scored by CIE76 ΔE.
"""

from jop_mixer.core.cache import MixCache
from jop_mixer.core.colour import delta_e, hex_to_rgb, rgb_to_hex, rgb_to_lab
from jop_mixer.core.dyes import DYE_HEX, DYES, Dye, DyeTable
from jop_mixer.core.errors import InvalidColourFormat
from jop_mixer.core.mixing import mix_counts, mix_irl
from jop_mixer.core.search import SearchEngine, search
from jop_mixer.core.types import MixResult, Multiset, SearchParams, Swatch

__all__ = [
    'DYES',
    'DYE_HEX',
    'Dye',
    'DyeTable',
    'InvalidColourFormat',
    'MixCache',
    'MixResult',
    'Multiset',
    'SearchEngine',
    'SearchParams',
    'Swatch',
    'delta_e',
    'hex_to_rgb',
    'mix_counts',
    'mix_irl',
    'rgb_to_hex',
    'rgb_to_lab',
    'search',
]
