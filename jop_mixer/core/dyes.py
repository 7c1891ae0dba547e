"""The dye registry: sixteen measured dye colours plus the white base canvas.

Values were measured on a Joy of Painting canvas, not on leather armour, so
they carry the mod's palette quirks. Everything derived from a dye (max
channel, Lab, linear RGB) is computed once when the table is built.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass

import numpy as np

from jop_mixer.core.colour import RGB, Lab, hex_to_rgb, rgb_to_hex, rgb_to_lab, srgb_to_linear
from jop_mixer.core.types import Multiset

DYE_HEX: dict[str, str] = {
    'black': '1D1D21',
    'red': 'AE2D26',
    'green': '5D7B16',
    'brown': '815331',
    'blue': '3B43A8',
    'purple': '8731B6',
    'cyan': '169A9A',
    'light_gray': '9B9B95',
    'gray': '464E51',
    'pink': 'F089A8',
    'lime': '7EC51F',
    'yellow': 'FBD53C',
    'light_blue': '39B1D7',
    'magenta': 'C54DBB',
    'orange': 'F67E1D',
    'white': 'FFFFFF',
}

# Blank canvas: output for an empty mix, never an averaging input
BASE_RGB: RGB = (255, 255, 255)
BASE_LAB: Lab = rgb_to_lab(BASE_RGB)


@dataclass(frozen=True)
class Dye:
    name: str
    index: int
    rgb: RGB
    max: int
    lab: Lab
    linear: tuple[float, float, float]

    @property
    def hex(self) -> str:
        return rgb_to_hex(self.rgb)

    @classmethod
    def from_hex(cls, name: str, index: int, value: str) -> Dye:
        rgb = hex_to_rgb(value)
        return cls(
            name=name,
            index=index,
            rgb=rgb,
            max=max(rgb),
            lab=rgb_to_lab(rgb),
            linear=(srgb_to_linear(rgb[0]), srgb_to_linear(rgb[1]), srgb_to_linear(rgb[2])),
        )


class DyeTable:
    """Immutable, precomputed dye registry.

    Dyes are addressed by position (0..len-1) in the search hot path and by
    name at the display boundary. `lab_array` feeds snapping and
    `linear_array` the IRL average.
    """

    def __init__(self, definitions: Mapping[str, str]):
        self._dyes = tuple(Dye.from_hex(name, i, value) for i, (name, value) in enumerate(definitions.items()))
        self._by_name = {d.name: d for d in self._dyes}
        self.names: tuple[str, ...] = tuple(d.name for d in self._dyes)

        self.lab_array = np.array([d.lab for d in self._dyes], dtype=np.float64).reshape(-1, 3)
        self.linear_array = np.array([d.linear for d in self._dyes], dtype=np.float64).reshape(-1, 3)
        for arr in (self.lab_array, self.linear_array):
            arr.flags.writeable = False

    def __len__(self) -> int:
        return len(self._dyes)

    def __iter__(self) -> Iterator[Dye]:
        return iter(self._dyes)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __getitem__(self, key: int | str) -> Dye:
        if isinstance(key, str):
            try:
                return self._by_name[key]
            except KeyError:
                raise KeyError(f'Unknown dye: {key}. Available: {", ".join(self.names)}') from None
        return self._dyes[key]

    def empty(self) -> Multiset:
        return Multiset((0,) * len(self._dyes), self.names)

    def multiset(self, counts: Multiset | Mapping[str, int] | tuple[int, ...]) -> Multiset:
        """Normalise a name -> count mapping (or raw count tuple) into a Multiset.

        Zero counts are dropped; negative counts raise ValueError.
        """
        if isinstance(counts, Multiset):
            return counts
        if isinstance(counts, tuple):
            values = list(counts)
            if len(values) != len(self._dyes):
                raise ValueError(f'Expected {len(self._dyes)} counts, got {len(values)}')
        else:
            values = [0] * len(self._dyes)
            for name, count in counts.items():
                values[self[name].index] += int(count or 0)
        if any(c < 0 for c in values):
            raise ValueError(f'Dye counts must be non-negative: {counts!r}')
        return Multiset(tuple(values), self.names)


DYES = DyeTable(DYE_HEX)
