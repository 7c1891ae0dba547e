"""Shared types for jop-mixer: Multiset, MixedColour, SearchState, SearchParams, MixResult, Command."""

from __future__ import annotations

import argparse
import math
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any

from jop_mixer.core.colour import RGB, Lab, rgb_to_hex

Totals = tuple[int, int, int, int]  # (R, G, B, Max) summed over dyes


@dataclass(frozen=True)
class Multiset:
    """Dye counts indexed by dye table position.

    Two multisets are equal iff their counts are equal. `names` is the dye
    table's name order and is only used at the display boundary.
    """

    counts: tuple[int, ...]
    names: tuple[str, ...] = field(compare=False, repr=False)

    @property
    def total(self) -> int:
        return sum(self.counts)

    @property
    def key(self) -> str:
        """Canonical key: sorted dye names with their non-zero counts, e.g. 'blue1_red2'."""
        return '_'.join(f'{name}{count}' for name, count in sorted(self.items()))

    def items(self) -> Iterator[tuple[str, int]]:
        for name, count in zip(self.names, self.counts):
            if count > 0:
                yield name, count

    def to_dict(self) -> dict[str, int]:
        return dict(self.items())


@dataclass
class MixedColour:
    """Mixed colour of a multiset. Cache hits hand out a fresh instance each time."""

    rgb: RGB
    lab: Lab


@dataclass(frozen=True)
class SearchState:
    """One node of the beam: a multiset plus its running totals and distance."""

    counts: tuple[int, ...]
    n: int
    totals: Totals
    rgb: RGB
    lab: Lab
    delta_e: float


# Accepted spellings for SearchParams.from_mapping (camelCase mirrors the web UI)
_PARAM_ALIASES = {
    'depth': 'depth',
    'beamWidth': 'beam_width',
    'beam_width': 'beam_width',
    'earlyStop': 'early_stop',
    'early_stop': 'early_stop',
    'deltaECutoff': 'delta_e_cutoff',
    'delta_e_cutoff': 'delta_e_cutoff',
    'twoStep': 'two_step',
    'two_step': 'two_step',
    'stepSplit': 'step_split',
    'step_split': 'step_split',
    'snap': 'snap',
    'snapThreshold': 'snap_threshold',
    'snap_threshold': 'snap_threshold',
    'irl': 'irl',
    'compensation': 'compensation',
}


def _to_int(value: Any) -> int:
    return int(float(value))


# Numeric fields; a value that fails to convert keeps the default
_PARAM_NUMBERS: dict[str, Callable[[Any], Any]] = {
    'depth': _to_int,
    'beam_width': _to_int,
    'step_split': _to_int,
    'early_stop': float,
    'delta_e_cutoff': float,
    'snap_threshold': float,
    'compensation': float,
}


@dataclass
class SearchParams:
    """Search tunables. Out-of-range values are normalised, never rejected."""

    depth: int = 1
    beam_width: int = 50
    early_stop: float = 0.0
    delta_e_cutoff: float = math.inf
    two_step: bool = False
    step_split: int | None = None
    snap: bool = False
    snap_threshold: float = 2.0
    irl: bool = False
    compensation: float = 1.0

    def __post_init__(self) -> None:
        self.depth = max(0, int(self.depth))
        self.beam_width = max(1, int(self.beam_width))
        self.early_stop = max(0.0, float(self.early_stop))
        self.delta_e_cutoff = max(0.0, float(self.delta_e_cutoff))
        self.two_step = bool(self.two_step)
        if self.step_split is not None:
            self.step_split = int(self.step_split)
        self.snap = bool(self.snap)
        self.snap_threshold = max(0.0, float(self.snap_threshold))
        self.irl = bool(self.irl)
        self.compensation = max(0.0, float(self.compensation))

    @classmethod
    def from_mapping(cls, params: Mapping[str, Any] | None, base: SearchParams | None = None) -> SearchParams:
        """Build params from a dict; keys that are missing, None or not numeric keep the defaults of `base`."""
        values = dict(vars(base)) if base is not None else {}
        for key, value in (params or {}).items():
            name = _PARAM_ALIASES.get(key)
            if name is None or value is None:
                continue
            convert = _PARAM_NUMBERS.get(name)
            if convert is not None:
                try:
                    value = convert(value)
                except (TypeError, ValueError, OverflowError):
                    continue
            values[name] = value
        return cls(**values)


@dataclass(frozen=True)
class Swatch:
    """Intermediate colour after adding one more dye, with ΔE to the final target."""

    name: str
    rgb: RGB
    delta_e: float

    @property
    def hex(self) -> str:
        return rgb_to_hex(self.rgb)


@dataclass
class MixResult:
    """Outcome of a search, ready for display."""

    target: RGB
    rgb: RGB
    delta_e: float
    counts: dict[str, int]
    sequence: list[str] = field(default_factory=list)
    swatches: list[Swatch] = field(default_factory=list)
    irl: RGB | None = None
    snapped: bool = False

    @property
    def hex(self) -> str:
        return rgb_to_hex(self.rgb)

    @property
    def steps(self) -> int:
        return len(self.sequence)

    def to_dict(self) -> dict[str, Any]:
        return {
            'target': rgb_to_hex(self.target),
            'hex': self.hex,
            'rgb': list(self.rgb),
            'delta_e': self.delta_e,
            'counts': dict(self.counts),
            'sequence': list(self.sequence),
            'swatches': [
                {'name': s.name, 'hex': s.hex, 'rgb': list(s.rgb), 'delta_e': s.delta_e} for s in self.swatches
            ],
            'irl': rgb_to_hex(self.irl) if self.irl is not None else None,
            'snapped': self.snapped,
        }


class Command:
    """A self-registering CLI subcommand.

    Usage in a command module:

        command = Command(name='mix', help='Mix an explicit multiset of dyes')

        @command.options
        def options(parser):
            parser.add_argument(...)

        @command.run
        def run(args):
            ...
            return 0
    """

    def __init__(self, name: str, help: str = ''):
        self.name = name
        self.help = help
        self._options_fn: Callable[[argparse.ArgumentParser], None] | None = None
        self._run_fn: Callable[[argparse.Namespace], int] | None = None

    def options(self, fn: Callable[[argparse.ArgumentParser], None]) -> Callable:
        """Decorator to register the argument builder."""
        self._options_fn = fn
        return fn

    def run(self, fn: Callable[[argparse.Namespace], int]) -> Callable:
        """Decorator to register the run function."""
        self._run_fn = fn
        return fn

    def add_arguments(self, parser: argparse.ArgumentParser) -> None:
        if self._options_fn is not None:
            self._options_fn(parser)

    def execute(self, args: argparse.Namespace) -> int:
        """Execute the command's run function; returns the process exit code."""
        if self._run_fn is None:
            raise RuntimeError(f'Command {self.name} has no run function')
        return self._run_fn(args) or 0


@dataclass
class Report:
    """Accumulates pass/fail checks from the panel runner for text/JSON output."""

    title: str = ''
    checks: dict[str, dict[str, Any]] = field(default_factory=dict)
    pass_count: int = 0
    fail_count: int = 0

    def add(self, name: str, data: dict[str, Any]) -> None:
        """Add a check result; `data['pass']` decides the tally."""
        self.checks[name] = data
        if data.get('pass'):
            self.pass_count += 1
        else:
            self.fail_count += 1

    @property
    def ok(self) -> bool:
        return self.fail_count == 0
