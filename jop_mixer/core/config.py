"""Configuration: .env loading and environment-derived search defaults.

Load order (first wins):
  1. Existing OS environment variables — never overwritten.
  2. .env file at --env-file path (if explicitly provided).
  3. .env file walking up from cwd, stopping at .git (file or dir).

Search defaults read from the environment (CLI flags override them):

    JOP_MIXER_DEPTH            int    dyes to mix (default 1)
    JOP_MIXER_BEAM_WIDTH       int    states kept per depth (default 50)
    JOP_MIXER_EARLY_STOP       float  stop once ΔE <= this (default 0)
    JOP_MIXER_DELTA_E_CUTOFF   float  prune candidates above this ΔE (default inf)
    JOP_MIXER_TWO_STEP         bool   use two-stage search
    JOP_MIXER_STEP_SPLIT       int    first-stage depth for two-stage search
    JOP_MIXER_SNAP             bool   snap to a single dye when close enough
    JOP_MIXER_SNAP_THRESHOLD   float  snap ΔE threshold (default 2)
    JOP_MIXER_IRL              bool   also compute the real-world preview
    JOP_MIXER_COMPENSATION     float  IRL brightness compensation (default 1)
"""

import logging
import os
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

from jop_mixer.core.types import SearchParams

logger = logging.getLogger(__name__)

ENV_PREFIX = 'JOP_MIXER_'

_TRUE = {'1', 'true', 'yes', 'on'}
_FALSE = {'0', 'false', 'no', 'off', ''}


def _find_dotenv(start: Path) -> Path | None:
    """Walk up from start, return first .env found, stop at .git boundary."""
    current = start.resolve()
    while True:
        candidate = current / '.env'
        if candidate.is_file():
            return candidate
        # .git can be a dir (normal clone) or a file (worktree)
        if (current / '.git').exists():
            return None
        parent = current.parent
        if parent == current:
            return None
        current = parent


def _parse_dotenv(path: Path) -> dict[str, str]:
    """Parse a .env file into a dict. Handles KEY=value and KEY="value"."""
    result: dict[str, str] = {}
    for line in path.read_text(encoding='utf-8').splitlines():
        line = line.strip()
        if not line or line.startswith('#') or '=' not in line:
            continue
        key, _, raw_value = line.partition('=')
        key = key.strip()
        if key.startswith('export '):
            key = key[len('export ') :].strip()
        if key:
            result[key] = raw_value.strip().strip('"').strip("'")
    return result


def load_env(env_file: str | None = None) -> Path | None:
    """Load .env into os.environ for keys not already set.

    Returns the path that was loaded, or None if no .env was found/used.
    """
    if env_file:
        path = Path(env_file)
        if not path.is_file():
            logger.warning('env file not found: %s', env_file)
            return None
    else:
        path = _find_dotenv(Path.cwd())
        if path is None:
            return None

    for key, value in _parse_dotenv(path).items():
        if key not in os.environ:
            os.environ[key] = value
    return path


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ValueError(f'not a boolean: {value!r}')


def _parse_float(value: str) -> float:
    lowered = value.strip().lower()
    if lowered in ('inf', 'infinity', 'none'):
        return float('inf')
    return float(lowered)


_FIELDS: dict[str, Callable[[str], Any]] = {
    'depth': int,
    'beam_width': int,
    'early_stop': _parse_float,
    'delta_e_cutoff': _parse_float,
    'two_step': _parse_bool,
    'step_split': int,
    'snap': _parse_bool,
    'snap_threshold': _parse_float,
    'irl': _parse_bool,
    'compensation': _parse_float,
}


def params_from_env(environ: Mapping[str, str] | None = None) -> SearchParams:
    """Search defaults from JOP_MIXER_* variables; bad values are skipped with a warning."""
    env = os.environ if environ is None else environ
    values: dict[str, Any] = {}
    for name, parse in _FIELDS.items():
        var = ENV_PREFIX + name.upper()
        raw = env.get(var)
        if raw is None:
            continue
        try:
            values[name] = parse(raw)
        except ValueError:
            logger.warning('ignoring unparseable %s=%r', var, raw)
    return SearchParams.from_mapping(values)
