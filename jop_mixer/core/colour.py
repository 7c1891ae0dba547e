"""Colour space conversion: hex parsing, sRGB <-> linear, CIE Lab and ΔE76.

All arithmetic is plain double-precision float. The constants (gamma
breakpoints, sRGB -> XYZ matrix, D65 white, CIE epsilon/kappa) are the
standard published values and must not be rounded differently: search
rankings and the regression panel depend on them.
"""

import math
import re

from jop_mixer.core.errors import InvalidColourFormat

RGB = tuple[int, int, int]
Lab = tuple[float, float, float]

_HEX_RE = re.compile(r'[0-9A-Fa-f]{6}')

# sRGB D65 -> XYZ
_M = (
    (0.4124564, 0.3575761, 0.1804375),
    (0.2126729, 0.7151522, 0.0721750),
    (0.0193339, 0.1191920, 0.9503041),
)

# D65 reference white
XN = 0.95047
YN = 1.0
ZN = 1.08883

EPSILON = 216 / 24389
KAPPA = 24389 / 27


def hex_to_rgb(value: str) -> RGB:
    """Parse '#rgb', '#rrggbb', 'rgb' or 'rrggbb' into integer channels.

    Raises InvalidColourFormat for anything else.
    """
    if not isinstance(value, str):
        raise InvalidColourFormat(value)
    clean = value.strip()
    if clean.startswith('#'):
        clean = clean[1:]
    clean = clean.strip()
    if len(clean) == 3:
        clean = ''.join(ch + ch for ch in clean)
    if not _HEX_RE.fullmatch(clean):
        raise InvalidColourFormat(value)
    n = int(clean, 16)
    return ((n >> 16) & 0xFF, (n >> 8) & 0xFF, n & 0xFF)


def rgb_to_hex(rgb: RGB) -> str:
    r, g, b = rgb
    return f'#{r:02X}{g:02X}{b:02X}'


def srgb_to_linear(channel: float) -> float:
    """sRGB channel (0-255) -> linear light (0-1)."""
    c = channel / 255
    if c <= 0.04045:
        return c / 12.92
    return ((c + 0.055) / 1.055) ** 2.4


def linear_to_srgb(channel: float) -> int:
    """Linear light -> sRGB channel (0-255). Input is clamped to [0, 1]."""
    c = max(0.0, min(1.0, channel))
    if c <= 0.0031308:
        srgb = c * 12.92
    else:
        srgb = 1.055 * c ** (1 / 2.4) - 0.055
    # Round half up, never banker's rounding
    return int(math.floor(srgb * 255 + 0.5))


def _f(t: float) -> float:
    if t > EPSILON:
        return math.cbrt(t)
    return (KAPPA * t + 16) / 116


def rgb_to_lab(rgb: RGB) -> Lab:
    """sRGB (0-255) -> CIE L*a*b* (D65)."""
    r = srgb_to_linear(rgb[0])
    g = srgb_to_linear(rgb[1])
    b = srgb_to_linear(rgb[2])
    x = r * _M[0][0] + g * _M[0][1] + b * _M[0][2]
    y = r * _M[1][0] + g * _M[1][1] + b * _M[1][2]
    z = r * _M[2][0] + g * _M[2][1] + b * _M[2][2]
    fx = _f(x / XN)
    fy = _f(y / YN)
    fz = _f(z / ZN)
    return (116 * fy - 16, 500 * (fx - fy), 200 * (fy - fz))


def delta_e(lab1: Lab, lab2: Lab) -> float:
    """CIE76 ΔE: Euclidean distance in Lab."""
    dl = lab1[0] - lab2[0]
    da = lab1[1] - lab2[1]
    db = lab1[2] - lab2[2]
    return math.sqrt(dl * dl + da * da + db * db)
