"""Human-readable number suffixes and exponentially decaying averages."""

from __future__ import annotations

import math

_KILO = 1e3
_MEGA = 1e6
_GIGA = 1e9
_TERA = 1e12
_PETA = 1e15
_EXA = 1e18

_MAX_EXPONENT = 36
_MIN_VALUE = 2e-16


def suffix_string(val: float, sigdigits: int = 0) -> str:
    """Format ``val`` with a K/M/G/T/P/E suffix.

    With ``sigdigits`` 0 the value is shown to three significant digits (or
    as a whole number below one thousand); otherwise it is shown right-aligned
    to ``sigdigits`` significant digits.
    """
    if val >= _EXA:
        dval, suffix = val / _PETA / _KILO, "E"
    elif val >= _PETA:
        dval, suffix = val / _TERA / _KILO, "P"
    elif val >= _TERA:
        dval, suffix = val / _GIGA / _KILO, "T"
    elif val >= _GIGA:
        dval, suffix = val / _MEGA / _KILO, "G"
    elif val >= _MEGA:
        dval, suffix = val / _KILO / _KILO, "M"
    elif val >= _KILO:
        dval, suffix = val / _KILO, "K"
    else:
        dval, suffix = val, ""
    decimal = bool(suffix)

    if not sigdigits:
        if decimal:
            return f"{dval:.3g}{suffix}"
        return f"{int(dval)}{suffix}"

    magnitude = math.floor(math.log10(dval)) if dval > 0.0 else 0
    ndigits = int(sigdigits - 1 - magnitude)
    if ndigits < 0:
        ndigits = 6
    return f"{dval:{sigdigits + 1}.{ndigits}f}{suffix}"


def decay_time(f: float, fadd: float, fsecs: float, interval: float) -> float:
    """Fold ``fadd`` accumulated over ``fsecs`` seconds into the average ``f``.

    The average decays exponentially over ``interval`` seconds. Returns the new
    average; ``f`` is returned unchanged when ``fsecs`` is not positive.
    """
    if fsecs <= 0:
        return f
    dexp = min(fsecs / interval, _MAX_EXPONENT)
    fprop = 1.0 - 1 / math.exp(dexp)
    ftotal = 1.0 + fprop
    f += fadd / fsecs * fprop
    f /= ftotal
    if f < _MIN_VALUE:
        f = 0.0
    return f