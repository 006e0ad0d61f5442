"""Human-readable formatting for the command line tool."""

from __future__ import annotations

_UNITS = (
    (1024**4, "T"),
    (1024**3, "G"),
    (1024**2, "M"),
    (1024, "K"),
)


def format_bytes(i: int) -> str:
    """Format a byte count with a binary unit suffix, such as 1.5K or 3.0G.

    Counts of 1024 or less are shown in plain bytes.
    """
    for unit, suffix in _UNITS:
        if i > unit:
            return f"{i / unit:.1f}{suffix}"
    return f"{i}B"