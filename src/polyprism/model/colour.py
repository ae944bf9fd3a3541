from __future__ import annotations

from numbers import Integral

#: An 8-bit-per-channel colour, ``(r, g, b, a)`` with each value in
#: ``[0, 255]``.  This is the tint format handed to the render
#: environment.
RGBA8 = tuple[int, int, int, int]

#: A colour specification accepted throughout polyprism.
#:
#: Can be any of:
#:
#: - A CSS colour name or hex string (e.g. ``"red"``, ``"#ff000080"``).
#: - An RGB or RGBA tuple or list of integers in ``[0, 255]``
#:   (e.g. ``(255, 0, 0)`` or ``(255, 0, 0, 128)``).  A missing alpha
#:   channel means fully opaque.
#:
#: See :func:`normalise_rgba` for conversion to :data:`RGBA8`.
Colour = str | tuple[int, ...] | list[int]

BLACK: RGBA8 = (0, 0, 0, 255)


def normalise_rgba(colour: Colour) -> RGBA8:
    """Convert a colour specification to an ``(r, g, b, a)`` byte tuple.

    Args:
        colour: The colour to normalise.

    Returns:
        A tuple of four ints in ``[0, 255]``.

    Raises:
        ValueError: If the colour cannot be interpreted.
    """
    if isinstance(colour, (tuple, list)):
        if len(colour) not in (3, 4):
            raise ValueError(
                f"RGBA sequence must have 3 or 4 elements, got {len(colour)}"
            )
        channels = list(colour) + [255] * (4 - len(colour))
        for name, val in zip("rgba", channels):
            if isinstance(val, bool) or not isinstance(val, Integral):
                raise ValueError(
                    f"RGBA component {name} must be an integer, got {val!r}"
                )
            if not 0 <= val <= 255:
                raise ValueError(
                    f"RGBA component {name} must be in [0, 255], got {val}"
                )
        r, g, b, a = (int(c) for c in channels)
        return (r, g, b, a)

    if isinstance(colour, str):
        from matplotlib.colors import to_rgba

        try:
            rgba = to_rgba(colour)
        except ValueError:
            raise ValueError(f"Unrecognised colour name: {colour!r}")
        r, g, b, a = (int(round(c * 255)) for c in rgba)
        return (r, g, b, a)

    raise ValueError(f"Cannot interpret colour: {colour!r}")


def rgba_from_channels(red: int, green: int, blue: int, alpha: int = 255) -> RGBA8:
    """Build an :data:`RGBA8` colour from integer channel values.

    Simulation payloads send each channel as a full-width integer; only
    the low byte of each value is kept, so ``256`` wraps to ``0``.
    """
    return (int(red) & 0xFF, int(green) & 0xFF, int(blue) & 0xFF, int(alpha) & 0xFF)


def to_unit_rgba(colour: RGBA8) -> tuple[float, float, float, float]:
    """Scale an :data:`RGBA8` colour to floats in ``[0, 1]``."""
    r, g, b, a = colour
    return (r / 255.0, g / 255.0, b / 255.0, a / 255.0)
