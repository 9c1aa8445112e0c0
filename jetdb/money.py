"""Decimal rendering of the fixed-point MONEY and NUMERIC column values."""

from __future__ import annotations

MONEY_BYTES = 8
MONEY_SCALE = 4
NUMERIC_BYTES = 17
MAX_MONEY_PRECISION = 20
MAX_NUMERIC_PRECISION = 40


def _format_digits(magnitude: int, ndigits: int, scale: int, negative: bool) -> str:
    """Render ``magnitude`` as at most ``ndigits`` decimal digits with ``scale`` decimals."""
    digits = str(magnitude % 10**ndigits).zfill(ndigits)
    significant = len(digits.lstrip("0")) or 1
    top = min(max(significant, scale + 1), ndigits)
    kept = digits[ndigits - top:]
    if 0 < scale <= top:
        kept = f"{kept[:top - scale]}.{kept[top - scale:]}"
    return f"-{kept}" if negative else kept


def money_to_string(data: bytes) -> str:
    """Render an 8-byte little-endian two's-complement MONEY value with four decimals."""
    raw = bytes(data)
    if len(raw) < MONEY_BYTES:
        raise ValueError(f"money value needs {MONEY_BYTES} bytes, got {len(raw)}")
    value = int.from_bytes(raw[:MONEY_BYTES], "little", signed=True)
    return _format_digits(abs(value), MAX_MONEY_PRECISION, MONEY_SCALE, value < 0)


def numeric_to_string(data: bytes, scale: int, prec: int) -> str:
    """Render a 17-byte NUMERIC value: a sign byte, then four 32-bit words.

    The words are stored most significant first, each little-endian. The
    number of digits after the decimal point is taken from ``prec``, which is
    how the column record stores it; ``scale`` is accepted for symmetry.
    """
    raw = bytes(data)
    if len(raw) < NUMERIC_BYTES:
        raise ValueError(f"numeric value needs {NUMERIC_BYTES} bytes, got {len(raw)}")
    if prec < 0:
        raise ValueError("precision must not be negative")
    negative = bool(raw[0] & 0x80)
    body = raw[1:NUMERIC_BYTES]
    ordered = body[12:16] + body[8:12] + body[4:8] + body[0:4]
    magnitude = int.from_bytes(ordered, "little")
    return _format_digits(magnitude, MAX_NUMERIC_PRECISION, prec, negative)