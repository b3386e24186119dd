"""Display formatting of numeric results."""
from decimal import Decimal
import math


# Magnitudes outside [LOWER, UPPER] are shown in scientific notation
UPPER_DISPLAY_LIMIT = 1e10
LOWER_DISPLAY_LIMIT = 1e-10
DISPLAY_DECIMALS = 10
SCIENTIFIC_DIGITS = 6


def _scientific(num: float) -> str:
    # "1.234568e+10", exponent without zero padding
    mantissa, exponent = f"{num:.{SCIENTIFIC_DIGITS}e}".split("e")
    return f"{mantissa}e{int(exponent):+d}"


def format_number(num: float) -> str:
    """
    Format a result for display.

    - non-finite values are shown as "Infinity"
    - very large or very small magnitudes use scientific notation with 6 fractional digits
    - everything else is rounded half up to 10 decimals, trailing zeros stripped

    :param float num: Value to display

    :return: Display string
    :rtype: str
    """
    if not math.isfinite(num):
        return "Infinity"

    if abs(num) > UPPER_DISPLAY_LIMIT or (abs(num) < LOWER_DISPLAY_LIMIT and num != 0):
        return _scientific(num)

    scale = 10 ** DISPLAY_DECIMALS
    rounded = math.floor(num * scale + 0.5) / scale
    if rounded == 0:
        return "0"

    # Shortest repr of the rounded value, written without an exponent
    text = format(Decimal(repr(rounded)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def format_operand(num: float) -> str:
    """
    Keypad representation of a value: exact enough to be parsed back into the same float.

    Integral values drop the ".0" suffix.
    """
    num = float(num)
    if math.isfinite(num) and num.is_integer() and abs(num) < 1e16:
        return str(int(num))
    return repr(num)
