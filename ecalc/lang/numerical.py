"""Numbers in ecalc are IEEE-754 doubles. Python floats already are, except that Python raises ZeroDivisionError
where IEEE-754 produces an infinity or NaN, so division goes through divide. Results are displayed with number.

Source: https://en.wikipedia.org/wiki/IEEE_754#Exception_handling
"""

import math


def divide(left, right):
    """IEEE-754 division: x/0 is +-inf depending on the signs of x and 0, and 0/0 (or nan/0) is nan."""
    if right == 0:
        if left == 0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)
    return left / right


def number(value):
    """Returns str(value) the way results are printed: integral values without a trailing '.0'."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    if value == 0 and math.copysign(1.0, value) < 0:
        return "-0"
    if value.is_integer():
        return str(int(value))
    return repr(value)


def is_anomaly(value):
    """Whether value is a floating-point anomaly (inf or NaN). Anomalies are not errors, but are warned about."""
    return math.isnan(value) or math.isinf(value)
