"""
Parsing of Kubernetes resource quantities, e.g. ``"10Gi"``, ``"500M"``, ``"100m"``.

Only the parsing into numbers is supported, not the canonical re-formatting.
See: https://kubernetes.io/docs/reference/kubernetes-api/common-definitions/quantity/
"""
import decimal
import math
import re
from typing import Union

GiB = 1024 ** 3

BINARY_SUFFIXES = {'Ki': 2 ** 10, 'Mi': 2 ** 20, 'Gi': 2 ** 30, 'Ti': 2 ** 40, 'Pi': 2 ** 50, 'Ei': 2 ** 60}
DECIMAL_SUFFIXES = {'n': decimal.Decimal('1e-9'), 'u': decimal.Decimal('1e-6'), 'm': decimal.Decimal('1e-3'),
                    '': 1, 'k': 10 ** 3, 'M': 10 ** 6, 'G': 10 ** 9, 'T': 10 ** 12, 'P': 10 ** 15, 'E': 10 ** 18}

QUANTITY_PATTERN = re.compile(r'^([+-]?(?:\d+(?:\.\d*)?|\.\d+))(?:([eE][+-]?\d+)|([a-zA-Z]*))$')


def parse_quantity(quantity: Union[str, int, float]) -> decimal.Decimal:
    """
    Convert a quantity to its exact numeric value (no rounding).

    Raises ``ValueError`` for malformed quantities or unknown suffixes.
    """
    if isinstance(quantity, (int, float)):
        return decimal.Decimal(str(quantity))

    match = QUANTITY_PATTERN.match(quantity.strip())
    if match is None:
        raise ValueError(f"Malformed quantity: {quantity!r}")

    number, exponent, suffix = match.groups()
    if exponent:
        return decimal.Decimal(number + exponent)
    elif suffix in BINARY_SUFFIXES:
        return decimal.Decimal(number) * BINARY_SUFFIXES[suffix]
    elif suffix in DECIMAL_SUFFIXES:
        return decimal.Decimal(number) * DECIMAL_SUFFIXES[suffix]
    else:
        raise ValueError(f"Unknown quantity suffix {suffix!r} in {quantity!r}")


def round_up(value: Union[decimal.Decimal, int], unit: int) -> int:
    """ How many whole units are needed to hold the value; e.g. GiBs for bytes. """
    return math.ceil(decimal.Decimal(value) / unit)
