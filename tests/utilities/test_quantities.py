import decimal

import pytest

from konverge._cogs.helpers.quantities import GiB, parse_quantity, round_up


@pytest.mark.parametrize('quantity, expected', [
    ('0', 0),
    ('1', 1),
    ('1Ki', 1024),
    ('1Mi', 1024 ** 2),
    ('10Gi', 10 * 1024 ** 3),
    ('1Ti', 1024 ** 4),
    ('1k', 1000),
    ('1M', 1000 ** 2),
    ('1G', 1000 ** 3),
    ('1.5Gi', 1536 * 1024 ** 2),
    ('100m', decimal.Decimal('0.1')),
    ('1e3', 1000),
    ('1E3', 1000),
    (' 5Gi ', 5 * 1024 ** 3),
    (123, 123),
    (1.5, decimal.Decimal('1.5')),
])
def test_parsing(quantity, expected):
    assert parse_quantity(quantity) == expected


@pytest.mark.parametrize('quantity', ['', 'Gi', '1 Gi', '1GB', '1gi', 'ten', '1.2.3Gi'])
def test_malformed_quantities(quantity):
    with pytest.raises(ValueError):
        parse_quantity(quantity)


@pytest.mark.parametrize('value, expected', [
    (0, 0),
    (1, 1),
    (GiB - 1, 1),
    (GiB, 1),
    (GiB + 1, 2),
    (decimal.Decimal('1.5') * GiB, 2),
    (10 * GiB, 10),
])
def test_rounding_up_to_gibs(value, expected):
    assert round_up(value, GiB) == expected
