"""
Quantity normalization at the ledger boundary.

Every amount is converted to a three-decimal Decimal, rounded half-up.
Zero, negative, NaN, infinite and non-numeric amounts are rejected with
InvalidQuantityError before anything touches the database.
"""

from decimal import Decimal

import pytest

from stock_kernel.domain.quantities import (
    MAX_QUANTITY,
    format_quantity,
    normalize_quantity,
    normalize_units,
    normalize_weight,
)
from stock_kernel.exceptions import InvalidQuantityError


class TestNormalizeQuantity:
    """Movement quantities must be strictly positive after rounding."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("100", Decimal("100.000")),
            (100, Decimal("100.000")),
            (Decimal("12.5"), Decimal("12.500")),
            ("1.2345", Decimal("1.235")),
            ("1.2344", Decimal("1.234")),
            ("0.0005", Decimal("0.001")),
            (" 7.25 ", Decimal("7.250")),
        ],
    )
    def test_rounds_half_up_to_three_places(self, raw, expected):
        result = normalize_quantity(raw)
        assert result == expected
        assert result.as_tuple().exponent == -3

    def test_float_goes_through_str(self):
        assert normalize_quantity(0.1) == Decimal("0.100")
        assert normalize_quantity(2.675) == Decimal("2.675")

    @pytest.mark.parametrize("raw", [0, "0", "0.000", "-1", Decimal("-0.5"), "0.0004"])
    def test_non_positive_rejected(self, raw):
        with pytest.raises(InvalidQuantityError) as exc_info:
            normalize_quantity(raw)
        assert exc_info.value.code == "INVALID_QUANTITY"
        assert "greater than zero" in exc_info.value.reason

    @pytest.mark.parametrize("raw", ["NaN", Decimal("NaN"), float("nan")])
    def test_nan_rejected(self, raw):
        with pytest.raises(InvalidQuantityError, match="NaN"):
            normalize_quantity(raw)

    @pytest.mark.parametrize("raw", ["Infinity", "-inf", Decimal("Infinity"), float("inf")])
    def test_infinite_rejected(self, raw):
        with pytest.raises(InvalidQuantityError, match="finite"):
            normalize_quantity(raw)

    @pytest.mark.parametrize("raw", ["abc", "", "1,5", "ten"])
    def test_non_numeric_string_rejected(self, raw):
        with pytest.raises(InvalidQuantityError, match="not a number"):
            normalize_quantity(raw)

    @pytest.mark.parametrize("raw", [None, True, False, [1], {"q": 1}])
    def test_wrong_types_rejected(self, raw):
        with pytest.raises(InvalidQuantityError):
            normalize_quantity(raw)

    def test_upper_bound(self):
        with pytest.raises(InvalidQuantityError, match="below"):
            normalize_quantity(MAX_QUANTITY)
        assert normalize_quantity(MAX_QUANTITY - 1) == MAX_QUANTITY - 1

    def test_field_name_reported(self):
        with pytest.raises(InvalidQuantityError) as exc_info:
            normalize_quantity("-3", field="issue_quantity")
        assert exc_info.value.field == "issue_quantity"
        assert exc_info.value.value == "-3"


class TestNormalizeWeight:
    def test_none_passes_through(self):
        assert normalize_weight(None) is None

    def test_zero_allowed(self):
        assert normalize_weight("0") == Decimal("0.000")

    def test_rounded(self):
        assert normalize_weight("12.3456") == Decimal("12.346")

    def test_negative_rejected(self):
        with pytest.raises(InvalidQuantityError, match="negative"):
            normalize_weight("-0.5")

    def test_nan_rejected(self):
        with pytest.raises(InvalidQuantityError):
            normalize_weight("NaN")


class TestNormalizeUnits:
    def test_none_passes_through(self):
        assert normalize_units(None) is None

    def test_whole_numbers(self):
        assert normalize_units(0) == 0
        assert normalize_units(25) == 25

    @pytest.mark.parametrize("raw", [1.5, "3", True, Decimal("2")])
    def test_non_int_rejected(self, raw):
        with pytest.raises(InvalidQuantityError, match="whole number"):
            normalize_units(raw)

    def test_negative_rejected(self):
        with pytest.raises(InvalidQuantityError, match="negative"):
            normalize_units(-1)


class TestFormatQuantity:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (Decimal("100"), "100.000"),
            (Decimal("20.5"), "20.500"),
            (Decimal("0.0015"), "0.002"),
        ],
    )
    def test_three_fraction_digits(self, value, expected):
        assert format_quantity(value) == expected
