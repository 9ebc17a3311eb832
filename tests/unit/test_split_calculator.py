"""Unit tests for split calculator."""

from decimal import Decimal

import pytest

from propertyhub.errors import ValidationError
from propertyhub.services.split_calculator import (
    SplitCalculator,
    SplitShare,
    SplitStrategy,
    calculate_splits,
    to_cents,
)


class TestEqualSplit:
    """Test equal split strategy."""

    @pytest.fixture
    def calculator(self):
        """Create split calculator instance."""
        return SplitCalculator()

    @pytest.mark.parametrize("resident_count", range(1, 8))
    @pytest.mark.parametrize("total", ["100.00", "90.00", "0.01", "1234.57", "10.00"])
    def test_equal_split_sums_exactly(self, calculator, total, resident_count):
        """Equal splits sum to the total to the cent for 1..7 residents."""
        total = Decimal(total)
        result = calculator.calculate_splits(total, list(range(1, resident_count + 1)))

        assert len(result) == resident_count
        assert sum(share.amount for share in result) == total
        amounts = {share.amount for share in result}
        # Shares differ by at most one cent
        assert max(amounts) - min(amounts) <= Decimal("0.01")

    def test_equal_split_hundred_among_three(self, calculator):
        """100.00 among three residents gives 33.34, 33.33, 33.33."""
        result = calculator.calculate_splits(Decimal("100.00"), [7, 8, 9])

        assert result == [
            SplitShare(7, Decimal("33.34")),
            SplitShare(8, Decimal("33.33")),
            SplitShare(9, Decimal("33.33")),
        ]

    def test_equal_split_ninety_among_three(self, calculator):
        """90.00 among three residents gives 30.00 each."""
        result = calculator.calculate_splits(Decimal("90.00"), [1, 2, 3], SplitStrategy.EQUAL)

        assert [share.amount for share in result] == [Decimal("30.00")] * 3

    def test_leftover_cents_go_to_first_residents(self, calculator):
        """10.00 among six: 1000 cents = 6 * 166 + 4, first four get 1.67."""
        result = calculator.calculate_splits(Decimal("10.00"), [1, 2, 3, 4, 5, 6])

        assert [share.amount for share in result] == [
            Decimal("1.67"),
            Decimal("1.67"),
            Decimal("1.67"),
            Decimal("1.67"),
            Decimal("1.66"),
            Decimal("1.66"),
        ]

    def test_order_follows_selection(self, calculator):
        """Output order matches input order, not sorted ids."""
        result = calculator.calculate_splits(Decimal("50.00"), [30, 10, 20])

        assert [share.resident_id for share in result] == [30, 10, 20]

    def test_duplicate_residents_collapse(self, calculator):
        """A resident selected twice gets one split."""
        result = calculator.calculate_splits(Decimal("50.00"), [1, 2, 1])

        assert [share.resident_id for share in result] == [1, 2]
        assert sum(share.amount for share in result) == Decimal("50.00")

    def test_total_rounded_to_cents(self, calculator):
        """Totals with sub-cent digits are rounded half up before splitting."""
        result = calculator.calculate_splits(Decimal("10.005"), [1, 2])

        assert sum(share.amount for share in result) == Decimal("10.01")

    def test_strategy_accepts_plain_string(self, calculator):
        """Strategy may be passed as its string value."""
        result = calculator.calculate_splits(Decimal("20.00"), [1, 2], "equal")

        assert [share.amount for share in result] == [Decimal("10.00"), Decimal("10.00")]


class TestCustomSplit:
    """Test custom percentage split strategy."""

    @pytest.fixture
    def calculator(self):
        """Create split calculator instance."""
        return SplitCalculator()

    def test_custom_split_by_percentage(self, calculator):
        """Amounts follow the percentages."""
        result = calculator.calculate_splits(
            Decimal("200.00"),
            [1, 2, 3],
            SplitStrategy.CUSTOM,
            {1: Decimal("50"), 2: Decimal("30"), 3: Decimal("20")},
        )

        assert result == [
            SplitShare(1, Decimal("100.00")),
            SplitShare(2, Decimal("60.00")),
            SplitShare(3, Decimal("40.00")),
        ]

    def test_custom_split_thirds_sum_exactly(self, calculator):
        """Repeating percentages still sum to the total."""
        third = Decimal("33.333")
        result = calculator.calculate_splits(
            Decimal("100.00"),
            [1, 2, 3],
            SplitStrategy.CUSTOM,
            {1: third, 2: third, 3: Decimal("33.334")},
        )

        assert sum(share.amount for share in result) == Decimal("100.00")

    @pytest.mark.parametrize(
        "percentages",
        [
            {1: "50", 2: "50"},
            {1: "49.995", 2: "50"},
            {1: "50.01", 2: "50"},
            {1: "33.33", 2: "66.66"},
        ],
    )
    def test_percentages_within_tolerance_accepted(self, calculator, percentages):
        """Percentage totals within 100 +/- 0.01 succeed and sum to the total."""
        percentages = {k: Decimal(v) for k, v in percentages.items()}
        result = calculator.calculate_splits(
            Decimal("123.45"), [1, 2], SplitStrategy.CUSTOM, percentages
        )

        assert abs(sum(share.amount for share in result) - Decimal("123.45")) <= Decimal("0.01")

    @pytest.mark.parametrize("first_share", ["49.5", "50.5", "0", "99.98"])
    def test_percentages_outside_tolerance_rejected(self, calculator, first_share):
        """Percentage totals such as 99.5 or 100.5 raise ValidationError."""
        with pytest.raises(ValidationError, match="split percentages must sum to 100%"):
            calculator.calculate_splits(
                Decimal("100.00"),
                [1, 2],
                SplitStrategy.CUSTOM,
                {1: Decimal(first_share), 2: Decimal("50")},
            )

    def test_unselected_percentages_ignored(self, calculator):
        """Only selected residents count towards the 100% total."""
        result = calculator.calculate_splits(
            Decimal("80.00"),
            [1, 2],
            SplitStrategy.CUSTOM,
            {1: Decimal("25"), 2: Decimal("75"), 3: Decimal("40")},
        )

        assert [share.amount for share in result] == [Decimal("20.00"), Decimal("60.00")]

    def test_missing_percentage_counts_as_zero(self, calculator):
        """A selected resident without a percentage owes nothing."""
        result = calculator.calculate_splits(
            Decimal("80.00"), [1, 2], SplitStrategy.CUSTOM, {1: Decimal("100")}
        )

        assert result == [SplitShare(1, Decimal("80.00")), SplitShare(2, Decimal("0.00"))]

    def test_float_percentages_accepted(self, calculator):
        """Percentages coming from JSON floats are converted via str."""
        result = calculator.calculate_splits(
            Decimal("10.00"), [1, 2], SplitStrategy.CUSTOM, {1: 12.5, 2: 87.5}
        )

        assert [share.amount for share in result] == [Decimal("1.25"), Decimal("8.75")]

    def test_negative_percentage_rejected(self, calculator):
        with pytest.raises(ValidationError, match="negative"):
            calculator.calculate_splits(
                Decimal("10.00"),
                [1, 2],
                SplitStrategy.CUSTOM,
                {1: Decimal("-10"), 2: Decimal("110")},
            )

    def test_custom_without_percentages_rejected(self, calculator):
        with pytest.raises(ValidationError, match="percentages required"):
            calculator.calculate_splits(Decimal("10.00"), [1, 2], SplitStrategy.CUSTOM)


class TestSplitValidation:
    """Test input validation shared by both strategies."""

    @pytest.mark.parametrize("amount", ["0", "-5.00", "0.004"])
    def test_non_positive_amount_rejected(self, amount):
        with pytest.raises(ValidationError, match="positive"):
            calculate_splits(Decimal(amount), [1, 2])

    @pytest.mark.parametrize("amount", ["10000000000.00", "123456789012345.67"])
    def test_oversized_amount_rejected(self, amount):
        """Totals that do not fit the amount columns never reach allocation."""
        with pytest.raises(ValidationError, match="less than"):
            calculate_splits(Decimal(amount), [1, 2])

    @pytest.mark.parametrize("amount", ["NaN", "Infinity", "abc"])
    def test_non_numeric_amount_rejected(self, amount):
        with pytest.raises(ValidationError, match="Invalid amount"):
            calculate_splits(amount, [1, 2])

    def test_largest_amount_splits_exactly(self):
        result = calculate_splits(Decimal("9999999999.99"), [1, 2, 3])

        assert sum(share.amount for share in result) == Decimal("9999999999.99")

    def test_quantize_overflow_is_validation_error(self):
        """Values too wide for the decimal context fail as ValidationError."""
        with pytest.raises(ValidationError, match="Invalid amount"):
            to_cents(Decimal("1e27"))

    def test_empty_selection_rejected(self):
        with pytest.raises(ValidationError, match="At least one resident"):
            calculate_splits(Decimal("10.00"), [])

    def test_unknown_strategy_rejected(self):
        with pytest.raises(ValidationError, match="Unknown split strategy"):
            calculate_splits(Decimal("10.00"), [1], "weighted")


class TestDistributeWithRemainder:
    """Test the largest-remainder allocation directly."""

    def test_largest_remainder_gets_extra_cent(self):
        """1.00 by weights 1:2 gives the extra cent to the larger remainder."""
        result = SplitCalculator().distribute_with_remainder(
            Decimal("1.00"), {1: Decimal("1"), 2: Decimal("2")}
        )

        # 100 * 1/3 = 33.33 (rem 1/3), 100 * 2/3 = 66.66 (rem 2/3)
        assert result == {1: Decimal("0.33"), 2: Decimal("0.67")}

    def test_empty_weights(self):
        assert SplitCalculator().distribute_with_remainder(Decimal("10.00"), {}) == {}

    def test_zero_weights_rejected(self):
        with pytest.raises(ValidationError):
            SplitCalculator().distribute_with_remainder(
                Decimal("10.00"), {1: Decimal(0), 2: Decimal(0)}
            )
