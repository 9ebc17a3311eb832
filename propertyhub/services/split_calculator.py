"""Split calculator for dividing an invoice total among selected residents.

Supports split strategies:
- EQUAL: Every selected resident owes the same share
- CUSTOM: Each resident owes a percentage of the total; percentages sum to 100

Amounts are allocated in whole cents with the largest-remainder method, so the
splits always sum to the invoice total exactly.
"""

import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Iterable, Mapping, NamedTuple

from propertyhub.errors import ValidationError

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
PERCENT_TOTAL = Decimal("100")
PERCENT_TOLERANCE = Decimal("0.01")
# Amount columns are Numeric(12, 2)
MAX_AMOUNT = Decimal("10000000000")


class SplitStrategy(str, Enum):
    """How an invoice total is divided among residents."""

    EQUAL = "equal"
    CUSTOM = "custom"


class SplitShare(NamedTuple):
    """One resident's computed share of an invoice."""

    resident_id: int
    amount: Decimal


def to_cents(amount: Decimal) -> Decimal:
    """Quantize an amount to the currency's minor unit.

    Raises:
        ValidationError: If the amount is not a finite number or is too large
            to be represented in cents
    """
    try:
        value = Decimal(str(amount))
        if not value.is_finite():
            raise ValidationError(f"Invalid amount: {amount}")
        return value.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation as e:
        raise ValidationError(f"Invalid amount: {amount}") from e


def check_amount(amount: Decimal) -> Decimal:
    """Quantize an invoice total and check it is positive and fits the amount columns.

    Raises:
        ValidationError: If the amount is invalid, not positive, or not below MAX_AMOUNT
    """
    total = to_cents(amount)
    if total <= 0:
        raise ValidationError("Invoice amount must be a positive number")
    if total >= MAX_AMOUNT:
        raise ValidationError(f"Invoice amount must be less than {MAX_AMOUNT}")
    return total


class SplitCalculator:
    """Pure split computation engine. Holds no state and performs no I/O."""

    def distribute_with_remainder(
        self,
        total_amount: Decimal,
        weights: Mapping[int, Decimal],
    ) -> dict[int, Decimal]:
        """Distribute amount by weights, giving leftover cents to the largest remainders.

        Ensures: sum(result) == total_amount (zero money loss/creation)

        Algorithm:
        1. Convert the total to integer cents
        2. Each resident gets floor(total_cents * weight / sum(weights))
        3. The cents left over go one each to the residents with the largest
           fractional remainders; ties go to the earlier resident

        Args:
            total_amount: Total to distribute, already quantized to cents
            weights: Mapping resident_id to non-negative weight, in stable order

        Returns:
            Dict mapping resident_id to allocated amount (Decimal)
        """
        if not weights:
            return {}

        total_cents = int(to_cents(total_amount) * 100)
        weight_dict = {k: Decimal(str(v)) for k, v in weights.items()}
        total_weight = sum(weight_dict.values())
        if total_weight <= 0:
            raise ValidationError("Split weights must be positive")

        allocations: dict[int, int] = {}
        remainders = []
        allocated_cents = 0

        for position, (resident_id, weight) in enumerate(weight_dict.items()):
            cents, remainder = divmod(total_cents * weight, total_weight)
            allocations[resident_id] = int(cents)
            allocated_cents += int(cents)
            remainders.append((remainder, position, resident_id))

        leftover = total_cents - allocated_cents

        # Same denominator for every remainder, so they compare directly
        remainders.sort(key=lambda item: (-item[0], item[1]))
        for _, _, resident_id in remainders[:leftover]:
            allocations[resident_id] += 1

        return {k: (Decimal(v) / 100).quantize(CENT) for k, v in allocations.items()}

    def split_equal(self, total_amount: Decimal, resident_ids: list[int]) -> list[SplitShare]:
        """Split equally; the first residents absorb the leftover cents.

        Example: 100.00 among three residents gives 33.34, 33.33, 33.33.
        """
        allocations = self.distribute_with_remainder(
            total_amount, {resident_id: Decimal(1) for resident_id in resident_ids}
        )
        return [SplitShare(resident_id, allocations[resident_id]) for resident_id in resident_ids]

    def split_custom(
        self,
        total_amount: Decimal,
        resident_ids: list[int],
        percentages: Mapping[int, Decimal],
    ) -> list[SplitShare]:
        """Split by per-resident percentages.

        A selected resident absent from percentages counts as 0%. Percentages of
        residents that are not selected are ignored.

        Raises:
            ValidationError: If a percentage is negative or the selected
                percentages do not sum to 100 within 0.01
        """
        selected = {
            resident_id: Decimal(str(percentages.get(resident_id, 0)))
            for resident_id in resident_ids
        }

        negative = [resident_id for resident_id, pct in selected.items() if pct < 0]
        if negative:
            raise ValidationError(f"Split percentages must not be negative (residents {negative})")

        total_percentage = sum(selected.values(), Decimal(0))
        if abs(total_percentage - PERCENT_TOTAL) > PERCENT_TOLERANCE:
            logger.warning("Rejected custom split: percentages sum to %s", total_percentage)
            raise ValidationError("split percentages must sum to 100%")

        allocations = self.distribute_with_remainder(total_amount, selected)
        return [SplitShare(resident_id, allocations[resident_id]) for resident_id in resident_ids]

    def calculate_splits(
        self,
        total_amount: Decimal,
        resident_ids: Iterable[int],
        strategy: SplitStrategy = SplitStrategy.EQUAL,
        percentages: Mapping[int, Decimal] | None = None,
    ) -> list[SplitShare]:
        """Compute the splits to persist for an invoice.

        Orchestrates validation and dispatches on strategy.

        Args:
            total_amount: Positive invoice total
            resident_ids: Selected residents; duplicates collapse, first order kept
            strategy: EQUAL or CUSTOM
            percentages: Resident to percentage mapping, required for CUSTOM

        Returns:
            One SplitShare per selected resident, in selection order, whose
            amounts sum to the total quantized to cents

        Raises:
            ValidationError: On a non-positive or oversized total, an empty selection, or
                invalid custom percentages
        """
        total = check_amount(total_amount)

        selected = list(dict.fromkeys(resident_ids))
        if not selected:
            raise ValidationError("At least one resident must be selected")

        try:
            strategy = SplitStrategy(strategy)
        except ValueError as e:
            raise ValidationError(f"Unknown split strategy: {strategy}") from e

        if strategy == SplitStrategy.EQUAL:
            return self.split_equal(total, selected)

        if percentages is None:
            raise ValidationError("percentages required for custom split")
        return self.split_custom(total, selected, percentages)


def calculate_splits(
    total_amount: Decimal,
    resident_ids: Iterable[int],
    strategy: SplitStrategy = SplitStrategy.EQUAL,
    percentages: Mapping[int, Decimal] | None = None,
) -> list[SplitShare]:
    """Module-level shortcut for SplitCalculator().calculate_splits()."""
    return SplitCalculator().calculate_splits(total_amount, resident_ids, strategy, percentages)


__all__ = [
    "MAX_AMOUNT",
    "SplitCalculator",
    "SplitShare",
    "SplitStrategy",
    "calculate_splits",
    "check_amount",
    "to_cents",
]
