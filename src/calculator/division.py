"""
Actual-Division Apportionment.

Re-distributes the aggregate tax from the statutory-share method over the
way the estate is actually divided, then applies the per-person adjustments:

1. distributed tax = aggregate tax * acquired amount / total amount
2. 20% surcharge (相続税法18条) for anyone flagged two_fold_addition
3. spousal reduction (相続税法19条の2): the spouse owes nothing on
   acquisitions up to the larger of 160,000,000 yen or the spouse's
   statutory share of the estate

All intermediate values are exact fractions; every per-person figure is
rounded half-up to whole yen once, at the end, and the total is the sum of
the rounded finals.
"""

from __future__ import annotations

from dataclasses import dataclass
from fractions import Fraction
from typing import Dict, List, Mapping, Optional, Union
import logging

from models.inheritance import (
    DivisionDetail,
    DivisionInput,
    DivisionMode,
    DivisionResult,
    Heir,
    HeirType,
    RoundingMethod,
)
from calculator.inheritance_tax_config import InheritanceTaxConfig, SpousalReductionMethod
from calculator.decimal_math import (
    HUNDRED, ZERO, Numeric, divide, round_yen, to_decimal, to_fraction, yen
)

logger = logging.getLogger(__name__)


def convert_percentage_to_amount(
    percentages: Mapping[str, Numeric],
    total_amount: int,
    rounding_method: Union[RoundingMethod, str] = RoundingMethod.ROUND,
) -> Dict[str, int]:
    """
    Convert per-person percentages into yen amounts that sum to total_amount.

    Each amount is total_amount * percentage / 100 rounded per
    rounding_method. The rounding residual is then spread one yen per person per pass,
    largest percentage first, until it is used up.

    Args:
        percentages: Percentages (0-100) keyed by heir id
        total_amount: Estate value in yen
        rounding_method: round (half up), floor or ceil

    Returns:
        Amounts keyed by heir id, in the input key order
    """
    total = to_decimal(total_amount)
    amounts: Dict[str, int] = {
        heir_id: round_yen(total * to_decimal(percentage) / HUNDRED, rounding_method)
        for heir_id, percentage in percentages.items()
    }
    if not amounts:
        return amounts

    # Stable sort keeps input order among equal percentages
    order = sorted(amounts, key=lambda heir_id: to_decimal(percentages[heir_id]), reverse=True)

    diff = total_amount - sum(amounts.values())
    step = 1 if diff > 0 else -1
    rounds, remainder = divmod(abs(diff), len(order))
    for position, heir_id in enumerate(order):
        amounts[heir_id] += step * (rounds + (1 if position < remainder else 0))

    return amounts


@dataclass
class _Apportionment:
    """Unrounded per-person figures."""
    heir: Heir
    acquired_amount: int
    distributed_tax: Fraction
    surcharge: Fraction
    spousal_reduction: Fraction

    @property
    def adjustment(self) -> Fraction:
        return self.surcharge - self.spousal_reduction

    @property
    def final_tax(self) -> Fraction:
        return max(ZERO, self.distributed_tax + self.adjustment)


class DivisionApportioner:
    """Apportions the aggregate tax over an actual division of the estate."""

    def __init__(self, config: Optional[InheritanceTaxConfig] = None):
        self.config = config or InheritanceTaxConfig.for_2015()

    def resolve_amounts(self, division_input: DivisionInput) -> Dict[str, int]:
        """Acquired amount per heir id, converting percentages when needed."""
        if division_input.mode == DivisionMode.PERCENTAGE:
            known_ids = {heir.id for heir in division_input.heirs}
            # Unknown ids take no part in the conversion
            percentages = {
                heir_id: percentage
                for heir_id, percentage in (division_input.percentages or {}).items()
                if heir_id in known_ids
            }
            return convert_percentage_to_amount(
                percentages,
                division_input.total_amount,
                division_input.rounding_method or RoundingMethod.ROUND,
            )
        return {
            heir_id: yen(amount)
            for heir_id, amount in (division_input.amounts or {}).items()
        }

    def calculate_actual_division(self, division_input: DivisionInput) -> DivisionResult:
        """
        Re-distribute the aggregate tax over the actual division.

        Heirs missing from the amount map are treated as acquiring nothing;
        OTHER entries acquiring nothing are skipped as unused placeholders.
        """
        amounts = self.resolve_amounts(division_input)
        total_amount = division_input.total_amount
        total_tax = to_fraction(division_input.total_tax_amount)
        spouse_share = self._spouse_statutory_share(division_input.heirs)

        details: List[DivisionDetail] = []
        total_final_tax = 0

        for heir in division_input.heirs:
            acquired = amounts.get(heir.id, 0)
            if heir.heir_type == HeirType.OTHER and acquired <= 0:
                continue

            line = self._apportion(heir, acquired, total_amount, total_tax, spouse_share)
            detail = self._round(line)
            total_final_tax += detail.final_tax_amount
            details.append(detail)

        logger.debug(
            "Apportioned %d to %d people (statutory total %d)",
            total_final_tax, len(details), division_input.total_tax_amount,
        )

        return DivisionResult(
            total_amount=total_amount,
            total_tax_amount=division_input.total_tax_amount,
            total_final_tax_amount=total_final_tax,
            division_details=details,
        )

    def _apportion(
        self,
        heir: Heir,
        acquired: int,
        total_amount: int,
        total_tax: Fraction,
        spouse_share: Fraction,
    ) -> _Apportionment:
        distributed_tax = divide(acquired, total_amount, default=0) * total_tax

        surcharge = ZERO
        if heir.two_fold_addition:
            surcharge = distributed_tax * to_fraction(self.config.two_fold_addition_rate)

        reduction = ZERO
        if heir.heir_type == HeirType.SPOUSE:
            reduction = self._spousal_reduction(
                acquired, total_amount, total_tax, spouse_share, distributed_tax + surcharge,
            )

        return _Apportionment(
            heir=heir,
            acquired_amount=acquired,
            distributed_tax=distributed_tax,
            surcharge=surcharge,
            spousal_reduction=reduction,
        )

    def _spousal_reduction(
        self,
        acquired: int,
        total_amount: int,
        total_tax: Fraction,
        spouse_share: Fraction,
        tax_for_spouse: Fraction,
    ) -> Fraction:
        """
        Reduction of the spouse's tax.

        At or above the asset limit the whole tax is eliminated. Below it
        the cap depends on the configured method.
        """
        reduction_limit = max(to_fraction(self.config.spousal_reduction_floor), spouse_share * total_amount)
        if acquired >= reduction_limit:
            return tax_for_spouse

        if self.config.spousal_reduction_method == SpousalReductionMethod.STATUTORY_FORMULA:
            cap = total_tax * divide(min(acquired, reduction_limit), total_amount, default=0)
        else:
            cap = total_tax * spouse_share
        return min(tax_for_spouse, cap)

    @staticmethod
    def _spouse_statutory_share(heirs: List[Heir]) -> Fraction:
        for heir in heirs:
            if heir.heir_type == HeirType.SPOUSE:
                return heir.inheritance_share
        return ZERO

    @staticmethod
    def _round(line: _Apportionment) -> DivisionDetail:
        return DivisionDetail(
            heir_id=line.heir.id,
            name=line.heir.name,
            relationship=line.heir.relationship,
            acquired_amount=line.acquired_amount,
            distributed_tax=yen(line.distributed_tax),
            two_fold_addition_amount=yen(line.surcharge),
            spousal_reduction_amount=yen(line.spousal_reduction),
            adjustment=yen(line.adjustment),
            final_tax_amount=yen(line.final_tax),
        )


def calculate_actual_division(
    division_input: DivisionInput,
    config: Optional[InheritanceTaxConfig] = None,
) -> DivisionResult:
    """Convenience wrapper around DivisionApportioner.calculate_actual_division()."""
    return DivisionApportioner(config).calculate_actual_division(division_input)
