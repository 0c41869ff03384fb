from __future__ import annotations

from fractions import Fraction
from typing import List, Optional
import logging

from models.inheritance import Heir, HeirTaxDetail, HeirType, TaxCalculationResult
from calculator.inheritance_tax_config import InheritanceTaxConfig, TaxTableRow
from calculator.decimal_math import (
    Numeric, ZERO, format_fraction, to_fraction, yen, yen_floor, yen_truncate
)

logger = logging.getLogger(__name__)


class InheritanceTaxEngine:
    """
    Aggregate inheritance tax under the statutory-share method.

    The estate is split among the statutory heirs in their statutory shares,
    each notional share is run through the quick-reference table, and the
    results are summed into the aggregate tax (相続税の総額). How the estate
    is actually divided does not matter at this stage.
    """

    def __init__(self, config: Optional[InheritanceTaxConfig] = None):
        self.config = config or InheritanceTaxConfig.for_2015()

    # ------------------------------------------------------------------
    # Basic deduction
    # ------------------------------------------------------------------

    def count_heirs_for_deduction(self, heirs: List[Heir]) -> int:
        """
        Count statutory heirs for the basic deduction.

        Adopted children are capped: one if any biological child exists,
        otherwise two. OTHER entries never count.
        """
        count = 0
        adopted_count = 0
        has_biological_children = False

        for heir in heirs:
            if heir.heir_type == HeirType.CHILD:
                if heir.is_adopted:
                    adopted_count += 1
                else:
                    count += 1
                    has_biological_children = True
            elif heir.heir_type in (HeirType.SPOUSE, HeirType.PARENT, HeirType.SIBLING):
                count += 1

        if has_biological_children:
            cap = self.config.adopted_cap_with_biological_child
        else:
            cap = self.config.adopted_cap_without_biological_child

        return count + min(adopted_count, cap)

    def calculate_basic_deduction(self, heirs: List[Heir]) -> int:
        """Basic deduction = base + per-heir amount * counted heirs."""
        return (
            self.config.basic_deduction_base
            + self.config.basic_deduction_per_heir * self.count_heirs_for_deduction(heirs)
        )

    # ------------------------------------------------------------------
    # Quick-reference table
    # ------------------------------------------------------------------

    def find_bracket(self, amount: Numeric) -> TaxTableRow:
        """Return the first table row whose upper bound covers amount."""
        value = to_fraction(amount)
        for row in self.config.tax_table:
            if row.contains(value):
                return row
        return self.config.tax_table[-1]

    def tax_from_table(self, amount: Numeric) -> int:
        """
        Tax on one notional share: amount * rate - deduction, truncated to yen.

        Amounts at or below zero yield zero.
        """
        value = to_fraction(amount)
        if value <= 0:
            return 0

        row = self.find_bracket(value)
        tax = value * to_fraction(row.rate) - row.deduction
        return max(0, yen_truncate(tax))

    # ------------------------------------------------------------------
    # Statutory-share computation
    # ------------------------------------------------------------------

    def calculate_tax_by_legal_share(self, taxable_amount: int, heirs: List[Heir]) -> TaxCalculationResult:
        """
        Compute the aggregate tax and its per-heir statutory breakdown.

        Args:
            taxable_amount: Total taxable price of the estate (課税価格の合計額)
            heirs: Heirs from the heir determinator; OTHER entries are carried
                through to the result but do not take part

        Returns:
            TaxCalculationResult with one detail per statutory heir
        """
        statutory_heirs = [heir for heir in heirs if heir.is_statutory]

        deduction_heirs_count = self.count_heirs_for_deduction(heirs)
        basic_deduction = self.calculate_basic_deduction(heirs)
        taxable_estate = max(0, taxable_amount - basic_deduction)

        logger.debug(
            "Basic deduction %d for %d heirs, taxable estate %d",
            basic_deduction, deduction_heirs_count, taxable_estate,
        )

        details: List[HeirTaxDetail] = []
        total_tax = ZERO

        for heir in statutory_heirs:
            heir_taxable = self._heir_taxable_amount(taxable_estate, heir.inheritance_share)
            tax_before_addition = self.tax_from_table(heir_taxable) if taxable_estate > 0 else 0
            total_tax += tax_before_addition

            details.append(HeirTaxDetail(
                heir_id=heir.id,
                name=heir.name,
                relationship=heir.relationship,
                inheritance_share=heir.inheritance_share,
                legal_share_fraction=format_fraction(heir.inheritance_share),
                legal_share_amount=yen_floor(taxable_amount * heir.inheritance_share),
                taxable_share_amount=yen_floor(heir_taxable),
                tax_before_addition=tax_before_addition,
                two_fold_addition=heir.two_fold_addition,
            ))

        return TaxCalculationResult(
            legal_heirs=list(heirs),
            total_heirs_count=len(statutory_heirs),
            deduction_heirs_count=deduction_heirs_count,
            taxable_amount=taxable_amount,
            basic_deduction=basic_deduction,
            taxable_estate=taxable_estate,
            total_tax_amount=yen(total_tax),
            heir_tax_details=details,
        )

    def _heir_taxable_amount(self, taxable_estate: int, share: Fraction) -> Fraction:
        amount = taxable_estate * share
        if self.config.floor_heir_taxable_amount:
            return Fraction(yen_floor(amount))
        return amount
