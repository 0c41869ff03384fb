from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class SpousalReductionMethod(str, Enum):
    """
    How the spousal tax reduction is capped below the asset limit.

    STATUTORY_SHARE_CAP: reduction never exceeds the aggregate tax times the
        spouse's statutory share.
    STATUTORY_FORMULA: reduction is the aggregate tax times
        min(acquired, limit) / total amount (the form 5 formula).
    """
    STATUTORY_SHARE_CAP = "statutory_share_cap"
    STATUTORY_FORMULA = "statutory_formula"


@dataclass(frozen=True)
class TaxTableRow:
    """One row of the inheritance tax quick-reference table (速算表)."""
    max_amount: Optional[int]  # inclusive upper bound; None for the top bracket
    rate: Decimal
    deduction: int

    def contains(self, amount) -> bool:
        return self.max_amount is None or amount <= self.max_amount

    def to_dict(self) -> Dict[str, Any]:
        return {
            "max_amount": self.max_amount,
            "rate": float(self.rate),
            "deduction": self.deduction,
        }


def _table(rows: List[Tuple[Optional[int], str, int]]) -> Tuple[TaxTableRow, ...]:
    return tuple(TaxTableRow(max_amount, Decimal(rate), deduction) for max_amount, rate, deduction in rows)


@dataclass(frozen=True)
class InheritanceTaxConfig:
    """
    Centralized constants for the inheritance tax computation.

    NOTE: Values here should be reviewed against National Tax Agency guidance
    whenever the Inheritance Tax Act is amended. The structure keeps those
    updates localized and testable.
    """

    effective_year: int
    tax_table: Tuple[TaxTableRow, ...]

    # Basic deduction (基礎控除): base + per_heir * statutory heirs
    basic_deduction_base: int = 30_000_000
    basic_deduction_per_heir: int = 6_000_000

    # Adopted children counted for the basic deduction (相続税法15条2項)
    adopted_cap_with_biological_child: int = 1
    adopted_cap_without_biological_child: int = 2

    # 20% surcharge for heirs outside spouse / first-degree relatives
    two_fold_addition_rate: Decimal = Decimal("0.2")

    # Spousal reduction (配偶者の税額軽減) asset floor
    spousal_reduction_floor: int = 160_000_000
    spousal_reduction_method: SpousalReductionMethod = SpousalReductionMethod.STATUTORY_SHARE_CAP

    # Floor each heir's share of the taxable estate before the table lookup
    floor_heir_taxable_amount: bool = False

    metadata: Dict[str, Any] = field(default_factory=dict, compare=False)

    @staticmethod
    def for_2015() -> "InheritanceTaxConfig":
        """Rates and deductions in force for deaths on or after 2015-01-01."""
        return InheritanceTaxConfig(
            effective_year=2015,
            tax_table=_table([
                (10_000_000, "0.10", 0),
                (30_000_000, "0.15", 500_000),
                (50_000_000, "0.20", 2_000_000),
                (100_000_000, "0.30", 7_000_000),
                (200_000_000, "0.40", 17_000_000),
                (300_000_000, "0.45", 27_000_000),
                (600_000_000, "0.50", 42_000_000),
                (None, "0.55", 72_000_000),
            ]),
            metadata={"source": "相続税法16条 (平成25年改正)"},
        )

    def with_overrides(self, **overrides: Any) -> "InheritanceTaxConfig":
        """Return a copy with the given fields replaced."""
        if "spousal_reduction_method" in overrides:
            overrides["spousal_reduction_method"] = SpousalReductionMethod(overrides["spousal_reduction_method"])
        return replace(self, **overrides)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "effective_year": self.effective_year,
            "tax_table": [row.to_dict() for row in self.tax_table],
            "basic_deduction_base": self.basic_deduction_base,
            "basic_deduction_per_heir": self.basic_deduction_per_heir,
            "two_fold_addition_rate": float(self.two_fold_addition_rate),
            "spousal_reduction_floor": self.spousal_reduction_floor,
            "spousal_reduction_method": self.spousal_reduction_method.value,
            "floor_heir_taxable_amount": self.floor_heir_taxable_amount,
        }
