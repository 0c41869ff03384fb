"""
Inheritance tax domain models.

Plain dataclasses shared by the heir determinator, the statutory-share
calculator and the division apportioner. Shares are exact fractions;
monetary amounts are integer yen.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from fractions import Fraction
from typing import Any, Dict, List, Mapping, Optional, Union

from models._decimal_utils import Numeric, to_share


class HeirType(str, Enum):
    """Statutory rank an heir belongs to."""
    SPOUSE = "spouse"
    CHILD = "child"
    PARENT = "parent"
    SIBLING = "sibling"
    OTHER = "other"  # legatee outside the statutory order


class RelationshipType(str, Enum):
    """Finer-grained relationship to the decedent."""
    SPOUSE = "spouse"
    CHILD = "child"
    ADOPTED_CHILD = "adopted_child"
    GRANDCHILD_ADOPTED = "grandchild_adopted"
    PARENT = "parent"
    SIBLING = "sibling"
    HALF_SIBLING = "half_sibling"
    OTHER = "other"


class DivisionMode(str, Enum):
    """How an actual division is specified."""
    AMOUNT = "amount"
    PERCENTAGE = "percentage"


class RoundingMethod(str, Enum):
    """Rounding applied when converting percentages to yen."""
    ROUND = "round"
    FLOOR = "floor"
    CEIL = "ceil"


def _count(data: Mapping[str, Any], key: str) -> int:
    value = data.get(key)
    return int(value) if value is not None else 0


@dataclass(frozen=True)
class FamilyStructure:
    """Family composition of the decedent."""
    spouse_exists: bool = False
    children_count: int = 0
    adopted_children_count: int = 0
    grandchild_adopted_count: int = 0
    parents_alive: int = 0
    siblings_count: int = 0
    half_siblings_count: int = 0
    non_heirs_count: int = 0

    @property
    def statutory_heir_count(self) -> int:
        """Number of people the structure names inside the statutory order."""
        return (
            (1 if self.spouse_exists else 0)
            + max(0, self.children_count)
            + max(0, self.parents_alive)
            + max(0, self.siblings_count)
            + max(0, self.half_siblings_count)
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FamilyStructure":
        return cls(
            spouse_exists=bool(data.get("spouse_exists", False)),
            children_count=_count(data, "children_count"),
            adopted_children_count=_count(data, "adopted_children_count"),
            grandchild_adopted_count=_count(data, "grandchild_adopted_count"),
            parents_alive=_count(data, "parents_alive"),
            siblings_count=_count(data, "siblings_count"),
            half_siblings_count=_count(data, "half_siblings_count"),
            non_heirs_count=_count(data, "non_heirs_count"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Heir:
    """
    A person taking part in the estate.

    Created once by the heir determinator and never mutated. Heirs of type
    OTHER are legatees outside the statutory order: they always carry a
    zero share and are subject to the 20% surcharge.
    """
    id: str
    name: str
    heir_type: HeirType
    relationship: RelationshipType
    inheritance_share: Fraction = Fraction(0)
    two_fold_addition: bool = False
    is_adopted: Optional[bool] = None

    @property
    def is_statutory(self) -> bool:
        return self.heir_type != HeirType.OTHER

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Heir":
        heir_type = HeirType(data["heir_type"])
        relationship = data.get("relationship") or heir_type.value
        return cls(
            id=str(data["id"]),
            name=str(data.get("name") or data["id"]),
            heir_type=heir_type,
            relationship=RelationshipType(relationship),
            inheritance_share=to_share(data.get("inheritance_share") or 0),
            two_fold_addition=bool(data.get("two_fold_addition", False)),
            is_adopted=data.get("is_adopted"),
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "heir_type": self.heir_type.value,
            "relationship": self.relationship.value,
            "inheritance_share": float(self.inheritance_share),
            "inheritance_share_fraction": str(self.inheritance_share),
            "two_fold_addition": self.two_fold_addition,
        }
        if self.is_adopted is not None:
            result["is_adopted"] = self.is_adopted
        return result


@dataclass
class HeirTaxDetail:
    """Per-heir line of the statutory-share computation."""
    heir_id: str
    name: str
    relationship: RelationshipType
    inheritance_share: Fraction
    legal_share_fraction: str
    legal_share_amount: int
    taxable_share_amount: int
    tax_before_addition: int
    two_fold_addition: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "heir_id": self.heir_id,
            "name": self.name,
            "relationship": self.relationship.value,
            "inheritance_share": float(self.inheritance_share),
            "legal_share_fraction": self.legal_share_fraction,
            "legal_share_amount": self.legal_share_amount,
            "taxable_share_amount": self.taxable_share_amount,
            "tax_before_addition": self.tax_before_addition,
            "two_fold_addition": self.two_fold_addition,
        }


@dataclass
class TaxCalculationResult:
    """Aggregate tax under the statutory-share method (相続税の総額)."""
    legal_heirs: List[Heir]
    total_heirs_count: int
    deduction_heirs_count: int
    taxable_amount: int
    basic_deduction: int
    taxable_estate: int
    total_tax_amount: int
    heir_tax_details: List[HeirTaxDetail] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "legal_heirs": [heir.to_dict() for heir in self.legal_heirs],
            "total_heirs_count": self.total_heirs_count,
            "deduction_heirs_count": self.deduction_heirs_count,
            "taxable_amount": self.taxable_amount,
            "basic_deduction": self.basic_deduction,
            "taxable_estate": self.taxable_estate,
            "total_tax_amount": self.total_tax_amount,
            "heir_tax_details": [detail.to_dict() for detail in self.heir_tax_details],
        }


@dataclass
class DivisionInput:
    """
    An actual division of the estate.

    mode and rounding_method are kept as given so the validator can report
    unknown values instead of failing on construction.
    """
    heirs: List[Heir]
    total_amount: int
    total_tax_amount: int
    mode: Union[DivisionMode, str] = DivisionMode.AMOUNT
    amounts: Optional[Dict[str, Numeric]] = None
    percentages: Optional[Dict[str, Numeric]] = None
    rounding_method: Union[RoundingMethod, str] = RoundingMethod.ROUND

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DivisionInput":
        amounts = data.get("amounts")
        percentages = data.get("percentages")
        return cls(
            heirs=[h if isinstance(h, Heir) else Heir.from_dict(h) for h in data.get("heirs") or []],
            total_amount=int(data.get("total_amount") or 0),
            total_tax_amount=int(data.get("total_tax_amount") or 0),
            mode=data.get("mode") or DivisionMode.AMOUNT,
            amounts=dict(amounts) if amounts is not None else None,
            percentages=dict(percentages) if percentages is not None else None,
            rounding_method=data.get("rounding_method") or RoundingMethod.ROUND,
        )


@dataclass
class DivisionDetail:
    """Per-person line of the actual-division apportionment."""
    heir_id: str
    name: str
    relationship: RelationshipType
    acquired_amount: int
    distributed_tax: int
    two_fold_addition_amount: int
    spousal_reduction_amount: int
    adjustment: int
    final_tax_amount: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "heir_id": self.heir_id,
            "name": self.name,
            "relationship": self.relationship.value,
            "acquired_amount": self.acquired_amount,
            "distributed_tax": self.distributed_tax,
            "two_fold_addition_amount": self.two_fold_addition_amount,
            "spousal_reduction_amount": self.spousal_reduction_amount,
            "adjustment": self.adjustment,
            "final_tax_amount": self.final_tax_amount,
        }


@dataclass
class DivisionResult:
    """Outcome of re-apportioning the aggregate tax over an actual division."""
    total_amount: int
    total_tax_amount: int
    total_final_tax_amount: int
    division_details: List[DivisionDetail] = field(default_factory=list)

    def detail_for(self, heir_id: str) -> Optional[DivisionDetail]:
        for detail in self.division_details:
            if detail.heir_id == heir_id:
                return detail
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_amount": self.total_amount,
            "total_tax_amount": self.total_tax_amount,
            "total_final_tax_amount": self.total_final_tax_amount,
            "division_details": [detail.to_dict() for detail in self.division_details],
        }
