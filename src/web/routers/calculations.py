"""
Calculation Routes - Inheritance Tax Operations

Routes:
- POST /api/calculation/heirs - Determine statutory heirs and shares
- POST /api/calculation/tax-amount - Aggregate tax under the statutory-share method
- POST /api/calculation/actual-division - Apportion the tax over an actual division
- GET /api/calculation/tax-table - Quick-reference table and deduction constants

Validation failures are returned as 400 responses listing every problem;
they are never raised.
"""

import time
import logging
from functools import lru_cache
from typing import Dict, List, Optional, Union

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, field_validator

from calculator.tax_calculator import InheritanceTaxCalculator
from calculator.validation import ValidationResult
from config.settings import get_settings
from models._decimal_utils import to_share
from models.inheritance import DivisionInput, FamilyStructure, Heir, HeirType, RelationshipType
from web.errors import ErrorCode, InheritanceTaxError
from web.routers.health import record_calculation

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/calculation", tags=["Calculations"])


@lru_cache
def get_calculator() -> InheritanceTaxCalculator:
    """Shared calculator built from settings. The calculator holds no per-call state."""
    return InheritanceTaxCalculator(config=get_settings().tax_config())


# =============================================================================
# REQUEST MODELS
# =============================================================================

class FamilyStructureInput(BaseModel):
    """Family composition. Ranges are checked by the domain validator so
    every problem is reported together."""
    spouse_exists: bool = Field(default=False, description="Whether the spouse survives")
    children_count: int = Field(default=0, description="All children, adopted included")
    adopted_children_count: int = Field(default=0, description="Adopted children, grandchildren included")
    grandchild_adopted_count: int = Field(default=0, description="Grandchildren adopted by the decedent")
    parents_alive: int = Field(default=0, description="Living parents (0-2)")
    siblings_count: int = Field(default=0, description="Full-blood siblings")
    half_siblings_count: int = Field(default=0, description="Half-blood siblings")
    non_heirs_count: int = Field(default=0, description="Legatees outside the statutory order")

    def to_domain(self) -> FamilyStructure:
        return FamilyStructure(**self.model_dump())


class HeirsRequest(BaseModel):
    family_structure: FamilyStructureInput


class TaxAmountRequest(BaseModel):
    taxable_amount: int = Field(..., description="Total taxable price of the estate in yen")
    family_structure: FamilyStructureInput


class HeirInput(BaseModel):
    """An heir as returned by the heirs endpoint, or an added legatee."""
    id: str
    name: Optional[str] = None
    heir_type: HeirType
    relationship: Optional[RelationshipType] = None
    inheritance_share: Union[float, str] = Field(default=0, description="Share as a number or 'n/d'")
    two_fold_addition: bool = False
    is_adopted: Optional[bool] = None

    @field_validator("inheritance_share")
    @classmethod
    def _share_in_range(cls, value):
        try:
            share = to_share(value)
        except (ArithmeticError, ValueError) as e:
            raise ValueError(f"inheritance_share is not a number: {value!r}") from e
        if not 0 <= share <= 1:
            raise ValueError("inheritance_share must be between 0 and 1")
        return value

    def to_domain(self) -> Heir:
        return Heir.from_dict(self.model_dump())


class DivisionRequest(BaseModel):
    heirs: List[HeirInput] = Field(..., min_length=1)
    total_amount: int = Field(..., description="Estate value in yen")
    total_tax_amount: int = Field(..., description="Aggregate tax from the tax-amount endpoint")
    mode: str = Field(default="amount", description="amount or percentage")
    amounts: Optional[Dict[str, Union[int, float]]] = None
    percentages: Optional[Dict[str, Union[int, float]]] = None
    rounding_method: str = Field(default="round", description="round, floor or ceil")

    def to_domain(self) -> DivisionInput:
        return DivisionInput(
            heirs=[heir.to_domain() for heir in self.heirs],
            total_amount=self.total_amount,
            total_tax_amount=self.total_tax_amount,
            mode=self.mode,
            amounts=self.amounts,
            percentages=self.percentages,
            rounding_method=self.rounding_method,
        )


# =============================================================================
# RESPONSE HELPERS
# =============================================================================

def _validation_failure(validation: ValidationResult) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "error": "Validation failed",
            "validation_errors": [issue.to_dict() for issue in validation.errors],
            "validation_warnings": [issue.to_dict() for issue in validation.warnings],
        },
    )


def _run(operation: str, func, *args):
    """Run a calculator operation, recording metrics and wrapping arithmetic failures."""
    start = time.perf_counter()
    try:
        outcome = func(*args)
    except ArithmeticError as e:
        logger.exception(f"{operation} failed: {e}")
        record_calculation(operation, success=False)
        raise InheritanceTaxError(
            ErrorCode.CALCULATION_ERROR,
            str(e),
            status_code=500,
            details={"operation": operation},
            user_message="The calculation could not be completed.",
        ) from e
    _record(operation, outcome, start)
    return outcome


def _record(operation: str, outcome, start: float) -> None:
    record_calculation(
        operation,
        success=outcome.success,
        validation_errors=len(outcome.validation.errors),
        latency_ms=(time.perf_counter() - start) * 1000,
    )


# =============================================================================
# CALCULATION ROUTES
# =============================================================================

@router.post("/heirs")
async def determine_heirs(
    request: HeirsRequest,
    calculator: InheritanceTaxCalculator = Depends(get_calculator),
):
    """Determine statutory heirs and their shares from a family structure."""
    outcome = _run("heirs", calculator.determine_heirs, request.family_structure.to_domain())

    if not outcome.success:
        return _validation_failure(outcome.validation)

    return {
        "success": True,
        "result": {"legal_heirs": [heir.to_dict() for heir in outcome.result]},
    }


@router.post("/tax-amount")
async def calculate_tax_amount(
    request: TaxAmountRequest,
    calculator: InheritanceTaxCalculator = Depends(get_calculator),
):
    """
    Compute the aggregate inheritance tax under the statutory-share method.

    Includes: heirs, basic deduction, taxable estate, per-heir tax before surcharge.
    """
    outcome = _run(
        "tax_amount",
        calculator.calculate_tax_amount,
        request.taxable_amount,
        request.family_structure.to_domain(),
    )

    if not outcome.success:
        return _validation_failure(outcome.validation)

    return {"success": True, "result": outcome.result.to_dict()}


@router.post("/actual-division")
async def calculate_actual_division(
    request: DivisionRequest,
    calculator: InheritanceTaxCalculator = Depends(get_calculator),
):
    """
    Apportion the aggregate tax over the actual division, applying the
    20% surcharge and the spousal reduction.
    """
    outcome = _run("actual_division", calculator.calculate_actual_division, request.to_domain())

    if not outcome.success:
        return _validation_failure(outcome.validation)

    return {
        "success": True,
        "result": outcome.result.to_dict(),
        "validation_warnings": [issue.to_dict() for issue in outcome.validation.warnings],
    }


@router.get("/tax-table")
async def get_tax_table(calculator: InheritanceTaxCalculator = Depends(get_calculator)):
    """Quick-reference table and deduction constants in effect."""
    return {"success": True, "config": calculator.config.to_dict()}
