from .tax_calculator import InheritanceTaxCalculator, CalculationOutcome
from .engine import InheritanceTaxEngine
from .heir_determination import HeirDeterminator, determine_legal_heirs
from .division import DivisionApportioner, calculate_actual_division, convert_percentage_to_amount
from .inheritance_tax_config import InheritanceTaxConfig, SpousalReductionMethod, TaxTableRow
from .validation import (
    DivisionInputValidator,
    FamilyStructureValidator,
    ValidationIssue,
    ValidationResult,
    validate_division_input,
    validate_family_structure,
)

__all__ = [
    "InheritanceTaxCalculator",
    "CalculationOutcome",
    "InheritanceTaxEngine",
    "HeirDeterminator",
    "determine_legal_heirs",
    "DivisionApportioner",
    "calculate_actual_division",
    "convert_percentage_to_amount",
    "InheritanceTaxConfig",
    "SpousalReductionMethod",
    "TaxTableRow",
    "DivisionInputValidator",
    "FamilyStructureValidator",
    "ValidationIssue",
    "ValidationResult",
    "validate_division_input",
    "validate_family_structure",
]
