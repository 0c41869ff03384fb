"""
Inheritance Tax Calculator
Runs the three public operations: heir determination, statutory tax,
and actual-division apportionment. Each operation validates first and
returns validation problems instead of raising.
"""
from dataclasses import dataclass, field
from typing import Generic, List, Optional, TypeVar

from models.inheritance import (
    DivisionInput,
    DivisionResult,
    FamilyStructure,
    Heir,
    TaxCalculationResult,
)
from calculator.inheritance_tax_config import InheritanceTaxConfig
from calculator.heir_determination import HeirDeterminator
from calculator.engine import InheritanceTaxEngine
from calculator.division import DivisionApportioner
from calculator.validation import (
    DivisionInputValidator,
    FamilyStructureValidator,
    ValidationResult,
)
from services.logging_config import CalculationLogger

T = TypeVar("T")


@dataclass
class CalculationOutcome(Generic[T]):
    """Either a result or the validation problems that prevented it."""
    result: Optional[T] = None
    validation: ValidationResult = field(default_factory=ValidationResult)

    @property
    def success(self) -> bool:
        return self.result is not None and self.validation.is_valid


class InheritanceTaxCalculator:
    """Calculate Japanese inheritance tax from family structure to final per-person tax"""

    def __init__(self, config: Optional[InheritanceTaxConfig] = None):
        """
        Initialize the calculator.

        Args:
            config: Statutory constants. Defaults to the table in force since 2015.
        """
        self._config = config or InheritanceTaxConfig.for_2015()
        self._determinator = HeirDeterminator()
        self._engine = InheritanceTaxEngine(config=self._config)
        self._apportioner = DivisionApportioner(config=self._config)
        self._family_validator = FamilyStructureValidator()
        self._division_validator = DivisionInputValidator()

    @property
    def config(self) -> InheritanceTaxConfig:
        return self._config

    def determine_heirs(self, structure: FamilyStructure) -> CalculationOutcome[List[Heir]]:
        """
        Determine statutory heirs and their shares.

        Fails validation when the structure is inconsistent or names no
        statutory heir.
        """
        calc_log = CalculationLogger("heirs")
        calc_log.start_calculation(**structure.to_dict())

        validation = self._family_validator.validate(structure)
        if not validation.is_valid:
            calc_log.log_validation_failure(validation.errors)
            return CalculationOutcome(validation=validation)

        heirs = self._determinator.determine(structure)
        statutory_count = sum(1 for heir in heirs if heir.is_statutory)
        calc_log.log_heirs(statutory_count, len(heirs) - statutory_count)
        calc_log.log_result(heir_count=len(heirs))
        return CalculationOutcome(result=heirs, validation=validation)

    def calculate_tax_amount(
        self,
        taxable_amount: int,
        structure: FamilyStructure,
    ) -> CalculationOutcome[TaxCalculationResult]:
        """
        Compute the aggregate tax under the statutory-share method.

        Args:
            taxable_amount: Total taxable price of the estate in yen
            structure: Family composition of the decedent
        """
        calc_log = CalculationLogger("tax_amount")
        calc_log.start_calculation(taxable_amount=taxable_amount, **structure.to_dict())

        validation = self._family_validator.validate(structure)
        if taxable_amount < 0:
            validation.add("taxable_amount", "INVALID_VALUE", "Taxable amount must be 0 or greater.")
        if not validation.is_valid:
            calc_log.log_validation_failure(validation.errors)
            return CalculationOutcome(validation=validation)

        step_start = calc_log.log_step("determine_heirs")
        heirs = self._determinator.determine(structure)
        calc_log.complete_step("determine_heirs", step_start, heir_count=len(heirs))

        step_start = calc_log.log_step("legal_share_tax")
        result = self._engine.calculate_tax_by_legal_share(int(taxable_amount), heirs)
        calc_log.complete_step("legal_share_tax", step_start, total_tax_amount=result.total_tax_amount)

        calc_log.log_deduction(result.deduction_heirs_count, result.basic_deduction, result.taxable_estate)
        calc_log.log_result(total_tax_amount=result.total_tax_amount)
        return CalculationOutcome(result=result, validation=validation)

    def calculate_actual_division(self, division_input: DivisionInput) -> CalculationOutcome[DivisionResult]:
        """
        Re-apportion the aggregate tax over an actual division of the estate,
        applying the 20% surcharge and the spousal reduction.
        """
        calc_log = CalculationLogger("actual_division")
        mode = getattr(division_input.mode, "value", division_input.mode)
        calc_log.start_calculation(
            mode=mode,
            total_amount=division_input.total_amount,
            total_tax_amount=division_input.total_tax_amount,
            heir_count=len(division_input.heirs),
        )

        validation = self._division_validator.validate(division_input)
        if not validation.is_valid:
            calc_log.log_validation_failure(validation.errors)
            return CalculationOutcome(validation=validation)

        result = self._apportioner.calculate_actual_division(division_input)
        calc_log.log_result(
            total_final_tax_amount=result.total_final_tax_amount,
            people=len(result.division_details),
        )
        return CalculationOutcome(result=result, validation=validation)

    def tax_from_table(self, amount) -> int:
        """Tax on a single notional share, straight from the quick-reference table."""
        return self._engine.tax_from_table(amount)
