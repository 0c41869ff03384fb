from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Mapping, Optional

from models.inheritance import (
    DivisionInput,
    DivisionMode,
    FamilyStructure,
    Heir,
    RoundingMethod,
)
from calculator.decimal_math import to_decimal, yen

PERCENTAGE_TOLERANCE = Decimal("0.01")


@dataclass
class ValidationIssue:
    field: str
    code: str
    message: str
    severity: str = "error"  # "error" | "warning"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "field": self.field,
            "code": self.code,
            "message": self.message,
            "severity": self.severity,
        }


@dataclass
class ValidationResult:
    issues: List[ValidationIssue] = field(default_factory=list)

    @property
    def errors(self) -> List[ValidationIssue]:
        return [issue for issue in self.issues if issue.severity == "error"]

    @property
    def warnings(self) -> List[ValidationIssue]:
        return [issue for issue in self.issues if issue.severity == "warning"]

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def codes(self) -> List[str]:
        return [issue.code for issue in self.issues]

    def add(self, field_name: str, code: str, message: str, severity: str = "error") -> None:
        self.issues.append(ValidationIssue(field_name, code, message, severity))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "errors": [issue.to_dict() for issue in self.errors],
            "warnings": [issue.to_dict() for issue in self.warnings],
        }


_COUNT_FIELDS = {
    "children_count": "Number of children",
    "adopted_children_count": "Number of adopted children",
    "grandchild_adopted_count": "Number of adopted grandchildren",
    "parents_alive": "Number of living parents",
    "siblings_count": "Number of siblings",
    "half_siblings_count": "Number of half-blood siblings",
    "non_heirs_count": "Number of non-heir recipients",
}


class FamilyStructureValidator:
    def validate(self, structure: FamilyStructure) -> ValidationResult:
        result = ValidationResult()

        for name, label in _COUNT_FIELDS.items():
            if getattr(structure, name) < 0:
                result.add(name, "INVALID_VALUE", f"{label} must be 0 or greater.")

        if structure.parents_alive > 2:
            result.add("parents_alive", "INVALID_VALUE", "Number of living parents cannot exceed 2.")

        if structure.adopted_children_count > structure.children_count:
            result.add(
                "adopted_children_count",
                "ADOPTED_EXCEEDS_CHILDREN",
                "Adopted children cannot exceed the total number of children.",
            )

        if structure.grandchild_adopted_count > structure.adopted_children_count:
            result.add(
                "grandchild_adopted_count",
                "GRANDCHILD_ADOPTED_EXCEEDS_ADOPTED",
                "Adopted grandchildren cannot exceed the number of adopted children.",
            )

        if structure.statutory_heir_count == 0:
            result.add("general", "NO_HEIRS", "No statutory heir exists.")

        return result


class DivisionInputValidator:
    def validate(self, division_input: DivisionInput) -> ValidationResult:
        result = ValidationResult()

        if division_input.total_amount < 0:
            result.add("total_amount", "INVALID_VALUE", "Total amount must be 0 or greater.")
        if division_input.total_tax_amount < 0:
            result.add("total_tax_amount", "INVALID_VALUE", "Total tax amount must be 0 or greater.")

        try:
            mode = DivisionMode(division_input.mode)
        except ValueError:
            result.add("mode", "INVALID_MODE", f"Unknown division mode: {division_input.mode!r}.")
            return result

        if mode == DivisionMode.AMOUNT:
            self._validate_amounts(division_input, result)
        else:
            self._validate_percentages(division_input, result)

        return result

    def _validate_amounts(self, division_input: DivisionInput, result: ValidationResult) -> None:
        amounts = division_input.amounts
        if amounts is None:
            result.add("amounts", "MISSING", "Enter the amount acquired by each person.")
            return

        values = self._check_entries("amounts", "amount", amounts, division_input.heirs, result)
        if values is None:
            return

        for heir_id, value in values.items():
            if value < 0:
                result.add(f"amounts.{heir_id}", "INVALID_VALUE", f"Amount for {heir_id} must be 0 or greater.")

        total = sum(values.values(), Decimal("0"))
        if yen(total) != division_input.total_amount:
            result.add(
                "amounts",
                "INVALID_SUM",
                f"Sum of acquired amounts ({total}) does not match the total amount "
                f"({division_input.total_amount}).",
            )

    def _validate_percentages(self, division_input: DivisionInput, result: ValidationResult) -> None:
        try:
            RoundingMethod(division_input.rounding_method)
        except ValueError:
            result.add(
                "rounding_method",
                "INVALID_ROUNDING_METHOD",
                f"Unknown rounding method: {division_input.rounding_method!r}.",
            )

        percentages = division_input.percentages
        if percentages is None:
            result.add("percentages", "MISSING", "Enter the percentage acquired by each person.")
            return

        values = self._check_entries("percentages", "percentage", percentages, division_input.heirs, result)
        if values is None:
            return

        for heir_id, value in values.items():
            if value < 0 or value > 100:
                result.add(
                    f"percentages.{heir_id}",
                    "INVALID_VALUE",
                    f"Percentage for {heir_id} must be between 0 and 100.",
                )

        total = sum(values.values(), Decimal("0"))
        if abs(total - 100) > PERCENTAGE_TOLERANCE:
            result.add("percentages", "INVALID_SUM", f"Percentages add up to {total}%, not 100%.")

    @staticmethod
    def _check_entries(
        field_name: str,
        noun: str,
        entries: Mapping[str, Any],
        heirs: List[Heir],
        result: ValidationResult,
    ) -> Optional[Dict[str, Decimal]]:
        """
        Report missing, unknown and non-numeric entries.

        Returns the entries as Decimals, or None if any is not a number.
        """
        known_ids = {heir.id for heir in heirs}

        for heir in heirs:
            if heir.is_statutory and heir.id not in entries:
                result.add(field_name, "MISSING_HEIR", f"No {noun} entered for {heir.name}.")

        for heir_id in entries:
            if heir_id not in known_ids:
                result.add(
                    f"{field_name}.{heir_id}",
                    "UNKNOWN_HEIR",
                    f"{heir_id} is not in the heir list and will be ignored.",
                    severity="warning",
                )

        values: Dict[str, Decimal] = {}
        for heir_id, raw in entries.items():
            try:
                value = to_decimal(raw)
                if not value.is_finite():
                    raise ValueError(raw)
                values[heir_id] = value
            except (InvalidOperation, TypeError, ValueError):
                result.add(f"{field_name}.{heir_id}", "INVALID_VALUE", f"{noun.capitalize()} for {heir_id} is not a number.")
        if len(values) != len(entries):
            return None
        return values


def validate_family_structure(structure: FamilyStructure) -> ValidationResult:
    return FamilyStructureValidator().validate(structure)


def validate_division_input(division_input: DivisionInput) -> ValidationResult:
    return DivisionInputValidator().validate(division_input)
