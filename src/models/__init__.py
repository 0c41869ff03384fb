from .inheritance import (
    DivisionDetail,
    DivisionInput,
    DivisionMode,
    DivisionResult,
    FamilyStructure,
    Heir,
    HeirTaxDetail,
    HeirType,
    RelationshipType,
    RoundingMethod,
    TaxCalculationResult,
)

__all__ = [
    'DivisionDetail',
    'DivisionInput',
    'DivisionMode',
    'DivisionResult',
    'FamilyStructure',
    'Heir',
    'HeirTaxDetail',
    'HeirType',
    'RelationshipType',
    'RoundingMethod',
    'TaxCalculationResult',
]
