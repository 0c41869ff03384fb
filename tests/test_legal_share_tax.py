"""Tests for the aggregate tax under the statutory-share method."""

from calculator.engine import InheritanceTaxEngine
from calculator.heir_determination import determine_legal_heirs
from calculator.inheritance_tax_config import InheritanceTaxConfig
from models.inheritance import FamilyStructure


def _calculate(taxable_amount, config=None, **family):
    heirs = determine_legal_heirs(FamilyStructure(**family))
    return InheritanceTaxEngine(config).calculate_tax_by_legal_share(taxable_amount, heirs)


class TestSpouseAndTwoChildren:
    """100,000,000 yen estate, spouse plus two children."""

    def test_totals(self):
        result = _calculate(100_000_000, spouse_exists=True, children_count=2)

        assert result.basic_deduction == 48_000_000
        assert result.taxable_estate == 52_000_000
        assert result.total_tax_amount == 6_300_000
        assert result.total_heirs_count == 3
        assert result.deduction_heirs_count == 3

    def test_per_heir_breakdown(self):
        result = _calculate(100_000_000, spouse_exists=True, children_count=2)
        spouse, child_1, child_2 = result.heir_tax_details

        assert spouse.taxable_share_amount == 26_000_000
        assert spouse.tax_before_addition == 3_400_000
        assert spouse.legal_share_fraction == "1/2"
        assert spouse.legal_share_amount == 50_000_000
        assert child_1.taxable_share_amount == 13_000_000
        assert child_1.tax_before_addition == 1_450_000
        assert child_2.tax_before_addition == 1_450_000
        assert child_1.legal_share_fraction == "1/4"


class TestBelowDeduction:

    def test_no_tax_when_estate_within_deduction(self):
        result = _calculate(48_000_000, spouse_exists=True, children_count=2)

        assert result.taxable_estate == 0
        assert result.total_tax_amount == 0
        assert all(d.tax_before_addition == 0 for d in result.heir_tax_details)

    def test_zero_estate(self):
        result = _calculate(0, spouse_exists=True)
        assert result.total_tax_amount == 0
        assert result.taxable_estate == 0


class TestNonHeirs:

    def test_non_heirs_carried_but_not_taxed_here(self):
        result = _calculate(100_000_000, spouse_exists=True, children_count=2, non_heirs_count=1)

        assert len(result.legal_heirs) == 4
        assert len(result.heir_tax_details) == 3
        assert result.total_heirs_count == 3
        assert result.total_tax_amount == 6_300_000


class TestSurchargeNotAppliedHere:

    def test_spouse_and_sibling(self):
        # 58,000,000 estate: spouse 43,500,000 -> 6,700,000; sibling 14,500,000 -> 1,675,000
        result = _calculate(100_000_000, spouse_exists=True, siblings_count=1)

        assert result.basic_deduction == 42_000_000
        assert [d.tax_before_addition for d in result.heir_tax_details] == [6_700_000, 1_675_000]
        assert result.total_tax_amount == 8_375_000
        assert result.heir_tax_details[1].two_fold_addition is True


class TestHeirTaxableFlooring:
    """Three children: 52,000,000 / 3 is not a whole yen amount."""

    def test_exact_shares_by_default(self):
        result = _calculate(100_000_000, children_count=3)

        assert [d.tax_before_addition for d in result.heir_tax_details] == [2_100_000] * 3
        assert result.total_tax_amount == 6_300_000
        assert result.heir_tax_details[0].taxable_share_amount == 17_333_333

    def test_floored_shares_when_configured(self):
        config = InheritanceTaxConfig.for_2015().with_overrides(floor_heir_taxable_amount=True)
        result = _calculate(100_000_000, config=config, children_count=3)

        assert [d.tax_before_addition for d in result.heir_tax_details] == [2_099_999] * 3
        assert result.total_tax_amount == 6_299_997


class TestSerialization:

    def test_to_dict(self):
        data = _calculate(100_000_000, spouse_exists=True, children_count=2).to_dict()

        assert data["total_tax_amount"] == 6_300_000
        assert data["heir_tax_details"][0]["relationship"] == "spouse"
        assert data["legal_heirs"][0]["inheritance_share_fraction"] == "1/2"
