"""
Tests for application settings and the statutory constants they select.
"""

import pytest
from pydantic import ValidationError

from calculator.inheritance_tax_config import InheritanceTaxConfig, SpousalReductionMethod
from config.settings import Settings, get_settings


class TestSettingsDefaults:
    """Test default settings values."""

    def test_defaults(self):
        settings = Settings()

        assert settings.name == "Inheritance Tax Calculator"
        assert settings.api_port == 8000
        assert settings.spousal_reduction_method == SpousalReductionMethod.STATUTORY_SHARE_CAP
        assert settings.floor_heir_taxable_amount is False

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()


class TestSettingsValidation:

    def test_log_level_normalized(self):
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_unknown_log_level_rejected(self):
        with pytest.raises(ValidationError):
            Settings(log_level="chatty")

    def test_unknown_reduction_method_rejected(self):
        with pytest.raises(ValidationError):
            Settings(spousal_reduction_method="whatever")

    def test_is_production(self):
        assert Settings(environment="production").is_production
        assert not Settings(environment="test").is_production


class TestEnvironmentOverrides:

    def test_prefixed_environment_variables(self, monkeypatch):
        monkeypatch.setenv("APP_SPOUSAL_REDUCTION_METHOD", "statutory_formula")
        monkeypatch.setenv("APP_FLOOR_HEIR_TAXABLE_AMOUNT", "true")
        monkeypatch.setenv("APP_API_PORT", "9000")

        settings = Settings()

        assert settings.spousal_reduction_method == SpousalReductionMethod.STATUTORY_FORMULA
        assert settings.floor_heir_taxable_amount is True
        assert settings.api_port == 9000


class TestTaxConfig:
    """Test the InheritanceTaxConfig built from settings."""

    def test_tax_config_applies_policy_switches(self):
        config = Settings(
            spousal_reduction_method="statutory_formula",
            floor_heir_taxable_amount=True,
        ).tax_config()

        assert config.spousal_reduction_method == SpousalReductionMethod.STATUTORY_FORMULA
        assert config.floor_heir_taxable_amount is True
        assert config.tax_table == InheritanceTaxConfig.for_2015().tax_table

    def test_for_2015_constants(self):
        config = InheritanceTaxConfig.for_2015()

        assert config.basic_deduction_base == 30_000_000
        assert config.basic_deduction_per_heir == 6_000_000
        assert config.spousal_reduction_floor == 160_000_000
        assert len(config.tax_table) == 8

    def test_with_overrides_returns_copy(self):
        base = InheritanceTaxConfig.for_2015()
        changed = base.with_overrides(spousal_reduction_method="statutory_formula")

        assert changed.spousal_reduction_method == SpousalReductionMethod.STATUTORY_FORMULA
        assert base.spousal_reduction_method == SpousalReductionMethod.STATUTORY_SHARE_CAP

    def test_to_dict(self):
        data = InheritanceTaxConfig.for_2015().to_dict()

        assert data["tax_table"][0] == {"max_amount": 10_000_000, "rate": 0.1, "deduction": 0}
        assert data["tax_table"][-1]["max_amount"] is None
        assert data["spousal_reduction_method"] == "statutory_share_cap"
