"""Pytest configuration and fixtures for test suite."""

import os
import sys
from pathlib import Path

import pytest

# Set test environment BEFORE any other imports
os.environ.setdefault("APP_ENVIRONMENT", "test")

# Add src to path for imports
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from fastapi.testclient import TestClient

from calculator.inheritance_tax_config import InheritanceTaxConfig
from calculator.tax_calculator import InheritanceTaxCalculator
from calculator.heir_determination import determine_legal_heirs
from models.inheritance import FamilyStructure
from web.app import app
from web.routers.health import reset_metrics


@pytest.fixture(autouse=True)
def reset_calculation_metrics():
    """Reset health metrics before and after each test."""
    reset_metrics()
    yield
    reset_metrics()


# =============================================================================
# CONFIG / CALCULATOR
# =============================================================================

@pytest.fixture
def tax_config():
    return InheritanceTaxConfig.for_2015()


@pytest.fixture
def calculator(tax_config):
    return InheritanceTaxCalculator(config=tax_config)


# =============================================================================
# FAMILY STRUCTURES
# =============================================================================

@pytest.fixture
def spouse_and_two_children():
    """Spouse plus two biological children."""
    return FamilyStructure(spouse_exists=True, children_count=2)


@pytest.fixture
def spouse_and_sibling():
    return FamilyStructure(spouse_exists=True, siblings_count=1)


@pytest.fixture
def spouse_and_parents():
    return FamilyStructure(spouse_exists=True, parents_alive=2)


@pytest.fixture
def spouse_two_children_heirs(spouse_and_two_children):
    return determine_legal_heirs(spouse_and_two_children)


# =============================================================================
# HTTP
# =============================================================================

@pytest.fixture
def client():
    """TestClient against the application; dependency overrides are cleared afterwards."""
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
