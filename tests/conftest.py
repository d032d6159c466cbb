"""
Pytest configuration and shared fixtures.
"""

import pytest
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from redcf.calculations.models import DCFInput


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow")
    config.addinivalue_line("markers", "integration: marks integration tests")


# Leveraged 10-year hold of a 50M yen building, camelCase as stored in datasets
EXAMPLE_INPUTS = {
    "p0": 50_000_000,
    "i0": 1_500_000,
    "rentMonthly0": 180_000,
    "monthlyOpex0": 30_000,
    "vacancy": 0.05,
    "inflation": 0.02,
    "rentDecay": 0.01,
    "priceDecay": 0.005,
    "taxAnnualFixed": 120_000,
    "exitCostRate": 0.03,
    "years": 10,
    "discountAsset": 0.02,
    "discountEquity": 0.05,
    "loanAmount": 35_000_000,
    "loanRate": 0.025,
    "loanTerm": 35,
    "prepayPenaltyRate": 0,
}


@pytest.fixture
def example_inputs():
    """Raw camelCase input mapping."""
    return dict(EXAMPLE_INPUTS)


@pytest.fixture
def example_input():
    """Example input as a DCFInput."""
    return DCFInput.from_dict(EXAMPLE_INPUTS)
