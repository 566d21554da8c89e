"""
Root conftest.py - Global fixtures and configuration for all test layers.

Test Layers:
    - component/  : Component tests (service and API, in-memory repository)
    - unit/       : Unit tests (pure functions, no I/O)
"""
import os
import sys
from typing import Any, Dict, List

import pytest

# Set testing environment BEFORE any service imports
os.environ.setdefault("ENV", "testing")
os.environ.setdefault("LOG_LEVEL", "WARNING")

# Add project root to path
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)

# Import shared fixtures from tests/fixtures
from tests.fixtures import (
    make_client_id,
    make_email,
    make_line_item,
    make_sample_items,
    make_invoice_create_request,
    make_client_create_request,
)


def pytest_configure(config):
    """Configure custom markers"""
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
    config.addinivalue_line("markers", "component: marks tests as component tests")


# =============================================================================
# Sample Data Fixtures
# =============================================================================

@pytest.fixture
def sample_items() -> List[Dict[str, Any]]:
    """2 x 100 plus 1 x 50"""
    return make_sample_items()


@pytest.fixture
def area_item() -> Dict[str, Any]:
    """Area-billed item with its own GST rate: 3 sq/m x 200 at 18%"""
    return make_line_item(description="Epoxy flooring", quantity=1, area=3, rate=200, tax_rate=18)


@pytest.fixture
def sample_invoice_request() -> Dict[str, Any]:
    """Invoice-level 18% tax over the sample items"""
    return make_invoice_create_request()


@pytest.fixture
def sample_client_request() -> Dict[str, Any]:
    """Client create request"""
    return make_client_create_request()


# =============================================================================
# Assertion Helpers
# =============================================================================

class AssertionHelpers:
    """Custom assertion helpers for tests"""

    @staticmethod
    def assert_http_success(response, expected_status: int = 200):
        """Assert HTTP response is successful"""
        assert response.status_code == expected_status, \
            f"Expected {expected_status}, got {response.status_code}: {response.text}"

    @staticmethod
    def assert_has_fields(data: Dict, fields: List[str]):
        """Assert dict has required fields"""
        missing = [f for f in fields if f not in data]
        assert not missing, f"Missing fields: {missing}"


@pytest.fixture
def assertions() -> AssertionHelpers:
    """Provide assertion helpers"""
    return AssertionHelpers()
