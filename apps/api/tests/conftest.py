"""
Pytest configuration and fixtures

The health metrics engine is pure: no database, no network. Fixtures build
deterministic HealthRecord histories.
"""
import pytest
import sys
import os
from datetime import date

# Add the parent directory to the path so we can import from services
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fixtures.health_record_fixtures import make_steady_history, make_record


@pytest.fixture
def steady_history():
    """28 identical days: HRV 50, RHR 60, 7.5h sleep, 9000 steps, 30 min exercise."""
    return make_steady_history(days=28)


@pytest.fixture
def steady_today():
    return make_record(date(2026, 3, 28))


@pytest.fixture
def empty_history():
    return []
