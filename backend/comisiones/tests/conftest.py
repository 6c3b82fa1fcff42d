"""
Fixtures partagees par les tests du moteur de commissions.
"""
import pytest

from comisiones.core.thresholds import DEFAULT_THRESHOLDS
from comisiones.schemas import CommissionThreshold


@pytest.fixture
def thresholds():
    """Bareme standard: 90 / 95 / 100 / 110 %."""
    return [CommissionThreshold(**t) for t in DEFAULT_THRESHOLDS]
