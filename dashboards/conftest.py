"""
Fixtures for analytics tests.
"""
import pytest
from datetime import datetime
from django.utils import timezone


@pytest.fixture
def aware():
    """Build an aware datetime in the configured time zone."""
    def _aware(year, month, day, hour=12, minute=0):
        return timezone.make_aware(datetime(year, month, day, hour, minute))
    return _aware
