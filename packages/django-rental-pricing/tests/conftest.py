"""Pytest configuration for django-rental-pricing tests."""
from datetime import date
from decimal import Decimal

import django
import pytest
from django.conf import settings


def pytest_configure():
    """Configure Django settings for pytest."""
    if not settings.configured:
        settings.configure(
            DEBUG=True,
            SECRET_KEY="test-secret-key-for-rental-pricing",
            DATABASES={
                'default': {
                    'ENGINE': 'django.db.backends.sqlite3',
                    'NAME': ':memory:',
                }
            },
            INSTALLED_APPS=[
                'django.contrib.contenttypes',
                'django.contrib.auth',
                'django_rental_pricing',
            ],
            DEFAULT_AUTO_FIELD='django.db.models.BigAutoField',
            USE_TZ=True,
            TIME_ZONE='UTC',
        )
    django.setup()


@pytest.fixture
def schedule():
    """Excavator listing: 450/day, 2800/week, 10000/month, 2000 deposit."""
    from django_rental_pricing.value_objects import RateSchedule

    return RateSchedule(
        daily_rate=Decimal("450"),
        weekly_rate=Decimal("2800"),
        monthly_rate=Decimal("10000"),
        deposit_amount=Decimal("2000"),
        min_rental_days=1,
        max_rental_days=60,
    )


@pytest.fixture
def today():
    """A fixed Monday."""
    return date(2026, 10, 19)
