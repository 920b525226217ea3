"""Django app configuration for django-rental-pricing."""

from django.apps import AppConfig


class DjangoRentalPricingConfig(AppConfig):
    """App configuration for django-rental-pricing."""

    name = 'django_rental_pricing'
    verbose_name = 'Django Rental Pricing'
    default_auto_field = 'django.db.models.BigAutoField'
