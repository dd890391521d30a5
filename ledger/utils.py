from django.conf import settings


def engine_setting(name, default=None):
    """Read one key of the ``TAX_ENGINE`` settings block."""
    return getattr(settings, 'TAX_ENGINE', {}).get(name, default)


def coerce_legacy_tax_years():
    return bool(engine_setting('COERCE_LEGACY_TAX_YEARS', False))
