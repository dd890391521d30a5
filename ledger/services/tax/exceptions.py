"""
Typed failures raised by the tax engine.

Validation errors mean the caller supplied something the statute cannot
accept (negative money, pre-2026 year, unknown category). Configuration
errors mean the rate tables themselves are missing or broken. Neither is
ever recovered inside the engine: guessing a statutory value is worse
than failing.
"""


class TaxEngineError(Exception):
    """Base class for every error raised by the tax engine."""

    def __init__(self, message, field=None):
        super().__init__(message)
        self.message = message
        self.field = field

    def as_dict(self):
        return {'error': self.message, 'field': self.field}


# =========================
# VALIDATION ERRORS
# =========================
class TaxValidationError(TaxEngineError):
    pass


class InvalidAmount(TaxValidationError):
    pass


class InvalidIncome(TaxValidationError):
    pass


class UnsupportedTaxYear(TaxValidationError):
    pass


class UnknownServiceCategory(TaxValidationError):
    pass


class UnknownTaxpayerClass(TaxValidationError):
    pass


class InvalidPeriod(TaxValidationError):
    pass


# =========================
# CONFIGURATION ERRORS
# =========================
class TaxConfigurationError(TaxEngineError):
    pass


class MalformedRateTable(TaxConfigurationError):
    pass


class RateTableNotFound(TaxConfigurationError, UnsupportedTaxYear):
    """
    The year is inside the supported range but no table has been published.

    Also an ``UnsupportedTaxYear`` so callers of ``load_rates`` can treat
    both cases alike, while error handlers can still report it as a
    configuration problem.
    """
