"""Custom exception hierarchy for the vanilla_pricing library.

All library-specific exceptions inherit from :class:`VanillaPricingError`,
enabling callers to catch *any* library error with a single ``except`` clause::

    try:
        pricer = create_pricer(PricingMethod.LATTICE, config)
        pv = pricer.price(option)
    except VanillaPricingError as exc:
        log.error("Library error: %s", exc)
"""

from __future__ import annotations


class VanillaPricingError(Exception):
    """Base exception for all library errors."""


# ── Input validation ────────────────────────────────────────────────


class ValidationError(VanillaPricingError):
    """Invalid input values (out-of-range, non-finite, malformed dates, etc.)."""


class TemporalConfigurationError(ValidationError):
    """Calculation date / maturity combination leaves no time to maturity."""


class ConfigurationError(VanillaPricingError):
    """Wrong types passed to a public API (e.g. raw int instead of enum)."""


class UnknownPricingMethodError(ConfigurationError):
    """Pricing method tag not recognised by the pricer factory."""


# ── Feature support ─────────────────────────────────────────────────


class UnsupportedFeatureError(VanillaPricingError):
    """Requested model/exercise combination is not supported (e.g. American analytic)."""


# ── External resources ──────────────────────────────────────────────


class ResourceError(VanillaPricingError):
    """Missing or unusable resource: empty yield curve, unreadable or malformed curve file."""


# ── Numerical issues ────────────────────────────────────────────────


class NumericalError(VanillaPricingError):
    """Base for errors arising from numerical computation."""


class ArbitrageViolationError(NumericalError):
    """Model parameters imply an arbitrage (e.g. risk-neutral probability outside [0, 1])."""
