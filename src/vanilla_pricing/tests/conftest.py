"""Shared pytest fixtures for vanilla_pricing tests."""

import pytest

from vanilla_pricing.enums import ExerciseType, OptionType
from vanilla_pricing.rates import YieldCurve
from vanilla_pricing.valuation import Option, PricingConfiguration

from vanilla_pricing.tests.helpers import flat_curve, make_option


# ---------------------------------------------------------------------------
# Scalar constants
# ---------------------------------------------------------------------------

SPOT = 100.0
STRIKE = 100.0
RATE = 0.05
VOL = 0.20
MATURITY = 1.0

BSM_CALL_ATM = 10.4506
BSM_PUT_ATM = 5.5735


@pytest.fixture()
def config() -> PricingConfiguration:
    """Flat 5% rate, one year, no calculation date, no curve."""
    return PricingConfiguration(maturity=MATURITY, risk_free_rate=RATE)


@pytest.fixture()
def curve() -> YieldCurve:
    return flat_curve(RATE)


@pytest.fixture()
def curve_config(curve: YieldCurve) -> PricingConfiguration:
    return PricingConfiguration(maturity=MATURITY, risk_free_rate=RATE, yield_curve=curve)


# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------


@pytest.fixture()
def euro_call() -> Option:
    return make_option(OptionType.CALL, ExerciseType.EUROPEAN)


@pytest.fixture()
def euro_put() -> Option:
    return make_option(OptionType.PUT, ExerciseType.EUROPEAN)


@pytest.fixture()
def american_call() -> Option:
    return make_option(OptionType.CALL, ExerciseType.AMERICAN)


@pytest.fixture()
def american_put() -> Option:
    return make_option(OptionType.PUT, ExerciseType.AMERICAN)
