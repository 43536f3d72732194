"""Flat, scalar-argument entry points for callers outside Python's exception model.

Failures never propagate from these functions: ``price_option`` returns ``-1.0``
and ``compute_option_greeks`` returns NaN Greeks when any library error occurs.
Use :func:`vanilla_pricing.valuation.create_pricer` directly to get exceptions.
"""

from __future__ import annotations

import datetime as dt
import logging
import math
import numbers
from pathlib import Path

from .enums import ExerciseType, OptionType, PricingMethod
from .exceptions import ConfigurationError, ValidationError, VanillaPricingError
from .rates import YieldCurve
from .valuation.core import Greeks, Option, OptionPricer
from .valuation.factory import create_pricer
from .valuation.params import PricingConfiguration

logger = logging.getLogger(__name__)

__all__ = [
    "PRICE_ERROR",
    "price_option",
    "compute_option_greeks",
]

PRICE_ERROR = -1.0

_OPTION_TYPE_CODES = {0: OptionType.CALL, 1: OptionType.PUT}
_EXERCISE_TYPE_CODES = {0: ExerciseType.EUROPEAN, 1: ExerciseType.AMERICAN}

# Discretisation keywords accepted on top of the market inputs.
_DISCRETIZATION_FIELDS = frozenset(
    {
        "lattice_steps",
        "pde_time_steps",
        "pde_spot_steps",
        "pde_price_ceiling",
        "mc_paths",
        "mc_steps_per_path",
        "random_seed",
    }
)


def _decode(name: str, code: int, table: dict) -> object:
    # bool is an int subclass; floats are rejected even when integral
    if isinstance(code, bool) or not isinstance(code, numbers.Integral) or code not in table:
        raise ValidationError(f"{name} code must be one of {sorted(table)}, got {code!r}")
    return table[int(code)]


def _build(
    method: PricingMethod | str,
    underlying: float,
    strike: float,
    maturity: float,
    rate: float,
    volatility: float,
    dividend: float,
    option_type: int,
    option_style: int,
    calculation_date: str | dt.date | None,
    yield_curve_path: str | Path | None,
    discretization: dict[str, object],
) -> tuple[OptionPricer, Option]:
    unknown = set(discretization) - _DISCRETIZATION_FIELDS
    if unknown:
        raise ConfigurationError(f"Unknown discretization parameters: {sorted(unknown)}")

    if calculation_date is None or calculation_date == "":
        calculation_date = dt.date.today()
    curve = YieldCurve.load_from_file(yield_curve_path) if yield_curve_path else YieldCurve()

    config = PricingConfiguration(
        calculation_date=calculation_date,
        maturity=maturity,
        risk_free_rate=rate,
        yield_curve=curve,
        **discretization,
    )
    option = Option(
        underlying=underlying,
        strike=strike,
        volatility=volatility,
        dividend=dividend,
        option_type=_decode("option_type", option_type, _OPTION_TYPE_CODES),
        exercise_type=_decode("option_style", option_style, _EXERCISE_TYPE_CODES),
    )
    return create_pricer(method, config), option


def price_option(
    method: PricingMethod | str,
    underlying: float,
    strike: float,
    maturity: float,
    rate: float,
    volatility: float,
    dividend: float,
    option_type: int,
    option_style: int,
    calculation_date: str | dt.date | None = None,
    yield_curve_path: str | Path | None = None,
    **discretization: object,
) -> float:
    """Price a vanilla option from scalar inputs.

    Parameters
    ==========
    method: PricingMethod or str
        "analytic", "lattice", "finite_difference" or "simulation"
    option_type: int
        0 = call, 1 = put
    option_style: int
        0 = European, 1 = American
    calculation_date: str, optional
        ISO date; None or "" means today
    yield_curve_path: str, optional
        whitespace-separated (maturity, rate) file loaded into the configuration
    **discretization
        lattice_steps, pde_time_steps, pde_spot_steps, pde_price_ceiling,
        mc_paths, mc_steps_per_path, random_seed

    Returns
    =======
    float
        option price, or -1.0 if pricing failed
    """
    try:
        pricer, option = _build(
            method,
            underlying,
            strike,
            maturity,
            rate,
            volatility,
            dividend,
            option_type,
            option_style,
            calculation_date,
            yield_curve_path,
            discretization,
        )
        return pricer.price(option)
    except VanillaPricingError as exc:
        logger.warning("price_option(%s) failed: %s: %s", method, type(exc).__name__, exc)
        return PRICE_ERROR


def compute_option_greeks(
    method: PricingMethod | str,
    underlying: float,
    strike: float,
    maturity: float,
    rate: float,
    volatility: float,
    dividend: float,
    option_type: int,
    option_style: int,
    calculation_date: str | dt.date | None = None,
    yield_curve_path: str | Path | None = None,
    **discretization: object,
) -> Greeks:
    """Greeks of a vanilla option from scalar inputs; every field is NaN on failure.

    Arguments are the same as :func:`price_option`.
    """
    try:
        pricer, option = _build(
            method,
            underlying,
            strike,
            maturity,
            rate,
            volatility,
            dividend,
            option_type,
            option_style,
            calculation_date,
            yield_curve_path,
            discretization,
        )
        return pricer.compute_greeks(option)
    except VanillaPricingError as exc:
        logger.warning(
            "compute_option_greeks(%s) failed: %s: %s", method, type(exc).__name__, exc
        )
        return Greeks(*(math.nan,) * len(Greeks._fields))
