"""Bump-and-revalue Greeks shared by the lattice, finite-difference and simulation engines."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..exceptions import ValidationError
from .core import Greeks, Option

if TYPE_CHECKING:
    from .core import OptionPricer

logger = logging.getLogger(__name__)

SPOT_BUMP_RATIO = 0.01
VOL_BUMP = 0.01
RATE_BUMP = 0.001
THETA_BUMP = 1.0 / 365.0


def numerical_greeks(pricer: OptionPricer, option: Option) -> Greeks:
    """Compute all Greeks by finite differences of ``pricer.price``.

    Bumps
    =====
    delta, gamma:
        spot +/- 1% (central and three-point differences)
    vega:
        volatility +/- 0.01, result per unit volatility
    theta:
        maturity shortened by one day, result per year (negative for a long
        vanilla option under normal conditions)
    rho:
        rate +/- 0.001, result per unit rate. A loaded yield curve is shifted in
        parallel; otherwise the flat rate is bumped.

    Every bumped scenario is an independent copy of the option/configuration;
    neither input is modified.
    """
    config = pricer.config
    spot = option.underlying
    h = SPOT_BUMP_RATIO * spot

    if option.volatility < VOL_BUMP:
        raise ValidationError(
            f"volatility {option.volatility} too small for a vega bump of {VOL_BUMP}"
        )
    if config.maturity <= THETA_BUMP:
        raise ValidationError(
            f"maturity {config.maturity} too short for a one-day theta bump"
        )

    value = pricer.price(option)
    value_up = pricer.price(option.replace(underlying=spot + h))
    value_down = pricer.price(option.replace(underlying=spot - h))
    delta = (value_up - value_down) / (2 * h)
    gamma = (value_up - 2 * value + value_down) / (h**2)

    vol_up = pricer.price(option.replace(volatility=option.volatility + VOL_BUMP))
    vol_down = pricer.price(option.replace(volatility=option.volatility - VOL_BUMP))
    vega = (vol_up - vol_down) / (2 * VOL_BUMP)

    shorter = pricer.with_config(config.replace(maturity=config.maturity - THETA_BUMP))
    theta = (shorter.price(option) - value) / THETA_BUMP

    if config.has_yield_curve:
        cfg_up = config.replace(yield_curve=config.yield_curve.shifted(RATE_BUMP))
        cfg_down = config.replace(yield_curve=config.yield_curve.shifted(-RATE_BUMP))
    else:
        cfg_up = config.replace(risk_free_rate=config.risk_free_rate + RATE_BUMP)
        cfg_down = config.replace(risk_free_rate=config.risk_free_rate - RATE_BUMP)
    rate_up = pricer.with_config(cfg_up).price(option)
    rate_down = pricer.with_config(cfg_down).price(option)
    rho = (rate_up - rate_down) / (2 * RATE_BUMP)

    logger.debug(
        "%s bump-and-revalue greeks: delta=%.6f gamma=%.6f vega=%.6f theta=%.6f rho=%.6f",
        type(pricer).__name__,
        delta,
        gamma,
        vega,
        theta,
        rho,
    )
    return Greeks(
        delta=float(delta),
        gamma=float(gamma),
        vega=float(vega),
        theta=float(theta),
        rho=float(rho),
    )
