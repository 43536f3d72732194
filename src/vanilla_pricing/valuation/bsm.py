"""Black-Scholes-Merton European option valuation with continuous dividend yield."""

from __future__ import annotations

import logging
from typing import NamedTuple

import numpy as np
from scipy.stats import norm

from ..enums import OptionType, PricingMethod
from ..exceptions import UnsupportedFeatureError, ValidationError
from ..utils import log_timing
from .core import Greeks, Option, OptionPricer

logger = logging.getLogger(__name__)


class _BSMInputs(NamedTuple):
    """Pre-computed inputs shared across price and Greek calculations."""

    spot: float
    strike: float
    volatility: float
    time_to_maturity: float
    rate: float
    dividend: float
    df_r: float
    df_q: float
    d1: float
    d2: float


def _calculate_d_values(
    spot: float,
    strike: float,
    time_to_maturity: float,
    volatility: float,
    df_r: float,
    df_q: float,
) -> tuple[float, float]:
    """Calculate d1 and d2 for the BSM model.

    Parameters
    ----------
    spot
        Current spot price.
    strike
        Strike price.
    time_to_maturity
        Time to maturity in years.
    volatility
        Volatility (annualized).
    df_r
        Risk-free discount factor exp(-rT).
    df_q
        Dividend discount factor exp(-qT).

    Returns
    -------
    tuple[float, float]
        Pair ``(d1, d2)``.
    """
    forward = spot * df_q / df_r
    denominator = volatility * np.sqrt(time_to_maturity)

    if denominator < 1e-300:
        # Zero vol: deterministic limit.
        # d1 = d2 = +inf when forward > strike  ->  N(d) = 1
        # d1 = d2 = -inf when forward < strike  ->  N(d) = 0
        # d1 = d2 = 0    when forward == strike ->  N(d) = 0.5
        if forward > strike:
            return np.inf, np.inf
        elif forward < strike:
            return -np.inf, -np.inf
        else:
            return 0.0, 0.0

    numerator = np.log(forward / strike) + 0.5 * volatility**2 * time_to_maturity
    d1 = numerator / denominator
    d2 = d1 - denominator
    return d1, d2


class AnalyticPricer(OptionPricer):
    """Closed-form Black-Scholes-Merton engine.

    European exercise only. Discounts with the flat ``risk_free_rate`` of the
    configuration; a loaded yield curve is not used by this engine.
    """

    method = PricingMethod.ANALYTIC

    def _bsm_inputs(self, option: Option) -> _BSMInputs:
        self._check_option(option)
        if option.is_american:
            raise UnsupportedFeatureError(
                "Analytic pricing supports European exercise only. "
                "Use the lattice, finite-difference or simulation engine for American options."
            )
        time_to_maturity = self._effective_maturity()
        rate = self.config.risk_free_rate
        df_r = float(np.exp(-rate * time_to_maturity))
        df_q = float(np.exp(-option.dividend * time_to_maturity))
        d1, d2 = _calculate_d_values(
            option.underlying,
            option.strike,
            time_to_maturity,
            option.volatility,
            df_r,
            df_q,
        )
        return _BSMInputs(
            spot=option.underlying,
            strike=option.strike,
            volatility=option.volatility,
            time_to_maturity=time_to_maturity,
            rate=rate,
            dividend=option.dividend,
            df_r=df_r,
            df_q=df_q,
            d1=d1,
            d2=d2,
        )

    def price(self, option: Option) -> float:
        """Compute the BSM option value."""
        with log_timing(logger, "Analytic price", self.config.log_timings):
            inp = self._bsm_inputs(option)
            if option.option_type is OptionType.CALL:
                value = inp.spot * inp.df_q * norm.cdf(inp.d1) - inp.strike * inp.df_r * norm.cdf(
                    inp.d2
                )
            else:
                value = inp.strike * inp.df_r * norm.cdf(-inp.d2) - inp.spot * inp.df_q * norm.cdf(
                    -inp.d1
                )
        return float(value)

    def compute_greeks(self, option: Option) -> Greeks:
        """Closed-form Greeks.

        delta = df_q N(d1)                         (call)
              = df_q (N(d1) - 1)                   (put)
        gamma = df_q N'(d1) / (S sigma sqrt(T))
        vega  = S df_q N'(d1) sqrt(T)              (per unit vol)
        theta = -S df_q N'(d1) sigma / (2 sqrt(T)) - r K df_r N(d2) + q S df_q N(d1)      (call)
              = -S df_q N'(d1) sigma / (2 sqrt(T)) + r K df_r N(-d2) - q S df_q N(-d1)    (put)
        rho   = K T df_r N(d2)                     (call, per unit rate)
              = -K T df_r N(-d2)                   (put)

        Raises
        ======
        ValidationError
            if volatility is zero (the closed forms are undefined)
        """
        if option.volatility <= 0.0:
            raise ValidationError("Analytic Greeks require a strictly positive volatility")
        inp = self._bsm_inputs(option)

        sqrt_t = np.sqrt(inp.time_to_maturity)
        n_prime_d1 = norm.pdf(inp.d1)
        gamma = inp.df_q * n_prime_d1 / (inp.spot * inp.volatility * sqrt_t)
        vega = inp.spot * inp.df_q * n_prime_d1 * sqrt_t
        decay = -inp.spot * inp.df_q * n_prime_d1 * inp.volatility / (2 * sqrt_t)

        if option.option_type is OptionType.CALL:
            delta = inp.df_q * norm.cdf(inp.d1)
            theta = (
                decay
                - inp.rate * inp.strike * inp.df_r * norm.cdf(inp.d2)
                + inp.dividend * inp.spot * inp.df_q * norm.cdf(inp.d1)
            )
            rho = inp.strike * inp.time_to_maturity * inp.df_r * norm.cdf(inp.d2)
        else:
            delta = inp.df_q * (norm.cdf(inp.d1) - 1)
            theta = (
                decay
                + inp.rate * inp.strike * inp.df_r * norm.cdf(-inp.d2)
                - inp.dividend * inp.spot * inp.df_q * norm.cdf(-inp.d1)
            )
            rho = -inp.strike * inp.time_to_maturity * inp.df_r * norm.cdf(-inp.d2)

        return Greeks(
            delta=float(delta),
            gamma=float(gamma),
            vega=float(vega),
            theta=float(theta),
            rho=float(rho),
        )
