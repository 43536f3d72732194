"""Valuation of European and American options using the binomial option pricing model of
Cox-Ross-Rubinstein
"""

from __future__ import annotations

import logging

import numpy as np

from ..enums import PricingMethod
from ..exceptions import ArbitrageViolationError
from ..utils import intrinsic_value, log_timing
from .core import Greeks, Option, OptionPricer
from .greeks import numerical_greeks

logger = logging.getLogger(__name__)


class LatticePricer(OptionPricer):
    """CRR binomial tree with a per-step local rate.

    The tree spans the configured maturity; the calculation date is not applied.
    When a yield curve is loaded, step ``i`` discounts and drifts at ``curve(i / N)``.
    """

    method = PricingMethod.LATTICE

    def _setup_binomial_parameters(self, option: Option) -> tuple[int, float, float, float]:
        """Return ``(num_steps, delta_t, up, down)`` after checking the no-arbitrage condition."""
        num_steps = self.config.lattice_steps
        delta_t = self.config.maturity / num_steps
        u = float(np.exp(option.volatility * np.sqrt(delta_t)))
        d = 1.0 / u
        if u - d <= 0.0:
            raise ArbitrageViolationError(
                "Binomial tree requires positive volatility (up and down moves coincide)"
            )

        growth = np.exp((self.config.risk_free_rate - option.dividend) * delta_t)
        p = (growth - d) / (u - d)
        if not 0.0 <= p <= 1.0:
            raise ArbitrageViolationError(
                f"Arbitrage condition violated: risk-neutral probability p={p:.6f} outside [0, 1]"
            )
        return num_steps, delta_t, u, d

    def solve(self, option: Option) -> np.ndarray:
        """Backward induction; returns the buffer whose first entry is the root value."""
        self._check_option(option)
        num_steps, delta_t, u, d = self._setup_binomial_parameters(option)
        logger.debug(
            "Binomial %s num_steps=%d dt=%.6f u=%.6f",
            option.exercise_type.value,
            num_steps,
            delta_t,
            u,
        )

        # Node j at step i has j up moves: S * u^j * d^(i-j)
        ups = np.arange(num_steps + 1)
        terminal_spots = option.underlying * u**ups * d ** (num_steps - ups)
        values = intrinsic_value(option.option_type, option.strike, terminal_spots)

        curve = self.config.yield_curve
        for i in range(num_steps - 1, -1, -1):
            rate = self.config.risk_free_rate if curve.is_empty else curve.get_rate(i / num_steps)
            discount = np.exp(-rate * delta_t)
            p = (np.exp((rate - option.dividend) * delta_t) - d) / (u - d)

            continuation = discount * (p * values[1 : i + 2] + (1 - p) * values[: i + 1])
            if option.is_american:
                j = ups[: i + 1]
                spots = option.underlying * u**j * d ** (i - j)
                exercise = intrinsic_value(option.option_type, option.strike, spots)
                values[: i + 1] = np.maximum(continuation, exercise)
            else:
                values[: i + 1] = continuation

        return values

    def price(self, option: Option) -> float:
        """Return PV using the binomial tree."""
        with log_timing(logger, "Binomial price", self.config.log_timings):
            values = self.solve(option)
        return float(values[0])

    def compute_greeks(self, option: Option) -> Greeks:
        return numerical_greeks(self, option)
