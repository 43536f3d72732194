"""Monte Carlo valuation: European payoff averaging and Longstaff-Schwartz for American exercise."""

from __future__ import annotations

import logging

import numpy as np

from ..enums import PricingMethod
from ..utils import intrinsic_value, log_timing
from .core import Greeks, Option, OptionPricer
from .greeks import numerical_greeks
from .params import PricingConfiguration

logger = logging.getLogger(__name__)

LSM_MIN_PATHS = 3
LSM_DET_TOLERANCE = 1e-10


def _warn_if_high_std_error(
    *,
    pv_pathwise: np.ndarray,
    pv_mean: float,
    config: PricingConfiguration,
    label: str,
) -> float:
    """Log the MC standard error; warn if it is high relative to the PV estimate."""
    n_paths = pv_pathwise.size
    if n_paths < 2:
        return 0.0
    std_error = float(np.std(pv_pathwise, ddof=1) / np.sqrt(n_paths))
    scale = max(abs(pv_mean), 1.0e-12)
    ratio = std_error / scale
    logger.debug(
        "MC %s std_error=%.6g ratio=%.6g paths=%d",
        label,
        std_error,
        ratio,
        n_paths,
    )
    if config.mc_std_error_warn_ratio is not None and ratio > config.mc_std_error_warn_ratio:
        logger.warning(
            "MC %s standard error high: std_error=%.6g ratio=%.6g (>%.3g) paths=%d",
            label,
            std_error,
            ratio,
            config.mc_std_error_warn_ratio,
            n_paths,
        )
    return std_error


def _quadratic_continuation(x: np.ndarray, y: np.ndarray) -> np.ndarray | None:
    """Least-squares fit of y on [1, x, x^2] via the 3x3 normal equations.

    x is standardised before the fit. The fitted values are unchanged and the
    moment matrix no longer depends on the level or spread of x.

    Returns the fitted values, or None when fewer than three points are given or
    the moment matrix is (numerically) singular.
    """
    n = x.size
    if n < LSM_MIN_PATHS:
        return None
    centre = np.mean(x)
    spread = np.std(x)
    if spread <= np.finfo(float).eps * abs(centre):
        return None
    z = (x - centre) / spread
    X = np.column_stack([np.ones_like(z), z, z**2])
    XtX = X.T @ X / n
    if abs(np.linalg.det(XtX)) < LSM_DET_TOLERANCE:
        return None
    Xty = X.T @ y / n
    beta = np.linalg.solve(XtX, Xty)
    return X @ beta


class SimulationPricer(OptionPricer):
    """Geometric Brownian motion Monte Carlo engine.

    The random stream is seeded from ``config.random_seed``, so repeated calls with the
    same inputs return the same price and bumped revaluations share random numbers.
    """

    method = PricingMethod.SIMULATION

    def _simulate_paths(self, option: Option) -> tuple[np.ndarray, np.ndarray]:
        """Simulate spot paths.

        Returns
        =======
        tuple of (paths, cumulative_rate)
            paths : shape (steps+1, mc_paths) spot values, row 0 is today's spot
            cumulative_rate : shape (steps+1,) integral of the local rate up to each step,
                so exp(-cumulative_rate[k]) discounts a cash flow at step k to today
        """
        time_to_maturity = self._effective_maturity()
        num_steps = self.config.mc_steps_per_path
        num_paths = self.config.mc_paths
        d_t = time_to_maturity / num_steps

        step_times = np.arange(num_steps) * d_t / time_to_maturity
        if self.config.has_yield_curve:
            rates = self.config.yield_curve.get_rates(step_times)
        else:
            rates = np.full(num_steps, self.config.risk_free_rate)
        cumulative_rate = np.concatenate([[0.0], np.cumsum(rates * d_t)])

        logger.debug(
            "MC %s paths=%d steps=%d T=%.6f seed=%d",
            option.exercise_type.value,
            num_paths,
            num_steps,
            time_to_maturity,
            self.config.random_seed,
        )

        rng = np.random.default_rng(self.config.random_seed)
        sigma = option.volatility
        diffusion = sigma * np.sqrt(d_t)
        paths = np.empty((num_steps + 1, num_paths), dtype=float)
        paths[0] = option.underlying
        for k in range(num_steps):
            drift = (rates[k] - option.dividend - 0.5 * sigma**2) * d_t
            z = rng.standard_normal(num_paths)
            paths[k + 1] = paths[k] * np.exp(drift + diffusion * z)
        return paths, cumulative_rate

    def _longstaff_schwartz(
        self, option: Option, paths: np.ndarray, cumulative_rate: np.ndarray
    ) -> np.ndarray:
        """Return each path's cash flow discounted from its exercise step to today."""
        num_steps = paths.shape[0] - 1
        cash_flow = intrinsic_value(option.option_type, option.strike, paths[-1])
        exercise_step = np.full(paths.shape[1], num_steps)

        for t in range(num_steps - 1, 0, -1):
            exercise_now = intrinsic_value(option.option_type, option.strike, paths[t])
            candidates = np.flatnonzero((exercise_now > 0.0) & (exercise_step == num_steps))
            y = cash_flow[candidates] * np.exp(
                -(cumulative_rate[exercise_step[candidates]] - cumulative_rate[t])
            )
            continuation = _quadratic_continuation(paths[t, candidates] / option.strike, y)
            if continuation is None:
                logger.debug(
                    "LSM regression skipped at step %d (itm paths=%d)", t, candidates.size
                )
                continue
            exercise = candidates[exercise_now[candidates] > continuation]
            cash_flow[exercise] = exercise_now[exercise]
            exercise_step[exercise] = t

        return cash_flow * np.exp(-cumulative_rate[exercise_step])

    def present_value_pathwise(self, option: Option) -> np.ndarray:
        """Discounted payoff of every simulated path."""
        self._check_option(option)
        paths, cumulative_rate = self._simulate_paths(option)
        if option.is_american:
            return self._longstaff_schwartz(option, paths, cumulative_rate)
        payoff = intrinsic_value(option.option_type, option.strike, paths[-1])
        return payoff * np.exp(-cumulative_rate[-1])

    def price_with_std_error(self, option: Option) -> tuple[float, float]:
        """Return ``(price, standard_error)`` of the Monte Carlo estimate."""
        with log_timing(logger, "MC price", self.config.log_timings):
            pv_pathwise = self.present_value_pathwise(option)
            pv = float(np.mean(pv_pathwise))
        std_error = _warn_if_high_std_error(
            pv_pathwise=pv_pathwise,
            pv_mean=pv,
            config=self.config,
            label=option.exercise_type.value,
        )
        return pv, std_error

    def price(self, option: Option) -> float:
        pv, _ = self.price_with_std_error(option)
        return pv

    def compute_greeks(self, option: Option) -> Greeks:
        return numerical_greeks(self, option)
