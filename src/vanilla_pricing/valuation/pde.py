"""Finite difference (PDE) valuation of vanilla European and American call/put.

Scope
-----
- Crank-Nicolson time stepping on a uniform spot grid [0, S_max]
- tridiagonal systems solved with the Thomas algorithm
- American handling: intrinsic projection after every time step
- per-step local rate taken from the yield curve at the normalised time to maturity
"""

from __future__ import annotations

import logging

import numpy as np

from ..enums import OptionType, PricingMethod
from ..exceptions import ValidationError
from ..utils import intrinsic_value, log_timing
from .core import Greeks, Option, OptionPricer
from .greeks import numerical_greeks

logger = logging.getLogger(__name__)

AUTO_CEILING_MULTIPLIER = 3.0


def _solve_tridiagonal_thomas(
    lower: np.ndarray,
    diag: np.ndarray,
    upper: np.ndarray,
    rhs: np.ndarray,
) -> np.ndarray:
    """Solve a tridiagonal system Ax = rhs via the Thomas algorithm.

    A has:
      - lower: subdiagonal (length n-1)  -> A[i, i-1]
      - diag:  main diagonal (length n)  -> A[i, i]
      - upper: superdiagonal (length n-1)-> A[i, i+1]
    """
    n = diag.size
    if rhs.size != n:
        raise ValidationError("rhs length must match diag length")
    if lower.size != n - 1 or upper.size != n - 1:
        raise ValidationError("lower/upper must have length n-1")

    c = upper.astype(float, copy=True)
    d = diag.astype(float, copy=True)
    b = lower.astype(float, copy=True)
    y = rhs.astype(float, copy=True)

    # Forward elimination
    for i in range(1, n):
        w = b[i - 1] / d[i - 1]
        d[i] -= w * c[i - 1]
        y[i] -= w * y[i - 1]

    # Back substitution
    x = np.empty(n, dtype=float)
    x[-1] = y[-1] / d[-1]
    for i in range(n - 2, -1, -1):
        x[i] = (y[i] - c[i] * x[i + 1]) / d[i]
    return x


def _boundary_values(
    *,
    option_type: OptionType,
    strike: float,
    smax: float,
    df_tT: float,
    dq_tT: float,
    early_exercise: bool,
) -> tuple[float, float]:
    """Values at S=0 and S=S_max for a remaining life with discount factors df_tT / dq_tT."""
    if option_type is OptionType.PUT:
        left = strike if early_exercise else strike * df_tT
        right = 0.0
    else:
        left = 0.0
        continuation = smax * dq_tT - strike * df_tT
        intrinsic = smax - strike
        right = max(continuation, intrinsic) if early_exercise else max(continuation, 0.0)
    return float(left), float(right)


def _spot_operator_coeffs(
    *,
    spot_values: np.ndarray,
    dS: float,
    risk_free_rate: float,
    dividend_rate: float,
    volatility: float,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Spatial operator coefficients (sub, main, super diagonal) on the spot grid."""
    diffusion = (volatility**2) * (spot_values**2) / (dS**2)
    drift = (risk_free_rate - dividend_rate) * spot_values / dS
    gamma = 0.5 * (diffusion - drift)
    beta = -(diffusion + risk_free_rate)
    alpha = 0.5 * (diffusion + drift)
    return gamma, beta, alpha


def _crank_nicolson_step(
    V_old: np.ndarray,
    j: np.ndarray,
    gamma: np.ndarray,
    beta: np.ndarray,
    alpha: np.ndarray,
    d_t: float,
    left: float,
    right: float,
) -> np.ndarray:
    """Advance the grid one Crank-Nicolson step back in time (boundaries included)."""
    a = -0.5 * d_t * gamma
    b = -0.5 * d_t * beta
    c = -0.5 * d_t * alpha

    rhs = -a * V_old[j - 1] + (1.0 - b) * V_old[j] - c * V_old[j + 1]

    V = np.empty_like(V_old)
    V[0] = left
    V[-1] = right

    rhs[0] -= a[0] * V[0]
    rhs[-1] -= c[-1] * V[-1]

    V[j] = _solve_tridiagonal_thomas(a[1:], 1.0 + b, c[:-1], rhs)
    return V


class FiniteDifferencePricer(OptionPricer):
    """Crank-Nicolson engine on a uniform spot grid."""

    method = PricingMethod.FINITE_DIFFERENCE

    def resolve_price_ceiling(self, option: Option) -> float:
        """Configured S_max, or 3 * max(strike, underlying) when set to 0 (auto)."""
        if self.config.pde_price_ceiling > 0.0:
            return self.config.pde_price_ceiling
        return AUTO_CEILING_MULTIPLIER * max(option.strike, option.underlying)

    def solve(self, option: Option) -> tuple[np.ndarray, np.ndarray]:
        """Return the spot grid and the option values at t=0 on that grid."""
        self._check_option(option)
        time_to_maturity = self._effective_maturity()
        spot_steps = self.config.pde_spot_steps
        time_steps = self.config.pde_time_steps
        smax = self.resolve_price_ceiling(option)

        S = np.linspace(0.0, smax, spot_steps + 1)
        dS = smax / spot_steps
        d_t = time_to_maturity / time_steps
        j = np.arange(1, spot_steps)
        logger.debug(
            "FD %s spot_steps=%d time_steps=%d smax=%.4f T=%.6f",
            option.exercise_type.value,
            spot_steps,
            time_steps,
            smax,
            time_to_maturity,
        )

        payoff = intrinsic_value(option.option_type, option.strike, S)
        exercise = payoff if option.is_american else None
        V = payoff.copy()

        for n in range(time_steps - 1, -1, -1):
            tau = time_to_maturity - n * d_t
            rate = self.config.local_rate(tau / time_to_maturity)
            left, right = _boundary_values(
                option_type=option.option_type,
                strike=option.strike,
                smax=smax,
                df_tT=float(np.exp(-rate * tau)),
                dq_tT=float(np.exp(-option.dividend * tau)),
                early_exercise=option.is_american,
            )
            gamma, beta, alpha = _spot_operator_coeffs(
                spot_values=S[j],
                dS=dS,
                risk_free_rate=rate,
                dividend_rate=option.dividend,
                volatility=option.volatility,
            )
            V = _crank_nicolson_step(V, j, gamma, beta, alpha, d_t, left, right)
            if exercise is not None:
                V = np.maximum(V, exercise)

        return S, V

    def price(self, option: Option) -> float:
        """Grid value linearly interpolated at the current spot."""
        with log_timing(logger, "FD price", self.config.log_timings):
            S, V = self.solve(option)
        return float(np.interp(option.underlying, S, V))

    def compute_greeks(self, option: Option) -> Greeks:
        # Spot bumps must reprice on the same grid as the base option.
        ceiling = self.resolve_price_ceiling(option)
        pinned = self.with_config(self.config.replace(pde_price_ceiling=ceiling))
        return numerical_greeks(pinned, option)
