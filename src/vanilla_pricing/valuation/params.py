"""Pricing configuration shared by all valuation engines.

A single value object bundles the common inputs (calculation date, maturity,
rates) and the method-specific discretisation parameters, so that one
configuration can be handed to any engine created by the pricer factory.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace as dc_replace
import datetime as dt
import math

from ..enums import DayCountConvention
from ..exceptions import ConfigurationError, ValidationError
from ..rates import YieldCurve
from ..utils import parse_calculation_date


def _positive_int(name: str, value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"{name} must be an int, got {type(value).__name__}")
    if value < 1:
        raise ValidationError(f"{name} must be >= 1, got {value}")
    return value


@dataclass(frozen=True, slots=True)
class PricingConfiguration:
    """Parameters for option valuation.

    Attributes
    ==========
    calculation_date:
        ISO ``YYYY-MM-DD`` string, date or datetime. The elapsed time between this
        date and now is subtracted from ``maturity`` by the analytic, finite
        difference and simulation engines. None (or "") means no adjustment.
    maturity:
        Time to maturity in years. Default: 1.0.
    risk_free_rate:
        Flat fallback rate, used whenever ``yield_curve`` is empty. Default: 2.0.
    yield_curve:
        Term structure keyed on fractions of the option life. The configuration
        keeps its own copy. Default: empty curve.
    lattice_steps:
        Number of steps in the binomial tree. Default: 100.
    pde_time_steps, pde_spot_steps:
        Crank-Nicolson grid resolution. Defaults: 100 / 100.
    pde_price_ceiling:
        Upper spot boundary of the PDE grid. 0.0 means 3 * max(strike, underlying).
    mc_paths:
        Number of simulated paths. Default: 10_000.
    mc_steps_per_path:
        Number of time steps per simulated path. Default: 100.
    random_seed:
        Seed of the simulation random stream. Identical inputs give identical prices.
    mc_std_error_warn_ratio:
        Log a warning when the Monte Carlo standard error exceeds this fraction of
        the price. None disables the check.
    day_count_convention:
        Basis used to turn the calculation date offset into years.
    log_timings:
        Log wall-clock time of each ``price`` call at DEBUG level.
    """

    calculation_date: str | dt.date | None = None
    maturity: float = 1.0
    risk_free_rate: float = 2.0
    yield_curve: YieldCurve = field(default_factory=YieldCurve)
    lattice_steps: int = 100
    pde_time_steps: int = 100
    pde_spot_steps: int = 100
    pde_price_ceiling: float = 0.0
    mc_paths: int = 10_000
    mc_steps_per_path: int = 100
    random_seed: int = 42
    mc_std_error_warn_ratio: float | None = None
    day_count_convention: DayCountConvention | str = DayCountConvention.ACT_365_25
    log_timings: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "calculation_date", parse_calculation_date(self.calculation_date))

        if isinstance(self.day_count_convention, str):
            object.__setattr__(
                self, "day_count_convention", DayCountConvention(self.day_count_convention)
            )
        if not isinstance(self.day_count_convention, DayCountConvention):
            raise ConfigurationError(
                f"day_count_convention must be a DayCountConvention, got {self.day_count_convention}"
            )

        if self.yield_curve is None:
            curve = YieldCurve()
        elif isinstance(self.yield_curve, YieldCurve):
            curve = self.yield_curve.copy()
        else:
            raise ConfigurationError(
                f"yield_curve must be a YieldCurve, got {type(self.yield_curve).__name__}"
            )
        object.__setattr__(self, "yield_curve", curve)

        for name in ("maturity", "risk_free_rate", "pde_price_ceiling"):
            try:
                value = float(getattr(self, name))
            except (TypeError, ValueError) as exc:
                raise ConfigurationError(f"{name} must be numeric") from exc
            if not math.isfinite(value):
                raise ValidationError(f"{name} must be finite, got {value}")
            object.__setattr__(self, name, value)

        if self.maturity <= 0.0:
            raise ValidationError(f"maturity must be positive, got {self.maturity}")
        if self.pde_price_ceiling < 0.0:
            raise ValidationError(
                f"pde_price_ceiling must be >= 0 (0 = auto), got {self.pde_price_ceiling}"
            )

        for name in ("lattice_steps", "pde_time_steps", "mc_paths", "mc_steps_per_path"):
            _positive_int(name, getattr(self, name))
        if _positive_int("pde_spot_steps", self.pde_spot_steps) < 2:
            raise ValidationError(f"pde_spot_steps must be >= 2, got {self.pde_spot_steps}")

        if isinstance(self.random_seed, bool) or not isinstance(self.random_seed, int):
            raise ConfigurationError(
                f"random_seed must be an int, got {type(self.random_seed).__name__}"
            )
        if self.mc_std_error_warn_ratio is not None and self.mc_std_error_warn_ratio <= 0:
            raise ValidationError(
                f"mc_std_error_warn_ratio must be positive, got {self.mc_std_error_warn_ratio}"
            )

    @property
    def has_yield_curve(self) -> bool:
        return not self.yield_curve.is_empty

    def local_rate(self, t: float) -> float:
        """Curve rate at normalised time *t*, or the flat rate when no curve is loaded."""
        if self.yield_curve.is_empty:
            return self.risk_free_rate
        return self.yield_curve.get_rate(t)

    def replace(self, **kwargs: object) -> "PricingConfiguration":
        """Create a new configuration with modified fields.

        This is used for bump-and-revalue calculations (e.g. theta, rho) without
        mutating the original object.
        """
        return dc_replace(self, **kwargs)
