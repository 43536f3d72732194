"""Option contract, Greeks container and the common pricer interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, replace as dc_replace
import datetime as dt
import logging
from typing import NamedTuple

import numpy as np

from ..enums import ExerciseType, OptionType, PricingMethod
from ..exceptions import ConfigurationError, TemporalConfigurationError, ValidationError
from ..utils import effective_maturity
from .params import PricingConfiguration

logger = logging.getLogger(__name__)


def _coerce_enum(name: str, value: object, enum_cls: type):
    if isinstance(value, str):
        try:
            return enum_cls(value.lower())
        except ValueError as exc:
            raise ValidationError(f"Invalid {name}: {value!r}") from exc
    if not isinstance(value, enum_cls):
        raise ConfigurationError(
            f"{name} must be {enum_cls.__name__} enum, got {type(value).__name__}"
        )
    return value


@dataclass(frozen=True, slots=True)
class Option:
    """Single-underlying vanilla option contract.

    Time to maturity and rates live in :class:`PricingConfiguration`; the option
    carries the contract terms and the underlying's market inputs.
    """

    underlying: float
    strike: float
    volatility: float
    dividend: float = 0.0
    option_type: OptionType = OptionType.CALL
    exercise_type: ExerciseType = ExerciseType.EUROPEAN

    def __post_init__(self) -> None:
        """Validate enums and coerce numeric fields."""
        object.__setattr__(
            self, "option_type", _coerce_enum("option_type", self.option_type, OptionType)
        )
        object.__setattr__(
            self,
            "exercise_type",
            _coerce_enum("exercise_type", self.exercise_type, ExerciseType),
        )

        for name in ("underlying", "strike", "volatility", "dividend"):
            raw = getattr(self, name)
            if raw is None:
                raise ValidationError(f"Option.{name} must be provided")
            try:
                value = float(raw)
            except (TypeError, ValueError) as exc:
                raise ConfigurationError(f"Option.{name} must be numeric") from exc
            if not np.isfinite(value):
                raise ValidationError(f"Option.{name} must be finite")
            object.__setattr__(self, name, value)

        if self.underlying <= 0.0:
            raise ValidationError(f"Option.underlying must be positive, got {self.underlying}")
        if self.strike <= 0.0:
            raise ValidationError(f"Option.strike must be positive, got {self.strike}")
        if self.volatility < 0.0:
            raise ValidationError(f"Option.volatility must be >= 0, got {self.volatility}")
        if self.dividend < 0.0:
            raise ValidationError(f"Option.dividend must be >= 0, got {self.dividend}")

    @property
    def is_american(self) -> bool:
        return self.exercise_type is ExerciseType.AMERICAN

    def replace(self, **kwargs: object) -> "Option":
        """Create a new Option with modified fields (used for spot/vol bumps)."""
        return dc_replace(self, **kwargs)


class Greeks(NamedTuple):
    """First- and second-order sensitivities of an option price.

    vega and rho are per unit (1.00) change in volatility / rate; theta is the
    annualised change in value as calendar time passes.
    """

    delta: float
    gamma: float
    vega: float
    theta: float
    rho: float


class OptionPricer(ABC):
    """Common interface of all valuation engines.

    An engine holds only its (immutable) configuration, so a single instance may
    price many options and may be shared between threads.
    """

    method: PricingMethod

    def __init__(self, config: PricingConfiguration | None = None) -> None:
        if config is None:
            config = PricingConfiguration()
        if not isinstance(config, PricingConfiguration):
            raise ConfigurationError(
                f"config must be PricingConfiguration, got {type(config).__name__}"
            )
        self._config = config

    @property
    def config(self) -> PricingConfiguration:
        return self._config

    def __repr__(self) -> str:
        return f"{type(self).__name__}(method={self.method.value})"

    def with_config(self, config: PricingConfiguration) -> "OptionPricer":
        """Return a pricer of the same kind bound to another configuration."""
        return type(self)(config)

    def _effective_maturity(self, now: dt.datetime | None = None) -> float:
        """Maturity net of the calculation date offset; raises when nothing is left."""
        tau = effective_maturity(self._config, now)
        if tau <= 0.0:
            raise TemporalConfigurationError(
                f"Calculation date {self._config.calculation_date} leaves no time to "
                f"maturity (maturity={self._config.maturity}, effective={tau:.6f})"
            )
        return tau

    @staticmethod
    def _check_option(option: Option) -> None:
        if not isinstance(option, Option):
            raise ConfigurationError(f"option must be Option, got {type(option).__name__}")

    @abstractmethod
    def price(self, option: Option) -> float:
        """Present value of *option*."""

    @abstractmethod
    def compute_greeks(self, option: Option) -> Greeks:
        """Delta, gamma, vega, theta and rho of *option*."""
