"""Pricer factory: maps a pricing method tag to a fresh valuation engine."""

from __future__ import annotations

from ..enums import PricingMethod
from ..exceptions import UnknownPricingMethodError
from .binomial import LatticePricer
from .bsm import AnalyticPricer
from .core import OptionPricer
from .monte_carlo import SimulationPricer
from .params import PricingConfiguration
from .pde import FiniteDifferencePricer

# ── Implementation registry ─────────────────────────────────────────
# Maps PricingMethod → engine class.
_PRICER_REGISTRY: dict[PricingMethod, type[OptionPricer]] = {
    PricingMethod.ANALYTIC: AnalyticPricer,
    PricingMethod.LATTICE: LatticePricer,
    PricingMethod.FINITE_DIFFERENCE: FiniteDifferencePricer,
    PricingMethod.SIMULATION: SimulationPricer,
}


def _resolve_method(method: PricingMethod | str) -> PricingMethod:
    if isinstance(method, PricingMethod):
        return method
    if isinstance(method, str):
        try:
            return PricingMethod(method.strip().lower())
        except ValueError:
            pass
    raise UnknownPricingMethodError(
        f"Unknown pricing method {method!r}. "
        f"Expected one of: {', '.join(m.value for m in PricingMethod)}"
    )


def create_pricer(
    method: PricingMethod | str, config: PricingConfiguration | None = None
) -> OptionPricer:
    """Create a new engine for *method*, bound to *config* (defaults when None).

    Parameters
    ==========
    method: PricingMethod or str
        PricingMethod member or its value ("analytic", "lattice",
        "finite_difference", "simulation")
    config: PricingConfiguration, optional
        configuration handed to the engine

    Raises
    ======
    UnknownPricingMethodError
        if *method* is not a recognised tag
    """
    impl_cls = _PRICER_REGISTRY.get(_resolve_method(method))
    if impl_cls is None:
        raise UnknownPricingMethodError(f"No engine registered for {method!r}")
    return impl_cls(config)


def available_methods() -> list[PricingMethod]:
    return list(_PRICER_REGISTRY)
