"""Option valuation and pricing engines.

This module provides a common interface for pricing vanilla options using
four methods: Black-Scholes-Merton analytical formulas, CRR binomial trees,
Crank-Nicolson finite differences and Monte Carlo simulation.

Public API
----------
Core classes:
    Option: Vanilla option contract and underlying inputs
    Greeks: Delta, gamma, vega, theta, rho
    OptionPricer: Abstract base of all engines

Configuration:
    PricingConfiguration: Shared parameters for every engine

Engines:
    AnalyticPricer, LatticePricer, FiniteDifferencePricer, SimulationPricer
    create_pricer: Factory keyed on PricingMethod
"""

from .params import PricingConfiguration
from .core import Greeks, Option, OptionPricer
from .bsm import AnalyticPricer
from .binomial import LatticePricer
from .pde import FiniteDifferencePricer
from .monte_carlo import SimulationPricer
from .greeks import numerical_greeks
from .factory import available_methods, create_pricer

__all__ = [
    # Core valuation classes
    "Option",
    "Greeks",
    "OptionPricer",
    # Configuration
    "PricingConfiguration",
    # Engines
    "AnalyticPricer",
    "LatticePricer",
    "FiniteDifferencePricer",
    "SimulationPricer",
    "numerical_greeks",
    "create_pricer",
    "available_methods",
]
