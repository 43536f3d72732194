from .enums import DayCountConvention, ExerciseType, OptionType, PricingMethod
from .exceptions import (
    ArbitrageViolationError,
    ConfigurationError,
    NumericalError,
    ResourceError,
    TemporalConfigurationError,
    UnknownPricingMethodError,
    UnsupportedFeatureError,
    ValidationError,
    VanillaPricingError,
)
from .rates import RatePoint, YieldCurve
from .valuation import (
    AnalyticPricer,
    FiniteDifferencePricer,
    Greeks,
    LatticePricer,
    Option,
    OptionPricer,
    PricingConfiguration,
    SimulationPricer,
    create_pricer,
)
from .api import compute_option_greeks, price_option
from .validation import compare_methods, convergence_analysis


__all__ = [
    "OptionType",
    "ExerciseType",
    "PricingMethod",
    "DayCountConvention",
    "VanillaPricingError",
    "ValidationError",
    "TemporalConfigurationError",
    "ConfigurationError",
    "UnknownPricingMethodError",
    "UnsupportedFeatureError",
    "ResourceError",
    "NumericalError",
    "ArbitrageViolationError",
    "RatePoint",
    "YieldCurve",
    "PricingConfiguration",
    "Option",
    "Greeks",
    "OptionPricer",
    "AnalyticPricer",
    "LatticePricer",
    "FiniteDifferencePricer",
    "SimulationPricer",
    "create_pricer",
    "price_option",
    "compute_option_greeks",
    "compare_methods",
    "convergence_analysis",
]
