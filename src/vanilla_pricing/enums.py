"""Enums for option valuation."""

from enum import Enum

__all__ = [
    "OptionType",
    "ExerciseType",
    "PricingMethod",
    "DayCountConvention",
]


class OptionType(Enum):
    CALL = "call"
    PUT = "put"


class ExerciseType(Enum):
    EUROPEAN = "european"
    AMERICAN = "american"


class PricingMethod(Enum):
    ANALYTIC = "analytic"
    LATTICE = "lattice"
    FINITE_DIFFERENCE = "finite_difference"
    SIMULATION = "simulation"


class DayCountConvention(Enum):
    ACT_360 = "ACT/360"
    ACT_365F = "ACT/365F"
    ACT_365_25 = "ACT/365.25"
    THIRTY_360_US = "30/360 US"
