from pathlib import Path

from vanilla_pricing.enums import ExerciseType, OptionType
from vanilla_pricing.rates import YieldCurve
from vanilla_pricing.valuation import Option


def flat_curve(rate: float, maturities=(0.0, 0.5, 1.0)) -> YieldCurve:
    """Yield curve with the same rate at every node."""
    return YieldCurve((t, rate) for t in maturities)


def make_option(
    option_type=OptionType.CALL,
    exercise_type=ExerciseType.EUROPEAN,
    *,
    underlying=100.0,
    strike=100.0,
    volatility=0.2,
    dividend=0.0,
) -> Option:
    return Option(
        underlying=underlying,
        strike=strike,
        volatility=volatility,
        dividend=dividend,
        option_type=option_type,
        exercise_type=exercise_type,
    )


def write_curve_file(directory: Path, lines, name: str = "curve.txt") -> Path:
    path = Path(directory) / name
    path.write_text("\n".join(lines) + "\n")
    return path
