"""Cross-method benchmarking and convergence analysis.

Both helpers return pandas DataFrames so results can be inspected, plotted or
exported directly.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
import logging

import numpy as np
import pandas as pd

from .enums import PricingMethod
from .exceptions import ValidationError
from .valuation.core import Option
from .valuation.factory import create_pricer
from .valuation.params import PricingConfiguration

logger = logging.getLogger(__name__)

__all__ = [
    "compare_methods",
    "convergence_analysis",
]


def _default_methods(option: Option) -> list[PricingMethod]:
    methods = list(PricingMethod)
    if option.is_american:
        methods.remove(PricingMethod.ANALYTIC)
    return methods


def compare_methods(
    option: Option,
    config: PricingConfiguration | None = None,
    methods: Sequence[PricingMethod | str] | None = None,
    greeks: bool = False,
) -> pd.DataFrame:
    """Price *option* with several engines side by side.

    Parameters
    ==========
    option: Option
        option to price
    config: PricingConfiguration, optional
        configuration shared by every engine (defaults when None)
    methods: sequence of PricingMethod or str, optional
        engines to run. Default: all engines able to price the option
        (the analytic engine is left out for American exercise).
    greeks: bool, default False
        also compute delta, gamma, vega, theta and rho

    Returns
    =======
    pd.DataFrame
        one row per method (index ``method``) with columns ``price``,
        ``diff_vs_analytic`` and, if requested, the Greeks. The analytic
        difference is NaN when the option is American.
    """
    config = config if config is not None else PricingConfiguration()
    methods = _default_methods(option) if methods is None else list(methods)

    reference = np.nan
    if not option.is_american:
        reference = create_pricer(PricingMethod.ANALYTIC, config).price(option)

    rows = []
    for method in methods:
        pricer = create_pricer(method, config)
        row = {"method": pricer.method.value, "price": pricer.price(option)}
        if greeks:
            row.update(pricer.compute_greeks(option)._asdict())
        rows.append(row)
        logger.debug("compare_methods %s price=%.6f", row["method"], row["price"])

    df = pd.DataFrame(rows).set_index("method")
    df.insert(1, "diff_vs_analytic", df["price"] - reference)
    return df


def convergence_analysis(
    option: Option,
    method: PricingMethod | str,
    config: PricingConfiguration | None,
    field: str,
    values: Iterable[int],
    reference: float | None = None,
) -> pd.DataFrame:
    """Reprice *option* while one resolution parameter of the configuration varies.

    Parameters
    ==========
    method: PricingMethod or str
        engine to study
    field: str
        PricingConfiguration field to vary, e.g. ``"lattice_steps"``,
        ``"pde_spot_steps"`` or ``"mc_paths"``
    values: iterable of int
        values taken by *field*
    reference: float, optional
        true price for the error column. Default: analytic price (European only).

    Returns
    =======
    pd.DataFrame
        index *field*, columns ``price`` and ``abs_error``. The log-log slope of
        the error, i.e. the estimated convergence order, is stored in
        ``df.attrs["order"]``.
    """
    config = config if config is not None else PricingConfiguration()
    if field not in PricingConfiguration.__dataclass_fields__:
        raise ValidationError(f"Unknown PricingConfiguration field: {field!r}")

    if reference is None:
        if option.is_american:
            raise ValidationError("reference price is required for American options")
        reference = create_pricer(PricingMethod.ANALYTIC, config).price(option)

    values = list(values)
    prices = [
        create_pricer(method, config.replace(**{field: v})).price(option) for v in values
    ]

    df = pd.DataFrame({"price": prices}, index=pd.Index(values, name=field))
    df["abs_error"] = (df["price"] - reference).abs()

    order = float("nan")
    valid = df[df["abs_error"] > 0]
    if len(valid) >= 2:
        # error ~ C / n^order  =>  log(e) = -order * log(n) + const
        log_n = np.log(valid.index.to_numpy(dtype=float))
        log_e = np.log(valid["abs_error"].to_numpy(dtype=float))
        order = -float(np.polyfit(log_n, log_e, 1)[0])
    df.attrs["order"] = order
    df.attrs["reference"] = float(reference)
    return df
