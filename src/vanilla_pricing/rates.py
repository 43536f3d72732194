"""Interest-rate term structure: a yield curve keyed on fractions of the option life."""

from __future__ import annotations

from bisect import bisect_right
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
import logging
import math

import numpy as np

from .exceptions import ResourceError, ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RatePoint:
    """A single (maturity, rate) node of a yield curve.

    maturity is a non-negative fraction of the option life (typically in [0, 1]).
    """

    maturity: float
    rate: float

    def __post_init__(self) -> None:
        try:
            maturity = float(self.maturity)
            rate = float(self.rate)
        except (TypeError, ValueError) as exc:
            raise ValidationError("RatePoint maturity and rate must be numeric") from exc
        if not math.isfinite(maturity) or maturity < 0.0:
            raise ValidationError(f"RatePoint maturity must be finite and >= 0, got {maturity}")
        if not math.isfinite(rate):
            raise ValidationError(f"RatePoint rate must be finite, got {rate}")
        object.__setattr__(self, "maturity", maturity)
        object.__setattr__(self, "rate", rate)


class YieldCurve:
    """Piecewise-linear yield curve with flat extrapolation.

    Points are kept in insertion order; interpolation assumes they were added in
    non-decreasing maturity order. An empty curve is valid and signals that the
    flat fallback rate of the pricing configuration should be used instead.
    """

    __slots__ = ("_points",)

    def __init__(self, points: Iterable[RatePoint | tuple[float, float]] = ()) -> None:
        self._points: list[RatePoint] = []
        for point in points:
            if isinstance(point, RatePoint):
                self._points.append(point)
            else:
                maturity, rate = point
                self.add_rate_point(maturity, rate)

    def __len__(self) -> int:
        return len(self._points)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, YieldCurve):
            return NotImplemented
        return self._points == other._points

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        pts = ", ".join(f"({p.maturity:g}, {p.rate:g})" for p in self._points)
        return f"YieldCurve([{pts}])"

    @property
    def data(self) -> tuple[RatePoint, ...]:
        """Read-only view of the stored points, in insertion order."""
        return tuple(self._points)

    @property
    def is_empty(self) -> bool:
        return not self._points

    def add_rate_point(self, maturity: float, rate: float) -> None:
        """Append a point. No sorting or de-duplication is performed."""
        self._points.append(RatePoint(maturity, rate))

    def get_rate(self, t: float) -> float:
        """Linearly interpolated rate at *t*, clamped to the end points outside the range.

        Raises
        ======
        ResourceError
            if the curve holds no points
        """
        if not self._points:
            raise ResourceError("YieldCurve is empty")

        first, last = self._points[0], self._points[-1]
        if t <= first.maturity:
            return first.rate
        if t >= last.maturity:
            return last.rate

        maturities = [p.maturity for p in self._points]
        i = bisect_right(maturities, t)
        p0, p1 = self._points[i - 1], self._points[i]
        factor = (t - p0.maturity) / (p1.maturity - p0.maturity)
        return p0.rate + factor * (p1.rate - p0.rate)

    def get_rates(self, times: Iterable[float] | np.ndarray) -> np.ndarray:
        """Vectorized :meth:`get_rate`."""
        return np.array([self.get_rate(float(t)) for t in np.asarray(times, dtype=float)])

    def shifted(self, bump: float) -> YieldCurve:
        """Return a new curve with every rate moved by *bump* (parallel shift)."""
        return YieldCurve(RatePoint(p.maturity, p.rate + bump) for p in self._points)

    def copy(self) -> YieldCurve:
        return YieldCurve(self._points)

    def read_file(self, path: str | Path) -> None:
        """Append the points stored in a whitespace-separated text file.

        Each non-empty line must hold exactly two numbers: maturity then rate.

        Raises
        ======
        ResourceError
            if the file cannot be read or a line is malformed
        """
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ResourceError(f"Cannot open file: {path}") from exc
        except UnicodeDecodeError as exc:
            raise ResourceError(f"Cannot decode file {path}: {exc.reason}") from exc

        parsed: list[RatePoint] = []
        for lineno, line in enumerate(text.splitlines(), start=1):
            fields = line.split()
            if not fields:
                continue
            if len(fields) != 2:
                raise ResourceError(f"Invalid format in file {path} line {lineno}: {line!r}")
            try:
                parsed.append(RatePoint(float(fields[0]), float(fields[1])))
            except (ValueError, ValidationError) as exc:
                raise ResourceError(
                    f"Invalid format in file {path} line {lineno}: {line!r}"
                ) from exc

        self._points.extend(parsed)
        logger.debug("Loaded %d yield curve points from %s", len(parsed), path)

    @classmethod
    def load_from_file(cls, path: str | Path) -> YieldCurve:
        """Build a curve from a whitespace-separated (maturity, rate) text file."""
        curve = cls()
        curve.read_file(path)
        return curve
