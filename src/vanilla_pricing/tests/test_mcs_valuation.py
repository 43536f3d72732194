"""Tests for Monte Carlo simulation valuation (European and Longstaff-Schwartz American)."""

import datetime as dt
import logging

import numpy as np
import pytest

from vanilla_pricing.enums import ExerciseType, OptionType
from vanilla_pricing.exceptions import TemporalConfigurationError
from vanilla_pricing.rates import YieldCurve
from vanilla_pricing.valuation import (
    AnalyticPricer,
    LatticePricer,
    PricingConfiguration,
    SimulationPricer,
)
from vanilla_pricing.valuation.monte_carlo import _quadratic_continuation

from vanilla_pricing.tests.helpers import flat_curve, make_option


class TestMCEuropean:
    def setup_method(self):
        self.config = PricingConfiguration(
            maturity=1.0, risk_free_rate=0.05, mc_paths=50_000, mc_steps_per_path=100
        )
        self.pricer = SimulationPricer(self.config)
        self.analytic = AnalyticPricer(self.config)

    def test_european_call_atm(self):
        option = make_option(OptionType.CALL)
        pv = self.pricer.price(option)
        assert abs(pv - self.analytic.price(option)) < 0.5

    def test_european_put_within_standard_errors(self):
        option = make_option(OptionType.PUT, strike=105.0, dividend=0.02)
        pv, std_error = self.pricer.price_with_std_error(option)
        assert std_error > 0.0
        assert abs(pv - self.analytic.price(option)) < 4 * std_error

    def test_deterministic_for_fixed_seed(self):
        option = make_option(OptionType.CALL)
        assert self.pricer.price(option) == self.pricer.price(option)
        assert SimulationPricer(self.config).price(option) == self.pricer.price(option)

    def test_seed_changes_estimate(self):
        option = make_option(OptionType.CALL)
        other = SimulationPricer(self.config.replace(random_seed=7))
        assert other.price(option) != self.pricer.price(option)

    def test_flat_curve_matches_flat_rate(self):
        option = make_option(OptionType.CALL)
        with_curve = SimulationPricer(self.config.replace(yield_curve=flat_curve(0.05)))
        assert np.isclose(with_curve.price(option), self.pricer.price(option), rtol=1e-12)

    def test_sloped_curve_changes_price(self):
        option = make_option(OptionType.CALL)
        curve = YieldCurve([(0.0, 0.01), (1.0, 0.09)])
        sloped = SimulationPricer(self.config.replace(yield_curve=curve)).price(option)
        assert sloped != self.pricer.price(option)

    def test_calculation_date_past_maturity_raises(self):
        calc_date = dt.date.today() - dt.timedelta(days=800)
        pricer = SimulationPricer(self.config.replace(calculation_date=calc_date))
        with pytest.raises(TemporalConfigurationError, match="leaves no time to maturity"):
            pricer.price(make_option(OptionType.CALL))

    def test_high_std_error_warns(self, caplog):
        pricer = SimulationPricer(
            self.config.replace(mc_paths=500, mc_steps_per_path=10, mc_std_error_warn_ratio=1e-6)
        )
        with caplog.at_level(logging.WARNING, logger="vanilla_pricing.valuation.monte_carlo"):
            pricer.price(make_option(OptionType.CALL))
        assert "standard error high" in caplog.text

    def test_no_warning_without_threshold(self, caplog):
        pricer = SimulationPricer(self.config.replace(mc_paths=500, mc_steps_per_path=10))
        with caplog.at_level(logging.WARNING, logger="vanilla_pricing.valuation.monte_carlo"):
            pricer.price(make_option(OptionType.CALL))
        assert "standard error high" not in caplog.text


class TestMCAmerican:
    def setup_method(self):
        self.config = PricingConfiguration(
            maturity=1.0, risk_free_rate=0.05, mc_paths=20_000, mc_steps_per_path=50
        )
        self.pricer = SimulationPricer(self.config)

    def test_american_put_between_european_and_lattice(self):
        eu = self.pricer.price(make_option(OptionType.PUT, ExerciseType.EUROPEAN))
        am, std_error = self.pricer.price_with_std_error(
            make_option(OptionType.PUT, ExerciseType.AMERICAN)
        )
        lattice = LatticePricer(self.config.replace(lattice_steps=500)).price(
            make_option(OptionType.PUT, ExerciseType.AMERICAN)
        )
        assert am > eu
        assert abs(am - lattice) < max(0.3, 4 * std_error)

    def test_american_call_no_dividend_close_to_european(self):
        eu = self.pricer.price(make_option(OptionType.CALL, ExerciseType.EUROPEAN))
        am = self.pricer.price(make_option(OptionType.CALL, ExerciseType.AMERICAN))
        assert abs(am - eu) < 0.3

    def test_deterministic_for_fixed_seed(self):
        option = make_option(OptionType.PUT, ExerciseType.AMERICAN)
        assert self.pricer.price(option) == self.pricer.price(option)

    def test_far_otm_put_skips_degenerate_regressions(self, caplog):
        option = make_option(OptionType.PUT, ExerciseType.AMERICAN, strike=40.0)
        with caplog.at_level(logging.DEBUG, logger="vanilla_pricing.valuation.monte_carlo"):
            pv = self.pricer.price(option)
        assert 0.0 <= pv < 0.01
        assert "LSM regression skipped" in caplog.text


class TestLongstaffSchwartzExercise:
    def setup_method(self):
        self.config = PricingConfiguration(
            maturity=1.0, risk_free_rate=0.05, mc_paths=10_000, mc_steps_per_path=100
        )
        self.pricer = SimulationPricer(self.config)
        self.option = make_option(OptionType.PUT, ExerciseType.AMERICAN)

    def test_regression_runs_at_every_step(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="vanilla_pricing.valuation.monte_carlo"):
            self.pricer.price(self.option)
        skipped = [r for r in caplog.records if "LSM regression skipped" in r.getMessage()]
        assert skipped == []

    def test_early_exercise_premium_matches_lattice(self):
        am, std_error = self.pricer.price_with_std_error(self.option)
        eu = self.pricer.price(self.option.replace(exercise_type=ExerciseType.EUROPEAN))
        lattice = LatticePricer(self.config.replace(lattice_steps=1000)).price(self.option)
        # lattice: 6.0896, European: ~5.57
        assert am - eu > 0.3
        assert abs(am - lattice) < max(0.3, 4 * std_error)


class TestQuadraticContinuation:
    def test_exact_quadratic_is_recovered(self):
        x = np.linspace(0.5, 1.0, 20)
        y = 1.0 - 2.0 * x + 3.0 * x**2
        assert np.allclose(_quadratic_continuation(x, y), y)

    def test_narrow_band_is_not_treated_as_singular(self):
        x = np.linspace(0.995, 1.0, 50)
        y = 0.5 - 0.2 * x + 0.1 * x**2
        fitted = _quadratic_continuation(x, y)
        assert fitted is not None
        assert np.allclose(fitted, y)

    def test_two_distinct_values_are_singular(self):
        x = np.array([0.9, 0.95] * 5)
        assert _quadratic_continuation(x, np.linspace(0.0, 1.0, 10)) is None

    def test_fewer_than_three_points(self):
        assert _quadratic_continuation(np.array([0.9, 0.95]), np.array([0.1, 0.05])) is None

    def test_singular_moment_matrix(self):
        x = np.full(10, 0.9)
        assert _quadratic_continuation(x, np.linspace(0.0, 1.0, 10)) is None


class TestMCGreeks:
    def setup_method(self):
        self.config = PricingConfiguration(
            maturity=1.0, risk_free_rate=0.05, mc_paths=20_000, mc_steps_per_path=50
        )

    def test_european_call_greeks_close_to_analytic(self):
        option = make_option(OptionType.CALL)
        mc = SimulationPricer(self.config).compute_greeks(option)
        closed = AnalyticPricer(self.config).compute_greeks(option)
        assert np.isclose(mc.delta, closed.delta, atol=0.03)
        assert mc.gamma > 0.0
        assert np.isclose(mc.vega, closed.vega, rtol=0.1)
        assert np.isclose(mc.theta, closed.theta, rtol=0.15)
        assert np.isclose(mc.rho, closed.rho, rtol=0.1)

    def test_greeks_are_reproducible(self):
        option = make_option(OptionType.PUT)
        pricer = SimulationPricer(self.config.replace(mc_paths=2_000))
        assert pricer.compute_greeks(option) == pricer.compute_greeks(option)
