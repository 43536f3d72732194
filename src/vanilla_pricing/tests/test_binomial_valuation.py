"""Tests for Binomial tree option valuation."""

import datetime as dt

import numpy as np
import pytest

from vanilla_pricing.enums import ExerciseType, OptionType
from vanilla_pricing.exceptions import ArbitrageViolationError
from vanilla_pricing.rates import YieldCurve
from vanilla_pricing.valuation import AnalyticPricer, LatticePricer, PricingConfiguration

from vanilla_pricing.tests.helpers import flat_curve, make_option


class TestBinomialValuation:
    """Tests for Binomial tree option valuation."""

    def setup_method(self):
        self.config = PricingConfiguration(maturity=1.0, risk_free_rate=0.05, lattice_steps=500)
        self.pricer = LatticePricer(self.config)
        self.analytic = AnalyticPricer(self.config)

    def test_binomial_european_call_atm(self):
        pv = self.pricer.price(make_option(OptionType.CALL))
        assert pv > 0
        # ATM call value should be approx 10.45 for these parameters
        assert np.isclose(pv, 10.45, rtol=0.01)
        assert abs(pv - self.analytic.price(make_option(OptionType.CALL))) < 0.05

    def test_binomial_european_put_matches_analytic(self):
        option = make_option(OptionType.PUT, strike=110.0, dividend=0.02)
        assert abs(self.pricer.price(option) - self.analytic.price(option)) < 0.05

    def test_convergence_to_analytic(self):
        option = make_option(OptionType.CALL)
        reference = self.analytic.price(option)
        errors = [
            abs(LatticePricer(self.config.replace(lattice_steps=n)).price(option) - reference)
            for n in (10, 100, 1000)
        ]
        assert errors[2] < errors[1] < errors[0]
        assert errors[2] < 0.01

    def test_american_call_no_div_equal_to_european(self):
        eu = self.pricer.price(make_option(OptionType.CALL, ExerciseType.EUROPEAN))
        am = self.pricer.price(make_option(OptionType.CALL, ExerciseType.AMERICAN))
        assert am >= eu
        assert np.isclose(am, eu, atol=1e-10)

    def test_american_put_has_early_exercise_premium(self):
        eu = self.pricer.price(make_option(OptionType.PUT, ExerciseType.EUROPEAN))
        am = self.pricer.price(make_option(OptionType.PUT, ExerciseType.AMERICAN))
        assert am > eu
        # Standard reference value for S=K=100, r=5%, vol=20%, T=1
        assert np.isclose(am, 6.09, atol=0.02)

    @pytest.mark.parametrize("strike", [80.0, 100.0, 120.0])
    @pytest.mark.parametrize("option_type", [OptionType.CALL, OptionType.PUT])
    def test_american_never_below_european(self, strike, option_type):
        config = self.config.replace(lattice_steps=200)
        pricer = LatticePricer(config)
        eu = pricer.price(make_option(option_type, strike=strike, dividend=0.04))
        am = pricer.price(
            make_option(option_type, ExerciseType.AMERICAN, strike=strike, dividend=0.04)
        )
        assert am >= eu - 1e-12

    def test_deep_itm_american_put_worth_at_least_intrinsic(self):
        option = make_option(OptionType.PUT, ExerciseType.AMERICAN, strike=150.0)
        assert self.pricer.price(option) >= 50.0 - 1e-12

    def test_flat_curve_matches_flat_rate(self):
        option = make_option(OptionType.PUT, ExerciseType.AMERICAN)
        with_curve = LatticePricer(self.config.replace(yield_curve=flat_curve(0.05)))
        assert np.isclose(with_curve.price(option), self.pricer.price(option), rtol=1e-12)

    def test_upward_sloping_curve_changes_price(self):
        option = make_option(OptionType.CALL)
        curve = YieldCurve([(0.0, 0.01), (1.0, 0.09)])
        sloped = LatticePricer(self.config.replace(yield_curve=curve)).price(option)
        assert sloped != self.pricer.price(option)
        assert 0.0 < sloped < 100.0

    def test_calculation_date_not_applied(self):
        option = make_option(OptionType.CALL)
        calc_date = dt.date.today() - dt.timedelta(days=100)
        dated = LatticePricer(self.config.replace(calculation_date=calc_date))
        assert dated.price(option) == self.pricer.price(option)

    def test_zero_volatility_raises(self):
        with pytest.raises(ArbitrageViolationError, match="positive volatility"):
            self.pricer.price(make_option(OptionType.CALL, volatility=0.0))

    def test_arbitrage_violation_raises(self):
        # Huge rate on a coarse tree pushes exp(r dt) above u
        config = PricingConfiguration(maturity=1.0, risk_free_rate=2.0, lattice_steps=2)
        with pytest.raises(ArbitrageViolationError, match="outside \\[0, 1\\]"):
            LatticePricer(config).price(make_option(OptionType.CALL, volatility=0.1))

    def test_inputs_are_not_mutated(self):
        option = make_option(OptionType.PUT, ExerciseType.AMERICAN)
        before = (option, self.config)
        self.pricer.price(option)
        self.pricer.compute_greeks(option)
        assert (option, self.config) == before
        assert self.pricer.config is self.config
