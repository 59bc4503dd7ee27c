import numpy
import pytest
from pandas.testing import assert_frame_equal
from weathergen import sim_daily, ObservedWeather, SimulationResult, InvalidConfigurationError


class TestSimDaily:

    def test_result_bundle(self, historical):
        result = sim_daily(historical, n_year=2, seed=3)
        assert isinstance(result, SimulationResult)
        assert len(result.x) == len(historical)
        assert "state_prev" in result.x.columns
        assert len(result.out.data) == 730
        numpy.testing.assert_allclose(result.state_equilibria.sum(axis=1), 1.0)
        numpy.testing.assert_allclose(result.ratio_probability_wet, 1.0)
        numpy.testing.assert_allclose(result.transition_matrices.matrices,
                                      result.transition_matrices_historical.matrices)
        assert (result.state_thresholds.data.dry_wet < result.state_thresholds.data.wet_extreme).all()

    def test_longer_dry_spells_raise_ratio(self, historical):
        result = sim_daily(historical, n_year=1, dry_spell_changes=2, seed=3)
        assert (result.ratio_probability_wet > 1).all()
        assert (result.state_equilibria.d > result.state_equilibria_historical.d).all()

    def test_accepts_observed_weather(self, historical):
        observed = ObservedWeather(historical)
        first = sim_daily(observed, n_year=1, seed=8)
        second = sim_daily(historical, n_year=1, seed=8)
        assert_frame_equal(first.out.data, second.out.data)

    def test_configuration_checked_before_reading_data(self):
        with pytest.raises(InvalidConfigurationError):
            sim_daily("does_not_exist.csv", n_year=1, wet_spell_changes=[1] * 5)
