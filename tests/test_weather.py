import numpy
import pandas
import pytest
from weathergen import Weather


def _weather(states, dates=None) -> Weather:
    n = len(states)
    dates = pandas.date_range("2001-01-01", periods=n, freq="D") if dates is None else pandas.DatetimeIndex(dates)
    return Weather(pandas.DataFrame({"date": dates,
                                     "month": dates.month,
                                     "state": states,
                                     "prcp": numpy.where(numpy.array(states) > 0, 2.0, 0.0),
                                     "temp": 10.0,
                                     "tmax": 15.0,
                                     "tmin": 5.0,
                                     "wind": 2.0}))


class TestSpells:

    def test_dry_spells(self):
        spells = _weather([0, 0, 1, 2, 0, 0, 0, 1, 1, 0]).get_spells()
        assert list(spells.length) == [2, 3, 1]
        assert spells.start.iloc[1] == pandas.Timestamp("2001-01-05")

    def test_wet_spells_include_extreme_days(self):
        spells = _weather([0, 0, 1, 2, 0, 0, 0, 1, 1, 0]).get_spells(wet=True)
        assert list(spells.length) == [2, 2]

    def test_gap_splits_spell(self):
        dates = ["2001-01-01", "2001-01-02", "2001-01-10", "2001-01-11", "2001-01-12"]
        spells = _weather([0, 0, 0, 0, 1], dates=dates).get_spells()
        assert list(spells.length) == [2, 2]

    def test_single_missing_day_splits_spell(self):
        dates = ["2001-01-01", "2001-01-02", "2001-01-04", "2001-01-05"]
        spells = _weather([0, 0, 0, 0], dates=dates).get_spells()
        assert list(spells.length) == [2, 2]

    def test_skipped_leap_day_keeps_spell(self):
        dates = ["2004-02-27", "2004-02-28", "2004-03-01", "2004-03-02"]
        spells = _weather([0, 0, 0, 0], dates=dates).get_spells()
        assert list(spells.length) == [4]

    def test_missing_mar_1_splits_spell(self):
        dates = ["2003-02-27", "2003-02-28", "2003-03-02", "2003-03-03"]
        spells = _weather([0, 0, 0, 0], dates=dates).get_spells()
        assert list(spells.length) == [2, 2]

    def test_spell_summary(self):
        summary = _weather([0, 0, 1, 2, 0, 0, 0, 1, 1, 0]).get_spell_summary()
        assert summary.loc[1, "mean_length"] == pytest.approx(2.0)
        assert summary.loc[1, "count"] == 3
        assert summary.loc[2, "count"] == 0
        assert numpy.isnan(summary.loc[2, "mean_length"])
        assert list(summary.index) == list(range(1, 13))


class TestStateFrequency:

    def test_fractions(self):
        frequency = _weather([0, 0, 1, 2, 0, 0, 0, 1, 1, 0]).get_state_frequency()
        assert frequency.loc[1, "d"] == pytest.approx(0.6)
        assert frequency.loc[1, "w"] == pytest.approx(0.3)
        assert frequency.loc[1, "e"] == pytest.approx(0.1)
        assert frequency.loc[1, "wet"] == pytest.approx(0.4)
        assert frequency.loc[5, "wet"] == 0

    def test_summary(self):
        summary = _weather([0, 1, 2]).get_summary(["mean", "max"])
        assert summary.loc[1, ("prcp", "max")] == 2.0
        assert summary.loc[1, ("temp", "mean")] == 10.0
