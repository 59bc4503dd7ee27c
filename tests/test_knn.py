import numpy
import pandas
import pytest
from weathergen import AnalogPool, find_analog, State, NoAnalogFoundError
from weathergen.weather import HISTORICAL_COLUMNS


def _pool_frame(months, states, prcp_prev, temp_prev=None, wind_prev=None) -> pandas.DataFrame:
    n = len(months)
    temp_prev = [10.0] * n if temp_prev is None else temp_prev
    wind_prev = [2.0] * n if wind_prev is None else wind_prev
    data = {"date": pandas.date_range("2001-01-01", periods=n, freq="D"),
            "month": months,
            "water_year": [2001] * n,
            "water_day": list(range(1, n + 1)),
            "prcp": numpy.arange(n, dtype=float),
            "temp": [10.0] * n,
            "tmax": [15.0] * n,
            "tmin": [5.0] * n,
            "wind": [2.0] * n,
            "state": states,
            "prcp_prev": prcp_prev,
            "temp_prev": temp_prev,
            "tmax_prev": [15.0] * n,
            "tmin_prev": [5.0] * n,
            "wind_prev": wind_prev,
            "state_prev": pandas.Series([0] * n, dtype="Int64")}
    return pandas.DataFrame(data, columns=list(HISTORICAL_COLUMNS))


class TestAnalogPool:

    def test_days_without_previous_day_are_excluded(self, generator):
        assert len(generator.pool) == len(generator.data) - 1

    def test_candidates_match_state_and_month(self, generator):
        rows = generator.pool.candidates(State.WET, 7)
        assert rows.size > 0
        assert (generator.pool.states[rows] == State.WET).all()
        assert (generator.pool.months[rows] == 7).all()

    def test_month_window_wraps_around_year(self):
        pool = AnalogPool(_pool_frame([12, 12, 6], [0, 0, 0], [0.0, 1.0, 2.0]))
        assert pool.candidates(0, 1, 0).size == 0
        numpy.testing.assert_array_equal(pool.candidates(0, 1, 1), [0, 1])
        numpy.testing.assert_array_equal(pool.candidates(0, 1, 6), [0, 1, 2])

    def test_candidates_are_read_only(self):
        pool = AnalogPool(_pool_frame([12, 12, 6], [0, 0, 0], [0.0, 1.0, 2.0]))
        rows = pool.candidates(0, 12, 0)
        assert not rows.flags.writeable
        assert pool.candidates(0, 12, 0) is rows
        assert pool.candidates(2, 3, 6).size == 0

    def test_features_are_standardized(self):
        data = _pool_frame([1, 1, 1], [0, 0, 0], [0.0, 10.0, 20.0], temp_prev=[0.0, 1.0, 2.0])
        pool = AnalogPool(data, features=("prcp", "temp"))
        distances = pool.distances(numpy.array([0, 1, 2]), [0.0, 2.0])
        assert distances[0] == pytest.approx(distances[2])

    def test_continuity(self, generator):
        row = 100
        expected = generator.pool.data.loc[row, ["prcp", "temp", "wind"]].to_numpy(dtype=float)
        numpy.testing.assert_allclose(generator.pool.continuity(row), expected)

    def test_invalid_features(self, generator):
        with pytest.raises(AssertionError):
            AnalogPool(generator.data, features=("humidity",))


class TestFindAnalog:

    def test_analog_has_target_state_and_month(self, generator):
        rng = numpy.random.default_rng(0)
        for state in State:
            for month in (1, 7):
                row = find_analog(generator.pool, state, month, [1.0, 15.0, 3.0], rng)
                assert generator.pool.states[row] == state
                assert generator.pool.months[row] == month

    def test_single_neighbour_is_nearest(self):
        pool = AnalogPool(_pool_frame([1] * 4, [0] * 4, [0.0, 5.0, 9.0, 20.0]))
        rng = numpy.random.default_rng(0)
        for _ in range(10):
            assert find_analog(pool, 0, 1, [8.0, 10.0, 2.0], rng, k=1) == 2

    def test_draws_from_k_nearest(self):
        pool = AnalogPool(_pool_frame([1] * 5, [0] * 5, [0.0, 5.0, 9.0, 20.0, 30.0]))
        rng = numpy.random.default_rng(0)
        rows = {find_analog(pool, 0, 1, [8.0, 10.0, 2.0], rng, k=2) for _ in range(200)}
        assert rows == {1, 2}

    def test_nearest_is_most_likely(self):
        pool = AnalogPool(_pool_frame([1] * 5, [0] * 5, [0.0, 5.0, 9.0, 20.0, 30.0]))
        rng = numpy.random.default_rng(0)
        rows = [find_analog(pool, 0, 1, [8.0, 10.0, 2.0], rng, k=3) for _ in range(600)]
        counts = numpy.bincount(rows, minlength=5)
        assert counts[2] > counts[1] > counts[0]
        assert counts[3] == counts[4] == 0

    def test_mapping_features(self, generator):
        features = {"prcp": 2.0, "temp": 12.0, "wind": 4.0}
        first = find_analog(generator.pool, State.DRY, 3, features, numpy.random.default_rng(5))
        second = find_analog(generator.pool, State.DRY, 3, [2.0, 12.0, 4.0], numpy.random.default_rng(5))
        assert first == second

    def test_no_candidates(self):
        pool = AnalogPool(_pool_frame([1] * 3, [0] * 3, [0.0, 1.0, 2.0]))
        with pytest.raises(NoAnalogFoundError):
            find_analog(pool, State.EXTREME, 1, [0.0, 10.0, 2.0], numpy.random.default_rng(0))
