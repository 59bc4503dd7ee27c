import numpy
import pandas
import pytest
from weathergen import ObservedWeather


def make_historical(start: str = "1980-10-01", end: str = "2010-09-30", seed: int = 1) -> pandas.DataFrame:
    """daily weather from a two-state occurrence chain with seasonal temperature"""
    rng = numpy.random.default_rng(seed)
    dates = pandas.date_range(start, end, freq="D")
    n = len(dates)
    season = numpy.cos(2 * numpy.pi * (dates.dayofyear.to_numpy() - 15) / 365)

    p_wet_after_dry = 0.3 + 0.05 * season
    p_wet_after_wet = 0.6
    draws = rng.random(n)
    wet = numpy.zeros(n, dtype=bool)
    for i in range(1, n):
        wet[i] = draws[i] < (p_wet_after_wet if wet[i - 1] else p_wet_after_dry[i])

    amount = numpy.round(rng.gamma(0.8, 8, n) + 0.5, 1)
    temp = 12 - 10 * season + rng.normal(0, 3, n) - 2 * wet
    return pandas.DataFrame({"date": dates,
                             "prcp": numpy.where(wet, amount, 0.0),
                             "temp": temp,
                             "tmax": temp + 5 + rng.gamma(2, 1, n),
                             "tmin": temp - 5 - rng.gamma(2, 1, n),
                             "wind": rng.gamma(2, 1.5, n)})


@pytest.fixture(scope="session")
def historical() -> pandas.DataFrame:
    return make_historical()


@pytest.fixture(scope="session")
def generator(historical):
    return ObservedWeather(historical).create_generator(start_month=10)
