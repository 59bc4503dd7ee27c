import numpy
import pandas
from datetime import datetime
from typing import Union
from .errors import InvalidConfigurationError


def _get_water_year(idx: pandas.DatetimeIndex, year_start: int) -> pandas.Index:
    """

    :param idx: datetime index
    :param year_start: month when the water year starts
    :return: water year of each date, labelled by the calendar year in which the water year ends
    """
    water_year = idx.map(lambda x: x.year if (x.month < year_start) | (year_start == 1) else x.year + 1)
    return water_year


def _water_year_start(date: datetime, year_start: int) -> datetime:
    year = date.year if date.month >= year_start else date.year - 1
    return datetime(year, year_start, 1)


def _is_leap(year: int) -> bool:
    return (year % 4 == 0) and ((year % 100 != 0) or (year % 400 == 0))


def _water_day(date: datetime, year_start: int, include_leap_days: bool) -> int:
    start = _water_year_start(date, year_start)
    day = (date - start).days + 1
    if include_leap_days:
        return day

    # feb 29 shares feb 28's index; every later day of that water year shifts down by one
    feb_year = start.year if year_start <= 2 else start.year + 1
    if _is_leap(feb_year) and (date.year, date.month, date.day) >= (feb_year, 2, 29):
        day -= 1
    return day


def _get_water_day(idx: pandas.DatetimeIndex, year_start: int, include_leap_days: bool = False) -> pandas.Index:
    """
    1-based day of the water year

    :param idx: datetime index
    :param year_start: month when the water year starts
    :param include_leap_days: if `False`, leap days are collapsed so that every water year has 365 days
    :return: day of water year for each date
    """
    return idx.map(lambda x: _water_day(x, year_start, include_leap_days))


def _simulation_dates(start_water_year: int,
                      n_year: int,
                      year_start: int,
                      include_leap_days: bool = False) -> pandas.DatetimeIndex:
    """
    calendar of a simulated series spanning `n_year` water years

    :param start_water_year: first simulated water year
    :param n_year: number of water years
    :param year_start: month when the water year starts
    :param include_leap_days: if `False`, feb 29 is skipped
    :return: daily datetime index
    """
    first_year = start_water_year if year_start == 1 else start_water_year - 1
    start = datetime(first_year, year_start, 1)
    end = datetime(first_year + n_year, year_start, 1)
    dates = pandas.date_range(start, end - pandas.Timedelta("1D"), freq="D")
    if not include_leap_days:
        dates = dates[~((dates.month == 2) & (dates.day == 29))]
    return dates


def _as_monthly(values: Union[float, list[float], tuple[float]], name: str) -> tuple[float]:
    """
    broadcast a scalar to twelve monthly values, or validate a sequence of twelve

    :param values: scalar or sequence of length 12
    :param name: name used in error messages
    """
    if numpy.isscalar(values):
        values = [values] * 12
    values = tuple(float(v) for v in values)
    if len(values) != 12:
        raise InvalidConfigurationError(f"'{name}' should be a single value or have 12 values, got {len(values)}")
    if any(not v > 0 for v in values):
        raise InvalidConfigurationError(f"'{name}' should only contain positive values")
    return values
