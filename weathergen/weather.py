import numpy
import pandas
import pdrle
from dataclasses import dataclass
from datetime import datetime
from typing import Union, Callable, Optional
from .states import State, MONTHS

VARIABLES = ("prcp", "temp", "tmax", "tmin", "wind")
"""daily weather variables, in the order they are stored"""

CALENDAR = ("date", "month", "water_year", "water_day")

HISTORICAL_COLUMNS = CALENDAR + VARIABLES + ("state",) + tuple(f"{v}_prev" for v in VARIABLES) + ("state_prev",)
"""columns of a preprocessed historical table"""

SIMULATED_COLUMNS = CALENDAR + ("state",) + VARIABLES + ("analog_date",)
"""columns of a simulated series"""


@dataclass(frozen=True)
class WeatherRecord:
    """one historical day with its weather, state, and the weather and state of the day before"""
    date: datetime
    month: int
    water_year: int
    water_day: int
    prcp: float
    temp: float
    tmax: float
    tmin: float
    wind: float
    state: State
    prcp_prev: Optional[float]
    temp_prev: Optional[float]
    tmax_prev: Optional[float]
    tmin_prev: Optional[float]
    wind_prev: Optional[float]
    state_prev: Optional[State]


class Weather:
    """
    class that holds daily weather data in long format and provides methods for summarizing it. this class is
    inherited by [`WeatherGenerator`](./weather_generator.html) and [`SyntheticWeather`](./synthetic_weather.html).
    """

    def __init__(self, data: pandas.DataFrame):
        self.data = data
        """
        `DataFrame` with one row per day. it has at least the columns `date`, `month`, `state` and the weather
        variables `prcp`, `temp`, `tmax`, `tmin`, `wind`
        """

    def get_spells(self, wet: bool = False) -> pandas.DataFrame:
        """
        *find dry spells, or wet spells where wet and extreme days both count as wet*

        a spell ends at any missing day. a series without leap days may go from feb 28 to mar 1 of a leap year without
        breaking its spells.

        Args:
            wet: if `True`, return wet spells instead of dry spells

        Returns:
            `DataFrame` with columns `start`, `month` (month of the first day) and `length` in days
        """
        data = self.data.reset_index(drop=True)
        is_wet = data.state.ne(State.DRY)
        run_id = numpy.asarray(pdrle.get_id(is_wet))
        step = data.date.diff()
        previous = data.date.shift(1)
        skips_leap_day = (previous.dt.month.eq(2) & previous.dt.day.eq(28) & previous.dt.is_leap_year
                          & step.eq(pandas.Timedelta("2D")))
        gap_id = (step.gt(pandas.Timedelta("1D")) & ~skips_leap_day).cumsum().to_numpy()

        spells = pandas.DataFrame({"start": data.date, "month": data.month, "is_wet": is_wet})
        spells = spells.groupby([gap_id, run_id], sort=False).agg(start=("start", "first"),
                                                                  month=("month", "first"),
                                                                  length=("start", "size"),
                                                                  is_wet=("is_wet", "first"))
        spells = spells.loc[spells.is_wet == wet, ["start", "month", "length"]]
        return spells.reset_index(drop=True)

    def get_spell_summary(self, wet: bool = False) -> pandas.DataFrame:
        """
        *mean length and number of dry or wet spells by the month in which they start*

        Args:
            wet: if `True`, summarize wet spells instead of dry spells

        Returns:
            `DataFrame` with months `1` to `12` as index and columns `mean_length` and `count`
        """
        spells = self.get_spells(wet=wet)
        summary = spells.groupby("month").length.agg(mean_length="mean", count="size")
        summary = summary.reindex(MONTHS)
        summary["count"] = summary["count"].fillna(0).astype(int)
        summary.index.name = "month"
        return summary

    def get_state_frequency(self) -> pandas.DataFrame:
        """
        *fraction of days in each state by month*

        Returns:
            `DataFrame` with months as index and columns `d`, `w`, `e` and `wet` (`w` + `e`)
        """
        frequency = pandas.crosstab(self.data.month, self.data.state, normalize="index")
        frequency = frequency.reindex(index=MONTHS, columns=[state.value for state in State], fill_value=0.0)
        frequency.columns = [state.label for state in State]
        frequency["wet"] = frequency.w + frequency.e
        frequency.index.name = "month"
        frequency.columns.name = None
        return frequency

    def get_summary(self,
                    funcs: Union[str, list[str], Callable, list[Callable]] = "mean",
                    group_by: Union[str, list[str]] = "month") -> pandas.DataFrame:
        """
        summarize the weather variables

        Args:
            funcs: the functions to use for summarizing. default is `mean`. can also be a list of functions.
            group_by: the column(s) by which the summary should be grouped. default is `month`

        Returns:
            `Dataframe`: summary data
        """
        if not isinstance(funcs, list):
            funcs = [funcs]

        if group_by is None:
            return self.data[list(VARIABLES)].agg(funcs)
        return self.data.groupby(group_by)[list(VARIABLES)].agg(funcs)
