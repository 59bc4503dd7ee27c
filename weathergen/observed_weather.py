import warnings
import pandas
from pandas.api import types
from typing import Union, Optional
from .weather import VARIABLES
from .weather_generator import WeatherGenerator


class ObservedWeather:
    def __init__(self,
                 weather: Union[str, pandas.DataFrame],
                 date_col: str = "date",
                 prcp_col: str = "prcp",
                 temp_col: str = "temp",
                 tmax_col: str = "tmax",
                 tmin_col: str = "tmin",
                 wind_col: str = "wind",
                 date_format: str = None):
        """
        Class that facilitates reading raw daily weather data and preparing it for training a weather generator.

        Args:
            weather: pandas Dataframe with daily weather data or path to the csv file containing it
            date_col: name of the date column
            prcp_col: name of the precipitation column
            temp_col: name of the mean temperature column
            tmax_col: name of the maximum temperature column
            tmin_col: name of the minimum temperature column
            wind_col: name of the wind speed column
            date_format: format to use for parsing the date column
        """
        columns = {date_col: "date", prcp_col: "prcp", temp_col: "temp", tmax_col: "tmax", tmin_col: "tmin",
                   wind_col: "wind"}

        self.n_gaps = 0
        "number of gaps in the dates after removing incomplete days"

        self.data = self.__read_weather(weather, columns, date_format)
        "processed daily weather data, sorted by date, with columns `date`, `prcp`, `temp`, `tmax`, `tmin`, `wind`"

    def __read_weather(self, data, columns, date_format):
        if isinstance(data, str):
            weather = pandas.read_csv(data, usecols=list(columns))
        elif isinstance(data, pandas.DataFrame):
            missing = [col for col in columns if col not in data.columns]
            if missing:
                raise ValueError(f"columns {missing} are not in 'weather'")
            weather = data[list(columns)].copy()
        else:
            raise ValueError("'weather' is not valid")

        weather = weather.rename(columns=columns)[["date", *VARIABLES]]

        if not types.is_datetime64_any_dtype(weather["date"]):
            weather["date"] = pandas.to_datetime(weather["date"], format=date_format)
        weather["date"] = weather["date"].dt.normalize()

        for variable in VARIABLES:
            if not types.is_numeric_dtype(weather[variable]):
                weather[variable] = pandas.to_numeric(weather[variable], errors="coerce")
            weather[variable] = weather[variable].astype(float)

        if weather["date"].duplicated().any():
            warnings.warn("Duplicated dates were found in data and only the first value of each date was kept")
            weather = weather.drop_duplicates(subset="date", keep="first")

        is_incomplete = weather.isna().any(axis=1)
        if is_incomplete.any():
            warnings.warn(f"\n{is_incomplete.sum()} days with NA values were removed")
            weather = weather.loc[~is_incomplete]

        if (weather.prcp < 0).any():
            raise ValueError("precipitation cannot be negative")

        weather = weather.sort_values("date").reset_index(drop=True)

        time_steps = weather["date"].diff().dropna()
        gaps = time_steps.gt(pandas.Timedelta("1D"))
        self.n_gaps = int(gaps.sum())
        if self.n_gaps > 0:
            gap_counts = time_steps[gaps].value_counts().reset_index().head(12)
            gap_counts.columns = ["gap", "counts"]
            warnings.warn("\nGaps were found in data. days after a gap are not used as analogs")
            warnings.warn("\n" + gap_counts.to_string())
        return weather

    def create_generator(self,
                         start_month: int = 10,
                         include_leap_days: bool = False,
                         dry_wet_threshold: float = 0.3,
                         wet_extreme_quantile_threshold: float = 0.8,
                         features: tuple[str] = ("prcp", "temp", "wind"),
                         weights: Optional[list[float]] = None) -> WeatherGenerator:
        """
        train a weather generator on the observed data. days are classified into dry, wet, and extreme states,
        monthly transition matrices are fitted, and the days are gathered into a pool of analogs for resampling.

        Args:
            start_month: the month when the water year starts. default is `10` (for October)
            include_leap_days: if `False`, feb 29 shares the day of water year of feb 28
            dry_wet_threshold: days with precipitation less than or equal to this amount are dry
            wet_extreme_quantile_threshold: quantile of wet-day precipitation above which days are extreme
            features: weather variables of the previous day used for finding analogs
            weights: relative importance of each of `features` when finding analogs

        Returns:
            object of class [`WeatherGenerator`](./weather_generator.html)
        """
        return WeatherGenerator(self.data,
                                start_month=start_month,
                                include_leap_days=include_leap_days,
                                dry_wet_threshold=dry_wet_threshold,
                                wet_extreme_quantile_threshold=wet_extreme_quantile_threshold,
                                features=features,
                                weights=weights)
