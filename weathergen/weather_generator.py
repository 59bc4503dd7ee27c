import warnings
import numpy
import pandas
from multiprocessing import Pool
from typing import Union, Optional
from ._utils import _get_water_year, _get_water_day, _simulation_dates
from .config import SimulationConfig
from .errors import NoAnalogFoundError, AnalogFallbackWarning
from .knn import AnalogPool, find_analog
from .markov import TransitionMatrices, fit_transitions, state_equilibrium
from .states import State, compute_thresholds, assign_states
from .synthetic_weather import SyntheticWeather
from .weather import Weather, WeatherRecord, VARIABLES, HISTORICAL_COLUMNS, SIMULATED_COLUMNS


class WeatherGenerator(Weather):
    """
    Weather generator trained on observed daily weather. inherits [`Weather`](./weather.html).

    simulation is a first-order Markov chain over dry, wet and extreme states. each simulated day gets the weather of
    a historical day in the same state and month, chosen among the days whose previous day is closest to the
    simulated previous day.
    """

    def __init__(self,
                 weather: pandas.DataFrame,
                 start_month: int = 10,
                 include_leap_days: bool = False,
                 dry_wet_threshold: float = 0.3,
                 wet_extreme_quantile_threshold: float = 0.8,
                 features: tuple[str] = ("prcp", "temp", "wind"),
                 weights: Optional[list[float]] = None):
        """
        Args:
            weather: daily weather with columns `date`, `prcp`, `temp`, `tmax`, `tmin`, `wind`, sorted by date.
                see [`ObservedWeather`](./observed_weather.html)
            start_month: the month when the water year starts
            include_leap_days: if `False`, feb 29 shares the day of water year of feb 28
            dry_wet_threshold: days with precipitation less than or equal to this amount are dry
            wet_extreme_quantile_threshold: quantile of wet-day precipitation above which days are extreme
            features: weather variables of the previous day used for finding analogs
            weights: relative importance of each of `features` when finding analogs
        """
        SimulationConfig(n_year=1,
                         dry_wet_threshold=dry_wet_threshold,
                         wet_extreme_quantile_threshold=wet_extreme_quantile_threshold,
                         start_month=start_month,
                         include_leap_days=include_leap_days)

        self.start_month = start_month
        """the month when the water year begins"""

        self.include_leap_days = include_leap_days
        """whether feb 29 has its own day of water year"""

        self.dry_wet_threshold = dry_wet_threshold
        """days with precipitation less than or equal to this amount are dry"""

        self.wet_extreme_quantile_threshold = wet_extreme_quantile_threshold
        """quantile of wet-day precipitation above which days are extreme"""

        is_incomplete = ~numpy.isfinite(weather[list(VARIABLES)].to_numpy(dtype=float)).all(axis=1)
        if is_incomplete.any():
            raise ValueError(f"{is_incomplete.sum()} days have missing or infinite values, "
                             f"use ObservedWeather to remove them")

        dates = pandas.DatetimeIndex(weather["date"])
        months = dates.month.to_numpy()

        self.thresholds = compute_thresholds(weather["prcp"], months,
                                             dry_wet_threshold=dry_wet_threshold,
                                             wet_extreme_quantile_threshold=wet_extreme_quantile_threshold)
        """monthly precipitation thresholds of the states"""

        Weather.__init__(self, self._build_table(weather, dates))

        self.transitions = fit_transitions(self.data["state"], self.data["month"], prev_states=self.data["state_prev"])
        """monthly transition matrices fitted to the observed states"""

        self.equilibria = self.transitions.equilibria()
        """stationary distribution of the states in each month"""

        self.pool = AnalogPool(self.data, features=features, weights=weights)
        """historical days available as analogs"""

    def _build_table(self, weather: pandas.DataFrame, dates: pandas.DatetimeIndex) -> pandas.DataFrame:
        states = assign_states(weather["prcp"], dates.month, self.thresholds)
        follows_previous = dates.to_series().diff().eq(pandas.Timedelta("1D")).to_numpy()

        table = {"date": dates,
                 "month": dates.month.astype(int),
                 "water_year": _get_water_year(dates, self.start_month).astype(int),
                 "water_day": _get_water_day(dates, self.start_month, self.include_leap_days).astype(int)}
        for variable in VARIABLES:
            table[variable] = weather[variable].to_numpy(dtype=float)
        table["state"] = states
        for variable in VARIABLES:
            table[f"{variable}_prev"] = pandas.Series(table[variable]).shift(1).where(follows_previous).to_numpy()
        table["state_prev"] = pandas.Series(states).shift(1).where(follows_previous).astype("Int64")

        return pandas.DataFrame(table, columns=list(HISTORICAL_COLUMNS))

    def record(self, i: int) -> WeatherRecord:
        """the `i`th historical day as a `WeatherRecord`"""
        row = self.data.iloc[i]
        values = {col: row[col] for col in HISTORICAL_COLUMNS}
        values["date"] = row["date"].to_pydatetime()
        for col in ("month", "water_year", "water_day"):
            values[col] = int(row[col])
        values["state"] = State(int(row["state"]))
        values["state_prev"] = None if pandas.isna(row["state_prev"]) else State(int(row["state_prev"]))
        for variable in VARIABLES:
            values[variable] = float(row[variable])
            prev = row[f"{variable}_prev"]
            values[f"{variable}_prev"] = None if pandas.isna(prev) else float(prev)
        return WeatherRecord(**values)

    def records(self):
        """iterate over the historical days as `WeatherRecord`"""
        for i in range(len(self.data)):
            yield self.record(i)

    def adjusted_transitions(self,
                             dry_spell_changes: Union[float, list[float]] = 1,
                             wet_spell_changes: Union[float, list[float]] = 1) -> TransitionMatrices:
        """
        transition matrices with dry and wet spell lengths scaled by the given factors. see
        [`adjust_transition`](./markov.html#weathergen.markov.adjust_transition)
        """
        return self.transitions.adjust(dry_spell_changes, wet_spell_changes)

    def generate(self,
                 n_year: int,
                 start_water_year: int = 2000,
                 dry_spell_changes: Union[float, list[float]] = 1,
                 wet_spell_changes: Union[float, list[float]] = 1,
                 k: Optional[int] = None,
                 month_window: int = 0,
                 seed: Optional[Union[int, numpy.random.SeedSequence]] = None) -> SyntheticWeather:
        """
        generate a synthetic daily weather series

        Args:
            n_year: the number of water-years to simulate
            start_water_year: the first simulated water-year
            dry_spell_changes: ratio of desired to historical mean dry spell length - single value or one per month
            wet_spell_changes: ratio of desired to historical mean wet spell length - single value or one per month
            k: number of nearest neighbours to sample analogs from. defaults to the square root of the number of
                candidate days
            month_window: months on either side of the simulated month that are also searched for analogs
            seed: seed for the random number generator. runs with the same seed give identical series

        Returns:
            [`SyntheticWeather`](./synthetic_weather.html)
        """
        config = SimulationConfig(n_year=n_year,
                                  dry_wet_threshold=self.dry_wet_threshold,
                                  wet_extreme_quantile_threshold=self.wet_extreme_quantile_threshold,
                                  start_month=self.start_month,
                                  start_water_year=start_water_year,
                                  include_leap_days=self.include_leap_days,
                                  dry_spell_changes=dry_spell_changes,
                                  wet_spell_changes=wet_spell_changes,
                                  k=k,
                                  month_window=month_window)
        transitions = self.transitions.adjust(config.dry_spell_changes, config.wet_spell_changes)
        dates = _simulation_dates(config.start_water_year, config.n_year, self.start_month, self.include_leap_days)
        rng = numpy.random.default_rng(seed)

        states, rows = self._simulate(transitions, dates.month.to_numpy(), rng, config.k, config.month_window)

        out = {"date": dates,
               "month": dates.month.astype(int),
               "water_year": _get_water_year(dates, self.start_month).astype(int),
               "water_day": _get_water_day(dates, self.start_month, self.include_leap_days).astype(int),
               "state": states}
        for i, variable in enumerate(VARIABLES):
            out[variable] = self.pool.values[rows, i]
        out["analog_date"] = self.pool.dates[rows]

        return SyntheticWeather(pandas.DataFrame(out, columns=list(SIMULATED_COLUMNS)),
                                config=config,
                                seed=seed if isinstance(seed, int) else None)

    def generate_replicates(self,
                            n_replicates: int,
                            n_year: int,
                            seed: Optional[int] = None,
                            n_cores: int = 1,
                            **kwargs) -> list[SyntheticWeather]:
        """
        generate independent synthetic series. every replicate gets its own random number stream spawned from
        `seed`, so the result does not depend on `n_cores`.

        Args:
            n_replicates: number of series to generate
            n_year: the number of water-years in each series
            seed: seed from which the streams of all replicates are derived
            n_cores: number of cores to use in parallel, if available
            **kwargs: other arguments of [`generate()`](#weathergen.weather_generator.WeatherGenerator.generate)

        Returns:
            list of [`SyntheticWeather`](./synthetic_weather.html)
        """
        n_cores = int(max(1, n_cores))
        seeds = numpy.random.SeedSequence(seed).spawn(n_replicates)

        if n_cores > 1:
            workers = Pool(n_cores)
            container = []

            for replicate_seed in seeds:
                replicate = workers.apply_async(self.generate, (n_year,), dict(kwargs, seed=replicate_seed))
                container.append(replicate)
            replicates = [res.get() for res in container]
            workers.close()
            workers.join()
        else:
            replicates = [self.generate(n_year, seed=replicate_seed, **kwargs) for replicate_seed in seeds]

        return replicates

    def _simulate(self,
                  transitions: TransitionMatrices,
                  months: numpy.ndarray,
                  rng: numpy.random.Generator,
                  k: Optional[int],
                  month_window: int) -> tuple[numpy.ndarray, numpy.ndarray]:
        """
        walk the Markov chain one day at a time and pick an analog for each day

        :return: simulated states and positions of the analog days in the pool
        """
        n_days = months.size
        states = numpy.empty(n_days, dtype=int)
        rows = numpy.empty(n_days, dtype=int)

        state = self._draw_state(state_equilibrium(transitions[months[0]]), rng)
        row = self._draw_analog(state, months[0], None, rng, k, month_window)
        states[0], rows[0] = state, row

        for i in range(1, n_days):
            state = self._draw_state(transitions[months[i]][state], rng)
            row = self._draw_analog(state, months[i], self.pool.continuity(row), rng, k, month_window)
            states[i], rows[i] = state, row

        return states, rows

    @staticmethod
    def _draw_state(probabilities: numpy.ndarray, rng: numpy.random.Generator) -> int:
        cumulative = numpy.cumsum(probabilities)
        return int(min(numpy.searchsorted(cumulative, rng.random(), side="right"), probabilities.size - 1))

    def _draw_analog(self,
                     state: int,
                     month: int,
                     continuity: Optional[numpy.ndarray],
                     rng: numpy.random.Generator,
                     k: Optional[int],
                     month_window: int) -> int:
        """
        find an analog day, widening the month window one month at a time if there is none. a window of six months
        covers the whole year. the state is never substituted.
        """
        for window in range(month_window, 7):
            candidates = self.pool.candidates(state, month, window)
            if candidates.size == 0:
                continue
            if window > month_window:
                warnings.warn(f"no analogs in state '{State(state).label}' for month {month}, "
                              f"searched {window} months on either side", AnalogFallbackWarning)
            if continuity is None:
                return int(rng.choice(candidates))
            return find_analog(self.pool, state, month, continuity, rng, k=k, month_window=window)

        raise NoAnalogFoundError(f"no historical days in state '{State(state).label}' in any month")
