import pandas
from dataclasses import dataclass
from typing import Union, Optional
from .config import SimulationConfig
from .markov import TransitionMatrices
from .observed_weather import ObservedWeather
from .states import MonthlyThresholds, MONTHS
from .synthetic_weather import SyntheticWeather


@dataclass
class SimulationResult:
    """everything produced by one run of [`sim_daily()`](#weathergen.simulate.sim_daily)"""

    x: pandas.DataFrame
    """the historical dataset used to train the simulation, with states and previous-day columns"""

    state_thresholds: MonthlyThresholds
    """monthly precipitation thresholds of the states"""

    transition_matrices_historical: TransitionMatrices
    """monthly transition matrices fitted to the historical dataset"""

    transition_matrices: TransitionMatrices
    """monthly transition matrices after the dry and wet spell adjustments, used for the simulation"""

    state_equilibria_historical: pandas.DataFrame
    """stationary state probabilities of the historical transition matrices"""

    state_equilibria: pandas.DataFrame
    """stationary state probabilities of the adjusted transition matrices"""

    ratio_probability_wet: pandas.Series
    """historical over adjusted long-run probability of a wet or extreme day, by month"""

    out: SyntheticWeather
    """the simulated daily weather"""


def sim_daily(historical: Union[str, pandas.DataFrame, ObservedWeather],
              n_year: int,
              dry_wet_threshold: float = 0.3,
              wet_extreme_quantile_threshold: float = 0.8,
              start_month: int = 10,
              start_water_year: int = 2000,
              include_leap_days: bool = False,
              dry_spell_changes: Union[float, list[float]] = 1,
              wet_spell_changes: Union[float, list[float]] = 1,
              k: Optional[int] = None,
              month_window: int = 0,
              seed: Optional[int] = None) -> SimulationResult:
    """
    run a daily weather simulation

    Args:
        historical: historical daily weather - a `DataFrame` or csv path with columns `date`, `prcp`, `temp`,
            `tmax`, `tmin`, `wind`, or an [`ObservedWeather`](./observed_weather.html)
        n_year: number of simulated water-years
        dry_wet_threshold: precipitation amount at or below which a day is dry
        wet_extreme_quantile_threshold: quantile of wet-day precipitation above which a day is extreme
        start_month: the month when the water year starts
        start_water_year: the first simulated water-year
        include_leap_days: include leap days in the simulated series
        dry_spell_changes: adjustment factor(s) for dry spell durations - single value, or one value per month
        wet_spell_changes: adjustment factor(s) for wet spell durations - single value, or one value per month
        k: number of nearest neighbours to sample analogs from
        month_window: months on either side of the simulated month that are also searched for analogs
        seed: seed for the random number generator

    Returns:
        `SimulationResult`
    """
    config = SimulationConfig(n_year=n_year,
                              dry_wet_threshold=dry_wet_threshold,
                              wet_extreme_quantile_threshold=wet_extreme_quantile_threshold,
                              start_month=start_month,
                              start_water_year=start_water_year,
                              include_leap_days=include_leap_days,
                              dry_spell_changes=dry_spell_changes,
                              wet_spell_changes=wet_spell_changes,
                              k=k,
                              month_window=month_window)

    if not isinstance(historical, ObservedWeather):
        historical = ObservedWeather(historical)

    generator = historical.create_generator(start_month=config.start_month,
                                            include_leap_days=config.include_leap_days,
                                            dry_wet_threshold=config.dry_wet_threshold,
                                            wet_extreme_quantile_threshold=config.wet_extreme_quantile_threshold)

    transitions = generator.adjusted_transitions(config.dry_spell_changes, config.wet_spell_changes)
    equilibria = transitions.equilibria()
    ratio_probability_wet = pandas.Series(generator.transitions.probability_wet() / transitions.probability_wet(),
                                          index=pandas.Index(MONTHS, name="month"),
                                          name="ratio_probability_wet")

    out = generator.generate(n_year=config.n_year,
                             start_water_year=config.start_water_year,
                             dry_spell_changes=config.dry_spell_changes,
                             wet_spell_changes=config.wet_spell_changes,
                             k=config.k,
                             month_window=config.month_window,
                             seed=seed)

    return SimulationResult(x=generator.data,
                            state_thresholds=generator.thresholds,
                            transition_matrices_historical=generator.transitions,
                            transition_matrices=transitions,
                            state_equilibria_historical=generator.equilibria,
                            state_equilibria=equilibria,
                            ratio_probability_wet=ratio_probability_wet,
                            out=out)
