"""
# weathergen

A python package for daily weather simulation - stochastically generating synthetic daily precipitation,
temperature, and wind from observed data, with control over the length of dry and wet spells. Useful for building
climate stress-test scenarios.

## Method

1. Every observed day is classified into one of three precipitation states - `dry`, `wet`, or `extreme`. Days with
    precipitation less than or equal to the dry/wet threshold (default `0.3`) are dry. Of the remaining wet days, the
    ones above the 80th percentile of wet-day precipitation in their month are extreme.
2. A Markov chain transition matrix is fitted for each month by counting transitions from one day's state to the
    next day's state. A transition belongs to the month of the later day.
3. Optionally, the transition matrices are adjusted to make dry and/or wet spells longer or shorter. The expected
    length of a spell is `1 / (1 - p)` where `p` is the probability of staying in the same state, so making spells
    `f` times longer sets `p` to `1 - (1 - p) / f`. The rest of the row keeps its proportions. The change in the
    long-run probability of wet days is reported.
4. The simulation walks the Markov chain one day at a time. For each simulated day,
    - the next state is drawn from the transition matrix of that day's month
    - an observed day in the same state and month is picked as the analog. Candidates are ranked by how close
        their previous day is to the simulated previous day (standardized precipitation, temperature, and wind).
        One of the `k` nearest candidates is drawn at random, with weights proportional to `1 / rank`.
    - all the weather values of the analog day are copied into the simulated day.

## Installation

Install with `pip install <path to weathergen>`.

## Usage

```python
import weathergen

observed = weathergen.ObservedWeather("./data/daily.csv", date_col="DATE", prcp_col="PRCP", temp_col="TEMP",
                                      tmax_col="TMAX", tmin_col="TMIN", wind_col="WIND")
generator = observed.create_generator(start_month=10)
synthetic_weather = generator.generate(30, dry_spell_changes=1.5, seed=42)

# or everything in one go
result = weathergen.sim_daily("./data/daily.csv", n_year=30, dry_spell_changes=1.5, seed=42)
```
"""

from .config import SimulationConfig
from .errors import (WeatherGenError, InvalidConfigurationError, InsufficientDataError, NonStationaryMatrixError,
                     NoAnalogFoundError, WeatherGenWarning, EmptyTransitionRowWarning, AnalogFallbackWarning)
from .knn import AnalogPool, find_analog
from .markov import TransitionMatrices, fit_transitions, state_equilibrium, adjust_transition, probability_wet
from .observed_weather import ObservedWeather
from .simulate import SimulationResult, sim_daily
from .states import State, MonthlyThresholds, compute_thresholds, assign_states
from .synthetic_weather import SyntheticWeather, load_synthetic_weather
from .weather import Weather, WeatherRecord
from .weather_generator import WeatherGenerator
