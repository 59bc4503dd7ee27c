import numpy
import pandas
from collections.abc import Mapping
from typing import Union, Optional
from .errors import NoAnalogFoundError
from .states import State, MONTHS
from .weather import VARIABLES


class AnalogPool:
    """
    Read-only pool of historical days that can be copied into a simulated series. only days whose previous day is
    also in the record are part of the pool, since those are the days with continuity features.

    the distance between two days is the euclidean distance of their continuity features after dividing each
    feature by its standard deviation in the pool and multiplying by its weight.
    """

    def __init__(self,
                 data: pandas.DataFrame,
                 features: tuple[str] = ("prcp", "temp", "wind"),
                 weights: Optional[list[float]] = None):
        """
        Args:
            data: historical table with `month`, `state`, the weather variables and their `_prev` columns
            features: weather variables of the previous day used to find analogs
            weights: relative importance of each feature. equal weights by default
        """
        assert len(features) > 0, "at least one feature is needed"
        assert set(features) <= set(VARIABLES), f"features have to be in {list(VARIABLES)}"

        lag_columns = [f"{feature}_prev" for feature in features]
        is_complete = data[lag_columns].notna().all(axis=1) & data["state_prev"].notna()
        pool = data.loc[is_complete].reset_index(drop=True)

        self.data = pool
        """historical days in the pool"""

        self.features = tuple(features)
        """weather variables of the previous day used to find analogs"""

        self.months = pool["month"].to_numpy(dtype=int)
        self.states = pool["state"].to_numpy(dtype=int)
        self.values = pool[list(VARIABLES)].to_numpy(dtype=float)
        self.dates = pool["date"].to_numpy()

        if weights is None:
            weights = numpy.ones(len(features))
        weights = numpy.asarray(weights, dtype=float)
        assert weights.shape == (len(features),), "one weight is needed for each feature"
        assert (weights >= 0).all() and weights.sum() > 0, "weights cannot be negative or all zero"

        lagged = pool[lag_columns].to_numpy(dtype=float)
        scale = lagged.std(axis=0) if len(pool) > 0 else numpy.ones(len(features))
        scale[~(scale > 0)] = 1.0
        self._factors = weights / scale
        self._scaled = lagged * self._factors

        gap = numpy.abs(self.months[:, numpy.newaxis] - numpy.array(MONTHS))
        month_gap = numpy.minimum(gap, 12 - gap)
        self._candidates = {}
        for state in State:
            in_state = self.states == state
            for month in MONTHS:
                for window in range(7):
                    rows = numpy.flatnonzero(in_state & (month_gap[:, month - 1] <= window))
                    rows.setflags(write=False)
                    self._candidates[(int(state), month, window)] = rows

        for arr in (self.months, self.states, self.values, self.dates, self._scaled):
            arr.setflags(write=False)

    def __len__(self):
        return len(self.data)

    def candidates(self, state: int, month: int, month_window: int = 0) -> numpy.ndarray:
        """
        positions of pool days in `state` whose month is within `month_window` months of `month`. the window wraps
        around the year, so a window of `6` covers all months.
        """
        return self._candidates[(int(state), int(month), min(int(month_window), 6))]

    def distances(self, rows: numpy.ndarray, continuity_features: numpy.ndarray) -> numpy.ndarray:
        target = numpy.asarray(continuity_features, dtype=float) * self._factors
        return numpy.sqrt(((self._scaled[rows] - target) ** 2).sum(axis=1))

    def continuity(self, row: int) -> numpy.ndarray:
        """continuity features that a day in the pool provides for the day after it"""
        return self.values[row, [VARIABLES.index(feature) for feature in self.features]]


def _knn_weights(k: int) -> numpy.ndarray:
    weights = 1 / numpy.arange(1, k + 1)
    return weights / weights.sum()


def find_analog(pool: AnalogPool,
                target_state: int,
                target_month: int,
                continuity_features: Union[Mapping, numpy.ndarray, list[float]],
                rng: numpy.random.Generator,
                k: Optional[int] = None,
                month_window: int = 0) -> int:
    """
    pick a historical day in `target_state` and `target_month` whose previous day resembles the simulated previous
    day. the `k` nearest candidates are ranked by distance and one is drawn at random with probability proportional
    to `1 / rank`.

    Args:
        pool: historical analog pool
        target_state: state of the simulated day
        target_month: month of the simulated day
        continuity_features: weather of the simulated previous day, either a mapping of feature name to value or
            values in the order of `pool.features`
        rng: random number generator
        k: number of nearest candidates to draw from. defaults to the square root of the number of candidates
        month_window: months on either side of `target_month` that are searched as well

    Returns:
        position of the chosen day in `pool`
    """
    if isinstance(continuity_features, Mapping):
        continuity_features = [continuity_features[feature] for feature in pool.features]

    rows = pool.candidates(target_state, target_month, month_window)
    if rows.size == 0:
        raise NoAnalogFoundError(f"no historical days in state {int(target_state)} within {month_window} months "
                                 f"of month {target_month}")

    if k is None:
        k = int(round(numpy.sqrt(rows.size)))
    k = min(max(int(k), 1), rows.size)

    distances = pool.distances(rows, continuity_features)
    nearest = numpy.argsort(distances, kind="stable")[:k]
    chosen = rng.choice(k, p=_knn_weights(k))
    return int(rows[nearest[chosen]])
