import numpy
import pandas
from enum import IntEnum
from typing import Union
from .errors import InsufficientDataError, InvalidConfigurationError

MONTHS = range(1, 13)


class State(IntEnum):
    """precipitation states, ordered by increasing intensity"""
    DRY = 0
    WET = 1
    EXTREME = 2

    @property
    def label(self) -> str:
        return "dwe"[self.value]

    @classmethod
    def from_label(cls, label: str) -> "State":
        try:
            return cls("dwe".index(label))
        except ValueError as err:
            raise KeyError(f"'{label}' is not a valid state label. it has to be in ['d', 'w', 'e']") from err


N_STATES = len(State)


class MonthlyThresholds:
    """precipitation amounts separating dry/wet and wet/extreme days in each month"""

    def __init__(self, dry_wet: Union[list[float], numpy.ndarray], wet_extreme: Union[list[float], numpy.ndarray]):
        dry_wet = numpy.asarray(dry_wet, dtype=float)
        wet_extreme = numpy.asarray(wet_extreme, dtype=float)
        assert dry_wet.shape == (12,) and wet_extreme.shape == (12,), "thresholds are needed for all 12 months"
        assert (dry_wet >= 0).all(), "dry/wet thresholds cannot be negative"
        assert (dry_wet < wet_extreme).all(), "dry/wet thresholds must be smaller than wet/extreme thresholds"

        self.data = pandas.DataFrame({"dry_wet": dry_wet, "wet_extreme": wet_extreme},
                                     index=pandas.Index(MONTHS, name="month"))
        """`DataFrame` with months `1` to `12` as index and columns `dry_wet` and `wet_extreme`"""

    def for_month(self, month: int) -> tuple[float, float]:
        row = self.data.loc[month]
        return float(row.dry_wet), float(row.wet_extreme)

    def __repr__(self):
        return "MonthlyThresholds\n" + self.data.to_string()


def compute_thresholds(prcp: Union[pandas.Series, numpy.ndarray],
                       months: Union[pandas.Series, numpy.ndarray],
                       dry_wet_threshold: float = 0.3,
                       wet_extreme_quantile_threshold: float = 0.8,
                       min_wet_days: int = 3) -> MonthlyThresholds:
    """
    compute monthly precipitation thresholds of the dry, wet and extreme states. the dry/wet threshold is a fixed
    amount. the wet/extreme threshold is a quantile of the precipitation on wet days only.

    Args:
        prcp: daily precipitation
        months: month (`1` to `12`) of each day
        dry_wet_threshold: days with precipitation less than or equal to this amount are dry
        wet_extreme_quantile_threshold: quantile of wet-day precipitation above which days are extreme
        min_wet_days: months with fewer wet days than this raise `InsufficientDataError`

    Returns:
        `MonthlyThresholds`
    """
    if not dry_wet_threshold >= 0:
        raise InvalidConfigurationError("'dry_wet_threshold' should not be negative")
    if not 0 < wet_extreme_quantile_threshold < 1:
        raise InvalidConfigurationError("'wet_extreme_quantile_threshold' should be between 0 and 1")

    prcp = numpy.asarray(prcp, dtype=float)
    months = numpy.asarray(months)

    wet_extreme = []
    for month in MONTHS:
        month_prcp = prcp[months == month]
        month_prcp = month_prcp[~numpy.isnan(month_prcp)]
        if month_prcp.size == 0:
            raise InsufficientDataError(f"no precipitation data for month {month}")

        wet_prcp = month_prcp[month_prcp > dry_wet_threshold]
        if wet_prcp.size < max(min_wet_days, 2):
            raise InsufficientDataError(f"month {month} has {wet_prcp.size} wet days, "
                                        f"at least {max(min_wet_days, 2)} are needed to compute the wet/extreme "
                                        f"threshold")
        wet_extreme.append(numpy.quantile(wet_prcp, wet_extreme_quantile_threshold))

    wet_extreme = numpy.array(wet_extreme)
    if (wet_extreme <= dry_wet_threshold).any():
        raise InsufficientDataError("wet/extreme threshold could not be separated from the dry/wet threshold")
    return MonthlyThresholds([dry_wet_threshold] * 12, wet_extreme)


def assign_states(prcp: Union[pandas.Series, numpy.ndarray],
                  months: Union[pandas.Series, numpy.ndarray],
                  thresholds: MonthlyThresholds) -> numpy.ndarray:
    """
    assign a precipitation state to each day. precipitation equal to a threshold goes to the lower state. missing
    precipitation raises `ValueError`.

    Args:
        prcp: daily precipitation
        months: month (`1` to `12`) of each day
        thresholds: monthly thresholds from `compute_thresholds()`

    Returns:
        array of `State` values
    """
    prcp = numpy.asarray(prcp, dtype=float)
    months = numpy.asarray(months, dtype=int)
    if not numpy.isfinite(prcp).all():
        raise ValueError("precipitation has missing or infinite values")

    dry_wet = thresholds.data.dry_wet.to_numpy()[months - 1]
    wet_extreme = thresholds.data.wet_extreme.to_numpy()[months - 1]

    states = numpy.full(prcp.shape, State.EXTREME.value, dtype=int)
    states[prcp <= wet_extreme] = State.WET.value
    states[prcp <= dry_wet] = State.DRY.value
    return states
