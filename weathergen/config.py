import toml
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Union, Optional
from ._utils import _as_monthly
from .errors import InvalidConfigurationError


@dataclass
class SimulationConfig:
    """
    Parameters of one simulation run. Everything is validated on creation, so an invalid configuration is
    rejected before any fitting or simulation starts.
    """

    n_year: int
    """number of simulated water years"""

    dry_wet_threshold: float = 0.3
    """precipitation amount at or below which a day is dry"""

    wet_extreme_quantile_threshold: float = 0.8
    """quantile of wet-day precipitation above which a day is extreme"""

    start_month: int = 10
    """month when the water year starts"""

    start_water_year: int = 2000
    """first simulated water year"""

    include_leap_days: bool = False
    """if `False`, feb 29 is skipped in the simulated series"""

    dry_spell_changes: Union[float, tuple[float]] = 1
    """ratio of desired to historical mean dry spell length - a single value or one value per month"""

    wet_spell_changes: Union[float, tuple[float]] = 1
    """ratio of desired to historical mean wet spell length - a single value or one value per month"""

    k: Optional[int] = None
    """number of nearest neighbours to sample from. defaults to the square root of the candidate count"""

    month_window: int = 0
    """months on either side of the simulated month that are searched for analog days"""

    def __post_init__(self):
        if int(self.n_year) != self.n_year or self.n_year < 1:
            raise InvalidConfigurationError("'n_year' should be a positive integer")
        self.n_year = int(self.n_year)
        if not self.dry_wet_threshold >= 0:
            raise InvalidConfigurationError("'dry_wet_threshold' should not be negative")
        if not 0 < self.wet_extreme_quantile_threshold < 1:
            raise InvalidConfigurationError("'wet_extreme_quantile_threshold' should be between 0 and 1")
        if self.start_month not in range(1, 13):
            raise InvalidConfigurationError("'start_month' should be between 1 and 12")
        if int(self.start_water_year) != self.start_water_year:
            raise InvalidConfigurationError("'start_water_year' should be an integer")
        self.start_water_year = int(self.start_water_year)
        self.include_leap_days = bool(self.include_leap_days)
        self.dry_spell_changes = _as_monthly(self.dry_spell_changes, "dry_spell_changes")
        self.wet_spell_changes = _as_monthly(self.wet_spell_changes, "wet_spell_changes")
        if self.k is not None and (int(self.k) != self.k or self.k < 1):
            raise InvalidConfigurationError("'k' should be a positive integer")
        if self.month_window not in range(0, 7):
            raise InvalidConfigurationError("'month_window' should be between 0 and 6")

    def to_dict(self) -> dict:
        info = asdict(self)
        info["dry_spell_changes"] = list(self.dry_spell_changes)
        info["wet_spell_changes"] = list(self.wet_spell_changes)
        if self.k is None:
            del info["k"]
        return info

    def save(self, path: Union[str, Path]):
        """
        Save the configuration as toml

        Args:
            path: path of the toml file
        """
        with open(path, "w") as f:
            toml.dump(self.to_dict(), f)

    @classmethod
    def load(cls, path: Union[str, Path]) -> "SimulationConfig":
        """
        Load a configuration saved with `SimulationConfig.save()`

        Args:
            path: path of the toml file

        Returns:
            validated `SimulationConfig`
        """
        return cls(**toml.load(path))
