import pandas
import toml
from pathlib import Path
from typing import Union, Optional
from .config import SimulationConfig
from .weather import Weather, VARIABLES


class SyntheticWeather(Weather):
    """Class that holds a simulated daily weather series. inherits [`Weather`](./weather.html)"""
    def __init__(self,
                 data: pandas.DataFrame,
                 config: Optional[SimulationConfig] = None,
                 seed: Optional[int] = None):

        Weather.__init__(self, data)
        self.config = config
        """configuration the series was simulated with"""

        self.seed = seed
        """seed of the random number generator, if an integer seed was used"""

    def save(self,
             root: Union[str, Path],
             prefix: str = "",
             save_info: bool = True,
             n_digits: int = 2):
        """
        Save synthetic weather data locally

        Args:
            root: the directory where the synthetic weather data should be saved
            prefix: the prefix that will be added to the file names
            save_info: if `False`, only the weather data will be saved
            n_digits: the weather values will be rounded to this many decimal places
        """
        root = Path(root)
        data = self.data.copy()
        data[list(VARIABLES)] = data[list(VARIABLES)].round(n_digits)
        data.to_csv(root / "{prefix}_synthetic_weather.csv".format(prefix=prefix), index=False)
        if save_info:
            info = {} if self.config is None else self.config.to_dict()
            if self.seed is not None:
                info["seed"] = self.seed
            with open(root / "{prefix}_synthetic_weather_info.toml".format(prefix=prefix), "w") as f:
                toml.dump(info, f)


def load_synthetic_weather(data_path: Union[str, Path],
                           info_path: Union[str, Path] = None) -> SyntheticWeather:
    """
    load saved synthetic weather data.
    see [`SyntheticWeather.save()`](./synthetic_weather.html#weathergen.synthetic_weather.SyntheticWeather.save)

    Args:
        data_path: path to the weather data csv
        info_path: path to the weather data info

    Returns:
        [`SyntheticWeather`](./synthetic_weather.html)
    """
    data = pandas.read_csv(data_path, parse_dates=["date", "analog_date"])

    if info_path is None:
        config, seed = None, None
    else:
        info = toml.load(info_path)
        seed = info.pop("seed", None)
        config = SimulationConfig(**info) if info else None

    return SyntheticWeather(data, config=config, seed=seed)
