class WeatherGenError(Exception):
    """base class for all errors raised by weathergen"""


class InvalidConfigurationError(WeatherGenError, ValueError):
    """simulation parameters are out of range or have the wrong shape"""


class InsufficientDataError(WeatherGenError):
    """the historical record is too sparse to fit thresholds, transitions or an analog pool"""


class NonStationaryMatrixError(WeatherGenError):
    """a transition matrix is not row-stochastic or has no unique stationary distribution"""


class NoAnalogFoundError(WeatherGenError):
    """no historical day is available for the requested state, even after widening the month window"""


class WeatherGenWarning(UserWarning):
    pass


class EmptyTransitionRowWarning(WeatherGenWarning):
    """a state was never observed in a month and its transition row was borrowed from another month"""


class AnalogFallbackWarning(WeatherGenWarning):
    """the analog search had to widen its month window"""
