"""
Error Taxonomy

Typed failures raised at the normalizer and forecaster boundaries.
The report layer maps them onto JSON error envelopes.
"""


class ForecastError(Exception):
    """Base class for all forecasting engine failures"""

    status_code = 500


class DataError(ForecastError, ValueError):
    """Historical series is missing, too short or malformed"""

    status_code = 400


class ConfigError(ForecastError, ValueError):
    """Horizon, iterations or an engine option is out of range"""

    status_code = 400


class ComputeError(ForecastError, ArithmeticError):
    """Numeric failure while decomposing, simulating or aggregating"""

    status_code = 500
