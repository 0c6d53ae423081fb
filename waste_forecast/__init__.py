"""
Monthly Waste Generation Forecasting Engine

A hybrid forecaster combining a linear trend / seasonal-index
decomposition with Monte-Carlo residual simulation for probabilistic
monthly waste-generation forecasts.
"""

__version__ = "1.0.0"
__author__ = "Forecasting Team"
