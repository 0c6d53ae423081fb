"""
Visualization Module

Plots for inspecting the hybrid forecast:
- History with forecast mean and confidence band
- Decomposition (trend, seasonal index, residuals)
- Sample of simulated ensemble paths
"""

import os
import numpy as np
import matplotlib.pyplot as plt
import seaborn as sns
from typing import Optional

from waste_forecast.structures import Decomposition, ForecastResult, NormalizedSeries

# Set style
sns.set_style("whitegrid")
plt.rcParams['figure.figsize'] = (15, 8)
plt.rcParams['font.size'] = 10


def _save_and_close(save_path: Optional[str]) -> None:
    plt.tight_layout()
    if save_path:
        plt.savefig(save_path, dpi=150, bbox_inches='tight')
        print(f"Plot saved: {save_path}")
    plt.close()


def plot_forecast_band(result: ForecastResult,
                       title: str = 'Waste Generation Forecast',
                       save_path: Optional[str] = None) -> None:
    """
    Plot history, forecast mean and confidence band

    Args:
        result: ForecastResult from HybridForecaster.run
        title: Plot title
        save_path: Path to save plot
    """
    history = result.history
    hist_dates = history.periods.to_timestamp()
    future_dates = result.periods.to_timestamp()

    mean = np.array([s.mean for s in result.steps])
    lower = np.array([s.lower for s in result.steps])
    upper = np.array([s.upper for s in result.steps])

    fig, ax = plt.subplots(figsize=(15, 6))

    ax.plot(hist_dates, history.values, label='Historical', linewidth=2,
            marker='o', markersize=4, alpha=0.8, color='gray')

    imputed = ~history.observed
    if imputed.any():
        ax.scatter(hist_dates[imputed], history.values[imputed], marker='x',
                   color='red', zorder=3, label='Imputed month')

    ax.plot(future_dates, mean, label='Forecast mean', linewidth=2, marker='s',
            markersize=4, linestyle='--', alpha=0.8)
    ax.fill_between(future_dates, lower, upper, alpha=0.25, label='Confidence band')

    ax.axvline(x=future_dates[0], color='red', linestyle=':', alpha=0.5, label='Forecast Start')

    ax.set_title(title, fontsize=14, fontweight='bold')
    ax.set_xlabel('Month', fontsize=12)
    ax.set_ylabel('Waste generated', fontsize=12)
    ax.legend(loc='best', fontsize=10)
    ax.grid(True, alpha=0.3)
    plt.xticks(rotation=45)

    _save_and_close(save_path)


def plot_decomposition(series: NormalizedSeries,
                       decomposition: Decomposition,
                       save_path: Optional[str] = None) -> None:
    """
    Plot observed series with trend, the seasonal index and residuals

    Args:
        series: NormalizedSeries the decomposition was fitted on
        decomposition: Decomposition
        save_path: Path to save plot
    """
    dates = series.periods.to_timestamp()
    trend = decomposition.trend_at(np.arange(len(series)))

    fig, axes = plt.subplots(3, 1, figsize=(15, 12))

    # Plot 1: Observed vs trend and fitted
    axes[0].plot(dates, series.values, label='Observed', linewidth=2, marker='o',
                 markersize=4, alpha=0.8)
    axes[0].plot(dates, trend, label='Trend', linewidth=2, linestyle='--')
    axes[0].plot(dates, decomposition.fitted_values(), label='Trend + Seasonal',
                 linewidth=1.5, alpha=0.7)
    axes[0].set_title(f'Trend (slope {decomposition.trend_slope:.2f} per month)',
                      fontsize=12, fontweight='bold')
    axes[0].legend(loc='best')
    axes[0].grid(True, alpha=0.3)

    # Plot 2: Seasonal index
    months = sorted(decomposition.seasonal_index)
    axes[1].bar(months, [decomposition.seasonal_index[m] for m in months],
                alpha=0.7, color='steelblue')
    neutral = 1.0 if decomposition.seasonal_mode == 'multiplicative' else 0.0
    axes[1].axhline(y=neutral, color='red', linestyle='--', alpha=0.5)
    status = 'estimated' if decomposition.seasonal_estimated else 'neutral'
    axes[1].set_title(f'Seasonal Index ({decomposition.seasonal_mode}, {status})',
                      fontsize=12, fontweight='bold')
    axes[1].set_xticks(months)
    axes[1].grid(True, alpha=0.3, axis='y')

    # Plot 3: Residuals
    axes[2].plot(dates, decomposition.residuals, marker='o', linestyle='-',
                 alpha=0.7, color='green')
    axes[2].axhline(y=0, color='red', linestyle='--', alpha=0.5)
    axes[2].set_title(f'Residuals (std {decomposition.residual_std:.2f})',
                      fontsize=12, fontweight='bold')
    axes[2].set_xlabel('Month', fontsize=10)
    axes[2].grid(True, alpha=0.3)

    _save_and_close(save_path)


def plot_simulated_paths(result: ForecastResult,
                         n_paths: int = 50,
                         save_path: Optional[str] = None) -> None:
    """
    Plot a sample of simulated paths behind the forecast

    Args:
        result: ForecastResult with samples attached (keep_samples=True)
        n_paths: Number of paths to draw
        save_path: Path to save plot
    """
    if result.samples is None:
        raise ValueError("ForecastResult has no samples; run with keep_samples=True")

    future_dates = result.periods.to_timestamp()
    paths = result.samples[:n_paths]

    fig, ax = plt.subplots(figsize=(15, 6))

    for path in paths:
        ax.plot(future_dates, path, color='steelblue', alpha=0.15, linewidth=1)

    ax.plot(future_dates, [s.mean for s in result.steps], color='black',
            linewidth=2, label='Ensemble mean')

    ax.set_title(f'Simulated Paths ({len(paths)} of {len(result.samples)})',
                 fontsize=14, fontweight='bold')
    ax.set_xlabel('Month', fontsize=12)
    ax.set_ylabel('Waste generated', fontsize=12)
    ax.legend(loc='best')
    ax.grid(True, alpha=0.3)
    plt.xticks(rotation=45)

    _save_and_close(save_path)


def create_all_visualizations(result: ForecastResult,
                              output_dir: str = 'outputs/plots') -> None:
    """
    Create all forecast plots

    Args:
        result: ForecastResult (samples optional)
        output_dir: Directory to save plots
    """
    print("="*60)
    print("GENERATING VISUALIZATIONS")
    print("="*60)

    os.makedirs(output_dir, exist_ok=True)

    plot_forecast_band(result, save_path=f'{output_dir}/forecast_band.png')
    plot_decomposition(result.history, result.decomposition,
                       save_path=f'{output_dir}/decomposition.png')

    if result.samples is not None:
        plot_simulated_paths(result, save_path=f'{output_dir}/simulated_paths.png')

    print("\n" + "="*60)
    print("VISUALIZATION COMPLETE")
    print("="*60)
    print(f"All plots saved to: {output_dir}/")
