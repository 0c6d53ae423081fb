"""
Main Forecasting Pipeline

End-to-end pipeline for monthly waste-generation forecasting:
1. Generate/Load submission records
2. Aggregate records to a monthly series
3. Decompose (trend + seasonality + residuals)
4. Backtest on held-out months
5. Generate the simulated forecast
6. Create visualizations
7. Save results
"""

import json
import os
import pandas as pd
import numpy as np
from datetime import datetime
from typing import Dict, Optional
import joblib

# Import configuration
from config import (
    DATA_CONFIG, SIMULATION_CONFIG, FORECAST_CONFIG, EVALUATION_CONFIG,
    OUTPUT_CONFIG, METRIC_TARGETS
)

# Import custom modules
from waste_forecast.aggregation import aggregate_monthly, validate_records
from waste_forecast.data_generator import generate_and_save_data
from waste_forecast.evaluation import backtest_forecast
from waste_forecast.forecast import HybridForecaster
from waste_forecast.normalization import normalize_series
from waste_forecast.report import success_response
from waste_forecast.visualization import create_all_visualizations


class WasteForecastPipeline:
    """Complete forecasting pipeline (configured via config.py)"""

    def __init__(self,
                 output_dir: Optional[str] = None,
                 filters: Optional[Dict] = None,
                 make_plots: bool = True):
        """
        Initialize pipeline with config from config.py

        Args:
            output_dir: Override for OUTPUT_CONFIG['output_dir']
            filters: Report filters (title, location, author, company,
                start_date, end_date) applied before aggregation
            make_plots: Create PNG plots in step 6
        """
        self.data_path = DATA_CONFIG['data_path']
        self.generate_new_data = DATA_CONFIG['generate_new_data']
        self.output_dir = output_dir or OUTPUT_CONFIG['output_dir']
        if output_dir:
            self.model_dir = os.path.join(output_dir, OUTPUT_CONFIG['model_dir'])
            self.data_dir = os.path.join(output_dir, OUTPUT_CONFIG['data_dir'])
        else:
            self.model_dir = OUTPUT_CONFIG['model_dir']
            self.data_dir = OUTPUT_CONFIG['data_dir']
        self.filters = filters or {}
        self.make_plots = make_plots

        # Create output directories
        os.makedirs(f"{self.output_dir}/forecasts", exist_ok=True)
        os.makedirs(f"{self.output_dir}/plots", exist_ok=True)
        os.makedirs(self.model_dir, exist_ok=True)
        os.makedirs(self.data_dir, exist_ok=True)

        self.forecaster = HybridForecaster(verbose=True)

        # Pipeline components (will be populated)
        self.records_df = None
        self.points = None
        self.history = None
        self.decomposition = None
        self.backtest_metrics = None
        self.result = None
        self.response = None

    def run_complete_pipeline(self) -> Dict:
        """
        Run complete forecasting pipeline (configured via config.py)

        Returns:
            Dictionary with pipeline results
        """
        forecast_horizon = FORECAST_CONFIG['forecast_horizon']
        iterations = SIMULATION_CONFIG['iterations']
        seed = SIMULATION_CONFIG['seed']

        print("\n" + "="*80)
        print("MONTHLY WASTE GENERATION FORECASTING PIPELINE")
        print("="*80)
        print(f"Start time: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
        print("="*80 + "\n")

        self.step_1_load_data()
        self.step_2_aggregate_data()
        self.step_3_decompose()
        self.step_4_backtest()
        self.step_5_generate_forecast(forecast_horizon, iterations, seed)
        if self.make_plots:
            self.step_6_visualize()
        self.step_7_save_results()

        print("\n" + "="*80)
        print("PIPELINE COMPLETE!")
        print("="*80)
        print(f"End time: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
        print(f"\nOutputs saved to: {self.output_dir}/")
        print("="*80 + "\n")

        return {
            'metrics': self.backtest_metrics,
            'forecast': self.result.to_frame(),
            'decomposition': self.decomposition,
            'response': self.response
        }

    def step_1_load_data(self):
        """Step 1: Load or generate submission records"""
        print("\n" + "="*80)
        print("STEP 1: DATA LOADING/GENERATION")
        print("="*80)

        if self.generate_new_data:
            self.records_df = generate_and_save_data(
                output_path=f"{self.data_dir}/waste_submissions.csv",
                start_period=DATA_CONFIG['start_period'],
                n_months=DATA_CONFIG['n_months'],
                regions=DATA_CONFIG['regions'],
                companies=DATA_CONFIG['companies'],
                submissions_per_month=DATA_CONFIG['submissions_per_month'],
                seed=DATA_CONFIG['seed']
            )
        else:
            print(f"\nLoading existing submission records from: {self.data_path}")
            self.records_df = pd.read_csv(self.data_path)
            self.records_df['date'] = pd.to_datetime(self.records_df['date'])
            print(f"Loaded {len(self.records_df):,} submission records")

        print("\n✓ Step 1 complete")

    def step_2_aggregate_data(self):
        """Step 2: Aggregate records to a monthly series"""
        print("\n" + "="*80)
        print("STEP 2: MONTHLY AGGREGATION")
        print("="*80)

        validate_records(self.records_df)
        if self.filters:
            print(f"  Filters: {self.filters}")
        self.points = aggregate_monthly(self.records_df, **self.filters)

        monthly_df = pd.DataFrame([p.to_dict() for p in self.points])
        monthly_df.to_csv(f"{self.data_dir}/monthly_series.csv", index=False)

        print("\n✓ Step 2 complete")

    def step_3_decompose(self):
        """Step 3: Normalize and decompose the monthly series"""
        print("\n" + "="*80)
        print("STEP 3: DECOMPOSITION")
        print("="*80)

        self.history = normalize_series(self.points)
        self.decomposition = self.forecaster.decomposer.decompose(self.history)

        print("\n✓ Step 3 complete")

    def step_4_backtest(self):
        """Step 4: Backtest on held-out months"""
        print("\n" + "="*80)
        print("STEP 4: BACKTEST")
        print("="*80)

        self.backtest_metrics = backtest_forecast(
            self.points,
            holdout_months=EVALUATION_CONFIG['holdout_months'],
            iterations=EVALUATION_CONFIG['iterations'],
            random_state=EVALUATION_CONFIG['seed'],
            forecaster=self.forecaster,
            label=f"last {EVALUATION_CONFIG['holdout_months']} months"
        )

        print("\n✓ Step 4 complete")

    def step_5_generate_forecast(self, forecast_horizon, iterations, seed):
        """Step 5: Generate the simulated forecast"""
        print("\n" + "="*80)
        print("STEP 5: FORECAST GENERATION")
        print("="*80)

        self.result = self.forecaster.run(
            self.points,
            iterations=iterations,
            horizon=forecast_horizon,
            random_state=seed,
            keep_samples=True
        )
        self.response, status = success_response(
            self.result.steps,
            self.result.history.to_points(observed_only=True)
        )

        print(f"\n  Response status: {status}")
        print(self.result.to_frame().round(2).to_string(index=False))

        print("\n✓ Step 5 complete")

    def step_6_visualize(self):
        """Step 6: Create visualizations"""
        print("\n" + "="*80)
        print("STEP 6: VISUALIZATION")
        print("="*80)

        create_all_visualizations(self.result, output_dir=f'{self.output_dir}/plots')

        print("\n✓ Step 6 complete")

    def step_7_save_results(self):
        """Step 7: Save forecast, response and decomposition"""
        print("\n" + "="*80)
        print("STEP 7: SAVING RESULTS")
        print("="*80)

        self.result.to_frame().to_csv(f'{self.output_dir}/forecasts/forecast.csv', index=False)
        print("  ✓ Forecast saved")

        with open(f'{self.output_dir}/forecasts/forecast_response.json', 'w') as f:
            json.dump(self.response, f, indent=2)
        print("  ✓ Endpoint response saved")

        joblib.dump(self.decomposition, f"{self.model_dir}/decomposition.pkl")
        print("  ✓ Decomposition saved")

        self._create_summary_report()
        print("  ✓ Summary report created")

        print("\n✓ Step 7 complete")

    def _create_summary_report(self):
        """Create summary report"""
        report_path = f'{self.output_dir}/SUMMARY_REPORT.txt'
        d = self.decomposition
        metrics = self.backtest_metrics

        with open(report_path, 'w') as f:
            f.write("="*80 + "\n")
            f.write("MONTHLY WASTE GENERATION FORECAST - SUMMARY REPORT\n")
            f.write("="*80 + "\n\n")

            f.write(f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}\n\n")

            f.write("DATA SUMMARY\n")
            f.write("-"*80 + "\n")
            f.write(f"Submission records: {len(self.records_df):,}\n")
            f.write(f"Months: {len(self.history)} ({self.history.periods[0]} to {self.history.last_period})\n")
            f.write(f"Imputed months: {self.history.n_imputed}\n\n")

            f.write("DECOMPOSITION\n")
            f.write("-"*80 + "\n")
            f.write(f"Trend slope: {d.trend_slope:.3f} per month (se {d.trend_slope_stderr:.3f})\n")
            f.write(f"Seasonal index: {d.seasonal_mode}, "
                    f"{'estimated' if d.seasonal_estimated else 'neutral'}\n")
            f.write(f"Residual std: {d.residual_std:.2f}\n\n")

            f.write("BACKTEST METRICS\n")
            f.write("-"*80 + "\n")
            for key in ['MAPE', 'MAE', 'RMSE', 'MASE', 'Bias%', 'Coverage%', 'BandWidth']:
                f.write(f"{key}: {metrics[key]}\n")
            f.write("\n")

            mape_target = METRIC_TARGETS['mape_target']
            coverage_target = METRIC_TARGETS['coverage_target']
            mape_ok = not np.isnan(metrics['MAPE']) and metrics['MAPE'] < mape_target
            coverage_ok = not np.isnan(metrics['Coverage%']) and metrics['Coverage%'] >= coverage_target
            f.write(f"MAPE target <{mape_target}%: {'✓' if mape_ok else '✗'}\n")
            f.write(f"Coverage target >={coverage_target}%: {'✓' if coverage_ok else '✗'}\n\n")

            f.write("FORECAST\n")
            f.write("-"*80 + "\n")
            f.write(self.result.to_frame().round(2).to_string(index=False))
            f.write("\n\n" + "="*80 + "\n")

        print(f"\n  Summary report saved to: {report_path}")


def main():
    """Main entry point - all configuration is in config.py"""
    pipeline = WasteForecastPipeline()

    results = pipeline.run_complete_pipeline()

    print("\n" + "="*80)
    print("SUCCESS! Complete forecasting pipeline executed.")
    print("="*80)
    print("\nKey Outputs:")
    print("  - Forecast: outputs/forecasts/")
    print("  - Plots: outputs/plots/")
    print("  - Decomposition: models/")
    print("  - Summary: outputs/SUMMARY_REPORT.txt")
    print("="*80 + "\n")

    return results


if __name__ == "__main__":
    main()
